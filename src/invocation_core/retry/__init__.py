"""
Invocation Core - Retry Logic.

Exponential backoff with jitter and a rate-limited retry orchestrator.
"""

from .config import RetryConfig, RetryStrategy
from .backoff import calculate_backoff, compute_delay
from .orchestrator import (
    RetryAttemptRecord,
    RetryObserver,
    RetryOrchestrator,
    async_with_retry,
)

__all__ = [
    "RetryConfig",
    "RetryStrategy",
    "calculate_backoff",
    "compute_delay",
    "RetryAttemptRecord",
    "RetryObserver",
    "RetryOrchestrator",
    "async_with_retry",
]
