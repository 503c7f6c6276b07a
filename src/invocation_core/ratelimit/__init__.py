"""
Invocation Core - Rate Limiting.

Per-service sliding-window admission control.
"""

from .config import RateLimitConfig
from .limiter import RateLimiter, RateLimitStats, ServiceLimiterState

__all__ = [
    "RateLimitConfig",
    "RateLimiter",
    "RateLimitStats",
    "ServiceLimiterState",
]
