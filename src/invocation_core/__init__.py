"""
Invocation Core - Resilient calls to quota-limited services.

Sliding-window rate limiting, classified retries with exponential backoff,
and TTL result caching for every call to an external completion API.
"""

from .cache import CacheTTL, ResultCache, make_cache_key
from .clients import BaseCompletionClient, Message, Role, OpenAICompletionClient
from .exceptions import (
    ErrorKind,
    InvocationError,
    ClassifiedError,
    InvocationCancelled,
    APIStatusError,
    RateLimitError,
    AuthenticationError,
    InvalidRequestError,
    NotFoundError,
    ServerError,
    APIConnectionError,
    APITimeoutError,
    classify_error,
    redact_sensitive,
    troubleshooting_tips,
    user_message,
)
from .invoker import Invoker
from .ratelimit import RateLimitConfig, RateLimiter, RateLimitStats
from .retry import (
    RetryAttemptRecord,
    RetryConfig,
    RetryOrchestrator,
    RetryStrategy,
    async_with_retry,
    calculate_backoff,
    compute_delay,
)
from .services import CompletionService, InvocationSettings, parse_ai_response

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Facade
    "Invoker",
    # Rate limiting
    "RateLimitConfig",
    "RateLimiter",
    "RateLimitStats",
    # Retry
    "RetryAttemptRecord",
    "RetryConfig",
    "RetryOrchestrator",
    "RetryStrategy",
    "async_with_retry",
    "calculate_backoff",
    "compute_delay",
    # Cache
    "CacheTTL",
    "ResultCache",
    "make_cache_key",
    # Exceptions
    "ErrorKind",
    "InvocationError",
    "ClassifiedError",
    "InvocationCancelled",
    "APIStatusError",
    "RateLimitError",
    "AuthenticationError",
    "InvalidRequestError",
    "NotFoundError",
    "ServerError",
    "APIConnectionError",
    "APITimeoutError",
    "classify_error",
    "redact_sensitive",
    "troubleshooting_tips",
    "user_message",
    # Clients
    "BaseCompletionClient",
    "Message",
    "Role",
    "OpenAICompletionClient",
    # Services
    "CompletionService",
    "InvocationSettings",
    "parse_ai_response",
]
