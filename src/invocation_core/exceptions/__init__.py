"""
Invocation Core - Exception Hierarchy.

Error taxonomy, classification and retry-aware exceptions.
"""

from .base import (
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
)
from .classifier import RetryPredicate, categorize_error, classify_error
from .messages import troubleshooting_tips, user_message
from .redaction import redact_sensitive

__all__ = [
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
    "RetryPredicate",
    "categorize_error",
    "classify_error",
    "troubleshooting_tips",
    "user_message",
    "redact_sensitive",
]
