"""
Error classification.

Maps any raised exception onto exactly one `ErrorKind` using a fixed
precedence, so an error carrying several signals (a 401 whose message also
says "invalid", say) always lands in the same bucket.
"""

import asyncio
import errno
import socket
from typing import Any, Callable, Mapping

import httpx

from .base import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    ClassifiedError,
    ErrorKind,
    InvocationError,
)

RetryPredicate = Callable[[BaseException], bool]

RATE_LIMIT_CODES = frozenset({"rate_limit_exceeded", "insufficient_quota", "rate_limit_error"})
AUTH_CODES = frozenset({"unauthorized", "invalid_api_key"})
NETWORK_CODES = frozenset({"ECONNREFUSED", "ENOTFOUND", "ETIMEDOUT", "EAI_AGAIN", "ECONNRESET"})
FILE_SYSTEM_CODES = frozenset({"ENOENT", "EACCES", "EISDIR"})

NETWORK_EXCEPTIONS = (
    httpx.TransportError,
    APIConnectionError,
    APITimeoutError,
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
    socket.gaierror,
)
FILE_SYSTEM_EXCEPTIONS = (FileNotFoundError, PermissionError, IsADirectoryError)


def _status_of(error: BaseException) -> int | None:
    """Read an HTTP status from the usual places an exception keeps it."""
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value

    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code

    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _codes_of(error: BaseException) -> set[str]:
    """Collect string error codes: `.code`, errno names and API body types."""
    codes: set[str] = set()

    code = getattr(error, "code", None)
    if isinstance(code, str):
        codes.add(code)

    if isinstance(error, OSError) and error.errno in errno.errorcode:
        codes.add(errno.errorcode[error.errno])

    for attr in ("error", "body"):
        body = getattr(error, attr, None)
        if isinstance(body, Mapping):
            for key in ("type", "code"):
                if isinstance(body.get(key), str):
                    codes.add(body[key])

    return codes


def _has_response(error: BaseException) -> bool:
    """True for errors that carry an HTTP response, even without a readable status."""
    if isinstance(error, (httpx.HTTPStatusError, APIStatusError)):
        return True
    return getattr(error, "response", None) is not None


def _is_validation_error(error: BaseException) -> bool:
    """Match any `ValidationError` class in the MRO (pydantic, marshmallow, ...) by name."""
    return any(cls.__name__ == "ValidationError" for cls in type(error).__mro__)


def categorize_error(error: BaseException) -> tuple[ErrorKind, bool]:
    """
    Decide the kind and default retryability of an error.

    Evaluation order (first match wins):
    rate limit, auth, network, file system, generic API, validation, unknown.

    Returns:
        (kind, retryable) tuple
    """
    if isinstance(error, ClassifiedError):
        return error.kind, error.retryable

    status = _status_of(error)
    codes = _codes_of(error)
    message = str(error).lower()

    if status == 429 or codes & RATE_LIMIT_CODES or "rate limit" in message:
        return ErrorKind.RATE_LIMIT, True

    if status in (401, 403) or codes & AUTH_CODES or "unauthorized" in message:
        return ErrorKind.AUTH, False

    if isinstance(error, NETWORK_EXCEPTIONS) or codes & NETWORK_CODES:
        return ErrorKind.NETWORK, True

    if isinstance(error, FILE_SYSTEM_EXCEPTIONS) or codes & FILE_SYSTEM_CODES:
        return ErrorKind.FILE_SYSTEM, False

    if (status is not None and status >= 400) or _has_response(error):
        return ErrorKind.API, status is not None and status >= 500

    if _is_validation_error(error) or "invalid" in message:
        return ErrorKind.VALIDATION, False

    return ErrorKind.UNKNOWN, False


def classify_error(
    error: BaseException,
    *,
    is_retryable: RetryPredicate | None = None,
    context: Mapping[str, Any] | None = None,
) -> ClassifiedError:
    """
    Wrap an exception in a `ClassifiedError`.

    Args:
        error: The exception to classify
        is_retryable: Optional predicate that overrides the default verdict
            for this call site (the kind is kept)
        context: Metadata to attach (service name, attempt, elapsed time)

    Returns:
        A new ClassifiedError whose `cause` is the original exception
    """
    kind, retryable = categorize_error(error)
    if is_retryable is not None:
        retryable = bool(is_retryable(error))

    if isinstance(error, ClassifiedError):
        merged = {**error.context, **(context or {})}
        return ClassifiedError(
            error.message,
            kind=kind,
            retryable=retryable,
            cause=error.cause,
            context=merged,
            status_code=error.status_code,
            provider=error.provider,
        )

    if isinstance(error, InvocationError):
        message = error.message
    else:
        message = str(error) or type(error).__name__

    return ClassifiedError(
        message,
        kind=kind,
        retryable=retryable,
        cause=error,
        context=context,
        status_code=_status_of(error),
        provider=getattr(error, "provider", None),
    )
