"""
Base exception classes for remote invocations.

Every failure that leaves the invocation core is a `ClassifiedError`: it
carries a taxonomy `kind` and a `retryable` verdict so callers can decide
what to tell the user without inspecting the raw cause.
"""

from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from .redaction import redact_sensitive

if TYPE_CHECKING:
    from ..retry.orchestrator import RetryAttemptRecord


class ErrorKind(str, Enum):
    """Error taxonomy used to drive retry decisions."""

    RATE_LIMIT = "rate_limit"
    AUTH = "auth"
    NETWORK = "network"
    FILE_SYSTEM = "file_system"
    API = "api"
    VALIDATION = "validation"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class InvocationError(Exception):
    """Base exception for all invocation core errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        provider: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.provider = provider

    def __str__(self) -> str:
        parts = [self.message]
        if self.provider:
            parts.insert(0, f"[{self.provider}]")
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        return " ".join(parts)


class ClassifiedError(InvocationError):
    """
    An error annotated with a taxonomy kind and a retryability verdict.

    Instances are treated as immutable; `with_attempts` returns a copy that
    carries the attempt history of the call that produced it.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        retryable: bool = False,
        cause: BaseException | None = None,
        context: Mapping[str, Any] | None = None,
        attempts: Sequence["RetryAttemptRecord"] = (),
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.kind = ErrorKind(kind)
        self.retryable = retryable
        self.cause = cause
        self.context: Mapping[str, Any] = MappingProxyType(dict(context or {}))
        self.attempts: tuple["RetryAttemptRecord", ...] = tuple(attempts)

    @property
    def attempt_count(self) -> int:
        """Number of attempts made before this error was raised."""
        return len(self.attempts)

    def with_attempts(
        self, attempts: Sequence["RetryAttemptRecord"]
    ) -> "ClassifiedError":
        """Return a copy of this error carrying the given attempt history."""
        return type(self)(
            self.message,
            kind=self.kind,
            retryable=self.retryable,
            cause=self.cause,
            context=self.context,
            attempts=attempts,
            status_code=self.status_code,
            provider=self.provider,
        )

    def to_dict(self) -> dict:
        """Serialize for structured logging, with credentials in the message masked."""
        return {
            "name": type(self).__name__,
            "kind": self.kind.value,
            "retryable": self.retryable,
            "message": redact_sensitive(self.message),
            "status_code": self.status_code,
            "context": dict(self.context),
            "attempts": self.attempt_count,
            "cause": redact_sensitive(repr(self.cause)) if self.cause is not None else None,
        }


class InvocationCancelled(ClassifiedError):
    """Raised when a call is cancelled or runs past its deadline. Never retried."""

    def __init__(self, message: str = "Invocation cancelled", *, reason: str = "cancelled", **kwargs):
        kwargs["kind"] = ErrorKind.CANCELLED
        kwargs["retryable"] = False
        super().__init__(message, **kwargs)
        self.reason = reason

    def with_attempts(
        self, attempts: Sequence["RetryAttemptRecord"]
    ) -> "InvocationCancelled":
        """Return a copy carrying the attempt history; kind and verdict stay fixed, reason is kept."""
        return InvocationCancelled(
            self.message,
            reason=self.reason,
            cause=self.cause,
            context=self.context,
            attempts=attempts,
            status_code=self.status_code,
            provider=self.provider,
        )


# --- Errors raised by completion clients ---


class APIStatusError(InvocationError):
    """Raised when the remote API answers with an error status."""

    def __init__(self, message: str = "API error", *, body: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.body = body


class RateLimitError(APIStatusError):
    """Raised when the API reports a rate limit or exhausted quota."""

    def __init__(self, message: str = "Rate limit exceeded", *, code: str | None = None, **kwargs):
        kwargs.setdefault("status_code", 429)
        super().__init__(message, **kwargs)
        self.code = code


class AuthenticationError(APIStatusError):
    """Raised when the API rejects the credentials."""

    def __init__(self, message: str = "Authentication failed", **kwargs):
        kwargs.setdefault("status_code", 401)
        super().__init__(message, **kwargs)


class InvalidRequestError(APIStatusError):
    """Raised when the request is malformed."""

    def __init__(self, message: str = "Invalid request", **kwargs):
        kwargs.setdefault("status_code", 400)
        super().__init__(message, **kwargs)


class NotFoundError(APIStatusError):
    """Raised when the requested model or resource does not exist."""

    def __init__(self, message: str = "Not found", model: str | None = None, **kwargs):
        kwargs.setdefault("status_code", 404)
        super().__init__(message, **kwargs)
        self.model = model


class ServerError(APIStatusError):
    """Raised when the server returns a 5xx error."""

    def __init__(self, message: str = "Server error", **kwargs):
        kwargs.setdefault("status_code", 500)
        super().__init__(message, **kwargs)


class APIConnectionError(InvocationError):
    """Raised when the API cannot be reached."""

    def __init__(self, message: str = "Connection failed", **kwargs):
        super().__init__(message, **kwargs)


class APITimeoutError(InvocationError):
    """Raised when a request times out."""

    def __init__(self, message: str = "Request timed out", **kwargs):
        super().__init__(message, **kwargs)
