"""
Rate-limited, classified retries for remote calls.
"""

import asyncio
import contextlib
import functools
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, ParamSpec, TypeVar

from ..exceptions import (
    ClassifiedError,
    InvocationCancelled,
    RetryPredicate,
    classify_error,
    redact_sensitive,
)
from ..ratelimit import RateLimiter
from .backoff import RandomSource, calculate_backoff
from .config import RetryConfig

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

RetryObserver = Callable[[int, float, ClassifiedError], None]
Classifier = Callable[..., ClassifiedError]


@dataclass(frozen=True)
class RetryAttemptRecord:
    """One attempt of a call: its index, the backoff before it, and how it failed."""

    attempt: int
    delay_before: float
    error: ClassifiedError | None = None


class RetryOrchestrator:
    """
    Executes operations against a named service with admission control and
    bounded, classified retries.

    Per call: wait for admission, run the operation, and on failure classify
    the error. Retryable errors back off and try again until the attempts run
    out; anything else is raised at once with the attempt history attached.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        config: RetryConfig | None = None,
        *,
        classifier: Classifier = classify_error,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        rng: RandomSource | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            rate_limiter: Shared limiter consulted before every attempt
            config: Default retry configuration (default: RetryConfig())
            classifier: Maps exceptions to ClassifiedError
            sleep: Coroutine used for backoff waits
            clock: Monotonic clock in seconds, used for deadlines
            rng: Random source for backoff jitter
        """
        self.rate_limiter = rate_limiter
        self.config = config or RetryConfig()
        self._classify = classifier
        self._sleep = sleep
        self._clock = clock
        self._rng = rng

    async def execute(
        self,
        service_name: str,
        operation: Callable[[], Awaitable[T]],
        config: RetryConfig | None = None,
        *,
        is_retryable: RetryPredicate | None = None,
        on_retry: RetryObserver | None = None,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> T:
        """
        Run `operation` under the service's rate limit, retrying on failure.

        Args:
            service_name: Rate limiter key
            operation: Zero-argument coroutine function performing the call
            config: Retry configuration for this call (default: orchestrator's)
            is_retryable: Predicate overriding the default retry verdict
            on_retry: Observer called as (next_attempt, delay, error) before
                each backoff; when omitted retries are logged instead
            timeout: Overall deadline in seconds for admission waits,
                attempts and backoff combined
            cancel_event: Setting this event cancels the call

        Returns:
            The operation's result

        Raises:
            ClassifiedError: Non-retryable failure, or retries exhausted
            InvocationCancelled: Deadline passed or cancel_event set
        """
        config = config or self.config
        started = self._clock()
        deadline = started + timeout if timeout is not None else None
        attempts: list[RetryAttemptRecord] = []
        delay = 0.0

        for attempt in range(config.max_retries + 1):
            try:
                await self._guard(
                    self.rate_limiter.await_admission(service_name), deadline, cancel_event
                )
                result = await self._guard(operation(), deadline, cancel_event)
            except InvocationCancelled as e:
                logger.info(f"[{service_name}] Call {e.reason} on attempt {attempt + 1}")
                raise e.with_attempts(attempts) from e
            except Exception as e:
                classified = self._classify(
                    e,
                    is_retryable=is_retryable,
                    context={
                        "service": service_name,
                        "attempt": attempt,
                        "elapsed": self._clock() - started,
                    },
                )
                attempts.append(RetryAttemptRecord(attempt, delay, classified))
                detail = redact_sensitive(str(classified))

                if not classified.retryable or attempt >= config.max_retries:
                    if classified.retryable:
                        logger.error(
                            f"[{service_name}] All {config.max_retries} retries exhausted: {detail}"
                        )
                    else:
                        logger.debug(
                            f"[{service_name}] {classified.kind.value} error is not retryable: {detail}"
                        )
                    raise classified.with_attempts(attempts) from e

                delay = calculate_backoff(attempt, config, self._rng)
                if on_retry:
                    on_retry(attempt + 1, delay, classified)
                else:
                    logger.warning(
                        f"[{service_name}] Retry {attempt + 1}/{config.max_retries}: "
                        f"{classified.kind.value} error ({detail}), waiting {delay:.1f}s"
                    )

                try:
                    await self._guard(self._sleep(delay), deadline, cancel_event)
                except InvocationCancelled as cancelled:
                    raise cancelled.with_attempts(attempts) from e
            else:
                if attempt:
                    logger.info(f"[{service_name}] Succeeded on attempt {attempt + 1}")
                return result

        raise RuntimeError("Retry loop exited unexpectedly")

    async def _guard(
        self,
        awaitable: Awaitable[T],
        deadline: float | None,
        cancel_event: asyncio.Event | None,
    ) -> T:
        """Await `awaitable`, raising InvocationCancelled on deadline or cancel_event."""
        if deadline is None and cancel_event is None:
            return await awaitable

        remaining = None
        if deadline is not None:
            remaining = deadline - self._clock()

        if cancel_event is not None and cancel_event.is_set():
            _close(awaitable)
            raise InvocationCancelled("Invocation cancelled", reason="cancelled")
        if remaining is not None and remaining <= 0:
            _close(awaitable)
            raise InvocationCancelled("Invocation timed out", reason="timeout")

        task = asyncio.ensure_future(awaitable)

        waiters: set[asyncio.Future[Any]] = {task}
        cancel_waiter = None
        if cancel_event is not None:
            cancel_waiter = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            task.cancel()
            if cancel_waiter is not None:
                cancel_waiter.cancel()
            raise
        finally:
            if cancel_waiter is not None and not cancel_waiter.done():
                cancel_waiter.cancel()

        if task in done:
            return task.result()

        await self._discard(task)
        if cancel_waiter is not None and cancel_waiter in done:
            raise InvocationCancelled("Invocation cancelled", reason="cancelled")
        raise InvocationCancelled("Invocation timed out", reason="timeout")

    @staticmethod
    async def _discard(task: asyncio.Future[Any]) -> None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


def _close(awaitable: Awaitable[Any]) -> None:
    """Close a coroutine that will never be awaited."""
    if asyncio.iscoroutine(awaitable):
        awaitable.close()


def async_with_retry(
    orchestrator: RetryOrchestrator,
    service_name: str,
    config: RetryConfig | None = None,
    **options: Any,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Decorator routing an async function through `RetryOrchestrator.execute`.

    Args:
        orchestrator: Orchestrator to execute with
        service_name: Rate limiter key
        config: Retry configuration (default: orchestrator's)
        **options: Forwarded to `execute` (is_retryable, on_retry, timeout, ...)

    Returns:
        Decorated async function with rate limiting and retry behavior
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await orchestrator.execute(
                service_name, lambda: func(*args, **kwargs), config, **options
            )

        return wrapper

    return decorator
