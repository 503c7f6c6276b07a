"""
Per-service sliding-window rate limiter.

One `RateLimiter` instance is a registry of independent windows keyed by
service name. Create one per process (or per test) and pass it to whatever
needs admission control.
"""

import asyncio
import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from .config import RateLimitConfig

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]


@dataclass
class ServiceLimiterState:
    """Admission timestamps for one service."""

    service_name: str
    config: RateLimitConfig
    timestamps: deque = field(default_factory=deque)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def purge(self, now: float) -> None:
        """Drop timestamps that have left the window. Caller holds `lock`."""
        cutoff = now - self.config.window
        while self.timestamps and self.timestamps[0] <= cutoff:
            self.timestamps.popleft()


@dataclass(frozen=True)
class RateLimitStats:
    """Snapshot of a service's window."""

    service_name: str
    current: int
    max_requests: int
    window: float
    available: int

    def to_dict(self) -> dict:
        return {
            "service_name": self.service_name,
            "current": self.current,
            "max_requests": self.max_requests,
            "window": self.window,
            "available": self.available,
        }


class RateLimiter:
    """
    Sliding-window admission control, one window per service name.

    Check-and-record is a single critical section guarded by a per-service
    `threading.Lock` that is never held across an `await`, so the limit holds
    for asyncio tasks and OS threads alike.

    Waiters are not queued: when a slot frees up, whichever waiter re-checks
    first takes it.
    """

    def __init__(
        self,
        default_config: RateLimitConfig | None = None,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
    ):
        """
        Initialize the limiter.

        Args:
            default_config: Config used for services not explicitly configured
            clock: Monotonic clock in seconds
            sleep: Coroutine used to suspend waiters
        """
        self.default_config = default_config or RateLimitConfig()
        self._clock = clock
        self._sleep = sleep
        self._services: dict[str, ServiceLimiterState] = {}
        self._registry_lock = threading.Lock()

    def _state(self, service_name: str) -> ServiceLimiterState:
        with self._registry_lock:
            state = self._services.get(service_name)
            if state is None:
                state = ServiceLimiterState(service_name, self.default_config)
                self._services[service_name] = state
            return state

    def configure(
        self, service_name: str, config: RateLimitConfig | None = None
    ) -> RateLimitConfig:
        """
        Create a service window, or replace its config.

        Existing admission timestamps are kept when reconfiguring.

        Returns:
            The config now in effect for the service
        """
        state = self._state(service_name)
        if config is not None:
            with state.lock:
                state.config = config
            logger.debug(
                f"[{service_name}] Rate limit set to "
                f"{config.max_requests} requests / {config.window}s"
            )
        return state.config

    @property
    def services(self) -> list[str]:
        """Names of services with a window."""
        with self._registry_lock:
            return list(self._services)

    def can_admit(self, service_name: str) -> bool:
        """Check whether a call would be admitted right now."""
        state = self._state(service_name)
        with state.lock:
            state.purge(self._clock())
            return len(state.timestamps) < state.config.max_requests

    def record_admission(self, service_name: str) -> None:
        """Record an admission at the current time, without checking capacity."""
        state = self._state(service_name)
        with state.lock:
            state.timestamps.append(self._clock())

    def try_admit(self, service_name: str) -> bool:
        """Admit and record a call if the window has room. Atomic."""
        state = self._state(service_name)
        with state.lock:
            now = self._clock()
            state.purge(now)
            if len(state.timestamps) < state.config.max_requests:
                state.timestamps.append(now)
                return True
            return False

    def wait_time(self, service_name: str) -> float:
        """Seconds until the oldest admission leaves the window (0 if a slot is free)."""
        state = self._state(service_name)
        with state.lock:
            now = self._clock()
            state.purge(now)
            if len(state.timestamps) < state.config.max_requests:
                return 0.0
            return max(0.0, state.timestamps[0] + state.config.window - now)

    async def await_admission(self, service_name: str) -> float:
        """
        Suspend until the service admits a call, then record it.

        Other waiters may take a freed slot first, so capacity is re-checked
        after every sleep.

        Returns:
            Total seconds spent waiting
        """
        waited = 0.0
        while not self.try_admit(service_name):
            state = self._state(service_name)
            delay = self.wait_time(service_name) + state.config.buffer
            logger.debug(f"[{service_name}] Rate limit reached, waiting {delay:.2f}s")
            await self._sleep(delay)
            waited += delay

        if waited:
            logger.info(f"[{service_name}] Admitted after waiting {waited:.2f}s")
        return waited

    def get_stats(self, service_name: str) -> RateLimitStats:
        """Current window usage for a service."""
        state = self._state(service_name)
        with state.lock:
            state.purge(self._clock())
            current = len(state.timestamps)
            max_requests = state.config.max_requests
            window = state.config.window

        return RateLimitStats(
            service_name=service_name,
            current=current,
            max_requests=max_requests,
            window=window,
            available=max(0, max_requests - current),
        )

    def reset(self, service_name: str | None = None) -> None:
        """
        Clear admission history.

        Args:
            service_name: Service to clear; when omitted every service
                window (and its config) is dropped
        """
        if service_name is None:
            with self._registry_lock:
                self._services.clear()
            return

        with self._registry_lock:
            state = self._services.get(service_name)
        if state is not None:
            with state.lock:
                state.timestamps.clear()
