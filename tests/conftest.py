"""Shared fixtures: a controllable clock for time-dependent behavior."""

import asyncio

import pytest

from invocation_core.ratelimit import RateLimitConfig, RateLimiter
from invocation_core.retry import RetryOrchestrator


class FakeClock:
    """Monotonic clock whose `sleep` advances time instead of waiting."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        # Let other tasks run, as a real sleep would
        await asyncio.sleep(0)


class FixedRandom:
    """Random source returning a constant."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


class StatusError(Exception):
    """Error shaped like an HTTP client error with a `status` attribute."""

    def __init__(self, status: int, message: str = "request failed"):
        super().__init__(message)
        self.status = status


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    """Limiter on fake time with room for plenty of calls."""
    return RateLimiter(RateLimitConfig(max_requests=100, window=60.0), clock=clock, sleep=clock.sleep)


@pytest.fixture
def orchestrator(limiter, clock):
    """Orchestrator whose backoff sleeps advance the fake clock."""
    return RetryOrchestrator(limiter, sleep=clock.sleep, clock=clock)
