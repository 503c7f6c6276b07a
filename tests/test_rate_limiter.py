"""Tests for the sliding-window rate limiter - behavior focused."""

import asyncio
import threading

import pytest

from invocation_core.ratelimit import RateLimitConfig, RateLimiter


@pytest.fixture
def tight_limiter(clock):
    """Two calls per second on fake time."""
    return RateLimiter(RateLimitConfig(max_requests=2, window=1.0), clock=clock, sleep=clock.sleep)


class TestAdmission:
    """Test basic admit / refuse behavior."""

    def test_allows_requests_within_limit(self, clock):
        """Up to max_requests calls are admitted."""
        limiter = RateLimiter(RateLimitConfig(max_requests=3, window=1.0), clock=clock)

        for _ in range(3):
            assert limiter.can_admit("svc") is True
            limiter.record_admission("svc")

    def test_blocks_requests_exceeding_limit(self, tight_limiter):
        """Once the window is full, can_admit is False."""
        tight_limiter.record_admission("svc")
        tight_limiter.record_admission("svc")

        assert tight_limiter.can_admit("svc") is False

    def test_allows_requests_after_window_passes(self, tight_limiter, clock):
        """Timestamps older than the window stop counting."""
        tight_limiter.record_admission("svc")
        tight_limiter.record_admission("svc")

        clock.advance(1.0)

        assert tight_limiter.can_admit("svc") is True

    def test_window_slides_instead_of_resetting(self, tight_limiter, clock):
        """Only the admissions that left the window free up slots."""
        tight_limiter.record_admission("svc")  # t=0
        clock.advance(0.6)
        tight_limiter.record_admission("svc")  # t=0.6
        clock.advance(0.5)  # t=1.1: first expired, second still inside

        assert tight_limiter.try_admit("svc") is True
        assert tight_limiter.try_admit("svc") is False

    def test_try_admit_records_on_success_only(self, tight_limiter):
        """A refused try_admit does not consume a slot."""
        assert tight_limiter.try_admit("svc") is True
        assert tight_limiter.try_admit("svc") is True
        assert tight_limiter.try_admit("svc") is False

        assert tight_limiter.get_stats("svc").current == 2


class TestAwaitAdmission:
    """Test waiting for a slot."""

    @pytest.mark.asyncio
    async def test_third_call_waits_for_oldest_to_expire(self, tight_limiter, clock):
        """Given 2/1s and three calls at t=0, the third is admitted after t=1."""
        admitted_at = []

        async def call():
            await tight_limiter.await_admission("svc")
            admitted_at.append(clock.now)

        await asyncio.gather(call(), call(), call())

        assert admitted_at[0] == 0.0
        assert admitted_at[1] == 0.0
        assert admitted_at[2] >= 1.0

    @pytest.mark.asyncio
    async def test_returns_immediately_with_capacity(self, tight_limiter, clock):
        """No wait when a slot is free."""
        waited = await tight_limiter.await_admission("svc")

        assert waited == 0.0
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_wait_includes_buffer(self, clock):
        """The computed wait adds the configured buffer."""
        limiter = RateLimiter(
            RateLimitConfig(max_requests=1, window=1.0, buffer=0.1),
            clock=clock,
            sleep=clock.sleep,
        )
        await limiter.await_admission("svc")

        waited = await limiter.await_admission("svc")

        assert waited == pytest.approx(1.1)

    @pytest.mark.asyncio
    async def test_never_exceeds_limit_in_any_window(self, clock):
        """For every admission, the trailing window holds at most max_requests."""
        limiter = RateLimiter(
            RateLimitConfig(max_requests=3, window=1.0), clock=clock, sleep=clock.sleep
        )
        admitted_at = []

        for _ in range(10):
            await limiter.await_admission("svc")
            admitted_at.append(clock.now)

        for t in admitted_at:
            in_window = [s for s in admitted_at if t - 1.0 < s <= t]
            assert len(in_window) <= 3


class TestServices:
    """Test per-service isolation and configuration."""

    def test_maintains_separate_limits_for_services(self, clock):
        """Filling one service's window does not affect another."""
        limiter = RateLimiter(RateLimitConfig(max_requests=1, window=1.0), clock=clock)

        limiter.record_admission("service-a")

        assert limiter.can_admit("service-a") is False
        assert limiter.can_admit("service-b") is True

    def test_configure_overrides_default(self, limiter):
        """A configured service uses its own limit."""
        limiter.configure("strict", RateLimitConfig(max_requests=1, window=10.0))

        assert limiter.try_admit("strict") is True
        assert limiter.try_admit("strict") is False
        assert limiter.try_admit("other") is True

    def test_configure_without_config_returns_current(self, limiter):
        """configure() with no config creates the service with defaults."""
        config = limiter.configure("svc")

        assert config == limiter.default_config
        assert "svc" in limiter.services

    def test_separate_instances_do_not_share_state(self, clock):
        """Two limiters are fully independent."""
        first = RateLimiter(RateLimitConfig(max_requests=1, window=1.0), clock=clock)
        second = RateLimiter(RateLimitConfig(max_requests=1, window=1.0), clock=clock)

        first.record_admission("svc")

        assert second.can_admit("svc") is True


class TestStatsAndReset:
    """Test diagnostics and reset."""

    def test_stats_report_usage(self, tight_limiter):
        tight_limiter.record_admission("svc")

        stats = tight_limiter.get_stats("svc")

        assert stats.service_name == "svc"
        assert stats.current == 1
        assert stats.max_requests == 2
        assert stats.window == 1.0
        assert stats.available == 1

    def test_stats_purge_expired(self, tight_limiter, clock):
        """Stats only count admissions inside the window."""
        tight_limiter.record_admission("svc")
        clock.advance(2.0)

        assert tight_limiter.get_stats("svc").current == 0

    def test_wait_time_when_full(self, tight_limiter, clock):
        tight_limiter.record_admission("svc")
        clock.advance(0.25)
        tight_limiter.record_admission("svc")

        assert tight_limiter.wait_time("svc") == pytest.approx(0.75)

    def test_reset_single_service(self, tight_limiter):
        tight_limiter.record_admission("a")
        tight_limiter.record_admission("a")
        tight_limiter.record_admission("b")

        tight_limiter.reset("a")

        assert tight_limiter.get_stats("a").current == 0
        assert tight_limiter.get_stats("b").current == 1

    def test_reset_all_services(self, tight_limiter):
        tight_limiter.record_admission("a")
        tight_limiter.record_admission("b")

        tight_limiter.reset()

        assert tight_limiter.services == []
        assert tight_limiter.can_admit("a") is True


class TestConfigValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [{"max_requests": 0}, {"window": 0}, {"window": -1.0}, {"buffer": -0.1}],
    )
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            RateLimitConfig(**kwargs)


class TestThreadSafety:
    def test_concurrent_threads_do_not_overshoot(self):
        """Check-and-record is atomic across OS threads."""
        limiter = RateLimiter(RateLimitConfig(max_requests=5, window=60.0))
        results = []
        results_lock = threading.Lock()
        barrier = threading.Barrier(20)

        def worker():
            barrier.wait()
            admitted = limiter.try_admit("svc")
            with results_lock:
                results.append(admitted)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 5
        assert limiter.get_stats("svc").current == 5
