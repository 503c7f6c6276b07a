"""
Invocation facade: cached, rate-limited, retried calls.
"""

import logging
from typing import Any, Awaitable, Callable, TypeVar

from .cache import ResultCache
from .ratelimit import RateLimitConfig, RateLimiter, RateLimitStats
from .retry import RetryConfig, RetryOrchestrator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Invoker:
    """
    Single entry point for remote calls.

    A cache hit returns immediately. A miss goes through the orchestrator
    (admission, attempts, backoff) and a successful result is stored when a
    cache key was given.

    Example:
        invoker = Invoker()
        invoker.configure_service("openai", RateLimitConfig(max_requests=20))
        text = await invoker.call(
            "openai",
            lambda: client.complete(messages),
            cache_key=make_cache_key("complete", messages),
            ttl=CacheTTL.CONTENT,
        )
    """

    def __init__(
        self,
        orchestrator: RetryOrchestrator | None = None,
        cache: ResultCache | None = None,
        *,
        rate_limiter: RateLimiter | None = None,
        retry_config: RetryConfig | None = None,
    ):
        """
        Initialize the invoker.

        Args:
            orchestrator: Orchestrator to execute with; built from
                `rate_limiter` and `retry_config` when omitted
            cache: Result cache (default: a fresh ResultCache)
            rate_limiter: Limiter for a newly built orchestrator
            retry_config: Default retry config for a newly built orchestrator
        """
        if orchestrator is None:
            orchestrator = RetryOrchestrator(rate_limiter or RateLimiter(), retry_config)
        elif rate_limiter is not None or retry_config is not None:
            raise ValueError("Pass either an orchestrator or rate_limiter/retry_config, not both")
        self.orchestrator = orchestrator
        self.cache = cache if cache is not None else ResultCache()

    @property
    def rate_limiter(self) -> RateLimiter:
        return self.orchestrator.rate_limiter

    def configure_service(
        self, service_name: str, config: RateLimitConfig | None = None
    ) -> RateLimitConfig:
        """Set the rate limit for a service. Returns the config in effect."""
        return self.rate_limiter.configure(service_name, config)

    async def call(
        self,
        service_name: str,
        operation: Callable[[], Awaitable[T]],
        *,
        cache_key: str | None = None,
        ttl: float | None = None,
        config: RetryConfig | None = None,
        **options: Any,
    ) -> T:
        """
        Execute `operation`, consulting the cache first when `cache_key` is set.

        Args:
            service_name: Rate limiter key
            operation: Zero-argument coroutine function performing the call
            cache_key: Key to read and store the result under (no caching if None)
            ttl: TTL for the stored result (default: cache default)
            config: Retry configuration for this call
            **options: Forwarded to `RetryOrchestrator.execute`

        Returns:
            The cached or freshly computed result
        """
        if cache_key is not None:
            entry = self.cache.get_entry(cache_key)
            if entry is not None:
                logger.debug(f"[{service_name}] Cache hit: {cache_key}")
                return entry.value

        result = await self.orchestrator.execute(service_name, operation, config, **options)

        if cache_key is not None:
            self.cache.set(cache_key, result, ttl)
        return result

    def stats(self, service_name: str) -> RateLimitStats:
        """Rate limit usage for a service."""
        return self.rate_limiter.get_stats(service_name)
