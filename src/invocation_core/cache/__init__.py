"""
Invocation Core - Result Cache.

TTL-based memoization of remote call results.
"""

from .result_cache import CacheEntry, CacheStats, CacheTTL, ResultCache, make_cache_key

__all__ = [
    "CacheEntry",
    "CacheStats",
    "CacheTTL",
    "ResultCache",
    "make_cache_key",
]
