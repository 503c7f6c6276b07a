"""
In-memory result cache with per-entry TTL.

Entries expire lazily: a read that finds an expired entry deletes it and
reports a miss. `clear_expired` sweeps the rest on demand.
"""

import functools
import inspect
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

_MISS = object()


class CacheTTL:
    """Default TTLs in seconds for common kinds of cached data."""

    CONTENT = 60 * 60.0  # generated content
    API_RESPONSE = 5 * 60.0
    CONFIG = 24 * 60 * 60.0
    SHORT = 60.0


@dataclass(frozen=True)
class CacheEntry:
    """A cached value and the time it was stored."""

    value: Any
    created_at: float
    ttl: float

    def is_live(self, now: float) -> bool:
        return now - self.created_at <= self.ttl


@dataclass(frozen=True)
class CacheStats:
    """Entry counts at the time of the call."""

    total: int
    active: int
    expired: int


def make_cache_key(*parts: Any, **named: Any) -> str:
    """
    Build a deterministic cache key.

    Dicts, lists and tuples are JSON-encoded with sorted keys, everything
    else goes through `str`. Parts are joined with ':'.
    """

    def encode(part: Any) -> str:
        if isinstance(part, (dict, list, tuple)):
            return json.dumps(part, sort_keys=True, default=str)
        return str(part)

    encoded = [encode(p) for p in parts]
    encoded.extend(f"{k}={encode(v)}" for k, v in sorted(named.items()))
    return ":".join(encoded)


class ResultCache:
    """
    Thread-safe key/value store with per-entry TTL.

    Individual operations are atomic. A miss followed by a set is not: two
    callers missing the same key at once will both compute the value.
    """

    def __init__(
        self,
        default_ttl: float = CacheTTL.API_RESPONSE,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            default_ttl: TTL in seconds used when `set` gets none
            clock: Monotonic clock in seconds
        """
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get_entry(self, key: str) -> CacheEntry | None:
        """Return the live entry for `key`, deleting it if it has expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not entry.is_live(self._clock()):
                del self._entries[key]
                return None
            return entry

    def _lookup(self, key: str) -> Any:
        entry = self.get_entry(key)
        return _MISS if entry is None else entry.value

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for `key`, or `default`."""
        value = self._lookup(key)
        return default if value is _MISS else value

    def has(self, key: str) -> bool:
        """True if `key` holds a live entry."""
        return self._lookup(key) is not _MISS

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store `value` under `key`, replacing any existing entry."""
        ttl = self.default_ttl if ttl is None else ttl
        if ttl < 0:
            raise ValueError(f"ttl must not be negative, got {ttl}")
        with self._lock:
            self._entries[key] = CacheEntry(value, self._clock(), ttl)

    def delete(self, key: str) -> bool:
        """Remove `key`. Returns True if an entry was removed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def clear_expired(self) -> int:
        """Remove all expired entries. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if not e.is_live(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(f"Cleared {len(expired)} expired cache entries")
        return len(expired)

    def stats(self) -> CacheStats:
        with self._lock:
            now = self._clock()
            active = sum(1 for e in self._entries.values() if e.is_live(now))
            total = len(self._entries)
        return CacheStats(total=total, active=active, expired=total - active)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def wrap_with_cache(
        self,
        fn: Callable[..., Any],
        key_fn: Callable[..., str] | None = None,
        ttl: float | None = None,
    ) -> Callable[..., Any]:
        """
        Memoize `fn` in this cache.

        Works for coroutine functions, objects with an async `__call__`, and
        plain callables. A plain callable that returns an awaitable (a lambda
        around a coroutine function, say) is memoized on the awaited value,
        and later hits are returned as awaitables too. Results, `None`
        included, are stored under `key_fn(*args, **kwargs)`; exceptions are
        not cached.

        Args:
            fn: Function to wrap
            key_fn: Builds the cache key from the call arguments
                (default: function qualname plus arguments)
            ttl: TTL for stored results (default: cache default)

        Returns:
            The wrapped function
        """
        if key_fn is None:
            name = (
                getattr(fn, "__qualname__", None)
                or getattr(fn, "__name__", None)
                or type(fn).__qualname__
            )

            def default_key(*args: Any, **kwargs: Any) -> str:
                return make_cache_key(name, *args, **kwargs)

            key_fn = default_key

        if inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(
            getattr(fn, "__call__", None)
        ):

            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                key = key_fn(*args, **kwargs)
                cached = self._lookup(key)
                if cached is not _MISS:
                    logger.debug(f"Cache hit: {key}")
                    return cached
                result = await fn(*args, **kwargs)
                self.set(key, result, ttl)
                return result

            return _wraps(fn, async_wrapper)

        returns_awaitable = False

        def wrapper(*args: Any, **kwargs: Any) -> Any:
            nonlocal returns_awaitable
            key = key_fn(*args, **kwargs)
            cached = self._lookup(key)
            if cached is not _MISS:
                logger.debug(f"Cache hit: {key}")
                return _resolved(cached) if returns_awaitable else cached
            result = fn(*args, **kwargs)
            if inspect.isawaitable(result):
                returns_awaitable = True
                return self._store_when_done(key, result, ttl)
            self.set(key, result, ttl)
            return result

        return _wraps(fn, wrapper)

    async def _store_when_done(self, key: str, awaitable: Awaitable[Any], ttl: float | None) -> Any:
        """Await a result handed back by a plain callable, then cache the value."""
        result = await awaitable
        self.set(key, result, ttl)
        return result


def _wraps(fn: Callable[..., Any], wrapper: Callable[..., Any]) -> Callable[..., Any]:
    """Copy `fn`'s metadata onto `wrapper`; callable objects may have none to copy."""
    return functools.update_wrapper(wrapper, fn, updated=())


async def _resolved(value: Any) -> Any:
    """Hand a cached value back as an awaitable."""
    return value
