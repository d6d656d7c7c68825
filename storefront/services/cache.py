"""
ResponseCache - In-memory cache of successful GET responses.

Features:
- Entries keyed by request signature (method + endpoint + query)
- Freshness window: fresh entries short-circuit the network entirely
- Stale entries are kept around for the offline fallback path
- Prefix invalidation after mutating calls on a resource
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable

from loguru import logger

Clock = Callable[[], datetime]


@dataclass
class CachedResponse:
    """A single cached GET result."""

    key: str
    payload: Any
    fetched_at: datetime

    def age(self, now: datetime) -> timedelta:
        return now - self.fetched_at


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    stale_hits: int = 0
    misses: int = 0
    invalidated: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.stale_hits + self.misses
        if total == 0:
            return 0.0
        return (self.hits + self.stale_hits) / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "stale_hits": self.stale_hits,
            "misses": self.misses,
            "invalidated": self.invalidated,
            "size": self.size,
            "hit_rate": f"{self.hit_rate:.2%}",
        }


class ResponseCache:
    """
    Process-lifetime cache for GET responses.

    Usage:
        cache = ResponseCache(ttl=timedelta(minutes=5))

        key = cache.generate_key("GET", "/products")
        entry = await cache.get(key)
        if entry and cache.is_fresh(entry):
            return entry.payload

        payload = await fetch_products()
        await cache.put(key, payload)

    Entries are never expired on read; freshness is a decision left to the
    caller so that stale data can still be served while offline.
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(minutes=5),
        clock: Clock | None = None,
        debug: bool = False,
    ):
        self._entries: dict[str, CachedResponse] = {}
        self._ttl = ttl
        self._clock = clock or datetime.now
        self._debug = debug
        self._lock = asyncio.Lock()
        self._stats = CacheStats()
        # Bumped by invalidate/clear; lets in-flight reads detect a write
        self._generation = 0

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def generation(self) -> int:
        return self._generation

    @staticmethod
    def generate_key(
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> str:
        """Generate a cache key from method, endpoint and query params."""
        key = f"{method.upper()}:{endpoint}"
        if params:
            sorted_params = "&".join(f"{k}={v}" for k, v in sorted(params.items()))
            key = f"{key}?{sorted_params}"
        return key

    def is_fresh(self, entry: CachedResponse) -> bool:
        """Check if entry is still inside the freshness window."""
        return entry.age(self._clock()) < self._ttl

    async def get(self, key: str) -> CachedResponse | None:
        """Return the entry for key, fresh or stale, or None."""
        async with self._lock:
            entry = self._entries.get(key)

            if entry is None:
                self._stats.misses += 1
                self._log(f"MISS: {key}")
                return None

            if self.is_fresh(entry):
                self._stats.hits += 1
                self._log(f"HIT: {key}")
            else:
                self._stats.stale_hits += 1
                self._log(f"STALE HIT: {key}")

            return entry

    async def put(
        self,
        key: str,
        payload: Any,
        generation: int | None = None,
    ) -> bool:
        """
        Store payload under key, overwriting any prior entry.

        Args:
            key: Cache key
            payload: Response payload
            generation: Value of `generation` read before the request was
                sent; the put is dropped if an invalidation ran since

        Returns:
            True if the entry was stored
        """
        async with self._lock:
            if generation is not None and generation != self._generation:
                self._log(f"DROP: {key} (invalidated while in flight)")
                return False
            self._entries[key] = CachedResponse(
                key=key,
                payload=payload,
                fetched_at=self._clock(),
            )
            self._log(f"SET: {key}")
            return True

    async def invalidate(self, prefix: str) -> int:
        """
        Remove every entry whose key contains the resource prefix.

        Args:
            prefix: Resource path such as "/products"

        Returns:
            Number of entries removed
        """
        async with self._lock:
            self._generation += 1
            keys_to_delete = [k for k in self._entries if prefix in k]
            for key in keys_to_delete:
                del self._entries[key]

            self._stats.invalidated += len(keys_to_delete)
            if keys_to_delete:
                logger.debug(
                    f"Cache invalidated {len(keys_to_delete)} entries "
                    f"matching '{prefix}'"
                )

            return len(keys_to_delete)

    async def clear(self) -> None:
        """Clear all cache entries."""
        async with self._lock:
            self._generation += 1
            count = len(self._entries)
            self._entries.clear()
            logger.debug(f"Cache cleared: {count} entries removed")

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[str]:
        return list(self._entries)

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        self._stats.size = len(self._entries)
        return self._stats

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[ResponseCache] {message}")
