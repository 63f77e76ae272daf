"""
Time-bounded in-memory cache shared by the coverage pipeline.

Provides:
- Per-entry TTL, or no TTL for process-lifetime data (reference boundaries)
- Lazy expiry on read plus an opportunistic sweep of expired entries
- Oldest-entry eviction when a size cap is configured
- An injectable clock so tests can move time forward

One instance is created per application and handed to every component that
needs it; nothing in the pipeline reaches for a module-level cache.

Usage:
    cache = TTLCache()
    await cache.set("probe:130077", ["40", "50"], ttl=3600)
    techs = await cache.get("probe:130077")
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

# Sentinel callers pass as ``default`` when None is itself a cached value
MISS = object()


@dataclass
class CacheEntry:
    """A single cache entry with value and metadata."""
    key: str
    value: Any
    created_at: float
    expires_at: Optional[float]  # None = never expires
    hits: int = 0

    def is_expired(self, now: float) -> bool:
        """Check if entry has expired at ``now``."""
        return self.expires_at is not None and now > self.expires_at


class TTLCache:
    """
    In-memory key/value cache with per-entry TTL.

    The lock only matters if the map is ever touched from more than one
    event loop task across an await; get/set themselves never suspend while
    holding it.
    """

    def __init__(
        self,
        max_size: Optional[int] = None,
        cleanup_interval: float = 300,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the cache.

        Args:
            max_size: Maximum number of entries (None = unbounded)
            cleanup_interval: How often to sweep expired entries (seconds)
            clock: Source of the current time in seconds
        """
        self.max_size = max_size
        self.cleanup_interval = cleanup_interval
        self._clock = clock

        self._cache: Dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()
        self._last_cleanup = clock()

        # Statistics
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "expirations": 0,
            "evictions": 0,
        }

    async def get(self, key: str, default: Any = None) -> Any:
        """
        Get a value from the cache.

        Args:
            key: Cache key
            default: Returned on a miss (pass MISS to distinguish a cached None)

        Returns:
            Cached value, or ``default`` if absent or expired
        """
        async with self._lock:
            now = self._clock()
            self._maybe_cleanup(now)

            entry = self._cache.get(key)

            if entry is None:
                self._stats["misses"] += 1
                return default

            if entry.is_expired(now):
                del self._cache[key]
                self._stats["misses"] += 1
                self._stats["expirations"] += 1
                return default

            entry.hits += 1
            self._stats["hits"] += 1
            return entry.value

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[float] = None
    ) -> None:
        """
        Set a value in the cache.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time-to-live in seconds (None = keep for the process lifetime)
        """
        async with self._lock:
            now = self._clock()
            self._maybe_cleanup(now)

            if (
                self.max_size is not None
                and len(self._cache) >= self.max_size
                and key not in self._cache
            ):
                self._evict_oldest()

            self._cache[key] = CacheEntry(
                key=key,
                value=value,
                created_at=now,
                expires_at=None if ttl is None else now + ttl,
            )
            self._stats["sets"] += 1

    async def delete(self, key: str) -> bool:
        """
        Delete a key from the cache.

        Returns:
            True if key was deleted, False if not found
        """
        async with self._lock:
            if key in self._cache:
                del self._cache[key]
                return True
            return False

    async def clear(self) -> int:
        """
        Clear all entries from the cache.

        Returns:
            Number of entries cleared
        """
        async with self._lock:
            count = len(self._cache)
            self._cache.clear()
            return count

    async def contains(self, key: str) -> bool:
        """Check if a key is present and not expired."""
        return await self.get(key, default=MISS) is not MISS

    async def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        async with self._lock:
            total_requests = self._stats["hits"] + self._stats["misses"]
            hit_rate = (
                self._stats["hits"] / total_requests
                if total_requests > 0 else 0
            )

            return {
                **self._stats,
                "size": len(self._cache),
                "max_size": self.max_size,
                "hit_rate": f"{hit_rate:.2%}",
            }

    def _maybe_cleanup(self, now: float) -> None:
        """Sweep expired entries if the cleanup interval has passed."""
        if now - self._last_cleanup < self.cleanup_interval:
            return

        self._last_cleanup = now
        expired_keys = [
            key for key, entry in self._cache.items()
            if entry.is_expired(now)
        ]

        for key in expired_keys:
            del self._cache[key]

        if expired_keys:
            self._stats["expirations"] += len(expired_keys)
            logger.debug(f"Cache cleanup: removed {len(expired_keys)} expired entries")

    def _evict_oldest(self) -> None:
        """Evict the oldest entry from the cache."""
        if not self._cache:
            return

        oldest_key = min(
            self._cache.keys(),
            key=lambda k: self._cache[k].created_at
        )
        del self._cache[oldest_key]
        self._stats["evictions"] += 1
