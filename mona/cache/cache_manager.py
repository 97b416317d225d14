"""
In-memory cache with TTL expiry, LRU eviction and glob invalidation.

Backs two things:
- projection memoization ("projection:<kind>:<digest>")
- last-known-good user snapshots ("snapshot:<username>")
"""

import fnmatch
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    size: int = 0
    hit_rate: float = 0.0

    def to_dict(self) -> dict:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "size": self.size,
            "hit_rate": self.hit_rate,
        }


class CacheManager:
    """Thread-safe in-memory cache with TTL, LRU eviction, and pattern invalidation."""

    def __init__(self, max_size: int = 1000, default_ttl: float = 300):
        """
        Args:
            max_size: Maximum number of entries before LRU eviction.
            default_ttl: Default TTL in seconds.
        """
        # key -> (value, expiry_time, access_time)
        self._cache: dict[str, tuple[Any, float, float]] = {}
        self._lock = threading.RLock()
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._hits = 0
        self._misses = 0

    def _lookup(self, key: str) -> Any:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return _MISSING

            value, expiry_time, _access_time = entry
            if time.time() >= expiry_time:
                del self._cache[key]
                self._misses += 1
                return _MISSING

            self._cache[key] = (value, expiry_time, time.time())
            self._hits += 1
            return value

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if absent or expired."""
        value = self._lookup(key)
        return None if value is _MISSING else value

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        """Store a value; evicts the least recently used entry when full."""
        if ttl_seconds is None:
            ttl_seconds = self._default_ttl

        with self._lock:
            now = time.time()
            self._cache[key] = (value, now + ttl_seconds, now)
            if len(self._cache) > self._max_size:
                self._evict_lru()

    def get_or_compute(
        self, key: str, compute: Callable[[], Any], ttl_seconds: float | None = None
    ) -> Any:
        """Return the cached value for key, computing and storing it on a miss."""
        value = self._lookup(key)
        if value is _MISSING:
            value = compute()
            self.set(key, value, ttl_seconds)
        return value

    def delete(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def invalidate_pattern(self, pattern: str) -> int:
        """
        Invalidate all keys matching a glob pattern, e.g. "projection:*".

        Returns:
            Number of keys invalidated
        """
        with self._lock:
            doomed = [key for key in self._cache if fnmatch.fnmatch(key, pattern)]
            for key in doomed:
                del self._cache[key]
            return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            total = self._hits + self._misses
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                size=len(self._cache),
                hit_rate=self._hits / total if total else 0.0,
            )

    def _evict_lru(self) -> None:
        """Evict least-recently-used entry. Caller holds the lock."""
        if not self._cache:
            return
        lru_key = min(self._cache, key=lambda k: self._cache[k][2])
        del self._cache[lru_key]
        logger.debug(f"Evicted LRU key: {lru_key}")
