"""
In-memory cache layer for Mona.

Provides:
- CacheManager: TTL-based cache with LRU eviction and pattern invalidation
- get_cache: Access the process-wide cache instance
"""

from .cache_manager import CacheManager, CacheStats

_cache_instance: CacheManager | None = None


def get_cache() -> CacheManager:
    """Get or create the process-wide cache instance."""
    global _cache_instance
    if _cache_instance is None:
        _cache_instance = CacheManager()
    return _cache_instance


__all__ = [
    "CacheManager",
    "CacheStats",
    "get_cache",
]
