"""
Last-known-good board snapshots.

Every successful load or save records the user's personal and shared maps.
When the store is unreachable a Workspace falls back to the snapshot, as long
as it is younger than MONA_SNAPSHOT_TTL_SECONDS, and marks itself stale.
"""

import copy
import time

from mona import config
from mona.cache import CacheManager, get_cache


class SnapshotCache:
    def __init__(self, cache: CacheManager | None = None, ttl_seconds: float | None = None):
        self._cache = cache or get_cache()
        self._ttl = config.SNAPSHOT_TTL_SECONDS if ttl_seconds is None else ttl_seconds

    @staticmethod
    def _key(username: str) -> str:
        return f"snapshot:{username}"

    def remember(self, username: str, personal: dict, shared: dict) -> None:
        snapshot = {
            "personal": copy.deepcopy(personal),
            "shared": copy.deepcopy(shared),
            "saved_at": time.time(),
        }
        self._cache.set(self._key(username), snapshot, self._ttl)

    def recall(self, username: str) -> dict | None:
        snapshot = self._cache.get(self._key(username))
        return copy.deepcopy(snapshot) if snapshot else None

    def forget(self, username: str) -> None:
        self._cache.delete(self._key(username))
