"""Listing Cache - in-process TTL cache for the "all products" listing.

Invariants:
    - invalidate() is idempotent and never raises (unknown keys are ignored)
    - invalidate() bumps the key's generation; a set() carrying an older
      generation is dropped, so a fill that read the database before a write
      can never resurrect the evicted listing
    - Expired entries read as misses and are dropped on access
    - Only plain record snapshots are stored; response views are derived per read

Design Decisions:
    - Module-level singleton: single-process uvicorn, cache lost on restart
"""

import logging
import time
from typing import Any, Callable

from catalog.config import get_settings

logger = logging.getLogger(__name__)


class InMemoryListingCache:
    """Key/value cache with a per-entry time-to-live and eviction generations."""

    def __init__(
        self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._generations: dict[str, int] = {}

    def generation(self, key: str) -> int:
        """Token to read before loading a value; pass it back to set()."""
        return self._generations.get(key, 0)

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any, generation: int | None = None) -> bool:
        """Store value unless the key was invalidated since `generation` was read."""
        if generation is not None and generation != self.generation(key):
            logger.debug(f"Dropped stale fill for cache key {key}")
            return False
        self._entries[key] = (self._clock() + self._ttl, value)
        return True

    def invalidate(self, key: str) -> None:
        self._generations[key] = self.generation(key) + 1
        if self._entries.pop(key, None) is not None:
            logger.debug(f"Cache key {key} evicted")


_listing_cache: InMemoryListingCache | None = None


def get_listing_cache() -> InMemoryListingCache:
    """Process-wide cache instance (created on first use)."""
    global _listing_cache
    if _listing_cache is None:
        _listing_cache = InMemoryListingCache(get_settings().listing_cache_ttl_seconds)
    return _listing_cache
