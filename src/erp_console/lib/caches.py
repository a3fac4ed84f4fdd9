"""
Caching utilities with TTL support.

Two stores are provided:

- TTLCache: an in-memory store with an injectable clock and TTL. The
  dashboard metrics payload lives in the process-wide instance returned by
  dashboard_cache(), so it survives navigating away from the page and back.
- DiskCache: a diskcache-backed store for slow-changing reference data
  (brands, categories, sub-categories) shared across server workers.
"""

import functools
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Hashable, TypeVar

import diskcache

from erp_console import config
from erp_console.lib import logs, paths

LOG = logs.logger(__file__)

T = TypeVar("T")

DEFAULT_TTL = 300


@dataclass
class CacheEntry:
    """
    Wrapper around a cached value.

    Attributes:
        value: The cached value.
        timestamp: Clock reading taken when the value was written.
    """

    value: Any
    timestamp: float = 0.0


class TTLCache:
    """
    In-memory cache where every key holds one payload and its write time.

    Writes replace the previous payload outright. Reads return the payload
    only while ``clock() - timestamp < ttl``. There is no de-duplication of
    concurrent loads: two callers that both miss will both call the loader.

    Attributes:
        ttl: Freshness window in seconds.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the cache.

        Args:
            ttl: Freshness window in seconds.
            clock: Monotonic time source, injectable for tests.
        """
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry] = {}

    def get(self, key: Hashable) -> Any | None:
        """Return the fresh payload for ``key`` or None when absent or stale."""
        entry = self._entries.get(key)
        if entry is None or entry.value is None:
            return None
        if self._clock() - entry.timestamp < self.ttl:
            return entry.value
        return None

    def set(self, key: Hashable, value: Any) -> None:
        """Store ``value`` under ``key`` stamped with the current time."""
        self._entries[key] = CacheEntry(value=value, timestamp=self._clock())

    def invalidate(self, key: Hashable | None = None) -> None:
        """Drop one key, or every key when ``key`` is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def get_or_load(self, key: Hashable, loader: Callable[[], T]) -> T:
        """
        Return the fresh payload for ``key`` or load and store a new one.

        Args:
            key: Cache key.
            loader: Called with no arguments on a miss.

        Returns:
            The cached or freshly loaded payload.
        """
        cached = self.get(key)
        if cached is not None:
            return cached
        LOG.debug("TTL cache miss for %s", key)
        value = loader()
        self.set(key, value)
        return value


@functools.cache
def dashboard_cache() -> TTLCache:
    """Return the process-wide cache holding the dashboard metrics payload."""
    return TTLCache(ttl=config.METRICS_TTL)


class DiskCache:
    """
    Disk-based cache with TTL support.

    Stores values in a directory on disk using the diskcache library.
    Thread-safe and process-safe.

    Attributes:
        cache_dir: Path to the cache directory.
    """

    def __init__(self, cache_dir: str | Path) -> None:
        """
        Initialize the disk cache.

        Args:
            cache_dir: Directory path for storing cache files.
                       Created if it doesn't exist.
        """
        self.cache_dir = Path(cache_dir)
        self._cache = diskcache.Cache(str(self.cache_dir))

    def get_or_load(
        self,
        key: str,
        loader: Callable[[], T],
        expire: int | None = None,
    ) -> CacheEntry:
        """
        Get a value from cache or load it using the provided function.

        Args:
            key: Cache key string.
            loader: Function to call if cache miss (no arguments).
            expire: TTL in seconds. None means no expiration.

        Returns:
            CacheEntry containing the value.
        """
        cached = self._cache.get(key, default=None)
        if cached is not None:
            return CacheEntry(value=cached)

        value = loader()
        self._cache.set(key, value, expire=expire)
        return CacheEntry(value=value)

    def delete(self, key: str) -> None:
        """Delete a key from cache."""
        self._cache.delete(key)

    def clear(self) -> None:
        """Clear all entries from the cache."""
        self._cache.clear()

    def close(self) -> None:
        """Close the cache and release resources."""
        self._cache.close()


@functools.cache
def reference_cache() -> DiskCache:
    """Return the shared disk cache for reference lists."""
    return DiskCache(paths.cache_dir(config.CACHE_DIR) / "reference")
