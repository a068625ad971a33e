"""Namespaced in-memory TTL cache."""

import logging
import time
from typing import Any, Callable, Dict, Optional

from .models import CacheEntry

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class ContextCache:
    """
    In-memory cache keyed by (namespace, key) with per-entry TTL.

    Namespaces keep unrelated data apart, e.g. "apps" for adapter context
    and "confidence" for scorer results. Entries are evicted lazily: an
    expired entry is removed the next time it is read.
    """

    def __init__(
        self,
        default_ttl: int = 0,
        max_entries: int = 0,
        clock: Optional[Callable[[], int]] = None
    ):
        """
        Initialize the cache.

        Args:
            default_ttl: TTL in milliseconds used when set() gets none (0 = no expiration)
            max_entries: Per-namespace size cap (0 = unbounded)
            clock: Callable returning epoch milliseconds (defaults to wall clock)
        """
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._clock = clock or now_ms
        # {namespace: {key: CacheEntry}}
        self._cache: Dict[str, Dict[str, CacheEntry]] = {}

    def now(self) -> int:
        """Current time according to the cache clock."""
        return self._clock()

    def get_entry(self, namespace: str, key: str) -> Optional[CacheEntry]:
        """
        Get a fresh entry, evicting it if it has expired.

        Args:
            namespace: Cache namespace (e.g. "apps")
            key: Key within the namespace

        Returns:
            The CacheEntry if present and fresh, None otherwise
        """
        namespace_cache = self._cache.get(namespace)
        if not namespace_cache:
            return None

        entry = namespace_cache.get(key)
        if entry is None:
            return None

        if not entry.is_fresh(self.now()):
            del namespace_cache[key]
            # Clean up empty namespaces
            if not namespace_cache:
                del self._cache[namespace]
            logger.debug("Cache entry expired: %s.%s", namespace, key)
            return None

        return entry

    def get(self, namespace: str, key: str, default: Any = None) -> Any:
        """
        Get a value from the cache.

        Args:
            namespace: Cache namespace
            key: Key within the namespace
            default: Value returned when the key is missing or expired

        Returns:
            Cached value or default
        """
        entry = self.get_entry(namespace, key)
        if entry is None:
            return default
        return entry.value

    def set(self, namespace: str, key: str, value: Any, ttl: Optional[int] = None) -> CacheEntry:
        """
        Store a value stamped with the current time.

        Args:
            namespace: Cache namespace
            key: Key within the namespace
            value: Value to cache
            ttl: TTL in milliseconds (None = default_ttl, 0 = no expiration)

        Returns:
            The stored CacheEntry
        """
        namespace_cache = self._cache.setdefault(namespace, {})
        entry = CacheEntry(
            value=value,
            cached_at=self.now(),
            ttl=self.default_ttl if ttl is None else ttl,
        )
        namespace_cache[key] = entry

        if self.max_entries and len(namespace_cache) > self.max_entries:
            self._cleanup(namespace)

        return entry

    def invalidate(self, namespace: str, key: Optional[str] = None) -> None:
        """
        Invalidate (remove) a cache entry or an entire namespace.

        Args:
            namespace: Cache namespace
            key: Key within the namespace. If None, invalidates the whole namespace.
        """
        if namespace not in self._cache:
            return

        if key is None:
            del self._cache[namespace]
            return

        namespace_cache = self._cache[namespace]
        if key in namespace_cache:
            del namespace_cache[key]
            logger.debug("Cache entry invalidated: %s.%s", namespace, key)
        if not namespace_cache:
            del self._cache[namespace]

    def invalidate_all(self) -> None:
        """Invalidate all cache entries."""
        self._cache.clear()

    def size(self, namespace: Optional[str] = None) -> int:
        """Number of stored entries (fresh or not) in a namespace or overall."""
        if namespace is not None:
            return len(self._cache.get(namespace, {}))
        return sum(len(entries) for entries in self._cache.values())

    def _cleanup(self, namespace: str) -> None:
        """Drop expired entries, then the oldest ones if the namespace is still over its cap."""
        namespace_cache = self._cache.get(namespace, {})
        now = self.now()
        for key in [k for k, entry in namespace_cache.items() if not entry.is_fresh(now)]:
            del namespace_cache[key]

        overflow = len(namespace_cache) - self.max_entries
        if overflow > 0:
            oldest = sorted(namespace_cache, key=lambda k: namespace_cache[k].cached_at)[:overflow]
            for key in oldest:
                del namespace_cache[key]
