"""Data models for cache storage."""

from dataclasses import dataclass
from typing import Any


@dataclass
class CacheEntry:
    """A cached value and the millisecond timestamp it was stored at."""
    value: Any
    cached_at: int
    ttl: int = 0  # milliseconds, 0 = no expiration

    def age(self, now: int) -> int:
        """Age of the entry in milliseconds."""
        return now - self.cached_at

    def is_fresh(self, now: int) -> bool:
        """An entry stays fresh while its age is strictly below its TTL."""
        if self.ttl <= 0:
            return True
        return self.age(now) < self.ttl
