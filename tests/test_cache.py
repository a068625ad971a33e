"""Tests for the namespaced TTL cache."""

import pytest

from dashboard_router.cache import CacheEntry, ContextCache


class TestCacheEntry:

    def test_fresh_until_ttl(self):
        entry = CacheEntry(value="x", cached_at=1000, ttl=500)
        assert entry.is_fresh(1499)
        assert not entry.is_fresh(1500)

    def test_zero_ttl_never_expires(self):
        entry = CacheEntry(value="x", cached_at=0, ttl=0)
        assert entry.is_fresh(10 ** 12)


class TestContextCache:

    @pytest.fixture
    def cache(self, clock):
        return ContextCache(default_ttl=1000, clock=clock)

    def test_set_and_get(self, cache):
        cache.set("apps", "notes", {"count": 1})
        assert cache.get("apps", "notes") == {"count": 1}
        assert cache.get("apps", "missing", "default") == "default"
        assert cache.get("other", "notes") is None

    def test_entry_expires_at_ttl(self, cache, clock):
        cache.set("apps", "notes", "value")
        clock.advance(999)
        assert cache.get("apps", "notes") == "value"
        clock.advance(1)
        assert cache.get_entry("apps", "notes") is None
        assert cache.size("apps") == 0

    def test_per_entry_ttl(self, cache, clock):
        cache.set("apps", "short", 1, ttl=10)
        cache.set("apps", "forever", 2, ttl=0)
        clock.advance(10_000)
        assert cache.get("apps", "short") is None
        assert cache.get("apps", "forever") == 2

    def test_entry_records_timestamp(self, cache, clock):
        entry = cache.set("apps", "notes", "value")
        assert entry.cached_at == clock.now
        assert cache.get_entry("apps", "notes") is entry

    def test_invalidate_key_and_namespace(self, cache):
        cache.set("apps", "a", 1)
        cache.set("apps", "b", 2)
        cache.set("confidence", "q", 3)

        cache.invalidate("apps", "a")
        assert cache.get("apps", "a") is None
        assert cache.get("apps", "b") == 2

        cache.invalidate("apps")
        assert cache.size("apps") == 0
        assert cache.get("confidence", "q") == 3

        cache.invalidate("unknown", "key")

    def test_invalidate_all(self, cache):
        cache.set("apps", "a", 1)
        cache.set("confidence", "q", 2)
        cache.invalidate_all()
        assert cache.size() == 0

    def test_size_cap_evicts_oldest(self, clock):
        cache = ContextCache(default_ttl=0, max_entries=2, clock=clock)
        cache.set("q", "first", 1)
        clock.advance(1)
        cache.set("q", "second", 2)
        clock.advance(1)
        cache.set("q", "third", 3)

        assert cache.size("q") == 2
        assert cache.get("q", "first") is None
        assert cache.get("q", "third") == 3

    def test_size_cap_drops_expired_first(self, clock):
        cache = ContextCache(default_ttl=100, max_entries=2, clock=clock)
        cache.set("q", "old", 1)
        clock.advance(50)
        cache.set("q", "newer", 2)
        clock.advance(60)
        cache.set("q", "newest", 3)

        assert cache.get("q", "old") is None
        assert cache.get("q", "newer") == 2
        assert cache.get("q", "newest") == 3
