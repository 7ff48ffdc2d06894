"""
Tests for the response cache.
"""

from cache import InMemoryCache, NullCache


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_put_and_get():
    cache = InMemoryCache()
    cache.put("openf1-meetings-2024", [{"meeting_key": 1}], 60)
    assert cache.get("openf1-meetings-2024") == [{"meeting_key": 1}]
    assert len(cache) == 1


def test_miss():
    assert InMemoryCache().get("missing") is None


def test_entry_served_until_ttl_expires():
    clock = FakeClock()
    cache = InMemoryCache(clock=clock)
    cache.put("key", {"v": 1}, 86400)

    clock.now += 86399
    assert cache.get("key") == {"v": 1}

    clock.now += 1
    assert cache.get("key") is None
    assert len(cache) == 0


def test_clear():
    cache = InMemoryCache()
    cache.put("a", 1, 60)
    cache.put("b", 2, 60)
    assert cache.clear() == 2
    assert cache.get("a") is None


def test_null_cache():
    cache = NullCache()
    cache.put("a", 1, 60)
    assert cache.get("a") is None
