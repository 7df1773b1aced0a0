import pytest

from impostofacil.caching.ttl_cache import TTLCache


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_entries_expire_at_ttl() -> None:
    clock = Clock()
    cache = TTLCache(10, clock=clock)
    cache.set("a", 1)

    clock.now = 9.9
    assert cache.get("a") == 1
    clock.now = 10
    assert cache.get("a") is None
    assert len(cache) == 0


def test_per_entry_ttl_and_no_default_ttl() -> None:
    clock = Clock()
    cache = TTLCache(clock=clock)
    cache.set("forever", "x")
    cache.set("short", "y", ttl_seconds=1)

    clock.now = 1000
    assert "forever" in cache
    assert "short" not in cache


def test_max_entries_drops_oldest() -> None:
    cache = TTLCache(max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 3)
    cache.set("c", 4)

    assert cache.get("b") is None
    assert cache.get("a") == 3
    assert cache.get("c") == 4


def test_delete_clear_and_purge() -> None:
    clock = Clock()
    cache = TTLCache(5, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2, ttl_seconds=50)

    assert cache.delete("a") is True
    assert cache.delete("a") is False
    clock.now = 60
    cache.set("c", 3)
    assert cache.purge_expired() == 1
    assert len(cache) == 1
    cache.clear()
    assert len(cache) == 0


def test_falsy_values_are_cached() -> None:
    cache = TTLCache()
    cache.set("zero", 0)

    assert "zero" in cache
    assert cache.get("zero", "missing") == 0


def test_rejects_non_positive_ttl() -> None:
    with pytest.raises(ValueError):
        TTLCache(0)


def test_len_ignores_expired_entries() -> None:
    clock = Clock()
    cache = TTLCache(10, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2, ttl_seconds=30)

    clock.now = 10
    assert len(cache) == 1
    assert cache.purge_expired() == 0

    clock.now = 30
    assert len(cache) == 0
