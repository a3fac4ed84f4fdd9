from erp_console import config
from erp_console.lib.caches import DiskCache, TTLCache, dashboard_cache


class Loader:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return {"load": self.calls}


def test_reads_within_ttl_return_same_payload(clock):
    cache = TTLCache(ttl=300, clock=clock)
    loader = Loader()
    first = cache.get_or_load("metrics", loader)

    clock.advance(299.999)
    second = cache.get_or_load("metrics", loader)

    assert second is first
    assert loader.calls == 1


def test_read_after_ttl_fetches_once(clock):
    cache = TTLCache(ttl=300, clock=clock)
    loader = Loader()
    cache.get_or_load("metrics", loader)

    clock.advance(300.001)
    assert cache.get("metrics") is None
    refreshed = cache.get_or_load("metrics", loader)
    again = cache.get_or_load("metrics", loader)

    assert refreshed == {"load": 2}
    assert again is refreshed
    assert loader.calls == 2


def test_write_replaces_payload(clock):
    cache = TTLCache(clock=clock)
    cache.set("k", {"a": 1})
    cache.set("k", {"b": 2})
    assert cache.get("k") == {"b": 2}


def test_write_restarts_freshness_window(clock):
    cache = TTLCache(ttl=10, clock=clock)
    cache.set("k", "old")
    clock.advance(8)
    cache.set("k", "new")
    clock.advance(8)
    assert cache.get("k") == "new"


def test_invalidate(clock):
    cache = TTLCache(clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.invalidate("a")
    assert cache.get("a") is None
    assert cache.get("b") == 2
    cache.invalidate()
    assert cache.get("b") is None


def test_dashboard_cache_is_shared():
    assert dashboard_cache() is dashboard_cache()
    assert dashboard_cache().ttl == config.METRICS_TTL


def test_disk_cache_loads_once(tmp_path):
    cache = DiskCache(tmp_path / "ref")
    loader = Loader()
    try:
        first = cache.get_or_load("brands", loader, expire=60)
        second = cache.get_or_load("brands", loader, expire=60)
        assert first.value == second.value == {"load": 1}
        assert loader.calls == 1

        cache.delete("brands")
        assert cache.get_or_load("brands", loader).value == {"load": 2}
        cache.clear()
        assert cache.get_or_load("brands", loader).value == {"load": 3}
    finally:
        cache.close()
