"""
[BK-T005] tests.unit.test_cache
TTLCache 단위 테스트

version: 1.0.0
created: 2026-10-15
"""

import threading

from bazaarkit.marketplace.cache import TTLCache


class TestTTLCache:  # [BK-T005.1]
    """TTLCache 기본 동작 테스트."""

    def test_put_get(self, clock):
        cache = TTLCache(ttl=10, sweep_interval=5, clock=clock)
        cache.put("a", 1)
        assert cache.get("a") == 1
        assert "a" in cache
        assert len(cache) == 1

    def test_missing_returns_default(self, clock):
        cache = TTLCache(ttl=10, sweep_interval=5, clock=clock)
        assert cache.get("x") is None
        assert cache.get("x", 42) == 42
        assert "x" not in cache

    def test_expiry(self, clock):
        cache = TTLCache(ttl=10, sweep_interval=100, clock=clock)
        cache.put("a", 1)
        clock.advance(9)
        assert cache.get("a") == 1
        clock.advance(1)
        assert cache.get("a") is None

    def test_put_refreshes_expiry(self, clock):
        cache = TTLCache(ttl=10, sweep_interval=100, clock=clock)
        cache.put("a", 1)
        clock.advance(8)
        cache.put("a", 2)
        clock.advance(8)
        assert cache.get("a") == 2

    def test_delete_and_flush(self, clock):
        cache = TTLCache(ttl=10, sweep_interval=5, clock=clock)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.delete("a")
        cache.delete("never-there")
        assert cache.get("a") is None
        assert cache.get("b") == 2
        cache.flush()
        assert len(cache) == 0

    def test_sweep(self, clock):
        cache = TTLCache(ttl=10, sweep_interval=5, clock=clock)
        cache.put("old", 1)
        clock.advance(6)
        cache.put("new", 2)
        clock.advance(5)
        assert cache.sweep() == 1
        assert cache.get("new") == 2

    def test_periodic_sweep_on_access(self, clock):
        cache = TTLCache(ttl=1, sweep_interval=5, clock=clock)
        for i in range(10):
            cache.put(i, i)
        clock.advance(6)
        cache.put("fresh", 0)
        assert len(cache._items) == 1

    def test_concurrent_puts(self):
        cache = TTLCache(ttl=60, sweep_interval=60)

        def worker(n: int) -> None:
            for i in range(100):
                cache.put((n, i), i)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(cache) == 800
