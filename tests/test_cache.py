"""
Unit tests for the TTL cache.
"""
import pytest

from hotrod.core.cache import MISS, TTLCache


@pytest.mark.unit
class TestTTLCache:

    @pytest.mark.asyncio
    async def test_set_and_get(self, cache):
        await cache.set("a", {"x": 1}, ttl=60)
        assert await cache.get("a") == {"x": 1}

    @pytest.mark.asyncio
    async def test_miss_returns_default(self, cache):
        assert await cache.get("missing") is None
        assert await cache.get("missing", default=MISS) is MISS

    @pytest.mark.asyncio
    async def test_cached_none_is_distinguishable(self, cache):
        await cache.set("none", None)
        assert await cache.get("none", default=MISS) is None

    @pytest.mark.asyncio
    async def test_expired_entry_is_a_miss_and_evicted(self, cache, clock):
        await cache.set("k", "v", ttl=10)
        clock.advance(9)
        assert await cache.get("k") == "v"

        clock.advance(2)
        assert await cache.get("k") is None
        assert await cache.contains("k") is False

        stats = await cache.get_stats()
        assert stats["expirations"] == 1
        assert stats["size"] == 0

    @pytest.mark.asyncio
    async def test_no_ttl_never_expires(self, cache, clock):
        await cache.set("boundaries", [1, 2, 3], ttl=None)
        clock.advance(10 ** 9)
        assert await cache.get("boundaries") == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_delete_and_clear(self, cache):
        await cache.set("a", 1)
        await cache.set("b", 2)

        assert await cache.delete("a") is True
        assert await cache.delete("a") is False
        assert await cache.clear() == 1
        assert await cache.get("b") is None

    @pytest.mark.asyncio
    async def test_max_size_evicts_oldest(self, clock):
        cache = TTLCache(max_size=2, clock=clock)
        await cache.set("first", 1)
        clock.advance(1)
        await cache.set("second", 2)
        clock.advance(1)
        await cache.set("third", 3)

        assert await cache.get("first") is None
        assert await cache.get("second") == 2
        assert await cache.get("third") == 3
        assert (await cache.get_stats())["evictions"] == 1

    @pytest.mark.asyncio
    async def test_periodic_cleanup_sweeps_expired(self, clock):
        cache = TTLCache(cleanup_interval=60, clock=clock)
        await cache.set("short", 1, ttl=5)
        await cache.set("long", 2, ttl=3600)

        clock.advance(120)
        # Any read past the interval sweeps every expired entry
        await cache.get("long")

        stats = await cache.get_stats()
        assert stats["size"] == 1
        assert stats["expirations"] == 1
