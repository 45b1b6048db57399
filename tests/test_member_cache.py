import asyncio

from dsecbot.member_cache import MembershipCache


def test_lookup_miss_returns_none():
    async def go():
        cache = MembershipCache()
        return await cache.lookup("123")

    assert asyncio.run(go()) is None


def test_record_then_lookup():
    async def go():
        cache = MembershipCache()
        await cache.record("123456789", "jane doe")
        return cache, await cache.lookup("123456789")

    cache, name = asyncio.run(go())
    assert name == "jane doe"
    assert "123456789" in cache
    assert len(cache) == 1


def test_record_overwrites_existing_key():
    async def go():
        cache = MembershipCache()
        await cache.record("1", "old name")
        await cache.record("1", "new name")
        return cache, await cache.lookup("1")

    cache, name = asyncio.run(go())
    assert name == "new name"
    assert len(cache) == 1


def test_concurrent_writers_and_readers():
    async def go():
        cache = MembershipCache()
        writes = [cache.record(str(i), f"name {i}") for i in range(50)]
        await asyncio.gather(*writes)
        return cache, await asyncio.gather(*(cache.lookup(str(i)) for i in range(50)))

    cache, names = asyncio.run(go())
    assert len(cache) == 50
    assert names == [f"name {i}" for i in range(50)]


def test_snapshot_helpers_do_not_wait_for_lock():
    async def go():
        cache = MembershipCache()
        await cache.record("1", "a b")
        async with cache._lock:
            # would deadlock if len()/in awaited the lock
            return len(cache), "1" in cache, "2" in cache

    assert asyncio.run(go()) == (1, True, False)
