import pytest
from app.services.cache import ReadThroughCache

class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def cache(clock):
    return ReadThroughCache(ttls={"payments": 120, "slots": 60}, clock=clock)

def make_loader(value):
    calls = []

    async def loader():
        calls.append(1)
        return value

    return loader, calls

def test_key_ignores_parameter_order():
    assert ReadThroughCache.make_key("payments", {"a": 1, "b": 2}) == ReadThroughCache.make_key("payments", {"b": 2, "a": 1})

async def test_get_or_load_hits_until_ttl_expires(cache, clock):
    loader, calls = make_loader(["p1"])

    assert await cache.get_or_load("payments", {"status": "received"}, loader) == ["p1"]
    clock.now = 119
    assert await cache.get_or_load("payments", {"status": "received"}, loader) == ["p1"]
    assert len(calls) == 1
    assert cache.stats.hits == 1
    assert cache.stats.misses == 1

    clock.now = 120
    await cache.get_or_load("payments", {"status": "received"}, loader)
    assert len(calls) == 2

async def test_per_entity_ttl(cache, clock):
    loader, calls = make_loader({})
    await cache.get_or_load("slots", {"group_id": "g1"}, loader)
    clock.now = 61
    await cache.get_or_load("slots", {"group_id": "g1"}, loader)
    assert len(calls) == 2

async def test_invalidate_matches_parameter_subset(cache):
    loader, _ = make_loader([])
    await cache.get_or_load("slots", {"group_id": "g1"}, loader)
    await cache.get_or_load("slots", {"group_id": "g2"}, loader)
    await cache.get_or_load("payments", {"group_id": "g1", "status": "pending"}, loader)

    assert cache.invalidate("slots", group_id="g1") == 1
    assert cache.get("slots", {"group_id": "g1"}) is None
    assert cache.get("slots", {"group_id": "g2"}) == []

    assert cache.invalidate("payments", group_id="g1") == 1
    assert len(cache) == 1

async def test_invalidate_whole_entity(cache):
    loader, _ = make_loader([])
    await cache.get_or_load("slots", {"group_id": "g1"}, loader)
    await cache.get_or_load("slots", {"group_id": "g2"}, loader)
    assert cache.invalidate("slots") == 2
    assert len(cache) == 0

async def test_clear_and_hit_rate(cache):
    loader, _ = make_loader([1])
    await cache.get_or_load("payments", {"page": 1}, loader)
    await cache.get_or_load("payments", {"page": 1}, loader)
    assert cache.stats.hit_rate == 0.5

    cache.clear()
    assert len(cache) == 0
    assert cache.stats.hits == 0
    assert cache.stats.misses == 0
    assert cache.stats.hit_rate == 0.0
