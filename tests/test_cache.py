"""Tests for the spec cache."""

from pcbuild_mcp.cache import TTLCache, spec_cache_key, tag_with_cache
from pcbuild_mcp.models import Category, Listing, Spec


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestSpecCacheKey:
    def test_with_id(self):
        assert spec_cache_key(Listing(title="x", id="MLA123"), Category.CPU) == "cpu:MLA123"

    def test_without_id(self):
        assert spec_cache_key(Listing(title="x"), Category.CPU) is None

    def test_category_scoped(self):
        listing = Listing(title="x", id="1")
        assert spec_cache_key(listing, Category.CPU) != spec_cache_key(listing, Category.GPU)


class TestTTLCache:
    """Expiry and LRU eviction with an injected clock."""

    def test_get_set(self):
        cache = TTLCache(ttl=60)
        cache.set("a", Spec(socket="AM4"))
        assert cache.get("a") == Spec(socket="AM4")
        assert cache.get("b") is None
        assert (cache.hits, cache.misses) == (1, 1)

    def test_expiry(self):
        clock = FakeClock()
        cache = TTLCache(ttl=60, clock=clock)
        cache.set("a", Spec(socket="AM4"))
        clock.now += 59
        assert cache.get("a") is not None
        clock.now += 1
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_lru_eviction(self):
        cache = TTLCache(ttl=60, max_size=2)
        cache.set("a", Spec(cores=1))
        cache.set("b", Spec(cores=2))
        cache.get("a")
        cache.set("c", Spec(cores=3))
        assert len(cache) == 2
        assert cache.get("b") is None
        assert cache.get("a") == Spec(cores=1)
        assert cache.get("c") == Spec(cores=3)

    def test_expired_evicted_before_lru(self):
        clock = FakeClock()
        cache = TTLCache(ttl=60, max_size=2, clock=clock)
        cache.set("old", Spec(cores=1))
        clock.now += 30
        cache.set("a", Spec(cores=2))
        cache.get("old")
        clock.now += 31
        cache.set("b", Spec(cores=3))
        assert cache.get("a") == Spec(cores=2)
        assert cache.get("b") == Spec(cores=3)

    def test_clear(self):
        cache = TTLCache(ttl=60)
        cache.set("a", Spec())
        cache.get("a")
        cache.clear()
        assert len(cache) == 0
        assert (cache.hits, cache.misses) == (0, 0)


class TestTagWithCache:
    """Extraction is memoized per category and listing id."""

    def test_hit_reuses_spec(self):
        cache = TTLCache(ttl=60)
        first = tag_with_cache(cache, Listing(title="Fuente 650W", id="p1"), Category.PSU)
        # Same id, different text: served from cache
        second = tag_with_cache(cache, Listing(title="Fuente 850W", id="p1"), Category.PSU)
        assert first.spec.psu_wattage == 650
        assert second.spec.psu_wattage == 650
        assert second.listing.title == "Fuente 850W"
        assert cache.hits == 1

    def test_category_is_part_of_key(self):
        cache = TTLCache(ttl=60)
        listing = Listing(title="AMD Ryzen 5 5600X Socket AM4", id="x")
        assert tag_with_cache(cache, listing, Category.CPU).spec.socket == "AM4"
        assert tag_with_cache(cache, listing, Category.GPU).spec.socket is None
        assert len(cache) == 2

    def test_listing_without_id_not_cached(self):
        cache = TTLCache(ttl=60)
        candidate = tag_with_cache(cache, Listing(title="Fuente 650W"), Category.PSU)
        assert candidate.spec.psu_wattage == 650
        assert len(cache) == 0
