"""
Unit tests for the render cache.
"""
import pytest

from latest_articles.core.cache import PERMANENT, RenderCache


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock(1000.0)


@pytest.fixture
def cache(tmp_path, clock):
    return RenderCache(str(tmp_path / "cache" / "render.db"), clock=clock)


class TestRenderCache:

    def test_miss(self, cache):
        assert cache.get("missing") is None

    def test_hit_until_max_age(self, cache, clock):
        cache.set("block", "<ul></ul>", 60)

        clock.now += 59.9
        assert cache.get("block") == "<ul></ul>"

        clock.now += 0.1
        assert cache.get("block") is None

    def test_expired_entry_is_removed(self, cache, clock):
        cache.set("block", "old", 10)
        clock.now += 11
        assert cache.get("block") is None

        clock.now -= 11
        assert cache.get("block") is None

    def test_zero_max_age_not_stored(self, cache):
        cache.set("block", "data", 0)
        assert cache.get("block") is None

    def test_permanent_never_expires(self, cache, clock):
        cache.set("block", "forever", PERMANENT)
        clock.now += 10 ** 9
        assert cache.get("block") == "forever"

    def test_invalid_max_age(self, cache):
        with pytest.raises(ValueError):
            cache.set("block", "data", -5)

    def test_set_replaces(self, cache):
        cache.set("block", "first", 60)
        cache.set("block", "second", 60)
        assert cache.get("block") == "second"

    def test_delete_and_clear(self, cache):
        cache.set("a", "1", 60)
        cache.set("b", "2", 60)

        cache.delete("a")
        assert cache.get("a") is None
        assert cache.get("b") == "2"

        cache.clear()
        assert cache.get("b") is None
