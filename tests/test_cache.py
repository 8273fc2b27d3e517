"""Tests for the TTL response cache."""

import pytest

from cache import DETAIL, EPISODE, ONGOING, SEARCH, ResponseCache, cache_key


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestResponseCache:
    def setup_method(self) -> None:
        self.clock = FakeClock()
        self.cache = ResponseCache(ttl=86400, clock=self.clock)

    def test_value_is_returned_before_ttl(self) -> None:
        value = {"ongoing": [1, 2, 3]}
        self.cache.set("ongoing:1", value)

        self.clock.advance(86399.9)

        assert self.cache.get("ongoing:1") is value
        assert self.cache.has("ongoing:1")

    def test_value_is_absent_after_ttl(self) -> None:
        self.cache.set("ongoing:1", ["a"])

        self.clock.advance(86400)

        assert self.cache.get("ongoing:1") is None
        assert not self.cache.has("ongoing:1")
        assert len(self.cache) == 0

    def test_missing_key(self) -> None:
        assert self.cache.get("detail:nothing") is None

    def test_set_overwrites_and_restarts_ttl(self) -> None:
        self.cache.set("search:naruto", ["old"])
        self.clock.advance(80000)
        self.cache.set("search:naruto", ["new"])
        self.clock.advance(80000)

        assert self.cache.get("search:naruto") == ["new"]

    def test_purge_expired_only_drops_stale_entries(self) -> None:
        self.cache.set("ongoing:1", [1])
        self.clock.advance(50000)
        self.cache.set("ongoing:2", [2])
        self.clock.advance(40000)

        removed = self.cache.purge_expired()

        assert removed == 1
        assert self.cache.get("ongoing:1") is None
        assert self.cache.get("ongoing:2") == [2]

    def test_clear(self) -> None:
        self.cache.set("ongoing:1", [1])
        self.cache.clear()
        assert len(self.cache) == 0


class TestCacheKey:
    def test_kinds_are_namespaced(self) -> None:
        keys = {cache_key(kind, "naruto") for kind in (ONGOING, SEARCH, DETAIL, EPISODE)}
        assert len(keys) == 4

    def test_distinct_params_never_collide(self) -> None:
        assert cache_key(ONGOING, 1) != cache_key(ONGOING, 11)
        assert cache_key(SEARCH, "one piece") != cache_key(SEARCH, "one-piece")

    def test_format(self) -> None:
        assert cache_key(DETAIL, "one-piece-sub-indo") == "detail:one-piece-sub-indo"

    def test_unknown_kind_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            cache_key("movies", 1)
