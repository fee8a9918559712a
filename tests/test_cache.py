# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""View cache — TTL, invalidation, store-driven invalidation."""

import threading

import pytest

from daemon.cache import VIEW_INVALIDATION, VIEW_TTLS, ViewCache, ViewKeys, wire_view_invalidation
from daemon.events import Events


@pytest.fixture
def cache():
    return ViewCache()


class TestBasicOps:

    def test_set_and_get(self, cache):
        cache.set("key1", "value1", ttl=10.0)
        assert cache.get("key1") == "value1"

    def test_get_miss_returns_none(self, cache):
        assert cache.get("nonexistent") is None

    def test_ttl_expiry(self, clock):
        cache = ViewCache(clock=clock)
        cache.set("short", "data", ttl=5)
        clock.advance(5)
        assert cache.get("short") == "data"
        clock.advance(0.1)
        assert cache.get("short") is None

    def test_none_result_is_cached(self, cache):
        calls = []
        cache.get_or_compute("empty", lambda: calls.append(1), ttl=10)
        cache.get_or_compute("empty", lambda: calls.append(1), ttl=10)
        assert calls == [1]

    def test_invalidate(self, cache):
        cache.set("a", 1, ttl=10.0)
        cache.set("b", 2, ttl=10.0)
        assert cache.invalidate("a", "missing") == 1
        assert cache.get("a") is None
        assert cache.get("b") == 2

    def test_clear(self, cache):
        cache.set("a", 1, ttl=10.0)
        cache.clear()
        assert cache.stats()["entries"] == 0


class TestGetOrCompute:

    def test_computes_once(self, cache):
        calls = []

        def compute():
            calls.append(1)
            return {"total": 3}

        assert cache.get_or_compute(ViewKeys.OVERVIEW, compute) == {"total": 3}
        assert cache.get_or_compute(ViewKeys.OVERVIEW, compute) == {"total": 3}
        assert len(calls) == 1

    def test_invalidated_during_compute_is_not_stored(self, cache):
        def compute():
            cache.invalidate(ViewKeys.OVERVIEW)
            return {"total": 0}

        assert cache.get_or_compute(ViewKeys.OVERVIEW, compute) == {"total": 0}
        assert cache.get(ViewKeys.OVERVIEW) is None
        assert cache.get_or_compute(ViewKeys.OVERVIEW, lambda: {"total": 1}) == {"total": 1}
        assert cache.get_or_compute(ViewKeys.OVERVIEW, lambda: {"total": 2}) == {"total": 1}

    def test_cleared_during_compute_is_not_stored(self, cache):
        def compute():
            cache.clear()
            return "stale"

        cache.get_or_compute("x", compute, ttl=10)
        assert cache.get_or_compute("x", lambda: "fresh", ttl=10) == "fresh"

    def test_other_keys_unaffected(self, cache):
        def compute():
            cache.invalidate(ViewKeys.RISK)
            return "overview"

        cache.get_or_compute(ViewKeys.OVERVIEW, compute)
        assert cache.get(ViewKeys.OVERVIEW) == "overview"

    def test_every_view_has_ttl(self):
        for key in (ViewKeys.OVERVIEW, ViewKeys.TIMELINE, ViewKeys.CALENDAR,
                    ViewKeys.RISK, ViewKeys.ALERT_SUMMARY):
            assert VIEW_TTLS[key] > 0

    def test_stats(self, cache):
        cache.get_or_compute("x", lambda: 1, ttl=10)
        cache.get("x")
        stats = cache.stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5


class TestStoreInvalidation:

    def test_check_in_drops_mood_views(self, cache, bus, store):
        assert wire_view_invalidation(cache, bus) == len(VIEW_INVALIDATION)
        for key in (ViewKeys.OVERVIEW, ViewKeys.RISK, ViewKeys.ALERT_SUMMARY):
            cache.set(key, {"cached": True}, ttl=60)

        store.add_check_in("calm")
        assert cache.get(ViewKeys.OVERVIEW) is None
        assert cache.get(ViewKeys.RISK) is None
        assert cache.get(ViewKeys.ALERT_SUMMARY) == {"cached": True}

    def test_alert_drops_summary(self, cache, bus, store):
        wire_view_invalidation(cache, bus)
        cache.set(ViewKeys.ALERT_SUMMARY, {"cached": True}, ttl=60)
        cache.set(ViewKeys.OVERVIEW, {"cached": True}, ttl=60)
        store.log_alert_event("noise", "loud")
        assert cache.get(ViewKeys.ALERT_SUMMARY) is None
        assert cache.get(ViewKeys.OVERVIEW) == {"cached": True}

    def test_mapping_covers_store_events(self):
        assert set(VIEW_INVALIDATION) == {Events.CHECKIN_ADDED, Events.ALERT_LOGGED}


class TestThreadSafety:

    def test_concurrent_set_get(self, cache):
        errors = []

        def worker(i):
            try:
                for j in range(100):
                    cache.set(f"k{i}", j, ttl=10)
                    cache.get(f"k{i}")
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert errors == []
        assert cache.stats()["entries"] == 8
