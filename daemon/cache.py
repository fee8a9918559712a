# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
View cache — derived insights kept hot between store changes.

TTL-based in-memory cache with event-driven invalidation:
  - dict {key: (value, expires_at)} + threading.Lock
  - lazy population (compute on first miss)
  - store events drop the views they affect (see VIEW_INVALIDATION)
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from daemon.events import Event, EventBus, Events

logger = logging.getLogger("neuroaura.cache")

# (value, expires_at) on the cache clock
CacheEntry = Tuple[Any, float]


class ViewKeys:
    OVERVIEW = "overview"
    TIMELINE = "timeline"
    CALENDAR = "calendar"
    RISK = "risk"
    ALERT_SUMMARY = "alert_summary"


# TTLs in seconds. Day-based views also expire so they roll over at midnight.
VIEW_TTLS: Dict[str, float] = {
    ViewKeys.OVERVIEW: 300.0,
    ViewKeys.TIMELINE: 300.0,
    ViewKeys.CALENDAR: 900.0,
    ViewKeys.RISK: 300.0,
    ViewKeys.ALERT_SUMMARY: 60.0,
}

VIEW_INVALIDATION: Dict[str, List[str]] = {
    Events.CHECKIN_ADDED: [ViewKeys.OVERVIEW, ViewKeys.TIMELINE, ViewKeys.CALENDAR, ViewKeys.RISK],
    Events.ALERT_LOGGED: [ViewKeys.ALERT_SUMMARY],
}


class ViewCache:
    """Thread-safe TTL cache keyed by view name."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._invalidations = 0
        # Bumped on every invalidation; a compute that straddles one is not stored
        self._generations: Dict[str, int] = {}
        self._epoch = 0

    def _generation(self, key: str) -> Tuple[int, int]:
        return self._epoch, self._generations.get(key, 0)

    def _lookup(self, key: str) -> Tuple[bool, Any, Tuple[int, int]]:
        with self._lock:
            generation = self._generation(key)
            entry = self._entries.get(key)
            if entry is not None and self._clock() > entry[1]:
                del self._entries[key]
                entry = None
            if entry is None:
                self._misses += 1
                return False, None, generation
            self._hits += 1
            return True, entry[0], generation

    def get(self, key: str) -> Optional[Any]:
        """Cached value, or None when missing or expired."""
        return self._lookup(key)[1]

    def set(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)

    def invalidate(self, *keys: str) -> int:
        """Drop views. Returns how many were actually cached."""
        with self._lock:
            for key in keys:
                self._generations[key] = self._generations.get(key, 0) + 1
            removed = sum(1 for key in keys if self._entries.pop(key, None) is not None)
            self._invalidations += removed
        if removed:
            logger.debug("Views invalidated: %s (%d removed)", keys, removed)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._epoch += 1

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            lookups = self._hits + self._misses
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / lookups, 3) if lookups else 0.0,
                "invalidations": self._invalidations,
            }

    def get_or_compute(self, key: str, compute_fn: Callable[[], Any], ttl: Optional[float] = None) -> Any:
        """
        Cached view, computed and stored on a miss. A None result is cached too.

        If the view is invalidated while it is being computed, the result is
        returned but not stored, so the next call recomputes.
        """
        hit, value, generation = self._lookup(key)
        if hit:
            return value
        # Compute outside the lock
        value = compute_fn()
        ttl = ttl if ttl is not None else VIEW_TTLS.get(key, 60.0)
        with self._lock:
            if self._generation(key) == generation:
                self._entries[key] = (value, self._clock() + ttl)
            else:
                logger.debug("View %s changed while computing, not cached", key)
        return value


def wire_view_invalidation(cache: ViewCache, bus: EventBus) -> int:
    """Subscribe the cache to store events. Returns the number of subscriptions."""

    def _on_store_change(event: Event):
        cache.invalidate(*VIEW_INVALIDATION.get(event.type, []))

    for event_type in VIEW_INVALIDATION:
        bus.on(event_type, _on_store_change, priority=100, source="cache")
    return len(VIEW_INVALIDATION)
