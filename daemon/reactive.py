# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
Reactive processors — lightweight handlers on the session bus.

Processors:
  1. view invalidation — drop cached insights when the logs change
  2. sensor check-in log — note every watcher-written check-in
  3. watcher health — surface disabled watchers and failed windows
  4. notification failures — the only trace a failed delivery leaves
"""

import logging

from daemon.cache import ViewCache, wire_view_invalidation
from daemon.events import Event, EventBus, Events

logger = logging.getLogger("neuroaura.reactive")


def setup_reactive_processors(bus: EventBus, cache: ViewCache) -> int:
    """Wire up all reactive processors on a session bus. Returns count of subscriptions."""
    count = wire_view_invalidation(cache, bus)

    # --- 2. Sensor check-in log ---
    def _on_check_in(event: Event):
        provenance = event.data.get("provenance", "manual")
        if provenance != "manual":
            logger.info("Sensor check-in (%s): %s", provenance, event.data.get("mood"))

    bus.on(Events.CHECKIN_ADDED, _on_check_in, priority=30, source="reactive.checkins")
    count += 1

    # --- 3. Watcher health ---
    def _on_watcher_disabled(event: Event):
        logger.warning("Watcher %s off for this session: %s",
                       event.data.get("kind"), event.data.get("reason"))

    def _on_sampling_failed(event: Event):
        logger.debug("Watcher %s skipped a window: %s",
                     event.data.get("kind"), event.data.get("error"))

    bus.on(Events.WATCHER_DISABLED, _on_watcher_disabled, priority=30, source="reactive.watchers")
    bus.on(Events.SAMPLING_FAILED, _on_sampling_failed, priority=30, source="reactive.watchers")
    count += 2

    # --- 4. Notification failures ---
    def _on_notification_failed(event: Event):
        logger.warning("Notification %s (%s) not delivered: %s",
                       event.data.get("id"), event.data.get("kind"), event.data.get("reason"))

    bus.on(Events.NOTIFICATION_FAILED, _on_notification_failed, priority=30, source="reactive.notify")
    count += 1

    logger.debug("Reactive processors initialized: %d subscriptions", count)
    return count
