# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
NeuroAura Session — everything that lives for one app session.

    async with Session(sensors=..., dispatcher=...) as session:
        session.store.add_check_in("calm", ["Slept well"])
        ...

Construction builds the bus, store, view cache and the three watchers.
start() launches every enabled watcher as its own task on the running
loop; stop() cancels them, drops pending notifications and leaves the store
readable. Nothing outlives the Session object.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from daemon import insights
from daemon.cache import ViewCache, ViewKeys
from daemon.events import EventBus, Events
from daemon.reactive import setup_reactive_processors
from daemon.schemas import WatcherSettings
from daemon.store import EventStore
from interface.notify import NotificationDispatcher
from senses.ambient import BacklightSensor
from senses.base import UnsupportedSensor
from watcher.base import SensorWatcher
from watcher.config import load_settings
from watcher.light import LightWatcher
from watcher.movement import MovementWatcher
from watcher.noise import NoiseWatcher

logger = logging.getLogger("neuroaura.session")


@dataclass
class SensorSuite:
    """One adapter per physical signal."""
    motion: Any
    sound: Any
    light: Any


def default_sensors() -> SensorSuite:
    """What a desktop host has: no accelerometer or meter, maybe a backlight."""
    return SensorSuite(
        motion=UnsupportedSensor("accelerometer"),
        sound=UnsupportedSensor("microphone"),
        light=BacklightSensor(),
    )


class Session:
    def __init__(
        self,
        settings: Optional[WatcherSettings] = None,
        sensors: Optional[SensorSuite] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        haptics: Optional[Callable] = None,
        clock: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings if settings is not None else load_settings()
        self.bus = EventBus()
        self.store = EventStore(self.bus, clock=clock)
        self.cache = ViewCache(clock=monotonic)
        setup_reactive_processors(self.bus, self.cache)

        self.dispatcher = dispatcher if dispatcher is not None else NotificationDispatcher()
        self.dispatcher.bus = self.bus

        sensors = sensors if sensors is not None else default_sensors()
        self.watchers: Dict[str, SensorWatcher] = {
            "movement": MovementWatcher(
                self.store, self.dispatcher, sensors.motion,
                self.settings.movement, haptics=haptics, clock=monotonic,
            ),
            "noise": NoiseWatcher(
                self.store, self.dispatcher, sensors.sound,
                self.settings.noise, clock=monotonic,
            ),
            "light": LightWatcher(
                self.store, self.dispatcher, sensors.light,
                self.settings.light, clock=monotonic,
            ),
        }
        self.started_at: Optional[str] = None
        self.running = False

    def _enabled(self, kind: str) -> bool:
        return getattr(self.settings, kind).enabled

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        if self.running:
            return
        self.running = True
        self.started_at = datetime.now().isoformat()
        started = []
        for kind, watcher in self.watchers.items():
            if self._enabled(kind):
                watcher.start()
                started.append(kind)
            else:
                logger.info("%s watcher disabled in settings", kind)
        logger.info("Session started, watchers: %s", ", ".join(started) or "none")
        await self.bus.emit_async(Events.SESSION_STARTED, {"watchers": started}, source="session")

    async def stop(self) -> None:
        if not self.running:
            return
        self.running = False
        await asyncio.gather(*(w.stop() for w in self.watchers.values()))
        dropped = self.dispatcher.cancel_pending()
        stats = self.store.stats()
        logger.info("Session ended: %d check-ins, %d alerts", stats["check_ins"], stats["alerts"])
        await self.bus.emit_async(Events.SESSION_ENDED, {
            **stats, "dropped_notifications": dropped,
        }, source="session")

    async def __aenter__(self) -> "Session":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Derived views (cached until the logs change)
    # ------------------------------------------------------------------

    def overview(self) -> Dict[str, Any]:
        return self.cache.get_or_compute(
            ViewKeys.OVERVIEW, lambda: insights.weekly_overview(self.store.check_ins))

    def timeline(self) -> list:
        return self.cache.get_or_compute(
            ViewKeys.TIMELINE, lambda: insights.sensory_load_timeline(self.store.check_ins))

    def calendar(self) -> Dict[str, Any]:
        return self.cache.get_or_compute(
            ViewKeys.CALENDAR, lambda: insights.mood_calendar(self.store.check_ins))

    def risk(self) -> Dict[str, Any]:
        return self.cache.get_or_compute(
            ViewKeys.RISK, lambda: insights.risk_assessment(self.store.latest_check_in()))

    def alert_summary(self) -> Dict[str, Any]:
        return self.cache.get_or_compute(
            ViewKeys.ALERT_SUMMARY, lambda: insights.alert_summary(self.store.alerts))

    def status(self) -> Dict[str, Any]:
        return {
            "running": self.running,
            "started_at": self.started_at,
            "store": self.store.stats(),
            "watchers": {
                kind: {**w.status(), "enabled": self._enabled(kind)}
                for kind, w in self.watchers.items()
            },
            "notifications": {
                "delivered": self.dispatcher.delivered,
                "failed": self.dispatcher.failed,
                "pending": len(self.dispatcher.pending),
            },
            "events": self.bus.stats()["total_emitted"],
            "cache": self.cache.stats(),
        }
