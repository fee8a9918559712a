# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
Sensor watcher — one sensor, one threshold, one cooldown.

States:
  IDLE          not started, stopped, or disabled for the session
                (sensor unavailable or permission denied; never retried)
  WATCHING      sampling
  COOLING_DOWN  sampling, but a trigger fired less than `cooldown` ago

On trigger, in order: cue (movement only), check-in, alert, notification.
The check-in and alert are written before anything that can fail; a failed
notification never takes them back.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from daemon.events import Events
from daemon.schemas import AlertEvent, CheckIn, sensor_provenance
from daemon.store import EventStore
from interface.notify import NotificationDispatcher
from senses.base import PermissionDenied, SensorUnavailable, ensure_access
from watcher.config import STOP_GRACE_SECONDS
from watcher.cooldown import CooldownGate, Threshold
from watcher.ticker import CancelToken


class WatcherState(str, Enum):
    IDLE = "idle"
    WATCHING = "watching"
    COOLING_DOWN = "cooling_down"


@dataclass(frozen=True)
class Trigger:
    """What one trigger wrote."""
    kind: str
    value: float
    check_in: CheckIn
    alert: AlertEvent
    notified: bool


class SensorWatcher:
    """Base for the movement, noise and light watchers."""

    kind: str = ""
    sensor_name: str = "sensor"
    mood: str = "overwhelmed"
    symptoms: Tuple[str, ...] = ()
    alert_message: str = ""

    def __init__(
        self,
        store: EventStore,
        dispatcher: NotificationDispatcher,
        sensor: Any,
        threshold: Threshold,
        cooldown_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.sensor = sensor
        self.threshold = threshold
        self.gate = CooldownGate(cooldown_seconds)
        self._clock = clock
        self.logger = logging.getLogger(f"neuroaura.watcher.{self.kind}")

        self._token: Optional[CancelToken] = None
        self._task: Optional[asyncio.Task] = None
        self._active = False
        self.disabled_reason: Optional[str] = None

        # Ephemeral debug values, never written to the store
        self.last_value: Optional[float] = None
        self.samples = 0
        self.triggers = 0
        self.errors = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> WatcherState:
        if not self._active:
            return WatcherState.IDLE
        if self.gate.cooling(self._clock()):
            return WatcherState.COOLING_DOWN
        return WatcherState.WATCHING

    @property
    def disabled(self) -> bool:
        return self.disabled_reason is not None

    def status(self) -> Dict[str, Any]:
        now = self._clock()
        return {
            "kind": self.kind,
            "state": self.state.value,
            "disabled_reason": self.disabled_reason,
            "threshold": self.threshold.limit,
            "cooldown_seconds": self.gate.seconds,
            "cooldown_remaining": round(self.gate.remaining(now), 1),
            "last_value": self.last_value,
            "samples": self.samples,
            "triggers": self.triggers,
            "errors": self.errors,
        }

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def evaluate(self, value: float, now: Optional[float] = None) -> Optional[Trigger]:
        """Threshold test + cooldown gate for one sample. Fires at most once per window."""
        now = self._clock() if now is None else now
        self.last_value = value
        self.samples += 1

        if not self.threshold.exceeded(value):
            return None
        if not self.gate.try_acquire(now):
            self.logger.debug("%s %.2f over threshold, cooling down (%.0fs left)",
                              self.kind, value, self.gate.remaining(now))
            return None
        return self._trigger(value)

    def _trigger(self, value: float) -> Trigger:
        self.triggers += 1
        self.logger.info("%s trigger at %.2f (threshold %.2f)", self.kind, value, self.threshold.limit)

        self._cue()
        check_in = self.store.add_check_in(
            self.mood, self.symptoms, provenance=sensor_provenance(self.kind),
        )
        alert = self.store.log_alert_event(self.kind, self.alert_message)
        notified = self._notify_safely()

        self.store.bus.emit(Events.WATCHER_TRIGGERED, {
            "kind": self.kind,
            "value": value,
            "check_in": check_in.id,
            "alert": alert.id,
            "notified": notified,
        }, source=f"watcher.{self.kind}")
        return Trigger(self.kind, value, check_in, alert, notified)

    def _cue(self) -> None:
        """Immediate local cue before anything is written. Only movement has one."""

    def _notify(self) -> bool:
        raise NotImplementedError

    def _notify_safely(self) -> bool:
        try:
            return self._notify()
        except Exception as e:
            self.logger.warning("%s notification failed: %s", self.kind, e)
            return False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _disable(self, reason: str) -> None:
        self.disabled_reason = reason
        self._active = False
        self.logger.info("%s watcher disabled for this session: %s", self.kind, reason)
        self.store.bus.emit(Events.WATCHER_DISABLED, {
            "kind": self.kind, "reason": reason,
        }, source=f"watcher.{self.kind}")

    async def run(self, token: CancelToken) -> None:
        """Check access, then watch until the token is cancelled."""
        if self.disabled:
            return
        try:
            await ensure_access(self.sensor, self.sensor_name)
        except (SensorUnavailable, PermissionDenied) as e:
            self._disable(str(e))
            return

        self._active = True
        self.store.bus.emit(Events.WATCHER_STARTED, {"kind": self.kind},
                            source=f"watcher.{self.kind}")
        try:
            await self._watch(token)
        finally:
            self._active = False
            self.store.bus.emit(Events.WATCHER_STOPPED, {"kind": self.kind},
                                source=f"watcher.{self.kind}")

    async def _watch(self, token: CancelToken) -> None:
        raise NotImplementedError

    def start(self) -> asyncio.Task:
        """Launch the watch loop on the running event loop."""
        if self._task is not None and not self._task.done():
            return self._task
        self._token = CancelToken()
        self._task = asyncio.get_running_loop().create_task(
            self.run(self._token), name=f"neuroaura-watcher-{self.kind}",
        )
        return self._task

    async def stop(self, grace: float = STOP_GRACE_SECONDS) -> None:
        """Cancel the loop. An in-flight sampling window gets `grace` seconds to finish."""
        if self._token is not None:
            self._token.cancel()
        task, self._task = self._task, None
        if task is None:
            return
        if task.done():
            self._reap(task)
            return
        done, _ = await asyncio.wait({task}, timeout=grace)
        if not done:
            self.logger.debug("%s sampling window abandoned on stop", self.kind)
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        else:
            self._reap(task)

    def _reap(self, task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            self.logger.error("%s watcher loop crashed: %r", self.kind, task.exception())


class PollingWatcher(SensorWatcher):
    """A watcher that pulls one reading per cycle, then idles."""

    def __init__(self, *args, idle_gap_seconds: float = 30.0, **kwargs):
        super().__init__(*args, **kwargs)
        self.idle_gap_seconds = idle_gap_seconds

    async def _read(self) -> float:
        raise NotImplementedError

    async def sample_once(self) -> Optional[Trigger]:
        """One sampling cycle. A failed read is logged and skipped; losing the sensor disables the watcher."""
        try:
            value = await self._read()
        except (PermissionDenied, SensorUnavailable) as e:
            self._disable(str(e))
            return None
        except Exception as e:
            self.errors += 1
            self.logger.warning("%s sampling failed: %s", self.kind, e)
            self.store.bus.emit(Events.SAMPLING_FAILED, {
                "kind": self.kind, "error": str(e),
            }, source=f"watcher.{self.kind}")
            return None
        return self.evaluate(value)

    async def _watch(self, token: CancelToken) -> None:
        while not token.cancelled and not self.disabled:
            await self.sample_once()
            if not await token.sleep(self.idle_gap_seconds):
                break

