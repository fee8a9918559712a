# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
Replay sensors — feed recorded (or scripted) samples to the watchers.

Used by `neuroaura watch --trace FILE` and by the tests. A None entry in a
noise or light script stands for a failed sampling window and raises
SamplingError when reached.
"""

import asyncio
import logging
from typing import Callable, Iterable, List, Optional, Sequence

from daemon.schemas import SensorTrace
from senses.base import MotionSample, Permission, SamplingError

logger = logging.getLogger("neuroaura.senses.replay")

SILENCE_DB = -160.0


class _ReplayAccess:
    """Availability and permission answers shared by the replay sensors."""

    def __init__(self, available: bool = True, permission: Permission = Permission.GRANTED):
        self.available = available
        self.permission = permission
        self.permission_requests = 0

    async def is_available(self) -> bool:
        return self.available

    async def request_permission(self) -> Permission:
        self.permission_requests += 1
        return self.permission


class _ReplaySubscription:
    def __init__(self, sensor: "ReplayMotionSensor", listener):
        self._sensor = sensor
        self.listener = listener
        self.task: Optional[asyncio.Task] = None
        self.removed = False

    def remove(self) -> None:
        if self.removed:
            return
        self.removed = True
        if self.task is not None and not self.task.done():
            self.task.cancel()
        self._sensor._subscriptions.remove(self)


class ReplayMotionSensor(_ReplayAccess):
    """
    Push-style accelerometer that replays a list of (x, y, z) samples.

    With autoplay, subscribing starts a task that delivers one sample per
    interval_ms on the running loop. Without it, tests call push().
    """

    def __init__(
        self,
        samples: Iterable[Sequence[float]] = (),
        autoplay: bool = True,
        available: bool = True,
        permission: Permission = Permission.GRANTED,
    ):
        super().__init__(available, permission)
        self.samples: List[MotionSample] = [MotionSample(*s) for s in samples]
        self.autoplay = autoplay
        self.interval_ms: Optional[int] = None
        self.delivered = 0
        self._subscriptions: List[_ReplaySubscription] = []

    @property
    def exhausted(self) -> bool:
        return self.delivered >= len(self.samples)

    @property
    def listener_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, listener: Callable[[MotionSample], None], interval_ms: int) -> _ReplaySubscription:
        self.interval_ms = interval_ms
        sub = _ReplaySubscription(self, listener)
        self._subscriptions.append(sub)
        if self.autoplay and self.samples:
            sub.task = asyncio.get_running_loop().create_task(self._play(sub))
        return sub

    def push(self, sample: Sequence[float]) -> None:
        """Deliver one sample to every listener right now."""
        reading = MotionSample(*sample)
        for sub in list(self._subscriptions):
            sub.listener(reading)

    async def _play(self, sub: _ReplaySubscription) -> None:
        interval = (self.interval_ms or 0) / 1000
        while not self.exhausted and not sub.removed:
            sample = self.samples[self.delivered]
            self.delivered += 1
            sub.listener(sample)
            await asyncio.sleep(interval)
        logger.debug("Motion replay finished after %d samples", self.delivered)


class ReplaySoundMeter(_ReplayAccess):
    """Returns scripted peak levels, one per measure_peak() call."""

    def __init__(
        self,
        peaks: Iterable[Optional[float]] = (),
        realtime: bool = False,
        available: bool = True,
        permission: Permission = Permission.GRANTED,
    ):
        super().__init__(available, permission)
        self.peaks: List[Optional[float]] = list(peaks)
        self.realtime = realtime
        self.windows = 0

    @property
    def exhausted(self) -> bool:
        return self.windows >= len(self.peaks)

    async def measure_peak(self, window_seconds: float) -> float:
        await asyncio.sleep(window_seconds if self.realtime else 0)
        if self.exhausted:
            self.windows += 1
            return SILENCE_DB
        peak = self.peaks[self.windows]
        self.windows += 1
        if peak is None:
            raise SamplingError(f"recording window {self.windows} failed")
        return peak


class ReplayLightSensor(_ReplayAccess):
    """Returns scripted brightness levels, one per read_level() call."""

    def __init__(
        self,
        levels: Iterable[Optional[float]] = (),
        available: bool = True,
        permission: Permission = Permission.GRANTED,
    ):
        super().__init__(available, permission)
        self.levels: List[Optional[float]] = list(levels)
        self.reads = 0

    @property
    def exhausted(self) -> bool:
        return self.reads >= len(self.levels)

    async def read_level(self) -> float:
        if self.exhausted:
            self.reads += 1
            return 0.0
        level = self.levels[self.reads]
        self.reads += 1
        if level is None:
            raise SamplingError(f"brightness read {self.reads} failed")
        return level


def sensors_from_trace(trace: SensorTrace, realtime: bool = True):
    """Build (motion, sound, light) replay sensors from a recorded trace."""
    return (
        ReplayMotionSensor(trace.motion, autoplay=True),
        ReplaySoundMeter(trace.noise, realtime=realtime),
        ReplayLightSensor(trace.light),
    )
