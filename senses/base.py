# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
Sensor adapter contracts.

Three physical signals, one adapter each:
  - MotionSensor: push-style accelerometer listener
  - SoundMeter:   pull-style peak metering over a recording window
  - LightSensor:  pull-style instantaneous brightness ratio

Every adapter answers is_available() and request_permission() before the
watcher samples it. Platforms without the sensor report unavailable.
"""

import logging
from enum import Enum
from typing import Callable, NamedTuple, Optional, Protocol

logger = logging.getLogger("neuroaura.senses")


class SensorError(Exception):
    """Base class for sensor failures."""


class SensorUnavailable(SensorError):
    """The platform has no such sensor (or it can't be opened)."""


class PermissionDenied(SensorError):
    """The user refused access to the sensor."""


class SamplingError(SensorError):
    """One sampling window failed. Transient: the next window may work."""


class Permission(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


class MotionSample(NamedTuple):
    """One accelerometer reading, in g per axis."""
    x: float
    y: float
    z: float


class Subscription(Protocol):
    def remove(self) -> None: ...


class MotionSensor(Protocol):
    async def is_available(self) -> bool: ...

    async def request_permission(self) -> Permission: ...

    def subscribe(
        self, listener: Callable[[MotionSample], None], interval_ms: int
    ) -> Subscription: ...


class SoundMeter(Protocol):
    async def is_available(self) -> bool: ...

    async def request_permission(self) -> Permission: ...

    async def measure_peak(self, window_seconds: float) -> float:
        """Record for window_seconds and return the peak level in dBFS."""
        ...


class LightSensor(Protocol):
    async def is_available(self) -> bool: ...

    async def request_permission(self) -> Permission: ...

    async def read_level(self) -> float:
        """Current brightness as a fraction of the maximum (0.0 - 1.0)."""
        ...


class UnsupportedSensor:
    """Stand-in for a sensor the platform doesn't have. Never available."""

    def __init__(self, name: str = "sensor"):
        self.name = name

    async def is_available(self) -> bool:
        return False

    async def request_permission(self) -> Permission:
        return Permission.DENIED

    def subscribe(self, listener, interval_ms: int) -> Subscription:
        raise SensorUnavailable(f"{self.name} is not supported on this platform")

    async def measure_peak(self, window_seconds: float) -> float:
        raise SensorUnavailable(f"{self.name} is not supported on this platform")

    async def read_level(self) -> float:
        raise SensorUnavailable(f"{self.name} is not supported on this platform")


async def ensure_access(sensor, name: str) -> None:
    """
    Availability + permission check shared by all watchers.

    Raises SensorUnavailable or PermissionDenied; both are terminal for the
    watcher's session.
    """
    if not await sensor.is_available():
        raise SensorUnavailable(f"{name} not available on this device")
    status = await sensor.request_permission()
    if status != Permission.GRANTED:
        raise PermissionDenied(f"{name} permission {Permission(status).value}")
    logger.debug("%s access granted", name)
