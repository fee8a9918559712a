# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
NeuroAura Ambient Senses
Screen brightness from the Linux backlight class (/sys/class/backlight).

The level is reported the way the light watcher expects it: a fraction of
the device maximum. actual_brightness is preferred (what the panel is
really doing), brightness is the fallback (what was requested).
"""

import logging
from pathlib import Path
from typing import List, Optional

from senses.base import Permission, SamplingError, SensorUnavailable

logger = logging.getLogger("neuroaura.senses.ambient")

BACKLIGHT_ROOT = Path("/sys/class/backlight")


def _read_int(path: Path) -> int:
    return int(path.read_text().strip())


class BacklightSensor:
    """Brightness of the first usable backlight device."""

    def __init__(self, root: Path = BACKLIGHT_ROOT):
        self.root = Path(root)
        self._device: Optional[Path] = None

    def _devices(self) -> List[Path]:
        if not self.root.is_dir():
            return []
        return sorted(d for d in self.root.iterdir() if (d / "max_brightness").exists())

    @property
    def device(self) -> Optional[Path]:
        if self._device is None:
            devices = self._devices()
            self._device = devices[0] if devices else None
        return self._device

    async def is_available(self) -> bool:
        return self.device is not None

    async def request_permission(self) -> Permission:
        device = self.device
        if device is None:
            return Permission.DENIED
        try:
            _read_int(device / "max_brightness")
        except PermissionError:
            logger.info("Backlight %s not readable", device.name)
            return Permission.DENIED
        except (OSError, ValueError):
            return Permission.UNDETERMINED
        return Permission.GRANTED

    async def read_level(self) -> float:
        device = self.device
        if device is None:
            raise SensorUnavailable("no backlight device")
        try:
            maximum = _read_int(device / "max_brightness")
        except (OSError, ValueError) as e:
            raise SamplingError(f"max_brightness unreadable: {e}") from e
        if maximum <= 0:
            raise SamplingError(f"{device.name} reports max_brightness {maximum}")

        for name in ("actual_brightness", "brightness"):
            try:
                current = _read_int(device / name)
            except (OSError, ValueError) as e:
                logger.debug("%s/%s unreadable: %s", device.name, name, e)
                continue
            return max(0.0, min(1.0, current / maximum))
        raise SamplingError(f"no brightness reading from {device.name}")
