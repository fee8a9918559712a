# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""Light watcher — very bright screen / surroundings as a light sensitivity trigger."""

from daemon.schemas import LightSettings
from watcher.base import PollingWatcher
from watcher.config import LIGHT_NOTIFICATION
from watcher.cooldown import Threshold

LIGHT_TITLE = "NeuroAura: light is very harsh here 🌞"
LIGHT_BODY = (
    "The brightness around your device is really intense. If bright light "
    "triggers headaches or sensory overload, try moving to shade, dimming "
    "your screen, or using tinted glasses."
)


class LightWatcher(PollingWatcher):
    kind = "light"
    sensor_name = "brightness"
    mood = "overwhelmed"
    symptoms = ("Very bright screen / light", "Possible light sensitivity trigger")
    alert_message = "Very bright screen / ambient light detected (light overload risk)."

    def __init__(self, store, dispatcher, sensor, settings: LightSettings = None, **kwargs):
        settings = settings or LightSettings()
        super().__init__(
            store, dispatcher, sensor,
            threshold=Threshold(settings.threshold, inclusive=True),
            cooldown_seconds=settings.cooldown_seconds,
            idle_gap_seconds=settings.idle_gap_seconds,
            **kwargs,
        )

    async def _read(self) -> float:
        return await self.sensor.read_level()

    def _notify(self) -> bool:
        sent = self.dispatcher.schedule(
            LIGHT_TITLE, LIGHT_BODY, data={"type": LIGHT_NOTIFICATION},
        )
        return sent is not None
