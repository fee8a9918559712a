# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
Noise watcher — a very loud environment as a possible sound overload.

Each cycle records a short metering window and keeps the peak level, then
idles. A window that fails to record is skipped. Alerts also schedule a
follow-up asking whether the user is still overwhelmed.
"""

from daemon.schemas import NoiseSettings
from watcher.base import PollingWatcher
from watcher.config import NOISE_FOLLOWUP_NOTIFICATION, NOISE_NOTIFICATION
from watcher.cooldown import Threshold

NOISE_TITLE = "NeuroAura: this place is VERY loud 🚨"
NOISE_BODY = (
    "The sound level here is extremely high. If noise is a trigger for you, "
    "try moving to a quieter spot or using headphones. You're allowed to "
    "protect your senses."
)
FOLLOWUP_TITLE = "NeuroAura: quick check-in 💭"
FOLLOWUP_BODY = (
    "That place was really loud a moment ago. Are you still feeling "
    "overwhelmed, or is it a bit better now? If you want, open NeuroAura and "
    "log how you feel so I can support you."
)


class NoiseWatcher(PollingWatcher):
    kind = "noise"
    sensor_name = "microphone"
    mood = "overwhelmed"
    symptoms = ("Very loud environment", "Possible sound overload moment")
    alert_message = "Very loud environment detected (noise overload risk)."

    def __init__(self, store, dispatcher, sensor, settings: NoiseSettings = None, **kwargs):
        settings = settings or NoiseSettings()
        super().__init__(
            store, dispatcher, sensor,
            threshold=Threshold(settings.threshold_db),
            cooldown_seconds=settings.cooldown_seconds,
            idle_gap_seconds=settings.idle_gap_seconds,
            **kwargs,
        )
        self.window_seconds = settings.window_seconds
        self.followup_delay_seconds = settings.followup_delay_seconds

    async def _read(self) -> float:
        return await self.sensor.measure_peak(self.window_seconds)

    def _notify(self) -> bool:
        sent = self.dispatcher.schedule(
            NOISE_TITLE, NOISE_BODY, data={"type": NOISE_NOTIFICATION},
        )
        self.dispatcher.schedule(
            FOLLOWUP_TITLE, FOLLOWUP_BODY,
            data={"type": NOISE_FOLLOWUP_NOTIFICATION},
            trigger=self.followup_delay_seconds,
        )
        return sent is not None
