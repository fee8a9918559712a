# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
Movement watcher — a hard shake as a possible anger / overload moment.

Accelerometer readings arrive every 100ms. Magnitude is the vector norm of
the three axes in g; resting is ~1.0, ordinary handling stays well under
2, a hard shake goes past 2.3.
"""

import math

from daemon.schemas import MovementSettings
from interface.haptics import Feedback, TerminalHaptics
from senses.base import MotionSample, SensorError
from watcher.base import SensorWatcher
from watcher.config import SHAKE_NOTIFICATION
from watcher.cooldown import Threshold
from watcher.ticker import CancelToken

SHAKE_TITLE = "NeuroAura: big feelings detected 💛"
SHAKE_BODY = (
    "It felt like your phone was shaken really hard. If you're upset or "
    "overwhelmed, try a slow breath and open NeuroAura to use your calm tools. "
    "You're doing your best and that's enough."
)


def magnitude(sample: MotionSample) -> float:
    return math.sqrt(sample.x * sample.x + sample.y * sample.y + sample.z * sample.z)


class MovementWatcher(SensorWatcher):
    kind = "movement"
    sensor_name = "accelerometer"
    mood = "angry"
    symptoms = ("Phone shaken hard", "Possible anger / overload moment")
    alert_message = "Strong phone movement detected (possible anger / overload)."

    def __init__(self, store, dispatcher, sensor, settings: MovementSettings = None,
                 haptics=None, **kwargs):
        settings = settings or MovementSettings()
        super().__init__(
            store, dispatcher, sensor,
            threshold=Threshold(settings.threshold),
            cooldown_seconds=settings.cooldown_seconds,
            **kwargs,
        )
        self.update_interval_ms = settings.update_interval_ms
        self.haptics = haptics if haptics is not None else TerminalHaptics()

    def on_sample(self, sample: MotionSample) -> None:
        self.evaluate(magnitude(sample))

    def _cue(self) -> None:
        try:
            self.haptics(Feedback.WARNING)
        except Exception as e:
            self.logger.warning("Haptic cue failed: %s", e)

    def _notify(self) -> bool:
        sent = self.dispatcher.schedule(
            SHAKE_TITLE, SHAKE_BODY, data={"type": SHAKE_NOTIFICATION},
        )
        return sent is not None

    async def _watch(self, token: CancelToken) -> None:
        try:
            subscription = self.sensor.subscribe(self.on_sample, self.update_interval_ms)
        except SensorError as e:
            self._disable(str(e))
            return
        try:
            await token.wait()
        finally:
            subscription.remove()
