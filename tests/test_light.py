# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""Light watcher — inclusive brightness threshold."""

import asyncio

from daemon.schemas import LightSettings
from senses.replay import ReplayLightSensor
from watcher.config import LIGHT_NOTIFICATION
from watcher.light import LightWatcher

FAST = LightSettings(idle_gap_seconds=0)


def run_cycles(watcher, n):
    async def run():
        return [await watcher.sample_once() for _ in range(n)]
    return asyncio.run(run())


class TestLightWatcher:

    def test_bright_reading_triggers(self, store, dispatcher, backend):
        watcher = LightWatcher(store, dispatcher, ReplayLightSensor([0.9]), FAST)
        [trigger] = run_cycles(watcher, 1)

        assert trigger.value == 0.9
        [entry] = store.check_ins
        assert entry.mood == "overwhelmed"
        assert entry.symptoms == ("Very bright screen / light", "Possible light sensitivity trigger")
        assert entry.provenance == "sensor:light"
        [alert] = store.alerts
        assert alert.type == "light"
        assert [n.data["type"] for n in backend.sent] == [LIGHT_NOTIFICATION]

    def test_threshold_is_inclusive(self, store, dispatcher):
        watcher = LightWatcher(store, dispatcher, ReplayLightSensor([0.84, 0.85]), FAST)
        first, second = run_cycles(watcher, 2)
        assert first is None
        assert second is not None

    def test_cooldown(self, store, dispatcher, clock):
        watcher = LightWatcher(store, dispatcher, ReplayLightSensor([1.0, 1.0]), FAST, clock=clock)
        run_cycles(watcher, 2)
        assert watcher.triggers == 1
        assert watcher.status()["cooldown_remaining"] == 300.0

    def test_failed_read_counts_error(self, store, dispatcher):
        watcher = LightWatcher(store, dispatcher, ReplayLightSensor([None, 0.2]), FAST)
        assert run_cycles(watcher, 2) == [None, None]
        assert watcher.errors == 1
        assert watcher.samples == 1
        assert watcher.last_value == 0.2

    def test_exhausted_reads_dark(self, store, dispatcher):
        sensor = ReplayLightSensor([])
        watcher = LightWatcher(store, dispatcher, sensor, FAST)
        run_cycles(watcher, 1)
        assert watcher.last_value == 0.0
        assert sensor.reads == 1
