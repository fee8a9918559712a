# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""Noise watcher — peak metering windows, follow-up notification, failures."""

import asyncio
import logging
import time

from daemon.events import Events
from daemon.schemas import NoiseSettings
from senses.base import PermissionDenied
from senses.replay import ReplaySoundMeter
from watcher.base import WatcherState
from watcher.config import NOISE_FOLLOWUP_NOTIFICATION, NOISE_NOTIFICATION
from watcher.noise import NoiseWatcher

FAST = NoiseSettings(window_seconds=0, idle_gap_seconds=0)


class BusyMeter(ReplaySoundMeter):
    """Raises a plain I/O error on the listed windows."""

    def __init__(self, peaks, fail_on=(1,), error=None):
        super().__init__(peaks)
        self.fail_on = set(fail_on)
        self.error = error or OSError("audio device busy")
        self.calls = 0

    async def measure_peak(self, window_seconds):
        self.calls += 1
        if self.calls in self.fail_on:
            raise self.error
        return await super().measure_peak(window_seconds)


def make(store, dispatcher, peaks, settings=FAST, **kwargs):
    meter = ReplaySoundMeter(peaks)
    return NoiseWatcher(store, dispatcher, meter, settings, **kwargs), meter


class TestSampling:

    def test_quiet_windows_log_nothing(self, store, dispatcher, backend):
        watcher, meter = make(store, dispatcher, [-40.0, -20.0, -12.0])

        async def run():
            for _ in range(3):
                await watcher.sample_once()

        asyncio.run(run())
        assert meter.windows == 3
        assert watcher.last_value == -12.0
        assert store.check_ins == ()
        assert store.alerts == ()
        assert backend.sent == []

    def test_loud_window_triggers(self, store, dispatcher, backend):
        watcher, _ = make(store, dispatcher, [-5.0])

        async def run():
            trigger = await watcher.sample_once()
            pending = dispatcher.pending
            dispatcher.cancel_pending()
            return trigger, pending

        trigger, pending = asyncio.run(run())
        assert trigger.value == -5.0
        [entry] = store.check_ins
        assert entry.mood == "overwhelmed"
        assert entry.symptoms == ("Very loud environment", "Possible sound overload moment")
        assert entry.provenance == "sensor:noise"
        assert store.alerts[0].type == "noise"
        assert [n.data["type"] for n in backend.sent] == [NOISE_NOTIFICATION]
        assert len(pending) == 1

    def test_followup_delivered_after_delay(self, store, dispatcher, backend):
        settings = NoiseSettings(window_seconds=0, idle_gap_seconds=0, followup_delay_seconds=0.02)
        watcher, _ = make(store, dispatcher, [-5.0], settings)

        async def run():
            await watcher.sample_once()
            await asyncio.sleep(0.1)

        asyncio.run(run())
        assert [n.data["type"] for n in backend.sent] == [NOISE_NOTIFICATION, NOISE_FOLLOWUP_NOTIFICATION]
        assert backend.sent[1].delay_seconds == 0.02
        assert dispatcher.pending == []

    def test_cooldown_five_minutes(self, store, dispatcher, clock):
        watcher, _ = make(store, dispatcher, [-5.0, -5.0, -5.0], clock=clock)

        async def run():
            await watcher.sample_once()
            clock.advance(299)
            await watcher.sample_once()
            clock.advance(1)
            await watcher.sample_once()
            dispatcher.cancel_pending()

        asyncio.run(run())
        assert watcher.triggers == 2
        assert len(store.alerts) == 2

    def test_failed_window_is_skipped(self, store, dispatcher, bus):
        watcher, meter = make(store, dispatcher, [None, -5.0])
        failures = []
        bus.on(Events.SAMPLING_FAILED, lambda e: failures.append(e.data["kind"]))

        async def run():
            assert await watcher.sample_once() is None
            assert await watcher.sample_once() is not None
            dispatcher.cancel_pending()

        asyncio.run(run())
        assert watcher.errors == 1
        assert watcher.triggers == 1
        assert failures == ["noise"]


class TestLoop:

    def test_loop_continues_after_failure(self, store, dispatcher):
        watcher, meter = make(store, dispatcher, [None, -30.0, -5.0])

        async def run():
            watcher.start()
            for _ in range(50):
                if meter.exhausted:
                    break
                await asyncio.sleep(0.01)
            await watcher.stop()
            return dispatcher.cancel_pending()

        dropped = asyncio.run(run())
        assert meter.windows >= 3
        assert watcher.errors == 1
        assert watcher.triggers == 1
        assert dropped == 1

    def test_stop_wakes_idle_gap(self, store, dispatcher):
        watcher, meter = make(store, dispatcher, [-30.0], NoiseSettings(window_seconds=0))

        async def run():
            watcher.start()
            await asyncio.sleep(0.05)
            started = time.monotonic()
            await watcher.stop()
            return time.monotonic() - started

        elapsed = asyncio.run(run())
        assert elapsed < 1
        assert meter.windows == 1
        assert watcher.state == WatcherState.IDLE

    def test_stop_abandons_long_window(self, store, dispatcher):
        meter = ReplaySoundMeter([-5.0], realtime=True)
        watcher = NoiseWatcher(store, dispatcher, meter, NoiseSettings(window_seconds=30))

        async def run():
            watcher.start()
            await asyncio.sleep(0.05)
            started = time.monotonic()
            await watcher.stop(grace=0.05)
            return time.monotonic() - started

        elapsed = asyncio.run(run())
        assert elapsed < 1
        assert store.check_ins == ()
        assert watcher.state == WatcherState.IDLE

    def test_loop_survives_io_error(self, store, dispatcher):
        meter = BusyMeter([-5.0, -5.0])
        watcher = NoiseWatcher(store, dispatcher, meter,
                               NoiseSettings(window_seconds=0, idle_gap_seconds=0.01))

        async def run():
            task = watcher.start()
            for _ in range(50):
                if meter.exhausted:
                    break
                await asyncio.sleep(0.01)
            crashed = task.done()
            await watcher.stop()
            dispatcher.cancel_pending()
            return crashed

        assert asyncio.run(run()) is False
        assert meter.calls >= 3
        assert watcher.errors == 1
        assert len(store.alerts) == 1
        assert not watcher.disabled

    def test_permission_revoked_disables(self, store, dispatcher, bus):
        meter = BusyMeter([-5.0], error=PermissionDenied("microphone permission denied"))
        watcher = NoiseWatcher(store, dispatcher, meter, FAST)
        disabled = []
        bus.on(Events.WATCHER_DISABLED, lambda e: disabled.append(e.data["reason"]))

        async def run():
            watcher.start()
            await asyncio.sleep(0.05)
            await watcher.stop()

        asyncio.run(run())
        assert meter.calls == 1
        assert watcher.disabled_reason == "microphone permission denied"
        assert watcher.errors == 0
        assert disabled == ["microphone permission denied"]

    def test_stop_reports_crashed_loop(self, store, dispatcher, caplog):
        class BrokenWatcher(NoiseWatcher):
            async def _watch(self, token):
                raise RuntimeError("loop bug")

        watcher = BrokenWatcher(store, dispatcher, ReplaySoundMeter(), FAST)

        async def run():
            watcher.start()
            await asyncio.sleep(0.01)
            await watcher.stop()

        with caplog.at_level(logging.ERROR, logger="neuroaura.watcher.noise"):
            asyncio.run(run())
        assert "loop bug" in caplog.text
