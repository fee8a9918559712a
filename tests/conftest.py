# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""Test configuration — paths isolation, fake clock, in-memory delivery."""

import pytest

from core.paths import configure, reset
from daemon.events import EventBus
from daemon.store import EventStore
from interface.haptics import RecordingHaptics
from interface.notify import MemoryBackend, NotificationDispatcher


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path):
    """Route all NeuroAura data to a temp directory for test isolation."""
    paths = configure(tmp_path)
    paths.ensure_dirs()
    yield paths
    reset()


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def store(bus):
    return EventStore(bus)


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def dispatcher(backend, bus):
    return NotificationDispatcher(backend, bus=bus)


@pytest.fixture
def haptics():
    return RecordingHaptics()
