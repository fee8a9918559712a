# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""NeuroAura sensor watchers - shake, noise and brightness overload detection."""
from .base import SensorWatcher, PollingWatcher, WatcherState, Trigger
from .movement import MovementWatcher, magnitude
from .noise import NoiseWatcher
from .light import LightWatcher
