# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""NeuroAura senses - motion, sound and light adapters for the watchers."""
from .base import (
    MotionSample, Permission, SensorError, SensorUnavailable, PermissionDenied,
    SamplingError, UnsupportedSensor, ensure_access,
)
from .ambient import BacklightSensor
from .replay import ReplayMotionSensor, ReplaySoundMeter, ReplayLightSensor, sensors_from_trace
