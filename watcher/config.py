# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
Watcher configuration — defaults, settings file, notification copy.

Defaults live on the pydantic models in daemon.schemas; a JSON file at
<data_dir>/neuroaura-watchers.json overrides any subset of them:

    {"noise": {"threshold_db": -15, "idle_gap_seconds": 20},
     "light": {"enabled": false}}
"""

import logging
from pathlib import Path
from typing import Optional

from core.paths import get_paths
from daemon.schemas import WatcherSettings, load_validated, save_validated

logger = logging.getLogger("neuroaura.watcher.config")

# Grace period for an in-flight sampling window when a watcher is stopped
STOP_GRACE_SECONDS = 1.0

# Notification data types (the "type" key in Notification.data)
SHAKE_NOTIFICATION = "high_risk_shake"
NOISE_NOTIFICATION = "noise_high"
NOISE_FOLLOWUP_NOTIFICATION = "noise_followup"
LIGHT_NOTIFICATION = "light_high"


def load_settings(path: Optional[Path] = None) -> WatcherSettings:
    """Watcher tuning from the settings file, or defaults if there is none."""
    path = path or get_paths().watcher_config
    settings = load_validated(path, WatcherSettings)
    logger.debug(
        "Watcher settings: movement>%.2f noise>%.1fdB light>=%.2f",
        settings.movement.threshold,
        settings.noise.threshold_db,
        settings.light.threshold,
    )
    return settings


def write_default_settings(path: Optional[Path] = None, force: bool = False) -> Path:
    """Write the default settings file (for hand editing). Returns its path."""
    path = path or get_paths().watcher_config
    if path.exists() and not force:
        return path
    save_validated(path, WatcherSettings())
    logger.info("Wrote default watcher settings to %s", path)
    return path
