# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
NeuroAura Paths — single source of truth for all data file locations.

Resolution order:
  1. NEUROAURA_DATA_DIR environment variable
  2. Default: ~/.neuroaura/

Usage:
    from core.paths import get_paths
    p = get_paths()
    p.watcher_config    # ~/.neuroaura/neuroaura-watchers.json
    p.daemon_log        # ~/.neuroaura/logs/neuroaura.log

For tests:
    from core.paths import configure
    configure(tmp_path)
"""

import os
from pathlib import Path
from typing import Optional


class AuraPaths:
    """Central registry of every file and directory NeuroAura uses."""

    def __init__(self, data_dir: Optional[Path] = None):
        if data_dir is not None:
            self._root = Path(data_dir)
        else:
            env = os.environ.get("NEUROAURA_DATA_DIR")
            if env:
                self._root = Path(env).expanduser()
            else:
                self._root = Path.home() / ".neuroaura"

    @property
    def data_dir(self) -> Path:
        return self._root

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    @property
    def watcher_config(self) -> Path:
        return self._root / "neuroaura-watchers.json"

    # ------------------------------------------------------------------
    # Recorded sensor traces (replayed by `neuroaura watch --trace`)
    # ------------------------------------------------------------------
    @property
    def traces_dir(self) -> Path:
        return self._root / "traces"

    # ------------------------------------------------------------------
    # Logs
    # ------------------------------------------------------------------
    @property
    def logs_dir(self) -> Path:
        return self._root / "logs"

    @property
    def daemon_log(self) -> Path:
        return self.logs_dir / "neuroaura.log"

    def ensure_dirs(self) -> None:
        """Create the data, traces and logs directories."""
        for d in (self._root, self.traces_dir, self.logs_dir):
            d.mkdir(parents=True, exist_ok=True)


# ===========================================================================
# Singleton
# ===========================================================================

_instance: Optional[AuraPaths] = None


def get_paths() -> AuraPaths:
    """Return the global AuraPaths singleton (lazy-init)."""
    global _instance
    if _instance is None:
        _instance = AuraPaths()
    return _instance


def configure(data_dir: Path) -> AuraPaths:
    """Root every path under data_dir (the CLI --data-dir flag and tests)."""
    global _instance
    _instance = AuraPaths(data_dir=data_dir)
    return _instance


def reset() -> None:
    """Forget the configured root; the next get_paths() consults the environment again."""
    global _instance
    _instance = None
