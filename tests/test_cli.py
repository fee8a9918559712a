# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""Tests for aura_mcp.cli — init, doctor, headless watch."""

import asyncio
import json
import sys

import pytest

from aura_mcp import cli
from daemon.schemas import WatcherSettings, load_validated
from daemon.session import Session, SensorSuite
from interface.notify import MemoryBackend, NotificationDispatcher
from senses.replay import ReplayLightSensor, ReplayMotionSensor, ReplaySoundMeter


def run_main(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["neuroaura", *argv])
    cli.main()


class TestInit:

    def test_writes_settings(self, isolated_paths, monkeypatch, capsys):
        run_main(monkeypatch, "--data-dir", str(isolated_paths.data_dir), "init")
        assert load_validated(isolated_paths.watcher_config, WatcherSettings) == WatcherSettings()
        assert "Wrote default watcher settings" in capsys.readouterr().out

    def test_keeps_existing(self, isolated_paths, monkeypatch, capsys):
        isolated_paths.watcher_config.write_text(json.dumps({"noise": {"threshold_db": -20}}))
        run_main(monkeypatch, "--data-dir", str(isolated_paths.data_dir), "init")
        assert "already exist" in capsys.readouterr().out
        assert json.loads(isolated_paths.watcher_config.read_text()) == {"noise": {"threshold_db": -20}}

    def test_env_data_dir(self, tmp_path, monkeypatch):
        target = tmp_path / "from-env"
        monkeypatch.setenv("NEUROAURA_DATA_DIR", str(target))
        run_main(monkeypatch, "init")
        assert (target / "neuroaura-watchers.json").is_file()


class TestDoctor:

    def test_health_check_labels(self, isolated_paths):
        results = cli.run_health_check(isolated_paths.data_dir)
        labels = [label for label, _, _ in results]
        assert labels[:2] == ["Data directory", "  Writable"]
        assert {"Watcher settings", "Motion", "Sound", "Light", "Notifications"} <= set(labels)
        motion = next(r for r in results if r[0] == "Motion")
        assert motion[1] is False

    def test_missing_dir(self, tmp_path):
        results = cli.run_health_check(tmp_path / "nope")
        assert results[0] == ("Data directory", False, str(tmp_path / "nope"))

    def test_doctor_prints(self, isolated_paths, monkeypatch, capsys):
        run_main(monkeypatch, "--data-dir", str(isolated_paths.data_dir), "doctor")
        out = capsys.readouterr().out
        assert "NeuroAura Doctor" in out
        assert "Motion" in out


class TestWatch:

    def test_run_watch_stops_after_duration(self, backend):
        session = Session(
            sensors=SensorSuite(
                ReplayMotionSensor([(0, 0, 1), (3, 0, 0)]),
                ReplaySoundMeter(),
                ReplayLightSensor([0.9]),
            ),
            dispatcher=NotificationDispatcher(backend),
            haptics=lambda fb: None,
        )
        asyncio.run(cli.run_watch(session, duration=0.3))
        assert session.running is False
        assert sorted(a.type for a in session.store.alerts) == ["light", "movement"]

    def test_watch_trace(self, isolated_paths, monkeypatch, capsys):
        trace = isolated_paths.traces_dir / "shake.json"
        trace.write_text(json.dumps({"motion": [[0, 0, 1], [3, 0, 0]], "light": [0.9]}))
        run_main(monkeypatch, "--data-dir", str(isolated_paths.data_dir),
                 "watch", "--trace", "shake.json", "--duration", "0.3", "--notify", "log")
        assert "2 check-in(s), 2 alert(s)" in capsys.readouterr().err

    def test_watch_bad_trace(self, isolated_paths, monkeypatch, capsys):
        with pytest.raises(SystemExit):
            run_main(monkeypatch, "--data-dir", str(isolated_paths.data_dir),
                     "watch", "--trace", "missing.json")
        assert "Error:" in capsys.readouterr().err


class TestParser:

    def test_no_command(self, monkeypatch):
        with pytest.raises(SystemExit):
            run_main(monkeypatch)

    def test_no_color(self, monkeypatch):
        monkeypatch.setattr(cli, "_NO_COLOR", True)
        assert cli.green("ok") == "ok"
