# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""Schemas — vocabularies, settings file, trace files, load/save helpers."""

import json

import pytest
from pydantic import ValidationError

from daemon.schemas import (
    ALERT_TYPES, MOODS, AuraValidationError, CheckIn, LightSettings,
    Notification, SensorTrace, UserProfile, WatcherSettings,
    load_trace, load_validated, save_validated, sensor_provenance,
)
from watcher.config import load_settings, write_default_settings


class TestVocabularies:

    def test_moods(self):
        assert MOODS == ("calm", "okay", "overwhelmed", "angry", "sad", "unknown")

    def test_alert_types(self):
        assert set(ALERT_TYPES) == {"movement", "noise", "light", "manual_high_risk"}

    def test_sensor_provenance(self):
        assert sensor_provenance("noise") == "sensor:noise"
        with pytest.raises(AuraValidationError):
            sensor_provenance("gps")

    def test_manual_check_in_has_no_sensor_kind(self):
        entry = CheckIn(id="1_abc", timestamp=1, mood="calm")
        assert not entry.is_sensor
        assert entry.sensor_kind is None

    def test_profile_role_closed(self):
        with pytest.raises(ValidationError):
            UserProfile(name="Sam", role="admin")

    def test_notification_delay_non_negative(self):
        with pytest.raises(ValidationError):
            Notification(id="n1", title="t", body="b", delay_seconds=-1)


class TestWatcherSettings:

    def test_defaults(self):
        s = WatcherSettings()
        assert s.movement.threshold == 2.3
        assert s.movement.cooldown_seconds == 6.0
        assert s.movement.update_interval_ms == 100
        assert s.noise.threshold_db == -12.0
        assert s.noise.cooldown_seconds == 300.0
        assert s.noise.window_seconds == 2.5
        assert s.noise.idle_gap_seconds == 30.0
        assert s.noise.followup_delay_seconds == 90.0
        assert s.light.threshold == 0.85
        assert s.light.cooldown_seconds == 300.0
        assert s.light.idle_gap_seconds == 30.0

    def test_light_threshold_range(self):
        with pytest.raises(ValidationError):
            LightSettings(threshold=1.5)

    def test_missing_file_gives_defaults(self, isolated_paths):
        assert not isolated_paths.watcher_config.exists()
        assert load_settings() == WatcherSettings()

    def test_partial_file(self, isolated_paths):
        isolated_paths.watcher_config.write_text(json.dumps({
            "noise": {"threshold_db": -20, "enabled": False},
        }))
        s = load_settings()
        assert s.noise.threshold_db == -20
        assert s.noise.enabled is False
        assert s.noise.cooldown_seconds == 300.0
        assert s.movement.threshold == 2.3

    def test_invalid_file_falls_back(self, isolated_paths):
        isolated_paths.watcher_config.write_text("{not json")
        assert load_settings() == WatcherSettings()

    def test_invalid_values_fall_back(self, isolated_paths):
        isolated_paths.watcher_config.write_text(json.dumps({"light": {"threshold": 7}}))
        assert load_settings().light.threshold == 0.85

    def test_write_default_settings(self, isolated_paths):
        path = write_default_settings()
        assert path == isolated_paths.watcher_config
        assert load_validated(path, WatcherSettings) == WatcherSettings()

    def test_write_default_keeps_existing(self, isolated_paths):
        isolated_paths.watcher_config.write_text(json.dumps({"movement": {"threshold": 3.0}}))
        write_default_settings()
        assert load_settings().movement.threshold == 3.0
        write_default_settings(force=True)
        assert load_settings().movement.threshold == 2.3


class TestSaveLoad:

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        settings = WatcherSettings(light=LightSettings(threshold=0.9))
        save_validated(path, settings)
        assert load_validated(path, WatcherSettings).light.threshold == 0.9
        assert not path.with_suffix(".json.tmp").exists()

    def test_extra_fields_allowed(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"future_option": True}))
        loaded = load_validated(path, WatcherSettings)
        assert loaded.model_extra == {"future_option": True}

    def test_default_argument(self, tmp_path):
        loaded = load_validated(tmp_path / "missing.json", WatcherSettings,
                                default={"noise": {"threshold_db": -30}})
        assert loaded.noise.threshold_db == -30


class TestTraces:

    def test_load_trace(self, tmp_path):
        path = tmp_path / "trace.json"
        path.write_text(json.dumps({
            "motion": [[0, 0, 1], [2, 2, 1]],
            "noise": [-40, -5],
        }))
        trace = load_trace(path)
        assert trace.motion == [(0, 0, 1), (2, 2, 1)]
        assert trace.noise == [-40, -5]
        assert trace.light == []

    def test_missing_trace(self, tmp_path):
        with pytest.raises(AuraValidationError):
            load_trace(tmp_path / "nope.json")

    def test_malformed_trace(self, tmp_path):
        path = tmp_path / "trace.json"
        path.write_text(json.dumps({"motion": [[1, 2]]}))
        with pytest.raises(AuraValidationError):
            load_trace(path)

    def test_empty_trace(self):
        assert SensorTrace() == SensorTrace(motion=[], noise=[], light=[])
