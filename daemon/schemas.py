# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
NeuroAura Schema Registry — Pydantic models for every record and config.

Single source of truth for the session entities (profile, check-ins,
alerts), notification requests, watcher tuning and recorded sensor traces.

Usage:
    from daemon.schemas import CheckIn, WatcherSettings, load_validated

    settings = load_validated(paths.watcher_config, WatcherSettings)
    entry = CheckIn(id="...", timestamp=0, mood="calm")

Session records are frozen: once created they never change. Config models
use extra="allow" so a settings file written by a newer version still loads.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger("neuroaura.schemas")


# ============================================================================
# Shared base config for every model
# ============================================================================

class AuraModel(BaseModel):
    """Base for all NeuroAura schemas. Allows extra fields for forward compat."""
    model_config = {"extra": "allow"}


class AuraRecord(AuraModel):
    """Immutable session record."""
    model_config = {"extra": "allow", "frozen": True}


# ============================================================================
# Custom exceptions
# ============================================================================

class AuraValidationError(Exception):
    """Raised when input fails validation (unknown mood, malformed trace, etc.)."""


# ============================================================================
# CLOSED VOCABULARIES
# ============================================================================

Mood = Literal["calm", "okay", "overwhelmed", "angry", "sad", "unknown"]
MOODS: Tuple[str, ...] = ("calm", "okay", "overwhelmed", "angry", "sad", "unknown")

Role = Literal["individual", "parent", "minor", "guest"]

AlertType = Literal["movement", "noise", "light", "manual_high_risk"]
ALERT_TYPES: Tuple[str, ...] = ("movement", "noise", "light", "manual_high_risk")

# Watchers that can originate a check-in
SENSOR_KINDS: Tuple[str, ...] = ("movement", "noise", "light")

MANUAL = "manual"
SENSOR_PREFIX = "sensor:"
PROVENANCE_PATTERN = r"^(manual|sensor:(movement|noise|light))$"


def sensor_provenance(kind: str) -> str:
    """Provenance tag for a check-in written by the given watcher."""
    if kind not in SENSOR_KINDS:
        raise AuraValidationError(f"Unknown sensor kind: {kind!r}")
    return f"{SENSOR_PREFIX}{kind}"


# ============================================================================
# SESSION ENTITIES
# ============================================================================

class UserProfile(AuraRecord):
    """Who is using the app this session. Replaced wholesale, never edited."""
    name: str
    contact: str = ""
    role: Role = "individual"
    language: str = "en"
    sensitivities: Tuple[str, ...] = ()
    allergies: Tuple[str, ...] = ()


class CheckIn(AuraRecord):
    """A mood + body-symptom record, typed by the user or written by a watcher."""
    id: str
    timestamp: int  # epoch milliseconds
    mood: Mood
    symptoms: Tuple[str, ...] = ()
    provenance: str = Field(MANUAL, pattern=PROVENANCE_PATTERN)

    @property
    def is_sensor(self) -> bool:
        return self.provenance.startswith(SENSOR_PREFIX)

    @property
    def sensor_kind(self) -> Optional[str]:
        if not self.is_sensor:
            return None
        return self.provenance[len(SENSOR_PREFIX):]


class AlertEvent(AuraRecord):
    """A detected overload condition. Independent of the check-in log."""
    id: str
    type: AlertType
    message: str
    timestamp: int  # epoch milliseconds


# ============================================================================
# NOTIFICATIONS
# ============================================================================

class Notification(AuraRecord):
    """One local notification request."""
    id: str
    title: str
    body: str
    sound: Optional[str] = "default"
    data: Dict[str, Any] = Field(default_factory=dict)
    delay_seconds: Optional[float] = Field(None, ge=0)


# ============================================================================
# WATCHER TUNING: <data_dir>/neuroaura-watchers.json
# ============================================================================

class MovementSettings(AuraModel):
    """Accelerometer shake detection. Magnitude is the 3-axis vector norm in g."""
    enabled: bool = True
    threshold: float = 2.3
    cooldown_seconds: float = Field(6.0, ge=0)
    update_interval_ms: int = Field(100, gt=0)


class NoiseSettings(AuraModel):
    """Microphone peak metering in dBFS (0 = clipping, -160 = silence)."""
    enabled: bool = True
    threshold_db: float = -12.0
    cooldown_seconds: float = Field(300.0, ge=0)
    window_seconds: float = Field(2.5, ge=0)
    idle_gap_seconds: float = Field(30.0, ge=0)
    followup_delay_seconds: float = Field(90.0, ge=0)


class LightSettings(AuraModel):
    """Brightness as a fraction of the maximum level (0.0 - 1.0)."""
    enabled: bool = True
    threshold: float = Field(0.85, ge=0, le=1)
    cooldown_seconds: float = Field(300.0, ge=0)
    idle_gap_seconds: float = Field(30.0, ge=0)


class WatcherSettings(AuraModel):
    movement: MovementSettings = Field(default_factory=MovementSettings)
    noise: NoiseSettings = Field(default_factory=NoiseSettings)
    light: LightSettings = Field(default_factory=LightSettings)


# ============================================================================
# RECORDED SENSOR TRACES
# ============================================================================

class SensorTrace(AuraModel):
    """Recorded samples for replay: motion vectors, noise peaks, light levels."""
    motion: List[Tuple[float, float, float]] = Field(default_factory=list)
    noise: List[float] = Field(default_factory=list)
    light: List[float] = Field(default_factory=list)


def load_trace(path: Path) -> SensorTrace:
    """Load a recorded trace. Raises AuraValidationError if it can't be used."""
    try:
        return SensorTrace.model_validate_json(Path(path).read_text())
    except OSError as e:
        raise AuraValidationError(f"Cannot read trace {path}: {e}") from e
    except ValidationError as e:
        raise AuraValidationError(f"Invalid trace {path}: {e}") from e


# ============================================================================
# LOAD / SAVE HELPERS
# ============================================================================

T = TypeVar("T", bound=AuraModel)


def load_validated(path: Path, schema: Type[T], default: Any = None) -> T:
    """
    Load JSON from file and validate against schema.

    Args:
        path: Path to JSON file
        schema: Pydantic model class to validate against
        default: Default value if file doesn't exist or is invalid.
                 If None, returns schema() with all defaults.
    """
    if not path.exists():
        if default is not None:
            return schema.model_validate(default)
        return schema()

    try:
        data = json.loads(path.read_text())
        return schema.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.warning("Ignoring invalid %s (%s): %s", path.name, schema.__name__, e)
        if default is not None:
            return schema.model_validate(default)
        return schema()


def _atomic_rename(tmp: Path, dest: Path):
    """Flush, fsync, then rename — crash-safe atomic write."""
    fd = os.open(str(tmp), os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)
    os.replace(str(tmp), str(dest))


def save_validated(path: Path, model: AuraModel, atomic: bool = True):
    """Save a validated model to JSON file (write .tmp, then rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = model.model_dump_json(indent=2, exclude_none=False)

    if atomic:
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(content)
        _atomic_rename(tmp, path)
    else:
        path.write_text(content)
