# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
NeuroAura Event Store — the session's profile, check-in log and alert log.

Both logs are newest-first and unbounded for the session. Nothing here is
persisted: a new Session starts with an empty store.

Writers only ever append (add_check_in, log_alert_event) or replace the
profile wholesale. Every change is emitted on the session bus so derived
views can recompute.
"""

import logging
import secrets
import threading
import time
from typing import Callable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from daemon.events import EventBus, Events
from daemon.schemas import (
    MANUAL, AlertEvent, AuraValidationError, CheckIn, UserProfile,
)

logger = logging.getLogger("neuroaura.store")


def new_record_id(now_ms: int) -> str:
    """Time + random identifier: '<epoch-ms>_<12 hex chars>'."""
    return f"{now_ms}_{secrets.token_hex(6)}"


class EventStore:
    """Single source of truth for one running session."""

    def __init__(
        self,
        bus: Optional[EventBus] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.bus = bus if bus is not None else EventBus()
        self._clock = clock
        self._lock = threading.Lock()
        self._profile: Optional[UserProfile] = None
        self._check_ins: List[CheckIn] = []
        self._alerts: List[AlertEvent] = []

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    @property
    def profile(self) -> Optional[UserProfile]:
        return self._profile

    def set_profile(self, profile: Optional[UserProfile]) -> bool:
        """Replace the active profile. Returns False if nothing changed."""
        with self._lock:
            if profile == self._profile:
                return False
            self._profile = profile

        self.bus.emit(Events.PROFILE_CHANGED, {
            "name": profile.name if profile else None,
            "role": profile.role if profile else None,
        }, source="store")
        return True

    # ------------------------------------------------------------------
    # Check-ins
    # ------------------------------------------------------------------

    @property
    def check_ins(self) -> Tuple[CheckIn, ...]:
        """Snapshot of the check-in log, newest first."""
        with self._lock:
            return tuple(self._check_ins)

    def latest_check_in(self) -> Optional[CheckIn]:
        with self._lock:
            return self._check_ins[0] if self._check_ins else None

    def add_check_in(
        self,
        mood: str,
        symptoms: Sequence[str] = (),
        provenance: str = MANUAL,
    ) -> CheckIn:
        """Record a check-in and put it at the head of the log."""
        now_ms = self._now_ms()
        try:
            entry = CheckIn(
                id=new_record_id(now_ms),
                timestamp=now_ms,
                mood=mood,
                symptoms=tuple(symptoms),
                provenance=provenance,
            )
        except ValidationError as e:
            raise AuraValidationError(f"Invalid check-in: {e}") from e

        with self._lock:
            self._check_ins.insert(0, entry)
            count = len(self._check_ins)

        logger.debug("Check-in %s (%s, %s), %d total",
                     entry.id, entry.mood, entry.provenance, count)
        self.bus.emit(Events.CHECKIN_ADDED, {
            "id": entry.id,
            "mood": entry.mood,
            "symptoms": list(entry.symptoms),
            "provenance": entry.provenance,
        }, source="store")
        return entry

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    @property
    def alerts(self) -> Tuple[AlertEvent, ...]:
        """Snapshot of the alert log, newest first."""
        with self._lock:
            return tuple(self._alerts)

    def log_alert_event(self, alert_type: str, message: str) -> AlertEvent:
        """Record an overload alert and put it at the head of the log."""
        now_ms = self._now_ms()
        try:
            event = AlertEvent(
                id=new_record_id(now_ms),
                type=alert_type,
                message=message,
                timestamp=now_ms,
            )
        except ValidationError as e:
            raise AuraValidationError(f"Invalid alert: {e}") from e

        with self._lock:
            self._alerts.insert(0, event)

        logger.info("Alert logged: %s: %s", event.type, event.message)
        self.bus.emit(Events.ALERT_LOGGED, {
            "id": event.id,
            "type": event.type,
            "message": event.message,
        }, source="store")
        return event

    def stats(self) -> dict:
        with self._lock:
            return {
                "profile": self._profile.name if self._profile else None,
                "check_ins": len(self._check_ins),
                "sensor_check_ins": sum(1 for c in self._check_ins if c.is_sensor),
                "alerts": len(self._alerts),
            }
