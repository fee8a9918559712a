# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""Check-in tools: record how the user feels, and read the log back."""

from datetime import datetime
from typing import List, Optional

from aura_mcp._app import current_session, tool
from daemon.insights import MOOD_ALIASES, coach_message, normalize_mood, risk_assessment
from daemon.schemas import MOODS, AuraValidationError, CheckIn


def format_check_in(entry: CheckIn) -> str:
    when = datetime.fromtimestamp(entry.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
    source = entry.sensor_kind if entry.is_sensor else "you"
    symptoms = f" ({', '.join(entry.symptoms)})" if entry.symptoms else ""
    return f"  {when} {entry.mood}{symptoms} [{source}]"


@tool()
def aura_check_in(
    mood: str,
    symptoms: Optional[List[str]] = None,
    high_risk: bool = False,
) -> str:
    """
    Record a check-in: how the user feels right now and what their body is telling them.

    Args:
        mood: "calm", "okay", "overwhelmed", "angry", "sad" or "unknown"
              (common words like "ok", "anxious", "mad", "down" are understood)
        symptoms: Body signals in the user's own words, e.g. ["Headache", "Tight chest"]
        high_risk: The user says this is a high-risk moment; also logs an alert for caregivers

    Returns:
        Confirmation, a short coaching message and the current risk zone
    """
    key = mood.strip().lower()
    if key not in MOOD_ALIASES:
        return f"Error: unknown mood '{mood}'. Use one of: {', '.join(MOODS)}."

    session = current_session()
    try:
        entry = session.store.add_check_in(normalize_mood(key), symptoms or [])
    except AuraValidationError as e:
        return f"Error: {e}"

    if high_risk:
        session.store.log_alert_event(
            "manual_high_risk", "User reported a high-risk moment during a check-in.",
        )

    profile = session.store.profile
    coach = coach_message(entry, name=profile.name if profile else "you", high_risk=high_risk)
    risk = risk_assessment(entry)

    lines = [
        f"Checked in: {entry.mood}" + (f" with {len(entry.symptoms)} symptom(s)" if entry.symptoms else ""),
        f"Risk: {risk['score']}/100 ({risk['zone']})",
        "",
        coach["headline"],
        coach["body"],
    ]
    lines.extend(f"  - {tip}" for tip in coach["tips"])
    return "\n".join(lines)


@tool()
def aura_check_ins(limit: int = 10, source: str = "all") -> str:
    """
    List recent check-ins, newest first.

    Args:
        limit: How many to show (default 10)
        source: "all", "manual" (typed by the user) or "sensor" (written by a watcher)

    Returns:
        One line per check-in
    """
    if source not in ("all", "manual", "sensor"):
        return "Error: source must be 'all', 'manual' or 'sensor'."

    entries = current_session().store.check_ins
    if source == "manual":
        entries = tuple(c for c in entries if not c.is_sensor)
    elif source == "sensor":
        entries = tuple(c for c in entries if c.is_sensor)

    if not entries:
        return "No check-ins yet."

    shown = entries[:max(limit, 1)]
    lines = [f"{len(entries)} check-in(s), showing {len(shown)}:"]
    lines.extend(format_check_in(c) for c in shown)
    return "\n".join(lines)
