# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
NeuroAura Insights — aggregates over the check-in and alert logs.

Everything here is a pure function of the logs and "now". Mood charts only
count manual check-ins: sensor-written entries describe the environment,
not how the user said they feel.

Views:
  weekly_overview        last 7 days: counts, dominant mood, streak, day buckets
  sensory_load_timeline  today's check-ins as (HH:MM, load %) points
  mood_calendar          last 28 days in weeks, dominant mood per day
  risk_assessment        latest check-in → score 0-100 and a zone
  alert_summary          alerts per type in a recent window

coach_message turns a fresh check-in into supportive follow-up text.
"""

from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from daemon.schemas import ALERT_TYPES, MOODS, AlertEvent, CheckIn

# Phrases the watchers write; only consulted for entries without a provenance tag
SENSOR_PHRASES = ("phone shaken hard", "very loud environment", "very bright screen")

MOOD_ALIASES = {
    "calm": "calm",
    "okay": "okay",
    "ok": "okay",
    "overwhelmed": "overwhelmed",
    "anxious": "overwhelmed",
    "anxiety": "overwhelmed",
    "stressed": "overwhelmed",
    "stress": "overwhelmed",
    "angry": "angry",
    "mad": "angry",
    "frustrated": "angry",
    "sad": "sad",
    "down": "sad",
    "unknown": "unknown",
    "idk": "unknown",
    "i dont know": "unknown",
    "i don't know": "unknown",
}

# Sensory load (%) shown for each mood on the timeline
MOOD_LOAD = {
    "calm": 20,
    "okay": 35,
    "overwhelmed": 70,
    "angry": 90,
    "sad": 60,
    "unknown": 45,
}

# Base risk score per mood for the caregiver view
MOOD_RISK = {
    "calm": 15,
    "okay": 35,
    "sad": 55,
    "overwhelmed": 70,
    "angry": 80,
    "unknown": 0,
}
RISK_PER_SYMPTOM = 5
GREEN_MAX = 30
YELLOW_MAX = 65

Entry = Union[CheckIn, Mapping[str, Any]]


# ============================================================================
# Normalization
# ============================================================================

def normalize_mood(raw: Any) -> str:
    """Map any stored mood string onto the closed mood set."""
    key = str(raw or "").strip().lower()
    return MOOD_ALIASES.get(key, "unknown")


def _field(entry: Entry, name: str, default: Any = None) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name, default)
    return getattr(entry, name, default)


def timestamp_ms(value: Any) -> Optional[int]:
    """Epoch ms from an int/float or an ISO string. None if unusable."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(datetime.fromisoformat(value).timestamp() * 1000)
        except ValueError:
            return None
    return None


def is_sensor_like(entry: Entry) -> bool:
    """
    Was this check-in written by a watcher?

    The provenance tag decides when present, so a user who types "very loud
    environment" still gets a manual entry. Untagged entries (imported or
    legacy data) fall back to matching the watcher phrases.
    """
    provenance = _field(entry, "provenance")
    if provenance:
        return str(provenance).startswith("sensor")
    if _field(entry, "source") == "sensor":
        return True
    symptoms = _field(entry, "symptoms") or []
    text = " ".join(str(s) for s in symptoms).lower()
    return any(phrase in text for phrase in SENSOR_PHRASES)


def _manual_since(entries: Iterable[Entry], since_ms: int) -> List[Dict[str, Any]]:
    """Manual entries at or after since_ms, with parsed timestamp and mood."""
    out = []
    for entry in entries:
        ts = timestamp_ms(_field(entry, "timestamp"))
        if ts is None or ts < since_ms or is_sensor_like(entry):
            continue
        out.append({
            "ts": ts,
            "day": datetime.fromtimestamp(ts / 1000).date(),
            "mood": normalize_mood(_field(entry, "mood")),
            "symptoms": list(_field(entry, "symptoms") or []),
        })
    return out


def _empty_counts() -> Dict[str, int]:
    return {m: 0 for m in MOODS}


def _dominant(counts: Mapping[str, int]) -> str:
    """Most frequent mood; ties go to the earlier mood in MOODS. 'unknown' if empty."""
    best, best_count = "unknown", 0
    for mood in MOODS:
        if counts.get(mood, 0) > best_count:
            best, best_count = mood, counts[mood]
    return best


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now()


def _start_of_window(now: datetime, days: int) -> int:
    return int((now - timedelta(days=days)).timestamp() * 1000)


# ============================================================================
# Views
# ============================================================================

def weekly_overview(check_ins: Sequence[Entry], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Mood overview for the last 7 days, manual check-ins only."""
    now = _now(now)
    manual = _manual_since(check_ins, _start_of_window(now, 7))

    counts = _empty_counts()
    for item in manual:
        counts[item["mood"]] += 1

    logged_days = {item["day"] for item in manual}
    today = now.date()
    streak = 0
    for i in range(7):
        if today - timedelta(days=i) in logged_days:
            streak += 1
        else:
            break

    days = []
    for i in range(6, -1, -1):
        day = today - timedelta(days=i)
        days.append({
            "date": day.isoformat(),
            "label": day.strftime("%a"),
            "moods": [item["mood"] for item in sorted(manual, key=lambda c: c["ts"])
                      if item["day"] == day],
        })

    return {
        "counts": counts,
        "total": len(manual),
        "dominant_mood": _dominant(counts),
        "streak": streak,
        "today": sum(1 for item in manual if item["day"] == today),
        "days": days,
    }


def sensory_load_timeline(check_ins: Sequence[Entry], now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Today's manual check-ins, oldest first, as load points."""
    now = _now(now)
    midnight = datetime.combine(now.date(), datetime.min.time())
    manual = _manual_since(check_ins, int(midnight.timestamp() * 1000))
    manual = [item for item in manual if item["day"] == now.date()]
    manual.sort(key=lambda c: c["ts"])
    return [
        {
            "time": datetime.fromtimestamp(item["ts"] / 1000).strftime("%H:%M"),
            "mood": item["mood"],
            "load": MOOD_LOAD[item["mood"]],
        }
        for item in manual
    ]


def mood_calendar(check_ins: Sequence[Entry], now: Optional[datetime] = None, days: int = 28) -> Dict[str, Any]:
    """Last `days` days in weeks of 7, oldest first, with each day's dominant mood."""
    now = _now(now)
    today = now.date()
    first = today - timedelta(days=days - 1)
    since = int(datetime.combine(first, datetime.min.time()).timestamp() * 1000)

    buckets: Dict[date, List[str]] = {first + timedelta(days=i): [] for i in range(days)}
    for item in _manual_since(check_ins, since):
        if item["day"] in buckets:
            buckets[item["day"]].append(item["mood"])

    legend = _empty_counts()
    cells = []
    for day, moods in buckets.items():
        counts = _empty_counts()
        for mood in moods:
            counts[mood] += 1
        dominant = _dominant(counts) if moods else None
        if dominant:
            legend[dominant] += 1
        cells.append({
            "date": day.isoformat(),
            "label": str(day.day),
            "moods": moods,
            "dominant_mood": dominant,
        })

    return {
        "weeks": [cells[i:i + 7] for i in range(0, len(cells), 7)],
        "legend": legend,
        "logged_days": sum(1 for c in cells if c["moods"]),
        "total_days": days,
    }


def risk_assessment(check_in: Optional[Entry]) -> Dict[str, Any]:
    """Score the latest check-in 0-100 and place it in a green/yellow/red zone."""
    if check_in is None:
        return {"score": None, "zone": None, "mood": None}

    mood = normalize_mood(_field(check_in, "mood"))
    symptoms = _field(check_in, "symptoms") or []
    score = MOOD_RISK[mood] + RISK_PER_SYMPTOM * len(symptoms)
    score = max(0, min(100, score))

    if score <= GREEN_MAX:
        zone = "green"
    elif score <= YELLOW_MAX:
        zone = "yellow"
    else:
        zone = "red"
    return {"score": score, "zone": zone, "mood": mood}


def alert_summary(alerts: Sequence[AlertEvent], now: Optional[datetime] = None, hours: int = 24) -> Dict[str, Any]:
    """Alerts per type within the last `hours`, plus the newest alert overall."""
    now = _now(now)
    since = int((now - timedelta(hours=hours)).timestamp() * 1000)
    counts = {t: 0 for t in ALERT_TYPES}
    for alert in alerts:
        if alert.timestamp >= since:
            counts[alert.type] += 1

    latest = max(alerts, key=lambda a: a.timestamp) if alerts else None
    return {
        "window_hours": hours,
        "counts": counts,
        "total": sum(counts.values()),
        "latest": latest.model_dump() if latest else None,
    }


# ============================================================================
# Coaching
# ============================================================================

_BIG_MOMENT_TIPS = (
    "If you can, step a little away from the noise or crowd for 1-2 minutes.",
    "Try 5 slow breaths: in for 4, hold for 4, out for 6.",
    "If you have headphones, putting them on for a bit might help your system calm down.",
)
_LOW_TIPS = (
    "If you can, text or talk to someone you trust, even just a few words.",
    "Try a tiny comfort: water, a snack, or a soft object you like.",
    "You don't have to fix everything today. Just getting through this moment is enough.",
)
_STEADY_TIPS = (
    "Keep doing what works today: your brain and body like this rhythm.",
    "If things change later, you can always check in again.",
    "You're building a habit of listening to yourself. That's a big deal.",
)


def coach_message(check_in: Entry, name: str = "you", high_risk: bool = False) -> Dict[str, Any]:
    """Supportive follow-up text for a check-in the user just made."""
    mood = normalize_mood(_field(check_in, "mood"))
    symptoms = list(_field(check_in, "symptoms") or [])

    if high_risk or mood in ("overwhelmed", "angry"):
        headline = "That was a big moment."
        body = (f"I'm really proud of you for checking in instead of ignoring it, {name}. "
                "That takes courage.")
        tips = _BIG_MOMENT_TIPS
    elif mood == "sad":
        headline = "Feeling low is still valid."
        body = (f"You don't have to pretend you're okay right now. "
                f"I'm glad you told me how you feel, {name}.")
        tips = _LOW_TIPS
    else:
        headline = "Thanks for checking in."
        body = ("Even when things feel okay, noticing your state helps you stay ahead of "
                f"overload. That's really smart, {name}.")
        tips = _STEADY_TIPS

    if symptoms:
        body += (f" You told me your body feels: {', '.join(symptoms)}. "
                 "That makes sense with how you're feeling.")
    return {"headline": headline, "body": body, "tips": list(tips)}
