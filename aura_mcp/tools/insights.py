# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""Insight tools: weekly overview, mood calendar, today's load and risk."""

from aura_mcp._app import current_session, tool


@tool()
def aura_overview(view: str = "week") -> str:
    """
    Mood overview built from the user's own check-ins (sensor entries excluded).

    Args:
        view: "week" for the last 7 days, "calendar" for the last 28 days

    Returns:
        Counts, dominant mood, streak and per-day moods
    """
    session = current_session()

    if view == "calendar":
        cal = session.calendar()
        lines = [f"Last {cal['total_days']} days: {cal['logged_days']} day(s) logged"]
        for week in cal["weeks"]:
            cells = [f"{c['label']}:{(c['dominant_mood'] or '-')[:4]}" for c in week]
            lines.append("  " + " ".join(cells))
        legend = ", ".join(f"{m} {n}" for m, n in cal["legend"].items() if n)
        if legend:
            lines.append(f"Dominant days: {legend}")
        return "\n".join(lines)

    if view != "week":
        return "Error: view must be 'week' or 'calendar'."

    ov = session.overview()
    if ov["total"] == 0:
        return "No check-ins in the last 7 days."

    counts = ", ".join(f"{m} {n}" for m, n in ov["counts"].items() if n)
    lines = [
        f"Last 7 days: {ov['total']} check-in(s) ({counts})",
        f"Mostly: {ov['dominant_mood']}",
        f"Streak: {ov['streak']} day(s), today: {ov['today']}",
    ]
    for day in ov["days"]:
        moods = ", ".join(day["moods"]) or "-"
        lines.append(f"  {day['label']} {day['date']}: {moods}")
    return "\n".join(lines)


@tool()
def aura_timeline() -> str:
    """
    Today's sensory load, one point per manual check-in, oldest first.

    Returns:
        Time, mood and load percentage per check-in
    """
    points = current_session().timeline()
    if not points:
        return "No check-ins today."
    lines = ["Sensory load today:"]
    for p in points:
        bar = "#" * (p["load"] // 10)
        lines.append(f"  {p['time']} {p['mood']:<12} {p['load']:>3}% {bar}")
    return "\n".join(lines)


@tool()
def aura_risk() -> str:
    """
    Caregiver risk view for the latest check-in.

    Returns:
        Score 0-100 and a green / yellow / red zone
    """
    risk = current_session().risk()
    if risk["score"] is None:
        return "No check-ins yet, no risk score."
    return f"Risk: {risk['score']}/100 ({risk['zone']}), latest mood: {risk['mood']}"
