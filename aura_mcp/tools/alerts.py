# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""Caregiver alert log tool."""

from datetime import datetime

from aura_mcp._app import current_session, tool
from daemon.insights import alert_summary


@tool()
def aura_alerts(limit: int = 10, hours: int = 24) -> str:
    """
    Show the overload alert log, newest first, with counts per type.

    Alerts are written by the movement, noise and light watchers and by
    check-ins the user marks as high risk.

    Args:
        limit: How many alerts to list (default 10)
        hours: Window for the per-type counts (default 24)

    Returns:
        Summary line plus one line per alert
    """
    session = current_session()
    alerts = session.store.alerts
    if not alerts:
        return "No alerts logged."

    if hours == 24:
        summary = session.alert_summary()
    else:
        summary = alert_summary(alerts, hours=hours)

    counts = ", ".join(f"{k} {v}" for k, v in summary["counts"].items() if v)
    lines = [f"Last {summary['window_hours']}h: {summary['total']} alert(s)" + (f" ({counts})" if counts else "")]
    for alert in alerts[:max(limit, 1)]:
        when = datetime.fromtimestamp(alert.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
        lines.append(f"  {when} [{alert.type}] {alert.message}")
    return "\n".join(lines)
