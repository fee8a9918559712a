# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""Watcher status tool."""

from aura_mcp._app import current_session, tool


@tool()
def aura_watchers() -> str:
    """
    Show what the movement, noise and light watchers are doing.

    Returns:
        State, last reading, trigger count and cooldown per watcher
    """
    status = current_session().status()
    lines = []
    for kind, w in status["watchers"].items():
        if not w["enabled"]:
            lines.append(f"  {kind}: off (settings)")
            continue
        if w["disabled_reason"]:
            lines.append(f"  {kind}: unavailable ({w['disabled_reason']})")
            continue
        last = f"{w['last_value']:.2f}" if w["last_value"] is not None else "-"
        line = (f"  {kind}: {w['state']}, last {last} / threshold {w['threshold']}, "
                f"{w['triggers']} trigger(s), {w['errors']} error(s)")
        if w["cooldown_remaining"] > 0:
            line += f", cooling {w['cooldown_remaining']:.0f}s"
        lines.append(line)

    n = status["notifications"]
    lines.append(f"Notifications: {n['delivered']} sent, {n['failed']} failed, {n['pending']} pending")
    return "\n".join(lines)
