# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""Profile tool — who is using NeuroAura this session."""

from typing import List, Optional

from pydantic import ValidationError

from aura_mcp._app import current_session, tool
from daemon.schemas import UserProfile


def _describe(profile: Optional[UserProfile]) -> str:
    if profile is None:
        return "No profile set."
    lines = [f"{profile.name} ({profile.role}, {profile.language})"]
    if profile.contact:
        lines.append(f"  Contact: {profile.contact}")
    if profile.sensitivities:
        lines.append(f"  Sensitivities: {', '.join(profile.sensitivities)}")
    if profile.allergies:
        lines.append(f"  Allergies: {', '.join(profile.allergies)}")
    return "\n".join(lines)


@tool()
def aura_profile(
    action: str = "get",
    name: Optional[str] = None,
    contact: str = "",
    role: str = "individual",
    language: str = "en",
    sensitivities: Optional[List[str]] = None,
    allergies: Optional[List[str]] = None,
) -> str:
    """
    Read, replace or clear the active user profile.

    Args:
        action: "get" to view, "set" to replace the whole profile, "clear" to remove it
        name: Display name (required for set)
        contact: Email or phone for a caregiver
        role: "individual", "parent", "minor" or "guest"
        language: Language code (default "en")
        sensitivities: Known triggers, e.g. ["loud noise", "bright light"]
        allergies: Allergies worth knowing in a crisis

    Returns:
        The profile after the action
    """
    store = current_session().store

    if action == "set":
        if not name:
            return "Error: name is required to set a profile."
        try:
            profile = UserProfile(
                name=name,
                contact=contact,
                role=role,
                language=language,
                sensitivities=sensitivities or [],
                allergies=allergies or [],
            )
        except ValidationError as e:
            return f"Error: invalid profile: {e.errors()[0]['msg']}"
        changed = store.set_profile(profile)
        prefix = "Profile saved." if changed else "Profile unchanged."
        return f"{prefix}\n{_describe(store.profile)}"

    if action == "clear":
        changed = store.set_profile(None)
        return "Profile cleared." if changed else "No profile set."

    if action != "get":
        return "Error: action must be 'get', 'set' or 'clear'."
    return _describe(store.profile)
