#!/usr/bin/env python3
# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
NeuroAura MCP Server

Tools are organized into domain modules under aura_mcp/tools/.
Importing each module registers its tools via the @tool() decorator.

8 tools across 5 modules:
- checkins:  aura_check_in, aura_check_ins (2)
- alerts:    aura_alerts (1)
- profile:   aura_profile (1)
- insights:  aura_overview, aura_timeline, aura_risk (3)
- watchers:  aura_watchers (1)

The Session (store, bus, watchers) lives for as long as the server runs;
see session_lifespan in _app.py.
"""

import atexit
import importlib
import logging

from aura_mcp._app import mcp, shutdown_executor

logger = logging.getLogger("neuroaura.server")

_MODULE_IMPORTS = {
    "checkins": "aura_mcp.tools.checkins",
    "alerts":   "aura_mcp.tools.alerts",
    "profile":  "aura_mcp.tools.profile",
    "insights": "aura_mcp.tools.insights",
    "watchers": "aura_mcp.tools.watchers",
}

_loaded_modules: list[str] = []

for _mod_name, _import_path in _MODULE_IMPORTS.items():
    importlib.import_module(_import_path)
    _loaded_modules.append(_mod_name)

logger.info("%d tool modules loaded: %s", len(_loaded_modules), ", ".join(_loaded_modules))

atexit.register(shutdown_executor)


if __name__ == "__main__":
    mcp.run()
