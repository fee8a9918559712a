# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""Shared FastMCP application instance, session lifespan and tool registration.

Execution model:
  All sync tool handlers are wrapped in async def + run_in_executor so a
  slow tool never stalls the watcher loops sharing the event loop. The raw
  sync function is kept in _TOOL_REGISTRY and is what the tool modules
  export, so it can be called directly.

The server lifespan owns exactly one Session: it is started when the MCP
server comes up and stopped when it goes down. Tools reach it through
current_session().
"""

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP

from core.paths import get_paths
from daemon.session import Session

logger = logging.getLogger("neuroaura.app")

_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="neuroaura-tool")

_session: Optional[Session] = None

# Keys are the function name (e.g. "aura_check_in"), values the raw sync callable.
_TOOL_REGISTRY: dict = {}


def configure_logging(level: int = logging.DEBUG) -> None:
    """Route all neuroaura.* loggers to the data-dir log file. stdio belongs to MCP."""
    log_path = get_paths().daemon_log
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.FileHandler(str(log_path)),
        ],
    )


# ---------------------------------------------------------------------------
# Session holder
# ---------------------------------------------------------------------------

def bind_session(session: Optional[Session]) -> None:
    """Make `session` the one tools operate on (None to unbind)."""
    global _session
    _session = session


def current_session() -> Session:
    if _session is None:
        raise RuntimeError("No NeuroAura session is running")
    return _session


@asynccontextmanager
async def session_lifespan(server: FastMCP) -> AsyncIterator[dict]:
    session = Session()
    bind_session(session)
    logger.info("MCP session lifespan entered")
    try:
        async with session:
            yield {"session": session}
    finally:
        bind_session(None)
        logger.info("MCP session lifespan exited")


mcp = FastMCP("neuroaura", lifespan=session_lifespan)


def tool():
    """Register a tool with MCP.

    - Stores the raw sync function in _TOOL_REGISTRY.
    - Wraps sync functions in async def + run_in_executor for MCP registration.
    - Returns the raw function.
    """
    def decorator(fn):
        _TOOL_REGISTRY[fn.__name__] = fn

        if not asyncio.iscoroutinefunction(fn):
            @functools.wraps(fn)
            async def async_wrapper(**kwargs):
                loop = asyncio.get_running_loop()
                return await loop.run_in_executor(
                    _executor, lambda: fn(**kwargs)
                )
            mcp.tool()(async_wrapper)
        else:
            mcp.tool()(fn)
        return fn

    return decorator


def shutdown_executor() -> None:
    """Graceful shutdown of the tool executor pool."""
    _executor.shutdown(wait=False)
    logger.info("Tool executor pool shut down")
