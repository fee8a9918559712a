# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
NeuroAura CLI — run the MCP server, run the watchers headless, check sensors.

Usage:
    neuroaura init                       Write the default watcher settings file
    neuroaura init --force               Overwrite an existing settings file
    neuroaura doctor                     Sensor and notification health check
    neuroaura serve                      Start MCP server (stdio)
    neuroaura watch                      Run the watchers on this machine's sensors
    neuroaura watch --trace FILE         Replay a recorded sensor trace
    neuroaura watch --duration 60        Stop after 60 seconds
    neuroaura watch --notify log         Log notifications instead of showing them
    neuroaura --data-dir PATH            Override data directory
"""

import argparse
import asyncio
import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Optional

# ---------------------------------------------------------------------------
# ANSI helpers (respects NO_COLOR)
# ---------------------------------------------------------------------------

_NO_COLOR = os.environ.get("NO_COLOR") is not None


def _sgr(code: str, text: str) -> str:
    if _NO_COLOR or not sys.stdout.isatty():
        return text
    return f"\033[{code}m{text}\033[0m"


def green(t: str) -> str:
    return _sgr("32", t)


def red(t: str) -> str:
    return _sgr("31", t)


def bold(t: str) -> str:
    return _sgr("1", t)


PASS = green("PASS")
FAIL = red("FAIL")


def _init(data_dir: Path, force: bool = False) -> None:
    from core.paths import configure
    from watcher.config import write_default_settings

    paths = configure(data_dir)
    paths.ensure_dirs()
    existed = paths.watcher_config.exists()
    path = write_default_settings(force=force)
    if existed and not force:
        print(f"Settings already exist: {path} (use --force to overwrite)")
    else:
        print(f"Wrote default watcher settings: {path}")


async def _sensor_checks(sensors) -> list[tuple[str, bool, str]]:
    from senses.base import Permission

    results = []
    for label, sensor in (("Motion", sensors.motion), ("Sound", sensors.sound), ("Light", sensors.light)):
        if not await sensor.is_available():
            results.append((label, False, "not available on this machine"))
            continue
        permission = await sensor.request_permission()
        results.append((label, permission == Permission.GRANTED, permission.value))
    return results


def run_health_check(data_dir: Path) -> list[tuple[str, bool, str]]:
    """Run diagnostic checks. Returns [(label, passed, detail), ...]."""
    from core.paths import configure
    from daemon.schemas import WatcherSettings, load_validated
    from daemon.session import default_sensors
    from interface.notify import is_wsl

    paths = configure(data_dir)
    results: list[tuple[str, bool, str]] = []

    exists = data_dir.is_dir()
    results.append(("Data directory", exists, str(data_dir)))
    results.append(("  Writable", exists and os.access(data_dir, os.W_OK), ""))

    config = paths.watcher_config
    if config.is_file():
        settings = load_validated(config, WatcherSettings)
        off = [k for k in ("movement", "noise", "light") if not getattr(settings, k).enabled]
        results.append(("Watcher settings", True, f"disabled: {', '.join(off)}" if off else "all enabled"))
    else:
        results.append(("Watcher settings", True, "defaults (run: neuroaura init)"))

    results.extend(asyncio.run(_sensor_checks(default_sensors())))

    if is_wsl():
        results.append(("Notifications", True, "PowerShell (WSL)"))
    else:
        found = shutil.which("notify-send") is not None
        results.append(("Notifications", found, "notify-send" if found else "install libnotify-bin"))
    return results


def _doctor(data_dir: Path) -> None:
    """Print diagnostic health checks."""
    print()
    print(bold("  NeuroAura Doctor"))
    print()
    passed = failed = 0
    for label, ok, detail in run_health_check(data_dir):
        suffix = f" ({detail})" if detail else ""
        print(f"  [{PASS if ok else FAIL}] {label}{suffix}")
        if ok:
            passed += 1
        else:
            failed += 1
    print()
    total = passed + failed
    if failed == 0:
        print(f"  {green('All clear')}: {total}/{total} checks passed")
    else:
        print(f"  {passed}/{total} passed, {red(str(failed) + ' failed')}")
        print("  Watchers for missing sensors stay off; the rest still run.")
    print()


def _serve(data_dir: Path) -> None:
    """Start the MCP server over stdio."""
    from core.paths import configure

    configure(data_dir).ensure_dirs()

    from aura_mcp._app import configure_logging
    configure_logging()

    from aura_mcp.server import mcp
    mcp.run()


def _resolve_trace(raw: str) -> Path:
    """A trace path as given, else a file of that name in the traces directory."""
    from core.paths import get_paths

    path = Path(raw).expanduser()
    if path.exists():
        return path
    candidate = get_paths().traces_dir / raw
    return candidate if candidate.exists() else path


async def run_watch(session, duration: Optional[float] = None) -> None:
    """Run a session until `duration` elapses or the task is cancelled."""
    async with session:
        if duration is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(duration)


def _watch(data_dir: Path, trace: Optional[str], duration: Optional[float],
           notify: str, verbose: bool) -> None:
    """Run the watchers headless, logging to stderr."""
    from core.paths import configure
    from daemon.schemas import AuraValidationError, load_trace
    from daemon.session import SensorSuite, Session, default_sensors
    from interface.notify import LogBackend, NotificationDispatcher, desktop_backend
    from senses.replay import sensors_from_trace

    configure(data_dir).ensure_dirs()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    if trace:
        try:
            recorded = load_trace(_resolve_trace(trace))
        except AuraValidationError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        sensors = SensorSuite(*sensors_from_trace(recorded))
    else:
        sensors = default_sensors()

    backend = LogBackend() if notify == "log" else desktop_backend
    session = Session(sensors=sensors, dispatcher=NotificationDispatcher(backend))

    try:
        asyncio.run(run_watch(session, duration))
    except KeyboardInterrupt:
        pass

    stats = session.store.stats()
    print(f"{stats['check_ins']} check-in(s), {stats['alerts']} alert(s), "
          f"{session.dispatcher.delivered} notification(s) sent", file=sys.stderr)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="neuroaura",
        description="NeuroAura — sensory overload watchers and mood check-ins",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Override data directory (default: $NEUROAURA_DATA_DIR or ~/.neuroaura/)",
    )
    parser.add_argument(
        "--version", action="store_true",
        help="Show version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    init_parser = sub.add_parser("init", help="Write the default watcher settings file")
    init_parser.add_argument("--force", action="store_true", help="Overwrite existing settings")

    sub.add_parser("doctor", help="Sensor and notification health check")
    sub.add_parser("serve", help="Start MCP server (stdio)")

    watch_parser = sub.add_parser("watch", help="Run the watchers headless")
    watch_parser.add_argument("--trace", default=None,
                              help="Replay a sensor trace (JSON path, or a name in <data-dir>/traces)")
    watch_parser.add_argument("--duration", type=float, default=None,
                              help="Stop after this many seconds (default: until Ctrl-C)")
    watch_parser.add_argument("--notify", choices=["desktop", "log"], default="desktop",
                              help="Where notifications go (default: desktop)")
    watch_parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()

    if args.version:
        try:
            from importlib.metadata import version
            print(f"neuroaura {version('neuroaura')}")
        except Exception:
            print("neuroaura (version unknown — not installed via pip)")
        sys.exit(0)

    # Resolve data dir: flag → env → default
    if args.data_dir:
        data_dir = args.data_dir.expanduser().resolve()
    else:
        env = os.environ.get("NEUROAURA_DATA_DIR")
        data_dir = Path(env).expanduser().resolve() if env else Path.home() / ".neuroaura"

    if args.command == "init":
        _init(data_dir, force=args.force)
    elif args.command == "doctor":
        _doctor(data_dir)
    elif args.command == "serve":
        _serve(data_dir)
    elif args.command == "watch":
        _watch(data_dir, args.trace, args.duration, args.notify, args.verbose)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
