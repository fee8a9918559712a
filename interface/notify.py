# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
NeuroAura Notifications
Local notifications for the watchers: immediate or after a delay.

Delivery is fire-and-forget. A failed delivery is logged and emitted as
notification_failed; the caller never sees an exception.

Backends:
  - desktop_backend: notify-send on Linux, PowerShell MessageBox on WSL
  - LogBackend:      log only (headless runs)
  - MemoryBackend:   keeps what was sent (tests)
"""

import asyncio
import itertools
import logging
import re
import subprocess
from typing import Any, Callable, Dict, List, Optional

from daemon.events import EventBus, Events
from daemon.schemas import Notification

logger = logging.getLogger("neuroaura.interface.notify")

Backend = Callable[[Notification], bool]


def is_wsl() -> bool:
    """Check if running in WSL."""
    try:
        with open('/proc/version', 'r') as f:
            return 'microsoft' in f.read().lower()
    except OSError:
        return False


def notify_wsl(title: str, message: str) -> bool:
    """Send notification via Windows PowerShell (for WSL)."""
    try:
        # Strip shell metacharacters, then escape quotes
        safe_title = re.sub(r"[;|&`$\{\}]", "", title)[:100]
        safe_message = re.sub(r"[;|&`$\{\}]", "", message)[:500]
        safe_title = safe_title.replace("'", "''").replace('"', '""')
        safe_message = safe_message.replace("'", "''").replace('"', '""')

        ps_script = f"""
        Add-Type -AssemblyName System.Windows.Forms
        [System.Windows.Forms.MessageBox]::Show('{safe_message}', '{safe_title}', 'OK', 'Information')
        """

        ps_path = '/mnt/c/Windows/System32/WindowsPowerShell/v1.0/powershell.exe'
        subprocess.Popen(
            [ps_path, '-WindowStyle', 'Hidden', '-Command', ps_script],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL
        )
        return True
    except (OSError, subprocess.SubprocessError) as e:
        logger.error("WSL notification failed: %s", e)
        return False


def notify_linux(title: str, message: str, duration: int = 8000) -> bool:
    """Send notification via notify-send (native Linux)."""
    try:
        result = subprocess.run(
            ['notify-send', '-a', 'NeuroAura', '-t', str(duration), title, message],
            capture_output=True,
            timeout=5
        )
        return result.returncode == 0
    except FileNotFoundError:
        logger.warning("notify-send not found. Install libnotify-bin.")
        return False
    except (OSError, subprocess.SubprocessError) as e:
        logger.error("Linux notification failed: %s", e)
        return False


def desktop_backend(notification: Notification) -> bool:
    """Show a notification on the desktop. Detects WSL vs native Linux."""
    if is_wsl():
        return notify_wsl(notification.title, notification.body)
    return notify_linux(notification.title, notification.body)


class LogBackend:
    """Writes notifications to the log instead of showing them."""

    def __call__(self, notification: Notification) -> bool:
        logger.info("[notification] %s | %s", notification.title, notification.body)
        return True


class MemoryBackend:
    """Keeps every delivered notification. fail=True makes delivery raise."""

    def __init__(self, fail: bool = False):
        self.sent: List[Notification] = []
        self.fail = fail

    def __call__(self, notification: Notification) -> bool:
        if self.fail:
            raise RuntimeError("notification backend unavailable")
        self.sent.append(notification)
        return True


class NotificationDispatcher:
    """
    Schedules local notifications.

    trigger=None delivers now; a number of seconds delivers later on the
    running event loop. Pending delayed notifications can be dropped with
    cancel_pending() when the session ends.
    """

    def __init__(self, backend: Optional[Backend] = None, bus: Optional[EventBus] = None):
        self.backend: Backend = backend if backend is not None else desktop_backend
        self.bus = bus
        self._ids = itertools.count(1)
        self._pending: Dict[str, asyncio.TimerHandle] = {}
        self.delivered = 0
        self.failed = 0

    @property
    def pending(self) -> List[str]:
        return list(self._pending)

    def schedule(
        self,
        title: str,
        body: str,
        sound: Optional[str] = "default",
        data: Optional[Dict[str, Any]] = None,
        trigger: Optional[float] = None,
    ) -> Optional[Notification]:
        """
        Request a notification.

        Returns the request once it is delivered (immediate) or queued
        (delayed); None if it was dropped or delivery failed.
        """
        try:
            notification = Notification(
                id=f"n{next(self._ids)}",
                title=title,
                body=body,
                sound=sound,
                data=data or {},
                delay_seconds=trigger,
            )
        except ValueError as e:
            logger.error("Rejected notification %r: %s", title, e)
            self._failed(None, str(e))
            return None

        if trigger is None:
            return notification if self._deliver(notification) else None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No event loop, delayed notification %r dropped", title)
            self._failed(notification, "no running event loop")
            return None

        self._pending[notification.id] = loop.call_later(
            trigger, self._deliver_pending, notification
        )
        logger.debug("Notification %s scheduled in %.0fs", notification.id, trigger)
        return notification

    def _deliver_pending(self, notification: Notification) -> None:
        self._pending.pop(notification.id, None)
        self._deliver(notification)

    def _deliver(self, notification: Notification) -> bool:
        try:
            ok = bool(self.backend(notification))
        except Exception as e:
            logger.warning("Failed to deliver notification %r: %s", notification.title, e)
            self._failed(notification, str(e))
            return False

        if not ok:
            logger.warning("Notification backend refused %r", notification.title)
            self._failed(notification, "backend returned failure")
            return False

        self.delivered += 1
        if self.bus is not None:
            self.bus.emit(Events.NOTIFICATION_SENT, {
                "id": notification.id,
                "kind": notification.data.get("type"),
            }, source="notify")
        return True

    def _failed(self, notification: Optional[Notification], reason: str) -> None:
        self.failed += 1
        if self.bus is not None:
            self.bus.emit(Events.NOTIFICATION_FAILED, {
                "id": notification.id if notification else None,
                "kind": notification.data.get("type") if notification else None,
                "reason": reason,
            }, source="notify")

    def cancel_pending(self) -> int:
        """Drop all delayed notifications that haven't fired yet."""
        count = len(self._pending)
        for handle in self._pending.values():
            handle.cancel()
        self._pending.clear()
        if count:
            logger.info("Dropped %d pending notification(s)", count)
        return count
