# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
NeuroAura Event Bus — fan-out channel for the session's event store.

Every store mutation and every watcher lifecycle change is emitted here.
Derived views, the cache and the loggers subscribe instead of being
called directly by the store or the watchers.

Each Session constructs its own bus; there is no module-level instance.

Core design:
- Dual dispatch: sync handlers called inline, async handlers scheduled
- Subscriber priority ordering
- Bounded event history for debugging
- Thread-safe (tool calls may arrive on executor threads)
- Recursion depth limit (max 3) as safety valve

Usage:
    from daemon.events import EventBus, Events

    bus = EventBus()
    bus.on(Events.CHECKIN_ADDED, on_check_in)
    bus.on(Events.ALERT_LOGGED, on_alert, priority=10)
    bus.emit(Events.ALERT_LOGGED, {"type": "noise"}, source="watcher.noise")
    await bus.emit_async(Events.SESSION_ENDED, {})
"""

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Set

logger = logging.getLogger("neuroaura.events")

# Max emit depth per thread before refusing
_MAX_EMIT_DEPTH = 3


class Events:
    """Registry of all event types. Use these constants, not raw strings."""

    # --- Event store ---
    PROFILE_CHANGED = "profile_changed"
    CHECKIN_ADDED = "checkin_added"
    ALERT_LOGGED = "alert_logged"

    # --- Watchers ---
    WATCHER_STARTED = "watcher_started"
    WATCHER_DISABLED = "watcher_disabled"
    WATCHER_TRIGGERED = "watcher_triggered"
    WATCHER_STOPPED = "watcher_stopped"
    SAMPLING_FAILED = "sampling_failed"

    # --- Notifications ---
    NOTIFICATION_SENT = "notification_sent"
    NOTIFICATION_FAILED = "notification_failed"

    # --- Session lifecycle ---
    SESSION_STARTED = "session_started"
    SESSION_ENDED = "session_ended"


@dataclass
class Event:
    """A single emitted event."""
    type: str
    data: Dict[str, Any]
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    source: Optional[str] = None  # module that emitted


@dataclass
class Subscriber:
    """A registered event handler."""
    callback: Callable[[Event], Any]
    priority: int = 0  # higher = called first
    source: Optional[str] = None  # for debugging
    is_async: bool = False  # auto-detected from callback

    @property
    def label(self) -> str:
        return self.source or getattr(self.callback, "__name__", repr(self.callback))


class EventBus:
    """
    Session event bus.

    Sync handlers run inline; async handlers are scheduled on the running
    loop (emit) or awaited (emit_async). A failing handler is logged and
    never stops the others.
    """

    def __init__(self, history_size: int = 100):
        self._subscribers: Dict[str, List[Subscriber]] = {}
        self._history: List[Event] = []
        self._history_size = history_size
        self._lock = threading.Lock()
        self._emit_count = 0
        self._local = threading.local()  # per-thread recursion depth
        self._tasks: Set[asyncio.Task] = set()  # scheduled async handlers

    def on(
        self,
        event_type: str,
        callback: Callable,
        priority: int = 0,
        source: Optional[str] = None,
    ) -> None:
        """
        Subscribe to an event type. Accepts both sync and async callbacks.

        Args:
            event_type: Event type string (use Events.* constants)
            callback: Function called with Event when fired (sync or async)
            priority: Higher = called first (default 0)
            source: Optional label for debugging
        """
        with self._lock:
            subs = self._subscribers.setdefault(event_type, [])
            subs.append(Subscriber(
                callback=callback,
                priority=priority,
                source=source,
                is_async=asyncio.iscoroutinefunction(callback),
            ))
            subs.sort(key=lambda s: -s.priority)

    # --- Dispatch ---

    def _record(self, event: Event) -> List[Subscriber]:
        """Count + store in history, return a snapshot of subscribers."""
        with self._lock:
            self._emit_count += 1
            self._history.append(event)
            if len(self._history) > self._history_size:
                self._history = self._history[-self._history_size:]
            return list(self._subscribers.get(event.type, []))

    def _schedule(self, loop: asyncio.AbstractEventLoop, sub: Subscriber, event: Event) -> None:
        task = loop.create_task(sub.callback(event))
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._handler_done(t, event.type, sub))

    def _handler_done(self, task: asyncio.Task, event_type: str, sub: Subscriber) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Event handler error: %s -> %s: %s",
                         event_type, sub.label, task.exception())

    def _enter(self, event_type: str) -> bool:
        depth = getattr(self._local, "depth", 0) + 1
        if depth > _MAX_EMIT_DEPTH:
            logger.warning(
                "Event recursion depth %d exceeded for %s, skipping",
                depth, event_type,
            )
            return False
        self._local.depth = depth
        return True

    def _exit(self) -> None:
        self._local.depth -= 1

    def emit(
        self,
        event_type: str,
        data: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
    ) -> Event:
        """
        Emit an event from sync code.

        Sync handlers are called inline. Async handlers are scheduled as tasks
        when a loop is running in this thread (the bus keeps them until they
        finish), otherwise skipped with a debug log.
        """
        event = Event(type=event_type, data=data or {}, source=source)
        if not self._enter(event_type):
            return event

        try:
            for sub in self._record(event):
                try:
                    if sub.is_async:
                        try:
                            loop = asyncio.get_running_loop()
                        except RuntimeError:
                            logger.debug("No event loop for async handler %s on %s",
                                         sub.label, event_type)
                        else:
                            self._schedule(loop, sub, event)
                    else:
                        sub.callback(event)
                except Exception as e:
                    logger.error("Event handler error: %s -> %s: %s",
                                 event_type, sub.label, e)
            return event
        finally:
            self._exit()

    async def emit_async(
        self,
        event_type: str,
        data: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
    ) -> Event:
        """Emit from async code. Awaits async handlers, calls sync ones directly."""
        event = Event(type=event_type, data=data or {}, source=source)
        if not self._enter(event_type):
            return event

        try:
            for sub in self._record(event):
                try:
                    if sub.is_async:
                        await sub.callback(event)
                    else:
                        sub.callback(event)
                except Exception as e:
                    logger.error("Event handler error: %s -> %s: %s",
                                 event_type, sub.label, e)
            return event
        finally:
            self._exit()

    # --- Introspection ---

    def history(self, event_type: Optional[str] = None, limit: int = 20) -> List[Dict[str, Any]]:
        """Recent events, oldest first."""
        with self._lock:
            events = self._history
            if event_type:
                events = [e for e in events if e.type == event_type]
            return [
                {
                    "type": e.type,
                    "data": e.data,
                    "timestamp": e.timestamp,
                    "source": e.source,
                }
                for e in events[-limit:]
            ]

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            sub_counts = {k: len(v) for k, v in self._subscribers.items() if v}
            return {
                "total_emitted": self._emit_count,
                "history_size": len(self._history),
                "subscriber_counts": sub_counts,
                "total_subscribers": sum(sub_counts.values()),
                "pending_handlers": len(self._tasks),
            }
