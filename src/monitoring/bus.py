# EventBus for NPC monitoring events
"""
In-process pub/sub for MonitoringEvent objects.

Subscribers:
    - JsonFileLogger (JSONL event log)
    - NpcDashboard (rich terminal UI)
    - tests collecting events

The controller runs on the host's tick thread while a dashboard may
render from another, so the subscriber list is guarded by a lock and
publish() iterates over a snapshot of it.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, List

from .events import MonitoringEvent


log = logging.getLogger(__name__)

SubscriberFn = Callable[[MonitoringEvent], None]


class EventBus:
    """Minimal thread-safe event bus."""

    def __init__(self) -> None:
        self._subscribers: List[SubscriberFn] = []
        self._lock = Lock()

    def subscribe(self, fn: SubscriberFn) -> None:
        with self._lock:
            self._subscribers.append(fn)

    def unsubscribe(self, fn: SubscriberFn) -> None:
        """Safe to call even if `fn` was never subscribed."""
        with self._lock:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

    def publish(self, event: MonitoringEvent) -> None:
        """
        Deliver `event` to every subscriber, in subscription order.

        A failing subscriber is logged and skipped; it must not stop the
        others or the tick that published the event.
        """
        with self._lock:
            subscribers = list(self._subscribers)

        for fn in subscribers:
            try:
                fn(event)
            except Exception:
                log.exception("Monitoring subscriber %r failed", fn)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def clear(self) -> None:
        """Drop all subscribers (mostly for tests)."""
        with self._lock:
            self._subscribers.clear()
