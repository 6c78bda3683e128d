# JSON logger subscribing to EventBus
"""
Structured event logging for the NPC stack.

Provides:
- JsonFileLogger: subscribes to an EventBus and appends MonitoringEvents
  to a JSON-lines file.
- log_event: build a MonitoringEvent and publish it in one call.

Usage:

    bus = EventBus()
    sink = JsonFileLogger(Path("logs/npc/events.log"), bus)

    log_event(
        bus=bus,
        module="npc_core.controller",
        event_type=EventType.BOUNDARY_SET,
        message="Boundary set",
        payload={"x": 0, "z": 0, "radius": 32},
    )
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

from .bus import EventBus
from .events import EventType, MonitoringEvent


log = logging.getLogger(__name__)


class JsonFileLogger:
    """
    JSON-lines sink for MonitoringEvent instances.

    Creates the parent directory if needed, writes UTF-8, one object per
    line, flushed after every event.
    """

    def __init__(self, path: Path, bus: EventBus) -> None:
        self._path = path
        self._bus = bus
        path.parent.mkdir(parents=True, exist_ok=True)
        self._file = path.open("a", encoding="utf-8")
        bus.subscribe(self._on_event)

    @property
    def path(self) -> Path:
        return self._path

    def _on_event(self, event: MonitoringEvent) -> None:
        line = json.dumps(event.to_dict(), ensure_ascii=False, default=str)
        try:
            self._file.write(line + "\n")
            self._file.flush()
        except (OSError, ValueError):
            # Disk full or handle already closed: event logging must not
            # take the server tick down with it.
            log.warning("Dropping monitoring event %s", event.event_type.name, exc_info=True)

    def close(self) -> None:
        """Unsubscribe and close the file. Call at shutdown."""
        self._bus.unsubscribe(self._on_event)
        self._file.close()


def log_event(
    bus: EventBus,
    module: str,
    event_type: EventType,
    message: str,
    payload: Optional[Dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> MonitoringEvent:
    """
    Create a MonitoringEvent stamped with the current time and publish it.

    Returns the event so callers can also hand it to other sinks.
    """
    event = MonitoringEvent(
        ts=time.time(),
        module=module,
        event_type=event_type,
        message=message,
        payload=payload or {},
        correlation_id=correlation_id,
    )
    bus.publish(event)
    return event
