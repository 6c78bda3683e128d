# path: src/monitoring/events.py
"""
Event schema for NPC monitoring.

Defines:
- EventType: every notable thing the controller or host reports
- MonitoringEvent: one structured, JSON-safe event

Events are published on monitoring.bus.EventBus and written out by
monitoring.logger.JsonFileLogger.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional


class EventType(Enum):
    """Typed monitoring events emitted by the NPC stack."""

    # Agent lifecycle
    SPAWNED = auto()
    DESPAWNED = auto()
    DIED = auto()
    DAMAGED = auto()

    # Speech / chat
    SAID = auto()
    HEARD = auto()
    SUMMONED = auto()

    # Boundary
    BOUNDARY_SET = auto()
    BOUNDARY_CLEARED = auto()
    BOUNDARY_CLAMPED = auto()
    BOUNDARY_ENFORCED = auto()

    # Behaviour / directives
    BEHAVIOR_CHANGED = auto()
    DIRECTIVE = auto()

    # Operator toggles
    BRAIN_TOGGLED = auto()
    THINKING_CHANGED = auto()

    # Generic log messages (including tick exceptions)
    LOG = auto()


@dataclass
class MonitoringEvent:
    """
    Runtime event emitted by the controller, the command surface or the
    host wiring. All fields must be JSON-safe.
    """

    ts: float                   # UNIX timestamp (seconds)
    module: str                 # Source module ("npc_core.controller", ...)
    event_type: EventType
    message: str                # Short human-readable description
    payload: Dict[str, Any]     # Structured data
    correlation_id: Optional[str] = None  # e.g. one id per spawn session

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict for loggers."""
        data = asdict(self)
        data["event_type"] = self.event_type.name
        return data
