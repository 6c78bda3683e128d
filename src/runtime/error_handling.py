# path: src/runtime/error_handling.py

"""
Error handling helpers for the NPC runtime.

Wraps the per-tick controller call in a guard that publishes a
TICK_EXCEPTION event before letting the exception reach the host.

This does NOT change the semantics of AgentController.tick(); it only
makes failures visible on the monitoring bus.
"""

from __future__ import annotations

import logging
from typing import List

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event
from npc_core.controller import AgentController
from npc_core.effects import Effect


log = logging.getLogger(__name__)


def safe_tick_with_logging(controller: AgentController, bus: EventBus) -> List[Effect]:
    """
    Call controller.tick() inside a try/except block.

    If the tick throws, we:
    - Log it with traceback.
    - Emit a LOG event with subtype "TICK_EXCEPTION".
    - Re-raise so the host decides whether to keep ticking.
    """
    try:
        return controller.tick()
    except Exception as exc:
        log.exception("NPC tick failed")
        log_event(
            bus=bus,
            module="runtime.safe_tick",
            event_type=EventType.LOG,
            message="Controller tick raised an exception",
            payload={
                "subtype": "TICK_EXCEPTION",
                "behavior": controller.behavior.mode.value,
                "exception_repr": repr(exc),
            },
        )
        raise
