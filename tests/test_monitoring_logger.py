#tests/test_monitoring_logger.py
"""
Tests for monitoring.logger.JsonFileLogger and log_event.

Covers:
- One JSON object per line with the event fields
- Parent directory creation
- close() detaches from the bus
"""

from __future__ import annotations

import json
from pathlib import Path

from monitoring.bus import EventBus
from monitoring.logger import JsonFileLogger, log_event
from monitoring.events import EventType


def test_json_file_logger_writes_valid_json(tmp_path: Path):
    bus = EventBus()
    log_path = tmp_path / "events.log"

    logger = JsonFileLogger(log_path, bus)

    log_event(
        bus=bus,
        module="npc_core.controller",
        event_type=EventType.BOUNDARY_SET,
        message="BOUNDARY_SET center=(0,0) radius=32",
        payload={"center_x": 0.0, "center_z": 0.0, "radius": 32.0},
        correlation_id="session-123",
    )
    log_event(
        bus=bus,
        module="npc_core.controller",
        event_type=EventType.BOUNDARY_CLEARED,
        message="BOUNDARY_CLEARED",
        payload={},
        correlation_id="session-123",
    )

    logger.close()

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2

    data = json.loads(lines[0])
    assert data["module"] == "npc_core.controller"
    assert data["event_type"] == "BOUNDARY_SET"
    assert data["payload"]["radius"] == 32.0
    assert data["correlation_id"] == "session-123"
    assert isinstance(data["ts"], (int, float))
    assert json.loads(lines[1])["event_type"] == "BOUNDARY_CLEARED"


def test_logger_parent_dir_created_and_detached_on_close(tmp_path: Path):
    log_path = tmp_path / "nested" / "logs" / "events.log"

    bus = EventBus()
    logger = JsonFileLogger(log_path, bus)

    log_event(
        bus=bus,
        module="runtime.host",
        event_type=EventType.HEARD,
        message="HEARD Steve",
        payload={"player": "Steve", "message": "hi"},
    )
    logger.close()

    assert log_path.exists()
    assert bus.subscriber_count == 0
    assert json.loads(log_path.read_text(encoding="utf-8"))["payload"]["player"] == "Steve"
