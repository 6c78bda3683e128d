# src/monitoring/__init__.py
"""
Monitoring for the NPC stack: event schema, in-process bus, JSONL sink
and the rich terminal dashboard.
"""

from .bus import EventBus
from .events import EventType, MonitoringEvent
from .logger import JsonFileLogger, log_event

__all__ = ["EventBus", "EventType", "MonitoringEvent", "JsonFileLogger", "log_event"]
