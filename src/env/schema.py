# NpcProfile and its section dataclasses
# src/env/schema.py

from dataclasses import dataclass, field
from typing import Optional

from npc_core.boundary import Boundary
from npc_core.config import ControllerConfig


@dataclass
class LoggingSettings:
    """Root log level for configure_logging()."""
    level: str = "INFO"  # any logging level name


@dataclass
class MonitoringSettings:
    """Where monitoring events go. event_log=None disables the JSONL sink."""
    event_log: Optional[str] = "logs/npc/events.log"
    dashboard: bool = False


@dataclass
class NpcProfile:
    """Resolved NPC configuration loaded from config/npc.yaml."""
    name: str
    controller: ControllerConfig
    boundary: Optional[Boundary] = None       # startup boundary, if any
    spawn_on_start: bool = False
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    monitoring: MonitoringSettings = field(default_factory=MonitoringSettings)
