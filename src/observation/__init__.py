# src/observation/__init__.py
"""
Observation reports: read-only JSON snapshots of the NPC and its
surroundings for operators and external decision makers.
"""

from .reporter import (
    HOSTILE_MOBS,
    NOTABLE_BLOCKS,
    ObservationReporter,
    round_health,
    time_of_day_label,
)

__all__ = [
    "ObservationReporter",
    "HOSTILE_MOBS",
    "NOTABLE_BLOCKS",
    "round_health",
    "time_of_day_label",
]
