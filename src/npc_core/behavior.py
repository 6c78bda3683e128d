# src/npc_core/behavior.py
"""
Behaviour state for the NPC controller.

Exactly one variant is active at a time. Each variant carries only the
data its mode needs, so combinations such as "following and attacking"
cannot be expressed. Switching mode is a single assignment of a new
variant.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from spec.types import EntityRef, Vec3


class BehaviorMode(Enum):
    IDLE = "idle"
    GOING_TO = "going_to"
    FOLLOWING = "following"
    WANDERING = "wandering"
    ATTACKING = "attacking"
    STAYING = "staying"


@dataclass(frozen=True)
class Idle:
    mode = BehaviorMode.IDLE


@dataclass(frozen=True)
class GoingTo:
    target: Vec3
    mode = BehaviorMode.GOING_TO


@dataclass(frozen=True)
class Following:
    target: EntityRef
    player_name: str
    mode = BehaviorMode.FOLLOWING


@dataclass(frozen=True)
class Wandering:
    # Ticks left before the next destination is picked; only counts down
    # while navigation is idle.
    cooldown: int = 0
    mode = BehaviorMode.WANDERING


@dataclass(frozen=True)
class Attacking:
    target: EntityRef
    entity_type: str
    mode = BehaviorMode.ATTACKING


@dataclass(frozen=True)
class Staying:
    mode = BehaviorMode.STAYING


BehaviorState = Union[Idle, GoingTo, Following, Wandering, Attacking, Staying]

IDLE = Idle()
STAYING = Staying()


def describe_behavior(state: BehaviorState) -> str:
    """Short label used by status reports and the dashboard."""
    if isinstance(state, GoingTo):
        return f"going to {state.target.label()}"
    if isinstance(state, Following):
        return f"following {state.player_name}"
    if isinstance(state, Attacking):
        return f"attacking {state.entity_type}"
    return state.mode.value


__all__ = [
    "BehaviorMode",
    "BehaviorState",
    "Idle",
    "GoingTo",
    "Following",
    "Wandering",
    "Attacking",
    "Staying",
    "IDLE",
    "STAYING",
    "describe_behavior",
]
