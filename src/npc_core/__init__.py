# src/npc_core/__init__.py
"""
Single-NPC controller: behaviour state machine, boundary fence,
inventory transfers and the effect executor.
"""

from .behavior import BehaviorMode, BehaviorState, describe_behavior
from .boundary import Boundary, BoundaryEnforcer
from .config import ControllerConfig
from .controller import AgentController
from .effects import Effect, EffectExecutor
from .errors import NpcCoreError
from .inventory import SlotContainer, TransferResult

__all__ = [
    "AgentController",
    "BehaviorMode",
    "BehaviorState",
    "Boundary",
    "BoundaryEnforcer",
    "ControllerConfig",
    "Effect",
    "EffectExecutor",
    "NpcCoreError",
    "SlotContainer",
    "TransferResult",
    "describe_behavior",
]
