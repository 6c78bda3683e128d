# src/spec/__init__.py

from __future__ import annotations

"""
Public spec surface shared by the NPC packages.

Re-exports the plain data types (positions, item stacks, entity handles)
and the capability protocols the host must implement (WorldView,
Container). No concrete implementations live here.
"""

from .types import (
    AIR,
    BlockState,
    EntityInfo,
    EntityRef,
    ItemStack,
    Vec3,
    display_name,
)
from .world import (
    Container,
    EntityPredicate,
    NavTarget,
    WorldView,
)

__all__ = [
    # data
    "AIR",
    "BlockState",
    "EntityInfo",
    "EntityRef",
    "ItemStack",
    "Vec3",
    "display_name",
    # capabilities
    "Container",
    "EntityPredicate",
    "NavTarget",
    "WorldView",
]
