# src/npc_core/testing/fakes.py
"""
Test helpers for npc_core.

Provides:
- FakeWorld: in-memory WorldView implementation for unit tests and the
  demo script.

Everything the controller asks the world to do is recorded in plain
lists (navigations, strikes, broadcasts, particles, teleports) so tests
can assert on it directly. Navigation never actually moves anything;
tests move entities themselves with move_entity().
"""

from __future__ import annotations

import itertools
import math
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from spec.types import AIR, BlockState, EntityInfo, EntityRef, ItemStack, Vec3
from spec.world import EntityPredicate, NavTarget

from ..inventory import SlotContainer


BlockKey = Tuple[int, int, int]


def _key(point: Vec3) -> BlockKey:
    return (math.floor(point.x), math.floor(point.y), math.floor(point.z))


@dataclass
class NavRequest:
    """Record of a navigate_to() call."""

    agent: EntityRef
    target: NavTarget
    speed: float
    started: bool


class FakeWorld:
    """
    In-memory WorldView used for unit and integration tests.

    Features:
    - Entities keyed by id; agents, players, mobs and dropped items.
    - Sparse block map (missing positions are air) and containers by
      block position.
    - `pathable` toggles whether navigate_to() succeeds.
    - `nav_done` is what navigation_done() reports.
    """

    def __init__(
        self,
        *,
        spawn: Vec3 = Vec3(0, 64, 0),
        agent_inventory_size: int = 8,
        ground_y: int = 64,
    ) -> None:
        self._ids = itertools.count(1)
        self._entities: Dict[int, EntityInfo] = {}
        self._inventories: Dict[int, SlotContainer] = {}
        self._blocks: Dict[BlockKey, BlockState] = {}
        self._containers: Dict[BlockKey, SlotContainer] = {}
        self._biomes: Dict[BlockKey, str] = {}

        self.spawn = spawn
        self.agent_inventory_size = agent_inventory_size
        self.ground_y = ground_y
        self.biome = "plains"
        self.time_of_day = 1000
        self.raining = False

        self.pathable: bool = True
        self.nav_done: bool = True
        self.strike_ok: bool = True

        self.navigations: List[NavRequest] = []
        self.stops: int = 0
        self.looks: List[NavTarget] = []
        self.strikes: List[EntityRef] = []
        self.broadcasts: List[str] = []
        self.particles: List[Tuple[Vec3, str, int]] = []
        self.teleports: List[Vec3] = []
        self.display_names: Dict[int, str] = {}
        self.placed: List[Tuple[Vec3, str]] = []
        self.broken: List[Vec3] = []

    # ------------------------------------------------------------------
    # Test-only helpers
    # ------------------------------------------------------------------

    def add_entity(self, kind: str, position: Vec3, **kwargs) -> EntityRef:
        ref = EntityRef(next(self._ids))
        self._entities[ref.entity_id] = EntityInfo(
            ref=ref, kind=kind, position=position, **kwargs
        )
        return ref

    def add_player(self, name: str, position: Vec3) -> EntityRef:
        return self.add_entity("player", position, name=name, health=20.0, max_health=20.0)

    def add_mob(self, kind: str, position: Vec3) -> EntityRef:
        return self.add_entity(kind, position, health=20.0, max_health=20.0)

    def add_item(self, position: Vec3, stack: ItemStack) -> EntityRef:
        return self.add_entity("item", position, living=False, item=stack)

    def move_entity(self, ref: EntityRef, position: Vec3) -> None:
        self._update(ref, position=position)

    def kill(self, ref: EntityRef) -> None:
        self._update(ref, alive=False)

    def disconnect(self, ref: EntityRef) -> None:
        """Players leave the world entirely."""
        self._entities.pop(ref.entity_id, None)

    def set_health(self, ref: EntityRef, health: float) -> None:
        self._update(ref, health=health)

    def put_block(self, point: Vec3, name: str, *, replaceable: bool = False) -> None:
        self._blocks[_key(point)] = BlockState(name=name, replaceable=replaceable)

    def put_container(self, point: Vec3, size: int = 27, **kwargs) -> SlotContainer:
        container = SlotContainer(size, **kwargs)
        self._containers[_key(point)] = container
        self._blocks[_key(point)] = BlockState(name="block.minecraft.chest")
        return container

    def set_biome(self, point: Vec3, biome: str) -> None:
        self._biomes[_key(point)] = biome

    def entity(self, ref: EntityRef) -> Optional[EntityInfo]:
        return self._entities.get(ref.entity_id)

    def item_entities(self) -> List[EntityInfo]:
        return [e for e in self._entities.values() if e.item is not None]

    def _update(self, ref: EntityRef, **changes) -> None:
        info = self._entities.get(ref.entity_id)
        if info is not None:
            self._entities[ref.entity_id] = replace(info, **changes)

    # ------------------------------------------------------------------
    # WorldView: entities
    # ------------------------------------------------------------------

    def resolve(self, ref: EntityRef) -> Optional[EntityInfo]:
        return self._entities.get(ref.entity_id)

    def find_entities(
        self,
        center: Vec3,
        radius: float,
        predicate: Optional[EntityPredicate] = None,
    ) -> List[EntityInfo]:
        found = []
        for info in self._entities.values():
            if info.position.distance_to(center) > radius:
                continue
            if predicate is not None and not predicate(info):
                continue
            found.append(info)
        return found

    def player_by_name(self, name: str) -> Optional[EntityRef]:
        for info in self._entities.values():
            if info.kind == "player" and info.name == name:
                return info.ref
        return None

    def online_players(self) -> List[EntityInfo]:
        return [e for e in self._entities.values() if e.kind == "player"]

    # ------------------------------------------------------------------
    # WorldView: agent lifecycle
    # ------------------------------------------------------------------

    def spawn_point(self) -> Vec3:
        return self.spawn

    def spawn_agent(self, point: Vec3, name: str) -> EntityRef:
        ref = self.add_entity(
            "villager", point, name=name, health=20.0, max_health=20.0
        )
        self._inventories[ref.entity_id] = SlotContainer(self.agent_inventory_size)
        self.display_names[ref.entity_id] = name
        return ref

    def remove_agent(self, agent: EntityRef) -> None:
        self._entities.pop(agent.entity_id, None)

    def set_display_name(self, agent: EntityRef, text: str) -> None:
        self.display_names[agent.entity_id] = text

    def teleport(self, agent: EntityRef, point: Vec3) -> None:
        self.teleports.append(point)
        self.move_entity(agent, point)

    # ------------------------------------------------------------------
    # WorldView: movement / combat
    # ------------------------------------------------------------------

    def navigate_to(self, agent: EntityRef, target: NavTarget, speed: float) -> bool:
        self.navigations.append(NavRequest(agent, target, speed, self.pathable))
        return self.pathable

    def navigation_done(self, agent: EntityRef) -> bool:
        return self.nav_done

    def stop_navigation(self, agent: EntityRef) -> None:
        self.stops += 1

    def look_at(self, agent: EntityRef, target: NavTarget) -> None:
        self.looks.append(target)

    def strike(self, agent: EntityRef, target: EntityRef) -> bool:
        self.strikes.append(target)
        return self.strike_ok

    # ------------------------------------------------------------------
    # WorldView: blocks
    # ------------------------------------------------------------------

    def block_at(self, point: Vec3) -> BlockState:
        return self._blocks.get(_key(point), AIR)

    def break_block(self, point: Vec3, agent: EntityRef) -> bool:
        if self._blocks.pop(_key(point), None) is None:
            return False
        self.broken.append(point)
        return True

    def set_block(self, point: Vec3, block_name: str) -> None:
        self._blocks[_key(point)] = BlockState(name=block_name)
        self.placed.append((point, block_name))

    def block_for_item(self, item_id: str) -> Optional[str]:
        if item_id.startswith("block."):
            return item_id
        return None

    def ground_height(self, x: int, z: int) -> int:
        return self.ground_y

    # ------------------------------------------------------------------
    # WorldView: items / storage
    # ------------------------------------------------------------------

    def agent_inventory(self, agent: EntityRef) -> SlotContainer:
        return self._inventories[agent.entity_id]

    def container_at(self, point: Vec3) -> Optional[SlotContainer]:
        return self._containers.get(_key(point))

    def spawn_item(self, point: Vec3, stack: ItemStack) -> EntityRef:
        return self.add_item(point, stack)

    def set_item_entity_stack(self, ref: EntityRef, stack: Optional[ItemStack]) -> None:
        if stack is None:
            self._entities.pop(ref.entity_id, None)
        else:
            self._update(ref, item=stack)

    # ------------------------------------------------------------------
    # WorldView: feedback / environment
    # ------------------------------------------------------------------

    def broadcast(self, text: str) -> None:
        self.broadcasts.append(text)

    def spawn_effect(self, point: Vec3, kind: str, count: int) -> None:
        self.particles.append((point, kind, count))

    def biome_at(self, point: Vec3) -> str:
        return self._biomes.get(_key(point), self.biome)

    def day_time(self) -> int:
        return self.time_of_day

    def is_raining(self) -> bool:
        return self.raining


__all__ = ["FakeWorld", "NavRequest"]
