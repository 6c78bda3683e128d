# src/observation/reporter.py
"""
Observation reports for the NPC.

Read-only JSON snapshots of the agent and its surroundings, for operators
and for external "brain" processes that poll the server:

  status()             -> alive / position / health / dimension
  observe()            -> self, inventory, time, weather, biome, nearby
                          players / entities / ground items / notable
                          blocks, boundary
  observe_inventory()  -> per-slot inventory with slot count
  where()              -> one-line location text

Nothing here mutates the controller or the world. A dead or missing agent
is reported as {"alive": false}, never as an error.
"""

from __future__ import annotations

import json
import math
from typing import Any, Dict, FrozenSet, List

from npc_core.controller import AgentController
from spec.types import EntityInfo, Vec3, display_name


ENTITY_SCAN_RADIUS = 32.0
ITEM_SCAN_RADIUS = 8.0
BLOCK_SCAN_RADIUS = 8

MAX_ENTITIES = 15
MAX_GROUND_ITEMS = 10
MAX_NOTABLE_BLOCKS = 15

HOSTILE_MOBS: FrozenSet[str] = frozenset({
    "zombie", "skeleton", "creeper", "spider", "cave_spider",
    "enderman", "witch", "slime", "phantom", "drowned",
    "husk", "stray", "blaze", "ghast", "magma_cube",
    "wither_skeleton", "pillager", "vindicator", "ravager",
    "evoker", "vex", "guardian", "elder_guardian", "warden",
})

NOTABLE_BLOCKS: FrozenSet[str] = frozenset({
    "diamond_ore", "deepslate_diamond_ore",
    "iron_ore", "deepslate_iron_ore",
    "gold_ore", "deepslate_gold_ore",
    "emerald_ore", "deepslate_emerald_ore",
    "coal_ore", "deepslate_coal_ore",
    "copper_ore", "deepslate_copper_ore",
    "crafting_table", "furnace", "blast_furnace", "smoker",
    "anvil", "enchanting_table", "brewing_stand",
    "chest", "barrel", "ender_chest",
})

_NOT_ALIVE = json.dumps({"alive": False})


def round_health(value: float) -> float:
    """One decimal place, halves rounded up (19.95 -> 20.0)."""
    return math.floor(value * 10.0 + 0.5) / 10.0


def time_of_day_label(day_time: int) -> str:
    t = day_time % 24000
    if t < 6000:
        return "Morning"
    if t < 12000:
        return "Day"
    if t < 13000:
        return "Sunset"
    if t < 23000:
        return "Night"
    return "Dawn"


def _position(p: Vec3) -> Dict[str, int]:
    x, y, z = p.as_ints()
    return {"x": x, "y": y, "z": z}


class ObservationReporter:
    """JSON reports over one AgentController and its world."""

    def __init__(self, controller: AgentController) -> None:
        self._controller = controller

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def status(self) -> str:
        info = self._controller.agent_info()
        if info is None:
            return _NOT_ALIVE

        return json.dumps({
            "alive": True,
            "position": _position(info.position),
            "health": round_health(info.health),
            "maxHealth": round_health(info.max_health),
            "dimension": info.dimension,
        })

    def observe(self) -> str:
        info = self._controller.agent_info()
        if info is None:
            return _NOT_ALIVE

        world = self._controller.world
        pos = info.position
        report: Dict[str, Any] = {
            "self": {
                "position": _position(pos),
                "health": round_health(info.health),
                "maxHealth": round_health(info.max_health),
            },
            "inventory": [
                {"name": entry["name"], "count": entry["count"]}
                for entry in self._inventory_entries()
            ],
            "time": time_of_day_label(world.day_time()),
            "weather": "Raining" if world.is_raining() else "Clear",
            "biome": world.biome_at(pos),
            "nearbyPlayers": self._nearby_players(info),
            "nearbyEntities": self._nearby_entities(info),
            "groundItems": self._ground_items(info),
            "notableBlocks": self._notable_blocks(pos),
        }

        if self._controller.boundary is not None:
            report["boundary"] = self._controller.boundary_description()

        return json.dumps(report)

    def observe_inventory(self) -> str:
        inv = self._controller.inventory()
        if inv is None:
            return _NOT_ALIVE
        return json.dumps({
            "inventory": self._inventory_entries(),
            "slots": inv.size,
        })

    def where(self) -> str:
        name = self._controller.npc_name
        info = self._controller.agent_info()
        if info is None:
            return f"{name} is not currently spawned"
        biome = self._controller.world.biome_at(info.position).replace("_", " ")
        return f"[{name}] at {info.position.label()} ({biome})"

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _inventory_entries(self) -> List[Dict[str, Any]]:
        inv = self._controller.inventory()
        if inv is None:
            return []
        entries = []
        for slot in range(inv.size):
            stack = inv.get(slot)
            if stack is not None:
                entries.append(
                    {"name": stack.display_name, "count": stack.count, "slot": slot}
                )
        return entries

    def _nearby_players(self, me: EntityInfo) -> List[Dict[str, Any]]:
        players = []
        for p in self._controller.world.online_players():
            if p.dimension != me.dimension:
                continue
            dist = me.position.distance_to(p.position)
            if dist <= ENTITY_SCAN_RADIUS:
                players.append({"name": p.name, "distance": int(dist)})
        return players

    def _nearby_entities(self, me: EntityInfo) -> List[Dict[str, Any]]:
        def _wanted(e: EntityInfo) -> bool:
            return e.living and e.kind != "player" and e.ref != me.ref

        found = self._controller.world.find_entities(me.position, ENTITY_SCAN_RADIUS, _wanted)
        entities = []
        for e in found[:MAX_ENTITIES]:
            entities.append({
                "name": e.kind,
                "distance": int(me.position.distance_to(e.position)),
                "hostile": e.kind in HOSTILE_MOBS,
            })
        return entities

    def _ground_items(self, me: EntityInfo) -> List[Dict[str, Any]]:
        found = self._controller.world.find_entities(
            me.position,
            ITEM_SCAN_RADIUS,
            lambda e: e.item is not None and e.alive,
        )
        items = []
        for e in found[:MAX_GROUND_ITEMS]:
            assert e.item is not None
            items.append({
                "name": e.item.display_name,
                "count": e.item.count,
                "distance": int(me.position.distance_to(e.position)),
            })
        return items

    def _notable_blocks(self, pos: Vec3) -> List[Dict[str, Any]]:
        world = self._controller.world
        bx, by, bz = math.floor(pos.x), math.floor(pos.y), math.floor(pos.z)
        r = BLOCK_SCAN_RADIUS
        blocks: List[Dict[str, Any]] = []

        for dx in range(-r, r + 1):
            for dy in range(-r, r + 1):
                for dz in range(-r, r + 1):
                    if len(blocks) >= MAX_NOTABLE_BLOCKS:
                        return blocks
                    point = Vec3(bx + dx, by + dy, bz + dz)
                    name = display_name(world.block_at(point).name)
                    if name not in NOTABLE_BLOCKS:
                        continue
                    blocks.append({
                        "name": name,
                        "x": bx + dx,
                        "y": by + dy,
                        "z": bz + dz,
                        "distance": int(math.sqrt(dx * dx + dy * dy + dz * dz)),
                    })
        return blocks


__all__ = [
    "ObservationReporter",
    "HOSTILE_MOBS",
    "NOTABLE_BLOCKS",
    "round_health",
    "time_of_day_label",
]
