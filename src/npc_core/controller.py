# src/npc_core/controller.py
"""
AgentController: the per-tick state machine for the single server NPC.

This module wires together:
- BoundaryEnforcer (circular soft fence)
- inventory transfers (take / put / pickup / drop)
- BehaviorState (one active mode at a time)
- EffectExecutor (the only path to world side effects)

Public surface:
    directives  -> spawn, despawn, chat, go_to, follow, wander, stay,
                   look_at, attack, mine, place, pickup, drop, take, put,
                   set_boundary, clear_boundary, set_thinking
    queries     -> is_alive, agent_ref, agent_info, behavior, boundary,
                   boundary_description, thinking
    host hooks  -> tick, on_damage, on_death

Design constraints:
- Every directive returns a human-readable status string. Missing
  targets, boundary refusals and "too far" are statuses, not exceptions.
- Host-owned entities are held as EntityRef and re-resolved on every use;
  a vanished player or mob is an explicit None check.
- tick() first decides (building a list of Effect records), then hands
  the list to the executor. Decisions and side effects stay separable.
- No pathfinding here. navigate_to() is an opaque host capability.
"""

from __future__ import annotations

import logging
import math
import random
import uuid
from typing import Any, Dict, List, Optional, Union

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event
from spec.types import EntityInfo, EntityRef, Vec3
from spec.world import Container, WorldView

from .behavior import (
    IDLE,
    STAYING,
    Attacking,
    BehaviorState,
    Following,
    GoingTo,
    Wandering,
    describe_behavior,
)
from .boundary import MIN_BOUNDARY_RADIUS, Boundary, BoundaryEnforcer
from .config import ControllerConfig
from .errors import NpcCoreError
from .effects import (
    Broadcast,
    Effect,
    EffectExecutor,
    LookAt,
    Navigate,
    SpawnParticles,
    StopNavigation,
    Strike,
    Teleport,
)
from .inventory import insert_stack, name_matcher, put, take
from .tracing import EffectTracer


log = logging.getLogger(__name__)

MODULE = "npc_core.controller"


def _block_pos(pos: Vec3) -> Vec3:
    return Vec3(math.floor(pos.x), math.floor(pos.y), math.floor(pos.z))


class AgentController:
    """
    Owns the NPC entity handle, its behaviour mode, the boundary and the
    two tick timers (location announcement, thinking particles).

    One instance per server, constructed by the host wiring and passed to
    the command surface and observation reporter explicitly.
    """

    def __init__(
        self,
        world: WorldView,
        *,
        config: Optional[ControllerConfig] = None,
        bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
        tracer: Optional[EffectTracer] = None,
        boundary: Optional[Boundary] = None,
    ) -> None:
        self._world = world
        self._cfg = config if config is not None else ControllerConfig()
        self._bus = bus if bus is not None else EventBus()
        self._rng = rng if rng is not None else random.Random()
        self._executor = EffectExecutor(world, tracer=tracer)
        self._fence = BoundaryEnforcer(boundary)

        self._agent: Optional[EntityRef] = None
        self._state: BehaviorState = IDLE
        self._thinking: bool = False

        self._announce_ticks: int = 0
        self._thinking_ticks: int = 0

        # Correlation id for monitoring events, one per spawn.
        self._session_id: Optional[str] = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def config(self) -> ControllerConfig:
        return self._cfg

    @property
    def world(self) -> WorldView:
        return self._world

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def executor(self) -> EffectExecutor:
        return self._executor

    @property
    def agent_ref(self) -> Optional[EntityRef]:
        return self._agent

    @property
    def behavior(self) -> BehaviorState:
        return self._state

    @property
    def boundary(self) -> Optional[Boundary]:
        return self._fence.boundary

    @property
    def thinking(self) -> bool:
        return self._thinking

    @property
    def npc_name(self) -> str:
        return self._cfg.npc_name

    def agent_info(self) -> Optional[EntityInfo]:
        """Resolved agent entity, or None when not spawned / dead."""
        if self._agent is None:
            return None
        info = self._world.resolve(self._agent)
        if info is None or not info.alive:
            return None
        return info

    def is_alive(self) -> bool:
        return self.agent_info() is not None

    def inventory(self) -> Optional[Container]:
        if not self.is_alive():
            return None
        assert self._agent is not None
        return self._world.agent_inventory(self._agent)

    def boundary_description(self) -> str:
        info = self.agent_info()
        return self._fence.describe(info.position if info is not None else None)

    def status_line(self) -> str:
        """One-line summary for dashboards and logs."""
        info = self.agent_info()
        if info is None:
            return f"{self.npc_name}: not spawned"
        return f"{self.npc_name} at {info.position.label()}: {describe_behavior(self._state)}"

    # ------------------------------------------------------------------
    # Lifecycle directives
    # ------------------------------------------------------------------

    def spawn(self, point: Optional[Vec3] = None) -> str:
        """Spawn at `point`, or at the world spawn block centre when omitted."""
        name = self.npc_name
        info = self.agent_info()
        if info is not None:
            return f"{name} is already spawned at {info.position.label()}"

        if point is None:
            sp = self._world.spawn_point()
            point = Vec3(sp.x + 0.5, sp.y, sp.z + 0.5)

        try:
            self._agent = self._world.spawn_agent(point, name)
        except Exception as exc:
            raise NpcCoreError(
                code="spawn_failed",
                details={"point": _xyz(point), "error": repr(exc)},
            ) from exc
        self._reset_session_state()
        self._session_id = uuid.uuid4().hex

        self._emit(
            EventType.SPAWNED,
            f"SPAWNED {point.label()}",
            {"x": point.x, "y": point.y, "z": point.z},
        )
        self._announce(f"{name} has arrived at {point.label()}")
        return f"{name} spawned at {point.label()}"

    def despawn(self) -> str:
        name = self.npc_name
        if not self.is_alive():
            return f"{name} is not spawned"

        assert self._agent is not None
        self._world.remove_agent(self._agent)
        self._emit(EventType.DESPAWNED, "DESPAWNED", {})
        self._discard_agent()
        return f"{name} despawned"

    def chat(self, message: str) -> str:
        agent = self._agent_or_none()
        if agent is None:
            return self._not_spawned()

        self._executor.apply(agent, Broadcast(f"<{self.npc_name}> {message}"))
        self._emit(EventType.SAID, f"SAID {message}", {"message": message})
        return f"Said: {message}"

    # ------------------------------------------------------------------
    # Movement directives
    # ------------------------------------------------------------------

    def go_to(self, point: Vec3) -> str:
        """
        Walk to `point`. Destinations outside the boundary are clamped to
        its edge rather than refused. The mode becomes GoingTo even when
        the host cannot find a path.
        """
        agent = self._agent_or_none()
        if agent is None:
            return self._not_spawned()

        clamped = self._fence.clamp(point)
        was_clamped = clamped.x != point.x or clamped.z != point.z
        self._set_state(GoingTo(clamped))

        if was_clamped:
            self._emit(
                EventType.BOUNDARY_CLAMPED,
                f"BOUNDARY_CLAMPED goto from ({int(point.x)},{int(point.z)}) "
                f"to ({int(clamped.x)},{int(clamped.z)})",
                {"requested": _xyz(point), "clamped": _xyz(clamped)},
            )

        started = self._executor.apply(agent, Navigate(clamped, self._cfg.move_speed))
        dest = clamped.label()
        if started:
            if was_clamped:
                return f"Moving to {dest} (clamped to boundary)"
            return f"Moving to {dest}"
        return f"Cannot pathfind to {dest}"

    def follow(self, player_name: str) -> str:
        agent = self._agent_or_none()
        if agent is None:
            return self._not_spawned()

        target = self._world.player_by_name(player_name)
        if target is None or self._world.resolve(target) is None:
            return f"Player {player_name} not found"

        self._set_state(Following(target, player_name))
        self._executor.apply(agent, StopNavigation())
        return f"Following {player_name}"

    def wander(self) -> str:
        agent = self._agent_or_none()
        if agent is None:
            return self._not_spawned()

        info = self.agent_info()
        assert info is not None
        self._set_state(Wandering(cooldown=0))
        self._executor.apply(agent, self._wander_step(info.position))
        return "Wandering randomly"

    def stay(self) -> str:
        agent = self._agent_or_none()
        if agent is None:
            return self._not_spawned()

        self._set_state(STAYING)
        self._executor.apply(agent, StopNavigation())
        return "Staying in place"

    def look_at(self, point: Vec3) -> str:
        agent = self._agent_or_none()
        if agent is None:
            return self._not_spawned()

        self._executor.apply(agent, LookAt(point))
        return f"Looking at {point.label()}"

    # ------------------------------------------------------------------
    # Combat
    # ------------------------------------------------------------------

    def attack(self, entity_type: str) -> str:
        """
        Target the closest living `entity_type` within the search radius
        that also stands inside the boundary. Leaves the current mode
        untouched when nothing qualifies.
        """
        info = self.agent_info()
        if info is None:
            return self._not_spawned()
        agent = info.ref

        def _candidate(e: EntityInfo) -> bool:
            return e.living and e.alive and e.kind == entity_type and e.ref != agent

        closest: Optional[EntityInfo] = None
        closest_dist = math.inf
        for entity in self._world.find_entities(
            info.position, self._cfg.attack_search_radius, _candidate
        ):
            if not self._fence.is_inside(entity.position):
                continue
            dist = info.position.distance_to(entity.position)
            if dist < closest_dist:
                closest = entity
                closest_dist = dist

        if closest is None:
            return f"No {entity_type} found nearby"

        self._set_state(Attacking(closest.ref, entity_type))
        self._executor.apply(agent, StopNavigation())
        return f"Attacking {entity_type} ({int(closest_dist)} blocks away)"

    # ------------------------------------------------------------------
    # Block interaction
    # ------------------------------------------------------------------

    def mine(self, pos: Vec3) -> str:
        info = self.agent_info()
        if info is None:
            return self._not_spawned()
        pos = _block_pos(pos)

        if not self._fence.is_inside(pos):
            return "Cannot mine outside boundary"

        block = self._world.block_at(pos)
        if block.is_air:
            return f"No block at {pos.label()}"

        dist = info.position.distance_to(pos.block_center())
        if dist > self._cfg.interaction_range:
            self._approach(info.ref, pos.offset(dy=1))
            return f"Too far to mine ({int(dist)} blocks). Moving closer."

        if self._world.break_block(pos, info.ref):
            return f"Mined {block.display_name} at {pos.label()}"
        return f"Failed to mine block at {pos.label()}"

    def place(self, pos: Vec3, block_name: str) -> str:
        info = self.agent_info()
        if info is None:
            return self._not_spawned()
        pos = _block_pos(pos)

        if not self._fence.is_inside(pos):
            return "Cannot place block outside boundary"

        dist = info.position.distance_to(pos.block_center())
        if dist > self._cfg.interaction_range:
            self._approach(info.ref, pos.offset(dy=1))
            return f"Too far to place block ({int(dist)} blocks). Moving closer."

        if not self._world.block_at(pos).replaceable:
            return f"Cannot place block at {pos.label()} - position is not empty"

        needle = block_name.lower()
        inv = self._world.agent_inventory(info.ref)
        for slot in range(inv.size):
            stack = inv.get(slot)
            if stack is None:
                continue
            block = self._world.block_for_item(stack.item_id)
            if block is None or needle not in stack.display_name.lower():
                continue

            self._world.set_block(pos, block)
            inv.set(slot, stack.with_count(stack.count - 1))
            inv.set_changed()
            return f"Placed {stack.display_name} at {pos.label()}"

        return f"No {block_name} blocks in inventory"

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def pickup(self, item_filter: Optional[str] = None) -> str:
        """Collect dropped items within reach, leaving any overflow on the ground."""
        info = self.agent_info()
        if info is None:
            return self._not_spawned()

        inv = self._world.agent_inventory(info.ref)
        matcher = name_matcher(item_filter)
        picked: List[str] = []

        nearby = self._world.find_entities(
            info.position,
            self._cfg.pickup_radius,
            lambda e: e.item is not None and e.alive,
        )
        for entity in nearby:
            stack = entity.item
            if stack is None or (matcher is not None and not matcher(stack)):
                continue

            accepted = insert_stack(inv, stack)
            if accepted > 0:
                self._world.set_item_entity_stack(
                    entity.ref, stack.with_count(stack.count - accepted)
                )
                picked.append(f"{accepted}x {stack.display_name}")

        if not picked:
            if item_filter:
                return f"No {item_filter} found nearby"
            return "No items found nearby"

        inv.set_changed()
        return "Picked up: " + ", ".join(picked)

    def drop(self, item_name: str) -> str:
        """Drop the first whole stack whose name contains `item_name`."""
        info = self.agent_info()
        if info is None:
            return self._not_spawned()

        inv = self._world.agent_inventory(info.ref)
        matcher = name_matcher(item_name)
        for slot in range(inv.size):
            stack = inv.get(slot)
            if stack is None or (matcher is not None and not matcher(stack)):
                continue

            inv.set(slot, None)
            inv.set_changed()
            self._world.spawn_item(info.position, stack)
            return f"Dropped {stack.count}x {stack.display_name}"

        return f"No {item_name} in inventory"

    def take(
        self,
        pos: Vec3,
        item_filter: Optional[str] = None,
        count: Optional[int] = None,
    ) -> str:
        """Move up to `count` matching items from the container at `pos`."""
        info = self.agent_info()
        if info is None:
            return self._not_spawned()

        count = self._cfg.default_transfer_count if count is None else count
        if count < 1:
            return "Count must be at least 1"

        container_or_status = self._reach_container(info, _block_pos(pos))
        if isinstance(container_or_status, str):
            return container_or_status

        inv = self._world.agent_inventory(info.ref)
        result = take(container_or_status, inv, item_filter, count)
        text = result.describe("(inventory full)")
        if not text:
            if item_filter:
                return f"No {item_filter} in container"
            return "Container is empty"
        return f"Took: {text}"

    def put(self, pos: Vec3, item_name: str, count: Optional[int] = None) -> str:
        """
        Move up to `count` matching items into the container at `pos`.
        Stopping early because the container filled up adds "(container full)"
        to the reply, mirroring take().
        """
        info = self.agent_info()
        if info is None:
            return self._not_spawned()

        count = self._cfg.default_transfer_count if count is None else count
        if count < 1:
            return "Count must be at least 1"

        container_or_status = self._reach_container(info, _block_pos(pos))
        if isinstance(container_or_status, str):
            return container_or_status

        inv = self._world.agent_inventory(info.ref)
        result = put(inv, container_or_status, item_name, count)
        text = result.describe("(container full)")
        if not text:
            return f"No {item_name} in inventory (or container is full)"
        return f"Put: {text}"

    def _reach_container(self, info: EntityInfo, pos: Vec3) -> Union[Container, str]:
        if not self._fence.is_inside(pos):
            return "Container is outside boundary"

        dist = info.position.distance_to(pos.block_center())
        if dist > self._cfg.interaction_range:
            self._approach(info.ref, pos)
            return f"Too far ({int(dist)} blocks). Moving closer."

        container = self._world.container_at(pos)
        if container is None:
            return f"No container at {pos.label()}"
        return container

    # ------------------------------------------------------------------
    # Boundary / thinking
    # ------------------------------------------------------------------

    def set_boundary(self, center_x: float, center_z: float, radius: float) -> str:
        try:
            self._fence.set(center_x, center_z, radius)
        except ValueError:
            return f"Boundary radius must be at least {MIN_BOUNDARY_RADIUS:g}"

        self._emit(
            EventType.BOUNDARY_SET,
            f"BOUNDARY_SET center=({int(center_x)},{int(center_z)}) radius={int(radius)}",
            {"center_x": center_x, "center_z": center_z, "radius": radius},
        )
        return (
            f"Boundary set: center ({int(center_x)}, {int(center_z)}) "
            f"radius {int(radius)}"
        )

    def clear_boundary(self) -> str:
        self._fence.clear()
        self._emit(EventType.BOUNDARY_CLEARED, "BOUNDARY_CLEARED", {})
        return "Boundary cleared"

    def set_thinking(self, value: bool) -> str:
        agent = self._agent_or_none()
        if agent is None:
            return self._not_spawned()

        self._thinking = bool(value)
        if self._thinking:
            self._world.set_display_name(agent, self.npc_name + self._cfg.thinking_suffix)
            self._thinking_ticks = 0
        else:
            self._world.set_display_name(agent, self.npc_name)

        self._emit(
            EventType.THINKING_CHANGED,
            f"THINKING {'on' if self._thinking else 'off'}",
            {"thinking": self._thinking},
        )
        return "Thinking started" if self._thinking else "Thinking stopped"

    # ------------------------------------------------------------------
    # Host hooks
    # ------------------------------------------------------------------

    def tick(self) -> List[Effect]:
        """
        Advance one simulation step.

        Order: boundary enforcement, periodic announcement, thinking
        particles, behaviour resolution. Returns the effects that were
        applied this tick (empty when not spawned).
        """
        info = self.agent_info()
        if info is None:
            return []

        effects = self._decide(info)
        self._executor.apply_all(info.ref, effects)
        return effects

    def on_damage(self, entity: EntityRef, amount: float, source: str) -> None:
        """Damage is reported for observability only; behaviour is unchanged."""
        if self._agent is None or entity != self._agent:
            return
        self._emit(
            EventType.DAMAGED,
            f"DAMAGED {amount} {source}",
            {"amount": amount, "source": source},
        )

    def on_death(self, entity: EntityRef, cause: str) -> None:
        if self._agent is None or entity != self._agent:
            return

        agent = self._agent
        self._emit(EventType.DIED, f"DIED cause={cause}", {"cause": cause})
        self._executor.apply(agent, Broadcast(self._format_announcement(f"{self.npc_name} has died")))
        self._discard_agent()

    # ------------------------------------------------------------------
    # Tick decision
    # ------------------------------------------------------------------

    def _decide(self, info: EntityInfo) -> List[Effect]:
        cfg = self._cfg
        effects: List[Effect] = []
        pos = info.position

        # 1. Hard boundary enforcement overrides every mode.
        if self._fence.active and not self._fence.is_inside(pos):
            clamped = self._fence.clamp(pos)
            effects.append(Teleport(clamped))
            effects.append(StopNavigation())
            self._set_state(IDLE)
            self._emit(
                EventType.BOUNDARY_ENFORCED,
                f"BOUNDARY_ENFORCED teleported back to ({int(clamped.x)},{int(clamped.z)})",
                {"from": _xyz(pos), "to": _xyz(clamped)},
            )
            pos = clamped

        # 2. Periodic location announcement.
        self._announce_ticks += 1
        if self._announce_ticks >= cfg.announce_interval_ticks:
            self._announce_ticks = 0
            biome = self._world.biome_at(pos).replace("_", " ")
            effects.append(
                Broadcast(
                    self._format_announcement(
                        f"{self.npc_name} is at {pos.label()} ({biome})"
                    )
                )
            )

        # 3. Thinking particles (cosmetic only).
        if self._thinking:
            self._thinking_ticks += 1
            if self._thinking_ticks >= cfg.thinking_particle_interval:
                self._thinking_ticks = 0
                effects.append(
                    SpawnParticles(
                        pos.offset(dy=info.height + 0.5),
                        cfg.thinking_particle_kind,
                        cfg.thinking_particle_count,
                    )
                )

        # 4. Behaviour.
        effects.extend(self._resolve_behavior(info.ref, pos))
        return effects

    def _resolve_behavior(self, agent: EntityRef, pos: Vec3) -> List[Effect]:
        cfg = self._cfg
        state = self._state

        if isinstance(state, Following):
            target = self._live_target(state.target)
            if target is None:
                return self._drop_target("follow target lost")
            dist = pos.distance_to(target.position)
            if dist > cfg.follow_distance:
                return [Navigate(state.target, cfg.follow_speed)]
            return [LookAt(state.target)]

        if isinstance(state, Attacking):
            target = self._live_target(state.target)
            if target is None:
                return self._drop_target("attack target lost")
            dist = pos.distance_to(target.position)
            if dist > cfg.melee_range:
                return [Navigate(state.target, cfg.attack_speed)]
            return [LookAt(state.target), Strike(state.target)]

        if isinstance(state, Wandering):
            if not self._world.navigation_done(agent):
                return []
            cooldown = state.cooldown - 1
            effects: List[Effect] = []
            if cooldown <= 0:
                effects.append(self._wander_step(pos))
                cooldown = cfg.wander_cooldown_min + self._rng.randrange(
                    cfg.wander_cooldown_spread
                )
            self._state = Wandering(cooldown=cooldown)
            return effects

        # Idle / GoingTo / Staying: nothing autonomous.
        return []

    def _live_target(self, ref: EntityRef) -> Optional[EntityInfo]:
        """Resolve a follow/attack target; None if gone or outside the fence."""
        target = self._world.resolve(ref)
        if target is None or not target.alive or target.disconnected:
            return None
        if not self._fence.is_inside(target.position):
            return None
        return target

    def _drop_target(self, reason: str) -> List[Effect]:
        log.info("[NUNCLE] %s, returning to idle", reason)
        self._set_state(IDLE)
        return [StopNavigation()]

    def _wander_step(self, pos: Vec3) -> Navigate:
        """
        Pick a wander destination.

        With a boundary: random angle, random radius in [0, R) around the
        centre (denser toward the middle, not area-uniform). Without one:
        20-50 blocks from the current position.
        """
        cfg = self._cfg
        angle = self._rng.random() * math.pi * 2
        boundary = self._fence.boundary

        if boundary is not None:
            dist = self._rng.random() * boundary.radius
            x = boundary.center_x + math.cos(angle) * dist
            z = boundary.center_z + math.sin(angle) * dist
        else:
            dist = cfg.wander_min_distance + self._rng.random() * cfg.wander_distance_spread
            x = pos.x + math.cos(angle) * dist
            z = pos.z + math.sin(angle) * dist

        y = self._world.ground_height(int(x), int(z))
        return Navigate(Vec3(x, float(y), z), cfg.move_speed)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _agent_or_none(self) -> Optional[EntityRef]:
        info = self.agent_info()
        return info.ref if info is not None else None

    def _not_spawned(self) -> str:
        return f"{self.npc_name} is not spawned"

    def _approach(self, agent: EntityRef, point: Vec3) -> None:
        # Single request; the action itself is retried only by a new directive.
        self._executor.apply(agent, Navigate(point, self._cfg.move_speed))

    def _set_state(self, new_state: BehaviorState) -> None:
        old = self._state
        self._state = new_state
        if old.mode != new_state.mode:
            log.debug("behaviour %s -> %s", old.mode.value, new_state.mode.value)
            self._emit(
                EventType.BEHAVIOR_CHANGED,
                f"BEHAVIOR {describe_behavior(new_state)}",
                {"from": old.mode.value, "to": new_state.mode.value},
                quiet=True,
            )

    def _reset_session_state(self) -> None:
        self._state = IDLE
        self._thinking = False
        self._announce_ticks = 0
        self._thinking_ticks = 0

    def _discard_agent(self) -> None:
        self._agent = None
        self._session_id = None
        self._reset_session_state()

    def _format_announcement(self, message: str) -> str:
        return f"[{self.npc_name}] {message}"

    def _announce(self, message: str) -> None:
        if self._agent is not None:
            self._executor.apply(self._agent, Broadcast(self._format_announcement(message)))

    def _emit(
        self,
        event_type: EventType,
        message: str,
        payload: Dict[str, Any],
        *,
        quiet: bool = False,
    ) -> None:
        if not quiet:
            log.info("[NUNCLE] %s", message)
        log_event(
            bus=self._bus,
            module=MODULE,
            event_type=event_type,
            message=message,
            payload=payload,
            correlation_id=self._session_id,
        )


def _xyz(p: Vec3) -> Dict[str, float]:
    return {"x": p.x, "y": p.y, "z": p.z}


__all__ = ["AgentController"]
