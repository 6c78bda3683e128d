# src/npc_core/effects.py
"""
World side effects requested by the controller.

The tick decision step only builds a list of these records; the
EffectExecutor is the single place that touches the WorldView for them.
That split lets tests assert on decisions without a live world, and
keeps tracing in one spot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Iterable, List, Optional, Union

from spec.types import EntityRef, Vec3
from spec.world import NavTarget, WorldView
from .tracing import EffectTracer


log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Effect records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Navigate:
    target: NavTarget
    speed: float = 1.0


@dataclass(frozen=True)
class StopNavigation:
    pass


@dataclass(frozen=True)
class LookAt:
    target: NavTarget


@dataclass(frozen=True)
class Strike:
    target: EntityRef


@dataclass(frozen=True)
class Teleport:
    point: Vec3


@dataclass(frozen=True)
class Broadcast:
    text: str


@dataclass(frozen=True)
class SpawnParticles:
    point: Vec3
    kind: str
    count: int


Effect = Union[Navigate, StopNavigation, LookAt, Strike, Teleport, Broadcast, SpawnParticles]


def effect_name(effect: Effect) -> str:
    return type(effect).__name__


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------


class EffectExecutor:
    """
    Apply Effect records to a WorldView on behalf of one agent.

    apply() returns True when the host reports success (navigation started,
    strike landed) and True for fire-and-forget effects.
    """

    def __init__(
        self,
        world: WorldView,
        *,
        tracer: Optional[EffectTracer] = None,
    ) -> None:
        self._world = world
        self._tracer = tracer or EffectTracer()

    @property
    def tracer(self) -> EffectTracer:
        return self._tracer

    def apply(self, agent: EntityRef, effect: Effect) -> bool:
        start = perf_counter()
        ok = self._dispatch(agent, effect)
        self._tracer.record(effect=effect, ok=ok, duration_s=perf_counter() - start)
        return ok

    def apply_all(self, agent: EntityRef, effects: Iterable[Effect]) -> List[bool]:
        return [self.apply(agent, e) for e in effects]

    def _dispatch(self, agent: EntityRef, effect: Effect) -> bool:
        world = self._world

        if isinstance(effect, Navigate):
            return bool(world.navigate_to(agent, effect.target, effect.speed))
        if isinstance(effect, StopNavigation):
            world.stop_navigation(agent)
            return True
        if isinstance(effect, LookAt):
            world.look_at(agent, effect.target)
            return True
        if isinstance(effect, Strike):
            return bool(world.strike(agent, effect.target))
        if isinstance(effect, Teleport):
            world.teleport(agent, effect.point)
            return True
        if isinstance(effect, Broadcast):
            world.broadcast(effect.text)
            return True
        if isinstance(effect, SpawnParticles):
            world.spawn_effect(effect.point, effect.kind, effect.count)
            return True

        raise TypeError(f"Unsupported effect: {effect!r}")


__all__ = [
    "Navigate",
    "StopNavigation",
    "LookAt",
    "Strike",
    "Teleport",
    "Broadcast",
    "SpawnParticles",
    "Effect",
    "EffectExecutor",
    "effect_name",
]
