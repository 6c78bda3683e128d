# tests/test_controller_tick.py
"""
AgentController.tick() tests.

Covers:
- hard boundary enforcement after external displacement
- follow / attack resolution and target loss
- wander cooldown and destination sampling
- periodic announcement and thinking particles
- damage / death hooks
"""

from __future__ import annotations

import random
from typing import List

import pytest

from monitoring.bus import EventBus
from monitoring.events import EventType, MonitoringEvent
from npc_core.behavior import Idle, Wandering
from npc_core.config import ControllerConfig
from npc_core.controller import AgentController
from npc_core.effects import LookAt, Navigate, SpawnParticles, StopNavigation, Strike, Teleport
from npc_core.testing.fakes import FakeWorld
from spec.types import EntityRef, Vec3


ORIGIN = Vec3(0, 64, 0)


def spawned(config: ControllerConfig = None, seed: int = 1234):
    world = FakeWorld()
    bus = EventBus()
    events: List[MonitoringEvent] = []
    bus.subscribe(events.append)
    ctrl = AgentController(world, config=config, bus=bus, rng=random.Random(seed))
    ctrl.spawn(ORIGIN)
    return world, ctrl, events


def test_tick_without_agent_does_nothing() -> None:
    ctrl = AgentController(FakeWorld())
    assert ctrl.tick() == []


def test_tick_teleports_agent_back_inside_boundary() -> None:
    world, ctrl, events = spawned()
    ctrl.set_boundary(0, 0, 10)
    ctrl.go_to(Vec3(5, 64, 0))

    # Pushed out by something outside the controller's control.
    world.move_entity(ctrl.agent_ref, Vec3(15, 64, 0))
    effects = ctrl.tick()

    assert effects[:2] == [Teleport(Vec3(10, 64, 0)), StopNavigation()]
    assert world.teleports == [Vec3(10, 64, 0)]
    assert ctrl.agent_info().position == Vec3(10, 64, 0)
    assert isinstance(ctrl.behavior, Idle)
    assert EventType.BOUNDARY_ENFORCED in [e.event_type for e in events]


def test_enforcement_settles_after_one_teleport_at_large_coordinates() -> None:
    world, ctrl, events = spawned()
    ctrl.set_boundary(29_999_000.3, -28_999_999.7, 7.3)

    for _ in range(5):
        ctrl.tick()
    ctrl.go_to(Vec3(29_999_001.0, 64, -28_999_998.0))
    for _ in range(5):
        ctrl.tick()

    assert len(world.teleports) == 1
    assert ctrl.boundary.contains(world.teleports[0])
    assert ctrl.behavior.mode.value == "going_to"
    enforced = [e for e in events if e.event_type == EventType.BOUNDARY_ENFORCED]
    assert len(enforced) == 1


def test_tick_inside_boundary_does_not_teleport() -> None:
    world, ctrl, _ = spawned()
    ctrl.set_boundary(0, 0, 10)

    ctrl.tick()

    assert world.teleports == []


def test_follow_navigates_when_far_and_looks_when_close() -> None:
    world, ctrl, _ = spawned()
    steve = world.add_player("Steve", Vec3(10, 64, 0))
    ctrl.follow("Steve")

    assert ctrl.tick() == [Navigate(steve, 1.0)]
    assert world.navigations[-1].target == steve

    world.move_entity(steve, Vec3(2, 64, 0))
    assert ctrl.tick() == [LookAt(steve)]


def test_follow_target_disconnect_returns_to_idle() -> None:
    world, ctrl, _ = spawned()
    steve = world.add_player("Steve", Vec3(10, 64, 0))
    ctrl.follow("Steve")
    navigations = len(world.navigations)

    world.disconnect(steve)
    effects = ctrl.tick()

    assert isinstance(ctrl.behavior, Idle)
    assert not any(isinstance(e, Navigate) for e in effects)
    assert len(world.navigations) == navigations


def test_follow_target_leaving_boundary_returns_to_idle() -> None:
    world, ctrl, _ = spawned()
    ctrl.set_boundary(0, 0, 10)
    steve = world.add_player("Steve", Vec3(5, 64, 0))
    ctrl.follow("Steve")

    world.move_entity(steve, Vec3(30, 64, 0))
    ctrl.tick()

    assert isinstance(ctrl.behavior, Idle)


def test_attack_closes_distance_then_strikes() -> None:
    world, ctrl, _ = spawned()
    zombie = world.add_mob("zombie", Vec3(6, 64, 0))
    ctrl.attack("zombie")

    assert ctrl.tick() == [Navigate(zombie, 1.2)]

    world.move_entity(zombie, Vec3(2, 64, 0))
    assert ctrl.tick() == [LookAt(zombie), Strike(zombie)]
    assert world.strikes == [zombie]


def test_attack_target_death_returns_to_idle() -> None:
    world, ctrl, _ = spawned()
    zombie = world.add_mob("zombie", Vec3(2, 64, 0))
    ctrl.attack("zombie")

    world.kill(zombie)
    assert ctrl.tick() == [StopNavigation()]
    assert isinstance(ctrl.behavior, Idle)


def test_wander_waits_for_navigation_to_finish() -> None:
    world, ctrl, _ = spawned()
    ctrl.wander()
    assert len(world.navigations) == 1
    assert ctrl.behavior == Wandering(cooldown=0)

    world.nav_done = False
    for _ in range(50):
        assert ctrl.tick() == []
    assert ctrl.behavior == Wandering(cooldown=0)

    world.nav_done = True
    effects = ctrl.tick()
    assert len(effects) == 1 and isinstance(effects[0], Navigate)
    assert 100 <= ctrl.behavior.cooldown < 300


def test_wander_destinations_stay_within_boundary() -> None:
    world, ctrl, _ = spawned(seed=99)
    ctrl.set_boundary(0, 0, 5)
    ctrl.wander()

    for _ in range(4000):
        ctrl.tick()

    targets = [n.target for n in world.navigations]
    assert len(targets) >= 10
    for t in targets:
        assert t.horizontal_distance_to(Vec3(0, 0, 0)) <= 5 + 1e-9
        assert t.y == world.ground_y


def test_wander_without_boundary_goes_twenty_to_fifty_blocks() -> None:
    world, ctrl, _ = spawned(seed=5)

    for _ in range(20):
        ctrl.wander()

    for nav in world.navigations:
        dist = nav.target.horizontal_distance_to(ORIGIN)
        assert 20 - 1e-9 <= dist <= 50 + 1e-9


def test_periodic_announcement() -> None:
    world, ctrl, _ = spawned(ControllerConfig(announce_interval_ticks=5))
    world.biome = "dark_forest"
    world.broadcasts.clear()

    for _ in range(4):
        ctrl.tick()
    assert world.broadcasts == []

    ctrl.tick()
    assert world.broadcasts == ["[NuncleNelson] NuncleNelson is at 0 64 0 (dark forest)"]

    for _ in range(5):
        ctrl.tick()
    assert len(world.broadcasts) == 2


def test_thinking_particles_every_interval() -> None:
    world, ctrl, _ = spawned()
    ctrl.set_thinking(True)

    for _ in range(9):
        ctrl.tick()
    assert world.particles == []

    effects = ctrl.tick()
    particles = [e for e in effects if isinstance(e, SpawnParticles)]
    assert len(particles) == 1
    assert particles[0].kind == "happy_villager"
    assert particles[0].count == 5
    assert particles[0].point.y == pytest.approx(64 + 1.95 + 0.5)

    ctrl.set_thinking(False)
    for _ in range(20):
        ctrl.tick()
    assert len(world.particles) == 1


def test_damage_is_reported_without_changing_behaviour() -> None:
    world, ctrl, events = spawned()
    ctrl.go_to(Vec3(3, 64, 3))
    before = ctrl.behavior

    ctrl.on_damage(ctrl.agent_ref, 4.0, "zombie")
    ctrl.on_damage(EntityRef(9999), 4.0, "zombie")

    damaged = [e for e in events if e.event_type == EventType.DAMAGED]
    assert len(damaged) == 1
    assert damaged[0].payload == {"amount": 4.0, "source": "zombie"}
    assert ctrl.behavior == before


def test_death_clears_agent_state_and_timers() -> None:
    world, ctrl, events = spawned(ControllerConfig(announce_interval_ticks=3))
    ctrl.set_thinking(True)
    ctrl.wander()
    ctrl.tick()
    ctrl.tick()

    ctrl.on_death(ctrl.agent_ref, "fell from a high place")

    assert not ctrl.is_alive()
    assert ctrl.agent_ref is None
    assert isinstance(ctrl.behavior, Idle)
    assert not ctrl.thinking
    assert world.broadcasts[-1] == "[NuncleNelson] NuncleNelson has died"
    assert EventType.DIED in [e.event_type for e in events]

    # Announcement timer restarts from zero on the next spawn.
    ctrl.spawn(ORIGIN)
    world.broadcasts.clear()
    ctrl.tick()
    ctrl.tick()
    assert world.broadcasts == []
    ctrl.tick()
    assert len(world.broadcasts) == 1


def test_effects_are_traced() -> None:
    world, ctrl, _ = spawned()
    ctrl.executor.tracer.clear()
    steve = world.add_player("Steve", Vec3(10, 64, 0))
    ctrl.follow("Steve")
    ctrl.tick()

    records = ctrl.executor.tracer.get_records()
    assert [r.effect_type for r in records] == ["StopNavigation", "Navigate"]
    assert records[-1].params["target"] == steve
    assert records[-1].ok
