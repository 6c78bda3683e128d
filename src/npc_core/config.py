# src/npc_core/config.py

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ControllerConfig:
    """
    Tuning knobs for AgentController.

    Distances are in blocks, intervals in ticks (20 ticks per second).
    Defaults match the live server setup; config/npc.yaml may override
    any of them.
    """

    npc_name: str = "NuncleNelson"

    # Periodic "<name> is at x y z (biome)" broadcast, ~10 minutes.
    announce_interval_ticks: int = 12_000

    # Particles above the head while an external planner is thinking.
    thinking_particle_interval: int = 10
    thinking_particle_count: int = 5
    thinking_particle_kind: str = "happy_villager"
    thinking_suffix: str = " ..."

    move_speed: float = 1.0

    follow_distance: float = 3.0
    follow_speed: float = 1.0

    attack_search_radius: float = 16.0
    melee_range: float = 2.5
    attack_speed: float = 1.2

    # Mine / place / container access reach.
    interaction_range: float = 6.0
    pickup_radius: float = 6.0

    # Wander cooldown is min + randrange(spread) ticks, i.e. 5-15 s.
    wander_cooldown_min: int = 100
    wander_cooldown_spread: int = 200
    # Without a boundary, wander 20-50 blocks from the current spot.
    wander_min_distance: float = 20.0
    wander_distance_spread: float = 30.0

    default_transfer_count: int = 64

    def __post_init__(self) -> None:
        if self.announce_interval_ticks < 1:
            raise ValueError("announce_interval_ticks must be >= 1")
        if self.thinking_particle_interval < 1:
            raise ValueError("thinking_particle_interval must be >= 1")
        if self.wander_cooldown_min < 0 or self.wander_cooldown_spread < 1:
            raise ValueError("wander cooldown range is invalid")
        if self.default_transfer_count < 1:
            raise ValueError("default_transfer_count must be >= 1")
