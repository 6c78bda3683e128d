#!/usr/bin/env python3
"""
tools/npc_demo.py

Minimal harness to sanity-check the NPC wiring without a game server.

Default mode:
    - Uses FakeWorld (no real server)
    - Starts an NpcHost and runs a short scripted command session:
        - spawn, boundary set, goto (clamped), follow, attack, wander
    - Ticks the host and prints command replies and applied effects
    - Prints status / observe reports

Options:
    --config PATH     load an NpcProfile from YAML (default: built-in)
    --ticks N         ticks to run between scripted steps
    --dashboard       print the rich dashboard frame at the end
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure src/ is on sys.path when running as a script
# ---------------------------------------------------------------------------

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# ---------------------------------------------------------------------------
# Imports from the project
# ---------------------------------------------------------------------------

from commands.dispatcher import CommandSource  # type: ignore[import]
from env.loader import load_npc_profile  # type: ignore[import]
from monitoring.dashboard_tui import NpcDashboard  # type: ignore[import]
from npc_core.effects import effect_name  # type: ignore[import]
from npc_core.testing.fakes import FakeWorld  # type: ignore[import]
from runtime.host import NpcHost  # type: ignore[import]
from runtime.logging_config import configure_logging  # type: ignore[import]
from spec.types import ItemStack, Vec3  # type: ignore[import]


OPERATOR = CommandSource(name="Server", permission_level=4)

SCRIPT = [
    "/nuncle spawn 0 64 0",
    "/nuncle boundary set 0 0 16",
    "/nuncle goto 40 64 0",
    "/nuncle follow Steve",
    "/nuncle attack zombie",
    "/nuncle pickup",
    "/nuncle wander",
    "/nuncle boundary info",
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _print_header(title: str) -> None:
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


def build_world() -> FakeWorld:
    world = FakeWorld()
    world.add_player("Steve", Vec3(6, 64, 2))
    world.add_mob("zombie", Vec3(-4, 64, 3))
    world.add_item(Vec3(1, 64, 1), ItemStack("block.minecraft.cobblestone", 12))
    world.put_block(Vec3(2, 63, 2), "block.minecraft.iron_ore")
    return world


def run(host: NpcHost, world: FakeWorld, ticks: int) -> None:
    host.on_server_starting(world)

    for line in SCRIPT:
        _print_header(line)
        reply = host.handle_command(OPERATOR, line)
        print("Reply:", reply.text)

        applied = []
        for _ in range(ticks):
            applied.extend(effect_name(e) for e in host.on_server_tick())
        if applied:
            print(f"Effects over {ticks} ticks:", ", ".join(sorted(set(applied))))

    _print_header("/nunclewhere")
    print(host.handle_command(CommandSource(name="Alex"), "/nunclewhere").text)

    _print_header("status")
    print(host.reporter.status())

    _print_header("observe")
    print(host.reporter.observe())

    _print_header("broadcasts")
    for text in world.broadcasts:
        print("  -", text)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a scripted NPC session against FakeWorld.")
    parser.add_argument("--config", type=Path, default=None, help="Path to npc.yaml")
    parser.add_argument("--ticks", type=int, default=20, help="Ticks between script steps")
    parser.add_argument("--seed", type=int, default=7, help="Random seed for wandering")
    parser.add_argument("--dashboard", action="store_true", help="Print dashboard frame at the end")
    args = parser.parse_args()

    profile = load_npc_profile(args.config) if args.config else None
    configure_logging(profile.logging.level if profile else logging.INFO)

    host = NpcHost(profile, rng=random.Random(args.seed))
    dashboard = NpcDashboard(host.bus, npc_name=host.profile.name) if args.dashboard else None

    world = build_world()
    try:
        run(host, world, args.ticks)
    finally:
        host.on_server_stopping()

    if dashboard is not None:
        _print_header("dashboard")
        dashboard.console.print(dashboard.render())
        dashboard.close()


if __name__ == "__main__":
    main()
