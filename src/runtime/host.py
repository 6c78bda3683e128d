# path: src/runtime/host.py
"""
Server lifecycle wiring for the NPC.

NpcHost is the one object a game server adapter talks to. It owns the
AgentController, ObservationReporter and CommandSurface for the lifetime
of a server session and forwards host events to them:

    on_server_starting(world)   -> build controller (+ optional spawn,
                                   event log and live dashboard)
    on_server_stopping()        -> despawn, close event log and dashboard
    on_server_tick()            -> guarded controller tick
    on_entity_damage / on_entity_death
    on_server_chat(player, message)
    handle_command(source, line)

Hooks that arrive while no session is running are ignored, except
handle_command(), which raises NpcCoreError because the caller expects
a reply.
"""

from __future__ import annotations

import logging
import random
import threading
from pathlib import Path
from typing import List, Optional

from commands.dispatcher import CommandReply, CommandSource, CommandSurface
from env.schema import MonitoringSettings, NpcProfile
from monitoring.bus import EventBus
from monitoring.dashboard_tui import NpcDashboard
from monitoring.events import EventType
from monitoring.logger import JsonFileLogger, log_event
from npc_core.config import ControllerConfig
from npc_core.controller import AgentController
from npc_core.effects import Effect
from npc_core.errors import NpcCoreError
from observation.reporter import ObservationReporter
from spec.types import EntityRef
from spec.world import WorldView

from .error_handling import safe_tick_with_logging


log = logging.getLogger(__name__)

MODULE = "runtime.host"

# How close a player must be for the NPC to "hear" chat.
HEARING_RADIUS = 32.0
SUMMON_PREFIX = "!nuncle"


def default_profile() -> NpcProfile:
    """In-memory profile with no event log file."""
    cfg = ControllerConfig()
    return NpcProfile(
        name=cfg.npc_name,
        controller=cfg,
        monitoring=MonitoringSettings(event_log=None),
    )


class NpcHost:
    """Owns one controller per server session."""

    def __init__(
        self,
        profile: Optional[NpcProfile] = None,
        *,
        bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._profile = profile if profile is not None else default_profile()
        self._bus = bus if bus is not None else EventBus()
        self._rng = rng

        self._world: Optional[WorldView] = None
        self._controller: Optional[AgentController] = None
        self._reporter: Optional[ObservationReporter] = None
        self._commands: Optional[CommandSurface] = None
        self._event_logger: Optional[JsonFileLogger] = None
        self._dashboard: Optional[NpcDashboard] = None
        self._dashboard_thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def profile(self) -> NpcProfile:
        return self._profile

    @property
    def running(self) -> bool:
        return self._controller is not None

    @property
    def controller(self) -> AgentController:
        if self._controller is None:
            raise NpcCoreError(code="not_started", details={"hook": "controller"})
        return self._controller

    @property
    def reporter(self) -> ObservationReporter:
        if self._reporter is None:
            raise NpcCoreError(code="not_started", details={"hook": "reporter"})
        return self._reporter

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def on_server_starting(self, world: WorldView) -> None:
        if self._controller is not None:
            log.warning("Server start while a session is running; restarting")
            self.on_server_stopping()

        event_log = self._profile.monitoring.event_log
        if event_log:
            self._event_logger = JsonFileLogger(Path(event_log), self._bus)
        if self._profile.monitoring.dashboard:
            self._start_dashboard()

        self._world = world
        self._controller = AgentController(
            world,
            config=self._profile.controller,
            bus=self._bus,
            rng=self._rng,
            boundary=self._profile.boundary,
        )
        self._reporter = ObservationReporter(self._controller)
        self._commands = CommandSurface(self._controller, self._reporter, bus=self._bus)
        log.info("%s controller initialized", self._profile.name)

        if self._profile.spawn_on_start:
            self._controller.spawn()

    def on_server_stopping(self) -> None:
        if self._controller is not None:
            self._controller.despawn()
        self._controller = None
        self._reporter = None
        self._commands = None
        self._world = None

        if self._event_logger is not None:
            self._event_logger.close()
            self._event_logger = None
        self._stop_dashboard()

    def _start_dashboard(self) -> None:
        self._dashboard = NpcDashboard(self._bus, npc_name=self._profile.name)
        self._dashboard_thread = threading.Thread(
            target=self._dashboard.run, name="npc-dashboard", daemon=True
        )
        self._dashboard_thread.start()
        log.info("Dashboard started")

    def _stop_dashboard(self) -> None:
        if self._dashboard is None:
            return
        self._dashboard.close()
        if self._dashboard_thread is not None:
            self._dashboard_thread.join(timeout=2.0)
        self._dashboard = None
        self._dashboard_thread = None

    def on_server_tick(self) -> List[Effect]:
        if self._controller is None:
            return []
        return safe_tick_with_logging(self._controller, self._bus)

    # ------------------------------------------------------------------
    # Entity events
    # ------------------------------------------------------------------

    def on_entity_damage(self, entity: EntityRef, amount: float, source: str) -> None:
        if self._controller is not None:
            self._controller.on_damage(entity, amount, source)

    def on_entity_death(self, entity: EntityRef, cause: str) -> None:
        if self._controller is not None:
            self._controller.on_death(entity, cause)

    # ------------------------------------------------------------------
    # Chat / commands
    # ------------------------------------------------------------------

    def on_server_chat(self, player_name: str, message: str) -> None:
        """
        "!nuncle" from anywhere makes the NPC say where it is (it does not
        move). Other chat within hearing range is only logged.
        """
        controller = self._controller
        if controller is None or self._world is None:
            return
        me = controller.agent_info()
        if me is None:
            return

        if message.lower().startswith(SUMMON_PREFIX):
            biome = self._world.biome_at(me.position).replace("_", " ")
            where = me.position.label()
            boundary = controller.boundary_description()
            log.info("[NUNCLE] SUMMONED %s at %s (%s) boundary=%s", player_name, where, biome, boundary)
            log_event(
                bus=self._bus,
                module=MODULE,
                event_type=EventType.SUMMONED,
                message=f"SUMMONED by {player_name}",
                payload={"player": player_name, "position": where, "biome": biome},
            )
            controller.chat(f"I'm at {where} ({biome})")
            return

        ref = self._world.player_by_name(player_name)
        player = self._world.resolve(ref) if ref is not None else None
        if player is None or player.dimension != me.dimension:
            return
        if me.position.distance_to(player.position) <= HEARING_RADIUS:
            log.info("[NUNCLE] HEARD %s %s", player_name, message)
            log_event(
                bus=self._bus,
                module=MODULE,
                event_type=EventType.HEARD,
                message=f"HEARD {player_name}",
                payload={"player": player_name, "message": message},
            )

    def handle_command(self, source: CommandSource, line: str) -> CommandReply:
        if self._commands is None:
            raise NpcCoreError(code="not_started", details={"command": line})
        return self._commands.execute(source, line)


__all__ = ["NpcHost", "HEARING_RADIUS", "default_profile"]
