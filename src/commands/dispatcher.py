# src/commands/dispatcher.py
"""
Operator command surface.

Parses chat-style command lines and routes them to the AgentController
and ObservationReporter:

    /nuncle <sub-command> [args...]     permission level >= 2
    /nunclewhere                        open to everyone

Every outcome is a CommandReply. Malformed input produces a
"Usage: ..." reply; nothing here raises for bad operator input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event
from npc_core.controller import AgentController
from observation.reporter import ObservationReporter
from spec.types import Vec3


log = logging.getLogger(__name__)

MODULE = "commands.dispatcher"

OPERATOR_PERMISSION_LEVEL = 2


@dataclass(frozen=True)
class CommandSource:
    """Who issued a command (player name or "Server") and their op level."""

    name: str
    permission_level: int = 0


@dataclass(frozen=True)
class CommandReply:
    """
    Text shown to the issuer.

    `suggestion` is an optional follow-up command the client may offer
    (e.g. a teleport to the reported coordinates).
    """

    text: str
    ok: bool = True
    suggestion: Optional[str] = None


class UsageError(ValueError):
    """Raised by argument parsers; turned into a "Usage: ..." reply."""

    def __init__(self, usage: str) -> None:
        super().__init__(usage)
        self.usage = usage


Handler = Callable[[List[str]], str]


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def _floats(args: List[str], n: int, usage: str) -> List[float]:
    if len(args) < n:
        raise UsageError(usage)
    try:
        return [float(a) for a in args[:n]]
    except ValueError:
        raise UsageError(usage) from None


def _ints(args: List[str], n: int, usage: str) -> List[int]:
    if len(args) < n:
        raise UsageError(usage)
    try:
        return [int(a) for a in args[:n]]
    except ValueError:
        raise UsageError(usage) from None


def _exact(args: List[str], n: int, usage: str) -> None:
    if len(args) != n:
        raise UsageError(usage)


class CommandSurface:
    """
    Routes parsed command lines to one controller / reporter pair.

    Both collaborators are passed in explicitly by the host wiring.
    """

    def __init__(
        self,
        controller: AgentController,
        reporter: ObservationReporter,
        *,
        bus: Optional[EventBus] = None,
    ) -> None:
        self._controller = controller
        self._reporter = reporter
        self._bus = bus if bus is not None else controller.bus

        self._subcommands: Dict[str, Handler] = {
            "spawn": self._spawn,
            "despawn": self._no_args("despawn", controller.despawn),
            "status": self._no_args("status", reporter.status),
            "observe": self._observe,
            "chat": self._chat,
            "goto": self._goto,
            "follow": self._follow,
            "wander": self._no_args("wander", controller.wander),
            "stay": self._no_args("stay", controller.stay),
            "look": self._look,
            "attack": self._attack,
            "mine": self._mine,
            "place": self._place,
            "pickup": self._pickup,
            "drop": self._drop,
            "take": self._take,
            "put": self._put,
            "boundary": self._boundary,
            "thinking": self._thinking,
            "brain": self._brain,
        }

    @property
    def subcommands(self) -> List[str]:
        return sorted(self._subcommands)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def execute(self, source: CommandSource, line: str) -> CommandReply:
        tokens = line.strip().lstrip("/").split()
        if not tokens:
            return CommandReply("Unknown command", ok=False)

        root, args = tokens[0].lower(), tokens[1:]

        if root == "nunclewhere":
            return self._where()

        if root != "nuncle":
            return CommandReply(f"Unknown command: {root}", ok=False)

        if source.permission_level < OPERATOR_PERMISSION_LEVEL:
            log.info("Denied /nuncle for %s (level %d)", source.name, source.permission_level)
            return CommandReply("You do not have permission to use this command", ok=False)

        if not args:
            return CommandReply(
                "Usage: /nuncle <" + "|".join(self.subcommands) + ">", ok=False
            )

        sub, sub_args = args[0].lower(), args[1:]
        handler = self._subcommands.get(sub)
        if handler is None:
            return CommandReply(f"Unknown sub-command: {sub}", ok=False)

        try:
            text = handler(sub_args)
        except UsageError as exc:
            return CommandReply(f"Usage: {exc.usage}", ok=False)

        log_event(
            bus=self._bus,
            module=MODULE,
            event_type=EventType.DIRECTIVE,
            message=f"{sub} -> {text}",
            payload={"source": source.name, "command": sub, "args": sub_args, "reply": text},
        )
        return CommandReply(text)

    def _where(self) -> CommandReply:
        text = self._reporter.where()
        info = self._controller.agent_info()
        if info is None:
            return CommandReply(text)
        return CommandReply(text, suggestion=f"/tp @s {info.position.label()}")

    # ------------------------------------------------------------------
    # Sub-commands
    # ------------------------------------------------------------------

    def _no_args(self, name: str, fn: Callable[[], str]) -> Handler:
        def _handler(args: List[str]) -> str:
            _exact(args, 0, f"/nuncle {name}")
            return fn()

        return _handler

    def _spawn(self, args: List[str]) -> str:
        if not args:
            return self._controller.spawn()
        _exact(args, 3, "/nuncle spawn [x y z]")
        x, y, z = _floats(args, 3, "/nuncle spawn [x y z]")
        return self._controller.spawn(Vec3(x, y, z))

    def _observe(self, args: List[str]) -> str:
        if not args:
            return self._reporter.observe()
        if args == ["inventory"]:
            return self._reporter.observe_inventory()
        raise UsageError("/nuncle observe [inventory]")

    def _chat(self, args: List[str]) -> str:
        if not args:
            raise UsageError("/nuncle chat <message>")
        return self._controller.chat(" ".join(args))

    def _goto(self, args: List[str]) -> str:
        _exact(args, 3, "/nuncle goto <x> <y> <z>")
        x, y, z = _floats(args, 3, "/nuncle goto <x> <y> <z>")
        return self._controller.go_to(Vec3(x, y, z))

    def _follow(self, args: List[str]) -> str:
        _exact(args, 1, "/nuncle follow <player>")
        return self._controller.follow(args[0])

    def _look(self, args: List[str]) -> str:
        _exact(args, 3, "/nuncle look <x> <y> <z>")
        x, y, z = _floats(args, 3, "/nuncle look <x> <y> <z>")
        return self._controller.look_at(Vec3(x, y, z))

    def _attack(self, args: List[str]) -> str:
        _exact(args, 1, "/nuncle attack <entityType>")
        return self._controller.attack(args[0])

    def _mine(self, args: List[str]) -> str:
        _exact(args, 3, "/nuncle mine <x> <y> <z>")
        x, y, z = _ints(args, 3, "/nuncle mine <x> <y> <z>")
        return self._controller.mine(Vec3(x, y, z))

    def _place(self, args: List[str]) -> str:
        usage = "/nuncle place <x> <y> <z> <blockName>"
        _exact(args, 4, usage)
        x, y, z = _ints(args, 3, usage)
        return self._controller.place(Vec3(x, y, z), args[3])

    def _pickup(self, args: List[str]) -> str:
        return self._controller.pickup(" ".join(args) if args else None)

    def _drop(self, args: List[str]) -> str:
        if not args:
            raise UsageError("/nuncle drop <itemName>")
        return self._controller.drop(" ".join(args))

    def _take(self, args: List[str]) -> str:
        usage = "/nuncle take <x> <y> <z> [itemFilter] [count]"
        if not 3 <= len(args) <= 5:
            raise UsageError(usage)
        x, y, z = _ints(args, 3, usage)
        item_filter = args[3] if len(args) >= 4 else None
        count = _ints(args[4:], 1, usage)[0] if len(args) == 5 else None
        return self._controller.take(Vec3(x, y, z), item_filter, count)

    def _put(self, args: List[str]) -> str:
        usage = "/nuncle put <x> <y> <z> <itemName> [count]"
        if not 4 <= len(args) <= 5:
            raise UsageError(usage)
        x, y, z = _ints(args, 3, usage)
        count = _ints(args[4:], 1, usage)[0] if len(args) == 5 else None
        return self._controller.put(Vec3(x, y, z), args[3], count)

    def _boundary(self, args: List[str]) -> str:
        usage = "/nuncle boundary set <x> <z> <radius> | clear | info"
        if not args:
            raise UsageError(usage)

        action, rest = args[0].lower(), args[1:]
        if action == "set":
            _exact(rest, 3, usage)
            x, z, radius = _floats(rest, 3, usage)
            return self._controller.set_boundary(x, z, radius)
        if action == "clear" and not rest:
            return self._controller.clear_boundary()
        if action == "info" and not rest:
            return self._controller.boundary_description()
        raise UsageError(usage)

    def _thinking(self, args: List[str]) -> str:
        if args == ["start"]:
            return self._controller.set_thinking(True)
        if args == ["stop"]:
            return self._controller.set_thinking(False)
        raise UsageError("/nuncle thinking start|stop")

    def _brain(self, args: List[str]) -> str:
        """
        Signal for an external decision process. The controller itself is
        not touched; the toggle is only logged and published.
        """
        if args not in (["on"], ["off"]):
            raise UsageError("/nuncle brain on|off")

        on = args[0] == "on"
        tag = "BRAIN_ON" if on else "BRAIN_OFF"
        log.info("[NUNCLE] %s", tag)
        log_event(
            bus=self._bus,
            module=MODULE,
            event_type=EventType.BRAIN_TOGGLED,
            message=tag,
            payload={"enabled": on},
        )

        name = self._controller.npc_name
        if on:
            return f"Brain toggle: ON - {name} will spawn and start thinking"
        return f"Brain toggle: OFF - {name} will despawn and stop thinking"


__all__ = [
    "CommandSurface",
    "CommandSource",
    "CommandReply",
    "UsageError",
    "OPERATOR_PERMISSION_LEVEL",
]
