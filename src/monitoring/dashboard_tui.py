# rich-based TUI dashboard
#src/monitoring/dashboard_tui.py
"""
TUI dashboard for the NPC controller.

A lightweight terminal UI (using `rich`) that subscribes to the monitoring
EventBus and renders:

- NPC status:
    - Spawned / not spawned, last known spawn point
    - Current behaviour mode
    - Thinking indicator and external brain toggle

- Boundary:
    - Centre and radius, or "none"
    - Clamp / enforcement counters

- Recent events:
    - The last N monitoring events, newest last

- Problems:
    - Last damage taken
    - Last tick exception

This runs entirely in-process. No web server, no external services.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Any, Deque, Dict, Optional

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .bus import EventBus
from .events import EventType, MonitoringEvent


# ============================================================
# TUI Dashboard
# ============================================================

class NpcDashboard:
    """
    Live terminal dashboard bound to a monitoring.EventBus.

    It consumes MonitoringEvents and keeps a small in-memory state
    representation, which is rendered periodically via rich.
    """

    def __init__(
        self,
        bus: EventBus,
        *,
        npc_name: str = "NPC",
        max_events: int = 12,
        console: Optional[Console] = None,
    ) -> None:
        self._bus = bus
        self._console = console or Console()
        self._npc_name = npc_name
        self._lock = threading.Lock()
        self._stop = threading.Event()

        # Internal state snapshot for display
        self._state: Dict[str, Any] = {
            "alive": False,
            "spawn_point": None,
            "behavior": "idle",
            "thinking": False,
            "brain": None,
            "boundary": None,          # {"center_x", "center_z", "radius"}
            "clamped": 0,
            "enforced": 0,
            "last_damage": None,
            "last_error": None,
        }
        self._events: Deque[MonitoringEvent] = deque(maxlen=max_events)

        # Subscribe to events
        self._bus.subscribe(self._on_event)

    # --------------------------------------------------------
    # Event handler
    # --------------------------------------------------------

    def _on_event(self, event: MonitoringEvent) -> None:
        """
        Update dashboard state based on a MonitoringEvent.
        This should be cheap and non-blocking.
        """
        et = event.event_type
        payload = event.payload

        with self._lock:
            self._events.append(event)
            state = self._state

            if et == EventType.SPAWNED:
                state["alive"] = True
                state["spawn_point"] = (payload.get("x"), payload.get("y"), payload.get("z"))
                state["behavior"] = "idle"
                state["thinking"] = False

            elif et in (EventType.DESPAWNED, EventType.DIED):
                state["alive"] = False
                state["behavior"] = "idle"
                state["thinking"] = False

            elif et == EventType.BEHAVIOR_CHANGED:
                state["behavior"] = payload.get("to", state["behavior"])

            elif et == EventType.THINKING_CHANGED:
                state["thinking"] = bool(payload.get("thinking"))

            elif et == EventType.BRAIN_TOGGLED:
                state["brain"] = bool(payload.get("enabled"))

            elif et == EventType.BOUNDARY_SET:
                state["boundary"] = {
                    "center_x": payload.get("center_x"),
                    "center_z": payload.get("center_z"),
                    "radius": payload.get("radius"),
                }

            elif et == EventType.BOUNDARY_CLEARED:
                state["boundary"] = None

            elif et == EventType.BOUNDARY_CLAMPED:
                state["clamped"] += 1

            elif et == EventType.BOUNDARY_ENFORCED:
                state["enforced"] += 1

            elif et == EventType.DAMAGED:
                state["last_damage"] = f"{payload.get('amount')} from {payload.get('source')}"

            elif et == EventType.LOG and payload.get("subtype") == "TICK_EXCEPTION":
                state["last_error"] = payload.get("exception_repr", event.message)

    @property
    def console(self) -> Console:
        return self._console

    def snapshot(self) -> Dict[str, Any]:
        """Copy of the current display state (for tests / tooling)."""
        with self._lock:
            return dict(self._state)

    # --------------------------------------------------------
    # Rendering helpers
    # --------------------------------------------------------

    def _render_status_panel(self) -> Panel:
        """
        Top: spawn state, behaviour, thinking / brain flags.
        """
        state = self._state
        txt = Text()
        txt.append("Spawned: ", style="bold")
        txt.append("yes\n" if state["alive"] else "no\n", style="green" if state["alive"] else "red")
        txt.append("Behaviour: ", style="bold")
        txt.append(f"{state['behavior']}\n")
        txt.append("Thinking: ", style="bold")
        txt.append("yes" if state["thinking"] else "no")
        txt.append("   Brain: ", style="bold")
        brain = state["brain"]
        txt.append("<unset>" if brain is None else ("on" if brain else "off"))

        return Panel(txt, title=f"{self._npc_name} Status", border_style="cyan")

    def _render_boundary_panel(self) -> Panel:
        """
        Middle-left: boundary geometry and counters.
        """
        state = self._state
        table = Table.grid(pad_edge=False)
        table.add_column(justify="left")

        boundary = state["boundary"]
        if boundary:
            table.add_row(
                f"[bold]Center:[/bold] ({boundary['center_x']}, {boundary['center_z']})"
            )
            table.add_row(f"[bold]Radius:[/bold] {boundary['radius']}")
        else:
            table.add_row("[bold]Boundary:[/bold] <none>")

        table.add_row(f"[bold]Clamped moves:[/bold] {state['clamped']}")
        table.add_row(f"[bold]Teleports back:[/bold] {state['enforced']}")
        return Panel(table, title="Boundary", border_style="green")

    def _render_events_panel(self) -> Panel:
        """
        Middle-right: most recent events.
        """
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Time", width=8)
        table.add_column("Event", style="bold", width=18)
        table.add_column("Message")

        if self._events:
            for ev in self._events:
                stamp = time.strftime("%H:%M:%S", time.localtime(ev.ts))
                table.add_row(stamp, ev.event_type.name, ev.message)
        else:
            table.add_row("-", "<none>", "")

        return Panel(table, title="Recent Events", border_style="magenta")

    def _render_problem_panel(self) -> Panel:
        """
        Bottom: damage and tick failures.
        """
        state = self._state
        table = Table.grid()
        table.add_column(justify="left")

        table.add_row(f"[bold]Last damage:[/bold] {state['last_damage'] or '-'}")
        if state["last_error"]:
            table.add_row(f"[bold red]Tick error:[/bold red] {state['last_error']}")
        else:
            table.add_row("[bold green]No tick errors recorded.[/bold green]")

        return Panel(table, title="Problems", border_style="yellow")

    def _build_layout(self) -> Layout:
        """
        Construct the overall layout for the dashboard.
        """
        layout = Layout()

        layout.split(
            Layout(name="top", size=5),
            Layout(name="middle", ratio=1),
            Layout(name="bottom", size=4),
        )

        with self._lock:
            layout["top"].update(self._render_status_panel())

            layout["middle"].split_row(
                Layout(name="boundary", ratio=1),
                Layout(name="events", ratio=2),
            )
            layout["boundary"].update(self._render_boundary_panel())
            layout["events"].update(self._render_events_panel())
            layout["bottom"].update(self._render_problem_panel())

        return layout

    # --------------------------------------------------------
    # Main loop
    # --------------------------------------------------------

    def run(self, refresh_per_second: float = 4.0) -> None:
        """
        Run the TUI loop until stop() is called. A stopped dashboard
        does not restart; returns immediately if stop() came first.

        This blocks the current thread. Use a separate thread if needed.
        """
        refresh_delay = 1.0 / max(refresh_per_second, 0.1)
        with Live(self._build_layout(), console=self._console, refresh_per_second=refresh_per_second) as live:
            while not self._stop.is_set():
                live.update(self._build_layout())
                self._stop.wait(refresh_delay)

    def render(self) -> Layout:
        """One frame of the dashboard, for printing outside Live."""
        return self._build_layout()

    def stop(self) -> None:
        self._stop.set()

    def close(self) -> None:
        """Stop rendering and detach from the bus."""
        self.stop()
        self._bus.unsubscribe(self._on_event)
