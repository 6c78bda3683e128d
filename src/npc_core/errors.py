# src/npc_core/errors.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class NpcCoreError(RuntimeError):
    """
    Domain-level error for wiring / lifecycle failures.

    Examples:
        - a host hook fired before the controller was created
        - the host failed to spawn the agent entity

    Directive failures (target missing, outside boundary, too far, ...)
    never raise; they come back as status strings.
    """

    code: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"NpcCoreError(code={self.code!r}, details={self.details!r})"
