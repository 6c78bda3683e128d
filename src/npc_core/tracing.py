# src/npc_core/tracing.py
"""
Tracing for applied world effects.

Keeps a rolling buffer of what the controller actually did to the world
(navigate, strike, teleport, ...) so monitoring tools and tests can look
back over recent ticks. Emits one debug log line per effect.

It does NOT make control decisions.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Deque, Dict, List, Optional


@dataclass
class EffectTraceRecord:
    """Single applied effect."""

    timestamp: float           # wall-clock time (time.time())
    duration_s: float

    effect_type: str
    params: Dict[str, Any]
    ok: bool


class EffectTracer:
    """
    In-memory effect tracer.

    Tracing must never break the tick that produced the effect, so record()
    logs and drops records it cannot build.
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        max_records: int = 2_000,
    ) -> None:
        self._logger = logger or logging.getLogger("npc_core.effect")
        self._records: Deque[EffectTraceRecord] = deque(maxlen=max_records)

    def record(self, *, effect: Any, ok: bool, duration_s: float) -> None:
        try:
            record = EffectTraceRecord(
                timestamp=time.time(),
                duration_s=duration_s,
                effect_type=type(effect).__name__,
                params=_effect_params(effect),
                ok=bool(ok),
            )
        except Exception:
            self._logger.exception("Failed to build EffectTraceRecord")
            return

        self._records.append(record)
        self._logger.debug(
            "effect type=%s ok=%s params=%r duration=%.4fs",
            record.effect_type,
            record.ok,
            record.params,
            record.duration_s,
        )

    def get_records(self) -> List[EffectTraceRecord]:
        return list(self._records)

    def clear(self) -> None:
        self._records.clear()


def _effect_params(effect: Any) -> Dict[str, Any]:
    # Shallow on purpose: Vec3 / EntityRef stay as objects.
    if is_dataclass(effect):
        return {f.name: getattr(effect, f.name) for f in fields(effect)}
    return {"repr": repr(effect)}
