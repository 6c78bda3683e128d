# src/env/loader.py
"""
Loads config/npc.yaml into an NpcProfile.

Layout of the file:

    npc:
      name: NuncleNelson
      spawn_on_start: false
    controller:          # any ControllerConfig field
      follow_distance: 3.0
    boundary:            # optional startup fence
      center_x: 0
      center_z: 0
      radius: 64
    logging:
      level: INFO
    monitoring:
      event_log: logs/npc/events.log
      dashboard: false

Missing file -> FileNotFoundError. Wrong shapes, unknown keys and
out-of-range values -> ValueError.
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from npc_core.boundary import Boundary
from npc_core.config import ControllerConfig

from .schema import LoggingSettings, MonitoringSettings, NpcProfile


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_PROFILE_PATH = CONFIG_ROOT / "npc.yaml"

_CONTROLLER_FIELDS = {f.name for f in dataclasses.fields(ControllerConfig)}


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping from `path`."""
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"'{key}' must be a mapping, got {type(value).__name__}")
    return value


def _controller_config(name: str, raw: Dict[str, Any]) -> ControllerConfig:
    unknown = set(raw) - _CONTROLLER_FIELDS
    if unknown:
        raise ValueError(f"Unknown controller settings: {sorted(unknown)}")
    try:
        return ControllerConfig(**{**raw, "npc_name": name})
    except TypeError as exc:
        raise ValueError(f"Invalid controller settings: {exc}") from exc


def _boundary(raw: Dict[str, Any]) -> Optional[Boundary]:
    if not raw:
        return None
    try:
        return Boundary(
            center_x=float(raw["center_x"]),
            center_z=float(raw["center_z"]),
            radius=float(raw["radius"]),
        )
    except KeyError as exc:
        raise ValueError(f"boundary is missing {exc.args[0]!r}") from exc
    except TypeError as exc:
        raise ValueError(f"boundary values must be numbers: {exc}") from exc


def _logging_settings(raw: Dict[str, Any]) -> LoggingSettings:
    level = str(raw.get("level", "INFO")).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level: {level}")
    return LoggingSettings(level=level)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_npc_profile(path: Optional[Union[str, Path]] = None) -> NpcProfile:
    """Main entry point: returns a fully resolved NpcProfile."""
    cfg_path = Path(path) if path is not None else DEFAULT_PROFILE_PATH
    data = _load_yaml(cfg_path)

    npc_raw = _section(data, "npc")
    name = str(npc_raw.get("name", ControllerConfig.npc_name))
    if not name.strip():
        raise ValueError("npc.name must not be empty")

    monitoring_raw = _section(data, "monitoring")
    event_log = monitoring_raw.get("event_log", MonitoringSettings.event_log)

    return NpcProfile(
        name=name,
        controller=_controller_config(name, _section(data, "controller")),
        boundary=_boundary(_section(data, "boundary")),
        spawn_on_start=bool(npc_raw.get("spawn_on_start", False)),
        logging=_logging_settings(_section(data, "logging")),
        monitoring=MonitoringSettings(
            event_log=str(event_log) if event_log else None,
            dashboard=bool(monitoring_raw.get("dashboard", False)),
        ),
    )
