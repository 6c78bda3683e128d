# path: src/runtime/__init__.py

"""
Runtime wiring package for the NPC.

Holds the pieces a server host plugs into:
- NpcHost (lifecycle / tick / chat / command hooks)
- configure_logging
- safe_tick_with_logging
"""

from .error_handling import safe_tick_with_logging
from .host import NpcHost
from .logging_config import configure_logging

__all__ = ["NpcHost", "configure_logging", "safe_tick_with_logging"]
