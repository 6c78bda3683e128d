# src/npc_core/testing/__init__.py
"""In-memory doubles for exercising the controller without a game server."""

from .fakes import FakeWorld

__all__ = ["FakeWorld"]
