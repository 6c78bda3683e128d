# src/commands/__init__.py
"""Operator command surface (/nuncle, /nunclewhere)."""

from .dispatcher import (
    OPERATOR_PERMISSION_LEVEL,
    CommandReply,
    CommandSource,
    CommandSurface,
    UsageError,
)

__all__ = [
    "CommandSurface",
    "CommandSource",
    "CommandReply",
    "UsageError",
    "OPERATOR_PERMISSION_LEVEL",
]
