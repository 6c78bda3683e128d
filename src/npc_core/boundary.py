# circular soft fence: containment, clamping, description
# src/npc_core/boundary.py
"""
Boundary enforcement for the NPC controller.

A boundary is a circle in the horizontal (x, z) plane. The vertical axis
is never constrained and never altered by clamping.

Everything here is pure and idempotent so the same logic serves both:
- advisory clamping of movement destinations before navigation starts
- hard per-tick enforcement (teleport back to the clamped point)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from spec.types import Vec3


MIN_BOUNDARY_RADIUS = 1.0

# Relative slack on the edge test. Projected points carry a rounding error
# proportional to the coordinate magnitude (up to ~3e7 on a legal world).
_EDGE_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Boundary:
    """Circle centred on (center_x, center_z). Always fully specified."""

    center_x: float
    center_z: float
    radius: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.radius) or self.radius < MIN_BOUNDARY_RADIUS:
            raise ValueError(
                f"Boundary radius must be >= {MIN_BOUNDARY_RADIUS:g}, got {self.radius!r}"
            )
        if not (math.isfinite(self.center_x) and math.isfinite(self.center_z)):
            raise ValueError("Boundary center must be finite")

    def distance_from_center(self, point: Vec3) -> float:
        dx = point.x - self.center_x
        dz = point.z - self.center_z
        return math.sqrt(dx * dx + dz * dz)

    def edge_tolerance(self) -> float:
        return _EDGE_TOLERANCE * max(
            1.0, abs(self.center_x), abs(self.center_z), self.radius
        )

    def contains(self, point: Vec3) -> bool:
        return self.distance_from_center(point) <= self.radius + self.edge_tolerance()

    def clamp(self, point: Vec3) -> Vec3:
        dx = point.x - self.center_x
        dz = point.z - self.center_z
        if self.contains(point):
            return point
        scale = self.radius / math.sqrt(dx * dx + dz * dz)
        clamped = Vec3(self.center_x + dx * scale, point.y, self.center_z + dz * scale)
        # Step inward until the edge test accepts the projection.
        while not self.contains(clamped):
            scale *= 1.0 - _EDGE_TOLERANCE
            clamped = Vec3(self.center_x + dx * scale, point.y, self.center_z + dz * scale)
        return clamped


# ---------------------------------------------------------------------------
# Functional API (boundary may be absent)
# ---------------------------------------------------------------------------


def is_inside(point: Vec3, boundary: Optional[Boundary]) -> bool:
    """True if there is no boundary or `point` lies within it (edge included)."""
    if boundary is None:
        return True
    return boundary.contains(point)


def clamp(point: Vec3, boundary: Optional[Boundary]) -> Vec3:
    """
    Project `point` onto the boundary edge along the centre->point ray.

    Interior points (and every point when no boundary is set) come back
    unchanged. y is preserved.
    """
    if boundary is None:
        return point
    return boundary.clamp(point)


def describe(boundary: Optional[Boundary], position: Optional[Vec3] = None) -> str:
    """
    Human-readable boundary summary.

    When `position` is given, append its distance from the centre and
    from the edge. Edge distance goes negative once the point is outside.
    """
    if boundary is None:
        return "No boundary set"

    info = (
        f"Boundary: center ({int(boundary.center_x)}, {int(boundary.center_z)}) "
        f"radius {int(boundary.radius)}"
    )
    if position is not None:
        dist = boundary.distance_from_center(position)
        info += (
            f" | NPC is {int(dist)} blocks from center "
            f"({int(boundary.radius - dist)} from edge)"
        )
    return info


class BoundaryEnforcer:
    """
    Holds the optional active boundary and answers containment queries.

    The boundary is replaced atomically, so callers never observe a centre
    without a radius or vice versa.
    """

    def __init__(self, boundary: Optional[Boundary] = None) -> None:
        self._boundary = boundary

    @property
    def boundary(self) -> Optional[Boundary]:
        return self._boundary

    @property
    def active(self) -> bool:
        return self._boundary is not None

    def set(self, center_x: float, center_z: float, radius: float) -> Boundary:
        """Install a new boundary. Raises ValueError on a bad radius."""
        self._boundary = Boundary(float(center_x), float(center_z), float(radius))
        return self._boundary

    def clear(self) -> None:
        self._boundary = None

    def is_inside(self, point: Vec3) -> bool:
        return is_inside(point, self._boundary)

    def clamp(self, point: Vec3) -> Vec3:
        return clamp(point, self._boundary)

    def describe(self, position: Optional[Vec3] = None) -> str:
        return describe(self._boundary, position)


__all__ = [
    "MIN_BOUNDARY_RADIUS",
    "Boundary",
    "BoundaryEnforcer",
    "is_inside",
    "clamp",
    "describe",
]
