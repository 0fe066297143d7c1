from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Point:
    """Integer grid coordinate (x, y)."""

    x: int
    y: int

    def adjacent(self, other: Point) -> bool:
        """True for the eight surrounding cells, never for the point itself."""
        return max(abs(self.x - other.x), abs(self.y - other.y)) == 1

    def distance_squared(self, other: Point) -> int:
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy
