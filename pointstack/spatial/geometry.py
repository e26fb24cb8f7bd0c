"""Small geometry primitives shared by the stacking engine."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import shapely
from shapely.geometry import Point, Polygon, box
from shapely.geometry.base import BaseGeometry


@dataclass(frozen=True)
class Coordinate:
    """An exact ``(x, y)`` position. Equality and hashing use both ordinates."""

    x: float
    y: float

    def distance(self, other: "Coordinate") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_point(self) -> Point:
        return Point(self.x, self.y)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


@dataclass(frozen=True)
class Envelope:
    """Axis-aligned bounding box."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def of_point(cls, coordinate: Coordinate) -> "Envelope":
        return cls(coordinate.x, coordinate.y, coordinate.x, coordinate.y)

    @classmethod
    def from_corners(cls, a: Coordinate, b: Coordinate) -> "Envelope":
        """Build the envelope spanned by two arbitrary corners."""

        return cls(min(a.x, b.x), min(a.y, b.y), max(a.x, b.x), max(a.y, b.y))

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def lower_left(self) -> Coordinate:
        return Coordinate(self.min_x, self.min_y)

    @property
    def upper_right(self) -> Coordinate:
        return Coordinate(self.max_x, self.max_y)

    def expand_to_include(self, coordinate: Coordinate) -> "Envelope":
        return Envelope(
            min(self.min_x, coordinate.x),
            min(self.min_y, coordinate.y),
            max(self.max_x, coordinate.x),
            max(self.max_y, coordinate.y),
        )

    def to_polygon(self) -> Polygon:
        return box(self.min_x, self.min_y, self.max_x, self.max_y)

    def __str__(self) -> str:
        return f"Env[{self.min_x} : {self.max_x}, {self.min_y} : {self.max_y}]"


def midpoint(a: Coordinate, b: Coordinate) -> Coordinate:
    return Coordinate((a.x + b.x) / 2, (a.y + b.y) / 2)


def representative_point(geometry: Optional[BaseGeometry]) -> Optional[Coordinate]:
    """Return the coordinate standing in for ``geometry``.

    A geometry made of exactly one coordinate (a point, or a multipoint with
    a single member) is used as-is; anything else is reduced to its
    centroid. Returns ``None`` for missing or empty geometries.
    """

    if geometry is None or geometry.is_empty:
        return None

    coords = shapely.get_coordinates(geometry)
    if len(coords) == 1:
        return Coordinate(float(coords[0][0]), float(coords[0][1]))

    centroid = geometry.centroid
    if centroid.is_empty:
        return None
    return Coordinate(float(centroid.x), float(centroid.y))


__all__ = [
    "Coordinate",
    "Envelope",
    "midpoint",
    "representative_point",
]
