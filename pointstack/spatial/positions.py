"""
Position strategies for placing a stacked point.

Four policies decide where the point representing a cluster is drawn:

1. Nearest (default): the member closest to the reference point, averaged
   with the reference point. Maintained while members are added.
2. Weighted: chained pairwise midpoint of the members in arrival order.
   Maintained while members are added.
3. Average: arithmetic mean of all member coordinates, resolved once after
   accumulation.
4. Extent: centre of the members' bounding box, resolved once after
   accumulation.

Nearest and Weighted depend on member arrival order; Average and Extent do
not.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional, Sequence, Union

import numpy as np

from .geometry import Coordinate, midpoint


class PositionStrategy(str, Enum):
    """How the location of a stacked point is chosen."""

    NEAREST = "Nearest"
    WEIGHTED = "Weighted"
    AVERAGE = "Average"
    EXTENT = "Extent"

    @property
    def is_incremental(self) -> bool:
        """Whether the location is updated as each member is added."""
        return self in (PositionStrategy.NEAREST, PositionStrategy.WEIGHTED)

    @classmethod
    def parse(cls, value: Union[str, "PositionStrategy", None]) -> "PositionStrategy":
        """Parse a strategy name case-insensitively. ``None`` gives the default."""

        if value is None:
            return cls.NEAREST
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown position strategy '{value}'. Expected one of: {valid}")


def nearest_update(
    location: Optional[Coordinate],
    reference: Coordinate,
    point: Coordinate,
) -> Coordinate:
    """
    Next location under the Nearest strategy.

    The candidate's raw distance to the reference is compared against the
    distance of the current (already averaged) location, not against the
    best raw member seen so far.
    """
    if location is None:
        return midpoint(reference, point)
    if point.distance(reference) < location.distance(reference):
        return midpoint(reference, point)
    return location


def weighted_update(location: Optional[Coordinate], point: Coordinate) -> Coordinate:
    """Next location under the Weighted strategy (pairwise midpoint chain)."""
    if location is None:
        return point
    return midpoint(location, point)


def average_location(coordinates: Sequence[Coordinate]) -> Coordinate:
    """Arithmetic mean of ``coordinates``.

    Sums are correctly rounded, so the result does not depend on the order
    of the members.
    """
    if not coordinates:
        raise ValueError("Cannot average an empty set of coordinates")
    n = len(coordinates)
    return Coordinate(
        math.fsum(c.x for c in coordinates) / n,
        math.fsum(c.y for c in coordinates) / n,
    )


def extent_location(coordinates: Sequence[Coordinate]) -> Coordinate:
    """Centre of the bounding box of ``coordinates``."""
    if not coordinates:
        raise ValueError("Cannot take the extent of an empty set of coordinates")
    xy = np.array([(c.x, c.y) for c in coordinates], dtype=float)
    lo = xy.min(axis=0)
    hi = xy.max(axis=0)
    return Coordinate(float((lo[0] + hi[0]) / 2), float((lo[1] + hi[1]) / 2))


__all__ = [
    "PositionStrategy",
    "average_location",
    "extent_location",
    "nearest_update",
    "weighted_update",
]
