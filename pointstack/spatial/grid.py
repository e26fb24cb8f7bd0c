"""Grid indexing for stacking points by cell.

The grid is anchored at the origin of the working coordinate space rather
than at the query window, so cell boundaries stay put while the map is
panned. Cell indices are truncated toward zero, which makes the cells that
touch an axis from the negative side narrower than the rest.
"""

from __future__ import annotations

import math
from typing import NamedTuple

from .geometry import Coordinate, Envelope


class GridCell(NamedTuple):
    """Integer index of a grid cell."""

    ix: int
    iy: int


def _check_cell_size(cell_size: float) -> None:
    if not cell_size > 0:
        raise ValueError(f"Grid cell size must be positive, got {cell_size!r}")


def cell_of(point: Coordinate, cell_size: float) -> GridCell:
    """Return the cell containing ``point`` for a grid of ``cell_size``."""

    _check_cell_size(cell_size)
    return GridCell(math.trunc(point.x / cell_size), math.trunc(point.y / cell_size))


def cell_center(cell: GridCell, cell_size: float) -> Coordinate:
    """Geometric centre of ``cell``."""

    _check_cell_size(cell_size)
    return Coordinate(
        cell.ix * cell_size + cell_size / 2,
        cell.iy * cell_size + cell_size / 2,
    )


def world_cell_size(cluster_size_px: float, output_bbox: Envelope, output_width: int) -> float:
    """Convert a cell size in output pixels into working-space units.

    Args:
        cluster_size_px: Cell size in pixels of the rendered image
        output_bbox: Extent of the rendered image in working-space units
        output_width: Width of the rendered image in pixels

    Returns:
        Cell size in the units of ``output_bbox``
    """

    if output_width <= 0:
        raise ValueError(f"Output width must be positive, got {output_width!r}")
    return cluster_size_px * output_bbox.width / output_width


__all__ = [
    "GridCell",
    "cell_center",
    "cell_of",
    "world_cell_size",
]
