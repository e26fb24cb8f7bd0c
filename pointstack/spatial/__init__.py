"""
pointstack/spatial: Grid indexing, position strategies, and the clustering passes.
"""

from .cluster import Cluster
from .features import Feature, FeatureReader
from .geometry import Coordinate, Envelope, midpoint, representative_point
from .grid import GridCell, cell_center, cell_of, world_cell_size
from .positions import PositionStrategy
from .stacking import PassStatistics, stack_points_by_attribute, stack_points_by_grid

__all__ = [
    "Cluster",
    "Coordinate",
    "Envelope",
    "Feature",
    "FeatureReader",
    "GridCell",
    "PassStatistics",
    "PositionStrategy",
    "cell_center",
    "cell_of",
    "midpoint",
    "representative_point",
    "stack_points_by_attribute",
    "stack_points_by_grid",
    "world_cell_size",
]
