"""
Point stacker: aggregate point features into stacked points for display.

Usage:
    from pointstack import StackerConfig, FeatureReader, stack_points

    config = StackerConfig(cluster_size=40, output_bbox=(0, 0, 10, 10),
                           output_width=1000, output_height=1000)
    with FeatureReader(geojson) as reader:
        records, diagnostics = stack_points(reader, config)
"""

from .exceptions import ConfigurationError, StackingError, TransformError
from .output.projector import PreserveLocation, SortOrder
from .process import StackerConfig, StackingDiagnostics, stack_points
from .spatial.features import Feature, FeatureReader
from .spatial.positions import PositionStrategy

__all__ = [
    "ConfigurationError",
    "Feature",
    "FeatureReader",
    "PositionStrategy",
    "PreserveLocation",
    "SortOrder",
    "StackerConfig",
    "StackingDiagnostics",
    "StackingError",
    "TransformError",
    "stack_points",
]
