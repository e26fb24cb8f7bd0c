"""
Pytest configuration and shared fixtures for point stacker tests.

This file provides:
- Sample point layers (coincident points and three text attributes)
- GeoJSON builders for the feature reader and the HTTP server
- Common test utilities
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest
from shapely.geometry import MultiPoint, Point

from pointstack.spatial.features import Feature
from pointstack.spatial.geometry import Envelope


Points = Sequence[Tuple[float, float]]


# ==============================================================================
# Builders
# ==============================================================================

def make_features(
    points: Points,
    attr_a: Optional[List[Any]] = None,
    attr_b: Optional[List[Any]] = None,
    attr_c: Optional[List[Any]] = None,
    multipoint: bool = True,
) -> List[Feature]:
    """Build features with single-member multipoint geometries.

    Attributes are named ``attribute a``, ``attribute b`` and ``attribute c``.
    """
    features = []
    for i, (x, y) in enumerate(points):
        attributes: Dict[str, Any] = {"value": float(i)}
        for name, values in (("attribute a", attr_a), ("attribute b", attr_b), ("attribute c", attr_c)):
            if values is not None:
                attributes[name] = values[i]
        geometry = MultiPoint([(x, y)]) if multipoint else Point(x, y)
        features.append(Feature(id=f"sampleData.{i + 1}", geometry=geometry, attributes=attributes))
    return features


def make_geojson(
    points: Points,
    attr_a: Optional[List[Any]] = None,
    attr_b: Optional[List[Any]] = None,
    attr_c: Optional[List[Any]] = None,
) -> Dict[str, Any]:
    """Same layer as :func:`make_features`, as a GeoJSON FeatureCollection."""
    features = []
    for i, (x, y) in enumerate(points):
        properties: Dict[str, Any] = {"value": float(i)}
        for name, values in (("attribute a", attr_a), ("attribute b", attr_b), ("attribute c", attr_c)):
            if values is not None:
                properties[name] = values[i]
        features.append({
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [x, y]},
            "properties": properties,
        })
    return {"type": "FeatureCollection", "features": features}


# ==============================================================================
# Sample Layers
# ==============================================================================

@pytest.fixture
def unit_bounds() -> Envelope:
    """0-10 x 0-10 output window."""
    return Envelope(0.0, 0.0, 10.0, 10.0)


@pytest.fixture
def grid_points() -> List[Tuple[float, float]]:
    """Five points: one lone, two superimposed, two distinct neighbours."""
    return [(4, 4), (6.5, 6.5), (6.5, 6.5), (8, 8), (8.3, 8.3)]


@pytest.fixture
def grid_features(grid_points) -> List[Feature]:
    return make_features(
        grid_points,
        attr_a=["2.4", "1", "2.4", "3", "1"],
        attr_b=["I", "V", "II", "II", "I"],
        attr_c=["west", "south", "south", "west", "east"],
    )


@pytest.fixture
def attribute_features() -> List[Feature]:
    """Five points in three 'attribute b' groups."""
    return make_features(
        [(4, 4), (6.5, 7), (6.5, 6.5), (8, 8), (4, 4)],
        attr_a=["2.4", "1", "2.4", "3", "1"],
        attr_b=["I", "V", "II", "II", "I"],
        attr_c=["west", "south", "south", "west", "east"],
    )


@pytest.fixture
def extent_features() -> List[Feature]:
    """Six points in three 'attribute b' groups."""
    return make_features(
        [(4, 4), (6.5, 7), (6, 4), (8, 8), (7.5, 5), (4, 4)],
        attr_a=["2.4", "1", "2.4", "3", "1", "1"],
        attr_b=["I", "V", "II", "II", "II", "I"],
        attr_c=["west", "south", "south", "west", "north", "east"],
    )


@pytest.fixture
def sort_features() -> List[Feature]:
    """Seven points, two superimposed, sortable values in 'attribute c'."""
    return make_features(
        [(4, 4), (6.5, 7), (16, 16.5), (8, 8), (4, 4), (41, 41), (14, 5)],
        attr_a=["2.4", "1", "2.4", "3", "1", "3", "1"],
        attr_b=["I", "V", "II", "II", "I", "II", "I"],
        attr_c=["3", "2", "2", "1", "3", "1", "5"],
    )


# ==============================================================================
# Utilities
# ==============================================================================

def closest_record(records, x: float, y: float) -> Dict[str, Any]:
    """Return the output record whose point is closest to ``(x, y)``."""
    best = None
    best_dist = float("inf")
    for row in records.to_dict(orient="records"):
        dist = row["geom"].distance(Point(x, y))
        if dist < best_dist:
            best, best_dist = row, dist
    return best


def assert_approx_equal(a: float, b: float, tolerance: float = 1e-9):
    """Assert two floats are approximately equal."""
    assert abs(a - b) < tolerance, f"{a} != {b} (tolerance={tolerance})"
