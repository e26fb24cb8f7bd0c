"""
Clustering passes: stream features into clusters.

Two passes share the same per-feature handling and differ only in how the
cluster key and the reference point of a new cluster are chosen:

- by grid: key is the grid cell of the feature, reference point is the
  cell centre
- by attribute: key is the string value of a named attribute, reference
  point is the first member's coordinate. Features without a value for the
  attribute are skipped.

Each pass consumes the feature stream exactly once and closes it when done.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Hashable, Iterable, Optional, Sequence, Tuple

from .cluster import Cluster, lookup_attribute
from .features import Feature
from .geometry import Coordinate, representative_point
from .grid import GridCell, cell_center, cell_of
from .positions import PositionStrategy

if TYPE_CHECKING:
    from ..projection.transforms import CoordinateTransform

logger = logging.getLogger(__name__)


@dataclass
class PassStatistics:
    """Counters for one clustering pass."""

    features_read: int = 0
    """Features pulled from the stream."""

    features_skipped: int = 0
    """Features left out of every cluster."""

    @property
    def features_stacked(self) -> int:
        return self.features_read - self.features_skipped


@dataclass(frozen=True)
class MemberOptions:
    """Per-member bookkeeping shared by every cluster of a pass."""

    strategy: PositionStrategy = PositionStrategy.NEAREST
    requested_attributes: Optional[Tuple[str, ...]] = None
    sort_field: Optional[str] = None
    clustered_sort_value: str = "0"


# (feature, working-space point) -> (key, reference point) or None to skip
KeyFunc = Callable[[Feature, Coordinate], Optional[Tuple[Hashable, Coordinate]]]


def _close(iterator) -> None:
    close = getattr(iterator, "close", None)
    if close is not None:
        close()


def _stack(
    features: Iterable[Feature],
    transform: CoordinateTransform,
    key_for: KeyFunc,
    options: MemberOptions,
) -> Tuple[Dict[Hashable, Cluster], PassStatistics]:
    clusters: Dict[Hashable, Cluster] = {}
    stats = PassStatistics()

    iterator = iter(features)
    try:
        for feature in iterator:
            stats.features_read += 1

            point = representative_point(feature.geometry)
            if point is None:
                logger.warning("Feature %s has no usable geometry, skipping", feature.id)
                stats.features_skipped += 1
                continue
            point = transform.forward(point)

            keyed = key_for(feature, point)
            if keyed is None:
                stats.features_skipped += 1
                continue
            key, reference = keyed

            cluster = clusters.get(key)
            if cluster is None:
                cluster = Cluster(key, reference, options.strategy)
                clusters[key] = cluster

            cluster.add(
                point,
                feature.id,
                feature.attributes,
                requested_attributes=options.requested_attributes,
                sort_field=options.sort_field,
                clustered_sort_value=options.clustered_sort_value,
            )
    finally:
        _close(iterator)
        _close(features)

    return clusters, stats


def stack_points_by_grid(
    features: Iterable[Feature],
    transform: CoordinateTransform,
    cell_size: float,
    *,
    strategy: PositionStrategy = PositionStrategy.NEAREST,
    requested_attributes: Optional[Sequence[str]] = None,
    sort_field: Optional[str] = None,
    clustered_sort_value: str = "0",
) -> Tuple[Dict[GridCell, Cluster], PassStatistics]:
    """
    Stack features onto a regular grid.

    Non-point geometries are represented by their centroid. Each point is
    transformed into working space before it is gridded.

    Args:
        features: Feature stream (closed after the pass if it has ``close``)
        transform: Mapping from the data CRS into working space
        cell_size: Grid cell size in working-space units
        strategy: Position strategy for every cluster of the pass
        requested_attributes: Attribute names collected per member
        sort_field: Attribute giving the sort value of single-member clusters
        clustered_sort_value: Sort value of clusters with 2+ members

    Returns:
        (clusters keyed by grid cell, pass statistics)
    """
    if not cell_size > 0:
        raise ValueError(f"Grid cell size must be positive, got {cell_size!r}")

    def key_for(feature: Feature, point: Coordinate):
        cell = cell_of(point, cell_size)
        return cell, cell_center(cell, cell_size)

    options = MemberOptions(
        strategy=strategy,
        requested_attributes=tuple(requested_attributes) if requested_attributes else None,
        sort_field=sort_field,
        clustered_sort_value=clustered_sort_value,
    )
    clusters, stats = _stack(features, transform, key_for, options)

    logger.info(
        "Grid pass stacked %d features into %d clusters (cell size %g)",
        stats.features_stacked, len(clusters), cell_size,
    )
    return clusters, stats


def stack_points_by_attribute(
    features: Iterable[Feature],
    transform: CoordinateTransform,
    attribute: str,
    *,
    strategy: PositionStrategy = PositionStrategy.NEAREST,
    requested_attributes: Optional[Sequence[str]] = None,
    sort_field: Optional[str] = None,
    clustered_sort_value: str = "0",
) -> Tuple[Dict[str, Cluster], PassStatistics]:
    """
    Stack features sharing the same value of ``attribute``.

    The attribute name is matched exactly first, then case-insensitively.
    Features with a missing or null value are skipped and logged.

    Returns:
        (clusters keyed by attribute value, pass statistics)
    """

    def key_for(feature: Feature, point: Coordinate):
        value = lookup_attribute(feature.attributes, attribute)
        if value is None:
            logger.warning(
                "Feature %s has no value for '%s', not stacked", feature.id, attribute
            )
            return None
        return str(value), point

    options = MemberOptions(
        strategy=strategy,
        requested_attributes=tuple(requested_attributes) if requested_attributes else None,
        sort_field=sort_field,
        clustered_sort_value=clustered_sort_value,
    )
    clusters, stats = _stack(features, transform, key_for, options)

    logger.info(
        "Attribute pass on '%s' stacked %d features into %d clusters (%d skipped)",
        attribute, stats.features_stacked, len(clusters), stats.features_skipped,
    )
    return clusters, stats


__all__ = [
    "MemberOptions",
    "PassStatistics",
    "stack_points_by_attribute",
    "stack_points_by_grid",
]
