"""
Cluster accumulator: the running state of one stacked point.

A ``Cluster`` is created the first time a feature maps to a new key (grid
cell or attribute value) and absorbs every later feature with that key.
It keeps:

- member count, member ids and member coordinates (insertion order)
- the set of distinct member coordinates
- the bounding box of all members
- the attributes of the member while it is the only one
- the sort value (member's own value while single, a representative value
  once it holds two or more members)
- the values of any requested attributes, per member

The representative location is resolved at most once. Incremental
strategies (Nearest, Weighted) track a running location while members are
added; deferred strategies (Average, Extent) compute it from all members
on first read. Whichever way it is produced, the first value read is
cached and returned unchanged afterwards.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Hashable, List, Mapping, Optional, Sequence, Set

from .geometry import Coordinate, Envelope
from .positions import (
    PositionStrategy,
    average_location,
    extent_location,
    nearest_update,
    weighted_update,
)

logger = logging.getLogger(__name__)


def lookup_attribute(attributes: Mapping[str, Any], name: str) -> Any:
    """Return the value of ``name``, falling back to a case-insensitive match."""

    if name in attributes:
        return attributes[name]
    lowered = name.lower()
    for key, value in attributes.items():
        if str(key).lower() == lowered:
            return value
    return None


class Cluster:
    """Aggregate for one group of stacked features."""

    def __init__(
        self,
        key: Hashable,
        reference_point: Coordinate,
        strategy: PositionStrategy = PositionStrategy.NEAREST,
    ):
        """
        Args:
            key: Identity of the group (grid cell or attribute value)
            reference_point: Fixed anchor, the cell centre for grid clusters
                or the first member for attribute clusters
            strategy: Position strategy used to resolve the location
        """
        self._key = key
        self._reference_point = reference_point
        self.strategy = strategy

        self.count = 0
        self.unique_coordinates: Set[Coordinate] = set()
        self.bounding_box: Optional[Envelope] = None
        self.member_coordinates: List[Coordinate] = []
        self.member_ids: List[str] = []
        self.singleton_attributes: Dict[str, Any] = {}
        self.sort_value: Optional[str] = None
        self.requested_attribute_values: Dict[str, List[str]] = {}

        self._running_location: Optional[Coordinate] = None
        self._cached_location: Optional[Coordinate] = None

    @property
    def key(self) -> Hashable:
        return self._key

    @property
    def reference_point(self) -> Coordinate:
        return self._reference_point

    @property
    def count_unique(self) -> int:
        return len(self.unique_coordinates)

    @property
    def is_resolved(self) -> bool:
        """Whether the location has been read and frozen."""
        return self._cached_location is not None

    @property
    def location(self) -> Optional[Coordinate]:
        """Representative location, resolved on first access and then frozen.

        Returns ``None`` for a cluster without members.
        """
        if self._cached_location is not None:
            return self._cached_location
        if self.count == 0:
            return None

        if self.strategy.is_incremental:
            resolved = self._running_location
        elif self.strategy is PositionStrategy.AVERAGE:
            resolved = average_location(self.member_coordinates)
        else:
            resolved = extent_location(self.member_coordinates)

        self._cached_location = resolved
        return resolved

    @property
    def original_location(self) -> Optional[Coordinate]:
        """The shared member coordinate when all members are superimposed."""
        if len(self.unique_coordinates) == 1:
            return next(iter(self.unique_coordinates))
        return None

    def add(
        self,
        point: Coordinate,
        feature_id: str,
        attributes: Mapping[str, Any],
        *,
        requested_attributes: Optional[Sequence[str]] = None,
        sort_field: Optional[str] = None,
        clustered_sort_value: str = "0",
    ) -> None:
        """
        Stack one feature onto this cluster.

        Args:
            point: Feature coordinate in working space
            feature_id: Identifier of the feature
            attributes: All attributes of the feature
            requested_attributes: Attribute names whose values are collected
                per member
            sort_field: Attribute providing the sort value of single members.
                Without it single members have no sort value.
            clustered_sort_value: Sort value assigned when the cluster gets
                its second member, with or without a sort field
        """
        self.count += 1
        self.member_coordinates.append(point)
        self.member_ids.append(feature_id)
        self.unique_coordinates.add(point)

        if self.bounding_box is None:
            self.bounding_box = Envelope.of_point(point)
        else:
            self.bounding_box = self.bounding_box.expand_to_include(point)

        if self.strategy.is_incremental:
            if self.strategy is PositionStrategy.NEAREST:
                self._running_location = nearest_update(
                    self._running_location, self._reference_point, point
                )
            else:
                self._running_location = weighted_update(self._running_location, point)

        if self.count == 1:
            self.singleton_attributes = dict(attributes)
        else:
            self.singleton_attributes = {}

        self._update_sort_value(feature_id, attributes, sort_field, clustered_sort_value)

        if requested_attributes:
            self._collect_requested(feature_id, attributes, requested_attributes)

    def _update_sort_value(
        self,
        feature_id: str,
        attributes: Mapping[str, Any],
        sort_field: Optional[str],
        clustered_sort_value: str,
    ) -> None:
        if self.count == 1:
            if sort_field is None:
                return
            value = lookup_attribute(attributes, sort_field)
            if value is None:
                logger.warning(
                    "Feature %s has no value for sort field '%s'", feature_id, sort_field
                )
                self.sort_value = None
            else:
                self.sort_value = str(value)
        elif self.count == 2:
            self.sort_value = clustered_sort_value

    def _collect_requested(
        self,
        feature_id: str,
        attributes: Mapping[str, Any],
        requested_attributes: Sequence[str],
    ) -> None:
        for name in requested_attributes:
            values = self.requested_attribute_values.setdefault(name, [])
            value = lookup_attribute(attributes, name)
            if value is None:
                logger.warning("Feature %s has no value for attribute '%s'", feature_id, name)
                continue
            values.append(str(value))

    def __repr__(self) -> str:
        return (
            f"Cluster(key={self._key!r}, count={self.count}, "
            f"count_unique={self.count_unique}, strategy={self.strategy.value})"
        )


__all__ = ["Cluster", "lookup_attribute"]
