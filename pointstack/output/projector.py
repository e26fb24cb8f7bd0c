"""
Result projection: turn accumulated clusters into output records.

The projector resolves each cluster's display location (applying the
preserve-location override), maps the location and bounding box back into
the data CRS, adds optional normalized counts, and assembles one record per
cluster into a :class:`pandas.DataFrame`.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd
from shapely.geometry import mapping

from ..projection.transforms import CoordinateTransform
from ..spatial.cluster import Cluster
from ..spatial.geometry import Coordinate, Envelope
from . import fields as F

logger = logging.getLogger(__name__)


class PreserveLocation(str, Enum):
    """When to keep an original member location instead of the strategy result."""

    SINGLE = "Single"
    """Clusters with exactly one member."""

    SUPERIMPOSED = "Superimposed"
    """Clusters whose members all share one coordinate."""

    NEVER = "Never"
    """Always use the strategy result (default)."""

    @classmethod
    def parse(cls, value: Union[str, "PreserveLocation", None]) -> "PreserveLocation":
        if value is None:
            return cls.NEVER
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown preserve-location mode '{value}'. Expected one of: {valid}")


class SortOrder(str, Enum):
    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"

    @classmethod
    def parse(cls, value: Union[str, "SortOrder", None]) -> "SortOrder":
        if value is None:
            return cls.ASCENDING
        if isinstance(value, cls):
            return value
        text = str(value).strip().upper()
        if text in ("DESC", cls.DESCENDING.value):
            return cls.DESCENDING
        if text in ("ASC", cls.ASCENDING.value):
            return cls.ASCENDING
        raise ValueError(f"Unknown sort order '{value}'. Expected ASCENDING or DESCENDING")


def stacked_point_location(cluster: Cluster, preserve_location: PreserveLocation) -> Coordinate:
    """Display location of ``cluster`` in working space."""

    if preserve_location is PreserveLocation.SINGLE and cluster.count == 1:
        return cluster.member_coordinates[0]
    if preserve_location is PreserveLocation.SUPERIMPOSED:
        original = cluster.original_location
        if original is not None:
            return original
    return cluster.location


def count_maxima(clusters: Iterable[Cluster]) -> Tuple[int, int]:
    """
    Maxima used to normalize counts.

    The unique maximum is not tracked on its own: a
    cluster's unique count is taken whenever its total count exceeds the
    running unique maximum.
    """
    max_count = 0
    max_count_unique = 0
    for cluster in clusters:
        if max_count < cluster.count:
            max_count = cluster.count
        if max_count_unique < cluster.count:
            max_count_unique = cluster.count_unique
    return max_count, max_count_unique


def _source_envelope(envelope: Envelope, transform: CoordinateTransform) -> Envelope:
    return Envelope.from_corners(
        transform.inverse(envelope.lower_left),
        transform.inverse(envelope.upper_right),
    )


def project_clusters(
    clusters: Iterable[Cluster],
    transform: CoordinateTransform,
    *,
    preserve_location: PreserveLocation = PreserveLocation.NEVER,
    normalize: bool = False,
    requested_attributes: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Build one output record per cluster.

    Args:
        clusters: Clusters from a finished pass
        transform: The transform used by the pass; its inverse maps results
            back into the data CRS
        preserve_location: Original-location override
        normalize: Add ``normCount`` and ``normCountUnique``
        requested_attributes: Names of the per-attribute value-list fields

    Returns:
        DataFrame with the columns of :func:`fields.get_output_fields`
    """
    clusters = list(clusters)
    columns = F.get_output_fields(normalize, requested_attributes)
    reserved = set(F.CORE_FIELDS + F.NORMALIZED_FIELDS + F.MEMBER_FIELDS)
    for name in requested_attributes or []:
        if name in reserved:
            logger.warning("Requested attribute '%s' clashes with an output field, ignored", name)

    max_count, max_count_unique = (0, 0)
    if normalize:
        max_count, max_count_unique = count_maxima(clusters)

    records: List[Dict[str, Any]] = []
    for cluster in clusters:
        location = transform.inverse(stacked_point_location(cluster, preserve_location))
        envelope = _source_envelope(cluster.bounding_box, transform)

        record: Dict[str, Any] = {
            F.ATTR_GEOM: location.to_point(),
            F.ATTR_COUNT: cluster.count,
            F.ATTR_COUNT_UNIQUE: cluster.count_unique,
            F.ATTR_BOUNDING_BOX_GEOM: envelope.to_polygon(),
            F.ATTR_BOUNDING_BOX: str(envelope),
        }
        if normalize:
            record[F.ATTR_NORM_COUNT] = cluster.count / max_count
            record[F.ATTR_NORM_COUNT_UNIQUE] = cluster.count_unique / max_count_unique

        record[F.ATTR_STACKED_FEATURES_IDS] = list(cluster.member_ids)
        record[F.ATTR_STACKED_FEATURES_COO] = [(c.x, c.y) for c in cluster.member_coordinates]
        record[F.ATTR_SINGLE_PT] = dict(cluster.singleton_attributes)
        record[F.ATTR_SORTEDBYFIELD] = cluster.sort_value

        for name in requested_attributes or []:
            if name in reserved:
                continue
            record[name] = list(cluster.requested_attribute_values.get(name, []))

        records.append(record)

    if logger.isEnabledFor(logging.DEBUG):
        for cluster in clusters:
            logger.debug("Projected %r", cluster)

    frame = pd.DataFrame.from_records(records, columns=columns)
    # keep None for missing sort values instead of an inferred string dtype
    frame[F.ATTR_SORTEDBYFIELD] = pd.Series(
        [record[F.ATTR_SORTEDBYFIELD] for record in records],
        index=frame.index,
        dtype=object,
    )
    return frame


def sort_records(
    records: pd.DataFrame,
    field: str,
    order: Union[str, SortOrder, None] = SortOrder.ASCENDING,
) -> pd.DataFrame:
    """
    Stable sort of ``records`` by the textual value of ``field``.

    Missing values sort last in either direction.
    """
    if records.empty:
        return records
    if field not in records.columns:
        raise KeyError(f"Cannot sort by '{field}': no such field")

    order = SortOrder.parse(order)
    missing = records[field].isna()
    ordered = records[~missing].sort_values(
        by=field,
        ascending=order is SortOrder.ASCENDING,
        kind="stable",
        key=lambda col: col.astype(str),
    )
    if missing.any():
        ordered = pd.concat([ordered, records[missing]])
    return ordered.reset_index(drop=True)


def _json_safe(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_json_safe(v) for v in value]
    if isinstance(value, list):
        return [_json_safe(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if hasattr(value, "__geo_interface__"):
        return mapping(value)
    if hasattr(value, "item"):
        # numpy scalars
        return value.item()
    return value


def records_to_geojson(records: pd.DataFrame) -> Dict[str, Any]:
    """Render projected records as a GeoJSON FeatureCollection."""

    features = []
    for index, row in enumerate(records.to_dict(orient="records"), start=1):
        properties = {
            key: _json_safe(value)
            for key, value in row.items()
            if key != F.ATTR_GEOM
        }
        features.append(
            {
                "type": "Feature",
                "id": f"stackedPoint.{index}",
                "geometry": mapping(row[F.ATTR_GEOM]),
                "properties": properties,
            }
        )
    return {"type": "FeatureCollection", "features": features}


__all__ = [
    "PreserveLocation",
    "SortOrder",
    "count_maxima",
    "project_clusters",
    "records_to_geojson",
    "sort_records",
    "stacked_point_location",
]
