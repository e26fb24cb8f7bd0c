"""Output records for stacked points: field names, projection, sorting."""

from .fields import get_output_fields
from .projector import (
    PreserveLocation,
    SortOrder,
    project_clusters,
    records_to_geojson,
    sort_records,
)

__all__ = [
    "PreserveLocation",
    "SortOrder",
    "get_output_fields",
    "project_clusters",
    "records_to_geojson",
    "sort_records",
]
