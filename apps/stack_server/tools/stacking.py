"""Stacking helpers built on top of :mod:`pointstack`."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from pointstack import FeatureReader, StackerConfig, stack_points
from pointstack.output import records_to_geojson
from pointstack.tools.config_loader import ConfigLoader

from ..schemas.models import StackingSummary, StackPointsRequest


def build_config(request: StackPointsRequest) -> StackerConfig:
    """Merge the request parameters over the selected (or default) profile."""

    return ConfigLoader.build_config(request.profile, request.stacking_parameters())


def run_stacking(
    request: StackPointsRequest,
    config: Optional[StackerConfig] = None,
) -> Tuple[Dict[str, Any], StackingSummary]:
    """Stack the request's features and return (GeoJSON result, summary)."""

    config = config or build_config(request)
    reader = FeatureReader(request.data.model_dump(), type_name="feature")
    with reader:
        records, diagnostics = stack_points(
            reader,
            config,
            source_crs=request.source_crs,
            target_crs=request.target_crs,
        )

    summary = StackingSummary(**diagnostics.to_dict())
    return records_to_geojson(records), summary
