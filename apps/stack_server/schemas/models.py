"""Pydantic models for the point stacker HTTP server."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class BBox(BaseModel):
    """Extent of the output image in the target CRS."""

    min_x: float = Field(..., alias="minX")
    min_y: float = Field(..., alias="minY")
    max_x: float = Field(..., alias="maxX")
    max_y: float = Field(..., alias="maxY")

    model_config = {"populate_by_name": True}

    def as_tuple(self) -> tuple:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


class GeoJSONFeatureCollection(BaseModel):
    """Minimal GeoJSON FeatureCollection envelope; features are passed through."""

    type: str = Field("FeatureCollection")
    features: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("type")
    @classmethod
    def _validate_type(cls, value: str) -> str:
        if value != "FeatureCollection":
            raise ValueError("Expected a GeoJSON FeatureCollection")
        return value


class StackPointsRequest(BaseModel):
    data: GeoJSONFeatureCollection = Field(..., description="Input features")
    profile: Optional[str] = Field(default=None, description="Stacking profile name")
    cluster_basis: Optional[str] = Field(
        default=None,
        alias="clusterBasis",
        description="'grid' or the attribute to stack by",
    )
    cluster_size: Optional[int] = Field(default=None, ge=1, alias="clusterSize")
    position_cluster_pt: Optional[str] = Field(
        default=None,
        alias="positionClusterPt",
        description="Nearest, Weighted, Average or Extent",
    )
    normalize: Optional[bool] = None
    original_attributes: Optional[str] = Field(
        default=None,
        alias="originalAttributes",
        description="Comma-separated attribute names to return per stacked point",
    )
    sort_field: Optional[str] = Field(default=None, alias="sortField")
    sort_by: Optional[str] = Field(default=None, alias="sortBy")
    clustered_sort_value: Optional[str] = Field(default=None, alias="clusteredSortValue")
    preserve_location: Optional[str] = Field(
        default=None,
        alias="preserveLocation",
        description="Single, Superimposed or Never",
    )
    output_bbox: Optional[BBox] = Field(default=None, alias="outputBBOX")
    output_width: Optional[int] = Field(default=None, ge=1, alias="outputWidth")
    output_height: Optional[int] = Field(default=None, ge=1, alias="outputHeight")
    source_crs: str = Field("EPSG:4326", alias="sourceCrs")
    target_crs: Optional[str] = Field(default=None, alias="targetCrs")

    model_config = {"populate_by_name": True}

    def stacking_parameters(self) -> Dict[str, Any]:
        """Process parameters set on this request (unset ones are ``None``)."""

        return {
            "clusterBasis": self.cluster_basis,
            "clusterSize": self.cluster_size,
            "positionClusterPt": self.position_cluster_pt,
            "normalize": self.normalize,
            "originalAttributes": self.original_attributes,
            "sortField": self.sort_field,
            "sortBy": self.sort_by,
            "clusteredSortValue": self.clustered_sort_value,
            "preserveLocation": self.preserve_location,
            "outputBBOX": self.output_bbox.as_tuple() if self.output_bbox else None,
            "outputWidth": self.output_width,
            "outputHeight": self.output_height,
        }


class StackingSummary(BaseModel):
    cluster_basis: str = Field(..., alias="clusterBasis")
    position: str
    features_read: int = Field(..., alias="featuresRead")
    features_skipped: int = Field(..., alias="featuresSkipped")
    num_clusters: int = Field(..., alias="numClusters")
    cell_size: Optional[float] = Field(default=None, alias="cellSize")
    transform: str
    warnings: List[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class StackPointsResponse(BaseModel):
    result: Dict[str, Any] = Field(..., description="GeoJSON FeatureCollection of stacked points")
    diagnostics: StackingSummary

    model_config = {"populate_by_name": True}
