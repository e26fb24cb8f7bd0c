"""
Point stacking process.

Ties the pieces together for one run:

1. Validate the parameters (:class:`StackerConfig`)
2. Build the coordinate transform between data CRS and output CRS
3. Stack features by grid cell or by attribute value
4. Project the clusters into output records
5. Sort the records when a sort field is given

Usage:
    config = StackerConfig(cluster_size=40, output_bbox=bbox, output_width=800, output_height=600)
    records, diagnostics = stack_points(features, config, source_crs="EPSG:4326",
                                        target_crs="EPSG:3857")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields as dataclass_fields
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from .exceptions import ConfigurationError
from .output.fields import ATTR_SORTEDBYFIELD
from .output.projector import PreserveLocation, SortOrder, project_clusters, sort_records
from .projection.transforms import CoordinateTransform
from .spatial.features import Feature
from .spatial.geometry import Envelope
from .spatial.grid import world_cell_size
from .spatial.positions import PositionStrategy
from .spatial.stacking import stack_points_by_attribute, stack_points_by_grid

logger = logging.getLogger(__name__)

GRID_BASIS = "grid"

# Process parameter names -> StackerConfig fields
PARAMETER_ALIASES: Dict[str, str] = {
    "clusterBasis": "cluster_basis",
    "clusterSize": "cluster_size",
    "positionClusterPt": "position",
    "normalize": "normalize",
    "preserveLocation": "preserve_location",
    "originalAttributes": "original_attributes",
    "sortField": "sort_field",
    "sortBy": "sort_order",
    "clusteredSortValue": "clustered_sort_value",
    "outputBBOX": "output_bbox",
    "outputWidth": "output_width",
    "outputHeight": "output_height",
}


def parse_attribute_list(value: Union[str, Sequence[str], None]) -> Optional[List[str]]:
    """Split a comma-separated attribute list. Blank entries are dropped."""

    if value is None:
        return None
    parts = value.split(",") if isinstance(value, str) else list(value)
    names = [str(p).strip() for p in parts if str(p).strip()]
    return names or None


def _parse_envelope(value: Any) -> Optional[Envelope]:
    if value is None or isinstance(value, Envelope):
        return value
    if isinstance(value, Mapping):
        return Envelope(
            float(value["min_x"]), float(value["min_y"]),
            float(value["max_x"]), float(value["max_y"]),
        )
    min_x, min_y, max_x, max_y = (float(v) for v in value)
    return Envelope(min_x, min_y, max_x, max_y)


@dataclass
class StackerConfig:
    """Parameters of one stacking run."""

    cluster_basis: str = GRID_BASIS
    """'grid', or the name of the attribute to stack by (case-insensitive)."""

    cluster_size: Optional[float] = None
    """Grid cell size in output pixels. Required for the grid basis."""

    position: PositionStrategy = PositionStrategy.NEAREST
    """Position strategy for stacked points."""

    normalize: bool = False
    """Whether to add counts normalized to the range 0-1."""

    preserve_location: PreserveLocation = PreserveLocation.NEVER
    """Keep original locations for single or superimposed members."""

    original_attributes: Optional[List[str]] = None
    """Attributes whose per-member values are returned as extra fields."""

    sort_field: Optional[str] = None
    """Attribute the output is sorted by (via its sort value)."""

    sort_order: SortOrder = SortOrder.ASCENDING
    """Direction of the optional sort."""

    clustered_sort_value: str = "0"
    """Sort value of clusters with two or more members."""

    output_bbox: Optional[Envelope] = None
    """Extent of the output image in the output CRS."""

    output_width: Optional[int] = None
    """Output image width in pixels."""

    output_height: Optional[int] = None
    """Output image height in pixels."""

    def __post_init__(self):
        self.cluster_basis = (self.cluster_basis or GRID_BASIS).strip().lower()
        try:
            self.position = PositionStrategy.parse(self.position)
            self.preserve_location = PreserveLocation.parse(self.preserve_location)
            self.sort_order = SortOrder.parse(self.sort_order)
            self.output_bbox = _parse_envelope(self.output_bbox)
            if self.cluster_size is not None:
                self.cluster_size = float(self.cluster_size)
            if self.output_width is not None:
                self.output_width = int(self.output_width)
            if self.output_height is not None:
                self.output_height = int(self.output_height)
        except (ValueError, KeyError, TypeError) as e:
            raise ConfigurationError(str(e)) from e
        self.original_attributes = parse_attribute_list(self.original_attributes)
        if self.clustered_sort_value is None:
            self.clustered_sort_value = "0"
        self.clustered_sort_value = str(self.clustered_sort_value)
        if isinstance(self.normalize, str):
            self.normalize = self.normalize.strip().lower() in ("true", "1", "yes")
        self.normalize = bool(self.normalize)

    @property
    def is_grid(self) -> bool:
        return self.cluster_basis == GRID_BASIS

    @classmethod
    def from_mapping(cls, params: Mapping[str, Any]) -> "StackerConfig":
        """
        Build a config from process parameter names or field names.

        Unknown keys raise :class:`ConfigurationError`; ``None`` values fall
        back to the defaults.
        """
        known = {f.name for f in dataclass_fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in params.items():
            name = PARAMETER_ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown stacking parameter '{key}'")
            if value is not None:
                kwargs[name] = value
        return cls(**kwargs)

    def validate(self) -> None:
        """
        Check that the parameters describe a runnable process.

        Raises:
            ConfigurationError: On any missing or out-of-range value
        """
        if not self.cluster_basis:
            raise ConfigurationError("Cluster basis must be 'grid' or an attribute name")
        if self.is_grid:
            if self.cluster_size is None:
                raise ConfigurationError(
                    "Parameter 'clusterSize' is required for cluster basis 'grid'"
                )
            if not self.cluster_size > 0:
                raise ConfigurationError(
                    f"Parameter 'clusterSize' must be positive, got {self.cluster_size!r}"
                )
            if self.output_bbox is None:
                raise ConfigurationError(
                    "Parameter 'outputBBOX' is required for cluster basis 'grid'"
                )
            if self.output_bbox.width <= 0:
                raise ConfigurationError("Parameter 'outputBBOX' must have a positive width")
        for name, value in (("outputWidth", self.output_width), ("outputHeight", self.output_height)):
            if value is None:
                if self.is_grid:
                    raise ConfigurationError(f"Parameter '{name}' is required for cluster basis 'grid'")
                continue
            if value < 1:
                raise ConfigurationError(f"Parameter '{name}' must be at least 1, got {value!r}")


@dataclass
class StackingDiagnostics:
    """Summary of one stacking run."""

    cluster_basis: str
    """Basis used ('grid' or attribute name)."""

    position: PositionStrategy
    """Position strategy used."""

    features_read: int = 0
    """Features consumed from the input."""

    features_skipped: int = 0
    """Features not stacked (missing attribute value or geometry)."""

    num_clusters: int = 0
    """Number of stacked points emitted."""

    cell_size: Optional[float] = None
    """Grid cell size in output-CRS units (grid basis only)."""

    transform: str = "identity"
    """Description of the coordinate transform."""

    warnings: List[str] = field(default_factory=list)
    """Run-level notes for the caller."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cluster_basis": self.cluster_basis,
            "position": self.position.value,
            "features_read": self.features_read,
            "features_skipped": self.features_skipped,
            "num_clusters": self.num_clusters,
            "cell_size": self.cell_size,
            "transform": self.transform,
            "warnings": list(self.warnings),
        }


def stack_points(
    features: Iterable[Feature],
    config: StackerConfig,
    *,
    source_crs: Any = None,
    target_crs: Any = None,
    transform: Optional[CoordinateTransform] = None,
) -> Tuple[pd.DataFrame, StackingDiagnostics]:
    """
    Run the point stacker over ``features``.

    Args:
        features: Input features (a :class:`FeatureReader` or any iterable)
        config: Stacking parameters
        source_crs: CRS of the input data
        target_crs: CRS of the output window; the grid lives in this CRS
        transform: Ready-made transform, overrides ``source_crs``/``target_crs``

    Returns:
        (records, diagnostics). Records carry geometries in the source CRS.

    Raises:
        ConfigurationError: If the parameters are invalid, or ``target_crs``
            is given without ``source_crs``
        StackingError: If no transform exists between the CRSs, or a
            coordinate fails to transform
    """
    config.validate()

    if transform is None:
        if source_crs is None and target_crs is not None:
            raise ConfigurationError(
                f"Output CRS {target_crs} given without the CRS of the input data"
            )
        transform = (
            CoordinateTransform.between(source_crs, target_crs)
            if source_crs is not None
            else CoordinateTransform.identity()
        )

    diagnostics = StackingDiagnostics(
        cluster_basis=config.cluster_basis,
        position=config.position,
        transform=transform.description,
    )

    member_kwargs = dict(
        strategy=config.position,
        requested_attributes=config.original_attributes,
        sort_field=config.sort_field,
        clustered_sort_value=config.clustered_sort_value,
    )

    if config.is_grid:
        cell_size = world_cell_size(config.cluster_size, config.output_bbox, config.output_width)
        diagnostics.cell_size = cell_size
        clusters, stats = stack_points_by_grid(features, transform, cell_size, **member_kwargs)
    else:
        clusters, stats = stack_points_by_attribute(
            features, transform, config.cluster_basis, **member_kwargs
        )

    diagnostics.features_read = stats.features_read
    diagnostics.features_skipped = stats.features_skipped
    diagnostics.num_clusters = len(clusters)
    if stats.features_skipped:
        diagnostics.warnings.append(
            f"{stats.features_skipped} of {stats.features_read} features were not stacked"
        )

    records = project_clusters(
        clusters.values(),
        transform,
        preserve_location=config.preserve_location,
        normalize=config.normalize,
        requested_attributes=config.original_attributes,
    )

    if config.sort_field is not None:
        records = sort_records(records, ATTR_SORTEDBYFIELD, config.sort_order)

    logger.info(
        "Stacked %d features into %d points (basis=%s, position=%s)",
        stats.features_stacked, len(clusters), config.cluster_basis, config.position.value,
    )
    return records, diagnostics


__all__ = [
    "GRID_BASIS",
    "PARAMETER_ALIASES",
    "StackerConfig",
    "StackingDiagnostics",
    "parse_attribute_list",
    "stack_points",
]
