"""
Centralized output field names for stacked points.

Every record emitted by the projector uses these names, so renderers and
style rules can rely on a stable schema.
"""

from typing import List, Optional, Sequence

# -----------------------------
# Core fields
# -----------------------------

# Point representing the cluster (source CRS)
ATTR_GEOM = "geom"

# Total number of stacked features
ATTR_COUNT = "count"

# Number of distinct member locations
ATTR_COUNT_UNIQUE = "countunique"

# Bounding box of the members, as polygon geometry
ATTR_BOUNDING_BOX_GEOM = "geomBBOX"

# Bounding box of the members, as text
ATTR_BOUNDING_BOX = "envBBOX"

# -----------------------------
# Normalized fields (optional)
# -----------------------------

ATTR_NORM_COUNT = "normCount"

ATTR_NORM_COUNT_UNIQUE = "normCountUnique"

# -----------------------------
# Member fields
# -----------------------------

# Ids of the stacked features
ATTR_STACKED_FEATURES_IDS = "listStackedPointsIDs"

# Coordinates of the stacked features
ATTR_STACKED_FEATURES_COO = "listStackedPtsCoos"

# All attributes of the feature of a single-member cluster
ATTR_SINGLE_PT = "singlePointOrigAttributes"

# Sort value: the member's own value for single members, the representative
# value for clusters
ATTR_SORTEDBYFIELD = "sortedByField"

CORE_FIELDS = [
    ATTR_GEOM,
    ATTR_COUNT,
    ATTR_COUNT_UNIQUE,
    ATTR_BOUNDING_BOX_GEOM,
    ATTR_BOUNDING_BOX,
]

NORMALIZED_FIELDS = [
    ATTR_NORM_COUNT,
    ATTR_NORM_COUNT_UNIQUE,
]

MEMBER_FIELDS = [
    ATTR_STACKED_FEATURES_IDS,
    ATTR_STACKED_FEATURES_COO,
    ATTR_SINGLE_PT,
    ATTR_SORTEDBYFIELD,
]


def get_output_fields(
    normalize: bool = False,
    requested_attributes: Optional[Sequence[str]] = None,
) -> List[str]:
    """
    Build the ordered list of output fields.

    Args:
        normalize: Include the normalized count fields
        requested_attributes: Extra per-attribute value-list fields

    Returns:
        Field names in output order
    """
    fields = list(CORE_FIELDS)
    if normalize:
        fields.extend(NORMALIZED_FIELDS)
    fields.extend(MEMBER_FIELDS)
    for name in requested_attributes or []:
        if name not in fields:
            fields.append(name)
    return fields
