"""Input features for the stacking passes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional

from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry


@dataclass
class Feature:
    """A single input feature."""

    id: str
    """Feature identifier."""

    geometry: Optional[BaseGeometry]
    """Feature geometry (any shapely type)."""

    attributes: Dict[str, Any] = field(default_factory=dict)
    """Attribute name -> value mapping, geometry excluded."""


class FeatureReader:
    """
    Lazily read features from a GeoJSON FeatureCollection mapping.

    Features without an ``id`` get ``"<type_name>.<n>"`` with ``n`` counting
    from 1. The reader is single use: iterate it once, then ``close()`` it
    (or use it as a context manager).
    """

    def __init__(self, collection: Mapping[str, Any], type_name: str = "feature"):
        if collection.get("type") != "FeatureCollection":
            raise ValueError(
                f"Expected a GeoJSON FeatureCollection, got type={collection.get('type')!r}"
            )
        self._features: List[Mapping[str, Any]] = list(collection.get("features") or [])
        self._type_name = type_name
        self._closed = False
        self._consumed = False

    def __len__(self) -> int:
        return len(self._features)

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[Feature]:
        if self._closed:
            raise ValueError("Feature reader is closed")
        if self._consumed:
            raise ValueError("Feature reader has already been consumed")
        self._consumed = True
        return self._read()

    def _read(self) -> Iterator[Feature]:
        for index, raw in enumerate(self._features, start=1):
            if self._closed:
                return
            fid = raw.get("id")
            if fid is None:
                fid = f"{self._type_name}.{index}"
            geometry_data = raw.get("geometry")
            geometry = shape(geometry_data) if geometry_data else None
            yield Feature(
                id=str(fid),
                geometry=geometry,
                attributes=dict(raw.get("properties") or {}),
            )

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> "FeatureReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["Feature", "FeatureReader"]
