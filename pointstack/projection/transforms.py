"""Coordinate mapping between the data CRS and the working (output) CRS."""

from __future__ import annotations

from typing import Any, Callable, Optional, Tuple

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from ..exceptions import StackingError, TransformError
from ..spatial.geometry import Coordinate

PointFunc = Callable[[float, float], Tuple[float, float]]


def _identity(x: float, y: float) -> Tuple[float, float]:
    return x, y


class CoordinateTransform:
    """Forward (source -> working) and inverse (working -> source) mapping.

    Both directions operate on one coordinate at a time and raise
    :class:`TransformError` when a coordinate cannot be mapped.
    """

    def __init__(self, forward: PointFunc, inverse: PointFunc, description: str = "custom"):
        self._forward = forward
        self._inverse = inverse
        self.description = description

    @classmethod
    def identity(cls) -> "CoordinateTransform":
        return cls(_identity, _identity, description="identity")

    @classmethod
    def between(cls, source_crs: Any, target_crs: Optional[Any] = None) -> "CoordinateTransform":
        """Build the transform from ``source_crs`` to ``target_crs`` with pyproj.

        Axis order is always x/y (lon/lat). Missing ``target_crs`` or equal
        CRSs give the identity transform.

        Raises:
            StackingError: If either CRS is invalid or there is no
                transformation path between them
        """
        if target_crs is None:
            return cls.identity()
        try:
            src = CRS.from_user_input(source_crs)
            dst = CRS.from_user_input(target_crs)
            if src == dst:
                return cls.identity()
            fwd = Transformer.from_crs(src, dst, always_xy=True)
            inv = Transformer.from_crs(dst, src, always_xy=True)
        except (CRSError, ProjError) as e:
            raise StackingError(
                f"No coordinate transform from {source_crs} to {target_crs}: {e}"
            ) from e

        def forward(x: float, y: float) -> Tuple[float, float]:
            return fwd.transform(x, y, errcheck=True)

        def inverse(x: float, y: float) -> Tuple[float, float]:
            return inv.transform(x, y, errcheck=True)

        return cls(forward, inverse, description=f"{src.to_string()} -> {dst.to_string()}")

    def forward(self, coordinate: Coordinate) -> Coordinate:
        return self._apply(self._forward, coordinate, "forward")

    def inverse(self, coordinate: Coordinate) -> Coordinate:
        return self._apply(self._inverse, coordinate, "inverse")

    def _apply(self, func: PointFunc, coordinate: Coordinate, direction: str) -> Coordinate:
        try:
            x, y = func(coordinate.x, coordinate.y)
        except (ProjError, ValueError, ArithmeticError) as e:
            raise TransformError(
                f"Failed {direction} transform of {coordinate} ({self.description}): {e}"
            ) from e
        return Coordinate(float(x), float(y))

    def __repr__(self) -> str:
        return f"CoordinateTransform({self.description})"


__all__ = ["CoordinateTransform"]
