"""Coordinate reference system mapping."""

from .transforms import CoordinateTransform

__all__ = ["CoordinateTransform"]
