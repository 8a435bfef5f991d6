"""Handling planar geometry: vector helpers and axis-aligned boxes"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from avx.common import Point2

Number = Union[int, float]


###############################################################################
# GeomMath
###############################################################################
class GeomMath:
    """Class to provide various static methods related to planar vector math."""

    @staticmethod
    def cross(v1: Sequence[Number], v2: Sequence[Number]) -> float:
        """Z component of the cross product of two 2D vectors."""
        return float(v1[0] * v2[1] - v1[1] * v2[0])

    @staticmethod
    def dot(v1: Sequence[Number], v2: Sequence[Number]) -> float:
        """Dot product of two 2D vectors."""
        return float(v1[0] * v2[0] + v1[1] * v2[1])

    @staticmethod
    def distance(p1: Sequence[Number], p2: Sequence[Number]) -> float:
        """Euclidean distance between two points."""
        return float(np.hypot(p2[0] - p1[0], p2[1] - p1[1]))

    @staticmethod
    def line_intersection(
        p1: Sequence[Number], d1: Sequence[Number], p2: Sequence[Number], d2: Sequence[Number]
    ) -> Optional[Tuple[float, float]]:
        """
        Intersect the parametric lines p1 + s * d1 and p2 + u * d2.

        Args:
            p1 (Sequence[float]): point on the first line
            d1 (Sequence[float]): direction of the first line
            p2 (Sequence[float]): point on the second line
            d2 (Sequence[float]): direction of the second line

        Returns:
            Optional[Tuple[float, float]]: the parameters (s, u), or None for parallel lines
        """
        denominator = GeomMath.cross(d1, d2)
        if denominator == 0.0:
            return None
        offset = (p2[0] - p1[0], p2[1] - p1[1])
        s = GeomMath.cross(offset, d2) / denominator
        u = GeomMath.cross(offset, d1) / denominator
        return (s, u)


###############################################################################
# AvBox
###############################################################################
@dataclass(frozen=True)
class AvBox:
    """
    Axis-aligned box; the corners are sorted on construction so that
    xmin <= xmax and ymin <= ymax always hold.

    Attributes:
        xmin (float): left edge
        ymin (float): lower edge
        xmax (float): right edge
        ymax (float): upper edge
    """

    xmin: float
    ymin: float
    xmax: float
    ymax: float

    def __post_init__(self):
        xs = sorted((float(self.xmin), float(self.xmax)))
        ys = sorted((float(self.ymin), float(self.ymax)))
        object.__setattr__(self, "xmin", xs[0])
        object.__setattr__(self, "xmax", xs[1])
        object.__setattr__(self, "ymin", ys[0])
        object.__setattr__(self, "ymax", ys[1])

    @classmethod
    def from_points(cls, points: Union[Sequence[Point2], NDArray[np.float64]]) -> AvBox:
        """Smallest box containing all given points.

        Raises:
            ValueError: if no points are given
        """
        arr = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        if arr.shape[0] == 0:
            raise ValueError("AvBox.from_points needs at least one point")
        (left, bottom), (right, top) = arr.min(axis=0), arr.max(axis=0)
        return cls(left, bottom, right, top)

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        """(xmin, ymin, xmax, ymax)"""
        return (self.xmin, self.ymin, self.xmax, self.ymax)

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def size(self) -> float:
        """Larger of width and height; the scale used for relative tolerances."""
        return max(self.width, self.height)

    def overlaps(self, other: AvBox) -> bool:
        """True if both boxes share at least one point (touching counts)."""
        return not (
            other.xmax < self.xmin or self.xmax < other.xmin or other.ymax < self.ymin or self.ymax < other.ymin
        )

    def union(self, other: AvBox) -> AvBox:
        """Smallest box containing both boxes."""
        return AvBox(
            min(self.xmin, other.xmin),
            min(self.ymin, other.ymin),
            max(self.xmax, other.xmax),
            max(self.ymax, other.ymax),
        )

    def to_dict(self) -> dict:
        """Plain dictionary with the four edges."""
        return {"xmin": self.xmin, "ymin": self.ymin, "xmax": self.xmax, "ymax": self.ymax}

    @classmethod
    def from_dict(cls, data: dict) -> AvBox:
        """Inverse of to_dict(); missing edges default to 0."""
        return cls(*(float(data.get(key, 0.0)) for key in ("xmin", "ymin", "xmax", "ymax")))

    def __str__(self):
        return (
            f"AvBox(xmin={self.xmin}, ymin={self.ymin}, xmax={self.xmax}, ymax={self.ymax}, "
            f"width={self.width}, height={self.height})"
        )
