"""Classify a cubic as point, line, quadratic or true cubic"""

from __future__ import annotations

import itertools
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from avx.bezier import AvCubic, AvQuadratic
from avx.common import ReduceOrderMode
from avx.settings import DEFAULT_SETTINGS, IntersectionSettings


###############################################################################
# AvReducedCurve
###############################################################################
@dataclass(frozen=True, eq=False)
class AvReducedCurve:
    """Result of an order reduction.

    Attributes:
        order (int): 1 point, 2 line, 3 quadratic, 4 cubic
        points (NDArray[np.float64]): the ``order`` non-redundant control points, read-only
    """

    order: int
    points: NDArray[np.float64]

    def __post_init__(self):
        if self.order not in (1, 2, 3, 4):
            raise ValueError(f"order must be 1, 2, 3 or 4, got {self.order}")
        if self.points.shape != (self.order, 2):
            raise ValueError(f"order {self.order} needs points of shape ({self.order}, 2), got {self.points.shape}")
        self.points.setflags(write=False)

    @property
    def is_degenerate(self) -> bool:
        """True for every order below 4."""
        return self.order < 4

    def as_quadratic(self) -> AvQuadratic:
        """The reduced quadratic; only valid for order 3."""
        if self.order != 3:
            raise ValueError(f"order {self.order} curve is not a quadratic")
        return AvQuadratic(self.points)


###############################################################################
# AvOrderReducer
###############################################################################
class AvOrderReducer:
    """Detects cubics that are really points, lines or quadratics."""

    @classmethod
    def reduce(
        cls,
        cubic: AvCubic,
        mode: ReduceOrderMode = ReduceOrderMode.ALLOW_QUADRATICS,
        settings: IntersectionSettings = DEFAULT_SETTINGS,
    ) -> AvReducedCurve:
        """
        Reduce a cubic to the lowest order that describes the same curve.

        Tolerances scale with the curve size (larger side of the control box):
        - order 1 if the size is at most settings.point_tolerance
        - order 2 if all control points lie on the line through the two most
          distant ones; the reduced points are those two extremes
        - order 3 if the cubic term P3 - 3 P2 + 3 P1 - P0 vanishes and mode
          allows quadratics; the reduced control point is (3 (P1 + P2) - P0 - P3) / 4
        - order 4 otherwise, with the unchanged control points

        Args:
            cubic (AvCubic): the curve to classify
            mode (ReduceOrderMode, optional): Defaults to ReduceOrderMode.ALLOW_QUADRATICS.
            settings (IntersectionSettings, optional): Defaults to DEFAULT_SETTINGS.

        Returns:
            AvReducedCurve: the classification with its reduced control points
        """
        points = cubic.points
        size = cubic.control_bounds().size
        if size <= settings.point_tolerance:
            return AvReducedCurve(1, np.array(points[:1]))

        line = cls._reduce_to_line(points, size * settings.reduce_tolerance)
        if line is not None:
            return AvReducedCurve(2, line)

        if mode is ReduceOrderMode.ALLOW_QUADRATICS:
            p0, p1, p2, p3 = points
            third = p3 - 3.0 * p2 + 3.0 * p1 - p0
            if float(np.hypot(third[0], third[1])) <= size * settings.reduce_tolerance:
                control = (3.0 * (p1 + p2) - p0 - p3) / 4.0
                return AvReducedCurve(3, np.array([p0, control, p3]))

        return AvReducedCurve(4, np.array(points))

    @staticmethod
    def _reduce_to_line(points: NDArray[np.float64], tolerance: float):
        """Return the two extreme points if all points are collinear, else None."""
        first, last = max(
            itertools.combinations(range(len(points)), 2),
            key=lambda pair: float(np.hypot(*(points[pair[1]] - points[pair[0]]))),
        )
        origin = points[first]
        direction = points[last] - origin
        length = float(np.hypot(direction[0], direction[1]))
        offsets = points - origin
        distances = np.abs(offsets[:, 0] * direction[1] - offsets[:, 1] * direction[0]) / length
        if np.any(distances > tolerance):
            return None
        return np.array([points[first], points[last]])
