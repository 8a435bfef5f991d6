"""Estimate the parameter corrections that move two curve points onto their crossing"""

from __future__ import annotations

from typing import Tuple

from avx.bezier import AvCubic
from avx.geom import GeomMath
from avx.numerics import DBL_EPSILON

_TAYLOR_ITERATIONS: int = 3


###############################################################################
# AvDeltaEstimator
###############################################################################
class AvDeltaEstimator:
    """Single-step estimate of (delta1, delta2) so that t + delta approaches the crossing."""

    @classmethod
    def compute_delta(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        cls,
        cubic1: AvCubic,
        t1: float,
        cubic2: AvCubic,
        t2: float,
        order: int = 1,
        scale1: float = 1.0,
        scale2: float = 1.0,
    ) -> Tuple[float, float]:
        """
        Estimate signed parameter corrections for a crossing near (t1, t2).

        Order 1 intersects the tangent lines at both points, i.e. solves
        D1 * delta1 - D2 * delta2 = P2 - P1. Order 2 refines that solution on
        the quadratic Taylor models of both curves with a few Newton steps.
        scale1 / scale2 multiply the derivatives, for callers whose
        parameter runs over a sub-interval of the curve.

        Args:
            cubic1 (AvCubic): first curve
            t1 (float): current parameter on the first curve
            cubic2 (AvCubic): second curve
            t2 (float): current parameter on the second curve
            order (int, optional): 1 for tangent lines, 2 for Taylor parabolas. Defaults to 1.
            scale1 (float, optional): derivative scale of the first curve. Defaults to 1.0.
            scale2 (float, optional): derivative scale of the second curve. Defaults to 1.0.

        Returns:
            Tuple[float, float]: (delta1, delta2); (0.0, 0.0) for parallel tangents

        Raises:
            ValueError: if order is neither 1 nor 2
        """
        if order not in (1, 2):
            raise ValueError(f"delta order must be 1 or 2, got {order}")

        p1 = cubic1.evaluate(t1)
        p2 = cubic2.evaluate(t2)
        d1x, d1y = cubic1.derivative(t1)
        d2x, d2y = cubic2.derivative(t2)
        d1 = (d1x * scale1, d1y * scale1)
        d2 = (d2x * scale2, d2y * scale2)
        if cls._parallel(d1, d2):
            return (0.0, 0.0)
        params = GeomMath.line_intersection(p1, d1, p2, d2)
        if params is None:
            return (0.0, 0.0)
        delta1, delta2 = params
        if order == 1:
            return (delta1, delta2)

        a1x, a1y = cubic1.second_derivative(t1)
        a2x, a2y = cubic2.second_derivative(t2)
        a1 = (a1x * scale1 * scale1, a1y * scale1 * scale1)
        a2 = (a2x * scale2 * scale2, a2y * scale2 * scale2)
        for _ in range(_TAYLOR_ITERATIONS):
            # residual of P1 + D1 s + A1 s^2 / 2 - (P2 + D2 u + A2 u^2 / 2)
            fx = (
                p1[0] + d1[0] * delta1 + 0.5 * a1[0] * delta1 * delta1
                - p2[0] - d2[0] * delta2 - 0.5 * a2[0] * delta2 * delta2
            )
            fy = (
                p1[1] + d1[1] * delta1 + 0.5 * a1[1] * delta1 * delta1
                - p2[1] - d2[1] * delta2 - 0.5 * a2[1] * delta2 * delta2
            )
            j1 = (d1[0] + a1[0] * delta1, d1[1] + a1[1] * delta1)
            j2 = (d2[0] + a2[0] * delta2, d2[1] + a2[1] * delta2)
            if cls._parallel(j1, j2):
                break
            # J1 * step1 - J2 * step2 = -F
            step = GeomMath.line_intersection((0.0, 0.0), j1, (-fx, -fy), j2)
            if step is None:
                break
            delta1 += step[0]
            delta2 += step[1]
        return (delta1, delta2)

    @staticmethod
    def _parallel(v1: Tuple[float, float], v2: Tuple[float, float]) -> bool:
        scale = (abs(v1[0]) + abs(v1[1])) * (abs(v2[0]) + abs(v2[1]))
        return abs(GeomMath.cross(v1, v2)) <= DBL_EPSILON * scale
