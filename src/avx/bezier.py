"""Quadratic and cubic Bezier curve primitives used by the intersection modules."""

from __future__ import annotations

import math
from typing import ClassVar, List, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from avx.common import Point2
from avx.geom import AvBox, GeomMath
from avx.numerics import FLT_EPSILON, quadratic_roots, real_roots, valid_unit_roots

PointsLike = Union[Sequence[Sequence[float]], NDArray[np.float64], "AvBezier"]

# sqrt(3)/36: max distance between a cubic and its tangent-fit quadratic per unit of |P3 - 3P2 + 3P1 - P0|
_DEMOTION_ERROR_FACTOR: float = math.sqrt(3.0) / 36.0


###############################################################################
# AvBezier
###############################################################################
class AvBezier:
    """Common base of AvQuadratic and AvCubic.

    Control points are stored as a read-only float64 array of shape
    (DEGREE + 1, 2). Instances are immutable values.
    """

    DEGREE: ClassVar[int] = 0

    def __init__(self, points: PointsLike):
        """
        Initialize the curve from its control points.

        Args:
            points: DEGREE + 1 control points (x, y), or another curve of the same degree

        Raises:
            ValueError: if the number of points is wrong or a coordinate is not finite
        """
        if isinstance(points, AvBezier):
            points = points.points
        arr = np.array(points, dtype=np.float64)
        expected = (self.DEGREE + 1, 2)
        if arr.shape != expected:
            raise ValueError(f"{type(self).__name__} needs control points of shape {expected}, got {arr.shape}")
        if not np.all(np.isfinite(arr)):
            raise ValueError(f"{type(self).__name__} control points must be finite")
        arr.setflags(write=False)
        self._points: NDArray[np.float64] = arr
        self._coords: Tuple[float, ...] = tuple(float(v) for v in arr.ravel())

    @property
    def points(self) -> NDArray[np.float64]:
        """Read-only view of the control points."""
        return self._points

    def __getitem__(self, index: int) -> Point2:
        x, y = self._points[index]
        return (float(x), float(y))

    def __len__(self) -> int:
        return self.DEGREE + 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AvBezier) or other.DEGREE != self.DEGREE:
            return NotImplemented
        return self._coords == other._coords

    def __hash__(self) -> int:
        return hash((self.DEGREE, self._coords))

    def __repr__(self) -> str:
        pts = ", ".join(f"({x!r}, {y!r})" for x, y in zip(self._coords[0::2], self._coords[1::2]))
        return f"{type(self).__name__}([{pts}])"

    def control_bounds(self) -> AvBox:
        """Box around all control points; contains the curve."""
        return AvBox.from_points(self._points)

    @staticmethod
    def _check_t(*values: float) -> None:
        for t in values:
            if not 0.0 <= t <= 1.0:
                raise ValueError(f"parameter t={t} outside of [0, 1]")

    def _nearest_of(self, point: Sequence[float], ts: List[float]) -> float:
        """Return the parameter among ts whose curve point is nearest to point."""
        pts = self.evaluate_many(ts)
        dist = np.hypot(pts[:, 0] - point[0], pts[:, 1] - point[1])
        return float(ts[int(np.argmin(dist))])

    def evaluate(self, t: float) -> Point2:
        raise NotImplementedError

    def evaluate_many(self, ts: Union[Sequence[float], NDArray[np.float64]]) -> NDArray[np.float64]:
        raise NotImplementedError

    def to_dict(self) -> dict:
        """Convert the curve to a dictionary."""
        return {"points": self._points.tolist()}

    @classmethod
    def from_dict(cls, data: dict):
        """Create the curve from a dictionary."""
        return cls(data["points"])


###############################################################################
# AvQuadratic
###############################################################################
class AvQuadratic(AvBezier):
    """Quadratic Bezier curve with 3 control points."""

    DEGREE: ClassVar[int] = 2

    def evaluate(self, t: float) -> Point2:
        """Point at parameter t."""
        p0x, p0y, p1x, p1y, p2x, p2y = self._coords
        omt = 1.0 - t
        a = omt * omt
        b = 2.0 * omt * t
        c = t * t
        return (a * p0x + b * p1x + c * p2x, a * p0y + b * p1y + c * p2y)

    def evaluate_many(self, ts: Union[Sequence[float], NDArray[np.float64]]) -> NDArray[np.float64]:
        """Points at all given parameters as array of shape (n, 2)."""
        p0x, p0y, p1x, p1y, p2x, p2y = self._coords
        t = np.asarray(ts, dtype=np.float64).reshape(-1)
        omt = 1.0 - t
        a = omt * omt
        b = 2.0 * omt * t
        c = t * t
        return np.column_stack((a * p0x + b * p1x + c * p2x, a * p0y + b * p1y + c * p2y))

    def derivative(self, t: float) -> Point2:
        """First derivative (dx/dt, dy/dt) at parameter t."""
        p0x, p0y, p1x, p1y, p2x, p2y = self._coords
        omt = 1.0 - t
        return (2.0 * (omt * (p1x - p0x) + t * (p2x - p1x)), 2.0 * (omt * (p1y - p0y) + t * (p2y - p1y)))

    def coefficients(self) -> NDArray[np.float64]:
        """Power basis (a, b, c) per axis, so that B(t) = a t^2 + b t + c; shape (3, 2)."""
        p0, p1, p2 = self._points
        return np.array([p0 - 2.0 * p1 + p2, 2.0 * (p1 - p0), p0])

    def sub_divide(self, t1: float, t2: float) -> AvQuadratic:
        """
        Quadratic covering [t1, t2] of this curve, reparametrized to [0, 1].

        The end points are exactly evaluate(t1) and evaluate(t2).

        Raises:
            ValueError: if t1 or t2 lies outside of [0, 1]
        """
        self._check_t(t1, t2)
        a, m, c = self.evaluate_many([t1, (t1 + t2) / 2.0, t2])
        return AvQuadratic([a, 2.0 * m - (a + c) / 2.0, c])

    def flat_measure(self) -> float:
        """Signed distance of the curve mid point from the chord; inf for a zero-length chord."""
        p0 = self[0]
        p2 = self[2]
        chord = (p2[0] - p0[0], p2[1] - p0[1])
        length = math.hypot(*chord)
        if length == 0.0:
            return math.inf
        mid = self.evaluate(0.5)
        return GeomMath.cross(chord, (mid[0] - p0[0], mid[1] - p0[1])) / length

    def closest_t(self, point: Sequence[float]) -> float:
        """Parameter in [0, 1] of the curve point nearest to point."""
        a, b, c = self.coefficients()
        px, py = point[0], point[1]
        polynomial = np.polyadd(
            np.polymul([a[0], b[0], c[0] - px], [2.0 * a[0], b[0]]),
            np.polymul([a[1], b[1], c[1] - py], [2.0 * a[1], b[1]]),
        )
        candidates = valid_unit_roots(real_roots(polynomial)) + [0.0, 1.0]
        return self._nearest_of(point, candidates)


###############################################################################
# AvCubic
###############################################################################
class AvCubic(AvBezier):
    """Cubic Bezier curve with 4 control points."""

    DEGREE: ClassVar[int] = 3

    def evaluate(self, t: float) -> Point2:
        """Point at parameter t."""
        p0x, p0y, p1x, p1y, p2x, p2y, p3x, p3y = self._coords
        omt = 1.0 - t
        omt2 = omt * omt
        omt3 = omt2 * omt
        t2 = t * t
        t3 = t2 * t
        x = omt3 * p0x + 3.0 * omt2 * t * p1x + 3.0 * omt * t2 * p2x + t3 * p3x
        y = omt3 * p0y + 3.0 * omt2 * t * p1y + 3.0 * omt * t2 * p2y + t3 * p3y
        return (x, y)

    def evaluate_many(self, ts: Union[Sequence[float], NDArray[np.float64]]) -> NDArray[np.float64]:
        """Points at all given parameters as array of shape (n, 2).

        Uses the same arithmetic as evaluate(), so both agree bit for bit.
        """
        p0x, p0y, p1x, p1y, p2x, p2y, p3x, p3y = self._coords
        t = np.asarray(ts, dtype=np.float64).reshape(-1)
        omt = 1.0 - t
        omt2 = omt * omt
        omt3 = omt2 * omt
        t2 = t * t
        t3 = t2 * t
        x = omt3 * p0x + 3.0 * omt2 * t * p1x + 3.0 * omt * t2 * p2x + t3 * p3x
        y = omt3 * p0y + 3.0 * omt2 * t * p1y + 3.0 * omt * t2 * p2y + t3 * p3y
        return np.column_stack((x, y))

    def derivative(self, t: float) -> Point2:
        """First derivative (dx/dt, dy/dt) at parameter t."""
        p0x, p0y, p1x, p1y, p2x, p2y, p3x, p3y = self._coords
        omt = 1.0 - t
        a = omt * omt
        b = 2.0 * omt * t
        c = t * t
        dx = 3.0 * (a * (p1x - p0x) + b * (p2x - p1x) + c * (p3x - p2x))
        dy = 3.0 * (a * (p1y - p0y) + b * (p2y - p1y) + c * (p3y - p2y))
        return (dx, dy)

    def second_derivative(self, t: float) -> Point2:
        """Second derivative at parameter t."""
        p0x, p0y, p1x, p1y, p2x, p2y, p3x, p3y = self._coords
        omt = 1.0 - t
        ddx = 6.0 * (omt * (p2x - 2.0 * p1x + p0x) + t * (p3x - 2.0 * p2x + p1x))
        ddy = 6.0 * (omt * (p2y - 2.0 * p1y + p0y) + t * (p3y - 2.0 * p2y + p1y))
        return (ddx, ddy)

    def coefficients(self) -> NDArray[np.float64]:
        """Power basis (a, b, c, d) per axis, so that B(t) = a t^3 + b t^2 + c t + d; shape (4, 2)."""
        p0, p1, p2, p3 = self._points
        return np.array(
            [
                -p0 + 3.0 * p1 - 3.0 * p2 + p3,
                3.0 * p0 - 6.0 * p1 + 3.0 * p2,
                -3.0 * p0 + 3.0 * p1,
                p0,
            ]
        )

    def sub_divide(self, t1: float, t2: float) -> AvCubic:
        """
        Cubic covering [t1, t2] of this curve, reparametrized to [0, 1].

        The inner control points are derived from the curve points at
        t1, (2 t1 + t2) / 3, (t1 + 2 t2) / 3 and t2. The end points are
        exactly evaluate(t1) and evaluate(t2).

        Args:
            t1 (float): start parameter in [0, 1]
            t2 (float): end parameter in [0, 1]

        Returns:
            AvCubic: the sub curve

        Raises:
            ValueError: if t1 or t2 lies outside of [0, 1]
        """
        self._check_t(t1, t2)
        a, e, f, d = self.evaluate_many([t1, (t1 * 2.0 + t2) / 3.0, (t1 + t2 * 2.0) / 3.0, t2])
        m = e * 27.0 - a * 8.0 - d
        n = f * 27.0 - a - d * 8.0
        b = (m * 2.0 - n) / 18.0
        c = (n * 2.0 - m) / 18.0
        return AvCubic([a, b, c, d])

    def chop_at(self, t: float) -> Tuple[AvCubic, AvCubic]:
        """
        Split the curve at t with de Casteljau's construction.

        Both halves share the point evaluate(t).

        Raises:
            ValueError: if t lies outside of [0, 1]
        """
        self._check_t(t)
        p0, p1, p2, p3 = self._points
        p01 = p0 + (p1 - p0) * t
        p12 = p1 + (p2 - p1) * t
        p23 = p2 + (p3 - p2) * t
        p012 = p01 + (p12 - p01) * t
        p123 = p12 + (p23 - p12) * t
        mid = np.array(self.evaluate(t))
        return AvCubic([p0, p01, p012, mid]), AvCubic([mid, p123, p23, p3])

    def bounds(self) -> AvBox:
        """Tight bounding box from the end points and the derivative roots."""
        a, b, c, _ = self.coefficients()
        ts = [0.0, 1.0]
        for axis in range(2):
            ts.extend(t for t in quadratic_roots(3.0 * a[axis], 2.0 * b[axis], c[axis]) if 0.0 < t < 1.0)
        return AvBox.from_points(self.evaluate_many(ts))

    def inflections(self) -> List[float]:
        """Parameters in (0, 1) where the curvature changes sign, ascending."""
        p0, p1, p2, p3 = self._points
        a = p1 - p0
        b = p2 - 2.0 * p1 + p0
        c = p3 + 3.0 * (p1 - p2) - p0
        roots = quadratic_roots(GeomMath.cross(b, c), GeomMath.cross(a, c), GeomMath.cross(a, b))
        return [t for t in roots if FLT_EPSILON < t < 1.0 - FLT_EPSILON]

    def precision(self, precision_unit: float = 256.0) -> float:
        """Curve size (larger of width and height of the tight bounds) divided by precision_unit."""
        return self.bounds().size / precision_unit

    def closest_t(self, point: Sequence[float]) -> float:
        """Parameter in [0, 1] of the curve point nearest to point.

        Solves (B(t) - point) . B'(t) = 0 and compares the roots with the end points.
        """
        a, b, c, d = self.coefficients()
        px, py = point[0], point[1]
        polynomial = np.polyadd(
            np.polymul([a[0], b[0], c[0], d[0] - px], [3.0 * a[0], 2.0 * b[0], c[0]]),
            np.polymul([a[1], b[1], c[1], d[1] - py], [3.0 * a[1], 2.0 * b[1], c[1]]),
        )
        candidates = valid_unit_roots(real_roots(polynomial)) + [0.0, 1.0]
        return self._nearest_of(point, candidates)

    def reversed(self) -> AvCubic:
        """Same curve traversed from P3 to P0."""
        return AvCubic(self._points[::-1])

    def demote_to_quadratic(self) -> AvQuadratic:
        """Quadratic with the same end points and the averaged tangent-line control point."""
        p0, p1, p2, p3 = self._points
        control = ((p1 * 3.0 - p0) / 2.0 + (p2 * 3.0 - p3) / 2.0) / 2.0
        return AvQuadratic([p0, control, p3])

    def demotion_error(self) -> float:
        """Upper bound of the distance between the curve and demote_to_quadratic()."""
        p0, p1, p2, p3 = self._points
        third = p3 - 3.0 * p2 + 3.0 * p1 - p0
        return _DEMOTION_ERROR_FACTOR * float(np.hypot(third[0], third[1]))


def main():
    """Main"""
    cubic = AvCubic([(0.0, 0.0), (150.0, 100.0), (-50.0, 100.0), (100.0, 0.0)])
    print(cubic)
    print("bounds:", cubic.bounds())
    print("precision:", cubic.precision())
    print("inflections:", cubic.inflections())
    print("left half:", cubic.chop_at(0.5)[0])


if __name__ == "__main__":
    main()
