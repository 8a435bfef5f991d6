"""Intersection of two quadratic Bezier curves via their implicit forms"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from avx.bezier import AvQuadratic
from avx.geom import GeomMath
from avx.numerics import (
    FLT_EPSILON,
    FLT_EPSILON_SQRT,
    MAX_ULPS,
    almost_equal_ulps,
    quadratic_roots,
    real_roots,
    valid_unit_roots,
    zero_floor,
)

LocalHit = Tuple[float, float]  # (u1, u2) parameters local to the two quadratics

# roots may lie this far outside [0, 1] before being clamped onto the interval
_ROOT_EPSILON: float = FLT_EPSILON_SQRT
_MATCH_TOLERANCE: float = 16.0 * FLT_EPSILON


###############################################################################
# AvQuadHits
###############################################################################
@dataclass(frozen=True)
class AvQuadHits:
    """Crossings of two quadratics as local parameter pairs.

    Attributes:
        hits (Tuple[LocalHit, ...]): (u1, u2) pairs, sorted by u1
        coincident (bool): True if the quadratics share a stretch of their path;
            hits is empty in that case
    """

    hits: Tuple[LocalHit, ...] = ()
    coincident: bool = False

    def __len__(self) -> int:
        return len(self.hits)

    def __iter__(self):
        return iter(self.hits)


###############################################################################
# AvQuadImplicit
###############################################################################
@dataclass(frozen=True)
class AvQuadImplicit:
    """
    Implicit form A x^2 + B xy + C y^2 + D x + E y + F = 0 of a quadratic.

    For x(t) = a t^2 + b t + c, y(t) = d t^2 + e t + f and k = d b - a e, the
    curve satisfies (d X - a Y)^2 + k (e X - b Y) = 0 with X = x - c and
    Y = y - f. Expanding gives the six coefficients.
    """

    coefficients: Tuple[float, float, float, float, float, float]

    @classmethod
    def from_quadratic(cls, quad: AvQuadratic) -> AvQuadImplicit:
        (a, d), (b, e), (c, f) = quad.coefficients().tolist()
        k = d * b - a * e
        return cls(
            (
                d * d,
                -2.0 * a * d,
                a * a,
                -2.0 * d * d * c + 2.0 * a * d * f + k * e,
                2.0 * a * d * c - 2.0 * a * a * f - k * b,
                (d * c - a * f) ** 2 - k * (e * c - b * f),
            )
        )

    def evaluate(self, x: float, y: float) -> float:
        """Value of the implicit polynomial at (x, y); zero on the curve."""
        ca, cb, cc, cd, ce, cf = self.coefficients
        return ca * x * x + cb * x * y + cc * y * y + cd * x + ce * y + cf

    def on_quadratic(self, quad: AvQuadratic) -> NDArray[np.float64]:
        """Quartic in t (highest degree first) obtained by substituting quad(t) into the implicit form."""
        ca, cb, cc, cd, ce, cf = self.coefficients
        (a, d), (b, e), (c, f) = quad.coefficients().tolist()
        x_poly = np.array([a, b, c])
        y_poly = np.array([d, e, f])
        quartic = np.polymul(x_poly, x_poly) * ca
        quartic = np.polyadd(quartic, np.polymul(x_poly, y_poly) * cb)
        quartic = np.polyadd(quartic, np.polymul(y_poly, y_poly) * cc)
        quartic = np.polyadd(quartic, x_poly * cd)
        quartic = np.polyadd(quartic, y_poly * ce)
        return np.polyadd(quartic, [cf])

    def matches(self, other: AvQuadImplicit, tolerance: float = _MATCH_TOLERANCE) -> bool:
        """True if both forms describe the same conic (proportional coefficients)."""
        own = np.asarray(self.coefficients)
        theirs = np.asarray(other.coefficients)
        index = int(np.argmax(np.abs(own)))
        if own[index] == 0.0 or theirs[index] == 0.0:
            return False
        return bool(np.allclose(own / own[index], theirs / theirs[index], rtol=0.0, atol=tolerance))


###############################################################################
# AvQuadIntersector
###############################################################################
class AvQuadIntersector:
    """Finds the crossings of two quadratics.

    Steps: control-box rejection, hull separation, line handling for flat
    quadratics, coincidence of the implicit forms, and finally the quartic
    roots of each quadratic in the other's implicit form, paired across the
    two curves.
    """

    @classmethod
    def intersect(cls, quad1: AvQuadratic, quad2: AvQuadratic) -> AvQuadHits:
        """
        Intersect two quadratics.

        Args:
            quad1 (AvQuadratic): first curve
            quad2 (AvQuadratic): second curve

        Returns:
            AvQuadHits: the (u1, u2) pairs found, or the coincident flag
        """
        box1 = quad1.control_bounds()
        box2 = quad2.control_bounds()
        if not box1.overlaps(box2):
            return AvQuadHits()
        extent = box1.union(box2).size
        if extent == 0.0:
            return AvQuadHits(((0.0, 0.0),))
        tolerance = FLT_EPSILON_SQRT * extent

        if cls._only_end_points_in_common(quad1, quad2) or cls._only_end_points_in_common(quad2, quad1):
            return AvQuadHits(tuple(cls._shared_end_points(quad1, quad2, zero_floor(extent))))

        flat1 = abs(quad1.flat_measure()) <= tolerance
        flat2 = abs(quad2.flat_measure()) <= tolerance
        if flat1 and flat2:
            return cls._line_line(quad1, quad2, tolerance)
        if flat1:
            return cls._line_quad(quad1, quad2, tolerance)
        if flat2:
            swapped = cls._line_quad(quad2, quad1, tolerance)
            return AvQuadHits(tuple(sorted((u1, u2) for u2, u1 in swapped.hits)), swapped.coincident)

        # implicit forms of the curves mapped into the unit box around both
        origin = np.array([min(box1.xmin, box2.xmin), min(box1.ymin, box2.ymin)])
        unit1 = AvQuadratic((quad1.points - origin) / extent)
        unit2 = AvQuadratic((quad2.points - origin) / extent)
        implicit1 = AvQuadImplicit.from_quadratic(unit1)
        implicit2 = AvQuadImplicit.from_quadratic(unit2)
        if implicit1.matches(implicit2):
            return cls._overlap(quad1, quad2, tolerance)

        roots1 = valid_unit_roots(real_roots(implicit2.on_quadratic(unit1)), _ROOT_EPSILON)
        roots2 = valid_unit_roots(real_roots(implicit1.on_quadratic(unit2)), _ROOT_EPSILON)
        return AvQuadHits(tuple(cls._pair_roots(quad1, roots1, quad2, roots2, tolerance)))

    @staticmethod
    def _only_end_points_in_common(quad1: AvQuadratic, quad2: AvQuadratic) -> bool:
        """True if an edge of quad1's control triangle separates quad1 from quad2.

        quad2 may touch the edge line, but at least one of its points must lie
        strictly on the far side, otherwise a flat quad2 along the edge could
        still meet quad1 in its interior.
        """
        pts1 = quad1.points
        pts2 = quad2.points
        for odd in range(3):
            start, end = (index for index in range(3) if index != odd)
            origin = pts1[start]
            edge = pts1[end] - origin
            sign = GeomMath.cross(edge, pts1[odd] - origin)
            if abs(sign) <= FLT_EPSILON * GeomMath.dot(edge, edge):
                continue
            tests = [GeomMath.cross(edge, point - origin) * sign for point in pts2]
            if all(test <= 0.0 for test in tests) and any(test < 0.0 for test in tests):
                return True
        return False

    @staticmethod
    def _shared_end_points(quad1: AvQuadratic, quad2: AvQuadratic, zero: float) -> List[LocalHit]:
        hits = []
        for u1 in (0.0, 1.0):
            x1, y1 = quad1[int(u1 * 2)]
            for u2 in (0.0, 1.0):
                x2, y2 = quad2[int(u2 * 2)]
                if almost_equal_ulps(x1, x2, MAX_ULPS, zero) and almost_equal_ulps(y1, y2, MAX_ULPS, zero):
                    hits.append((u1, u2))
        return hits

    @staticmethod
    def _param_on_flat(flat: AvQuadratic, point: Sequence[float], tolerance: float) -> Optional[float]:
        """Parameter of point on a flat quadratic, or None if the point is not on it."""
        origin = flat[0]
        direction = (flat[2][0] - origin[0], flat[2][1] - origin[1])
        a, b, c = flat.coefficients()
        offset = (c[0] - point[0], c[1] - point[1])
        roots = valid_unit_roots(
            quadratic_roots(GeomMath.dot(direction, a), GeomMath.dot(direction, b), GeomMath.dot(direction, offset)),
            _ROOT_EPSILON,
        )
        if not roots:
            return None
        pts = flat.evaluate_many(roots)
        dist = np.hypot(pts[:, 0] - point[0], pts[:, 1] - point[1])
        best = int(np.argmin(dist))
        if dist[best] > tolerance:
            return None
        return roots[best]

    @classmethod
    def _line_quad(cls, line: AvQuadratic, quad: AvQuadratic, tolerance: float) -> AvQuadHits:
        """Intersect a flat quadratic (treated as its chord) with a quadratic; pairs are (u_line, u_quad)."""
        origin = line[0]
        direction = (line[2][0] - origin[0], line[2][1] - origin[1])
        normal = (-direction[1], direction[0])
        a, b, c = quad.coefficients()
        coeffs = (
            GeomMath.dot(normal, a),
            GeomMath.dot(normal, b),
            GeomMath.dot(normal, (c[0] - origin[0], c[1] - origin[1])),
        )
        if max(abs(value) for value in coeffs) <= tolerance * math.hypot(*direction):
            return cls._overlap(line, quad, tolerance)
        hits = []
        for u_quad in valid_unit_roots(quadratic_roots(*coeffs), _ROOT_EPSILON):
            u_line = cls._param_on_flat(line, quad.evaluate(u_quad), tolerance)
            if u_line is not None:
                hits.append((u_line, u_quad))
        return AvQuadHits(tuple(sorted(hits)))

    @classmethod
    def _line_line(cls, line1: AvQuadratic, line2: AvQuadratic, tolerance: float) -> AvQuadHits:
        """Intersect two flat quadratics through their chords."""
        p1 = line1[0]
        d1 = (line1[2][0] - p1[0], line1[2][1] - p1[1])
        p2 = line2[0]
        d2 = (line2[2][0] - p2[0], line2[2][1] - p2[1])
        length1 = math.hypot(*d1)
        length2 = math.hypot(*d2)
        if abs(GeomMath.cross(d1, d2)) <= FLT_EPSILON * length1 * length2:
            offset = (p2[0] - p1[0], p2[1] - p1[1])
            if abs(GeomMath.cross(d1, offset)) <= tolerance * length1:
                return cls._overlap(line1, line2, tolerance)
            return AvQuadHits()
        params = GeomMath.line_intersection(p1, d1, p2, d2)
        if params is None:
            return AvQuadHits()
        s, u = params
        if not (-_ROOT_EPSILON <= s <= 1.0 + _ROOT_EPSILON and -_ROOT_EPSILON <= u <= 1.0 + _ROOT_EPSILON):
            return AvQuadHits()
        point = (p1[0] + s * d1[0], p1[1] + s * d1[1])
        u1 = cls._param_on_flat(line1, point, tolerance)
        u2 = cls._param_on_flat(line2, point, tolerance)
        if u1 is None or u2 is None:
            return AvQuadHits()
        return AvQuadHits(((u1, u2),))

    @staticmethod
    def _overlap(quad1: AvQuadratic, quad2: AvQuadratic, tolerance: float) -> AvQuadHits:
        """Resolve two quadratics lying on the same conic or line.

        End points of either curve lying on the other mark the shared stretch.
        Two or more distinct such points mean a real overlap; a single one is
        an end-to-end touch and reported as a hit.
        """
        found: List[Tuple[LocalHit, Tuple[float, float]]] = []
        for u1 in (0.0, 1.0):
            point = quad1.evaluate(u1)
            u2 = quad2.closest_t(point)
            if GeomMath.distance(point, quad2.evaluate(u2)) <= tolerance:
                found.append(((u1, u2), point))
        for u2 in (0.0, 1.0):
            point = quad2.evaluate(u2)
            u1 = quad1.closest_t(point)
            if GeomMath.distance(point, quad1.evaluate(u1)) <= tolerance:
                found.append(((u1, u2), point))

        distinct: List[Tuple[LocalHit, Tuple[float, float]]] = []
        for hit, point in found:
            if all(GeomMath.distance(point, other) > tolerance for _, other in distinct):
                distinct.append((hit, point))
        if len(distinct) >= 2:
            return AvQuadHits(coincident=True)
        return AvQuadHits(tuple(hit for hit, _ in distinct))

    @staticmethod
    def _pair_roots(
        quad1: AvQuadratic, roots1: List[float], quad2: AvQuadratic, roots2: List[float], tolerance: float
    ) -> List[LocalHit]:
        """Pair the roots found on each curve by the distance of their points.

        Nearest pairs are matched first. Roots left over are projected onto the
        other curve and kept if they lie on it within tolerance.
        """
        hits: List[LocalHit] = []
        pts1 = quad1.evaluate_many(roots1)
        pts2 = quad2.evaluate_many(roots2)
        used1 = set()
        used2 = set()
        if roots1 and roots2:
            dist = np.hypot(pts1[:, None, 0] - pts2[None, :, 0], pts1[:, None, 1] - pts2[None, :, 1])
            for flat_index in np.argsort(dist, axis=None, kind="stable"):
                i, j = divmod(int(flat_index), len(roots2))
                if dist[i, j] > tolerance:
                    break
                if i in used1 or j in used2:
                    continue
                used1.add(i)
                used2.add(j)
                hits.append((roots1[i], roots2[j]))

        for i, u1 in enumerate(roots1):
            if i in used1:
                continue
            u2 = quad2.closest_t(pts1[i])
            if GeomMath.distance(pts1[i], quad2.evaluate(u2)) <= tolerance:
                hits.append((u1, u2))
        for j, u2 in enumerate(roots2):
            if j in used2:
                continue
            u1 = quad1.closest_t(pts2[j])
            if GeomMath.distance(pts2[j], quad1.evaluate(u1)) <= tolerance:
                hits.append((u1, u2))
        return sorted(hits)

