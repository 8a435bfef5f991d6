"""Crossings of two cubic Bezier curves and of a cubic with itself"""

from __future__ import annotations

import logging
from typing import List, Optional, Set, Tuple, Union

import numpy as np

from avx.bezier import AvCubic, PointsLike
from avx.coarse import AvCandidate, AvCoarseIntersector, approximate
from avx.common import IntersectionCondition
from avx.geom import GeomMath
from avx.intersections import AvIntersections, AvSelfIntersection
from avx.merger import AvCandidateMerger
from avx.numerics import MAX_ULPS, almost_equal_ulps, zero_floor
from avx.quad_approx import AvQuadSpan
from avx.reduce_order import AvOrderReducer, AvReducedCurve
from avx.refine import AvCubicChopper
from avx.settings import DEFAULT_SETTINGS, IntersectionSettings

logger = logging.getLogger(__name__)

CubicLike = Union[AvCubic, PointsLike]

# interior samples used to test whether one curve lies on the other
_COINCIDENCE_SAMPLES: List[float] = [(index + 0.5) / 8.0 for index in range(8)]
_COINCIDENCE_MIN_HITS: int = 3


###############################################################################
# AvCubicIntersector
###############################################################################
class AvCubicIntersector:
    """
    Finds all crossings of two cubics.

    Pipeline: bounding box rejection, order reduction, coincidence check,
    shared end points, quadratic approximation of both curves, coarse
    candidates per span pair, merging, refinement of every candidate,
    merging of the refined crossings and normalization of the result.
    """

    def __init__(self, settings: Optional[IntersectionSettings] = None):
        self._settings = settings if settings is not None else DEFAULT_SETTINGS

    @property
    def settings(self) -> IntersectionSettings:
        return self._settings

    def intersect(self, cubic1: CubicLike, cubic2: CubicLike, precision: Optional[float] = None) -> AvIntersections:
        """
        Intersect two cubics.

        Args:
            cubic1 (CubicLike): first curve, an AvCubic or 4 control points
            cubic2 (CubicLike): second curve, an AvCubic or 4 control points
            precision (Optional[float], optional): approximation precision for
                both curves; by default each curve uses its own precision()

        Returns:
            AvIntersections: crossings sorted by t1 with the signalled conditions

        Raises:
            ValueError: for invalid control points or a negative precision
        """
        cubic1 = as_cubic(cubic1)
        cubic2 = as_cubic(cubic2)
        if precision is not None and not precision >= 0.0:
            raise ValueError(f"precision must be non-negative, got {precision}")
        settings = self._settings

        if not cubic1.bounds().overlaps(cubic2.bounds()):
            return AvIntersections()

        conditions: Set[IntersectionCondition] = set()
        reduced1 = AvOrderReducer.reduce(cubic1, settings.reduce_mode, settings)
        reduced2 = AvOrderReducer.reduce(cubic2, settings.reduce_mode, settings)
        if reduced1.is_degenerate or reduced2.is_degenerate:
            logger.debug("degenerate input: orders %d and %d", reduced1.order, reduced2.order)
            conditions.add(IntersectionCondition.DEGENERATE_CURVE)

        if reduced1.order == 1 or reduced2.order == 1:
            pairs = self._point_crossings(cubic1, reduced1, cubic2, reduced2)
            return AvIntersections.from_pairs(pairs, conditions, capacity=settings.capacity)

        if self._coincident(cubic1, cubic2):
            logger.debug("coincident curves")
            conditions.add(IntersectionCondition.COINCIDENT)
            return AvIntersections(conditions=frozenset(conditions))

        spans1 = self._spans(cubic1, reduced1, precision)
        spans2 = self._spans(cubic2, reduced2, precision)
        coarse = AvCoarseIntersector.find_candidates(spans1, spans2)
        if coarse.coincident:
            logger.debug("coincident curve sections")
            conditions.add(IntersectionCondition.COINCIDENT)
            return AvIntersections(conditions=frozenset(conditions))

        candidates = self._shared_end_points(cubic1, cubic2) + coarse.candidates
        candidates = AvCandidateMerger.merge(candidates, settings.merge_tolerance)

        chopper = AvCubicChopper(cubic1, cubic2, settings)
        refined: List[AvCandidate] = []
        dropped = 0
        for candidate in candidates:
            result = chopper.refine(candidate)
            if result is None:
                dropped += 1
                continue
            refined.append(AvCandidate(result[0], result[1], candidate.span1, candidate.span2, exact=True))
        if dropped:
            logger.debug("dropped %d of %d candidates", dropped, len(candidates))
            conditions.add(IntersectionCondition.NON_CONVERGENT)

        refined = AvCandidateMerger.merge(refined, settings.result_tolerance)
        return AvIntersections.from_pairs(
            ((candidate.t1, candidate.t2) for candidate in refined),
            conditions,
            dropped,
            capacity=settings.capacity,
        )

    def _spans(self, cubic: AvCubic, reduced: AvReducedCurve, precision: Optional[float]) -> List[AvQuadSpan]:
        if reduced.order == 3:
            return [AvQuadSpan(reduced.as_quadratic(), 0.0, 1.0)]
        return approximate(cubic, self._settings, precision)

    def _coincident(self, cubic1: AvCubic, cubic2: AvCubic) -> bool:
        """True if enough interior samples of one curve lie on the other."""
        size = max(cubic1.bounds().size, cubic2.bounds().size)
        tolerance = self._settings.coincidence_tolerance * size
        for curve, other in ((cubic1, cubic2), (cubic2, cubic1)):
            hits = 0
            for point in curve.evaluate_many(_COINCIDENCE_SAMPLES):
                nearest = np.asarray(other.evaluate(other.closest_t(point)))
                if float(np.hypot(*(nearest - point))) <= tolerance:
                    hits += 1
            if hits >= _COINCIDENCE_MIN_HITS:
                return True
        return False

    @staticmethod
    def _shared_end_points(cubic1: AvCubic, cubic2: AvCubic) -> List[AvCandidate]:
        """Exact candidates for end points that both curves share."""
        zero = zero_floor(max(cubic1.bounds().size, cubic2.bounds().size))
        candidates = []
        for t1 in (0.0, 1.0):
            x1, y1 = cubic1.evaluate(t1)
            for t2 in (0.0, 1.0):
                x2, y2 = cubic2.evaluate(t2)
                if almost_equal_ulps(x1, x2, MAX_ULPS, zero) and almost_equal_ulps(y1, y2, MAX_ULPS, zero):
                    candidates.append(AvCandidate(t1, t2, (t1, t1), (t2, t2), exact=True))
        return candidates

    def _point_crossings(
        self, cubic1: AvCubic, reduced1: AvReducedCurve, cubic2: AvCubic, reduced2: AvReducedCurve
    ) -> List[Tuple[float, float]]:
        """Crossings when at least one curve collapsed to a point."""
        max_ulps = self._settings.max_ulps
        zero = zero_floor(max(cubic1.bounds().size, cubic2.bounds().size), max_ulps)
        if reduced1.order == 1:
            t1 = 0.0
            x1, y1 = cubic1.evaluate(t1)
            t2 = 0.0 if reduced2.order == 1 else cubic2.closest_t((x1, y1))
        else:
            t2 = 0.0
            x2, y2 = cubic2.evaluate(t2)
            t1 = cubic1.closest_t((x2, y2))
        x1, y1 = cubic1.evaluate(t1)
        x2, y2 = cubic2.evaluate(t2)
        if almost_equal_ulps(x1, x2, max_ulps, zero) and almost_equal_ulps(y1, y2, max_ulps, zero):
            return [(t1, t2)]
        return []


def as_cubic(cubic: CubicLike) -> AvCubic:
    """Return cubic itself if it is an AvCubic, else build one from its control points."""
    if isinstance(cubic, AvCubic):
        return cubic
    return AvCubic(cubic)


def intersect_cubics(
    cubic1: CubicLike,
    cubic2: CubicLike,
    settings: Optional[IntersectionSettings] = None,
    precision: Optional[float] = None,
) -> AvIntersections:
    """Crossings of two cubics; see AvCubicIntersector.intersect()."""
    return AvCubicIntersector(settings).intersect(cubic1, cubic2, precision)


def _branches_cross(cubic: AvCubic, t_a: float, t_b: float) -> bool:
    """
    True if short chords of the curve around t_a and around t_b cross.

    Near a cusp the points at t_a and t_b agree in single precision although
    the two branches only touch; their chords lie on opposite sides.
    """
    half = (t_b - t_a) / 8.0
    start_a, end_a = cubic.evaluate_many([max(0.0, t_a - half), t_a + half])
    start_b, end_b = cubic.evaluate_many([t_b - half, min(1.0, t_b + half)])
    found = GeomMath.line_intersection(start_a, end_a - start_a, start_b, end_b - start_b)
    if found is None:
        return False
    s, u = found
    return 0.0 <= s <= 1.0 and 0.0 <= u <= 1.0


def self_intersect(cubic: CubicLike, settings: Optional[IntersectionSettings] = None) -> AvSelfIntersection:
    """
    Find where a cubic crosses itself.

    Curves that reduce to a lower order never cross themselves. Otherwise
    the spans of the approximation are compared pairwise and the candidates
    refined with disjoint brackets. A refined pair counts only if the curve
    branches through it cross, so a cusp is not reported.

    Args:
        cubic (CubicLike): the curve, an AvCubic or 4 control points
        settings (Optional[IntersectionSettings], optional): Defaults to DEFAULT_SETTINGS.

    Returns:
        AvSelfIntersection: found with (t_a, t_b), t_a < t_b; or not found
    """
    cubic = as_cubic(cubic)
    settings = settings if settings is not None else DEFAULT_SETTINGS
    reduced = AvOrderReducer.reduce(cubic, settings.reduce_mode, settings)
    if reduced.is_degenerate:
        return AvSelfIntersection()

    spans = approximate(cubic, settings)
    candidates = AvCoarseIntersector.find_self_candidates(spans, settings.result_tolerance)
    candidates = AvCandidateMerger.merge(candidates, settings.merge_tolerance)
    chopper = AvCubicChopper(cubic, cubic, settings, separate=True)
    for candidate in candidates:
        result = chopper.refine(candidate)
        if result is None:
            continue
        t_a, t_b = sorted(result)
        if t_b - t_a > settings.result_tolerance and _branches_cross(cubic, t_a, t_b):
            return AvSelfIntersection(True, t_a, t_b)
    return AvSelfIntersection()


def main():
    """Main"""
    logging.basicConfig(level=logging.DEBUG)
    cubic1 = AvCubic([(0.0, 0.0), (100.0 / 3.0, 100.0), (200.0 / 3.0, -100.0), (100.0, 0.0)])
    cubic2 = AvCubic([(0.0, 0.0), (100.0 / 3.0, -100.0), (200.0 / 3.0, 100.0), (100.0, 0.0)])
    result = intersect_cubics(cubic1, cubic2)
    print(result)
    print(result.points(cubic1))
    print(self_intersect([(0.0, 0.0), (150.0, 100.0), (-50.0, 100.0), (100.0, 0.0)]))


if __name__ == "__main__":
    main()
