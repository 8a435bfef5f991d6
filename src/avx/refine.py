"""Refine coarse candidates into crossings that agree in single precision"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from avx.bezier import AvCubic
from avx.coarse import AvCandidate, AvCoarseIntersector
from avx.delta import AvDeltaEstimator
from avx.numerics import DBL_EPSILON, almost_equal_ulps, zero_floor
from avx.settings import DEFAULT_SETTINGS, IntersectionSettings

logger = logging.getLogger(__name__)

Bracket = Tuple[float, float, float, float]  # (min1, max1, min2, max2)


###############################################################################
# AvCubicChopper
###############################################################################
class AvCubicChopper:
    """
    Refines a candidate (t1, t2) of two cubics until both curve points are
    equal within settings.max_ulps.

    The candidate's spans, widened by half their width, bracket the search.
    A few Newton steps with the delta estimator are tried first. If they do
    not converge, both curves are cut down to the bracket, the coarse finder
    runs on the pieces, and the piece nearest the target is polished; failing
    that the bracket is halved, alternating which curve is halved first with
    the recursion depth. Depth and number of steps are capped.

    With separate=True the two brackets are kept disjoint, for the crossings
    of a cubic with itself.
    """

    def __init__(
        self,
        cubic1: AvCubic,
        cubic2: AvCubic,
        settings: IntersectionSettings = DEFAULT_SETTINGS,
        separate: bool = False,
    ):
        self._cubic1 = cubic1
        self._cubic2 = cubic2
        self._settings = settings
        self._separate = separate
        self._zero = zero_floor(max(cubic1.bounds().size, cubic2.bounds().size), settings.max_ulps)
        self._calls = 0
        self._target: Tuple[float, float] = (0.0, 0.0)
        self._bracket: Bracket = (0.0, 1.0, 0.0, 1.0)
        self._result: Optional[Tuple[float, float]] = None

    @property
    def calls(self) -> int:
        """Chopper steps used by the last refine()."""
        return self._calls

    def refine(self, candidate: AvCandidate) -> Optional[Tuple[float, float]]:
        """
        Refine one candidate.

        Args:
            candidate (AvCandidate): coarse crossing with the spans it came from

        Returns:
            Optional[Tuple[float, float]]: the refined (t1, t2), or None if the
                candidate did not converge within the caps
        """
        self._calls = 0
        self._result = None
        if candidate.exact:
            return (candidate.t1, candidate.t2)
        bracket = self._initial_bracket(candidate)
        self._bracket = bracket
        self._target = (candidate.t1, candidate.t2)

        t1 = min(max(candidate.t1, bracket[0]), bracket[1])
        t2 = min(max(candidate.t2, bracket[2]), bracket[3])
        found = self._polish(t1, t2, bracket)
        if found is not None:
            return found
        if self._chop(bracket, 0):
            return self._result
        logger.debug(
            "candidate (%.9g, %.9g) did not converge after %d steps", candidate.t1, candidate.t2, self._calls
        )
        return None

    def _initial_bracket(self, candidate: AvCandidate) -> Bracket:
        min1, max1 = self._widen(*candidate.span1)
        min2, max2 = self._widen(*candidate.span2)
        if self._separate and max1 > min2:
            mid = (candidate.t1 + candidate.t2) / 2.0
            max1 = min(max1, mid)
            min2 = max(min2, mid)
        return (min1, max1, min2, max2)

    @staticmethod
    def _widen(t_min: float, t_max: float) -> Tuple[float, float]:
        half = (t_max - t_min) / 2.0
        return max(0.0, t_min - half), min(1.0, t_max + half)

    def _converged(self, t1: float, t2: float) -> bool:
        x1, y1 = self._cubic1.evaluate(t1)
        x2, y2 = self._cubic2.evaluate(t2)
        max_ulps = self._settings.max_ulps
        return almost_equal_ulps(x1, x2, max_ulps, self._zero) and almost_equal_ulps(y1, y2, max_ulps, self._zero)

    def _polish(self, t1: float, t2: float, bracket: Bracket) -> Optional[Tuple[float, float]]:
        """Newton steps from (t1, t2) that must stay inside the bracket."""
        if self._converged(t1, t2):
            return (t1, t2)
        min1, max1, min2, max2 = bracket
        for _ in range(self._settings.newton_steps):
            delta1, delta2 = AvDeltaEstimator.compute_delta(self._cubic1, t1, self._cubic2, t2)
            if delta1 == 0.0 and delta2 == 0.0:
                return None
            t1 += delta1
            t2 += delta2
            if not (min1 <= t1 <= max1 and min2 <= t2 <= max2):
                return None
            if self._converged(t1, t2):
                return (t1, t2)
        return None

    def _chop(self, bracket: Bracket, depth: int) -> bool:
        """One recursive refinement step; stores the crossing in self._result on success."""
        if depth > self._settings.max_chop_depth or self._calls >= self._settings.max_chop_calls:
            return False
        self._calls += 1
        min1, max1, min2, max2 = bracket
        if max1 - min1 <= DBL_EPSILON or max2 - min2 <= DBL_EPSILON:
            return False

        piece1 = self._cubic1.sub_divide(min1, max1)
        piece2 = self._cubic2.sub_divide(min2, max2)
        if not piece1.control_bounds().overlaps(piece2.control_bounds()):
            return False
        local = AvCoarseIntersector.intersect_cubics(piece1, piece2, self._settings).candidates
        if not local:
            return False

        def to_global(candidate: AvCandidate) -> Tuple[float, float]:
            return (
                (1.0 - candidate.t1) * min1 + candidate.t1 * max1,
                (1.0 - candidate.t2) * min2 + candidate.t2 * max2,
            )

        target1, target2 = self._target
        t1, t2 = min(
            (to_global(candidate) for candidate in local),
            key=lambda pair: abs(pair[0] - target1) + abs(pair[1] - target2),
        )
        # Newton may leave the current piece but not the candidate's bracket
        found = self._polish(t1, t2, self._bracket)
        if found is not None:
            self._result = found
            return True

        half1 = (min1 + max1) / 2.0
        half2 = (min2 + max2) / 2.0
        halves1 = [(min1, half1, min2, max2), (half1, max1, min2, max2)]
        halves2 = [(min1, max1, min2, half2), (min1, max1, half2, max2)]
        order = halves1 + halves2 if depth % 2 == 0 else halves2 + halves1
        return any(self._chop(half, depth + 1) for half in order)
