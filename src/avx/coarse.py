"""Coarse crossings of two cubics from their quadratic approximations"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from avx.bezier import AvCubic
from avx.quad_approx import AvQuadraticApproximation, AvQuadSpan
from avx.quad_intersect import AvQuadIntersector
from avx.settings import DEFAULT_SETTINGS, IntersectionSettings

logger = logging.getLogger(__name__)


###############################################################################
# AvCandidate
###############################################################################
@dataclass(frozen=True)
class AvCandidate:
    """A possible crossing at (t1, t2) and the spans it was found on.

    Attributes:
        t1 (float): parameter on the first cubic
        t2 (float): parameter on the second cubic
        span1 (Tuple[float, float]): interval of the first cubic the candidate came from
        span2 (Tuple[float, float]): interval of the second cubic the candidate came from
        exact (bool): True if (t1, t2) needs no refinement
    """

    t1: float
    t2: float
    span1: Tuple[float, float] = (0.0, 1.0)
    span2: Tuple[float, float] = (0.0, 1.0)
    exact: bool = False


@dataclass
class AvCoarseResult:
    """Candidates of one coarse pass and whether coincident spans were met."""

    candidates: List[AvCandidate] = field(default_factory=list)
    coincident: bool = False


###############################################################################
# AvCoarseIntersector
###############################################################################
class AvCoarseIntersector:
    """Pairs the spans of two approximations and collects their crossings."""

    @staticmethod
    def _candidate(span1: AvQuadSpan, u1: float, span2: AvQuadSpan, u2: float) -> AvCandidate:
        return AvCandidate(
            span1.global_t(u1),
            span2.global_t(u2),
            (span1.t_min, span1.t_max),
            (span2.t_min, span2.t_max),
        )

    @classmethod
    def find_candidates(cls, spans1: Sequence[AvQuadSpan], spans2: Sequence[AvQuadSpan]) -> AvCoarseResult:
        """
        Intersect every pair of spans whose control boxes overlap.

        Local crossings are mapped onto the cubics' parameters through each
        span's interval.

        Args:
            spans1 (Sequence[AvQuadSpan]): approximation of the first cubic
            spans2 (Sequence[AvQuadSpan]): approximation of the second cubic

        Returns:
            AvCoarseResult: candidates in span order; coincident is set if any
                pair of spans shares a stretch of path
        """
        result = AvCoarseResult()
        boxes2 = [span.quad.control_bounds() for span in spans2]
        for span1 in spans1:
            box1 = span1.quad.control_bounds()
            for span2, box2 in zip(spans2, boxes2):
                if not box1.overlaps(box2):
                    continue
                hits = AvQuadIntersector.intersect(span1.quad, span2.quad)
                if hits.coincident:
                    logger.debug(
                        "coincident spans [%g, %g] and [%g, %g]", span1.t_min, span1.t_max, span2.t_min, span2.t_max
                    )
                    result.coincident = True
                    continue
                result.candidates.extend(cls._candidate(span1, u1, span2, u2) for u1, u2 in hits)
        return result

    @classmethod
    def find_self_candidates(cls, spans: Sequence[AvQuadSpan], tolerance: float) -> List[AvCandidate]:
        """
        Crossings of an approximation with itself.

        Only pairs i < j are compared, so a span never meets itself. Candidates
        whose two parameters meet within tolerance (the shared boundary of
        adjacent spans) are dropped. Every candidate has t1 < t2.

        Args:
            spans (Sequence[AvQuadSpan]): approximation of one cubic
            tolerance (float): minimum distance between the two parameters

        Returns:
            List[AvCandidate]: the candidates
        """
        candidates: List[AvCandidate] = []
        boxes = [span.quad.control_bounds() for span in spans]
        for i, (span_a, box_a) in enumerate(zip(spans, boxes)):
            for span_b, box_b in zip(spans[i + 1 :], boxes[i + 1 :]):
                if not box_a.overlaps(box_b):
                    continue
                hits = AvQuadIntersector.intersect(span_a.quad, span_b.quad)
                for u_a, u_b in hits:
                    candidate = cls._candidate(span_a, u_a, span_b, u_b)
                    if abs(candidate.t2 - candidate.t1) <= tolerance:
                        continue
                    candidates.append(candidate)
        return candidates

    @classmethod
    def intersect_cubics(
        cls,
        cubic1: AvCubic,
        cubic2: AvCubic,
        settings: IntersectionSettings = DEFAULT_SETTINGS,
        precision: Optional[float] = None,
    ) -> AvCoarseResult:
        """Approximate both cubics and run find_candidates on the spans.

        Each cubic uses its own precision unless precision is given.
        """
        spans1 = approximate(cubic1, settings, precision)
        spans2 = approximate(cubic2, settings, precision)
        return cls.find_candidates(spans1, spans2)


def approximate(
    cubic: AvCubic, settings: IntersectionSettings = DEFAULT_SETTINGS, precision: Optional[float] = None
) -> List[AvQuadSpan]:
    """Quadratic spans of a cubic at the given or the cubic's own precision."""
    if precision is None:
        precision = cubic.precision(settings.precision_unit)
    return AvQuadraticApproximation(cubic, precision, settings.max_approx_depth).spans()

