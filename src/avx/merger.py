"""Merge candidates that describe the same crossing"""

from __future__ import annotations

from typing import Dict, List, Sequence

import numpy as np
from scipy.spatial import KDTree

from avx.coarse import AvCandidate


###############################################################################
# AvCandidateMerger
###############################################################################
class AvCandidateMerger:
    """Clusters candidates whose t1 and t2 both lie within a tolerance."""

    @staticmethod
    def merge(candidates: Sequence[AvCandidate], tolerance: float) -> List[AvCandidate]:
        """
        Collapse candidates of the same crossing into one.

        Two candidates are neighbours if |t1 - t1'| <= tolerance and
        |t2 - t2'| <= tolerance (Chebyshev distance in the (t1, t2) plane).
        Candidates are visited in order; each joins the earliest cluster whose
        first member is its neighbour, or starts a new cluster. Every member
        therefore lies within tolerance of its cluster's first member, and a
        chain of neighbours is not merged end to end. Each cluster keeps its
        first exact member, else its first member; clusters keep the order of
        their first member.

        Args:
            candidates (Sequence[AvCandidate]): candidates in discovery order
            tolerance (float): neighbourhood radius in t

        Returns:
            List[AvCandidate]: one candidate per cluster
        """
        count = len(candidates)
        if count < 2:
            return list(candidates)

        coords = np.array([[candidate.t1, candidate.t2] for candidate in candidates], dtype=np.float64)
        tree = KDTree(coords)
        leader = list(range(count))
        for index in range(count):
            neighbours = tree.query_ball_point(coords[index], r=tolerance, p=np.inf)
            leaders = [other for other in neighbours if other < index and leader[other] == other]
            if leaders:
                leader[index] = min(leaders)

        chosen: Dict[int, int] = {}
        for index in range(count):
            root = leader[index]
            if root not in chosen:
                chosen[root] = index
            elif candidates[index].exact and not candidates[chosen[root]].exact:
                chosen[root] = index
        return [candidates[chosen[root]] for root in sorted(chosen)]
