"""Approximate a cubic by a sequence of quadratics within a precision"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional

from avx.bezier import AvCubic, AvQuadratic


###############################################################################
# AvQuadSpan
###############################################################################
@dataclass(frozen=True)
class AvQuadSpan:
    """One quadratic of an approximation and the interval of the cubic it covers."""

    quad: AvQuadratic
    t_min: float
    t_max: float

    @property
    def width(self) -> float:
        return self.t_max - self.t_min

    def global_t(self, u: float) -> float:
        """Map the local parameter u in [0, 1] to the cubic's parameter.

        u = 0 and u = 1 map exactly onto t_min and t_max.
        """
        return (1.0 - u) * self.t_min + u * self.t_max


###############################################################################
# AvQuadraticApproximation
###############################################################################
class AvQuadraticApproximation:
    """
    Lazy, restartable sequence of quadratics approximating a cubic.

    The cubic is first split at its inflections. Each piece is bisected until
    the deviation estimate of its tangent-fit quadratic is within precision
    or max_depth bisections are reached. Spans come out in ascending t and
    every span end point lies exactly on the cubic.
    """

    def __init__(self, cubic: AvCubic, precision: float, max_depth: int = 10):
        """
        Args:
            cubic (AvCubic): the curve to approximate
            precision (float): maximum allowed deviation, in coordinate units
            max_depth (int, optional): maximum bisection depth. Defaults to 10.

        Raises:
            ValueError: for a negative precision or a negative max_depth
        """
        if not precision >= 0.0:
            raise ValueError(f"precision must be non-negative, got {precision}")
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        self._cubic = cubic
        self._precision = precision
        self._max_depth = max_depth

    @property
    def cubic(self) -> AvCubic:
        return self._cubic

    @property
    def precision(self) -> float:
        return self._precision

    def __iter__(self) -> Iterator[AvQuadSpan]:
        splits = [0.0] + self._cubic.inflections() + [1.0]
        for start, end in zip(splits[:-1], splits[1:]):
            if end <= start:
                continue
            # worklist of (t_min, t_max, depth); the lower half is pushed last so it pops first
            stack = [(start, end, 0)]
            while stack:
                t_min, t_max, depth = stack.pop()
                piece = self._cubic.sub_divide(t_min, t_max)
                if depth < self._max_depth and piece.demotion_error() > self._precision:
                    mid = (t_min + t_max) / 2.0
                    stack.append((mid, t_max, depth + 1))
                    stack.append((t_min, mid, depth + 1))
                    continue
                yield AvQuadSpan(piece.demote_to_quadratic(), t_min, t_max)

    def spans(self) -> List[AvQuadSpan]:
        """All spans as list."""
        return list(self)

    def split_ts(self) -> List[float]:
        """Interior parameters at which the cubic is split, ascending."""
        return [span.t_max for span in self][:-1]


def cubic_to_quadratic_ts(cubic: AvCubic, precision: Optional[float] = None, max_depth: int = 10) -> List[float]:
    """Interior split parameters of the quadratic approximation of a cubic.

    The precision defaults to cubic.precision().
    """
    if precision is None:
        precision = cubic.precision()
    return AvQuadraticApproximation(cubic, precision, max_depth).split_ts()
