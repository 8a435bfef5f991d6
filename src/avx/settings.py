"""Tolerances, depth caps and capacity used by the intersection modules"""

from __future__ import annotations

from dataclasses import dataclass

from avx.common import ReduceOrderMode
from avx.numerics import FLT_EPSILON, FLT_EPSILON_SQRT


###############################################################################
# IntersectionSettings
###############################################################################
@dataclass(frozen=True)
class IntersectionSettings:
    """Settings of one intersection query.

    Attributes:
        precision_unit (float): curve size divided by this gives the approximation precision
        max_approx_depth (int): maximum bisection depth of the quadratic approximation
        max_chop_depth (int): maximum recursion depth of the refiner
        max_chop_calls (int): maximum number of refiner steps per candidate
        newton_steps (int): Newton steps tried before the refiner recurses
        max_ulps (int): allowed single precision ULP distance of converged points
        point_tolerance (float): absolute size below which a curve counts as a point
        reduce_tolerance (float): distance, relative to the curve size, below which
            control points count as collinear or the cubic term as zero
        coincidence_tolerance (float): distance, relative to the curve size, below which
            a sample lies on the other curve
        merge_tolerance (float): t distance below which coarse candidates are merged
        result_tolerance (float): t distance below which refined crossings are merged
        capacity (int): maximum number of reported crossings
        reduce_mode (ReduceOrderMode): whether quadratic-like cubics are reduced
    """

    precision_unit: float = 256.0
    max_approx_depth: int = 10
    max_chop_depth: int = 64
    max_chop_calls: int = 256
    newton_steps: int = 4
    max_ulps: int = 16
    point_tolerance: float = FLT_EPSILON
    reduce_tolerance: float = 16.0 * FLT_EPSILON
    coincidence_tolerance: float = 16.0 * FLT_EPSILON
    merge_tolerance: float = FLT_EPSILON_SQRT
    result_tolerance: float = FLT_EPSILON_SQRT
    capacity: int = 9
    reduce_mode: ReduceOrderMode = ReduceOrderMode.NO_QUADRATICS

    def __post_init__(self):
        if not self.precision_unit > 0:
            raise ValueError(f"precision_unit must be positive, got {self.precision_unit}")
        for name in ("max_approx_depth", "max_chop_depth", "max_chop_calls", "max_ulps", "capacity"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if not isinstance(self.newton_steps, int) or self.newton_steps < 0:
            raise ValueError(f"newton_steps must be a non-negative integer, got {self.newton_steps!r}")
        for name in (
            "point_tolerance",
            "reduce_tolerance",
            "coincidence_tolerance",
            "merge_tolerance",
            "result_tolerance",
        ):
            value = getattr(self, name)
            if not 0.0 <= value < 1.0:
                raise ValueError(f"{name} must lie in [0, 1), got {value!r}")
        if not isinstance(self.reduce_mode, ReduceOrderMode):
            raise ValueError(f"reduce_mode must be a ReduceOrderMode, got {self.reduce_mode!r}")

    def to_dict(self) -> dict:
        """Convert settings to a dictionary for serialization."""
        return {
            "precision_unit": self.precision_unit,
            "max_approx_depth": self.max_approx_depth,
            "max_chop_depth": self.max_chop_depth,
            "max_chop_calls": self.max_chop_calls,
            "newton_steps": self.newton_steps,
            "max_ulps": self.max_ulps,
            "point_tolerance": self.point_tolerance,
            "reduce_tolerance": self.reduce_tolerance,
            "coincidence_tolerance": self.coincidence_tolerance,
            "merge_tolerance": self.merge_tolerance,
            "result_tolerance": self.result_tolerance,
            "capacity": self.capacity,
            "reduce_mode": self.reduce_mode.name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> IntersectionSettings:
        """Create IntersectionSettings from a dictionary; missing keys keep their defaults."""
        values = dict(data)
        if "reduce_mode" in values and not isinstance(values["reduce_mode"], ReduceOrderMode):
            try:
                values["reduce_mode"] = ReduceOrderMode[values["reduce_mode"]]
            except KeyError as exc:
                raise ValueError(f"unknown reduce_mode {values['reduce_mode']!r}") from exc
        unknown = set(values) - set(cls().to_dict())
        if unknown:
            raise ValueError(f"unknown settings: {sorted(unknown)}")
        return cls(**values)


DEFAULT_SETTINGS = IntersectionSettings()
