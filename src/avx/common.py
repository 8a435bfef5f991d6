"""Central module containing enums shared by the intersection modules."""

from __future__ import annotations

from enum import Enum, auto
from typing import Tuple

###############################################################################
# Types
###############################################################################


Point2 = Tuple[float, float]  # Type-Definition for a planar point (x, y)


###############################################################################
# Enums
###############################################################################


class ReduceOrderMode(Enum):
    """Enum to define whether the order reducer may report a cubic as quadratic."""

    ALLOW_QUADRATICS = auto()
    NO_QUADRATICS = auto()


class IntersectionCondition(Enum):
    """Enum of the geometric conditions signalled on an intersection result.

    None of them is an error: the result is still valid, it may simply hold
    fewer crossings than a caller expects.
    """

    # at least one input reduced to a point, a line or a quadratic
    DEGENERATE_CURVE = auto()
    # the curves share a stretch of their path; no isolated crossings reported
    COINCIDENT = auto()
    # at least one candidate could not be refined and was dropped
    NON_CONVERGENT = auto()
    # more crossings were found than the result can hold
    CAPACITY_EXCEEDED = auto()


###############################################################################
# Functions
###############################################################################


def main() -> None:
    """Print the enum values."""
    for mode in ReduceOrderMode:
        print(mode, mode.value)
    print()
    for condition in IntersectionCondition:
        print(condition, condition.value)


if __name__ == "__main__":
    main()
