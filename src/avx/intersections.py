"""Result types of the intersection queries"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar, FrozenSet, Iterable, Iterator, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from avx.bezier import AvCubic
from avx.common import IntersectionCondition

logger = logging.getLogger(__name__)

TPair = Tuple[float, float]


###############################################################################
# AvIntersections
###############################################################################
@dataclass(frozen=True)
class AvIntersections:
    """
    Crossings of two cubics as parallel parameter tuples.

    t1 is ascending and t2[i] belongs to t1[i]. At most CAPACITY (9, the
    number of crossings two cubics can have) pairs are held.

    Attributes:
        t1 (Tuple[float, ...]): parameters on the first cubic
        t2 (Tuple[float, ...]): parameters on the second cubic
        conditions (FrozenSet[IntersectionCondition]): signalled conditions
        dropped (int): number of candidates that did not converge
    """

    CAPACITY: ClassVar[int] = 9

    t1: Tuple[float, ...] = ()
    t2: Tuple[float, ...] = ()
    conditions: FrozenSet[IntersectionCondition] = frozenset()
    dropped: int = 0

    def __post_init__(self):
        if len(self.t1) != len(self.t2):
            raise ValueError(f"t1 and t2 differ in length ({len(self.t1)} != {len(self.t2)})")
        if len(self.t1) > self.CAPACITY:
            raise ValueError(f"at most {self.CAPACITY} crossings, got {len(self.t1)}")

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[TPair],
        conditions: Iterable[IntersectionCondition] = (),
        dropped: int = 0,
        capacity: Optional[int] = None,
    ) -> AvIntersections:
        """
        Build a result from (t1, t2) pairs in any order.

        Pairs are sorted by t1. Pairs beyond capacity are cut off and
        CAPACITY_EXCEEDED is added to the conditions.

        Args:
            pairs (Iterable[TPair]): the crossings
            conditions (Iterable[IntersectionCondition], optional): conditions to attach. Defaults to ().
            dropped (int, optional): number of non-convergent candidates. Defaults to 0.
            capacity (Optional[int], optional): maximum number of pairs, at most CAPACITY. Defaults to CAPACITY.

        Returns:
            AvIntersections: the normalized result
        """
        limit = cls.CAPACITY if capacity is None else min(capacity, cls.CAPACITY)
        ordered: List[TPair] = sorted((float(t1), float(t2)) for t1, t2 in pairs)
        flags = set(conditions)
        if len(ordered) > limit:
            logger.warning("found %d crossings, keeping the first %d", len(ordered), limit)
            ordered = ordered[:limit]
            flags.add(IntersectionCondition.CAPACITY_EXCEEDED)
        return cls(
            tuple(t1 for t1, _ in ordered),
            tuple(t2 for _, t2 in ordered),
            frozenset(flags),
            dropped,
        )

    @property
    def used(self) -> int:
        """Number of crossings."""
        return len(self.t1)

    def __len__(self) -> int:
        return len(self.t1)

    def __iter__(self) -> Iterator[TPair]:
        return iter(zip(self.t1, self.t2))

    def pair(self, index: int) -> TPair:
        return (self.t1[index], self.t2[index])

    def pairs(self) -> List[TPair]:
        return list(zip(self.t1, self.t2))

    def intersected(self) -> bool:
        """True if at least one crossing was found."""
        return bool(self.t1)

    @property
    def coincident(self) -> bool:
        return IntersectionCondition.COINCIDENT in self.conditions

    @property
    def truncated(self) -> bool:
        return IntersectionCondition.CAPACITY_EXCEEDED in self.conditions

    def points(self, cubic1: AvCubic) -> NDArray[np.float64]:
        """Crossing points evaluated on the first cubic, shape (n, 2)."""
        return cubic1.evaluate_many(self.t1)

    def swapped(self) -> AvIntersections:
        """Same crossings with the roles of the two cubics exchanged."""
        return AvIntersections.from_pairs(zip(self.t2, self.t1), self.conditions, self.dropped)

    def __str__(self):
        pairs = ", ".join(f"({t1:.9g}, {t2:.9g})" for t1, t2 in self)
        flags = ", ".join(sorted(condition.name for condition in self.conditions))
        return f"AvIntersections([{pairs}], conditions=[{flags}], dropped={self.dropped})"


###############################################################################
# AvSelfIntersection
###############################################################################
@dataclass(frozen=True)
class AvSelfIntersection:
    """Result of a self-intersection check; t_a < t_b when found."""

    found: bool = False
    t_a: Optional[float] = None
    t_b: Optional[float] = None

    def __post_init__(self):
        if self.found:
            if self.t_a is None or self.t_b is None or not self.t_a < self.t_b:
                raise ValueError(f"a found self-intersection needs t_a < t_b, got ({self.t_a}, {self.t_b})")
        elif self.t_a is not None or self.t_b is not None:
            raise ValueError("parameters given for a self-intersection that was not found")

    def __bool__(self) -> bool:
        return self.found
