#!/usr/bin/env python3
"""Benchmark script for cubic/cubic intersection and self-intersection."""

import timeit
from typing import Dict, List, Tuple

import numpy as np

from avx.bezier import AvCubic
from avx.cubic_intersect import intersect_cubics, self_intersect


def generate_test_pairs(count: int, seed: int = 7) -> List[Tuple[AvCubic, AvCubic]]:
    """Generate random cubic pairs inside a 100 x 100 square."""
    rng = np.random.default_rng(seed)
    return [
        (AvCubic(rng.uniform(0.0, 100.0, size=(4, 2))), AvCubic(rng.uniform(0.0, 100.0, size=(4, 2))))
        for _ in range(count)
    ]


def benchmark_intersections(pairs: List[Tuple[AvCubic, AvCubic]], repeats: int = 1) -> Dict[str, float]:
    """Time intersect_cubics and self_intersect over all pairs."""
    crossings = sum(len(intersect_cubics(cubic1, cubic2)) for cubic1, cubic2 in pairs)
    loops = sum(1 for cubic1, _ in pairs if self_intersect(cubic1))

    pair_time = timeit.timeit(lambda: [intersect_cubics(c1, c2) for c1, c2 in pairs], number=repeats)
    self_time = timeit.timeit(lambda: [self_intersect(c1) for c1, _ in pairs], number=repeats)

    return {
        "pairs": len(pairs),
        "crossings": crossings,
        "loops": loops,
        "pair_ms": pair_time * 1000 / repeats / len(pairs),
        "self_ms": self_time * 1000 / repeats / len(pairs),
    }


def main(count: int = 5):
    """Main"""
    pairs = generate_test_pairs(count)
    results = benchmark_intersections(pairs)

    print(f"{'Pairs':>6} | {'Crossings':>9} | {'Loops':>5} | {'Pair (ms)':>10} | {'Self (ms)':>10}")
    print("-" * 53)
    print(
        f"{results['pairs']:6d} | {results['crossings']:9d} | {results['loops']:5d} | "
        f"{results['pair_ms']:10.3f} | {results['self_ms']:10.3f}"
    )
    return results


if __name__ == "__main__":
    main(count=100)
