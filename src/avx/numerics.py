"""Numeric helpers: epsilon predicates, ULP equality and polynomial roots"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence

import numpy as np

###############################################################################
# Constants
###############################################################################

FLT_EPSILON: float = float(np.finfo(np.float32).eps)
DBL_EPSILON: float = float(np.finfo(np.float64).eps)
FLT_EPSILON_SQRT: float = math.sqrt(FLT_EPSILON)
FLT_EPSILON_SQUARED: float = FLT_EPSILON * FLT_EPSILON

MAX_ULPS: int = 16


###############################################################################
# Epsilon predicates
###############################################################################


def approximately_zero(x: float) -> bool:
    """True if |x| is below single precision epsilon."""
    return abs(x) < FLT_EPSILON


def precisely_zero(x: float) -> bool:
    """True if |x| is below double precision epsilon."""
    return abs(x) < DBL_EPSILON


def approximately_equal(x: float, y: float) -> bool:
    """True if x and y differ by less than single precision epsilon."""
    return approximately_zero(x - y)


def approximately_zero_or_more(x: float) -> bool:
    return x > -FLT_EPSILON


def approximately_one_or_less(x: float) -> bool:
    return x < 1.0 + FLT_EPSILON


def between(a: float, b: float, c: float) -> bool:
    """True if b lies in the closed interval spanned by a and c (in any order)."""
    return (a - b) * (c - b) <= 0.0


###############################################################################
# ULP equality
###############################################################################


def _ordered_bits(value: float) -> int:
    """Map a float32 onto an integer line that is monotonic in the float value."""
    bits = int(np.float32(value).view(np.int32))
    if bits < 0:
        bits = -(2**31) - bits
    return bits


def ulps_diff(a: float, b: float) -> int:
    """
    Number of representable single precision floats between a and b.

    Both values are rounded to float32 first. +0.0 and -0.0 are 0 ULPs apart.

    Args:
        a (float): first value
        b (float): second value

    Returns:
        int: the distance in units of least precision
    """
    return abs(_ordered_bits(a) - _ordered_bits(b))


def zero_floor(size: float, max_ulps: int = MAX_ULPS) -> float:
    """
    Magnitude below which coordinates of a curve of the given size count as zero.

    It is max_ulps single precision steps of a value FLT_EPSILON * size, so it
    shrinks with the curve and is 0.0 for a curve of size 0.

    Args:
        size (float): size of the curves being compared
        max_ulps (int, optional): Allowed distance in ULPs. Defaults to 16.

    Returns:
        float: the zero floor to pass to almost_equal_ulps()
    """
    return max_ulps * FLT_EPSILON_SQUARED * abs(size)


def almost_equal_ulps(a: float, b: float, max_ulps: int = MAX_ULPS, zero: float = 0.0) -> bool:
    """
    Compare two values in single precision, allowing max_ulps steps of difference.

    Values that are both within zero of 0.0 compare equal, otherwise noise
    around 0.0 would be millions of ULPs apart. The floor is absolute, so
    callers derive it from the size of their curves, see zero_floor().
    Non-finite values are never equal.

    Args:
        a (float): first value
        b (float): second value
        max_ulps (int, optional): Allowed distance in ULPs. Defaults to 16.
        zero (float, optional): magnitude below which both values count as 0.0.
            Defaults to 0.0.

    Returns:
        bool: True if the values are equal within the given ULPs
    """
    fa = np.float32(a)
    fb = np.float32(b)
    if not (np.isfinite(fa) and np.isfinite(fb)):
        return False
    if fa == fb:
        return True
    if abs(fa) <= zero and abs(fb) <= zero:
        return True
    return ulps_diff(a, b) <= max_ulps


###############################################################################
# Roots
###############################################################################


def cube_root(x: float) -> float:
    """Real cube root, keeping the sign of x."""
    return float(np.cbrt(x))


def quadratic_roots(a: float, b: float, c: float) -> List[float]:
    """
    All real roots of a*t^2 + b*t + c, ascending.

    Uses the cancellation-free form of the quadratic formula. Degenerates to
    the linear solution when a is negligible against the other coefficients.
    A slightly negative discriminant (within FLT_EPSILON squared after
    normalization) is treated as a double root.

    Args:
        a (float): coefficient of t^2
        b (float): coefficient of t
        c (float): constant coefficient

    Returns:
        List[float]: 0, 1 or 2 real roots
    """
    scale = max(abs(a), abs(b), abs(c))
    if scale == 0.0 or not math.isfinite(scale):
        return []
    if abs(a) <= scale * DBL_EPSILON:
        if abs(b) <= scale * DBL_EPSILON:
            return []
        return [-c / b]

    p = b / (2.0 * a)
    q = c / a
    discriminant = p * p - q
    if discriminant < 0.0:
        if discriminant < -FLT_EPSILON_SQUARED:
            return []
        discriminant = 0.0
    root_d = math.sqrt(discriminant)
    if root_d == 0.0:
        return [-p]
    root1 = -p - math.copysign(root_d, p)
    root2 = q / root1
    return sorted((root1, root2))


def _polish(coefficients: np.ndarray, derivative: np.ndarray, root: float, steps: int = 2) -> float:
    """Newton polish a root; keep the step only while the residual shrinks."""
    value = abs(np.polyval(coefficients, root))
    for _ in range(steps):
        if value == 0.0:
            break
        slope = np.polyval(derivative, root)
        if slope == 0.0:
            break
        candidate = root - np.polyval(coefficients, root) / slope
        candidate_value = abs(np.polyval(coefficients, candidate))
        if candidate_value >= value:
            break
        root, value = candidate, candidate_value
    return float(root)


def real_roots(coefficients: Sequence[float], imag_tolerance: float = FLT_EPSILON_SQRT) -> List[float]:
    """
    Real roots of a polynomial, ascending.

    Coefficients are ordered from the highest degree down, as for numpy.roots.
    Leading coefficients that are negligible relative to the largest one are
    trimmed before solving; the roots are then Newton polished on the full
    polynomial. Complex roots whose imaginary part is within imag_tolerance
    (relative to max(1, |real part|)) are kept as real, which preserves
    near-tangent double roots.

    Args:
        coefficients (Sequence[float]): polynomial coefficients, highest degree first
        imag_tolerance (float, optional): tolerance on the imaginary part. Defaults to FLT_EPSILON_SQRT.

    Returns:
        List[float]: the real roots
    """
    full = np.asarray(coefficients, dtype=np.float64)
    if full.ndim != 1:
        raise ValueError(f"coefficients must be one-dimensional, got shape {full.shape}")
    if full.size == 0 or not np.all(np.isfinite(full)):
        return []
    scale = float(np.max(np.abs(full)))
    if scale == 0.0:
        return []
    full = full / scale

    first = 0
    while first < full.size - 1 and abs(full[first]) <= FLT_EPSILON:
        first += 1
    trimmed = full[first:]
    degree = trimmed.size - 1
    if degree == 0:
        return []
    if degree == 1:
        estimates = [-trimmed[1] / trimmed[0]]
    elif degree == 2:
        estimates = quadratic_roots(trimmed[0], trimmed[1], trimmed[2])
    else:
        roots = np.roots(trimmed)
        keep = np.abs(roots.imag) <= imag_tolerance * np.maximum(1.0, np.abs(roots.real))
        estimates = [float(root) for root in roots[keep].real]

    derivative = np.polyder(full)
    return sorted(_polish(full, derivative, root) for root in estimates)


def valid_unit_roots(roots: Iterable[float], epsilon: float = FLT_EPSILON) -> List[float]:
    """
    Keep the roots that lie in [0, 1] within epsilon, clamped into the interval.

    Args:
        roots (Iterable[float]): candidate roots
        epsilon (float, optional): tolerance outside of the unit interval. Defaults to FLT_EPSILON.

    Returns:
        List[float]: sorted, duplicate free roots inside [0, 1]
    """
    result: List[float] = []
    for root in sorted(roots):
        if not -epsilon <= root <= 1.0 + epsilon:
            continue
        root = min(max(root, 0.0), 1.0)
        if result and result[-1] == root:
            continue
        result.append(root)
    return result


def main():
    """Main"""
    print("FLT_EPSILON:", FLT_EPSILON)
    print("DBL_EPSILON:", DBL_EPSILON)
    print("ulps 1.0 .. 1.0 + FLT_EPSILON:", ulps_diff(1.0, 1.0 + FLT_EPSILON))
    print("roots (t - 0.25)(t - 0.5)(t - 2):", real_roots(np.poly([0.25, 0.5, 2.0])))


if __name__ == "__main__":
    main()
