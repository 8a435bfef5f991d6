"""Test module for avx.refine

The tests are run using pytest.
"""

import math

import pytest

from avx.bezier import AvCubic
from avx.coarse import AvCandidate
from avx.numerics import MAX_ULPS, almost_equal_ulps, zero_floor
from avx.refine import AvCubicChopper
from avx.settings import IntersectionSettings

S_CURVE = AvCubic([(0.0, 0.0), (100.0 / 3.0, 100.0), (200.0 / 3.0, -100.0), (100.0, 0.0)])
S_MIRROR = AvCubic([(0.0, 0.0), (100.0 / 3.0, -100.0), (200.0 / 3.0, 100.0), (100.0, 0.0)])
ARCH = AvCubic([(0.0, 0.0), (0.0, 100.0), (100.0, 100.0), (100.0, 0.0)])
HORIZONTAL = AvCubic([(0.0, 50.0), (100.0 / 3.0, 50.0), (200.0 / 3.0, 50.0), (100.0, 50.0)])
LOOP = AvCubic([(0.0, 0.0), (150.0, 100.0), (-50.0, 100.0), (100.0, 0.0)])


def assert_same_point(cubic1, t1, cubic2, t2):
    """Assert both curve points agree in single precision."""
    zero = zero_floor(max(cubic1.bounds().size, cubic2.bounds().size))
    x1, y1 = cubic1.evaluate(t1)
    x2, y2 = cubic2.evaluate(t2)
    assert almost_equal_ulps(x1, x2, MAX_ULPS, zero)
    assert almost_equal_ulps(y1, y2, MAX_ULPS, zero)


class TestAvCubicChopper:
    """Test class for the refinement of candidates."""

    def test_newton_converges(self):
        """Test a transversal crossing reached by the Newton steps."""
        chopper = AvCubicChopper(S_CURVE, S_MIRROR)
        candidate = AvCandidate(0.49, 0.52, (0.4375, 0.5), (0.5, 0.5625))
        t1, t2 = chopper.refine(candidate)
        assert t1 == pytest.approx(0.5, abs=1e-6)
        assert t2 == pytest.approx(0.5, abs=1e-6)
        assert_same_point(S_CURVE, t1, S_MIRROR, t2)
        assert chopper.calls == 0

    def test_exact_candidate_passes_through(self):
        """Test that exact candidates are returned unchanged."""
        chopper = AvCubicChopper(S_CURVE, S_MIRROR)
        assert chopper.refine(AvCandidate(1.0, 1.0, exact=True)) == (1.0, 1.0)
        assert chopper.calls == 0

    def test_parallel_lines_do_not_converge(self):
        """Test that a false candidate fails within the step cap."""
        low = AvCubic([(0.0, 0.0), (100.0 / 3.0, 0.0), (200.0 / 3.0, 0.0), (100.0, 0.0)])
        high = AvCubic([(0.0, 1.0), (100.0 / 3.0, 1.0), (200.0 / 3.0, 1.0), (100.0, 1.0)])
        chopper = AvCubicChopper(low, high)
        assert chopper.refine(AvCandidate(0.5, 0.5)) is None
        assert 0 < chopper.calls <= IntersectionSettings().max_chop_calls

    def test_chopping_without_newton(self):
        """Test the recursive halving alone reaches the crossing."""
        settings = IntersectionSettings(newton_steps=0)
        chopper = AvCubicChopper(ARCH, HORIZONTAL, settings)
        candidate = AvCandidate(0.2, 0.1, (0.125, 0.25), (0.0, 0.125))
        result = chopper.refine(candidate)
        assert result is not None
        t1, t2 = result
        assert t1 == pytest.approx(0.5 - math.sqrt(1.0 / 12.0), abs=1e-5)
        assert_same_point(ARCH, t1, HORIZONTAL, t2)
        assert 0 < chopper.calls <= settings.max_chop_calls

    def test_step_cap(self):
        """Test that a small call budget stops the halving."""
        settings = IntersectionSettings(newton_steps=0, max_chop_calls=1)
        chopper = AvCubicChopper(ARCH, HORIZONTAL, settings)
        assert chopper.refine(AvCandidate(0.2, 0.1, (0.125, 0.25), (0.0, 0.125))) is None
        assert chopper.calls == 1

    def test_separate_brackets(self):
        """Test refining the crossing of a loop with itself."""
        chopper = AvCubicChopper(LOOP, LOOP, separate=True)
        candidate = AvCandidate(0.17, 0.83, (0.125, 0.25), (0.75, 0.875))
        t_a, t_b = chopper.refine(candidate)
        assert t_a == pytest.approx(0.5 - math.sqrt(3.0 / 28.0), abs=1e-6)
        assert t_b == pytest.approx(0.5 + math.sqrt(3.0 / 28.0), abs=1e-6)
        assert_same_point(LOOP, t_a, LOOP, t_b)
