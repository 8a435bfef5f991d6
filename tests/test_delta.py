"""Test module for avx.delta

The tests are run using pytest.
"""

import math

import pytest

from avx.bezier import AvCubic
from avx.delta import AvDeltaEstimator

VERTICAL = AvCubic([(1.0, 4.0), (1.0, 8.0 / 3.0), (1.0, 4.0 / 3.0), (1.0, 0.0)])
FALLING = AvCubic([(0.0, 3.0), (1.0, 2.0), (2.0, 1.0), (3.0, 0.0)])
RISING = AvCubic([(3.5, 1.0), (2.5, 2.0), (1.5, 3.0), (0.5, 4.0)])
ARCH = AvCubic([(0.0, 0.0), (0.0, 100.0), (100.0, 100.0), (100.0, 0.0)])
HORIZONTAL = AvCubic([(0.0, 50.0), (100.0 / 3.0, 50.0), (200.0 / 3.0, 50.0), (100.0, 50.0)])


def residual(cubic1, t1, cubic2, t2):
    """Distance between the two curve points."""
    x1, y1 = cubic1.evaluate(t1)
    x2, y2 = cubic2.evaluate(t2)
    return math.hypot(x1 - x2, y1 - y2)


class TestAvDeltaEstimator:
    """Test class for the parameter corrections."""

    @pytest.mark.parametrize(
        "cubic1, t1, cubic2, t2, expected1, expected2",
        [
            (VERTICAL, 3.0 / 8.0, FALLING, 5.0 / 12.0, 1.0 / 2.0, 1.0 / 3.0),
            (VERTICAL, 6.0 / 8.0, RISING, 9.0 / 12.0, 1.0 / 8.0, 5.0 / 6.0),
        ],
    )
    def test_lines_are_solved_in_one_step(self, cubic1, t1, cubic2, t2, expected1, expected2):
        """Test that straight cubics reach the crossing with one correction."""
        delta1, delta2 = AvDeltaEstimator.compute_delta(cubic1, t1, cubic2, t2)
        assert t1 + delta1 == pytest.approx(expected1, abs=1e-12)
        assert t2 + delta2 == pytest.approx(expected2, abs=1e-12)

    def test_parallel_tangents(self):
        """Test that parallel tangents give no correction."""
        assert AvDeltaEstimator.compute_delta(FALLING, 0.3, RISING, 0.6) == (0.0, 0.0)

    def test_order_two_beats_order_one(self):
        """Test the Taylor parabolas on a curved crossing."""
        start1, start2 = 0.25, 0.15
        first = AvDeltaEstimator.compute_delta(ARCH, start1, HORIZONTAL, start2, order=1)
        second = AvDeltaEstimator.compute_delta(ARCH, start1, HORIZONTAL, start2, order=2)
        error1 = residual(ARCH, start1 + first[0], HORIZONTAL, start2 + first[1])
        error2 = residual(ARCH, start1 + second[0], HORIZONTAL, start2 + second[1])
        assert error2 < error1
        assert start1 + second[0] == pytest.approx(0.5 - math.sqrt(1.0 / 12.0), abs=1e-6)

    def test_scale_maps_local_parameters(self):
        """Test derivative scaling for a parameter running over half of the curve."""
        delta1, delta2 = AvDeltaEstimator.compute_delta(VERTICAL, 3.0 / 8.0, FALLING, 5.0 / 12.0, scale1=0.5)
        assert delta1 == pytest.approx(2.0 * (1.0 / 8.0), abs=1e-12)
        assert delta2 == pytest.approx(-1.0 / 12.0, abs=1e-12)

    def test_invalid_order(self):
        """Test that only orders 1 and 2 are accepted."""
        with pytest.raises(ValueError):
            AvDeltaEstimator.compute_delta(VERTICAL, 0.5, FALLING, 0.5, order=3)
