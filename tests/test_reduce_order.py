"""Test module for avx.reduce_order

The tests are run using pytest.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from avx.bezier import AvCubic
from avx.common import ReduceOrderMode
from avx.reduce_order import AvOrderReducer, AvReducedCurve

RAISED_QUAD = [(0.0, 0.0), (100.0 / 3.0, 200.0 / 3.0), (200.0 / 3.0, 200.0 / 3.0), (100.0, 0.0)]


class TestAvOrderReducer:
    """Test class for the order classification."""

    def test_point(self):
        """Test a cubic collapsed onto one point."""
        reduced = AvOrderReducer.reduce(AvCubic([(3.0, 4.0)] * 4))
        assert reduced.order == 1
        assert_allclose(reduced.points, [[3.0, 4.0]])
        assert reduced.is_degenerate

    def test_line(self):
        """Test evenly spaced collinear control points."""
        reduced = AvOrderReducer.reduce(AvCubic([(0.0, 0.0), (1.0, 1.0), (2.0, 2.0), (3.0, 3.0)]))
        assert reduced.order == 2
        assert_allclose(reduced.points, [[0.0, 0.0], [3.0, 3.0]])

    def test_line_overshooting_end_points(self):
        """Test that the reduced line spans the extreme control points."""
        reduced = AvOrderReducer.reduce(AvCubic([(0.0, 0.0), (-10.0, 0.0), (20.0, 0.0), (10.0, 0.0)]))
        assert reduced.order == 2
        assert_allclose(reduced.points, [[-10.0, 0.0], [20.0, 0.0]])

    def test_closed_line(self):
        """Test a line that returns to its start point."""
        reduced = AvOrderReducer.reduce(AvCubic([(0.0, 0.0), (5.0, 5.0), (10.0, 10.0), (0.0, 0.0)]))
        assert reduced.order == 2
        assert_allclose(reduced.points, [[0.0, 0.0], [10.0, 10.0]])

    def test_quadratic_allowed(self):
        """Test a raised quadratic reduces to its quadratic."""
        reduced = AvOrderReducer.reduce(AvCubic(RAISED_QUAD), ReduceOrderMode.ALLOW_QUADRATICS)
        assert reduced.order == 3
        assert_allclose(reduced.points, [[0.0, 0.0], [50.0, 100.0], [100.0, 0.0]], atol=1e-9)
        assert_allclose(reduced.as_quadratic().evaluate(0.3), AvCubic(RAISED_QUAD).evaluate(0.3), atol=1e-9)

    def test_quadratic_not_allowed(self):
        """Test that without quadratics the raised quadratic stays a cubic."""
        reduced = AvOrderReducer.reduce(AvCubic(RAISED_QUAD), ReduceOrderMode.NO_QUADRATICS)
        assert reduced.order == 4
        assert_allclose(reduced.points, RAISED_QUAD)
        assert not reduced.is_degenerate

    @pytest.mark.parametrize("mode", list(ReduceOrderMode))
    def test_reduction_pair_stays_cubic(self, mode):
        """Test two genuine cubics sharing an end point keep order 4."""
        cubic1 = AvCubic([(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)])
        cubic2 = AvCubic([(1.0, 0.0), (0.0, 0.0), (0.0, 1.0), (1.0, 1.0)])
        assert AvOrderReducer.reduce(cubic1, mode).order == 4
        assert AvOrderReducer.reduce(cubic2, mode).order == 4

    def test_tolerance_scales_with_size(self):
        """Test that collinearity is judged relative to the curve size."""
        almost_line = np.array([(0.0, 0.0), (100.0, 1e-6), (200.0, 0.0), (300.0, 0.0)])
        assert AvOrderReducer.reduce(AvCubic(almost_line)).order == 2
        assert AvOrderReducer.reduce(AvCubic(almost_line / 1e3)).order == 2
        assert AvOrderReducer.reduce(AvCubic(almost_line * 1e3)).order == 2
        bent = [(0.0, 0.0), (100.0, 1e-2), (200.0, 0.0), (300.0, 0.0)]
        assert AvOrderReducer.reduce(AvCubic(bent)).order == 4


class TestAvReducedCurve:
    """Test class for the reduction result."""

    def test_invalid_order(self):
        """Test that unknown orders are rejected."""
        with pytest.raises(ValueError):
            AvReducedCurve(5, np.zeros((5, 2)))

    def test_point_count_must_match(self):
        """Test that the point count must equal the order."""
        with pytest.raises(ValueError):
            AvReducedCurve(2, np.zeros((3, 2)))

    def test_as_quadratic_only_for_order_three(self):
        """Test as_quadratic on a cubic."""
        reduced = AvOrderReducer.reduce(AvCubic([(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)]))
        with pytest.raises(ValueError):
            reduced.as_quadratic()

    def test_points_read_only(self):
        """Test the reduced points cannot be modified."""
        reduced = AvOrderReducer.reduce(AvCubic([(3.0, 4.0)] * 4))
        with pytest.raises(ValueError, match="assignment destination is read-only"):
            reduced.points[0, 0] = 1.0
