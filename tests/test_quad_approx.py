"""Test module for avx.quad_approx

The tests are run using pytest.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from avx.bezier import AvCubic
from avx.quad_approx import AvQuadraticApproximation, AvQuadSpan, cubic_to_quadratic_ts

LOOP = AvCubic([(0.0, 0.0), (150.0, 100.0), (-50.0, 100.0), (100.0, 0.0)])
S_CURVE = AvCubic([(0.0, 0.0), (100.0 / 3.0, 100.0), (200.0 / 3.0, -100.0), (100.0, 0.0)])
RAISED_QUAD = AvCubic([(0.0, 0.0), (100.0 / 3.0, 200.0 / 3.0), (200.0 / 3.0, 200.0 / 3.0), (100.0, 0.0)])


class TestAvQuadSpan:
    """Test class for the span parameter mapping."""

    def test_global_t(self):
        """Test that the span ends map exactly."""
        span = AvQuadSpan(S_CURVE.demote_to_quadratic(), 0.1, 0.7)
        assert span.global_t(0.0) == 0.1
        assert span.global_t(1.0) == 0.7
        assert span.global_t(0.5) == pytest.approx(0.4)
        assert span.width == pytest.approx(0.6)


class TestAvQuadraticApproximation:
    """Test class for the quadratic approximation of cubics."""

    @pytest.mark.parametrize("cubic", [LOOP, S_CURVE])
    def test_spans_cover_unit_interval(self, cubic):
        """Test spans are contiguous and ascending from 0 to 1."""
        spans = AvQuadraticApproximation(cubic, cubic.precision()).spans()
        assert spans[0].t_min == 0.0
        assert spans[-1].t_max == 1.0
        for previous, current in zip(spans[:-1], spans[1:]):
            assert previous.t_max == current.t_min
            assert current.t_min < current.t_max

    @pytest.mark.parametrize("cubic", [LOOP, S_CURVE])
    def test_span_end_points_on_cubic(self, cubic):
        """Test the end points of every span lie exactly on the cubic."""
        for span in AvQuadraticApproximation(cubic, cubic.precision()):
            assert span.quad[0] == cubic.evaluate(span.t_min)
            assert span.quad[2] == cubic.evaluate(span.t_max)

    @pytest.mark.parametrize("cubic", [LOOP, S_CURVE])
    def test_within_precision(self, cubic):
        """Test every span stays within the precision of the cubic."""
        precision = cubic.precision()
        us = np.linspace(0.0, 1.0, 33)
        for span in AvQuadraticApproximation(cubic, precision):
            expected = cubic.evaluate_many(span.t_min + us * (span.t_max - span.t_min))
            deviation = np.hypot(*(span.quad.evaluate_many(us) - expected).T)
            assert np.max(deviation) <= precision * (1 + 1e-9)

    def test_loop_span_count(self):
        """Test the loop needs eight spans at its default precision."""
        spans = AvQuadraticApproximation(LOOP, LOOP.precision()).spans()
        assert len(spans) == 8
        assert_allclose([span.t_min for span in spans], np.arange(8) / 8.0)

    def test_restartable(self):
        """Test that iterating twice yields the same spans."""
        approximation = AvQuadraticApproximation(LOOP, LOOP.precision())
        assert list(approximation) == list(approximation)

    def test_raised_quadratic_needs_one_span(self):
        """Test a cubic that is a quadratic is not split."""
        spans = AvQuadraticApproximation(RAISED_QUAD, RAISED_QUAD.precision()).spans()
        assert len(spans) == 1
        assert_allclose(spans[0].quad.points, [[0.0, 0.0], [50.0, 100.0], [100.0, 0.0]], atol=1e-9)

    def test_split_at_inflection(self):
        """Test the S-curve is split at its inflection."""
        ts = cubic_to_quadratic_ts(S_CURVE)
        assert any(abs(t - 0.5) < 1e-12 for t in ts)
        assert ts == sorted(ts)

    def test_max_depth_caps_bisection(self):
        """Test that depth 0 only splits at inflections."""
        assert len(AvQuadraticApproximation(LOOP, 0.0, max_depth=0).spans()) == 1
        assert len(AvQuadraticApproximation(S_CURVE, 0.0, max_depth=0).spans()) == 2
        assert len(AvQuadraticApproximation(LOOP, 0.0, max_depth=3).spans()) == 8

    def test_coarser_precision_gives_fewer_spans(self):
        """Test the span count follows the precision."""
        fine = AvQuadraticApproximation(LOOP, 0.01).spans()
        coarse = AvQuadraticApproximation(LOOP, 10.0).spans()
        assert len(coarse) < len(fine)

    def test_invalid_arguments(self):
        """Test negative precision and depth."""
        with pytest.raises(ValueError):
            AvQuadraticApproximation(LOOP, -1.0)
        with pytest.raises(ValueError):
            AvQuadraticApproximation(LOOP, 1.0, max_depth=-1)
