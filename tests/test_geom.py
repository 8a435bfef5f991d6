"""Test module for avx.geom

The tests are run using pytest.
These tests ensure that all functions and interfaces in src/avx/geom.py
remain working correctly after changes and refactoring.
"""

import numpy as np
import pytest

from avx.geom import AvBox, GeomMath

###############################################################################
# GeomMath Tests
###############################################################################


class TestGeomMath:
    """Test class for GeomMath functionality."""

    def test_cross_and_dot(self):
        """Test cross and dot product of 2D vectors."""
        assert GeomMath.cross((1.0, 0.0), (0.0, 1.0)) == 1.0
        assert GeomMath.cross((0.0, 1.0), (1.0, 0.0)) == -1.0
        assert GeomMath.dot((1.0, 2.0), (3.0, 4.0)) == 11.0

    def test_cross_accepts_arrays(self):
        """Test vector helpers with numpy input."""
        assert GeomMath.cross(np.array([2.0, 0.0]), np.array([0.0, 3.0])) == 6.0

    def test_distance(self):
        """Test euclidean distance."""
        assert GeomMath.distance((0.0, 0.0), (3.0, 4.0)) == 5.0

    def test_line_intersection(self):
        """Test crossing of two parametric lines."""
        params = GeomMath.line_intersection((0.0, 0.0), (2.0, 2.0), (0.0, 2.0), (2.0, -2.0))
        assert params == pytest.approx((0.5, 0.5))

    def test_line_intersection_outside_segments(self):
        """Test that parameters outside [0, 1] are returned unchanged."""
        s, u = GeomMath.line_intersection((0.0, 0.0), (1.0, 0.0), (3.0, -1.0), (0.0, 1.0))
        assert s == pytest.approx(3.0)
        assert u == pytest.approx(1.0)

    def test_line_intersection_parallel(self):
        """Test that parallel lines have no crossing."""
        assert GeomMath.line_intersection((0.0, 0.0), (1.0, 1.0), (0.0, 1.0), (2.0, 2.0)) is None


###############################################################################
# AvBox Tests
###############################################################################


class TestAvBox:
    """Test class for AvBox functionality."""

    def test_normalization(self):
        """Test that swapped coordinates are normalized."""
        box = AvBox(10.0, 20.0, 0.0, 5.0)
        assert box.extent == (0.0, 5.0, 10.0, 20.0)
        assert box.width == 10.0
        assert box.height == 15.0
        assert box.size == 15.0

    def test_from_points(self):
        """Test the smallest box around points."""
        box = AvBox.from_points([(1.0, 5.0), (-2.0, 3.0), (4.0, -1.0)])
        assert box.extent == (-2.0, -1.0, 4.0, 5.0)

    def test_from_points_empty(self):
        """Test that an empty point list is rejected."""
        with pytest.raises(ValueError):
            AvBox.from_points([])

    def test_overlaps(self):
        """Test overlap including touching boxes."""
        box = AvBox(0.0, 0.0, 10.0, 10.0)
        assert box.overlaps(AvBox(5.0, 5.0, 15.0, 15.0))
        assert box.overlaps(AvBox(10.0, 0.0, 20.0, 10.0))
        assert not box.overlaps(AvBox(10.5, 0.0, 20.0, 10.0))
        assert not box.overlaps(AvBox(0.0, -5.0, 10.0, -0.1))

    def test_union(self):
        """Test the union of two boxes."""
        box = AvBox(0.0, 0.0, 1.0, 1.0).union(AvBox(2.0, -1.0, 3.0, 0.5))
        assert box.extent == (0.0, -1.0, 3.0, 1.0)

    def test_dict_round_trip(self):
        """Test to_dict / from_dict."""
        box = AvBox(1.0, 2.0, 3.0, 4.0)
        data = box.to_dict()
        assert data == {"xmin": 1.0, "ymin": 2.0, "xmax": 3.0, "ymax": 4.0}
        assert AvBox.from_dict(data).extent == box.extent

    def test_str(self):
        """Test the string representation."""
        text = str(AvBox(0.0, 0.0, 2.0, 1.0))
        assert "width=2.0" in text
        assert "height=1.0" in text
