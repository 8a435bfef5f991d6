"""Test module comparing avx.cubic_intersect with other libraries

The tests are run using pytest.
Crossings are compared with the intersection of densely sampled polylines
(shapely) and with the subdivision based intersection of svgpathtools.
"""

import numpy as np
import pytest

from avx.bezier import AvCubic
from avx.cubic_intersect import intersect_cubics

S_CURVE = AvCubic([(0.0, 0.0), (100.0 / 3.0, 100.0), (200.0 / 3.0, -100.0), (100.0, 0.0)])
WAVE = AvCubic([(0.0, 20.0), (40.0, -60.0), (60.0, 60.0), (100.0, -20.0)])
ARCH = AvCubic([(0.0, 0.0), (0.0, 100.0), (100.0, 100.0), (100.0, 0.0)])
RIPPLE = AvCubic([(0.0, -30.0), (30.0, 120.0), (70.0, -20.0), (100.0, 90.0)])

PAIRS = [(S_CURVE, WAVE), (ARCH, RIPPLE), (WAVE, ARCH)]


def nearest_distance(point, points):
    """Distance from point to the closest of points."""
    return float(np.min(np.hypot(points[:, 0] - point[0], points[:, 1] - point[1])))


class TestShapelyOracle:
    """Test class comparing crossing points with polyline intersections."""

    @pytest.mark.parametrize("cubic1, cubic2", PAIRS)
    def test_points_match_polylines(self, cubic1, cubic2):
        """Test both point sets agree within the polyline error."""
        geometry = pytest.importorskip("shapely.geometry")
        ts = np.linspace(0.0, 1.0, 2000)
        line1 = geometry.LineString(cubic1.evaluate_many(ts))
        line2 = geometry.LineString(cubic2.evaluate_many(ts))
        crossing = line1.intersection(line2)
        oracle = np.array([(point.x, point.y) for point in getattr(crossing, "geoms", [crossing])])

        result = intersect_cubics(cubic1, cubic2)
        ours = result.points(cubic1)
        assert len(ours) == len(oracle)
        for point in ours:
            assert nearest_distance(point, oracle) < 0.05
        for point in oracle:
            assert nearest_distance(point, ours) < 0.05


class TestSvgpathtoolsOracle:
    """Test class comparing parameters with svgpathtools."""

    @pytest.mark.parametrize("cubic1, cubic2", PAIRS)
    def test_svgpathtools_pairs_found(self, cubic1, cubic2):
        """Test every parameter pair svgpathtools finds is also found here.

        svgpathtools may miss crossings, e.g. two of the three of S_CURVE and
        WAVE, so only that direction is compared.
        """
        svgpathtools = pytest.importorskip("svgpathtools")
        segment1 = svgpathtools.CubicBezier(*(complex(x, y) for x, y in cubic1.points))
        segment2 = svgpathtools.CubicBezier(*(complex(x, y) for x, y in cubic2.points))
        oracle = np.array(segment1.intersect(segment2), dtype=np.float64).reshape(-1, 2)

        ours = np.array(intersect_cubics(cubic1, cubic2).pairs(), dtype=np.float64).reshape(-1, 2)
        assert len(ours) >= len(oracle) > 0
        for pair in oracle:
            assert nearest_distance(pair, ours) < 1e-5
