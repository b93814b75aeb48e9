"""
Tests for divvy/formulas/spatial.py.

Great-circle distance feeds the inverse-square draw weights; a wrong
distance silently changes which sites cluster around a seed.
"""

import math

import numpy as np
import pytest

from divvy.formulas.spatial import EARTH_RADIUS_KM, MAX_GREAT_CIRCLE_KM, haversine_km


class TestHaversine:
    """Haversine distance on the divvy sphere (lon, lat argument order)."""

    def test_same_point_returns_zero(self):
        assert haversine_km(73.0, 19.0, 73.0, 19.0) == 0.0

    def test_one_degree_longitude_at_equator(self):
        """1° of longitude at the equator = 2πR/360 on the sphere."""
        expected = 2 * math.pi * EARTH_RADIUS_KM / 360
        assert haversine_km(0, 0, 1, 0) == pytest.approx(expected, rel=1e-12)

    def test_longitude_wraparound(self):
        """179° and -179° are 2° apart, not 358°."""
        assert haversine_km(179, 0, -179, 0) == pytest.approx(
            haversine_km(0, 0, 2, 0), abs=1e-9)

    def test_antipodal_points(self):
        """Pole to pole is half the circumference."""
        assert haversine_km(0, 90, 0, -90) == pytest.approx(MAX_GREAT_CIRCLE_KM, abs=1e-6)

    def test_vectorised_against_scalar(self):
        """Array inputs broadcast against a scalar origin."""
        lons = np.array([0.0, 1.0, -179.0])
        lats = np.array([0.0, 1.0, 10.0])
        out = haversine_km(178.0, 5.0, lons, lats)
        assert out.shape == (3,)
        for i in range(3):
            assert out[i] == pytest.approx(haversine_km(178.0, 5.0, lons[i], lats[i]))

    def test_symmetry(self):
        d1 = haversine_km(73.0, 19.0, 79.0, 21.0)
        d2 = haversine_km(79.0, 21.0, 73.0, 19.0)
        assert d1 == pytest.approx(d2, abs=1e-10)
