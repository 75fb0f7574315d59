"""
Unit tests for geohash encoding, range decomposition and distance.
"""
import math
import random

import pytest

from neighbo.core.geohash import (
    EARTH_RADIUS_KM,
    MAX_BAND_RANGES,
    distance_km,
    encode_geohash,
    geohash_query_bounds,
    validate_location,
)
from tests.helpers import destination


def covered(geohash: str, bounds) -> bool:
    return any(start <= geohash <= end for start, end in bounds)


def assert_disc_covered(rng: random.Random, lat: float, lng: float, radius: float, points: int = 25):
    """Random points inside the radius, biased towards the edge, must fall in some range."""
    bounds = geohash_query_bounds(lat, lng, radius)
    for _ in range(points):
        dist = radius * math.sqrt(rng.uniform(0.25, 1.0)) * 0.999
        p_lat, p_lng = destination(lat, lng, rng.uniform(0, 360), dist)
        assert distance_km(lat, lng, p_lat, p_lng) <= radius
        assert covered(encode_geohash(p_lat, p_lng), bounds), (lat, lng, radius, p_lat, p_lng)


class TestEncode:
    """Tests for encode_geohash."""

    def test_known_value(self):
        assert encode_geohash(57.64911, 10.40744) == "u4pruydqqv"

    def test_default_precision(self):
        assert len(encode_geohash(44.9778, -93.2650)) == 10

    def test_custom_precision_is_prefix(self):
        full = encode_geohash(44.9778, -93.2650)
        assert encode_geohash(44.9778, -93.2650, precision=5) == full[:5]

    def test_invalid_latitude(self):
        with pytest.raises(ValueError):
            encode_geohash(91, 0)

    def test_invalid_longitude(self):
        with pytest.raises(ValueError):
            validate_location(0, -180.5)

    def test_bounds_are_accepted(self):
        validate_location(90, 180)
        validate_location(-90, -180)


class TestDistance:
    """Tests for the haversine distance."""

    def test_same_point_is_zero(self):
        assert distance_km(44.9778, -93.2650, 44.9778, -93.2650) == 0

    def test_one_degree_of_latitude(self):
        expected = EARTH_RADIUS_KM * math.pi / 180
        assert distance_km(10, 20, 11, 20) == pytest.approx(expected, rel=1e-9)

    def test_symmetric(self):
        a = distance_km(44.9778, -93.2650, 44.9537, -93.0900)
        b = distance_km(44.9537, -93.0900, 44.9778, -93.2650)
        assert a == pytest.approx(b)


class TestQueryBounds:
    """Tests for geohash_query_bounds."""

    def test_rejects_non_positive_radius(self):
        with pytest.raises(ValueError):
            geohash_query_bounds(44.9778, -93.2650, 0)

    def test_rejects_invalid_centre(self):
        with pytest.raises(ValueError):
            geohash_query_bounds(120, 0, 5)

    def test_ranges_are_ordered_and_unique(self):
        bounds = geohash_query_bounds(44.9778, -93.2650, 5)
        assert 1 <= len(bounds) <= 9
        assert len(set(bounds)) == len(bounds)
        for start, end in bounds:
            assert start <= end

    def test_centre_is_covered(self):
        bounds = geohash_query_bounds(44.9778, -93.2650, 1)
        assert covered(encode_geohash(44.9778, -93.2650), bounds)

    def test_every_point_in_the_disc_is_covered(self):
        rng = random.Random(1234)
        for _ in range(300):
            assert_disc_covered(rng, rng.uniform(-89.99, 89.99), rng.uniform(-180, 180), rng.uniform(0.2, 50))

    def test_discs_across_the_date_line(self):
        rng = random.Random(180)
        for _ in range(150):
            lng = rng.choice([rng.uniform(179, 180), rng.uniform(-180, -179)])
            assert_disc_covered(rng, rng.uniform(-60, 60), lng, rng.uniform(0.2, 200))


class TestPolarBounds:
    """Discs near the poles are answered with whole latitude bands."""

    @pytest.mark.parametrize("hemisphere", [1, -1])
    def test_every_point_in_the_disc_is_covered(self, hemisphere):
        rng = random.Random(8599)
        for _ in range(200):
            lat = hemisphere * rng.uniform(85, 89.99)
            assert_disc_covered(rng, lat, rng.uniform(-180, 180), rng.uniform(0.05, 200), points=10)

    def test_far_side_of_the_pole(self):
        bounds = geohash_query_bounds(89.95, 20, 30)

        # About 17 km away, straight across the pole
        assert distance_km(89.95, 20, 89.9, -160) < 30
        assert covered(encode_geohash(89.9, -160), bounds)

    def test_band_stays_compact(self):
        bounds = geohash_query_bounds(88.695, -34.127, 124)

        assert 1 <= len(bounds) <= MAX_BAND_RANGES
        assert len(set(bounds)) == len(bounds)
        for start, end in bounds:
            assert start <= end

    @pytest.mark.parametrize("lat,lng,radius", [(0, 0, 9000), (40, 100, 5000), (-30, -170, 7000)])
    def test_discs_wider_than_a_hemisphere(self, lat, lng, radius):
        assert_disc_covered(random.Random(radius), lat, lng, radius, points=200)
