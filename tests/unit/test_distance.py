import math

import pytest

from cycling_calories.distance import EARTH_RADIUS_KM, haversine_distance, track_distance
from cycling_calories.models import TrackPoint

ONE_DEGREE_KM = EARTH_RADIUS_KM * math.pi / 180  # ~111.195 km


class TestHaversineDistance:
    def test_same_point_is_zero(self):
        assert haversine_distance(45.0, 9.0, 45.0, 9.0) == 0.0

    def test_one_degree_of_longitude_at_equator(self):
        assert haversine_distance(0.0, 0.0, 0.0, 1.0) == pytest.approx(ONE_DEGREE_KM)

    def test_one_degree_of_latitude(self):
        assert haversine_distance(0.0, 0.0, 1.0, 0.0) == pytest.approx(ONE_DEGREE_KM)

    def test_small_latitude_step(self):
        assert haversine_distance(45.0, 9.0, 45.001, 9.0) == pytest.approx(0.1111949, rel=1e-5)

    def test_longitude_shrinks_with_latitude(self):
        at_60 = haversine_distance(60.0, 0.0, 60.0, 1.0)
        assert at_60 == pytest.approx(ONE_DEGREE_KM / 2, rel=1e-3)

    def test_paris_to_london(self):
        assert haversine_distance(48.8566, 2.3522, 51.5074, -0.1278) == pytest.approx(343.5, abs=0.5)

    def test_symmetric(self):
        there = haversine_distance(48.8566, 2.3522, 51.5074, -0.1278)
        back = haversine_distance(51.5074, -0.1278, 48.8566, 2.3522)
        assert there == pytest.approx(back)


class TestTrackDistance:
    def test_sum_of_legs(self):
        points = [
            TrackPoint(lat=0.0, lon=0.0, elevation=None, time=None),
            TrackPoint(lat=0.0, lon=1.0, elevation=None, time=None),
            TrackPoint(lat=1.0, lon=1.0, elevation=None, time=None),
        ]
        expected = haversine_distance(0.0, 0.0, 0.0, 1.0) + haversine_distance(0.0, 1.0, 1.0, 1.0)
        assert track_distance(points) == pytest.approx(expected)
        assert track_distance(points) == pytest.approx(2 * ONE_DEGREE_KM)

    def test_single_point(self):
        assert track_distance([TrackPoint(lat=1.0, lon=1.0, elevation=None, time=None)]) == 0.0

    def test_out_and_back_counts_both_ways(self):
        points = [
            TrackPoint(lat=45.0, lon=9.0, elevation=None, time=None),
            TrackPoint(lat=45.01, lon=9.0, elevation=None, time=None),
            TrackPoint(lat=45.0, lon=9.0, elevation=None, time=None),
        ]
        one_way = haversine_distance(45.0, 9.0, 45.01, 9.0)
        assert track_distance(points) == pytest.approx(2 * one_way)
