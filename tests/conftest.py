from datetime import datetime, timedelta, timezone

import pytest

from cycling_calories.calculator import estimate
from cycling_calories.models import EnvironmentalConditions, TrackPoint

BASE_TIME = datetime(2024, 6, 15, 8, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def scenario_points():
    """Three points ~111 m apart heading north: a climb then a short descent."""
    return [
        TrackPoint(lat=45.0, lon=9.0, elevation=100.0, time=BASE_TIME),
        TrackPoint(lat=45.001, lon=9.0, elevation=110.0, time=BASE_TIME + timedelta(minutes=5)),
        TrackPoint(lat=45.002, lon=9.0, elevation=105.0, time=BASE_TIME + timedelta(minutes=10)),
    ]


@pytest.fixture
def flat_track_points():
    """A short list of flat track points, ~100m apart, 20s apart."""
    return [
        TrackPoint(lat=37.7749, lon=-122.4194, elevation=10.0, time=BASE_TIME),
        TrackPoint(
            lat=37.7758,
            lon=-122.4183,
            elevation=10.0,
            time=BASE_TIME + timedelta(seconds=20),
        ),
        TrackPoint(
            lat=37.7767,
            lon=-122.4172,
            elevation=10.0,
            time=BASE_TIME + timedelta(seconds=40),
        ),
    ]


@pytest.fixture
def neutral_weather():
    """20°C, 50% humidity, no wind: no wind or environmental adjustment."""
    return EnvironmentalConditions()


@pytest.fixture
def scenario_result(scenario_points):
    """Calculation for the scenario track with no external services."""
    return estimate(70.0, scenario_points)


@pytest.fixture(autouse=True)
def no_api_keys(monkeypatch):
    """Keep developer API keys out of the tests."""
    monkeypatch.delenv("GPXZ_API_KEY", raising=False)
    monkeypatch.delenv("WEATHER_API_KEY", raising=False)
