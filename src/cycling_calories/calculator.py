"""Calculation entry point: track points in, calorie estimate out."""

import logging
import time
from collections.abc import Callable, Sequence
from datetime import datetime

from cycling_calories.calories import calculate_calories, calorie_breakdown, check_model_inputs
from cycling_calories.config import CalculatorConfig
from cycling_calories.elevation_api import GpxzElevationClient, enhance_elevation
from cycling_calories.geometry import summarize_track
from cycling_calories.models import CalculationResult, EnvironmentalConditions, TrackPoint
from cycling_calories.parser import parse_gpx
from cycling_calories.weather import OpenWeatherClient, get_conditions

logger = logging.getLogger(__name__)


def elevation_client_from(config: CalculatorConfig) -> GpxzElevationClient | None:
    if not config.gpxz_api_key:
        return None
    return GpxzElevationClient(
        api_key=config.gpxz_api_key,
        url=config.gpxz_api_url,
        timeout=config.elevation_timeout,
    )


def weather_client_from(config: CalculatorConfig) -> OpenWeatherClient | None:
    if not config.weather_api_key:
        return None
    return OpenWeatherClient(
        api_key=config.weather_api_key,
        current_url=config.weather_api_url,
        historical_url=config.weather_historical_api_url,
        timeout=config.weather_timeout,
    )


def estimate(
    weight: float,
    points: Sequence[TrackPoint],
    config: CalculatorConfig | None = None,
    environment: EnvironmentalConditions | None = None,
    now: datetime | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> CalculationResult:
    """Estimate calories burned riding the given track.

    Args:
        weight: Rider weight in kg
        points: Track points in ride order
        config: API keys and tuning; defaults to no external services
        environment: Known conditions; skips the weather lookup when given
        now: Reference time for choosing historical weather (default: now)
        sleep: Delay function used between elevation batches

    Raises:
        InvalidTrackError: If points is empty.
        InvalidInputError: If weight is non-positive or the track has no
            distance, duration or speed.
    """
    if config is None:
        config = CalculatorConfig()

    track = summarize_track(points)
    logger.info(
        "Track: %.2f km, %s min, %d points", track.distance_km, track.duration_minutes, len(track.points)
    )
    # Elevation refinement leaves distance and time unchanged
    check_model_inputs(weight, track.distance_km, track.duration_minutes, track.average_speed_kmh)

    track = enhance_elevation(
        track,
        elevation_client_from(config),
        max_points=config.elevation_max_points,
        batch_size=config.elevation_batch_size,
        batch_delay=config.elevation_batch_delay,
        sleep=sleep,
    )
    logger.info("Elevation gain: %.1f m (enhanced=%s)", track.elevation_gain_m, track.elevation_enhanced)

    if environment is None:
        environment = get_conditions(
            track.start_location.lat,
            track.start_location.lon,
            track.start_time,
            weather_client_from(config),
            now=now,
        )
    logger.info(
        "Weather (%s): wind %s m/s, humidity %s%%, %s°C",
        environment.source.value,
        environment.wind_speed,
        environment.humidity_pct,
        environment.temperature_c,
    )

    summary = calculate_calories(
        weight=weight,
        distance_km=track.distance_km,
        duration_minutes=track.duration_minutes,
        elevation_gain_m=track.elevation_gain_m,
        average_speed_kmh=track.average_speed_kmh,
        weather=environment,
    )

    return CalculationResult(
        summary=summary,
        track=track,
        environment=environment,
        breakdown=calorie_breakdown(summary),
        location=track.start_location,
    )


def estimate_from_gpx(
    weight: float,
    gpx_path: str,
    config: CalculatorConfig | None = None,
    environment: EnvironmentalConditions | None = None,
) -> CalculationResult:
    """Parse a GPX file and run ``estimate`` on its points."""
    return estimate(weight, parse_gpx(gpx_path), config=config, environment=environment)
