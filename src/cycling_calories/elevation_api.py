"""Refine track elevation with a DEM point-lookup API."""

import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Protocol

import requests

from cycling_calories.geometry import calculate_elevation_gain
from cycling_calories.models import TrackPoint, TrackSummary

logger = logging.getLogger(__name__)

GPXZ_POINT_URL = "https://api.gpxz.io/v1/elevation/point"

# Only the first points of a track are refined to keep API usage bounded
ELEVATION_MAX_POINTS = 1000
ELEVATION_BATCH_SIZE = 10
ELEVATION_BATCH_DELAY = 0.1  # seconds between batches
ELEVATION_TIMEOUT = 10  # seconds per request


class ElevationLookup(Protocol):
    def lookup(self, lat: float, lon: float) -> float | None:
        """Return elevation in meters, None if unknown. Raises on failure."""
        ...


class GpxzElevationClient:
    """GPXZ single-point elevation endpoint."""

    def __init__(self, api_key: str, url: str = GPXZ_POINT_URL, timeout: float = ELEVATION_TIMEOUT):
        self.api_key = api_key
        self.url = url
        self.timeout = timeout

    def lookup(self, lat: float, lon: float) -> float | None:
        response = requests.get(
            self.url,
            params={"lat": lat, "lon": lon},
            headers={"x-api-key": self.api_key},
            timeout=self.timeout,
        )
        response.raise_for_status()

        data = response.json()
        elevation = data.get("elevation")
        return float(elevation) if elevation is not None else None


def _refine_point(point: TrackPoint, client: ElevationLookup) -> tuple[TrackPoint, bool]:
    """Look up one point. Returns (point, succeeded); the original point on failure."""
    try:
        elevation = client.lookup(point.lat, point.lon)
    except (requests.RequestException, ValueError, TypeError) as e:
        logger.warning("Failed to get elevation for point %s, %s: %s", point.lat, point.lon, e)
        return point, False

    if elevation is None:
        logger.warning("No elevation returned for point %s, %s", point.lat, point.lon)
        return point, False
    return replace(point, elevation=elevation), True


def fetch_refined_points(
    points: tuple[TrackPoint, ...],
    client: ElevationLookup,
    max_points: int = ELEVATION_MAX_POINTS,
    batch_size: int = ELEVATION_BATCH_SIZE,
    batch_delay: float = ELEVATION_BATCH_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> tuple[list[TrackPoint], int]:
    """Refine up to max_points points, batch_size lookups in flight at a time.

    Points past max_points are passed through unchanged. Output order
    matches input order.

    Returns:
        (points, number of successful lookups)
    """
    to_refine = points[:max_points]
    refined: list[TrackPoint] = []
    succeeded = 0
    batch_count = (len(to_refine) + batch_size - 1) // batch_size

    with ThreadPoolExecutor(max_workers=batch_size) as executor:
        for i in range(0, len(to_refine), batch_size):
            batch = to_refine[i : i + batch_size]
            logger.debug("Processing elevation batch %d/%d", i // batch_size + 1, batch_count)

            for point, ok in executor.map(lambda pt: _refine_point(pt, client), batch):
                refined.append(point)
                succeeded += ok

            # Rate limiting between batches
            if i + batch_size < len(to_refine):
                sleep(batch_delay)

    refined.extend(points[len(to_refine):])
    return refined, succeeded


def enhance_elevation(
    summary: TrackSummary,
    client: ElevationLookup | None,
    max_points: int = ELEVATION_MAX_POINTS,
    batch_size: int = ELEVATION_BATCH_SIZE,
    batch_delay: float = ELEVATION_BATCH_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> TrackSummary:
    """Return a summary whose elevation comes from the lookup service.

    Elevation gain is recomputed over the refined points. If no client is
    configured, every lookup fails, or anything else goes wrong, the input
    summary is returned with elevation_enhanced=False. Never raises.
    """
    if client is None:
        logger.warning("No elevation API key provided, using original elevation data")
        return replace(summary, elevation_enhanced=False)

    try:
        points, succeeded = fetch_refined_points(
            summary.points, client, max_points, batch_size, batch_delay, sleep
        )
    except Exception as e:
        logger.warning("Failed to enhance elevation data: %s", e)
        return replace(summary, elevation_enhanced=False)

    if succeeded == 0:
        logger.warning("No elevation lookups succeeded, using original elevation data")
        return replace(summary, elevation_enhanced=False)

    logger.info("Enhanced %d of %d points with DEM elevation data", succeeded, len(points))
    return replace(
        summary,
        points=tuple(points),
        elevation_gain_m=round(calculate_elevation_gain(points), 1),
        has_elevation=any(pt.elevation is not None for pt in points),
        elevation_enhanced=True,
    )
