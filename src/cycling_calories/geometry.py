from collections.abc import Sequence

from cycling_calories.distance import track_distance
from cycling_calories.errors import InvalidTrackError
from cycling_calories.models import Location, TrackPoint, TrackSummary


def calculate_elevation_gain(points: Sequence[TrackPoint]) -> float:
    """Accumulate positive elevation deltas between consecutive points.

    Pairs where either point lacks elevation are skipped. Descents add
    nothing, so this is total climbing, not net elevation change.
    """
    gain = 0.0
    for i in range(1, len(points)):
        elev_prev = points[i - 1].elevation
        elev_curr = points[i].elevation
        if elev_prev is not None and elev_curr is not None and elev_curr > elev_prev:
            gain += elev_curr - elev_prev
    return gain


def calculate_duration_minutes(points: Sequence[TrackPoint]) -> float | None:
    """Minutes between the earliest and latest timestamps, or None if fewer than two."""
    times = [pt.time for pt in points if pt.time is not None]
    if len(times) < 2:
        return None
    return (max(times) - min(times)).total_seconds() / 60


def summarize_track(points: Sequence[TrackPoint]) -> TrackSummary:
    """Derive distance, duration, speed and elevation gain from raw points.

    Values are rounded here and nowhere else: distance to 2 decimals,
    elevation gain, duration and speed to 1 decimal. Speed is computed from
    the unrounded distance and duration.

    Raises:
        InvalidTrackError: If there are no points.
    """
    if not points:
        raise InvalidTrackError("No trackpoints found in track")

    distance_km = track_distance(points)
    elevation_gain = calculate_elevation_gain(points)
    duration = calculate_duration_minutes(points)
    # A zero-length time span gives no usable speed
    average_speed = distance_km / (duration / 60) if duration else None

    start_time = next((pt.time for pt in points if pt.time is not None), None)

    return TrackSummary(
        points=tuple(points),
        distance_km=round(distance_km, 2),
        duration_minutes=round(duration, 1) if duration is not None else None,
        elevation_gain_m=round(elevation_gain, 1),
        average_speed_kmh=round(average_speed, 1) if average_speed is not None else None,
        has_elevation=any(pt.elevation is not None for pt in points),
        start_location=Location(lat=points[0].lat, lon=points[0].lon),
        start_time=start_time,
    )
