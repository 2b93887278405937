import gpxpy

from cycling_calories.errors import InvalidTrackError
from cycling_calories.models import TrackPoint


def parse_gpx(filepath: str) -> list[TrackPoint]:
    """Read every track point of a GPX file, tracks and segments in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        gpxpy.gpx.GPXException: If the file is not valid GPX.
        InvalidTrackError: If the file holds no track points.
    """
    with open(filepath, "r") as f:
        gpx = gpxpy.parse(f)

    points = [
        TrackPoint(lat=pt.latitude, lon=pt.longitude, elevation=pt.elevation, time=pt.time)
        for track in gpx.tracks
        for segment in track.segments
        for pt in segment.points
    ]
    if not points:
        raise InvalidTrackError("No trackpoints found in GPX file")
    return points
