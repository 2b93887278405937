import os
import tempfile

import pytest

from cycling_calories.errors import InvalidTrackError
from cycling_calories.parser import parse_gpx

SAMPLE_GPX_PATH = os.path.join(
    os.path.dirname(__file__), "..", "functional", "data", "sample_ride.gpx"
)


def _parse_content(gpx_content: str):
    with tempfile.NamedTemporaryFile(mode="w", suffix=".gpx", delete=False) as f:
        f.write(gpx_content)
    try:
        return parse_gpx(f.name)
    finally:
        os.unlink(f.name)


class TestParseGpx:
    def test_parse_sample_file(self):
        points = parse_gpx(SAMPLE_GPX_PATH)
        assert len(points) == 11
        assert points[0].lat == pytest.approx(45.0)
        assert points[0].lon == pytest.approx(9.0)
        assert points[0].elevation == pytest.approx(100.0)
        assert points[0].time is not None

    def test_all_points_have_elevation_and_time(self):
        points = parse_gpx(SAMPLE_GPX_PATH)
        for pt in points:
            assert pt.elevation is not None
            assert pt.time is not None

    def test_missing_elevation(self):
        points = _parse_content("""<?xml version="1.0"?>
        <gpx version="1.1" xmlns="http://www.topografix.com/GPX/1/1">
          <trk><trkseg>
            <trkpt lat="37.0" lon="-122.0">
              <time>2024-06-15T08:00:00Z</time>
            </trkpt>
          </trkseg></trk>
        </gpx>""")
        assert len(points) == 1
        assert points[0].elevation is None

    def test_missing_time(self):
        points = _parse_content("""<?xml version="1.0"?>
        <gpx version="1.1" xmlns="http://www.topografix.com/GPX/1/1">
          <trk><trkseg>
            <trkpt lat="37.0" lon="-122.0">
              <ele>100</ele>
            </trkpt>
          </trkseg></trk>
        </gpx>""")
        assert len(points) == 1
        assert points[0].time is None

    def test_segments_concatenated_in_order(self):
        points = _parse_content("""<?xml version="1.0"?>
        <gpx version="1.1" xmlns="http://www.topografix.com/GPX/1/1">
          <trk>
            <trkseg><trkpt lat="1.0" lon="1.0"></trkpt></trkseg>
            <trkseg><trkpt lat="2.0" lon="2.0"></trkpt><trkpt lat="3.0" lon="3.0"></trkpt></trkseg>
          </trk>
        </gpx>""")
        assert [pt.lat for pt in points] == [1.0, 2.0, 3.0]

    def test_empty_gpx(self):
        with pytest.raises(InvalidTrackError, match="No trackpoints found in GPX file"):
            _parse_content("""<?xml version="1.0"?>
            <gpx version="1.1" xmlns="http://www.topografix.com/GPX/1/1">
              <trk><trkseg></trkseg></trk>
            </gpx>""")

    def test_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            parse_gpx("/nonexistent/path/file.gpx")
