from dataclasses import replace

import pytest

from cycling_calories.formatters import (
    format_duration,
    format_report,
    format_ride_row,
    format_signed,
)


class TestFormatDuration:
    @pytest.mark.parametrize(
        "minutes, expected",
        [(None, "unknown"), (10.0, "10m"), (59.6, "1h 00m"), (95.0, "1h 35m"), (125.0, "2h 05m")],
    )
    def test_format(self, minutes, expected):
        assert format_duration(minutes) == expected


class TestFormatSigned:
    def test_positive(self):
        assert format_signed(47, "kcal") == "+47 kcal"

    def test_negative(self):
        assert format_signed(-5, "kcal") == "-5 kcal"


class TestFormatReport:
    def test_sections(self, scenario_result):
        report = format_report(scenario_result)
        assert report.startswith("CALORIE BURN RESULTS")
        assert "Total Calories:    117 kcal" in report
        assert "Distance:          0.22 km" in report
        assert "Duration:          10m" in report
        assert "Average Speed:     1.3 km/h" in report
        assert "Calories per km:   530 kcal/km" in report
        assert "Ride date: Sat Jun 15 2024" in report
        assert "Ride time: 08:00:00" in report
        assert "Base: +47 kcal (40%)" in report
        assert "Elevation: +70 kcal (60%)" in report
        assert "Data source: default" in report
        assert report.endswith("Using original GPX elevation data")

    def test_enhanced_and_undated(self, scenario_result):
        track = replace(scenario_result.track, elevation_enhanced=True, start_time=None)
        report = format_report(replace(scenario_result, track=track))
        assert "Ride date: No timestamp data in GPX file" in report
        assert report.endswith("Elevation data enhanced with DEM lookups")


class TestFormatRideRow:
    def test_row(self):
        ride = {
            "id": 3,
            "ride_date": "2024-06-15T08:00:00+00:00",
            "distance": 42.195,
            "elevation_gain": 512.4,
            "total_calories": 1234,
            "gpx_filename": "loop.gpx",
        }
        row = format_ride_row(ride)
        assert row.startswith("#3")
        assert "2024-06-15" in row
        assert "42.20 km" in row
        assert "512 m" in row
        assert "1234 kcal" in row
        assert row.endswith("loop.gpx")

    def test_row_without_date(self):
        ride = {"id": 1, "ride_date": None, "distance": 1.0, "elevation_gain": None, "total_calories": 30}
        assert "no date" in format_ride_row(ride)
