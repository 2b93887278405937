"""Local ride history stored as a JSON file."""

from datetime import datetime, timezone
import json
import logging
from pathlib import Path

from cycling_calories.models import CalculationResult
from cycling_calories.weather import as_utc

logger = logging.getLogger(__name__)


def _ride_record(
    ride_id: int,
    result: CalculationResult,
    gpx_filename: str | None,
    rider_weight: float | None,
) -> dict:
    track = result.track
    summary = result.summary
    weather = result.environment
    return {
        "id": ride_id,
        "gpx_filename": gpx_filename,
        "rider_weight": rider_weight,
        "ride_date": as_utc(track.start_time).isoformat() if track.start_time else None,
        "created_at": datetime.now(timezone.utc).isoformat(),
        # Route
        "distance": track.distance_km,
        "duration": track.duration_minutes,
        "elevation_gain": track.elevation_gain_m,
        "average_speed": track.average_speed_kmh,
        "start_latitude": result.location.lat,
        "start_longitude": result.location.lon,
        # Calories
        "total_calories": summary.total_calories,
        "base_calories": summary.base_calories,
        "elevation_calories": summary.elevation_calories,
        "wind_adjustment": summary.wind_adjustment,
        "environmental_adjustment": summary.environmental_adjustment,
        "base_met": summary.base_met,
        "calories_per_km": summary.calories_per_km,
        "calories_per_hour": summary.calories_per_hour,
        # Weather
        "wind_speed": weather.wind_speed,
        "wind_direction": weather.wind_direction_deg,
        "humidity": weather.humidity_pct,
        "temperature": weather.temperature_c,
        "pressure": weather.pressure_hpa,
        "weather_source": weather.source.value,
        # Flags
        "elevation_enhanced": track.elevation_enhanced,
        "has_elevation_data": track.has_elevation,
        "breakdown": [
            {
                "factor": entry.factor.value,
                "calories": entry.calories,
                "percentage": entry.percentage,
                "description": entry.description,
            }
            for entry in result.breakdown
        ],
    }


def _ride_date(ride: dict) -> datetime:
    return as_utc(datetime.fromisoformat(ride["ride_date"]))


def _without_breakdown(ride: dict) -> dict:
    return {k: v for k, v in ride.items() if k != "breakdown"}


class RideHistory:
    """Saved calculation results, one JSON document per store."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {"next_id": 1, "rides": []}
        with self.path.open() as f:
            return json.load(f)

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        with tmp_path.open("w") as f:
            json.dump(data, f, indent=2)
        tmp_path.replace(self.path)

    def save_ride(
        self,
        result: CalculationResult,
        gpx_filename: str | None = None,
        rider_weight: float | None = None,
    ) -> int:
        """Store a result and return its new ride id."""
        data = self._load()
        ride_id = data["next_id"]
        data["rides"].append(_ride_record(ride_id, result, gpx_filename, rider_weight))
        data["next_id"] = ride_id + 1
        self._save(data)
        logger.info("Ride saved with ID %d", ride_id)
        return ride_id

    def get_rides(self, limit: int | None = None, offset: int = 0) -> list[dict]:
        """Rides newest first, without their breakdowns."""
        rides = sorted(self._load()["rides"], key=lambda r: (r["created_at"], r["id"]), reverse=True)
        rides = rides[offset:]
        if limit is not None:
            rides = rides[:limit]
        return [_without_breakdown(r) for r in rides]

    def get_rides_between(
        self, start: datetime, end: datetime, limit: int | None = None
    ) -> list[dict]:
        """Rides whose ride date falls in [start, end], most recent ride first.

        Naive bounds and ride dates are taken as UTC. Rides without a
        timestamp are never included.
        """
        start, end = as_utc(start), as_utc(end)
        rides = [
            r for r in self._load()["rides"]
            if r["ride_date"] is not None and start <= _ride_date(r) <= end
        ]
        rides.sort(key=_ride_date, reverse=True)
        if limit is not None:
            rides = rides[:limit]
        return [_without_breakdown(r) for r in rides]

    def get_breakdown(self, ride_id: int) -> list[dict]:
        """Breakdown of one ride, largest contribution first.

        Raises:
            KeyError: If no ride has this id.
        """
        for ride in self._load()["rides"]:
            if ride["id"] == ride_id:
                return sorted(ride["breakdown"], key=lambda b: b["calories"], reverse=True)
        raise KeyError(f"No ride with ID {ride_id}")

    def get_statistics(self) -> dict:
        """Totals and averages over all rides with a positive distance."""
        rides = [r for r in self._load()["rides"] if r["distance"] and r["distance"] > 0]
        speeds = [r["average_speed"] for r in rides if r["average_speed"] is not None]
        dated = sorted((r for r in rides if r["ride_date"]), key=_ride_date)
        ride_dates = [r["ride_date"] for r in dated]

        return {
            "total_rides": len(rides),
            "total_distance": sum(r["distance"] for r in rides),
            "total_duration": sum(r["duration"] or 0 for r in rides),
            "total_elevation_gain": sum(r["elevation_gain"] or 0 for r in rides),
            "total_calories": sum(r["total_calories"] for r in rides),
            "avg_speed": sum(speeds) / len(speeds) if speeds else None,
            "avg_calories_per_km": (
                sum(r["total_calories"] / r["distance"] for r in rides) / len(rides) if rides else None
            ),
            "first_ride": ride_dates[0] if ride_dates else None,
            "last_ride": ride_dates[-1] if ride_dates else None,
        }

    def export_json(self, output_path: Path | str) -> Path:
        """Write statistics and every ride, breakdown included, to one JSON file."""
        output_path = Path(output_path)
        rides = sorted(self._load()["rides"], key=lambda r: (r["created_at"], r["id"]), reverse=True)
        export = {
            "export_date": datetime.now(timezone.utc).isoformat(),
            "statistics": self.get_statistics(),
            "rides": rides,
        }
        with output_path.open("w") as f:
            json.dump(export, f, indent=2)
        logger.info("Data exported to %s", output_path)
        return output_path
