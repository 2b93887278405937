from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class TrackPoint:
    lat: float
    lon: float
    elevation: float | None  # meters
    time: datetime | None


@dataclass(frozen=True)
class Location:
    lat: float
    lon: float


@dataclass(frozen=True)
class TrackSummary:
    """Derived metrics for one track. Never mutated; refinement builds a new one."""

    points: tuple[TrackPoint, ...] = field(repr=False)
    distance_km: float
    duration_minutes: float | None
    elevation_gain_m: float
    average_speed_kmh: float | None  # km/h
    has_elevation: bool
    start_location: Location
    start_time: datetime | None
    elevation_enhanced: bool = False

    def to_dict(self) -> dict:
        return {
            "distance_km": self.distance_km,
            "duration_minutes": self.duration_minutes,
            "elevation_gain_m": self.elevation_gain_m,
            "average_speed_kmh": self.average_speed_kmh,
            "has_elevation": self.has_elevation,
            "elevation_enhanced": self.elevation_enhanced,
            "start_location": asdict(self.start_location),
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "points_count": len(self.points),
        }


class WeatherSource(str, Enum):
    CURRENT = "current"
    HISTORICAL = "historical"
    CURRENT_FALLBACK = "current_fallback"
    DEFAULT = "default"
    FALLBACK = "fallback"
    MANUAL = "manual"  # conditions supplied by the caller


@dataclass(frozen=True)
class EnvironmentalConditions:
    wind_speed: float = 0.0  # m/s
    wind_direction_deg: float = 0.0
    humidity_pct: float = 50.0
    temperature_c: float = 20.0
    pressure_hpa: float | None = None
    source: WeatherSource = WeatherSource.DEFAULT
    date: str = "default"  # display label only

    def to_dict(self) -> dict:
        data = asdict(self)
        data["source"] = self.source.value
        return data


@dataclass(frozen=True)
class CalorieEstimate:
    total_calories: int
    base_calories: int
    elevation_calories: int
    wind_adjustment: int
    environmental_adjustment: int
    base_met: float
    calories_per_km: int
    calories_per_hour: int


class BreakdownFactor(str, Enum):
    BASE = "Base"
    ELEVATION = "Elevation"
    WIND = "Wind"
    ENVIRONMENTAL = "Environmental"


@dataclass(frozen=True)
class BreakdownEntry:
    factor: BreakdownFactor
    calories: int
    percentage: int  # independently rounded, need not sum to 100
    description: str


@dataclass(frozen=True)
class CalculationResult:
    summary: CalorieEstimate
    track: TrackSummary
    environment: EnvironmentalConditions
    breakdown: list[BreakdownEntry]
    location: Location

    def to_dict(self) -> dict:
        """Plain-JSON representation, used for export and the history store."""
        return {
            "summary": asdict(self.summary),
            "track": self.track.to_dict(),
            "environment": self.environment.to_dict(),
            "breakdown": [
                {
                    "factor": entry.factor.value,
                    "calories": entry.calories,
                    "percentage": entry.percentage,
                    "description": entry.description,
                }
                for entry in self.breakdown
            ],
            "location": asdict(self.location),
        }
