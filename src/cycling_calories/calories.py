"""Calorie model: MET base estimate plus elevation, wind and environmental adjustments."""

import math

from cycling_calories.errors import InvalidInputError
from cycling_calories.models import (
    BreakdownEntry,
    BreakdownFactor,
    CalorieEstimate,
    EnvironmentalConditions,
)

# (upper speed bound in km/h, exclusive; MET)
MET_TABLE = [
    (16.0, 4.0),   # light effort
    (19.0, 6.8),   # moderate effort
    (22.0, 8.5),   # vigorous effort
    (25.0, 10.0),  # very vigorous
]
RACING_MET = 12.0

# Roughly 10 kcal per kg of body weight per 100 m climbed
ELEVATION_KCAL_PER_KG_PER_100M = 10.0

WIND_EXPONENT = 2.5
WIND_FACTOR_MIN = -0.3
WIND_FACTOR_MAX = 0.5

COMFORT_TEMP_MIN = 15.0  # °C
COMFORT_TEMP_MAX = 25.0  # °C
COLD_FACTOR_PER_DEGREE = 0.02
HEAT_FACTOR_PER_DEGREE = 0.015

NEUTRAL_HUMIDITY = 50.0  # %
HUMIDITY_FACTOR_PER_PCT = 0.002

# Breakdown entries at or below this magnitude are omitted
BREAKDOWN_MIN_CALORIES = 1


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return int(math.floor(value + 0.5))


def get_base_met(speed_kmh: float) -> float:
    """MET for cycling at the given average speed. Lower bounds are inclusive."""
    for upper, met in MET_TABLE:
        if speed_kmh < upper:
            return met
    return RACING_MET


def calculate_wind_resistance(speed_kmh: float, wind_speed: float, wind_direction_deg: float) -> float:
    """Fractional change in effort caused by wind.

    The rider is assumed to always face 0°, so a wind direction of 0° is a
    pure headwind and 180° a pure tailwind. The result is capped to
    [-30%, +50%].
    """
    headwind = wind_speed * math.cos(math.radians(wind_direction_deg))
    effective_speed = speed_kmh + headwind
    if effective_speed <= 0:
        # Tailwind faster than the rider: maximum assistance
        return WIND_FACTOR_MIN

    speed_factor = (effective_speed / speed_kmh) ** WIND_EXPONENT - 1
    return max(WIND_FACTOR_MIN, min(WIND_FACTOR_MAX, speed_factor))


def calculate_temperature_factor(temperature_c: float) -> float:
    """1.0 inside the comfort range, increasing linearly in cold and heat."""
    if COMFORT_TEMP_MIN <= temperature_c <= COMFORT_TEMP_MAX:
        return 1.0
    if temperature_c < COMFORT_TEMP_MIN:
        return 1.0 + (COMFORT_TEMP_MIN - temperature_c) * COLD_FACTOR_PER_DEGREE
    return 1.0 + (temperature_c - COMFORT_TEMP_MAX) * HEAT_FACTOR_PER_DEGREE


def calculate_humidity_factor(humidity_pct: float) -> float:
    return 1.0 + (humidity_pct - NEUTRAL_HUMIDITY) * HUMIDITY_FACTOR_PER_PCT


def check_model_inputs(
    weight: float,
    distance_km: float | None,
    duration_minutes: float | None,
    average_speed_kmh: float | None,
) -> None:
    """Raise InvalidInputError unless every divisor of the model is positive."""
    for name, value in [
        ("weight", weight),
        ("distance", distance_km),
        ("duration", duration_minutes),
        ("average speed", average_speed_kmh),
    ]:
        if value is None or value <= 0:
            raise InvalidInputError(f"{name} must be positive, got {value!r}")


def calculate_calories(
    weight: float,
    distance_km: float | None,
    duration_minutes: float | None,
    elevation_gain_m: float,
    average_speed_kmh: float | None,
    weather: EnvironmentalConditions,
) -> CalorieEstimate:
    """Estimate calories burned for a ride.

    Components are summed unrounded; the total and each component are
    rounded separately afterwards.

    Raises:
        InvalidInputError: If weight, distance, duration or speed is missing
            or non-positive.
    """
    check_model_inputs(weight, distance_km, duration_minutes, average_speed_kmh)

    hours = duration_minutes / 60
    base_met = get_base_met(average_speed_kmh)
    base_calories = base_met * weight * hours

    elevation_calories = (elevation_gain_m / 100) * weight * ELEVATION_KCAL_PER_KG_PER_100M

    wind_factor = calculate_wind_resistance(
        average_speed_kmh, weather.wind_speed, weather.wind_direction_deg
    )
    wind_adjustment = base_calories * wind_factor

    temp_factor = calculate_temperature_factor(weather.temperature_c)
    humidity_factor = calculate_humidity_factor(weather.humidity_pct)
    # Both factors are neutral at 1.0; subtracting 2 centers their sum on zero
    environmental_adjustment = base_calories * (temp_factor + humidity_factor - 2)

    total = base_calories + elevation_calories + wind_adjustment + environmental_adjustment

    return CalorieEstimate(
        total_calories=round_half_up(total),
        base_calories=round_half_up(base_calories),
        elevation_calories=round_half_up(elevation_calories),
        wind_adjustment=round_half_up(wind_adjustment),
        environmental_adjustment=round_half_up(environmental_adjustment),
        base_met=base_met,
        calories_per_km=round_half_up(total / distance_km),
        calories_per_hour=round_half_up(total / hours),
    )


def calorie_breakdown(estimate: CalorieEstimate) -> list[BreakdownEntry]:
    """Per-factor share of the total.

    Percentages are rounded independently and may not add up to 100.
    Factors contributing no more than 1 kcal either way are left out.
    """
    components = [
        (BreakdownFactor.BASE, estimate.base_calories, f"MET {estimate.base_met} cycling activity"),
        (BreakdownFactor.ELEVATION, estimate.elevation_calories, "Additional energy for climbing"),
        (BreakdownFactor.WIND, estimate.wind_adjustment, "Wind conditions impact"),
        (BreakdownFactor.ENVIRONMENTAL, estimate.environmental_adjustment, "Temperature and humidity effects"),
    ]

    entries = []
    for factor, calories, description in components:
        if abs(calories) <= BREAKDOWN_MIN_CALORIES:
            continue
        if estimate.total_calories:
            percentage = round_half_up(calories / estimate.total_calories * 100)
        else:
            percentage = 0
        entries.append(
            BreakdownEntry(
                factor=factor,
                calories=calories,
                percentage=percentage,
                description=description,
            )
        )
    return entries
