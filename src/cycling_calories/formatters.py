"""Formatting utilities for display."""

from cycling_calories.models import CalculationResult


def format_duration(minutes: float | None) -> str:
    """Format minutes as Xh Ym string."""
    if minutes is None:
        return "unknown"
    total = int(round(minutes))
    hours, mins = divmod(total, 60)
    if hours > 0:
        return f"{hours}h {mins:02d}m"
    return f"{mins}m"


def format_signed(value: int, unit: str) -> str:
    """Format a value with an explicit sign, e.g. '+12 kcal'."""
    sign = "+" if value > 0 else ""
    return f"{sign}{value} {unit}"


def _heading(title: str) -> list[str]:
    return ["", title, "=" * len(title)]


def format_report(result: CalculationResult) -> str:
    """Multi-section plain-text report for one calculation."""
    summary = result.summary
    track = result.track
    weather = result.environment

    lines = ["CALORIE BURN RESULTS", "===================="]
    lines.append(f"Total Calories:    {summary.total_calories} kcal")
    lines.append(f"Distance:          {track.distance_km:.2f} km")
    lines.append(f"Duration:          {format_duration(track.duration_minutes)}")
    lines.append(f"Elevation Gain:    {track.elevation_gain_m:.1f} m")
    speed = f"{track.average_speed_kmh:.1f} km/h" if track.average_speed_kmh is not None else "unknown"
    lines.append(f"Average Speed:     {speed}")
    lines.append(f"Calories per km:   {summary.calories_per_km} kcal/km")
    lines.append(f"Calories per hour: {summary.calories_per_hour} kcal/h")

    lines += _heading("LOCATION & TIME")
    lines.append(f"Start coordinates: {result.location.lat:.6f}, {result.location.lon:.6f}")
    if track.start_time is not None:
        lines.append(f"Ride date: {track.start_time:%a %b %d %Y}")
        lines.append(f"Ride time: {track.start_time:%H:%M:%S}")
    else:
        lines.append("Ride date: No timestamp data in GPX file")

    lines += _heading("BREAKDOWN")
    for entry in result.breakdown:
        lines.append(f"{entry.factor.value}: {format_signed(entry.calories, 'kcal')} ({entry.percentage}%)")
        lines.append(f"  {entry.description}")

    lines += _heading("WEATHER CONDITIONS")
    lines.append(f"Date: {weather.date}")
    lines.append(f"Wind: {weather.wind_speed} m/s from {weather.wind_direction_deg:.0f}°")
    lines.append(f"Humidity: {weather.humidity_pct:.0f}%")
    lines.append(f"Temperature: {weather.temperature_c}°C")
    lines.append(f"Data source: {weather.source.value}")

    lines.append("")
    if track.elevation_enhanced:
        lines.append("Elevation data enhanced with DEM lookups")
    else:
        lines.append("Using original GPX elevation data")

    return "\n".join(lines)


def format_ride_row(ride: dict) -> str:
    """One-line summary of a stored ride."""
    date = (ride.get("ride_date") or "no date")[:10]
    return (
        f"#{ride['id']:<4} {date:<10}  {ride['distance']:>7.2f} km  "
        f"{ride['elevation_gain'] or 0:>6.0f} m  {ride['total_calories']:>5} kcal  "
        f"{ride.get('gpx_filename') or ''}"
    )
