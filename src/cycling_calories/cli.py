import argparse
import json
import logging
import sys
from pathlib import Path

import gpxpy.gpx

from cycling_calories import __version_date__, get_git_hash
from cycling_calories.calculator import estimate
from cycling_calories.config import (
    CONFIG_PATH,
    CalculatorConfig,
    describe_config,
    load_config,
    set_config_value,
    unset_config_value,
)
from cycling_calories.errors import InvalidInputError, InvalidTrackError
from cycling_calories.formatters import format_report, format_ride_row
from cycling_calories.history import RideHistory
from cycling_calories.models import EnvironmentalConditions, WeatherSource
from cycling_calories.parser import parse_gpx

WEATHER_HINTS = {
    "wind_speed": "wind_speed",
    "wind_direction": "wind_direction_deg",
    "temperature": "temperature_c",
    "humidity": "humidity_pct",
}


def build_parser(config: CalculatorConfig) -> argparse.ArgumentParser:
    """Build argument parser with defaults from the loaded config."""
    parser = argparse.ArgumentParser(
        prog="cycling-calories",
        description="Elevation- and weather-adjusted calorie estimates for cycling GPX tracks.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"cycling-calories {__version_date__} ({get_git_hash()})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show progress and API diagnostics")
    parser.add_argument(
        "--history-file",
        default=config.history_path,
        help=f"Ride history file (default: {config.history_path})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    calc = subparsers.add_parser("calc", help="Estimate calories for a GPX file")
    calc.add_argument("gpx_file", help="Path to GPX file")
    calc.add_argument(
        "--weight",
        type=float,
        default=config.default_weight,
        help=f"Rider weight in kg (default: {config.default_weight})",
    )
    calc.add_argument("--wind-speed", type=float, help="Wind speed in m/s (skips weather lookup)")
    calc.add_argument("--wind-direction", type=float, help="Wind direction in degrees, 0 = headwind")
    calc.add_argument("--temperature", type=float, help="Temperature in °C")
    calc.add_argument("--humidity", type=float, help="Relative humidity in %%")
    calc.add_argument("--no-save", action="store_true", help="Don't store the result in ride history")
    calc.add_argument("--json", action="store_true", help="Print the result as JSON")

    history = subparsers.add_parser("history", help="List saved rides, newest first")
    history.add_argument("--limit", type=int, default=20, help="Number of rides to show (default: 20)")
    history.add_argument("--offset", type=int, default=0, help="Number of rides to skip")

    subparsers.add_parser("stats", help="Show totals over all saved rides")

    export = subparsers.add_parser("export", help="Export ride history to a JSON file")
    export.add_argument("output", help="Output JSON path")

    config_cmd = subparsers.add_parser("config", help="Show or change configuration")
    config_cmd.add_argument("action", choices=["list", "get", "set", "unset"])
    config_cmd.add_argument("key", nargs="?", help="Configuration key")
    config_cmd.add_argument("value", nargs="?", help="Value for 'set'")
    config_cmd.add_argument(
        "--file",
        default=str(CONFIG_PATH),
        help=f"Config file to modify (default: {CONFIG_PATH})",
    )
    return parser


def _environment_from_args(args: argparse.Namespace) -> EnvironmentalConditions | None:
    """Conditions from command line hints, or None to look them up."""
    hints = {
        field: getattr(args, arg)
        for arg, field in WEATHER_HINTS.items()
        if getattr(args, arg) is not None
    }
    if not hints:
        return None
    return EnvironmentalConditions(source=WeatherSource.MANUAL, date="manual", **hints)


def _run_calc(args: argparse.Namespace, config: CalculatorConfig) -> None:
    try:
        points = parse_gpx(args.gpx_file)
    except FileNotFoundError:
        print(f"Error: File not found: {args.gpx_file}", file=sys.stderr)
        sys.exit(1)
    except gpxpy.gpx.GPXException as e:
        print(f"Error parsing GPX file: {e}", file=sys.stderr)
        sys.exit(1)
    except InvalidTrackError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        result = estimate(args.weight, points, config=config, environment=_environment_from_args(args))
    except InvalidInputError as e:
        print(f"Error: cannot estimate calories: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_report(result))

    if not args.no_save:
        ride_id = RideHistory(args.history_file).save_ride(
            result, gpx_filename=Path(args.gpx_file).name, rider_weight=args.weight
        )
        if not args.json:
            print(f"\nSaved as ride #{ride_id}")


def _run_history(args: argparse.Namespace) -> None:
    rides = RideHistory(args.history_file).get_rides(limit=args.limit, offset=args.offset)
    if not rides:
        print("No rides saved yet.")
        return
    for ride in rides:
        print(format_ride_row(ride))


def _run_stats(args: argparse.Namespace) -> None:
    stats = RideHistory(args.history_file).get_statistics()
    print("=== Ride Statistics ===")
    print(f"Rides:          {stats['total_rides']}")
    print(f"Distance:       {stats['total_distance']:.1f} km")
    print(f"Duration:       {stats['total_duration'] / 60:.1f} h")
    print(f"Elevation Gain: {stats['total_elevation_gain']:.0f} m")
    print(f"Calories:       {stats['total_calories']} kcal")
    if stats["avg_speed"] is not None:
        print(f"Avg Speed:      {stats['avg_speed']:.1f} km/h")
    if stats["avg_calories_per_km"] is not None:
        print(f"Avg kcal/km:    {stats['avg_calories_per_km']:.1f}")
    if stats["first_ride"]:
        print(f"First ride:     {stats['first_ride'][:10]}")
        print(f"Last ride:      {stats['last_ride'][:10]}")


def _run_config(args: argparse.Namespace, config: CalculatorConfig) -> None:
    path = Path(args.file)
    described = describe_config(config)

    if args.action == "list":
        for key, value in described.items():
            print(f"{key} = {value}")
        return

    if not args.key:
        print(f"Error: '{args.action}' needs a configuration key", file=sys.stderr)
        sys.exit(1)
    if args.key not in described:
        print(f"Error: Unknown configuration key: {args.key}", file=sys.stderr)
        sys.exit(1)

    if args.action == "get":
        print(described[args.key])
    elif args.action == "set":
        if args.value is None:
            print("Error: 'set' needs a value", file=sys.stderr)
            sys.exit(1)
        try:
            set_config_value(args.key, args.value, path)
        except ValueError as e:
            print(f"Error: Invalid value for {args.key}: {e}", file=sys.stderr)
            sys.exit(1)
        print(f"Set {args.key} in {path}")
    elif unset_config_value(args.key, path):
        print(f"Removed {args.key} from {path}")
    else:
        print(f"{args.key} is not set in {path}")


def main(argv: list[str] | None = None) -> None:
    config = load_config()
    parser = build_parser(config)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "calc":
        _run_calc(args, config)
    elif args.command == "history":
        _run_history(args)
    elif args.command == "stats":
        _run_stats(args)
    elif args.command == "export":
        path = RideHistory(args.history_file).export_json(args.output)
        print(f"Exported ride history to {path}")
    elif args.command == "config":
        _run_config(args, config)
