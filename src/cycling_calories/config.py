"""Calculator configuration from JSON config files and environment variables."""

from dataclasses import dataclass, fields
import json
import os
from pathlib import Path

from cycling_calories.elevation_api import (
    ELEVATION_BATCH_DELAY,
    ELEVATION_BATCH_SIZE,
    ELEVATION_MAX_POINTS,
    ELEVATION_TIMEOUT,
    GPXZ_POINT_URL,
)
from cycling_calories.weather import (
    OPENWEATHER_CURRENT_URL,
    OPENWEATHER_HISTORICAL_URL,
    WEATHER_TIMEOUT,
)

CONFIG_DIR = Path.home() / ".config" / "cycling-calories"
CONFIG_PATH = CONFIG_DIR / "cycling-calories.json"
LOCAL_CONFIG_PATH = Path("cycling-calories.json")
DATA_DIR = Path.home() / ".local" / "share" / "cycling-calories"
HISTORY_PATH = DATA_DIR / "rides.json"

DEFAULT_WEIGHT = 70.0  # kg

SECRET_KEYS = {"gpxz_api_key", "weather_api_key"}

# Environment variables consulted when the config files don't set a key
ENV_VARS = {
    "gpxz_api_key": "GPXZ_API_KEY",
    "weather_api_key": "WEATHER_API_KEY",
}


@dataclass(frozen=True)
class CalculatorConfig:
    default_weight: float = DEFAULT_WEIGHT
    gpxz_api_key: str | None = None
    gpxz_api_url: str = GPXZ_POINT_URL
    elevation_timeout: float = ELEVATION_TIMEOUT
    elevation_max_points: int = ELEVATION_MAX_POINTS
    elevation_batch_size: int = ELEVATION_BATCH_SIZE
    elevation_batch_delay: float = ELEVATION_BATCH_DELAY
    weather_api_key: str | None = None
    weather_api_url: str = OPENWEATHER_CURRENT_URL
    weather_historical_api_url: str = OPENWEATHER_HISTORICAL_URL
    weather_timeout: float = WEATHER_TIMEOUT
    history_path: str = str(HISTORY_PATH)

    @classmethod
    def from_dict(cls, data: dict) -> "CalculatorConfig":
        """Build a config from raw key/values, ignoring unknown keys.

        Values are coerced to each field's type, so strings written by
        ``set_config_value`` round-trip.
        """
        kwargs = {}
        for f in fields(cls):
            if f.name not in data or data[f.name] is None:
                continue
            value = data[f.name]
            if f.type in ("float", float):
                value = float(value)
            elif f.type in ("int", int):
                value = int(value)
            else:
                value = str(value)
            kwargs[f.name] = value
        return cls(**kwargs)


def _read_config_files(paths: list[Path]) -> dict:
    """Merge JSON objects from the given files, later files overriding earlier ones."""
    config = {}
    for config_path in paths:
        if config_path.exists():
            try:
                with config_path.open() as f:
                    config.update(json.load(f))
            except (json.JSONDecodeError, OSError):
                continue
    return config


def _load_config() -> dict:
    """Load raw configuration.

    Merges config from global and local files:
    1. ~/.config/cycling-calories/cycling-calories.json (global, loaded first)
    2. ./cycling-calories.json (local, overrides global)

    API keys missing from both files are taken from GPXZ_API_KEY and
    WEATHER_API_KEY.
    """
    config = _read_config_files([CONFIG_PATH, LOCAL_CONFIG_PATH])
    for key, env_var in ENV_VARS.items():
        if not config.get(key) and os.environ.get(env_var):
            config[key] = os.environ[env_var]
    return config


def load_config() -> CalculatorConfig:
    return CalculatorConfig.from_dict(_load_config())


def _validate_key(key: str) -> None:
    if key not in {f.name for f in fields(CalculatorConfig)}:
        raise KeyError(f"Unknown configuration key: {key}")


def set_config_value(key: str, value: str, path: Path = CONFIG_PATH) -> None:
    """Persist one key to a config file, creating the file if needed.

    Raises:
        KeyError: If the key is not a CalculatorConfig field.
        ValueError: If the value can't be converted to the field's type.
    """
    _validate_key(key)
    config = _read_config_files([path])
    config[key] = value
    # Fails early on a bad value rather than writing an unloadable file
    CalculatorConfig.from_dict(config)

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        json.dump(config, f, indent=2)


def unset_config_value(key: str, path: Path = CONFIG_PATH) -> bool:
    """Remove a key from a config file. Returns False if it wasn't set."""
    _validate_key(key)
    config = _read_config_files([path])
    if key not in config:
        return False
    del config[key]
    with path.open("w") as f:
        json.dump(config, f, indent=2)
    return True


def mask_secret(value: str) -> str:
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"


def describe_config(config: CalculatorConfig) -> dict[str, str]:
    """Config values for display, with API keys masked."""
    described = {}
    for f in fields(config):
        value = getattr(config, f.name)
        if value is None:
            described[f.name] = "(not set)"
        elif f.name in SECRET_KEYS:
            described[f.name] = mask_secret(value)
        else:
            described[f.name] = str(value)
    return described
