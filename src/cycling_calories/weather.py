"""Wind, temperature and humidity for a ride's location and date."""

import logging
from datetime import datetime, timedelta, timezone

import requests

from cycling_calories.errors import WeatherUnauthorizedError
from cycling_calories.models import EnvironmentalConditions, WeatherSource

logger = logging.getLogger(__name__)

OPENWEATHER_CURRENT_URL = "http://api.openweathermap.org/data/2.5/weather"
OPENWEATHER_HISTORICAL_URL = "http://api.openweathermap.org/data/3.0/onecall/timemachine"
WEATHER_TIMEOUT = 10  # seconds

# Rides older than this use the historical endpoint
HISTORICAL_THRESHOLD = timedelta(days=5)

DEFAULT_WIND_SPEED = 0.0
DEFAULT_WIND_DIRECTION = 0.0
DEFAULT_HUMIDITY = 50.0
DEFAULT_TEMPERATURE = 20.0
DEFAULT_PRESSURE = 1013.0

HISTORICAL_UNAVAILABLE_LABEL = "current (historical unavailable)"

# Failed requests and malformed payloads are all treated as a failed lookup
_LOOKUP_ERRORS = (requests.RequestException, KeyError, IndexError, TypeError, ValueError, AttributeError)


class OpenWeatherClient:
    """OpenWeatherMap current weather and One Call time machine endpoints.

    Both methods return a flat dict with optional keys wind_speed, wind_deg,
    humidity, temp, pressure.
    """

    def __init__(
        self,
        api_key: str,
        current_url: str = OPENWEATHER_CURRENT_URL,
        historical_url: str = OPENWEATHER_HISTORICAL_URL,
        timeout: float = WEATHER_TIMEOUT,
    ):
        self.api_key = api_key
        self.current_url = current_url
        self.historical_url = historical_url
        self.timeout = timeout

    def _get(self, url: str, params: dict) -> dict:
        response = requests.get(
            url,
            params={**params, "appid": self.api_key, "units": "metric"},
            timeout=self.timeout,
        )
        if response.status_code == 401:
            raise WeatherUnauthorizedError(
                f"Weather API key not authorized for {url}", response=response
            )
        response.raise_for_status()
        return response.json()

    def current_weather(self, lat: float, lon: float) -> dict:
        data = self._get(self.current_url, {"lat": lat, "lon": lon})
        wind = data.get("wind") or {}
        main = data.get("main") or {}
        return {
            "wind_speed": wind.get("speed"),
            "wind_deg": wind.get("deg"),
            "humidity": main.get("humidity"),
            "temp": main.get("temp"),
            "pressure": main.get("pressure"),
        }

    def historical_weather(self, lat: float, lon: float, timestamp: int) -> dict:
        data = self._get(self.historical_url, {"lat": lat, "lon": lon, "dt": timestamp})
        return dict(data["data"][0])


def _value_or(data: dict, key: str, default: float) -> float:
    value = data.get(key)
    return float(value) if value is not None else default


def _conditions_from(data: dict, source: WeatherSource, date: str) -> EnvironmentalConditions:
    return EnvironmentalConditions(
        wind_speed=_value_or(data, "wind_speed", DEFAULT_WIND_SPEED),
        wind_direction_deg=_value_or(data, "wind_deg", DEFAULT_WIND_DIRECTION),
        humidity_pct=_value_or(data, "humidity", DEFAULT_HUMIDITY),
        temperature_c=_value_or(data, "temp", DEFAULT_TEMPERATURE),
        pressure_hpa=_value_or(data, "pressure", DEFAULT_PRESSURE),
        source=source,
        date=date,
    )


def default_conditions(source: WeatherSource, date: str) -> EnvironmentalConditions:
    return EnvironmentalConditions(
        wind_speed=DEFAULT_WIND_SPEED,
        wind_direction_deg=DEFAULT_WIND_DIRECTION,
        humidity_pct=DEFAULT_HUMIDITY,
        temperature_c=DEFAULT_TEMPERATURE,
        pressure_hpa=None,
        source=source,
        date=date,
    )


def format_ride_date(ride_date: datetime) -> str:
    """Human-readable date label, e.g. 'Sat Jun 15 2024'."""
    return ride_date.strftime("%a %b %d %Y")


def as_utc(value: datetime) -> datetime:
    # GPX timestamps without an offset are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_conditions(
    lat: float,
    lon: float,
    ride_date: datetime | None,
    client: OpenWeatherClient | None,
    now: datetime | None = None,
) -> EnvironmentalConditions:
    """Best-effort weather for a ride. Never raises.

    Rides older than five days use the historical endpoint. If that endpoint
    is refused for lack of entitlement, current weather is used instead and
    tagged current_fallback. Any other failure returns default values tagged
    fallback; no client at all returns defaults tagged default.
    """
    if client is None:
        logger.warning("No weather API key provided, using default conditions")
        return default_conditions(
            WeatherSource.DEFAULT, format_ride_date(ride_date) if ride_date else "current"
        )

    now = now or datetime.now(timezone.utc)
    use_historical = ride_date is not None and as_utc(ride_date) < as_utc(now) - HISTORICAL_THRESHOLD

    try:
        if use_historical:
            logger.info("Fetching historical weather data")
            timestamp = int(as_utc(ride_date).timestamp())
            data = client.historical_weather(lat, lon, timestamp)
            return _conditions_from(data, WeatherSource.HISTORICAL, format_ride_date(ride_date))

        logger.info("Fetching current weather data")
        data = client.current_weather(lat, lon)
        return _conditions_from(
            data, WeatherSource.CURRENT, format_ride_date(ride_date) if ride_date else "current"
        )
    except WeatherUnauthorizedError as e:
        if use_historical:
            logger.warning("Historical weather not available for this API key (%s), using current weather", e)
            try:
                data = client.current_weather(lat, lon)
                return _conditions_from(data, WeatherSource.CURRENT_FALLBACK, HISTORICAL_UNAVAILABLE_LABEL)
            except _LOOKUP_ERRORS as fallback_error:
                logger.warning("Failed to get fallback weather data: %s", fallback_error)
        else:
            logger.warning("Failed to get weather data: %s", e)
    except _LOOKUP_ERRORS as e:
        logger.warning("Failed to get weather data: %s", e)

    return default_conditions(
        WeatherSource.FALLBACK, format_ride_date(ride_date) if ride_date else "default"
    )
