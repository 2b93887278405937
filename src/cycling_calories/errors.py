"""Errors raised by the calorie calculation."""

import requests


class InvalidTrackError(ValueError):
    """The track has no points to derive metrics from."""


class InvalidInputError(ValueError):
    """A calorie model input is missing or non-positive."""


class WeatherUnauthorizedError(requests.HTTPError):
    """The weather API key is not entitled to the requested endpoint (HTTP 401)."""
