"""
Error taxonomy for the OpenWeather integration.

Every failure ends the operation that triggered it and is surfaced through the
coordinator status; none of these is allowed to escape into Home Assistant.
"""


class OpenWeatherError(Exception):
    """Base class for all integration errors."""


class ConfigError(OpenWeatherError):
    """Required configuration (API key, location) is missing or invalid."""


class ProviderError(OpenWeatherError):
    """The provider answered with a structured error envelope."""

    def __init__(self, error_json: dict):
        self.error_json = error_json
        error = error_json.get("error") if isinstance(error_json, dict) else None
        if isinstance(error, dict):
            message = error.get("message") or str(error)
        else:
            message = str(error)
        self.message = message
        super().__init__(message)


class TransportError(OpenWeatherError):
    """DNS, connection or timeout failure below the HTTP layer."""


class UnexpectedResponse(OpenWeatherError):
    """Non-200 answer without a structured error envelope."""

    def __init__(self, status: int, message: str | None = None):
        self.status = status
        self.message = message or f"HTTP {status}"
        super().__init__(self.message)


class IconFetchError(OpenWeatherError):
    """A condition icon could not be downloaded or decoded."""
