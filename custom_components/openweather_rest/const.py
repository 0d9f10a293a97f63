from enum import StrEnum

DOMAIN = "openweather_rest"
VERSION = "2.1.0"

BASE_URL = "https://api.openweathermap.org/data/2.5/weather"
ICON_URL = "http://openweathermap.org/img/wn/{code}@2x.png"

# Shown in place of the location name when a response cannot be used
MALFORMED_MESSAGE = "Malformed weather response"

# Config entry keys
CONF_ENTRY_NAME = "entry_name"
CONF_API_KEY = "api_key"
CONF_LOCATION = "location"
CONF_UNITS = "units"
CONF_TIMEZONE = "timezone"
CONF_REFRESH = "refresh"

UNITS_IMPERIAL = "imperial"
UNITS_METRIC = "metric"

DEFAULT_ENTRY_NAME = "OpenWeather"
DEFAULT_UNITS = UNITS_IMPERIAL
DEFAULT_TIMEZONE = "host"    # entries created before the timezone option existed
DEFAULT_REFRESH = 20         # minutes

# Scheduler timings (seconds)
TICK_INTERVAL = 60           # wall clock variables are recomputed on every tick
MIN_POLL_SPACING = 60        # no two weather polls closer than this

# Icon cache
ICON_SIZE = (72, 72)

C_DEGREE = "°"
COMPASS = (
    "N", "NNE", "NE", "ENE",
    "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW",
    "W", "WNW", "NW", "NNW",
)

# Icon feedback colours, (R, G, B)
DAY_BGCOLOR = (200, 200, 200)
DAY_COLOR = (32, 32, 32)
NIGHT_BGCOLOR = (16, 16, 16)
NIGHT_COLOR = (168, 168, 168)


class Status(StrEnum):
    """Connection health reported to the host."""

    OK = "ok"
    CONNECTING = "connecting"
    BAD_CONFIG = "bad_config"
    CONNECTION_FAILURE = "connection_failure"
    UNKNOWN_ERROR = "unknown_error"
    ERROR = "error"
