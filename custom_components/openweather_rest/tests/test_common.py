"""
Shared helpers and factory functions for OpenWeatherCoordinator tests.
Import from this module in each test file to avoid duplication.
"""

from __future__ import annotations

import asyncio
import copy
import io
from unittest.mock import MagicMock

from PIL import Image

from custom_components.openweather_rest.coordinator import OpenWeatherCoordinator


# A trimmed /data/2.5/weather response for Denver (offset -6h)
SAMPLE_DOCUMENT = {
    "coord": {"lon": -104.9847, "lat": 39.7392},
    "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}],
    "base": "stations",
    "main": {
        "temp": 300.15,
        "feels_like": 299.5,
        "temp_min": 297.0,
        "temp_max": 302.0,
        "pressure": 1013,
        "humidity": 41,
    },
    "visibility": 10000,
    "wind": {"speed": 10, "deg": 90},
    "clouds": {"all": 0},
    "dt": 1718467200,          # 2024-06-15 16:00:00 UTC
    "sys": {
        "type": 2,
        "id": 2004334,
        "country": "US",
        "sunrise": 1718450400,  # 11:20 UTC
        "sunset": 1718503500,   # 02:05 UTC next day
    },
    "timezone": -21600,
    "id": 5419384,
    "name": "Denver",
    "cod": 200,
}


def make_document(**overrides) -> dict:
    """Return a deep copy of SAMPLE_DOCUMENT with top-level sections replaced or merged."""
    document = copy.deepcopy(SAMPLE_DOCUMENT)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(document.get(key), dict):
            document[key].update(value)
        else:
            document[key] = value
    return document


def make_png(size: tuple[int, int] = (100, 100)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, (255, 200, 0, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


def make_entry_data(**kwargs) -> dict:
    defaults = dict(
        guid="test-guid",
        entry_name="Test Weather",
        api_key="0123456789abcdef0123456789abcdef",
        location="Denver,US",
        units="imperial",
        timezone="utc",
        refresh=20,
    )
    defaults.update(kwargs)
    return defaults


def make_coordinator(hass=None, initialize: bool = True, **entry_kwargs) -> OpenWeatherCoordinator:
    """Build a coordinator with a mocked hass; initialized unless told otherwise."""
    if hass is None:
        hass = MagicMock()
        hass.async_create_task = lambda coro: asyncio.ensure_future(coro)
        hass.async_add_executor_job = lambda func, *args: asyncio.get_running_loop().run_in_executor(None, func, *args)
    coord = OpenWeatherCoordinator(hass, make_entry_data(**entry_kwargs))
    if initialize:
        coord.initialize()
    return coord
