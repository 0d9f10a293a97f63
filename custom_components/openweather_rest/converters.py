"""
Unit conversion for raw OpenWeatherMap values.

OpenWeatherMap's standard units are Kelvin, hPa and m/s. All rounding here is
round-half-up done through math.floor with a +0.49 bias, never round(), so
displayed values stay stable at .5 boundaries.
"""
from __future__ import annotations

import math

from .const import C_DEGREE, COMPASS


def kelvin_to_unit(unit: str, kelvin: float) -> str:
    """
    Convert a Kelvin reading to a display string with a degree sign.

    unit: 'f' Fahrenheit, 'c' Celsius, anything else keeps Kelvin.
    """
    if unit == "f":
        value = math.floor((kelvin - 273.15) * 9 / 5 + 32.49)
    elif unit == "c":
        value = math.floor(kelvin - 273.15 + 0.49)
    else:
        value = math.floor(kelvin + 0.49)
    return f"{value}{C_DEGREE}"


def hpa_to_unit(unit: str, hpa: float) -> float:
    """
    Convert a hPa pressure reading.

    unit: 'i' inches of mercury (2 decimals), 'm' millimetres of mercury
    (whole numbers, floored), anything else returns hPa unchanged.
    """
    if unit == "i":
        return math.floor(hpa / 33.863886666667 * 100) / 100
    if unit == "m":
        return math.floor(hpa / 133.322387415 * 100)
    return hpa


def speed_to_unit(unit: str, mps: float) -> float:
    """
    Convert a wind speed given in m/s.

    unit: 'm' metric (two decimals), 'i' miles per hour (one decimal),
    anything else returns the input unchanged.
    """
    if unit == "m":
        return math.floor(mps * 100 + 0.49) / 100
    if unit == "i":
        return math.floor(mps * 22.3694 + 0.49) / 10
    return mps


def bearing_to_compass(degrees: float) -> str:
    """Map a bearing in degrees to one of the 16 compass points."""
    return COMPASS[math.floor((degrees % 360) / 22.5 + 0.5) % 16]
