"""
Declarative variable table and the mapping from a raw OpenWeatherMap document
to the flat set of published variables.

Each VariableSpec says where its source value lives (section + field) and which
ConversionKind applies. convert() is the single place that interprets a kind;
adding a kind without handling it there raises immediately.
"""
from __future__ import annotations

import dataclasses
import logging
from enum import Enum, auto
from typing import Any

from .const import UNITS_IMPERIAL
from .converters import bearing_to_compass, hpa_to_unit, kelvin_to_unit, speed_to_unit
from .time_resolver import format_clock, format_date_clock

_LOGGER = logging.getLogger(__name__)

VariableValue = str | int | float | bool | None


class ConversionKind(Enum):
    RAW = auto()
    TEMP_LOCAL = auto()         # Fahrenheit or Celsius per unit system
    TEMP_K = auto()
    TEMP_C = auto()
    TEMP_F = auto()
    PRESSURE_LOCAL = auto()     # inHg or mmHg per unit system
    PRESSURE_HPA = auto()
    PRESSURE_INHG = auto()
    PRESSURE_MMHG = auto()
    SPEED_LOCAL = auto()
    SPEED_METRIC = auto()
    SPEED_IMPERIAL = auto()
    HUMIDITY = auto()
    CONDITION = auto()          # first entry of the "weather" list
    COMPASS = auto()
    DAYLIGHT = auto()
    DATETIME = auto()
    CLOCK = auto()
    WALL_DATETIME = auto()      # recomputed on every tick, not from the document
    WALL_CLOCK = auto()


@dataclasses.dataclass(frozen=True)
class VariableSpec:
    """Where one published variable comes from and how it is converted."""

    id: str
    section: str        # "" for top-level document fields
    field: str
    description: str
    kind: ConversionKind


VARIABLE_LIST: tuple[VariableSpec, ...] = (
    VariableSpec("l_name", "", "name", "Location name", ConversionKind.RAW),
    VariableSpec("l_country", "sys", "country", "Location country", ConversionKind.RAW),
    VariableSpec("l_localtime", "", "", "Local date/time", ConversionKind.WALL_DATETIME),
    VariableSpec("l_time", "", "", "Local time", ConversionKind.WALL_CLOCK),
    VariableSpec("c_vis", "", "visibility", "Visibility (m)", ConversionKind.RAW),
    VariableSpec("c_temp", "main", "temp", "Current temperature", ConversionKind.TEMP_LOCAL),
    VariableSpec("c_feels", "main", "feels_like", "Feels like", ConversionKind.TEMP_LOCAL),
    VariableSpec("c_press", "main", "pressure", "Barometric pressure", ConversionKind.PRESSURE_LOCAL),
    VariableSpec("c_wind", "wind", "speed", "Wind speed", ConversionKind.SPEED_LOCAL),
    VariableSpec("c_tempk", "main", "temp", "Temperature (K)", ConversionKind.TEMP_K),
    VariableSpec("c_tempc", "main", "temp", "Temperature (°C)", ConversionKind.TEMP_C),
    VariableSpec("c_tempf", "main", "temp", "Temperature (°F)", ConversionKind.TEMP_F),
    VariableSpec("c_feelk", "main", "feels_like", "Feels like (K)", ConversionKind.TEMP_K),
    VariableSpec("c_feelc", "main", "feels_like", "Feels like (°C)", ConversionKind.TEMP_C),
    VariableSpec("c_feelf", "main", "feels_like", "Feels like (°F)", ConversionKind.TEMP_F),
    VariableSpec("c_hpa", "main", "pressure", "Pressure (hPa)", ConversionKind.PRESSURE_HPA),
    VariableSpec("c_inhg", "main", "pressure", "Pressure (inHg)", ConversionKind.PRESSURE_INHG),
    VariableSpec("c_mmhg", "main", "pressure", "Pressure (mmHg)", ConversionKind.PRESSURE_MMHG),
    VariableSpec("c_humid", "main", "humidity", "Relative humidity", ConversionKind.HUMIDITY),
    VariableSpec("c_windm", "wind", "speed", "Wind speed (metric)", ConversionKind.SPEED_METRIC),
    VariableSpec("c_windi", "wind", "speed", "Wind speed (mph)", ConversionKind.SPEED_IMPERIAL),
    VariableSpec("c_text", "weather", "main", "Condition", ConversionKind.CONDITION),
    VariableSpec("c_desc", "weather", "description", "Condition description", ConversionKind.CONDITION),
    VariableSpec("c_icon", "weather", "icon", "Condition icon code", ConversionKind.CONDITION),
    VariableSpec("c_winddir", "wind", "deg", "Wind direction", ConversionKind.COMPASS),
    VariableSpec("c_day", "sys", "", "Daytime", ConversionKind.DAYLIGHT),
    VariableSpec("c_time", "", "dt", "Time of observation", ConversionKind.DATETIME),
    VariableSpec("c_sunrise", "sys", "sunrise", "Sunrise", ConversionKind.CLOCK),
    VariableSpec("c_sunset", "sys", "sunset", "Sunset", ConversionKind.CLOCK),
)

VARIABLES_BY_ID: dict[str, VariableSpec] = {spec.id: spec for spec in VARIABLE_LIST}

WALL_CLOCK_KINDS = (ConversionKind.WALL_DATETIME, ConversionKind.WALL_CLOCK)
WALL_CLOCK_IDS: tuple[str, ...] = tuple(s.id for s in VARIABLE_LIST if s.kind in WALL_CLOCK_KINDS)


def empty_variables() -> dict[str, VariableValue]:
    """Initial state: every declared variable present and unset."""
    return {spec.id: None for spec in VARIABLE_LIST}


def is_daytime(document: dict) -> bool:
    """True strictly between sunrise and sunset at observation time."""
    sys_section = document.get("sys") or {}
    dt = document.get("dt")
    sunrise = sys_section.get("sunrise")
    sunset = sys_section.get("sunset")
    if dt is None or sunrise is None or sunset is None:
        return False
    return sunrise < dt < sunset


def resolve_source(spec: VariableSpec, document: dict) -> Any:
    """Look up the raw value a VariableSpec points at, or None when absent."""
    if spec.section == "":
        return document.get(spec.field)
    section = document.get(spec.section)
    if spec.section == "weather":
        # "weather" is a list of conditions; the first one is the primary
        section = section[0] if isinstance(section, list) and section else None
    if not isinstance(section, dict):
        return None
    return section.get(spec.field)


def convert(spec: VariableSpec, document: dict, units: str, offset: int) -> VariableValue:
    """Produce the published value for one variable."""
    imperial = units == UNITS_IMPERIAL
    value = resolve_source(spec, document)

    if spec.kind is ConversionKind.DAYLIGHT:
        return is_daytime(document)
    if spec.kind in WALL_CLOCK_KINDS:
        raise ValueError(f"{spec.id} is a wall clock variable and has no document source")
    if value is None:
        _LOGGER.debug("No value for %s (%s.%s)", spec.id, spec.section or "<root>", spec.field)
        return None

    match spec.kind:
        case ConversionKind.RAW | ConversionKind.CONDITION:
            return value
        case ConversionKind.TEMP_LOCAL:
            return kelvin_to_unit("f" if imperial else "c", value)
        case ConversionKind.TEMP_K:
            return kelvin_to_unit("k", value)
        case ConversionKind.TEMP_C:
            return kelvin_to_unit("c", value)
        case ConversionKind.TEMP_F:
            return kelvin_to_unit("f", value)
        case ConversionKind.PRESSURE_LOCAL:
            return hpa_to_unit("i" if imperial else "m", value)
        case ConversionKind.PRESSURE_HPA:
            return hpa_to_unit("h", value)
        case ConversionKind.PRESSURE_INHG:
            return hpa_to_unit("i", value)
        case ConversionKind.PRESSURE_MMHG:
            return hpa_to_unit("m", value)
        case ConversionKind.SPEED_LOCAL:
            return speed_to_unit("i" if imperial else "m", value)
        case ConversionKind.SPEED_METRIC:
            return speed_to_unit("m", value)
        case ConversionKind.SPEED_IMPERIAL:
            return speed_to_unit("i", value)
        case ConversionKind.HUMIDITY:
            return f"{value}%"
        case ConversionKind.COMPASS:
            return bearing_to_compass(value)
        case ConversionKind.DATETIME:
            return format_date_clock(value, offset)
        case ConversionKind.CLOCK:
            return format_clock(value, offset)
    raise ValueError(f"Unhandled conversion kind {spec.kind} for {spec.id}")


def map_variables(document: dict, units: str, offset: int) -> dict[str, VariableValue]:
    """
    Build every document-derived variable from one weather document.

    Wall clock variables are left out; the scheduler tick owns them.
    """
    return {
        spec.id: convert(spec, document, units, offset)
        for spec in VARIABLE_LIST
        if spec.kind not in WALL_CLOCK_KINDS
    }
