"""
Platform for the daytime binary sensor.
On strictly between sunrise and sunset at the time of the last observation.
"""
from __future__ import annotations

from homeassistant.components.binary_sensor import BinarySensorEntity
from homeassistant.core import HomeAssistant
from homeassistant import config_entries

from .coordinator import OpenWeatherCoordinator
from .entity import OpenWeatherEntity
from .variables import VARIABLES_BY_ID


class OpenWeatherDaylightSensor(OpenWeatherEntity, BinarySensorEntity):
    """Day/night flag of the configured location."""

    def __init__(self, coordinator: OpenWeatherCoordinator) -> None:
        spec = VARIABLES_BY_ID["c_day"]
        super().__init__(coordinator, spec.id, spec.description)

    @property
    def is_on(self) -> bool | None:
        return self.coordinator.data.is_day

    @property
    def icon(self) -> str:
        return "mdi:weather-sunny" if self.is_on else "mdi:weather-night"

    @property
    def extra_state_attributes(self) -> dict:
        return {"variable_id": "c_day"}


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: config_entries.ConfigEntry,
    async_add_entities,
):
    """Add the daylight binary sensor for passed config_entry in HA."""
    coordinator: OpenWeatherCoordinator = config_entry.runtime_data
    async_add_entities([OpenWeatherDaylightSensor(coordinator)])
