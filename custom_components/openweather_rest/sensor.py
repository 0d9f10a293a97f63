"""
Platform for OpenWeather sensors.
One sensor per published variable, plus a diagnostic connection status sensor.
"""
from __future__ import annotations

import logging

from homeassistant.components.sensor import SensorDeviceClass, SensorEntity
from homeassistant.const import EntityCategory
from homeassistant.core import HomeAssistant
from homeassistant import config_entries

from .const import Status
from .coordinator import OpenWeatherCoordinator
from .entity import OpenWeatherEntity
from .variables import ConversionKind, VARIABLE_LIST, VariableSpec

_LOGGER = logging.getLogger(__name__)

# Published by the binary_sensor platform instead
BINARY_KINDS = (ConversionKind.DAYLIGHT,)

VARIABLE_ICONS = {
    ConversionKind.TEMP_LOCAL: "mdi:thermometer",
    ConversionKind.TEMP_K: "mdi:thermometer",
    ConversionKind.TEMP_C: "mdi:thermometer",
    ConversionKind.TEMP_F: "mdi:thermometer",
    ConversionKind.PRESSURE_LOCAL: "mdi:gauge",
    ConversionKind.PRESSURE_HPA: "mdi:gauge",
    ConversionKind.PRESSURE_INHG: "mdi:gauge",
    ConversionKind.PRESSURE_MMHG: "mdi:gauge",
    ConversionKind.SPEED_LOCAL: "mdi:weather-windy",
    ConversionKind.SPEED_METRIC: "mdi:weather-windy",
    ConversionKind.SPEED_IMPERIAL: "mdi:weather-windy",
    ConversionKind.HUMIDITY: "mdi:water-percent",
    ConversionKind.COMPASS: "mdi:compass-outline",
    ConversionKind.CLOCK: "mdi:clock-outline",
    ConversionKind.DATETIME: "mdi:calendar-clock",
    ConversionKind.WALL_CLOCK: "mdi:clock-outline",
    ConversionKind.WALL_DATETIME: "mdi:calendar-clock",
}


class OpenWeatherVariableSensor(OpenWeatherEntity, SensorEntity):
    """
    Representation of one published weather variable.
    Values are display strings/numbers already converted by the coordinator.
    """

    def __init__(self, coordinator: OpenWeatherCoordinator, spec: VariableSpec) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, spec.id, spec.description)
        self._spec = spec
        self._attr_icon = VARIABLE_ICONS.get(spec.kind, "mdi:weather-partly-cloudy")

    @property
    def native_value(self) -> str | int | float | None:
        return self.coordinator.data.value(self._spec.id)

    @property
    def extra_state_attributes(self) -> dict:
        return {"variable_id": self._spec.id}


class OpenWeatherStatusSensor(OpenWeatherEntity, SensorEntity):
    """Connection health of the location, with the last status message."""

    _attr_device_class = SensorDeviceClass.ENUM
    _attr_entity_category = EntityCategory.DIAGNOSTIC
    _attr_options = [status.value for status in Status]
    _attr_icon = "mdi:cloud-check-outline"

    def __init__(self, coordinator: OpenWeatherCoordinator) -> None:
        super().__init__(coordinator, "status", "Status")

    @property
    def available(self) -> bool:
        # Status stays readable even when the last update failed
        return True

    @property
    def native_value(self) -> str:
        return self.coordinator.status.value

    @property
    def extra_state_attributes(self) -> dict:
        return {
            "message": self.coordinator.status_message,
            "error_latched": self.coordinator.scheduler.has_error,
        }


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: config_entries.ConfigEntry,
    async_add_entities,
):
    """Add sensors for passed config_entry in HA."""
    coordinator: OpenWeatherCoordinator = config_entry.runtime_data

    entities: list[SensorEntity] = [
        OpenWeatherVariableSensor(coordinator, spec)
        for spec in VARIABLE_LIST
        if spec.kind not in BINARY_KINDS
    ]
    entities.append(OpenWeatherStatusSensor(coordinator))
    _LOGGER.debug("Adding %s sensors for %s", len(entities), coordinator.location)
    async_add_entities(entities)
