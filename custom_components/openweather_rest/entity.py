"""Base entity shared by all OpenWeather platforms."""
from __future__ import annotations

from homeassistant.helpers.entity import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import CONF_ENTRY_NAME, DEFAULT_ENTRY_NAME, DOMAIN
from .coordinator import OpenWeatherCoordinator


class OpenWeatherEntity(CoordinatorEntity[OpenWeatherCoordinator]):
    """Entity bound to one location's coordinator."""

    def __init__(self, coordinator: OpenWeatherCoordinator, key: str, label: str) -> None:
        super().__init__(coordinator)
        guid = coordinator.entry_data.get("guid") or coordinator.location
        entry_name = coordinator.entry_data.get(CONF_ENTRY_NAME) or DEFAULT_ENTRY_NAME
        self._attr_unique_id = f"{DOMAIN}_{guid}_{key}"
        self._attr_name = f"{entry_name} {label}"

    @property
    def device_info(self) -> DeviceInfo | None:
        """Return the device info."""
        return self.coordinator.get_device_info()
