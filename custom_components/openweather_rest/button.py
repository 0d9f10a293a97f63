"""
Platform for the manual refresh button.
Pressing it requests a poll; the coordinator drops it if one was issued within
the last minute or if the error latch is set.
"""
from __future__ import annotations

import logging

from homeassistant.components.button import ButtonEntity
from homeassistant.core import HomeAssistant
from homeassistant import config_entries

from .coordinator import OpenWeatherCoordinator
from .entity import OpenWeatherEntity

_LOGGER = logging.getLogger(__name__)


class OpenWeatherRefreshButton(OpenWeatherEntity, ButtonEntity):
    """Manual 'Refresh' action."""

    _attr_icon = "mdi:refresh"

    def __init__(self, coordinator: OpenWeatherCoordinator) -> None:
        super().__init__(coordinator, "refresh", "Refresh")

    async def async_press(self) -> None:
        _LOGGER.debug("Manual refresh requested for %s", self.coordinator.location)
        await self.coordinator.async_manual_refresh()


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: config_entries.ConfigEntry,
    async_add_entities,
):
    """Add the refresh button for passed config_entry in HA."""
    coordinator: OpenWeatherCoordinator = config_entry.runtime_data
    async_add_entities([OpenWeatherRefreshButton(coordinator)])
