"""
Platform for the condition icon image.
Serves the cached, resized icon of the current condition together with the
day/night colour hints used by button feedback.
"""
from __future__ import annotations

import base64

from homeassistant.components.image import ImageEntity
from homeassistant.core import HomeAssistant, callback
from homeassistant import config_entries
from homeassistant.util import dt as dt_util

from .coordinator import OpenWeatherCoordinator
from .entity import OpenWeatherEntity


class OpenWeatherIconImage(OpenWeatherEntity, ImageEntity):
    """Current condition icon."""

    _attr_content_type = "image/png"

    def __init__(self, coordinator: OpenWeatherCoordinator) -> None:
        OpenWeatherEntity.__init__(self, coordinator, "icon", "Condition Icon")
        ImageEntity.__init__(self, coordinator.hass)
        self._shown_icon: str | None = None

    @callback
    def _handle_coordinator_update(self) -> None:
        icon = self.coordinator.icons.active_icon
        if icon != self._shown_icon:
            self._shown_icon = icon
            self._attr_image_last_updated = dt_util.utcnow()
        super()._handle_coordinator_update()

    async def async_image(self) -> bytes | None:
        icon = self.coordinator.icons.active_icon
        if icon is None:
            return None
        return base64.b64decode(icon)

    @property
    def extra_state_attributes(self) -> dict:
        feedback = self.coordinator.get_icon_feedback()
        if feedback is None:
            return {"icon_code": self.coordinator.icons.active_code or None}
        return {
            "icon_code": self.coordinator.icons.active_code,
            "bgcolor": feedback["bgcolor"],
            "color": feedback["color"],
        }


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: config_entries.ConfigEntry,
    async_add_entities,
):
    """Add the condition icon image for passed config_entry in HA."""
    coordinator: OpenWeatherCoordinator = config_entry.runtime_data
    async_add_entities([OpenWeatherIconImage(coordinator)])
