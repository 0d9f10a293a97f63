import logging

from homeassistant import config_entries, core
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryError

from .const import CONF_TIMEZONE, DEFAULT_TIMEZONE
from .coordinator import OpenWeatherCoordinator

PLATFORMS: list[Platform] = [Platform.SENSOR, Platform.BINARY_SENSOR, Platform.BUTTON, Platform.IMAGE]
_LOGGER = logging.getLogger(__name__)


def _entry_config(entry: config_entries.ConfigEntry) -> dict:
    """Merged entry configuration; options win over data."""
    config = {**entry.data, **(entry.options or {})}
    if not config.get(CONF_TIMEZONE):
        config[CONF_TIMEZONE] = DEFAULT_TIMEZONE
    return config


async def async_setup_entry(
    hass: core.HomeAssistant, entry: config_entries.ConfigEntry
) -> bool:
    """Set up one weather location from a ConfigEntry."""
    coordinator = OpenWeatherCoordinator(hass, _entry_config(entry), entry)
    if not coordinator.initialize():
        raise ConfigEntryError(coordinator.status_message or "Invalid configuration")

    entry.async_on_unload(
        entry.add_update_listener(_async_update_listener)
    )

    # Polls immediately; failures are reported through the coordinator status
    await coordinator.async_config_entry_first_refresh()
    entry.runtime_data = coordinator

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    return True


async def _async_update_listener(hass: HomeAssistant, config_entry):
    """Handle config options update."""
    # Reload the integration when the options change; this re-initializes the connection.
    await hass.config_entries.async_reload(config_entry.entry_id)


async def async_unload_entry(
    hass: core.HomeAssistant, entry: config_entries.ConfigEntry
) -> bool:
    """Unload a config entry."""
    unloaded = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    coordinator = getattr(entry, "runtime_data", None)
    if unloaded and isinstance(coordinator, OpenWeatherCoordinator):
        await coordinator.async_shutdown()
    return unloaded
