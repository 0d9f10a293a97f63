"""Config flow for the OpenWeather REST integration."""
from __future__ import annotations
import logging
import uuid
from typing import Any, Dict, Optional
import homeassistant.helpers.config_validation as cv
import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import callback

from .const import (
    CONF_API_KEY,
    CONF_ENTRY_NAME,
    CONF_LOCATION,
    CONF_REFRESH,
    CONF_TIMEZONE,
    CONF_UNITS,
    DEFAULT_ENTRY_NAME,
    DEFAULT_REFRESH,
    DEFAULT_TIMEZONE,
    DEFAULT_UNITS,
    DOMAIN,
    UNITS_IMPERIAL,
    UNITS_METRIC,
)
from .errors import ProviderError, TransportError, UnexpectedResponse
from .requests import fetch_weather
from .time_resolver import TimezoneMode

_LOGGER = logging.getLogger(__name__)

UNIT_CHOICES = {
    UNITS_IMPERIAL: "Fahrenheit and MPH",
    UNITS_METRIC: "Celsius and metric speed",
}
TIMEZONE_CHOICES = {
    TimezoneMode.LOCATION.value: "Times use the configured location",
    TimezoneMode.HOST.value: "Times use Home Assistant's time zone",
    TimezoneMode.UTC.value: "Times are UTC",
}
refresh_minutes = vol.All(vol.Coerce(int), vol.Range(min=1))
# OpenWeatherMap API keys are hexadecimal
api_key_validator = vol.All(cv.string, vol.Match(r"^[0-9A-Fa-f]*$"))


def _build_schema(defaults: Dict[str, Any]) -> vol.Schema:
    return vol.Schema(
        {
            vol.Required(CONF_ENTRY_NAME, default=defaults.get(CONF_ENTRY_NAME, DEFAULT_ENTRY_NAME)): cv.string,
            vol.Required(CONF_API_KEY, default=defaults.get(CONF_API_KEY, "")): api_key_validator,
            vol.Required(CONF_LOCATION, default=defaults.get(CONF_LOCATION, "")): cv.string,
            vol.Required(CONF_UNITS, default=defaults.get(CONF_UNITS, DEFAULT_UNITS)): vol.In(UNIT_CHOICES),
            vol.Required(CONF_TIMEZONE, default=defaults.get(CONF_TIMEZONE, DEFAULT_TIMEZONE)): vol.In(TIMEZONE_CHOICES),
            vol.Required(CONF_REFRESH, default=defaults.get(CONF_REFRESH, DEFAULT_REFRESH)): refresh_minutes,
        }
    )


def _check_required(user_input: Dict[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not user_input.get(CONF_ENTRY_NAME):
        errors["base"] = "entry_name_required"
    if not user_input.get(CONF_API_KEY):
        errors["base"] = "api_key_required"
    if not user_input.get(CONF_LOCATION):
        errors["base"] = "location_required"
    return errors


async def _validate_credentials(api_key: str, location: str) -> str | None:
    """
    Try one weather request with the given key and location.

    Returns None on success, otherwise the error key to show in the form.
    """
    try:
        await fetch_weather(location, api_key)
    except TransportError as e:
        _LOGGER.warning("Cannot reach OpenWeatherMap: %s", e)
        return "cannot_connect"
    except ProviderError as e:
        _LOGGER.warning("OpenWeatherMap rejected the request: %s", e.message)
        return "invalid_auth"
    except UnexpectedResponse as e:
        if e.status == 401:
            return "invalid_auth"
        if e.status == 404:
            return "location_not_found"
        _LOGGER.warning("Unexpected response while validating: HTTP %s %s", e.status, e.message)
        return "cannot_connect"
    return None


class CustomFlow(config_entries.ConfigFlow, domain=DOMAIN):
    data: Optional[Dict[str, Any]]

    async def async_step_user(self, user_input: Optional[Dict[str, Any]] = None):
        errors: Dict[str, str] = {}
        if user_input is not None:
            self.data = dict(user_input)
            # Create new guid for the entry
            self.data["guid"] = str(uuid.uuid4())
            errors = _check_required(self.data)
            if not errors:
                self._async_abort_entries_match(
                    {CONF_API_KEY: self.data[CONF_API_KEY], CONF_LOCATION: self.data[CONF_LOCATION]}
                )
                error = await _validate_credentials(self.data[CONF_API_KEY], self.data[CONF_LOCATION])
                if error:
                    errors["base"] = error
            if not errors:
                return self.async_create_entry(title=f"{self.data[CONF_ENTRY_NAME]}", data=self.data)

        defaults = user_input if user_input is not None else {}
        return self.async_show_form(step_id="user", data_schema=_build_schema(defaults), errors=errors)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Get the options flow for this handler."""
        return OptionsFlowHandler(config_entry)


class OptionsFlowHandler(config_entries.OptionsFlow):
    """Handles options flow for the component."""

    def __init__(self, config_entry: config_entries.ConfigEntry) -> None:
        self._entry = config_entry

    async def async_step_init(
        self, user_input: Dict[str, Any] = None
    ) -> Dict[str, Any]:
        errors: Dict[str, str] = {}

        # Options override data; entries created before the timezone option get DEFAULT_TIMEZONE
        defaults = {**self._entry.data, **self._entry.options}

        if user_input is not None:
            errors = _check_required(user_input)
            if not errors:
                new_data = {
                    "guid": self._entry.data.get("guid") or str(uuid.uuid4()),
                    CONF_ENTRY_NAME: user_input[CONF_ENTRY_NAME],
                    CONF_API_KEY: user_input[CONF_API_KEY],
                    CONF_LOCATION: user_input[CONF_LOCATION],
                    CONF_UNITS: user_input[CONF_UNITS],
                    CONF_TIMEZONE: user_input[CONF_TIMEZONE],
                    CONF_REFRESH: user_input[CONF_REFRESH],
                }

                # Rename the entry in the UI; the update listener reloads it
                self.hass.config_entries.async_update_entry(
                    self._entry,
                    data=new_data,
                    title=new_data[CONF_ENTRY_NAME],
                )

                return self.async_create_entry(title=f"{new_data[CONF_ENTRY_NAME]}", data=new_data)
            defaults = user_input

        return self.async_show_form(step_id="init", data_schema=_build_schema(defaults), errors=errors)
