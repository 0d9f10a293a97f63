"""
Unit tests for __init__.py async_setup_entry / async_unload_entry.

Coverage:
- invalid configuration → raises ConfigEntryError, no refresh, no platforms
- valid configuration → first refresh awaited, runtime_data set, platforms forwarded
- options override entry data; missing timezone defaults to "host"
- unload shuts the coordinator down only when platforms unloaded
"""

from __future__ import annotations

import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from homeassistant.exceptions import ConfigEntryError

COORDINATOR = "custom_components.openweather_rest.OpenWeatherCoordinator"


def _make_mock_entry(options: dict | None = None, **data) -> MagicMock:
    entry = MagicMock()
    entry.data = {
        "guid": "test-guid",
        "entry_name": "Test",
        "api_key": "0123456789abcdef0123456789abcdef",
        "location": "Denver,US",
        "units": "imperial",
        "refresh": 20,
        **data,
    }
    entry.options = options or {}
    entry.async_on_unload = MagicMock()
    entry.add_update_listener = MagicMock(return_value=MagicMock())
    return entry


def _make_mock_coordinator(initialized: bool = True) -> MagicMock:
    coordinator = MagicMock()
    coordinator.initialize = MagicMock(return_value=initialized)
    coordinator.status_message = None if initialized else "Missing API key"
    coordinator.async_config_entry_first_refresh = AsyncMock()
    return coordinator


class TestAsyncSetupEntry(unittest.IsolatedAsyncioTestCase):

    async def test_bad_config_raises_config_entry_error(self):
        from custom_components.openweather_rest import async_setup_entry

        hass = MagicMock()
        hass.config_entries.async_forward_entry_setups = AsyncMock()
        coordinator = _make_mock_coordinator(initialized=False)

        with patch(COORDINATOR, return_value=coordinator):
            with self.assertRaises(ConfigEntryError) as ctx:
                await async_setup_entry(hass, _make_mock_entry(api_key=""))

        self.assertIn("Missing API key", str(ctx.exception))
        coordinator.async_config_entry_first_refresh.assert_not_awaited()
        hass.config_entries.async_forward_entry_setups.assert_not_awaited()

    async def test_bad_config_with_real_coordinator(self):
        from custom_components.openweather_rest import async_setup_entry

        hass = MagicMock()
        with self.assertRaises(ConfigEntryError):
            await async_setup_entry(hass, _make_mock_entry(location=""))

    async def test_valid_config_completes_setup(self):
        from custom_components.openweather_rest import PLATFORMS, async_setup_entry

        hass = MagicMock()
        hass.config_entries.async_forward_entry_setups = AsyncMock()
        entry = _make_mock_entry()
        coordinator = _make_mock_coordinator()

        with patch(COORDINATOR, return_value=coordinator):
            result = await async_setup_entry(hass, entry)

        self.assertTrue(result)
        self.assertIs(entry.runtime_data, coordinator)
        coordinator.async_config_entry_first_refresh.assert_awaited_once()
        hass.config_entries.async_forward_entry_setups.assert_awaited_once_with(entry, PLATFORMS)
        entry.add_update_listener.assert_called_once()
        hass.data.setdefault.assert_not_called()
        hass.data.__setitem__.assert_not_called()

    async def test_options_override_data(self):
        from custom_components.openweather_rest import async_setup_entry

        hass = MagicMock()
        hass.config_entries.async_forward_entry_setups = AsyncMock()
        entry = _make_mock_entry(options={"location": "Oslo,NO", "units": "metric"})

        with patch(COORDINATOR, return_value=_make_mock_coordinator()) as MockCoord:
            await async_setup_entry(hass, entry)

        entry_config = MockCoord.call_args.args[1]
        self.assertEqual(entry_config["location"], "Oslo,NO")
        self.assertEqual(entry_config["units"], "metric")
        self.assertEqual(entry_config["api_key"], entry.data["api_key"])

    async def test_missing_timezone_defaults_to_host(self):
        from custom_components.openweather_rest import async_setup_entry

        hass = MagicMock()
        hass.config_entries.async_forward_entry_setups = AsyncMock()

        with patch(COORDINATOR, return_value=_make_mock_coordinator()) as MockCoord:
            await async_setup_entry(hass, _make_mock_entry())

        self.assertEqual(MockCoord.call_args.args[1]["timezone"], "host")


class TestAsyncUnloadEntry(unittest.IsolatedAsyncioTestCase):

    async def test_unload_shuts_down_coordinator(self):
        from custom_components.openweather_rest import async_unload_entry

        from .test_common import make_coordinator

        hass = MagicMock()
        hass.config_entries.async_unload_platforms = AsyncMock(return_value=True)
        entry = _make_mock_entry()
        entry.runtime_data = make_coordinator()

        with patch.object(entry.runtime_data, "async_shutdown", new=AsyncMock()) as shutdown:
            self.assertTrue(await async_unload_entry(hass, entry))

        shutdown.assert_awaited_once()

    async def test_failed_unload_keeps_coordinator(self):
        from custom_components.openweather_rest import async_unload_entry

        from .test_common import make_coordinator

        hass = MagicMock()
        hass.config_entries.async_unload_platforms = AsyncMock(return_value=False)
        entry = _make_mock_entry()
        entry.runtime_data = make_coordinator()

        with patch.object(entry.runtime_data, "async_shutdown", new=AsyncMock()) as shutdown:
            self.assertFalse(await async_unload_entry(hass, entry))

        shutdown.assert_not_awaited()
