"""
Tests for platform setup and entity state of the sensor, binary_sensor and
button platforms.

Covers:
- one variable sensor per published variable, c_day only as a binary sensor
- status sensor reflects coordinator status and latch
- unique ids and names are built from the entry guid and name
- daylight binary sensor follows the snapshot's is_day
- pressing Refresh requests a manual poll
"""

from __future__ import annotations

import dataclasses
import unittest
from unittest.mock import AsyncMock, MagicMock

from custom_components.openweather_rest import binary_sensor, button, sensor
from custom_components.openweather_rest.const import Status
from custom_components.openweather_rest.variables import VARIABLE_LIST

from .test_common import make_coordinator


def _make_entry(coord) -> MagicMock:
    entry = MagicMock()
    entry.runtime_data = coord
    return entry


async def _setup(platform, coord) -> list:
    add_entities = MagicMock()
    await platform.async_setup_entry(MagicMock(), _make_entry(coord), add_entities)
    add_entities.assert_called_once()
    return list(add_entities.call_args.args[0])


class TestSensorSetup(unittest.IsolatedAsyncioTestCase):

    async def test_one_sensor_per_variable_plus_status(self):
        coord = make_coordinator()

        entities = await _setup(sensor, coord)

        variable_ids = {e.extra_state_attributes.get("variable_id") for e in entities}
        expected = {spec.id for spec in VARIABLE_LIST if spec.id != "c_day"}
        self.assertEqual(variable_ids - {None}, expected)
        self.assertEqual(len(entities), len(expected) + 1)

    async def test_unique_id_and_name(self):
        coord = make_coordinator()

        entities = await _setup(sensor, coord)
        temp = next(e for e in entities if e.extra_state_attributes.get("variable_id") == "c_temp")

        self.assertEqual(temp.unique_id, "openweather_rest_test-guid_c_temp")
        self.assertTrue(temp.name.startswith("Test Weather "))

    async def test_variable_sensor_reads_snapshot(self):
        coord = make_coordinator()
        variables = dict(coord.data.variables, c_temp="81°")
        coord.data = dataclasses.replace(coord.data, variables=variables)

        entities = await _setup(sensor, coord)
        temp = next(e for e in entities if e.extra_state_attributes.get("variable_id") == "c_temp")

        self.assertEqual(temp.native_value, "81°")

    async def test_status_sensor(self):
        coord = make_coordinator()
        coord.scheduler.latch()
        coord.status = Status.UNKNOWN_ERROR
        coord.status_message = "Invalid API key"

        entities = await _setup(sensor, coord)
        status = next(e for e in entities if isinstance(e, sensor.OpenWeatherStatusSensor))

        self.assertEqual(status.native_value, "unknown_error")
        self.assertTrue(status.available)
        self.assertEqual(
            status.extra_state_attributes,
            {"message": "Invalid API key", "error_latched": True},
        )


class TestDaylightSensor(unittest.IsolatedAsyncioTestCase):

    async def test_follows_is_day(self):
        coord = make_coordinator()
        entities = await _setup(binary_sensor, coord)
        daylight = entities[0]

        self.assertIsNone(daylight.is_on)

        coord.data = dataclasses.replace(coord.data, is_day=True)
        self.assertTrue(daylight.is_on)
        self.assertEqual(daylight.icon, "mdi:weather-sunny")

        coord.data = dataclasses.replace(coord.data, is_day=False)
        self.assertFalse(daylight.is_on)
        self.assertEqual(daylight.icon, "mdi:weather-night")


class TestRefreshButton(unittest.IsolatedAsyncioTestCase):

    async def test_press_requests_manual_refresh(self):
        coord = make_coordinator()
        coord.async_manual_refresh = AsyncMock()

        entities = await _setup(button, coord)
        await entities[0].async_press()

        coord.async_manual_refresh.assert_awaited_once()
