"""
DataUpdateCoordinator for the OpenWeather integration.

Responsibilities:
- Tick every TICK_INTERVAL seconds: always refresh the wall clock variables,
  and issue a weather poll when the configured refresh interval has elapsed.
- Gate every poll through RefreshScheduler (issue-time spacing + error latch).
- Route poll outcomes: rebuild the published snapshot, or report status.
- Keep the condition icon current through IconCache.
- Ignore completions that arrive after shutdown (generation token).
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from datetime import timedelta

from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .const import (
    CONF_API_KEY,
    CONF_ENTRY_NAME,
    CONF_LOCATION,
    CONF_REFRESH,
    CONF_TIMEZONE,
    CONF_UNITS,
    DAY_BGCOLOR,
    DAY_COLOR,
    DEFAULT_ENTRY_NAME,
    DEFAULT_REFRESH,
    DEFAULT_TIMEZONE,
    DEFAULT_UNITS,
    DOMAIN,
    MALFORMED_MESSAGE,
    NIGHT_BGCOLOR,
    NIGHT_COLOR,
    TICK_INTERVAL,
    VERSION,
    Status,
)
from .coordinator_data import WeatherSnapshot
from .errors import ConfigError, IconFetchError, ProviderError, TransportError, UnexpectedResponse
from .icon_cache import IconCache
from .requests import fetch_icon, fetch_weather
from .scheduler import RefreshScheduler
from .time_resolver import TimezoneMode, effective_offset, wall_clock_variables
from .variables import empty_variables, is_daytime, map_variables

_LOGGER = logging.getLogger(__name__)


def combine_rgb(rgb: tuple[int, int, int]) -> int:
    """Pack (R, G, B) into a 24-bit integer."""
    r, g, b = rgb
    return ((r & 0xFF) << 16) | ((g & 0xFF) << 8) | (b & 0xFF)


def parse_document_offset(document: dict) -> int | None:
    """The document's UTC offset in seconds, or None when it carries none."""
    offset = document.get("timezone")
    return None if offset is None else int(offset)


def validate_entry_data(entry_data: dict) -> None:
    """Raise ConfigError when the entry cannot be used to poll."""
    if not entry_data.get(CONF_API_KEY):
        raise ConfigError("Missing API key")
    if not entry_data.get(CONF_LOCATION):
        raise ConfigError("Missing location")
    try:
        refresh = int(entry_data.get(CONF_REFRESH, DEFAULT_REFRESH))
    except (TypeError, ValueError) as e:
        raise ConfigError("Refresh frequency must be a whole number of minutes") from e
    if refresh < 1:
        raise ConfigError("Refresh frequency must be at least one minute")


class OpenWeatherCoordinator(DataUpdateCoordinator[WeatherSnapshot]):
    """
    Coordinator for one configured OpenWeather location.

    HA calls _async_update_data on a fixed TICK_INTERVAL cadence; weather polls
    are gated internally by RefreshScheduler and run as background tasks, so a
    slow provider never delays a tick.
    """

    def __init__(self, hass: HomeAssistant, entry_data: dict, config_entry=None) -> None:
        """Initialize the coordinator from config-entry data."""
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name=DOMAIN,
            update_interval=timedelta(seconds=TICK_INTERVAL),
        )
        self._entry_data = entry_data
        self.api_key: str = entry_data.get(CONF_API_KEY) or ""
        self.location: str = entry_data.get(CONF_LOCATION) or ""
        self.units: str = entry_data.get(CONF_UNITS, DEFAULT_UNITS)
        self.timezone_mode = TimezoneMode(entry_data.get(CONF_TIMEZONE) or DEFAULT_TIMEZONE)

        try:
            refresh = int(entry_data.get(CONF_REFRESH, DEFAULT_REFRESH))
        except (TypeError, ValueError):
            refresh = DEFAULT_REFRESH
        self.scheduler = RefreshScheduler(refresh)

        self.icons = IconCache(
            lambda coro: self.hass.async_create_task(coro),
            self._icon_updated,
            self._icon_failed,
            run_in_executor=lambda func, *args: self.hass.async_add_executor_job(func, *args),
        )

        self.status: Status = Status.CONNECTING
        self.status_message: str | None = None

        # UTC offset (seconds) reported by the last document; used in location mode
        self._document_offset: int | None = None

        # Bumped on shutdown; poll completions from older generations are ignored
        self._generation: int = 0
        self._initialized: bool = False
        self._initial_refresh_done: bool = False
        self._poll_tasks: set[asyncio.Task] = set()

        # Snapshot starts empty; entities must handle None values until first poll
        self.data = WeatherSnapshot()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> bool:
        """
        Validate configuration and arm the scheduler.

        Returns False (status BAD_CONFIG) when the entry cannot be used; in
        that case no poll is ever issued.
        """
        try:
            validate_entry_data(self._entry_data)
        except ConfigError as exc:
            _LOGGER.error("OpenWeather configuration error: %s", exc)
            self._set_status(Status.BAD_CONFIG, str(exc))
            self._initialized = False
            return False

        self.scheduler.reset()
        self._document_offset = None
        self._initialized = True
        self._initial_refresh_done = False
        self._set_status(Status.CONNECTING)
        return True

    async def async_shutdown(self) -> None:
        """Stop ticking and reset in-memory state; in-flight requests are left to finish."""
        await super().async_shutdown()
        self._generation += 1
        self._initialized = False
        self.scheduler.reset()
        self.icons.clear()
        self._poll_tasks.clear()
        self.data = WeatherSnapshot()

    # ------------------------------------------------------------------
    # HA entry point: the scheduler tick
    # ------------------------------------------------------------------

    async def _async_update_data(self) -> WeatherSnapshot:
        """
        Called by HA on every update_interval tick.

        First call: polls in the foreground so setup publishes real values.
        Subsequent calls: start a background poll when due, then return the
        current snapshot with fresh wall clock values.
        """
        if not self._initialized:
            return self.data

        if not self._initial_refresh_done:
            self._initial_refresh_done = True
            if self._try_issue_poll():
                await self._async_fetch(self._generation)
            return self._with_wall_clock(self.data)

        if self.scheduler.is_due(time.monotonic()) and self._try_issue_poll():
            task = self.hass.async_create_task(self._async_fetch(self._generation))
            self._poll_tasks.add(task)
            task.add_done_callback(self._poll_tasks.discard)

        return self._with_wall_clock(self.data)

    async def async_manual_refresh(self) -> None:
        """The 'refresh' action: poll now unless spacing or the latch forbids it."""
        if self._try_issue_poll():
            await self._async_fetch(self._generation)

    def _try_issue_poll(self) -> bool:
        """Stamp the scheduler and return True if a poll may be issued now."""
        if not self._initialized:
            return False
        now = time.monotonic()
        if not self.scheduler.can_poll(now):
            return False
        self.scheduler.mark_polled(now)
        return True

    # ------------------------------------------------------------------
    # Poll completion routing
    # ------------------------------------------------------------------

    async def _async_fetch(self, generation: int) -> None:
        """Fetch one weather document and route the outcome."""
        try:
            document = await fetch_weather(self.location, self.api_key)
        except ProviderError as exc:
            if self._is_stale(generation):
                return
            _LOGGER.error("OpenWeather error for %s: %s", self.location, exc.message)
            self.scheduler.latch()
            self._set_status(Status.UNKNOWN_ERROR, exc.message)
            self.async_update_listeners()
            return
        except UnexpectedResponse as exc:
            if self._is_stale(generation):
                return
            _LOGGER.error("Unexpected OpenWeather response (HTTP %s): %s", exc.status, exc.message)
            self._set_status(Status.UNKNOWN_ERROR, exc.message)
            self._reset_display(exc.message)
            return
        except TransportError as exc:
            if self._is_stale(generation):
                return
            _LOGGER.error("Error connecting to OpenWeather: %s", exc)
            self._set_status(Status.CONNECTION_FAILURE, str(exc))
            self.async_update_listeners()
            return

        if self._is_stale(generation):
            return

        try:
            snapshot = self._build_snapshot(document)
        except (TypeError, ValueError, KeyError, AttributeError) as exc:
            _LOGGER.error("Malformed OpenWeather document for %s: %s", self.location, exc)
            self._set_status(Status.UNKNOWN_ERROR, MALFORMED_MESSAGE)
            self._reset_display(MALFORMED_MESSAGE)
            return

        self.scheduler.clear_error()
        self._set_status(Status.OK, "Connected")
        self._document_offset = parse_document_offset(document)
        self.async_set_updated_data(snapshot)

        if snapshot.icon_code:
            self.icons.ensure(snapshot.icon_code, fetch_icon)

    def _is_stale(self, generation: int) -> bool:
        if generation != self._generation or not self._initialized:
            _LOGGER.debug("Ignoring weather response that arrived after reset")
            return True
        return False

    def _current_offset(self, document_offset: int | None = None) -> int:
        """Effective UTC offset right now; host mode follows DST changes between polls."""
        if document_offset is None:
            document_offset = self._document_offset
        return effective_offset(self.timezone_mode, document_offset)

    def _build_snapshot(self, document: dict) -> WeatherSnapshot:
        """Convert one document into a full snapshot; raises on wrong-typed fields."""
        offset = self._current_offset(parse_document_offset(document))

        variables = empty_variables()
        variables.update(map_variables(document, self.units, offset))
        variables.update(wall_clock_variables(offset))

        conditions = document.get("weather")
        primary = conditions[0] if isinstance(conditions, list) and conditions else None
        icon_code = primary.get("icon") if isinstance(primary, dict) else None

        return WeatherSnapshot(
            variables=variables,
            is_day=is_daytime(document),
            icon_code=icon_code,
            document=document,
        )

    def _reset_display(self, message: str) -> None:
        """Clear every variable, then show message as the location name."""
        variables = empty_variables()
        variables["l_name"] = message
        variables.update(wall_clock_variables(self._current_offset()))
        self.icons.release_active()
        self.async_set_updated_data(WeatherSnapshot(variables=variables))

    def _with_wall_clock(self, snapshot: WeatherSnapshot) -> WeatherSnapshot:
        variables = dict(snapshot.variables)
        variables.update(wall_clock_variables(self._current_offset()))
        return dataclasses.replace(snapshot, variables=variables)

    # ------------------------------------------------------------------
    # Icon callbacks
    # ------------------------------------------------------------------

    def _icon_updated(self) -> None:
        self.async_update_listeners()

    def _icon_failed(self, exc: IconFetchError) -> None:
        if not self._initialized:
            return
        self._set_status(Status.ERROR, str(exc))
        self.async_update_listeners()

    # ------------------------------------------------------------------
    # Status and entity helpers
    # ------------------------------------------------------------------

    def _set_status(self, status: Status, message: str | None = None) -> None:
        if status != self.status or message != self.status_message:
            _LOGGER.debug("Status %s -> %s (%s)", self.status, status, message)
        self.status = status
        self.status_message = message

    def get_icon_feedback(self) -> dict | None:
        """Current icon plus day/night colour hints, or None until an icon is cached."""
        png64 = self.icons.active_icon
        if png64 is None:
            return None
        is_day = bool(self.data.is_day)
        return {
            "png64": png64,
            "bgcolor": combine_rgb(DAY_BGCOLOR if is_day else NIGHT_BGCOLOR),
            "color": combine_rgb(DAY_COLOR if is_day else NIGHT_COLOR),
        }

    def get_device_info(self) -> dict:
        """Return the HA DeviceInfo dict shared by all entities of this entry."""
        return {
            "identifiers": {(DOMAIN, self._entry_data.get("guid") or self.location)},
            "name": self._entry_data.get(CONF_ENTRY_NAME) or DEFAULT_ENTRY_NAME,
            "manufacturer": "OpenWeatherMap",
            "model": self.location,
            "sw_version": VERSION,
        }

    @property
    def entry_data(self):
        return self._entry_data
