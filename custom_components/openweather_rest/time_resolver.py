"""
Timezone selection and timestamp formatting.

Timestamps are shifted by the effective offset and then read back as UTC, so
the host's own timezone is never applied a second time.
"""
from __future__ import annotations

import time
from datetime import datetime, timezone
from enum import StrEnum

from homeassistant.util import dt as dt_util


class TimezoneMode(StrEnum):
    LOCATION = "location"   # offset reported for the queried location
    HOST = "host"           # Home Assistant's configured time zone
    UTC = "utc"


def host_offset(now: datetime | None = None) -> int:
    """Offset of Home Assistant's time zone from UTC, in seconds."""
    now = now or dt_util.now()
    offset = now.utcoffset()
    return int(offset.total_seconds()) if offset is not None else 0


def effective_offset(mode: TimezoneMode | str, document_offset: int | None, now: datetime | None = None) -> int:
    """Pick the UTC offset (seconds) to apply for the configured timezone mode."""
    mode = TimezoneMode(mode)
    if mode is TimezoneMode.LOCATION:
        return int(document_offset or 0)
    if mode is TimezoneMode.HOST:
        return host_offset(now)
    return 0


def _shifted(epoch: float, offset: int) -> datetime:
    return datetime.fromtimestamp(epoch + offset, tz=timezone.utc)


def format_clock(epoch: float, offset: int) -> str:
    """HH:MM of epoch seconds shifted by offset seconds."""
    return _shifted(epoch, offset).strftime("%H:%M")


def format_date_clock(epoch: float, offset: int) -> str:
    """MM-DD HH:MM of epoch seconds shifted by offset seconds."""
    return _shifted(epoch, offset).strftime("%m-%d %H:%M")


def wall_clock_variables(offset: int, now: float | None = None) -> dict[str, str]:
    """Current wall clock values for the l_localtime / l_time variables."""
    if now is None:
        now = time.time()
    return {
        "l_localtime": format_date_clock(now, offset),
        "l_time": format_clock(now, offset),
    }
