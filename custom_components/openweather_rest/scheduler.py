"""
RefreshScheduler — decides when a weather poll may be issued.

Times are time.monotonic() seconds. last_polled_at is stamped when a poll is
issued, not when it completes, so a slow response cannot let a second poll
start. has_error is a latch: only a successful response or reset() clears it.
"""
from __future__ import annotations

import logging

from .const import DEFAULT_REFRESH, MIN_POLL_SPACING

_LOGGER = logging.getLogger(__name__)


class RefreshScheduler:
    """Polling cadence, issue-time stamp and error latch for one location."""

    def __init__(self, refresh_minutes: int = DEFAULT_REFRESH, min_spacing: float = MIN_POLL_SPACING) -> None:
        self.refresh_interval: float = refresh_minutes * 60
        self.min_spacing = min_spacing
        self.last_polled_at: float = 0.0
        self.has_error: bool = False
        self._ever_polled = False

    def is_due(self, now: float) -> bool:
        """True when the configured refresh interval has elapsed."""
        if not self._ever_polled:
            return True
        return now - self.last_polled_at >= self.refresh_interval

    def can_poll(self, now: float) -> bool:
        """True unless latched or a poll was issued within min_spacing."""
        if self.has_error:
            _LOGGER.debug("Poll suppressed: error latch is set")
            return False
        if self._ever_polled and now - self.last_polled_at < self.min_spacing:
            _LOGGER.debug("Poll suppressed: last poll %.0fs ago", now - self.last_polled_at)
            return False
        return True

    def mark_polled(self, now: float) -> None:
        self.last_polled_at = max(self.last_polled_at, now)
        self._ever_polled = True

    def latch(self) -> None:
        self.has_error = True

    def clear_error(self) -> None:
        self.has_error = False

    def reset(self) -> None:
        """Back to the freshly initialized state (reconfiguration)."""
        self.last_polled_at = 0.0
        self.has_error = False
        self._ever_polled = False
