"""
IconCache — condition icon bitmaps keyed by provider icon code.

Pure asyncio bookkeeping plus Pillow; no HA imports. The active code is set
before any fetch starts, so overlapping refreshes reporting the same condition
never start a second download. Entries are never evicted; the provider only
has a few dozen icon codes.
"""
from __future__ import annotations

import asyncio
import base64
import io
import logging
from typing import Awaitable, Callable

from PIL import Image

from .const import ICON_SIZE
from .errors import IconFetchError

_LOGGER = logging.getLogger(__name__)

IconFetcher = Callable[[str], Awaitable[bytes]]


def encode_icon(raw: bytes, size: tuple[int, int] = ICON_SIZE) -> str:
    """Decode image bytes, scale to fit within size, return base64 PNG."""
    with Image.open(io.BytesIO(raw)) as image:
        image = image.convert("RGBA")
        image.thumbnail(size)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


class IconCache:
    """
    Cache of encoded icons with in-flight de-duplication.

    create_task schedules a coroutine on the event loop (hass.async_create_task
    in production). run_in_executor runs Pillow work off the loop
    (hass.async_add_executor_job in production; the loop's default executor
    otherwise). on_update is called whenever the active icon becomes available
    and on_error receives the exception of a failed fetch.
    """

    def __init__(
        self,
        create_task: Callable[[Awaitable], asyncio.Task],
        on_update: Callable[[], None],
        on_error: Callable[[Exception], None] | None = None,
        size: tuple[int, int] = ICON_SIZE,
        run_in_executor: Callable[..., Awaitable] | None = None,
    ) -> None:
        self._create_task = create_task
        self._run_in_executor = run_in_executor
        self._on_update = on_update
        self._on_error = on_error
        self._size = size
        self._icons: dict[str, str] = {}
        self._in_flight: dict[str, asyncio.Task] = {}
        # Bumped by clear(); fetches started under an older generation are dropped
        self._generation = 0
        self.active_code: str = ""

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def get(self, code: str) -> str | None:
        return self._icons.get(code)

    @property
    def active_icon(self) -> str | None:
        """Encoded bitmap of the active code, if it has been fetched."""
        return self._icons.get(self.active_code)

    def ensure(self, code: str, fetcher: IconFetcher) -> None:
        """
        Make code the active icon, fetching it if it is not cached yet.

        Re-requesting the active code is a no-op: no fetch and no notification.
        """
        if not code or code == self.active_code:
            return

        self.active_code = code

        if code in self._icons:
            self._on_update()
            return

        if code in self._in_flight:
            _LOGGER.debug("Icon %s already being fetched", code)
            return

        task = self._create_task(self._fetch(code, fetcher, self._generation))
        self._in_flight[code] = task
        task.add_done_callback(lambda t, c=code: self._forget(c, t))

    def release_active(self) -> None:
        """Forget the active code; cached bitmaps stay."""
        self.active_code = ""

    def clear(self) -> None:
        """Drop every cached icon and forget in-flight fetches without cancelling them."""
        self._generation += 1
        self._icons.clear()
        self._in_flight.clear()
        self.active_code = ""

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _forget(self, code: str, task: asyncio.Task) -> None:
        if self._in_flight.get(code) is task:
            del self._in_flight[code]

    async def _encode(self, raw: bytes) -> str:
        if self._run_in_executor is not None:
            return await self._run_in_executor(encode_icon, raw, self._size)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, encode_icon, raw, self._size)

    async def _fetch(self, code: str, fetcher: IconFetcher, generation: int) -> None:
        try:
            raw = await fetcher(code)
            encoded = await self._encode(raw)
        except (IconFetchError, OSError, ValueError, Image.DecompressionBombError) as exc:
            if generation != self._generation:
                return
            _LOGGER.error("Failed to fetch icon %s: %s", code, exc)
            # Leave the code unresolved so the next report of it retries
            if self.active_code == code:
                self.release_active()
            if self._on_error is not None:
                self._on_error(exc if isinstance(exc, IconFetchError) else IconFetchError(f"Icon {code}: {exc}"))
            return

        if generation != self._generation:
            _LOGGER.debug("Dropping icon %s fetched before cache reset", code)
            return

        self._icons[code] = encoded
        self._on_update()
