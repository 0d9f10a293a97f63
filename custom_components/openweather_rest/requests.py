"""
Low-level HTTP access to OpenWeatherMap.

This module handles the weather and icon GET requests with retry on timeout and
translates every failure into one of the errors in errors.py.
"""
from __future__ import annotations

import asyncio
import json
import logging

import aiohttp

from .const import BASE_URL, ICON_URL, MALFORMED_MESSAGE
from .errors import IconFetchError, ProviderError, TransportError, UnexpectedResponse

_LOGGER = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10  # seconds, multiplied by attempt number for each retry
REQUEST_ATTEMPTS = 2  # maximum number of attempts on timeout


async def make_request(
    url: str,
    params: dict | None = None,
    timeout: int = REQUEST_TIMEOUT,
    max_attempts: int = REQUEST_ATTEMPTS,
) -> tuple[int, str, bytes]:
    """
    GET url, retrying on timeout.

    Returns:
        (status, content_type, body)

    Raises:
        TransportError: on connection errors or when all attempts time out
    """
    for attempt in range(max_attempts):
        # Timeout grows with each attempt
        timeout_config = aiohttp.ClientTimeout(total=timeout * (attempt + 1))
        try:
            async with aiohttp.ClientSession(timeout=timeout_config) as session:
                async with session.get(url, params=params) as response:
                    body = await response.read()
                    return response.status, response.headers.get("Content-Type", ""), body
        except (asyncio.TimeoutError, TimeoutError) as e:
            if attempt < max_attempts - 1:
                _LOGGER.debug("Timeout on GET %s, attempt %s of %s", url, attempt + 1, max_attempts)
                continue
            raise TransportError(f"Timeout after {max_attempts} attempts") from e
        except aiohttp.ClientError as e:
            raise TransportError(str(e) or type(e).__name__) from e
    raise TransportError("No request attempted")


def _decode_json(body: bytes) -> dict | None:
    try:
        decoded = json.loads(body)
    except ValueError:
        return None
    return decoded if isinstance(decoded, dict) else None


async def fetch_weather(location: str, api_key: str) -> dict:
    """
    Fetch the current weather document for a location.

    Raises:
        ProviderError: body carries an "error" envelope
        UnexpectedResponse: non-200 without envelope, or a body that is not JSON
        TransportError: network level failure
    """
    status, content_type, body = await make_request(BASE_URL, params={"q": location, "appid": api_key})
    data = _decode_json(body)

    if data is not None and data.get("error"):
        raise ProviderError(data)
    if status == 200:
        if data is None:
            _LOGGER.warning("Weather response is not a JSON object (content type %s)", content_type)
            raise UnexpectedResponse(status, MALFORMED_MESSAGE)
        return data

    message = data.get("message") if data is not None else None
    if message is None:
        message = body[:200].decode("utf-8", errors="replace") or None
    raise UnexpectedResponse(status, message)


async def fetch_icon(code: str) -> bytes:
    """Download the raw PNG for a condition icon code."""
    url = ICON_URL.format(code=code)
    try:
        status, _content_type, body = await make_request(url)
    except TransportError as e:
        raise IconFetchError(f"Icon {code}: {e}") from e
    if status != 200:
        raise IconFetchError(f"Icon {code}: HTTP {status}")
    return body
