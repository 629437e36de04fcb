"""Async client for the Nominatim search and reverse endpoints.

Failures are split in two: ``UpstreamError`` for anything the caller may
shrug off (bad status, connection refused, garbage body) and the built-in
``asyncio.TimeoutError`` when the request exceeded its deadline.
"""

import asyncio
import logging
import re
from typing import Any, Optional

import aiohttp

from address_search.core.config import settings

logger = logging.getLogger(__name__)

SEARCH_PATH = "/search"
REVERSE_PATH = "/reverse"

if settings.NOMINATIM_USER_AGENT is None:
    logger.warning(
        "NOMINATIM_USER_AGENT not set in environment; using fallback UA. "
        "This may violate Nominatim usage policy."
    )


class UpstreamError(Exception):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def _redact_email(ua: str) -> str:
    if "@" not in ua:
        return ua
    return re.sub(r"\S+@\S+", "<redacted>", ua)


class NominatimClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = (base_url or settings.NOMINATIM_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.NOMINATIM_TIMEOUT_SECONDS
        self.session = session

        ua = user_agent or settings.NOMINATIM_USER_AGENT or settings.FALLBACK_USER_AGENT
        self.headers = {"User-Agent": ua, "Accept": "application/json"}
        if settings.NOMINATIM_REFERER:
            self.headers["Referer"] = settings.NOMINATIM_REFERER
        logger.debug("Nominatim User-Agent: %s", _redact_email(ua))

    async def search(
        self,
        query: str,
        limit: int,
        country_codes: Optional[str] = None,
        accept_language: Optional[str] = None,
    ) -> list[dict]:
        params = {
            "q": query,
            "format": "json",
            "addressdetails": "1",
            "limit": str(limit),
            "countrycodes": country_codes or settings.DEFAULT_COUNTRY_CODES,
            "accept-language": accept_language or settings.ACCEPT_LANGUAGE,
        }
        data = await self._get_json(SEARCH_PATH, params)
        if not isinstance(data, list):
            raise UpstreamError(
                f"Expected a JSON array from {SEARCH_PATH}, got {type(data).__name__}"
            )
        return data

    async def reverse(
        self,
        lat: float,
        lon: float,
        accept_language: Optional[str] = None,
    ) -> dict:
        params = {
            "lat": str(lat),
            "lon": str(lon),
            "format": "json",
            "addressdetails": "1",
            "accept-language": accept_language or settings.ACCEPT_LANGUAGE,
        }
        data = await self._get_json(REVERSE_PATH, params)
        if not isinstance(data, dict):
            raise UpstreamError(
                f"Expected a JSON object from {REVERSE_PATH}, got {type(data).__name__}"
            )
        return data

    async def _get_json(self, path: str, params: dict[str, str]) -> Any:
        url = f"{self.base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        if self.session is not None:
            return await self._fetch(self.session, url, params, timeout)
        async with aiohttp.ClientSession() as session:
            return await self._fetch(session, url, params, timeout)

    async def _fetch(self, session, url, params, timeout) -> Any:
        try:
            async with session.get(
                url, params=params, headers=self.headers, timeout=timeout
            ) as resp:
                if not 200 <= resp.status < 300:
                    try:
                        error_text = await resp.text(errors="replace")
                    except (UnicodeDecodeError, LookupError):
                        error_text = "<undecodable body>"
                    raise UpstreamError(
                        f"Nominatim error: {resp.status} - {error_text[:200]}",
                        status=resp.status,
                    )
                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    raise UpstreamError(
                        f"Invalid JSON response from Nominatim: {e}", status=resp.status
                    ) from e
        except asyncio.TimeoutError:
            raise
        except aiohttp.ClientError as e:
            raise UpstreamError(f"Failed to connect to Nominatim: {e}") from e
