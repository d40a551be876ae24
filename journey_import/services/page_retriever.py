"""
Page Retriever Service.

Fetches share pages with a browser-like identity and a hard time limit.
"""

import asyncio
import logging
from typing import Dict, Optional

import httpx

from journey_import.config import settings
from journey_import.services.platform_classifier import classify_url
from journey_import.services.scraper.errors import FetchFailedError, FetchTimeoutError

logger = logging.getLogger(__name__)

# Gemini redirects cookie-less clients to a consent wall
GEMINI_CONSENT_COOKIE = "CONSENT=PENDING+987; SOCS=CAESEwgDEgk2MjczOTEyOTYaAmVuIAEaBgiA_J-6Bg"


class PageRetrieverService:
    """Service for retrieving raw share page markup."""

    def __init__(
        self,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout_seconds = (
            settings.FETCH_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        )
        self._transport = transport

    def _build_headers(self, url: str) -> Dict[str, str]:
        headers = {
            "User-Agent": settings.FETCH_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }
        if classify_url(url) == "gemini":
            headers["Cookie"] = GEMINI_CONSENT_COOKIE
        return headers

    async def _get(self, url: str) -> str:
        async with httpx.AsyncClient(
            headers=self._build_headers(url),
            follow_redirects=True,
            timeout=self.timeout_seconds,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(url)
            except httpx.TimeoutException as e:
                logger.debug(f"Fetch timed out for {url}: {e}")
                raise FetchTimeoutError(
                    f"Failed to fetch: timed out after {self.timeout_seconds:g} seconds."
                )
            except httpx.HTTPError as e:
                logger.debug(f"Fetch failed for {url}: {e}")
                raise FetchFailedError(f"Failed to fetch: {e}")

        if not response.is_success:
            logger.debug(f"Fetch for {url} returned HTTP {response.status_code}")
            raise FetchFailedError(
                f"Failed to fetch: HTTP {response.status_code}. "
                "The shared link may be expired or invalid.",
                status_code=response.status_code,
            )
        return response.text

    async def fetch(self, url: str) -> str:
        """
        Fetch the raw markup of a share page.

        Args:
            url: The share URL to fetch

        Returns:
            The response body as text

        Raises:
            FetchTimeoutError: If the whole request exceeds the timeout; the request is cancelled
            FetchFailedError: On transport errors or non-2xx responses
        """
        logger.debug(f"Fetching share page: {url}")
        try:
            return await asyncio.wait_for(self._get(url), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.debug(f"Fetch exceeded {self.timeout_seconds}s for {url}")
            raise FetchTimeoutError(
                f"Failed to fetch: timed out after {self.timeout_seconds:g} seconds."
            )
