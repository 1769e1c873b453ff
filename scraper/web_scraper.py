# =================================================================
# scraper/web_scraper.py - Fetch the listing page
# =================================================================

import logging
from typing import Optional

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from .errors import UpstreamHttpError, UpstreamUnavailableError

logger = logging.getLogger(__name__)


class WebScraper:
    """Fetches raw page HTML with a browser-like identity.

    Only connection failures are retried in-process. HTTP error statuses and
    timeouts fail the attempt immediately; the next natural request is the retry.
    """

    def __init__(self, config, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport
        self._get_with_retry = retry(
            stop=stop_after_attempt(max(1, config.retry_attempts)),
            wait=wait_exponential(multiplier=1, min=1, max=4),
            retry=retry_if_exception_type(httpx.ConnectError),
            reraise=True
        )(self._get)

    @property
    def headers(self) -> dict:
        return {
            "User-Agent": self.config.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": self.config.accept_language,
        }

    async def _get(self, url: str) -> httpx.Response:
        async with httpx.AsyncClient(
            headers=self.headers,
            timeout=self.config.request_timeout,
            follow_redirects=True,
            transport=self.transport
        ) as client:
            return await client.get(url)

    async def fetch(self, url: str) -> str:
        """GET the page and return its text, classifying failures"""
        logger.info(f"🔍 Fetching {url}")
        try:
            response = await self._get_with_retry(url)
        except httpx.TimeoutException as e:
            logger.error(f"❌ Timed out fetching {url}: {e}")
            raise UpstreamUnavailableError(f"Timed out after {self.config.request_timeout}s") from e
        except httpx.TransportError as e:
            logger.error(f"❌ Transport error fetching {url}: {e}")
            raise UpstreamUnavailableError(str(e)) from e

        if not response.is_success:
            logger.error(f"❌ Upstream returned {response.status_code} for {url}")
            raise UpstreamHttpError(response.status_code, url)

        logger.info(f"✅ Fetched {len(response.text)} characters from {url}")
        return response.text
