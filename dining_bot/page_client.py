"""
Page Client - Unified HTTP client for the dining menu and events pages.
Centralizes headers, timeouts and error handling.
"""

import logging
from typing import Dict, Optional

import httpx

from dining_bot.errors import FetchError
from dining_bot.models import DiningHall

logger = logging.getLogger(__name__)

DEFAULT_MENU_BASE_URL = "http://umassdining.com/locations-menus"

# Headers that the dining and events sites accept
DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml",
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36",
}


def menu_url(hall: DiningHall, base_url: str = DEFAULT_MENU_BASE_URL) -> str:
    """Menu page URL for a dining hall"""
    return f"{base_url.rstrip('/')}/{hall.code}/menu"


class PageClient:
    """Async HTTP client returning raw page text"""

    def __init__(self, timeout: float = 15.0, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize page client.

        Args:
            timeout: Request timeout in seconds
            client: Pre-built httpx client (tests inject a MockTransport here)
        """
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(
            headers=self._get_headers(),
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )

    def _get_headers(self) -> Dict[str, str]:
        return DEFAULT_HEADERS.copy()

    async def fetch_document(self, url: str) -> str:
        """
        GET a page and return its body.

        Args:
            url: Absolute page URL

        Returns:
            Response text

        Raises:
            FetchError: On timeout, transport failure or non-2xx status
        """
        try:
            logger.info(f"GET {url}")
            response = await self.client.get(url)
            response.raise_for_status()
            return response.text
        except httpx.TimeoutException:
            logger.warning(f"Timeout after {self.timeout}s for GET {url}")
            raise FetchError(url, f"timed out after {self.timeout}s")
        except httpx.HTTPStatusError as e:
            logger.warning(f"HTTP {e.response.status_code} error for GET {url}")
            raise FetchError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Request error for GET {url}: {e}")
            raise FetchError(url, str(e) or type(e).__name__) from e

    async def aclose(self) -> None:
        await self.client.aclose()
