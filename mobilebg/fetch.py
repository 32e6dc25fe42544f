"""
Page fetching over Playwright's HTTP request API.

No browser is launched: results pages are server-rendered, so the raw body
is fetched and decoded from the site's native encoding.
"""
import logging
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .config import DEFAULT_USER_AGENT
from .exceptions import FetchError
from .utils import get_logger


class PageFetcher:
    """
    Async context manager returning decoded page text for a URL.

        async with PageFetcher() as fetcher:
            html = await fetcher.fetch(url)
    """

    def __init__(
        self,
        encoding: str = "windows-1251",
        timeout_ms: int = 10_000,
        user_agent: str = DEFAULT_USER_AGENT,
        logger: Optional[logging.Logger] = None
    ):
        self.encoding = encoding
        self.timeout_ms = timeout_ms
        self.user_agent = user_agent
        self.logger = get_logger(logger)
        self._playwright = None
        self._request = None

    async def __aenter__(self) -> "PageFetcher":
        try:
            self._playwright = await async_playwright().start()
        except PlaywrightError as e:
            raise FetchError("playwright", f"driver failed to start: {e}") from e

        try:
            self._request = await self._playwright.request.new_context(
                user_agent=self.user_agent,
                extra_http_headers={"Accept-Language": "bg-BG,bg;q=0.9,en;q=0.8"},
                timeout=self.timeout_ms,
            )
        except PlaywrightError as e:
            # __aexit__ never runs when __aenter__ fails
            await self._playwright.stop()
            self._playwright = None
            raise FetchError("playwright", f"request context failed: {e}") from e
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._request is not None:
            await self._request.dispose()
            self._request = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def fetch(self, url: str) -> str:
        """Fetch `url` and decode it; raises FetchError on any failure."""
        if self._request is None:
            raise FetchError(url, "fetcher is not open")

        self.logger.info(f">>> Fetching page: {url}")
        try:
            response = await self._request.get(url, timeout=self.timeout_ms)
        except PlaywrightError as e:
            raise FetchError(url, str(e)) from e

        try:
            if not response.ok:
                raise FetchError(url, f"HTTP {response.status} {response.status_text}")
            body = await response.body()
        except PlaywrightError as e:
            raise FetchError(url, str(e)) from e
        finally:
            await response.dispose()

        return decode_page(body, self.encoding)


def decode_page(body: bytes, encoding: str = "windows-1251") -> str:
    """Decode a page body, replacing bytes the encoding cannot map."""
    return body.decode(encoding, errors="replace")
