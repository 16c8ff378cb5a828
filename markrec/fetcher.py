# markrec/fetcher.py
"""
HTTPX-based page fetcher.

One AsyncClient is shared by every concurrent task of a run. Each request
carries the configured User-Agent; listing pages additionally send the
session cookie, detail pages are public and go out without it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx
from bs4 import BeautifulSoup

from markrec.config import Settings

log = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """A page could not be retrieved (network error or non-2xx status)."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url


@dataclass
class PageFetcher:
    """
    Async context manager wrapping an httpx.AsyncClient.

    `transport` lets callers (tests) inject an httpx transport such as
    httpx.MockTransport.
    """

    settings: Settings
    transport: httpx.AsyncBaseTransport | None = None

    _client: httpx.AsyncClient = field(init=False, repr=False)

    async def __aenter__(self) -> "PageFetcher":
        self._client = httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.settings.timeout,
            headers={"User-Agent": self.settings.user_agent},
            transport=self.transport,
        )
        log.debug("httpx session initialized.")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self._client.aclose()
        log.debug("httpx session closed.")

    async def _get(self, url: str, use_cookie: bool) -> httpx.Response:
        headers = {"Cookie": self.settings.cookie} if use_cookie else None
        try:
            resp = await self._client.get(url, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(url, f"HTTP error for {url}: {e}") from e
        except httpx.RequestError as e:
            raise FetchError(url, f"Network error fetching {url}: {e}") from e
        except httpx.InvalidURL as e:
            raise FetchError(url, f"Invalid URL {url}: {e}") from e

        log.debug("Fetched %s (%d bytes)", url, len(resp.content))
        return resp

    async def fetch(self, url: str, use_cookie: bool = False) -> bytes:
        """GET `url` and return the raw body. Raises FetchError on any failure."""
        resp = await self._get(url, use_cookie)
        return resp.content

    async def fetch_soup(self, url: str, use_cookie: bool = False) -> BeautifulSoup:
        resp = await self._get(url, use_cookie)
        return BeautifulSoup(resp.text, "html.parser")
