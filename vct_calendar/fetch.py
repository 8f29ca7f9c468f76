"""Page fetching over HTTP."""

from __future__ import annotations

from typing import Protocol

import requests
from loguru import logger

from vct_calendar import FetchError, SiteConfig


class PageFetcher(Protocol):
    def fetch(self, url: str) -> str: ...


class HttpPageFetcher:
    """Fetch HTML pages with ``requests``.

    Every failure (transport, HTTP status, wrong content type) surfaces
    as :class:`FetchError` so callers only have one thing to catch.
    """

    def __init__(self, config: SiteConfig) -> None:
        self.headers = {"User-Agent": config.user_agent}
        self.timeout = config.timeout

    def fetch(self, url: str) -> str:
        logger.info(f"Fetching: {url} ...")
        try:
            response = requests.get(url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"{url}: {e}") from e

        content_type = response.headers.get("content-type", "")
        if "text/html" not in content_type:
            raise FetchError(f"{url}: expected HTML, got {content_type or 'no content type'}")

        logger.info(f"Fetched: {url}")
        return response.text
