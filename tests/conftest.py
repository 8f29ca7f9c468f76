"""Shared fixtures: site config, fixture pages and an in-memory fetcher."""

from __future__ import annotations

import time
from datetime import date
from pathlib import Path

import pytest

from vct_calendar import FetchError, SiteConfig

FIXTURE_DIR = Path(__file__).parent / "fixtures"

TODAY = date(2024, 3, 1)
LISTING_URL = "https://www.vlr.gg/vct"
CHAMPIONS_URL = "https://www.vlr.gg/event/matches/2097/champions-tour-2024"
MASTERS_URL = "https://www.vlr.gg/event/matches/1999/champions-tour-2024-masters-shanghai"
ASCENSION_URL = "https://www.vlr.gg/event/matches/2100/china-ascension-2024"


class FakeFetcher:
    """Serves pages from a dict; unknown urls fail like a dead link."""

    def __init__(self, pages: dict[str, str], delays: dict[str, float] | None = None) -> None:
        self.pages = pages
        self.delays = delays or {}
        self.requested: list[str] = []
        self.completed: list[str] = []

    def fetch(self, url: str) -> str:
        self.requested.append(url)
        time.sleep(self.delays.get(url, 0))
        self.completed.append(url)
        if url not in self.pages:
            raise FetchError(f"{url}: 404 Not Found")
        return self.pages[url]


def read_fixture(name: str) -> str:
    return (FIXTURE_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def config() -> SiteConfig:
    return SiteConfig()


@pytest.fixture
def listing_html() -> str:
    return read_fixture("vct_listing.html")


@pytest.fixture
def champions_html() -> str:
    return read_fixture("champions_matches.html")


@pytest.fixture
def masters_html() -> str:
    return read_fixture("masters_matches.html")


@pytest.fixture
def fetcher(listing_html: str, champions_html: str, masters_html: str) -> FakeFetcher:
    # The ascension matches page is deliberately missing
    return FakeFetcher(
        {
            LISTING_URL: listing_html,
            CHAMPIONS_URL: champions_html,
            MASTERS_URL: masters_html,
        }
    )
