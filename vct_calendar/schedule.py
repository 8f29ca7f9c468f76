"""Assemble the full schedule from the VCT listing page."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date

from loguru import logger

from vct_calendar import Schedule, SiteConfig, Tournament
from vct_calendar.fetch import PageFetcher
from vct_calendar.markup import Fragment, parse_markup
from vct_calendar.scraper import LISTING_ENTRY_SELECTOR, parse_tournament


class ScheduleBuilder:
    """Turn the listing page into an ordered :class:`Schedule`.

    Listing entries are processed on a bounded thread pool; each one
    blocks only on its own matches page fetch. ``Executor.map`` hands
    results back in submission order, so the schedule always follows
    the listing page no matter which fetch finishes first.
    """

    def __init__(
        self,
        config: SiteConfig,
        fetcher: PageFetcher,
        today: date | None = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.today = today

    def fetch_schedule(self) -> Schedule:
        """Fetch the listing page and build the schedule.

        A listing page failure raises :class:`FetchError`; it is the
        only failure that aborts the run.
        """
        html = self.fetcher.fetch(self.config.listing_url)
        return self.build(html)

    def build(self, html: str) -> Schedule:
        entries = parse_markup(html).select(LISTING_ENTRY_SELECTOR)
        logger.info(f"Found {len(entries)} tournament(s) on the listing page")

        if self.config.max_workers == 1 or len(entries) <= 1:
            results = [self._extract(entry) for entry in entries]
        else:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                results = list(pool.map(self._extract, entries))

        tournaments = tuple(t for t in results if t is not None)
        skipped = len(results) - len(tournaments)
        if skipped:
            logger.warning(f"Skipped {skipped} tournament(s) with unreadable data")
        return Schedule(tournaments=tournaments)

    def _extract(self, entry: Fragment) -> Tournament | None:
        try:
            return parse_tournament(entry, self.fetcher, self.config, self.today)
        except ValueError as e:
            logger.warning(f"Skipping tournament: {e}")
            return None
