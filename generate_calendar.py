#!/usr/bin/env python3
"""
VCT Match Calendar Generator

Scrapes the VCT tournament listing and every tournament's matches page
from vlr.gg and writes a single ICS calendar with one event per
tournament and one per match.

Usage: generate_calendar.py [site.json]
"""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from vct_calendar import FetchError, load_config
from vct_calendar.calendar_gen import create_schedule_calendar, validate_ics
from vct_calendar.fetch import HttpPageFetcher
from vct_calendar.schedule import ScheduleBuilder


def configure_logging() -> None:
    """Console plus combined and error-only log files."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level="INFO",
    )
    logger.add("combined.log", level="INFO", encoding="utf-8")
    logger.add("error.log", level="ERROR", encoding="utf-8")


def main() -> int:
    configure_logging()
    config = load_config(sys.argv[1] if len(sys.argv) > 1 else "site.json")
    builder = ScheduleBuilder(config, HttpPageFetcher(config))

    try:
        schedule = builder.fetch_schedule()
    except FetchError as e:
        logger.error(f"Listing page unavailable, no calendar written: {e}")
        return 1

    degraded = [t.title for t in schedule if not t.matches]
    logger.info(
        f"Scraped {len(schedule)} tournament(s), {len(schedule.matches)} match(es)"
    )
    for title in degraded:
        logger.warning(f"  {title}: no matches")

    ics_bytes = create_schedule_calendar(schedule, config).to_ical()
    if not validate_ics(ics_bytes):
        logger.error("Generated ICS failed validation, no calendar written")
        return 1

    output_path = Path(config.output_path)
    output_path.write_bytes(ics_bytes)
    logger.info(f"Saved {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
