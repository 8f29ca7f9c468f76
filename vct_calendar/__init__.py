"""VCT Calendar — shared data models, configuration and errors."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from pathlib import Path


class ScheduleError(Exception):
    """Base class for scraping and normalization failures."""


class FetchError(ScheduleError):
    """A page could not be fetched or was not HTML."""


class DateParseError(ScheduleError, ValueError):
    """Date or time text that does not resolve to a real calendar value."""


@dataclass
class SiteConfig:
    """Where to scrape from and how to describe the resulting events."""

    base_url: str = "https://www.vlr.gg"
    listing_path: str = "/vct"
    matches_path: str = "/event/matches/"
    event_marker: str = "/event/"
    organizer_name: str = "无畏契约"
    organizer_email: str = "vct@qq.com"
    match_url: str = "https://vct.qq.com"
    geo: tuple[float, float] = (30.0095, 120.2669)
    utc_offset_minutes: int = 0
    match_duration_minutes: int = 120
    match_alarm_minutes: int = 30
    tournament_alarm_minutes: int = 60
    max_workers: int = 4
    output_path: str = "vct-cn.ics"
    user_agent: str = "VCTCalendarBot/1.0 (+https://vct.qq.com)"
    timeout: int = 30

    def __post_init__(self) -> None:
        self.geo = tuple(self.geo)
        if self.match_duration_minutes <= 0:
            raise ValueError("match_duration_minutes must be positive")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

    @property
    def listing_url(self) -> str:
        return f"{self.base_url}{self.listing_path}"

    @property
    def tzinfo(self) -> timezone:
        return timezone(timedelta(minutes=self.utc_offset_minutes))


def load_config(path: str = "site.json") -> SiteConfig:
    """Load site configuration overrides from a JSON file.

    A missing file gives the default configuration.
    """
    config_file = Path(path)
    if not config_file.exists():
        return SiteConfig()
    with open(config_file, encoding="utf-8") as f:
        data = json.load(f)
    return SiteConfig(**data)


@dataclass(frozen=True, order=True)
class CalendarTimestamp:
    """A wall-clock minute in the configured fixed offset."""

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0

    def __post_init__(self) -> None:
        # datetime() does the month/day/hour/minute range checks for us
        self.to_datetime()

    @classmethod
    def from_date(cls, value: date) -> CalendarTimestamp:
        return cls(value.year, value.month, value.day)

    @classmethod
    def from_datetime(cls, value: datetime) -> CalendarTimestamp:
        return cls(value.year, value.month, value.day, value.hour, value.minute)

    def to_datetime(self, tzinfo: timezone | None = None) -> datetime:
        return datetime(self.year, self.month, self.day, self.hour, self.minute, tzinfo=tzinfo)

    def shift(self, minutes: int) -> CalendarTimestamp:
        try:
            shifted = self.to_datetime() + timedelta(minutes=minutes)
        except OverflowError as e:
            raise DateParseError(f"{self.as_tuple()} shifted by {minutes} minutes: {e}") from e
        return CalendarTimestamp.from_datetime(shifted)

    def minutes_until(self, other: CalendarTimestamp) -> int:
        return int((other.to_datetime() - self.to_datetime()).total_seconds() // 60)

    def as_tuple(self) -> tuple[int, int, int, int, int]:
        return (self.year, self.month, self.day, self.hour, self.minute)


@dataclass(frozen=True)
class Alarm:
    """An audio reminder that fires a number of minutes before an event."""

    minutes_before: int
    action: str = "audio"
    attach: str = "Glass"
    repeat: int = 1
    repeat_every_minutes: int = 5


@dataclass(frozen=True)
class Participant:
    """One side of a match."""

    name: str = "TBD"
    score: int = 0
    is_winner: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("participant name must not be empty")
        if self.score < 0:
            raise ValueError(f"negative score for {self.name}: {self.score}")


@dataclass(frozen=True)
class Match:
    """A single scheduled match between exactly two participants."""

    title: str
    description: str
    start: CalendarTimestamp
    end: CalendarTimestamp
    participants: tuple[Participant, Participant]
    status_label: str
    series: str = ""
    event_type: str = ""
    eta: str = ""
    vod_tags: tuple[str, ...] = ()
    alarm: Alarm | None = None

    def __post_init__(self) -> None:
        if len(self.participants) != 2:
            raise ValueError(f"a match needs two participants, got {len(self.participants)}")
        if self.end <= self.start:
            raise ValueError(f"match {self.title!r} ends before it starts")

    @property
    def is_upcoming(self) -> bool:
        return self.status_label.lower() == "upcoming"


@dataclass(frozen=True)
class Tournament:
    """A tournament listing entry together with its matches."""

    title: str
    description: str
    start: CalendarTimestamp
    end: CalendarTimestamp
    region: str
    status: str
    url: str
    prize_pool: str = ""
    matches: tuple[Match, ...] = ()
    alarm: Alarm | None = None

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"tournament {self.title!r} ends before it starts")


@dataclass(frozen=True)
class Schedule:
    """All tournaments of one run, in listing order."""

    tournaments: tuple[Tournament, ...] = ()
    generated_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )

    def __iter__(self):
        return iter(self.tournaments)

    def __len__(self) -> int:
        return len(self.tournaments)

    @property
    def matches(self) -> list[Match]:
        return [m for t in self.tournaments for m in t.matches]
