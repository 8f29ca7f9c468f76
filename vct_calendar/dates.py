"""Date and time normalization for the schedule pages.

The listing and match pages never agree on a date format. Tournament
ranges read like ``"Jan 10 — Jan 28"``, match day headings like
``"Wed, January 15, 2025"`` or ``"Today"``, and match times like
``"2:00 PM"``. Everything here turns that text into plain ``date``
objects or :class:`CalendarTimestamp` values.

Dates without a year take the year of the reference date (``today``),
which callers pass in so runs are reproducible.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, timedelta

from vct_calendar import CalendarTimestamp, DateParseError

RANGE_SEPARATORS = ("—", "–")

_MONTHS: dict[str, int] = {}
for _number in range(1, 13):
    _MONTHS[calendar.month_name[_number].lower()] = _number
    _MONTHS[calendar.month_abbr[_number].lower()] = _number
_MONTHS["sept"] = 9

_RELATIVE_DAYS = {"today": 0, "tomorrow": 1, "yesterday": -1}

_TEXT_DATE_RE = re.compile(
    r"^(?:[A-Za-z]+,\s*)?"  # weekday
    r"(?P<month>[A-Za-z]+)\.?\s+(?P<day>\d{1,2})(?:st|nd|rd|th)?"
    r"(?:,?\s+(?P<year>\d{4}))?$"
)
_ISO_DATE_RE = re.compile(r"^(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})$")
_NUMERIC_DATE_RE = re.compile(r"^(?P<first>\d{1,2})/(?P<second>\d{1,2})(?:/(?P<year>\d{4}))?$")
_TIME_RE = re.compile(
    r"^(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<meridiem>[ap])\.?\s*m?\.?$|"
    r"^(?P<hour24>\d{1,2}):(?P<minute24>\d{2})$",
    re.IGNORECASE,
)


def _reference(today: date | None) -> date:
    return today if today is not None else date.today()


def _build_date(year: int, month: int, day: int, text: str) -> date:
    try:
        return date(year, month, day)
    except ValueError as e:
        raise DateParseError(f"not a calendar date: {text!r} ({e})") from e


def parse_day(text: str, today: date | None = None, day_first: bool = False) -> date:
    """Resolve a single day label into a date.

    Accepts month-name labels with an optional weekday and year, ISO
    dates, ``M/D[/YYYY]`` (``D/M`` with ``day_first``) and the relative
    labels Today, Tomorrow and Yesterday.
    """
    ref = _reference(today)
    cleaned = " ".join(text.split())
    if not cleaned:
        raise DateParseError("empty date text")

    offset = _RELATIVE_DAYS.get(cleaned.lower())
    if offset is not None:
        return ref + timedelta(days=offset)

    m = _TEXT_DATE_RE.match(cleaned)
    if m:
        month = _MONTHS.get(m.group("month").lower())
        if month is None:
            raise DateParseError(f"unknown month in {text!r}")
        year = int(m.group("year")) if m.group("year") else ref.year
        return _build_date(year, month, int(m.group("day")), text)

    m = _ISO_DATE_RE.match(cleaned)
    if m:
        return _build_date(int(m.group("year")), int(m.group("month")), int(m.group("day")), text)

    m = _NUMERIC_DATE_RE.match(cleaned)
    if m:
        first, second = int(m.group("first")), int(m.group("second"))
        month, day = (second, first) if day_first else (first, second)
        year = int(m.group("year")) if m.group("year") else ref.year
        return _build_date(year, month, day, text)

    raise DateParseError(f"unrecognized date: {text!r}")


def parse_time(text: str) -> tuple[int, int]:
    """Resolve time-of-day text into ``(hour, minute)``.

    Missing or TBD times fall back to midnight.
    """
    cleaned = text.strip()
    if not cleaned or cleaned.upper() == "TBD":
        return 0, 0

    m = _TIME_RE.match(cleaned)
    if not m:
        raise DateParseError(f"unrecognized time: {text!r}")

    if m.group("hour24") is not None:
        hour, minute = int(m.group("hour24")), int(m.group("minute24"))
    else:
        hour = int(m.group("hour"))
        minute = int(m.group("minute") or 0)
        if not 1 <= hour <= 12:
            raise DateParseError(f"bad 12-hour time: {text!r}")
        hour %= 12
        if m.group("meridiem").lower() == "p":
            hour += 12

    if hour > 23 or minute > 59:
        raise DateParseError(f"time out of range: {text!r}")
    return hour, minute


def parse_event_dates(text: str, today: date | None = None) -> tuple[date, date]:
    """Split a ``"<Month> <Day> — <Month> <Day>"`` range into two dates.

    A missing end segment makes a single-day event. An end segment with
    only a day number reuses the start month, or the next month when the
    day is earlier than the start day. When the end would fall
    before the start the range crosses new year, so the end moves into
    the following year.
    """
    start_text, end_text = text, ""
    for separator in RANGE_SEPARATORS:
        if separator in text:
            start_text, end_text = text.split(separator, 1)
            break
    start_text, end_text = start_text.strip(), end_text.strip()

    start = parse_day(start_text, today)
    if not end_text:
        return start, start

    if end_text.isdigit():
        day = int(end_text)
        year, month = start.year, start.month
        if day < start.day:
            year, month = (year + 1, 1) if month == 12 else (year, month + 1)
        end = _build_date(year, month, day, text)
    else:
        end = parse_day(end_text, today)

    if end < start:
        end = _build_date(end.year + 1, end.month, end.day, text)
    return start, end


def resolve_timestamp(
    day_label: str,
    time_text: str = "",
    today: date | None = None,
    day_first: bool = False,
) -> CalendarTimestamp:
    """Combine a day label and a time-of-day into one timestamp."""
    day = parse_day(day_label, today, day_first=day_first)
    hour, minute = parse_time(time_text)
    return CalendarTimestamp(day.year, day.month, day.day, hour, minute)


def date_range_to_timestamps(
    text: str, today: date | None = None
) -> tuple[CalendarTimestamp, CalendarTimestamp]:
    """Resolve a date range into midnight timestamps."""
    start, end = parse_event_dates(text, today)
    return CalendarTimestamp.from_date(start), CalendarTimestamp.from_date(end)
