"""Tests for descriptor flattening and ICS output."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from conftest import TODAY, FakeFetcher

from vct_calendar import Alarm, Schedule, SiteConfig
from vct_calendar.calendar_gen import (
    create_schedule_calendar,
    schedule_to_descriptors,
    validate_ics,
)
from vct_calendar.schedule import ScheduleBuilder


@pytest.fixture
def schedule(listing_html: str, fetcher: FakeFetcher, config: SiteConfig) -> Schedule:
    return ScheduleBuilder(config, fetcher, TODAY).build(listing_html)


def events(cal) -> list:
    return [c for c in cal.walk() if c.name == "VEVENT"]


class TestDescriptors:
    def test_one_per_tournament_and_match(self, schedule: Schedule, config: SiteConfig) -> None:
        descriptors = schedule_to_descriptors(schedule, config)
        assert len(descriptors) == len(schedule) + len(schedule.matches)

    def test_tournament_then_its_matches(self, schedule: Schedule, config: SiteConfig) -> None:
        titles = [d.title for d in schedule_to_descriptors(schedule, config)]
        assert titles == [
            "Champions Tour 2024",
            "Team A vs Team B - 2 : 0",
            "Champions Tour 2024: Masters Shanghai",
            "TBD vs Gen.G",
            "Sentinels vs Fnatic - 1 : 1",
            "Paper Rex vs EDward Gaming - 2 : 1",
            "China Ascension 2024",
        ]

    def test_tournament_descriptor(self, schedule: Schedule, config: SiteConfig) -> None:
        d = schedule_to_descriptors(schedule, config)[0]
        assert d.status == "CONFIRMED"
        assert d.organizer_name == "无畏契约 Champions Tour 2024"
        assert d.organizer_email == "vct@qq.com"
        assert d.url == "https://www.vlr.gg/event/2097/champions-tour-2024"
        assert d.geo == (30.0095, 120.2669)
        assert d.alarms == ()

    def test_match_descriptor(self, schedule: Schedule, config: SiteConfig) -> None:
        d = schedule_to_descriptors(schedule, config)[3]
        assert d.title == "TBD vs Gen.G"
        assert d.status == "TENTATIVE"
        assert d.organizer_name == "无畏契约 Swiss Stage–Round 1"
        assert d.url == "https://vct.qq.com"
        assert d.alarms == (Alarm(minutes_before=30),)

    def test_upcoming_tournament_alarm(self, schedule: Schedule, config: SiteConfig) -> None:
        d = schedule_to_descriptors(schedule, config)[2]
        assert d.alarms == (Alarm(minutes_before=60),)

    def test_uids_are_unique(self, schedule: Schedule, config: SiteConfig) -> None:
        uids = [d.uid for d in schedule_to_descriptors(schedule, config)]
        assert len(set(uids)) == len(uids)


class TestCalendarGen:
    def test_creates_valid_ics(self, schedule: Schedule, config: SiteConfig) -> None:
        ics_bytes = create_schedule_calendar(schedule, config).to_ical()
        assert ics_bytes.startswith(b"BEGIN:VCALENDAR")
        assert validate_ics(ics_bytes)

    def test_event_count(self, schedule: Schedule, config: SiteConfig) -> None:
        cal = create_schedule_calendar(schedule, config)
        assert len(events(cal)) == 7

    def test_match_times(self, schedule: Schedule, config: SiteConfig) -> None:
        match_event = events(create_schedule_calendar(schedule, config))[1]
        assert match_event["dtstart"].dt == datetime(2024, 1, 15, 14, 0, tzinfo=timezone.utc)
        assert match_event["dtend"].dt == datetime(2024, 1, 15, 16, 0, tzinfo=timezone.utc)

    def test_fixed_offset_converted_to_utc(self, listing_html: str, fetcher: FakeFetcher) -> None:
        config = SiteConfig(utc_offset_minutes=480)
        schedule = ScheduleBuilder(config, fetcher, TODAY).build(listing_html)
        match_event = events(create_schedule_calendar(schedule, config))[1]
        assert match_event["dtstart"].dt == datetime(2024, 1, 15, 6, 0, tzinfo=timezone.utc)

    def test_alarms_only_for_upcoming(self, schedule: Schedule, config: SiteConfig) -> None:
        cal = create_schedule_calendar(schedule, config)
        alarm_counts = {
            str(e["summary"]): len([c for c in e.walk() if c.name == "VALARM"]) for e in events(cal)
        }
        assert alarm_counts == {
            "Champions Tour 2024": 0,
            "Team A vs Team B - 2 : 0": 0,
            "Champions Tour 2024: Masters Shanghai": 1,
            "TBD vs Gen.G": 1,
            "Sentinels vs Fnatic - 1 : 1": 0,
            "Paper Rex vs EDward Gaming - 2 : 1": 0,
            "China Ascension 2024": 1,
        }

    def test_alarm_trigger(self, schedule: Schedule, config: SiteConfig) -> None:
        match_event = events(create_schedule_calendar(schedule, config))[3]
        [alarm] = [c for c in match_event.walk() if c.name == "VALARM"]
        assert alarm["trigger"].dt == timedelta(minutes=-30)
        assert str(alarm["action"]) == "AUDIO"
        assert alarm["repeat"] == 1
        assert alarm["duration"].dt == timedelta(minutes=5)
        assert str(alarm["attach"]) == "Glass"

    def test_organizer_and_geo(self, schedule: Schedule, config: SiteConfig) -> None:
        cal = create_schedule_calendar(schedule, config)
        first = events(cal)[0]
        assert str(first["organizer"]) == "MAILTO:vct@qq.com"
        assert first["organizer"].params["cn"] == "无畏契约 Champions Tour 2024"
        assert b"GEO:30.0095;120.2669" in cal.to_ical()

    def test_calendar_metadata(self, schedule: Schedule, config: SiteConfig) -> None:
        ics_bytes = create_schedule_calendar(schedule, config).to_ical()
        assert b"VCT Schedule" in ics_bytes
        assert b"X-PUBLISHED-TTL" in ics_bytes

    def test_empty_calendar(self, config: SiteConfig) -> None:
        cal = create_schedule_calendar(Schedule(), config)
        assert validate_ics(cal.to_ical())
        assert events(cal) == []


class TestValidateIcs:
    def test_valid(self) -> None:
        assert validate_ics(b"BEGIN:VCALENDAR\r\nEND:VCALENDAR")

    def test_invalid(self) -> None:
        assert not validate_ics(b"not a calendar")
        assert not validate_ics(b"")
