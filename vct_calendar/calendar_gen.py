"""ICS calendar generation from the scraped schedule."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from icalendar import Alarm as VAlarm
from icalendar import Calendar, Event, vCalAddress, vText

from vct_calendar import Alarm, CalendarTimestamp, Match, Schedule, SiteConfig, Tournament


@dataclass(frozen=True)
class EventDescriptor:
    """One calendar entry, flattened from a tournament or a match."""

    uid: str
    title: str
    description: str
    start: CalendarTimestamp
    end: CalendarTimestamp
    organizer_name: str
    organizer_email: str
    url: str
    status: str
    geo: tuple[float, float]
    alarms: tuple[Alarm, ...] = ()


def schedule_to_descriptors(schedule: Schedule, config: SiteConfig) -> list[EventDescriptor]:
    """Flatten a schedule: each tournament followed by its matches."""
    descriptors: list[EventDescriptor] = []
    for tournament in schedule:
        descriptors.append(_tournament_descriptor(tournament, config))
        for match in tournament.matches:
            descriptors.append(_match_descriptor(tournament, match, config))
    return descriptors


def _tournament_descriptor(tournament: Tournament, config: SiteConfig) -> EventDescriptor:
    return EventDescriptor(
        uid=f"{_slug(tournament.title)}-{_stamp(tournament.start)}@vlr.gg",
        title=tournament.title,
        description=tournament.description,
        start=tournament.start,
        end=tournament.end,
        organizer_name=f"{config.organizer_name} {tournament.title}",
        organizer_email=config.organizer_email,
        url=tournament.url,
        status="CONFIRMED",
        geo=config.geo,
        alarms=(tournament.alarm,) if tournament.alarm else (),
    )


def _match_descriptor(tournament: Tournament, match: Match, config: SiteConfig) -> EventDescriptor:
    # Scores change the title, so the uid only uses the team names
    teams = "-vs-".join(_slug(p.name) for p in match.participants)
    return EventDescriptor(
        uid=f"{_slug(tournament.title)}-{teams}-{_stamp(match.start)}@vlr.gg",
        title=match.title,
        description=match.description,
        start=match.start,
        end=match.end,
        organizer_name=f"{config.organizer_name} {match.series}".strip(),
        organizer_email=config.organizer_email,
        url=config.match_url,
        status="TENTATIVE",
        geo=config.geo,
        alarms=(match.alarm,) if match.alarm else (),
    )


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-") or "tbd"


def _stamp(ts: CalendarTimestamp) -> str:
    return "{:04d}{:02d}{:02d}T{:02d}{:02d}".format(*ts.as_tuple())


def create_schedule_calendar(schedule: Schedule, config: SiteConfig) -> Calendar:
    """Create an ICS calendar with one event per tournament and match."""
    cal = Calendar()
    cal.add("prodid", "-//VCT Match Calendar//vlr.gg//")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")
    cal.add("x-wr-calname", "VCT Schedule")
    cal.add("x-wr-timezone", "UTC")
    # Refresh interval hint for calendar clients (4 hours)
    cal.add("x-published-ttl", "PT4H")

    for descriptor in schedule_to_descriptors(schedule, config):
        cal.add_component(_create_event(descriptor, config))

    return cal


def _to_utc(ts: CalendarTimestamp, config: SiteConfig) -> datetime:
    return ts.to_datetime(config.tzinfo).astimezone(timezone.utc)


def _create_event(descriptor: EventDescriptor, config: SiteConfig) -> Event:
    """Create a calendar event from a descriptor."""
    event = Event()
    event.add("uid", descriptor.uid)
    event.add("summary", descriptor.title)
    event.add("description", descriptor.description)
    event.add("dtstart", _to_utc(descriptor.start, config))
    event.add("dtend", _to_utc(descriptor.end, config))
    event.add("status", descriptor.status)
    event.add("geo", descriptor.geo)
    if descriptor.url:
        event.add("url", descriptor.url)

    organizer = vCalAddress(f"MAILTO:{descriptor.organizer_email}")
    organizer.params["cn"] = vText(descriptor.organizer_name)
    event["organizer"] = organizer

    for alarm in descriptor.alarms:
        event.add_component(_create_alarm(alarm, descriptor.title))

    return event


def _create_alarm(alarm: Alarm, title: str) -> VAlarm:
    valarm = VAlarm()
    valarm.add("action", alarm.action.upper())
    valarm.add("trigger", timedelta(minutes=-alarm.minutes_before))
    valarm.add("attach", alarm.attach, parameters={"VALUE": "URI"})
    if alarm.repeat:
        # REPEAT is only valid together with DURATION
        valarm.add("repeat", alarm.repeat)
        valarm.add("duration", timedelta(minutes=alarm.repeat_every_minutes))
    valarm.add("description", f"{title} starts in {alarm.minutes_before} minutes!")
    return valarm


def validate_ics(data: bytes) -> bool:
    """Basic validation that ICS data is well-formed."""
    text = data.decode("utf-8", errors="replace")
    return text.startswith("BEGIN:VCALENDAR") and "END:VCALENDAR" in text
