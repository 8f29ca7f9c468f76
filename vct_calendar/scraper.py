"""vlr.gg scraper for VCT tournaments and their matches."""

from __future__ import annotations

from datetime import date

from loguru import logger

from vct_calendar import (
    Alarm,
    DateParseError,
    Match,
    Participant,
    SiteConfig,
    Tournament,
)
from vct_calendar.dates import date_range_to_timestamps, resolve_timestamp
from vct_calendar.fetch import PageFetcher
from vct_calendar.markup import Fragment, parse_markup

LISTING_ENTRY_SELECTOR = "div.events-container-col a"
MATCH_CARD_SELECTOR = ".wf-card"
MATCH_ITEM_SELECTOR = ".match-item"
DAY_LABEL_SELECTOR = ".wf-label.mod-large"
REGION_PREFIX = "mod-"

# How far a match may start outside its tournament dates before we warn
MATCH_WINDOW_SLACK_MINUTES = 24 * 60


def parse_participant(fragment: Fragment) -> Participant:
    """Parse one ``.match-item-vs-team`` block.

    The winner flag comes from the ``mod-winner`` class, never from the
    scores, so both or neither side can be marked.
    """
    name = fragment.text(".match-item-vs-team-name .text-of") or "TBD"
    return Participant(
        name=name,
        score=_safe_score(fragment.text(".match-item-vs-team-score")),
        is_winner=fragment.has_class("mod-winner"),
    )


def _safe_score(text: str) -> int:
    try:
        score = int(text)
    except ValueError:
        return 0
    return max(score, 0)


def _pair_participants(fragments: list[Fragment]) -> tuple[Participant, Participant]:
    participants = [parse_participant(f) for f in fragments[:2]]
    while len(participants) < 2:
        participants.append(Participant())
    return participants[0], participants[1]


def match_title(participants: tuple[Participant, Participant]) -> str:
    first, second = participants
    title = f"{first.name} vs {second.name}"
    if first.score or second.score:
        title += f" - {first.score} : {second.score}"
    return title


def parse_match(
    fragment: Fragment,
    day_label: str,
    config: SiteConfig,
    today: date | None = None,
) -> Match:
    """Parse a single ``.match-item`` under the given day heading.

    Raises :class:`DateParseError` when the day/time cannot be resolved.
    """
    status = fragment.text(".ml-status")
    participants = _pair_participants(fragment.select(".match-item-vs-team"))

    series = fragment.text(".match-item-event-series")
    # The event type is the bare text after the nested series div
    event_type = fragment.last_text(".match-item-event")
    if event_type == series:
        event_type = ""

    start = resolve_timestamp(day_label, fragment.text(".match-item-time"), today)
    end = start.shift(config.match_duration_minutes)

    alarm = None
    if status.lower() == "upcoming":
        alarm = Alarm(minutes_before=config.match_alarm_minutes)

    return Match(
        title=match_title(participants),
        description=" ".join(part for part in (series, event_type) if part),
        start=start,
        end=end,
        participants=participants,
        status_label=status,
        series=series,
        event_type=event_type,
        eta=fragment.text(".ml-eta"),
        vod_tags=tuple(tag.text() for tag in fragment.select(".match-item-vod .wf-tag")),
        alarm=alarm,
    )


def parse_matches(
    root: Fragment, config: SiteConfig, today: date | None = None
) -> list[Match]:
    """Parse every match on an event's matches page.

    Each card inherits the day label of the nearest heading before it.
    A match that fails to parse is logged and skipped.
    """
    matches: list[Match] = []

    for card in root.select(MATCH_CARD_SELECTOR):
        heading = card.previous(DAY_LABEL_SELECTOR)
        # own_text drops the nested "Today" tag
        day_label = heading.own_text() if heading else ""

        for item in card.select(MATCH_ITEM_SELECTOR):
            try:
                match = parse_match(item, day_label, config, today)
            except ValueError as e:
                logger.warning(f"Skipping match on {day_label or 'unknown day'!r}: {e}")
                continue
            matches.append(match)
            logger.info(f"Match: {match.title} at {match.start.as_tuple()}")

    return matches


def parse_matches_from_html(
    html: str, config: SiteConfig, today: date | None = None
) -> list[Match]:
    """Parse matches from raw HTML (used by tests)."""
    return parse_matches(parse_markup(html), config, today)


def parse_region(entry: Fragment) -> str:
    """Mine the region code from the location icon's class list.

    ``"flag mod-cn"`` gives ``"cn"``. A last token without the prefix is
    returned as is.
    """
    icon = entry.select_one(".event-item-desc-item.mod-location i")
    if icon is None:
        return ""
    tokens = icon.attr("class").split()
    if not tokens:
        return ""
    token = tokens[-1]
    if token.startswith(REGION_PREFIX):
        return token[len(REGION_PREFIX):]
    return token


def event_urls(href: str, config: SiteConfig) -> tuple[str, str | None]:
    """Return ``(event page url, matches page url)`` for a listing link.

    The matches url is None when the link has no event path in it.
    """
    event_url = href if href.startswith("http") else f"{config.base_url}{href}"
    if config.event_marker not in href:
        return event_url, None
    tail = href.split(config.event_marker, 1)[1]
    return event_url, f"{config.base_url}{config.matches_path}{tail}"


def parse_tournament(
    entry: Fragment,
    fetcher: PageFetcher,
    config: SiteConfig,
    today: date | None = None,
) -> Tournament:
    """Parse one listing entry and collect matches from its matches page.

    Raises :class:`DateParseError` when the date range is unreadable. A
    failed matches page fetch gives a tournament without matches.
    """
    title = entry.text(".event-item-title")
    status = entry.text(".event-item-desc-item-status")
    prize_pool = entry.first_text(".event-item-desc-item.mod-prize")
    region = parse_region(entry)

    dates_text = entry.first_text(".event-item-desc-item.mod-dates")
    try:
        start, end = date_range_to_timestamps(dates_text, today)
    except DateParseError as e:
        raise DateParseError(f"{title or 'untitled tournament'}: {e}") from e

    event_url, matches_url = event_urls(entry.attr("href"), config)
    matches = _fetch_matches(title, matches_url, fetcher, config, today)

    alarm = None
    if status.lower() == "upcoming":
        alarm = Alarm(minutes_before=config.tournament_alarm_minutes)

    tournament = Tournament(
        title=title,
        description=f"Prize Pool: {prize_pool} | Status: {status} | Region: {region}",
        start=start,
        end=end,
        region=region,
        status=status,
        url=event_url,
        prize_pool=prize_pool,
        matches=tuple(matches),
        alarm=alarm,
    )
    _check_match_window(tournament)
    logger.info(f"Tournament: {title} ({len(matches)} matches)")
    return tournament


def _fetch_matches(
    title: str,
    matches_url: str | None,
    fetcher: PageFetcher,
    config: SiteConfig,
    today: date | None,
) -> list[Match]:
    if matches_url is None:
        logger.warning(f"{title}: no event link, matches unavailable")
        return []
    try:
        html = fetcher.fetch(matches_url)
    except Exception as e:
        logger.warning(f"{title}: matches page unavailable ({e!r}), continuing without matches")
        return []
    return parse_matches_from_html(html, config, today)


def _check_match_window(tournament: Tournament) -> None:
    """Warn about matches far outside the tournament's dates."""
    for match in tournament.matches:
        before = match.start.minutes_until(tournament.start)
        # the last day runs until midnight, so allow one extra day after the end
        after = tournament.end.minutes_until(match.start)
        if before > MATCH_WINDOW_SLACK_MINUTES or after > 2 * MATCH_WINDOW_SLACK_MINUTES:
            logger.warning(
                f"{tournament.title}: match {match.title!r} on {match.start.as_tuple()} "
                f"is outside {tournament.start.as_tuple()} - {tournament.end.as_tuple()}"
            )
