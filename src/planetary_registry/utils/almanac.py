"""Annual astronomical events: solstices, equinoxes and meteor showers.

Dates are fixed calendar approximations, not derived from the Sun's
longitude. Eclipses are the exception: they need an ephemeris and are only
merged in when an engine is supplied. Planetary Alignment events come from
the stelliums detected at the query instant.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..models import UpcomingEvent
from .ephemeris import EphemerisError, to_utc

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 365
DEFAULT_LIMIT = 10

# (month, day, name, type, description)
SEASONAL_EVENTS = [
    (3, 20, "Spring Equinox", "Equinox",
     "Day and night of equal length; the Sun enters Aries"),
    (6, 21, "Summer Solstice", "Solstice",
     "Longest day of the year; the Sun enters Cancer"),
    (9, 22, "Autumn Equinox", "Equinox",
     "Day and night of equal length; the Sun enters Libra"),
    (12, 21, "Winter Solstice", "Solstice",
     "Shortest day of the year; the Sun enters Capricorn"),
]

# (month, day, name, visibility)
METEOR_SHOWERS = [
    (1, 3, "Quadrantids",
     "Best after midnight from the Northern Hemisphere; up to 120 meteors per hour"),
    (4, 22, "Lyrids",
     "Best before dawn from the Northern Hemisphere; about 18 meteors per hour"),
    (5, 6, "Eta Aquariids",
     "Best before dawn from the Southern Hemisphere; up to 50 meteors per hour"),
    (8, 12, "Perseids",
     "Best after midnight from the Northern Hemisphere; up to 100 meteors per hour"),
    (10, 21, "Orionids",
     "Visible from both hemispheres after midnight; about 20 meteors per hour"),
    (11, 17, "Leonids",
     "Best after midnight from both hemispheres; about 15 meteors per hour"),
    (12, 14, "Geminids",
     "Visible from both hemispheres most of the night; up to 150 meteors per hour"),
]

# How far from its date an event still counts as happening.
EVENT_WINDOWS = {
    "Solstice": timedelta(days=1),
    "Equinox": timedelta(days=1),
    "Meteor Shower": timedelta(days=3),
    "Eclipse": timedelta(hours=24),
    "Planetary Alignment": timedelta(hours=24),
}

EVENT_DURATIONS = {
    "Solstice": "Duration: 1 day",
    "Equinox": "Duration: 1 day",
    "Meteor Shower": "Peak: 3 days",
    "Eclipse": "Duration: 24 hours",
    "Planetary Alignment": "Duration: 24 hours",
}


def _calendar_events(year: int, tz) -> list[UpcomingEvent]:
    events = [
        UpcomingEvent(
            type=event_type,
            name=name,
            date=datetime(year, month, day, tzinfo=tz),
            description=description,
        )
        for month, day, name, event_type, description in SEASONAL_EVENTS
    ]
    events += [
        UpcomingEvent(
            type="Meteor Shower",
            name=name,
            date=datetime(year, month, day, tzinfo=tz),
            description=f"Peak of the {name} meteor shower",
            visibility=visibility,
        )
        for month, day, name, visibility in METEOR_SHOWERS
    ]
    return events


def get_upcoming_events(
    start: datetime,
    days: int = DEFAULT_WINDOW_DAYS,
    limit: Optional[int] = DEFAULT_LIMIT,
    engine=None,
) -> list[UpcomingEvent]:
    """
    Events between start and start + days, soonest first.

    Args:
        start: Beginning of the window. Event dates are midnight in its
            timezone (UTC if naive).
        days: Window length in days
        limit: Maximum number of events returned (None for all)
        engine: Optional ephemeris engine; when given, its eclipses within the
            window are merged in

    Returns:
        Up to limit UpcomingEvent objects sorted by date, without duplicates.
    """
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    end = start + timedelta(days=days)
    tz = start.tzinfo

    candidates = []
    for year in range(start.year, end.year + 1):
        for event in _calendar_events(year, tz):
            if event.type == "Meteor Shower" and event.date < start:
                event = UpcomingEvent(
                    type=event.type,
                    name=event.name,
                    date=event.date.replace(year=event.date.year + 1),
                    description=event.description,
                    visibility=event.visibility,
                )
            candidates.append(event)

    if engine is not None:
        try:
            candidates.extend(engine.eclipses(start, end))
        except EphemerisError as exc:
            logger.warning("Eclipse search failed (%s); continuing without eclipses", exc)

    seen = set()
    events = []
    for event in candidates:
        key = (event.name, to_utc(event.date))
        if key in seen or not (start <= event.date <= end):
            continue
        seen.add(key)
        events.append(event)

    events.sort(key=lambda e: to_utc(e.date))
    return events[:limit]


def is_event_active(event: UpcomingEvent, instant: datetime) -> bool:
    """True when instant lies within the event's proximity window."""
    window = EVENT_WINDOWS.get(event.type)
    if window is None:
        return False
    return abs(to_utc(instant) - to_utc(event.date)) <= window


def active_events(events, instant: datetime) -> list[UpcomingEvent]:
    return [e for e in events if is_event_active(e, instant)]


def event_duration_text(event: UpcomingEvent) -> str:
    """Short duration note, e.g. "Peak: 3 days"; empty for unknown types."""
    return EVENT_DURATIONS.get(event.type, "")


def events_around(instant: datetime, engine=None) -> list[UpcomingEvent]:
    """Every event whose proximity window contains instant.

    Searches a window reaching back and forward by the widest proximity
    window, so events that peaked a few days ago are still found.
    """
    reach = max(EVENT_WINDOWS.values())
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    start = datetime.combine((instant - reach).date(), datetime.min.time(), tzinfo=instant.tzinfo)
    candidates = get_upcoming_events(start, days=2 * reach.days + 1, limit=None, engine=engine)
    return active_events(candidates, instant)


def alignment_events(alignments, instant: datetime) -> list[UpcomingEvent]:
    """Planetary Alignment events for the stelliums present at instant.

    Dated at instant itself, so each one is active for its 24-hour window.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return [
        UpcomingEvent(
            type="Planetary Alignment",
            name=f"Planetary Alignment: {', '.join(a.bodies)}",
            date=instant,
            description=a.description,
        )
        for a in alignments
        if a.type == "Stellium"
    ]
