"""Day rulers, planetary hours and the tattva cycle.

Planetary hours divide daylight (sunrise to sunset) and night (sunset to the
next sunrise) into twelve equal parts each, so their length changes with the
season and the location. The ruler of each hour is found by stepping through
the Chaldean order from the ruler of the day:

    day hour N   -> N steps from the day ruler
    night hour N -> 12 + N steps from the day ruler

The day ruler is always that of the local calendar date of the query.
"""

import asyncio
import logging
from datetime import datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ..constants import (
    CHALDEAN_ORDER,
    DAY_RULERS,
    TATTVA_CYCLE_MINUTES,
    TATTVA_MINUTES,
    TATTVAS,
)
from ..models import Location, PlanetaryHour, Tattva
from .ephemeris import to_utc
from .geocoding import resolve_timezone

logger = logging.getLogger(__name__)

HOURS_PER_SPAN = 12
# Used instead of a zero-length day or night (polar edge cases).
DEGENERATE_SPAN = timedelta(hours=1)
# Anchor for the tattva cycle when there is no sunrise.
APPROXIMATE_SUNRISE = time(6, 0)


def local_time(instant: datetime, location: Location) -> datetime:
    """Wall-clock time at the location for an instant."""
    return to_utc(instant).astimezone(ZoneInfo(resolve_timezone(location)))


def day_ruler(local_dt: datetime) -> str:
    """Planet ruling the weekday of a local date (Sunday = Sun ... Saturday = Saturn)."""
    # datetime.weekday() is 0 for Monday
    return DAY_RULERS[(local_dt.weekday() + 1) % 7]


def chaldean_step(start: str, steps: int) -> str:
    """Walk forward through the Chaldean order, wrapping every seven."""
    return CHALDEAN_ORDER[(CHALDEAN_ORDER.index(start) + steps) % len(CHALDEAN_ORDER)]


def planetary_hour(
    instant: datetime,
    ruler_of_day: str,
    sunrise: datetime,
    sunset: datetime,
    previous_sunset: Optional[datetime] = None,
    next_sunrise: Optional[datetime] = None,
) -> PlanetaryHour:
    """
    Planetary hour containing an instant, from real sunrise and sunset.

    Args:
        instant: Moment to evaluate
        ruler_of_day: Day ruler of the local calendar date
        sunrise: Sunrise of that date
        sunset: Sunset of that date
        previous_sunset: Sunset of the previous date; required when the
            instant is before sunrise
        next_sunrise: Sunrise of the next date; required when the instant is
            after sunset

    Returns:
        PlanetaryHour with is_approximate=False

    Raises:
        ValueError: If the neighbouring-day event needed for a night hour is
            missing.
    """
    instant = to_utc(instant)

    if instant < sunrise:
        if previous_sunset is None:
            raise ValueError("previous_sunset is required for instants before sunrise")
        start, end, is_day = previous_sunset, sunrise, False
    elif instant < sunset:
        start, end, is_day = sunrise, sunset, True
    else:
        if next_sunrise is None:
            raise ValueError("next_sunrise is required for instants after sunset")
        start, end, is_day = sunset, next_sunrise, False

    span = end - start
    if span <= timedelta(0):
        logger.warning(
            "Degenerate %s span (%s) at %s; using a one-hour span",
            "day" if is_day else "night", span, instant.isoformat(),
        )
        span = DEGENERATE_SPAN

    hour_length = span / HOURS_PER_SPAN
    index = int((instant - start) / hour_length)
    index = max(0, min(HOURS_PER_SPAN - 1, index))

    steps = index if is_day else HOURS_PER_SPAN + index
    hour_start = start + hour_length * index
    return PlanetaryHour(
        ruler=chaldean_step(ruler_of_day, steps),
        day_ruler=ruler_of_day,
        hour_index=index,
        is_day=is_day,
        is_approximate=False,
        start=hour_start,
        end=hour_start + hour_length,
    )


def approximate_planetary_hour(local_dt: datetime) -> PlanetaryHour:
    """Wall-clock planetary hour, for when sunrise/sunset are unavailable.

    Every clock hour since local midnight is one planetary hour, starting
    from the day ruler. The result is flagged approximate.
    """
    ruler_of_day = day_ruler(local_dt)
    return PlanetaryHour(
        ruler=chaldean_step(ruler_of_day, local_dt.hour),
        day_ruler=ruler_of_day,
        hour_index=local_dt.hour % HOURS_PER_SPAN,
        is_day=6 <= local_dt.hour < 18,
        is_approximate=True,
    )


def tattva_at(instant: datetime, sunrise: datetime, is_approximate: bool = False) -> Tattva:
    """Active tattva: minutes since sunrise, modulo 120, in 24-minute slices.

    Instants before sunrise wrap around (floor modulo), continuing the cycle
    backwards.
    """
    minutes = (to_utc(instant) - to_utc(sunrise)).total_seconds() / 60.0
    into_cycle = minutes % TATTVA_CYCLE_MINUTES
    index = min(int(into_cycle // TATTVA_MINUTES), len(TATTVAS) - 1)
    name, element = TATTVAS[index]
    return Tattva(
        name=name,
        element=element,
        minutes_into_cycle=into_cycle,
        is_approximate=is_approximate,
    )


def approximate_tattva(local_dt: datetime) -> Tattva:
    """Tattva anchored at 06:00 local time instead of sunrise."""
    anchor = datetime.combine(local_dt.date(), APPROXIMATE_SUNRISE, tzinfo=local_dt.tzinfo)
    return tattva_at(local_dt, anchor, is_approximate=True)


async def compute_temporal_rulers(
    engine,
    instant: datetime,
    location: Location,
) -> tuple[str, PlanetaryHour, Tattva]:
    """
    Day ruler, planetary hour and tattva for an instant at a location.

    Sunrise and sunset come from engine.rise_set for the local calendar
    date, plus the previous date (before sunrise) or next date (after
    sunset). If the Sun does not rise or set on a needed date, the
    approximate wall-clock forms are returned, flagged.

    Raises:
        EphemerisError: If a rise/set calculation fails.
    """
    local = local_time(instant, location)
    ruler_of_day = day_ruler(local)
    tz = local.tzinfo

    def midnight(offset_days: int) -> datetime:
        return datetime.combine(local.date() + timedelta(days=offset_days), time(0), tzinfo=tz)

    today = await asyncio.to_thread(engine.rise_set, midnight(0), location)
    if today.sunrise is None or today.sunset is None:
        return ruler_of_day, *_approximate(local, location)

    previous_sunset = next_sunrise = None
    if to_utc(instant) < today.sunrise:
        previous = await asyncio.to_thread(engine.rise_set, midnight(-1), location)
        previous_sunset = previous.sunset
        if previous_sunset is None:
            return ruler_of_day, *_approximate(local, location)
    elif to_utc(instant) >= today.sunset:
        following = await asyncio.to_thread(engine.rise_set, midnight(1), location)
        next_sunrise = following.sunrise
        if next_sunrise is None:
            return ruler_of_day, *_approximate(local, location)

    hour = planetary_hour(
        instant,
        ruler_of_day,
        today.sunrise,
        today.sunset,
        previous_sunset=previous_sunset,
        next_sunrise=next_sunrise,
    )
    return ruler_of_day, hour, tattva_at(instant, today.sunrise)


def _approximate(local: datetime, location: Location) -> tuple[PlanetaryHour, Tattva]:
    logger.warning(
        "No sunrise/sunset near %s at (%.2f, %.2f); using approximate planetary hour",
        local.date().isoformat(), location.latitude, location.longitude,
    )
    return approximate_planetary_hour(local), approximate_tattva(local)
