"""Top-level orchestration: every registry value for one instant and place.

compute_registry is the single entry point the MCP tools use. It fetches the
seven body positions once and feeds them to every calculator that needs
them; the location-dependent calculators (planetary hour, houses, elemental
profile) run only when a location is given.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from .models import Location, RegistrySnapshot
from .utils.alignments import (
    DEFAULT_ORB,
    LINEAR_TOLERANCE,
    STELLIUM_MIN_BODIES,
    detect_alignments,
)
from .utils.almanac import (
    DEFAULT_WINDOW_DAYS,
    alignment_events,
    events_around,
    get_upcoming_events,
)
from .utils.dignity import compute_placements
from .utils.elemental import build_elemental_profile, normalize_weather
from .utils.ephemeris import to_utc
from .utils.houses import compute_house_cusps
from .utils.lunar import moon_phase
from .utils.temporal import (
    approximate_planetary_hour,
    compute_temporal_rulers,
    day_ruler,
    local_time,
)

logger = logging.getLogger(__name__)


async def compute_registry(
    engine,
    instant: datetime,
    location: Optional[Location] = None,
    weather: Optional[str] = None,
    house_system: str = "P",
    event_days: int = DEFAULT_WINDOW_DAYS,
    orb: float = DEFAULT_ORB,
    opposition_orb: Optional[float] = None,
    linear_tolerance: float = LINEAR_TOLERANCE,
    stellium_min_bodies: int = STELLIUM_MIN_BODIES,
    include_eclipses: bool = True,
) -> RegistrySnapshot:
    """
    Compute the full planetary registry.

    Args:
        engine: Ephemeris adapter
        instant: Moment to evaluate (naive values are taken as UTC)
        location: Observer location. Without it the planetary hour is the
            approximate wall-clock form (in UTC) and no tattva, houses or
            elemental profile are produced.
        weather: Optional weather name for the elemental profile
        house_system: House system code or name
        event_days: Length of the upcoming-event window
        orb: Conjunction orb
        opposition_orb: Opposition orb (defaults to orb)
        linear_tolerance: Linear-triple arc tolerance
        stellium_min_bodies: Bodies in one sign needed for a Stellium
        include_eclipses: Merge ephemeris eclipses into the event list

    Returns:
        RegistrySnapshot

    Raises:
        ValueError: If weather is unknown.
        EphemerisError: If a body position or rise/set calculation fails.
    """
    if weather:
        weather = normalize_weather(weather)
    eclipse_engine = engine if include_eclipses else None

    placements = await compute_placements(engine, instant)
    alignments = detect_alignments(
        placements,
        orb=orb,
        opposition_orb=opposition_orb,
        linear_tolerance=linear_tolerance,
        stellium_min_bodies=stellium_min_bodies,
    )
    by_body = {p.body: p for p in placements}
    phase = moon_phase(by_body["Moon"].longitude, by_body["Sun"].longitude)

    if location is None:
        local = to_utc(instant)
        events, active = await asyncio.gather(
            asyncio.to_thread(get_upcoming_events, local, event_days, engine=eclipse_engine),
            asyncio.to_thread(events_around, local, eclipse_engine),
        )
        active += alignment_events(alignments, local)
        logger.info("No location given; planetary hour is approximate (UTC)")
        return RegistrySnapshot(
            instant=local,
            location=None,
            placements=tuple(placements),
            alignments=tuple(alignments),
            day_ruler=day_ruler(local),
            planetary_hour=approximate_planetary_hour(local),
            moon_phase=phase,
            events=tuple(events),
            active_events=tuple(active),
        )

    local = local_time(instant, location)
    (ruler_of_day, hour, tattva), houses, events, active = await asyncio.gather(
        compute_temporal_rulers(engine, instant, location),
        compute_house_cusps(engine, instant, location, house_system),
        asyncio.to_thread(get_upcoming_events, local, event_days, engine=eclipse_engine),
        asyncio.to_thread(events_around, local, eclipse_engine),
    )
    active += alignment_events(alignments, local)

    profile = await build_elemental_profile(
        engine,
        instant,
        location,
        weather=weather,
        events=active,
        placements=placements,
        alignments=alignments,
        hour=hour,
        tattva=tattva,
    )

    return RegistrySnapshot(
        instant=local,
        location=location,
        placements=tuple(placements),
        alignments=tuple(alignments),
        day_ruler=ruler_of_day,
        planetary_hour=hour,
        moon_phase=phase,
        events=tuple(events),
        tattva=tattva,
        houses=houses,
        elemental_profile=profile,
        active_events=tuple(active),
    )
