"""Elemental profile: a weighted fire/earth/air/water/spirit composition.

The profile starts from fixed base percentages and folds in the deltas of a
sequence of named contributors. Every contributor returns zero or more
ElementalContribution entries; each entry is added to the running totals and
kept in the breakdown, so for every element

    base + sum(entry deltas) == final value

Physical contributors run first. Spirit contributors run after them and may
look at the physical totals (the balance bonus does). Finally every value is
floored at zero; the floor is itself recorded as an "Element Floor" entry.

Percentages express relative intensity, so they do not sum to 100 and can
exceed 100.

Contributor registries are plain ordered dicts of name -> function and can be
copied, trimmed or extended and passed to calculate_elemental_profile.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..constants import PLANET_ELEMENTS, SIGN_ELEMENTS
from ..models import (
    Alignment,
    BodyPlacement,
    ElementalContribution,
    ElementalProfile,
    ELEMENT_KEYS,
    PHYSICAL_KEYS,
    Location,
    PlanetaryHour,
    Tattva,
    UpcomingEvent,
)
from .alignments import detect_alignments
from .almanac import alignment_events, events_around
from .dignity import compute_placements
from .temporal import compute_temporal_rulers, local_time

logger = logging.getLogger(__name__)

BASE_PERCENTAGES = {
    "fire": 50.0,
    "earth": 50.0,
    "air": 60.0,
    "water": 50.0,
    "spirit": 0.0,
}

# Sign-element weight of each body; bodies not listed weigh DEFAULT_BODY_WEIGHT.
BODY_WEIGHTS = {"Sun": 15.0, "Moon": 10.0}
DEFAULT_BODY_WEIGHT = 5.0

TATTVA_BONUS = 10.0
HOUR_RULER_BONUS = 10.0
SEASON_BONUS = 10.0
TIME_OF_DAY_BONUS = 10.0

ENVIRONMENTAL_CONSTANTS = {"earth": 15.0, "water": 10.0, "air": 10.0, "fire": 5.0}

# Latitude factor is +1 at the equator, 0 at 45° and -1 at the poles.
LATITUDE_PIVOT = 45.0
LATITUDE_FIRE = 10.0
LATITUDE_WATER = -5.0

WEATHER_EFFECTS = {
    "Clear": {"air": 5.0},
    "Sunny": {"fire": 15.0, "air": 5.0},
    "Windy": {"air": 20.0},
    "Drizzle": {"water": 10.0, "air": 3.0},
    "Rainstorm": {"water": 20.0, "air": 10.0, "earth": 5.0},
    "ThunderStorm": {"water": 22.0, "air": 22.0, "fire": 11.0},
}

# Northern-hemisphere meteorological seasons by month.
_SEASONS = {
    12: "Winter", 1: "Winter", 2: "Winter",
    3: "Spring", 4: "Spring", 5: "Spring",
    6: "Summer", 7: "Summer", 8: "Summer",
    9: "Autumn", 10: "Autumn", 11: "Autumn",
}
_OPPOSITE_SEASON = {"Winter": "Summer", "Summer": "Winter", "Spring": "Autumn", "Autumn": "Spring"}
SEASON_ELEMENTS = {"Spring": "Air", "Summer": "Fire", "Autumn": "Earth", "Winter": "Water"}

ALIGNMENT_SPIRIT_PER_BODY = {"Conjunction": 3.0, "Linear": 2.0, "Opposition": -2.0}
STELLIUM_SPIRIT = 5.0
AKASHA_SPIRIT = 10.0
EVENT_SPIRIT = {
    "Solstice": 15.0,
    "Equinox": 15.0,
    "Meteor Shower": 10.0,
    "Eclipse": 25.0,
    "Planetary Alignment": 20.0,
}
HOUR_RULER_SPIRIT = {"Saturn": 5.0, "Jupiter": 5.0, "Sun": 3.0, "Moon": 3.0}
BALANCE_MAX_BONUS = 15.0
BALANCE_THRESHOLD = 0.15
DETRIMENT_SPIRIT = -3.0
RETROGRADE_SPIRIT = -2.0


@dataclass(frozen=True)
class ProfileContext:
    """Everything a contributor may look at."""

    local_time: datetime
    latitude: float
    placements: tuple[BodyPlacement, ...]
    alignments: tuple[Alignment, ...]
    hour: PlanetaryHour
    tattva: Tattva
    weather: Optional[str] = None
    events: tuple[UpcomingEvent, ...] = ()

    @property
    def moon_sign(self) -> Optional[str]:
        for p in self.placements:
            if p.body == "Moon":
                return p.sign
        return None


Contributor = Callable[[ProfileContext, dict], list[ElementalContribution]]


def normalize_weather(weather: str) -> str:
    """Canonical weather name, matched case-insensitively.

    Raises:
        ValueError: If the weather is not one of WEATHER_EFFECTS.
    """
    wanted = weather.strip().lower()
    for name in WEATHER_EFFECTS:
        if name.lower() == wanted:
            return name
    raise ValueError(
        f"Unknown weather '{weather}'. Valid options: {', '.join(WEATHER_EFFECTS)}"
    )


def season_for(local_dt: datetime, latitude: float) -> str:
    season = _SEASONS[local_dt.month]
    if latitude < 0:
        season = _OPPOSITE_SEASON[season]
    return season


def _entry(source: str, detail: str, deltas: dict) -> list[ElementalContribution]:
    contribution = ElementalContribution(source=source, detail=detail, **deltas)
    return [] if contribution.is_empty() else [contribution]


# ----------------------------------------------------------------------
# Physical contributors
# ----------------------------------------------------------------------

def planetary_positions(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    deltas = dict.fromkeys(PHYSICAL_KEYS, 0.0)
    parts = []
    for p in context.placements:
        weight = BODY_WEIGHTS.get(p.body, DEFAULT_BODY_WEIGHT)
        element = SIGN_ELEMENTS[p.sign]
        deltas[element.lower()] += weight
        parts.append(f"{p.body} in {p.sign} (+{weight:g} {element})")
    return _entry("Planetary Positions", "; ".join(parts), deltas)


def tattva_contribution(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    element = context.tattva.element
    if element.lower() not in PHYSICAL_KEYS:
        # Akasha feeds spirit instead.
        return []
    return _entry(
        "Tattva",
        f"{context.tattva.name} tattva (+{TATTVA_BONUS:g} {element})",
        {element.lower(): TATTVA_BONUS},
    )


def planetary_hour_contribution(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    ruler = context.hour.ruler
    element = PLANET_ELEMENTS[ruler]
    return _entry(
        "Planetary Hour",
        f"Hour of {ruler} (+{HOUR_RULER_BONUS:g} {element})",
        {element.lower(): HOUR_RULER_BONUS},
    )


def environmental_constants(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    return _entry("Environmental Constants", "Constant terrestrial influences",
                  ENVIRONMENTAL_CONSTANTS)


def latitude_contribution(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    factor = (LATITUDE_PIVOT - abs(context.latitude)) / LATITUDE_PIVOT
    return _entry(
        "Latitude",
        f"Latitude {context.latitude:.2f}° (factor {factor:+.2f})",
        {"fire": LATITUDE_FIRE * factor, "water": LATITUDE_WATER * factor},
    )


def time_of_day_contribution(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    hour = context.local_time.hour
    if 9 <= hour < 16:
        return _entry("Time of Day", f"Daytime ({hour:02d}:00 local)", {"fire": TIME_OF_DAY_BONUS})
    if hour >= 20 or hour < 3:
        return _entry("Time of Day", f"Night ({hour:02d}:00 local)", {"water": TIME_OF_DAY_BONUS})
    return []


def season_contribution(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    season = season_for(context.local_time, context.latitude)
    element = SEASON_ELEMENTS[season]
    hemisphere = "southern" if context.latitude < 0 else "northern"
    return _entry(
        "Season",
        f"{season} in the {hemisphere} hemisphere (+{SEASON_BONUS:g} {element})",
        {element.lower(): SEASON_BONUS},
    )


def weather_contribution(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    if not context.weather:
        return []
    weather = normalize_weather(context.weather)
    return _entry("Weather", f"{weather} weather", WEATHER_EFFECTS[weather])


def event_deltas(event: UpcomingEvent) -> dict:
    """Physical deltas of one active event; empty for unknown kinds."""
    if event.type == "Solstice":
        if "Winter" in event.name:
            return {"water": 15.0, "fire": -5.0}
        return {"fire": 15.0, "water": -5.0}
    if event.type == "Equinox":
        return {"air": 10.0, "earth": 10.0}
    if event.type == "Meteor Shower":
        return {"air": 10.0, "fire": 5.0}
    if event.type == "Eclipse":
        if "Lunar" in event.name:
            return {"water": 10.0, "fire": -10.0}
        return {"fire": 10.0, "water": -10.0}
    if event.type == "Planetary Alignment":
        return {"earth": 10.0, "air": 5.0}
    return {}


def active_event_contributions(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    deltas = dict.fromkeys(PHYSICAL_KEYS, 0.0)
    for event in context.events:
        for key, value in event_deltas(event).items():
            deltas[key] += value
    names = ", ".join(e.name for e in context.events)
    return _entry("Active Events", names, deltas)


ELEMENT_CONTRIBUTORS: dict[str, Contributor] = {
    "Planetary Positions": planetary_positions,
    "Tattva": tattva_contribution,
    "Planetary Hour": planetary_hour_contribution,
    "Environmental Constants": environmental_constants,
    "Latitude": latitude_contribution,
    "Time of Day": time_of_day_contribution,
    "Season": season_contribution,
    "Weather": weather_contribution,
    "Active Events": active_event_contributions,
}


# ----------------------------------------------------------------------
# Spirit contributors
# ----------------------------------------------------------------------

def alignment_spirit(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    spirit = 0.0
    counts: dict[str, int] = {}
    for alignment in context.alignments:
        counts[alignment.type] = counts.get(alignment.type, 0) + 1
        if alignment.type == "Stellium":
            spirit += STELLIUM_SPIRIT
        else:
            spirit += ALIGNMENT_SPIRIT_PER_BODY.get(alignment.type, 0.0) * len(alignment.bodies)
    detail = ", ".join(f"{n} {t}" for t, n in counts.items()) or "No alignments"
    return _entry("Alignments", detail, {"spirit": spirit})


def akasha_spirit(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    if context.tattva.name != "Akasha":
        return []
    return _entry("Akasha Tattva", "Akasha tattva is active", {"spirit": AKASHA_SPIRIT})


def event_spirit(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    spirit = sum(EVENT_SPIRIT.get(e.type, 0.0) for e in context.events)
    names = ", ".join(e.name for e in context.events)
    return _entry("Event Spirit", names, {"spirit": spirit})


def hour_ruler_spirit(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    ruler = context.hour.ruler
    return _entry(
        "Hour Ruler Spirit",
        f"Hour of {ruler}",
        {"spirit": HOUR_RULER_SPIRIT.get(ruler, 0.0)},
    )


def balance_bonus(values) -> float:
    """Bonus for near-equal elements: 15 at perfect balance, 0 from a 15% spread."""
    highest = max(values)
    lowest = min(values)
    if highest <= 0:
        return BALANCE_MAX_BONUS
    ratio = (highest - lowest) / highest
    if ratio >= BALANCE_THRESHOLD:
        return 0.0
    return BALANCE_MAX_BONUS * (1 - ratio / BALANCE_THRESHOLD)


def elemental_balance_spirit(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    bonus = balance_bonus([totals[k] for k in PHYSICAL_KEYS])
    return _entry("Elemental Balance", "Physical elements are nearly equal", {"spirit": bonus})


def detriment_spirit(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    bodies = [p.body for p in context.placements if p.dignity == "Detriment"]
    return _entry(
        "Detriment Penalty",
        f"In detriment: {', '.join(bodies)}",
        {"spirit": DETRIMENT_SPIRIT * len(bodies)},
    )


def retrograde_spirit(context: ProfileContext, totals: dict) -> list[ElementalContribution]:
    bodies = [p.body for p in context.placements if p.is_retrograde]
    return _entry(
        "Retrograde Penalty",
        f"Retrograde: {', '.join(bodies)}",
        {"spirit": RETROGRADE_SPIRIT * len(bodies)},
    )


SPIRIT_CONTRIBUTORS: dict[str, Contributor] = {
    "Alignments": alignment_spirit,
    "Akasha Tattva": akasha_spirit,
    "Event Spirit": event_spirit,
    "Hour Ruler Spirit": hour_ruler_spirit,
    "Elemental Balance": elemental_balance_spirit,
    "Detriment Penalty": detriment_spirit,
    "Retrograde Penalty": retrograde_spirit,
}


# ----------------------------------------------------------------------
# Accumulation
# ----------------------------------------------------------------------

def _fold(contributors: dict, context: ProfileContext, totals: dict, breakdown: list) -> None:
    for name, contributor in contributors.items():
        for contribution in contributor(context, dict(totals)):
            for key in ELEMENT_KEYS:
                totals[key] += contribution.get(key)
            breakdown.append(contribution)
            logger.debug("%s (%s): %s", name, contribution.source, contribution.to_dict())


def calculate_elemental_profile(
    context: ProfileContext,
    element_contributors: Optional[dict] = None,
    spirit_contributors: Optional[dict] = None,
) -> ElementalProfile:
    """
    Fold the contributors over the base percentages.

    Args:
        context: Shared computed context
        element_contributors: Physical contributors (default ELEMENT_CONTRIBUTORS)
        spirit_contributors: Spirit contributors (default SPIRIT_CONTRIBUTORS)

    Returns:
        ElementalProfile whose breakdown reproduces every delta applied.

    Raises:
        ValueError: If context.weather is not a known weather.
    """
    if element_contributors is None:
        element_contributors = ELEMENT_CONTRIBUTORS
    if spirit_contributors is None:
        spirit_contributors = SPIRIT_CONTRIBUTORS

    totals = dict(BASE_PERCENTAGES)
    breakdown: list[ElementalContribution] = []
    _fold(element_contributors, context, totals, breakdown)
    _fold(spirit_contributors, context, totals, breakdown)

    floors = {k: -totals[k] for k in ELEMENT_KEYS if totals[k] < 0}
    if floors:
        floor = ElementalContribution(
            source="Element Floor",
            detail=f"Raised to zero: {', '.join(floors)}",
            **floors,
        )
        for key, delta in floors.items():
            totals[key] += delta
        breakdown.append(floor)

    return ElementalProfile(
        fire=totals["fire"],
        earth=totals["earth"],
        air=totals["air"],
        water=totals["water"],
        spirit=totals["spirit"],
        planetary_hour=context.hour.ruler,
        tattva=context.tattva.name,
        moon_sign=context.moon_sign,
        hour_is_approximate=context.hour.is_approximate,
        base=dict(BASE_PERCENTAGES),
        breakdown=tuple(breakdown),
    )


def element_breakdown(profile: ElementalProfile, key: str) -> list[tuple[str, float]]:
    """(source, delta) pairs that moved one element, in fold order."""
    return [(c.source, c.get(key)) for c in profile.breakdown if c.get(key) != 0]


async def build_elemental_profile(
    engine,
    instant: datetime,
    location: Location,
    weather: Optional[str] = None,
    events: Optional[list] = None,
    placements: Optional[list] = None,
    alignments: Optional[list] = None,
    hour: Optional[PlanetaryHour] = None,
    tattva: Optional[Tattva] = None,
) -> ElementalProfile:
    """
    Compute an elemental profile, calculating any input not supplied.

    Args:
        engine: Ephemeris adapter
        instant: Moment to evaluate
        location: Observer location
        weather: Optional weather name
        events: Events active at instant; looked up in the almanac (plus the
            Planetary Alignment events of the stelliums present) if None
        placements: Body placements; computed if None
        alignments: Alignments; detected from placements if None
        hour: Planetary hour; computed together with tattva if either is None
        tattva: Active tattva

    Raises:
        ValueError: If weather is not a known weather.
        EphemerisError: If an ephemeris calculation fails.
    """
    if weather:
        weather = normalize_weather(weather)
    if placements is None:
        placements = await compute_placements(engine, instant)
    if alignments is None:
        alignments = detect_alignments(placements)
    if hour is None or tattva is None:
        _, hour, tattva = await compute_temporal_rulers(engine, instant, location)

    local = local_time(instant, location)
    if events is None:
        events = await asyncio.to_thread(events_around, local, engine)
        events += alignment_events(alignments, local)

    context = ProfileContext(
        local_time=local,
        latitude=location.latitude,
        placements=tuple(placements),
        alignments=tuple(alignments),
        hour=hour,
        tattva=tattva,
        weather=weather,
        events=tuple(events),
    )
    return calculate_elemental_profile(context)
