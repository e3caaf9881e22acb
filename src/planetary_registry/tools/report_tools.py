"""Markdown reports for registry results."""

from datetime import datetime
from typing import Optional

from ..constants import HOUSE_SYSTEM_NAMES
from ..models import (
    Alignment,
    BodyPlacement,
    ElementalProfile,
    ELEMENT_KEYS,
    HouseCusps,
    MoonPhaseInfo,
    PlanetaryHour,
    RegistrySnapshot,
    Tattva,
    UpcomingEvent,
)
from ..utils.almanac import event_duration_text, is_event_active
from ..utils.ephemeris import to_utc
from ..utils.elemental import element_breakdown
from ..utils.houses import house_for_longitude
from ..utils.position_utils import format_position
from .interpretation import interpret_placement


class ReportError(Exception):
    """Raised when a report cannot be produced."""
    pass


def _signed(value: float) -> str:
    return f"{value:+.1f}"


def format_placements(
    placements: list[BodyPlacement],
    houses: Optional[HouseCusps] = None,
    interpret: bool = False,
) -> str:
    """
    Placement table with dignities.

    Args:
        placements: Evaluated placements
        houses: House cusps; adds a house column when given
        interpret: Append a reading for each body

    Returns:
        Markdown report
    """
    report = "## Planetary Dignities\n\n"
    if houses:
        report += "| Body | Position | House | Dignity | Score |\n"
        report += "|---|---|---|---|---|\n"
    else:
        report += "| Body | Position | Dignity | Score |\n"
        report += "|---|---|---|---|\n"

    for p in placements:
        retro = " ℞" if p.is_retrograde else ""
        position = format_position(p.longitude) + retro
        if houses:
            house = house_for_longitude(houses, p.longitude)
            report += f"| {p.body} | {position} | {house} | {p.dignity} | {p.score:+d} |\n"
        else:
            report += f"| {p.body} | {position} | {p.dignity} | {p.score:+d} |\n"

    if interpret:
        report += "\n"
        for p in placements:
            house = house_for_longitude(houses, p.longitude) if houses else None
            report += f"### {p.body}\n{interpret_placement(p, house)}\n\n"

    return report


def format_alignments(alignments: list[Alignment]) -> str:
    report = "## Alignments\n\n"
    if not alignments:
        return report + "No alignments.\n"
    for a in alignments:
        report += f"- **{a.type}** ({a.strength}%): {a.description}\n"
    return report


def format_temporal(ruler_of_day: str, hour: PlanetaryHour, tattva: Optional[Tattva]) -> str:
    """Day ruler, planetary hour and tattva."""
    report = "## Planetary Hour\n\n"
    report += f"Day Ruler: {ruler_of_day}\n"

    span = "day" if hour.is_day else "night"
    report += f"Hour Ruler: {hour.ruler} ({span} hour {hour.hour_index + 1} of 12)\n"
    if hour.start and hour.end:
        report += f"Hour Span: {hour.start:%H:%M} - {hour.end:%H:%M} UTC\n"
    if hour.is_approximate:
        report += "_Approximate: based on clock hours, not sunrise and sunset._\n"

    if tattva:
        note = " (approximate)" if tattva.is_approximate else ""
        report += (
            f"Tattva: {tattva.name} ({tattva.element}), "
            f"{tattva.minutes_into_cycle:.0f} min into the cycle{note}\n"
        )
    return report


def format_house_cusps(houses: HouseCusps) -> str:
    name = HOUSE_SYSTEM_NAMES.get(houses.house_system, houses.house_system)
    report = f"## House Cusps ({name})\n\n"
    if houses.is_fallback:
        report += "_Quadrant houses unavailable here; showing equal houses from the Ascendant._\n\n"
    for i, cusp in enumerate(houses.cusps, start=1):
        report += f"- House {i}: {format_position(cusp)}\n"

    report += "\n### Angles\n"
    report += f"- **Ascendant**: {format_position(houses.ascendant)}\n"
    report += f"- **Midheaven**: {format_position(houses.midheaven)}\n"
    report += f"- **Descendant**: {format_position(houses.descendant)}\n"
    report += f"- **Imum Coeli**: {format_position(houses.imum_coeli)}\n"
    return report


def format_moon_phase(info: MoonPhaseInfo) -> str:
    direction = "waxing" if info.is_waxing else "waning"
    return (
        "## Moon Phase\n\n"
        f"{info.phase} ({direction})\n"
        f"Illumination: {info.illumination:.1f}%\n"
        f"Age: {info.age_days:.1f} days\n"
    )


def merge_events(*groups) -> list[UpcomingEvent]:
    """Concatenate event lists, dropping repeats, soonest first."""
    seen = set()
    merged = []
    for events in groups:
        for e in events:
            key = (e.name, to_utc(e.date))
            if key not in seen:
                seen.add(key)
                merged.append(e)
    merged.sort(key=lambda e: to_utc(e.date))
    return merged


def format_events(events: list[UpcomingEvent], instant: Optional[datetime] = None) -> str:
    """Upcoming events; marks the ones happening at instant."""
    report = "## Upcoming Events\n\n"
    if not events:
        return report + "No events in this window.\n"

    for e in events:
        duration = event_duration_text(e)
        line = f"- **{e.name}** ({e.type}): {e.date:%Y-%m-%d}"
        if duration:
            line += f" ({duration})"
        if instant is not None and is_event_active(e, instant):
            line += " **Happening now**"
        report += line + "\n"
        report += f"  {e.description}\n"
        if e.visibility:
            report += f"  Visibility: {e.visibility}\n"
    return report


def format_element_breakdown(profile: ElementalProfile, key: str) -> str:
    """
    Base value and every source that moved one element.

    Raises:
        ReportError: If key is not an element of the profile.
    """
    key = key.lower()
    if key not in ELEMENT_KEYS:
        raise ReportError(f"Unknown element '{key}'. Valid: {', '.join(ELEMENT_KEYS)}")

    report = f"### {key.capitalize()} Breakdown\n"
    report += f"- Base Percentage: {profile.base.get(key, 0.0):.1f}\n"
    for source, delta in element_breakdown(profile, key):
        report += f"- {source}: {_signed(delta)}\n"
    report += f"- **Total: {profile.get(key):.1f}**\n"
    return report


def format_elemental_profile(profile: ElementalProfile, details: bool = False) -> str:
    report = "## Elemental Profile\n\n"
    for key in ELEMENT_KEYS:
        report += f"- **{key.capitalize()}**: {profile.get(key):.1f}%\n"

    report += f"\nPlanetary Hour: {profile.planetary_hour}"
    if profile.hour_is_approximate:
        report += " (approximate)"
    report += f"\nTattva: {profile.tattva}\n"
    if profile.moon_sign:
        report += f"Moon Sign: {profile.moon_sign}\n"

    report += "\n### Sources\n"
    for c in profile.breakdown:
        deltas = ", ".join(
            f"{k} {_signed(c.get(k))}" for k in ELEMENT_KEYS if c.get(k) != 0
        )
        report += f"- {c.source}: {deltas}"
        report += f" ({c.detail})\n" if c.detail else "\n"

    if details:
        report += "\n"
        for key in ELEMENT_KEYS:
            report += format_element_breakdown(profile, key) + "\n"
    return report


def format_registry(snapshot: RegistrySnapshot) -> str:
    """Full registry report."""
    if snapshot.location:
        where = snapshot.location.label
    else:
        where = "no location (UTC)"
    report = f"# Planetary Registry for {snapshot.instant:%Y-%m-%d %H:%M} ({where})\n\n"

    report += format_placements(list(snapshot.placements), snapshot.houses) + "\n"
    report += format_temporal(snapshot.day_ruler, snapshot.planetary_hour, snapshot.tattva) + "\n"
    report += format_moon_phase(snapshot.moon_phase) + "\n"
    report += format_alignments(list(snapshot.alignments)) + "\n"
    if snapshot.elemental_profile:
        report += format_elemental_profile(snapshot.elemental_profile) + "\n"
    if snapshot.houses:
        report += format_house_cusps(snapshot.houses) + "\n"
    report += format_events(merge_events(snapshot.active_events, snapshot.events), snapshot.instant)
    return report
