"""Value objects for planetary-registry-mcp.

This package contains the plain data structures the calculators produce and
the presentation layer consumes:
- Location: caller-supplied coordinates (and optional timezone)
- BodyPosition / BodyPlacement: raw ephemeris output and evaluated dignity
- SolarDay / PlanetaryHour / Tattva: sunrise-driven time structures
- HouseCusps: twelve cusps plus the four angles
- Alignment: conjunctions, oppositions, linear triples, stelliums
- ElementalProfile / ElementalContribution: weighted elements with breakdown
- UpcomingEvent: almanac entries
- MoonPhaseInfo: lunar phase
- RegistrySnapshot: everything above for one instant

All of them are frozen dataclasses, created fresh on every computation.

Example usage:
    from planetary_registry.models import Location
    from planetary_registry.registry import compute_registry

    location = Location(latitude=34.09, longitude=-118.41, postal_code="90210")
    snapshot = await compute_registry(engine, instant, location, weather="Clear")
"""

from planetary_registry.models.location import Location
from planetary_registry.models.placement import BodyPosition, BodyPlacement
from planetary_registry.models.solar import SolarDay, PlanetaryHour, Tattva
from planetary_registry.models.house_cusps import HouseCusps
from planetary_registry.models.alignment import Alignment
from planetary_registry.models.elemental_profile import (
    ElementalContribution,
    ElementalProfile,
    ELEMENT_KEYS,
    PHYSICAL_KEYS,
)
from planetary_registry.models.upcoming_event import UpcomingEvent
from planetary_registry.models.moon_phase import MoonPhaseInfo
from planetary_registry.models.snapshot import RegistrySnapshot

__all__ = [
    "Location",
    "BodyPosition",
    "BodyPlacement",
    "SolarDay",
    "PlanetaryHour",
    "Tattva",
    "HouseCusps",
    "Alignment",
    "ElementalContribution",
    "ElementalProfile",
    "ELEMENT_KEYS",
    "PHYSICAL_KEYS",
    "UpcomingEvent",
    "MoonPhaseInfo",
    "RegistrySnapshot",
]
