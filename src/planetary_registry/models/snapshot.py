"""Everything the registry computes for one instant and place."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from planetary_registry.models.alignment import Alignment
from planetary_registry.models.elemental_profile import ElementalProfile
from planetary_registry.models.house_cusps import HouseCusps
from planetary_registry.models.location import Location
from planetary_registry.models.moon_phase import MoonPhaseInfo
from planetary_registry.models.placement import BodyPlacement
from planetary_registry.models.solar import PlanetaryHour, Tattva
from planetary_registry.models.upcoming_event import UpcomingEvent


@dataclass(frozen=True)
class RegistrySnapshot:
    """Output of planetary_registry.registry.compute_registry.

    Location-dependent fields (tattva, houses, elemental_profile) are None
    when no location was given; planetary_hour is then the approximate form.
    events starts at the instant; active_events are those whose proximity
    window contains it, including ones that peaked a few days earlier.
    """

    instant: datetime
    location: Optional[Location]
    placements: tuple[BodyPlacement, ...]
    alignments: tuple[Alignment, ...]
    day_ruler: str
    planetary_hour: PlanetaryHour
    moon_phase: MoonPhaseInfo
    events: tuple[UpcomingEvent, ...]
    tattva: Optional[Tattva] = None
    houses: Optional[HouseCusps] = None
    elemental_profile: Optional[ElementalProfile] = None
    active_events: tuple[UpcomingEvent, ...] = ()

    def placement(self, body: str) -> BodyPlacement:
        for p in self.placements:
            if p.body == body:
                return p
        raise KeyError(body)

    def to_dict(self) -> dict:
        return {
            "instant": self.instant.isoformat(),
            "location": self.location.to_dict() if self.location else None,
            "placements": [p.to_dict() for p in self.placements],
            "alignments": [a.to_dict() for a in self.alignments],
            "day_ruler": self.day_ruler,
            "planetary_hour": self.planetary_hour.to_dict(),
            "tattva": self.tattva.to_dict() if self.tattva else None,
            "houses": self.houses.to_dict() if self.houses else None,
            "moon_phase": self.moon_phase.to_dict(),
            "events": [e.to_dict() for e in self.events],
            "active_events": [e.to_dict() for e in self.active_events],
            "elemental_profile": (
                self.elemental_profile.to_dict() if self.elemental_profile else None
            ),
        }
