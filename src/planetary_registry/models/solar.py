"""Sun-driven time structures: rise/set times, planetary hours and tattvas."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class SolarDay:
    """Sunrise and sunset (UTC) for one local calendar day.

    Either value is None when the Sun does not rise or set that day.
    """

    sunrise: Optional[datetime]
    sunset: Optional[datetime]

    def to_dict(self) -> dict:
        return {"sunrise": _iso(self.sunrise), "sunset": _iso(self.sunset)}


@dataclass(frozen=True)
class PlanetaryHour:
    """The planetary hour containing an instant.

    hour_index is 0-11 within the day or night span. is_approximate marks the
    wall-clock fallback that ignores sunrise and sunset; start/end are None
    in that case.
    """

    ruler: str
    day_ruler: str
    hour_index: int
    is_day: bool
    is_approximate: bool = False
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "ruler": self.ruler,
            "day_ruler": self.day_ruler,
            "hour_index": self.hour_index,
            "is_day": self.is_day,
            "is_approximate": self.is_approximate,
            "start": _iso(self.start),
            "end": _iso(self.end),
        }


@dataclass(frozen=True)
class Tattva:
    """Active slice of the 2-hour, five-element tattva cycle."""

    name: str
    element: str
    minutes_into_cycle: float
    is_approximate: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "element": self.element,
            "minutes_into_cycle": self.minutes_into_cycle,
            "is_approximate": self.is_approximate,
        }
