"""Calendar or ephemeris-derived astronomical event."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class UpcomingEvent:
    """An event in the almanac.

    type is one of "Solstice", "Equinox", "Meteor Shower", "Eclipse",
    "Planetary Alignment".
    """

    type: str
    name: str
    date: datetime
    description: str
    visibility: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "name": self.name,
            "date": self.date.isoformat(),
            "description": self.description,
            "visibility": self.visibility,
        }
