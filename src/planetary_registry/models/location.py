"""Location model - a point on Earth supplied by the caller.

Coordinates always come from outside the engine (a postal-code lookup, a
geocoded place name, or explicit latitude/longitude). The timezone is
optional; when missing it is resolved from the coordinates.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Location:
    """Geographic location for rise/set, house and elemental calculations."""

    latitude: float
    longitude: float
    postal_code: Optional[str] = None
    name: Optional[str] = None
    # IANA timezone (e.g., "America/Chicago")
    timezone: Optional[str] = None

    def __post_init__(self):
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"Invalid latitude: {self.latitude}. Must be between -90 and 90")
        if not -180 <= self.longitude <= 180:
            raise ValueError(f"Invalid longitude: {self.longitude}. Must be between -180 and 180")

    @property
    def label(self) -> str:
        """Short display name."""
        if self.name:
            return self.name.split(",")[0]
        if self.postal_code:
            return self.postal_code
        return f"{self.latitude:.2f}, {self.longitude:.2f}"

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "postal_code": self.postal_code,
            "name": self.name,
            "timezone": self.timezone,
        }
