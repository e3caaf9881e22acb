"""Per-body ephemeris results.

BodyPosition is the raw adapter output; BodyPlacement is the evaluated result
(sign, dignity, score) built from it. Longitude is the source of truth and the
sign is always derived from it.
"""

from dataclasses import dataclass
from typing import Optional

from planetary_registry.utils.position_utils import degree_in_sign, sign_element


@dataclass(frozen=True)
class BodyPosition:
    """Raw ecliptic longitude and longitudinal speed (degrees/day)."""

    longitude: float
    # None when the adapter could not compute speed
    speed: Optional[float] = None

    @property
    def is_retrograde(self) -> Optional[bool]:
        if self.speed is None:
            return None
        return self.speed < 0


@dataclass(frozen=True)
class BodyPlacement:
    """A body's sign, essential dignity and retrograde state at an instant."""

    body: str
    sign: str
    dignity: str
    score: int
    is_retrograde: bool
    longitude: float

    @property
    def element(self) -> str:
        return sign_element(self.sign)

    @property
    def degree(self) -> float:
        return degree_in_sign(self.longitude)

    def to_dict(self) -> dict:
        return {
            "body": self.body,
            "sign": self.sign,
            "element": self.element,
            "dignity": self.dignity,
            "score": self.score,
            "is_retrograde": self.is_retrograde,
            "longitude": self.longitude,
        }
