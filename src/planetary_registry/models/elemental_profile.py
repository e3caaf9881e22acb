"""Elemental energy profile and its per-source breakdown."""

from dataclasses import dataclass, field
from typing import Optional

PHYSICAL_KEYS = ("fire", "earth", "air", "water")
ELEMENT_KEYS = PHYSICAL_KEYS + ("spirit",)


@dataclass(frozen=True)
class ElementalContribution:
    """Net per-element delta from one named source."""

    source: str
    fire: float = 0.0
    earth: float = 0.0
    air: float = 0.0
    water: float = 0.0
    spirit: float = 0.0
    detail: str = ""

    def get(self, key: str) -> float:
        return getattr(self, key)

    def is_empty(self) -> bool:
        return all(self.get(k) == 0 for k in ELEMENT_KEYS)

    def to_dict(self) -> dict:
        data = {k: self.get(k) for k in ELEMENT_KEYS}
        data["source"] = self.source
        data["detail"] = self.detail
        return data


@dataclass(frozen=True)
class ElementalProfile:
    """Weighted elemental composition.

    Percentages express relative intensity, not a partition: they do not sum
    to 100 and may exceed 100. For every key, base + sum(breakdown) equals
    the reported value.
    """

    fire: float
    earth: float
    air: float
    water: float
    spirit: float
    planetary_hour: str
    tattva: str
    moon_sign: Optional[str] = None
    hour_is_approximate: bool = False
    base: dict = field(default_factory=dict)
    breakdown: tuple[ElementalContribution, ...] = ()

    def get(self, key: str) -> float:
        return getattr(self, key)

    def to_dict(self) -> dict:
        return {
            "fire": self.fire,
            "earth": self.earth,
            "air": self.air,
            "water": self.water,
            "spirit": self.spirit,
            "planetary_hour": self.planetary_hour,
            "tattva": self.tattva,
            "moon_sign": self.moon_sign,
            "hour_is_approximate": self.hour_is_approximate,
            "base": dict(self.base),
            "breakdown": [c.to_dict() for c in self.breakdown],
        }
