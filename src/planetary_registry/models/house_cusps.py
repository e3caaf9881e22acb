"""House cusps and the four angles of a chart."""

from dataclasses import dataclass


@dataclass(frozen=True)
class HouseCusps:
    """Twelve cusp longitudes plus the angles.

    cusps[0] is the 1st house, cusps[11] the 12th. imum_coeli and descendant
    are always exactly 180° from midheaven and ascendant; use
    planetary_registry.utils.houses.make_house_cusps to construct one.
    is_fallback marks evenly spaced cusps substituted after a failed
    quadrant-house calculation.
    """

    cusps: tuple[float, ...]
    ascendant: float
    midheaven: float
    imum_coeli: float
    descendant: float
    house_system: str = "P"
    is_fallback: bool = False

    def to_dict(self) -> dict:
        return {
            "cusps": list(self.cusps),
            "ascendant": self.ascendant,
            "midheaven": self.midheaven,
            "imum_coeli": self.imum_coeli,
            "descendant": self.descendant,
            "house_system": self.house_system,
            "is_fallback": self.is_fallback,
        }
