"""Lunar phase derived from the Sun-Moon elongation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MoonPhaseInfo:
    phase: str
    illumination: float
    age_days: float
    elongation: float

    @property
    def is_waxing(self) -> bool:
        return self.elongation < 180

    def to_dict(self) -> dict:
        return {
            "phase": self.phase,
            "illumination": self.illumination,
            "age_days": self.age_days,
            "elongation": self.elongation,
        }
