"""Geometric relationship among two or more bodies."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Alignment:
    """One detected alignment.

    type is "Conjunction", "Opposition", "Linear" or "Stellium". strength is
    a percentage; Stellium strength is uncapped and may exceed 100.
    """

    bodies: tuple[str, ...]
    type: str
    description: str
    strength: int

    def to_dict(self) -> dict:
        return {
            "bodies": list(self.bodies),
            "type": self.type,
            "description": self.description,
            "strength": self.strength,
        }
