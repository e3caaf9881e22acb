"""Planetary alignment detection.

Four independent passes over a set of placements; their results are
concatenated without de-duplication, so one pair may appear in a Conjunction
and in a Stellium at the same time.

CONJUNCTION / OPPOSITION
  Every unordered pair whose separation is within the orb of 0° or 180°.
  Strength falls linearly from 100 at exact to 0 at the edge of the orb.

LINEAR
  Every unordered triple whose three arcs around the circle (sorted
  longitudes, including the wraparound arc) contain two arcs within the
  tolerance of each other. This is a loose heuristic, not a true
  collinearity test: three bodies bunched together also pass, because
  two of their arcs are both near zero. Fixed strength 75.

STELLIUM
  Three or more bodies in one sign. Strength is 15 per body and is not
  capped at 100.
"""

from itertools import combinations
from typing import Optional, Sequence

from ..constants import ZODIAC_SIGNS
from ..models import Alignment, BodyPlacement
from .position_utils import angular_separation, normalize_longitude

DEFAULT_ORB = 8.0
LINEAR_TOLERANCE = 15.0
LINEAR_STRENGTH = 75
STELLIUM_MIN_BODIES = 3
STELLIUM_STRENGTH_PER_BODY = 15


def _orb_strength(deviation: float, orb: float) -> int:
    return round(100 * (1 - deviation / orb))


def find_pair_alignments(
    placements: Sequence[BodyPlacement],
    orb: float = DEFAULT_ORB,
    opposition_orb: Optional[float] = None,
) -> list[Alignment]:
    """Conjunctions and oppositions between every unordered pair.

    Raises:
        ValueError: If either orb is not positive.
    """
    if opposition_orb is None:
        opposition_orb = orb
    if orb <= 0 or opposition_orb <= 0:
        raise ValueError(f"Orbs must be greater than 0 (got {orb}, {opposition_orb})")

    found = []
    for a, b in combinations(placements, 2):
        sep = angular_separation(a.longitude, b.longitude)
        if sep <= orb:
            found.append(Alignment(
                bodies=(a.body, b.body),
                type="Conjunction",
                description=f"{a.body} and {b.body} conjunct ({sep:.1f}° apart)",
                strength=_orb_strength(sep, orb),
            ))
        deviation = abs(sep - 180.0)
        if deviation <= opposition_orb:
            found.append(Alignment(
                bodies=(a.body, b.body),
                type="Opposition",
                description=f"{a.body} opposite {b.body} ({sep:.1f}° apart)",
                strength=_orb_strength(deviation, opposition_orb),
            ))
    return found


def triple_gaps(lon1: float, lon2: float, lon3: float) -> tuple[float, float, float]:
    """The three arcs between three points on the circle, wraparound arc last."""
    a, b, c = sorted(normalize_longitude(x) for x in (lon1, lon2, lon3))
    return b - a, c - b, 360.0 - (c - a)


def find_linear_alignments(
    placements: Sequence[BodyPlacement],
    tolerance: float = LINEAR_TOLERANCE,
) -> list[Alignment]:
    """Approximate linear triples (see module docstring)."""
    found = []
    for trio in combinations(placements, 3):
        gaps = triple_gaps(*(p.longitude for p in trio))
        if any(abs(g1 - g2) <= tolerance for g1, g2 in combinations(gaps, 2)):
            names = tuple(p.body for p in trio)
            found.append(Alignment(
                bodies=names,
                type="Linear",
                description=(
                    f"{', '.join(names)} in approximate linear formation "
                    f"(arcs {gaps[0]:.0f}°/{gaps[1]:.0f}°/{gaps[2]:.0f}°)"
                ),
                strength=LINEAR_STRENGTH,
            ))
    return found


def find_stelliums(
    placements: Sequence[BodyPlacement],
    min_bodies: int = STELLIUM_MIN_BODIES,
) -> list[Alignment]:
    """One Stellium per sign holding at least min_bodies bodies."""
    by_sign: dict[str, list[str]] = {}
    for p in placements:
        by_sign.setdefault(p.sign, []).append(p.body)

    found = []
    for sign in ZODIAC_SIGNS:
        bodies = by_sign.get(sign, [])
        if len(bodies) >= min_bodies:
            found.append(Alignment(
                bodies=tuple(bodies),
                type="Stellium",
                description=f"Stellium in {sign}: {', '.join(bodies)}",
                strength=len(bodies) * STELLIUM_STRENGTH_PER_BODY,
            ))
    return found


def detect_alignments(
    placements: Sequence[BodyPlacement],
    orb: float = DEFAULT_ORB,
    opposition_orb: Optional[float] = None,
    linear_tolerance: float = LINEAR_TOLERANCE,
    stellium_min_bodies: int = STELLIUM_MIN_BODIES,
) -> list[Alignment]:
    """
    Run all four detection passes.

    Args:
        placements: Bodies to compare
        orb: Conjunction orb in degrees
        opposition_orb: Opposition orb (defaults to orb)
        linear_tolerance: Max difference between two arcs of a Linear triple
        stellium_min_bodies: Bodies needed in one sign for a Stellium

    Returns:
        Pair alignments, then Linear triples, then Stelliums.
    """
    return (
        find_pair_alignments(placements, orb, opposition_orb)
        + find_linear_alignments(placements, linear_tolerance)
        + find_stelliums(placements, stellium_min_bodies)
    )
