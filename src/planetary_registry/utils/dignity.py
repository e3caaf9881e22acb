"""Essential dignity evaluation for the seven classical bodies.

Each body has a fixed table of domicile, exaltation, detriment and fall
signs. A sign outside all four is Neutral. Retrograde motion costs two
points, and the result is clamped to [-10, +10].
"""

import asyncio
import logging
from datetime import datetime

from ..constants import (
    BODIES,
    DIGNITY_SCORES,
    DIGNITY_TABLE,
    RETROGRADE_PENALTY,
    SCORE_MAX,
    SCORE_MIN,
)
from ..models import BodyPlacement, BodyPosition
from .position_utils import longitude_to_sign, normalize_longitude

logger = logging.getLogger(__name__)

# Order matters: Mercury is both domicile and exalted in Virgo.
_DIGNITY_ORDER = [
    ("domicile", "Domicile"),
    ("exaltation", "Exaltation"),
    ("detriment", "Detriment"),
    ("fall", "Fall"),
]


def dignity_of(body: str, sign: str, is_retrograde: bool = False) -> tuple[str, int]:
    """
    Classify a body's essential dignity in a sign and score it.

    Args:
        body: One of the seven classical bodies
        sign: Zodiac sign name
        is_retrograde: Apply the retrograde penalty

    Returns:
        (dignity, score) where dignity is Domicile, Exaltation, Detriment,
        Fall or Neutral and score is in [-10, 10].

    Raises:
        ValueError: If body is not a classical body.

    Example:
        dignity_of("Sun", "Leo") -> ("Domicile", 5)
        dignity_of("Mars", "Cancer", is_retrograde=True) -> ("Fall", -6)
    """
    if body not in DIGNITY_TABLE:
        raise ValueError(f"Unknown body: {body}")

    table = DIGNITY_TABLE[body]
    dignity = "Neutral"
    for key, name in _DIGNITY_ORDER:
        if sign in table[key]:
            dignity = name
            break

    score = DIGNITY_SCORES[dignity]
    if is_retrograde:
        score -= RETROGRADE_PENALTY

    return dignity, max(SCORE_MIN, min(SCORE_MAX, score))


def evaluate_placement(body: str, longitude: float, is_retrograde: bool = False) -> BodyPlacement:
    """Build a BodyPlacement from a longitude; the sign is derived from it."""
    longitude = normalize_longitude(longitude)
    sign = longitude_to_sign(longitude)
    dignity, score = dignity_of(body, sign, is_retrograde)
    return BodyPlacement(
        body=body,
        sign=sign,
        dignity=dignity,
        score=score,
        is_retrograde=is_retrograde,
        longitude=longitude,
    )


def placement_from_position(body: str, position: BodyPosition) -> BodyPlacement:
    """Evaluate an adapter result. A missing speed counts as direct motion."""
    return evaluate_placement(body, position.longitude, bool(position.is_retrograde))


async def compute_placements(engine, instant: datetime) -> list[BodyPlacement]:
    """
    Evaluate all seven bodies at an instant.

    Positions are fetched concurrently in worker threads; the result keeps
    BODIES order. An adapter failure for any body propagates unchanged
    (EphemerisError); no default longitude is substituted.

    Args:
        engine: Ephemeris adapter with a position(body, instant) method
        instant: Moment to evaluate

    Returns:
        List of seven BodyPlacement objects, Sun first
    """
    positions = await asyncio.gather(
        *(asyncio.to_thread(engine.position, body, instant) for body in BODIES)
    )
    placements = [placement_from_position(body, pos) for body, pos in zip(BODIES, positions)]
    logger.debug(
        "Placements at %s: %s",
        instant.isoformat(),
        ", ".join(f"{p.body} {p.sign}" for p in placements),
    )
    return placements
