"""House cusps, the four angles, and house membership.

The IC and Descendant are never queried independently: they are always the
points opposite the Midheaven and Ascendant. When the quadrant house system
cannot be computed (typically above the polar circles) the houses degrade to
twelve 30° houses measured from the Ascendant.
"""

import asyncio
import logging
import math
from datetime import datetime
from typing import Any, Optional

from ..models import HouseCusps, Location
from .ephemeris import EphemerisError
from .position_utils import normalize_longitude

logger = logging.getLogger(__name__)


def make_house_cusps(
    cusps,
    ascendant: float,
    midheaven: float,
    house_system: str = "P",
    is_fallback: bool = False,
) -> HouseCusps:
    """Build a HouseCusps with normalized longitudes and derived IC/Descendant."""
    asc = normalize_longitude(ascendant)
    mc = normalize_longitude(midheaven)
    return HouseCusps(
        cusps=tuple(normalize_longitude(c) for c in cusps),
        ascendant=asc,
        midheaven=mc,
        imum_coeli=normalize_longitude(mc + 180.0),
        descendant=normalize_longitude(asc + 180.0),
        house_system=house_system,
        is_fallback=is_fallback,
    )


def equal_cusps(ascendant: float) -> list[float]:
    """Twelve cusps 30° apart starting at the Ascendant."""
    return [normalize_longitude(ascendant + 30.0 * i) for i in range(12)]


def _finite(value: Any) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


def _valid_cusps(raw: Optional[dict]) -> bool:
    if not raw:
        return False
    cusps = raw.get("cusps")
    return (
        cusps is not None
        and len(cusps) == 12
        and all(_finite(c) for c in cusps)
        and _finite(raw.get("ascendant"))
        and _finite(raw.get("mc"))
    )


async def compute_house_cusps(
    engine,
    instant: datetime,
    location: Location,
    house_system: str = "P",
) -> HouseCusps:
    """
    House cusps and angles for an instant and location.

    Args:
        engine: Ephemeris adapter with house_cusps(instant, location, house_system)
        instant: Moment of the chart
        location: Observer location
        house_system: House system code or name (default Placidus)

    Returns:
        HouseCusps. is_fallback is True when equal houses from the Ascendant
        were substituted.

    Raises:
        EphemerisError: If not even an Ascendant could be computed.
    """
    raw = None
    try:
        raw = await asyncio.to_thread(engine.house_cusps, instant, location, house_system)
    except EphemerisError as exc:
        logger.warning("House calculation failed (%s); falling back to equal houses", exc)

    if _valid_cusps(raw):
        return make_house_cusps(
            raw["cusps"], raw["ascendant"], raw["mc"],
            house_system=house_system,
        )

    if raw is not None:
        logger.warning("House system %s returned invalid cusps; falling back to equal houses",
                       house_system)

    if raw is None or not (_finite(raw.get("ascendant")) and _finite(raw.get("mc"))):
        # Equal houses only need the Ascendant, which is defined everywhere.
        raw = await asyncio.to_thread(engine.house_cusps, instant, location, "E")
        if not (_finite(raw.get("ascendant")) and _finite(raw.get("mc"))):
            raise EphemerisError("Could not calculate the Ascendant")

    return make_house_cusps(
        equal_cusps(raw["ascendant"]), raw["ascendant"], raw["mc"],
        house_system="E",
        is_fallback=True,
    )


def house_for_longitude(houses: HouseCusps, longitude: float) -> int:
    """
    House number (1-12) containing a longitude.

    A house runs from its cusp up to, not including, the next cusp; the
    house that spans 0° Aries is handled by wrapping.
    """
    lon = normalize_longitude(longitude)
    cusps = houses.cusps
    for i in range(12):
        start = cusps[i]
        end = cusps[(i + 1) % 12]
        if start <= end:
            if start <= lon < end:
                return i + 1
        elif lon >= start or lon < end:
            return i + 1
    # Only reachable with degenerate (identical) cusps.
    return 1
