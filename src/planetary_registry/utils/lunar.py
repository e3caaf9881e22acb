"""Lunar phase from the Sun-Moon elongation."""

import asyncio
import math
from datetime import datetime

from ..constants import SYNODIC_MONTH_DAYS
from ..models import MoonPhaseInfo
from .position_utils import normalize_longitude

# Eight 45° sectors, each centred on its exact phase; New Moon straddles 0°.
PHASE_NAMES = [
    "New Moon",
    "Waxing Crescent",
    "First Quarter",
    "Waxing Gibbous",
    "Full Moon",
    "Waning Gibbous",
    "Last Quarter",
    "Waning Crescent",
]


def phase_name(elongation: float) -> str:
    return PHASE_NAMES[int(((elongation + 22.5) % 360.0) // 45.0)]


def moon_phase(moon_longitude: float, sun_longitude: float) -> MoonPhaseInfo:
    """
    Phase, illumination and age of the Moon.

    Args:
        moon_longitude: Ecliptic longitude of the Moon
        sun_longitude: Ecliptic longitude of the Sun

    Returns:
        MoonPhaseInfo with illumination (%), age (days) and elongation
        rounded to one decimal.
    """
    elongation = normalize_longitude(moon_longitude - sun_longitude)
    illumination = (1 - math.cos(math.radians(elongation))) / 2 * 100
    age = elongation / 360.0 * SYNODIC_MONTH_DAYS
    return MoonPhaseInfo(
        phase=phase_name(elongation),
        illumination=round(illumination, 1),
        age_days=round(age, 1),
        elongation=round(elongation, 1) % 360.0,
    )


async def compute_moon_phase(engine, instant: datetime) -> MoonPhaseInfo:
    """Moon phase at an instant, fetching both longitudes from the engine."""
    moon, sun = await asyncio.gather(
        asyncio.to_thread(engine.position, "Moon", instant),
        asyncio.to_thread(engine.position, "Sun", instant),
    )
    return moon_phase(moon.longitude, sun.longitude)
