"""Shared position conversion utilities.

Low-level math for converting ecliptic longitudes into zodiac signs, elements
and display strings. Used by the dignity, house, alignment and elemental
calculators.
"""

from ..constants import ZODIAC_SIGNS, SIGN_ELEMENTS


def normalize_longitude(longitude: float) -> float:
    """Normalize any longitude into [0, 360)."""
    longitude = longitude % 360.0
    # -1e-18 % 360.0 rounds up to exactly 360.0
    if longitude >= 360.0:
        longitude = 0.0
    return longitude


def longitude_to_sign(longitude: float) -> str:
    """Return the zodiac sign containing an ecliptic longitude.

    Total and periodic: any float maps to a sign, and adding a multiple of
    360° never changes the result.

    Example:
        longitude_to_sign(15.0)  -> "Aries"
        longitude_to_sign(-15.0) -> "Pisces"
    """
    return ZODIAC_SIGNS[int(normalize_longitude(longitude) // 30)]


def sign_element(sign: str) -> str:
    """Return Fire/Earth/Air/Water for a sign name.

    Raises:
        ValueError: If sign is not a recognised zodiac sign name.
    """
    try:
        return SIGN_ELEMENTS[sign]
    except KeyError:
        raise ValueError(f"Unknown sign: {sign}") from None


def degree_in_sign(longitude: float) -> float:
    """Degrees past the start of the containing sign (0.0–<30.0)."""
    return normalize_longitude(longitude) % 30.0


def decimal_to_dms(decimal_degrees: float) -> tuple[int, int, float]:
    """Convert decimal degrees to (degrees, minutes, seconds).

    Example:
        decimal_to_dms(14.66) -> (14, 39, 36.0)
    """
    degrees = int(decimal_degrees)
    remaining = (decimal_degrees - degrees) * 60
    minutes = int(remaining)
    seconds = (remaining - minutes) * 60
    return degrees, minutes, seconds


def format_position(longitude: float) -> str:
    """Format a longitude as degrees/minutes within its sign, e.g. "14°39' Aquarius"."""
    deg, minutes, _ = decimal_to_dms(degree_in_sign(longitude))
    return f"{deg}°{minutes:02d}' {longitude_to_sign(longitude)}"


def angular_separation(lon1: float, lon2: float) -> float:
    """Shortest arc between two longitudes, in [0, 180]."""
    diff = abs(normalize_longitude(lon1) - normalize_longitude(lon2))
    if diff > 180:
        diff = 360 - diff
    return diff
