"""Geocoding helpers: postal codes and place names to coordinates.

Lookups go to Nominatim (OpenStreetMap). A lookup that finds nothing returns
None; a lookup that could not be performed (network, HTTP or payload error)
raises GeocodingError so callers can tell the two apart.
"""

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Optional, Dict, Any

from timezonefinder import TimezoneFinder

from ..models import Location

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
USER_AGENT = "planetary-registry-mcp/0.1.0"

# Module-level instance: initialization loads polygon data once
_tf = TimezoneFinder()


class GeocodingError(Exception):
    """Raised when a geocoding request cannot be completed."""
    pass


def get_timezone_for_coords(lat: float, lon: float) -> str:
    """
    Return the IANA timezone string for any coordinates on earth.

    Uses timezonefinder's full polygon dataset, accurate to timezone borders,
    not just a rough longitude estimate. Falls back to UTC if coordinates are
    over open ocean with no timezone polygon (rare).

    Args:
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees

    Returns:
        IANA timezone string, e.g. 'Asia/Bangkok', 'America/Chicago', 'UTC'
    """
    tz = _tf.timezone_at(lat=lat, lng=lon)
    return tz if tz else "UTC"


def resolve_timezone(location: Location) -> str:
    """The location's own timezone, or the one found from its coordinates."""
    if location.timezone:
        return location.timezone
    return get_timezone_for_coords(location.latitude, location.longitude)


def _nominatim_search(params: Dict[str, str]) -> list:
    """Run one Nominatim search and return the decoded result list.

    Raises:
        GeocodingError: On network, HTTP or JSON errors.
    """
    query = urllib.parse.urlencode({**params, "format": "json", "limit": "1"})
    req = urllib.request.Request(
        f"{NOMINATIM_URL}?{query}",
        headers={"User-Agent": USER_AGENT}
    )

    try:
        with urllib.request.urlopen(req, timeout=5) as response:
            data = json.loads(response.read().decode())
    except (urllib.error.URLError, TimeoutError, OSError) as exc:
        raise GeocodingError(f"Geocoding request failed: {exc}") from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise GeocodingError(f"Invalid geocoding response: {exc}") from exc

    if not isinstance(data, list):
        raise GeocodingError(f"Unexpected geocoding response: {data!r}")
    return data


def postal_code_to_location(postal_code: str, country: str = "us") -> Optional[Location]:
    """
    Look up the coordinates of a postal code.

    Args:
        postal_code: Postal code, e.g. "90210"
        country: ISO country code restricting the search (default "us")

    Returns:
        Location with postal_code, name and timezone filled in, or None if
        the postal code was not found.

    Raises:
        GeocodingError: If the lookup itself failed.
    """
    code = postal_code.strip()
    if not code:
        return None

    data = _nominatim_search({"postalcode": code, "country": country})
    if not data:
        logger.info("No geocoding result for postal code %s", code)
        return None

    result = data[0]
    try:
        lat = float(result["lat"])
        lon = float(result["lon"])
    except (KeyError, TypeError, ValueError) as exc:
        raise GeocodingError(f"Malformed geocoding result: {result!r}") from exc

    return Location(
        latitude=lat,
        longitude=lon,
        postal_code=code,
        name=result.get("display_name", code),
        timezone=get_timezone_for_coords(lat, lon),
    )


def geocode_location(location_name: str) -> Optional[Dict[str, Any]]:
    """
    Look up coordinates and timezone for a location name using Nominatim (OpenStreetMap).

    Args:
        location_name: Anything Nominatim understands: city, address, country, etc.
                       e.g. "Bangkok, Thailand", "Seattle, WA", "Richardson, TX"

    Returns:
        Dict with name, latitude, longitude, and timezone, or None if not found.

    Raises:
        GeocodingError: If the lookup itself failed.
    """
    data = _nominatim_search({"q": location_name})
    if not data:
        return None

    result = data[0]
    lat = float(result["lat"])
    lon = float(result["lon"])

    return {
        "name": result.get("display_name", location_name),
        "latitude": lat,
        "longitude": lon,
        "timezone": get_timezone_for_coords(lat, lon),
    }
