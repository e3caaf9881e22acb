"""Planetary registry MCP tools.

Tools for computing the registry (placements, hours, houses, elemental
profile, moon phase, events) and for managing the default location and
weather. Dates and times are local wall-clock at the location.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

from mcp.types import Tool, TextContent

from ..config import ConfigManager
from ..constants import HOUSE_SYSTEM_NAMES
from ..models import Location
from ..registry import compute_registry
from ..utils.almanac import get_upcoming_events
from ..utils.elemental import WEATHER_EFFECTS, build_elemental_profile
from ..utils.ephemeris import EphemerisError, to_utc
from ..utils.geocoding import (
    GeocodingError,
    geocode_location,
    postal_code_to_location,
    resolve_timezone,
)
from ..utils.houses import compute_house_cusps
from ..utils.dignity import compute_placements
from ..utils.lunar import compute_moon_phase
from .report_tools import (
    ReportError,
    format_element_breakdown,
    format_elemental_profile,
    format_events,
    format_house_cusps,
    format_moon_phase,
    format_placements,
    format_registry,
)

logger = logging.getLogger(__name__)

EngineGetter = Callable[[], Awaitable[Any]]


# ============================================================================
# Tool Definitions
# ============================================================================

_DATE_PROPS = {
    "date": {
        "type": "string",
        "description": "Date in YYYY-MM-DD format (optional, defaults to now)"
    },
    "time": {
        "type": "string",
        "description": "Local time in HH:MM format (optional, defaults to 12:00 when a date is given)"
    },
}

_LOCATION_PROPS = {
    "postal_code": {
        "type": "string",
        "description": "Postal code to look up, e.g. '90210' (optional)"
    },
    "latitude": {
        "type": "number",
        "description": "Latitude in decimal degrees (optional, with longitude)"
    },
    "longitude": {
        "type": "number",
        "description": "Longitude in decimal degrees (optional, with latitude)"
    },
    "location": {
        "type": "string",
        "description": "Any place name, e.g. 'Seattle, WA' (optional, geocoded)"
    },
}

_WEATHER_PROP = {
    "weather": {
        "type": "string",
        "enum": list(WEATHER_EFFECTS),
        "description": "Current weather (optional, defaults to the configured weather)"
    },
}


def get_registry_tools() -> list[Tool]:
    """Return list of registry tool definitions."""
    return [
        Tool(
            name="view_config",
            description="View the configured default location, weather, house system and thresholds",
            inputSchema={"type": "object", "properties": {}}
        ),
        Tool(
            name="set_location",
            description=(
                "Set the default location used when a tool call gives none. "
                "Provide a postal code, latitude and longitude, or a place name."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    **_LOCATION_PROPS,
                    "name": {
                        "type": "string",
                        "description": "Display name for coordinates (optional)"
                    },
                    "country": {
                        "type": "string",
                        "description": "ISO country code for postal code lookup (default 'us')"
                    },
                }
            }
        ),
        Tool(
            name="set_weather",
            description="Set the default weather used by the elemental profile",
            inputSchema={
                "type": "object",
                "properties": _WEATHER_PROP,
                "required": ["weather"]
            }
        ),
        Tool(
            name="lookup_postal_code",
            description="Look up coordinates and timezone for a postal code without saving it",
            inputSchema={
                "type": "object",
                "properties": {
                    "postal_code": _LOCATION_PROPS["postal_code"],
                    "country": {
                        "type": "string",
                        "description": "ISO country code (default 'us')"
                    },
                },
                "required": ["postal_code"]
            }
        ),
        Tool(
            name="get_planetary_registry",
            description=(
                "Full planetary registry for a moment and place: dignities, day and hour "
                "rulers, tattva, moon phase, alignments, elemental profile, house cusps "
                "and upcoming events. Without a location, the hour is approximate and "
                "houses and the elemental profile are omitted."
            ),
            inputSchema={
                "type": "object",
                "properties": {**_DATE_PROPS, **_LOCATION_PROPS, **_WEATHER_PROP}
            }
        ),
        Tool(
            name="get_planetary_dignities",
            description=(
                "Sign, essential dignity, score and retrograde state of the seven "
                "classical bodies, with house placement when a location is known."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    **_DATE_PROPS,
                    **_LOCATION_PROPS,
                    "interpret": {
                        "type": "boolean",
                        "description": "Include a short reading for each body (default false)"
                    },
                }
            }
        ),
        Tool(
            name="get_elemental_profile",
            description=(
                "Weighted fire/earth/air/water/spirit profile with every contributing "
                "source. Requires a location (argument or configured)."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    **_DATE_PROPS,
                    **_LOCATION_PROPS,
                    **_WEATHER_PROP,
                    "element": {
                        "type": "string",
                        "description": "Show the detailed breakdown of one element (optional)"
                    },
                }
            }
        ),
        Tool(
            name="get_upcoming_events",
            description="Solstices, equinoxes, meteor showers and eclipses in the coming window",
            inputSchema={
                "type": "object",
                "properties": {
                    "date": _DATE_PROPS["date"],
                    "days": {
                        "type": "integer",
                        "description": "Window length in days (default from config, 365)"
                    },
                    "limit": {
                        "type": "integer",
                        "description": "Maximum number of events (default 10)"
                    },
                    "include_eclipses": {
                        "type": "boolean",
                        "description": "Search the ephemeris for eclipses (default true)"
                    },
                }
            }
        ),
        Tool(
            name="get_house_cusps",
            description="House cusps and angles. Requires a location (argument or configured).",
            inputSchema={
                "type": "object",
                "properties": {
                    **_DATE_PROPS,
                    **_LOCATION_PROPS,
                    "house_system": {
                        "type": "string",
                        "enum": list(HOUSE_SYSTEM_NAMES),
                        "description": "House system code (default from config, P = Placidus)"
                    },
                }
            }
        ),
        Tool(
            name="get_moon_phase",
            description="Moon phase, illumination and age",
            inputSchema={"type": "object", "properties": dict(_DATE_PROPS)}
        ),
    ]


# ============================================================================
# Argument helpers
# ============================================================================

def resolve_location(arguments: dict, config: ConfigManager) -> Optional[Location]:
    """
    Location from tool arguments, falling back to the configured one.

    Precedence: postal_code, latitude/longitude, location name, config.

    Raises:
        ValueError: If a postal code or place name is not found.
        GeocodingError: If a lookup request fails.
    """
    postal_code = (arguments.get("postal_code") or "").strip()
    if postal_code:
        location = postal_code_to_location(postal_code, arguments.get("country") or "us")
        if location is None:
            raise ValueError(f"Postal code not found: {postal_code}")
        return location

    latitude = arguments.get("latitude")
    longitude = arguments.get("longitude")
    if latitude is not None and longitude is not None:
        return Location(
            latitude=float(latitude),
            longitude=float(longitude),
            name=arguments.get("name"),
        )

    place = (arguments.get("location") or "").strip()
    if place:
        geo = geocode_location(place)
        if geo is None:
            raise ValueError(f"Location not found: {place}")
        return Location(
            latitude=geo["latitude"],
            longitude=geo["longitude"],
            name=geo["name"],
            timezone=geo["timezone"],
        )

    return config.get_location()


def parse_instant(
    date_str: Optional[str],
    time_str: Optional[str],
    location: Optional[Location],
) -> datetime:
    """
    Aware UTC instant from local date and time strings.

    No date means now. The wall-clock time is read in the location's
    timezone, or UTC without a location.

    Raises:
        ValueError: If the date or time is malformed.
    """
    if not date_str:
        return datetime.now(timezone.utc)

    try:
        day = datetime.strptime(date_str.strip(), "%Y-%m-%d")
    except ValueError:
        raise ValueError(f"Invalid date format: {date_str}. Use YYYY-MM-DD")

    time_str = (time_str or "12:00").strip()
    try:
        clock = datetime.strptime(time_str, "%H:%M")
    except ValueError:
        raise ValueError(f"Invalid time format: {time_str}. Use HH:MM")

    tz = ZoneInfo(resolve_timezone(location)) if location else timezone.utc
    local = day.replace(hour=clock.hour, minute=clock.minute, tzinfo=tz)
    return to_utc(local)


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


def _require_location(location: Optional[Location]) -> Location:
    if location is None:
        raise ValueError(
            "A location is required. Pass postal_code, latitude/longitude or location, "
            "or save one with set_location."
        )
    return location


# ============================================================================
# Tool Handlers
# ============================================================================

async def handle_view_config(arguments: dict, config: ConfigManager, get_engine) -> list[TextContent]:
    status = config.get_config_status()
    response = "# Current Configuration\n\n"
    if status["location"]:
        response += f"Location: {status['location']}\n"
        response += f"Coordinates: {status['latitude']}, {status['longitude']}\n"
        response += f"Timezone: {status['timezone'] or 'resolved from coordinates'}\n"
    else:
        response += "Location: not configured\n"
    response += f"House System: {HOUSE_SYSTEM_NAMES.get(status['house_system'], status['house_system'])}\n"
    response += f"Weather: {status['weather'] or 'not set'}\n"
    response += f"Event Window: {status['event_window_days']} days\n\n"
    response += "## Thresholds\n"
    for name, value in status["thresholds"].items():
        response += f"- {name}: {value}\n"
    response += f"\nConfig file: {status['config_path']}\n"
    return _text(response)


async def handle_set_location(arguments: dict, config: ConfigManager, get_engine) -> list[TextContent]:
    if not (arguments.get("postal_code") or (arguments.get("location") or "").strip() or
            (arguments.get("latitude") is not None and arguments.get("longitude") is not None)):
        return _text("Error: provide postal_code, location, or latitude and longitude")

    location = await asyncio.to_thread(resolve_location, arguments, config)
    location = config.set_location(
        latitude=location.latitude,
        longitude=location.longitude,
        name=location.name,
        postal_code=location.postal_code,
        timezone=location.timezone or resolve_timezone(location),
    )
    return _text(
        f"✓ Location set to {location.label} "
        f"({location.latitude:.4f}, {location.longitude:.4f}, {location.timezone})"
    )


async def handle_set_weather(arguments: dict, config: ConfigManager, get_engine) -> list[TextContent]:
    config.set_weather(arguments.get("weather", ""))
    return _text(f"✓ Weather set to {config.get_weather() or 'none'}")


async def handle_lookup_postal_code(arguments: dict, config: ConfigManager, get_engine) -> list[TextContent]:
    postal_code = (arguments.get("postal_code") or "").strip()
    if not postal_code:
        return _text("Error: postal_code is required")

    location = await asyncio.to_thread(
        postal_code_to_location, postal_code, arguments.get("country") or "us"
    )
    if location is None:
        return _text(f"No location found for postal code {postal_code}")
    return _text(
        f"# {postal_code}\n"
        f"Name: {location.name}\n"
        f"Coordinates: {location.latitude:.4f}, {location.longitude:.4f}\n"
        f"Timezone: {location.timezone}\n"
    )


async def handle_get_planetary_registry(arguments: dict, config: ConfigManager, get_engine) -> list[TextContent]:
    location = await asyncio.to_thread(resolve_location, arguments, config)
    instant = parse_instant(arguments.get("date"), arguments.get("time"), location)
    engine = await get_engine()

    snapshot = await compute_registry(
        engine,
        instant,
        location,
        weather=arguments.get("weather") or config.get_weather(),
        house_system=config.get_house_system(),
        event_days=config.get_event_window_days(),
        orb=config.get_threshold("conjunction_orb"),
        opposition_orb=config.get_threshold("opposition_orb"),
        linear_tolerance=config.get_threshold("linear_tolerance"),
        stellium_min_bodies=config.get_threshold("stellium_min_bodies"),
    )
    return _text(format_registry(snapshot))


async def handle_get_planetary_dignities(arguments: dict, config: ConfigManager, get_engine) -> list[TextContent]:
    location = await asyncio.to_thread(resolve_location, arguments, config)
    instant = parse_instant(arguments.get("date"), arguments.get("time"), location)
    engine = await get_engine()

    placements = await compute_placements(engine, instant)
    houses = None
    if location is not None:
        houses = await compute_house_cusps(engine, instant, location, config.get_house_system())

    header = f"# Dignities for {instant:%Y-%m-%d %H:%M} UTC"
    if location:
        header += f" ({location.label})"
    report = format_placements(placements, houses, interpret=bool(arguments.get("interpret")))
    return _text(f"{header}\n\n{report}")


async def handle_get_elemental_profile(arguments: dict, config: ConfigManager, get_engine) -> list[TextContent]:
    location = _require_location(await asyncio.to_thread(resolve_location, arguments, config))
    instant = parse_instant(arguments.get("date"), arguments.get("time"), location)
    engine = await get_engine()

    profile = await build_elemental_profile(
        engine,
        instant,
        location,
        weather=arguments.get("weather") or config.get_weather(),
    )
    element = arguments.get("element")
    if element:
        report = format_element_breakdown(profile, element)
    else:
        report = format_elemental_profile(profile)
    return _text(f"# Elemental Profile for {location.label}\n\n{report}")


async def handle_get_upcoming_events(arguments: dict, config: ConfigManager, get_engine) -> list[TextContent]:
    location = config.get_location()
    start = parse_instant(arguments.get("date"), "00:00" if arguments.get("date") else None, location)
    if location is not None:
        start = start.astimezone(ZoneInfo(resolve_timezone(location)))

    days = int(arguments.get("days") or config.get_event_window_days())
    limit = int(arguments.get("limit") or 10)
    engine = await get_engine() if arguments.get("include_eclipses", True) else None

    events = await asyncio.to_thread(get_upcoming_events, start, days, limit, engine)
    return _text(format_events(events, start))


async def handle_get_house_cusps(arguments: dict, config: ConfigManager, get_engine) -> list[TextContent]:
    location = _require_location(await asyncio.to_thread(resolve_location, arguments, config))
    instant = parse_instant(arguments.get("date"), arguments.get("time"), location)
    engine = await get_engine()

    house_system = arguments.get("house_system") or config.get_house_system()
    houses = await compute_house_cusps(engine, instant, location, house_system)
    return _text(f"# Houses for {location.label}\n\n{format_house_cusps(houses)}")


async def handle_get_moon_phase(arguments: dict, config: ConfigManager, get_engine) -> list[TextContent]:
    instant = parse_instant(arguments.get("date"), arguments.get("time"), config.get_location())
    engine = await get_engine()
    info = await compute_moon_phase(engine, instant)
    return _text(format_moon_phase(info))


# ============================================================================
# Tool name registry + dispatcher
# ============================================================================

_HANDLERS = {
    "view_config": handle_view_config,
    "set_location": handle_set_location,
    "set_weather": handle_set_weather,
    "lookup_postal_code": handle_lookup_postal_code,
    "get_planetary_registry": handle_get_planetary_registry,
    "get_planetary_dignities": handle_get_planetary_dignities,
    "get_elemental_profile": handle_get_elemental_profile,
    "get_upcoming_events": handle_get_upcoming_events,
    "get_house_cusps": handle_get_house_cusps,
    "get_moon_phase": handle_get_moon_phase,
}

REGISTRY_TOOL_NAMES = set(_HANDLERS)


async def handle_registry_tool(
    name: str,
    arguments: dict,
    config: ConfigManager,
    get_engine: EngineGetter,
) -> list[TextContent]:
    """Route registry tool calls to the appropriate handler."""
    handler = _HANDLERS.get(name)
    if handler is None:
        return _text(f"Unknown registry tool: {name}")

    try:
        return await handler(arguments or {}, config, get_engine)
    except GeocodingError as e:
        return _text(f"Error looking up location: {e}")
    except EphemerisError as e:
        return _text(f"Error calculating ephemeris: {e}")
    except (ReportError, ValueError) as e:
        return _text(f"Error: {e}")
