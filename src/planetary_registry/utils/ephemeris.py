"""Ephemeris engine using pysweph (Swiss Ephemeris Python bindings).

This module is the only place that talks to swisseph. Everything else in the
package receives an engine object as an argument and calls these methods:

    position(body, instant)                -> BodyPosition
    rise_set(day_start, location)          -> SolarDay
    house_cusps(instant, location, system) -> {"cusps", "ascendant", "mc", ...}
    eclipses(start, end)                   -> list[UpcomingEvent]

Tests substitute any object with the same methods.

Instants are timezone-aware datetimes; naive values are taken as UTC.

Precision:
    - Moshier (default, no files needed): ~1 arcminute
    - Swiss Ephemeris files (.se1):       ~0.001 arcsecond
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import swisseph as swe

from ..constants import BODY_IDS, HOUSE_SYSTEM_CODES, HOUSE_SYSTEM_NAMES
from ..models import BodyPosition, Location, SolarDay, UpcomingEvent
from .position_utils import format_position, normalize_longitude

logger = logging.getLogger(__name__)

_UNIX_EPOCH_JD = 2440587.5


class EphemerisError(Exception):
    """Raised when an ephemeris calculation fails."""
    pass


def to_utc(instant: datetime) -> datetime:
    """Return instant as an aware UTC datetime (naive input is taken as UTC)."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


class EphemerisEngine:
    """Calculates planetary positions, rise/set times and house cusps using pysweph.

    Usage:
        engine = EphemerisEngine()                        # Moshier (no files needed)
        engine = EphemerisEngine(ephe_path="/path/ephe")  # Swiss Ephemeris files

        pos = engine.position("Mars", datetime.now(timezone.utc))
    """

    def __init__(self, ephe_path: Optional[str] = None):
        """Initialize the engine and configure the ephemeris source.

        Args:
            ephe_path: Path to directory containing .se1 ephemeris files.
                       Pass None (default) to use the built-in Moshier ephemeris,
                       which requires no external files.
        """
        self.ephe_path = ephe_path
        if ephe_path is not None:
            swe.set_ephe_path(ephe_path)
        else:
            # Explicitly activate Moshier so behavior is predictable
            # even if the caller later changes the global path.
            swe.set_ephe_path(None)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def position(self, body: str, instant: datetime) -> BodyPosition:
        """Ecliptic longitude and speed of a body.

        Speed is requested first; if that call fails the position is
        recomputed without it and speed is reported as None, leaving
        retrograde detection to SpeedFallbackEphemeris.

        Raises:
            EphemerisError: Unknown body, or the position itself failed.
        """
        body_id = self._body_id(body)
        jd = self._to_jd(instant)

        try:
            # pysweph returns (xx, ret_flags); xx = lon, lat, dist, speed_lon, speed_lat, speed_dist
            xx = swe.calc_ut(jd, body_id, swe.FLG_SWIEPH | swe.FLG_SPEED)[0]
            return BodyPosition(longitude=normalize_longitude(xx[0]), speed=xx[3])
        except swe.Error as exc:
            logger.warning("Speed calculation failed for %s, retrying without: %s", body, exc)

        try:
            xx = swe.calc_ut(jd, body_id, swe.FLG_SWIEPH)[0]
        except Exception as exc:
            raise EphemerisError(f"Failed to calculate {body}: {exc}") from exc
        return BodyPosition(longitude=normalize_longitude(xx[0]), speed=None)

    def rise_set(self, day_start: datetime, location: Location) -> SolarDay:
        """Sunrise and sunset in the 24 hours following day_start.

        Pass local midnight of the calendar day of interest. A missing
        event (polar day or night) is returned as None.

        Raises:
            EphemerisError: If swisseph reports an error.
        """
        jd = self._to_jd(day_start)
        geopos = (location.longitude, location.latitude, 0.0)
        return SolarDay(
            sunrise=self._rise_or_set(jd, swe.CALC_RISE, geopos),
            sunset=self._rise_or_set(jd, swe.CALC_SET, geopos),
        )

    def house_cusps(
        self,
        instant: datetime,
        location: Location,
        house_system: str = "P",
    ) -> dict[str, Any]:
        """Raw house cusps and the Ascendant/MC angles.

        Returns:
            Dict with "cusps" (12 longitudes, 1st house first), "ascendant",
            "mc" and "house_system" (display name).

        Raises:
            EphemerisError: If the calculation fails.
        """
        jd = self._to_jd(instant)
        hsys = self._house_system_bytes(house_system)
        try:
            cusps, ascmc = swe.houses(jd, location.latitude, location.longitude, hsys)
        except Exception as exc:
            raise EphemerisError(f"Failed to calculate houses: {exc}") from exc

        cusps = list(cusps)
        # Older bindings return a 13-element tuple with index 0 unused.
        if len(cusps) == 13:
            cusps = cusps[1:]

        return {
            "cusps": cusps,
            "ascendant": ascmc[0],
            "mc": ascmc[1],
            "house_system": self._house_system_name(house_system),
        }

    def eclipses(self, start: datetime, end: datetime) -> list[UpcomingEvent]:
        """Global solar and lunar eclipses with maximum between start and end."""
        start_jd = self._to_jd(start)
        end_jd = self._to_jd(end)
        events = self._solar_eclipses(start_jd, end_jd) + self._lunar_eclipses(start_jd, end_jd)
        return sorted(events, key=lambda e: e.date)

    def get_mode(self) -> str:
        """Return the active ephemeris mode: 'moshier' or 'sweph'."""
        return "moshier" if self.ephe_path is None else "sweph"

    # ------------------------------------------------------------------
    # Internal calculations
    # ------------------------------------------------------------------

    def _rise_or_set(self, jd: float, rsmi: int, geopos: tuple) -> Optional[datetime]:
        try:
            res, tret = swe.rise_trans(jd, swe.SUN, rsmi, geopos, 0.0, 0.0, swe.FLG_SWIEPH)
        except swe.Error as exc:
            raise EphemerisError(f"Failed to calculate sunrise/sunset: {exc}") from exc

        if res == -2:
            # Circumpolar: the Sun stays above or below the horizon.
            return None
        if res < 0:
            raise EphemerisError(f"Sunrise/sunset calculation returned status {res}")

        event_jd = tret[0]
        if event_jd - jd > 1.0:
            # Next event falls on a later day.
            return None
        return self._from_jd(event_jd)

    def _solar_eclipses(self, start_jd: float, end_jd: float) -> list[UpcomingEvent]:
        events = []
        current_jd = start_jd
        while current_jd < end_jd:
            try:
                retflags, tret = swe.sol_eclipse_when_glob(
                    current_jd, swe.FLG_SWIEPH, swe.ECL_ALLTYPES_SOLAR
                )
            except swe.Error as exc:
                raise EphemerisError(f"Failed to search solar eclipses: {exc}") from exc

            eclipse_jd = tret[0]
            if eclipse_jd > end_jd:
                break

            if retflags & swe.ECL_TOTAL:
                kind = "Total"
            elif retflags & swe.ECL_ANNULAR:
                kind = "Annular"
            else:
                kind = "Partial"

            sun_lon = swe.calc_ut(eclipse_jd, swe.SUN, swe.FLG_SWIEPH)[0][0]
            events.append(UpcomingEvent(
                type="Eclipse",
                name=f"{kind} Solar Eclipse",
                date=self._from_jd(eclipse_jd),
                description=f"{kind} solar eclipse at {format_position(sun_lon)}",
                visibility="Visible along the eclipse path; check local circumstances",
            ))
            current_jd = eclipse_jd + 20  # Move past this eclipse season
        return events

    def _lunar_eclipses(self, start_jd: float, end_jd: float) -> list[UpcomingEvent]:
        events = []
        current_jd = start_jd
        while current_jd < end_jd:
            try:
                retflags, tret = swe.lun_eclipse_when(
                    current_jd, swe.FLG_SWIEPH, swe.ECL_ALLTYPES_LUNAR
                )
            except swe.Error as exc:
                raise EphemerisError(f"Failed to search lunar eclipses: {exc}") from exc

            eclipse_jd = tret[0]
            if eclipse_jd > end_jd:
                break

            if retflags & swe.ECL_TOTAL:
                kind = "Total"
            elif retflags & swe.ECL_PARTIAL:
                kind = "Partial"
            else:
                kind = "Penumbral"

            moon_lon = swe.calc_ut(eclipse_jd, swe.MOON, swe.FLG_SWIEPH)[0][0]
            events.append(UpcomingEvent(
                type="Eclipse",
                name=f"{kind} Lunar Eclipse",
                date=self._from_jd(eclipse_jd),
                description=f"{kind} lunar eclipse at {format_position(moon_lon)}",
                visibility="Visible from the night side of Earth",
            ))
            current_jd = eclipse_jd + 10
        return events

    # ------------------------------------------------------------------
    # Conversion helpers
    # ------------------------------------------------------------------

    def _body_id(self, body: str) -> int:
        try:
            return BODY_IDS[body]
        except KeyError:
            raise EphemerisError(
                f"Unknown body: {body!r}. Expected one of {', '.join(BODY_IDS)}."
            ) from None

    def _to_jd(self, instant: datetime) -> float:
        """Convert an instant to a Julian Day number (UT)."""
        utc = to_utc(instant)
        hour = utc.hour + utc.minute / 60.0 + (utc.second + utc.microsecond / 1e6) / 3600.0
        return swe.julday(utc.year, utc.month, utc.day, hour)

    def _from_jd(self, jd: float) -> datetime:
        """Convert a Julian Day number (UT) to an aware UTC datetime."""
        return datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(days=jd - _UNIX_EPOCH_JD)

    def _house_system_bytes(self, code: str) -> bytes:
        """Return the single-byte house system code expected by swe.houses().

        Accepts either the single-letter code ('P') or the full name ('Placidus').
        Falls back to b"P" (Placidus) for unknown values.
        """
        normalized = HOUSE_SYSTEM_CODES.get(code.strip(), code.strip())
        if len(normalized) == 1 and normalized.upper() in HOUSE_SYSTEM_NAMES:
            return normalized.upper().encode()
        logger.warning("Unknown house system %r, using Placidus", code)
        return b"P"

    def _house_system_name(self, code: str) -> str:
        """Return the display name for a house system code."""
        single = HOUSE_SYSTEM_CODES.get(code.strip(), code.strip())
        return HOUSE_SYSTEM_NAMES.get(single.upper(), f"House System {code}")


class SpeedFallbackEphemeris:
    """Wraps an engine and fills in missing speeds by finite difference.

    When the wrapped engine's position() reports speed=None, the body is
    sampled again one hour later and the longitude change (unwrapped across
    0°/360°) is scaled to degrees per day. Every other method is delegated
    unchanged.
    """

    SAMPLE_INTERVAL = timedelta(hours=1)

    def __init__(self, inner):
        self.inner = inner

    def position(self, body: str, instant: datetime) -> BodyPosition:
        pos = self.inner.position(body, instant)
        if pos.speed is not None:
            return pos

        later = self.inner.position(body, instant + self.SAMPLE_INTERVAL)
        diff = later.longitude - pos.longitude
        if diff > 180:
            diff -= 360
        if diff < -180:
            diff += 360

        speed = diff * (timedelta(days=1) / self.SAMPLE_INTERVAL)
        logger.debug("Estimated %s speed by finite difference: %.4f°/day", body, speed)
        return BodyPosition(longitude=pos.longitude, speed=speed)

    def __getattr__(self, name):
        return getattr(self.inner, name)


def create_ephemeris(ephe_path: Optional[str] = None) -> SpeedFallbackEphemeris:
    """Build the default engine: pysweph with finite-difference speed fallback."""
    return SpeedFallbackEphemeris(EphemerisEngine(ephe_path=ephe_path))
