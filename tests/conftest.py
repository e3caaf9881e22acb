"""Shared fixtures: a deterministic in-memory ephemeris and sample locations."""

from datetime import datetime, timedelta, timezone

import pytest

from planetary_registry.models import BodyPosition, Location, SolarDay
from planetary_registry.utils.ephemeris import EphemerisError, to_utc

# Longitudes chosen so every body has a known sign:
# Sun 15 Aries, Moon 45 Taurus, Mercury 100 Cancer, Venus 200 Libra,
# Mars 280 Capricorn, Jupiter 130 Leo, Saturn 320 Aquarius
DEFAULT_LONGITUDES = {
    "Sun": 15.0,
    "Moon": 45.0,
    "Mercury": 100.0,
    "Venus": 200.0,
    "Mars": 280.0,
    "Jupiter": 130.0,
    "Saturn": 320.0,
}


class FakeEphemeris:
    """Stands in for EphemerisEngine.

    Rise and set happen at fixed local clock hours after the day_start
    passed in. House cusps are equal 30° houses from `ascendant` unless
    `house_error` is set, in which case only the Equal-house query works.
    """

    def __init__(
        self,
        longitudes=None,
        speeds=None,
        sunrise_hour=6.0,
        sunset_hour=18.0,
        polar=False,
        ascendant=100.0,
        midheaven=10.0,
        house_error=False,
        eclipses=None,
    ):
        self.longitudes = {**DEFAULT_LONGITUDES, **(longitudes or {})}
        self.speeds = speeds or {}
        self.sunrise_hour = sunrise_hour
        self.sunset_hour = sunset_hour
        self.polar = polar
        self.ascendant = ascendant
        self.midheaven = midheaven
        self.house_error = house_error
        self.eclipse_events = eclipses or []
        self.calls = []

    def position(self, body, instant):
        self.calls.append(("position", body))
        if body not in self.longitudes:
            raise EphemerisError(f"Unknown body: {body}")
        return BodyPosition(longitude=self.longitudes[body], speed=self.speeds.get(body, 1.0))

    def rise_set(self, day_start, location):
        self.calls.append(("rise_set", day_start))
        if self.polar:
            return SolarDay(sunrise=None, sunset=None)
        return SolarDay(
            sunrise=to_utc(day_start + timedelta(hours=self.sunrise_hour)),
            sunset=to_utc(day_start + timedelta(hours=self.sunset_hour)),
        )

    def house_cusps(self, instant, location, house_system="P"):
        self.calls.append(("house_cusps", house_system))
        if self.house_error and house_system != "E":
            raise EphemerisError("Placidus undefined at this latitude")
        return {
            "cusps": [(self.ascendant + 30.0 * i) % 360 for i in range(12)],
            "ascendant": self.ascendant,
            "mc": self.midheaven,
            "house_system": house_system,
        }

    def eclipses(self, start, end):
        return [e for e in self.eclipse_events if start <= e.date <= end]

    def get_mode(self):
        return "moshier"


@pytest.fixture
def fake_engine():
    return FakeEphemeris()


@pytest.fixture
def beverly_hills():
    return Location(
        latitude=34.09,
        longitude=-118.41,
        postal_code="90210",
        name="Beverly Hills, California",
        timezone="America/Los_Angeles",
    )


@pytest.fixture
def equator_utc():
    return Location(latitude=0.0, longitude=0.0, name="Null Island", timezone="UTC")


@pytest.fixture
def noon_utc():
    # A Wednesday
    return datetime(2024, 4, 10, 12, 0, tzinfo=timezone.utc)
