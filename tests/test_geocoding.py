"""
Tests for geocoding.py: timezone lookup, postal codes and place names.

get_timezone_for_coords uses timezonefinder (offline, deterministic), tested directly.
Nominatim lookups go over the network, mocked to avoid flakiness in CI.
"""

import json
import urllib.error

import pytest
from unittest.mock import patch, MagicMock

from planetary_registry.models import Location
from planetary_registry.utils.geocoding import (
    GeocodingError,
    geocode_location,
    get_timezone_for_coords,
    postal_code_to_location,
    resolve_timezone,
)


# ---------------------------------------------------------------------------
# get_timezone_for_coords: offline, deterministic, no mocking needed
# ---------------------------------------------------------------------------

class TestGetTimezoneForCoords:
    def test_bangkok(self):
        assert get_timezone_for_coords(lat=13.7563, lon=100.5018) == "Asia/Bangkok"

    def test_beverly_hills(self):
        assert get_timezone_for_coords(lat=34.09, lon=-118.41) == "America/Los_Angeles"

    def test_chicago(self):
        assert get_timezone_for_coords(lat=41.8781, lon=-87.6298) == "America/Chicago"

    def test_london(self):
        assert get_timezone_for_coords(lat=51.5074, lon=-0.1278) == "Europe/London"

    def test_open_ocean_returns_a_timezone(self):
        tz = get_timezone_for_coords(lat=0.0, lon=-170.0)
        assert tz


class TestResolveTimezone:
    def test_explicit_timezone_wins(self):
        loc = Location(latitude=34.09, longitude=-118.41, timezone="UTC")
        assert resolve_timezone(loc) == "UTC"

    def test_looked_up_from_coordinates(self):
        loc = Location(latitude=41.8781, longitude=-87.6298)
        assert resolve_timezone(loc) == "America/Chicago"


# ---------------------------------------------------------------------------
# Nominatim lookups: mocked network call
# ---------------------------------------------------------------------------

NOMINATIM_90210 = [{
    "lat": "34.0901",
    "lon": "-118.4065",
    "display_name": "Beverly Hills, Los Angeles County, California, 90210, United States",
}]

NOMINATIM_BANGKOK = [{
    "lat": "13.7563",
    "lon": "100.5018",
    "display_name": "Bangkok, Thailand",
}]


def _mock_nominatim(payload):
    """Return a context manager mock that yields encoded JSON."""
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    cm = MagicMock()
    cm.__enter__ = MagicMock(return_value=MagicMock(read=MagicMock(return_value=body)))
    cm.__exit__ = MagicMock(return_value=False)
    return cm


class TestPostalCodeToLocation:
    def test_found(self):
        with patch("urllib.request.urlopen", return_value=_mock_nominatim(NOMINATIM_90210)) as urlopen:
            loc = postal_code_to_location("90210")
        assert loc.latitude == pytest.approx(34.0901)
        assert loc.longitude == pytest.approx(-118.4065)
        assert loc.postal_code == "90210"
        assert loc.timezone == "America/Los_Angeles"
        url = urlopen.call_args[0][0].full_url
        assert "postalcode=90210" in url
        assert "country=us" in url

    def test_not_found_returns_none(self):
        with patch("urllib.request.urlopen", return_value=_mock_nominatim([])):
            assert postal_code_to_location("00000") is None

    def test_blank_code_skips_lookup(self):
        with patch("urllib.request.urlopen") as urlopen:
            assert postal_code_to_location("   ") is None
        urlopen.assert_not_called()

    def test_network_error_raises(self):
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("timeout")):
            with pytest.raises(GeocodingError, match="request failed"):
                postal_code_to_location("90210")

    def test_bad_json_raises(self):
        with patch("urllib.request.urlopen", return_value=_mock_nominatim(b"<html>")):
            with pytest.raises(GeocodingError, match="Invalid"):
                postal_code_to_location("90210")

    def test_malformed_result_raises(self):
        with patch("urllib.request.urlopen", return_value=_mock_nominatim([{"lat": "north"}])):
            with pytest.raises(GeocodingError, match="Malformed"):
                postal_code_to_location("90210")


class TestGeocodeLocation:
    def test_bangkok_returns_correct_timezone(self):
        with patch("urllib.request.urlopen", return_value=_mock_nominatim(NOMINATIM_BANGKOK)):
            result = geocode_location("Bangkok, Thailand")
        assert abs(result["latitude"] - 13.7563) < 0.01
        assert result["timezone"] == "Asia/Bangkok"

    def test_not_found_returns_none(self):
        with patch("urllib.request.urlopen", return_value=_mock_nominatim([])):
            assert geocode_location("NotARealPlaceXYZ") is None

    def test_network_error_raises(self):
        with patch("urllib.request.urlopen", side_effect=OSError("unreachable")):
            with pytest.raises(GeocodingError):
                geocode_location("Bangkok")

    def test_result_includes_required_keys(self):
        with patch("urllib.request.urlopen", return_value=_mock_nominatim(NOMINATIM_BANGKOK)):
            result = geocode_location("Bangkok")
        for key in ("name", "latitude", "longitude", "timezone"):
            assert key in result
