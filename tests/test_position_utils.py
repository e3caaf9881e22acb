"""Tests for position_utils: longitude, sign and separation helpers."""

import pytest

from planetary_registry.constants import ZODIAC_SIGNS
from planetary_registry.utils.position_utils import (
    angular_separation,
    decimal_to_dms,
    degree_in_sign,
    format_position,
    longitude_to_sign,
    normalize_longitude,
    sign_element,
)


class TestNormalizeLongitude:
    def test_in_range_unchanged(self):
        assert normalize_longitude(123.4) == pytest.approx(123.4)

    def test_wraps_above_360(self):
        assert normalize_longitude(370.0) == pytest.approx(10.0)

    def test_wraps_negative(self):
        assert normalize_longitude(-10.0) == pytest.approx(350.0)

    def test_tiny_negative_never_returns_360(self):
        assert 0.0 <= normalize_longitude(-1e-18) < 360.0


class TestLongitudeToSign:
    def test_fifteen_degrees_is_aries(self):
        assert longitude_to_sign(15.0) == "Aries"

    def test_sign_boundaries(self):
        for i, sign in enumerate(ZODIAC_SIGNS):
            assert longitude_to_sign(i * 30.0) == sign
            assert longitude_to_sign(i * 30.0 + 29.999) == sign

    def test_negative_longitude(self):
        assert longitude_to_sign(-15.0) == "Pisces"

    @pytest.mark.parametrize("lon", [0.0, 47.3, 181.0, 359.9])
    @pytest.mark.parametrize("k", [-3, -1, 1, 5])
    def test_periodic(self, lon, k):
        assert longitude_to_sign(lon + 360.0 * k) == longitude_to_sign(lon)


class TestSignElement:
    def test_elements_cycle(self):
        assert sign_element("Aries") == "Fire"
        assert sign_element("Taurus") == "Earth"
        assert sign_element("Gemini") == "Air"
        assert sign_element("Cancer") == "Water"
        assert sign_element("Pisces") == "Water"

    def test_unknown_sign(self):
        with pytest.raises(ValueError, match="Unknown sign"):
            sign_element("Ophiuchus")


class TestFormatting:
    def test_degree_in_sign(self):
        assert degree_in_sign(314.66) == pytest.approx(14.66)

    def test_decimal_to_dms(self):
        deg, minutes, seconds = decimal_to_dms(14.66)
        assert (deg, minutes) == (14, 39)
        assert seconds == pytest.approx(36.0, abs=0.01)

    def test_format_position(self):
        assert format_position(314.66) == "14°39' Aquarius"


class TestAngularSeparation:
    def test_simple(self):
        assert angular_separation(10.0, 50.0) == pytest.approx(40.0)

    def test_shortest_way_round(self):
        assert angular_separation(350.0, 10.0) == pytest.approx(20.0)

    def test_opposition(self):
        assert angular_separation(0.0, 180.0) == pytest.approx(180.0)

    def test_symmetric(self):
        assert angular_separation(12.0, 300.0) == angular_separation(300.0, 12.0)
