"""Tests for house cusps, fallback to equal houses and house membership."""

import math

import pytest

from planetary_registry.utils.ephemeris import EphemerisError
from planetary_registry.utils.houses import (
    compute_house_cusps,
    equal_cusps,
    house_for_longitude,
    make_house_cusps,
)

from conftest import FakeEphemeris


class TestMakeHouseCusps:
    def test_derived_angles_are_opposite(self):
        houses = make_house_cusps(equal_cusps(100.0), 100.0, 10.0)
        assert houses.descendant == pytest.approx(280.0)
        assert houses.imum_coeli == pytest.approx(190.0)

    def test_angles_wrap(self):
        houses = make_house_cusps(equal_cusps(250.0), 250.0, 200.0)
        assert houses.descendant == pytest.approx(70.0)
        assert houses.imum_coeli == pytest.approx(20.0)

    def test_normalizes_everything(self):
        houses = make_house_cusps([c + 360 for c in equal_cusps(5.0)], 365.0, -10.0)
        assert houses.ascendant == pytest.approx(5.0)
        assert houses.midheaven == pytest.approx(350.0)
        assert all(0 <= c < 360 for c in houses.cusps)

    def test_equal_cusps_spacing(self):
        cusps = equal_cusps(345.0)
        assert cusps[0] == pytest.approx(345.0)
        assert cusps[1] == pytest.approx(15.0)
        assert len(cusps) == 12


class TestHouseForLongitude:
    @pytest.fixture
    def houses(self):
        return make_house_cusps(equal_cusps(345.0), 345.0, 255.0)

    def test_first_house_spans_aries_point(self, houses):
        assert house_for_longitude(houses, 350.0) == 1
        assert house_for_longitude(houses, 5.0) == 1

    def test_cusp_belongs_to_its_house(self, houses):
        assert house_for_longitude(houses, 15.0) == 2

    def test_last_house(self, houses):
        assert house_for_longitude(houses, 344.9) == 12

    def test_every_longitude_has_a_house(self, houses):
        for lon in range(0, 360, 7):
            assert 1 <= house_for_longitude(houses, float(lon)) <= 12


@pytest.mark.asyncio
class TestComputeHouseCusps:
    async def test_normal_path(self, beverly_hills, noon_utc):
        engine = FakeEphemeris(ascendant=100.0, midheaven=10.0)
        houses = await compute_house_cusps(engine, noon_utc, beverly_hills)
        assert houses.is_fallback is False
        assert houses.house_system == "P"
        assert houses.ascendant == pytest.approx(100.0)
        assert houses.imum_coeli == pytest.approx(190.0)
        assert len(houses.cusps) == 12

    async def test_error_falls_back_to_equal_houses(self, beverly_hills, noon_utc):
        engine = FakeEphemeris(ascendant=100.0, house_error=True)
        houses = await compute_house_cusps(engine, noon_utc, beverly_hills)
        assert houses.is_fallback is True
        assert houses.house_system == "E"
        assert houses.cusps[0] == pytest.approx(100.0)
        assert houses.cusps[6] == pytest.approx(280.0)
        assert ("house_cusps", "E") in engine.calls

    async def test_invalid_cusps_use_ascendant_of_same_result(self, beverly_hills, noon_utc):
        class NanCusps(FakeEphemeris):
            def house_cusps(self, instant, location, house_system="P"):
                result = super().house_cusps(instant, location, house_system)
                result["cusps"] = [math.nan] * 12
                return result

        engine = NanCusps(ascendant=42.0)
        houses = await compute_house_cusps(engine, noon_utc, beverly_hills)
        assert houses.is_fallback is True
        assert houses.cusps[0] == pytest.approx(42.0)
        assert [c for c in engine.calls if c[0] == "house_cusps"] == [("house_cusps", "P")]

    async def test_no_ascendant_raises(self, beverly_hills, noon_utc):
        class NoAngles(FakeEphemeris):
            def house_cusps(self, instant, location, house_system="P"):
                return {"cusps": [0.0] * 12, "ascendant": math.nan, "mc": math.nan}

        with pytest.raises(EphemerisError):
            await compute_house_cusps(NoAngles(), noon_utc, beverly_hills)
