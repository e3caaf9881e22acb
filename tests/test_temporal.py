"""Tests for day rulers, planetary hours and tattvas."""

from datetime import datetime, timedelta, timezone

import pytest

from planetary_registry.utils.temporal import (
    approximate_planetary_hour,
    approximate_tattva,
    chaldean_step,
    compute_temporal_rulers,
    day_ruler,
    planetary_hour,
    tattva_at,
)

from conftest import FakeEphemeris

UTC = timezone.utc


def _at(hour, minute=0, day=10):
    return datetime(2024, 4, day, hour, minute, tzinfo=UTC)


SUNRISE = _at(6)
SUNSET = _at(18)
PREV_SUNSET = _at(18, day=9)
NEXT_SUNRISE = _at(6, day=11)


class TestDayRuler:
    @pytest.mark.parametrize("day, ruler", [
        (7, "Sun"),       # 2024-04-07 Sunday
        (8, "Moon"),
        (9, "Mars"),
        (10, "Mercury"),
        (11, "Jupiter"),
        (12, "Venus"),
        (13, "Saturn"),
    ])
    def test_weekdays(self, day, ruler):
        assert day_ruler(_at(12, day=day)) == ruler


class TestChaldeanStep:
    def test_zero_steps(self):
        assert chaldean_step("Mercury", 0) == "Mercury"

    def test_wraps(self):
        assert chaldean_step("Moon", 1) == "Saturn"
        assert chaldean_step("Sun", 7) == "Sun"


class TestPlanetaryHour:
    def test_first_day_hour_is_day_ruler(self):
        hour = planetary_hour(_at(6, 30), "Mercury", SUNRISE, SUNSET)
        assert hour.ruler == "Mercury"
        assert hour.hour_index == 0
        assert hour.is_day is True
        assert hour.is_approximate is False

    def test_second_day_hour(self):
        hour = planetary_hour(_at(7, 30), "Mercury", SUNRISE, SUNSET)
        assert hour.hour_index == 1
        assert hour.ruler == "Moon"

    def test_last_day_hour(self):
        hour = planetary_hour(_at(17, 59), "Mercury", SUNRISE, SUNSET)
        assert hour.hour_index == 11
        # 11 steps from Mercury: Moon Saturn Jupiter Mars Sun Venus Mercury Moon Saturn Jupiter Mars
        assert hour.ruler == "Mars"

    def test_night_after_sunset(self):
        hour = planetary_hour(_at(18, 30), "Mercury", SUNRISE, SUNSET, next_sunrise=NEXT_SUNRISE)
        assert hour.is_day is False
        assert hour.hour_index == 0
        # 12 steps from Mercury
        assert hour.ruler == chaldean_step("Mercury", 12)
        assert hour.ruler == "Sun"

    def test_night_before_sunrise_uses_previous_sunset(self):
        hour = planetary_hour(_at(5, 30), "Mercury", SUNRISE, SUNSET, previous_sunset=PREV_SUNSET)
        assert hour.is_day is False
        assert hour.hour_index == 11
        assert hour.ruler == chaldean_step("Mercury", 23)

    def test_hour_bounds(self):
        hour = planetary_hour(_at(9, 15), "Sun", SUNRISE, SUNSET)
        assert hour.start == _at(9)
        assert hour.end == _at(10)

    def test_missing_previous_sunset(self):
        with pytest.raises(ValueError, match="previous_sunset"):
            planetary_hour(_at(5), "Sun", SUNRISE, SUNSET)

    def test_missing_next_sunrise(self):
        with pytest.raises(ValueError, match="next_sunrise"):
            planetary_hour(_at(20), "Sun", SUNRISE, SUNSET)

    def test_degenerate_span_uses_one_hour(self):
        hour = planetary_hour(_at(6, 2), "Sun", SUNRISE, SUNRISE, next_sunrise=SUNRISE + timedelta(minutes=1))
        assert 0 <= hour.hour_index <= 11

    def test_index_always_in_range(self):
        for minute in range(0, 24 * 60, 37):
            instant = _at(0) + timedelta(minutes=minute)
            hour = planetary_hour(
                instant, "Venus", SUNRISE, SUNSET,
                previous_sunset=PREV_SUNSET, next_sunrise=NEXT_SUNRISE,
            )
            assert 0 <= hour.hour_index <= 11


class TestApproximateHour:
    def test_midnight_is_day_ruler(self):
        hour = approximate_planetary_hour(_at(0, 10))
        assert hour.ruler == "Mercury"
        assert hour.is_approximate is True
        assert hour.start is None

    def test_each_clock_hour_steps_once(self):
        assert approximate_planetary_hour(_at(3)).ruler == chaldean_step("Mercury", 3)


class TestTattva:
    def test_first_slice_is_akasha(self):
        t = tattva_at(_at(6, 10), SUNRISE)
        assert t.name == "Akasha"
        assert t.element == "Spirit"

    @pytest.mark.parametrize("minutes, name", [
        (24, "Vayu"), (48, "Tejas"), (72, "Apas"), (96, "Prithvi"), (120, "Akasha"),
    ])
    def test_slices(self, minutes, name):
        assert tattva_at(SUNRISE + timedelta(minutes=minutes), SUNRISE).name == name

    def test_before_sunrise_wraps(self):
        # 10 minutes before sunrise is 110 minutes into the previous cycle
        t = tattva_at(_at(5, 50), SUNRISE)
        assert t.name == "Prithvi"
        assert t.minutes_into_cycle == pytest.approx(110.0)

    def test_approximate_anchor(self):
        t = approximate_tattva(_at(6, 30))
        assert t.name == "Vayu"
        assert t.is_approximate is True


@pytest.mark.asyncio
class TestComputeTemporalRulers:
    async def test_daytime(self, equator_utc):
        engine = FakeEphemeris()
        ruler, hour, tattva = await compute_temporal_rulers(engine, _at(12, 30), equator_utc)
        assert ruler == "Mercury"
        assert hour.is_day is True
        assert hour.hour_index == 6
        assert hour.is_approximate is False
        assert tattva.is_approximate is False

    async def test_before_sunrise_queries_previous_day(self, equator_utc):
        engine = FakeEphemeris()
        ruler, hour, _ = await compute_temporal_rulers(engine, _at(4), equator_utc)
        assert ruler == "Mercury"
        assert hour.is_day is False
        rise_set_days = [c[1].day for c in engine.calls if c[0] == "rise_set"]
        assert rise_set_days == [10, 9]

    async def test_after_sunset_queries_next_day(self, equator_utc):
        engine = FakeEphemeris()
        _, hour, _ = await compute_temporal_rulers(engine, _at(21), equator_utc)
        assert hour.is_day is False
        rise_set_days = [c[1].day for c in engine.calls if c[0] == "rise_set"]
        assert rise_set_days == [10, 11]

    async def test_local_date_decides_day_ruler(self, beverly_hills):
        # 03:00 UTC Thursday is 20:00 Wednesday in Los Angeles
        engine = FakeEphemeris()
        ruler, hour, _ = await compute_temporal_rulers(engine, _at(3, day=11), beverly_hills)
        assert ruler == "Mercury"
        assert hour.is_day is False

    async def test_polar_falls_back_to_approximate(self, equator_utc):
        engine = FakeEphemeris(polar=True)
        _, hour, tattva = await compute_temporal_rulers(engine, _at(12), equator_utc)
        assert hour.is_approximate is True
        assert tattva.is_approximate is True
