import math
from datetime import datetime, timezone

import pytest

from trailplay.core.geo import cumulative_distances, grade_percent, haversine
from trailplay.core.time_utils import (
    assume_utc,
    format_duration,
    format_duration_words,
    format_pace,
    format_speed,
    to_local_datetime,
)
from trailplay.core.units import (
    bpm_to_hz,
    calories_to_joules,
    celsius_to_fahrenheit,
    celsius_to_kelvin,
    degrees_to_radians,
    fahrenheit_to_celsius,
    feet_to_meters,
    hz_to_bpm,
    joules_to_calories,
    kelvin_to_celsius,
    meters_to_feet,
    meters_to_miles,
    miles_to_meters,
    mph_to_mps,
    mps_to_mph,
    radians_to_degrees,
    round_half_up,
    speed_to_pace_min_per_mile,
)


def test_sensor_conversions():
    assert hz_to_bpm(1.2) == 72
    assert hz_to_bpm(1.3) == 78
    assert kelvin_to_celsius(293.15) == pytest.approx(20.0)
    assert celsius_to_fahrenheit(20.0) == pytest.approx(68.0)
    assert fahrenheit_to_celsius(68.0) == pytest.approx(20.0)
    assert joules_to_calories(2092000) == 500
    assert radians_to_degrees(math.pi) == pytest.approx(180.0)


def test_distance_and_speed_conversions():
    assert meters_to_miles(1609.34) == pytest.approx(1.0, abs=1e-4)
    assert meters_to_feet(100) == pytest.approx(328.084)
    assert mps_to_mph(1.0) == pytest.approx(2.23694)


def test_pace_is_zero_when_not_moving():
    assert speed_to_pace_min_per_mile(0) == 0.0
    assert speed_to_pace_min_per_mile(-1) == 0.0
    # 6 mph -> 10 min/mi
    assert speed_to_pace_min_per_mile(6 / 2.23694) == pytest.approx(10.0)


def test_duration_formats():
    assert format_duration(3723) == "1:02:03"
    assert format_duration(95) == "1:35"
    assert format_duration_words(3723) == "1h 2m 3s"
    assert format_duration_words(95) == "1m 35s"


def test_pace_formats():
    assert format_pace(7.5) == "7:30"
    assert format_pace(0) == "0:00"
    # 59.7 s would print as ':60' with naive rounding
    assert format_pace(7.995) == "8:00"
    assert format_speed(6 / 2.23694) == "6.0 mph"
    assert format_speed(6 / 2.23694, as_pace=True) == "10:00 /mi"


def test_haversine_matches_spherical_law_of_cosines():
    lat1, lon1, lat2, lon2 = 34.0, -84.0, 34.001, -84.001
    p1, p2 = math.radians(lat1), math.radians(lat2)
    dl = math.radians(lon2 - lon1)
    expected = 6371000 * math.acos(math.sin(p1) * math.sin(p2) + math.cos(p1) * math.cos(p2) * math.cos(dl))
    assert haversine(lat1, lon1, lat2, lon2) == pytest.approx(expected, abs=1.0)


def test_cumulative_distances_start_at_zero_and_grow():
    d = cumulative_distances([(34.0, -84.0), (34.0, -84.0), (34.001, -84.0)])
    assert d[0] == 0.0
    assert d[1] == 0.0
    assert d[2] == pytest.approx(111.19, abs=0.1)


def test_grade_percent():
    assert grade_percent(100, 110, 200) == pytest.approx(5.0)
    assert grade_percent(100, 110, 0) is None
    assert grade_percent(None, 110, 50) is None


def test_inverse_conversions():
    assert miles_to_meters(1.0) == pytest.approx(1609.34, abs=0.01)
    assert feet_to_meters(328.084) == pytest.approx(100.0)
    assert mph_to_mps(2.23694) == pytest.approx(1.0)
    assert celsius_to_kelvin(20.0) == pytest.approx(293.15)
    assert degrees_to_radians(180.0) == pytest.approx(math.pi)
    assert bpm_to_hz(150) == pytest.approx(2.5)
    assert calories_to_joules(100) == pytest.approx(418400)


def test_naive_datetimes_are_utc():
    naive = datetime(2024, 5, 1, 8, 0)
    assert assume_utc(naive).tzinfo is timezone.utc
    local = to_local_datetime(naive, "America/New_York")
    assert local.hour == 4
    assert to_local_datetime(naive, "local").tzinfo is not None


def test_halves_round_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-0.5) == 0
    assert round_half_up(72.49) == 72
    assert joules_to_calories(4184 * 2.5) == 3
