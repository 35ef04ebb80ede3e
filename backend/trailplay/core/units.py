"""Unit conversions between the raw sensor units and display units."""

import math

from trailplay.core.constants import (
    FEET_PER_METER,
    JOULES_PER_CALORIE,
    KELVIN_OFFSET,
    MILES_PER_METER,
    MPH_PER_MPS,
)


def meters_to_miles(m: float) -> float:
    return m * MILES_PER_METER


def miles_to_meters(mi: float) -> float:
    return mi / MILES_PER_METER


def meters_to_feet(m: float) -> float:
    return m * FEET_PER_METER


def feet_to_meters(ft: float) -> float:
    return ft / FEET_PER_METER


def mps_to_mph(mps: float) -> float:
    return mps * MPH_PER_MPS


def mph_to_mps(mph: float) -> float:
    return mph / MPH_PER_MPS


def kelvin_to_celsius(k: float) -> float:
    return k - KELVIN_OFFSET


def celsius_to_kelvin(c: float) -> float:
    return c + KELVIN_OFFSET


def celsius_to_fahrenheit(c: float) -> float:
    return c * 9 / 5 + 32


def fahrenheit_to_celsius(f: float) -> float:
    return (f - 32) * 5 / 9


def radians_to_degrees(rad: float) -> float:
    return rad * 180 / math.pi


def degrees_to_radians(deg: float) -> float:
    return deg * math.pi / 180


def round_half_up(x: float) -> int:
    """Nearest integer with .5 going up (builtin round() goes to even)."""
    return math.floor(x + 0.5)


def hz_to_bpm(hz: float) -> int:
    """Beats (or steps) per second -> per minute, rounded."""
    return round_half_up(hz * 60)


def bpm_to_hz(bpm: float) -> float:
    return bpm / 60


def joules_to_calories(j: float) -> int:
    return round_half_up(j / JOULES_PER_CALORIE)


def calories_to_joules(cal: float) -> float:
    return cal * JOULES_PER_CALORIE


def speed_to_pace_min_per_mile(speed_mps: float) -> float:
    """Minutes per mile for a speed in m/s; 0 when not moving."""
    if speed_mps <= 0:
        return 0.0
    return 60 / mps_to_mph(speed_mps)
