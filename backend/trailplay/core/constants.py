"""Shared unit and geodesy constants.

Centralizes the conversion factors used by the decoders, fusion and
formatting helpers so they are documented and adjusted in one place.
"""

# Mean Earth radius in meters (haversine)
EARTH_RADIUS_M = 6371000.0

# Distance conversions
MILES_PER_METER = 0.000621371
FEET_PER_METER = 3.28084

# m/s -> mph
MPH_PER_MPS = 2.23694

# 0 degrees Celsius in Kelvin
KELVIN_OFFSET = 273.15

# Joules per (kilo)calorie as reported by watches
JOULES_PER_CALORIE = 4184.0

# Heart-rate zone names, zone 1..5
HR_ZONE_NAMES = ("Recovery", "Easy", "Aerobic", "Threshold", "Maximum")

# Vendor activity type codes -> display name
ACTIVITY_TYPE_NAMES = {
    1: "Running",
    2: "Cycling",
    3: "Swimming",
    11: "Walking",
    12: "Hiking",
    13: "Mountain Biking",
    14: "Cross Country Skiing",
    82: "Trail Running",
}
