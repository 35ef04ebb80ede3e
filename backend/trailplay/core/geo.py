import math
from typing import Optional, Sequence

from trailplay.core.constants import EARTH_RADIUS_M


def haversine(lat1, lon1, lat2, lon2):
    """Return great‑circle distance in meters between two WGS84 points.

    Uses the standard haversine formula; sufficient for per‑point distances
    over a typical GPS activity track.
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def cumulative_distances(coords: Sequence[tuple[float, float]]) -> list[float]:
    """Running haversine distance (m) along (lat, lon) pairs, starting at 0."""
    distances: list[float] = []
    total = 0.0
    prev = None
    for lat, lon in coords:
        if prev is not None:
            total += haversine(prev[0], prev[1], lat, lon)
        distances.append(total)
        prev = (lat, lon)
    return distances


def grade_percent(ele_a: Optional[float], ele_b: Optional[float], distance_m: float) -> Optional[float]:
    """Percent grade between two elevations over a horizontal run."""
    if ele_a is None or ele_b is None or distance_m <= 0:
        return None
    return (ele_b - ele_a) / distance_m * 100
