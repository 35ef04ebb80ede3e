"""Fixed-interval resampling of a fused point sequence.

Playback advances one point per tick, so a constant time step between
points gives a constant visual rate regardless of how irregular the
source sampling was, and bounds the point count of long activities.
"""

import logging
from typing import Optional, Sequence

from trailplay.core.config import settings
from trailplay.core.units import round_half_up
from trailplay.processing.fusion import is_moving
from trailplay.schemas.activity import FusedPoint

logger = logging.getLogger("trailplay.resample")

_LINEAR_FIELDS = ("lat", "lon", "elevation", "speed", "grade", "distance", "temperature")
_INTEGER_FIELDS = ("heart_rate", "cadence")


def _lerp(a: Optional[float], b: Optional[float], ratio: float) -> Optional[float]:
    if a is None:
        return b
    if b is None:
        return a
    return a + (b - a) * ratio


def interpolate_point(
    before: FusedPoint,
    after: FusedPoint,
    timestamp: float,
    moving_speed_mps: Optional[float] = None,
) -> FusedPoint:
    """Point at `timestamp` between two bracketing points.

    Fields defined on both sides are interpolated linearly, otherwise the
    defined side wins. HR and cadence are rounded to whole numbers.
    """
    span = after.timestamp - before.timestamp
    ratio = (timestamp - before.timestamp) / span if span else 0.0

    values = {name: _lerp(getattr(before, name), getattr(after, name), ratio) for name in _LINEAR_FIELDS}
    for name in _INTEGER_FIELDS:
        v = _lerp(getattr(before, name), getattr(after, name), ratio)
        values[name] = round_half_up(v) if v is not None else None

    return FusedPoint(
        timestamp=timestamp,
        moving=is_moving(values["speed"], moving_speed_mps),
        **values,
    )


def resample_points(
    points: Sequence[FusedPoint],
    interval_ms: Optional[float] = None,
    moving_speed_mps: Optional[float] = None,
) -> list[FusedPoint]:
    """Resample to a fixed cadence from the first to the last timestamp.

    Grid times that coincide with a source point copy it unchanged, which
    makes resampling an already-resampled sequence at the same interval a
    no-op.
    """
    if interval_ms is None:
        interval_ms = settings.resample_interval_ms
    if interval_ms <= 0:
        raise ValueError("interval_ms must be > 0")
    if len(points) < 2:
        return [p.model_copy() for p in points]

    start = points[0].timestamp
    end = points[-1].timestamp
    out: list[FusedPoint] = []

    j = 0
    k = 0
    t = start
    while t <= end:
        # forward scan for the pair with before.timestamp <= t <= after.timestamp
        while j < len(points) - 2 and points[j + 1].timestamp < t:
            j += 1
        before, after = points[j], points[j + 1]
        if t == before.timestamp:
            out.append(before.model_copy(update={"timestamp": t}))
        elif t == after.timestamp:
            out.append(after.model_copy(update={"timestamp": t}))
        else:
            out.append(interpolate_point(before, after, t, moving_speed_mps))
        k += 1
        t = start + k * interval_ms

    logger.debug("Resampled %d points to %d at %s ms", len(points), len(out), interval_ms)
    return out
