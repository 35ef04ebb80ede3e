"""Stream fusion: decoder output -> one time-ordered FusedPoint sequence.

Vendor files: the GPS track is the spine. Each GPS point picks up
speed/cadence/altitude/temperature from the nearest multi-metric overlay
sample within a small window, and heart rate from the HR overlay by
closest timestamp within a wider tolerance (HR is sampled more coarsely
and out of phase with GPS).

Track files: a single series; when any point lacks a time, times are
estimated from distance at walking pace.

Cumulative distance is always recomputed from coordinates so it is
monotonic. Elevation is smoothed before grade and aggregates.
"""

import json
import logging
import math
from bisect import bisect_left
from collections.abc import Mapping
from datetime import datetime
from typing import Callable, Optional, Sequence, TypeVar, Union

from pydantic import ValidationError

from trailplay.core.config import settings
from trailplay.core.errors import ActivityDataError, ParseError, StructuralError
from trailplay.core.geo import cumulative_distances, grade_percent
from trailplay.core.units import round_half_up
from trailplay.parsers.track_gpx import parse_gpx
from trailplay.parsers.vendor_json import parse_vendor_json
from trailplay.processing.smoothing import smooth_elevation
from trailplay.schemas.activity import (
    ActivitySummary,
    Bounds,
    FusedActivity,
    FusedPoint,
    SourceType,
    TrackFile,
)
from trailplay.schemas.vendor import TimeSample, VendorActivity

logger = logging.getLogger("trailplay.fusion")

T = TypeVar("T")


# --------- Overlay matching --------- #

def index_samples(samples: Sequence[TimeSample], origin: datetime) -> dict[int, TimeSample]:
    """Key overlay samples by whole seconds from `origin` (first one wins)."""
    index: dict[int, TimeSample] = {}
    for s in samples:
        index.setdefault(math.floor((s.time - origin).total_seconds()), s)
    return index


def match_sample(index: Mapping[int, TimeSample], seconds: float, window_s: int) -> Optional[TimeSample]:
    """Nearest overlay sample within +-window_s whole seconds.

    Offsets are tried by increasing absolute value: 0, -1, +1, -2, +2, ...
    """
    base = math.floor(seconds)
    for step in range(window_s + 1):
        for offset in ((0,) if step == 0 else (-step, step)):
            sample = index.get(base + offset)
            if sample is not None:
                return sample
    return None


def match_heart_rate(series: Sequence[tuple[float, int]], seconds: float, tolerance_s: float) -> Optional[int]:
    """Closest HR reading by binary search over (seconds, bpm) sorted pairs.

    Returns None when the closest reading is further than tolerance_s away.
    """
    if not series:
        return None
    i = bisect_left(series, seconds, key=lambda e: e[0])
    best = None
    best_diff = None
    for j in (i - 1, i):
        if 0 <= j < len(series):
            diff = abs(series[j][0] - seconds)
            if best_diff is None or diff < best_diff:
                best, best_diff = j, diff
    if best_diff <= tolerance_s:
        return series[best][1]
    return None


# --------- Shared helpers --------- #

def _drop_backwards(items: Sequence[T], key: Callable[[T], datetime]) -> list[T]:
    """Drop items whose time precedes the previously kept one."""
    kept: list[T] = []
    for item in items:
        if kept and key(item) < key(kept[-1]):
            continue
        kept.append(item)
    if len(kept) < len(items):
        logger.debug("Dropped %d points with out-of-order timestamps", len(items) - len(kept))
    return kept


def _derived_speed(distance_m: float, elapsed_ms: float) -> Optional[float]:
    if elapsed_ms <= 0:
        return None
    return distance_m / (elapsed_ms / 1000)


def is_moving(speed: Optional[float], threshold_mps: Optional[float] = None) -> bool:
    """Unknown speed counts as moving; below the noise floor counts as stopped."""
    if threshold_mps is None:
        threshold_mps = settings.moving_speed_mps
    if speed is None:
        return True
    return speed >= threshold_mps


def _finish_points(points: list[FusedPoint], moving_speed_mps: Optional[float], smoothing_window: Optional[int]) -> None:
    smooth_elevation(points, smoothing_window)
    for i, p in enumerate(points):
        grade = None
        if i > 0:
            prev = points[i - 1]
            grade = grade_percent(prev.elevation, p.elevation, p.distance - prev.distance)
        points[i] = p.model_copy(update={"grade": grade, "moving": is_moving(p.speed, moving_speed_mps)})


def _bounds(points: Sequence[FusedPoint]) -> Bounds:
    lats = [p.lat for p in points]
    lons = [p.lon for p in points]
    return Bounds(north=max(lats), south=min(lats), east=max(lons), west=min(lons))


def _summarize(points: Sequence[FusedPoint], **totals) -> ActivitySummary:
    gain = 0.0
    loss = 0.0
    for a, b in zip(points, points[1:]):
        if a.elevation is not None and b.elevation is not None:
            diff = b.elevation - a.elevation
            if diff > 0:
                gain += diff
            else:
                loss += -diff

    speeds = [p.speed for p in points if p.speed is not None]
    hrs = [p.heart_rate for p in points if p.heart_rate is not None]
    cadences = [p.cadence for p in points if p.cadence is not None]

    return ActivitySummary(
        elevation_gain_m=gain,
        elevation_loss_m=loss,
        avg_speed_mps=sum(speeds) / len(speeds) if speeds else 0.0,
        max_speed_mps=max(speeds) if speeds else 0.0,
        avg_hr=round_half_up(sum(hrs) / len(hrs)) if hrs else None,
        max_hr=max(hrs) if hrs else None,
        min_hr=min(hrs) if hrs else None,
        avg_cadence=round_half_up(sum(cadences) / len(cadences)) if cadences else None,
        **totals,
    )


def _build(source: SourceType, points: list[FusedPoint], **totals) -> FusedActivity:
    summary = _summarize(points, **totals)
    fused = FusedActivity(
        source=source,
        points=tuple(points),
        summary=summary,
        bounds=_bounds(points),
        has_heart_rate=summary.avg_hr is not None,
        has_cadence=summary.avg_cadence is not None,
        has_speed=any(p.speed is not None for p in points),
    )
    logger.info(
        "Fused %s activity: %d points, %.0f m, %.0f s",
        source.value, len(points), summary.distance_m, summary.duration_s,
    )
    return fused


# --------- Vendor path --------- #

def fuse_vendor_activity(
    activity: VendorActivity,
    match_window_s: Optional[int] = None,
    hr_tolerance_s: Optional[float] = None,
    moving_speed_mps: Optional[float] = None,
    smoothing_window: Optional[int] = None,
) -> FusedActivity:
    if match_window_s is None:
        match_window_s = settings.sample_match_window_s
    if hr_tolerance_s is None:
        hr_tolerance_s = settings.hr_match_tolerance_s

    track = _drop_backwards(activity.gps_track, key=lambda g: g.time)
    if not track:
        raise StructuralError("No GPS track data found in vendor file")

    origin = track[0].time
    sample_index = index_samples(activity.time_samples, origin)
    hr_series = sorted(((h.time - origin).total_seconds(), h.hr) for h in activity.hr_over_time)
    distances = cumulative_distances([(g.lat, g.lon) for g in track])

    points: list[FusedPoint] = []
    for i, gps in enumerate(track):
        seconds = (gps.time - origin).total_seconds()
        timestamp = seconds * 1000
        sample = match_sample(sample_index, seconds, match_window_s)

        hr = match_heart_rate(hr_series, seconds, hr_tolerance_s)
        if hr is None and sample is not None:
            hr = sample.hr

        elevation = gps.altitude
        if elevation is None and sample is not None:
            elevation = sample.altitude

        speed = sample.speed if sample is not None else None
        if speed is None and i > 0:
            speed = _derived_speed(distances[i] - distances[i - 1], timestamp - points[-1].timestamp)

        points.append(FusedPoint(
            timestamp=timestamp,
            lat=gps.lat,
            lon=gps.lon,
            elevation=elevation,
            speed=speed,
            heart_rate=hr,
            cadence=sample.cadence if sample is not None else None,
            distance=distances[i],
            temperature=sample.temperature if sample is not None else None,
        ))

    _finish_points(points, moving_speed_mps, smoothing_window)
    return _build(
        SourceType.vendor,
        points,
        start_time=activity.start_time or origin,
        duration_s=activity.duration_s or points[-1].timestamp / 1000,
        distance_m=activity.distance_m or distances[-1],
        calories=activity.calories,
    )


# --------- Track path --------- #

def fuse_track(
    track: TrackFile,
    walking_speed_mps: Optional[float] = None,
    moving_speed_mps: Optional[float] = None,
    smoothing_window: Optional[int] = None,
) -> FusedActivity:
    if walking_speed_mps is None:
        walking_speed_mps = settings.walking_speed_mps
    if not track.points:
        raise StructuralError("No track points found in track file")

    # Mixed timed/untimed points cannot be ordered, so estimate all of them
    timed = all(p.time is not None for p in track.points)
    src = _drop_backwards(track.points, key=lambda p: p.time) if timed else list(track.points)
    distances = cumulative_distances([(p.lat, p.lon) for p in src])
    origin = src[0].time

    points: list[FusedPoint] = []
    for i, p in enumerate(src):
        if timed:
            timestamp = (p.time - origin).total_seconds() * 1000
        else:
            timestamp = distances[i] / walking_speed_mps * 1000
        speed = None
        if timed and i > 0:
            speed = _derived_speed(distances[i] - distances[i - 1], timestamp - points[-1].timestamp)
        points.append(FusedPoint(
            timestamp=timestamp,
            lat=p.lat,
            lon=p.lon,
            elevation=p.ele,
            speed=speed,
            distance=distances[i],
        ))

    if not timed:
        logger.debug("Track has no complete timestamps; estimating at %.2f m/s", walking_speed_mps)

    _finish_points(points, moving_speed_mps, smoothing_window)
    return _build(
        SourceType.track,
        points,
        start_time=track.start_time or origin,
        duration_s=points[-1].timestamp / 1000,
        distance_m=distances[-1],
        time_estimated=not timed,
    )


def fuse_activity(source: Union[VendorActivity, TrackFile], **options) -> FusedActivity:
    if isinstance(source, VendorActivity):
        return fuse_vendor_activity(source, **options)
    if isinstance(source, TrackFile):
        return fuse_track(source, **options)
    raise TypeError(f"Cannot fuse {type(source).__name__}")


# --------- Auto-detection --------- #

VendorInput = Union[str, bytes, Mapping, VendorActivity]
TrackInput = Union[str, bytes, TrackFile]


def _coerce_vendor(vendor: VendorInput) -> VendorActivity:
    """Accept raw vendor JSON or an already-decoded VendorActivity (as JSON/dict)."""
    if isinstance(vendor, VendorActivity):
        return vendor
    data = vendor
    if isinstance(vendor, (str, bytes, bytearray)):
        try:
            data = json.loads(vendor)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid vendor JSON: {e}") from e
    if isinstance(data, Mapping) and "gps_track" in data:
        try:
            return VendorActivity.model_validate(data)
        except ValidationError as e:
            raise StructuralError(f"Unexpected decoded vendor layout: {e}") from e
    return parse_vendor_json(data)


def _coerce_track(track: TrackInput) -> TrackFile:
    if isinstance(track, TrackFile):
        return track
    return parse_gpx(track)


def parse_activity_data(
    vendor: Optional[VendorInput] = None,
    track: Optional[TrackInput] = None,
) -> FusedActivity:
    """Fuse whichever source is usable, preferring vendor data (more metrics)."""
    if vendor is not None:
        try:
            activity = _coerce_vendor(vendor)
            if activity.gps_track:
                return fuse_vendor_activity(activity)
            if track is None:
                raise StructuralError("No GPS track data found in vendor file")
            logger.warning("Vendor data has no GPS track, falling back to track file")
        except ActivityDataError as e:
            if track is None:
                raise
            logger.warning("Failed to parse vendor data, falling back to track file: %s", e)

    if track is not None:
        return fuse_track(_coerce_track(track))

    raise StructuralError("No valid activity data found")


def has_activity_data(
    vendor: Optional[VendorInput] = None,
    track: Optional[TrackInput] = None,
) -> bool:
    """True when either source would yield a playable sequence."""
    if vendor is not None:
        try:
            if _coerce_vendor(vendor).gps_track:
                return True
        except ActivityDataError:
            pass
    if track is not None:
        try:
            return bool(_coerce_track(track).points)
        except ActivityDataError:
            return False
    return False
