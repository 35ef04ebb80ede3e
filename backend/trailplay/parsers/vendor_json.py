"""Vendor watch JSON decoder.

Parses a Suunto-style ``DeviceLog`` export (``Header`` + ``Samples``) into
summary stats, a heart-rate zone histogram, lap splits and the three
asynchronous series used by stream fusion:

  - gps_track: every sample carrying both coordinates
  - time_samples: multi-metric overlay, thinned to ~10 s spacing
  - hr_over_time: heart-rate overlay, thinned to ~30 s spacing

Raw units: HR and cadence in Hz, coordinates in radians, temperature in
Kelvin, energy in joules.
"""

import json
import logging
import math
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import ValidationError

from trailplay.core.config import settings
from trailplay.core.constants import ACTIVITY_TYPE_NAMES, HR_ZONE_NAMES
from trailplay.core.errors import ParseError, StructuralError
from trailplay.core.time_utils import format_duration_words
from trailplay.core.units import (
    celsius_to_fahrenheit,
    hz_to_bpm,
    joules_to_calories,
    kelvin_to_celsius,
    meters_to_feet,
    meters_to_miles,
    mps_to_mph,
    radians_to_degrees,
    round_half_up,
    speed_to_pace_min_per_mile,
)
from trailplay.schemas.vendor import (
    ElevationStats,
    GpsPoint,
    HeartRateStats,
    HrSample,
    HrZone,
    LapSplit,
    PaceStats,
    ProfilePoint,
    RawVendorHeader,
    RawVendorSample,
    TemperatureStats,
    TimeSample,
    VendorActivity,
)

logger = logging.getLogger("trailplay.parsers.vendor")


def _mean(values):
    return sum(values) / len(values)


def _load_device_log(content: Union[str, bytes, Mapping]) -> tuple[RawVendorHeader, list[RawVendorSample]]:
    if isinstance(content, (bytes, bytearray)):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Vendor file is not UTF-8 text: {e}") from e
    if isinstance(content, str):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid vendor JSON: {e}") from e
    else:
        data = content

    if not isinstance(data, Mapping):
        raise StructuralError("Vendor JSON must be an object")
    device_log = data.get("DeviceLog")
    if not isinstance(device_log, Mapping):
        raise StructuralError("Missing DeviceLog in vendor JSON")
    raw_header = device_log.get("Header")
    raw_samples = device_log.get("Samples")
    if raw_header is None:
        raise StructuralError("Missing DeviceLog.Header in vendor JSON")
    if not isinstance(raw_samples, list):
        raise StructuralError("Missing DeviceLog.Samples list in vendor JSON")

    try:
        header = RawVendorHeader.model_validate(raw_header)
        samples = [RawVendorSample.model_validate(s) for s in raw_samples]
    except ValidationError as e:
        raise StructuralError(f"Unexpected vendor record layout: {e}") from e
    return header, samples


# --------- Stats --------- #

def _heart_rate_stats(header: RawVendorHeader, samples: list[RawVendorSample]) -> HeartRateStats:
    bpms = [hz_to_bpm(s.hr) for s in samples if s.hr is not None]

    durations = header.hr_zones.durations()
    limits = header.hr_zones.lower_limits()
    total = sum(durations)
    zones = []
    for i, (duration, limit) in enumerate(zip(durations, limits)):
        zones.append(HrZone(
            zone=i + 1,
            name=HR_ZONE_NAMES[i],
            duration_s=duration,
            percentage=(duration / total * 100) if total > 0 else 0.0,
            lower_limit_bpm=hz_to_bpm(limit) if limit is not None else None,
        ))

    return HeartRateStats(
        avg_bpm=round_half_up(_mean(bpms)) if bpms else 0,
        max_bpm=max(bpms) if bpms else 0,
        min_bpm=min(bpms) if bpms else 0,
        zones=zones,
    )


def _pace_stats(header: RawVendorHeader, samples: list[RawVendorSample]) -> PaceStats:
    speeds = [s.speed for s in samples if s.speed is not None and s.speed > 0]
    avg_speed = _mean(speeds) if speeds else 0.0
    max_speed = max(speeds) if speeds else 0.0
    return PaceStats(
        avg_pace_min_per_mile=speed_to_pace_min_per_mile(avg_speed),
        avg_speed_mph=mps_to_mph(avg_speed),
        max_speed_mph=mps_to_mph(max_speed),
        moving_time_s=header.duration,
        ascent_time_s=header.ascent_time,
        descent_time_s=header.descent_time,
    )


def _temperature_stats(header: RawVendorHeader, samples: list[RawVendorSample]) -> Optional[TemperatureStats]:
    """Per-sample temperatures, falling back to the header's Kelvin range."""
    temps = [kelvin_to_celsius(s.temperature) for s in samples if s.temperature is not None]
    hdr_min, hdr_max = header.temperature.min, header.temperature.max

    if temps:
        avg = _mean(temps)
    elif hdr_min and hdr_max:
        avg = kelvin_to_celsius((hdr_min + hdr_max) / 2)
    else:
        return None

    if hdr_min:
        min_c = kelvin_to_celsius(hdr_min)
    else:
        min_c = min(temps) if temps else avg
    if hdr_max:
        max_c = kelvin_to_celsius(hdr_max)
    else:
        max_c = max(temps) if temps else avg

    return TemperatureStats(
        avg_celsius=round(avg, 1),
        min_celsius=round(min_c, 1),
        max_celsius=round(max_c, 1),
        avg_fahrenheit=round_half_up(celsius_to_fahrenheit(avg)),
        min_fahrenheit=round_half_up(celsius_to_fahrenheit(min_c)),
        max_fahrenheit=round_half_up(celsius_to_fahrenheit(max_c)),
    )


def _elevation_stats(header: RawVendorHeader) -> ElevationStats:
    alt_min, alt_max = header.altitude.min, header.altitude.max
    return ElevationStats(
        ascent_m=header.ascent,
        descent_m=header.descent,
        ascent_ft=round_half_up(meters_to_feet(header.ascent)),
        descent_ft=round_half_up(meters_to_feet(header.descent)),
        min_altitude_m=alt_min,
        max_altitude_m=alt_max,
        min_altitude_ft=round_half_up(meters_to_feet(alt_min)) if alt_min is not None else None,
        max_altitude_ft=round_half_up(meters_to_feet(alt_max)) if alt_max is not None else None,
    )


def _laps(samples: list[RawVendorSample]) -> list[LapSplit]:
    laps: list[LapSplit] = []
    for sample in samples:
        if not sample.is_lap_marker:
            continue
        lap = sample.window
        avg_speed = lap.speed[0].avg if lap.speed and lap.speed[0].avg else 0.0
        hr = lap.hr[0] if lap.hr else None
        temp = lap.temperature[0] if lap.temperature else None
        laps.append(LapSplit(
            lap_number=len(laps) + 1,
            timestamp=sample.time,
            duration_s=lap.duration,
            distance_m=lap.distance,
            distance_mi=round(meters_to_miles(lap.distance), 2),
            pace_min_per_mile=speed_to_pace_min_per_mile(avg_speed),
            ascent_m=lap.ascent,
            descent_m=lap.descent,
            avg_hr_bpm=hz_to_bpm(hr.avg) if hr and hr.avg else None,
            max_hr_bpm=hz_to_bpm(hr.max) if hr and hr.max else None,
            avg_speed_mph=mps_to_mph(avg_speed) if avg_speed else None,
            avg_temp_celsius=round(kelvin_to_celsius(temp.avg), 1) if temp and temp.avg else None,
            calories=joules_to_calories(lap.energy),
        ))
    return laps


# --------- Series --------- #

def _gps_track(samples: list[RawVendorSample]) -> list[GpsPoint]:
    track: list[GpsPoint] = []
    untimed = 0
    invalid = 0
    for s in samples:
        if s.latitude is None or s.longitude is None:
            continue
        if not (math.isfinite(s.latitude) and math.isfinite(s.longitude)):
            invalid += 1
            continue
        if s.time is None:
            untimed += 1
            continue
        track.append(GpsPoint(
            lat=radians_to_degrees(s.latitude),
            lon=radians_to_degrees(s.longitude),
            altitude=s.gps_altitude,
            time=s.time,
        ))
    if untimed:
        logger.debug("Skipped %d GPS samples without a timestamp", untimed)
    if invalid:
        logger.debug("Skipped %d GPS samples with non-finite coordinates", invalid)
    return track


def _thin_by_time(entries: list[tuple[float, Any]], interval_s: float) -> list[tuple[float, Any]]:
    """Keep entries spaced >= interval_s apart, plus the first and the last."""
    kept: list[tuple[float, Any]] = []
    last_t = None
    for entry in entries:
        t = entry[0]
        if last_t is None or t - last_t >= interval_s:
            kept.append(entry)
            last_t = t
    if entries and kept[-1] is not entries[-1]:
        kept.append(entries[-1])
    return kept


def _time_samples(samples: list[RawVendorSample], start: datetime, interval_s: float) -> list[TimeSample]:
    timed = [((s.time - start).total_seconds(), s) for s in samples if s.time is not None]
    out: list[TimeSample] = []
    for secs, s in _thin_by_time(timed, interval_s):
        out.append(TimeSample(
            time=s.time,
            seconds_from_start=secs,
            hr=hz_to_bpm(s.hr) if s.hr is not None else None,
            altitude=s.altitude,
            speed=s.speed,
            cadence=hz_to_bpm(s.cadence) if s.cadence is not None else None,
            temperature=kelvin_to_celsius(s.temperature) if s.temperature is not None else None,
            distance=s.distance,
        ))
    return out


def _hr_over_time(samples: list[RawVendorSample], start: datetime, interval_s: float) -> list[HrSample]:
    timed = [
        ((s.time - start).total_seconds(), s)
        for s in samples
        if s.hr is not None and s.time is not None
    ]
    return [
        HrSample(time=s.time, seconds_from_start=secs, hr=hz_to_bpm(s.hr))
        for secs, s in _thin_by_time(timed, interval_s)
    ]


def _elevation_profile(samples: list[RawVendorSample], step_m: float) -> list[ProfilePoint]:
    profile: list[ProfilePoint] = []
    last_distance = None
    for s in samples:
        if s.distance is None or s.altitude is None:
            continue
        if last_distance is None or s.distance - last_distance >= step_m:
            profile.append(ProfilePoint(distance=s.distance, altitude=s.altitude))
            last_distance = s.distance
    return profile


# --------- Public API --------- #

def parse_vendor_json(
    content: Union[str, bytes, Mapping],
    sample_interval_s: Optional[float] = None,
    hr_interval_s: Optional[float] = None,
) -> VendorActivity:
    """Decode a vendor JSON export (text, bytes, or already-parsed mapping).

    Raises ParseError for malformed JSON and StructuralError when the
    header or sample list is missing.
    """
    if sample_interval_s is None:
        sample_interval_s = settings.sample_overlay_interval_s
    if hr_interval_s is None:
        hr_interval_s = settings.hr_overlay_interval_s

    header, samples = _load_device_log(content)

    start = header.date_time
    if start is None:
        start = next((s.time for s in samples if s.time is not None), None)

    distance_mi = meters_to_miles(header.distance)
    gps_track = _gps_track(samples)
    time_samples = _time_samples(samples, start, sample_interval_s) if start else []
    hr_over_time = _hr_over_time(samples, start, hr_interval_s) if start else []

    activity = VendorActivity(
        start_time=start,
        activity_type=header.activity_type,
        activity_name=activity_type_name(header.activity_type),
        duration_s=header.duration,
        duration_formatted=format_duration_words(header.duration),
        distance_m=header.distance,
        distance_mi=round(distance_mi, 2),
        step_count=header.step_count,
        calories=joules_to_calories(header.energy),
        steps_per_mile=round_half_up(header.step_count / distance_mi) if distance_mi > 0 else 0,
        heart_rate=_heart_rate_stats(header, samples),
        pace=_pace_stats(header, samples),
        temperature=_temperature_stats(header, samples),
        elevation=_elevation_stats(header),
        peak_training_effect=header.peak_training_effect,
        recovery_time_minutes=round_half_up(header.recovery_time / 60) if header.recovery_time else None,
        epoc=header.epoc,
        feeling=header.feeling,
        laps=_laps(samples),
        gps_track=gps_track,
        time_samples=time_samples,
        hr_over_time=hr_over_time,
        elevation_profile=_elevation_profile(samples, settings.elevation_profile_step_m),
    )
    logger.debug(
        "Decoded vendor log: %d samples, %d gps points, %d overlay samples, %d hr samples, %d laps",
        len(samples), len(gps_track), len(time_samples), len(hr_over_time), len(activity.laps),
    )
    return activity


def simplify_for_storage(
    activity: VendorActivity,
    gps_step: Optional[int] = None,
    sample_step: Optional[int] = None,
) -> VendorActivity:
    """Return a copy with the GPS track and multi-metric series thinned.

    The HR overlay and elevation profile are already sampled and kept as-is.
    """
    gps_step = gps_step or settings.gps_storage_step
    sample_step = sample_step or settings.sample_storage_step
    return activity.model_copy(update={
        "gps_track": activity.gps_track[::gps_step],
        "time_samples": activity.time_samples[::sample_step],
    })


def activity_type_name(code: int) -> str:
    return ACTIVITY_TYPE_NAMES.get(code, f"Activity {code}")


def hr_zone_name(zone: int) -> str:
    if 1 <= zone <= len(HR_ZONE_NAMES):
        return HR_ZONE_NAMES[zone - 1]
    return f"Zone {zone}"


def is_vendor_filename(filename: str) -> bool:
    return filename.lower().endswith(".json")
