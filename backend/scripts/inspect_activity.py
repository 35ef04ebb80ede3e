#!/usr/bin/env python3
"""
Decode an activity file and print the playback-ready summary as JSON.

Accepts a vendor watch export (.json) or a GPX track (.gpx). The fused
sequence is resampled to the configured interval before reporting.

Usage examples:
  - python backend/scripts/inspect_activity.py activity.json
  - python backend/scripts/inspect_activity.py route.gpx --interval-ms 1000 --points
  - python backend/scripts/inspect_activity.py activity.json --laps
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from trailplay.core.config import settings
from trailplay.core.errors import ActivityDataError
from trailplay.core.time_utils import format_duration, format_speed, to_local_datetime
from trailplay.core.units import meters_to_feet, meters_to_miles, round_half_up
from trailplay.parsers.track_gpx import is_track_filename
from trailplay.parsers.vendor_json import is_vendor_filename, parse_vendor_json
from trailplay.processing.fusion import parse_activity_data
from trailplay.processing.resample import resample_points

logger = logging.getLogger("trailplay.scripts.inspect")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _positive_int(value: str) -> int:
    n = int(value)
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {value}")
    return n


def build_report(path: str, interval_ms: int, include_points: bool, include_laps: bool) -> dict:
    with open(path, "rb") as f:
        data = f.read()

    if is_vendor_filename(path):
        fused = parse_activity_data(vendor=data)
    elif is_track_filename(path):
        fused = parse_activity_data(track=data)
    else:
        raise ActivityDataError(f"Unsupported file type: {path} (expected .json or .gpx)")

    points = resample_points(fused.points, interval_ms)
    s = fused.summary
    report = {
        "source": fused.source.value,
        "start_time": to_local_datetime(s.start_time, settings.timezone).isoformat() if s.start_time else None,
        "duration": format_duration(s.duration_s),
        "duration_estimated": s.time_estimated,
        "distance_mi": round(meters_to_miles(s.distance_m), 2),
        "elevation_gain_ft": round_half_up(meters_to_feet(s.elevation_gain_m)),
        "elevation_loss_ft": round_half_up(meters_to_feet(s.elevation_loss_m)),
        "avg_pace": format_speed(s.avg_speed_mps, as_pace=True) if fused.has_speed else None,
        "avg_hr": s.avg_hr,
        "max_hr": s.max_hr,
        "avg_cadence": s.avg_cadence,
        "calories": s.calories,
        "bounds": fused.bounds.model_dump(),
        "fused_points": len(fused.points),
        "playback_points": len(points),
        "interval_ms": interval_ms,
    }
    if include_points:
        report["points"] = [p.model_dump() for p in points]
    if include_laps and is_vendor_filename(path):
        report["laps"] = [lap.model_dump(mode="json") for lap in parse_vendor_json(data).laps]
    return report


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Inspect an activity file for playback")
    parser.add_argument("path", help="vendor .json export or .gpx track")
    parser.add_argument("--interval-ms", type=_positive_int, default=settings.resample_interval_ms)
    parser.add_argument("--points", action="store_true", help="include resampled points")
    parser.add_argument("--laps", action="store_true", help="include vendor lap splits")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=settings.log_level,
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level)

    try:
        report = build_report(args.path, args.interval_ms, args.points, args.laps)
    except (ActivityDataError, OSError) as e:
        logger.debug("Could not inspect %s", args.path, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(report, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
