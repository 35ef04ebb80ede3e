"""GPX track-point decoder.

Only ``<trkpt>`` elements are read, in document order across all tracks and
segments. Derived playback values (speed, grade, time estimates) belong to
stream fusion, not here.
"""

import logging
import math
from typing import Union

import gpxpy
import gpxpy.gpx

from trailplay.core.errors import ParseError, StructuralError
from trailplay.core.geo import haversine
from trailplay.core.time_utils import assume_utc
from trailplay.core.units import meters_to_feet, meters_to_miles, round_half_up
from trailplay.schemas.activity import TrackFile, TrackPoint

logger = logging.getLogger("trailplay.parsers.gpx")


def parse_gpx(content: Union[str, bytes]) -> TrackFile:
    """Parse GPX text into an ordered list of track points.

    Raises ParseError for malformed XML and StructuralError when the file
    holds no usable track points.
    """
    if isinstance(content, (bytes, bytearray)):
        content = content.decode("utf-8", errors="replace")
    try:
        gpx = gpxpy.parse(content)
    except gpxpy.gpx.GPXException as e:
        raise ParseError(f"Invalid GPX file format: {e}") from e

    points: list[TrackPoint] = []
    skipped = 0
    for track in gpx.tracks:
        for segment in track.segments:
            for p in segment.points:
                # 0,0 is what some exporters write for "no fix"
                if p.latitude == 0 and p.longitude == 0:
                    skipped += 1
                    continue
                if not (math.isfinite(p.latitude) and math.isfinite(p.longitude)):
                    skipped += 1
                    continue
                ele = p.elevation
                points.append(TrackPoint(
                    lat=p.latitude,
                    lon=p.longitude,
                    ele=ele if ele is not None and math.isfinite(ele) else None,
                    time=assume_utc(p.time) if p.time else None,
                ))

    if not points:
        raise StructuralError("No track points found in GPX file")
    if skipped:
        logger.debug("Skipped %d GPX points at 0,0 or without a finite position", skipped)

    total_m = 0.0
    gain_m = 0.0
    for a, b in zip(points, points[1:]):
        total_m += haversine(a.lat, a.lon, b.lat, b.lon)
        if a.ele is not None and b.ele is not None and b.ele > a.ele:
            gain_m += b.ele - a.ele

    times = [p.time for p in points if p.time is not None]
    name = gpx.tracks[0].name if gpx.tracks and gpx.tracks[0].name else gpx.name

    logger.debug("Decoded GPX: %d points, %.0f m", len(points), total_m)
    return TrackFile(
        name=name,
        points=points,
        start_time=times[0] if times else None,
        end_time=times[-1] if times else None,
        total_distance_mi=round(meters_to_miles(total_m), 2),
        total_elevation_gain_ft=round_half_up(meters_to_feet(gain_m)),
    )


def is_track_filename(filename: str) -> bool:
    return filename.lower().endswith(".gpx")
