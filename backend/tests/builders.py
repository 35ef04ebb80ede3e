"""Small builders for synthetic activity files used across the tests."""

import math
from datetime import datetime, timedelta, timezone

from trailplay.schemas.activity import FusedPoint

START = datetime(2024, 5, 1, 8, 0, 0, tzinfo=timezone.utc)


def iso(seconds: float) -> str:
    return (START + timedelta(seconds=seconds)).isoformat().replace("+00:00", "Z")


def gps_sample(seconds: float, lat: float, lon: float, **fields) -> dict:
    sample = {
        "TimeISO8601": iso(seconds),
        "Latitude": math.radians(lat),
        "Longitude": math.radians(lon),
    }
    sample.update(fields)
    return sample


def sample(seconds: float, **fields) -> dict:
    out = {"TimeISO8601": iso(seconds)}
    out.update(fields)
    return out


def make_log(samples: list[dict], **header) -> dict:
    base = {
        "ActivityType": 82,
        "DateTime": iso(0),
        "Distance": 0,
        "Duration": 0,
        "Ascent": 0,
        "AscentTime": 0,
        "Descent": 0,
        "DescentTime": 0,
        "Altitude": {"Min": 200, "Max": 300},
        "StepCount": 0,
        "Energy": 0,
        "HrZones": {
            "Zone1Duration": 0,
            "Zone2Duration": 0,
            "Zone2LowerLimit": 2.0,
            "Zone3Duration": 0,
            "Zone3LowerLimit": 2.3,
            "Zone4Duration": 0,
            "Zone4LowerLimit": 2.6,
            "Zone5Duration": 0,
            "Zone5LowerLimit": 2.9,
        },
        "Temperature": {"Min": None, "Max": None},
    }
    base.update(header)
    return {"DeviceLog": {"Header": base, "Samples": samples}}


def two_point_log() -> dict:
    """GPS at t=0 and t=10s; HR 1.2 Hz at t=0 and 1.3 Hz at t=9s."""
    return make_log([
        gps_sample(0, 34.0, -84.0, HR=1.2),
        sample(9, HR=1.3),
        gps_sample(10, 34.001, -84.001),
    ])


def northbound_log(seconds: int = 120, gps_every: int = 3) -> dict:
    """A steady walk north with 1 Hz sensors and GPS every few seconds."""
    samples = []
    for t in range(seconds + 1):
        s = sample(
            t,
            HR=2.0 + (t % 7) / 100,
            Speed=1.5,
            Cadence=1.4,
            Temperature=290.15,
            Altitude=200 + t * 0.1,
            Distance=t * 1.5,
        )
        if t % gps_every == 0:
            s["Latitude"] = math.radians(34.0 + t * 0.0000135)
            s["Longitude"] = math.radians(-84.0)
            s["GPSAltitude"] = 200 + t * 0.1
        samples.append(s)
    return make_log(samples, Duration=seconds, Distance=seconds * 1.5, Energy=418400)


def gpx_document(points: list[tuple], name: str = "Morning Hike") -> str:
    """points: (lat, lon, ele or None, seconds or None)"""
    rows = []
    for lat, lon, ele, seconds in points:
        inner = ""
        if ele is not None:
            inner += f"<ele>{ele}</ele>"
        if seconds is not None:
            inner += f"<time>{iso(seconds)}</time>"
        rows.append(f'<trkpt lat="{lat}" lon="{lon}">{inner}</trkpt>')
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">'
        f"<trk><name>{name}</name><trkseg>{''.join(rows)}</trkseg></trk>"
        "</gpx>"
    )


def fused(timestamp: float, lat: float = 34.0, lon: float = -84.0, **fields) -> FusedPoint:
    return FusedPoint(timestamp=timestamp, lat=lat, lon=lon, **fields)


def straight_line(n: int, step_ms: float = 5000) -> list[FusedPoint]:
    return [fused(i * step_ms, 34.0 + i * 0.0001, -84.0, distance=i * 11.1) for i in range(n)]
