from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SourceType(str, Enum):
    vendor = "vendor"
    track = "track"


class TrackPoint(BaseModel):
    lat: float
    lon: float
    ele: Optional[float] = None
    time: Optional[datetime] = None


class TrackFile(BaseModel):
    """Decoded GPX track-point file."""

    name: Optional[str] = None
    points: list[TrackPoint]
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    total_distance_mi: float = 0.0
    total_elevation_gain_ft: int = 0


class FusedPoint(BaseModel):
    """One row of the normalized, time-ordered stream."""

    model_config = ConfigDict(frozen=True)

    timestamp: float  # ms since activity start
    lat: float
    lon: float
    elevation: Optional[float] = None  # meters
    speed: Optional[float] = None  # m/s
    heart_rate: Optional[int] = None  # bpm
    cadence: Optional[int] = None  # steps/min
    grade: Optional[float] = None  # percent
    distance: Optional[float] = None  # cumulative meters
    temperature: Optional[float] = None  # Celsius
    moving: bool = True


class Bounds(BaseModel):
    model_config = ConfigDict(frozen=True)

    north: float
    south: float
    east: float
    west: float


class ActivitySummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_time: Optional[datetime] = None
    duration_s: float
    distance_m: float
    elevation_gain_m: float
    elevation_loss_m: float
    avg_speed_mps: float
    max_speed_mps: float
    avg_hr: Optional[int] = None
    max_hr: Optional[int] = None
    min_hr: Optional[int] = None
    avg_cadence: Optional[int] = None
    calories: Optional[int] = None
    # Duration came from the walking-pace estimate, not measured time
    time_estimated: bool = False


class FusedActivity(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: SourceType
    points: tuple[FusedPoint, ...]
    summary: ActivitySummary
    bounds: Bounds
    has_heart_rate: bool
    has_cadence: bool
    has_speed: bool
