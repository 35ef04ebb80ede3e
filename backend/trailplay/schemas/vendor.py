"""Vendor (Suunto DeviceLog) JSON: raw records and decoded results.

Raw models mirror the export's PascalCase keys through aliases and treat
every sensor field as optional; the decoded models are what the rest of
the package consumes.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from trailplay.core.time_utils import assume_utc


class _RawModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


# --------- Raw export structure --------- #

class RawRange(_RawModel):
    min: Optional[float] = Field(None, alias="Min")
    max: Optional[float] = Field(None, alias="Max")


class RawStat(_RawModel):
    avg: Optional[float] = Field(None, alias="Avg")
    max: Optional[float] = Field(None, alias="Max")
    min: Optional[float] = Field(None, alias="Min")


class RawHrZones(_RawModel):
    zone1_duration: float = Field(0.0, alias="Zone1Duration")
    zone2_duration: float = Field(0.0, alias="Zone2Duration")
    zone2_lower_limit: Optional[float] = Field(None, alias="Zone2LowerLimit")  # Hz
    zone3_duration: float = Field(0.0, alias="Zone3Duration")
    zone3_lower_limit: Optional[float] = Field(None, alias="Zone3LowerLimit")
    zone4_duration: float = Field(0.0, alias="Zone4Duration")
    zone4_lower_limit: Optional[float] = Field(None, alias="Zone4LowerLimit")
    zone5_duration: float = Field(0.0, alias="Zone5Duration")
    zone5_lower_limit: Optional[float] = Field(None, alias="Zone5LowerLimit")

    @field_validator(
        "zone1_duration", "zone2_duration", "zone3_duration",
        "zone4_duration", "zone5_duration",
        mode="before",
    )
    @classmethod
    def _null_to_zero(cls, v):
        return 0 if v is None else v

    def durations(self) -> list[float]:
        return [
            self.zone1_duration,
            self.zone2_duration,
            self.zone3_duration,
            self.zone4_duration,
            self.zone5_duration,
        ]

    def lower_limits(self) -> list[Optional[float]]:
        # Zone 1 has no lower limit
        return [
            None,
            self.zone2_lower_limit,
            self.zone3_lower_limit,
            self.zone4_lower_limit,
            self.zone5_lower_limit,
        ]


class RawPersonal(_RawModel):
    max_hr: Optional[float] = Field(None, alias="MaxHR")


class RawVendorHeader(_RawModel):
    activity_type: int = Field(0, alias="ActivityType")
    date_time: Optional[datetime] = Field(None, alias="DateTime")
    distance: float = Field(0.0, alias="Distance")  # meters
    duration: float = Field(0.0, alias="Duration")  # seconds
    ascent: float = Field(0.0, alias="Ascent")
    ascent_time: float = Field(0.0, alias="AscentTime")
    descent: float = Field(0.0, alias="Descent")
    descent_time: float = Field(0.0, alias="DescentTime")
    altitude: RawRange = Field(default_factory=RawRange, alias="Altitude")
    step_count: int = Field(0, alias="StepCount")
    energy: float = Field(0.0, alias="Energy")  # joules
    hr_zones: RawHrZones = Field(default_factory=RawHrZones, alias="HrZones")
    temperature: RawRange = Field(default_factory=RawRange, alias="Temperature")  # Kelvin
    personal: Optional[RawPersonal] = Field(None, alias="Personal")
    peak_training_effect: Optional[float] = Field(None, alias="PeakTrainingEffect")
    recovery_time: Optional[float] = Field(None, alias="RecoveryTime")  # seconds
    epoc: Optional[float] = Field(None, alias="EPOC")
    feeling: Optional[int] = Field(None, alias="Feeling")

    @field_validator("date_time")
    @classmethod
    def _utc(cls, v):
        return assume_utc(v) if v is not None else None

    # Watches write null for sensors that were not paired
    @field_validator(
        "distance", "duration", "ascent", "ascent_time", "descent",
        "descent_time", "step_count", "energy", "activity_type",
        mode="before",
    )
    @classmethod
    def _null_to_zero(cls, v):
        return 0 if v is None else v

    @field_validator("altitude", "temperature", "hr_zones", mode="before")
    @classmethod
    def _null_to_empty(cls, v):
        return {} if v is None else v


class RawLapWindow(_RawModel):
    type: Optional[str] = Field(None, alias="Type")
    duration: float = Field(0.0, alias="Duration")
    distance: float = Field(0.0, alias="Distance")
    ascent: float = Field(0.0, alias="Ascent")
    descent: float = Field(0.0, alias="Descent")
    energy: float = Field(0.0, alias="Energy")
    hr: list[RawStat] = Field(default_factory=list, alias="HR")
    speed: list[RawStat] = Field(default_factory=list, alias="Speed")
    cadence: list[RawStat] = Field(default_factory=list, alias="Cadence")
    temperature: list[RawStat] = Field(default_factory=list, alias="Temperature")
    altitude: list[RawStat] = Field(default_factory=list, alias="Altitude")
    vertical_speed: list[RawStat] = Field(default_factory=list, alias="VerticalSpeed")

    @field_validator("duration", "distance", "ascent", "descent", "energy", mode="before")
    @classmethod
    def _null_to_zero(cls, v):
        return 0 if v is None else v

    @field_validator(
        "hr", "speed", "cadence", "temperature", "altitude", "vertical_speed",
        mode="before",
    )
    @classmethod
    def _null_to_list(cls, v):
        return [] if v is None else v


class RawVendorSample(_RawModel):
    time: Optional[datetime] = Field(None, alias="TimeISO8601")
    hr: Optional[float] = Field(None, alias="HR")  # Hz
    latitude: Optional[float] = Field(None, alias="Latitude")  # radians
    longitude: Optional[float] = Field(None, alias="Longitude")  # radians
    gps_altitude: Optional[float] = Field(None, alias="GPSAltitude")
    speed: Optional[float] = Field(None, alias="Speed")  # m/s
    cadence: Optional[float] = Field(None, alias="Cadence")  # Hz
    temperature: Optional[float] = Field(None, alias="Temperature")  # Kelvin
    altitude: Optional[float] = Field(None, alias="Altitude")  # barometric, m
    distance: Optional[float] = Field(None, alias="Distance")  # cumulative, m
    vertical_speed: Optional[float] = Field(None, alias="VerticalSpeed")
    abs_pressure: Optional[float] = Field(None, alias="AbsPressure")  # Pa
    sea_level_pressure: Optional[float] = Field(None, alias="SeaLevelPressure")
    events: list[dict] = Field(default_factory=list, alias="Events")
    window: Optional[RawLapWindow] = Field(None, alias="Window")

    @field_validator("time")
    @classmethod
    def _utc(cls, v):
        return assume_utc(v) if v is not None else None

    @field_validator("events", mode="before")
    @classmethod
    def _null_to_list(cls, v):
        return [] if v is None else v

    @property
    def is_lap_marker(self) -> bool:
        return self.window is not None and self.window.type == "Lap"


# --------- Decoded results --------- #

class HrZone(BaseModel):
    zone: int  # 1..5
    name: str
    duration_s: float
    percentage: float
    lower_limit_bpm: Optional[int] = None


class HeartRateStats(BaseModel):
    avg_bpm: int
    max_bpm: int
    min_bpm: int
    zones: list[HrZone]


class PaceStats(BaseModel):
    avg_pace_min_per_mile: float
    avg_speed_mph: float
    max_speed_mph: float
    moving_time_s: float
    ascent_time_s: float
    descent_time_s: float


class TemperatureStats(BaseModel):
    avg_celsius: float
    min_celsius: float
    max_celsius: float
    avg_fahrenheit: int
    min_fahrenheit: int
    max_fahrenheit: int


class ElevationStats(BaseModel):
    ascent_m: float
    descent_m: float
    ascent_ft: int
    descent_ft: int
    min_altitude_m: Optional[float] = None
    max_altitude_m: Optional[float] = None
    min_altitude_ft: Optional[int] = None
    max_altitude_ft: Optional[int] = None


class LapSplit(BaseModel):
    lap_number: int
    timestamp: Optional[datetime] = None
    duration_s: float
    distance_m: float
    distance_mi: float
    pace_min_per_mile: float
    ascent_m: float
    descent_m: float
    avg_hr_bpm: Optional[int] = None
    max_hr_bpm: Optional[int] = None
    avg_speed_mph: Optional[float] = None
    avg_temp_celsius: Optional[float] = None
    calories: int


class GpsPoint(BaseModel):
    lat: float  # degrees
    lon: float  # degrees
    altitude: Optional[float] = None  # meters
    time: datetime


class TimeSample(BaseModel):
    """Multi-metric overlay sample."""

    time: datetime
    seconds_from_start: float
    hr: Optional[int] = None  # bpm
    altitude: Optional[float] = None  # meters
    speed: Optional[float] = None  # m/s
    cadence: Optional[int] = None  # steps/min
    temperature: Optional[float] = None  # Celsius
    distance: Optional[float] = None  # meters


class HrSample(BaseModel):
    """Heart-rate overlay sample."""

    time: datetime
    seconds_from_start: float
    hr: int  # bpm


class ProfilePoint(BaseModel):
    distance: float  # meters
    altitude: float  # meters


class VendorActivity(BaseModel):
    start_time: Optional[datetime] = None
    activity_type: int
    activity_name: str
    duration_s: float
    duration_formatted: str
    distance_m: float
    distance_mi: float
    step_count: int
    calories: int
    steps_per_mile: int

    heart_rate: HeartRateStats
    pace: PaceStats
    temperature: Optional[TemperatureStats] = None
    elevation: ElevationStats

    peak_training_effect: Optional[float] = None
    recovery_time_minutes: Optional[int] = None
    epoc: Optional[float] = None
    feeling: Optional[int] = None

    laps: list[LapSplit] = []
    gps_track: list[GpsPoint] = []
    time_samples: list[TimeSample] = []
    hr_over_time: list[HrSample] = []
    elevation_profile: list[ProfilePoint] = []
