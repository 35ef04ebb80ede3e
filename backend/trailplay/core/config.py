from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    # Timezone for displaying activity local times.
    # Examples: "America/New_York", "Europe/London", or "local" to use system tz.
    timezone: str = "local"
    log_level: str = "INFO"

    # Stream fusion
    moving_speed_mps: float = 0.3  # below this GPS speed counts as stopped
    hr_match_tolerance_s: float = 60.0
    sample_match_window_s: int = 5
    walking_speed_mps: float = 1.34  # ~3 mph, used when a track has no times

    # Vendor overlay down-sampling
    sample_overlay_interval_s: float = 10.0
    hr_overlay_interval_s: float = 30.0
    elevation_profile_step_m: float = 100.0
    gps_storage_step: int = 5
    sample_storage_step: int = 3

    # Smoothing / resampling
    smoothing_window: int = 5
    resample_interval_ms: int = 5000

    # Playback (base rate ~20 points per second at 1x)
    playback_base_interval_ms: float = 50.0
    skip_interval_ms: int = 30000

    @field_validator(
        "resample_interval_ms",
        "playback_base_interval_ms",
        "skip_interval_ms",
        "smoothing_window",
        "gps_storage_step",
        "sample_storage_step",
    )
    @classmethod
    def _positive(cls, v):
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    # Allow empty env strings to fall back to the default
    @field_validator("timezone", "log_level", mode="before")
    @classmethod
    def _empty_to_default(cls, v, info):
        if v in ("", None, "null", "None"):
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v):
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return v

    class Config:
        env_file = ".env"
        env_prefix = "TRAILPLAY_"


settings = Settings()
