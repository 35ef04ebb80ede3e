import pytest
from pydantic import ValidationError

from trailplay.core.config import Settings


def test_defaults():
    s = Settings()
    assert s.moving_speed_mps == 0.3
    assert s.resample_interval_ms == 5000
    assert s.playback_base_interval_ms == 50.0
    assert s.skip_interval_ms == 30000


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("TRAILPLAY_MOVING_SPEED_MPS", "0.5")
    monkeypatch.setenv("TRAILPLAY_RESAMPLE_INTERVAL_MS", "1000")
    s = Settings()
    assert s.moving_speed_mps == 0.5
    assert s.resample_interval_ms == 1000


def test_empty_strings_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("TRAILPLAY_TIMEZONE", "")
    monkeypatch.setenv("TRAILPLAY_LOG_LEVEL", "None")
    s = Settings()
    assert s.timezone == "local"
    assert s.log_level == "INFO"


def test_intervals_must_be_positive(monkeypatch):
    monkeypatch.setenv("TRAILPLAY_RESAMPLE_INTERVAL_MS", "0")
    with pytest.raises(ValidationError):
        Settings()


def test_log_level_is_normalized_and_checked(monkeypatch):
    monkeypatch.setenv("TRAILPLAY_LOG_LEVEL", "warning")
    assert Settings().log_level == "WARNING"
    monkeypatch.setenv("TRAILPLAY_LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        Settings()
