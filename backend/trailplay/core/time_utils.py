from datetime import datetime, timezone

from trailplay.core.units import mps_to_mph, round_half_up


def format_duration(seconds: float) -> str:
    """
    Clock-style duration for playback readouts.
    Example: 3723 -> '1:02:03', 95 -> '1:35'
    """
    total = int(seconds)
    h = total // 3600
    m = (total % 3600) // 60
    s = total % 60
    if h > 0:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m}:{s:02d}"


def format_duration_words(seconds: float) -> str:
    """
    Summary-style duration.
    Example: 3723 -> '1h 2m 3s', 95 -> '1m 35s'
    """
    total = int(seconds)
    h = total // 3600
    m = (total % 3600) // 60
    s = total % 60
    if h > 0:
        return f"{h}h {m}m {s}s"
    return f"{m}m {s}s"


def format_pace(min_per_mile: float) -> str:
    """
    Format decimal minutes per mile as 'M:SS'.
    Example: 7.5 -> '7:30'
    """
    if min_per_mile <= 0:
        return "0:00"
    total_sec = round_half_up(min_per_mile * 60)
    return f"{total_sec // 60}:{total_sec % 60:02d}"


def format_speed(speed_mps: float, as_pace: bool = False) -> str:
    """Format m/s as '8:03 /mi' (pace) or '7.5 mph'."""
    mph = mps_to_mph(speed_mps)
    if as_pace and mph > 0:
        return f"{format_pace(60 / mph)} /mi"
    return f"{mph:.1f} mph"


def assume_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes so mixed sources can be subtracted."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_local_datetime(dt: datetime, tz_name: str | None = None) -> datetime:
    """Convert a datetime (assume UTC if naive) to local or the given tz.

    - If `tz_name` is 'local' or None: use system local timezone.
    - If `tz_name` is an IANA tz name (e.g., 'America/New_York'): use that.
    """
    dt = assume_utc(dt)
    if tz_name and tz_name != "local":
        from zoneinfo import ZoneInfo
        return dt.astimezone(ZoneInfo(tz_name))
    return dt.astimezone()
