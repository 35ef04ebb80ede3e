from typing import MutableSequence, Optional

from trailplay.core.config import settings
from trailplay.schemas.activity import FusedPoint


def smooth_elevation(points: MutableSequence[FusedPoint], window: Optional[int] = None) -> None:
    """Centered moving average over elevation, in place.

    Points are frozen, so each smoothed point is replaced in the sequence by
    an updated copy. Edge points average over a truncated window (no
    padding). Only defined elevations take part, and points without an
    elevation stay without one. Sequences shorter than the window are left
    untouched.
    """
    window = window or settings.smoothing_window
    if len(points) < window:
        return

    half = window // 2
    raw = [p.elevation for p in points]
    for i, p in enumerate(points):
        if raw[i] is None:
            continue
        values = [e for e in raw[max(0, i - half):i + half + 1] if e is not None]
        points[i] = p.model_copy(update={"elevation": sum(values) / len(values)})
