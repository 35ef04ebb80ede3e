"""Playback engine: a cursor over a fused point sequence.

States: STOPPED -> PLAYING <-> PAUSED, and PLAYING -> STOPPED when the
cursor reaches the last point. While PLAYING the engine is subscribed to a
FrameClock; each frame it advances by exactly one point once
``base_interval_ms / speed`` has elapsed since the previous advance, so
speed changes the tick rate, never the step size. Pausing, closing and
loading a new sequence cancel the subscription. Seek and skip reset the
tick reference so the next frame never jumps.

`current_index` is owned here; renderers read it (or subscribe with
add_listener) and never write it.
"""

import logging
import math
from typing import Callable, Optional, Sequence

from trailplay.core.config import settings
from trailplay.core.units import round_half_up
from trailplay.playback.clock import FrameClock, Subscription
from trailplay.schemas.activity import FusedPoint
from trailplay.schemas.playback import PlaybackState, PlaybackStatus

logger = logging.getLogger("trailplay.playback")

Listener = Callable[[PlaybackState], None]


class PlaybackEngine:
    def __init__(
        self,
        points: Sequence[FusedPoint],
        clock: FrameClock,
        base_interval_ms: Optional[float] = None,
        sample_interval_ms: Optional[float] = None,
    ):
        self._clock = clock
        self._base_interval_ms = base_interval_ms or settings.playback_base_interval_ms
        # Spacing of the (resampled) points, used to turn skip ms into points
        self._sample_interval_ms = sample_interval_ms or settings.resample_interval_ms
        self._points: tuple[FusedPoint, ...] = tuple(points)
        self._index = 0
        self._status = PlaybackStatus.stopped
        self._speed = 1.0
        self._highlight: Optional[tuple[int, int]] = None
        self._subscription: Optional[Subscription] = None
        self._last_tick = clock.now()
        self._listeners: list[Listener] = []

    # --------- Read-only state --------- #

    @property
    def points(self) -> tuple[FusedPoint, ...]:
        return self._points

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_point(self) -> Optional[FusedPoint]:
        return self._points[self._index] if self._points else None

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def is_playing(self) -> bool:
        return self._status is PlaybackStatus.playing

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def highlight(self) -> Optional[tuple[int, int]]:
        return self._highlight

    @property
    def progress(self) -> float:
        """Cursor position as a percent of the sequence."""
        if len(self._points) < 2:
            return 0.0
        return self._index / self._last_index * 100

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            current_index=self._index,
            status=self._status,
            speed=self._speed,
            highlight=self._highlight,
        )

    @property
    def _last_index(self) -> int:
        return max(0, len(self._points) - 1)

    # --------- Listeners --------- #

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with a state snapshot after every change.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def remove():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.state
        for listener in list(self._listeners):
            listener(snapshot)

    # --------- Transport --------- #

    def play(self) -> None:
        if self._status is PlaybackStatus.playing:
            return
        if len(self._points) < 2:
            logger.debug("Nothing to play (%d points)", len(self._points))
            return
        if self._index >= self._last_index:
            self._index = 0
        self._status = PlaybackStatus.playing
        self._last_tick = self._clock.now()
        self._subscription = self._clock.subscribe(self._on_frame)
        logger.debug("Playback started at index %d, speed %sx", self._index, self._speed)
        self._notify()

    def pause(self) -> None:
        if self._status is not PlaybackStatus.playing:
            return
        self._cancel_frames()
        self._status = PlaybackStatus.paused
        logger.debug("Playback paused at index %d", self._index)
        self._notify()

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def seek(self, percent: float) -> None:
        """Jump to `percent` (0..100) of the sequence; out of range clamps."""
        if math.isnan(percent):
            return
        if math.isinf(percent):
            target = self._last_index if percent > 0 else 0
        else:
            target = round_half_up(percent / 100 * self._last_index)
        self._move_to(target)

    def seek_index(self, index: int) -> None:
        self._move_to(index)

    def skip_back(self, delta_ms: Optional[float] = None) -> None:
        self._move_to(self._index - self._skip_points(delta_ms))

    def skip_forward(self, delta_ms: Optional[float] = None) -> None:
        self._move_to(self._index + self._skip_points(delta_ms))

    def set_speed(self, multiplier: float) -> None:
        if not math.isfinite(multiplier) or multiplier <= 0:
            raise ValueError(f"playback speed must be a positive number, got {multiplier!r}")
        self._speed = float(multiplier)
        self._notify()

    def highlight_segment(self, segment: Optional[tuple[int, int]]) -> None:
        """Mark an index range for renderers; does not move the cursor."""
        if segment is None:
            self._highlight = None
        else:
            start, end = sorted(segment)
            self._highlight = (self._clamp(start), self._clamp(end))
        self._notify()

    # --------- Lifecycle --------- #

    def load(self, points: Sequence[FusedPoint]) -> None:
        """Swap in a new sequence; any running loop is cancelled first."""
        self._cancel_frames()
        self._points = tuple(points)
        self._index = 0
        self._status = PlaybackStatus.stopped
        self._highlight = None
        logger.debug("Loaded %d points", len(self._points))
        self._notify()

    def close(self) -> None:
        self._cancel_frames()
        if self._status is not PlaybackStatus.stopped:
            self._status = PlaybackStatus.stopped
            self._notify()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # --------- Internals --------- #

    def _clamp(self, index: int) -> int:
        return max(0, min(self._last_index, int(index)))

    def _skip_points(self, delta_ms: Optional[float]) -> int:
        if delta_ms is None:
            delta_ms = settings.skip_interval_ms
        return int(delta_ms // self._sample_interval_ms)

    def _move_to(self, index: int) -> None:
        self._index = self._clamp(index)
        self._last_tick = self._clock.now()
        self._notify()

    def _cancel_frames(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def _on_frame(self, now_ms: float) -> None:
        if self._status is not PlaybackStatus.playing:
            return
        if now_ms - self._last_tick < self._base_interval_ms / self._speed:
            return
        self._last_tick = now_ms
        self._index = min(self._index + 1, self._last_index)
        if self._index >= self._last_index:
            self._cancel_frames()
            self._status = PlaybackStatus.stopped
            logger.debug("Playback reached the end (%d points)", len(self._points))
        self._notify()
