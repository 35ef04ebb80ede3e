"""Frame clocks driving the playback engine.

A clock calls each subscribed callback once per rendered frame with the
current time in milliseconds. Everything runs on the caller's thread; a
callback must return quickly and never block.
"""

import logging
import time
from typing import Callable

logger = logging.getLogger("trailplay.playback.clock")

FrameCallback = Callable[[float], None]


class Subscription:
    """Handle returned by FrameClock.subscribe; cancel() is idempotent."""

    def __init__(self, clock: "FrameClock", callback: FrameCallback):
        self._clock = clock
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._clock._remove(self)


class FrameClock:
    def __init__(self):
        self._subscriptions: list[Subscription] = []

    def now(self) -> float:
        raise NotImplementedError

    def subscribe(self, callback: FrameCallback) -> Subscription:
        sub = Subscription(self, callback)
        self._subscriptions.append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _emit(self, now_ms: float) -> None:
        # copy: callbacks may cancel themselves mid-frame
        for sub in list(self._subscriptions):
            if sub.active:
                sub.callback(now_ms)


class ManualFrameClock(FrameClock):
    """Deterministic clock advanced explicitly; one frame per advance()."""

    def __init__(self, start_ms: float = 0.0):
        super().__init__()
        self._now = start_ms

    def now(self) -> float:
        return self._now

    def advance(self, ms: float) -> None:
        if ms < 0:
            raise ValueError("cannot move a clock backwards")
        self._now += ms
        self._emit(self._now)

    def run(self, frames: int, frame_ms: float = 1000 / 60) -> None:
        """Emit `frames` frames spaced `frame_ms` apart (~60 fps by default)."""
        for _ in range(frames):
            self.advance(frame_ms)


class MonotonicFrameClock(FrameClock):
    """Wall-clock frames for a host render loop that calls run_frame()."""

    def now(self) -> float:
        return time.monotonic() * 1000

    def run_frame(self) -> None:
        self._emit(self.now())
