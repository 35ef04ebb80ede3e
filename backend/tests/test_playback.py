import math

import pytest
from pydantic import ValidationError

from builders import straight_line
from trailplay.playback.clock import ManualFrameClock, MonotonicFrameClock
from trailplay.playback.engine import PlaybackEngine
from trailplay.schemas.playback import PlaybackStatus


def make_engine(n=20, **kwargs):
    clock = ManualFrameClock()
    return PlaybackEngine(straight_line(n), clock, **kwargs), clock


def test_advances_one_point_per_base_interval():
    engine, clock = make_engine()
    engine.play()
    assert engine.is_playing
    clock.advance(49)
    assert engine.current_index == 0
    clock.advance(1)
    assert engine.current_index == 1
    clock.advance(50)
    assert engine.current_index == 2


def test_one_point_per_tick_even_after_a_long_frame():
    engine, clock = make_engine()
    engine.play()
    clock.advance(5000)
    assert engine.current_index == 1


def test_speed_changes_the_tick_rate():
    engine, clock = make_engine()
    engine.set_speed(2)
    engine.play()
    clock.advance(25)
    assert engine.current_index == 1
    engine.set_speed(0.5)
    clock.advance(50)
    assert engine.current_index == 1
    clock.advance(50)
    assert engine.current_index == 2


def test_stops_on_reaching_the_last_point():
    engine, clock = make_engine(10)
    engine.seek_index(8)
    engine.play()
    clock.advance(50)
    assert engine.current_index == 9
    assert not engine.is_playing
    assert engine.status is PlaybackStatus.stopped
    assert clock.subscriber_count == 0


def test_play_at_the_end_restarts_from_the_beginning():
    engine, clock = make_engine(5)
    engine.seek(100)
    engine.play()
    assert engine.current_index == 0
    clock.run(4, 50)
    assert engine.current_index == 4
    assert engine.status is PlaybackStatus.stopped


def test_pause_cancels_the_frame_subscription():
    engine, clock = make_engine()
    engine.play()
    clock.advance(50)
    engine.pause()
    assert engine.status is PlaybackStatus.paused
    assert clock.subscriber_count == 0
    clock.advance(500)
    assert engine.current_index == 1
    engine.play()
    clock.advance(50)
    assert engine.current_index == 2


def test_toggle():
    engine, clock = make_engine()
    engine.toggle()
    assert engine.is_playing
    engine.toggle()
    assert engine.status is PlaybackStatus.paused


def test_play_twice_subscribes_once():
    engine, clock = make_engine()
    engine.play()
    engine.play()
    assert clock.subscriber_count == 1


def test_seek_clamps():
    engine, _ = make_engine(11)
    engine.seek(150)
    assert engine.current_index == 10
    engine.seek(-10)
    assert engine.current_index == 0
    engine.seek(50)
    assert engine.current_index == 5
    engine.seek(math.inf)
    assert engine.current_index == 10
    engine.seek(math.nan)
    assert engine.current_index == 10
    assert engine.progress == 100.0


def test_seek_resets_the_tick_reference():
    engine, clock = make_engine()
    engine.play()
    clock.advance(40)
    engine.seek_index(3)
    clock.advance(20)
    assert engine.current_index == 3
    clock.advance(30)
    assert engine.current_index == 4


def test_skips_move_thirty_seconds_of_points():
    engine, _ = make_engine(20)
    engine.skip_forward()
    assert engine.current_index == 6
    engine.skip_back()
    assert engine.current_index == 0
    engine.skip_back()
    assert engine.current_index == 0
    engine.seek_index(17)
    engine.skip_forward()
    assert engine.current_index == 19


def test_skip_uses_point_spacing():
    engine, _ = make_engine(20, sample_interval_ms=1000)
    engine.skip_forward(10000)
    assert engine.current_index == 10


@pytest.mark.parametrize("bad", [0, -1, math.nan, math.inf])
def test_set_speed_rejects_invalid_values(bad):
    engine, _ = make_engine()
    with pytest.raises(ValueError):
        engine.set_speed(bad)
    assert engine.speed == 1.0


def test_highlight_is_sorted_and_clamped():
    engine, _ = make_engine(20)
    engine.highlight_segment((8, 3))
    assert engine.highlight == (3, 8)
    engine.highlight_segment((-5, 100))
    assert engine.highlight == (0, 19)
    assert engine.current_index == 0
    engine.highlight_segment(None)
    assert engine.highlight is None


def test_load_cancels_and_resets():
    engine, clock = make_engine()
    engine.highlight_segment((1, 2))
    engine.play()
    clock.advance(50)
    engine.load(straight_line(3))
    assert engine.status is PlaybackStatus.stopped
    assert engine.current_index == 0
    assert engine.highlight is None
    assert len(engine.points) == 3
    assert clock.subscriber_count == 0


def test_close_and_context_manager():
    clock = ManualFrameClock()
    with PlaybackEngine(straight_line(5), clock) as engine:
        engine.play()
        assert clock.subscriber_count == 1
    assert clock.subscriber_count == 0
    assert engine.status is PlaybackStatus.stopped


def test_listeners_receive_snapshots():
    engine, clock = make_engine()
    seen = []
    remove = engine.add_listener(seen.append)
    engine.play()
    clock.advance(50)
    remove()
    clock.advance(50)
    assert [s.current_index for s in seen] == [0, 1]
    assert seen[0].is_playing
    assert engine.state.current_index == 2


def test_fewer_than_two_points_never_plays():
    engine, clock = make_engine(1)
    engine.play()
    assert engine.status is PlaybackStatus.stopped
    assert clock.subscriber_count == 0
    assert engine.progress == 0.0
    empty, _ = make_engine(0)
    assert empty.current_point is None


def test_clock_rejects_going_backwards():
    with pytest.raises(ValueError):
        ManualFrameClock().advance(-1)


def test_subscription_cancel_is_idempotent():
    clock = ManualFrameClock()
    ticks = []
    sub = clock.subscribe(ticks.append)
    clock.advance(10)
    sub.cancel()
    sub.cancel()
    clock.advance(10)
    assert ticks == [10]
    assert clock.subscriber_count == 0


def test_seek_rounds_halves_up():
    engine, _ = make_engine(6)
    engine.seek(50)
    assert engine.current_index == 3
    engine.seek(10)
    assert engine.current_index == 1


def test_monotonic_clock_emits_non_decreasing_times():
    clock = MonotonicFrameClock()
    seen = []
    clock.subscribe(seen.append)
    for _ in range(5):
        clock.run_frame()
    assert len(seen) == 5
    assert seen == sorted(seen)
    assert clock.now() >= seen[-1]


def test_played_points_cannot_be_rewritten():
    engine, _ = make_engine(3)
    with pytest.raises(ValidationError):
        engine.current_point.lat = 0.0
