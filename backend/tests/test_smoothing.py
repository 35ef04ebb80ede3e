import pytest

from builders import fused
from trailplay.processing.smoothing import smooth_elevation


def _points(elevations):
    return [fused(i * 1000, elevation=e) for i, e in enumerate(elevations)]


def test_centered_window_truncates_at_the_edges():
    points = _points([0, 10, 20, 30, 40, 50])
    smooth_elevation(points)
    assert [p.elevation for p in points] == pytest.approx([10, 15, 20, 30, 35, 40])


def test_missing_elevations_stay_missing():
    points = _points([0, None, 20, 30, 40, 50])
    smooth_elevation(points)
    assert points[1].elevation is None
    assert points[0].elevation == pytest.approx(10)
    assert points[2].elevation == pytest.approx(22.5)


def test_short_sequences_are_untouched():
    points = _points([0, 100, 0, 100])
    smooth_elevation(points)
    assert [p.elevation for p in points] == [0, 100, 0, 100]


def test_custom_window():
    points = _points([0, 30, 0])
    smooth_elevation(points, window=3)
    assert [p.elevation for p in points] == pytest.approx([15, 10, 15])
