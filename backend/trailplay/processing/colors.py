"""Gradient colors for metric-colored route segments.

Runs once per rendered segment, so it never raises: invalid values map to
NEUTRAL_GRAY.
"""

import math
from types import MappingProxyType
from typing import NamedTuple, Optional

from trailplay.core.units import round_half_up


class Rgb(NamedTuple):
    r: int
    g: int
    b: int

    def css(self) -> str:
        return f"rgb({self.r}, {self.g}, {self.b})"


NEUTRAL_GRAY = Rgb(128, 128, 128)

# 4-stop scales, low -> high
COLOR_SCALES = MappingProxyType({
    "speed": (
        Rgb(0, 100, 255),    # blue (slow)
        Rgb(0, 255, 100),    # green
        Rgb(255, 255, 0),    # yellow
        Rgb(255, 100, 0),    # orange (fast)
    ),
    "hr": (
        Rgb(0, 200, 100),    # green (low)
        Rgb(255, 255, 0),    # yellow
        Rgb(255, 150, 0),    # orange
        Rgb(255, 50, 50),    # red (high)
    ),
    "elevation": (
        Rgb(0, 150, 0),      # dark green (low)
        Rgb(100, 200, 100),  # light green
        Rgb(150, 100, 50),   # brown
        Rgb(255, 255, 255),  # white (high)
    ),
})


def _is_number(v) -> bool:
    return isinstance(v, (int, float)) and not math.isnan(v)


def gradient_color(
    value: Optional[float],
    min_value: float,
    max_value: float,
    scale: str = "speed",
) -> Rgb:
    if not (_is_number(value) and _is_number(min_value) and _is_number(max_value)):
        return NEUTRAL_GRAY

    if max_value == min_value:
        ratio = 0.5
    else:
        ratio = (value - min_value) / (max_value - min_value)
    if math.isnan(ratio):
        return NEUTRAL_GRAY
    ratio = max(0.0, min(1.0, ratio))

    stops = COLOR_SCALES.get(scale, COLOR_SCALES["speed"])
    segment = ratio * (len(stops) - 1)
    index = min(int(segment), len(stops) - 1)
    frac = segment - index
    c1 = stops[index]
    c2 = stops[min(index + 1, len(stops) - 1)]

    return Rgb(*(round_half_up(a + (b - a) * frac) for a, b in zip(c1, c2)))


def gradient_css(value: Optional[float], min_value: float, max_value: float, scale: str = "speed") -> str:
    return gradient_color(value, min_value, max_value, scale).css()
