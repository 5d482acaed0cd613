# region Imports
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple
import math
import numpy as np
# endregion

RGB = Tuple[int, int, int]

# region Hex Helpers
def hex_to_rgb(color: str) -> RGB:
    h = color.lstrip("#")
    if len(h) != 6:
        raise ValueError(f"expected #rrggbb, got {color!r}")
    return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))


def rgb_to_hex(rgb: RGB) -> str:
    return "#{:02x}{:02x}{:02x}".format(*rgb)
# endregion

# region Color Scale
@dataclass(frozen=True)
class ColorStop:
    value: float
    color: RGB


class ColorScale:
    """Piecewise-linear color ramp; stops strictly increasing in value."""

    def __init__(self, stops: Sequence[Tuple[float, object]]):
        parsed = []
        for value, color in stops:
            rgb = hex_to_rgb(color) if isinstance(color, str) else tuple(int(c) for c in color)
            parsed.append(ColorStop(float(value), rgb))
        assert len(parsed) >= 2, "a color scale needs at least 2 stops"
        for a, b in zip(parsed[:-1], parsed[1:]):
            assert a.value < b.value, f"stop values must increase strictly ({a.value} !< {b.value})"
        self.stops: Tuple[ColorStop, ...] = tuple(parsed)
        self._values = np.array([s.value for s in parsed], dtype=np.float64)
        self._colors = np.array([s.color for s in parsed], dtype=np.float64)

    def __len__(self):
        return len(self.stops)

    def __iter__(self):
        return iter(self.stops)

    def __repr__(self):
        inner = ", ".join(f"({s.value:g}, {rgb_to_hex(s.color)})" for s in self.stops)
        return f"ColorScale([{inner}])"

    @property
    def lo(self) -> float:
        return self.stops[0].value

    @property
    def hi(self) -> float:
        return self.stops[-1].value
# endregion

# region Color Lookup
def _lerp_channel(c0: int, c1: int, t: float) -> int:
    # round-half-up, matching the canvas renderer
    return int(math.floor(c0 + t * (c1 - c0) + 0.5))


def color_at(value: float, scale: ColorScale) -> RGB:
    stops = scale.stops
    if value <= stops[0].value:
        return stops[0].color
    if value >= stops[-1].value:
        return stops[-1].color
    for a, b in zip(stops[:-1], stops[1:]):
        if a.value <= value <= b.value:
            t = (value - a.value) / (b.value - a.value)
            return tuple(_lerp_channel(c0, c1, t) for c0, c1 in zip(a.color, b.color))
    return stops[-1].color  # NaN falls through every comparison


def color_map(values: np.ndarray, scale: ColorScale) -> np.ndarray:
    """Vectorized color_at: (...,) float -> (..., 3) uint8."""
    v = np.asarray(values, dtype=np.float64)
    xs = scale._values
    cs = scale._colors
    clipped = np.clip(np.nan_to_num(v, nan=xs[-1]), xs[0], xs[-1])
    i = np.clip(np.searchsorted(xs, clipped, side="right") - 1, 0, len(xs) - 2)
    t = (clipped - xs[i]) / (xs[i + 1] - xs[i])
    rgb = cs[i] + t[..., None] * (cs[i + 1] - cs[i])
    return np.floor(rgb + 0.5).astype(np.uint8)
# endregion

# region Legend
def legend_ticks(scale: ColorScale, count: int = 5) -> List[int]:
    """Tick labels at equal fractions of the stop index, as the legend draws them."""
    n = len(scale)
    ticks = []
    for k in range(count):
        pos = k / (count - 1) if count > 1 else 0.0
        scaled = pos * (n - 1)
        i = min(int(math.floor(scaled)), n - 2)
        t = scaled - i
        a, b = scale.stops[i], scale.stops[i + 1]
        ticks.append(int(math.floor(a.value + t * (b.value - a.value) + 0.5)))
    return ticks
# endregion

# region Metric Registry
@dataclass(frozen=True)
class MetricConfig:
    label: str
    unit: str
    scale: ColorScale


METRICS: Dict[str, MetricConfig] = {
    "temperature": MetricConfig("Temperature", "°F", ColorScale([
        (35, "#00cfff"),
        (45, "#3a86ff"),
        (52, "#06d6a0"),
        (58, "#ffd166"),
        (65, "#ff9900"),
        (75, "#ef233c"),
    ])),
    "humidity": MetricConfig("Humidity", "%", ColorScale([
        (10, "#fef9c3"),
        (30, "#86efac"),
        (50, "#22d3ee"),
        (70, "#3b82f6"),
        (90, "#1e3a8a"),
    ])),
    "wind_speed_mph": MetricConfig("Wind Speed", "mph", ColorScale([
        (0, "#f0fdf4"),
        (5, "#86efac"),
        (10, "#22c55e"),
        (20, "#0ea5e9"),
        (30, "#7c3aed"),
    ])),
}

METRIC_ORDER = ["temperature", "humidity", "wind_speed_mph"]
# endregion
