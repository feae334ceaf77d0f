"""Trace recorder: bounded history of plot samples and plot scaling.

Each tick appends one (x, y, timestamp) sample built from a selectable
pair of plot variables. The buffer keeps the newest TRACE_CAPACITY
samples. Scaling helpers implement the plot's autoscale and zoom-box
modes independently of any widget.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import NamedTuple

from simulation import PendulumParams, positions

logger = logging.getLogger(__name__)

TRACE_CAPACITY = 5000

# Autoscale looks at this many of the newest samples
AUTOSCALE_WINDOW = 100

# Smallest half-extent autoscale will fit, so a flat trace is not blown up
AUTOSCALE_FLOOR = 0.1

# A zoom box must exceed this many pixels in both directions
MIN_ZOOM_SELECTION = 10

PLOT_VARIABLES = {
    "x1": "Mass 1 X Position",
    "y1": "Mass 1 Y Position",
    "x2": "Mass 2 X Position",
    "y2": "Mass 2 Y Position",
    "theta1": "θ₁",
    "theta2": "θ₂",
    "time": "Time",
}


class TracePoint(NamedTuple):
    x: float
    y: float
    timestamp: float


def plot_value(name: str, state, params: PendulumParams, time: float) -> float:
    """Evaluate plot variable ``name`` for a state at plot time ``time``."""
    if name == "time":
        return time
    if name == "theta1":
        return float(state[0])
    if name == "theta2":
        return float(state[1])
    x1, y1, x2, y2 = positions(state, params)
    coords = {"x1": x1, "y1": y1, "x2": x2, "y2": y2}
    try:
        return float(coords[name])
    except KeyError:
        raise ValueError(f"Unknown plot variable: {name!r}") from None


class TraceRecorder:
    """Bounded FIFO of plot samples with its own plot clock."""

    def __init__(self, x_axis="time", y_axis="theta2", capacity=TRACE_CAPACITY):
        self._check_axis(x_axis)
        self._check_axis(y_axis)
        self.x_axis = x_axis
        self.y_axis = y_axis
        self.time = 0.0
        self._points = deque(maxlen=capacity)

    @staticmethod
    def _check_axis(name):
        if name not in PLOT_VARIABLES:
            raise ValueError(f"Unknown plot variable: {name!r}")

    @property
    def capacity(self) -> int:
        return self._points.maxlen

    @property
    def points(self) -> list[TracePoint]:
        return list(self._points)

    def __len__(self):
        return len(self._points)

    def set_axes(self, x_axis: str, y_axis: str) -> None:
        """Select new plot variables; clears the trace and the plot clock."""
        self._check_axis(x_axis)
        self._check_axis(y_axis)
        self.x_axis = x_axis
        self.y_axis = y_axis
        self.clear()
        logger.info("Plotting %s against %s", y_axis, x_axis)

    def clear(self) -> None:
        self._points.clear()
        self.time = 0.0

    def record(self, state, params: PendulumParams, dt: float) -> TracePoint:
        """Advance the plot clock by ``dt`` and append a sample for ``state``."""
        self.time += dt
        point = TracePoint(
            plot_value(self.x_axis, state, params, self.time),
            plot_value(self.y_axis, state, params, self.time),
            self.time,
        )
        self._points.append(point)
        return point


@dataclass(frozen=True)
class ZoomWindow:
    """A drag-selected rectangle in plot pixel coordinates."""

    start_x: float
    start_y: float
    end_x: float
    end_y: float

    @property
    def is_large_enough(self) -> bool:
        return (
            abs(self.end_x - self.start_x) > MIN_ZOOM_SELECTION
            and abs(self.end_y - self.start_y) > MIN_ZOOM_SELECTION
        )


def autoscale(points, width: float, height: float) -> float:
    """Pixels per plot unit fitting the newest samples around the centre."""
    visible = list(points)[-AUTOSCALE_WINDOW:]
    x_max = max([abs(p.x) for p in visible] + [AUTOSCALE_FLOOR])
    y_max = max([abs(p.y) for p in visible] + [AUTOSCALE_FLOOR])
    return min((width / 2) / x_max, (height / 2) / y_max) * 0.8


def zoom_scale(zoom: ZoomWindow, width: float, height: float) -> float:
    """Pixels per plot unit for a fixed zoom box."""
    x_range = abs(zoom.end_x - zoom.start_x)
    y_range = abs(zoom.end_y - zoom.start_y)
    return min(width / x_range, height / y_range) * 0.4
