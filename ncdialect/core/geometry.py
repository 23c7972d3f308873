"""
Toolpath geometry helpers: segment lengths and feed-based machining time.
Handles linear moves and XY-plane circular interpolation (with optional
helical Z travel).
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


def as_point(point: Sequence[float]) -> np.ndarray:
    """Convert an (x, y, z) sequence to a float array."""
    return np.asarray(point, dtype=np.float64)


def linear_length(start: Sequence[float], end: Sequence[float]) -> float:
    """Straight-line distance between two points."""
    return float(np.linalg.norm(as_point(end) - as_point(start)))


def arc_sweep(
    start: Sequence[float],
    end: Sequence[float],
    center: Sequence[float],
    clockwise: bool,
) -> float:
    """
    Swept angle (radians, positive) of an XY arc from start to end around center.
    Coincident start and end points describe a full circle.
    """
    s, e, c = as_point(start), as_point(end), as_point(center)
    start_angle = np.arctan2(s[1] - c[1], s[0] - c[0])
    end_angle = np.arctan2(e[1] - c[1], e[0] - c[0])
    if clockwise:
        if end_angle >= start_angle:
            end_angle -= 2 * np.pi
    else:
        if end_angle <= start_angle:
            end_angle += 2 * np.pi
    return float(abs(end_angle - start_angle))


def arc_length(
    start: Sequence[float],
    end: Sequence[float],
    center: Sequence[float],
    clockwise: bool,
) -> float:
    """Length of an XY arc given its centre; Z travel makes it a helix."""
    s, e, c = as_point(start), as_point(end), as_point(center)
    radius = np.hypot(s[0] - c[0], s[1] - c[1])
    planar = radius * arc_sweep(s, e, c, clockwise)
    return float(np.hypot(planar, e[2] - s[2]))


def arc_length_from_radius(
    start: Sequence[float],
    end: Sequence[float],
    radius: float,
) -> float:
    """
    Length of the shorter XY arc of a given radius through start and end.
    A chord longer than the diameter is clamped to a half circle.
    """
    s, e = as_point(start), as_point(end)
    radius = abs(radius)
    chord = np.hypot(e[0] - s[0], e[1] - s[1])
    if radius == 0.0:
        planar = chord
    else:
        ratio = min(chord / (2 * radius), 1.0)
        planar = 2 * radius * np.arcsin(ratio)
    return float(np.hypot(planar, e[2] - s[2]))


def machining_time(
    distances: Sequence[float],
    feed_rates: Sequence[float],
) -> float:
    """
    Time in seconds to traverse segments at per-minute feed rates.
    Segments with a non-positive feed contribute nothing.
    """
    d = np.asarray(distances, dtype=np.float64)
    f = np.asarray(feed_rates, dtype=np.float64)
    if d.shape != f.shape:
        raise ValueError(
            f"distances and feed_rates must have the same length ({d.size} != {f.size})"
        )
    if d.size == 0:
        return 0.0
    moving = f > 0
    seconds = np.zeros_like(d)
    seconds[moving] = d[moving] / (f[moving] / 60.0)
    return float(seconds.sum())
