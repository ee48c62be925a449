"""Closed real intervals used for hit distances and clamping.

An Interval bounds the parametric distances an intersection query accepts
and also clamps texture coordinates and colors into range.
"""

import taichi as ti


@ti.dataclass
class Interval:
    """A [min, max] interval on the real line.

    Attributes:
        min: Lower bound.
        max: Upper bound. An interval with max < min is empty.
    """

    min: ti.f32
    max: ti.f32


@ti.func
def make_interval(lo: ti.f32, hi: ti.f32) -> Interval:
    """Create an interval from its bounds."""
    return Interval(min=lo, max=hi)


@ti.func
def interval_contains(interval: Interval, x: ti.f32) -> ti.i32:
    """Return 1 if min <= x <= max."""
    return interval.min <= x and x <= interval.max


@ti.func
def interval_surrounds(interval: Interval, x: ti.f32) -> ti.i32:
    """Return 1 if min < x < max (open interval test)."""
    return interval.min < x and x < interval.max


@ti.func
def interval_clamp(interval: Interval, x: ti.f32) -> ti.f32:
    """Project x into the interval."""
    result = x
    if x < interval.min:
        result = interval.min
    if x > interval.max:
        result = interval.max
    return result
