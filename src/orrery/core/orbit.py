"""Time-parameterized circular orbit model.

Bodies move on circles in the X/Z plane around a fixed reference point (the
sun). The orbit of a body is fully described by its initial position and the
reference position; the radius, initial phase and period are derived once
from those two points and time is never stored, so a position can be
evaluated for any t from scratch.

The period grows linearly with the radius:

    period = 500 + 0.5 * radius

which keeps outer bodies slower without the dynamic range of Kepler's third
law. Positions are therefore exactly periodic:

    position_at(t + period) == position_at(t)   (up to rounding)

Secondary bodies (moons) orbit a primary whose time-varying position serves
as their reference point. Their local offset is tilted out of the X/Z plane
by a fixed angle about the line of nodes (the world X axis) before it is
translated by the primary's position.

A body whose initial position coincides with its reference has radius 0;
atan2(0, 0) is 0 and the body sits on the reference point for all t. This
degenerate case is accepted, not an error.

Example:
    >>> from src.orrery.core.orbit import OrbitBody
    >>> earth = OrbitBody(initial=(30.0, 0.0, 0.0), reference=(-1200.0, 0.0, 0.0))
    >>> earth.radius
    1230.0
    >>> earth.position_at(0.0)
    (30.0, 0.0, 0.0)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import cached_property

import numpy as np
import numpy.typing as npt

Point3 = tuple[float, float, float]

# Base orbital period for a body at radius 0
BASE_PERIOD = 500.0

# Additional period per unit of orbital radius
PERIOD_PER_UNIT_RADIUS = 0.5


def period_for_radius(radius: float) -> float:
    """Orbital period of a circular orbit with the given radius."""
    return BASE_PERIOD + PERIOD_PER_UNIT_RADIUS * radius


@dataclass(frozen=True)
class OrbitBody:
    """A body on a circular orbit around a fixed reference point.

    Attributes:
        initial: Position of the body at t = 0.
        reference: Position of the body being orbited. Fixed for the
            lifetime of the orbit.
    """

    initial: Point3
    reference: Point3

    @cached_property
    def radius(self) -> float:
        """Distance between initial position and reference in the X/Z plane."""
        dx = self.initial[0] - self.reference[0]
        dz = self.initial[2] - self.reference[2]
        return math.hypot(dx, dz)

    @cached_property
    def phase0(self) -> float:
        """Orbital angle at t = 0, measured from +X towards +Z."""
        dx = self.initial[0] - self.reference[0]
        dz = self.initial[2] - self.reference[2]
        return math.atan2(dz, dx)

    @cached_property
    def period(self) -> float:
        """Time for one full revolution."""
        return period_for_radius(self.radius)

    def angle_at(self, t: float) -> float:
        """Orbital angle at time t."""
        return self.phase0 + 2.0 * math.pi * t / self.period

    def offset_at(self, t: float) -> Point3:
        """Position relative to the reference point at time t.

        The Y component is the initial height above the reference, carried
        through unchanged.
        """
        angle = self.angle_at(t)
        return (
            self.radius * math.cos(angle),
            self.initial[1] - self.reference[1],
            self.radius * math.sin(angle),
        )

    def position_at(self, t: float) -> Point3:
        """World-space position at time t."""
        return orbit_position(self, t)


def orbit_position(body: OrbitBody, t: float) -> Point3:
    """Evaluate the world-space position of a body at time t.

    Args:
        body: The orbiting body.
        t: Simulated time, in the same units as the period.

    Returns:
        The position (x, y, z). Y is the initial Y, unchanged.
    """
    angle = body.angle_at(t)
    return (
        body.reference[0] + body.radius * math.cos(angle),
        body.initial[1],
        body.reference[2] + body.radius * math.sin(angle),
    )


def orbit_positions(body: OrbitBody, times: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Evaluate a body's position at many times at once.

    Args:
        body: The orbiting body.
        times: Array-like of simulated times.

    Returns:
        Array of shape (len(times), 3).
    """
    t = np.asarray(times, dtype=np.float64)
    angle = body.phase0 + 2.0 * np.pi * t / body.period
    positions = np.empty(t.shape + (3,), dtype=np.float64)
    positions[..., 0] = body.reference[0] + body.radius * np.cos(angle)
    positions[..., 1] = body.initial[1]
    positions[..., 2] = body.reference[2] + body.radius * np.sin(angle)
    return positions


def _rotate_about_x(v: Point3, angle: float) -> Point3:
    c = math.cos(angle)
    s = math.sin(angle)
    return (v[0], c * v[1] - s * v[2], s * v[1] + c * v[2])


@dataclass(frozen=True)
class SatelliteOrbit:
    """A body orbiting a primary that itself orbits the reference point.

    The satellite's local orbit is defined exactly like an OrbitBody, with the
    primary's initial position as the reference. At time t the local offset
    is rotated by ``tilt`` radians about the X axis and then translated by
    the primary's position at t.

    Attributes:
        primary: The orbit of the body being circled.
        local: The satellite's orbit relative to the primary's initial
            position.
        tilt: Inclination of the satellite's orbital plane, in radians.
    """

    primary: OrbitBody
    local: OrbitBody
    tilt: float = 0.0

    @classmethod
    def around(cls, primary: OrbitBody, initial: Point3, tilt: float = 0.0) -> SatelliteOrbit:
        """Build a satellite orbit from its initial world-space position."""
        return cls(primary=primary, local=OrbitBody(initial=initial, reference=primary.initial), tilt=tilt)

    @property
    def period(self) -> float:
        """Period of the satellite around its primary."""
        return self.local.period

    def offset_at(self, t: float) -> Point3:
        """Tilted position relative to the primary at time t."""
        return _rotate_about_x(self.local.offset_at(t), self.tilt)

    def position_at(self, t: float) -> Point3:
        """World-space position at time t."""
        center = self.primary.position_at(t)
        offset = self.offset_at(t)
        return (center[0] + offset[0], center[1] + offset[1], center[2] + offset[2])
