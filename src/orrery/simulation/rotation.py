"""
Rotation Integrator Module

Advances a body's self-rotation (its spin quaternion) each tick about a
tilted axis fixed in the parent frame. The per-tick angular step is derived
from the body's rotation period; negative periods denote retrograde spin.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from ..orbital.transforms import (
    quaternion_identity,
    quaternion_from_axis_angle,
    quaternion_multiply,
    quaternion_normalize,
)


HOURS_PER_DAY = 24.0


def tilt_axis(axial_tilt: float) -> np.ndarray:
    """Unit spin axis (sin tilt, cos tilt, 0) for a tilt in degrees"""
    tilt = math.radians(axial_tilt)
    axis = np.array([math.sin(tilt), math.cos(tilt), 0.0])
    return axis / np.linalg.norm(axis)


def rotation_period_days(rotation_period: Optional[float], unit: str = "days") -> Optional[float]:
    """Convert a signed rotation period to days"""
    if rotation_period is None:
        return None
    if unit == "hours":
        return rotation_period / HOURS_PER_DAY
    if unit == "days":
        return rotation_period
    raise ValueError(f"Unknown rotation period unit: {unit}")


def angular_step(rotation_period: Optional[float], delta_days: float,
                 unit: str = "days", spin_scale: float = 1.0) -> float:
    """
    Spin angle for one tick

    Args:
        rotation_period: Signed rotation period (negative = retrograde)
        delta_days: Simulation days elapsed this tick
        unit: "hours" or "days"
        spin_scale: Visual exaggeration applied on top of the physical rate

    Returns:
        Angle in radians (0 for a missing or zero period)
    """
    period = rotation_period_days(rotation_period, unit)
    if not period:
        return 0.0
    step = 2 * math.pi * delta_days / abs(period) * spin_scale
    return -step if period < 0 else step


@dataclass
class SpinState:
    """Self-rotation state of one body"""
    axial_tilt: float = 0.0  # degrees
    rotation_period: Optional[float] = None  # signed, in rotation_period_unit
    rotation_period_unit: str = "days"
    spin_scale: float = 1.0
    orientation: np.ndarray = field(default_factory=quaternion_identity)

    def step_for(self, delta_days: float) -> float:
        return angular_step(self.rotation_period, delta_days,
                            self.rotation_period_unit, self.spin_scale)


class RotationIntegrator:
    """
    Spin integrator.

    The incremental rotation is left-multiplied onto the accumulated
    orientation, so the body turns about the tilt axis as seen in the parent
    frame rather than about its own local axis.
    """

    def spin(self, current: np.ndarray, axial_tilt: float, angular_step: float) -> np.ndarray:
        """
        Apply one tick of spin

        Args:
            current: Current orientation quaternion [w, x, y, z]
            axial_tilt: Axial tilt in degrees
            angular_step: Rotation angle this tick in radians

        Returns:
            New unit orientation quaternion
        """
        increment = quaternion_from_axis_angle(tilt_axis(axial_tilt), angular_step)
        return quaternion_normalize(quaternion_multiply(increment, current))

    def advance(self, state: SpinState, delta_days: float) -> np.ndarray:
        """Advance a body's spin state in place by delta_days of simulation time"""
        step = state.step_for(delta_days)
        if step:
            state.orientation[:] = self.spin(state.orientation, state.axial_tilt, step)
        return state.orientation
