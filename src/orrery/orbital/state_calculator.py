"""
Orbital State Calculator Module

Converts elapsed simulation time and Keplerian orbital elements into a 3D
Cartesian position. The calculation is a pure function of its inputs.

Steps:
1. Mean motion n = 2π / T (rad/day)
2. Mean anomaly M = n·t + M0 (not wrapped into [0, 2π))
3. Eccentric anomaly, true anomaly and radius from the Kepler solver
4. Orbital-plane position (r·cos ν, r·sin ν, 0)
5. Rotation into the reference frame: Rz(Ω) · Rx(i) · Rz(ω)
6. Display-frame correction (X by 90°), a rendering convention only

References:
- Vallado, "Fundamentals of Astrodynamics and Applications", algorithm 10
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .elements import OrbitalElements
from .kepler import KeplerSolver, true_anomaly, orbital_radius
from .transforms import orbital_to_display_matrix


TWO_PI = 2 * math.pi


def mean_anomaly(elements: OrbitalElements, elapsed_days: float) -> float:
    """Mean anomaly in radians at elapsed_days after epoch (unwrapped)"""
    return elements.mean_motion * elapsed_days + elements.mean_anomaly_at_epoch_rad


def reduce_mean_anomaly(value: float) -> float:
    """Wrap a mean anomaly into [0, 2π) to limit precision loss in long sessions"""
    return math.fmod(value, TWO_PI) % TWO_PI


def orientation_matrix(elements: OrbitalElements, display_frame: bool = True) -> np.ndarray:
    """Rotation taking orbital-plane coordinates to the output frame for these elements"""
    return orbital_to_display_matrix(elements.longitude_of_ascending_node_rad,
                                     elements.inclination_rad,
                                     elements.argument_of_periapsis_rad,
                                     display_frame=display_frame)


@dataclass
class OrbitalState:
    """Position of one body, overwritten in place every tick"""
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    elapsed_days: float = 0.0


class OrbitalStateCalculator:
    """
    Keplerian position calculator.

    Features:
    - Pure position(elements, elapsed_days) calculation
    - Optional display-frame correction (+90° about X)
    - In-place state updates for per-frame use
    - Batch and time-series propagation
    """

    def __init__(self, solver: Optional[KeplerSolver] = None, display_frame: bool = True):
        """
        Initialize calculator

        Args:
            solver: Kepler solver (default tolerance and iteration cap if omitted)
            display_frame: Apply the display-frame correction to outputs
        """
        self.solver = solver or KeplerSolver()
        self.display_frame = display_frame

    def orbital_plane_position(self, elements: OrbitalElements,
                               elapsed_days: float) -> np.ndarray:
        """
        Position in the orbital plane, before any rotation

        Args:
            elements: Orbital elements
            elapsed_days: Days since epoch

        Returns:
            [x_orb, y_orb, 0] in km
        """
        e = elements.eccentricity
        E = self.solver.eccentric_anomaly(mean_anomaly(elements, elapsed_days), e)
        nu = true_anomaly(E, e)
        r = orbital_radius(elements.semi_major_axis, e, E)
        return np.array([r * math.cos(nu), r * math.sin(nu), 0.0])

    def position(self, elements: OrbitalElements, elapsed_days: float) -> np.ndarray:
        """
        Position at elapsed_days after epoch

        Args:
            elements: Orbital elements
            elapsed_days: Days since epoch

        Returns:
            3D position in km
        """
        matrix = orientation_matrix(elements, self.display_frame)
        return matrix @ self.orbital_plane_position(elements, elapsed_days)

    def update_state(self, state: OrbitalState, elements: OrbitalElements,
                     elapsed_days: float) -> OrbitalState:
        """Overwrite a body's state in place with its position at elapsed_days"""
        state.position[:] = self.position(elements, elapsed_days)
        state.elapsed_days = elapsed_days
        return state

    def propagate_batch(self, elements: OrbitalElements,
                        times: List[float]) -> np.ndarray:
        """
        Propagate for multiple times (batch processing)

        Args:
            elements: Orbital elements
            times: Elapsed days for each sample

        Returns:
            (N, 3) array of positions in km
        """
        matrix = orientation_matrix(elements, self.display_frame)
        planar = np.array([self.orbital_plane_position(elements, t) for t in times])
        return planar.reshape(-1, 3) @ matrix.T

    def create_time_series(self, elements: OrbitalElements, start_day: float,
                           duration_days: float,
                           step_days: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Create time series of positions

        Args:
            elements: Orbital elements
            start_day: First sample time (days since epoch)
            duration_days: Total time span
            step_days: Time step between samples

        Returns:
            (times, positions) arrays covering [start_day, start_day + duration_days]
        """
        if step_days <= 0:
            raise ValueError(f"Time step must be positive, got {step_days}")
        count = int(math.floor(duration_days / step_days + 1e-9)) + 1
        times = start_day + step_days * np.arange(count)
        return times, self.propagate_batch(elements, times.tolist())


_default_calculator = OrbitalStateCalculator()


def position(elements: OrbitalElements, elapsed_days: float) -> np.ndarray:
    """Display-frame position of a body (module-level convenience)"""
    return _default_calculator.position(elements, elapsed_days)
