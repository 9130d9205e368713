"""
Kepler Solver Module

Solves Kepler's equation M = E - e·sin(E) for the eccentric anomaly with
Newton-Raphson iteration, and derives the true anomaly and orbital radius
from the solution.

Numerical notes:
- Initial guess E0 = M. For e = 0 the first step is exactly zero, so E = M.
- The iteration stops once the Newton update falls below the tolerance.
  Convergence is quadratic near the root, so the residual is far below the
  tolerance at that point.
- A hard iteration cap guards against pathological inputs (e very close to 1).
- A non-finite mean anomaly cannot converge and is rejected up front with
  the same ConvergenceError.

References:
- Danby, "Fundamentals of Celestial Mechanics", ch. 6
- Vallado, "Fundamentals of Astrodynamics and Applications", algorithm 2
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from ..exceptions import ConvergenceError, InvalidElements


DEFAULT_TOLERANCE = 1e-6  # rad
MAX_ITERATIONS = 100


@dataclass(frozen=True)
class KeplerSolution:
    """Solution of Kepler's equation for one mean anomaly"""
    mean_anomaly: float  # rad
    eccentric_anomaly: float  # rad
    true_anomaly: float  # rad
    radius: float  # same units as the semi-major axis
    iterations: int


def _check_eccentricity(eccentricity: float) -> None:
    if not (0 <= eccentricity < 1):
        raise InvalidElements(
            f"Eccentricity must be in range [0, 1), got {eccentricity}",
            "eccentricity", eccentricity)


def _newton(mean_anomaly: float, eccentricity: float, tolerance: float,
            max_iterations: int) -> Tuple[float, int]:
    """Newton-Raphson iteration from E0 = M; returns (E, iterations used)"""
    _check_eccentricity(eccentricity)
    if not math.isfinite(mean_anomaly):
        raise ConvergenceError(mean_anomaly, eccentricity, 0)

    E = mean_anomaly
    for iteration in range(1, max_iterations + 1):
        delta = (mean_anomaly - (E - eccentricity * math.sin(E))) / \
                (1 - eccentricity * math.cos(E))
        E += delta
        if abs(delta) < tolerance:
            return E, iteration

    raise ConvergenceError(mean_anomaly, eccentricity, max_iterations)


def solve_kepler(mean_anomaly: float, eccentricity: float,
                 tolerance: float = DEFAULT_TOLERANCE,
                 max_iterations: int = MAX_ITERATIONS) -> float:
    """
    Solve Kepler's equation for the eccentric anomaly

    Args:
        mean_anomaly: Mean anomaly M in radians (not necessarily in [0, 2π))
        eccentricity: Orbital eccentricity in [0, 1)
        tolerance: Stop when the Newton update is below this (radians)
        max_iterations: Iteration cap

    Returns:
        Eccentric anomaly E in radians

    Raises:
        InvalidElements: eccentricity outside [0, 1)
        ConvergenceError: the update did not drop below the tolerance within
            max_iterations, or the mean anomaly is not finite
    """
    E, _ = _newton(mean_anomaly, eccentricity, tolerance, max_iterations)
    return E


def solve_kepler_array(mean_anomalies: np.ndarray, eccentricity: float,
                       tolerance: float = DEFAULT_TOLERANCE,
                       max_iterations: int = MAX_ITERATIONS) -> np.ndarray:
    """
    Vectorized Kepler solver for many mean anomalies sharing one eccentricity

    Elements that have already converged are frozen, so each element follows
    exactly the same iteration sequence as solve_kepler().

    Args:
        mean_anomalies: Array of mean anomalies in radians
        eccentricity: Orbital eccentricity in [0, 1)
        tolerance: Newton update tolerance (radians)
        max_iterations: Iteration cap

    Returns:
        Array of eccentric anomalies, same shape as the input
    """
    _check_eccentricity(eccentricity)

    M = np.asarray(mean_anomalies, dtype=float)
    non_finite = ~np.isfinite(M)
    if non_finite.any():
        raise ConvergenceError(float(M[non_finite].flat[0]), eccentricity, 0)

    E = M.copy()
    active = np.ones(M.shape, dtype=bool)

    for _ in range(max_iterations):
        Ea = E[active]
        Ma = M[active]
        delta = (Ma - (Ea - eccentricity * np.sin(Ea))) / (1 - eccentricity * np.cos(Ea))
        E[active] = Ea + delta
        converged = np.abs(delta) < tolerance
        idx = np.flatnonzero(active)
        active[idx[converged]] = False
        if not active.any():
            return E

    worst = M[active].flat[0]
    raise ConvergenceError(float(worst), eccentricity, max_iterations)


def true_anomaly(eccentric_anomaly, eccentricity: float):
    """True anomaly ν from the eccentric anomaly (scalar or array, radians)"""
    return 2 * np.arctan2(np.sqrt(1 + eccentricity) * np.sin(eccentric_anomaly / 2),
                          np.sqrt(1 - eccentricity) * np.cos(eccentric_anomaly / 2))


def orbital_radius(semi_major_axis: float, eccentricity: float, eccentric_anomaly):
    """Distance from the focus, r = a(1 - e·cos E)"""
    return semi_major_axis * (1 - eccentricity * np.cos(eccentric_anomaly))


def kepler_residual(mean_anomaly: float, eccentric_anomaly: float, eccentricity: float) -> float:
    """|M - (E - e·sin E)|"""
    return abs(mean_anomaly - (eccentric_anomaly - eccentricity * math.sin(eccentric_anomaly)))


class KeplerSolver:
    """
    Kepler equation solver with a fixed tolerance and iteration cap.

    Features:
    - Newton-Raphson iteration seeded with E0 = M
    - Scalar and vectorized solving
    - True anomaly and radius derivation
    """

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE,
                 max_iterations: int = MAX_ITERATIONS):
        """
        Initialize solver

        Args:
            tolerance: Newton update tolerance in radians
            max_iterations: Hard cap on iterations per solve
        """
        if tolerance <= 0:
            raise ValueError(f"Tolerance must be positive, got {tolerance}")
        if max_iterations < 1:
            raise ValueError(f"Iteration cap must be at least 1, got {max_iterations}")
        self.tolerance = tolerance
        self.max_iterations = max_iterations

    def eccentric_anomaly(self, mean_anomaly: float, eccentricity: float) -> float:
        return solve_kepler(mean_anomaly, eccentricity, self.tolerance, self.max_iterations)

    def eccentric_anomalies(self, mean_anomalies: np.ndarray, eccentricity: float) -> np.ndarray:
        return solve_kepler_array(mean_anomalies, eccentricity, self.tolerance, self.max_iterations)

    def solve(self, mean_anomaly: float, eccentricity: float,
              semi_major_axis: float = 1.0) -> KeplerSolution:
        """
        Solve for E and derive ν and r

        Args:
            mean_anomaly: Mean anomaly in radians
            eccentricity: Orbital eccentricity
            semi_major_axis: Semi-major axis (scales the radius)

        Returns:
            KeplerSolution
        """
        E, iterations = _newton(mean_anomaly, eccentricity, self.tolerance, self.max_iterations)
        return KeplerSolution(
            mean_anomaly=mean_anomaly,
            eccentric_anomaly=E,
            true_anomaly=float(true_anomaly(E, eccentricity)),
            radius=float(orbital_radius(semi_major_axis, eccentricity, E)),
            iterations=iterations,
        )
