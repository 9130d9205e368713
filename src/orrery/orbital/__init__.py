"""
Orbital Mechanics Module

This module provides Kepler equation solving, Keplerian position calculation
and orbit path sampling.
"""

from .elements import OrbitalElements
from .kepler import KeplerSolver, solve_kepler
from .state_calculator import OrbitalStateCalculator, OrbitalState, position
from .path_sampler import OrbitPathSampler, OrbitPath, SegmentPolicy

__all__ = [
    "OrbitalElements",
    "KeplerSolver",
    "solve_kepler",
    "OrbitalStateCalculator",
    "OrbitalState",
    "position",
    "OrbitPathSampler",
    "OrbitPath",
    "SegmentPolicy",
]
