"""
Simulation Module

This module provides the simulation clock, spin integration, the body
collection and the per-frame simulation driver.
"""

from .clock import SimulationClock, rate_from_slider
from .rotation import RotationIntegrator, SpinState
from .bodies import Body, BodyCollection, FocusState
from .engine import OrrerySimulation, FrameUpdate

__all__ = [
    "SimulationClock",
    "rate_from_slider",
    "RotationIntegrator",
    "SpinState",
    "Body",
    "BodyCollection",
    "FocusState",
    "OrrerySimulation",
    "FrameUpdate",
]
