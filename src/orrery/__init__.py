"""
Keplerian Orrery Engine
=======================

Orbital mechanics engine for an interactive solar-system orrery. Given a
body's Keplerian orbital elements and an elapsed simulation time it computes
the body's 3D position, and it samples closed orbit polylines for display.

Main Components:
- Kepler equation solving
- Keplerian position calculation
- Adaptive orbit path sampling
- Simulation clock with rate multiplier and pause
- Spin (self-rotation) integration
- Catalog configuration and data export

Usage:
    >>> from orrery.main import OrreryModel
    >>> model = OrreryModel()
    >>> model.create_system_from_template('solar_system')
    >>> model.advance_to(365.256)
    >>> model.get_summary()
"""

__version__ = "1.0.0"
