"""
Orbital Elements

Keplerian element set describing a body's orbit around its parent. Angles
are stored in degrees as published in planetary fact sheets; radian views
are provided for the propagation code.

References:
- JPL Solar System Dynamics, "Keplerian Elements for Approximate Positions
  of the Major Planets"
"""

import math
from dataclasses import dataclass, asdict
from typing import Dict, Any, Mapping

from ..exceptions import InvalidElements


@dataclass(frozen=True)
class OrbitalElements:
    """Keplerian orbital elements"""
    semi_major_axis: float  # km
    eccentricity: float
    inclination: float  # degrees
    longitude_of_ascending_node: float  # degrees (Ω)
    argument_of_periapsis: float  # degrees (ω)
    mean_anomaly_at_epoch: float  # degrees (M0)
    orbital_period: float  # days

    def __post_init__(self):
        """Validate orbital elements"""
        for name, value in asdict(self).items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidElements(f"{name} must be a number, got {value!r}", name, value)
            if not math.isfinite(value):
                raise InvalidElements(f"{name} must be finite, got {value}", name, value)
        if self.semi_major_axis <= 0:
            raise InvalidElements(
                f"Semi-major axis must be positive, got {self.semi_major_axis}",
                "semi_major_axis", self.semi_major_axis)
        if self.eccentricity < 0 or self.eccentricity >= 1:
            raise InvalidElements(
                f"Eccentricity must be in range [0, 1), got {self.eccentricity}",
                "eccentricity", self.eccentricity)
        if self.orbital_period <= 0:
            raise InvalidElements(
                f"Orbital period must be positive, got {self.orbital_period}",
                "orbital_period", self.orbital_period)

    @property
    def mean_motion(self) -> float:
        """Mean motion in rad/day"""
        return 2 * math.pi / self.orbital_period

    @property
    def inclination_rad(self) -> float:
        return math.radians(self.inclination)

    @property
    def longitude_of_ascending_node_rad(self) -> float:
        return math.radians(self.longitude_of_ascending_node)

    @property
    def argument_of_periapsis_rad(self) -> float:
        return math.radians(self.argument_of_periapsis)

    @property
    def mean_anomaly_at_epoch_rad(self) -> float:
        return math.radians(self.mean_anomaly_at_epoch)

    @property
    def periapsis(self) -> float:
        """Periapsis distance in km"""
        return self.semi_major_axis * (1 - self.eccentricity)

    @property
    def apoapsis(self) -> float:
        """Apoapsis distance in km"""
        return self.semi_major_axis * (1 + self.eccentricity)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "OrbitalElements":
        """
        Build elements from a mapping of field names to values

        Args:
            data: Mapping with one entry per element field

        Returns:
            Validated OrbitalElements
        """
        try:
            return cls(**{key: data[key] for key in cls.__dataclass_fields__})
        except KeyError as e:
            raise InvalidElements(f"Missing orbital element: {e.args[0]}", e.args[0]) from e
