"""
Catalog Configuration Module

This module handles body catalog configuration, validation, and templates.
A catalog lists the bodies of a system (star, planets, satellites) with their
orbital elements, spin parameters and display settings, plus the sampling,
display and simulation settings of the engine.

Physical validation of orbital elements is left to OrbitalElements so that
one malformed body does not reject an otherwise usable catalog; the
simulation reports such bodies individually.

References:
- NASA Planetary Fact Sheets (https://nssdc.gsfc.nasa.gov/planetary/factsheet/)
- JPL Solar System Dynamics (https://ssd.jpl.nasa.gov/)
"""

import copy
import json
import math
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Any, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator


class BodyKind(str, Enum):
    """Supported body kinds"""
    STAR = "star"
    PLANET = "planet"
    DWARF_PLANET = "dwarf_planet"
    SATELLITE = "satellite"


class RotationUnit(str, Enum):
    HOURS = "hours"
    DAYS = "days"


class InvalidElementsPolicy(str, Enum):
    """What the simulation does with a body whose elements are rejected"""
    STATIONARY = "stationary"
    RAISE = "raise"


class OrbitalElementsConfig(BaseModel):
    """Raw Keplerian elements as written in a catalog"""
    semi_major_axis: float = Field(..., description="Semi-major axis (km)")
    eccentricity: float = Field(..., description="Eccentricity")
    inclination: float = Field(0.0, description="Inclination (degrees)")
    longitude_of_ascending_node: float = Field(0.0, description="Longitude of ascending node (degrees)")
    argument_of_periapsis: float = Field(0.0, description="Argument of periapsis (degrees)")
    mean_anomaly_at_epoch: float = Field(0.0, description="Mean anomaly at epoch (degrees)")
    orbital_period: float = Field(..., description="Orbital period (days)")


class BodyConfig(BaseModel):
    """One body of the catalog"""
    id: str = Field(..., min_length=1, description="Stable body identifier")
    name: Optional[str] = Field(None, description="Display name")
    kind: BodyKind = Field(BodyKind.PLANET, description="Body kind")
    parent: Optional[str] = Field(None, description="Identifier of the body this one orbits")
    orbital_elements: Optional[OrbitalElementsConfig] = Field(None, description="Keplerian elements; omit for a stationary body")
    axial_tilt: float = Field(0.0, description="Axial tilt (degrees)")
    rotation_period: Optional[float] = Field(None, description="Signed rotation period, negative is retrograde")
    rotation_period_unit: RotationUnit = Field(RotationUnit.DAYS, description="Unit of rotation_period")
    spin_scale: float = Field(1.0, gt=0, description="Visual spin exaggeration")
    orbit_color: str = Field("#ffffff", description="Orbit path color as #rrggbb")

    @field_validator('orbit_color')
    @classmethod
    def validate_color(cls, v):
        value = v.strip().lower()
        if value.startswith('0x'):
            value = '#' + value[2:]
        if len(value) != 7 or not value.startswith('#'):
            raise ValueError(f"Color must be #rrggbb, got {v}")
        int(value[1:], 16)
        return value

    @model_validator(mode='after')
    def default_name(self):
        if self.name is None:
            self.name = self.id.capitalize()
        return self

    @property
    def color_value(self) -> int:
        return int(self.orbit_color[1:], 16)


class SamplingConfig(BaseModel):
    """Orbit path sampling settings"""
    base_segments: int = Field(10000, ge=1, description="Base segment count")
    eccentricity_factor: float = Field(5.0, ge=0, description="Segment growth per unit eccentricity")
    doubling_threshold: float = Field(0.1, ge=0, description="Eccentricity above which segments are doubled")
    closure_epsilon: float = Field(0.001, gt=0, description="Maximum first/last gap (scene units)")
    refinement_angle: float = Field(0.1, gt=0, description="Angle (rad) above which a midpoint is inserted")
    segment_overrides: Dict[str, int] = Field(default_factory=dict, description="Minimum segments per body id")

    @field_validator('segment_overrides')
    @classmethod
    def validate_overrides(cls, v):
        for body_id, segments in v.items():
            if segments < 1:
                raise ValueError(f"Segment override for {body_id} must be at least 1")
        return v


class DisplayConfig(BaseModel):
    """Display conventions"""
    distance_scale: float = Field(1.0e7, gt=0, description="Kilometers per scene unit")
    display_frame: bool = Field(True, description="Rotate outputs +90° about X for a Y-up host")

    @field_validator('distance_scale')
    @classmethod
    def validate_scale(cls, v):
        if not math.isfinite(v):
            raise ValueError("Distance scale must be finite")
        return v


class SimulationSettings(BaseModel):
    """Initial clock state and error policy"""
    rate_slider: float = Field(0.0, ge=-10, le=10, description="Logarithmic rate slider value")
    paused: bool = Field(False, description="Start paused")
    invalid_elements: InvalidElementsPolicy = Field(InvalidElementsPolicy.STATIONARY,
                                                    description="Handling of bodies with invalid elements")


class SystemConfig(BaseModel):
    """Complete catalog configuration"""
    model_config = ConfigDict(extra="forbid")

    system_name: str = Field(..., description="System name")
    description: Optional[str] = Field(None, description="System description")
    version: str = Field("1.0", description="Configuration version")
    bodies: List[BodyConfig] = Field(..., min_length=1)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)

    @model_validator(mode='after')
    def validate_hierarchy(self):
        """Body ids are unique, parents exist, and parent links have no cycles"""
        ids = [body.id for body in self.bodies]
        duplicates = sorted({body_id for body_id in ids if ids.count(body_id) > 1})
        if duplicates:
            raise ValueError(f"Duplicate body ids: {', '.join(duplicates)}")

        parents = {body.id: body.parent for body in self.bodies}
        for body in self.bodies:
            if body.parent is not None and body.parent not in parents:
                raise ValueError(f"Parent '{body.parent}' of '{body.id}' is not in the catalog")

            seen = {body.id}
            current = body.parent
            while current is not None:
                if current in seen:
                    raise ValueError(f"Parent cycle involving '{body.id}'")
                seen.add(current)
                current = parents[current]
        return self

    def body(self, body_id: str) -> BodyConfig:
        for body in self.bodies:
            if body.id == body_id:
                return body
        raise KeyError(body_id)


class CatalogConfig:
    """
    Catalog configuration management system.

    Features:
    - JSON/YAML catalog loading and validation
    - Built-in system templates
    - Template overrides
    - Catalog export and summaries
    """

    def __init__(self):
        """Initialize catalog configuration manager"""
        self.config: Optional[SystemConfig] = None
        self.templates = self._load_default_templates()

    def load_config(self, filepath: Union[str, Path]) -> SystemConfig:
        """
        Load catalog from file

        Args:
            filepath: Path to a .json, .yaml or .yml file

        Returns:
            Validated system configuration
        """
        path = Path(filepath)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                if path.suffix.lower() in ['.yaml', '.yml']:
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ValueError(f"Error parsing configuration {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Configuration {filepath} must contain a mapping at the top level")

        self.config = self.validate_config(data)
        return self.config

    def save_config(self, config: SystemConfig, filepath: Union[str, Path], format: str = "json"):
        """
        Save catalog to file

        Args:
            config: Configuration to save
            filepath: Output file path
            format: Output format ("json" or "yaml")
        """
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = config.model_dump(mode='json')

        with open(path, 'w', encoding='utf-8') as f:
            if format.lower() in ['yaml', 'yml']:
                yaml.safe_dump(data, f, default_flow_style=False, indent=2, sort_keys=False)
            else:
                json.dump(data, f, indent=2)

    def validate_config(self, config_data: Dict) -> SystemConfig:
        """
        Validate catalog data

        Args:
            config_data: Catalog dictionary

        Returns:
            Validated configuration
        """
        try:
            return SystemConfig(**config_data)
        except ValidationError as e:
            raise ValueError(f"Invalid catalog configuration: {e}") from e

    def create_from_template(self, template_name: str, **kwargs) -> SystemConfig:
        """
        Create configuration from a built-in template

        Args:
            template_name: Name of template
            **kwargs: Top-level sections to override (deep-merged)

        Returns:
            Validated configuration
        """
        if template_name not in self.templates:
            raise ValueError(f"Template not found: {template_name}")

        template_data = copy.deepcopy(self.templates[template_name])
        self._deep_update(template_data, kwargs)

        self.config = self.validate_config(template_data)
        return self.config

    def get_config_schema(self) -> Dict:
        return SystemConfig.model_json_schema()

    def list_templates(self) -> List[str]:
        return list(self.templates.keys())

    def generate_config_summary(self, config: SystemConfig) -> Dict[str, Any]:
        """
        Generate catalog summary

        Args:
            config: System configuration

        Returns:
            Summary dictionary
        """
        orbiting = [b for b in config.bodies if b.orbital_elements is not None]
        return {
            'system_name': config.system_name,
            'description': config.description,
            'body_count': len(config.bodies),
            'orbiting_bodies': len(orbiting),
            'stationary_bodies': [b.id for b in config.bodies if b.orbital_elements is None],
            'satellites': {b.id: b.parent for b in config.bodies if b.parent is not None},
            'sampling': {
                'base_segments': config.sampling.base_segments,
                'segment_overrides': dict(config.sampling.segment_overrides),
            },
            'display': {
                'distance_scale_km': config.display.distance_scale,
                'display_frame': config.display.display_frame,
            },
            'simulation': {
                'rate_slider': config.simulation.rate_slider,
                'paused': config.simulation.paused,
                'invalid_elements': config.simulation.invalid_elements.value,
            },
        }

    def _deep_update(self, base_dict: Dict, update_dict: Dict):
        """Deep update dictionary"""
        for key, value in update_dict.items():
            if key in base_dict and isinstance(base_dict[key], dict) and isinstance(value, dict):
                self._deep_update(base_dict[key], value)
            else:
                base_dict[key] = value

    def _load_default_templates(self) -> Dict[str, Dict]:
        """Load default system templates"""
        solar_system_bodies = [
            {
                "id": "sun", "name": "Sun", "kind": "star",
                "axial_tilt": 7.25, "rotation_period": 27, "rotation_period_unit": "days",
            },
            {
                "id": "mercury", "name": "Mercury",
                "orbital_elements": {
                    "semi_major_axis": 57909050, "eccentricity": 0.205630,
                    "inclination": 7.005, "longitude_of_ascending_node": 48.331,
                    "argument_of_periapsis": 29.124, "mean_anomaly_at_epoch": 174.796,
                    "orbital_period": 87.9691,
                },
                "axial_tilt": 0.034, "rotation_period": 58.646, "rotation_period_unit": "days",
                "orbit_color": "#aaaaaa",
            },
            {
                "id": "venus", "name": "Venus",
                "orbital_elements": {
                    "semi_major_axis": 108208000, "eccentricity": 0.006772,
                    "inclination": 3.39458, "longitude_of_ascending_node": 76.680,
                    "argument_of_periapsis": 54.884, "mean_anomaly_at_epoch": 50.115,
                    "orbital_period": 224.701,
                },
                "axial_tilt": 177.36, "rotation_period": -243, "rotation_period_unit": "days",
                "orbit_color": "#ffaa00",
            },
            {
                "id": "earth", "name": "Earth",
                "orbital_elements": {
                    "semi_major_axis": 149598319, "eccentricity": 0.0167086,
                    "inclination": 0.00005, "longitude_of_ascending_node": -11.26064,
                    "argument_of_periapsis": 114.20783, "mean_anomaly_at_epoch": 357.51716,
                    "orbital_period": 365.256,
                },
                "axial_tilt": 23.44, "rotation_period": 23.934, "rotation_period_unit": "hours",
                "orbit_color": "#0000ff",
            },
            {
                "id": "moon", "name": "Moon", "kind": "satellite", "parent": "earth",
                "orbital_elements": {
                    "semi_major_axis": 384399, "eccentricity": 0.0549,
                    "inclination": 5.145, "longitude_of_ascending_node": 125.08,
                    "argument_of_periapsis": 318.15, "mean_anomaly_at_epoch": 135.27,
                    "orbital_period": 27.321661,
                },
                "axial_tilt": 6.68, "rotation_period": 27.321661, "rotation_period_unit": "days",
                "orbit_color": "#cccccc",
            },
            {
                "id": "mars", "name": "Mars",
                "orbital_elements": {
                    "semi_major_axis": 227939200, "eccentricity": 0.0934,
                    "inclination": 1.850, "longitude_of_ascending_node": 49.558,
                    "argument_of_periapsis": 286.502, "mean_anomaly_at_epoch": 19.412,
                    "orbital_period": 686.980,
                },
                "axial_tilt": 25.19, "rotation_period": 24.62, "rotation_period_unit": "hours",
                "orbit_color": "#ff0000",
            },
            {
                "id": "phobos", "name": "Phobos", "kind": "satellite", "parent": "mars",
                "orbital_elements": {
                    "semi_major_axis": 9376, "eccentricity": 0.0151,
                    "inclination": 1.093, "longitude_of_ascending_node": 16.946,
                    "argument_of_periapsis": 157.116, "mean_anomaly_at_epoch": 91.059,
                    "orbital_period": 0.31891023,
                },
                "axial_tilt": 0.0, "rotation_period": 7.65, "rotation_period_unit": "hours",
                "orbit_color": "#696969",
            },
            {
                "id": "jupiter", "name": "Jupiter",
                "orbital_elements": {
                    "semi_major_axis": 778570000, "eccentricity": 0.0489,
                    "inclination": 1.303, "longitude_of_ascending_node": 100.464,
                    "argument_of_periapsis": 273.867, "mean_anomaly_at_epoch": 20.020,
                    "orbital_period": 4332.59,
                },
                "axial_tilt": 3.13, "rotation_period": 9.93, "rotation_period_unit": "hours",
                "orbit_color": "#ffa500",
            },
            {
                "id": "saturn", "name": "Saturn",
                "orbital_elements": {
                    "semi_major_axis": 1433530000, "eccentricity": 0.0565,
                    "inclination": 2.485, "longitude_of_ascending_node": 113.665,
                    "argument_of_periapsis": 339.392, "mean_anomaly_at_epoch": 317.020,
                    "orbital_period": 10759.22,
                },
                "axial_tilt": 26.73, "rotation_period": 10.66, "rotation_period_unit": "hours",
                "orbit_color": "#ffd700",
            },
            {
                "id": "uranus", "name": "Uranus",
                "orbital_elements": {
                    "semi_major_axis": 2872460000, "eccentricity": 0.04717,
                    "inclination": 0.773, "longitude_of_ascending_node": 74.006,
                    "argument_of_periapsis": 96.998857, "mean_anomaly_at_epoch": 142.2386,
                    "orbital_period": 30688.5,
                },
                "axial_tilt": 97.77, "rotation_period": -17, "rotation_period_unit": "hours",
                "orbit_color": "#40e0d0",
            },
            {
                "id": "neptune", "name": "Neptune",
                "orbital_elements": {
                    "semi_major_axis": 4495060000, "eccentricity": 0.008678,
                    "inclination": 1.770, "longitude_of_ascending_node": 131.783,
                    "argument_of_periapsis": 273.187, "mean_anomaly_at_epoch": 256.228,
                    "orbital_period": 60195,
                },
                "axial_tilt": 28.32, "rotation_period": 16.08, "rotation_period_unit": "hours",
                "orbit_color": "#0000ff",
            },
            {
                "id": "pluto", "name": "Pluto", "kind": "dwarf_planet",
                "orbital_elements": {
                    "semi_major_axis": 5906440628, "eccentricity": 0.2488,
                    "inclination": 17.16, "longitude_of_ascending_node": 110.299,
                    "argument_of_periapsis": 113.834, "mean_anomaly_at_epoch": 14.53,
                    "orbital_period": 90560,
                },
                "axial_tilt": 122.53, "rotation_period": 6.39, "rotation_period_unit": "days",
                "orbit_color": "#8a2be2",
            },
        ]

        solar_system = {
            "system_name": "Solar_System",
            "description": "Sun, eight planets, Pluto, the Moon and Phobos (J2000 mean elements)",
            "bodies": solar_system_bodies,
            "sampling": {
                "base_segments": 10000,
                "segment_overrides": {
                    "pluto": 1000000,
                    "neptune": 50000,
                    "uranus": 50000,
                    "phobos": 50000,
                },
            },
            "display": {"distance_scale": 1.0e7, "display_frame": True},
            "simulation": {"rate_slider": 0.0, "paused": False, "invalid_elements": "stationary"},
        }

        inner_ids = {"sun", "mercury", "venus", "earth", "moon", "mars"}
        inner_planets = {
            "system_name": "Inner_Planets",
            "description": "Sun and the terrestrial planets with the Moon",
            "bodies": [body for body in solar_system_bodies if body["id"] in inner_ids],
            "sampling": {"base_segments": 2000},
            "display": {"distance_scale": 1.0e6, "display_frame": True},
        }

        return {
            "solar_system": solar_system,
            "inner_planets": copy.deepcopy(inner_planets),
        }
