"""
Simulation Engine Module

Per-frame driver tying the clock, the body collection and the orbital
mechanics components together. All state lives in explicit owned objects
(clock, bodies, focus) rather than module-level globals.

Frame sequence:
1. SimulationClock.tick() converts the real frame delta to simulation days
2. Positions are recomputed from the accumulated days, parents first;
   satellites are offset by their parent's world position
3. Spins advance by the per-body angular step for this frame's day-delta

Orbit paths are sampled once at build time and again only when a body's
elements change.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from ..config.catalog_config import SystemConfig, BodyConfig, InvalidElementsPolicy
from ..exceptions import ConvergenceError, InvalidElements
from ..orbital.elements import OrbitalElements
from ..orbital.kepler import KeplerSolver
from ..orbital.path_sampler import OrbitPathSampler, SegmentPolicy
from ..orbital.state_calculator import OrbitalStateCalculator
from ..orbital.transforms import to_scene_units
from .bodies import Body, BodyCollection, FocusState
from .clock import SimulationClock, rate_from_slider
from .rotation import RotationIntegrator, SpinState


logger = logging.getLogger(__name__)


@dataclass
class FrameUpdate:
    """Outcome of one simulation frame"""
    delta_days: float
    accumulated_days: float
    errors: Dict[str, Exception] = field(default_factory=dict)


@dataclass
class BodySnapshot:
    """Read-only view of one body's state"""
    body_id: str
    name: str
    parent_id: Optional[str]
    position_km: np.ndarray
    position_scene: np.ndarray
    orientation: np.ndarray
    stationary: bool


class OrrerySimulation:
    """
    Orrery simulation driver.

    Features:
    - Catalog-driven construction with per-body error reporting
    - Parents-first position updates with satellite offsets
    - Spin integration from rotation periods
    - Cached orbit paths with explicit rebuilds
    - Focus navigation across bodies
    """

    def __init__(self, bodies: BodyCollection,
                 clock: Optional[SimulationClock] = None,
                 calculator: Optional[OrbitalStateCalculator] = None,
                 sampler: Optional[OrbitPathSampler] = None,
                 integrator: Optional[RotationIntegrator] = None,
                 distance_scale: float = 1.0):
        """
        Initialize simulation

        Args:
            bodies: Body collection (positions and spins are owned per body)
            clock: Simulation clock
            calculator: Position calculator
            sampler: Orbit path sampler
            integrator: Spin integrator
            distance_scale: Kilometers per scene unit for snapshots
        """
        self.bodies = bodies
        self.clock = clock or SimulationClock()
        self.calculator = calculator or OrbitalStateCalculator()
        self.sampler = sampler or OrbitPathSampler(distance_scale=distance_scale)
        self.integrator = integrator or RotationIntegrator()
        self.distance_scale = distance_scale
        self.focus = FocusState(bodies)

    @classmethod
    def from_config(cls, config: SystemConfig) -> "OrrerySimulation":
        """
        Build a simulation from a catalog

        Args:
            config: Validated system configuration

        Returns:
            Simulation with positions at t = 0 and orbit paths sampled

        Raises:
            InvalidElements: a body's elements are invalid and the catalog's
                policy is "raise"
        """
        policy = config.simulation.invalid_elements
        bodies = BodyCollection()
        for body_config in config.bodies:
            bodies.add(cls._build_body(body_config, policy))

        solver = KeplerSolver()
        display_frame = config.display.display_frame
        sampling = config.sampling
        sampler = OrbitPathSampler(
            policy=SegmentPolicy(
                base_segments=sampling.base_segments,
                eccentricity_factor=sampling.eccentricity_factor,
                doubling_threshold=sampling.doubling_threshold,
                overrides=dict(sampling.segment_overrides),
            ),
            solver=solver,
            distance_scale=config.display.distance_scale,
            display_frame=display_frame,
            closure_epsilon=sampling.closure_epsilon,
            refinement_angle=sampling.refinement_angle,
        )
        clock = SimulationClock(rate_multiplier=rate_from_slider(config.simulation.rate_slider),
                                paused=config.simulation.paused)

        simulation = cls(
            bodies=bodies,
            clock=clock,
            calculator=OrbitalStateCalculator(solver=solver, display_frame=display_frame),
            sampler=sampler,
            distance_scale=config.display.distance_scale,
        )
        simulation.build_paths()
        simulation.update_positions()
        logger.info(f"Built simulation '{config.system_name}' with {len(bodies)} bodies")
        return simulation

    @staticmethod
    def _build_body(body_config: BodyConfig, policy: InvalidElementsPolicy) -> Body:
        elements = None
        error = None
        if body_config.orbital_elements is not None:
            try:
                elements = OrbitalElements.from_mapping(body_config.orbital_elements.model_dump())
            except InvalidElements as e:
                if policy == InvalidElementsPolicy.RAISE:
                    raise
                logger.error(f"Invalid orbital elements for '{body_config.id}': {e}; body kept stationary")
                error = e

        spin = SpinState(
            axial_tilt=body_config.axial_tilt,
            rotation_period=body_config.rotation_period,
            rotation_period_unit=body_config.rotation_period_unit.value,
            spin_scale=body_config.spin_scale,
        )
        return Body(
            body_id=body_config.id,
            name=body_config.name,
            kind=body_config.kind.value,
            parent_id=body_config.parent,
            elements=elements,
            spin=spin,
            color=body_config.color_value,
            error=error,
        )

    def build_paths(self) -> None:
        """Sample orbit paths for every body with elements"""
        for body in self.bodies:
            self._sample_body_path(body)

    def _sample_body_path(self, body: Body) -> None:
        if body.is_stationary:
            body.orbit_path = None
            return
        try:
            body.orbit_path = self.sampler.sample_path(body.elements, body_id=body.body_id,
                                                       color=body.color)
        except ConvergenceError as e:
            logger.error(f"Orbit path for '{body.body_id}' could not be sampled: {e}")
            body.orbit_path = None
            body.error = e

    def set_elements(self, body_id: str, elements: OrbitalElements) -> Body:
        """Replace a body's elements and rebuild its orbit path and position"""
        body = self.bodies.get(body_id)
        body.elements = elements
        body.error = None
        self._sample_body_path(body)
        self.update_positions()
        return body

    def rebuild_path(self, body_id: str) -> Body:
        body = self.bodies.get(body_id)
        self._sample_body_path(body)
        return body

    def update_positions(self) -> Dict[str, Exception]:
        """
        Recompute every body's position at the clock's accumulated days

        Returns:
            Convergence errors by body id; those bodies keep their previous position
        """
        errors: Dict[str, Exception] = {}
        days = self.clock.accumulated_days
        for body in self.bodies.update_order:
            if not body.is_stationary:
                try:
                    self.calculator.update_state(body.state, body.elements, days)
                except ConvergenceError as e:
                    logger.warning(f"Position of '{body.body_id}' not updated: {e}")
                    body.error = e
                    errors[body.body_id] = e

            parent = self.bodies.parent_of(body)
            if parent is not None:
                body.world_position[:] = parent.world_position + body.state.position
            else:
                body.world_position[:] = body.state.position
        return errors

    def update(self, real_delta_seconds: float) -> FrameUpdate:
        """
        Advance one frame

        Args:
            real_delta_seconds: Real time since the previous frame

        Returns:
            FrameUpdate with the day-delta and any per-body errors
        """
        delta_days = self.clock.tick(real_delta_seconds)
        errors = self.update_positions()
        if delta_days:
            for body in self.bodies:
                self.integrator.advance(body.spin, delta_days)
        return FrameUpdate(delta_days=delta_days,
                           accumulated_days=self.clock.accumulated_days,
                           errors=errors)

    def advance_to(self, elapsed_days: float) -> FrameUpdate:
        """Jump the clock forward to elapsed_days and update positions and spins"""
        delta_days = elapsed_days - self.clock.accumulated_days
        self.clock.advance_days(delta_days)
        errors = self.update_positions()
        for body in self.bodies:
            self.integrator.advance(body.spin, delta_days)
        return FrameUpdate(delta_days=delta_days,
                           accumulated_days=self.clock.accumulated_days,
                           errors=errors)

    def set_rate_slider(self, value: float) -> float:
        return self.clock.set_rate_from_slider(value)

    def toggle_pause(self) -> bool:
        return self.clock.toggle_pause()

    def snapshot(self) -> List[BodySnapshot]:
        """Current state of every body in catalog order"""
        return [
            BodySnapshot(
                body_id=body.body_id,
                name=body.name,
                parent_id=body.parent_id,
                position_km=body.world_position.copy(),
                position_scene=to_scene_units(body.world_position, self.distance_scale),
                orientation=body.orientation.copy(),
                stationary=body.is_stationary,
            )
            for body in self.bodies
        ]

    def failed_bodies(self) -> Dict[str, Exception]:
        return {body.body_id: body.error for body in self.bodies if body.error is not None}
