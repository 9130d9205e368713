"""
Orbit Path Sampler Module

Generates a closed polyline approximating one full orbit for display. The
polyline is sampled uniformly in mean anomaly, so eccentric orbits get
denser sampling near periapsis where the body moves fastest, and is then
refined where consecutive points subtend a large angle at the focus.

The number of samples follows a segment policy that grows with eccentricity
and can be floored per body through an override table keyed by body id.
These counts are rendering-quality parameters, not physical constants.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np

from .elements import OrbitalElements
from .kepler import KeplerSolver, true_anomaly, orbital_radius
from .state_calculator import orientation_matrix
from .transforms import vector_angle


logger = logging.getLogger(__name__)

DEFAULT_BASE_SEGMENTS = 10000
DEFAULT_CLOSURE_EPSILON = 0.001  # scene units
DEFAULT_REFINEMENT_ANGLE = 0.1  # rad
DEFAULT_COLOR = 0xFFFFFF


@dataclass
class SegmentPolicy:
    """Segment-count policy for orbit path sampling"""
    base_segments: int = DEFAULT_BASE_SEGMENTS
    eccentricity_factor: float = 5.0
    doubling_threshold: float = 0.1
    overrides: Dict[str, int] = field(default_factory=dict)

    def segments_for(self, elements: OrbitalElements, body_id: Optional[str] = None,
                     segment_hint: Optional[int] = None) -> int:
        """
        Number of segments for an orbit

        Args:
            elements: Orbital elements
            body_id: Stable body identifier used for the override table
            segment_hint: Base count replacing the policy default

        Returns:
            Segment count (at least 1)
        """
        base = self.base_segments if segment_hint is None else segment_hint
        if base < 1:
            raise ValueError(f"Segment count must be at least 1, got {base}")

        segments = int(math.floor(base * (1 + elements.eccentricity * self.eccentricity_factor)))
        if elements.eccentricity > self.doubling_threshold:
            segments *= 2

        if body_id is not None and body_id in self.overrides:
            segments = max(segments, self.overrides[body_id])

        return segments


@dataclass(frozen=True)
class OrbitPath:
    """Sampled orbit polyline, read-only once built"""
    points: np.ndarray  # (N, 3) scene units
    color: int = DEFAULT_COLOR
    segments: int = 0
    body_id: Optional[str] = None

    def __post_init__(self):
        self.points.setflags(write=False)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def closure_gap(self) -> float:
        """Distance between the first and last point"""
        return float(np.linalg.norm(self.points[0] - self.points[-1]))


class OrbitPathSampler:
    """
    Orbit path generator.

    Features:
    - Eccentricity-scaled segment counts with per-body floors
    - Vectorized Kepler solving over the whole orbit
    - Forced closure of the polyline
    - Midpoint refinement in high-curvature regions
    """

    def __init__(self, policy: Optional[SegmentPolicy] = None,
                 solver: Optional[KeplerSolver] = None,
                 distance_scale: float = 1.0,
                 display_frame: bool = True,
                 closure_epsilon: float = DEFAULT_CLOSURE_EPSILON,
                 refinement_angle: float = DEFAULT_REFINEMENT_ANGLE):
        """
        Initialize sampler

        Args:
            policy: Segment-count policy
            solver: Kepler solver
            distance_scale: Kilometers per scene unit for the output points
            display_frame: Apply the display-frame correction (+90° about X)
            closure_epsilon: Maximum first/last gap before a closing point is added
            refinement_angle: Angle (rad) above which a midpoint is inserted
        """
        if not math.isfinite(distance_scale) or distance_scale <= 0:
            raise ValueError(f"Distance scale must be positive and finite, got {distance_scale}")
        self.policy = policy or SegmentPolicy()
        self.solver = solver or KeplerSolver()
        self.distance_scale = distance_scale
        self.display_frame = display_frame
        self.closure_epsilon = closure_epsilon
        self.refinement_angle = refinement_angle

    def sample_orbital_plane(self, elements: OrbitalElements, segments: int) -> np.ndarray:
        """
        Sample the orbit in its own plane, before rotation

        Args:
            elements: Orbital elements
            segments: Number of mean-anomaly increments over one revolution

        Returns:
            (segments + 1, 3) array in km; the last sample is at t = 2π
        """
        e = elements.eccentricity
        t = np.linspace(0.0, 2 * math.pi, segments + 1)
        E = self.solver.eccentric_anomalies(t, e)
        nu = true_anomaly(E, e)
        r = orbital_radius(elements.semi_major_axis, e, E)
        return np.column_stack((r * np.cos(nu), r * np.sin(nu), np.zeros_like(r)))

    def sample_path(self, elements: OrbitalElements, segment_hint: Optional[int] = None,
                    body_id: Optional[str] = None, color: int = DEFAULT_COLOR) -> OrbitPath:
        """
        Build the closed, refined orbit polyline

        Args:
            elements: Orbital elements
            segment_hint: Base segment count (policy default if omitted)
            body_id: Stable body identifier for per-body segment floors
            color: Display color as 0xRRGGBB

        Returns:
            OrbitPath in scene units
        """
        segments = self.policy.segments_for(elements, body_id, segment_hint)
        logger.debug(f"Sampling orbit for {body_id or 'anonymous body'} with {segments} segments")

        planar = self.sample_orbital_plane(elements, segments)
        matrix = orientation_matrix(elements, self.display_frame)
        points = (planar @ matrix.T) / self.distance_scale

        points = self.close_path(points)
        points = self.refine_path(points)

        return OrbitPath(points=points, color=color, segments=segments, body_id=body_id)

    def close_path(self, points: np.ndarray) -> np.ndarray:
        """Append a copy of the first point if the polyline is not closed"""
        if len(points) > 2:
            gap = np.linalg.norm(points[0] - points[-1])
            if gap > self.closure_epsilon:
                points = np.vstack((points, points[:1]))
        return points

    def refine_path(self, points: np.ndarray) -> np.ndarray:
        """Insert midpoints between consecutive points subtending more than the refinement angle"""
        if len(points) <= 2:
            return points

        angles = vector_angle(points[:-1], points[1:])
        coarse = np.flatnonzero(angles > self.refinement_angle)
        if coarse.size == 0:
            return points

        midpoints = (points[coarse] + points[coarse + 1]) * 0.5
        return np.insert(points, coarse + 1, midpoints, axis=0)
