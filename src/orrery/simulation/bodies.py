"""
Bodies Module

Per-body state (elements, position, spin, orbit path) and the body
collection with its parent/satellite hierarchy and focus navigation.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

import numpy as np

from ..orbital.elements import OrbitalElements
from ..orbital.path_sampler import OrbitPath
from ..orbital.state_calculator import OrbitalState
from .rotation import SpinState


logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Body:
    """A body of the simulated system and the state it owns"""
    body_id: str
    name: str
    kind: str = "planet"
    parent_id: Optional[str] = None
    elements: Optional[OrbitalElements] = None
    spin: SpinState = field(default_factory=SpinState)
    state: OrbitalState = field(default_factory=OrbitalState)
    world_position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    orbit_path: Optional[OrbitPath] = None
    color: int = 0xFFFFFF
    error: Optional[Exception] = None

    @property
    def is_stationary(self) -> bool:
        """Bodies without elements stay at their parent's position (the origin for a root)"""
        return self.elements is None

    @property
    def orientation(self) -> np.ndarray:
        return self.spin.orientation


class BodyCollection:
    """
    Ordered collection of bodies.

    Bodies keep their catalog order for navigation; updates use a
    parents-first order resolved once when the collection is built.
    """

    def __init__(self, bodies: Optional[List[Body]] = None):
        self._bodies: List[Body] = []
        self._index: Dict[str, Body] = {}
        self._update_order: List[Body] = []
        for body in bodies or []:
            self.add(body)

    def add(self, body: Body) -> None:
        if body.body_id in self._index:
            raise ValueError(f"Duplicate body id: {body.body_id}")
        self._bodies.append(body)
        self._index[body.body_id] = body
        try:
            self._update_order = self._resolve_update_order()
        except ValueError:
            self._bodies.pop()
            del self._index[body.body_id]
            raise

    def get(self, body_id: str) -> Body:
        try:
            return self._index[body_id]
        except KeyError:
            raise KeyError(f"Unknown body: {body_id}") from None

    def __contains__(self, body_id: str) -> bool:
        return body_id in self._index

    def __iter__(self) -> Iterator[Body]:
        return iter(self._bodies)

    def __len__(self) -> int:
        return len(self._bodies)

    def __getitem__(self, index: int) -> Body:
        return self._bodies[index]

    @property
    def update_order(self) -> List[Body]:
        return list(self._update_order)

    def parent_of(self, body: Body) -> Optional[Body]:
        if body.parent_id is None:
            return None
        return self._index.get(body.parent_id)

    def satellites_of(self, body_id: str) -> List[Body]:
        return [body for body in self._bodies if body.parent_id == body_id]

    def _resolve_update_order(self) -> List[Body]:
        """Depth-first ordering so every parent precedes its satellites"""
        ordered: List[Body] = []
        placed = set()

        def place(body: Body, chain: tuple):
            if body.body_id in placed:
                return
            if body.body_id in chain:
                raise ValueError(f"Parent cycle involving '{body.body_id}'")
            parent = self.parent_of(body)
            if parent is not None:
                place(parent, chain + (body.body_id,))
            placed.add(body.body_id)
            ordered.append(body)

        for body in self._bodies:
            if body.parent_id is not None and body.parent_id not in self._index:
                logger.warning(f"Parent '{body.parent_id}' of '{body.body_id}' not found; treating as root")
            place(body, ())
        return ordered


class FocusState:
    """
    Currently focused body for camera/info consumers.

    Index -1 is the whole-system view.
    """

    def __init__(self, bodies: BodyCollection):
        self.bodies = bodies
        self.index = -1

    @property
    def focused(self) -> Optional[Body]:
        if 0 <= self.index < len(self.bodies):
            return self.bodies[self.index]
        return None

    def focus(self, index: int) -> Optional[Body]:
        """Focus a body by index; out-of-range indices are ignored"""
        if 0 <= index < len(self.bodies):
            self.index = index
        return self.focused

    def focus_on(self, body_id: str) -> Body:
        body = self.bodies.get(body_id)
        self.index = next(i for i, candidate in enumerate(self.bodies) if candidate is body)
        return body

    def next(self) -> Optional[Body]:
        if not len(self.bodies):
            return None
        self.index = (self.index + 1) % len(self.bodies)
        return self.focused

    def previous(self) -> Optional[Body]:
        if not len(self.bodies):
            return None
        self.index = len(self.bodies) - 1 if self.index <= 0 else self.index - 1
        return self.focused

    def clear(self) -> None:
        self.index = -1
