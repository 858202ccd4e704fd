"""
Organism runtime representation.

Organisms are created by add commands or by reproduction and exist in the
simulation until their energy runs out. Each organism has a kind, position,
velocity, and an energy budget.
"""

import numpy as np
from dataclasses import dataclass

from .data_types import Kind


@dataclass(eq=False)
class Organism:
    """
    Runtime organism in simulation.

    Compared by identity: two organisms with equal fields are still
    different individuals.

    Attributes:
        organism_id: Unique identifier (monotonic per store)
        kind: Organism kind, fixed for life
        position: 2D position [x, y] in pixels (top-left of bounding box)
        velocity: 2D velocity [dx, dy] in pixels per 60fps frame
        size: Diameter in pixels
        speed: Cap on each velocity component
        energy: Energy budget (removed at <= 0)
        digesting: Digestion countdown in frames (0 = can feed)
        eating_timer: Eating highlight countdown in frames (presentation only)
        born_cycle: Cycle at which the organism was created (presentation only)
    """
    organism_id: int
    kind: Kind
    position: np.ndarray  # [x, y] float64
    velocity: np.ndarray  # [dx, dy] float64
    size: float
    speed: float
    energy: float
    digesting: float = 0.0
    eating_timer: float = 0.0
    born_cycle: int = 0

    def __post_init__(self):
        """Ensure position and velocity are float64 arrays"""
        self.kind = Kind.parse(self.kind)

        if not isinstance(self.position, np.ndarray):
            self.position = np.array(self.position, dtype=np.float64)
        else:
            self.position = self.position.astype(np.float64, copy=False)

        if not isinstance(self.velocity, np.ndarray):
            self.velocity = np.array(self.velocity, dtype=np.float64)
        else:
            self.velocity = self.velocity.astype(np.float64, copy=False)

    @property
    def x(self) -> float:
        return float(self.position[0])

    @property
    def y(self) -> float:
        return float(self.position[1])

    @property
    def alive(self) -> bool:
        return self.energy > 0.0

    @property
    def is_digesting(self) -> bool:
        return self.digesting > 0.0

    def update_position(self, frames: float):
        """
        Advance position using current velocity.

        Args:
            frames: Elapsed time in 60fps frames
        """
        self.position += self.velocity * frames

    def distance_to(self, other: 'Organism') -> float:
        """Euclidean distance between top-left anchors (as the feeding rules measure it)"""
        diff = other.position - self.position
        return float(np.sqrt(np.dot(diff, diff)))

    def to_dict(self) -> dict:
        """
        Serialize organism to JSON-compatible dict.

        Returns:
            Dict with all organism fields
        """
        return {
            'organism_id': self.organism_id,
            'kind': self.kind.value,
            'position': self.position.tolist(),
            'velocity': self.velocity.tolist(),
            'size': float(self.size),
            'speed': float(self.speed),
            'energy': float(self.energy),
            'digesting': float(self.digesting),
            'eating_timer': float(self.eating_timer),
            'born_cycle': self.born_cycle
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Organism':
        """
        Deserialize organism from dict.

        Args:
            data: Dict with organism fields

        Returns:
            Organism instance
        """
        return cls(
            organism_id=data['organism_id'],
            kind=Kind.parse(data['kind']),
            position=np.array(data['position'], dtype=np.float64),
            velocity=np.array(data['velocity'], dtype=np.float64),
            size=data['size'],
            speed=data['speed'],
            energy=data['energy'],
            digesting=data.get('digesting', 0.0),
            eating_timer=data.get('eating_timer', 0.0),
            born_cycle=data.get('born_cycle', 0)
        )
