"""
Organism store.

Ordered, mutable collection of organisms and the single source of truth
for population state. Every mutation that creates organisms checks the
per-kind cap and the global entity cap first, so neither is ever exceeded.
"""

import math
import numpy as np
from typing import Dict, Iterator, List, Optional, Union

from .organism import Organism
from .data_types import Kind, SimulationConfig
from .spawning import spawn_organism, spawn_offspring


class OrganismStore:
    """
    Population list with per-kind counts.

    Caps are read from config.caps at call time, so a UI may change them
    between ticks. Lowering a cap below the current population never
    removes anyone; it only leaves no room for additions.

    Invariant: self._counts[kind] == number of stored organisms of kind
    """

    def __init__(self, config: SimulationConfig, rng: np.random.Generator):
        """
        Args:
            config: Simulation configuration (caps, bounds, energy)
            rng: Simulation RNG shared with the step
        """
        self.config = config
        self.rng = rng
        self._organisms: List[Organism] = []
        self._counts: Dict[Kind, int] = {kind: 0 for kind in Kind}
        self._next_id: int = 0

    def __len__(self) -> int:
        return len(self._organisms)

    def __iter__(self) -> Iterator[Organism]:
        return iter(self._organisms)

    @property
    def organisms(self) -> List[Organism]:
        """Live organism list in creation order (read-only by convention)"""
        return self._organisms

    def count(self, kind: Union[Kind, str]) -> int:
        return self._counts[Kind.parse(kind)]

    def counts(self) -> Dict[Kind, int]:
        return dict(self._counts)

    def room_for(self, kind: Union[Kind, str]) -> int:
        """
        Number of organisms of kind that may still be created.

        Minimum of remaining per-kind room and remaining global room,
        never negative.

        Raises:
            UnknownKindError: kind names no organism kind
        """
        kind = Kind.parse(kind)
        kind_room = self.config.caps.for_kind(kind) - self._counts[kind]
        global_room = self.config.max_entities - len(self._organisms)
        return max(0, min(kind_room, global_room))

    def energies(self) -> np.ndarray:
        """(N,) array of current energies"""
        return np.fromiter((o.energy for o in self._organisms), dtype=np.float64, count=len(self._organisms))

    def _allocate_id(self) -> int:
        organism_id = self._next_id
        self._next_id += 1
        return organism_id

    def _append(self, organism: Organism):
        self._organisms.append(organism)
        self._counts[organism.kind] += 1

    def add(self, kind: Union[Kind, str], count: int, born_cycle: int = 0) -> int:
        """
        Create up to count new organisms of kind.

        Silently truncated to the available room. Zero, negative or NaN
        counts create nothing; an infinite count fills the remaining room.

        Args:
            kind: Organism kind (enum member or name)
            count: Requested number
            born_cycle: Current cycle count

        Returns:
            Number of organisms actually created

        Raises:
            UnknownKindError: kind names no organism kind
        """
        kind = Kind.parse(kind)
        if not count > 0:
            return 0

        room = self.room_for(kind)
        actual = room if math.isinf(count) else min(int(count), room)
        if actual <= 0:
            return 0

        for _ in range(actual):
            self._append(spawn_organism(kind, self._allocate_id(), self.config, self.rng, born_cycle))

        return actual

    def add_offspring(self, parent: Organism, born_cycle: int = 0) -> Optional[Organism]:
        """
        Append an offspring of parent if its kind and the world have room.

        The parent is not charged here.

        Returns:
            The new organism, or None when a cap is reached
        """
        if self.room_for(parent.kind) <= 0:
            return None

        offspring = spawn_offspring(parent, self._allocate_id(), self.config, self.rng, born_cycle)
        self._append(offspring)
        return offspring

    def remove_dead(self) -> int:
        """
        Remove every organism with energy <= 0.

        Survivors keep their relative order.

        Returns:
            Number of organisms removed
        """
        before = len(self._organisms)
        survivors = [o for o in self._organisms if o.energy > 0.0]
        removed = before - len(survivors)

        if removed:
            self._organisms = survivors
            self._counts = {kind: 0 for kind in Kind}
            for organism in survivors:
                self._counts[organism.kind] += 1

        return removed

    def reset(self):
        """Remove all organisms"""
        self._organisms = []
        self._counts = {kind: 0 for kind in Kind}
