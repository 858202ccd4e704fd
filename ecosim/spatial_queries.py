"""
Spatial Index Adapter API

Provides a stable interface for first-found and radius neighbor queries.
Grid backend: uniform square cells, rebuilt from scratch every tick.
Linear backend: O(n) scan over the whole population (A/B comparison).

Both backends answer find_nearest() with the FIRST match in scan order,
not the closest one. Feeding only needs to know that some prey is in reach.
"""

import numpy as np
import time
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .organism import Organism
from .data_types import Kind
from .spatial import cell_key
from .constants import GRID_SIZE, USE_GRID


CellKey = Tuple[int, int]


# ============================================================================
# O(n) Fallback Implementations
# ============================================================================

def find_nearest_by_kind(
    source: Organism,
    kind: Kind,
    all_organisms: Iterable[Organism],
    max_distance: float
) -> Optional[Organism]:
    """
    Find first organism of kind within max_distance of source.

    Args:
        source: Reference organism (never returned)
        kind: Kind to search for
        all_organisms: Candidates in scan order
        max_distance: Exclusive distance limit

    Returns:
        First matching organism in scan order, or None
    """
    for organism in all_organisms:
        if organism.kind is not kind or organism is source:
            continue
        if source.distance_to(organism) < max_distance:
            return organism
    return None


def neighbors_within(
    source: Organism,
    radius: float,
    all_organisms: Iterable[Organism],
    kind: Optional[Kind] = None
) -> List[Organism]:
    """
    Find all organisms within radius of source.

    Args:
        source: Reference organism (excluded from result)
        radius: Exclusive search radius in pixels
        all_organisms: Candidates in scan order
        kind: Optional kind filter

    Returns:
        Matching organisms in scan order
    """
    neighbors = []

    for organism in all_organisms:
        if organism is source:
            continue
        if kind is not None and organism.kind is not kind:
            continue
        if source.distance_to(organism) < radius:
            neighbors.append(organism)

    return neighbors


# ============================================================================
# SpatialIndexAdapter Class with uniform grid
# ============================================================================

class SpatialIndexAdapter:
    """
    Spatial index adapter with stable API.

    Backend selection via constants.USE_GRID:
    - True: uniform grid, queries scan the source cell and its 8 neighbors
    - False: O(n) fallback over the organism list

    Cells are keyed by integer (cx, cy) tuples. Each bucket keeps organisms
    in list order, so scans are reproducible for a given population order.
    """

    def __init__(self, cell_size: Optional[float] = None, use_grid: Optional[bool] = None):
        """
        Initialize spatial adapter.

        Args:
            cell_size: Override GRID_SIZE constant (for testing)
            use_grid: Override USE_GRID constant (for testing)
        """
        self._cell_size = float(cell_size if cell_size is not None else GRID_SIZE)
        if self._cell_size <= 0.0:
            raise ValueError("cell_size must be positive")
        self._use_grid = use_grid if use_grid is not None else USE_GRID

        self._organisms: List[Organism] = []
        self._cells: Dict[CellKey, List[Organism]] = {}

        # Build sequence counter (incremented on every build)
        self._build_seq: int = 0

        # Build timing (for performance breakdown logging)
        self.last_build_ms: float = 0.0

    @property
    def cell_size(self) -> float:
        return self._cell_size

    @property
    def use_grid(self) -> bool:
        return self._use_grid

    @property
    def build_seq(self) -> int:
        return self._build_seq

    @property
    def cell_count(self) -> int:
        """Number of occupied cells in the last build"""
        return len(self._cells)

    def __len__(self) -> int:
        return len(self._organisms)

    def cell_of(self, position: np.ndarray) -> CellKey:
        return cell_key(position, self._cell_size)

    def build(self, organisms: List[Organism]):
        """
        Rebuild the index from scratch.

        Buckets are filled in list order. The index keeps references, so
        organisms that move after the build stay in their old bucket until
        the next build.

        Args:
            organisms: Current population
        """
        start = time.perf_counter()

        self._organisms = list(organisms)

        if self._use_grid:
            cells = defaultdict(list)
            for organism in self._organisms:
                cells[self.cell_of(organism.position)].append(organism)
            self._cells = dict(cells)
        else:
            self._cells = {}

        self._build_seq += 1
        self.last_build_ms = (time.perf_counter() - start) * 1000.0

    def _block(self, position: np.ndarray) -> Iterator[Organism]:
        """Yield organisms of the 3x3 cell block around position, x-major order"""
        cx, cy = self.cell_of(position)
        for x in range(cx - 1, cx + 2):
            for y in range(cy - 1, cy + 2):
                bucket = self._cells.get((x, y))
                if bucket:
                    yield from bucket

    def candidates(self, position: np.ndarray) -> Iterable[Organism]:
        """Organisms a query at position would scan, in scan order"""
        if self._use_grid:
            return self._block(position)
        return self._organisms

    def find_nearest(
        self,
        source: Organism,
        kind: Kind,
        max_distance: float
    ) -> Optional[Organism]:
        """
        Find first organism of kind within max_distance of source.

        Scan order is the source's cell and its 8 neighbors, columns
        cx-1..cx+1 outer and rows cy-1..cy+1 inner, buckets in insertion
        order. The first hit wins even if a closer one exists later.

        Args:
            source: Reference organism (never returned)
            kind: Kind to search for
            max_distance: Exclusive distance limit

        Returns:
            First matching organism, or None
        """
        return find_nearest_by_kind(source, kind, self.candidates(source.position), max_distance)

    def neighbors_within(
        self,
        source: Organism,
        radius: float,
        kind: Optional[Kind] = None
    ) -> List[Organism]:
        """
        Find all organisms within radius of source.

        With the grid backend only the 3x3 block is scanned, so radii larger
        than one cell can miss organisms further out.

        Args:
            source: Reference organism (excluded)
            radius: Exclusive search radius in pixels
            kind: Optional kind filter

        Returns:
            Matching organisms in scan order
        """
        return neighbors_within(source, radius, self.candidates(source.position), kind)

    def link_pairs(self, radius: float) -> List[Tuple[Organism, Organism]]:
        """
        Unordered pairs of indexed organisms closer than radius.

        Feeds the link overlay of renderers. Each pair is reported once,
        in the order its first member was indexed.
        """
        pairs = []
        order = {id(organism): row for row, organism in enumerate(self._organisms)}

        for organism in self._organisms:
            row = order[id(organism)]
            for other in self.neighbors_within(organism, radius):
                if order.get(id(other), -1) > row:
                    pairs.append((organism, other))

        return pairs
