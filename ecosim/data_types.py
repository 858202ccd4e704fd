"""
Data types for organism kinds, configuration, and stats.

These dataclasses are populated by loader.py from YAML files or built
directly from constants.py defaults.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Optional, Tuple, Union
from enum import Enum

from .constants import (
    WORLD_WIDTH_DEFAULT,
    WORLD_HEIGHT_DEFAULT,
    MAX_ENTITIES,
    GRID_SIZE,
    USE_GRID,
    LOGIC_RATE,
    MAX_STEPS_PER_FRAME,
    FRAME_RATE_SCALE,
    STATS_INTERVAL,
    PLANT_SPAWN_CHANCE,
    DIRECTION_CHANGE_CHANCE,
    REPRODUCE_CHANCE,
    OFFSPRING_JITTER,
    PLANT_GAIN,
    HERBIVORE_GAIN,
    CARNIVORE_GAIN,
    OMNIVORE_PLANT_GAIN,
    OMNIVORE_MEAT_GAIN,
    MOVE_COST,
    BASE_COST,
    REPRODUCE_COST,
    START_ENERGY,
    EATING_PULSE,
    POPULATION_CAPS_DEFAULT,
    INITIAL_POPULATION_DEFAULT,
)


class EcosimError(Exception):
    """Base class for ecosim errors"""
    pass


class UnknownKindError(EcosimError, ValueError):
    """Raised when a kind name is not one of the four organism kinds"""
    pass


# ============================================================================
# Organism Kinds
# ============================================================================

class Kind(str, Enum):
    """Fixed category of an organism"""
    PLANT = 'plant'
    HERBIVORE = 'herbivore'
    CARNIVORE = 'carnivore'
    OMNIVORE = 'omnivore'

    @classmethod
    def parse(cls, value: Union['Kind', str]) -> 'Kind':
        """
        Resolve a Kind from an enum member or its string name.

        Raises:
            UnknownKindError: value names no kind
        """
        if isinstance(value, Kind):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownKindError(f"Unknown organism kind: {value!r}")


@dataclass(frozen=True)
class KindTraits:
    """Per-kind attribute row, looked up once at spawn"""
    size: float  # Diameter in pixels
    speed: float  # Cap on each velocity component
    feed_radius_pad: float = 0.0  # Interaction radius = size + pad
    hunger_factor: float = 0.0  # Feeds while energy < hunger_factor * start_energy
    digest_ticks: float = 0.0  # Digestion countdown after a meal (frames)

    @property
    def mobile(self) -> bool:
        return self.speed > 0.0


KIND_TRAITS: Dict[Kind, KindTraits] = {
    Kind.PLANT: KindTraits(size=10.0, speed=0.0),
    Kind.HERBIVORE: KindTraits(size=15.0, speed=0.8, feed_radius_pad=10.0, hunger_factor=1.5, digest_ticks=5.0),
    Kind.CARNIVORE: KindTraits(size=15.0, speed=1.2, feed_radius_pad=5.0, hunger_factor=0.75, digest_ticks=10.0),
    Kind.OMNIVORE: KindTraits(size=15.0, speed=1.0, feed_radius_pad=5.0, hunger_factor=0.75, digest_ticks=10.0),
}


# ============================================================================
# Configuration
# ============================================================================

@dataclass
class EnergyConfig:
    """Energy gain and cost amounts (per 60fps frame where time-scaled)"""
    plant_gain: float = PLANT_GAIN
    herbivore_gain: float = HERBIVORE_GAIN
    carnivore_gain: float = CARNIVORE_GAIN
    omnivore_plant_gain: float = OMNIVORE_PLANT_GAIN
    omnivore_meat_gain: float = OMNIVORE_MEAT_GAIN
    move_cost: float = MOVE_COST
    base_cost: float = BASE_COST
    reproduce_cost: float = REPRODUCE_COST
    start_energy: float = START_ENERGY
    eating_pulse: float = EATING_PULSE


@dataclass
class PopulationCaps:
    """Per-kind population caps, mutable so a UI can change them between ticks"""
    plant: int = POPULATION_CAPS_DEFAULT['plant']
    herbivore: int = POPULATION_CAPS_DEFAULT['herbivore']
    carnivore: int = POPULATION_CAPS_DEFAULT['carnivore']
    omnivore: int = POPULATION_CAPS_DEFAULT['omnivore']

    def for_kind(self, kind: Union[Kind, str]) -> int:
        return getattr(self, Kind.parse(kind).value)

    def set(self, kind: Union[Kind, str], value: int):
        """Set cap for a kind; negative values clamp to zero"""
        setattr(self, Kind.parse(kind).value, max(0, int(value)))


def _default_initial_population() -> Dict[str, int]:
    return dict(INITIAL_POPULATION_DEFAULT)


@dataclass
class SimulationConfig:
    """
    Complete simulation configuration.

    Every rate, threshold, and amount the step reads lives here so a test
    harness can override any of them.
    """
    width: float = WORLD_WIDTH_DEFAULT
    height: float = WORLD_HEIGHT_DEFAULT
    max_entities: int = MAX_ENTITIES
    grid_size: float = GRID_SIZE
    use_grid: bool = USE_GRID
    logic_rate: int = LOGIC_RATE
    max_steps_per_frame: int = MAX_STEPS_PER_FRAME
    frame_rate_scale: float = FRAME_RATE_SCALE
    stats_interval: int = STATS_INTERVAL
    plant_spawn_chance: float = PLANT_SPAWN_CHANCE
    direction_change_chance: float = DIRECTION_CHANGE_CHANCE
    reproduce_chance: float = REPRODUCE_CHANCE
    offspring_jitter: float = OFFSPRING_JITTER
    energy: EnergyConfig = field(default_factory=EnergyConfig)
    caps: PopulationCaps = field(default_factory=PopulationCaps)
    initial_population: Dict[str, int] = field(default_factory=_default_initial_population)
    seed: Optional[int] = None  # None = unseeded

    def traits(self, kind: Union[Kind, str]) -> KindTraits:
        """Traits row for a kind (enum member or name)"""
        return KIND_TRAITS[Kind.parse(kind)]

    def hunger_threshold(self, kind: Kind) -> float:
        return self.traits(kind).hunger_factor * self.energy.start_energy

    def interaction_radius(self, kind: Kind) -> float:
        traits = self.traits(kind)
        return traits.size + traits.feed_radius_pad

    @property
    def bounds(self) -> Tuple[float, float]:
        return (self.width, self.height)

    def to_dict(self) -> dict:
        return asdict(self)


# ============================================================================
# Stats
# ============================================================================

@dataclass
class PopulationStats:
    """Per-kind counts, total and mean energy at a given cycle"""
    plant_count: int = 0
    herbivore_count: int = 0
    carnivore_count: int = 0
    omnivore_count: int = 0
    cycle_count: int = 0
    total_count: int = 0
    mean_energy: float = 0.0

    def count_for(self, kind: Union[Kind, str]) -> int:
        return getattr(self, f"{Kind.parse(kind).value}_count")

    def to_dict(self) -> dict:
        """Serialize with builtin types only (no numpy scalars)"""
        return {
            'plant_count': int(self.plant_count),
            'herbivore_count': int(self.herbivore_count),
            'carnivore_count': int(self.carnivore_count),
            'omnivore_count': int(self.omnivore_count),
            'cycle_count': int(self.cycle_count),
            'total_count': int(self.total_count),
            'mean_energy': float(self.mean_energy),
        }
