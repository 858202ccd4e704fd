"""
Feeding rules for predators.

Each feeding kind has a diet: an ordered list of prey kinds with the energy
gained from each. A hungry, non-digesting predator eats the first prey found
by the spatial index for the first diet entry that has a hit.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

from .organism import Organism
from .data_types import Kind, SimulationConfig

if TYPE_CHECKING:
    from .spatial_queries import SpatialIndexAdapter


@dataclass(frozen=True)
class DietEntry:
    """One prey option for a predator"""
    prey: Kind
    gain_field: str  # EnergyConfig attribute holding the predator's gain
    consume_whole: bool = False  # True: prey energy set to 0, else prey loses 2 * gain


DIETS: Dict[Kind, Tuple[DietEntry, ...]] = {
    Kind.HERBIVORE: (
        DietEntry(Kind.PLANT, 'herbivore_gain', consume_whole=True),
    ),
    Kind.CARNIVORE: (
        DietEntry(Kind.HERBIVORE, 'carnivore_gain'),
        DietEntry(Kind.OMNIVORE, 'carnivore_gain'),
    ),
    Kind.OMNIVORE: (
        DietEntry(Kind.HERBIVORE, 'omnivore_meat_gain'),
        DietEntry(Kind.PLANT, 'omnivore_plant_gain'),
    ),
}

# Predator kinds in the order their feeding passes run
FEEDING_ORDER: Tuple[Kind, ...] = (Kind.HERBIVORE, Kind.CARNIVORE, Kind.OMNIVORE)

# Prey damage multiplier for partial meals
PREY_DAMAGE_FACTOR = 2.0


@dataclass
class FeedingEvent:
    """A completed meal (for telemetry and tests)"""
    predator: Organism
    prey: Organism
    gain: float
    prey_energy_before: float


def can_feed(organism: Organism, config: SimulationConfig) -> bool:
    """
    Check whether organism may look for food this tick.

    Requires a diet, no digestion in progress, and energy below the
    kind's hunger threshold. Organisms already at or below zero energy are
    not excluded: removal only happens in the death pass.
    """
    if organism.kind not in DIETS:
        return False
    if organism.digesting > 0.0:
        return False
    return organism.energy < config.hunger_threshold(organism.kind)


def try_feed(
    predator: Organism,
    spatial: 'SpatialIndexAdapter',
    config: SimulationConfig
) -> Optional[FeedingEvent]:
    """
    Attempt one meal for predator.

    Walks the diet in order; the first entry with prey inside the
    interaction radius wins. Prey is never removed here.

    Args:
        predator: Hungry organism (caller checked can_feed)
        spatial: Spatial index built at tick start
        config: Simulation configuration

    Returns:
        FeedingEvent, or None if nothing was in reach
    """
    radius = config.interaction_radius(predator.kind)

    for entry in DIETS.get(predator.kind, ()):
        prey = spatial.find_nearest(predator, entry.prey, radius)
        if prey is None:
            continue

        gain = getattr(config.energy, entry.gain_field)
        prey_energy_before = prey.energy

        predator.energy += gain
        if entry.consume_whole:
            prey.energy = 0.0
        else:
            prey.energy -= gain * PREY_DAMAGE_FACTOR

        predator.digesting = config.traits(predator.kind).digest_ticks
        predator.eating_timer = config.energy.eating_pulse

        return FeedingEvent(predator=predator, prey=prey, gain=gain,
                            prey_energy_before=prey_energy_before)

    return None


def apply_feeding(
    organisms: List[Organism],
    spatial: 'SpatialIndexAdapter',
    config: SimulationConfig
) -> List[FeedingEvent]:
    """
    Run the feeding passes: herbivores, then carnivores, then omnivores.

    Each predator performs at most one meal per tick. Within a pass,
    organisms are visited in list order.

    Args:
        organisms: Current population (not mutated structurally)
        spatial: Spatial index built at tick start
        config: Simulation configuration

    Returns:
        Meals in the order they happened
    """
    events = []

    for kind in FEEDING_ORDER:
        predators = [o for o in organisms if o.kind is kind]
        for predator in predators:
            if not can_feed(predator, config):
                continue
            event = try_feed(predator, spatial, config)
            if event is not None:
                events.append(event)

    return events
