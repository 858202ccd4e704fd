"""
Organism spawning system.

Builds new organisms for add commands (uniform random placement) and for
reproduction (parent position plus jitter, clamped to the field).
"""

import numpy as np

from .organism import Organism
from .data_types import Kind, SimulationConfig
from .rng import random_position, random_velocity, random_jitter
from .spatial import clamp_to_bounds


def spawn_organism(
    kind: Kind,
    organism_id: int,
    config: SimulationConfig,
    rng: np.random.Generator,
    born_cycle: int = 0
) -> Organism:
    """
    Spawn one organism of kind at a uniform random position.

    Size and speed come from the kind's traits row. Plants get zero
    velocity; movers get a random heading within their speed cap.

    Args:
        kind: Organism kind
        organism_id: Unique id assigned by the store
        config: Simulation configuration (bounds, start energy)
        rng: Simulation RNG
        born_cycle: Current cycle count

    Returns:
        New Organism with start energy
    """
    traits = config.traits(kind)

    return Organism(
        organism_id=organism_id,
        kind=kind,
        position=random_position(rng, config.bounds, traits.size),
        velocity=random_velocity(rng, traits.speed),
        size=traits.size,
        speed=traits.speed,
        energy=config.energy.start_energy,
        born_cycle=born_cycle
    )


def spawn_offspring(
    parent: Organism,
    organism_id: int,
    config: SimulationConfig,
    rng: np.random.Generator,
    born_cycle: int = 0
) -> Organism:
    """
    Spawn an offspring next to parent.

    The offspring copies kind, size and speed, lands within
    offspring_jitter of the parent on each axis (clamped to the field),
    draws a fresh velocity and starts with reproduce_cost energy.
    Charging the parent is the caller's job.

    Args:
        parent: Reproducing organism
        organism_id: Unique id assigned by the store
        config: Simulation configuration
        rng: Simulation RNG
        born_cycle: Current cycle count

    Returns:
        New Organism
    """
    position = parent.position + random_jitter(rng, config.offspring_jitter)
    position = clamp_to_bounds(position, config.bounds, parent.size)

    return Organism(
        organism_id=organism_id,
        kind=parent.kind,
        position=position,
        velocity=random_velocity(rng, parent.speed),
        size=parent.size,
        speed=parent.speed,
        energy=config.energy.reproduce_cost,
        born_cycle=born_cycle
    )
