"""
RNG utilities for the ecosystem simulation.

All randomness uses numpy.random.Generator(PCG64). A simulation without a
seed draws fresh OS entropy, so runs are not reproducible unless a seed
is supplied (tests supply one).
"""

import numpy as np
from typing import Optional, Tuple


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """
    Build the simulation RNG.

    Args:
        seed: Optional seed (None = unseeded)

    Returns:
        numpy Generator backed by PCG64
    """
    return np.random.Generator(np.random.PCG64(seed))


def random_velocity(rng: np.random.Generator, speed: float) -> np.ndarray:
    """
    Random velocity with each component uniform in [-speed/2, speed/2).

    Plants (speed 0) always get a zero vector.
    """
    if speed <= 0.0:
        return np.zeros(2, dtype=np.float64)
    return (rng.random(2) - 0.5) * speed


def random_position(rng: np.random.Generator, bounds: Tuple[float, float], size: float) -> np.ndarray:
    """
    Uniform random top-left anchor inside [0, W - size) x [0, H - size).

    Args:
        rng: Simulation RNG
        bounds: Field (width, height)
        size: Organism diameter

    Returns:
        Position [x, y]
    """
    width, height = bounds
    span = np.array([max(0.0, width - size), max(0.0, height - size)], dtype=np.float64)
    return rng.random(2) * span


def random_jitter(rng: np.random.Generator, radius: float) -> np.ndarray:
    """Offset with each component uniform in [-radius, radius)"""
    return rng.random(2) * (2.0 * radius) - radius


def chance(rng: np.random.Generator, probability: float) -> bool:
    """Bernoulli draw; probabilities >= 1 always succeed"""
    return rng.random() < probability
