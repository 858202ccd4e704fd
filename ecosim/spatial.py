"""
Spatial utility functions for 2D geometry.

Helper functions for distance calculations and boundary handling
inside the rectangular field.
"""

import numpy as np
from typing import Tuple


def distance_2d(pos_a: np.ndarray, pos_b: np.ndarray) -> float:
    """
    Calculate Euclidean distance between two 2D points.

    Args:
        pos_a: Position [x, y]
        pos_b: Position [x, y]

    Returns:
        Distance in pixels
    """
    diff = pos_a - pos_b
    return float(np.sqrt(np.dot(diff, diff)))


def max_corner(bounds: Tuple[float, float], size: float) -> np.ndarray:
    """
    Largest legal top-left anchor for an organism of given size.

    Clamped at zero so a field smaller than the organism pins it to the origin.
    """
    width, height = bounds
    return np.array([max(0.0, width - size), max(0.0, height - size)], dtype=np.float64)


def clamp_to_bounds(position: np.ndarray, bounds: Tuple[float, float], size: float) -> np.ndarray:
    """
    Clamp position into [0, W - size] x [0, H - size].

    Args:
        position: Position [x, y]
        bounds: Field (width, height)
        size: Organism diameter

    Returns:
        Clamped copy of position
    """
    return np.clip(position, 0.0, max_corner(bounds, size))


def bounce_within_bounds(position: np.ndarray, velocity: np.ndarray,
                         bounds: Tuple[float, float], size: float) -> bool:
    """
    Elastic boundary bounce, in place.

    On each axis, a position outside [0, limit] is clamped to the crossed
    edge and that velocity component is negated.

    Args:
        position: Position [x, y], modified in place
        velocity: Velocity [dx, dy], modified in place
        bounds: Field (width, height)
        size: Organism diameter

    Returns:
        True if any axis bounced
    """
    limit = max_corner(bounds, size)
    bounced = False

    for axis in range(2):
        if position[axis] < 0.0:
            position[axis] = 0.0
            velocity[axis] = -velocity[axis]
            bounced = True
        elif position[axis] > limit[axis]:
            position[axis] = limit[axis]
            velocity[axis] = -velocity[axis]
            bounced = True

    return bounced


def cell_key(position: np.ndarray, cell_size: float) -> Tuple[int, int]:
    """Integer grid cell (floor(x / cell), floor(y / cell)) for a position"""
    return (int(np.floor(position[0] / cell_size)), int(np.floor(position[1] / cell_size)))
