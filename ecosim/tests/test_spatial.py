"""
Tests for 2D geometry helpers: boundary bounce, clamping, cell keys.
"""

import numpy as np
import pytest

from ecosim.spatial import (
    distance_2d, clamp_to_bounds, bounce_within_bounds, cell_key, max_corner
)

BOUNDS = (800.0, 600.0)
SIZE = 15.0


class TestBounce:
    """Crossing an edge clamps to it and flips that velocity component."""

    @pytest.mark.parametrize("start, velocity, expected_pos, expected_vel", [
        ([-2.0, 100.0], [-0.5, 0.3], [0.0, 100.0], [0.5, 0.3]),      # left
        ([790.0, 100.0], [0.5, 0.3], [785.0, 100.0], [-0.5, 0.3]),   # right
        ([100.0, -1.0], [0.2, -0.4], [100.0, 0.0], [0.2, 0.4]),      # top
        ([100.0, 590.0], [0.2, 0.4], [100.0, 585.0], [0.2, -0.4]),   # bottom
    ])
    def test_each_edge(self, start, velocity, expected_pos, expected_vel):
        position = np.array(start, dtype=np.float64)
        vel = np.array(velocity, dtype=np.float64)

        bounced = bounce_within_bounds(position, vel, BOUNDS, SIZE)

        assert bounced
        assert np.allclose(position, expected_pos)
        assert np.allclose(vel, expected_vel)

    def test_corner_flips_both_axes(self):
        position = np.array([-1.0, 601.0])
        velocity = np.array([-1.0, 1.0])

        bounce_within_bounds(position, velocity, BOUNDS, SIZE)

        assert np.allclose(position, [0.0, 585.0])
        assert np.allclose(velocity, [1.0, -1.0])

    def test_inside_untouched(self):
        position = np.array([400.0, 300.0])
        velocity = np.array([0.7, -0.7])

        assert not bounce_within_bounds(position, velocity, BOUNDS, SIZE)
        assert np.allclose(position, [400.0, 300.0])
        assert np.allclose(velocity, [0.7, -0.7])

    def test_on_edge_is_inside(self):
        """Exactly at the limit is legal and does not bounce"""
        position = np.array([785.0, 0.0])
        velocity = np.array([0.5, -0.5])

        assert not bounce_within_bounds(position, velocity, BOUNDS, SIZE)
        assert np.allclose(velocity, [0.5, -0.5])


def test_clamp_to_bounds_returns_copy():
    position = np.array([-5.0, 700.0])
    clamped = clamp_to_bounds(position, BOUNDS, 10.0)

    assert np.allclose(clamped, [0.0, 590.0])
    assert np.allclose(position, [-5.0, 700.0])


def test_max_corner_never_negative():
    """A field smaller than the organism pins it to the origin"""
    assert np.allclose(max_corner((10.0, 5.0), 15.0), [0.0, 0.0])


def test_cell_key_floors():
    assert cell_key(np.array([0.0, 0.0]), 100.0) == (0, 0)
    assert cell_key(np.array([99.9, 100.0]), 100.0) == (0, 1)
    assert cell_key(np.array([-0.1, 250.0]), 100.0) == (-1, 2)
    assert all(isinstance(c, int) for c in cell_key(np.array([5.0, 5.0]), 100.0))


def test_distance_2d():
    assert distance_2d(np.array([1.0, 1.0]), np.array([4.0, 5.0])) == 5.0
