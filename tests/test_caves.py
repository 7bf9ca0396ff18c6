"""
Delve — tests/test_caves.py
Cellular-automaton cave generation.
"""

import numpy as np
import pytest

from world.caves import CaveGenerator, clear_spawn_area, count_solid_neighbors, smooth_step

def _reference_step(grid):
    """Plain double-buffered pass, out-of-bounds neighbours counted as solid."""
    w, h = grid.shape
    out = grid.copy()
    for x in range(w):
        for y in range(h):
            walls = 0
            for nx in range(x - 1, x + 2):
                for ny in range(y - 1, y + 2):
                    if nx == x and ny == y:
                        continue
                    if 0 <= nx < w and 0 <= ny < h:
                        walls += int(grid[nx, ny])
                    else:
                        walls += 1
            if walls > 4:
                out[x, y] = True
            elif walls < 4:
                out[x, y] = False
    return out

def test_neighbor_count_treats_outside_as_solid():
    grid = np.zeros((3, 3), dtype=bool)
    counts = count_solid_neighbors(grid)
    assert counts[0, 0] == 5
    assert counts[0, 1] == 3
    assert counts[1, 1] == 0

def test_smooth_step_matches_reference():
    rng = np.random.default_rng(7)
    grid = rng.random((20, 20)) < 0.45
    expected = grid
    actual = grid
    for _ in range(3):
        expected = _reference_step(expected)
        actual = smooth_step(actual)
        assert np.array_equal(actual, expected)

def test_smooth_step_leaves_input_untouched():
    rng = np.random.default_rng(3)
    grid = rng.random((12, 12)) < 0.5
    before = grid.copy()
    smooth_step(grid)
    assert np.array_equal(grid, before)

def test_same_seed_same_caves():
    gen = CaveGenerator(64, density=0.45, smoothing_iterations=5)
    a = gen.generate(np.random.default_rng(42))
    b = gen.generate(np.random.default_rng(42))
    assert a.tobytes() == b.tobytes()

def test_different_seed_different_caves():
    gen = CaveGenerator(64)
    a = gen.generate(np.random.default_rng(1))
    b = gen.generate(np.random.default_rng(2))
    assert not np.array_equal(a, b)

def test_open_map_grows_only_corners():
    gen = CaveGenerator(16, density=0.0, smoothing_iterations=5, spawn_clear_radius=0)
    grid = gen.generate(np.random.default_rng(0))
    assert grid[0, 0] and grid[0, 15] and grid[15, 0] and grid[15, 15]
    assert np.count_nonzero(grid) == 4

def test_solid_map_keeps_only_spawn_clearing():
    gen = CaveGenerator(16, density=1.0, smoothing_iterations=5, spawn_clear_radius=3)
    grid = gen.generate(np.random.default_rng(0))
    assert np.count_nonzero(~grid) == 9
    assert not grid[7:10, 7:10].any()

def test_spawn_area_cleared_on_default_map():
    gen = CaveGenerator(64, spawn_clear_radius=3)
    for seed in (1, 2, 3):
        grid = gen.generate(np.random.default_rng(seed))
        assert not grid[31:34, 31:34].any()

def test_clear_spawn_area_radius_zero_clears_centre_only():
    grid = np.ones((9, 9), dtype=bool)
    clear_spawn_area(grid, 0)
    assert not grid[4, 4]
    assert np.count_nonzero(~grid) == 1

def test_invalid_parameters():
    with pytest.raises(ValueError):
        CaveGenerator(0)
    with pytest.raises(ValueError):
        CaveGenerator(16, density=1.5)
    with pytest.raises(ValueError):
        CaveGenerator(16, smoothing_iterations=-1)
