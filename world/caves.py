"""
Delve — world/caves.py
Cave Generator: noise fill smoothed by a cellular automaton.
==========================================================================
Version:     0.1
Stack:       Python 3.11+ | NumPy

Rules per smoothing pass (8-neighbourhood, out-of-bounds counts as solid):
  solid neighbours > 4  -> solid
  solid neighbours < 4  -> open
  solid neighbours == 4 -> unchanged
Every pass reads the previous grid only; cells are never updated in place.
"""

from __future__ import annotations

import numpy as np

def count_solid_neighbors(grid: np.ndarray) -> np.ndarray:
    """Counts solid cells among the 8 neighbours of every cell."""
    padded = np.pad(grid, 1, mode="constant", constant_values=True).astype(np.int8)
    w, h = grid.shape
    counts = np.zeros((w, h), dtype=np.int8)
    for dx in (-1, 0, 1):
        for dy in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            counts += padded[1 + dx:1 + dx + w, 1 + dy:1 + dy + h]
    return counts

def smooth_step(grid: np.ndarray) -> np.ndarray:
    """One automaton pass. Returns a new grid; the input is left untouched."""
    counts = count_solid_neighbors(grid)
    return np.where(counts > 4, True, np.where(counts < 4, False, grid))

def clear_spawn_area(grid: np.ndarray, radius: int) -> None:
    """Forces a small square around the map centre open, in place."""
    size = grid.shape[0]
    center = size // 2
    half = radius // 2
    lo = max(0, center - half)
    hi = min(size, center + half + 1)
    grid[lo:hi, lo:hi] = False

class CaveGenerator:
    """
    Builds a size x size solidity grid (True = solid rock).
    """
    def __init__(
        self,
        size: int,
        density: float = 0.45,
        smoothing_iterations: int = 5,
        spawn_clear_radius: int = 3,
    ):
        if size <= 0:
            raise ValueError(f"Cave size must be positive, got {size}")
        if not 0.0 <= density <= 1.0:
            raise ValueError(f"Cave density must be within [0, 1], got {density}")
        if smoothing_iterations < 0:
            raise ValueError(f"Smoothing iterations must be >= 0, got {smoothing_iterations}")
        self.size = size
        self.density = density
        self.smoothing_iterations = smoothing_iterations
        self.spawn_clear_radius = spawn_clear_radius

    def initial_noise(self, rng: np.random.Generator) -> np.ndarray:
        return rng.random((self.size, self.size)) < self.density

    def generate(self, rng: np.random.Generator) -> np.ndarray:
        grid = self.initial_noise(rng)
        for _ in range(self.smoothing_iterations):
            grid = smooth_step(grid)
        clear_spawn_area(grid, self.spawn_clear_radius)
        return grid
