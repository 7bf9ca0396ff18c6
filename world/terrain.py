"""
Delve — world/terrain.py
TerrainGrid: dense solid/material arrays for one generated cave map.
=====================================================================
Stack:       Python 3.11+ | NumPy

Arrays are indexed [gx, gy]. World tiles are centred on the map so the
spawn sits at tile (0, 0): grid cell (gx, gy) is tile
(gx - size // 2, gy - size // 2).
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from world.chunks import TileCoord

BASE_MATERIAL = 0

class TerrainGrid:
    """
    Owns the solidity grid and the parallel material grid.

    Materials are small integer ids into a palette of block ids.
    Id 0 is always the base block; ore placement compares against it.
    """
    def __init__(self, size: int, base_block: str = "stone"):
        if size <= 0:
            raise ValueError(f"Terrain size must be positive, got {size}")
        self.size = size
        self.offset = size // 2
        self.solid = np.ones((size, size), dtype=bool)
        self.material = np.full((size, size), BASE_MATERIAL, dtype=np.int16)
        self.palette: List[str] = [base_block]
        self._palette_ids: Dict[str, int] = {base_block: BASE_MATERIAL}

    @property
    def base_block(self) -> str:
        return self.palette[BASE_MATERIAL]

    def register_material(self, block_id: str) -> int:
        """Returns the material id for a block, adding it to the palette if new."""
        if block_id not in self._palette_ids:
            self._palette_ids[block_id] = len(self.palette)
            self.palette.append(block_id)
        return self._palette_ids[block_id]

    # ----------------------------------------------------------
    # Coordinate mapping
    # ----------------------------------------------------------

    def in_bounds(self, gx: int, gy: int) -> bool:
        return 0 <= gx < self.size and 0 <= gy < self.size

    def to_grid(self, tile: TileCoord) -> Tuple[int, int]:
        return tile[0] + self.offset, tile[1] + self.offset

    def to_tile(self, gx: int, gy: int) -> TileCoord:
        return gx - self.offset, gy - self.offset

    # ----------------------------------------------------------
    # Queries (absent data is never a fault)
    # ----------------------------------------------------------

    def has_solid_tile(self, tile: TileCoord) -> bool:
        gx, gy = self.to_grid(tile)
        if not self.in_bounds(gx, gy):
            return False
        return bool(self.solid[gx, gy])

    def block_at(self, tile: TileCoord) -> Optional[str]:
        """Block id of a solid tile, None for open or out-of-range tiles."""
        if not self.has_solid_tile(tile):
            return None
        gx, gy = self.to_grid(tile)
        return self.palette[int(self.material[gx, gy])]

    def solid_count(self) -> int:
        return int(np.count_nonzero(self.solid))

    def solid_tiles(self) -> Iterator[Tuple[TileCoord, str]]:
        for gx, gy in zip(*np.nonzero(self.solid)):
            yield self.to_tile(int(gx), int(gy)), self.palette[int(self.material[gx, gy])]

    # ----------------------------------------------------------
    # Mutation
    # ----------------------------------------------------------

    def load_solidity(self, grid: np.ndarray) -> None:
        """Replaces the solidity grid and resets every cell to the base material."""
        if grid.shape != (self.size, self.size):
            raise ValueError(f"Expected a {self.size}x{self.size} grid, got {grid.shape}")
        self.solid = grid.astype(bool, copy=True)
        self.material.fill(BASE_MATERIAL)

    def remove_tile(self, tile: TileCoord) -> Optional[str]:
        """Mines a solid tile away. One-way: removed tiles never become solid again."""
        block_id = self.block_at(tile)
        if block_id is None:
            return None
        gx, gy = self.to_grid(tile)
        self.solid[gx, gy] = False
        self.material[gx, gy] = BASE_MATERIAL
        return block_id

    def clear(self) -> None:
        """Drops every tile and resets the palette to the base block."""
        self.solid.fill(False)
        self.material.fill(BASE_MATERIAL)
        del self.palette[1:]
        self._palette_ids = {self.palette[0]: BASE_MATERIAL}
