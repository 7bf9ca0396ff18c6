"""
Delve — world/chunks.py
Chunk index: groups tile coordinates into fixed-size square chunks.
Chunks exist only for indexing and save grouping, never for gameplay.
"""

from dataclasses import dataclass
from typing import Iterator, Tuple

TileCoord = Tuple[int, int]

CHUNK_SIZE = 32

@dataclass(frozen=True, order=True)
class ChunkKey:
    x: int
    y: int

def chunk_of(tile: TileCoord, chunk_size: int = CHUNK_SIZE) -> ChunkKey:
    """Floor-divides a tile coordinate into its chunk. Negative tiles map to negative chunks."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return ChunkKey(tile[0] // chunk_size, tile[1] // chunk_size)

def tiles_in_chunk(key: ChunkKey, chunk_size: int = CHUNK_SIZE) -> Iterator[TileCoord]:
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    base_x = key.x * chunk_size
    base_y = key.y * chunk_size
    for x in range(base_x, base_x + chunk_size):
        for y in range(base_y, base_y + chunk_size):
            yield (x, y)
