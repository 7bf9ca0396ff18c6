"""
Delve — world/exploration.py
DiscoveryField: persistent per-tile discovery state and the fog layer.
Tracks what the player has seen across the map, grouped by chunk for saves.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set

from world.chunks import CHUNK_SIZE, ChunkKey, TileCoord, chunk_of, tiles_in_chunk

class TileStatus(Enum):
    UNDISCOVERED = "undiscovered"
    DISCOVERING = "discovering"   # fade in flight
    DISCOVERED = "discovered"     # fog removed, terminal

class DiscoveryField:
    """
    Authoritative model of what the player has seen.

    Status transitions only move forward:
    UNDISCOVERED -> DISCOVERING -> DISCOVERED.
    """
    def __init__(self, chunk_size: int = CHUNK_SIZE, fog_alpha: float = 1.0):
        self.chunk_size = chunk_size
        self.fog_alpha = fog_alpha
        # Tiles absent from the mapping are UNDISCOVERED.
        self.statuses: Dict[TileCoord, TileStatus] = {}
        # Fog layer: tile -> current fog alpha. Absent means no fog drawn.
        self.fog: Dict[TileCoord, float] = {}
        # Mirror of statuses, grouped by chunk.
        self.discovered_chunks: Dict[ChunkKey, Set[TileCoord]] = {}

    # ----------------------------------------------------------
    # Queries
    # ----------------------------------------------------------

    def status(self, tile: TileCoord) -> TileStatus:
        return self.statuses.get(tile, TileStatus.UNDISCOVERED)

    def is_tile_discovered(self, tile: TileCoord) -> bool:
        """True once the fog over the tile is fully gone."""
        return self.statuses.get(tile) is TileStatus.DISCOVERED

    def is_fogged(self, tile: TileCoord) -> bool:
        return tile in self.fog

    def fog_alpha_at(self, tile: TileCoord) -> float:
        return self.fog.get(tile, 0.0)

    def chunk_tiles(self, key: ChunkKey) -> Set[TileCoord]:
        return set(self.discovered_chunks.get(key, ()))

    def discovered_count(self) -> int:
        return sum(1 for s in self.statuses.values() if s is TileStatus.DISCOVERED)

    # ----------------------------------------------------------
    # Fog layer
    # ----------------------------------------------------------

    def cover_tile(self, tile: TileCoord) -> bool:
        if self.is_tile_discovered(tile):
            return False
        self.fog[tile] = self.fog_alpha
        return True

    def cover_map_with_fog(self, map_size: int) -> int:
        """Fogs every tile of a map_size x map_size map centred on (0, 0)."""
        if map_size <= 0:
            raise ValueError(f"Map size must be positive, got {map_size}")
        offset = map_size // 2
        covered = 0
        for x in range(-offset, map_size - offset):
            for y in range(-offset, map_size - offset):
                if self.cover_tile((x, y)):
                    covered += 1
        return covered

    def cover_chunk_with_fog(self, key: ChunkKey, chunk_size: Optional[int] = None) -> int:
        """Fogs a freshly generated chunk. Already discovered tiles stay clear."""
        covered = 0
        for tile in tiles_in_chunk(key, chunk_size or self.chunk_size):
            if self.cover_tile(tile):
                covered += 1
        return covered

    def set_fog_alpha(self, tile: TileCoord, alpha: float) -> None:
        if tile in self.fog:
            self.fog[tile] = alpha

    def clear_fog(self) -> None:
        self.fog.clear()

    # ----------------------------------------------------------
    # Transitions
    # ----------------------------------------------------------

    def begin_discovery(self, tile: TileCoord) -> bool:
        """
        Marks a fogged tile DISCOVERING and records its chunk.
        Returns False for discovered tiles and tiles with no fog over them.
        """
        if self.is_tile_discovered(tile) or tile not in self.fog:
            return False
        self.statuses[tile] = TileStatus.DISCOVERING
        self._index(tile)
        return True

    def complete_discovery(self, tile: TileCoord) -> None:
        """Removes the fog tile entirely and makes the discovery terminal."""
        self.fog.pop(tile, None)
        self.statuses[tile] = TileStatus.DISCOVERED
        self._index(tile)

    def _index(self, tile: TileCoord) -> None:
        self.discovered_chunks.setdefault(chunk_of(tile, self.chunk_size), set()).add(tile)

    # ----------------------------------------------------------
    # Persistence
    # ----------------------------------------------------------

    def get_save_data(self) -> List[TileCoord]:
        """
        DISCOVERED tiles grouped by chunk then sorted.
        Tiles whose fade is still running are left out.
        """
        tiles: List[TileCoord] = []
        for key in sorted(self.discovered_chunks):
            tiles.extend(sorted(t for t in self.discovered_chunks[key] if self.is_tile_discovered(t)))
        return tiles

    def load_save_data(self, tiles: Iterable[TileCoord]) -> None:
        """Replaces all discovery state. Loaded tiles are DISCOVERED with no animation."""
        self.statuses.clear()
        self.discovered_chunks.clear()
        for tile in tiles:
            self.complete_discovery((int(tile[0]), int(tile[1])))

    def get_state(self) -> Dict[str, Any]:
        """Returns serializable state for snapshots."""
        return {
            "chunk_size": self.chunk_size,
            "tiles": [[x, y] for x, y in self.get_save_data()],
        }

    def load_state(self, data: Dict[str, Any]) -> None:
        """Restores state from serializable data, skipping malformed entries."""
        tiles: List[TileCoord] = []
        for entry in data.get("tiles", []):
            try:
                x, y = entry
                tiles.append((int(x), int(y)))
            except (TypeError, ValueError):
                continue
        self.load_save_data(tiles)
