"""
Delve — world/reveal.py
Reveal Engine: circular reveals, chamber flood fills and player polling.
==========================================================================
Version:     0.1
Stack:       Python 3.11+ | bespoke EventBus
Status:      Drives every mutation of the DiscoveryField.

Architecture notes
------------------
- Single-threaded and tick-driven. Nothing here blocks or sleeps; fades
  and chamber reveals are explicit state objects advanced by tick(dt).
- Only one ChamberRevealJob animates at a time. A chamber request made
  while one is active is dropped and flagged as deferred; the next poll
  re-runs the reveal even if the player has not moved.
- Chamber tiles are revealed in ripple order: ascending distance from
  the flood-fill seed, tile i due i * chamber_tile_delay after start.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Tuple

from engine.data_loader import FogDef
from engine.events import (
    EventBus,
    WorldEvent,
    EVT_TILE_DISCOVERED,
    EVT_CHAMBER_STARTED,
    EVT_CHAMBER_REVEALED,
    EVT_CHAMBER_DEFERRED,
)
from world.chunks import TileCoord
from world.exploration import DiscoveryField, TileStatus
from world.fade import FadeScheduler
from world.terrain import TerrainGrid

Position = Sequence[float]

_NEIGHBORS_4 = ((1, 0), (-1, 0), (0, 1), (0, -1))

def world_to_tile(position: Position) -> TileCoord:
    return math.floor(position[0]), math.floor(position[1])

@dataclass
class ChamberRevealJob:
    seed: TileCoord
    tiles: List[TileCoord]
    tile_delay: float
    truncated: bool = False
    cursor: int = 0
    elapsed: float = 0.0
    members: Set[TileCoord] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.members = set(self.tiles)

    @property
    def done(self) -> bool:
        return self.cursor >= len(self.tiles)

    def claims(self, tile: TileCoord) -> bool:
        return tile in self.members

    def advance(self, dt: float) -> List[TileCoord]:
        """Returns the tiles that became due during the last dt seconds."""
        self.elapsed += dt
        due: List[TileCoord] = []
        while not self.done and self.elapsed >= self.cursor * self.tile_delay:
            due.append(self.tiles[self.cursor])
            self.cursor += 1
        return due

class RevealEngine:
    """
    Mutates the DiscoveryField on behalf of the player, mining and lighting.
    All collaborators are injected; nothing is looked up globally.
    """
    def __init__(
        self,
        field: DiscoveryField,
        terrain: TerrainGrid,
        fades: FadeScheduler,
        settings: FogDef,
        bus: Optional[EventBus] = None,
    ):
        self.field = field
        self.terrain = terrain
        self.fades = fades
        self.settings = settings
        self.bus = bus

        self.active_job: Optional[ChamberRevealJob] = None
        self.deferred = False
        self.tiles_started = 0

        self._last_position: Optional[Tuple[float, float]] = None
        self._update_timer = 0.0

    # ----------------------------------------------------------
    # Primitives
    # ----------------------------------------------------------

    def _is_open_unexplored(self, tile: TileCoord) -> bool:
        return (
            not self.terrain.has_solid_tile(tile)
            and self.field.is_fogged(tile)
            and self.field.status(tile) is TileStatus.UNDISCOVERED
        )

    def _emit(self, event_key: str, data: dict) -> None:
        if self.bus is not None:
            self.bus.emit(WorldEvent(event_key=event_key, source="RevealEngine", data=data))

    def discover_tile(self, tile: TileCoord) -> bool:
        """
        Marks a fogged tile DISCOVERING and (re)starts its fade.
        No-op for DISCOVERED tiles and tiles without fog.
        """
        if not self.field.begin_discovery(tile):
            return False
        self.fades.start(tile)
        self.tiles_started += 1
        self._emit(EVT_TILE_DISCOVERED, {"tile": list(tile)})
        return True

    # ----------------------------------------------------------
    # Area reveal
    # ----------------------------------------------------------

    def reveal_area(self, position: Position, radius: Optional[float] = None) -> int:
        """
        Reveals every tile within radius of the tile under position.
        Open fogged tiles seed chamber reveals when chamber reveal is enabled.
        Returns the number of tiles that began discovering.
        """
        if radius is None:
            radius = self.settings.discovery_radius
        cx, cy = world_to_tile(position)
        span = math.ceil(radius)
        before = self.tiles_started

        for dx in range(-span, span + 1):
            for dy in range(-span, span + 1):
                if math.hypot(dx, dy) > radius:
                    continue
                tile = (cx + dx, cy + dy)

                if self.settings.chamber_reveal_enabled and self._is_open_unexplored(tile):
                    if self.active_job is None:
                        self.reveal_chamber(tile)
                    elif not self.active_job.claims(tile):
                        self._defer(tile)
                    continue

                if self.field.is_tile_discovered(tile) or self.fades.is_fading(tile):
                    continue
                self.discover_tile(tile)

        return self.tiles_started - before

    def force_reveal_area(self, position: Position, radius: float) -> int:
        """One-off reveal with a caller-supplied radius. The configured radius is untouched."""
        return self.reveal_area(position, radius=radius)

    # ----------------------------------------------------------
    # Chamber reveal
    # ----------------------------------------------------------

    def flood_chamber(self, seed: TileCoord) -> Tuple[List[TileCoord], bool]:
        """
        Breadth-first fill over open, fogged, undiscovered 4-neighbours.
        Returns (tiles in BFS order, whether max_chamber_size cut it short).
        """
        if not self._is_open_unexplored(seed):
            return [], False
        limit = self.settings.max_chamber_size
        collected = [seed]
        visited = {seed}
        queue = deque([seed])

        while queue:
            x, y = queue.popleft()
            for dx, dy in _NEIGHBORS_4:
                n = (x + dx, y + dy)
                if n in visited:
                    continue
                visited.add(n)
                if not self._is_open_unexplored(n):
                    continue
                if len(collected) >= limit:
                    return collected, True
                collected.append(n)
                queue.append(n)

        return collected, False

    def reveal_chamber(self, seed: TileCoord) -> bool:
        """Starts a chamber reveal from seed. Refused while another chamber is animating."""
        if self.active_job is not None:
            self._defer(seed)
            return False
        tiles, truncated = self.flood_chamber(seed)
        if not tiles:
            return False

        tiles.sort(key=lambda t: math.dist(t, seed))
        self.active_job = ChamberRevealJob(
            seed=seed,
            tiles=tiles,
            tile_delay=self.settings.chamber_tile_delay,
            truncated=truncated,
        )
        self._emit(EVT_CHAMBER_STARTED, {"seed": list(seed), "size": len(tiles), "truncated": truncated})
        self._advance_job(0.0)
        return True

    def force_reveal_chamber(self, position: Position) -> bool:
        return self.reveal_chamber(world_to_tile(position))

    def cancel_chamber(self) -> None:
        """Drops the active job. Tiles it had not reached stay undiscovered."""
        self.active_job = None

    def _defer(self, tile: TileCoord) -> None:
        if not self.deferred:
            self._emit(EVT_CHAMBER_DEFERRED, {"tile": list(tile)})
        self.deferred = True

    def _advance_job(self, dt: float) -> None:
        job = self.active_job
        if job is None:
            return
        for tile in job.advance(dt):
            if self.field.is_tile_discovered(tile) or self.fades.is_fading(tile):
                continue
            self.discover_tile(tile)
        if job.done and self.active_job is job:
            self.active_job = None
            # Tiles past the size cap are picked up by the next poll.
            if job.truncated:
                self.deferred = True
            self._emit(EVT_CHAMBER_REVEALED, {
                "seed": list(job.seed),
                "size": len(job.tiles),
                "truncated": job.truncated,
            })

    # ----------------------------------------------------------
    # Frame driving
    # ----------------------------------------------------------

    def start_tracking(self, position: Position, reveal: bool = True) -> int:
        """Makes position the polling baseline, revealing around it unless told not to."""
        self._last_position = (float(position[0]), float(position[1]))
        self._update_timer = 0.0
        return self.reveal_area(position) if reveal else 0

    def track(self, position: Position, dt: float) -> bool:
        """
        Polls the player position every update_interval seconds.
        Re-runs reveal_area when the player moved or a chamber was deferred.
        """
        self._update_timer += dt
        if self._update_timer < self.settings.update_interval:
            return False
        self._update_timer = 0.0

        current = (float(position[0]), float(position[1]))
        moved = (
            self._last_position is None
            or math.dist(current, self._last_position) > self.settings.movement_threshold
        )
        if not moved and not self.deferred:
            return False

        self.deferred = False
        self.reveal_area(current)
        self._last_position = current
        return True

    def tick(self, dt: float) -> List[TileCoord]:
        """Advances fades, then the chamber job. Returns tiles whose fog finished fading."""
        completed = self.fades.tick(dt)
        self._advance_job(dt)
        return completed

    def reset(self) -> None:
        """Stops every fade and the chamber job."""
        self.fades.cancel_all()
        self.active_job = None
        self.deferred = False

    # ----------------------------------------------------------
    # Persistence
    # ----------------------------------------------------------

    def get_save_data(self) -> List[TileCoord]:
        return self.field.get_save_data()

    def load_save_data(self, tiles: Sequence[TileCoord]) -> None:
        self.reset()
        self.field.load_save_data(tiles)
