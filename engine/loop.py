"""
Delve — engine/loop.py
Main Simulation Loop: wires terrain generation, fog, mining and the journal.
========================================================================
Version:     0.1
Stack:       Python 3.11+ | python-tcod-ecs | tomllib
Status:      Integration entry point.

One tick is one frame. Every piece of world state (terrain, discovery
field, fades, chamber job) is owned and mutated only from tick() and the
explicit trigger methods below; nothing runs on another thread.
"""

from __future__ import annotations

import random
import tomllib
from pathlib import Path
from typing import List, Optional, Sequence, Set

import tcod.ecs

from engine.data_loader import FogDef, GenerationDef, get_fog_def, get_generation_def
from engine.events import EventBus, WorldEvent, EVT_DISCOVERY_SAVED, EVT_DISCOVERY_LOADED
from engine.journal import GameClock, JournalInscriber
from engine.ecs.components import EntityIdentity, Inventory, MiningStats, Position
from engine.ecs.systems import mining_system, start_mining_system
from world.chunks import ChunkKey, TileCoord
from world.exploration import DiscoveryField
from world.fade import FadeScheduler
from world.generator import GenerationResult, MapGenerator
from world.reveal import RevealEngine, world_to_tile

class SimulationLoop:
    """
    Core executor for a Delve session.
    Owns the tcod-ecs Registry, EventBus, journal and the world subsystems.
    """
    def __init__(
        self,
        journal_path: Optional[Path] = None,
        generation: Optional[GenerationDef] = None,
        fog: Optional[FogDef] = None,
    ):
        if journal_path is None:
            journal_path = Path("sessions/journal.jsonl")

        self.generation = generation or get_generation_def()
        self.fog = fog or get_fog_def()

        self.registry = tcod.ecs.Registry()
        self.bus = EventBus()
        self.clock = GameClock()
        self.journal = JournalInscriber(bus=self.bus, journal_path=journal_path, clock=self.clock)
        self.rng = random.Random()

        # World
        self.generator = MapGenerator(self.generation, bus=self.bus)
        self.terrain = self.generator.terrain
        self.field = DiscoveryField(chunk_size=self.fog.chunk_size, fog_alpha=self.fog.fog_alpha)
        self.fades = FadeScheduler(self.field, duration=self.fog.fade_duration)
        self.reveal = RevealEngine(self.field, self.terrain, self.fades, self.fog, bus=self.bus)
        self.world_seed: Optional[int] = None
        # Chunks fogged after generation; re-covered whenever discovery resets.
        self.fogged_chunks: Set[ChunkKey] = set()

        self.player = self.registry.new_entity()
        self.player.components[EntityIdentity] = EntityIdentity(entity_id=1, name="Player", is_player=True)
        self.player.components[Position] = Position(x=0.5, y=0.5)
        self.player.components[MiningStats] = MiningStats()
        self.player.components[Inventory] = Inventory()

    def open_session(self) -> None:
        self.journal.open_session()

    def close_session(self) -> None:
        self.journal.close_session()

    # ----------------------------------------------------------
    # Generation
    # ----------------------------------------------------------

    def generate_map(self, seed: Optional[int] = None) -> GenerationResult:
        """
        Regenerates the terrain, covers it in fog and reveals the spawn area.
        Any previous discovery state is discarded.
        """
        result = self.generator.generate(seed)
        self.world_seed = result.seed
        self.fogged_chunks.clear()
        self._reset_discovery()

        pos = self.player.components[Position]
        pos.x, pos.y = 0.5, 0.5
        self.reveal.start_tracking((pos.x, pos.y))
        return result

    def _reset_discovery(self) -> None:
        """Stops fog-removal work, forgets every discovery and re-fogs the whole map."""
        self.reveal.reset()
        self.field.load_save_data([])
        self.field.clear_fog()
        self.field.cover_map_with_fog(self.generation.map_size)
        for key in sorted(self.fogged_chunks):
            self.field.cover_chunk_with_fog(key, self.fog.chunk_size)

    def cover_chunk_with_fog(self, key: ChunkKey) -> int:
        """Hook for regions generated after the initial map."""
        self.fogged_chunks.add(key)
        return self.field.cover_chunk_with_fog(key, self.fog.chunk_size)

    # ----------------------------------------------------------
    # Frame
    # ----------------------------------------------------------

    def tick(self, dt: float) -> List[TileCoord]:
        """Advance the simulation by one frame of dt seconds. Returns tiles whose fog cleared."""
        self.clock = self.clock.advance(dt)
        self.journal.clock = self.clock

        pos = self.player.components[Position]
        self.reveal.track((pos.x, pos.y), dt)
        completed = self.reveal.tick(dt)
        mining_system(self.registry, self.terrain, self.reveal, self.bus, dt, rng=self.rng)
        return completed

    def move_player(self, dx: float, dy: float) -> bool:
        """Moves the player in world space. Solid tiles block movement."""
        pos = self.player.components[Position]
        new_x, new_y = pos.x + dx, pos.y + dy
        if self.terrain.has_solid_tile(world_to_tile((new_x, new_y))):
            return False
        pos.x, pos.y = new_x, new_y
        return True

    def start_mining(self, tile: TileCoord) -> bool:
        return start_mining_system(self.player, tile, self.terrain, self.field)

    # ----------------------------------------------------------
    # Collaborator surface
    # ----------------------------------------------------------

    def is_tile_discovered(self, tile: TileCoord) -> bool:
        return self.field.is_tile_discovered(tile)

    def has_solid_tile(self, tile: TileCoord) -> bool:
        return self.terrain.has_solid_tile(tile)

    def force_reveal_area(self, position: Sequence[float], radius: float) -> int:
        return self.reveal.force_reveal_area(position, radius)

    def force_reveal_chamber(self, position: Sequence[float]) -> bool:
        return self.reveal.force_reveal_chamber(position)

    # ----------------------------------------------------------
    # Persistence
    # ----------------------------------------------------------

    def get_save_data(self) -> List[TileCoord]:
        return self.reveal.get_save_data()

    def load_save_data(self, tiles: Sequence[TileCoord]) -> None:
        """
        Drops all fog-removal work and discovery state, re-fogs the map,
        then marks every loaded tile discovered without animation.
        """
        self._reset_discovery()
        self.reveal.load_save_data(tiles)
        self.bus.emit(WorldEvent(
            event_key=EVT_DISCOVERY_LOADED,
            source="SimulationLoop",
            data={"tiles": len(self.field.get_save_data())},
        ))

    def save_session(self, snapshot_path: Optional[Path] = None) -> None:
        """
        Saves the world seed, clock, player and discovered tiles to TOML.
        Terrain is not stored; it is regenerated from the seed on resume.
        """
        if snapshot_path is None:
            snapshot_path = Path("sessions/discovery_snapshot.toml")

        snapshot_path.parent.mkdir(parents=True, exist_ok=True)

        pos = self.player.components[Position]
        state = self.field.get_state()

        lines = []
        lines.append("[world]")
        # A missing key means "no seed"; 0 is a valid seed.
        if self.world_seed is not None:
            lines.append(f"world_seed = {self.world_seed}")
        lines.append(f"tick = {self.clock.tick}")
        lines.append(f"elapsed = {self.clock.elapsed!r}")
        lines.append("")
        lines.append("[player]")
        lines.append(f"x = {float(pos.x)!r}")
        lines.append(f"y = {float(pos.y)!r}")
        lines.append("")
        lines.append("[discovery]")
        lines.append(f"chunk_size = {state['chunk_size']}")
        tiles = ", ".join(f"[{x}, {y}]" for x, y in state["tiles"])
        lines.append(f"tiles = [{tiles}]")
        chunks = ", ".join(f"[{k.x}, {k.y}]" for k in sorted(self.fogged_chunks))
        lines.append(f"fog_chunks = [{chunks}]")
        lines.append("")

        with open(snapshot_path, "w", encoding="utf-8") as f:
            f.write("\n".join(lines))

        self.bus.emit(WorldEvent(
            event_key=EVT_DISCOVERY_SAVED,
            source="SimulationLoop",
            data={"path": str(snapshot_path), "tiles": len(state["tiles"])},
        ))

    def resume_session(self, snapshot_path: Optional[Path] = None) -> None:
        """Regenerates the saved map and restores discovery without fades."""
        if snapshot_path is None:
            snapshot_path = Path("sessions/discovery_snapshot.toml")

        if not snapshot_path.exists():
            raise FileNotFoundError(f"Cannot resume, missing {snapshot_path}")

        with open(snapshot_path, "rb") as f:
            data = tomllib.load(f)

        wdata = data.get("world", {})
        self.generate_map(seed=wdata.get("world_seed"))
        self.clock = GameClock(tick=wdata.get("tick", 0), elapsed=wdata.get("elapsed", 0.0))
        self.journal.clock = self.clock

        ddata = data.get("discovery", {})
        for entry in ddata.get("fog_chunks", []):
            try:
                x, y = entry
                self.fogged_chunks.add(ChunkKey(int(x), int(y)))
            except (TypeError, ValueError):
                continue

        self._reset_discovery()
        self.field.load_state(ddata)

        pdata = data.get("player", {})
        pos = self.player.components[Position]
        pos.x = pdata.get("x", 0.5)
        pos.y = pdata.get("y", 0.5)
        self.reveal.start_tracking((pos.x, pos.y), reveal=False)

        self.bus.emit(WorldEvent(
            event_key=EVT_DISCOVERY_LOADED,
            source="SimulationLoop",
            data={"path": str(snapshot_path), "tiles": len(self.field.get_save_data())},
        ))

    def player_tile(self) -> TileCoord:
        pos = self.player.components[Position]
        return world_to_tile((pos.x, pos.y))
