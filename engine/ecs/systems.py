"""
Delve — engine/ecs/systems.py
ECS Systems: mining, gated on discovery.
=====================================================================
Version:     0.1
Stack:       Python 3.11+ | python-tcod-ecs

Architecture notes
------------------
- Systems are plain functions operating on a tcod.ecs.Registry.
- They report outcomes exclusively via EventBus.
- Fog is consulted, never mutated directly: a mined tile that opens onto
  an unexplored cave hands off to RevealEngine.force_reveal_chamber.
"""

from __future__ import annotations
import math
import random
from typing import List, Optional

import tcod.ecs

from engine.data_loader import get_block_def
from engine.events import EventBus, WorldEvent, EVT_BLOCK_MINED, EVT_MINING_CANCELLED
from engine.ecs.components import (
    EntityIdentity,
    Inventory,
    MiningAction,
    MiningStats,
    Position,
)
from world.chunks import TileCoord
from world.exploration import DiscoveryField
from world.reveal import RevealEngine
from world.terrain import TerrainGrid

_NEIGHBORS_4 = ((1, 0), (-1, 0), (0, 1), (0, -1))

def _actor_name(actor: tcod.ecs.Entity) -> str:
    if EntityIdentity in actor.components:
        return actor.components[EntityIdentity].name
    return str(actor)

def distance_to_tile(actor: tcod.ecs.Entity, tile: TileCoord) -> float:
    """Distance from the actor to the centre of a tile."""
    pos = actor.components[Position]
    return math.dist((pos.x, pos.y), (tile[0] + 0.5, tile[1] + 0.5))

def in_mining_range(actor: tcod.ecs.Entity, tile: TileCoord) -> bool:
    if Position not in actor.components:
        return False
    stats = actor.components.get(MiningStats) or MiningStats()
    return distance_to_tile(actor, tile) <= stats.mining_range

# ============================================================
# MINING SYSTEMS
# ============================================================

def start_mining_system(
    actor: tcod.ecs.Entity,
    tile: TileCoord,
    terrain: TerrainGrid,
    field: DiscoveryField,
) -> bool:
    """
    Begins mining a tile. Refuses tiles that are still fogged or not yet
    fully discovered, open tiles, and tiles out of reach.
    Replaces any mining action already in progress.
    """
    if not field.is_tile_discovered(tile):
        return False
    block_id = terrain.block_at(tile)
    if block_id is None:
        return False
    if not in_mining_range(actor, tile):
        return False

    block = get_block_def(block_id)
    actor.components[MiningAction] = MiningAction(tile=tile, block_id=block_id, duration=block.mining_time)
    return True

def cancel_mining_system(actor: tcod.ecs.Entity, bus: Optional[EventBus] = None) -> bool:
    if MiningAction not in actor.components:
        return False
    action = actor.components[MiningAction]
    del actor.components[MiningAction]
    if bus is not None:
        bus.emit(WorldEvent(
            event_key=EVT_MINING_CANCELLED,
            source=_actor_name(actor),
            target=action.block_id,
            data={"tile": list(action.tile), "progress": round(action.progress, 3)},
        ))
    return True

def mining_system(
    registry: tcod.ecs.Registry,
    terrain: TerrainGrid,
    reveal: RevealEngine,
    bus: EventBus,
    dt: float,
    rng: Optional[random.Random] = None,
) -> List[TileCoord]:
    """
    Advances every active MiningAction by dt seconds.
    Query: all entities with [Position, MiningAction]
    Returns the tiles mined out this tick.
    """
    rng = rng or random.Random()
    mined: List[TileCoord] = []

    for actor in list(registry.Q.all_of(components=[Position, MiningAction])):
        action = actor.components[MiningAction]

        # The block may have gone already, or the actor walked away.
        if terrain.block_at(action.tile) != action.block_id or not in_mining_range(actor, action.tile):
            cancel_mining_system(actor, bus)
            continue

        action.elapsed += dt
        if action.elapsed < action.duration:
            continue

        del actor.components[MiningAction]
        terrain.remove_tile(action.tile)
        mined.append(action.tile)

        block = get_block_def(action.block_id)
        drops = 0
        if block.drop_item:
            drops = rng.randint(block.min_drop, block.max_drop)
            if Inventory not in actor.components:
                actor.components[Inventory] = Inventory()
            actor.components[Inventory].add(block.drop_item, drops)

        bus.emit(WorldEvent(
            event_key=EVT_BLOCK_MINED,
            source=_actor_name(actor),
            target=action.block_id,
            data={"tile": list(action.tile), "drop_item": block.drop_item, "quantity": drops},
        ))

        # Breaking through into an unexplored cave reveals it.
        tx, ty = action.tile
        for dx, dy in _NEIGHBORS_4:
            reveal.force_reveal_chamber((tx + dx, ty + dy))

    return mined
