"""
Delve — world/ores.py
Ore Distributor: grows randomized mineral veins inside solid rock.
"""

from __future__ import annotations

import random
from typing import Dict, List, Sequence, Set, Tuple

from engine.data_loader import OreDistributionDef
from world.terrain import TerrainGrid, BASE_MATERIAL

GridCell = Tuple[int, int]

_NEIGHBORS_4 = ((1, 0), (-1, 0), (0, 1), (0, -1))

def _claimable(terrain: TerrainGrid, gx: int, gy: int) -> bool:
    return (
        terrain.in_bounds(gx, gy)
        and bool(terrain.solid[gx, gy])
        and int(terrain.material[gx, gy]) == BASE_MATERIAL
    )

def place_ore_vein(
    terrain: TerrainGrid,
    start: GridCell,
    material_id: int,
    target_size: int,
    rng: random.Random,
) -> List[GridCell]:
    """
    Frontier random growth from start. Each step pops a random candidate,
    claims it if it is still solid base rock, then queues its 4-neighbours.
    Stops at target_size or when the frontier runs dry.
    Returns the claimed grid cells in claim order.
    """
    vein: List[GridCell] = []
    claimed: Set[GridCell] = set()
    candidates: List[GridCell] = [start]
    queued: Set[GridCell] = {start}

    while len(vein) < target_size and candidates:
        index = rng.randrange(len(candidates))
        pos = candidates.pop(index)
        queued.discard(pos)

        if not _claimable(terrain, *pos):
            continue

        terrain.material[pos] = material_id
        vein.append(pos)
        claimed.add(pos)

        for dx, dy in _NEIGHBORS_4:
            n = (pos[0] + dx, pos[1] + dy)
            if n not in queued and n not in claimed:
                candidates.append(n)
                queued.add(n)

    return vein

class OreDistributor:
    """
    Applies ore distributions in listed order.

    Each ore's target is a percentage of the solid count taken before any
    ore ran, so overlapping ores under-deliver rather than fail.
    """
    def __init__(self, rng: random.Random):
        self.rng = rng

    def place_ores(self, terrain: TerrainGrid, ores: Sequence[OreDistributionDef]) -> Dict[str, int]:
        """Mutates terrain.material in place. Returns tiles placed per ore block."""
        solid_tiles = terrain.solid_count()
        placed_by_block: Dict[str, int] = {}

        for ore in ores:
            material_id = terrain.register_material(ore.block)
            target_count = round(solid_tiles * (ore.percentage / 100.0))
            placed = 0
            attempts = 0

            # Every draw counts as an attempt so a nearly full map cannot spin forever
            while placed < target_count and attempts < target_count * 10:
                attempts += 1
                gx = self.rng.randrange(terrain.size)
                gy = self.rng.randrange(terrain.size)
                if not _claimable(terrain, gx, gy):
                    continue
                vein_size = self.rng.randint(ore.min_vein_size, ore.max_vein_size)
                placed += len(place_ore_vein(terrain, (gx, gy), material_id, vein_size, self.rng))

            placed_by_block[ore.block] = placed_by_block.get(ore.block, 0) + placed

        return placed_by_block
