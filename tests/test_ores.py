import random

import numpy as np
import pytest

from engine.data_loader import OreDistributionDef
from world.ores import OreDistributor, place_ore_vein
from world.terrain import TerrainGrid, BASE_MATERIAL

def _is_connected(cells):
    for i, (x, y) in enumerate(cells[1:], start=1):
        if not any(abs(x - px) + abs(y - py) == 1 for px, py in cells[:i]):
            return False
    return True

def test_vein_grows_to_target_size():
    terrain = TerrainGrid(10)
    iron = terrain.register_material("iron_ore")
    vein = place_ore_vein(terrain, (5, 5), iron, 5, random.Random(1))
    assert len(vein) == 5
    assert len(set(vein)) == 5
    assert all(int(terrain.material[c]) == iron for c in vein)
    assert _is_connected(vein)

def test_vein_is_partial_when_frontier_runs_dry():
    terrain = TerrainGrid(10)
    grid = np.zeros((10, 10), dtype=bool)
    grid[2, 2] = grid[2, 3] = grid[2, 4] = True
    terrain.load_solidity(grid)
    coal = terrain.register_material("coal_ore")

    vein = place_ore_vein(terrain, (2, 3), coal, 8, random.Random(5))
    assert sorted(vein) == [(2, 2), (2, 3), (2, 4)]

def test_vein_never_overwrites_other_ore():
    terrain = TerrainGrid(10)
    coal = terrain.register_material("coal_ore")
    gold = terrain.register_material("gold_ore")
    for cell in ((5, 6), (6, 5), (4, 5)):
        terrain.material[cell] = gold

    vein = place_ore_vein(terrain, (5, 5), coal, 10, random.Random(2))
    for cell in ((5, 6), (6, 5), (4, 5)):
        assert int(terrain.material[cell]) == gold
        assert cell not in vein

def test_vein_from_open_cell_is_empty():
    terrain = TerrainGrid(6)
    terrain.solid[3, 3] = False
    iron = terrain.register_material("iron_ore")
    assert place_ore_vein(terrain, (3, 3), iron, 4, random.Random(0)) == []

def test_vein_is_deterministic():
    def grow():
        terrain = TerrainGrid(12)
        iron = terrain.register_material("iron_ore")
        return place_ore_vein(terrain, (6, 6), iron, 7, random.Random(99))
    assert grow() == grow()

def test_distributor_hits_target_on_solid_map():
    terrain = TerrainGrid(40)
    ore = OreDistributionDef(block="iron_ore", percentage=5.0, min_vein_size=3, max_vein_size=6)
    counts = OreDistributor(random.Random(11)).place_ores(terrain, [ore])

    placed = counts["iron_ore"]
    assert 80 <= placed <= 80 + ore.max_vein_size - 1
    iron = terrain.register_material("iron_ore")
    assert int(np.count_nonzero(terrain.material == iron)) == placed

def test_distributor_zero_percentage_places_nothing():
    terrain = TerrainGrid(16)
    ore = OreDistributionDef(block="gold_ore", percentage=0.0)
    counts = OreDistributor(random.Random(3)).place_ores(terrain, [ore])
    assert counts == {"gold_ore": 0}
    assert not terrain.material.any()

def test_distributor_leaves_open_cells_alone():
    terrain = TerrainGrid(20)
    grid = np.ones((20, 20), dtype=bool)
    grid[:, :10] = False
    terrain.load_solidity(grid)
    ore = OreDistributionDef(block="coal_ore", percentage=30.0, min_vein_size=3, max_vein_size=7)
    OreDistributor(random.Random(8)).place_ores(terrain, [ore])

    assert not terrain.material[:, :10].any()
    assert terrain.material[:, 10:].any()

def test_overlapping_ores_under_deliver_without_error():
    terrain = TerrainGrid(10)
    ores = [
        OreDistributionDef(block="coal_ore", percentage=100.0, min_vein_size=3, max_vein_size=7),
        OreDistributionDef(block="iron_ore", percentage=50.0, min_vein_size=3, max_vein_size=6),
    ]
    counts = OreDistributor(random.Random(4)).place_ores(terrain, ores)

    assert counts["iron_ore"] < 50
    assert counts["coal_ore"] + counts["iron_ore"] <= 100
    assert int(np.count_nonzero(terrain.material != BASE_MATERIAL)) == counts["coal_ore"] + counts["iron_ore"]

def test_distributor_gives_up_on_open_map():
    terrain = TerrainGrid(10)
    terrain.load_solidity(np.zeros((10, 10), dtype=bool))
    ore = OreDistributionDef(block="coal_ore", percentage=50.0)
    assert OreDistributor(random.Random(0)).place_ores(terrain, [ore]) == {"coal_ore": 0}

def test_vein_size_range_validated():
    with pytest.raises(ValueError):
        OreDistributionDef(block="coal_ore", min_vein_size=5, max_vein_size=2)
