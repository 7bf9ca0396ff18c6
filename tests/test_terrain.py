import numpy as np
import pytest
from world.terrain import TerrainGrid, BASE_MATERIAL

def test_tiles_are_centred_on_the_map():
    terrain = TerrainGrid(64)
    assert terrain.to_grid((0, 0)) == (32, 32)
    assert terrain.to_tile(0, 0) == (-32, -32)
    assert terrain.to_tile(*terrain.to_grid((5, -7))) == (5, -7)

def test_out_of_range_queries_are_not_faults():
    terrain = TerrainGrid(8)
    assert terrain.has_solid_tile((0, 0)) is True
    assert terrain.has_solid_tile((100, 0)) is False
    assert terrain.has_solid_tile((-5, 0)) is False
    assert terrain.block_at((100, 100)) is None

def test_block_at_reports_material():
    terrain = TerrainGrid(8)
    iron = terrain.register_material("iron_ore")
    gx, gy = terrain.to_grid((1, 1))
    terrain.material[gx, gy] = iron
    assert terrain.block_at((1, 1)) == "iron_ore"
    assert terrain.block_at((0, 0)) == "stone"

def test_register_material_is_stable():
    terrain = TerrainGrid(4)
    first = terrain.register_material("coal_ore")
    assert terrain.register_material("coal_ore") == first
    assert terrain.register_material("stone") == BASE_MATERIAL
    assert terrain.palette == ["stone", "coal_ore"]

def test_remove_tile_is_one_way():
    terrain = TerrainGrid(8)
    assert terrain.remove_tile((0, 0)) == "stone"
    assert terrain.has_solid_tile((0, 0)) is False
    assert terrain.block_at((0, 0)) is None
    assert terrain.remove_tile((0, 0)) is None

def test_load_solidity_resets_material():
    terrain = TerrainGrid(4)
    terrain.material[1, 1] = terrain.register_material("gold_ore")
    grid = np.zeros((4, 4), dtype=bool)
    grid[0, 0] = True
    terrain.load_solidity(grid)
    assert terrain.solid_count() == 1
    assert int(terrain.material[1, 1]) == BASE_MATERIAL
    assert list(terrain.solid_tiles()) == [((-2, -2), "stone")]

def test_load_solidity_rejects_wrong_shape():
    terrain = TerrainGrid(4)
    with pytest.raises(ValueError):
        terrain.load_solidity(np.ones((5, 4), dtype=bool))

def test_clear_drops_everything():
    terrain = TerrainGrid(4)
    terrain.register_material("coal_ore")
    terrain.clear()
    assert terrain.solid_count() == 0
    assert terrain.palette == ["stone"]
    assert terrain.register_material("iron_ore") == 1

def test_invalid_size():
    with pytest.raises(ValueError):
        TerrainGrid(0)
