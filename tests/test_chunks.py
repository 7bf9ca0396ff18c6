import pytest
from world.chunks import ChunkKey, chunk_of, tiles_in_chunk

def test_chunk_of_positive_tiles():
    assert chunk_of((0, 0), 32) == ChunkKey(0, 0)
    assert chunk_of((31, 31), 32) == ChunkKey(0, 0)
    assert chunk_of((32, 5), 32) == ChunkKey(1, 0)

def test_chunk_of_negative_tiles_floor_divide():
    assert chunk_of((-1, 0), 32) == ChunkKey(-1, 0)
    assert chunk_of((-32, -33), 32) == ChunkKey(-1, -2)

def test_chunk_keys_sort_by_x_then_y():
    keys = [ChunkKey(1, 0), ChunkKey(-1, 5), ChunkKey(0, -2), ChunkKey(-1, -1)]
    assert sorted(keys) == [ChunkKey(-1, -1), ChunkKey(-1, 5), ChunkKey(0, -2), ChunkKey(1, 0)]

def test_tiles_in_chunk():
    tiles = list(tiles_in_chunk(ChunkKey(-1, 0), 4))
    assert len(tiles) == 16
    assert (-4, 0) in tiles
    assert (-1, 3) in tiles
    assert (0, 0) not in tiles
    assert all(chunk_of(t, 4) == ChunkKey(-1, 0) for t in tiles)

def test_invalid_chunk_size():
    with pytest.raises(ValueError):
        chunk_of((1, 1), 0)
    with pytest.raises(ValueError):
        list(tiles_in_chunk(ChunkKey(0, 0), -2))
