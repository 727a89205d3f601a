import itertools
import logging

import numpy as np
import pytest

from planet_terrain.errors import CoordinateOutOfBoundsError
from planet_terrain.runtime import AccessClock, ChunkCoord, WorldChunks

from conftest import make_chunking

A, B, C = ChunkCoord(0, 0), ChunkCoord(1, 0), ChunkCoord(2, 0)


def make_world(noise_config, tiling_config, **chunking_overrides):
    return WorldChunks(noise_config, tiling_config, make_chunking(**chunking_overrides))


def test_chunk_coords_are_hashable_and_ordered():
    assert ChunkCoord(1, 2) == ChunkCoord(1, 2)
    assert len({ChunkCoord(1, 2), ChunkCoord(1, 2), ChunkCoord(2, 1)}) == 2
    assert min(ChunkCoord(1, 0), ChunkCoord(0, 5)) == ChunkCoord(0, 5)


def test_access_clock_never_repeats():
    clock = AccessClock(time_source=lambda: 5)
    assert [clock.now() for _ in range(3)] == [5, 6, 7]


def test_access_clock_never_goes_backwards():
    readings = iter([100, 50, 200])
    clock = AccessClock(time_source=lambda: next(readings))
    assert [clock(), clock(), clock()] == [100, 101, 200]


def test_macro_chunk_is_fully_generated(noise_config, tiling_config):
    world = make_world(noise_config, tiling_config)
    macro = world.get_or_generate_macro(ChunkCoord(1, 2))
    assert macro.samples.shape == (8, 8)
    assert macro.meso_cache == {}
    meso = macro.get_or_generate_meso(ChunkCoord(3, 1))
    assert meso.samples.shape == (4, 4)
    assert len(meso.samples) == 16


def test_least_recently_used_meso_is_evicted(noise_config, tiling_config):
    world = make_world(noise_config, tiling_config, max_meso_chunks=2)
    macro = world.get_or_generate_macro(ChunkCoord(0, 0))

    macro.get_or_generate_meso(A)
    macro.get_or_generate_meso(B)
    macro.get_or_generate_meso(C)

    assert set(macro.meso_cache) == {B, C}
    assert world.cache_stats() == (1, 2)


def test_touch_protects_recently_used_meso(noise_config, tiling_config):
    world = make_world(noise_config, tiling_config, max_meso_chunks=2)
    macro = world.get_or_generate_macro(ChunkCoord(0, 0))

    macro.get_or_generate_meso(A)
    macro.get_or_generate_meso(B)
    macro.get_or_generate_meso(A)
    macro.get_or_generate_meso(C)

    assert set(macro.meso_cache) == {A, C}


def test_meso_cache_never_exceeds_its_bound(noise_config, tiling_config):
    world = make_world(noise_config, tiling_config, max_meso_chunks=3)
    macro = world.get_or_generate_macro(ChunkCoord(2, 2))
    for mx, my in itertools.product(range(4), repeat=2):
        macro.get_or_generate_meso(ChunkCoord(mx, my))
        assert len(macro.meso_cache) <= 3


def test_cache_hit_returns_the_same_chunk(noise_config, tiling_config):
    world = make_world(noise_config, tiling_config)
    macro = world.get_or_generate_macro(ChunkCoord(0, 0))
    first = macro.get_or_generate_meso(B)
    stamp = first.last_accessed
    second = macro.get_or_generate_meso(B)
    assert second is first
    assert second.last_accessed > stamp


def test_evicted_meso_regenerates_identically(noise_config, tiling_config):
    world = make_world(noise_config, tiling_config, max_meso_chunks=2)
    macro = world.get_or_generate_macro(ChunkCoord(1, 1))

    before = macro.get_or_generate_meso(A)
    macro.get_or_generate_meso(B)
    macro.get_or_generate_meso(C)
    assert A not in macro.meso_cache

    after = macro.get_or_generate_meso(A)
    assert after is not before
    assert np.array_equal(after.samples.continentalness, before.samples.continentalness)
    assert np.array_equal(after.samples.temperature, before.samples.temperature)
    assert np.array_equal(after.samples.altitude, before.samples.altitude)
    assert np.array_equal(after.samples.tiles, before.samples.tiles)


@pytest.mark.parametrize("coord", [ChunkCoord(-1, 0), ChunkCoord(0, 4), ChunkCoord(4, 4)])
def test_meso_coordinates_outside_the_subdivision_are_rejected(noise_config, tiling_config, coord):
    world = make_world(noise_config, tiling_config)
    macro = world.get_or_generate_macro(ChunkCoord(0, 0))
    with pytest.raises(CoordinateOutOfBoundsError):
        macro.get_or_generate_meso(coord)
    assert macro.meso_cache == {}


def test_eviction_is_logged(noise_config, tiling_config, caplog):
    world = make_world(noise_config, tiling_config, max_meso_chunks=1)
    macro = world.get_or_generate_macro(ChunkCoord(0, 0))
    with caplog.at_level(logging.DEBUG):
        macro.get_or_generate_meso(A)
        macro.get_or_generate_meso(B)
    assert "Evicted meso chunk (0, 0)" in caplog.text
