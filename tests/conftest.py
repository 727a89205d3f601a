import pytest

from planet_terrain.settings import ChunkingConfig, NoiseConfig, TilingConfig


def make_chunking(**overrides):
    """A 4x4 world of 8-sample macro chunks, each split into 4x4 meso chunks of 4 samples."""
    params = dict(
        macro_chunk_size=8,
        meso_chunk_size=4,
        map_width=32,
        map_height=32,
        meso_subdivision=4,
    )
    params.update(overrides)
    return ChunkingConfig(**params)


@pytest.fixture
def chunking():
    return make_chunking()


@pytest.fixture
def noise_config():
    return NoiseConfig.from_seed(42)


@pytest.fixture
def tiling_config():
    return TilingConfig(sea_level=-0.025)
