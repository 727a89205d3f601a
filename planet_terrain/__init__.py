# planet_terrain/__init__.py

# Public API of the planet_terrain package.

from .errors import CoordinateOutOfBoundsError, InvalidDetailLevelError
from .generator import NoiseSampler, NoiseValues, SampleGrid
from .parallel import ParallelGridGenerator
from .runtime import ChunkCoord, WorldChunks
from .settings import ChunkingConfig, NoiseConfig, NoiseFieldConfig, TilingConfig
from .tiling import TileClassifier, TileType, classify

__all__ = [
    "CoordinateOutOfBoundsError",
    "InvalidDetailLevelError",
    "NoiseSampler",
    "NoiseValues",
    "SampleGrid",
    "ParallelGridGenerator",
    "ChunkCoord",
    "WorldChunks",
    "ChunkingConfig",
    "NoiseConfig",
    "NoiseFieldConfig",
    "TilingConfig",
    "TileClassifier",
    "TileType",
    "classify",
]
