# planet_terrain/runtime/world.py

"""
================================================================================
WORLD RUNTIME
================================================================================
This module provides the user-facing `WorldChunks` class, the only object an
application needs to hold. It owns the noise configuration, the tile
classifier and every cached chunk, and answers sample queries at macro
(detail level 0) or meso (detail level 1) resolution, generating chunks on
demand and evicting the least recently used ones under a size bound.

A WorldChunks is meant to have one owner. Each cache level holds a lock
around its check/evict/build/insert step, so concurrent callers cannot
corrupt a cache, but they gain no throughput either. Use
ParallelGridGenerator for bulk work.
================================================================================
"""

import logging
import math
import threading

from .. import config as DEFAULTS
from ..errors import CoordinateOutOfBoundsError, InvalidDetailLevelError
from ..generator import NoiseSampler, NoiseValues
from ..settings import ChunkingConfig, NoiseConfig, TilingConfig
from ..tiling import TileClassifier, TileType
from .chunks import ChunkCoord, MacroChunk, evict_least_recently_used
from .clock import AccessClock

# Coordinates within this many samples below a grid node snap to that node.
NODE_TOLERANCE = 1e-9


def cell_index(coordinate: float, origin: int, resolution: int) -> int:
    """
    Index of the sample at or before `coordinate` in a chunk starting at
    `origin` with `resolution` samples per world unit, clamped to the chunk.

    The index is taken from the global sample position rather than from
    `coordinate - origin`; the subtraction would put a coordinate that lies
    exactly on a node into the previous cell (1.2 - 1 == 0.19999999999999996).
    """
    index = math.floor(coordinate * resolution + NODE_TOLERANCE) - origin * resolution
    return min(max(index, 0), resolution - 1)


class WorldChunks:
    """
    The lazily populated, evictable terrain cache for a whole world.
    """
    def __init__(self, noise_config: NoiseConfig = None, tiling_config: TilingConfig = None,
                 chunking_config: ChunkingConfig = None, logger: logging.Logger = None,
                 clock: AccessClock = None):
        """
        Initializes the world cache. No chunk is generated until it is sampled.

        Args:
            noise_config (NoiseConfig, optional): Field parameters. Defaults to
                the built-in configuration for the default seed.
            tiling_config (TilingConfig, optional): Classifier knobs.
            chunking_config (ChunkingConfig, optional): Chunk geometry, map
                size and cache bounds.
            logger (logging.Logger, optional): Logger for runtime messages.
            clock (AccessClock, optional): Source of access timestamps.
        """
        self.logger = logger or logging.getLogger(__name__)
        self.noise_config = noise_config or NoiseConfig.from_seed()
        self.tiling_config = tiling_config or TilingConfig()
        self.chunking_config = chunking_config or ChunkingConfig()
        self.clock = clock or AccessClock()

        self.width_chunks = self.chunking_config.width_chunks
        self.height_chunks = self.chunking_config.height_chunks
        self.max_macro_chunks = self.chunking_config.max_macro_chunks

        self.sampler = NoiseSampler(
            self.noise_config,
            world_height=self.height_chunks,
            sample_scale=self.chunking_config.macro_chunk_size,
            logger=self.logger,
        )
        self.classifier = TileClassifier(self.tiling_config)

        self.macro_chunks: dict[ChunkCoord, MacroChunk] = {}
        self._lock = threading.Lock()

        self.logger.info(
            f"WorldChunks initialized: {self.width_chunks}x{self.height_chunks} macro chunks "
            f"({self.chunking_config.map_width}x{self.chunking_config.map_height} samples), "
            f"seed {self.noise_config.continentalness.seed}, rule set '{self.tiling_config.rule_set}'."
        )

    def _check_bounds(self, x: float, y: float):
        if not (0.0 <= x < self.width_chunks and 0.0 <= y < self.height_chunks):
            raise CoordinateOutOfBoundsError(
                f"Coordinate ({x}, {y}) is outside the {self.width_chunks}x{self.height_chunks} world"
            )

    def get_or_generate_macro(self, coord: ChunkCoord) -> MacroChunk:
        """
        Returns the macro chunk at coord, building it (and evicting the least
        recently used macro chunk if the cache is full) when absent.
        """
        self._check_bounds(coord.x, coord.y)
        with self._lock:
            macro = self.macro_chunks.get(coord)
            if macro is None:
                if self.max_macro_chunks is not None and len(self.macro_chunks) >= self.max_macro_chunks:
                    evict_least_recently_used(self.macro_chunks, self.logger, "macro")
                macro = MacroChunk(coord, self.chunking_config, self.sampler,
                                   self.classifier, self.clock, self.logger)
                self.macro_chunks[coord] = macro
            macro.touch()
            return macro

    def _locate(self, x: float, y: float, detail_level: int):
        """Returns the grid that holds (x, y) at detail_level and the row/col inside it."""
        if detail_level not in DEFAULTS.SUPPORTED_DETAIL_LEVELS:
            raise InvalidDetailLevelError(
                f"Detail level {detail_level!r} is not supported; use "
                f"{DEFAULTS.DETAIL_LEVEL_MACRO} (macro) or {DEFAULTS.DETAIL_LEVEL_MESO} (meso)"
            )
        self._check_bounds(x, y)

        macro_coord = ChunkCoord(math.floor(x), math.floor(y))
        macro = self.get_or_generate_macro(macro_coord)

        if detail_level == DEFAULTS.DETAIL_LEVEL_MACRO:
            col = cell_index(x, macro_coord.x, macro.size)
            row = cell_index(y, macro_coord.y, macro.size)
            return macro.samples, row, col

        resolution = self.chunking_config.meso_resolution
        meso_size = self.chunking_config.meso_chunk_size
        fine_col = cell_index(x, macro_coord.x, resolution)
        fine_row = cell_index(y, macro_coord.y, resolution)
        meso = macro.get_or_generate_meso(ChunkCoord(fine_col // meso_size, fine_row // meso_size))
        return meso.samples, fine_row % meso_size, fine_col % meso_size

    def sample(self, x: float, y: float, detail_level: int) -> NoiseValues:
        """
        Returns the terrain sample at world coordinate (x, y).

        Args:
            x, y (float): World coordinates in macro chunk units.
            detail_level (int): 0 for the macro grid, 1 for the meso grid.
        """
        grid, row, col = self._locate(x, y, detail_level)
        return grid.value_at(row, col)

    def sample_tile(self, x: float, y: float, detail_level: int) -> tuple[NoiseValues, TileType]:
        """Same as sample(), but also returns the classified tile."""
        grid, row, col = self._locate(x, y, detail_level)
        return grid[row, col]

    def cache_stats(self) -> tuple[int, int]:
        """Returns (macro chunk count, meso chunk count summed over all macro chunks)."""
        with self._lock:
            macros = list(self.macro_chunks.values())
        return len(macros), sum(len(macro.meso_cache) for macro in macros)

    def clear(self):
        """Drops every cached chunk. Later samples regenerate identical data."""
        with self._lock:
            self.macro_chunks.clear()
        self.logger.info("WorldChunks cache cleared.")
