# planet_terrain/runtime/chunks.py

"""
================================================================================
CHUNK HIERARCHY
================================================================================
This module provides the two cache units of the lazy terrain cache:

- MacroChunk: a coarse grid covering one world unit, plus a bounded cache of
  the finer MesoChunks inside it.
- MesoChunk: a fine grid covering one cell of the macro chunk's subdivision.

Both are generated completely in their constructor; there is no partially
populated state. A chunk's samples never change while it is cached, and a
chunk rebuilt after eviction is bit-identical to the one that was evicted.

Data Contract:
---------------
- Inputs: chunk coordinates, the ChunkingConfig geometry, a shared
  NoiseSampler and TileClassifier, and an AccessClock.
- Outputs: populated SampleGrids.
- Side Effects: Logs chunk construction and eviction at DEBUG level.
- Invariants: len(meso_cache) <= max_meso_chunks after every insertion;
  last_accessed never moves backwards.
================================================================================
"""

import logging
import threading
from dataclasses import dataclass

from .. import config as DEFAULTS
from ..errors import CoordinateOutOfBoundsError
from ..generator import NoiseSampler, SampleGrid, axis_coordinates, generate_sample_grid
from ..settings import ChunkingConfig
from ..tiling import TileClassifier
from .clock import AccessClock


@dataclass(frozen=True, order=True)
class ChunkCoord:
    """
    Origin of a chunk in its parent's coordinate space: absolute world units
    for macro chunks, subdivision cells for meso chunks.
    """
    x: int
    y: int


def evict_least_recently_used(cache: dict, logger: logging.Logger, label: str):
    """
    Removes the entry with the oldest last_accessed stamp. Ties go to the
    smallest coordinate so eviction stays reproducible.
    """
    victim = min(cache.values(), key=lambda chunk: (chunk.last_accessed, chunk.coord))
    del cache[victim.coord]
    logger.debug(f"Evicted {label} chunk ({victim.coord.x}, {victim.coord.y}).")
    return victim


class MesoChunk:
    """A fine-resolution grid for one subdivision cell of a macro chunk."""

    def __init__(self, coord: ChunkCoord, macro_coord: ChunkCoord, chunking: ChunkingConfig,
                 sampler: NoiseSampler, classifier: TileClassifier, clock: AccessClock):
        self.coord = coord
        self.macro_coord = macro_coord
        self.size = chunking.meso_chunk_size
        self._clock = clock

        resolution = chunking.meso_resolution
        x_axis = axis_coordinates(macro_coord.x, coord.x * self.size, self.size, resolution)
        y_axis = axis_coordinates(macro_coord.y, coord.y * self.size, self.size, resolution)
        self.samples: SampleGrid = generate_sample_grid(
            sampler, classifier, x_axis, y_axis, DEFAULTS.DETAIL_LEVEL_MESO
        )
        self.last_accessed = clock.now()

    def touch(self):
        self.last_accessed = max(self.last_accessed, self._clock.now())


class MacroChunk:
    """
    A coarse-resolution grid for one world unit, owning a bounded LRU cache of
    the MesoChunks inside it.
    """

    def __init__(self, coord: ChunkCoord, chunking: ChunkingConfig, sampler: NoiseSampler,
                 classifier: TileClassifier, clock: AccessClock, logger: logging.Logger = None):
        self.coord = coord
        self.size = chunking.macro_chunk_size
        self.max_meso_chunks = chunking.max_meso_chunks
        self.chunking = chunking
        self.logger = logger or logging.getLogger(__name__)

        self._sampler = sampler
        self._classifier = classifier
        self._clock = clock
        self._lock = threading.Lock()

        x_axis = axis_coordinates(coord.x, 0, self.size, self.size)
        y_axis = axis_coordinates(coord.y, 0, self.size, self.size)
        self.samples: SampleGrid = generate_sample_grid(
            sampler, classifier, x_axis, y_axis, DEFAULTS.DETAIL_LEVEL_MACRO
        )
        self.meso_cache: dict[ChunkCoord, MesoChunk] = {}
        self.last_accessed = clock.now()
        self.logger.debug(f"Generated macro chunk ({coord.x}, {coord.y}) at {self.size}x{self.size}.")

    def touch(self):
        self.last_accessed = max(self.last_accessed, self._clock.now())

    def get_or_generate_meso(self, meso_coord: ChunkCoord) -> MesoChunk:
        """
        Returns the cached meso chunk for meso_coord, building it (and evicting
        the least recently used entry if the cache is full) when absent.
        """
        subdivision = self.chunking.meso_subdivision
        if not (0 <= meso_coord.x < subdivision and 0 <= meso_coord.y < subdivision):
            raise CoordinateOutOfBoundsError(
                f"Meso coordinate ({meso_coord.x}, {meso_coord.y}) is outside the "
                f"{subdivision}x{subdivision} subdivision of macro chunk ({self.coord.x}, {self.coord.y})"
            )

        with self._lock:
            meso = self.meso_cache.get(meso_coord)
            if meso is None:
                if len(self.meso_cache) >= self.max_meso_chunks:
                    evict_least_recently_used(self.meso_cache, self.logger, "meso")
                meso = MesoChunk(meso_coord, self.coord, self.chunking,
                                 self._sampler, self._classifier, self._clock)
                self.meso_cache[meso_coord] = meso

            meso.touch()
            self.touch()
            return meso
