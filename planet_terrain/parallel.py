# planet_terrain/parallel.py

"""
================================================================================
PARALLEL GRID GENERATOR
================================================================================
This module materializes a whole rectangular region of the world at once,
bypassing the lazy chunk cache. It is meant for export and offline baking.

The region is a grid of macro tiles, flattened row-major into tile indices.
Contiguous index ranges are handed to a pool of worker processes; each worker
builds its own NoiseSampler and TileClassifier once in its initializer and
then generates every tile in its range independently. The main process
stitches the returned tiles into one preallocated SampleGrid, placing each
tile by its index so the output never depends on completion order.

Data Contract:
---------------
- Inputs: width and height in macro tiles, samples per tile side, a seed and
  a detail level.
- Outputs: A SampleGrid of shape (height * chunk_size, width * chunk_size).
- Side Effects: Spawns worker processes (unless processes == 1), shows a tqdm
  progress bar and logs timing information.
- Invariants: For a chunk_size equal to the chunk cache's resolution at the
  same detail level, every sample equals the one WorldChunks returns for the
  same coordinate.
================================================================================
"""

import logging
import multiprocessing
import os
import time

from tqdm import tqdm

from . import config as DEFAULTS
from .generator import NoiseSampler, SampleGrid, axis_coordinates, generate_sample_grid
from .settings import NoiseConfig, TilingConfig
from .tiling import TileClassifier

# Number of index ranges per worker. More ranges than workers keeps the pool
# busy when some ranges finish early.
PARTITIONS_PER_WORKER = 4

# --- Global variables for worker processes ---
worker_sampler = None
worker_classifier = None


def init_worker(noise_config: NoiseConfig, tiling_config: TilingConfig, world_height: float, sample_scale: float):
    """Initializes the global state for each worker process."""
    global worker_sampler, worker_classifier

    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    worker_sampler = NoiseSampler(noise_config, world_height, sample_scale, logger=worker_logger)
    worker_classifier = TileClassifier(tiling_config)


def generate_tile(sampler: NoiseSampler, classifier: TileClassifier, index: int,
                  width: int, chunk_size: int, detail_level: int) -> SampleGrid:
    """Generates the full sample grid of the tile at a flat row-major index."""
    cx, cy = index % width, index // width
    x_axis = axis_coordinates(cx, 0, chunk_size, chunk_size)
    y_axis = axis_coordinates(cy, 0, chunk_size, chunk_size)
    return generate_sample_grid(sampler, classifier, x_axis, y_axis, detail_level)


def generate_range(sampler: NoiseSampler, classifier: TileClassifier, task: tuple) -> list:
    start, stop, width, chunk_size, detail_level = task
    return [
        (index, generate_tile(sampler, classifier, index, width, chunk_size, detail_level))
        for index in range(start, stop)
    ]


def process_range(task: tuple) -> list:
    """
    Worker entry point. Generates every tile in [start, stop) and returns
    (index, SampleGrid) pairs.
    """
    return generate_range(worker_sampler, worker_classifier, task)


def partition_ranges(total: int, parts: int) -> list[tuple[int, int]]:
    """Splits [0, total) into at most `parts` contiguous, nearly equal ranges."""
    parts = max(1, min(parts, total))
    base, extra = divmod(total, parts)
    ranges = []
    start = 0
    for i in range(parts):
        stop = start + base + (1 if i < extra else 0)
        ranges.append((start, stop))
        start = stop
    return ranges


class ParallelGridGenerator:
    """
    Data-parallel bulk generator built on multiprocessing.Pool.
    """
    def __init__(self, noise_config: NoiseConfig = None, tiling_config: TilingConfig = None,
                 processes: int = None, logger: logging.Logger = None,
                 sample_scale: float = DEFAULTS.MACRO_CHUNK_SIZE, show_progress: bool = True,
                 world_height: float = None):
        """
        Args:
            noise_config (NoiseConfig, optional): Field parameters. The seed
                passed to generate() replaces its master seed.
            tiling_config (TilingConfig, optional): Classifier knobs.
            processes (int, optional): Worker count. Defaults to one less than
                the CPU count; 1 runs everything in the calling process.
            logger (logging.Logger, optional): Logger for progress messages.
            sample_scale (float): Noise samples per world unit. Must match the
                chunk cache's macro_chunk_size for the two paths to agree.
            show_progress (bool): Whether to display a tqdm progress bar.
            world_height (float, optional): World height in world units, used
                to normalise latitude. Defaults to the height of each generated
                region. Must match the chunk cache's height_chunks for the two
                paths to agree on temperature.
        """
        self.logger = logger or logging.getLogger(__name__)
        self.noise_config = noise_config or NoiseConfig.from_seed()
        self.tiling_config = tiling_config or TilingConfig()
        self.processes = processes if processes is not None else max(1, multiprocessing.cpu_count() - 1)
        self.sample_scale = sample_scale
        self.show_progress = show_progress
        self.world_height = world_height

        if self.processes < 1:
            raise ValueError(f"'processes' must be at least 1, got {self.processes}")
        if world_height is not None and world_height <= 0:
            raise ValueError(f"'world_height' must be positive, got {world_height}")

    def generate(self, width: int, height: int, chunk_size: int, seed: int,
                 detail_level: int = DEFAULTS.DETAIL_LEVEL_MESO) -> SampleGrid:
        """
        Generates every tile of a width x height region and stitches them into
        one SampleGrid.

        Args:
            width, height (int): Region size in macro tiles (world units).
            chunk_size (int): Samples per tile side.
            seed (int): Master seed for the noise fields.
            detail_level (int): Extra octaves added to every field.
        """
        if width < 1 or height < 1 or chunk_size < 1:
            raise ValueError(
                f"Width, height and chunk size must be positive, got {width}, {height}, {chunk_size}"
            )
        if detail_level < 0:
            raise ValueError(f"Detail level must be non-negative, got {detail_level}")

        noise_config = self.noise_config.reseeded(seed)
        total_tiles = width * height
        ranges = partition_ranges(total_tiles, self.processes * PARTITIONS_PER_WORKER)
        tasks = [(start, stop, width, chunk_size, detail_level) for start, stop in ranges]
        world_height = self.world_height if self.world_height is not None else height
        init_args = (noise_config, self.tiling_config, world_height, self.sample_scale)

        self.logger.info(
            f"Generating a {width}x{height} tile region at {chunk_size} samples per tile "
            f"(seed {seed}, detail level {detail_level}) in {len(tasks)} ranges."
        )
        start_time = time.perf_counter()

        grid = SampleGrid.empty(height * chunk_size, width * chunk_size)
        with tqdm(total=total_tiles, desc="Generating Tiles", disable=not self.show_progress) as progress:
            for results in self._run(tasks, init_args):
                for index, tile in results:
                    grid.paste(tile, (index // width) * chunk_size, (index % width) * chunk_size)
                progress.update(len(results))

        elapsed = time.perf_counter() - start_time
        self.logger.info(f"Generated {total_tiles} tiles in {elapsed:.2f} seconds.")
        return grid

    def _run(self, tasks: list, init_args: tuple):
        """Yields per-range results, in-process or from a worker pool."""
        if self.processes == 1:
            self.logger.info("Running in-process.")
            noise_config, tiling_config, world_height, sample_scale = init_args
            sampler = NoiseSampler(noise_config, world_height, sample_scale, logger=self.logger)
            classifier = TileClassifier(tiling_config)
            for task in tasks:
                yield generate_range(sampler, classifier, task)
            return

        self.logger.info(f"Using {self.processes} worker processes.")
        with multiprocessing.Pool(processes=self.processes, initializer=init_worker, initargs=init_args) as pool:
            yield from pool.imap_unordered(process_range, tasks)
