# bake_world.py

"""
================================================================================
OFFLINE WORLD BAKER SCRIPT
================================================================================
This script is a command-line tool for materializing a whole world's terrain
data to disk ("baking"). It runs the ParallelGridGenerator over every macro
tile of the configured map and saves the raw sample arrays, so other tools can
load the full map without going through the lazy chunk cache.

Output directory contents:
    continentalness.npy, temperature.npy, altitude.npy  (float64 grids)
    tiles.npy                                           (uint8 TileType ids)
    generation_config.json                              (resolved settings)
    manifest.json                                       (dimensions, tile counts)

Usage:
    python bake_world.py --config configs/default_world.json
================================================================================
"""
import os
import sys
import json
import logging
import logging.config
import argparse
import time

import numpy as np

from planet_terrain import config as DEFAULTS
from planet_terrain.parallel import ParallelGridGenerator
from planet_terrain.settings import ChunkingConfig, NoiseConfig, TilingConfig
from planet_terrain.tiling import TileType

logger = logging.getLogger("Baker")


def setup_logging(log_config_path: str = None):
    """Configures logging from a dictConfig JSON file, or a plain stdout format."""
    if log_config_path is None:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(levelname)s - %(message)s',
            stream=sys.stdout
        )
        return

    with open(log_config_path, 'rt') as f:
        log_config = json.load(f)

    # File handlers write relative to the working directory.
    for handler in log_config.get('handlers', {}).values():
        filename = handler.get('filename')
        if filename and os.path.dirname(filename):
            os.makedirs(os.path.dirname(filename), exist_ok=True)

    logging.config.dictConfig(log_config)


def load_config(config_path: str) -> dict:
    """Loads the bake configuration. Exits the process if it cannot be read."""
    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, 'r') as f:
            return json.load(f)
    except FileNotFoundError:
        logger.critical(f"Configuration file not found at {config_path}. Exiting.")
        sys.exit(1)
    except json.JSONDecodeError as e:
        logger.critical(f"Error decoding JSON from {config_path}: {e}. Exiting.")
        sys.exit(1)


def build_manifest(tiles: np.ndarray, chunking: ChunkingConfig, chunk_size: int,
                   seed: int, detail_level: int) -> dict:
    """Summarizes a baked grid: its dimensions and how many samples got each tile."""
    counts = np.bincount(tiles.ravel(), minlength=len(TileType))
    return {
        'seed': seed,
        'detail_level': detail_level,
        'width_chunks': chunking.width_chunks,
        'height_chunks': chunking.height_chunks,
        'samples_per_chunk': chunk_size,
        'shape': list(tiles.shape),
        'tile_counts': {tile.name: int(counts[tile]) for tile in TileType},
    }


def bake_world(config_path: str, output_dir: str = None, processes: int = None,
               detail_level: int = DEFAULTS.DETAIL_LEVEL_MESO) -> str:
    """
    Loads a configuration, generates every tile of the world and saves the
    resulting arrays. Returns the output directory.
    """
    config = load_config(config_path)
    world_params = config.get('world_generation_parameters', {})

    try:
        noise_config = NoiseConfig.from_dict(world_params)
        tiling_config = TilingConfig.from_dict(world_params)
        chunking = ChunkingConfig.from_dict(world_params)
    except ValueError as e:
        logger.critical(f"Invalid world generation parameters: {e}")
        sys.exit(1)

    seed = noise_config.master_seed
    output_dir = output_dir or os.path.join("baked_worlds", f"seed_{seed}")
    os.makedirs(output_dir, exist_ok=True)

    if detail_level == DEFAULTS.DETAIL_LEVEL_MACRO:
        chunk_size = chunking.macro_chunk_size
    else:
        chunk_size = chunking.meso_resolution

    generator = ParallelGridGenerator(
        noise_config=noise_config,
        tiling_config=tiling_config,
        processes=processes,
        logger=logger,
        sample_scale=chunking.macro_chunk_size,
        world_height=chunking.height_chunks,
    )

    start_time = time.perf_counter()
    grid = generator.generate(chunking.width_chunks, chunking.height_chunks, chunk_size, seed, detail_level)

    np.save(os.path.join(output_dir, "continentalness.npy"), grid.continentalness)
    np.save(os.path.join(output_dir, "temperature.npy"), grid.temperature)
    np.save(os.path.join(output_dir, "altitude.npy"), grid.altitude)
    np.save(os.path.join(output_dir, "tiles.npy"), grid.tiles)

    generation_config = {
        'noise': noise_config.to_dict(),
        'tiling': tiling_config.to_dict(),
        'chunking': chunking.to_dict(),
    }
    with open(os.path.join(output_dir, "generation_config.json"), 'w') as f:
        json.dump(generation_config, f, indent=2)

    manifest = build_manifest(grid.tiles, chunking, chunk_size, seed, detail_level)
    with open(os.path.join(output_dir, "manifest.json"), 'w') as f:
        json.dump(manifest, f, indent=2)

    end_time = time.perf_counter()
    logger.info(f"Baking complete! Total time: {end_time - start_time:.2f} seconds.")
    logger.info("--- Tile Distribution ---")
    for name, count in manifest['tile_counts'].items():
        if count:
            logger.info(f"  - {name.capitalize()}: {count} samples ({count / len(grid):.1%})")
    logger.info(f"Baked world and manifest.json saved to: {output_dir}")
    return output_dir


# --- Command-Line Interface ---
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Offline terrain baker for planet_terrain worlds.")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to the JSON configuration file for the world to be baked."
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory. Defaults to baked_worlds/seed_<seed>."
    )
    parser.add_argument(
        "--processes",
        type=int,
        default=None,
        help="Number of worker processes. 1 runs in-process."
    )
    parser.add_argument(
        "--detail-level",
        type=int,
        choices=DEFAULTS.SUPPORTED_DETAIL_LEVELS,
        default=DEFAULTS.DETAIL_LEVEL_MESO,
        help="0 bakes the macro grid, 1 the meso grid."
    )
    parser.add_argument(
        "--log-config",
        type=str,
        default=None,
        help="Optional logging dictConfig JSON file."
    )
    args = parser.parse_args()

    setup_logging(args.log_config)
    bake_world(args.config, args.output, args.processes, args.detail_level)
