# planet_terrain/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the terrain
generator. These values are used if they are not explicitly provided by the
caller's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC WORLD.
Instead, build the settings objects in `planet_terrain.settings` from a
configuration dictionary and pass them to WorldChunks / ParallelGridGenerator.
================================================================================
"""

# --- Noise Generation ---
DEFAULT_SEED = 42
# Offsets added to the master seed so every field gets its own permutation
# table while staying deterministic from that one seed.
CONTINENTALNESS_SEED_OFFSET = 0
TEMPERATURE_SEED_OFFSET = 12347
ALTITUDE_SEED_OFFSET = 98761
MOUNTAIN_SEED_OFFSET = 25391

# Size of the gradient noise permutation table (before it is doubled).
PERMUTATION_TABLE_SIZE = 256

# Noise primitive used by every field unless overridden: 'perlin' or 'worley'.
NOISE_PRIMITIVE = 'perlin'

# --- Feature Scales in Macro Samples ---
# A larger number means a larger feature. One macro chunk spans
# MACRO_CHUNK_SIZE samples, so a scale of 100 with 32-sample chunks gives
# continents roughly three chunks across.
CONTINENTALNESS_SCALE = 100.0
CONTINENTALNESS_OCTAVES = 4
CONTINENTALNESS_PERSISTENCE = 0.5
CONTINENTALNESS_LACUNARITY = 2.0

TEMPERATURE_SCALE = 150.0
TEMPERATURE_OCTAVES = 3
TEMPERATURE_PERSISTENCE = 0.6
TEMPERATURE_LACUNARITY = 2.5

# Base terrain layer of the altitude field (rolling land).
ALTITUDE_SCALE = 200.0
ALTITUDE_OCTAVES = 6
ALTITUDE_PERSISTENCE = 0.5
ALTITUDE_LACUNARITY = 2.0

# Mountain layer of the altitude field. It is squared before being added to
# the base layer, so only strong values raise peaks.
MOUNTAIN_SCALE = 50.0
MOUNTAIN_OCTAVES = 4
MOUNTAIN_PERSISTENCE = 0.5
MOUNTAIN_LACUNARITY = 2.0
MOUNTAIN_INITIAL_AMPLITUDE = 0.5
MOUNTAIN_WEIGHT = 2.0

# How much the latitude gradient dominates the temperature noise [0, 1].
LATITUDE_INFLUENCE = 0.7
# Temperature output is the blended value scaled by this factor.
TEMPERATURE_RANGE = 100.0

# --- Tiling ---
SEA_LEVEL = 0.0
RIVER_THRESHOLD = 0.8
# 'continental': continentalness bands refined by temperature.
# 'relief': altitude bands refined by temperature and continentalness.
TILING_RULE_SET = 'continental'

# --- Chunking ---
MACRO_CHUNK_SIZE = 32   # Samples on one side of a macro chunk
MESO_CHUNK_SIZE = 32    # Samples on one side of a meso chunk
MESO_SUBDIVISION = 4    # Meso chunks along one side of a macro chunk
MAP_WIDTH = 1024        # In macro samples
MAP_HEIGHT = 512        # In macro samples

# --- Cache Bounds ---
MAX_MESO_CHUNKS = 128   # Per macro chunk
MAX_MACRO_CHUNKS = 256  # Per world. None disables the bound.

# --- Detail Levels ---
DETAIL_LEVEL_MACRO = 0
DETAIL_LEVEL_MESO = 1
SUPPORTED_DETAIL_LEVELS = (DETAIL_LEVEL_MACRO, DETAIL_LEVEL_MESO)
