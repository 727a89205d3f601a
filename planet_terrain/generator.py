# planet_terrain/generator.py

"""
================================================================================
CORE TERRAIN SAMPLER
================================================================================
This module contains the noise fields and the NoiseSampler that composes
them into one terrain sample per coordinate, plus the SampleGrid container
shared by the chunk cache and the bulk generator.

Data Contract:
---------------
- Inputs (on initialization):
    - noise_config (NoiseConfig): Parameters for every field.
    - world_height (float): World height in world units, used to normalise
      latitude for the temperature field.
    - sample_scale (float): Noise samples per world unit. Feature scales in
      the config are expressed in these samples.
- Outputs (from methods):
    - NoiseValues for a single coordinate, or NumPy arrays for a grid.
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same seed and configuration, the output is
  deterministic, and a grid element always equals the scalar result for the
  same coordinate.
================================================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from . import config as DEFAULTS
from . import noise
from .settings import NoiseConfig, NoiseFieldConfig
from .tiling import TileClassifier, TileType


@dataclass(frozen=True)
class NoiseValues:
    """The semantic terrain sample for one coordinate."""
    continentalness: float
    temperature: float
    altitude: float


class FieldKind(Enum):
    CONTINENTALNESS = 'continentalness'
    TEMPERATURE = 'temperature'
    ALTITUDE = 'altitude'


class NoiseField:
    """
    A single fractal noise source. The kind selects the post-transform:

    - CONTINENTALNESS: the normalised fbm value as is.
    - TEMPERATURE: fbm blended with a latitude gradient, scaled to degrees.
    - ALTITUDE: a base fbm pass plus a squared mountain pass, clamped to
      [-1, 1].
    """
    def __init__(
        self,
        kind: FieldKind,
        field_config: NoiseFieldConfig,
        noise_config: NoiseConfig,
        world_height: float,
        sample_scale: float = 1.0,
        permutation_table: np.ndarray = None,
    ):
        self.kind = kind
        self.field_config = field_config
        self.world_height = float(world_height)
        self.sample_scale = float(sample_scale)

        self.latitude_influence = noise_config.latitude_influence
        self.temperature_range = noise_config.temperature_range
        self.mountain_config = noise_config.mountain
        self.mountain_initial_amplitude = noise_config.mountain_initial_amplitude
        self.mountain_weight = noise_config.mountain_weight

        if permutation_table is not None:
            self._p = permutation_table
        else:
            self._p = noise.create_permutation_table(field_config.seed)
        # The mountain pass of the altitude field has its own seed and table.
        self._mountain_p = None
        if kind is FieldKind.ALTITUDE:
            self._mountain_p = noise.create_permutation_table(self.mountain_config.seed)

    @property
    def permutation_table(self) -> np.ndarray:
        return self._p

    def _fbm(self, p: np.ndarray, x_samples: np.ndarray, y_samples: np.ndarray,
             field_config: NoiseFieldConfig, detail_level: int, initial_amplitude: float = 1.0) -> np.ndarray:
        return noise.fbm_noise_2d(
            p,
            x_samples,
            y_samples,
            field_config.octaves + detail_level,
            field_config.persistence,
            field_config.lacunarity,
            field_config.scale,
            initial_amplitude,
            noise.primitive_id(field_config.primitive),
        )

    def generate_grid(self, x_grid: np.ndarray, y_grid: np.ndarray, detail_level: int) -> np.ndarray:
        """Evaluates the field over a grid of world coordinates."""
        if detail_level < 0:
            raise ValueError(f"Detail level must be non-negative, got {detail_level}")

        x_grid = np.asarray(x_grid, dtype=np.float64)
        y_grid = np.asarray(y_grid, dtype=np.float64)
        x_samples = x_grid * self.sample_scale
        y_samples = y_grid * self.sample_scale

        base = self._fbm(self._p, x_samples, y_samples, self.field_config, detail_level)

        if self.kind is FieldKind.CONTINENTALNESS:
            return base

        if self.kind is FieldKind.TEMPERATURE:
            # Latitude runs from -1 at the top edge to +1 at the bottom edge.
            latitude_factor = (y_grid / self.world_height) * 2.0 - 1.0
            influence = self.latitude_influence
            return (base * (1.0 - influence) + latitude_factor * influence) * self.temperature_range

        mountain = self._fbm(
            self._mountain_p, x_samples, y_samples, self.mountain_config, detail_level,
            initial_amplitude=self.mountain_initial_amplitude,
        )
        combined = base + (mountain * mountain * self.mountain_weight)
        return np.clip(combined, -1.0, 1.0)

    def generate(self, x: float, y: float, detail_level: int) -> float:
        """Evaluates the field at a single world coordinate."""
        return float(self.generate_grid(np.array([[x]]), np.array([[y]]), detail_level)[0, 0])


class NoiseSampler:
    """
    Composes the continentalness, temperature and altitude fields into one
    NoiseValues record per coordinate. Purely functional after construction.
    """
    def __init__(self, noise_config: NoiseConfig, world_height: float,
                 sample_scale: float = DEFAULTS.MACRO_CHUNK_SIZE, logger: logging.Logger = None,
                 primitive: str = None):
        """
        Args:
            noise_config (NoiseConfig): Parameters for every field.
            world_height (float): World height in world units.
            sample_scale (float): Noise samples per world unit.
            logger (logging.Logger, optional): Logger for setup messages.
            primitive (str, optional): Noise primitive for every field and the
                mountain pass ('perlin' or 'worley'). Overrides the per-field
                choice in noise_config.
        """
        self.logger = logger or logging.getLogger(__name__)
        if primitive is not None:
            noise_config = noise_config.with_primitive(primitive)
        self.noise_config = noise_config

        self.continentalness = NoiseField(
            FieldKind.CONTINENTALNESS, noise_config.continentalness, noise_config, world_height, sample_scale
        )
        self.temperature = NoiseField(
            FieldKind.TEMPERATURE, noise_config.temperature, noise_config, world_height, sample_scale
        )
        self.altitude = NoiseField(
            FieldKind.ALTITUDE, noise_config.altitude, noise_config, world_height, sample_scale
        )

        primitives = '/'.join(
            field.primitive for field in
            (noise_config.continentalness, noise_config.temperature, noise_config.altitude, noise_config.mountain)
        )
        self.logger.debug(
            f"NoiseSampler ready (seeds: continentalness={noise_config.continentalness.seed}, "
            f"temperature={noise_config.temperature.seed}, altitude={noise_config.altitude.seed}, "
            f"mountain={noise_config.mountain.seed}; primitives: {primitives}; "
            f"world height {world_height} units, {sample_scale} samples per unit)"
        )

    def generate(self, x: float, y: float, detail_level: int) -> NoiseValues:
        return NoiseValues(
            continentalness=self.continentalness.generate(x, y, detail_level),
            temperature=self.temperature.generate(x, y, detail_level),
            altitude=self.altitude.generate(x, y, detail_level),
        )

    def generate_grid(self, x_grid: np.ndarray, y_grid: np.ndarray,
                      detail_level: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Returns (continentalness, temperature, altitude) arrays for a grid."""
        return (
            self.continentalness.generate_grid(x_grid, y_grid, detail_level),
            self.temperature.generate_grid(x_grid, y_grid, detail_level),
            self.altitude.generate_grid(x_grid, y_grid, detail_level),
        )


class SampleGrid:
    """
    Row-major grid of terrain samples: one float array per field and one
    array of tile ids, all of shape (rows, cols).
    """
    def __init__(self, continentalness: np.ndarray, temperature: np.ndarray,
                 altitude: np.ndarray, tiles: np.ndarray):
        if not (continentalness.shape == temperature.shape == altitude.shape == tiles.shape):
            raise ValueError("All sample arrays must share one shape")
        self.continentalness = continentalness
        self.temperature = temperature
        self.altitude = altitude
        self.tiles = tiles

    @classmethod
    def empty(cls, rows: int, cols: int) -> "SampleGrid":
        return cls(
            np.zeros((rows, cols)),
            np.zeros((rows, cols)),
            np.zeros((rows, cols)),
            np.full((rows, cols), TileType.UNCLASSIFIED, dtype=np.uint8),
        )

    @property
    def shape(self) -> tuple[int, int]:
        return self.tiles.shape

    def __len__(self) -> int:
        return self.tiles.size

    def value_at(self, row: int, col: int) -> NoiseValues:
        return NoiseValues(
            continentalness=float(self.continentalness[row, col]),
            temperature=float(self.temperature[row, col]),
            altitude=float(self.altitude[row, col]),
        )

    def tile_at(self, row: int, col: int) -> TileType:
        return TileType(int(self.tiles[row, col]))

    def __getitem__(self, index: tuple[int, int]) -> tuple[NoiseValues, TileType]:
        row, col = index
        return self.value_at(row, col), self.tile_at(row, col)

    def paste(self, other: "SampleGrid", row: int, col: int):
        """Copies another grid into this one with its top-left corner at (row, col)."""
        rows, cols = other.shape
        self.continentalness[row:row + rows, col:col + cols] = other.continentalness
        self.temperature[row:row + rows, col:col + cols] = other.temperature
        self.altitude[row:row + rows, col:col + cols] = other.altitude
        self.tiles[row:row + rows, col:col + cols] = other.tiles


def axis_coordinates(origin: float, start: int, count: int, resolution: int) -> np.ndarray:
    """
    World coordinates of `count` consecutive samples along one axis.

    This is the single authoritative coordinate formula: both the chunk cache
    and the bulk generator go through it, so the same sample index always maps
    to a bit-identical coordinate.
    """
    return origin + (start + np.arange(count, dtype=np.float64)) / resolution


def generate_sample_grid(
    sampler: NoiseSampler,
    classifier: TileClassifier,
    x_axis: np.ndarray,
    y_axis: np.ndarray,
    detail_level: int,
) -> SampleGrid:
    """Samples and classifies every point of the grid spanned by two axes."""
    x_grid, y_grid = np.meshgrid(x_axis, y_axis)
    continentalness, temperature, altitude = sampler.generate_grid(x_grid, y_grid, detail_level)
    tiles = classifier.classify_grid(continentalness, temperature, altitude)
    return SampleGrid(continentalness, temperature, altitude, tiles)
