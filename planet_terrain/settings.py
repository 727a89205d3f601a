# planet_terrain/settings.py

"""
================================================================================
GENERATION SETTINGS
================================================================================
Immutable configuration objects for the noise fields, the tile classifier and
the chunk hierarchy. Every object can be built from a plain dictionary; any
key that is missing falls back to the matching constant in `config`.

Data Contract:
---------------
- Inputs: dictionaries of user parameters (e.g. loaded from a JSON file).
- Outputs: frozen dataclasses that are safe to share between threads and to
  pickle into worker processes.
- Side Effects: None.
- Invariants: A settings object is validated on construction and never
  changes afterwards.
================================================================================
"""

from dataclasses import dataclass, asdict, replace

from . import config as DEFAULTS
from . import noise


def _require_positive(name: str, value) -> None:
    if value <= 0:
        raise ValueError(f"'{name}' must be positive, got {value!r}")


@dataclass(frozen=True)
class NoiseFieldConfig:
    """Parameters of one fractal noise pass."""
    scale: float
    octaves: int
    persistence: float
    lacunarity: float
    seed: int
    primitive: str = DEFAULTS.NOISE_PRIMITIVE

    def __post_init__(self):
        _require_positive('scale', self.scale)
        _require_positive('lacunarity', self.lacunarity)
        noise.primitive_id(self.primitive)
        if self.octaves < 1:
            raise ValueError(f"'octaves' must be at least 1, got {self.octaves!r}")

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class NoiseConfig:
    """
    The full set of noise parameters for a world: one config per field, plus
    the mountain pass of the altitude field and the temperature blend knobs.
    """
    continentalness: NoiseFieldConfig
    temperature: NoiseFieldConfig
    altitude: NoiseFieldConfig
    mountain: NoiseFieldConfig
    latitude_influence: float = DEFAULTS.LATITUDE_INFLUENCE
    temperature_range: float = DEFAULTS.TEMPERATURE_RANGE
    mountain_initial_amplitude: float = DEFAULTS.MOUNTAIN_INITIAL_AMPLITUDE
    mountain_weight: float = DEFAULTS.MOUNTAIN_WEIGHT

    def __post_init__(self):
        if not 0.0 <= self.latitude_influence <= 1.0:
            raise ValueError(
                f"'latitude_influence' must be within [0, 1], got {self.latitude_influence!r}"
            )

    @classmethod
    def from_seed(cls, seed: int = DEFAULTS.DEFAULT_SEED) -> "NoiseConfig":
        """Builds the default noise configuration for a master seed."""
        return cls.from_dict({'seed': seed})

    @classmethod
    def from_dict(cls, user_config: dict) -> "NoiseConfig":
        """
        Builds a NoiseConfig from a flat dictionary.

        Per-field seeds are derived from 'seed' plus the field's offset, so a
        single master seed is enough to reproduce a world.
        """
        seed = user_config.get('seed', DEFAULTS.DEFAULT_SEED)
        primitive = user_config.get('noise_primitive', DEFAULTS.NOISE_PRIMITIVE)

        def field(prefix: str, seed_offset: int) -> NoiseFieldConfig:
            upper = prefix.upper()
            return NoiseFieldConfig(
                scale=user_config.get(f'{prefix}_scale', getattr(DEFAULTS, f'{upper}_SCALE')),
                octaves=user_config.get(f'{prefix}_octaves', getattr(DEFAULTS, f'{upper}_OCTAVES')),
                persistence=user_config.get(f'{prefix}_persistence', getattr(DEFAULTS, f'{upper}_PERSISTENCE')),
                lacunarity=user_config.get(f'{prefix}_lacunarity', getattr(DEFAULTS, f'{upper}_LACUNARITY')),
                seed=seed + user_config.get(f'{prefix}_seed_offset', seed_offset),
                primitive=user_config.get(f'{prefix}_primitive', primitive),
            )

        return cls(
            continentalness=field('continentalness', DEFAULTS.CONTINENTALNESS_SEED_OFFSET),
            temperature=field('temperature', DEFAULTS.TEMPERATURE_SEED_OFFSET),
            altitude=field('altitude', DEFAULTS.ALTITUDE_SEED_OFFSET),
            mountain=field('mountain', DEFAULTS.MOUNTAIN_SEED_OFFSET),
            latitude_influence=user_config.get('latitude_influence', DEFAULTS.LATITUDE_INFLUENCE),
            temperature_range=user_config.get('temperature_range', DEFAULTS.TEMPERATURE_RANGE),
            mountain_initial_amplitude=user_config.get(
                'mountain_initial_amplitude', DEFAULTS.MOUNTAIN_INITIAL_AMPLITUDE
            ),
            mountain_weight=user_config.get('mountain_weight', DEFAULTS.MOUNTAIN_WEIGHT),
        )

    @property
    def master_seed(self) -> int:
        return self.continentalness.seed - DEFAULTS.CONTINENTALNESS_SEED_OFFSET

    def reseeded(self, seed: int) -> "NoiseConfig":
        """Returns a copy with every field seed moved to a new master seed, keeping the offsets."""
        shift = seed - self.master_seed
        return replace(
            self,
            continentalness=replace(self.continentalness, seed=self.continentalness.seed + shift),
            temperature=replace(self.temperature, seed=self.temperature.seed + shift),
            altitude=replace(self.altitude, seed=self.altitude.seed + shift),
            mountain=replace(self.mountain, seed=self.mountain.seed + shift),
        )

    def with_primitive(self, primitive: str) -> "NoiseConfig":
        """Returns a copy where every field, including the mountain pass, uses one primitive."""
        return replace(
            self,
            continentalness=replace(self.continentalness, primitive=primitive),
            temperature=replace(self.temperature, primitive=primitive),
            altitude=replace(self.altitude, primitive=primitive),
            mountain=replace(self.mountain, primitive=primitive),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TilingConfig:
    """The two knobs every classification threshold is derived from."""
    sea_level: float = DEFAULTS.SEA_LEVEL
    river_threshold: float = DEFAULTS.RIVER_THRESHOLD
    rule_set: str = DEFAULTS.TILING_RULE_SET

    @classmethod
    def from_dict(cls, user_config: dict) -> "TilingConfig":
        return cls(
            sea_level=user_config.get('sea_level', DEFAULTS.SEA_LEVEL),
            river_threshold=user_config.get('river_threshold', DEFAULTS.RIVER_THRESHOLD),
            rule_set=user_config.get('tiling_rule_set', DEFAULTS.TILING_RULE_SET),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ChunkingConfig:
    """
    Geometry of the chunk hierarchy.

    map_width and map_height are measured in macro samples; one world unit is
    one macro chunk, so the world spans width_chunks x height_chunks units.
    """
    macro_chunk_size: int = DEFAULTS.MACRO_CHUNK_SIZE
    meso_chunk_size: int = DEFAULTS.MESO_CHUNK_SIZE
    map_width: int = DEFAULTS.MAP_WIDTH
    map_height: int = DEFAULTS.MAP_HEIGHT
    meso_subdivision: int = DEFAULTS.MESO_SUBDIVISION
    max_meso_chunks: int = DEFAULTS.MAX_MESO_CHUNKS
    max_macro_chunks: int | None = DEFAULTS.MAX_MACRO_CHUNKS

    def __post_init__(self):
        for name in ('macro_chunk_size', 'meso_chunk_size', 'meso_subdivision', 'max_meso_chunks'):
            _require_positive(name, getattr(self, name))
        if self.max_macro_chunks is not None:
            _require_positive('max_macro_chunks', self.max_macro_chunks)
        if self.map_width < self.macro_chunk_size or self.map_height < self.macro_chunk_size:
            raise ValueError(
                f"Map of {self.map_width}x{self.map_height} samples is smaller than one "
                f"macro chunk ({self.macro_chunk_size} samples)"
            )

    @property
    def width_chunks(self) -> int:
        return self.map_width // self.macro_chunk_size

    @property
    def height_chunks(self) -> int:
        return self.map_height // self.macro_chunk_size

    @property
    def meso_resolution(self) -> int:
        """Meso samples per world unit along one axis."""
        return self.meso_subdivision * self.meso_chunk_size

    @classmethod
    def from_dict(cls, user_config: dict) -> "ChunkingConfig":
        return cls(
            macro_chunk_size=user_config.get('macro_chunk_size', DEFAULTS.MACRO_CHUNK_SIZE),
            meso_chunk_size=user_config.get('meso_chunk_size', DEFAULTS.MESO_CHUNK_SIZE),
            map_width=user_config.get('map_width', DEFAULTS.MAP_WIDTH),
            map_height=user_config.get('map_height', DEFAULTS.MAP_HEIGHT),
            meso_subdivision=user_config.get('meso_subdivision', DEFAULTS.MESO_SUBDIVISION),
            max_meso_chunks=user_config.get('max_meso_chunks', DEFAULTS.MAX_MESO_CHUNKS),
            max_macro_chunks=user_config.get('max_macro_chunks', DEFAULTS.MAX_MACRO_CHUNKS),
        )

    def to_dict(self) -> dict:
        return asdict(self)


__all__ = ["NoiseFieldConfig", "NoiseConfig", "TilingConfig", "ChunkingConfig"]
