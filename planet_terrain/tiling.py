# planet_terrain/tiling.py

"""
================================================================================
TILE CLASSIFICATION
================================================================================
This module turns continuous terrain samples into discrete tile types using
ordered threshold rules.

Each rule is a TileType plus three closed ranges (altitude, temperature,
continentalness). A sample gets the tile of the FIRST rule whose three ranges
all contain it. Ranges overlap on purpose; the declared order alone decides
between them, so the order of the rule tables below must never change.

It is designed to be a pure, stateless utility, safe to call from any thread
or worker process.
================================================================================
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .generator import NoiseValues
    from .settings import TilingConfig

# Unbounded sentinels for open-ended ranges.
UNBOUNDED_MIN = -np.inf
UNBOUNDED_MAX = np.inf


class TileType(IntEnum):
    """Terrain categories. The integer value is the tile id stored in grids."""
    SEA = 0
    PLAINS = 1
    ICE = 2
    SNOW = 3
    FOREST = 4
    DESERT = 5
    SAHARA = 6
    MOUNTAIN = 7
    PLATEAU = 8
    BEACH = 9
    BASIN = 10
    UNCLASSIFIED = 11

    def thresholds(self, config: "TilingConfig") -> tuple["TileThresholds", ...]:
        """Every band that admits this tile under the configured rule set."""
        return tuple(bounds for tile, bounds in rules_for(config) if tile is self)


@dataclass(frozen=True)
class ThresholdRange:
    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def mask(self, values: np.ndarray) -> np.ndarray:
        return (values >= self.min) & (values <= self.max)


ANY = ThresholdRange(UNBOUNDED_MIN, UNBOUNDED_MAX)


@dataclass(frozen=True)
class TileThresholds:
    altitude: ThresholdRange = ANY
    temperature: ThresholdRange = ANY
    continentalness: ThresholdRange = ANY

    def matches(self, altitude: float, temperature: float, continentalness: float) -> bool:
        return (self.altitude.contains(altitude)
                and self.temperature.contains(temperature)
                and self.continentalness.contains(continentalness))

    def mask(self, altitude: np.ndarray, temperature: np.ndarray, continentalness: np.ndarray) -> np.ndarray:
        return (self.altitude.mask(altitude)
                & self.temperature.mask(temperature)
                & self.continentalness.mask(continentalness))


def _continental_rules(config: "TilingConfig") -> list[tuple[TileType, TileThresholds]]:
    """
    Continentalness bands above sea level, each refined by temperature.
    Below sea level, extreme cold freezes to ice and extreme heat dries out.
    """
    sea = config.sea_level
    r = ThresholdRange
    return [
        (TileType.ICE, TileThresholds(continentalness=r(UNBOUNDED_MIN, sea), temperature=r(UNBOUNDED_MIN, -15.0))),
        (TileType.DESERT, TileThresholds(continentalness=r(UNBOUNDED_MIN, sea), temperature=r(50.0, UNBOUNDED_MAX))),
        (TileType.SEA, TileThresholds(continentalness=r(UNBOUNDED_MIN, sea))),
        (TileType.BEACH, TileThresholds(continentalness=r(sea, sea + 0.02), temperature=r(3.0, UNBOUNDED_MAX))),
        (TileType.SNOW, TileThresholds(continentalness=r(sea, sea + 0.2), temperature=r(UNBOUNDED_MIN, 3.0))),
        (TileType.SAHARA, TileThresholds(continentalness=r(sea + 0.02, sea + 0.2), temperature=r(60.0, UNBOUNDED_MAX))),
        (TileType.PLAINS, TileThresholds(continentalness=r(sea + 0.02, sea + 0.1))),
        (TileType.FOREST, TileThresholds(continentalness=r(sea + 0.1, sea + 0.2))),
        (TileType.PLATEAU, TileThresholds(continentalness=r(sea + 0.2, UNBOUNDED_MAX), temperature=r(70.0, UNBOUNDED_MAX))),
        (TileType.MOUNTAIN, TileThresholds(continentalness=r(sea + 0.2, sea + 0.3))),
        (TileType.SNOW, TileThresholds(continentalness=r(sea + 0.3, UNBOUNDED_MAX))),
    ]


def _relief_rules(config: "TilingConfig") -> list[tuple[TileType, TileThresholds]]:
    """Altitude bands refined by temperature, with rivers gating sea and beach."""
    sea = config.sea_level
    river = config.river_threshold
    r = ThresholdRange
    return [
        (TileType.SEA, TileThresholds(altitude=r(UNBOUNDED_MIN, sea), continentalness=r(0.0, river))),
        (TileType.ICE, TileThresholds(altitude=r(UNBOUNDED_MIN, sea), temperature=r(UNBOUNDED_MIN, -15.0),
                                      continentalness=r(0.0, 0.6))),
        (TileType.SNOW, TileThresholds(altitude=r(sea, sea + 0.7), temperature=r(UNBOUNDED_MIN, -30.0),
                                       continentalness=r(0.0, UNBOUNDED_MAX))),
        (TileType.MOUNTAIN, TileThresholds(altitude=r(sea + 0.7, UNBOUNDED_MAX),
                                           continentalness=r(0.0, UNBOUNDED_MAX))),
        (TileType.FOREST, TileThresholds(altitude=r(sea + 0.1, sea + 0.7), temperature=r(-30.0, 70.0),
                                         continentalness=r(0.6, UNBOUNDED_MAX))),
        (TileType.PLAINS, TileThresholds(altitude=r(sea + 0.1, sea + 0.7), temperature=r(-30.0, 70.0),
                                         continentalness=r(0.0, 0.6))),
        (TileType.BASIN, TileThresholds(altitude=r(UNBOUNDED_MIN, sea), temperature=r(70.0, UNBOUNDED_MAX))),
        (TileType.PLATEAU, TileThresholds(altitude=r(UNBOUNDED_MIN, sea + 0.7), temperature=r(70.0, UNBOUNDED_MAX))),
        (TileType.DESERT, TileThresholds(altitude=r(sea, UNBOUNDED_MAX), temperature=r(70.0, UNBOUNDED_MAX))),
        (TileType.BEACH, TileThresholds(altitude=r(sea, sea + 0.1), continentalness=r(0.0, river))),
    ]


RULE_SETS = {
    'continental': _continental_rules,
    'relief': _relief_rules,
}


def rules_for(config: "TilingConfig") -> list[tuple[TileType, TileThresholds]]:
    """The ordered (tile, thresholds) rules for a tiling config."""
    try:
        build = RULE_SETS[config.rule_set]
    except KeyError:
        raise ValueError(
            f"Unknown tiling rule set '{config.rule_set}'. Expected one of: {', '.join(RULE_SETS)}"
        ) from None
    return build(config)


def classify(values: "NoiseValues", config: "TilingConfig") -> TileType:
    """Returns the first tile whose thresholds contain the sample."""
    for tile, bounds in rules_for(config):
        if bounds.matches(values.altitude, values.temperature, values.continentalness):
            return tile
    return TileType.UNCLASSIFIED


class TileClassifier:
    """
    Holds a TilingConfig and its resolved rule table, and classifies single
    samples or whole grids with identical results.
    """
    def __init__(self, config: "TilingConfig"):
        self.config = config
        self.rules = rules_for(config)

    def classify(self, values: "NoiseValues") -> TileType:
        for tile, bounds in self.rules:
            if bounds.matches(values.altitude, values.temperature, values.continentalness):
                return tile
        return TileType.UNCLASSIFIED

    def classify_grid(self, continentalness: np.ndarray, temperature: np.ndarray,
                      altitude: np.ndarray) -> np.ndarray:
        """
        Classifies whole arrays at once. np.select picks the first true
        condition, which is exactly the rule priority of classify().
        """
        conditions = [bounds.mask(altitude, temperature, continentalness) for _, bounds in self.rules]
        choices = [int(tile) for tile, _ in self.rules]
        return np.select(conditions, choices, default=int(TileType.UNCLASSIFIED)).astype(np.uint8)
