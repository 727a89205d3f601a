# planet_terrain/runtime/__init__.py

# This file makes the 'runtime' directory a Python package.
# It defines the public API of the lazy chunk cache.

from .world import WorldChunks
from .chunks import ChunkCoord, MacroChunk, MesoChunk
from .clock import AccessClock

__all__ = ["WorldChunks", "ChunkCoord", "MacroChunk", "MesoChunk", "AccessClock"]
