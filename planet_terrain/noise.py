# planet_terrain/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides two 2D noise primitives, gradient (Perlin) noise and
cellular (Worley) noise, and their fractal Brownian motion (fbm)
composition. Both primitives are keyed by the same seeded permutation table.
It is designed to be a pure, stateless utility.

Data Contract:
---------------
- Inputs:
    - p: A pre-shuffled NumPy permutation table (int array, doubled to 512).
    - x, y: 2D NumPy float arrays of coordinates.
    - octaves, persistence, lacunarity, scale: Standard fbm parameters.
    - primitive: PRIMITIVE_PERLIN or PRIMITIVE_WORLEY.
- Outputs:
    - A NumPy array of noise values, normalised by the summed octave
      amplitudes so it stays within the primitive's range (roughly [-1, 1]).
- Side Effects: None.
- Invariants: The shape of the output array matches the shape of input x and
  y. Every element depends only on its own coordinate, so a 1x1 grid and a
  large grid give identical values for the same point.
================================================================================
"""

import numpy as np
from numba import njit

from . import config as DEFAULTS

# Pre-defined diagonal gradient vectors for performance.
_GRADIENT_VECTORS = np.array([[1, 1], [-1, 1], [1, -1], [-1, -1]])

# Primitive ids understood by the fbm kernel.
PRIMITIVE_PERLIN = 0
PRIMITIVE_WORLEY = 1
PRIMITIVES = {'perlin': PRIMITIVE_PERLIN, 'worley': PRIMITIVE_WORLEY}

# Second-closest distances are clamped to this before normalising.
WORLEY_MAX_DISTANCE = 1.5


def primitive_id(name: str) -> int:
    """Maps a primitive name to the id passed to fbm_noise_2d."""
    try:
        return PRIMITIVES[name]
    except KeyError:
        raise ValueError(
            f"Unknown noise primitive '{name}'. Expected one of: {', '.join(PRIMITIVES)}"
        ) from None


def create_permutation_table(seed: int) -> np.ndarray:
    """Builds the doubled permutation table for a seed."""
    p = np.arange(DEFAULTS.PERMUTATION_TABLE_SIZE, dtype=np.int64)
    rng = np.random.default_rng(seed)
    rng.shuffle(p)
    return np.stack([p, p]).flatten()


@njit
def _lerp(a, b, x):
    "Linear interpolation."
    return a + x * (b - a)

@njit
def _fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6 - 15) + 10)

@njit
def _gradient(h, x, y):
    """Calculates the dot product between a gradient vector and coordinates."""
    g = _GRADIENT_VECTORS[h % 4]
    return g[0] * x + g[1] * y

@njit
def perlin_2d(p, x, y):
    """Single-octave gradient noise at one point."""
    xi = int(np.floor(x))
    yi = int(np.floor(y))

    xf = x - xi
    yf = y - yi

    u = _fade(xf)
    v = _fade(yf)

    px0 = xi % 256
    px1 = (px0 + 1) % 256
    py0 = yi % 256
    py1 = (py0 + 1) % 256

    # Numba requires scalar indexing
    idx00 = p[p[px0] + py0]
    idx01 = p[p[px0] + py1]
    idx10 = p[p[px1] + py0]
    idx11 = p[p[px1] + py1]

    g00 = _gradient(idx00, xf, yf)
    g01 = _gradient(idx01, xf, yf - 1)
    g10 = _gradient(idx10, xf - 1, yf)
    g11 = _gradient(idx11, xf - 1, yf - 1)

    x1 = _lerp(g00, g10, u)
    x2 = _lerp(g01, g11, u)
    return _lerp(x1, x2, v)

@njit
def worley_2d(p, x, y):
    """
    Single-octave cellular (Worley) noise at one point.

    Each lattice cell holds one feature point whose offset comes from the
    permutation table. The value is the inverted distance to the second
    closest feature point, mapped to [-1, 1].
    """
    xi = int(np.floor(x))
    yi = int(np.floor(y))

    closest = WORLEY_MAX_DISTANCE
    second = WORLEY_MAX_DISTANCE
    for dx in range(-1, 2):
        for dy in range(-1, 2):
            cx = xi + dx
            cy = yi + dy
            h = p[p[cx % 256] + cy % 256]
            fx = cx + p[h] / 255.0
            fy = cy + p[h + 1] / 255.0
            distance = np.sqrt((x - fx) ** 2 + (y - fy) ** 2)
            if distance < closest:
                second = closest
                closest = distance
            elif distance < second:
                second = distance

    return 1.0 - 2.0 * min(second, WORLEY_MAX_DISTANCE) / WORLEY_MAX_DISTANCE

@njit
def fbm_noise_2d(p, x, y, octaves, persistence, lacunarity, scale, initial_amplitude=1.0,
                 primitive=PRIMITIVE_PERLIN):
    """
    Generate normalised fractal Brownian motion over a 2D coordinate grid.
    This function is JIT-compiled with Numba for maximum performance.
    Each octave samples the primitive at (x * frequency / scale,
    y * frequency / scale) and the sum is divided by the total amplitude.
    """
    rows, cols = x.shape
    total_noise = np.zeros((rows, cols))

    for i in range(rows):
        for j in range(cols):
            noise_val = 0.0
            weight = 0.0
            amplitude = initial_amplitude
            frequency = 1.0

            for _ in range(octaves):
                x_sample = x[i, j] * frequency / scale
                y_sample = y[i, j] * frequency / scale

                if primitive == PRIMITIVE_WORLEY:
                    sample = worley_2d(p, x_sample, y_sample)
                else:
                    sample = perlin_2d(p, x_sample, y_sample)
                noise_val += sample * amplitude
                weight += amplitude

                amplitude *= persistence
                frequency *= lacunarity

            total_noise[i, j] = noise_val / weight

    return total_noise
