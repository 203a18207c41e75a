# position_seed/quality.py

"""
================================================================================
HASH AND NOISE QUALITY MEASUREMENTS
================================================================================
Statistical checks that back the guarantees of the pipeline with numbers
instead of assumptions about any particular finalizer.

- avalanche_bias: mean fraction of output bits that flip when one lattice
  component changes by 1. An ideal hash gives 0.5.
- bit_avalanche: the same for single input-bit flips of the x component.
- layer_correlation: Pearson r between two salted layers over random
  coordinates. Independent layers give |r| close to 0.
- bounded_int_uniformity: chi-square p-value of to_bounded_int counts.
- continuity_gap: the largest jump of a noise kind across lattice lines for a
  tiny step. Continuous noise gives a gap proportional to the step.
- directional_bias: |log| of the ratio between axis-aligned and diagonal
  increment variances. 0 means no preferred direction.

Sampling uses an explicit numpy Generator seeded by the caller, so every
measurement is reproducible.
================================================================================
"""

import logging
import math

import numpy as np
from scipy import stats

from .errors import InvalidParameter
from .hashing import hash_coords, hash_points
from .noise import kind_code, noise_grid
from .streams import to_bounded_int, unit_floats

logger = logging.getLogger(__name__)

# Sampled coordinates stay well inside the exactly representable range.
SAMPLE_COORD_RANGE = 1 << 24


def _check_samples(samples: int) -> int:
    if samples < 2:
        raise InvalidParameter(f"Need at least 2 samples, got {samples}")
    return int(samples)


def _popcount(v: int) -> int:
    return bin(v).count('1')


def avalanche_bias(hash_fn=hash_coords, samples: int = 1000, bits: int = 64, seed: int = 0) -> float:
    """
    Mean flipped-bit fraction between hash_fn(c) and hash_fn(c + e_axis),
    over all three axes of `samples` random lattice points.

    `hash_fn(coords, salt, seed)` must return an unsigned `bits`-wide integer.
    """
    samples = _check_samples(samples)
    rng = np.random.default_rng(seed)
    points = rng.integers(-SAMPLE_COORD_RANGE, SAMPLE_COORD_RANGE, size=(samples, 3))

    flipped = 0
    for x, y, z in points.tolist():
        base = hash_fn((x, y, z), 0, seed)
        flipped += _popcount(base ^ hash_fn((x + 1, y, z), 0, seed))
        flipped += _popcount(base ^ hash_fn((x, y + 1, z), 0, seed))
        flipped += _popcount(base ^ hash_fn((x, y, z + 1), 0, seed))

    fraction = flipped / (samples * 3 * bits)
    logger.debug(f"Avalanche over {samples} points: {fraction:.4f}")
    return fraction


def bit_avalanche(hash_fn=hash_coords, samples: int = 200, bits: int = 64,
                  input_bits: int = 32, seed: int = 0) -> float:
    """Mean flipped-bit fraction when one of the low `input_bits` bits of x is flipped."""
    samples = _check_samples(samples)
    rng = np.random.default_rng(seed)
    points = rng.integers(0, SAMPLE_COORD_RANGE, size=(samples, 2))

    flipped = 0
    for x, y in points.tolist():
        base = hash_fn((x, y), 0, seed)
        for b in range(input_bits):
            flipped += _popcount(base ^ hash_fn((x ^ (1 << b), y), 0, seed))
    return flipped / (samples * input_bits * bits)


def layer_correlation(salt_a: int, salt_b: int, seed: int = 0, samples: int = 10000) -> float:
    """Pearson r between unit floats of two salted layers over random 2-D points."""
    samples = _check_samples(samples)
    rng = np.random.default_rng(seed)
    points = rng.integers(-SAMPLE_COORD_RANGE, SAMPLE_COORD_RANGE, size=(samples, 2))
    a = unit_floats(hash_points(points, salt_a, seed))
    b = unit_floats(hash_points(points, salt_b, seed))
    r, _ = stats.pearsonr(a, b)
    logger.debug(f"Layer correlation {salt_a:#x} vs {salt_b:#x}: r = {r:.5f}")
    return float(r)


def bounded_int_uniformity(n: int, samples: int = 10000, salt: int = 0, seed: int = 0) -> float:
    """Chi-square goodness-of-fit p-value of to_bounded_int(h, n) against uniform."""
    samples = _check_samples(samples)
    if n < 2:
        raise InvalidParameter(f"Uniformity needs at least 2 buckets, got {n}")
    points = np.stack([np.arange(samples), np.zeros(samples, dtype=np.int64)], axis=1)
    counts = np.zeros(n, dtype=np.int64)
    for h in hash_points(points, salt, seed).tolist():
        counts[to_bounded_int(h, n)] += 1
    return float(stats.chisquare(counts).pvalue)


def continuity_gap(kind: str, seed: int = 0, epsilon: float = 1e-6, samples: int = 1000) -> float:
    """
    Largest |noise(p + eps) - noise(p)| over points placed on integer lattice
    lines, stepping across the line along x and along y.
    """
    kind_code(kind)
    samples = _check_samples(samples)
    rng = np.random.default_rng(seed)
    cells = rng.integers(-1000, 1000, size=samples).astype(np.float64)
    free = rng.uniform(-1000.0, 1000.0, size=samples)

    # Crossing vertical lattice lines x = k.
    x0 = (cells - epsilon / 2.0)[np.newaxis, :]
    x1 = (cells + epsilon / 2.0)[np.newaxis, :]
    y = free[np.newaxis, :]
    gap_x = np.abs(noise_grid(x1, y, seed, kind) - noise_grid(x0, y, seed, kind)).max()

    # Crossing horizontal lattice lines y = k.
    gap_y = np.abs(noise_grid(y, x1, seed, kind) - noise_grid(y, x0, seed, kind)).max()
    return float(max(gap_x, gap_y))


def directional_bias(kind: str, seed: int = 0, step: float = 0.5, samples: int = 20000) -> float:
    """
    |log(var_axis / var_diagonal)| of noise increments of length `step`.

    Square-grid noise decorrelates faster along diagonals than along the axes;
    an isotropic field gives a value near 0.
    """
    kind_code(kind)
    samples = _check_samples(samples)
    rng = np.random.default_rng(seed)
    px = rng.uniform(-1000.0, 1000.0, size=(1, samples))
    py = rng.uniform(-1000.0, 1000.0, size=(1, samples))
    base = noise_grid(px, py, seed, kind)

    diag = step / math.sqrt(2.0)
    axis_var = np.concatenate([
        noise_grid(px + step, py, seed, kind) - base,
        noise_grid(px, py + step, seed, kind) - base,
    ]).var()
    diag_var = np.concatenate([
        noise_grid(px + diag, py + diag, seed, kind) - base,
        noise_grid(px + diag, py - diag, seed, kind) - base,
    ]).var()

    bias = abs(math.log(axis_var / diag_var))
    logger.debug(f"Directional bias of {kind}: {bias:.4f} (axis {axis_var:.5f}, diagonal {diag_var:.5f})")
    return bias
