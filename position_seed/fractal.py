# position_seed/fractal.py

"""
================================================================================
FRACTAL SUM (fBm)
================================================================================
Stacks octaves of coherent noise at rising frequency and falling amplitude.

Data Contract:
---------------
- Inputs:
    - coord: 2 or 3 finite floats.
    - octaves: an OctaveSpec (count >= 1, persistence in (0, 1),
      lacunarity > 1).
    - seed: any Python integer. Octave i samples noise with
      seed + i * OCTAVE_SEED_STRIDE, so octaves are never scaled copies of
      each other.
- Outputs:
    - A float in [-1, 1]. The octave sum is divided by the sum of the octave
      amplitudes, so the range does not grow with the octave count.
- Invariants: with one octave the result is exactly noise(coord, seed).
- Side Effects: None.
================================================================================
"""

import numbers
from dataclasses import dataclass

import numpy as np
from numba import njit, prange

from . import config as DEFAULTS
from .errors import InvalidCoordinate, InvalidParameter
from .hashing import to_u64
from .noise import (DEFAULT_KIND, as_float_point, check_grid, kind_code,
                    noise2_kernel, noise3_kernel)

_SEED_STRIDE = np.uint64(DEFAULTS.OCTAVE_SEED_STRIDE)


@dataclass(frozen=True)
class OctaveSpec:
    """Octave count, amplitude decay and frequency growth of an fBm stack."""
    octaves: int = DEFAULTS.DEFAULT_OCTAVES
    persistence: float = DEFAULTS.DEFAULT_PERSISTENCE
    lacunarity: float = DEFAULTS.DEFAULT_LACUNARITY

    def __post_init__(self):
        if isinstance(self.octaves, bool) or not isinstance(self.octaves, numbers.Integral):
            raise InvalidParameter(f"Octave count must be an integer, got {self.octaves!r}")
        if self.octaves < 1:
            raise InvalidParameter(f"Octave count must be at least 1, got {self.octaves}")
        if not 0.0 < self.persistence < 1.0:
            raise InvalidParameter(f"Persistence must be in (0, 1), got {self.persistence}")
        if not self.lacunarity > 1.0:
            raise InvalidParameter(f"Lacunarity must be greater than 1, got {self.lacunarity}")

    @property
    def max_amplitude(self) -> float:
        """Sum of the per-octave amplitudes (the normalization divisor)."""
        total = 0.0
        amplitude = 1.0
        for _ in range(self.octaves):
            total += amplitude
            amplitude *= self.persistence
        return total


DEFAULT_OCTAVE_SPEC = OctaveSpec()


def resolve_spec(octaves) -> OctaveSpec:
    """Accepts an OctaveSpec, a mapping of its fields, or None for the defaults."""
    if octaves is None:
        return DEFAULT_OCTAVE_SPEC
    if isinstance(octaves, OctaveSpec):
        return octaves
    if isinstance(octaves, dict):
        return OctaveSpec(**octaves)
    raise InvalidParameter(f"Expected an OctaveSpec, got {octaves!r}")


# --- JIT kernels ---

@njit(cache=True)
def octave_seed_kernel(seed, i):
    return seed + np.uint64(i) * _SEED_STRIDE


@njit(cache=True)
def fbm2_kernel(kind, x, y, octaves, persistence, lacunarity, seed):
    total = 0.0
    amplitude = 1.0
    frequency = 1.0
    max_amplitude = 0.0

    # Sequential: each octave depends on the amplitude/frequency state of the last.
    for i in range(octaves):
        n = noise2_kernel(kind, x * frequency, y * frequency, octave_seed_kernel(seed, i))
        total += n * amplitude
        max_amplitude += amplitude
        amplitude *= persistence
        frequency *= lacunarity

    return total / max_amplitude


@njit(cache=True)
def fbm3_kernel(kind, x, y, z, octaves, persistence, lacunarity, seed):
    total = 0.0
    amplitude = 1.0
    frequency = 1.0
    max_amplitude = 0.0

    for i in range(octaves):
        n = noise3_kernel(kind, x * frequency, y * frequency, z * frequency,
                          octave_seed_kernel(seed, i))
        total += n * amplitude
        max_amplitude += amplitude
        amplitude *= persistence
        frequency *= lacunarity

    return total / max_amplitude


@njit(cache=True, parallel=True)
def _fbm_grid_kernel(kind, x, y, octaves, persistence, lacunarity, seed):
    rows, cols = x.shape
    total_noise = np.zeros((rows, cols))
    for i in prange(rows):
        for j in range(cols):
            total_noise[i, j] = fbm2_kernel(kind, x[i, j], y[i, j],
                                            octaves, persistence, lacunarity, seed)
    return total_noise


@njit(cache=True, parallel=True)
def _fbm_points3_kernel(kind, points, octaves, persistence, lacunarity, seed):
    count = points.shape[0]
    out = np.empty(count)
    for n in prange(count):
        out[n] = fbm3_kernel(kind, points[n, 0], points[n, 1], points[n, 2],
                             octaves, persistence, lacunarity, seed)
    return out


@njit(cache=True, parallel=True)
def _fbm_points2_kernel(kind, points, octaves, persistence, lacunarity, seed):
    count = points.shape[0]
    out = np.empty(count)
    for n in prange(count):
        out[n] = fbm2_kernel(kind, points[n, 0], points[n, 1],
                             octaves, persistence, lacunarity, seed)
    return out


# --- Public API ---

def fbm(coord, octaves=None, seed: int = 0, kind: str = DEFAULT_KIND) -> float:
    """Fractal sum of `kind` noise at one 2-D or 3-D coordinate."""
    spec = resolve_spec(octaves)
    code = kind_code(kind)
    point = as_float_point(coord)
    s = to_u64(seed)
    if len(point) == 2:
        return float(fbm2_kernel(code, point[0], point[1],
                                 spec.octaves, spec.persistence, spec.lacunarity, s))
    return float(fbm3_kernel(code, point[0], point[1], point[2],
                             spec.octaves, spec.persistence, spec.lacunarity, s))


def fbm_octaves(coord, octaves=None, seed: int = 0, kind: str = DEFAULT_KIND) -> dict:
    """
    Evaluates fbm one octave at a time and reports every step.

    Returns a dict with:
        'octaves': a list of per-octave dicts (index, seed, frequency,
            amplitude, noise, contribution, running_total),
        'raw_total': the unnormalized sum,
        'max_amplitude': the accumulated amplitude,
        'value': raw_total / max_amplitude, identical to fbm().
    """
    spec = resolve_spec(octaves)
    code = kind_code(kind)
    point = as_float_point(coord)
    s = to_u64(seed)

    steps = []
    total = 0.0
    amplitude = 1.0
    frequency = 1.0
    max_amplitude = 0.0
    for i in range(spec.octaves):
        octave_seed = octave_seed_kernel(s, i)
        if len(point) == 2:
            n = noise2_kernel(code, point[0] * frequency, point[1] * frequency, octave_seed)
        else:
            n = noise3_kernel(code, point[0] * frequency, point[1] * frequency,
                              point[2] * frequency, octave_seed)
        contribution = n * amplitude
        total += contribution
        max_amplitude += amplitude
        steps.append({
            'index': i,
            'seed': int(octave_seed),
            'frequency': frequency,
            'amplitude': amplitude,
            'noise': float(n),
            'contribution': float(contribution),
            'running_total': float(total),
        })
        amplitude *= spec.persistence
        frequency *= spec.lacunarity

    return {
        'octaves': steps,
        'raw_total': float(total),
        'max_amplitude': max_amplitude,
        'value': float(total / max_amplitude),
    }


def fbm_grid(x_coords: np.ndarray, y_coords: np.ndarray, octaves=None, seed: int = 0,
             kind: str = DEFAULT_KIND) -> np.ndarray:
    """
    Evaluates 2-D fbm over matching coordinate grids, rows in parallel.
    Each cell equals fbm((x, y), octaves, seed, kind).
    """
    spec = resolve_spec(octaves)
    code = kind_code(kind)
    x, y = check_grid(x_coords, y_coords)
    return _fbm_grid_kernel(code, x, y, spec.octaves, spec.persistence, spec.lacunarity,
                            to_u64(seed))


def fbm_points(points: np.ndarray, octaves=None, seed: int = 0,
               kind: str = DEFAULT_KIND) -> np.ndarray:
    """Evaluates fbm over an (N, 2) or (N, 3) float array of coordinates."""
    spec = resolve_spec(octaves)
    code = kind_code(kind)
    points = np.ascontiguousarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] not in (2, 3):
        raise InvalidCoordinate(f"Points must have shape (N, 2) or (N, 3), got {points.shape}")
    if not np.isfinite(points).all():
        raise InvalidCoordinate("Points contain non-finite values")
    kernel = _fbm_points2_kernel if points.shape[1] == 2 else _fbm_points3_kernel
    return kernel(code, points, spec.octaves, spec.persistence, spec.lacunarity, to_u64(seed))
