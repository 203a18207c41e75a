# position_seed/warp.py

"""
================================================================================
DOMAIN WARP
================================================================================
Feeds fBm output back into the coordinate before the final fBm lookup:

    q = (fbm(c + A, field, seed + a), fbm(c + B, field, seed + b) [, ...z])
    warp(c) = fbm(c + strength * q, octaves, seed)

The displacement fields q use a fixed, cheaper octave stack (config
WARP_FIELD_*), constant coordinate offsets and their own seed offsets so the
components are decorrelated from each other and from the final lookup.

The optional second order warps the warp: r is sampled at c + 4q and the
displacement becomes q + (r - q) * min(1, strength).

Data Contract:
---------------
- strength >= 0. With strength == 0 the displacement is multiplied away and
  the result is exactly fbm(coord, octaves, seed), for both orders.
- The displacement magnitude is strength * |q|, so it grows linearly with
  strength for the first-order warp.
- Side Effects: None.
================================================================================
"""

import math

import numpy as np
from numba import njit, prange

from . import config as DEFAULTS
from .errors import InvalidCoordinate, InvalidParameter
from .fractal import fbm2_kernel, fbm3_kernel, resolve_spec
from .hashing import to_u64
from .noise import DEFAULT_KIND, as_float_point, check_grid, kind_code

# --- Displacement field constants, frozen into the kernels ---
_FIELD_OCTAVES = DEFAULTS.WARP_FIELD_OCTAVES
_FIELD_PERSISTENCE = DEFAULTS.WARP_FIELD_PERSISTENCE
_FIELD_LACUNARITY = DEFAULTS.WARP_FIELD_LACUNARITY
_GAIN = DEFAULTS.WARP2_FEEDBACK_GAIN

_SX = np.uint64(DEFAULTS.WARP_X_SEED_OFFSET)
_SY = np.uint64(DEFAULTS.WARP_Y_SEED_OFFSET)
_SZ = np.uint64(DEFAULTS.WARP_Z_SEED_OFFSET)
_S2X = np.uint64(DEFAULTS.WARP2_X_SEED_OFFSET)
_S2Y = np.uint64(DEFAULTS.WARP2_Y_SEED_OFFSET)
_S2Z = np.uint64(DEFAULTS.WARP2_Z_SEED_OFFSET)

_OX = np.array(DEFAULTS.WARP_X_COORD_OFFSET)
_OY = np.array(DEFAULTS.WARP_Y_COORD_OFFSET)
_OZ = np.array(DEFAULTS.WARP_Z_COORD_OFFSET)
_O2X = np.array(DEFAULTS.WARP2_X_COORD_OFFSET)
_O2Y = np.array(DEFAULTS.WARP2_Y_COORD_OFFSET)
_O2Z = np.array(DEFAULTS.WARP2_Z_COORD_OFFSET)


@njit(cache=True)
def _field2(kind, x, y, offset, seed):
    return fbm2_kernel(kind, x + offset[0], y + offset[1],
                       _FIELD_OCTAVES, _FIELD_PERSISTENCE, _FIELD_LACUNARITY, seed)


@njit(cache=True)
def _field3(kind, x, y, z, offset, seed):
    return fbm3_kernel(kind, x + offset[0], y + offset[1], z + offset[2],
                       _FIELD_OCTAVES, _FIELD_PERSISTENCE, _FIELD_LACUNARITY, seed)


@njit(cache=True)
def warp_field2_kernel(kind, x, y, strength, seed, second_order):
    """Unscaled displacement q at (x, y)."""
    qx = _field2(kind, x, y, _OX, seed + _SX)
    qy = _field2(kind, x, y, _OY, seed + _SY)
    if second_order:
        rx = _field2(kind, x + _GAIN * qx, y + _GAIN * qy, _O2X, seed + _S2X)
        ry = _field2(kind, x + _GAIN * qx, y + _GAIN * qy, _O2Y, seed + _S2Y)
        blend = min(1.0, strength)
        qx = qx + (rx - qx) * blend
        qy = qy + (ry - qy) * blend
    return qx, qy


@njit(cache=True)
def warp_field3_kernel(kind, x, y, z, strength, seed, second_order):
    qx = _field3(kind, x, y, z, _OX, seed + _SX)
    qy = _field3(kind, x, y, z, _OY, seed + _SY)
    qz = _field3(kind, x, y, z, _OZ, seed + _SZ)
    if second_order:
        wx = x + _GAIN * qx
        wy = y + _GAIN * qy
        wz = z + _GAIN * qz
        rx = _field3(kind, wx, wy, wz, _O2X, seed + _S2X)
        ry = _field3(kind, wx, wy, wz, _O2Y, seed + _S2Y)
        rz = _field3(kind, wx, wy, wz, _O2Z, seed + _S2Z)
        blend = min(1.0, strength)
        qx = qx + (rx - qx) * blend
        qy = qy + (ry - qy) * blend
        qz = qz + (rz - qz) * blend
    return qx, qy, qz


@njit(cache=True)
def warp2_kernel(kind, x, y, strength, octaves, persistence, lacunarity, seed, second_order):
    qx, qy = warp_field2_kernel(kind, x, y, strength, seed, second_order)
    return fbm2_kernel(kind, x + strength * qx, y + strength * qy,
                       octaves, persistence, lacunarity, seed)


@njit(cache=True)
def warp3_kernel(kind, x, y, z, strength, octaves, persistence, lacunarity, seed, second_order):
    qx, qy, qz = warp_field3_kernel(kind, x, y, z, strength, seed, second_order)
    return fbm3_kernel(kind, x + strength * qx, y + strength * qy, z + strength * qz,
                       octaves, persistence, lacunarity, seed)


@njit(cache=True, parallel=True)
def _warp_grid_kernel(kind, x, y, strength, octaves, persistence, lacunarity, seed, second_order):
    rows, cols = x.shape
    out = np.zeros((rows, cols))
    for i in prange(rows):
        for j in range(cols):
            out[i, j] = warp2_kernel(kind, x[i, j], y[i, j], strength,
                                     octaves, persistence, lacunarity, seed, second_order)
    return out


@njit(cache=True, parallel=True)
def _warp_points3_kernel(kind, points, strength, octaves, persistence, lacunarity, seed, second_order):
    count = points.shape[0]
    out = np.empty(count)
    for n in prange(count):
        out[n] = warp3_kernel(kind, points[n, 0], points[n, 1], points[n, 2], strength,
                              octaves, persistence, lacunarity, seed, second_order)
    return out


def check_strength(strength: float) -> float:
    strength = float(strength)
    if not math.isfinite(strength) or strength < 0.0:
        raise InvalidParameter(f"Warp strength must be a finite value >= 0, got {strength}")
    return strength


def warp(coord, strength: float, octaves=None, seed: int = 0, kind: str = DEFAULT_KIND,
         second_order: bool = False) -> float:
    """Domain-warped fbm at one 2-D or 3-D coordinate."""
    strength = check_strength(strength)
    spec = resolve_spec(octaves)
    code = kind_code(kind)
    point = as_float_point(coord)
    s = to_u64(seed)
    if len(point) == 2:
        return float(warp2_kernel(code, point[0], point[1], strength, spec.octaves,
                                  spec.persistence, spec.lacunarity, s, bool(second_order)))
    return float(warp3_kernel(code, point[0], point[1], point[2], strength, spec.octaves,
                              spec.persistence, spec.lacunarity, s, bool(second_order)))


def warp_offset(coord, strength: float, seed: int = 0, kind: str = DEFAULT_KIND,
                second_order: bool = False) -> tuple:
    """The displacement strength * q that warp() adds to `coord`."""
    strength = check_strength(strength)
    code = kind_code(kind)
    point = as_float_point(coord)
    s = to_u64(seed)
    if len(point) == 2:
        q = warp_field2_kernel(code, point[0], point[1], strength, s, bool(second_order))
    else:
        q = warp_field3_kernel(code, point[0], point[1], point[2], strength, s, bool(second_order))
    return tuple(strength * float(v) for v in q)


def warp_grid(x_coords: np.ndarray, y_coords: np.ndarray, strength: float, octaves=None,
              seed: int = 0, kind: str = DEFAULT_KIND, second_order: bool = False) -> np.ndarray:
    """Evaluates the 2-D warp over matching coordinate grids, rows in parallel."""
    strength = check_strength(strength)
    spec = resolve_spec(octaves)
    code = kind_code(kind)
    x, y = check_grid(x_coords, y_coords)
    return _warp_grid_kernel(code, x, y, strength, spec.octaves, spec.persistence,
                             spec.lacunarity, to_u64(seed), bool(second_order))


def warp_points(points: np.ndarray, strength: float, octaves=None, seed: int = 0,
                kind: str = DEFAULT_KIND, second_order: bool = False) -> np.ndarray:
    """Evaluates the 3-D warp over an (N, 3) float array of coordinates."""
    strength = check_strength(strength)
    spec = resolve_spec(octaves)
    code = kind_code(kind)
    points = np.ascontiguousarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 3:
        raise InvalidCoordinate(f"Points must have shape (N, 3), got {points.shape}")
    if not np.isfinite(points).all():
        raise InvalidCoordinate("Points contain non-finite values")
    return _warp_points3_kernel(code, points, strength, spec.octaves, spec.persistence,
                                spec.lacunarity, to_u64(seed), bool(second_order))
