# position_seed/hashing.py

"""
================================================================================
COORDINATE HASHING
================================================================================
The leaf primitive of the whole pipeline: a pure, stateless function that maps
an integer lattice point plus a salt (property layer) and a seed (universe)
to a well-distributed 64-bit unsigned integer.

Data Contract:
---------------
- Inputs:
    - coords: a tuple of 2 or 3 integers (or integral, finite floats).
      A 2-D point is the z = 0 slice of the 3-D lattice.
    - salt, seed: Python integers of any sign or size; both are reduced
      modulo 2**64.
- Outputs:
    - An int in [0, 2**64).
- Construction:
    - Each component is multiplied by its own 64-bit odd prime and the
      products are summed modulo 2**64 (no axis shares a multiplier).
    - The sum goes through the SplitMix64 finalizer (two xor-shift/multiply
      rounds and a final xor-shift).
- Arithmetic:
    - Fixed-width unsigned 64-bit, wrapping on overflow. The scalar path
      masks Python integers with MASK64; the JIT path uses np.uint64
      throughout. No floating-point value ever enters the hash, so results
      are bit-identical across platforms and between the two paths.
- Side Effects: None.
================================================================================
"""

import math
import numbers

import numpy as np
from numba import njit, prange

from .errors import InvalidCoordinate

HASH_BITS = 64
MASK64 = 0xFFFFFFFFFFFFFFFF

# Coordinates larger than this cannot be represented exactly by a float64 and
# are rejected before hashing.
COORDINATE_LIMIT = 2 ** 53

# --- Lattice multipliers (the xxHash64 primes) ---
PRIME_X = 0x9E3779B185EBCA87
PRIME_Y = 0xC2B2AE3D27D4EB4F
PRIME_Z = 0x165667B19E3779F9
PRIME_SALT = 0x85EBCA77C2B2AE63
PRIME_SEED = 0x27D4EB2F165667C5

# --- SplitMix64 finalizer constants ---
GOLDEN_GAMMA = 0x9E3779B97F4A7C15
MIX_MUL_1 = 0xBF58476D1CE4E5B9
MIX_MUL_2 = 0x94D049BB133111EB

# np.uint64 copies for the JIT kernels. Numba freezes these globals as typed
# constants, which keeps every intermediate in uint64.
_PX = np.uint64(PRIME_X)
_PY = np.uint64(PRIME_Y)
_PZ = np.uint64(PRIME_Z)
_PS = np.uint64(PRIME_SALT)
_PK = np.uint64(PRIME_SEED)
_GAMMA = np.uint64(GOLDEN_GAMMA)
_M1 = np.uint64(MIX_MUL_1)
_M2 = np.uint64(MIX_MUL_2)


def mix64(z: int) -> int:
    """SplitMix64 finalizer on a Python int, wrapped to 64 bits."""
    z = (z + GOLDEN_GAMMA) & MASK64
    z = ((z ^ (z >> 30)) * MIX_MUL_1) & MASK64
    z = ((z ^ (z >> 27)) * MIX_MUL_2) & MASK64
    return z ^ (z >> 31)


def to_u64(value: int) -> np.uint64:
    """Reduces any Python integer to the uint64 the kernels expect."""
    return np.uint64(int(value) & MASK64)


def validate_coordinate(coords, integral: bool = False) -> tuple:
    """
    Checks a coordinate tuple and returns it as a tuple of Python numbers.

    Raises InvalidCoordinate for the wrong dimensionality, non-numeric or
    non-finite components, components beyond COORDINATE_LIMIT, and (when
    `integral` is set) floats with a fractional part.
    """
    try:
        dims = len(coords)
    except TypeError:
        raise InvalidCoordinate(f"Coordinate must be a sequence, got {coords!r}") from None
    if dims not in (2, 3):
        raise InvalidCoordinate(f"Coordinate must have 2 or 3 components, got {dims}")

    checked = []
    for value in coords:
        if not isinstance(value, numbers.Real):
            raise InvalidCoordinate(f"Coordinate component {value!r} is not a number")
        if isinstance(value, numbers.Integral):
            value = int(value)
        else:
            value = float(value)
            if not math.isfinite(value):
                raise InvalidCoordinate(f"Coordinate component {value} is not finite")
            if integral:
                if not value.is_integer():
                    raise InvalidCoordinate(
                        f"Coordinate component {value} is not an integer lattice point"
                    )
                value = int(value)
        if abs(value) > COORDINATE_LIMIT:
            raise InvalidCoordinate(f"Coordinate component {value} exceeds {COORDINATE_LIMIT}")
        checked.append(value)
    return tuple(checked)


def hash_coords(coords, salt: int = 0, seed: int = 0) -> int:
    """
    Hashes an integer lattice point. Deterministic forever: the same
    (coords, salt, seed) always returns the same integer.
    """
    point = validate_coordinate(coords, integral=True)
    x, y = point[0], point[1]
    z = point[2] if len(point) == 3 else 0
    packed = (x * PRIME_X + y * PRIME_Y + z * PRIME_Z
              + salt * PRIME_SALT + seed * PRIME_SEED) & MASK64
    return mix64(packed)


def hash_to_hex(h: int) -> str:
    """Formats a hash as the fixed-width 16-digit hex string used for display."""
    return f"{h & MASK64:016x}"


# --- JIT kernels ---

@njit(cache=True)
def mix64_kernel(z):
    "SplitMix64 finalizer on a uint64."
    z = z + _GAMMA
    z = (z ^ (z >> np.uint64(30))) * _M1
    z = (z ^ (z >> np.uint64(27))) * _M2
    return z ^ (z >> np.uint64(31))


@njit(cache=True)
def hash3_kernel(ix, iy, iz, salt, seed):
    """
    Same function as hash_coords for int64 lattice components and uint64
    salt/seed. Negative components reinterpret as their two's complement,
    matching the Python path's masking.
    """
    packed = (np.uint64(ix) * _PX + np.uint64(iy) * _PY + np.uint64(iz) * _PZ
              + salt * _PS + seed * _PK)
    return mix64_kernel(packed)


@njit(cache=True)
def hash_unit_kernel(ix, iy, iz, salt, seed):
    "Lattice hash mapped to a float in [0, 1) from its top 53 bits."
    h = hash3_kernel(ix, iy, iz, salt, seed)
    return np.float64(h >> np.uint64(11)) * (1.0 / 9007199254740992.0)


@njit(cache=True, parallel=True)
def _hash_grid_kernel(width, height, origin_x, origin_y, salt, seed):
    out = np.empty((height, width), dtype=np.uint64)
    for j in prange(height):
        iy = np.int64(origin_y) + np.int64(j)
        for i in range(width):
            ix = np.int64(origin_x) + np.int64(i)
            out[j, i] = hash3_kernel(ix, iy, np.int64(0), salt, seed)
    return out


@njit(cache=True, parallel=True)
def _hash_points_kernel(points, salt, seed):
    count, dims = points.shape
    out = np.empty(count, dtype=np.uint64)
    for n in prange(count):
        iz = points[n, 2] if dims == 3 else np.int64(0)
        out[n] = hash3_kernel(points[n, 0], points[n, 1], iz, salt, seed)
    return out


def hash_grid(width: int, height: int, salt: int = 0, seed: int = 0, origin: tuple = (0, 0)) -> np.ndarray:
    """
    Hashes every cell of a width x height block of the z = 0 plane.
    Rows are evaluated in parallel; out[j, i] == hash_coords((ox + i, oy + j), salt, seed).
    """
    ox, oy = validate_coordinate(origin, integral=True)[:2]
    return _hash_grid_kernel(int(width), int(height), np.int64(ox), np.int64(oy),
                             to_u64(salt), to_u64(seed))


def hash_points(points: np.ndarray, salt: int = 0, seed: int = 0) -> np.ndarray:
    """Hashes an (N, 2) or (N, 3) integer array of lattice points."""
    points = np.ascontiguousarray(points, dtype=np.int64)
    if points.ndim != 2 or points.shape[1] not in (2, 3):
        raise InvalidCoordinate(f"Points must have shape (N, 2) or (N, 3), got {points.shape}")
    return _hash_points_kernel(points, to_u64(salt), to_u64(seed))
