# position_seed/noise.py

"""
================================================================================
COHERENT NOISE
================================================================================
This module provides 2-D and 3-D noise functions built directly on the
lattice hash. It is designed to be a pure, stateless utility: there is no
permutation table, so no table can be shared, mutated or silently re-seeded.
A seed is just another hash input.

Kinds:
    - "white":   one hash per lattice cell, piecewise constant. Deliberately
                 discontinuous; kept only for comparison.
    - "value":   hashed corner values, quintic fade, (bi/tri)linear blend.
    - "perlin":  hashed corner gradients on the square/cubic grid.
    - "simplex": hashed corner gradients on the simplex lattice (the default;
                 no square-grid directional bias).

Data Contract:
---------------
- Inputs:
    - coord: 2 or 3 finite floats.
    - seed: any Python integer (reduced modulo 2**64).
- Outputs:
    - A float in [-1, 1]. Simplex and Perlin are scaled to use that range and
      clamped to it; value and white noise are bounded by construction.
- Invariants: every kind except "white" is continuous in its coordinate.
- Side Effects: None.
================================================================================
"""

from dataclasses import dataclass

import numpy as np
from numba import njit, prange

from .errors import InvalidCoordinate, InvalidParameter
from .hashing import hash3_kernel, hash_unit_kernel, to_u64, validate_coordinate

KIND_WHITE = 0
KIND_VALUE = 1
KIND_PERLIN = 2
KIND_SIMPLEX = 3

NOISE_KINDS = {
    "white": KIND_WHITE,
    "value": KIND_VALUE,
    "perlin": KIND_PERLIN,
    "simplex": KIND_SIMPLEX,
}
DEFAULT_KIND = "simplex"

# Salt of the noise lattice, distinct from every property-layer salt.
LATTICE_SALT = 0x51ED270B
_LATTICE_SALT = np.uint64(LATTICE_SALT)

# Pre-defined gradient vectors for performance.
_DIAG = 0.7071067811865476
_GRADIENTS_2D = np.array([
    [1.0, 0.0], [-1.0, 0.0], [0.0, 1.0], [0.0, -1.0],
    [_DIAG, _DIAG], [-_DIAG, _DIAG], [_DIAG, -_DIAG], [-_DIAG, -_DIAG],
])
_SIMPLEX_GRADIENTS_2D = np.array([
    [1.0, 1.0], [-1.0, 1.0], [1.0, -1.0], [-1.0, -1.0],
    [1.0, 0.0], [-1.0, 0.0], [0.0, 1.0], [0.0, -1.0],
])
_GRADIENTS_3D = np.array([
    [1.0, 1.0, 0.0], [-1.0, 1.0, 0.0], [1.0, -1.0, 0.0], [-1.0, -1.0, 0.0],
    [1.0, 0.0, 1.0], [-1.0, 0.0, 1.0], [1.0, 0.0, -1.0], [-1.0, 0.0, -1.0],
    [0.0, 1.0, 1.0], [0.0, -1.0, 1.0], [0.0, 1.0, -1.0], [0.0, -1.0, -1.0],
])

# Output scales that map each gradient noise onto [-1, 1].
PERLIN_2D_SCALE = 1.4142135623730951
PERLIN_3D_SCALE = 1.0
SIMPLEX_2D_SCALE = 70.0
SIMPLEX_3D_SCALE = 72.0

# Simplex skew/unskew factors.
_F2 = 0.3660254037844386   # 0.5 * (sqrt(3) - 1)
_G2 = 0.21132486540518713  # (3 - sqrt(3)) / 6
_F3 = 1.0 / 3.0
_G3 = 1.0 / 6.0


@njit(cache=True)
def _lerp(a, b, x):
    "Linear interpolation."
    return a + x * (b - a)


@njit(cache=True)
def _fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6 - 15) + 10)


@njit(cache=True)
def _clamp_unit(v):
    if v > 1.0:
        return 1.0
    if v < -1.0:
        return -1.0
    return v


@njit(cache=True)
def _corner_value(ix, iy, iz, seed):
    "Hashed lattice value in [-1, 1)."
    return hash_unit_kernel(ix, iy, iz, _LATTICE_SALT, seed) * 2.0 - 1.0


@njit(cache=True)
def _gradient_index(ix, iy, iz, seed, count):
    """Picks one of `count` gradients from the high 32 bits of the lattice hash."""
    h = hash3_kernel(ix, iy, iz, _LATTICE_SALT, seed)
    return np.int64((h >> np.uint64(32)) % np.uint64(count))


@njit(cache=True)
def _gradient_2d(ix, iy, seed, x, y):
    """Calculates the dot product between a gradient vector and coordinates."""
    g = _GRADIENTS_2D[_gradient_index(ix, iy, np.int64(0), seed, 8)]
    return g[0] * x + g[1] * y


@njit(cache=True)
def _gradient_3d(ix, iy, iz, seed, x, y, z):
    g = _GRADIENTS_3D[_gradient_index(ix, iy, iz, seed, 12)]
    return g[0] * x + g[1] * y + g[2] * z


# --- 2-D kernels ---

@njit(cache=True)
def white_2d(x, y, seed):
    ix = np.int64(np.floor(x))
    iy = np.int64(np.floor(y))
    return _corner_value(ix, iy, np.int64(0), seed)


@njit(cache=True)
def value_2d(x, y, seed):
    ix = np.int64(np.floor(x))
    iy = np.int64(np.floor(y))
    xf = x - ix
    yf = y - iy
    u = _fade(xf)
    v = _fade(yf)
    z0 = np.int64(0)

    n00 = _corner_value(ix, iy, z0, seed)
    n10 = _corner_value(ix + 1, iy, z0, seed)
    n01 = _corner_value(ix, iy + 1, z0, seed)
    n11 = _corner_value(ix + 1, iy + 1, z0, seed)

    return _lerp(_lerp(n00, n10, u), _lerp(n01, n11, u), v)


@njit(cache=True)
def perlin_2d(x, y, seed):
    ix = np.int64(np.floor(x))
    iy = np.int64(np.floor(y))
    xf = x - ix
    yf = y - iy
    u = _fade(xf)
    v = _fade(yf)

    g00 = _gradient_2d(ix, iy, seed, xf, yf)
    g10 = _gradient_2d(ix + 1, iy, seed, xf - 1, yf)
    g01 = _gradient_2d(ix, iy + 1, seed, xf, yf - 1)
    g11 = _gradient_2d(ix + 1, iy + 1, seed, xf - 1, yf - 1)

    x1 = _lerp(g00, g10, u)
    x2 = _lerp(g01, g11, u)
    return _clamp_unit(_lerp(x1, x2, v) * PERLIN_2D_SCALE)


@njit(cache=True)
def _simplex_corner_2d(i, j, seed, x, y):
    t = 0.5 - x * x - y * y
    if t <= 0.0:
        return 0.0
    g = _SIMPLEX_GRADIENTS_2D[_gradient_index(i, j, np.int64(0), seed, 8)]
    t *= t
    return t * t * (g[0] * x + g[1] * y)


@njit(cache=True)
def simplex_2d(x, y, seed):
    # Skew input space to find the containing simplex cell.
    s = (x + y) * _F2
    i = np.int64(np.floor(x + s))
    j = np.int64(np.floor(y + s))

    # Unskew back to get the distance from the cell origin.
    t = (i + j) * _G2
    x0 = x - (i - t)
    y0 = y - (j - t)

    if x0 > y0:
        i1, j1 = 1, 0
    else:
        i1, j1 = 0, 1

    x1 = x0 - i1 + _G2
    y1 = y0 - j1 + _G2
    x2 = x0 - 1.0 + 2.0 * _G2
    y2 = y0 - 1.0 + 2.0 * _G2

    n0 = _simplex_corner_2d(i, j, seed, x0, y0)
    n1 = _simplex_corner_2d(i + i1, j + j1, seed, x1, y1)
    n2 = _simplex_corner_2d(i + 1, j + 1, seed, x2, y2)
    return _clamp_unit(SIMPLEX_2D_SCALE * (n0 + n1 + n2))


# --- 3-D kernels ---

@njit(cache=True)
def white_3d(x, y, z, seed):
    ix = np.int64(np.floor(x))
    iy = np.int64(np.floor(y))
    iz = np.int64(np.floor(z))
    return _corner_value(ix, iy, iz, seed)


@njit(cache=True)
def value_3d(x, y, z, seed):
    ix = np.int64(np.floor(x))
    iy = np.int64(np.floor(y))
    iz = np.int64(np.floor(z))
    u = _fade(x - ix)
    v = _fade(y - iy)
    w = _fade(z - iz)

    n000 = _corner_value(ix, iy, iz, seed)
    n100 = _corner_value(ix + 1, iy, iz, seed)
    n010 = _corner_value(ix, iy + 1, iz, seed)
    n110 = _corner_value(ix + 1, iy + 1, iz, seed)
    n001 = _corner_value(ix, iy, iz + 1, seed)
    n101 = _corner_value(ix + 1, iy, iz + 1, seed)
    n011 = _corner_value(ix, iy + 1, iz + 1, seed)
    n111 = _corner_value(ix + 1, iy + 1, iz + 1, seed)

    near = _lerp(_lerp(n000, n100, u), _lerp(n010, n110, u), v)
    far = _lerp(_lerp(n001, n101, u), _lerp(n011, n111, u), v)
    return _lerp(near, far, w)


@njit(cache=True)
def perlin_3d(x, y, z, seed):
    ix = np.int64(np.floor(x))
    iy = np.int64(np.floor(y))
    iz = np.int64(np.floor(z))
    xf = x - ix
    yf = y - iy
    zf = z - iz
    u = _fade(xf)
    v = _fade(yf)
    w = _fade(zf)

    g000 = _gradient_3d(ix, iy, iz, seed, xf, yf, zf)
    g100 = _gradient_3d(ix + 1, iy, iz, seed, xf - 1, yf, zf)
    g010 = _gradient_3d(ix, iy + 1, iz, seed, xf, yf - 1, zf)
    g110 = _gradient_3d(ix + 1, iy + 1, iz, seed, xf - 1, yf - 1, zf)
    g001 = _gradient_3d(ix, iy, iz + 1, seed, xf, yf, zf - 1)
    g101 = _gradient_3d(ix + 1, iy, iz + 1, seed, xf - 1, yf, zf - 1)
    g011 = _gradient_3d(ix, iy + 1, iz + 1, seed, xf, yf - 1, zf - 1)
    g111 = _gradient_3d(ix + 1, iy + 1, iz + 1, seed, xf - 1, yf - 1, zf - 1)

    near = _lerp(_lerp(g000, g100, u), _lerp(g010, g110, u), v)
    far = _lerp(_lerp(g001, g101, u), _lerp(g011, g111, u), v)
    return _clamp_unit(_lerp(near, far, w) * PERLIN_3D_SCALE)


@njit(cache=True)
def _simplex_corner_3d(i, j, k, seed, x, y, z):
    # A radius of 0.5 keeps each kernel inside the four corners that are
    # summed, so the field has no seams between simplices.
    t = 0.5 - x * x - y * y - z * z
    if t <= 0.0:
        return 0.0
    g = _GRADIENTS_3D[_gradient_index(i, j, k, seed, 12)]
    t *= t
    return t * t * (g[0] * x + g[1] * y + g[2] * z)


@njit(cache=True)
def simplex_3d(x, y, z, seed):
    s = (x + y + z) * _F3
    i = np.int64(np.floor(x + s))
    j = np.int64(np.floor(y + s))
    k = np.int64(np.floor(z + s))

    t = (i + j + k) * _G3
    x0 = x - (i - t)
    y0 = y - (j - t)
    z0 = z - (k - t)

    # Traversal order through the simplex.
    if x0 >= y0:
        if y0 >= z0:
            i1, j1, k1, i2, j2, k2 = 1, 0, 0, 1, 1, 0
        elif x0 >= z0:
            i1, j1, k1, i2, j2, k2 = 1, 0, 0, 1, 0, 1
        else:
            i1, j1, k1, i2, j2, k2 = 0, 0, 1, 1, 0, 1
    else:
        if y0 < z0:
            i1, j1, k1, i2, j2, k2 = 0, 0, 1, 0, 1, 1
        elif x0 < z0:
            i1, j1, k1, i2, j2, k2 = 0, 1, 0, 0, 1, 1
        else:
            i1, j1, k1, i2, j2, k2 = 0, 1, 0, 1, 1, 0

    x1 = x0 - i1 + _G3
    y1 = y0 - j1 + _G3
    z1 = z0 - k1 + _G3
    x2 = x0 - i2 + 2.0 * _G3
    y2 = y0 - j2 + 2.0 * _G3
    z2 = z0 - k2 + 2.0 * _G3
    x3 = x0 - 1.0 + 3.0 * _G3
    y3 = y0 - 1.0 + 3.0 * _G3
    z3 = z0 - 1.0 + 3.0 * _G3

    n0 = _simplex_corner_3d(i, j, k, seed, x0, y0, z0)
    n1 = _simplex_corner_3d(i + i1, j + j1, k + k1, seed, x1, y1, z1)
    n2 = _simplex_corner_3d(i + i2, j + j2, k + k2, seed, x2, y2, z2)
    n3 = _simplex_corner_3d(i + 1, j + 1, k + 1, seed, x3, y3, z3)
    return _clamp_unit(SIMPLEX_3D_SCALE * (n0 + n1 + n2 + n3))


# --- Dispatch ---

@njit(cache=True)
def noise2_kernel(kind, x, y, seed):
    if kind == KIND_SIMPLEX:
        return simplex_2d(x, y, seed)
    if kind == KIND_PERLIN:
        return perlin_2d(x, y, seed)
    if kind == KIND_VALUE:
        return value_2d(x, y, seed)
    return white_2d(x, y, seed)


@njit(cache=True)
def noise3_kernel(kind, x, y, z, seed):
    if kind == KIND_SIMPLEX:
        return simplex_3d(x, y, z, seed)
    if kind == KIND_PERLIN:
        return perlin_3d(x, y, z, seed)
    if kind == KIND_VALUE:
        return value_3d(x, y, z, seed)
    return white_3d(x, y, z, seed)


@njit(cache=True, parallel=True)
def _noise_grid_kernel(kind, x, y, seed):
    rows, cols = x.shape
    total_noise = np.zeros((rows, cols))
    for i in prange(rows):
        for j in range(cols):
            total_noise[i, j] = noise2_kernel(kind, x[i, j], y[i, j], seed)
    return total_noise


def kind_code(kind: str) -> int:
    """Maps a noise kind name to its kernel code."""
    try:
        return NOISE_KINDS[kind]
    except KeyError:
        raise InvalidParameter(
            f"Unknown noise kind '{kind}', expected one of {sorted(NOISE_KINDS)}"
        ) from None


def as_float_point(coord) -> tuple:
    """Validates a continuous coordinate and returns it as a tuple of floats."""
    return tuple(float(v) for v in validate_coordinate(coord))


def noise(coord, seed: int = 0, kind: str = DEFAULT_KIND) -> float:
    """Samples one noise value in [-1, 1] at a 2-D or 3-D coordinate."""
    code = kind_code(kind)
    point = as_float_point(coord)
    s = to_u64(seed)
    if len(point) == 2:
        return float(noise2_kernel(code, point[0], point[1], s))
    return float(noise3_kernel(code, point[0], point[1], point[2], s))


def check_grid(x_coords: np.ndarray, y_coords: np.ndarray) -> tuple:
    """Coerces a pair of coordinate grids to matching 2-D float64 arrays."""
    x = np.ascontiguousarray(x_coords, dtype=np.float64)
    y = np.ascontiguousarray(y_coords, dtype=np.float64)
    if x.shape != y.shape or x.ndim != 2:
        raise InvalidCoordinate(
            f"Coordinate grids must be 2-D with equal shapes, got {x.shape} and {y.shape}"
        )
    if not (np.isfinite(x).all() and np.isfinite(y).all()):
        raise InvalidCoordinate("Coordinate grids contain non-finite values")
    return x, y


def noise_grid(x_coords: np.ndarray, y_coords: np.ndarray, seed: int = 0,
               kind: str = DEFAULT_KIND) -> np.ndarray:
    """
    Samples 2-D noise over matching coordinate grids (e.g. from np.meshgrid).
    Rows are evaluated in parallel; each cell equals noise((x, y), seed, kind).
    """
    code = kind_code(kind)
    x, y = check_grid(x_coords, y_coords)
    return _noise_grid_kernel(code, x, y, to_u64(seed))


@dataclass(frozen=True)
class CoherentNoise:
    """
    An immutable noise field: a kind and a seed. Instances never share or
    mutate state, so any number of them can be sampled concurrently.
    """
    seed: int = 0
    kind: str = DEFAULT_KIND

    def __post_init__(self):
        kind_code(self.kind)

    def __call__(self, coord) -> float:
        return noise(coord, self.seed, self.kind)

    def grid(self, x_coords: np.ndarray, y_coords: np.ndarray) -> np.ndarray:
        return noise_grid(x_coords, y_coords, self.seed, self.kind)
