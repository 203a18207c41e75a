# position_seed/throughput.py

"""
================================================================================
HASH THROUGHPUT
================================================================================
Timing helpers that contrast position-is-seed hashing with a sequential
generator.

- Three 32-bit finalizer variants (xxHash32-style, PCG32 output permutation,
  MurmurHash3-style) for comparison with the 64-bit coordinate hash.
- TribonacciGenerator: a 16-bit-word lagged generator. Reaching value N
  requires generating every value before it, so random access is O(N) and
  the work cannot be split across cores.
- measure_throughput / compare_sequential_parallel: wall-clock rates of the
  JIT kernels. Kernels are compiled before the clock starts.

All 32-bit arithmetic wraps modulo 2**32.
================================================================================
"""

import logging
import time

import numpy as np
from numba import njit, prange

from .errors import InvalidParameter
from .hashing import hash3_kernel, hash_grid, to_u64

logger = logging.getLogger(__name__)

MASK32 = 0xFFFFFFFF
MASK16 = 0xFFFF

# --- 32-bit finalizer constants ---
XXH_PRIME_1 = 0x9E3779B1
XXH_PRIME_2 = 0x85EBCA77
XXH_PRIME_3 = 0xC2B2AE3D
PCG_MULTIPLIER = 747796405
PCG_INCREMENT = 2891336453
PCG_OUTPUT_MULTIPLIER = 277803737
MURMUR_C1 = 0xCC9E2D51
MURMUR_C2 = 0x1B873593
MURMUR_PRE = 0x12345
MURMUR_ADD = 0xE6546B64
MURMUR_FMIX_1 = 0x85EBCA6B
MURMUR_FMIX_2 = 0xC2B2AE35

# Tribonacci words used when the seed leaves them zero.
TRIBONACCI_FALLBACK_S1 = 12345
TRIBONACCI_FALLBACK_S2 = 54321
TWISTS_PER_VALUE = 4


# --- Python reference versions ---

def _rotl32(v: int, r: int) -> int:
    return ((v << r) | (v >> (32 - r))) & MASK32


def xxhash32_mix(value: int) -> int:
    h = (value + XXH_PRIME_1) & MASK32
    h = ((h ^ (h >> 15)) * XXH_PRIME_2) & MASK32
    h = ((h ^ (h >> 13)) * XXH_PRIME_3) & MASK32
    return h ^ (h >> 16)


def pcg32(value: int) -> int:
    state = (value * PCG_MULTIPLIER + PCG_INCREMENT) & MASK32
    word = (((state >> ((state >> 28) + 4)) ^ state) * PCG_OUTPUT_MULTIPLIER) & MASK32
    return (word >> 22) ^ word


def murmur3_mix(value: int) -> int:
    value &= MASK32
    k = (value * MURMUR_PRE) & MASK32
    k = (k * MURMUR_C1) & MASK32
    k = _rotl32(k, 15)
    k = (k * MURMUR_C2) & MASK32
    h = value ^ k
    h = _rotl32(h, 13)
    h = (h * 5 + MURMUR_ADD) & MASK32
    h ^= h >> 16
    h = (h * MURMUR_FMIX_1) & MASK32
    h ^= h >> 13
    h = (h * MURMUR_FMIX_2) & MASK32
    return h ^ (h >> 16)


MIXERS_32 = {
    'xxhash32': xxhash32_mix,
    'pcg32': pcg32,
    'murmur3': murmur3_mix,
}


def coordinate_hash32(mix):
    """
    Adapts a 32-bit mixer to the (coords, salt, seed) signature so it can be
    measured with the same quality checks as the 64-bit hash.
    """
    def _hash(coords, salt=0, seed=0):
        x, y = coords[0], coords[1]
        z = coords[2] if len(coords) == 3 else 0
        packed = (x * XXH_PRIME_1 + y * XXH_PRIME_2 + z * XXH_PRIME_3
                  + salt * MURMUR_C1 + seed * MURMUR_C2) & MASK32
        return mix(packed)
    return _hash


class TribonacciGenerator:
    """
    Sequential generator over three 16-bit words. Each value is built from
    the low nibbles of four twists.
    """

    def __init__(self, seed: int):
        self.reset(seed)

    def reset(self, seed: int) -> None:
        seed = int(seed)
        self.s0 = seed & MASK16
        self.s1 = ((seed >> 16) & MASK16) or TRIBONACCI_FALLBACK_S1
        self.s2 = ((seed >> 32) & MASK16) or TRIBONACCI_FALLBACK_S2
        self.index = 0

    def twist(self) -> int:
        temp = (self.s0 + self.s1 + self.s2) & MASK16
        self.s0, self.s1, self.s2 = self.s1, self.s2, temp
        return temp

    def next(self) -> int:
        value = 0
        for _ in range(TWISTS_PER_VALUE):
            value = (value << 4) | (self.twist() & 0xF)
        self.index += 1
        return value

    def seek_to(self, target_index: int) -> None:
        """Advances to `target_index`. Costs one next() per skipped value."""
        if target_index < self.index:
            raise InvalidParameter(
                f"Cannot seek backwards from {self.index} to {target_index}; reset first"
            )
        while self.index < target_index:
            self.next()


# --- JIT kernels ---

_M32 = np.uint64(MASK32)
_VARIANT_CODES = {'splitmix64': 0, 'xxhash32': 1, 'pcg32': 2, 'murmur3': 3}
VARIANTS = tuple(_VARIANT_CODES)


@njit(cache=True)
def _rotl32_kernel(v, r):
    return ((v << np.uint64(r)) | (v >> np.uint64(32 - r))) & _M32


@njit(cache=True)
def _xxhash32_kernel(v):
    h = (v + np.uint64(XXH_PRIME_1)) & _M32
    h = ((h ^ (h >> np.uint64(15))) * np.uint64(XXH_PRIME_2)) & _M32
    h = ((h ^ (h >> np.uint64(13))) * np.uint64(XXH_PRIME_3)) & _M32
    return h ^ (h >> np.uint64(16))


@njit(cache=True)
def _pcg32_kernel(v):
    state = (v * np.uint64(PCG_MULTIPLIER) + np.uint64(PCG_INCREMENT)) & _M32
    shift = (state >> np.uint64(28)) + np.uint64(4)
    word = (((state >> shift) ^ state) * np.uint64(PCG_OUTPUT_MULTIPLIER)) & _M32
    return (word >> np.uint64(22)) ^ word


@njit(cache=True)
def _murmur3_kernel(v):
    v = v & _M32
    k = (v * np.uint64(MURMUR_PRE)) & _M32
    k = (k * np.uint64(MURMUR_C1)) & _M32
    k = _rotl32_kernel(k, 15)
    k = (k * np.uint64(MURMUR_C2)) & _M32
    h = v ^ k
    h = _rotl32_kernel(h, 13)
    h = (h * np.uint64(5) + np.uint64(MURMUR_ADD)) & _M32
    h = h ^ (h >> np.uint64(16))
    h = (h * np.uint64(MURMUR_FMIX_1)) & _M32
    h = h ^ (h >> np.uint64(13))
    h = (h * np.uint64(MURMUR_FMIX_2)) & _M32
    return h ^ (h >> np.uint64(16))


@njit(cache=True)
def _throughput_kernel(code, count, seed):
    # XOR-fold every output so the loop cannot be optimized away.
    acc = np.uint64(0)
    zero = np.int64(0)
    for i in range(count):
        v = np.uint64(i) + seed
        if code == 0:
            acc ^= hash3_kernel(np.int64(i), zero, zero, np.uint64(0), seed)
        elif code == 1:
            acc ^= _xxhash32_kernel(v & _M32)
        elif code == 2:
            acc ^= _pcg32_kernel(v & _M32)
        else:
            acc ^= _murmur3_kernel(v & _M32)
    return acc


@njit(cache=True, parallel=True)
def _parallel_throughput_kernel(code, count, seed):
    out = np.empty(count, dtype=np.uint64)
    zero = np.int64(0)
    for n in prange(count):
        i = np.int64(n)
        v = np.uint64(i) + seed
        if code == 0:
            out[n] = hash3_kernel(i, zero, zero, np.uint64(0), seed)
        elif code == 1:
            out[n] = _xxhash32_kernel(v & _M32)
        elif code == 2:
            out[n] = _pcg32_kernel(v & _M32)
        else:
            out[n] = _murmur3_kernel(v & _M32)
    return out


@njit(cache=True)
def tribonacci_fill(count, s0, s1, s2):
    """The first `count` values of a TribonacciGenerator with the given words."""
    out = np.empty(count, dtype=np.int64)
    for n in range(count):
        value = 0
        for _ in range(TWISTS_PER_VALUE):
            temp = (s0 + s1 + s2) & MASK16
            s0 = s1
            s1 = s2
            s2 = temp
            value = (value << 4) | (temp & 0xF)
        out[n] = value
    return out


def _variant_code(variant: str) -> int:
    try:
        return _VARIANT_CODES[variant]
    except KeyError:
        raise InvalidParameter(f"Unknown hash variant '{variant}', expected one of {list(VARIANTS)}") from None


def _check_count(count: int) -> int:
    if count <= 0:
        raise InvalidParameter(f"Count must be positive, got {count}")
    return int(count)


def measure_throughput(variant: str, count: int, seed: int = 0, repeats: int = 3,
                       parallel: bool = False) -> dict:
    """
    Best-of-`repeats` rate of one hash variant over `count` consecutive inputs.

    Returns a dict with 'variant', 'count', 'parallel', 'seconds' and
    'hashes_per_second'.
    """
    code = _variant_code(variant)
    count = _check_count(count)
    s = to_u64(seed)
    kernel = _parallel_throughput_kernel if parallel else _throughput_kernel

    # Compile outside the timed region.
    kernel(code, 1, s)

    best = float('inf')
    for _ in range(max(1, repeats)):
        start = time.perf_counter()
        kernel(code, count, s)
        best = min(best, time.perf_counter() - start)

    rate = count / best if best > 0 else float('inf')
    logger.debug(f"{variant} ({'parallel' if parallel else 'sequential'}): {rate:,.0f} hashes/s")
    return {
        'variant': variant,
        'count': count,
        'parallel': parallel,
        'seconds': best,
        'hashes_per_second': rate,
    }


def compare_sequential_parallel(width: int, height: int, seed: int = 0) -> dict:
    """
    Fills a width x height grid twice: with the sequential Tribonacci
    generator (one value after another) and with the coordinate hash (rows
    in parallel). Returns both timings and their ratio.
    """
    cells = _check_count(width) * _check_count(height)
    generator = TribonacciGenerator(seed)
    words = (generator.s0, generator.s1, generator.s2)

    tribonacci_fill(1, *words)
    hash_grid(1, 1, seed=seed)

    start = time.perf_counter()
    tribonacci_fill(cells, *words)
    sequential = time.perf_counter() - start

    start = time.perf_counter()
    hash_grid(width, height, seed=seed)
    parallel = time.perf_counter() - start

    result = {
        'cells': cells,
        'sequential_seconds': sequential,
        'parallel_seconds': parallel,
        'sequential_cells_per_second': cells / sequential if sequential > 0 else float('inf'),
        'parallel_cells_per_second': cells / parallel if parallel > 0 else float('inf'),
        'speedup': sequential / parallel if parallel > 0 else float('inf'),
    }
    logger.debug(f"Sequential vs parallel over {cells} cells: speedup {result['speedup']:.2f}x")
    return result
