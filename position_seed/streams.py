# position_seed/streams.py

"""
================================================================================
VALUE STREAMS
================================================================================
Pure conversions from a 64-bit hash to typed values. There is no hidden RNG
state anywhere in this module: the same hash always decodes to the same value.

- to_unit_float: top 53 bits scaled by 2**-53, so the result is an exact
  float in [0, 1).
- to_bounded_int: multiply-high, floor(h * n / 2**64). For n that is not a
  power of two some results are more likely than others by at most
  n / 2**64, which is far below anything a visualization can show.
- to_bool: to_unit_float(h) < p.
- pick: items[to_bounded_int(h, len(items))].
================================================================================
"""

from collections.abc import Sequence

import numpy as np

from .errors import InvalidParameter
from .hashing import MASK64

_UNIT_SCALE = 1.0 / (1 << 53)


def to_unit_float(h: int) -> float:
    """Float in [0, 1) from the high 53 bits of the hash."""
    return ((h & MASK64) >> 11) * _UNIT_SCALE


def to_signed_float(h: int) -> float:
    """Float in [-1, 1)."""
    return to_unit_float(h) * 2.0 - 1.0


def to_range(h: int, low: float, high: float) -> float:
    """Float in [low, high)."""
    return low + to_unit_float(h) * (high - low)


def to_bounded_int(h: int, n: int) -> int:
    """Integer in [0, n) by multiply-high."""
    if n <= 0:
        raise InvalidParameter(f"Bound must be positive, got {n}")
    return ((h & MASK64) * n) >> 64


def to_bool(h: int, p: float) -> bool:
    """True with probability p."""
    if not 0.0 <= p <= 1.0:
        raise InvalidParameter(f"Probability must be in [0, 1], got {p}")
    return to_unit_float(h) < p


def pick(h: int, items: Sequence):
    """Deterministic choice from a non-empty sequence."""
    if len(items) == 0:
        raise InvalidParameter("Cannot pick from an empty sequence")
    return items[to_bounded_int(h, len(items))]


def unit_floats(hashes: np.ndarray) -> np.ndarray:
    """Vectorized to_unit_float over a uint64 array."""
    hashes = np.asarray(hashes, dtype=np.uint64)
    return (hashes >> np.uint64(11)).astype(np.float64) * _UNIT_SCALE
