# tests/test_streams.py
import numpy as np
import pytest

from position_seed import quality
from position_seed.errors import InvalidParameter
from position_seed.hashing import MASK64, hash_coords, hash_grid
from position_seed.streams import (pick, to_bool, to_bounded_int, to_range, to_signed_float,
                                   to_unit_float, unit_floats)


def test_unit_float_bounds():
    assert to_unit_float(0) == 0.0
    assert to_unit_float(MASK64) < 1.0
    assert to_unit_float(1 << 63) == 0.5


def test_signed_float_bounds():
    assert to_signed_float(0) == -1.0
    assert to_signed_float(1 << 63) == 0.0
    assert to_signed_float(MASK64) < 1.0


def test_range_bounds():
    for x in range(200):
        v = to_range(hash_coords((x, 0), 0, 0), 10.0, 20.0)
        assert 10.0 <= v < 20.0


def test_bounded_int_is_multiply_high():
    assert to_bounded_int(0, 10) == 0
    assert to_bounded_int(MASK64, 10) == 9
    assert to_bounded_int(1 << 63, 10) == 5
    assert to_bounded_int(12345, 1) == 0


@pytest.mark.parametrize("n", [0, -3])
def test_bounded_int_rejects_non_positive(n):
    with pytest.raises(InvalidParameter):
        to_bounded_int(123, n)


def test_bounded_int_is_uniform():
    assert quality.bounded_int_uniformity(7, samples=7000, salt=0x1234567, seed=1) > 0.001


def test_bool_extremes():
    for x in range(50):
        h = hash_coords((x, 1), 0, 0)
        assert to_bool(h, 0.0) is False
        assert to_bool(h, 1.0) is True


@pytest.mark.parametrize("p", [-0.1, 1.5])
def test_bool_rejects_bad_probability(p):
    with pytest.raises(InvalidParameter):
        to_bool(0, p)


def test_bool_rate_follows_probability():
    hashes = [hash_coords((x, 0), 99, 5) for x in range(5000)]
    rate = sum(to_bool(h, 0.25) for h in hashes) / len(hashes)
    assert rate == pytest.approx(0.25, abs=0.03)


def test_pick_is_deterministic():
    items = ("a", "b", "c", "d")
    h = hash_coords((4, 2), 0, 0)
    assert pick(h, items) == pick(h, items)
    assert pick(h, items) in items
    assert pick(h, ["only"]) == "only"


def test_pick_rejects_empty():
    with pytest.raises(InvalidParameter):
        pick(123, [])


def test_unit_floats_matches_scalar():
    grid = hash_grid(8, 8, seed=3)
    vectorized = unit_floats(grid)
    expected = np.array([[to_unit_float(int(h)) for h in row] for row in grid])
    np.testing.assert_array_equal(vectorized, expected)
