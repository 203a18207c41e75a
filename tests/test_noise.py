# tests/test_noise.py
import dataclasses

import numpy as np
import pytest

from position_seed import quality
from position_seed.errors import InvalidCoordinate, InvalidParameter
from position_seed.noise import DEFAULT_KIND, NOISE_KINDS, CoherentNoise, noise, noise_grid

COHERENT_KINDS = ("value", "perlin", "simplex")


def test_default_kind_is_simplex():
    assert DEFAULT_KIND == "simplex"
    assert set(NOISE_KINDS) == {"white", "value", "perlin", "simplex"}


@pytest.mark.parametrize("kind", sorted(NOISE_KINDS))
def test_2d_output_range(kind, rng):
    xs = rng.uniform(-500.0, 500.0, size=(1, 5000))
    ys = rng.uniform(-500.0, 500.0, size=(1, 5000))
    values = noise_grid(xs, ys, seed=11, kind=kind)
    assert values.min() >= -1.0
    assert values.max() <= 1.0
    assert values.std() > 0.05


@pytest.mark.parametrize("kind", sorted(NOISE_KINDS))
def test_3d_output_range(kind, rng):
    points = rng.uniform(-100.0, 100.0, size=(500, 3))
    values = [noise(tuple(p), seed=3, kind=kind) for p in points]
    assert min(values) >= -1.0
    assert max(values) <= 1.0


@pytest.mark.parametrize("kind", sorted(NOISE_KINDS))
def test_deterministic(kind):
    assert noise((1.25, -7.5), 9, kind) == noise((1.25, -7.5), 9, kind)
    assert noise((1.25, -7.5, 3.0), 9, kind) == noise((1.25, -7.5, 3.0), 9, kind)


def test_seed_changes_the_field():
    a = [noise((x * 0.37, 1.1), 1) for x in range(20)]
    b = [noise((x * 0.37, 1.1), 2) for x in range(20)]
    assert a != b


@pytest.mark.parametrize("kind", COHERENT_KINDS)
def test_continuous_across_lattice_lines(kind):
    assert quality.continuity_gap(kind, seed=5, epsilon=1e-6, samples=1000) < 1e-3


def test_continuity_gap_shrinks_with_epsilon():
    coarse = quality.continuity_gap("simplex", seed=8, epsilon=1e-3, samples=500)
    fine = quality.continuity_gap("simplex", seed=8, epsilon=1e-6, samples=500)
    assert fine < coarse


def test_white_noise_jumps_at_lattice_lines():
    assert quality.continuity_gap("white", seed=5, epsilon=1e-6, samples=1000) > 0.5


def test_continuous_in_3d_across_cell_faces():
    for kind in COHERENT_KINDS:
        for k in range(-3, 4):
            left = noise((k - 1e-7, 0.3, 2.7), 4, kind)
            right = noise((k + 1e-7, 0.3, 2.7), 4, kind)
            assert abs(right - left) < 1e-4


def test_simplex_has_little_directional_bias():
    bias = quality.directional_bias("simplex", seed=2, step=0.5, samples=20000)
    assert 0.0 <= bias < 0.25


def test_grid_matches_scalar(unit_grid):
    xs, ys = unit_grid
    for kind in NOISE_KINDS:
        grid = noise_grid(xs, ys, seed=17, kind=kind)
        assert grid.shape == xs.shape
        for (j, i) in [(0, 0), (3, 7), (10, 16)]:
            assert grid[j, i] == pytest.approx(noise((xs[j, i], ys[j, i]), 17, kind), abs=1e-12)


def test_unknown_kind_raises():
    with pytest.raises(InvalidParameter):
        noise((0.5, 0.5), 0, "pink")
    with pytest.raises(InvalidParameter):
        CoherentNoise(seed=1, kind="pink")


@pytest.mark.parametrize("coord", [(float("nan"), 0.0), (0.0, float("inf")), (1.0,), (1, 2, 3, 4)])
def test_invalid_coordinates_raise(coord):
    with pytest.raises(InvalidCoordinate):
        noise(coord, 0)


def test_grid_shape_mismatch_raises():
    with pytest.raises(InvalidCoordinate):
        noise_grid(np.zeros((2, 3)), np.zeros((3, 2)))
    with pytest.raises(InvalidCoordinate):
        noise_grid(np.full((2, 2), np.nan), np.zeros((2, 2)))


def test_coherent_noise_object(unit_grid):
    field = CoherentNoise(seed=23, kind="perlin")
    assert field((0.3, 0.9)) == noise((0.3, 0.9), 23, "perlin")
    xs, ys = unit_grid
    np.testing.assert_allclose(field.grid(xs, ys), noise_grid(xs, ys, 23, "perlin"), rtol=0, atol=1e-12)
    with pytest.raises(dataclasses.FrozenInstanceError):
        field.seed = 24


def test_independent_objects_do_not_interfere():
    a = CoherentNoise(seed=1)
    before = a((2.5, 3.5))
    CoherentNoise(seed=999)((2.5, 3.5))
    assert a((2.5, 3.5)) == before
