# tests/test_fractal.py
import numpy as np
import pytest

from position_seed.errors import InvalidCoordinate, InvalidParameter
from position_seed.fractal import OctaveSpec, fbm, fbm_grid, fbm_octaves, fbm_points, resolve_spec
from position_seed.noise import NOISE_KINDS, noise


@pytest.mark.parametrize("kind", sorted(NOISE_KINDS))
def test_one_octave_is_plain_noise(kind):
    spec = OctaveSpec(1, 0.5, 2.0)
    for coord in [(0.3, 0.7), (-12.25, 4.5), (1.5, 2.5, -3.25)]:
        assert fbm(coord, spec, 7, kind) == noise(coord, 7, kind)


def test_fixed_scenario_is_bounded_and_bit_stable():
    spec = OctaveSpec(6, 0.5, 2.0)
    first = fbm((1.5, 2.5), spec, seed=7)
    assert -1.0 <= first <= 1.0
    for _ in range(1000):
        assert fbm((1.5, 2.5), spec, seed=7).hex() == first.hex()


@pytest.mark.parametrize("octaves", [1, 2, 4, 8, 12])
def test_output_stays_in_range(octaves, rng):
    xs = rng.uniform(-200.0, 200.0, size=(1, 3000))
    ys = rng.uniform(-200.0, 200.0, size=(1, 3000))
    values = fbm_grid(xs, ys, OctaveSpec(octaves, 0.6, 2.1), seed=3)
    assert values.min() >= -1.0
    assert values.max() <= 1.0


def test_default_spec():
    spec = resolve_spec(None)
    assert (spec.octaves, spec.persistence, spec.lacunarity) == (6, 0.5, 2.0)
    assert resolve_spec({"octaves": 3}) == OctaveSpec(3, 0.5, 2.0)
    assert resolve_spec(spec) is spec


def test_max_amplitude():
    assert OctaveSpec(1, 0.5, 2.0).max_amplitude == 1.0
    assert OctaveSpec(3, 0.5, 2.0).max_amplitude == pytest.approx(1.75)


@pytest.mark.parametrize("kwargs", [
    {"octaves": 0},
    {"octaves": -2},
    {"octaves": 2.5},
    {"octaves": True},
    {"persistence": 0.0},
    {"persistence": 1.0},
    {"persistence": -0.3},
    {"lacunarity": 1.0},
    {"lacunarity": 0.5},
])
def test_invalid_specs_raise(kwargs):
    with pytest.raises(InvalidParameter):
        OctaveSpec(**kwargs)


def test_resolve_spec_rejects_other_types():
    with pytest.raises(InvalidParameter):
        resolve_spec(6)


def test_octave_breakdown_matches_fbm():
    spec = OctaveSpec(5, 0.45, 2.3)
    report = fbm_octaves((3.3, -1.7), spec, seed=12)
    assert len(report["octaves"]) == 5
    assert report["value"] == pytest.approx(fbm((3.3, -1.7), spec, seed=12), abs=1e-15)
    assert report["max_amplitude"] == pytest.approx(spec.max_amplitude)
    assert report["octaves"][-1]["running_total"] == report["raw_total"]


def test_octave_breakdown_steps():
    report = fbm_octaves((0.4, 0.9, 1.6), OctaveSpec(4, 0.5, 2.0), seed=100)
    seeds = [step["seed"] for step in report["octaves"]]
    assert seeds == [100, 1100, 2100, 3100]
    frequencies = [step["frequency"] for step in report["octaves"]]
    assert frequencies == [1.0, 2.0, 4.0, 8.0]
    for step in report["octaves"]:
        assert step["contribution"] == pytest.approx(step["noise"] * step["amplitude"])


def test_grid_matches_scalar(unit_grid):
    xs, ys = unit_grid
    spec = OctaveSpec(4, 0.5, 2.0)
    grid = fbm_grid(xs, ys, spec, seed=9)
    expected = np.array([[fbm((x, y), spec, 9) for x, y in zip(rx, ry)] for rx, ry in zip(xs, ys)])
    np.testing.assert_allclose(grid, expected, rtol=0, atol=1e-12)


def test_points_match_scalar(rng):
    spec = OctaveSpec(3, 0.5, 2.0)
    points3 = rng.uniform(-10.0, 10.0, size=(20, 3))
    points2 = points3[:, :2].copy()
    out3 = fbm_points(points3, spec, seed=4)
    out2 = fbm_points(points2, spec, seed=4)
    for p, v in zip(points3, out3):
        assert v == pytest.approx(fbm(tuple(p), spec, 4), abs=1e-12)
    for p, v in zip(points2, out2):
        assert v == pytest.approx(fbm(tuple(p), spec, 4), abs=1e-12)


def test_points_reject_bad_input():
    with pytest.raises(InvalidCoordinate):
        fbm_points(np.zeros((4, 5)))
    with pytest.raises(InvalidCoordinate):
        fbm_points(np.array([[0.0, np.nan, 1.0]]))


def test_more_octaves_add_detail():
    xs, ys = np.meshgrid(np.linspace(0.0, 4.0, 200), np.zeros(1))
    smooth = fbm_grid(xs, ys, OctaveSpec(1, 0.5, 2.0), seed=2)
    rough = fbm_grid(xs, ys, OctaveSpec(8, 0.5, 2.0), seed=2)
    assert np.abs(np.diff(rough)).sum() > np.abs(np.diff(smooth)).sum()
