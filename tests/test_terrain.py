# tests/test_terrain.py
import logging

import numpy as np
import pytest

from position_seed import config as DEFAULTS
from position_seed.errors import InvalidParameter
from position_seed.terrain import BLEND_MODES, TerrainBuilder, blend


@pytest.fixture
def builder(logger):
    return TerrainBuilder({"seed": 5}, logger)


@pytest.fixture
def grid(builder):
    return builder.get_coordinate_grid(-200.0, -150.0, 400.0, 300.0, 40, 30)


def test_coordinate_grid(builder):
    x, y = builder.get_coordinate_grid(10.0, 20.0, 100.0, 50.0, 10, 5)
    assert x.shape == (5, 10)
    assert x[0, 0] == 10.0 and y[0, 0] == 20.0
    assert x[0, 1] - x[0, 0] == pytest.approx(10.0)
    assert y[1, 0] - y[0, 0] == pytest.approx(10.0)


def test_compose_shape_and_range(builder, grid):
    heights = builder.compose(*grid)
    assert heights.shape == grid[0].shape
    assert heights.min() >= -1.0
    assert heights.max() <= 1.0
    assert heights.std() > 0.0


def test_compose_is_deterministic(logger, grid):
    a = TerrainBuilder({"seed": 5}, logger).compose(*grid)
    b = TerrainBuilder({"seed": 5}, logger).compose(*grid)
    np.testing.assert_array_equal(a, b)
    c = TerrainBuilder({"seed": 6}, logger).compose(*grid)
    assert not np.array_equal(a, c)


def test_first_step_is_the_weighted_foundation(builder, grid):
    foundation = builder.get_layer("foundation", *grid)
    weight = DEFAULTS.TERRAIN_LAYERS["foundation"]["weight"]
    np.testing.assert_allclose(builder.compose(*grid, steps=1), foundation * weight, rtol=0, atol=1e-15)


def test_layers_use_their_own_seed_offsets(builder, grid):
    foundation = builder.get_layer("foundation", *grid)
    structure = builder.get_layer("structure", *grid)
    assert not np.array_equal(foundation, structure)
    assert foundation.min() >= -1.0 and structure.max() <= 1.0


def test_no_enabled_layers_is_flat(logger, grid):
    layers = {name: {"enabled": False} for name in DEFAULTS.TERRAIN_LAYER_ORDER}
    heights = TerrainBuilder({"layers": layers}, logger).compose(*grid)
    np.testing.assert_array_equal(heights, np.zeros(grid[0].shape))


def test_overrides_leave_defaults_untouched(logger):
    b = TerrainBuilder({"layers": {"detail": {"enabled": False, "opacity": 0.1}}}, logger)
    assert b.settings["layers"]["detail"]["enabled"] is False
    assert b.settings["layers"]["detail"]["scale"] == DEFAULTS.TERRAIN_LAYERS["detail"]["scale"]
    assert DEFAULTS.TERRAIN_LAYERS["detail"]["enabled"] is True


def test_get_height_matches_compose(builder, grid):
    heights = builder.compose(*grid)
    x, y = grid
    assert builder.get_height(x[4, 7], y[4, 7]) == pytest.approx(heights[4, 7], abs=1e-12)


@pytest.mark.parametrize("config", [
    {"noise_kind": "pink"},
    {"layer_order": ("foundation", "missing")},
    {"layers": {"detail": {"blend": "dodge"}}},
    {"layers": {"detail": {"persistence": 1.5}}},
    {"layers": {"detail": {"scale": 0.0}}},
    {"layers": {"warp": {"warp_strength": -1.0}}},
])
def test_bad_config_raises(logger, config):
    with pytest.raises(InvalidParameter):
        TerrainBuilder(config, logger)


def test_unknown_layer_raises(builder, grid):
    with pytest.raises(InvalidParameter):
        builder.get_layer("clouds", *grid)


def test_init_logs(logger, caplog):
    with caplog.at_level(logging.INFO, logger=logger.name):
        TerrainBuilder({"seed": 77}, logger)
    assert "initialized with seed: 77" in caplog.text


def test_blend_modes():
    assert set(BLEND_MODES) == {"normal", "add", "subtract", "multiply", "overlay", "screen"}
    assert blend("add", 0.2, 0.3, 0.5) == pytest.approx(0.35)
    assert blend("normal", 0.2, 0.3, 0.5) == pytest.approx(0.35)
    assert blend("subtract", 0.2, 0.3, 0.5) == pytest.approx(0.05)
    assert blend("multiply", 0.5, 0.5, 1.0) == pytest.approx(0.75)
    assert float(blend("overlay", 0.5, 1.0, 1.0)) == pytest.approx(1.0)
    assert blend("screen", -1.0, -1.0, 1.0) == pytest.approx(-1.0)
    assert blend("screen", 0.3, 0.9, 0.0) == pytest.approx(0.3)


def test_unknown_blend_raises():
    with pytest.raises(InvalidParameter):
        blend("dodge", 0.0, 0.0, 1.0)
