# tests/test_zoom.py
import pytest

from position_seed import config as DEFAULTS
from position_seed.errors import InvalidParameter
from position_seed.zoom import (FEATURE_TYPES, SCALES, cell_key, cell_size, feature_at, feature_type,
                                features_in_view, scale_for_zoom, zoom_level)


def test_scale_table():
    assert len(SCALES) == 18
    sizes = [size for _, size in SCALES]
    assert sizes == sorted(sizes, reverse=True)


def test_scale_for_zoom():
    assert scale_for_zoom(0.0) == (0, "Observable Universe", 1e26)
    assert scale_for_zoom(10.0)[1] == "Galaxy"
    index, name, _ = scale_for_zoom(500.0)
    assert index == len(SCALES) - 1
    assert name == "Microscopic"


def test_levels_and_cell_size():
    assert zoom_level(0.0) == 0
    assert zoom_level(3.99) == 3
    assert cell_size(0.5) == 50.0
    assert cell_size(2.0) == 12.5


@pytest.mark.parametrize("zoom", [-1.0, float("nan"), float("inf")])
def test_bad_zoom_raises(zoom):
    with pytest.raises(InvalidParameter):
        scale_for_zoom(zoom)


def test_feature_type_thresholds():
    assert feature_type(0.0) == "major"
    assert feature_type(0.3) == "standard"
    assert feature_type(0.6) == "minor"
    assert feature_type(0.95) == "detail"


def test_feature_at_is_deterministic(seed):
    assert feature_at(5, -3, 2, seed) == feature_at(5, -3, 2, seed)


def test_feature_stays_in_its_cell(seed):
    found = 0
    for cx in range(-10, 10):
        for cy in range(-10, 10):
            f = feature_at(cx, cy, 1, seed)
            if f is None:
                continue
            found += 1
            size = 25.0
            assert cx * size < f["world_x"] < (cx + 1) * size
            assert cy * size < f["world_y"] < (cy + 1) * size
            assert f["type"] in FEATURE_TYPES
            assert 3.0 <= f["size"] < 18.0
    assert 0.2 < found / 400 < 0.4


def test_features_do_not_depend_on_the_view(seed):
    a = {f["cell"]: f for f in features_in_view((0.0, 0.0), 3.0, seed, 800, 600)}
    b = {f["cell"]: f for f in features_in_view((20.0, -15.0), 3.5, seed, 640, 480)}
    shared = set(a) & set(b)
    assert shared
    for cell in shared:
        assert a[cell]["world_x"] == b[cell]["world_x"]
        assert a[cell]["world_y"] == b[cell]["world_y"]
        assert a[cell]["brightness"] == b[cell]["brightness"]


def test_features_are_on_screen(seed):
    width, height = 400, 300
    features = features_in_view((100.0, 100.0), 4.2, seed, width, height)
    assert features
    for f in features:
        assert -50.0 <= f["screen_x"] <= width + 50.0
        assert -50.0 <= f["screen_y"] <= height + 50.0
        assert f["display_size"] >= 2.0
        assert f["level"] == 4


def test_bad_viewport_raises(seed):
    with pytest.raises(InvalidParameter):
        features_in_view((0.0, 0.0), 1.0, seed, 0, 100)
    with pytest.raises(InvalidParameter):
        features_in_view((float("nan"), 0.0), 1.0, seed, 100, 100)


@pytest.mark.parametrize("zoom", [50.0, 52.0, 60.0])
def test_deep_zoom_away_from_the_origin(seed, zoom):
    features = features_in_view((500.0, 500.0), zoom, seed, 800, 600)
    assert features == features_in_view((500.0, 500.0), zoom, seed, 800, 600)
    for f in features:
        assert f["level"] == int(zoom)


def test_large_cell_indices_are_folded(seed):
    period = DEFAULTS.ZOOM_CELL_KEY_PERIOD
    assert cell_key(2 ** 60 + 7, -3, 60) == (7, period - 3, 60)
    found = 0
    for i in range(60):
        deep = feature_at(5 * period + i, i, 60, seed)
        near = feature_at(i, i, 60, seed)
        assert (deep is None) == (near is None)
        if deep is None:
            continue
        found += 1
        assert deep["cell"] == (5 * period + i, i)
        assert deep["brightness"] == near["brightness"]
        assert deep["type"] == near["type"]
    assert found


def test_feature_zoom_is_capped(seed):
    with pytest.raises(InvalidParameter):
        features_in_view((0.0, 0.0), DEFAULTS.ZOOM_MAX_FEATURE_ZOOM + 1.0, seed, 100, 100)
