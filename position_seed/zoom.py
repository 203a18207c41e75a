# position_seed/zoom.py

"""
================================================================================
SEAMLESS ZOOM
================================================================================
Deterministic feature placement for a view that zooms continuously across
many orders of magnitude. Nothing is cached between frames: every visible
feature is re-derived from its grid cell each time.

Data Contract:
---------------
- zoom is a float >= 0; the view magnification is 2**zoom.
- Features live on a square grid whose cell size halves at every whole zoom
  level: cell_size = ZOOM_BASE_CELL_SIZE / 2**floor(zoom). A cell holds at
  most one feature, keyed by (cell_x, cell_y, level) and the seed. Cell
  indices are taken modulo ZOOM_CELL_KEY_PERIOD before hashing, so every
  level stays hashable at any view centre.
- features_in_view accepts zoom up to ZOOM_MAX_FEATURE_ZOOM; past that the
  cell grid is finer than float64 can address.
- A feature's properties depend only on its cell, level and seed, never on
  the view centre or viewport size, so panning and zooming within a level
  always show the same feature in the same cell. Crossing a whole zoom level
  moves to a finer grid with its own features.
- Side Effects: None.
================================================================================
"""

import math

from . import config as DEFAULTS
from .errors import InvalidParameter
from .layers import PropertyLayer, extract

# (name, characteristic size in metres), largest first.
SCALES = (
    ('Observable Universe', 1e26),
    ('Galaxy Supercluster', 1e24),
    ('Galaxy Cluster', 1e23),
    ('Galaxy', 1e21),
    ('Spiral Arm', 1e19),
    ('Star Cluster', 1e17),
    ('Stellar Neighborhood', 1e15),
    ('Planetary System', 1e13),
    ('Planetary Orbit', 1e11),
    ('Planet', 1e7),
    ('Continent', 1e6),
    ('Region', 1e5),
    ('Local Area', 1e4),
    ('Terrain', 1e3),
    ('Surface Detail', 1e2),
    ('Rock/Object', 1e1),
    ('Grain', 1e0),
    ('Microscopic', 1e-3),
)

FEATURE_TYPES = ('major', 'standard', 'minor', 'detail')
# Upper bounds of the type roll for each feature type.
_TYPE_THRESHOLDS = (0.2, 0.5, 0.8)

# Features are dropped once their screen position is this far outside the viewport.
VIEW_MARGIN_PX = 50.0

FEATURE_LAYERS = (
    PropertyLayer.float_range('existence', DEFAULTS.SALT_ZOOM_EXISTENCE, 0.0, 1.0),
    PropertyLayer.float_range('jitter_x', DEFAULTS.SALT_ZOOM_JITTER_X, 0.1, 0.9),
    PropertyLayer.float_range('jitter_y', DEFAULTS.SALT_ZOOM_JITTER_Y, 0.1, 0.9),
    PropertyLayer.float_range('size', DEFAULTS.SALT_ZOOM_SIZE, 3.0, 18.0),
    PropertyLayer.float_range('type_roll', DEFAULTS.SALT_ZOOM_TYPE, 0.0, 1.0),
    PropertyLayer.float_range('brightness', DEFAULTS.SALT_ZOOM_BRIGHTNESS, 0.0, 1.0),
    PropertyLayer.float_range('persistence_score', DEFAULTS.SALT_ZOOM_PERSISTENCE, 0.0, 100.0),
)


def _check_zoom(zoom: float) -> float:
    zoom = float(zoom)
    if not math.isfinite(zoom) or zoom < 0.0:
        raise InvalidParameter(f"Zoom must be a finite value >= 0, got {zoom}")
    return zoom


def scale_for_zoom(zoom: float) -> tuple:
    """
    (index, name, range_m) of the first scale no larger than the range the
    view currently spans. Zooms past the table stay on its last entry.
    """
    zoom = _check_zoom(zoom)
    current_range = DEFAULTS.ZOOM_UNIVERSE_RANGE_M / 2.0 ** zoom
    for index, (name, range_m) in enumerate(SCALES):
        if range_m <= current_range:
            return index, name, range_m
    name, range_m = SCALES[-1]
    return len(SCALES) - 1, name, range_m


def zoom_level(zoom: float) -> int:
    return math.floor(_check_zoom(zoom))


def cell_size(zoom: float) -> float:
    return DEFAULTS.ZOOM_BASE_CELL_SIZE / 2.0 ** zoom_level(zoom)


def feature_type(type_roll: float) -> str:
    for name, threshold in zip(FEATURE_TYPES, _TYPE_THRESHOLDS):
        if type_roll < threshold:
            return name
    return FEATURE_TYPES[-1]


def cell_key(cell_x: int, cell_y: int, level: int) -> tuple:
    period = DEFAULTS.ZOOM_CELL_KEY_PERIOD
    return cell_x % period, cell_y % period, level


def feature_at(cell_x: int, cell_y: int, level: int, seed: int,
               threshold: float = DEFAULTS.ZOOM_EXISTENCE_THRESHOLD):
    """
    The feature in one grid cell at one zoom level, or None for an empty cell.
    World coordinates are the jittered position inside the cell.
    """
    rolls = extract(cell_key(cell_x, cell_y, level), FEATURE_LAYERS, seed)
    if rolls['existence'] >= threshold:
        return None

    size = DEFAULTS.ZOOM_BASE_CELL_SIZE / 2.0 ** level
    return {
        'cell': (cell_x, cell_y),
        'level': level,
        'world_x': (cell_x + rolls['jitter_x']) * size,
        'world_y': (cell_y + rolls['jitter_y']) * size,
        'size': rolls['size'],
        'type': feature_type(rolls['type_roll']),
        'brightness': rolls['brightness'],
        'persistence_score': rolls['persistence_score'],
    }


def features_in_view(center, zoom: float, seed: int, width: int, height: int,
                     threshold: float = DEFAULTS.ZOOM_EXISTENCE_THRESHOLD) -> list:
    """
    Every feature visible in a width x height pixel viewport centred on
    `center` (world units) at `zoom`, with its screen position added.
    """
    zoom = _check_zoom(zoom)
    if zoom > DEFAULTS.ZOOM_MAX_FEATURE_ZOOM:
        raise InvalidParameter(f"Feature zoom must be <= {DEFAULTS.ZOOM_MAX_FEATURE_ZOOM}, got {zoom}")
    if width <= 0 or height <= 0:
        raise InvalidParameter(f"Viewport must have a positive size, got {width}x{height}")
    cx, cy = float(center[0]), float(center[1])
    if not (math.isfinite(cx) and math.isfinite(cy)):
        raise InvalidParameter(f"View centre must be finite, got {center!r}")

    view_scale = 2.0 ** zoom
    level = zoom_level(zoom)
    size = cell_size(zoom)
    half_w = width / 2.0 / view_scale
    half_h = height / 2.0 / view_scale

    start_x = math.floor((cx - half_w) / size)
    end_x = math.ceil((cx + half_w) / size)
    start_y = math.floor((cy - half_h) / size)
    end_y = math.ceil((cy + half_h) / size)

    features = []
    for cell_x in range(start_x, end_x + 1):
        for cell_y in range(start_y, end_y + 1):
            feature = feature_at(cell_x, cell_y, level, seed, threshold)
            if feature is None:
                continue

            screen_x = (feature['world_x'] - cx) * view_scale + width / 2.0
            screen_y = (feature['world_y'] - cy) * view_scale + height / 2.0
            if not (-VIEW_MARGIN_PX <= screen_x <= width + VIEW_MARGIN_PX
                    and -VIEW_MARGIN_PX <= screen_y <= height + VIEW_MARGIN_PX):
                continue

            feature['screen_x'] = screen_x
            feature['screen_y'] = screen_y
            feature['display_size'] = max(2.0, feature['size'] * min(1.0, view_scale / 100.0))
            # Higher scores stay visible across more zoom levels.
            feature['is_persistent'] = feature['persistence_score'] > 100.0 - zoom
            features.append(feature)
    return features
