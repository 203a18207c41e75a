# position_seed/terrain.py

"""
================================================================================
LAYERED TERRAIN BUILDER
================================================================================
Composes a 2-D heightfield from named fBm layers, each with its own seed
offset, scale, octave stack, weight, opacity and blend mode.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): Overrides for the defaults in config.py. Expected keys
      include 'seed', 'noise_kind', 'layer_order' and 'layers', where
      'layers' maps a layer name to a dict of the fields to override.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - NumPy arrays of heights in [-1, 1] with the shape of the input grids.
- Composition: starts from 0 and applies the enabled layers in order,
      composite = blend(composite, layer_value * weight, opacity),
  then clips to [-1, 1].
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same seed and configuration, the output is deterministic.
================================================================================
"""

import copy
import logging

import numpy as np

from . import config as DEFAULTS
from .errors import InvalidParameter
from .fractal import OctaveSpec, fbm_grid
from .noise import kind_code
from .warp import check_strength, warp_grid


# --- Blend Modes ---
# Each takes the running composite, the weighted layer value and the layer
# opacity, all on the [-1, 1] height scale.

def _blend_add(base, layer, opacity):
    return base + layer * opacity


def _blend_subtract(base, layer, opacity):
    return base - layer * opacity


def _blend_multiply(base, layer, opacity):
    return base + (base * layer) * opacity


def _blend_overlay(base, layer, opacity):
    layer01 = (layer + 1.0) / 2.0
    overlay = np.where(base < 0.0,
                       2.0 * base * layer01,
                       1.0 - 2.0 * (1.0 - base) * (1.0 - layer01))
    return base + (overlay - base) * opacity


def _blend_screen(base, layer, opacity):
    b = (base + 1.0) / 2.0
    l = (layer + 1.0) / 2.0
    result = 1.0 - (1.0 - b) * (1.0 - l)
    return base + ((result * 2.0 - 1.0) - base) * opacity


BLEND_MODES = {
    'normal': _blend_add,
    'add': _blend_add,
    'subtract': _blend_subtract,
    'multiply': _blend_multiply,
    'overlay': _blend_overlay,
    'screen': _blend_screen,
}


def blend(mode: str, base, layer, opacity: float):
    """Applies one blend mode; works on scalars and NumPy arrays alike."""
    try:
        fn = BLEND_MODES[mode]
    except KeyError:
        raise InvalidParameter(f"Unknown blend mode '{mode}', expected one of {sorted(BLEND_MODES)}") from None
    return fn(base, layer, opacity)


class TerrainBuilder:
    """
    Builds layered heightfields on coordinate grids.
    This class is backend-only and does not handle any visualization.
    """
    def __init__(self, config: dict, logger: logging.Logger):
        """
        Initializes the terrain builder.

        Args:
            config (dict): User-defined parameters to override defaults.
            logger (logging.Logger): The logger instance for all output.
        """
        self.logger = logger
        self.user_config = config
        self.logger.info("TerrainBuilder initializing...")

        # --- Consolidate Configuration ---
        self.settings = {
            'seed': self.user_config.get('seed', DEFAULTS.DEFAULT_SEED),
            'noise_kind': self.user_config.get('noise_kind', DEFAULTS.TERRAIN_NOISE_KIND),
            'layer_order': tuple(self.user_config.get('layer_order', DEFAULTS.TERRAIN_LAYER_ORDER)),
            'layers': copy.deepcopy(DEFAULTS.TERRAIN_LAYERS),
        }
        for name, overrides in self.user_config.get('layers', {}).items():
            self.settings['layers'].setdefault(name, {}).update(overrides)

        # --- Validate up front so per-call paths never raise ---
        kind_code(self.settings['noise_kind'])
        self.octave_specs = {}
        for name in self.settings['layer_order']:
            if name not in self.settings['layers']:
                raise InvalidParameter(f"Layer order names unknown layer '{name}'")
            layer = self.settings['layers'][name]
            if layer['blend'] not in BLEND_MODES:
                raise InvalidParameter(f"Layer '{name}' has unknown blend mode '{layer['blend']}'")
            if layer['scale'] <= 0:
                raise InvalidParameter(f"Layer '{name}' scale must be positive, got {layer['scale']}")
            if 'warp_strength' in layer:
                check_strength(layer['warp_strength'])
            self.octave_specs[name] = OctaveSpec(layer['octaves'], layer['persistence'], layer['lacunarity'])

        # --- Public Properties for easy access ---
        self.seed = self.settings['seed']

        enabled = [n for n in self.settings['layer_order'] if self.settings['layers'][n]['enabled']]
        self.logger.info(f"TerrainBuilder initialized with seed: {self.seed}")
        self.logger.info(f"Enabled layers ({self.settings['noise_kind']} noise): {', '.join(enabled) or 'none'}")

    def get_coordinate_grid(self, world_x, world_y, width, height, resolution_w, resolution_h):
        """
        Generates a coordinate grid for an arbitrary rectangle.
        This is the single authoritative method for coordinate generation.
        """
        pixel_w = width / resolution_w
        pixel_h = height / resolution_h

        end_x = world_x + ((resolution_w - 1) * pixel_w)
        end_y = world_y + ((resolution_h - 1) * pixel_h)

        x_coords = np.linspace(world_x, end_x, resolution_w)
        y_coords = np.linspace(world_y, end_y, resolution_h)

        return np.meshgrid(x_coords, y_coords)

    def get_layer(self, name: str, x_coords: np.ndarray, y_coords: np.ndarray) -> np.ndarray:
        """Raw (unweighted) values of one layer, in [-1, 1]."""
        if name not in self.octave_specs:
            raise InvalidParameter(f"Unknown terrain layer '{name}'")
        layer = self.settings['layers'][name]
        scale = layer['scale']
        seed = self.seed + layer['seed_offset']
        x = np.asarray(x_coords, dtype=np.float64) / scale
        y = np.asarray(y_coords, dtype=np.float64) / scale

        if 'warp_strength' in layer:
            return warp_grid(x, y, layer['warp_strength'], self.octave_specs[name], seed,
                             self.settings['noise_kind'])
        return fbm_grid(x, y, self.octave_specs[name], seed, self.settings['noise_kind'])

    def compose(self, x_coords: np.ndarray, y_coords: np.ndarray, steps: int = None) -> np.ndarray:
        """
        Blends the enabled layers into one heightfield.

        Args:
            steps (int, optional): Apply only the first `steps` layers of the
                layer order, to show the terrain being built up.
        """
        order = self.settings['layer_order']
        if steps is not None:
            order = order[:steps]

        composite = np.zeros(np.shape(x_coords))
        for name in order:
            layer = self.settings['layers'][name]
            if not layer['enabled']:
                continue
            values = self.get_layer(name, x_coords, y_coords)
            composite = blend(layer['blend'], composite, values * layer['weight'], layer['opacity'])
            self.logger.debug(
                f"Applied layer '{name}' ({layer['blend']} @ {layer['opacity']:.2f}): "
                f"range [{composite.min():.3f}, {composite.max():.3f}]"
            )

        return np.clip(composite, -1.0, 1.0)

    def get_height(self, x: float, y: float) -> float:
        """Composite height at a single point."""
        return float(self.compose(np.array([[x]], dtype=np.float64), np.array([[y]], dtype=np.float64))[0, 0])
