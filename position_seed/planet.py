# position_seed/planet.py

"""
================================================================================
PLANETARY SURFACE
================================================================================
A seamless spherical heightfield. Every (lat, lon) is projected onto the unit
sphere and sampled with 3-D fBm, so there is no seam at the antimeridian and
no stretching towards the poles beyond the pinch of the lat/lon grid itself.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): Overrides for the PLANET_* defaults in config.py.
    - logger: A configured Python logging object for runtime messages.
- Components (each in [-1, 1]):
    - continental: broad land masses.
    - mountains: ridges, only expressed where continental > 0.
    - detail: small-scale roughness.
    - warped: a 3-D domain-warped field for organic coastlines.
- Height:
    height = continental * wc + mountains * max(0, continental) * wm
           + detail * wd + warped * ww
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same seed and configuration, the output is deterministic.
================================================================================
"""

import logging

import numpy as np

from . import config as DEFAULTS
from .fractal import OctaveSpec, fbm_points
from .sphere import lat_lon_grid, lat_lon_grid_to_sphere
from .warp import check_strength, warp_points

COMPONENTS = ('continental', 'mountains', 'detail', 'warped')


class PlanetSurface:
    """
    Generates heights for a whole planet from its seed.
    This class is backend-only and does not handle any visualization.
    """
    def __init__(self, config: dict, logger: logging.Logger):
        self.logger = logger
        self.user_config = config
        self.logger.info("PlanetSurface initializing...")

        # --- Consolidate Configuration ---
        self.settings = {
            'seed': self.user_config.get('seed', DEFAULTS.DEFAULT_SEED),
            'continental_scale': self.user_config.get('continental_scale', DEFAULTS.PLANET_CONTINENTAL_SCALE),
            'mountain_scale': self.user_config.get('mountain_scale', DEFAULTS.PLANET_MOUNTAIN_SCALE),
            'detail_scale': self.user_config.get('detail_scale', DEFAULTS.PLANET_DETAIL_SCALE),
            'warp_scale': self.user_config.get('warp_scale', DEFAULTS.PLANET_WARP_SCALE),
            'warp_strength': self.user_config.get('warp_strength', DEFAULTS.PLANET_WARP_STRENGTH),

            'continental_octaves': self.user_config.get('continental_octaves', DEFAULTS.PLANET_CONTINENTAL_OCTAVES),
            'mountain_octaves': self.user_config.get('mountain_octaves', DEFAULTS.PLANET_MOUNTAIN_OCTAVES),
            'detail_octaves': self.user_config.get('detail_octaves', DEFAULTS.PLANET_DETAIL_OCTAVES),
            'warp_octaves': self.user_config.get('warp_octaves', DEFAULTS.PLANET_WARP_OCTAVES),

            'continental_weight': self.user_config.get('continental_weight', DEFAULTS.PLANET_CONTINENTAL_WEIGHT),
            'mountain_weight': self.user_config.get('mountain_weight', DEFAULTS.PLANET_MOUNTAIN_WEIGHT),
            'detail_weight': self.user_config.get('detail_weight', DEFAULTS.PLANET_DETAIL_WEIGHT),
            'warp_weight': self.user_config.get('warp_weight', DEFAULTS.PLANET_WARP_WEIGHT),

            'mountain_seed_offset': self.user_config.get('mountain_seed_offset', DEFAULTS.PLANET_MOUNTAIN_SEED_OFFSET),
            'detail_seed_offset': self.user_config.get('detail_seed_offset', DEFAULTS.PLANET_DETAIL_SEED_OFFSET),
            'warp_seed_offset': self.user_config.get('warp_seed_offset', DEFAULTS.PLANET_WARP_SEED_OFFSET),

            'water_level': self.user_config.get('water_level', DEFAULTS.PLANET_WATER_LEVEL),
            'lat_resolution': self.user_config.get('lat_resolution', DEFAULTS.PLANET_LAT_RESOLUTION),
            'lon_resolution': self.user_config.get('lon_resolution', DEFAULTS.PLANET_LON_RESOLUTION),
        }

        # --- Octave stacks (validated here, once) ---
        self.continental_spec = OctaveSpec(*self.settings['continental_octaves'])
        self.mountain_spec = OctaveSpec(*self.settings['mountain_octaves'])
        self.detail_spec = OctaveSpec(*self.settings['detail_octaves'])
        self.warp_spec = OctaveSpec(*self.settings['warp_octaves'])
        check_strength(self.settings['warp_strength'])

        # --- Public Properties for easy access ---
        self.seed = self.settings['seed']

        self.logger.info(f"PlanetSurface initialized with seed: {self.seed}")
        self.logger.debug(
            f"Scales continental/mountain/detail/warp: {self.settings['continental_scale']}/"
            f"{self.settings['mountain_scale']}/{self.settings['detail_scale']}/{self.settings['warp_scale']}"
        )

    def get_components(self, points: np.ndarray) -> dict:
        """Samples the four component fields at (N, 3) unit-sphere points."""
        s = self.settings
        points = np.asarray(points, dtype=np.float64)
        return {
            'continental': fbm_points(points * s['continental_scale'], self.continental_spec, self.seed),
            'mountains': fbm_points(points * s['mountain_scale'], self.mountain_spec,
                                    self.seed + s['mountain_seed_offset']),
            'detail': fbm_points(points * s['detail_scale'], self.detail_spec,
                                 self.seed + s['detail_seed_offset']),
            'warped': warp_points(points * s['warp_scale'], s['warp_strength'], self.warp_spec,
                                  self.seed + s['warp_seed_offset']),
        }

    def combine(self, components: dict) -> np.ndarray:
        """Weighted height from component fields; mountains only rise on land."""
        s = self.settings
        mountain_contribution = components['mountains'] * np.maximum(0.0, components['continental'])
        return (components['continental'] * s['continental_weight']
                + mountain_contribution * s['mountain_weight']
                + components['detail'] * s['detail_weight']
                + components['warped'] * s['warp_weight'])

    def sample(self, lat_deg: float, lon_deg: float) -> dict:
        """Height and component breakdown at one latitude/longitude."""
        point = lat_lon_grid_to_sphere(np.array([lat_deg]), np.array([lon_deg]))
        components = self.get_components(point)
        height = float(self.combine(components)[0])
        return {
            'height': height,
            'is_water': height < self.settings['water_level'],
            'components': {name: float(components[name][0]) for name in COMPONENTS},
        }

    def get_height(self, lat_deg: float, lon_deg: float) -> float:
        return self.sample(lat_deg, lon_deg)['height']

    def get_heightfield(self, lat_resolution: int = None, lon_resolution: int = None) -> tuple:
        """
        Heights over a full latitude/longitude grid.

        Returns:
            (lat_grid, lon_grid, heights), each of shape
            (lat_resolution, lon_resolution). Rows run north to south.
        """
        lat_res = lat_resolution or self.settings['lat_resolution']
        lon_res = lon_resolution or self.settings['lon_resolution']
        lat_grid, lon_grid = lat_lon_grid(lat_res, lon_res)
        points = lat_lon_grid_to_sphere(lat_grid, lon_grid).reshape(-1, 3)

        self.logger.debug(f"Sampling {points.shape[0]} surface points ({lat_res}x{lon_res})")
        heights = self.combine(self.get_components(points)).reshape(lat_grid.shape)
        return lat_grid, lon_grid, heights

    def land_fraction(self, lat_grid: np.ndarray, heights: np.ndarray) -> float:
        """Share of the surface above the water level, weighted by cell area (cos lat)."""
        weights = np.cos(np.radians(lat_grid))
        land = (heights >= self.settings['water_level']).astype(np.float64)
        total = weights.sum()
        if total <= 0.0:
            return float(land.mean())
        return float((land * weights).sum() / total)
