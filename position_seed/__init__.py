# position_seed/__init__.py

# This file makes the 'position_seed' directory a Python package.
# It also defines the public API: the pure pipeline functions and the
# configurable builders that sit on top of them.

from .errors import ConstraintConflict, GenerationError, InvalidCoordinate, InvalidParameter
from .hashing import hash_coords, hash_grid, hash_points, hash_to_hex, validate_coordinate
from .streams import pick, to_bool, to_bounded_int, to_range, to_signed_float, to_unit_float
from .layers import PropertyLayer, describe_cell, extract, property_hash
from .noise import NOISE_KINDS, CoherentNoise, noise, noise_grid
from .fractal import OctaveSpec, fbm, fbm_grid, fbm_octaves, fbm_points
from .warp import warp, warp_grid, warp_offset, warp_points
from .sphere import lat_lon_grid_to_sphere, normalize_longitude, to_unit_sphere
from .hierarchy import Entity, derive_child, derive_path, root_entity
from .terrain import TerrainBuilder
from .planet import PlanetSurface

__all__ = [
    "GenerationError", "InvalidParameter", "InvalidCoordinate", "ConstraintConflict",
    "hash_coords", "hash_grid", "hash_points", "hash_to_hex", "validate_coordinate",
    "to_unit_float", "to_signed_float", "to_range", "to_bounded_int", "to_bool", "pick",
    "PropertyLayer", "property_hash", "extract", "describe_cell",
    "NOISE_KINDS", "CoherentNoise", "noise", "noise_grid",
    "OctaveSpec", "fbm", "fbm_octaves", "fbm_grid", "fbm_points",
    "warp", "warp_offset", "warp_grid", "warp_points",
    "to_unit_sphere", "normalize_longitude", "lat_lon_grid_to_sphere",
    "Entity", "root_entity", "derive_child", "derive_path",
    "TerrainBuilder", "PlanetSurface",
]
