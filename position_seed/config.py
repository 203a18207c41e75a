# position_seed/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the
coordinate-to-value pipeline. These values are used if they are not
explicitly provided by the caller's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC RUN.
Instead, pass a configuration dictionary to TerrainBuilder / PlanetSurface,
or a JSON file to benchmark.py.
================================================================================
"""

# --- Universe Seed ---
DEFAULT_SEED = 1337

# --- Property Layer Salts ---
# Widely spaced odd constants, one per semantic property. Never use small
# sequential integers (0, 1, 2, ...) as salts.
SALT_EXISTENCE = 0x1A2B3C4D
SALT_TYPE = 0x5E6F7A8B
SALT_TEMPERATURE = 0x2C4E6F81
SALT_DENSITY = 0x73A5C9E7
SALT_RESOURCES = 0x9C0D1E2F
SALT_DANGER = 0x3A4B5C6D
SALT_SPECIAL = 0x6B8DAF13

# Salt of the seed a parent entity hands down to each of its children.
SALT_CHILD_SEED = 0x4F1BBCDD

# --- Galaxy Drill-Down Salts ---
SALT_REGION_METALLICITY = 0x7F4A7C15
SALT_REGION_AGE = 0x2545F491
SALT_CLUSTER_DENSITY = 0x4CF5AD43
SALT_CLUSTER_METALLICITY = 0x1B873593
SALT_CLUSTER_AGE = 0x68E31DA5
SALT_CLUSTER_X = 0x61C88647
SALT_CLUSTER_Y = 0x0F1E2D3B
SALT_STAR_CLASS = 0x5BD1E995
SALT_STAR_MASS = 0x3C6EF373
SALT_STAR_LUMINOSITY = 0x14057B7F
SALT_STAR_TEMPERATURE = 0x6A09E667
SALT_STAR_PLANETS = 0x510E527F
SALT_STAR_X = 0x9B05688D
SALT_STAR_Y = 0x7137449B
SALT_PLANET_ORBIT = 0x1F83D9AB
SALT_PLANET_TYPE = 0x5BE0CD19
SALT_PLANET_HABITABLE = 0x2B3C4D5F
SALT_PLANET_MASS = 0x428A2F99
SALT_PLANET_RADIUS = 0x71374491

# --- Stellar Forge Salts ---
SALT_FORGE_MASS = 0x3956C25B
SALT_FORGE_AGE = 0x59F111F1
SALT_FORGE_METALLICITY = 0x243185BF

# Salt used when sampling the "existence" of zoom-navigator features.
SALT_ZOOM_EXISTENCE = 0x9E3779B9
SALT_ZOOM_JITTER_X = 0x85EBCA6B
SALT_ZOOM_JITTER_Y = 0xC2B2AE35
SALT_ZOOM_SIZE = 0x27D4EB2F
SALT_ZOOM_TYPE = 0x165667B1
SALT_ZOOM_BRIGHTNESS = 0xD3A2646D
SALT_ZOOM_PERSISTENCE = 0xFD7046C5

# --- Fractal Sum (fBm) ---
DEFAULT_OCTAVES = 6
DEFAULT_PERSISTENCE = 0.5
DEFAULT_LACUNARITY = 2.0
# Seed stride between consecutive octaves: octave i samples noise with
# seed + i * OCTAVE_SEED_STRIDE.
OCTAVE_SEED_STRIDE = 1000

# --- Domain Warp ---
# Seed offsets of the displacement fields. Their residues mod
# OCTAVE_SEED_STRIDE (11, 9, 21, 33, 47, 59) differ from each other and from
# 0, so no octave of one field ever reuses the seed of another field.
WARP_X_SEED_OFFSET = 30011
WARP_Y_SEED_OFFSET = 40009
WARP_Z_SEED_OFFSET = 50021
WARP2_X_SEED_OFFSET = 60033
WARP2_Y_SEED_OFFSET = 70047
WARP2_Z_SEED_OFFSET = 80059

# Constant coordinate offsets that decorrelate the displacement fields.
WARP_X_COORD_OFFSET = (0.0, 0.0, 0.0)
WARP_Y_COORD_OFFSET = (5.2, 1.3, 2.8)
WARP_Z_COORD_OFFSET = (9.1, 2.7, 4.6)
WARP2_X_COORD_OFFSET = (1.7, 9.2, 3.4)
WARP2_Y_COORD_OFFSET = (8.3, 2.8, 6.1)
WARP2_Z_COORD_OFFSET = (4.4, 7.9, 1.2)
# How far the first-stage field pushes the second-stage lookup.
WARP2_FEEDBACK_GAIN = 4.0

# The displacement fields use a fixed, cheaper octave stack.
WARP_FIELD_OCTAVES = 4
WARP_FIELD_PERSISTENCE = 0.5
WARP_FIELD_LACUNARITY = 2.0

# --- Layered Terrain Builder ---
# Per-layer defaults. Seed offsets keep the layers independent.
TERRAIN_LAYERS = {
    "foundation": {
        "seed_offset": 0, "scale": 200.0, "octaves": 4, "persistence": 0.6,
        "lacunarity": 2.0, "weight": 0.5, "opacity": 1.0, "blend": "normal", "enabled": True,
    },
    "structure": {
        "seed_offset": 10000, "scale": 80.0, "octaves": 5, "persistence": 0.5,
        "lacunarity": 2.0, "weight": 0.3, "opacity": 0.8, "blend": "add", "enabled": True,
    },
    "detail": {
        "seed_offset": 20000, "scale": 20.0, "octaves": 6, "persistence": 0.45,
        "lacunarity": 2.5, "weight": 0.15, "opacity": 0.5, "blend": "add", "enabled": True,
    },
    "warp": {
        "seed_offset": 50000, "scale": 60.0, "octaves": 4, "persistence": 0.5,
        "lacunarity": 2.0, "weight": 0.1, "opacity": 0.4, "blend": "overlay", "enabled": True,
        "warp_strength": 2.0,
    },
}
# Order in which enabled layers are applied.
TERRAIN_LAYER_ORDER = ("foundation", "structure", "detail", "warp")
TERRAIN_NOISE_KIND = "simplex"

# --- Planetary Surface ---
# Feature scales multiply the unit-sphere position before sampling.
PLANET_CONTINENTAL_SCALE = 2.0
PLANET_MOUNTAIN_SCALE = 8.0
PLANET_DETAIL_SCALE = 32.0
PLANET_WARP_SCALE = 4.0
PLANET_WARP_STRENGTH = 0.5

PLANET_CONTINENTAL_OCTAVES = (4, 0.5, 2.0)
PLANET_MOUNTAIN_OCTAVES = (6, 0.5, 2.0)
PLANET_DETAIL_OCTAVES = (4, 0.4, 2.5)
PLANET_WARP_OCTAVES = (5, 0.5, 2.0)

PLANET_CONTINENTAL_WEIGHT = 0.5
PLANET_MOUNTAIN_WEIGHT = 0.3
PLANET_DETAIL_WEIGHT = 0.1
PLANET_WARP_WEIGHT = 0.1

PLANET_MOUNTAIN_SEED_OFFSET = 1000
PLANET_DETAIL_SEED_OFFSET = 2000
PLANET_WARP_SEED_OFFSET = 5000

# Sea level on the raw height scale. Heights below are water.
PLANET_WATER_LEVEL = 0.0

PLANET_LAT_RESOLUTION = 90
PLANET_LON_RESOLUTION = 180

# --- Galaxy Drill-Down ---
# Number of children enumerated at each level when browsing.
GALAXY_CLUSTERS_PER_REGION = 6
GALAXY_MAX_PLANETS = 12
GALAXY_TERRAIN_GRID = 8
# Seed offsets of the galaxy-scale and terrain-scale fBm fields.
GALAXY_NEBULA_SEED_OFFSET = 100
GALAXY_MOISTURE_SEED_OFFSET = 1
GALAXY_TEMPERATURE_SEED_OFFSET = 2

# --- Seamless Zoom ---
ZOOM_BASE_CELL_SIZE = 50.0
ZOOM_EXISTENCE_THRESHOLD = 0.3
ZOOM_UNIVERSE_RANGE_M = 1e26
# Cell indices are hashed modulo this period. Deep zoom levels away from the
# origin reach indices past the largest hashable coordinate, so the feature
# grid repeats every 2**52 cells.
ZOOM_CELL_KEY_PERIOD = 2 ** 52
# Deepest zoom at which viewport cells are still finite float64 values.
ZOOM_MAX_FEATURE_ZOOM = 900.0

# --- Benchmark ---
BENCHMARK_GRID_WIDTH = 512
BENCHMARK_GRID_HEIGHT = 512
BENCHMARK_CHUNK_ROWS = 64
BENCHMARK_REPEATS = 3
