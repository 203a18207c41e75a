# position_seed/galaxy.py

"""
================================================================================
GALAXY DRILL-DOWN
================================================================================
A five-level hierarchy built entirely from derive_child:

    region (x, y) -> cluster i -> star j -> planet k -> terrain cell (u, v)

Each level reads its parent's constraints (density, metallicity, age, stellar
luminosity, planet type, ...) to bias its own rolls, and only ever adds new
keys, so the full ancestry of a terrain cell is visible in its constraints.

Data Contract:
---------------
- Inputs: a universe seed, a region grid coordinate and an index path.
- Outputs: Entity objects (see hierarchy.py).
- Invariants: the same seed and path give an identical entity on every call.
- Side Effects: None.
================================================================================
"""

import math

from . import config as DEFAULTS
from . import streams
from .errors import InvalidParameter
from .fractal import OctaveSpec, fbm
from .hierarchy import Entity, derive_child, derive_path, root_entity
from .layers import property_hash
from .stellar import STAR_CLASS_BY_NAME, frost_line, habitable_zone, pick_star_class

# --- fBm stacks of each scale ---
REGION_DENSITY_OCTAVES = OctaveSpec(3, 0.6, 2.0)
REGION_NEBULA_OCTAVES = OctaveSpec(2, 0.5, 2.0)
TERRAIN_ELEVATION_OCTAVES = OctaveSpec(6, 0.5, 2.0)
TERRAIN_MOISTURE_OCTAVES = OctaveSpec(4, 0.6, 2.0)
TERRAIN_TEMPERATURE_OCTAVES = OctaveSpec(3, 0.4, 2.0)

PLANET_TYPES = ('molten', 'desert', 'rocky', 'earthlike', 'ocean', 'ice', 'gas_giant', 'ice_giant')
BIOMES = ('volcanic', 'barren', 'dunes', 'mountains', 'plains', 'forest', 'ocean', 'tundra', 'glacier')

# Reference metallicity (roughly solar) for the earthlike-planet odds.
SOLAR_METALLICITY = 0.02


# --- Region ---

def dominant_star_bias(age_gyr: float) -> float:
    """Young regions favor hot stars, old ones favor cool stars."""
    if age_gyr < 5.0:
        return 0.3
    if age_gyr < 10.0:
        return 0.0
    return -0.3


def generate_region(region_coord, universe_seed: int) -> Entity:
    """The root entity of one galaxy region on the integer region grid."""
    rx, ry = region_coord
    density_noise = (fbm((rx * 0.3, ry * 0.3), REGION_DENSITY_OCTAVES, universe_seed) + 1.0) / 2.0
    # Two-armed spiral around the galactic centre at region (0, 0).
    spiral_arm = math.sin(math.atan2(ry, rx) * 2.0 + math.hypot(rx, ry) * 0.5)
    density = density_noise * 0.5 + (spiral_arm + 1.0) * 0.25

    metallicity = streams.to_range(
        property_hash((rx, ry), DEFAULTS.SALT_REGION_METALLICITY, universe_seed), 0.001, 0.04)
    age = streams.to_range(property_hash((rx, ry), DEFAULTS.SALT_REGION_AGE, universe_seed), 1.0, 13.0)
    nebula = max(0.0, fbm((rx * 0.5, ry * 0.5), REGION_NEBULA_OCTAVES,
                          universe_seed + DEFAULTS.GALAXY_NEBULA_SEED_OFFSET))

    return root_entity(
        'region',
        property_hash((rx, ry), DEFAULTS.SALT_CHILD_SEED, universe_seed),
        {
            'region': (rx, ry),
            'density': max(0.1, min(1.0, density)),
            'metallicity': metallicity,
            'age': age,
            'nebula_density': nebula,
            'dominant_star_bias': dominant_star_bias(age),
        },
    )


# --- Cluster ---

def _cluster_properties(region: Entity, rolls) -> dict:
    cluster_density = region['density'] * rolls.range(DEFAULTS.SALT_CLUSTER_DENSITY, 0.5, 1.5)
    return {
        'cluster_x': rolls.range(DEFAULTS.SALT_CLUSTER_X, -0.4, 0.4),
        'cluster_y': rolls.range(DEFAULTS.SALT_CLUSTER_Y, -0.4, 0.4),
        'cluster_density': cluster_density,
        'cluster_metallicity': region['metallicity'] * rolls.range(DEFAULTS.SALT_CLUSTER_METALLICITY, 0.8, 1.2),
        'cluster_age': region['age'] + rolls.range(DEFAULTS.SALT_CLUSTER_AGE, -2.0, 2.0),
        'star_count': math.floor(3 + cluster_density * 12),
    }


def generate_cluster(region: Entity, cluster_index: int) -> Entity:
    return derive_child(region, cluster_index, _cluster_properties, kind='cluster')


# --- Star ---

def biased_star_class(class_roll: float, bias: float):
    """
    Picks a class from a unit roll shifted by a region's dominant-star bias.
    The class table runs hot to cool, so a positive bias moves the roll
    toward the hot end.
    """
    return pick_star_class(max(0.0, min(1.0, class_roll - bias * 0.3)))


def _star_properties(cluster: Entity, rolls) -> dict:
    star_class = biased_star_class(rolls.unit(DEFAULTS.SALT_STAR_CLASS), cluster['dominant_star_bias'])

    mass = rolls.range(DEFAULTS.SALT_STAR_MASS, *star_class.mass)
    luminosity = rolls.range(DEFAULTS.SALT_STAR_LUMINOSITY, *star_class.luminosity)
    temperature = rolls.range(DEFAULTS.SALT_STAR_TEMPERATURE, star_class.min_temp, star_class.max_temp)
    hz_inner, hz_outer = habitable_zone(luminosity)

    # Metal-rich clusters form more planets.
    planet_roll = rolls.range(DEFAULTS.SALT_STAR_PLANETS, 0.0, 1.0 + cluster['cluster_metallicity'] * 300.0)

    return {
        'star_x': rolls.range(DEFAULTS.SALT_STAR_X, -0.35, 0.35),
        'star_y': rolls.range(DEFAULTS.SALT_STAR_Y, -0.35, 0.35),
        'star_class': star_class.name,
        'stellar_mass': mass,
        'stellar_luminosity': luminosity,
        'stellar_temperature': temperature,
        'hz_inner': hz_inner,
        'hz_outer': hz_outer,
        'frost_line': frost_line(luminosity),
        'planet_count': min(math.floor(planet_roll), DEFAULTS.GALAXY_MAX_PLANETS),
    }


def generate_star(cluster: Entity, star_index: int) -> Entity:
    return derive_child(cluster, star_index, _star_properties, kind='star')


# --- Planet ---

def _planet_type(orbital_radius: float, temperature: float, star: Entity, rolls) -> str:
    if orbital_radius > star['frost_line']:
        type_roll = rolls.unit(DEFAULTS.SALT_PLANET_TYPE)
        if type_roll < 0.4:
            return 'gas_giant'
        if type_roll < 0.6:
            return 'ice_giant'
        return 'ice'
    if star['hz_inner'] < orbital_radius < star['hz_outer']:
        habitable_roll = rolls.unit(DEFAULTS.SALT_PLANET_HABITABLE)
        if habitable_roll < 0.1 * (star['cluster_metallicity'] / SOLAR_METALLICITY):
            return 'earthlike'
        if habitable_roll < 0.3:
            return 'ocean'
        if habitable_roll < 0.6:
            return 'desert'
        return 'rocky'
    if temperature > 600.0:
        return 'molten'
    if temperature > 350.0:
        return 'desert'
    return 'rocky'


def _planet_properties(star: Entity, rolls) -> dict:
    index = rolls.child_index
    # Titius-Bode spacing, scaled by stellar mass and jittered.
    base_au = 0.4 + 0.3 * 2.0 ** index
    orbital_radius = base_au * math.sqrt(star['stellar_mass'])
    orbital_radius *= rolls.range(DEFAULTS.SALT_PLANET_ORBIT, 0.7, 1.3)

    # Equilibrium temperature (K).
    temperature = 278.0 * star['stellar_luminosity'] ** 0.25 / math.sqrt(orbital_radius)
    planet_type = _planet_type(orbital_radius, temperature, star, rolls)

    if planet_type == 'gas_giant':
        mass = rolls.range(DEFAULTS.SALT_PLANET_MASS, 50.0, 300.0)
        radius = rolls.range(DEFAULTS.SALT_PLANET_RADIUS, 9.0, 12.0)
    elif planet_type == 'ice_giant':
        mass = rolls.range(DEFAULTS.SALT_PLANET_MASS, 10.0, 30.0)
        radius = rolls.range(DEFAULTS.SALT_PLANET_RADIUS, 3.5, 5.0)
    else:
        mass = rolls.range(DEFAULTS.SALT_PLANET_MASS, 0.1, 5.0)
        radius = mass ** 0.27

    # Escape velocity must comfortably exceed the thermal speed of the gas.
    has_atmosphere = 11.2 * math.sqrt(mass) / radius > 6.0 * 0.157 * math.sqrt(temperature)

    return {
        'orbital_radius': orbital_radius,
        'planet_type': planet_type,
        'planet_temperature': temperature,
        'planet_mass': mass,
        'planet_radius': radius,
        'has_atmosphere': has_atmosphere,
        'has_liquid_water': planet_type in ('earthlike', 'ocean') and has_atmosphere,
        'in_habitable_zone': star['hz_inner'] < orbital_radius < star['hz_outer'],
    }


def generate_planet(star: Entity, planet_index: int) -> Entity:
    return derive_child(star, planet_index, _planet_properties, kind='planet')


# --- Terrain Cell ---

def biome_for(planet_type: str, elevation: float, moisture: float, temperature: float) -> str:
    if planet_type == 'molten':
        return 'volcanic'
    if planet_type == 'ice':
        return 'glacier' if elevation > 0.4 else 'tundra'
    if planet_type == 'desert':
        return 'mountains' if elevation > 0.5 else 'dunes'
    if planet_type == 'ocean':
        if elevation > 0.6:
            return 'mountains'
        return 'plains' if elevation > 0.2 else 'ocean'
    if planet_type == 'earthlike':
        if elevation < 0.1:
            return 'ocean'
        if temperature < 270.0:
            return 'glacier' if elevation > 0.5 else 'tundra'
        if moisture > 0.3:
            return 'mountains' if elevation > 0.6 else 'forest'
        return 'mountains' if elevation > 0.6 else 'plains'
    if planet_type in ('gas_giant', 'ice_giant'):
        # No solid surface.
        return 'barren'
    return 'mountains' if elevation > 0.5 else 'barren'


def generate_terrain_cell(planet: Entity, cell_x: int, cell_y: int,
                          grid: int = DEFAULTS.GALAXY_TERRAIN_GRID) -> Entity:
    """One cell of the planet's grid x grid surface map."""
    if not (0 <= cell_x < grid and 0 <= cell_y < grid):
        raise InvalidParameter(f"Terrain cell ({cell_x}, {cell_y}) is outside a {grid}x{grid} grid")

    def _terrain_properties(parent, rolls):
        u = cell_x / grid
        v = cell_y / grid
        elevation = fbm((u * 4.0, v * 4.0), TERRAIN_ELEVATION_OCTAVES, parent.seed)
        moisture = fbm((u * 2.0 + 100.0, v * 2.0 + 100.0), TERRAIN_MOISTURE_OCTAVES,
                       parent.seed + DEFAULTS.GALAXY_MOISTURE_SEED_OFFSET)
        temperature = parent['planet_temperature'] + 50.0 * fbm(
            (u * 3.0, v * 3.0), TERRAIN_TEMPERATURE_OCTAVES,
            parent.seed + DEFAULTS.GALAXY_TEMPERATURE_SEED_OFFSET)
        return {
            'cell': (cell_x, cell_y),
            'local_elevation': elevation,
            'local_moisture': moisture,
            'local_temperature': temperature,
            'biome': biome_for(parent['planet_type'], elevation, moisture, temperature),
        }

    return derive_child(planet, cell_y * grid + cell_x, _terrain_properties, kind='terrain')


# --- Browsing helpers ---

def region_clusters(region: Entity, count: int = DEFAULTS.GALAXY_CLUSTERS_PER_REGION) -> list:
    return [generate_cluster(region, i) for i in range(count)]


def cluster_stars(cluster: Entity) -> list:
    return [generate_star(cluster, i) for i in range(cluster['star_count'])]


def star_planets(star: Entity) -> list:
    return [generate_planet(star, i) for i in range(star['planet_count'])]


# The (kind, properties) of each level below a region.
DRILL_DOWN_LEVELS = (
    ('cluster', _cluster_properties),
    ('star', _star_properties),
    ('planet', _planet_properties),
)


def drill_down(universe_seed: int, region_coord, cluster_index: int, star_index: int,
               planet_index: int, cell=None) -> Entity:
    """
    Follows one index path from the galaxy down to a planet, or to one of its
    terrain cells when `cell` is an (x, y) pair.
    """
    region = generate_region(region_coord, universe_seed)
    entity = derive_path(region, (cluster_index, star_index, planet_index), DRILL_DOWN_LEVELS)
    if cell is not None:
        entity = generate_terrain_cell(entity, cell[0], cell[1])
    return entity


def star_class_info(star: Entity):
    """Spectral class table row for a star entity."""
    return STAR_CLASS_BY_NAME[star['star_class']]
