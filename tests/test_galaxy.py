# tests/test_galaxy.py
import pytest

from position_seed import config as DEFAULTS
from position_seed.errors import InvalidParameter
from position_seed.galaxy import (BIOMES, PLANET_TYPES, biased_star_class, biome_for, cluster_stars,
                                  dominant_star_bias, drill_down, generate_cluster, generate_planet,
                                  generate_region, generate_star, generate_terrain_cell, region_clusters,
                                  star_class_info, star_planets)
from position_seed.hashing import hash_coords
from position_seed.streams import to_unit_float


def test_region_is_deterministic(seed):
    assert generate_region((3, -2), seed) == generate_region((3, -2), seed)
    assert generate_region((3, -2), seed) != generate_region((3, -1), seed)


def test_region_fields(seed):
    for rx in range(-3, 4):
        region = generate_region((rx, 2), seed)
        assert region.kind == "region"
        assert 0.1 <= region["density"] <= 1.0
        assert 0.001 <= region["metallicity"] < 0.04
        assert 1.0 <= region["age"] < 13.0
        assert region["nebula_density"] >= 0.0
        assert region["dominant_star_bias"] == dominant_star_bias(region["age"])


def test_dominant_star_bias_by_age():
    assert dominant_star_bias(2.0) > 0.0
    assert dominant_star_bias(7.0) == 0.0
    assert dominant_star_bias(12.0) < 0.0


def test_young_regions_favor_hot_stars(seed):
    rolls = [to_unit_float(hash_coords((i, 0), DEFAULTS.SALT_STAR_CLASS, seed)) for i in range(20000)]

    def hot_share(age):
        bias = dominant_star_bias(age)
        hot = sum(biased_star_class(r, bias).name in "OBAFG" for r in rolls)
        return hot / len(rolls)

    young, neutral, old = hot_share(2.0), hot_share(7.0), hot_share(12.0)
    assert young > neutral > old


def test_every_level_inherits_unchanged(seed):
    region = generate_region((1, 1), seed)
    cluster = generate_cluster(region, 2)
    star = generate_star(cluster, 0)
    planet = generate_planet(star, 1)
    cell = generate_terrain_cell(planet, 3, 4)
    chain = [region, cluster, star, planet, cell]
    for parent, child in zip(chain, chain[1:]):
        for key, value in parent.constraints.items():
            assert child[key] == value
        assert len(child.constraints) > len(parent.constraints)
    assert cell.path == (2, 0, 1, 4 * DEFAULTS.GALAXY_TERRAIN_GRID + 3)


def test_cluster_fields(seed):
    region = generate_region((0, 5), seed)
    for cluster in region_clusters(region):
        assert cluster.kind == "cluster"
        assert -0.4 <= cluster["cluster_x"] < 0.4
        assert cluster["star_count"] >= 3
        assert 0.5 * region["density"] <= cluster["cluster_density"] < 1.5 * region["density"]


def test_star_fields(seed):
    region = generate_region((-4, 2), seed)
    cluster = generate_cluster(region, 0)
    stars = cluster_stars(cluster)
    assert len(stars) == cluster["star_count"]
    for star in stars:
        info = star_class_info(star)
        assert info.mass[0] <= star["stellar_mass"] <= info.mass[1]
        assert info.min_temp <= star["stellar_temperature"] <= info.max_temp
        assert 0 <= star["planet_count"] <= DEFAULTS.GALAXY_MAX_PLANETS
        assert star["hz_inner"] < star["hz_outer"]


def test_planet_fields(seed):
    region = generate_region((2, 2), seed)
    for cluster in region_clusters(region, 3):
        for star in cluster_stars(cluster)[:4]:
            for planet in star_planets(star):
                assert planet["planet_type"] in PLANET_TYPES
                assert planet["orbital_radius"] > 0.0
                assert planet["planet_temperature"] > 0.0
                if planet["has_liquid_water"]:
                    assert planet["planet_type"] in ("earthlike", "ocean")
                    assert planet["has_atmosphere"]


def test_outer_planets_orbit_further_out(seed):
    star = generate_star(generate_cluster(generate_region((1, 0), seed), 0), 0)
    radii = [generate_planet(star, i)["orbital_radius"] for i in range(4, 8)]
    assert radii == sorted(radii)


def test_terrain_cell(seed):
    planet = drill_down(seed, (0, 0), 1, 1, 0)
    cell = generate_terrain_cell(planet, 0, 7)
    assert cell.kind == "terrain"
    assert cell["cell"] == (0, 7)
    assert cell["biome"] in BIOMES
    assert -1.0 <= cell["local_elevation"] <= 1.0


@pytest.mark.parametrize("x, y", [(-1, 0), (0, 8), (8, 8)])
def test_terrain_cell_outside_grid_raises(seed, x, y):
    planet = drill_down(seed, (0, 0), 0, 0, 0)
    with pytest.raises(InvalidParameter):
        generate_terrain_cell(planet, x, y)


def test_drill_down_matches_step_by_step(seed):
    region = generate_region((5, -5), seed)
    planet = generate_planet(generate_star(generate_cluster(region, 3), 2), 1)
    assert drill_down(seed, (5, -5), 3, 2, 1) == planet
    assert drill_down(seed, (5, -5), 3, 2, 1, cell=(2, 2)) == generate_terrain_cell(planet, 2, 2)


def test_drill_down_is_stable_across_calls(seed):
    first = drill_down(seed, (7, 7), 1, 2, 3, cell=(4, 5))
    for _ in range(5):
        assert drill_down(seed, (7, 7), 1, 2, 3, cell=(4, 5)) == first


def test_biome_rules():
    assert biome_for("molten", 0.0, 0.0, 900.0) == "volcanic"
    assert biome_for("gas_giant", 0.9, 0.9, 100.0) == "barren"
    assert biome_for("earthlike", 0.0, 0.5, 290.0) == "ocean"
    assert biome_for("earthlike", 0.3, 0.5, 290.0) == "forest"
    assert biome_for("earthlike", 0.3, 0.1, 290.0) == "plains"
    assert biome_for("earthlike", 0.6, 0.5, 250.0) == "glacier"
    assert biome_for("ice", 0.1, 0.0, 100.0) == "tundra"
