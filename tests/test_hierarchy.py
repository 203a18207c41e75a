# tests/test_hierarchy.py
import dataclasses
from types import MappingProxyType

import pytest

from position_seed.errors import ConstraintConflict, InvalidParameter
from position_seed.hierarchy import ChildRolls, Entity, child_seed, derive_child, derive_path, root_entity

SALT_SIZE = 0x1F2E3D4B
SALT_FLAVOR = 0x6A5B4C3F


def _moon_properties(parent, rolls):
    return {
        "size": rolls.range(SALT_SIZE, 0.0, parent["max_size"]),
        "flavor": rolls.pick(SALT_FLAVOR, ("sour", "sweet", "bitter")),
    }


def _crater_properties(parent, rolls):
    return {"crater_depth": rolls.range(SALT_SIZE, 0.0, parent["size"])}


@pytest.fixture
def planet(seed):
    return root_entity("planet", seed, {"max_size": 10.0, "name": "Tethys"})


def test_same_inputs_same_child(planet):
    a = derive_child(planet, 3, _moon_properties, kind="moon")
    b = derive_child(planet, 3, _moon_properties, kind="moon")
    assert a == b
    assert a.as_dict() == b.as_dict()
    assert a.seed == b.seed


def test_child_is_a_superset_of_the_parent(planet):
    moon = derive_child(planet, 0, _moon_properties, kind="moon")
    for key, value in planet.constraints.items():
        assert moon[key] == value
    assert set(moon.constraints) == set(planet.constraints) | {"size", "flavor"}
    assert 0.0 <= moon["size"] < 10.0


def test_siblings_differ(planet):
    moons = [derive_child(planet, i, _moon_properties) for i in range(8)]
    assert len({m.seed for m in moons}) == 8
    assert len({m["size"] for m in moons}) == 8


def test_parent_seed_override(planet):
    default = derive_child(planet, 1, _moon_properties)
    other = derive_child(planet, 1, _moon_properties, parent_seed=planet.seed + 1)
    assert default.seed != other.seed
    assert default == derive_child(planet, 1, _moon_properties, parent_seed=planet.seed)


def test_redefining_a_parent_key_conflicts(planet):
    def rename(parent, rolls):
        return {"name": "Dione", "size": 1.0}

    with pytest.raises(ConstraintConflict) as excinfo:
        derive_child(planet, 0, rename)
    assert "name" in str(excinfo.value)
    assert issubclass(ConstraintConflict, InvalidParameter)


@pytest.mark.parametrize("index", [-1, 1.5, True, "0"])
def test_bad_index_raises(planet, index):
    with pytest.raises(InvalidParameter):
        derive_child(planet, index, _moon_properties)


def test_entities_are_immutable(planet):
    with pytest.raises(dataclasses.FrozenInstanceError):
        planet.seed = 1
    with pytest.raises(TypeError):
        planet.constraints["max_size"] = 99.0


def test_entity_copies_its_input_mapping():
    source = {"a": 1}
    entity = Entity("thing", 5, constraints=source)
    source["a"] = 2
    assert entity["a"] == 1


def test_entity_copies_a_read_only_view():
    source = {"a": 1}
    entity = Entity("thing", 5, constraints=MappingProxyType(source))
    source["a"] = 2
    source["b"] = 3
    assert entity.as_dict() == {"a": 1}


def test_entities_are_hashable(planet):
    moon = derive_child(planet, 1, _moon_properties, kind="moon")
    twin = derive_child(planet, 1, _moon_properties, kind="moon")
    assert moon == twin
    assert hash(moon) == hash(twin)
    assert len({moon, twin, planet}) == 2


def test_path_and_depth(planet):
    moon = derive_child(planet, 2, _moon_properties, kind="moon")
    crater = derive_child(moon, 5, _crater_properties, kind="crater")
    assert planet.depth == 0
    assert moon.path == (2,) and moon.depth == 1
    assert crater.path == (2, 5) and crater.depth == 2
    assert crater.kind == "crater"
    assert crater.get("missing", "x") == "x"


def test_derive_path_matches_chained_calls(planet):
    levels = (("moon", _moon_properties), ("crater", _crater_properties))
    leaf = derive_path(planet, (4, 7), levels)
    chained = derive_child(derive_child(planet, 4, _moon_properties, kind="moon"),
                           7, _crater_properties, kind="crater")
    assert leaf == chained
    assert derive_path(planet, (4, 7), levels) == leaf


def test_derive_path_needs_enough_levels(planet):
    with pytest.raises(InvalidParameter):
        derive_path(planet, (1, 2, 3), (("moon", _moon_properties),))


def test_rolls_are_keyed_on_position():
    rolls = ChildRolls(3, 1, 77)
    again = ChildRolls(3, 1, 77)
    deeper = ChildRolls(3, 2, 77)
    assert rolls.unit(SALT_SIZE) == again.unit(SALT_SIZE)
    assert rolls.unit(SALT_SIZE) != deeper.unit(SALT_SIZE)
    assert rolls.unit(SALT_SIZE) != rolls.unit(SALT_FLAVOR)
    assert 0 <= rolls.integer(SALT_SIZE, 6) < 6
    assert rolls.chance(SALT_SIZE, 1.0)


def test_child_seed_depends_on_depth():
    assert child_seed(0, 0, 9) != child_seed(0, 1, 9)
