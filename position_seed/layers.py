# position_seed/layers.py

"""
================================================================================
LAYERED PROPERTY EXTRACTION
================================================================================
Draws several statistically independent property streams from one coordinate
by hashing it once per property layer, each layer with its own salt.

Data Contract:
---------------
- A PropertyLayer is a named salt plus a decoding rule (float range, integer
  range, category table or boolean threshold).
- extract() decodes a whole set of layers for one coordinate. Salts within a
  set must be distinct; a duplicate would make two "independent" properties
  identical.
- Salts are the widely spaced constants from config.py, never 0, 1, 2, ...
- Side Effects: None.
================================================================================
"""

from dataclasses import dataclass
from typing import Optional

from . import config as DEFAULTS
from . import streams
from .errors import InvalidParameter
from .hashing import hash_coords, hash_to_hex

# --- Decoding Rules ---
KIND_FLOAT = "float"
KIND_INT = "int"
KIND_CATEGORY = "category"
KIND_BOOL = "bool"


def property_hash(coord, layer_salt: int, seed: int) -> int:
    """The raw hash of one property layer at one coordinate."""
    return hash_coords(coord, layer_salt, seed)


@dataclass(frozen=True)
class PropertyLayer:
    """A named salt and the rule that turns its hash into a domain value."""
    name: str
    salt: int
    kind: str
    low: float = 0.0
    high: float = 1.0
    count: int = 0
    offset: int = 0
    items: tuple = ()
    probability: float = 0.5

    @classmethod
    def float_range(cls, name: str, salt: int, low: float, high: float) -> "PropertyLayer":
        return cls(name, salt, KIND_FLOAT, low=low, high=high)

    @classmethod
    def int_range(cls, name: str, salt: int, count: int, offset: int = 0) -> "PropertyLayer":
        if count <= 0:
            raise InvalidParameter(f"Layer '{name}' needs a positive count, got {count}")
        return cls(name, salt, KIND_INT, count=count, offset=offset)

    @classmethod
    def category(cls, name: str, salt: int, items) -> "PropertyLayer":
        items = tuple(items)
        if not items:
            raise InvalidParameter(f"Layer '{name}' needs at least one category")
        return cls(name, salt, KIND_CATEGORY, items=items)

    @classmethod
    def boolean(cls, name: str, salt: int, probability: float) -> "PropertyLayer":
        if not 0.0 <= probability <= 1.0:
            raise InvalidParameter(f"Layer '{name}' probability must be in [0, 1], got {probability}")
        return cls(name, salt, KIND_BOOL, probability=probability)

    def decode(self, h: int):
        if self.kind == KIND_FLOAT:
            return streams.to_range(h, self.low, self.high)
        if self.kind == KIND_INT:
            return self.offset + streams.to_bounded_int(h, self.count)
        if self.kind == KIND_CATEGORY:
            return streams.pick(h, self.items)
        if self.kind == KIND_BOOL:
            return streams.to_bool(h, self.probability)
        raise InvalidParameter(f"Unknown layer kind '{self.kind}'")

    def sample(self, coord, seed: int):
        return self.decode(property_hash(coord, self.salt, seed))


def check_distinct_salts(layers) -> None:
    """Raises InvalidParameter if two layers of a set share a salt."""
    seen = {}
    for layer in layers:
        if layer.salt in seen:
            raise InvalidParameter(
                f"Layers '{seen[layer.salt]}' and '{layer.name}' share salt {layer.salt:#x}"
            )
        seen[layer.salt] = layer.name


def extract(coord, layers, seed: int) -> dict:
    """Decodes every layer of the set for one coordinate."""
    layers = tuple(layers)
    check_distinct_salts(layers)
    return {layer.name: layer.sample(coord, seed) for layer in layers}


# --- Cell Property Layers ---
# The standard set used by the coordinate explorer: does something exist at a
# cell, and if so, what is it?

CELL_TYPES = ("Void", "Rocky", "Ice", "Gas", "Metallic", "Oceanic", "Volcanic", "Anomaly")
RESOURCES = ("None", "Carbon", "Silicon", "Iron", "Titanium", "Platinum", "Exotic")
DANGER_LEVELS = ("Safe", "Low", "Moderate", "High", "Extreme")

EXISTENCE_LAYER = PropertyLayer.float_range("existence", DEFAULTS.SALT_EXISTENCE, 0.0, 1.0)

# Type index 0 is "Void", which only empty cells get.
CELL_LAYERS = (
    PropertyLayer.int_range("type_index", DEFAULTS.SALT_TYPE, len(CELL_TYPES) - 1, offset=1),
    PropertyLayer.float_range("temperature", DEFAULTS.SALT_TEMPERATURE, 10.0, 10000.0),
    PropertyLayer.float_range("density", DEFAULTS.SALT_DENSITY, 0.1, 20.0),
    PropertyLayer.int_range("resource_index", DEFAULTS.SALT_RESOURCES, len(RESOURCES)),
    PropertyLayer.int_range("danger_index", DEFAULTS.SALT_DANGER, len(DANGER_LEVELS)),
    PropertyLayer.boolean("special", DEFAULTS.SALT_SPECIAL, 0.05),
)


def describe_cell(coord, seed: int, density_threshold: float = 0.5,
                  layers: Optional[tuple] = None) -> dict:
    """
    Decodes the full cell record at a grid coordinate.

    A cell exists when its existence roll is above `density_threshold`. An
    empty cell only decodes its existence layer. Raw hashes are returned as
    16-digit hex strings for display.
    """
    if not 0.0 <= density_threshold <= 1.0:
        raise InvalidParameter(f"Density threshold must be in [0, 1], got {density_threshold}")
    layers = CELL_LAYERS if layers is None else tuple(layers)
    check_distinct_salts((EXISTENCE_LAYER,) + layers)

    existence_hash = property_hash(coord, EXISTENCE_LAYER.salt, seed)
    existence_value = EXISTENCE_LAYER.decode(existence_hash)
    raw_hashes = {EXISTENCE_LAYER.name: hash_to_hex(existence_hash)}

    if existence_value <= density_threshold:
        return {
            "coordinates": tuple(coord),
            "exists": False,
            "existence_value": existence_value,
            "type": CELL_TYPES[0],
            "type_index": 0,
            "temperature": 0,
            "density": 0.0,
            "resources": RESOURCES[0],
            "resource_index": 0,
            "danger": DANGER_LEVELS[0],
            "danger_index": 0,
            "special": False,
            "raw_hashes": raw_hashes,
        }

    values = {}
    for layer in layers:
        h = property_hash(coord, layer.salt, seed)
        raw_hashes[layer.name] = hash_to_hex(h)
        values[layer.name] = layer.decode(h)

    return {
        "coordinates": tuple(coord),
        "exists": True,
        "existence_value": existence_value,
        "type": CELL_TYPES[values["type_index"]],
        "type_index": values["type_index"],
        "temperature": int(values["temperature"]),
        "density": round(values["density"], 2),
        "resources": RESOURCES[values["resource_index"]],
        "resource_index": values["resource_index"],
        "danger": DANGER_LEVELS[values["danger_index"]],
        "danger_index": values["danger_index"],
        "special": values["special"],
        "raw_hashes": raw_hashes,
    }
