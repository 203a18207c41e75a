# position_seed/hierarchy.py

"""
================================================================================
HIERARCHICAL CONSTRAINT PROPAGATION
================================================================================
Derives child entities (region -> cluster -> star -> planet -> ...) from their
parent without storing anything. A child is a pure function of its parent,
its index among its siblings, and the parent's seed.

Data Contract:
---------------
- Entity is immutable and hashable. Its constraints are a read-only copy of
  the mapping it was built from.
- derive_child(parent, index, properties, parent_seed=None):
    - `properties(parent, rolls)` returns the child's new constraint values.
      `rolls` is a ChildRolls bound to (index, depth) and the parent seed, so
      every roll is a salted property hash of the child's position.
    - child.constraints == parent.constraints | new values. A new value whose
      key already exists in the parent raises ConstraintConflict, so every
      parent key is present and unchanged in the child.
    - child.seed is a salted hash of the child's position under the parent
      seed.
- Determinism is transitive: the same root seed and the same index path give
  an identical leaf at any depth.
- Side Effects: None.
================================================================================
"""

import numbers
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence

from . import config as DEFAULTS
from . import streams
from .errors import ConstraintConflict, InvalidParameter
from .layers import property_hash


@dataclass(frozen=True)
class Entity:
    """One node of a generation hierarchy."""
    kind: str
    seed: int
    path: tuple = ()
    constraints: Mapping = field(default_factory=dict)

    def __post_init__(self):
        # Always a private copy, even of a caller's MappingProxyType.
        object.__setattr__(self, 'constraints', MappingProxyType(dict(self.constraints)))

    def __hash__(self):
        return hash((self.kind, self.seed, self.path, frozenset(self.constraints.items())))

    @property
    def depth(self) -> int:
        return len(self.path)

    def __getitem__(self, key):
        return self.constraints[key]

    def get(self, key, default=None):
        return self.constraints.get(key, default)

    def as_dict(self) -> dict:
        return dict(self.constraints)


def root_entity(kind: str, seed: int, constraints: Optional[Mapping] = None) -> Entity:
    """The top of a hierarchy. Everything below it derives from `seed`."""
    return Entity(kind=kind, seed=int(seed), path=(), constraints=dict(constraints or {}))


class ChildRolls:
    """
    Salted property hashes for one child position. Each salt is an
    independent stream; the same salt always returns the same roll.
    """

    def __init__(self, child_index: int, depth: int, parent_seed: int):
        self.child_index = child_index
        self.coord = (child_index, depth)
        self.parent_seed = parent_seed

    def hash(self, salt: int) -> int:
        return property_hash(self.coord, salt, self.parent_seed)

    def unit(self, salt: int) -> float:
        return streams.to_unit_float(self.hash(salt))

    def range(self, salt: int, low: float, high: float) -> float:
        return streams.to_range(self.hash(salt), low, high)

    def integer(self, salt: int, n: int) -> int:
        return streams.to_bounded_int(self.hash(salt), n)

    def chance(self, salt: int, p: float) -> bool:
        return streams.to_bool(self.hash(salt), p)

    def pick(self, salt: int, items):
        return streams.pick(self.hash(salt), items)


def child_seed(child_index: int, depth: int, parent_seed: int) -> int:
    return property_hash((child_index, depth), DEFAULTS.SALT_CHILD_SEED, parent_seed)


def derive_child(parent: Entity, child_index: int,
                 properties: Callable[[Entity, ChildRolls], Mapping],
                 parent_seed: Optional[int] = None, kind: Optional[str] = None) -> Entity:
    """
    Derives the child at `child_index` under `parent`.

    Args:
        parent: The parent entity.
        child_index: Non-negative position among the siblings.
        properties: Callable computing the child's new constraints from the
            parent and the child's rolls. It may read any parent constraint
            (e.g. to bias a roll) but must only introduce new keys.
        parent_seed: Seed the child is keyed on. Defaults to parent.seed.
        kind: Label of the child entity. Defaults to the parent's kind.
    """
    if isinstance(child_index, bool) or not isinstance(child_index, numbers.Integral):
        raise InvalidParameter(f"Child index must be an integer, got {child_index!r}")
    if child_index < 0:
        raise InvalidParameter(f"Child index must be non-negative, got {child_index}")
    child_index = int(child_index)
    seed = parent.seed if parent_seed is None else int(parent_seed)
    depth = parent.depth

    new_properties = properties(parent, ChildRolls(child_index, depth, seed))
    clashing = sorted(set(new_properties) & set(parent.constraints))
    if clashing:
        raise ConstraintConflict(
            f"Child {child_index} of '{parent.kind}' redefines inherited constraints: {clashing}"
        )

    constraints = dict(parent.constraints)
    constraints.update(new_properties)
    return Entity(
        kind=parent.kind if kind is None else kind,
        seed=child_seed(child_index, depth, seed),
        path=parent.path + (child_index,),
        constraints=constraints,
    )


def derive_path(root: Entity, path: Sequence[int], levels: Sequence) -> Entity:
    """
    Walks `path` from `root`, one derive_child call per index.

    `levels` holds one (kind, properties) pair per step; the same root and
    path always reach an identical leaf.
    """
    path = tuple(path)
    levels = tuple(levels)
    if len(levels) < len(path):
        raise InvalidParameter(f"Path of depth {len(path)} needs {len(path)} levels, got {len(levels)}")
    entity = root
    for index, (kind, properties) in zip(path, levels):
        entity = derive_child(entity, index, properties, kind=kind)
    return entity
