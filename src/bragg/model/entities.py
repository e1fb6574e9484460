"""Render entities, their identities, and scene operations.

Entities form a closed set tagged by :class:`EntityKind`: atoms, bonds
and unit cell edges.  Each entity is a frozen snapshot whose
``identity`` is stable across recomputes of the same structure and
replication policy, which is what lets the synchronizer diff two scenes
cheaply.

Identity classes are distinct dataclasses rather than bare tuples, so
an atom identity can never compare equal to an edge identity.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Any, ClassVar

from bragg.model.colour import RGB
from bragg.model.structure import Vec3


class EntityKind(StrEnum):
    ATOM = "atom"
    BOND = "bond"
    CELL_EDGE = "cell_edge"


@dataclass(frozen=True, order=True)
class AtomId:
    """Identity of a render atom: originating site plus image offset."""

    kind: ClassVar[EntityKind] = EntityKind.ATOM

    site: int
    i: int = 0
    j: int = 0
    k: int = 0

    @property
    def offset(self) -> tuple[int, int, int]:
        return (self.i, self.j, self.k)


@dataclass(frozen=True, order=True)
class BondId:
    """Identity of a bond: its two atom identities, ``a < b``."""

    kind: ClassVar[EntityKind] = EntityKind.BOND

    a: AtomId
    b: AtomId

    def __post_init__(self) -> None:
        if not self.a < self.b:
            raise ValueError(
                f"bond endpoints must be ordered a < b, got {self.a} and {self.b}"
            )

    @classmethod
    def between(cls, x: AtomId, y: AtomId) -> BondId:
        """Canonical identity for the unordered pair ``{x, y}``."""
        return cls(x, y) if x < y else cls(y, x)


@dataclass(frozen=True, order=True)
class EdgeId:
    """Identity of a unit cell edge: indices of its two cube corners.

    Corners are numbered by bit pattern, ``0 -> (0, 0, 0)``,
    ``1 -> (1, 0, 0)``, ..., ``7 -> (1, 1, 1)`` in fractional space.
    """

    kind: ClassVar[EntityKind] = EntityKind.CELL_EDGE

    start: int
    end: int


EntityId = AtomId | BondId | EdgeId


@dataclass(frozen=True)
class RenderAtom:
    """A positioned atom ready for drawing.

    Attributes:
        identity: Site index and periodic image offset.
        position: Cartesian position.
        species: Species label of the originating site.
        radius: Display radius.
        colour: Normalised RGB colour.
    """

    kind: ClassVar[EntityKind] = EntityKind.ATOM

    identity: AtomId
    position: Vec3
    species: str
    radius: float
    colour: RGB


@dataclass(frozen=True)
class RenderBond:
    """A bond between two render atoms.

    Attributes:
        identity: The ordered pair of atom identities.
        start: Cartesian position of atom ``identity.a``.
        end: Cartesian position of atom ``identity.b``.
        length: Interatomic distance.
        order: Bond order.  Distance-based inference always yields 1.
        colour: Normalised RGB colour.
    """

    kind: ClassVar[EntityKind] = EntityKind.BOND

    identity: BondId
    start: Vec3
    end: Vec3
    length: float
    colour: RGB
    order: int = 1


@dataclass(frozen=True)
class UnitCellEdge:
    """One of the 12 edges of the base unit cell."""

    kind: ClassVar[EntityKind] = EntityKind.CELL_EDGE

    identity: EdgeId
    start: Vec3
    end: Vec3
    colour: RGB


Entity = RenderAtom | RenderBond | UnitCellEdge


@dataclass(frozen=True)
class Add:
    """Create a new render entity."""

    entity: Entity

    @property
    def identity(self) -> EntityId:
        return self.entity.identity

    @property
    def kind(self) -> EntityKind:
        return self.entity.kind


@dataclass(frozen=True)
class Update:
    """Change some fields of an existing entity.

    Attributes:
        identity: Entity to update.
        changes: Read-only mapping from field name to its new value.
            Only the fields that differ are present.
    """

    identity: EntityId
    changes: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "changes", MappingProxyType(dict(self.changes)))

    def __hash__(self) -> int:
        return hash((self.identity, frozenset(self.changes.items())))

    @property
    def kind(self) -> EntityKind:
        return self.identity.kind


@dataclass(frozen=True)
class Remove:
    """Destroy an existing entity."""

    identity: EntityId

    @property
    def kind(self) -> EntityKind:
        return self.identity.kind


SceneOp = Add | Update | Remove
