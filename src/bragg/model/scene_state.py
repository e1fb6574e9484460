from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator, Mapping

from bragg.model.entities import (
    Add,
    Entity,
    EntityId,
    EntityKind,
    RenderAtom,
    RenderBond,
    Remove,
    SceneOp,
    UnitCellEdge,
    Update,
)


class SceneState(Mapping):
    """Immutable snapshot of every render entity, keyed by identity.

    A state is only ever replaced, never edited: :meth:`apply` returns
    a new state, so a failed apply leaves the original intact.

    Two states are equal when they hold the same identities mapped to
    entities with identical field values.
    """

    __slots__ = ("_entities",)

    def __init__(self, entities: Iterable[Entity] = ()) -> None:
        table: dict[EntityId, Entity] = {}
        for entity in entities:
            if entity.identity in table:
                raise ValueError(f"duplicate entity identity {entity.identity}")
            table[entity.identity] = entity
        self._entities = table

    @classmethod
    def empty(cls) -> SceneState:
        return cls()

    def __getitem__(self, identity: EntityId) -> Entity:
        return self._entities[identity]

    def __iter__(self) -> Iterator[EntityId]:
        return iter(self._entities)

    def __len__(self) -> int:
        return len(self._entities)

    def __repr__(self) -> str:
        counts = {kind.value: len(self.of_kind(kind)) for kind in EntityKind}
        return f"SceneState({counts})"

    def of_kind(self, kind: EntityKind) -> list[Entity]:
        """Entities of one kind, sorted by identity."""
        return sorted(
            (e for e in self._entities.values() if e.kind is kind),
            key=lambda e: e.identity,
        )

    @property
    def atoms(self) -> list[RenderAtom]:
        return self.of_kind(EntityKind.ATOM)  # type: ignore[return-value]

    @property
    def bonds(self) -> list[RenderBond]:
        return self.of_kind(EntityKind.BOND)  # type: ignore[return-value]

    @property
    def cell_edges(self) -> list[UnitCellEdge]:
        return self.of_kind(EntityKind.CELL_EDGE)  # type: ignore[return-value]

    def apply(self, ops: Iterable[SceneOp]) -> SceneState:
        """Return the state obtained by applying *ops* in order.

        Raises:
            KeyError: If an update or removal names a missing entity.
            ValueError: If an add names an identity already present,
                or an update names an unknown field.
            TypeError: If an element of *ops* is not a scene operation.
        """
        table = dict(self._entities)
        for op in ops:
            if isinstance(op, Add):
                if op.identity in table:
                    raise ValueError(f"cannot add existing entity {op.identity}")
                table[op.identity] = op.entity
            elif isinstance(op, Update):
                current = table[op.identity]
                unknown = set(op.changes) - {
                    f.name for f in dataclasses.fields(current)
                }
                if unknown or "identity" in op.changes:
                    raise ValueError(
                        f"cannot update fields {sorted(op.changes)} of "
                        f"{type(current).__name__}"
                    )
                table[op.identity] = dataclasses.replace(current, **op.changes)
            elif isinstance(op, Remove):
                del table[op.identity]
            else:
                raise TypeError(f"not a scene operation: {op!r}")
        new = SceneState.__new__(SceneState)
        new._entities = table
        return new
