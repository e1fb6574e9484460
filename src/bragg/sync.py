"""Scene graph synchronisation: diff two entity sets into scene operations.

The synchronizer never touches a rendering API.  It turns the freshly
computed atoms, bonds and cell edges into the shortest list of
:class:`~bragg.model.Add`, :class:`~bragg.model.Update` and
:class:`~bragg.model.Remove` operations that carries the previous
:class:`~bragg.model.SceneState` to the new one, so any render backend
can replay it.

The central guarantee is ``prior.apply(ops) == next_state``.  Entities
whose fields moved by less than the comparison tolerance produce no
operation, and ``next_state`` keeps their *prior* snapshot so that the
guarantee holds exactly.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from collections.abc import Iterable
from typing import Any

from bragg._constants import SCENE_EPSILON
from bragg.model import (
    Add,
    Entity,
    EntityKind,
    RenderAtom,
    RenderBond,
    Remove,
    SceneOp,
    SceneState,
    UnitCellEdge,
    Update,
)

logger = logging.getLogger(__name__)

# Creation order: cell edges, then atoms, then the bonds that reference
# them.  Removal runs in the reverse order.
_ADD_ORDER = {EntityKind.CELL_EDGE: 0, EntityKind.ATOM: 1, EntityKind.BOND: 2}
_REMOVE_ORDER = {kind: -rank for kind, rank in _ADD_ORDER.items()}


def _values_differ(old: Any, new: Any, epsilon: float) -> bool:
    """Compare field values, with *epsilon* tolerance for floats."""
    if isinstance(old, float) or isinstance(new, float):
        if isinstance(old, (int, float)) and isinstance(new, (int, float)):
            return not math.isclose(old, new, rel_tol=0.0, abs_tol=epsilon)
        return True
    if isinstance(old, tuple) and isinstance(new, tuple):
        if len(old) != len(new):
            return True
        return any(_values_differ(o, n, epsilon) for o, n in zip(old, new))
    return old != new


def changed_fields(old: Entity, new: Entity, epsilon: float = SCENE_EPSILON) -> dict[str, Any]:
    """Fields of *new* that differ from *old*, keyed by field name.

    Raises:
        TypeError: If the two entities are of different kinds.
    """
    if type(old) is not type(new):
        raise TypeError(
            f"cannot diff {type(old).__name__} against {type(new).__name__}"
        )
    changes: dict[str, Any] = {}
    for f in dataclasses.fields(new):
        if f.name == "identity":
            continue
        old_value, new_value = getattr(old, f.name), getattr(new, f.name)
        if _values_differ(old_value, new_value, epsilon):
            changes[f.name] = new_value
    return changes


def diff_and_commit(
    atoms: Iterable[RenderAtom],
    bonds: Iterable[RenderBond],
    prior: SceneState,
    *,
    cell_edges: Iterable[UnitCellEdge] = (),
    epsilon: float = SCENE_EPSILON,
) -> tuple[list[SceneOp], SceneState]:
    """Diff a new entity set against *prior*.

    Operations are ordered removals first, then updates, then
    additions.  Removals drop bonds before atoms before cell edges;
    additions create them in the opposite order.  Within a kind,
    operations follow identity order, so equal inputs always give
    identical operation lists.

    Args:
        atoms: New render atoms.
        bonds: New render bonds.
        prior: The last committed scene state.
        cell_edges: New unit cell edges, empty when the cell is hidden.
        epsilon: Absolute tolerance for float fields.

    Returns:
        Tuple of ``(ops, next_state)`` with
        ``prior.apply(ops) == next_state``.

    Raises:
        ValueError: If the new entities contain a duplicate identity.
    """
    new_state = SceneState([*cell_edges, *atoms, *bonds])

    removes: list[Remove] = []
    updates: list[Update] = []
    adds: list[Add] = []
    kept: list[Entity] = []

    for identity, old in prior.items():
        if identity not in new_state:
            removes.append(Remove(identity))

    for identity, new in new_state.items():
        old = prior.get(identity)
        if old is None:
            adds.append(Add(new))
            kept.append(new)
            continue
        changes = changed_fields(old, new, epsilon)
        if changes:
            updates.append(Update(identity, changes))
            kept.append(dataclasses.replace(old, **changes))
        else:
            kept.append(old)

    removes.sort(key=lambda op: (_REMOVE_ORDER[op.kind], op.identity))
    updates.sort(key=lambda op: (_ADD_ORDER[op.kind], op.identity))
    adds.sort(key=lambda op: (_ADD_ORDER[op.kind], op.identity))

    ops: list[SceneOp] = [*removes, *updates, *adds]
    return ops, SceneState(kept)


class SceneSynchronizer:
    """Owns the session's :class:`SceneState` and commits new scenes.

    :meth:`commit` replaces the state only after the full diff has
    been computed, so a failure part-way leaves the previous scene in
    place.
    """

    def __init__(self, epsilon: float = SCENE_EPSILON) -> None:
        if epsilon < 0:
            raise ValueError(f"epsilon must be non-negative, got {epsilon}")
        self.epsilon = epsilon
        self._state = SceneState.empty()

    @property
    def state(self) -> SceneState:
        return self._state

    def commit(
        self,
        atoms: Iterable[RenderAtom],
        bonds: Iterable[RenderBond],
        cell_edges: Iterable[UnitCellEdge] = (),
    ) -> list[SceneOp]:
        """Diff against the current state and make the result current."""
        ops, next_state = diff_and_commit(
            atoms, bonds, self._state,
            cell_edges=cell_edges, epsilon=self.epsilon,
        )
        self._state = next_state
        logger.debug("committed %d scene ops -> %r", len(ops), next_state)
        return ops

    def reset(self) -> list[SceneOp]:
        """Clear the scene, returning the removals that do so."""
        return self.commit((), (), ())
