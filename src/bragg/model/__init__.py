"""Core data model for bragg: structures, view parameters, and scene entities.

Everything is re-exported here so that ``from bragg.model import
CrystalStructure`` works without knowing the submodule layout.
"""

from bragg.model.atom_style import AtomStyle
from bragg.model.bond_spec import BondSpec
from bragg.model.colour import RGB, Colour, normalise_colour
from bragg.model.entities import (
    Add,
    AtomId,
    BondId,
    EdgeId,
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
from bragg.model.scene_state import SceneState
from bragg.model.structure import AtomSite, CrystalStructure, LatticeVectors, Vec3
from bragg.model.view_parameters import (
    BondMode,
    CartesianCutoff,
    CellRadius,
    ReplicationRadius,
    ViewParameters,
)

__all__ = [
    "Add",
    "AtomId",
    "AtomSite",
    "AtomStyle",
    "BondId",
    "BondMode",
    "BondSpec",
    "CartesianCutoff",
    "CellRadius",
    "Colour",
    "CrystalStructure",
    "EdgeId",
    "Entity",
    "EntityId",
    "EntityKind",
    "LatticeVectors",
    "RGB",
    "RenderAtom",
    "RenderBond",
    "Remove",
    "ReplicationRadius",
    "SceneOp",
    "SceneState",
    "UnitCellEdge",
    "Update",
    "Vec3",
    "ViewParameters",
    "normalise_colour",
]
