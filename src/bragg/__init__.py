"""Bragg: turn crystal structures into renderable 3D scenes.

Bragg expands a periodic crystal structure into positioned atoms,
infers bonds from interatomic distances, and diffs each recompute
against the previous scene so that a render backend only ever applies
the changes.  An orbit/pan/zoom camera turns pointer gestures into
view and projection matrices.

Example usage::

    from bragg import CrystalStructure, SceneEngine

    structure = CrystalStructure.from_arrays(
        [[3.0, 0, 0], [0, 3.0, 0], [0, 0, 3.0]],
        ["Na", "Cl"],
        [[0, 0, 0], [0.5, 0.5, 0.5]],
    )
    with SceneEngine() as engine:
        ops = engine.set_structure(structure)
"""

from bragg.bonds import BondCutoffTable, compute_bonds
from bragg.camera import (
    CameraConfig,
    CameraController,
    CameraTransforms,
    NavigationMode,
    PointerButton,
    PointerEvent,
    PointerKind,
)
from bragg.construction import (
    from_pymatgen,
    load_view_parameters,
    save_view_parameters,
    structure_from_message,
)
from bragg.defaults import (
    COVALENT_RADII,
    ELEMENT_COLOURS,
    ELEMENT_SIZES,
    default_atom_style,
)
from bragg.engine import SceneContent, SceneEngine, build_scene
from bragg.exceptions import (
    BraggError,
    InvalidLattice,
    InvalidViewParameters,
    RecomputeCancelled,
)
from bragg.geometry import compute_positions, unit_cell_edges
from bragg.model import (
    Add,
    AtomId,
    AtomSite,
    AtomStyle,
    BondId,
    BondMode,
    BondSpec,
    CartesianCutoff,
    CellRadius,
    Colour,
    CrystalStructure,
    EdgeId,
    EntityKind,
    LatticeVectors,
    RenderAtom,
    RenderBond,
    Remove,
    SceneOp,
    SceneState,
    UnitCellEdge,
    Update,
    ViewParameters,
    normalise_colour,
)
from bragg.sync import SceneSynchronizer, diff_and_commit

__all__ = [
    "Add",
    "AtomId",
    "AtomSite",
    "AtomStyle",
    "BondCutoffTable",
    "BondId",
    "BondMode",
    "BondSpec",
    "BraggError",
    "COVALENT_RADII",
    "CameraConfig",
    "CameraController",
    "CameraTransforms",
    "CartesianCutoff",
    "CellRadius",
    "Colour",
    "CrystalStructure",
    "ELEMENT_COLOURS",
    "ELEMENT_SIZES",
    "EdgeId",
    "EntityKind",
    "InvalidLattice",
    "InvalidViewParameters",
    "LatticeVectors",
    "NavigationMode",
    "PointerButton",
    "PointerEvent",
    "PointerKind",
    "RecomputeCancelled",
    "Remove",
    "RenderAtom",
    "RenderBond",
    "SceneContent",
    "SceneEngine",
    "SceneOp",
    "SceneState",
    "SceneSynchronizer",
    "UnitCellEdge",
    "Update",
    "ViewParameters",
    "build_scene",
    "compute_bonds",
    "compute_positions",
    "default_atom_style",
    "diff_and_commit",
    "from_pymatgen",
    "load_view_parameters",
    "normalise_colour",
    "save_view_parameters",
    "structure_from_message",
    "unit_cell_edges",
]
