"""Generate static images for the documentation."""

from pathlib import Path

from bragg import (
    CellRadius,
    CrystalStructure,
    PointerButton,
    PointerEvent,
    PointerKind,
    SceneEngine,
    ViewParameters,
)
from bragg.rendering import MplRenderAdapter

OUT = Path(__file__).resolve().parent


def perovskite_structure() -> CrystalStructure:
    """Cubic SrTiO3 perovskite."""
    a = 3.905
    return CrystalStructure.from_arrays(
        [[a, 0, 0], [0, a, 0], [0, 0, a]],
        ["Sr", "Ti", "O", "O", "O"],
        [
            [0.0, 0.0, 0.0],
            [0.5, 0.5, 0.5],
            [0.5, 0.5, 0.0],
            [0.5, 0.0, 0.5],
            [0.0, 0.5, 0.5],
        ],
        title="SrTiO3",
    )


def rocksalt_structure() -> CrystalStructure:
    """Primitive NaCl cell."""
    a = 5.64 / 2
    return CrystalStructure.from_arrays(
        [[0, a, a], [a, 0, a], [a, a, 0]],
        ["Na", "Cl"],
        [[0.0, 0.0, 0.0], [0.5, 0.5, 0.5]],
        title="NaCl",
    )


def _render(structure, params, path, *, orbit=(0.0, 0.0)) -> None:
    adapter = MplRenderAdapter()
    with SceneEngine(params) as engine:
        adapter.apply(engine.set_structure(structure))
        if orbit != (0.0, 0.0):
            engine.pointer_event(PointerEvent(PointerKind.DRAG_START, button=PointerButton.PRIMARY))
            engine.pointer_event(PointerEvent(PointerKind.DRAG, dx=orbit[0], dy=orbit[1]))
            engine.pointer_event(PointerEvent(PointerKind.DRAG_END))
        adapter.render(engine.frame(), path, figsize=(4, 4), dpi=150, show=False)
    print(f"  wrote {path}")


def generate_docs_images() -> None:
    _render(perovskite_structure(), ViewParameters(), OUT / "perovskite.svg")
    _render(
        perovskite_structure(),
        ViewParameters(replication=CellRadius(1), show_unit_cell=False),
        OUT / "perovskite_supercell.svg",
        orbit=(40.0, -20.0),
    )
    _render(rocksalt_structure(), ViewParameters(bond_mode="none"), OUT / "rocksalt.svg")


if __name__ == "__main__":
    generate_docs_images()
