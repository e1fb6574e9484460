"""Demo script: build a rock salt scene, orbit the camera, and render it."""

import logging
from pathlib import Path

from bragg import (
    CartesianCutoff,
    CrystalStructure,
    PointerButton,
    PointerEvent,
    PointerKind,
    SceneEngine,
    ViewParameters,
)
from bragg.rendering import MplRenderAdapter

OUTPUT = Path(__file__).resolve().parent / "rocksalt.pdf"


def main():
    logging.basicConfig(level=logging.DEBUG)

    a = 5.64
    structure = CrystalStructure.from_arrays(
        [[a, 0, 0], [0, a, 0], [0, 0, a]],
        ["Na"] * 4 + ["Cl"] * 4,
        [
            [0.0, 0.0, 0.0], [0.0, 0.5, 0.5], [0.5, 0.0, 0.5], [0.5, 0.5, 0.0],
            [0.5, 0.5, 0.5], [0.5, 0.0, 0.0], [0.0, 0.5, 0.0], [0.0, 0.0, 0.5],
        ],
        title="NaCl",
    )

    adapter = MplRenderAdapter()
    with SceneEngine() as engine:
        ops = engine.set_structure(structure)
        adapter.apply(ops)
        print(f"Initial scene: {len(ops)} ops, {engine.state!r}")

        # Grow the view to a sphere around the cell centre.
        ops = engine.set_view_parameters(
            ViewParameters(replication=CartesianCutoff(a))
        )
        adapter.apply(ops)
        print(f"After replication change: {len(ops)} ops, {engine.state!r}")

        # Same inputs again: nothing to do.
        ops = engine.set_view_parameters(engine.view_parameters)
        print(f"Repeated call: {len(ops)} ops")

        engine.pointer_event(PointerEvent(PointerKind.DRAG_START, button=PointerButton.PRIMARY))
        engine.pointer_event(PointerEvent(PointerKind.DRAG, dx=60.0, dy=-15.0))
        engine.pointer_event(PointerEvent(PointerKind.DRAG_END))
        transforms = engine.pointer_event(PointerEvent(PointerKind.SCROLL, scroll=2.0))
        print(f"Camera yaw={transforms.yaw:.1f} pitch={transforms.pitch:.1f} "
              f"distance={transforms.distance:.2f}")

        adapter.render(transforms, output=OUTPUT, show=False)
    print(f"Rendered to {OUTPUT}")


if __name__ == "__main__":
    main()
