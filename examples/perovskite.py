"""Recompute a perovskite scene in the background from server-style messages."""

import json
from pathlib import Path

from bragg import CellRadius, SceneEngine, ViewParameters, structure_from_message
from bragg.rendering import MplRenderAdapter

OUTPUT = Path(__file__).resolve().parent / "perovskite.pdf"

A = 3.905


def message(ti_shift: float) -> str:
    """A structure update with the Ti atom displaced along c."""
    return json.dumps({
        "lattice": [[A, 0, 0], [0, A, 0], [0, 0, A]],
        "atoms": [
            {"element": "Sr", "x": 0.0, "y": 0.0, "z": 0.0},
            {"element": "Ti", "x": A / 2, "y": A / 2, "z": A / 2 + ti_shift},
            {"element": "O", "x": A / 2, "y": A / 2, "z": 0.0},
            {"element": "O", "x": A / 2, "y": 0.0, "z": A / 2},
            {"element": "O", "x": 0.0, "y": A / 2, "z": A / 2},
        ],
        "title": "SrTiO3",
    })


def main():
    adapter = MplRenderAdapter()
    params = ViewParameters(replication=CellRadius(1), show_unit_cell=True)
    with SceneEngine(params) as engine:
        adapter.apply(engine.set_structure(structure_from_message(message(0.0))))

        # Several updates arrive faster than they can be processed; only
        # the newest one is committed.
        for shift in (0.05, 0.10, 0.15):
            engine.request_structure(structure_from_message(message(shift)))
        ops = engine.wait()
        adapter.apply(ops)
        print(f"Committed {len(ops)} ops for generation {engine.generation}")

        adapter.render(engine.frame(), output=OUTPUT, show=False)
    print(f"Rendered to {OUTPUT}")


if __name__ == "__main__":
    main()
