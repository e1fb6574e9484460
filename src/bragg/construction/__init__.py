"""Structure construction and view configuration persistence."""

from bragg.construction.config import load_view_parameters, save_view_parameters
from bragg.construction.scene_builders import from_pymatgen, structure_from_message

__all__ = [
    "from_pymatgen",
    "load_view_parameters",
    "save_view_parameters",
    "structure_from_message",
]
