"""View parameter save/load for JSON files."""

from __future__ import annotations

import json
from pathlib import Path

from bragg.model import ViewParameters


def save_view_parameters(path: str | Path, params: ViewParameters) -> None:
    """Save view parameters to a JSON file.

    Fields still at their defaults are not written.  The file is
    human-readable with two-space indentation.

    Args:
        path: Destination file path.
        params: The parameters to save.
    """
    Path(path).write_text(json.dumps(params.to_dict(), indent=2) + "\n")


def load_view_parameters(path: str | Path) -> ViewParameters:
    """Load view parameters from a JSON file.

    Missing keys take their defaults.

    Args:
        path: Source file path.

    Returns:
        The parsed :class:`ViewParameters`.

    Raises:
        InvalidViewParameters: If the file contains unknown keys or
            invalid values.  This is a :class:`ValueError` subclass.
        ValueError: If the file does not hold a JSON object.
    """
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError(
            f"view parameter file must hold a JSON object, got {type(data).__name__}"
        )
    return ViewParameters.from_dict(data)
