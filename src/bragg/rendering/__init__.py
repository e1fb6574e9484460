"""Reference render adapter that replays scene operations into matplotlib."""

from bragg.rendering.mpl_adapter import MplRenderAdapter
from bragg.rendering.projection import project_points

__all__ = ["MplRenderAdapter", "project_points"]
