"""Matplotlib render adapter: replays scene operations and draws frames.

The adapter owns its own copy of the scene, built only from the
operations it is given, so it also serves as an end-to-end check that
an operation stream reproduces the engine's state.  Atoms are drawn as
depth-sorted filled circles (painter's algorithm) on top of the bond
and cell-edge lines.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes
from matplotlib.collections import LineCollection, PolyCollection
from matplotlib.figure import Figure

from bragg.camera import CameraTransforms
from bragg.model import Colour, SceneOp, SceneState, normalise_colour
from bragg.rendering.projection import _make_unit_circle, project_points

_LINE_ZORDER = 1
_ATOM_ZORDER = 2


class MplRenderAdapter:
    """Render backend that keeps a :class:`SceneState` and draws it.

    Args:
        outline_colour: Colour of the atom outlines.
        outline_width: Atom outline width in points.  ``0`` disables
            outlines.
        line_width: Width of bond and cell-edge lines in points.
        circle_segments: Number of polygon segments per atom circle.
    """

    def __init__(
        self,
        *,
        outline_colour: Colour = "black",
        outline_width: float = 0.8,
        line_width: float = 1.5,
        circle_segments: int = 24,
    ) -> None:
        if circle_segments < 3:
            raise ValueError(
                f"circle_segments must be at least 3, got {circle_segments}"
            )
        self.outline_colour = normalise_colour(outline_colour)
        self.outline_width = outline_width
        self.line_width = line_width
        self._unit_circle = _make_unit_circle(circle_segments)
        self._state = SceneState.empty()
        self.ops_applied = 0

    @property
    def state(self) -> SceneState:
        return self._state

    def apply(self, ops: Iterable[SceneOp]) -> None:
        """Replay scene operations onto the adapter's scene."""
        ops = list(ops)
        self._state = self._state.apply(ops)
        self.ops_applied += len(ops)

    def draw(self, ax: Axes, transforms: CameraTransforms) -> None:
        """Draw the current scene into *ax* as seen through *transforms*.

        Screen coordinates run from ``-aspect`` to ``aspect``
        horizontally and ``-1`` to ``1`` vertically.  Anything behind
        the camera is skipped.
        """
        proj = transforms.projection
        aspect = proj[1, 1] / proj[0, 0]

        segments, seg_colours = self._project_lines(transforms, aspect)
        if segments:
            ax.add_collection(LineCollection(
                segments,
                colors=seg_colours,
                linewidths=self.line_width,
                zorder=_LINE_ZORDER,
            ))

        atoms = self._state.atoms
        if atoms:
            centres = np.array([a.position for a in atoms])
            ndc, w = project_points(centres, transforms)
            visible = np.flatnonzero(w > 0)
            # Farthest first so nearer atoms paint over them.
            order = visible[np.argsort(-w[visible], kind="stable")]
            verts = []
            face_colours = []
            for idx in order:
                atom = atoms[idx]
                screen_r = atom.radius * proj[1, 1] / w[idx]
                xy = np.array([ndc[idx, 0] * aspect, ndc[idx, 1]])
                verts.append(self._unit_circle * screen_r + xy)
                face_colours.append((*atom.colour, 1.0))
            if verts:
                ax.add_collection(PolyCollection(
                    verts,
                    closed=True,
                    facecolors=face_colours,
                    edgecolors=[(*self.outline_colour, 1.0)] * len(verts),
                    linewidths=self.outline_width,
                    zorder=_ATOM_ZORDER,
                ))

        ax.set_aspect("equal")
        ax.set_xlim(-aspect, aspect)
        ax.set_ylim(-1.0, 1.0)
        ax.axis("off")

    def _project_lines(
        self,
        transforms: CameraTransforms,
        aspect: float,
    ) -> tuple[list[np.ndarray], list[tuple[float, float, float, float]]]:
        lines = [*self._state.cell_edges, *self._state.bonds]
        if not lines:
            return [], []
        ends = np.array([[line.start, line.end] for line in lines]).reshape(-1, 3)
        ndc, w = project_points(ends, transforms)
        xy = np.column_stack([ndc[:, 0] * aspect, ndc[:, 1]]).reshape(-1, 2, 2)
        w = w.reshape(-1, 2)
        segments = []
        colours = []
        for line, seg, depth in zip(lines, xy, w):
            if np.all(depth > 0):
                segments.append(seg)
                colours.append((*line.colour, 1.0))
        return segments, colours

    def render(
        self,
        transforms: CameraTransforms,
        output: str | Path | None = None,
        *,
        ax: Axes | None = None,
        figsize: tuple[float, float] = (5.0, 5.0),
        dpi: int = 150,
        background: Colour = "white",
        show: bool | None = None,
    ) -> Figure:
        """Render the current scene to a matplotlib figure.

        Args:
            transforms: Camera output for this frame, usually from
                :meth:`~bragg.engine.SceneEngine.frame`.  Pass the
                figure's width/height as the aspect there to avoid
                distortion.
            output: Optional file path to save the figure to.
            ax: Optional existing axes to draw into.  When given, the
                figure is neither saved nor shown.
            figsize: Figure size in inches ``(width, height)``.
            dpi: Resolution for saved output.
            background: Figure background colour.
            show: Whether to call ``plt.show()``.  Defaults to ``True``
                when no *output* is given.

        Returns:
            The matplotlib :class:`~matplotlib.figure.Figure` object.
        """
        if ax is not None:
            fig = ax.get_figure()
            if not isinstance(fig, Figure):
                raise ValueError("ax is not attached to a Figure")
            self.draw(ax, transforms)
            return fig

        fig, ax = plt.subplots(1, 1, figsize=figsize, dpi=dpi)
        fig.set_facecolor(normalise_colour(background))
        self.draw(ax, transforms)
        fig.tight_layout()

        if output is not None:
            fig.savefig(str(output), dpi=dpi, bbox_inches="tight")

        if show is None:
            show = output is None

        if show:
            plt.show()
        else:
            plt.close(fig)

        return fig
