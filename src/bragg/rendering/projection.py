"""Projection helpers for drawing camera output in two dimensions."""

from __future__ import annotations

import numpy as np

from bragg.camera import CameraTransforms

# Default unit circle for atom rendering (closed polygon).
_N_CIRCLE = 24
_UNIT_CIRCLE = np.column_stack([
    np.cos(np.linspace(0, 2 * np.pi, _N_CIRCLE + 1)),
    np.sin(np.linspace(0, 2 * np.pi, _N_CIRCLE + 1)),
])


def _make_unit_circle(n: int) -> np.ndarray:
    """Build a unit circle polygon with *n* segments."""
    if n == _N_CIRCLE:
        return _UNIT_CIRCLE
    return np.column_stack([
        np.cos(np.linspace(0, 2 * np.pi, n + 1)),
        np.sin(np.linspace(0, 2 * np.pi, n + 1)),
    ])


def project_points(
    points: np.ndarray,
    transforms: CameraTransforms,
) -> tuple[np.ndarray, np.ndarray]:
    """Project world-space points through the camera.

    Args:
        points: Array of shape ``(n, 3)``.
        transforms: View and projection for the current frame.

    Returns:
        Tuple of ``(ndc, w)``.  *ndc* has shape ``(n, 3)``: x and y in
        ``[-1, 1]`` across the viewport for visible points, and z the
        clip-space depth.  *w* has shape ``(n,)`` and is the distance in
        front of the eye along the view axis; points with
        ``w <= 0`` are behind the camera and their *ndc* is meaningless.
    """
    pts = np.asarray(points, dtype=float).reshape(-1, 3)
    homo = np.column_stack([pts, np.ones(len(pts))])
    clip = homo @ (transforms.projection @ transforms.view).T
    w = clip[:, 3]
    with np.errstate(divide="ignore", invalid="ignore"):
        ndc = clip[:, :3] / w[:, None]
    return ndc, w
