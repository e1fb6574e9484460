"""Orbit/pan/zoom camera controller driven by pointer gestures.

The controller is a small state machine.  A drag gesture enters one of
:attr:`NavigationMode.ORBITING`, :attr:`NavigationMode.PANNING` or
:attr:`NavigationMode.ZOOMING` depending on the pointer button, and
returns to :attr:`NavigationMode.IDLE` when released.  Scroll events
zoom immediately without leaving idle.

The camera sits on a sphere around a pivot point.  Its position is
given by yaw (about the world y axis), pitch (elevation above the xz
plane) and distance.  World y is up.  The view and projection matrices
are pure functions of this state and follow the OpenGL conventions
(right-handed, camera looking down its local -z axis, clip-space depth
in ``[-1, 1]``).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import StrEnum

import numpy as np

_WORLD_UP = np.array([0.0, 1.0, 0.0])

# Initial direction from pivot to eye: the (1, 1, 1) diagonal.
_DIAGONAL_YAW = 45.0
_DIAGONAL_PITCH = math.degrees(math.atan(1.0 / math.sqrt(2.0)))


class NavigationMode(StrEnum):
    IDLE = "idle"
    ORBITING = "orbiting"
    PANNING = "panning"
    ZOOMING = "zooming"


class PointerKind(StrEnum):
    DRAG_START = "drag_start"
    DRAG = "drag"
    DRAG_END = "drag_end"
    SCROLL = "scroll"


class PointerButton(StrEnum):
    """Pointer button held during a drag.

    Attributes:
        PRIMARY: Orbits the camera around the pivot.
        SECONDARY: Pans the pivot.
        MIDDLE: Zooms by vertical drag distance.
    """

    PRIMARY = "primary"
    SECONDARY = "secondary"
    MIDDLE = "middle"


_GESTURES = {
    PointerButton.PRIMARY: NavigationMode.ORBITING,
    PointerButton.SECONDARY: NavigationMode.PANNING,
    PointerButton.MIDDLE: NavigationMode.ZOOMING,
}


@dataclass(frozen=True)
class PointerEvent:
    """A single pointer input for the camera.

    Attributes:
        kind: What happened.
        dx: Horizontal pointer motion in pixels since the last event
            (positive to the right).
        dy: Vertical pointer motion in pixels since the last event
            (positive downwards, as in screen coordinates).
        button: Button held for drag events.
        scroll: Scroll amount in notches; positive zooms in.
    """

    kind: PointerKind
    dx: float = 0.0
    dy: float = 0.0
    button: PointerButton = PointerButton.PRIMARY
    scroll: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", PointerKind(self.kind))
        object.__setattr__(self, "button", PointerButton(self.button))


@dataclass(frozen=True)
class CameraConfig:
    """Tuning constants for navigation.

    Attributes:
        orbit_sensitivity: Degrees of yaw/pitch per pixel dragged.
        pan_sensitivity: Pivot travel per pixel, as a fraction of the
            current distance, so panning feels the same at any zoom.
        zoom_factor: Distance multiplier per scroll notch.
        drag_zoom_sensitivity: Scroll notches per pixel of middle-drag.
        min_distance: Closest allowed distance to the pivot.
        max_distance: Farthest allowed distance from the pivot.
        pitch_limit: Largest absolute pitch in degrees.  Must stay
            below 90 so the view never flips over the pole.
        fov: Vertical field of view in degrees.
        near: Near clip plane distance.
        far: Far clip plane distance.
    """

    orbit_sensitivity: float = 0.3
    pan_sensitivity: float = 0.0015
    zoom_factor: float = 1.1
    drag_zoom_sensitivity: float = 0.05
    min_distance: float = 0.5
    max_distance: float = 500.0
    pitch_limit: float = 89.0
    fov: float = 45.0
    near: float = 0.01
    far: float = 1000.0

    def __post_init__(self) -> None:
        if self.min_distance <= 0:
            raise ValueError(
                f"min_distance must be positive, got {self.min_distance}"
            )
        if self.max_distance < self.min_distance:
            raise ValueError(
                f"max_distance ({self.max_distance}) must not be less than "
                f"min_distance ({self.min_distance})"
            )
        if not 0 < self.pitch_limit < 90:
            raise ValueError(
                f"pitch_limit must be in (0, 90), got {self.pitch_limit}"
            )
        if self.zoom_factor <= 1:
            raise ValueError(
                f"zoom_factor must be greater than 1, got {self.zoom_factor}"
            )
        _check_fov(self.fov)
        if not 0 < self.near < self.far:
            raise ValueError(
                f"need 0 < near < far, got near={self.near}, far={self.far}"
            )


def _check_fov(fov: float) -> None:
    if not 0 < fov < 180:
        raise ValueError(f"fov must be in (0, 180) degrees, got {fov}")


@dataclass(frozen=True)
class CameraTransforms:
    """Per-frame output consumed by a render adapter.

    Attributes:
        view: 4x4 world-to-camera matrix.
        projection: 4x4 perspective projection matrix.
        eye: Camera position in world coordinates.
        pivot: Point the camera orbits around and looks at.
        distance: Distance from eye to pivot.
        yaw: Yaw in degrees.
        pitch: Pitch in degrees.
        fov: Vertical field of view in degrees.
    """

    view: np.ndarray
    projection: np.ndarray
    eye: np.ndarray
    pivot: np.ndarray
    distance: float
    yaw: float
    pitch: float
    fov: float


def look_at(eye: np.ndarray, target: np.ndarray, up: np.ndarray = _WORLD_UP) -> np.ndarray:
    """World-to-camera matrix for a camera at *eye* looking at *target*.

    Raises:
        ValueError: If *eye* and *target* coincide or *up* is parallel
            to the viewing direction.
    """
    eye = np.asarray(eye, dtype=float)
    fwd = np.asarray(target, dtype=float) - eye
    fwd_len = np.linalg.norm(fwd)
    if fwd_len < 1e-12:
        raise ValueError("eye and target must differ")
    fwd /= fwd_len
    right = np.cross(fwd, up)
    right_len = np.linalg.norm(right)
    if right_len < 1e-12:
        raise ValueError("up vector is parallel to the viewing direction")
    right /= right_len
    true_up = np.cross(right, fwd)

    view = np.eye(4)
    view[0, :3] = right
    view[1, :3] = true_up
    view[2, :3] = -fwd
    view[:3, 3] = -view[:3, :3] @ eye
    return view


def perspective(fov: float, aspect: float, near: float, far: float) -> np.ndarray:
    """OpenGL-style perspective projection matrix.

    Args:
        fov: Vertical field of view in degrees.
        aspect: Viewport width divided by height.
        near: Near clip distance.
        far: Far clip distance.
    """
    if aspect <= 0:
        raise ValueError(f"aspect must be positive, got {aspect}")
    f = 1.0 / math.tan(math.radians(fov) / 2.0)
    proj = np.zeros((4, 4))
    proj[0, 0] = f / aspect
    proj[1, 1] = f
    proj[2, 2] = (far + near) / (near - far)
    proj[2, 3] = 2.0 * far * near / (near - far)
    proj[3, 2] = -1.0
    return proj


@dataclass
class CameraController:
    """Orbit camera state plus the gesture state machine.

    Attributes:
        config: Navigation tuning constants.
        pivot: Point the camera orbits around.
        distance: Distance from the pivot to the eye.
        yaw: Rotation about world y in degrees.
        pitch: Elevation in degrees, within ``±config.pitch_limit``.
        fov: Vertical field of view in degrees.  Only
            :meth:`reset_view` changes it.
        mode: Current gesture state.
    """

    config: CameraConfig = field(default_factory=CameraConfig)
    pivot: np.ndarray = field(default_factory=lambda: np.zeros(3))
    distance: float = 10.0
    yaw: float = _DIAGONAL_YAW
    pitch: float = _DIAGONAL_PITCH
    fov: float | None = None
    mode: NavigationMode = NavigationMode.IDLE

    def __post_init__(self) -> None:
        self.pivot = np.asarray(self.pivot, dtype=float).copy()
        if self.pivot.shape != (3,):
            raise ValueError(f"pivot must have shape (3,), got {self.pivot.shape}")
        if self.fov is None:
            self.fov = self.config.fov
        _check_fov(self.fov)
        self.distance = self._clamp_distance(self.distance)
        self.pitch = self._clamp_pitch(self.pitch)

    # -- state machine ----------------------------------------------------

    def handle(self, event: PointerEvent) -> NavigationMode:
        """Feed one pointer event and return the resulting mode.

        A ``drag`` with no active gesture and a ``drag_start`` during
        one are ignored.  ``drag_end`` always returns to idle.
        """
        if event.kind is PointerKind.DRAG_START:
            if self.mode is NavigationMode.IDLE:
                self.mode = _GESTURES[event.button]
        elif event.kind is PointerKind.DRAG:
            if self.mode is NavigationMode.ORBITING:
                self.orbit(event.dx, event.dy)
            elif self.mode is NavigationMode.PANNING:
                self.pan(event.dx, event.dy)
            elif self.mode is NavigationMode.ZOOMING:
                self.zoom(-event.dy * self.config.drag_zoom_sensitivity)
        elif event.kind is PointerKind.DRAG_END:
            self.mode = NavigationMode.IDLE
        elif event.kind is PointerKind.SCROLL:
            self.zoom(event.scroll)
        return self.mode

    # -- navigation -------------------------------------------------------

    def orbit(self, dx: float, dy: float) -> None:
        """Rotate about the pivot by a pointer delta in pixels."""
        s = self.config.orbit_sensitivity
        self.yaw = (self.yaw - dx * s) % 360.0
        self.pitch = self._clamp_pitch(self.pitch + dy * s)

    def pan(self, dx: float, dy: float) -> None:
        """Move the pivot in the camera's screen plane.

        Dragging right moves the scene right on screen, so the pivot
        moves left.  The step scales with distance to keep the apparent
        speed constant.
        """
        step = self.config.pan_sensitivity * self.distance
        right, up = self._screen_axes()
        self.pivot = self.pivot + step * (-dx * right + dy * up)

    def zoom(self, notches: float) -> None:
        """Scale the distance by ``zoom_factor ** -notches``, clamped.

        Works in log space so that any scroll size clamps instead of
        overflowing.
        """
        cfg = self.config
        log_d = math.log(self.distance) - notches * math.log(cfg.zoom_factor)
        if log_d >= math.log(cfg.max_distance):
            self.distance = cfg.max_distance
        elif log_d <= math.log(cfg.min_distance):
            self.distance = cfg.min_distance
        else:
            self.distance = self._clamp_distance(math.exp(log_d))

    def reset_view(
        self,
        *,
        pivot: np.ndarray | None = None,
        distance: float | None = None,
        yaw: float = _DIAGONAL_YAW,
        pitch: float = _DIAGONAL_PITCH,
        fov: float | None = None,
    ) -> None:
        """Return to a default view, optionally with a new pivot, distance or FOV.

        This is the only way to change the field of view.
        """
        if fov is not None:
            _check_fov(fov)
            self.fov = fov
        if pivot is not None:
            self.pivot = np.asarray(pivot, dtype=float).copy()
        if distance is not None:
            self.distance = self._clamp_distance(distance)
        self.yaw = yaw % 360.0
        self.pitch = self._clamp_pitch(pitch)
        self.mode = NavigationMode.IDLE

    def frame_sphere(self, centre: np.ndarray, radius: float) -> None:
        """Reset the view so a sphere of *radius* about *centre* fills it."""
        half_fov = math.radians(self.fov) / 2.0
        distance = max(radius, 1e-6) / math.sin(half_fov)
        self.reset_view(pivot=centre, distance=distance)

    # -- output -----------------------------------------------------------

    @property
    def direction(self) -> np.ndarray:
        """Unit vector from the pivot towards the eye."""
        yaw, pitch = math.radians(self.yaw), math.radians(self.pitch)
        return np.array([
            math.cos(pitch) * math.sin(yaw),
            math.sin(pitch),
            math.cos(pitch) * math.cos(yaw),
        ])

    @property
    def eye(self) -> np.ndarray:
        return self.pivot + self.distance * self.direction

    def transforms(self, aspect: float = 1.0) -> CameraTransforms:
        """View and projection for the current state.

        Args:
            aspect: Viewport width divided by height.
        """
        eye = self.eye
        return CameraTransforms(
            view=look_at(eye, self.pivot),
            projection=perspective(
                self.fov, aspect, self.config.near, self.config.far,
            ),
            eye=eye,
            pivot=self.pivot.copy(),
            distance=self.distance,
            yaw=self.yaw,
            pitch=self.pitch,
            fov=self.fov,
        )

    # -- helpers ----------------------------------------------------------

    def _screen_axes(self) -> tuple[np.ndarray, np.ndarray]:
        view = look_at(self.eye, self.pivot)
        return view[0, :3], view[1, :3]

    def _clamp_pitch(self, pitch: float) -> float:
        limit = self.config.pitch_limit
        return min(limit, max(-limit, pitch))

    def _clamp_distance(self, distance: float) -> float:
        return min(self.config.max_distance, max(self.config.min_distance, distance))
