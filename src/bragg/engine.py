"""The structure-to-scene engine facade.

:class:`SceneEngine` is the boundary between bragg and the host
application.  Structures and view parameters go in; ordered scene
operations come out, and the camera is polled once per frame.

Recomputes run synchronously through :meth:`SceneEngine.set_structure`
and :meth:`SceneEngine.set_view_parameters`.  For structures too large
to recompute inside one frame, :meth:`SceneEngine.request_structure`
and :meth:`SceneEngine.request_view_parameters` hand the work to a
single background thread and :meth:`SceneEngine.poll` commits the
result on a later frame.  Every request bumps a generation counter;
only a result whose generation is still current is committed, so a
newer edit always wins and stale results are dropped.
"""

from __future__ import annotations

import logging
from concurrent import futures
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from bragg._constants import SCENE_EPSILON
from bragg.bonds import BondCutoffTable, compute_bonds
from bragg.camera import CameraConfig, CameraController, CameraTransforms, PointerEvent
from bragg.exceptions import RecomputeCancelled
from bragg.geometry import (
    compute_positions,
    scene_extent,
    structure_centroid,
    unit_cell_edges,
    validate_lattice,
)
from bragg.model import (
    CrystalStructure,
    RenderAtom,
    RenderBond,
    SceneOp,
    SceneState,
    UnitCellEdge,
    ViewParameters,
)
from bragg.sync import SceneSynchronizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SceneContent:
    """A complete recompute result, ready to be committed in one step."""

    atoms: list[RenderAtom]
    bonds: list[RenderBond]
    cell_edges: list[UnitCellEdge]


def build_scene(structure: CrystalStructure, params: ViewParameters) -> SceneContent:
    """Run geometry and bond inference for one structure revision.

    Pure: safe to call from a worker thread.

    Raises:
        InvalidLattice: If the lattice is degenerate or left-handed.
        InvalidViewParameters: If *params* fail validation.
    """
    params.validate()
    atoms = compute_positions(
        structure, params.replication, atom_styles=params.atom_styles,
    )
    bonds = (
        compute_bonds(atoms, BondCutoffTable.from_view_parameters(params))
        if params.show_bonds else []
    )
    edges = unit_cell_edges(structure.lattice) if params.show_unit_cell else []
    return SceneContent(atoms=atoms, bonds=bonds, cell_edges=edges)


@dataclass(eq=False)
class _PendingRecompute:
    generation: int
    structure: CrystalStructure
    params: ViewParameters
    future: Future


class SceneEngine:
    """Stateful front end over the pure geometry/bond/sync pipeline.

    Args:
        view_parameters: Initial view parameters.  Defaults to
            ``ViewParameters()``.
        camera_config: Navigation constants for the camera.
        epsilon: Float tolerance for scene diffing.

    Example::

        engine = SceneEngine()
        ops = engine.set_structure(structure)
        adapter.apply(ops)
        ...
        transforms = engine.pointer_event(event)
    """

    def __init__(
        self,
        view_parameters: ViewParameters | None = None,
        *,
        camera_config: CameraConfig | None = None,
        epsilon: float = SCENE_EPSILON,
    ) -> None:
        params = view_parameters if view_parameters is not None else ViewParameters()
        params.validate()
        self._params = params.copy()
        self._structure: CrystalStructure | None = None
        self._sync = SceneSynchronizer(epsilon)
        self._camera = CameraController(config=camera_config or CameraConfig())
        self._framed = False
        self._generation = 0
        self._inflight: list[_PendingRecompute] = []
        self._executor: ThreadPoolExecutor | None = None
        self._disposed = False

    # -- properties -------------------------------------------------------

    @property
    def state(self) -> SceneState:
        """The last committed scene."""
        return self._sync.state

    @property
    def structure(self) -> CrystalStructure | None:
        return self._structure

    @property
    def view_parameters(self) -> ViewParameters:
        """A copy of the current view parameters."""
        return self._params.copy()

    @property
    def camera(self) -> CameraController:
        return self._camera

    @property
    def generation(self) -> int:
        """Number of recomputes requested so far."""
        return self._generation

    @property
    def busy(self) -> bool:
        """Whether a background recompute for the current generation is running."""
        return any(p.generation == self._generation for p in self._inflight)

    # -- synchronous pipeline ----------------------------------------------

    def set_structure(self, structure: CrystalStructure) -> list[SceneOp]:
        """Replace the structure and recompute the scene.

        Returns:
            The scene operations that bring the render backend up to date.

        Raises:
            InvalidLattice: If the lattice is degenerate or left-handed.
                The previous scene and structure are kept.
        """
        _, params = self._latest_request()
        return self._recompute(structure, params)

    def set_view_parameters(self, params: ViewParameters) -> list[SceneOp]:
        """Replace the view parameters and recompute the scene.

        The structure used is the most recent one set or requested, so
        a pending :meth:`request_structure` is not rolled back.  With no
        structure yet, the parameters are stored and no operations are
        returned.

        Raises:
            InvalidViewParameters: If *params* are invalid.  The
                previous scene and parameters are kept.
        """
        params = params.copy()
        params.validate()
        structure, _ = self._latest_request()
        if structure is None:
            self._check_alive()
            self._generation += 1
            self._params = params
            return []
        return self._recompute(structure, params)

    def _recompute(self, structure: CrystalStructure, params: ViewParameters) -> list[SceneOp]:
        self._check_alive()
        self._generation += 1
        content = build_scene(structure, params)
        return self._commit(structure, params, content)

    def _commit(
        self,
        structure: CrystalStructure,
        params: ViewParameters,
        content: SceneContent,
    ) -> list[SceneOp]:
        ops = self._sync.commit(content.atoms, content.bonds, content.cell_edges)
        if structure is not self._structure:
            logger.info(
                "loaded structure %r: %d sites, %d atoms, %d bonds",
                structure.title, len(structure), len(content.atoms),
                len(content.bonds),
            )
        self._structure = structure
        self._params = params
        if not self._framed:
            self._frame_camera(structure, content.atoms)
        return ops

    def _frame_camera(self, structure: CrystalStructure, atoms: list[RenderAtom]) -> None:
        centre = structure_centroid(structure)
        extent = scene_extent(atoms, centre)
        self._camera.frame_sphere(centre, extent)
        self._framed = True

    # -- background pipeline -----------------------------------------------

    def request_structure(self, structure: CrystalStructure) -> int:
        """Start a background recompute for a new structure.

        The lattice is validated here, so invalid input fails
        immediately rather than on a later :meth:`poll`.

        Returns:
            The generation number of the request.

        Raises:
            InvalidLattice: If the lattice is degenerate or left-handed.
        """
        validate_lattice(structure.lattice)
        _, params = self._latest_request()
        return self._submit(structure, params.copy())

    def request_view_parameters(self, params: ViewParameters) -> int:
        """Start a background recompute for new view parameters.

        Raises:
            InvalidViewParameters: If *params* are invalid.
            RuntimeError: If no structure has been set or requested.
        """
        params = params.copy()
        params.validate()
        structure, _ = self._latest_request()
        if structure is None:
            raise RuntimeError("no structure to recompute; call set_structure first")
        return self._submit(structure, params)

    def _latest_request(self) -> tuple[CrystalStructure | None, ViewParameters]:
        """Structure and parameters of the newest edit, pending or committed."""
        for pending in reversed(self._inflight):
            if pending.generation == self._generation:
                return pending.structure, pending.params
        return self._structure, self._params

    def _submit(self, structure: CrystalStructure, params: ViewParameters) -> int:
        self._check_alive()
        self._generation += 1
        for pending in self._inflight:
            pending.future.cancel()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="bragg-recompute",
            )
        future = self._executor.submit(build_scene, structure, params)
        self._inflight.append(
            _PendingRecompute(self._generation, structure, params, future)
        )
        logger.debug("submitted background recompute %d", self._generation)
        return self._generation

    def poll(self) -> list[SceneOp]:
        """Commit a finished background recompute, if any.

        Call once per frame.  Stale results are discarded.  Returns an
        empty list when nothing new is ready.

        Raises:
            Exception: Whatever the current recompute raised.  The
                previous scene is kept.
        """
        self._check_alive()
        ops: list[SceneOp] = []
        for pending in list(self._inflight):
            if not pending.future.done():
                continue
            self._inflight.remove(pending)
            try:
                self._ensure_current(pending.generation)
            except RecomputeCancelled as exc:
                logger.debug("discarding background result: %s", exc)
                continue
            content = pending.future.result()
            ops = self._commit(pending.structure, pending.params, content)
        return ops

    def wait(self, timeout: float | None = None) -> list[SceneOp]:
        """Block until the current background recompute finishes, then poll.

        Intended for scripts and tests; an interactive host should call
        :meth:`poll` from its frame loop instead.
        """
        current = [
            p.future for p in self._inflight if p.generation == self._generation
        ]
        futures.wait(current, timeout=timeout)
        return self.poll()

    def _ensure_current(self, generation: int) -> None:
        if generation != self._generation:
            raise RecomputeCancelled(generation, self._generation)

    # -- camera -------------------------------------------------------------

    def pointer_event(self, event: PointerEvent, aspect: float = 1.0) -> CameraTransforms:
        """Feed one pointer event to the camera and return the new transforms."""
        self._camera.handle(event)
        return self._camera.transforms(aspect)

    def frame(self, aspect: float = 1.0) -> CameraTransforms:
        """Current camera transforms, polled once per frame by the renderer."""
        return self._camera.transforms(aspect)

    def reset_view(self, *, fov: float | None = None) -> CameraTransforms:
        """Re-frame the camera on the current structure.

        Also the only way to change the field of view.
        """
        if fov is not None:
            self._camera.reset_view(fov=fov)
        if self._structure is not None:
            self._frame_camera(self._structure, self.state.atoms)
        else:
            self._camera.reset_view(pivot=np.zeros(3))
        return self._camera.transforms()

    # -- lifecycle ------------------------------------------------------------

    def dispose(self) -> list[SceneOp]:
        """Tear down the scene and the worker thread.

        Returns:
            Removals for every entity still in the scene, so a render
            backend can release its resources.
        """
        if self._disposed:
            return []
        self._generation += 1
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        self._inflight = []
        ops = self._sync.reset()
        self._structure = None
        self._disposed = True
        return ops

    def __enter__(self) -> SceneEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()

    def _check_alive(self) -> None:
        if self._disposed:
            raise RuntimeError("engine has been disposed")
