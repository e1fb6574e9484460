"""Tests for the matplotlib render adapter."""

import matplotlib.pyplot as plt
import numpy as np
import pytest
from matplotlib.collections import LineCollection, PolyCollection
from matplotlib.figure import Figure

from bragg.camera import CameraController
from bragg.engine import SceneEngine
from bragg.model import Add, AtomId, RenderAtom, SceneState, ViewParameters
from bragg.rendering.mpl_adapter import MplRenderAdapter


def _atom(index, position):
    return RenderAtom(
        identity=AtomId(index, 0, 0, 0),
        position=position,
        species="X",
        radius=0.5,
        colour=(0.5, 0.5, 0.5),
    )


@pytest.fixture
def loaded(rocksalt):
    """An engine and an adapter that has replayed its first scene."""
    engine = SceneEngine()
    adapter = MplRenderAdapter()
    adapter.apply(engine.set_structure(rocksalt))
    yield engine, adapter
    engine.dispose()


class TestApply:
    def test_starts_empty(self):
        adapter = MplRenderAdapter()
        assert adapter.state == SceneState.empty()
        assert adapter.ops_applied == 0

    def test_replay_matches_engine(self, loaded):
        engine, adapter = loaded
        assert adapter.state == engine.state
        assert adapter.ops_applied == len(engine.state)

    def test_replay_follows_edits(self, loaded):
        engine, adapter = loaded
        adapter.apply(engine.set_view_parameters(ViewParameters(show_bonds=False)))
        assert adapter.state == engine.state
        assert not adapter.state.bonds

    def test_accepts_generator(self):
        adapter = MplRenderAdapter()
        adapter.apply(Add(_atom(i, (float(i), 0.0, 0.0))) for i in range(3))
        assert len(adapter.state) == 3
        assert adapter.ops_applied == 3

    def test_dispose_empties(self, loaded):
        engine, adapter = loaded
        adapter.apply(engine.dispose())
        assert len(adapter.state) == 0


class TestDraw:
    def test_collections(self, loaded):
        engine, adapter = loaded
        fig, ax = plt.subplots()
        adapter.draw(ax, engine.frame())
        lines = [c for c in ax.collections if isinstance(c, LineCollection)]
        polys = [c for c in ax.collections if isinstance(c, PolyCollection)]
        assert len(lines) == 1
        assert len(polys) == 1
        assert len(lines[0].get_segments()) == (
            len(engine.state.bonds) + len(engine.state.cell_edges)
        )
        assert len(polys[0].get_paths()) == len(engine.state.atoms)
        assert polys[0].get_zorder() > lines[0].get_zorder()
        plt.close(fig)

    def test_axis_limits_follow_aspect(self, loaded):
        engine, adapter = loaded
        fig, ax = plt.subplots()
        adapter.draw(ax, engine.frame(aspect=2.0))
        assert ax.get_xlim() == pytest.approx((-2.0, 2.0))
        assert ax.get_ylim() == pytest.approx((-1.0, 1.0))
        plt.close(fig)

    def test_skips_atoms_behind_camera(self):
        cam = CameraController(distance=5.0)
        adapter = MplRenderAdapter()
        adapter.apply([
            Add(_atom(0, (0.0, 0.0, 0.0))),
            Add(_atom(1, tuple(cam.eye + 2.0 * cam.direction))),
        ])
        fig, ax = plt.subplots()
        adapter.draw(ax, cam.transforms())
        (polys,) = ax.collections
        assert len(polys.get_paths()) == 1
        plt.close(fig)

    def test_farthest_drawn_first(self):
        cam = CameraController(distance=10.0)
        near = tuple(cam.direction * 2.0)
        far = tuple(-cam.direction * 2.0)
        adapter = MplRenderAdapter()
        adapter.apply([Add(_atom(0, near)), Add(_atom(1, far))])
        fig, ax = plt.subplots()
        adapter.draw(ax, cam.transforms())
        (polys,) = ax.collections
        first, second = polys.get_paths()
        # Same screen centre; the nearer circle projects larger.
        assert np.ptp(second.vertices[:, 0]) > np.ptp(first.vertices[:, 0])
        plt.close(fig)

    def test_empty_scene(self):
        adapter = MplRenderAdapter()
        fig, ax = plt.subplots()
        adapter.draw(ax, CameraController().transforms())
        assert not ax.collections
        plt.close(fig)


class TestRender:
    def test_returns_figure(self, loaded):
        engine, adapter = loaded
        fig = adapter.render(engine.frame(), show=False)
        assert isinstance(fig, Figure)

    def test_saves_to_file(self, loaded, tmp_path):
        engine, adapter = loaded
        out = tmp_path / "nacl.png"
        adapter.render(engine.frame(), output=out)
        assert out.exists()
        assert out.stat().st_size > 0

    def test_saves_svg(self, loaded, tmp_path):
        engine, adapter = loaded
        out = tmp_path / "nacl.svg"
        adapter.render(engine.frame(), output=str(out), background="black")
        assert out.exists()

    def test_draws_into_existing_axes(self, loaded):
        engine, adapter = loaded
        fig, ax = plt.subplots()
        returned = adapter.render(engine.frame(), ax=ax)
        assert returned is fig
        assert ax.collections
        plt.close(fig)


class TestConstruction:
    def test_too_few_segments(self):
        with pytest.raises(ValueError, match="at least 3"):
            MplRenderAdapter(circle_segments=2)

    def test_outline_colour_normalised(self):
        adapter = MplRenderAdapter(outline_colour="white")
        assert adapter.outline_colour == (1.0, 1.0, 1.0)
