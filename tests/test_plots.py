"""Tests for pylaje/ui/plots.py plan drawing (Agg backend, no window)."""
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

import pytest
from pylaje.models.entities import (
    ArrowShape, DimensionShape, LineShape, Point, ProjectSnapshot, RibShape, TransverseRibConfig, VigotaShape,
)
from pylaje.ui.plots import SlabPlotter


@pytest.fixture
def snapshot(rect_4x3):
    return ProjectSnapshot(shapes=(
        rect_4x3,
        LineShape(id="l", points=(Point(5, 0), Point(6, 0))),
        DimensionShape(id="d", points=(Point(0, -1), Point(4, -1))),
        ArrowShape(id="a", points=(Point(5, 1), Point(5, 2)), is_joist=True, label="L1"),
        VigotaShape(id="v", points=(Point(1, 0.5), Point(1, 2.5))),
        RibShape(id="r", points=(Point(0, 1), Point(4, 1)), rib_config=TransverseRibConfig()),
    ))


class TestSlabPlotter:
    def test_returns_figure(self, snapshot):
        fig = SlabPlotter.plot_project(snapshot, show=False)
        try:
            ax = fig.axes[0]
            assert ax.get_title() == "Planta de Lajes"
            assert len(ax.patches) >= 1
        finally:
            plt.close(fig)

    def test_draws_generated_joists(self, snapshot):
        fig = SlabPlotter.plot_project(snapshot, show=False)
        try:
            # 10 vigotas + linha + cota + vigota avulsa + nervura
            assert len(fig.axes[0].lines) >= 14
        finally:
            plt.close(fig)

    def test_slab_label_drawn(self, snapshot):
        fig = SlabPlotter.plot_project(snapshot, show=False)
        try:
            texts = [t.get_text() for t in fig.axes[0].texts]
            assert any(t.startswith("L1") for t in texts)
        finally:
            plt.close(fig)

    def test_save_path(self, snapshot, tmp_path):
        path = tmp_path / "planta.png"
        fig = SlabPlotter.plot_project(snapshot, show=False, save_path=str(path))
        plt.close(fig)
        assert path.exists()

    def test_empty_project(self):
        fig = SlabPlotter.plot_project(ProjectSnapshot(), show=False)
        plt.close(fig)

    def test_draws_on_given_axes(self, snapshot):
        fig, ax = plt.subplots()
        try:
            assert SlabPlotter.plot_project(snapshot, show=False, ax=ax) is fig
        finally:
            plt.close(fig)
