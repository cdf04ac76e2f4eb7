import matplotlib.pyplot as plt
import matplotlib.patches as patches
import numpy as np
from pylaje.models.entities import (
    ArrowShape, DimensionShape, LineShape, ProjectSnapshot, RibShape, SlabShape, VigotaShape,
)
from pylaje.engines.quantity_aggregator import QuantityAggregator

SLAB_COLORS = ['#3498db', '#2ecc71', '#e67e22', '#9b59b6', '#1abc9c', '#e74c3c']

class SlabPlotter:
    """
    Responsável por gerar a planta de lajes: panos, vigotas lançadas,
    vigotas avulsas, nervuras, cotas e setas de direção.
    """

    @staticmethod
    def plot_project(snapshot: ProjectSnapshot, show=True, save_path=None, ax=None):
        """
        Desenha o projeto inteiro numa figura (ou no eixo informado) e devolve a figura.
        """
        if ax is None:
            fig, ax = plt.subplots(figsize=(10, 8))
        else:
            fig = ax.figure

        SlabPlotter.draw_project(ax, snapshot)

        if save_path:
            fig.savefig(save_path)
            print(f"Planta salva em: {save_path}")

        if show:
            plt.show()
        return fig

    @staticmethod
    def draw_project(ax, snapshot: ProjectSnapshot, aggregator: QuantityAggregator = None):
        aggregator = aggregator or QuantityAggregator()
        layout_engine = aggregator.layout_engine

        # --- 1. Panos de laje + vigotas geradas ---
        for i, slab in enumerate(snapshot.slabs):
            color = SLAB_COLORS[i % len(SLAB_COLORS)]
            SlabPlotter._draw_slab(ax, slab, color)

            axis = aggregator.resolve_joist_axis(slab, snapshot.shapes)
            layout = layout_engine.generate_for_slab(slab, axis) if axis else None
            if layout:
                for line in layout.beam_lines:
                    ax.plot([line.start.x, line.end.x], [line.start.y, line.end.y],
                            color='#34495e', linewidth=1.2)

        # --- 2. Demais formas ---
        for shape in snapshot.shapes:
            if isinstance(shape, SlabShape):
                continue
            xs = [p.x for p in shape.points]
            ys = [p.y for p in shape.points]

            if isinstance(shape, VigotaShape):
                ax.plot(xs, ys, color='#c0392b', linewidth=2, linestyle='--')
            elif isinstance(shape, RibShape):
                ax.plot(xs, ys, color='#8e44ad', linewidth=3, alpha=0.6)
            elif isinstance(shape, ArrowShape):
                SlabPlotter._draw_arrow(ax, shape)
            elif isinstance(shape, DimensionShape):
                ax.plot(xs, ys, color='gray', linewidth=0.8)
                mid = shape.midpoint
                ax.text(mid.x, mid.y, f"{shape.length:.2f}", ha='center', va='bottom', fontsize=8, color='gray')
            elif isinstance(shape, LineShape):
                ax.plot(xs, ys, color='black', linewidth=1)

        ax.set_title("Planta de Lajes")
        ax.set_xlabel("X (m)")
        ax.set_ylabel("Y (m)")
        ax.set_aspect('equal')
        ax.grid(True, linestyle='--', alpha=0.4)
        ax.autoscale_view()

    @staticmethod
    def _draw_slab(ax, slab: SlabShape, color: str):
        coords = np.array([[p.x, p.y] for p in slab.points])
        polygon = patches.Polygon(coords, closed=True, facecolor=color, edgecolor='black',
                                  alpha=0.25, linewidth=1.5)
        ax.add_patch(polygon)

        cx, cy = coords.mean(axis=0)
        text = slab.label or slab.id
        if slab.slab_config:
            text += f"\n{slab.slab_config.slab_type.value}"
        ax.text(cx, cy, text, ha='center', va='center', fontsize=10, fontweight='bold',
                bbox=dict(facecolor='white', alpha=0.7, edgecolor='none'))

    @staticmethod
    def _draw_arrow(ax, arrow: ArrowShape):
        dx = arrow.end.x - arrow.start.x
        dy = arrow.end.y - arrow.start.y
        color = 'red' if arrow.is_joist else 'black'
        ax.arrow(arrow.start.x, arrow.start.y, dx, dy, head_width=0.1, head_length=0.15,
                 fc=color, ec=color, length_includes_head=True)
        if arrow.label:
            ax.text(arrow.start.x, arrow.start.y, arrow.label, color=color, fontsize=8)
