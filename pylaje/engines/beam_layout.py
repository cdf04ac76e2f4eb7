import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import numpy as np
from pylaje.models.entities import JoistAxis, Point, SlabShape
from pylaje.engines.geometry import polygon_area

@dataclass(frozen=True)
class BeamLine:
    """Trecho de uma vigota dentro do pano (já recortado e com exclusões aplicadas)."""
    start: Point
    end: Point
    offset: float = 0.0  # posição transversal da vigota (m)

    @property
    def length(self) -> float:
        return math.hypot(self.end.x - self.start.x, self.end.y - self.start.y)

    def to_dict(self) -> Dict:
        return {"start": self.start.to_dict(), "end": self.end.to_dict(), "length": self.length}


@dataclass(frozen=True)
class LayoutResult:
    beam_lines: Tuple[BeamLine, ...] = ()

    @property
    def joist_count(self) -> int:
        return len(self.beam_lines)

    @property
    def lengths(self) -> List[float]:
        return [line.length for line in self.beam_lines]

    @property
    def total_length(self) -> float:
        return sum(self.lengths)


class BeamLayoutEngine:
    """
    Gerador do lançamento de vigotas.

    As vigotas correm paralelas à direção d = (target - origin) e são distribuídas
    ao longo da perpendicular n, a partir do extremo do pano, com passo = inter-eixo.
    Cada linha candidata é recortada contra as arestas do polígono (pode gerar mais
    de um trecho em polígonos côncavos) e depois encurtada pelas zonas de exclusão,
    medidas a partir das extremidades do pano ao longo de d.
    """

    # Tolerâncias (m)
    BOUNDARY_EPS = 1e-9
    MIN_SEGMENT = 1e-6

    def generate(self, polygon: Sequence[Point], origin: Point, target: Point,
                 inter_eixo: float, initial_exclusion: float = 0.0,
                 final_exclusion: float = 0.0) -> LayoutResult:
        """
        inter_eixo e exclusões em metros.
        Entradas inviáveis (passo <= 0, eixo nulo, exclusões >= extensão) resultam em
        lançamento vazio, nunca em exceção.
        """
        if len(polygon) < 3 or inter_eixo <= 0:
            return LayoutResult()

        dx = target.x - origin.x
        dy = target.y - origin.y
        norm = math.hypot(dx, dy)
        if norm == 0:
            return LayoutResult()

        d = np.array([dx, dy]) / norm
        n = np.array([-d[1], d[0]])

        # 1. Projeções dos vértices (relativas à origem)
        rel = np.array([[p.x, p.y] for p in polygon], dtype=float) - np.array([origin.x, origin.y])
        proj = rel @ d
        perp = rel @ n

        min_proj, max_proj = float(proj.min()), float(proj.max())
        min_perp, max_perp = float(perp.min()), float(perp.max())

        # 2. Faixa útil ao longo de d (exclusões a partir das extremidades do pano)
        lo = min_proj + initial_exclusion
        hi = max_proj - final_exclusion
        if hi - lo <= self.MIN_SEGMENT:
            return LayoutResult()

        extent = max_perp - min_perp
        eps = self.BOUNDARY_EPS * max(1.0, extent)
        if extent <= 2 * eps:
            return LayoutResult()

        # 3. Linhas candidatas: min_perp + k * inter_eixo enquanto <= max_perp
        count = int(math.floor(extent / inter_eixo + 1e-9)) + 1

        lines = []
        for k in range(count):
            offset = min(min_perp + k * inter_eixo, max_perp)
            # Candidatas sobre o contorno são avaliadas ligeiramente para dentro
            offset_eval = min(max(offset, min_perp + eps), max_perp - eps)

            # 4. Trechos internos + 5. exclusões
            for t_start, t_end in self._inside_intervals(proj, perp, offset_eval):
                a = max(t_start, lo)
                b = min(t_end, hi)
                if b - a <= self.MIN_SEGMENT:
                    continue
                lines.append(BeamLine(
                    start=self._to_world(origin, d, n, a, offset),
                    end=self._to_world(origin, d, n, b, offset),
                    offset=offset,
                ))

        return LayoutResult(beam_lines=tuple(lines))

    def generate_for_slab(self, slab: SlabShape, axis: Optional[JoistAxis] = None) -> Optional[LayoutResult]:
        """
        Lançamento de um pano configurado. Usa o eixo informado ou o da própria laje.
        Retorna None se a laje não tiver configuração ou direção de vigotas.
        """
        axis = axis or slab.joist_axis
        config = slab.slab_config
        if axis is None or config is None:
            return None
        return self.generate(
            slab.points, axis.origin, axis.target,
            config.inter_eixo_m, config.initial_exclusion_m, config.final_exclusion_m,
        )

    @staticmethod
    def net_area(polygon: Sequence[Point], beam_lines: Sequence[BeamLine], beam_width: float) -> float:
        """Área do pano descontada a faixa ocupada pelas vigotas (beam_width em metros)."""
        occupied = sum(beam_width * line.length for line in beam_lines)
        return max(0.0, polygon_area(polygon) - occupied)

    @staticmethod
    def _inside_intervals(proj: np.ndarray, perp: np.ndarray, offset: float) -> List[Tuple[float, float]]:
        """
        Cruzamentos da linha perp == offset com as arestas, ordenados ao longo de d
        e agrupados em pares (entrada, saída).
        Regra semiaberta (perp > offset) para não contar duas vezes um vértice.
        """
        s_a, s_b = perp, np.roll(perp, -1)
        t_a, t_b = proj, np.roll(proj, -1)

        crossing = (s_a > offset) != (s_b > offset)
        if not crossing.any():
            return []

        s_a, s_b = s_a[crossing], s_b[crossing]
        t_a, t_b = t_a[crossing], t_b[crossing]
        t = np.sort(t_a + (offset - s_a) * (t_b - t_a) / (s_b - s_a))

        return [(float(t[i]), float(t[i + 1])) for i in range(0, len(t) - 1, 2)]

    @staticmethod
    def _to_world(origin: Point, d: np.ndarray, n: np.ndarray, t: float, s: float) -> Point:
        return Point(float(origin.x + t * d[0] + s * n[0]), float(origin.y + t * d[1] + s * n[1]))
