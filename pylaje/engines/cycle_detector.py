from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
from pylaje.models.entities import LineShape, Point, Shape

GridKey = Tuple[int, int]

@dataclass(frozen=True)
class CycleResult:
    points: Tuple[Point, ...]   # Vértices do polígono, em ordem de percurso
    line_ids: Tuple[str, ...]   # Linhas consumidas pelo ciclo

class CycleDetector:
    """
    Detecta um circuito fechado de linhas soltas (>= 3 segmentos encadeados)
    para convertê-lo em polígono de laje.

    Os vértices são comparados numa grade quantizada (precision, em metros) para
    tolerar o ruído de ponto flutuante das transformações de tela. O polígono
    resultante usa a coordenada original do primeiro ponto visto em cada vértice.
    """

    def __init__(self, precision: float = 1e-4):
        self.precision = precision

    def _key(self, p: Point) -> GridKey:
        return (round(p.x / self.precision), round(p.y / self.precision))

    def find_cycle(self, shapes: Iterable[Shape]) -> Optional[CycleResult]:
        """
        Retorna o primeiro ciclo encontrado ou None. Não altera a entrada.
        Formas que não são linhas são ignoradas.
        """
        adjacency: Dict[GridKey, List[Tuple[str, GridKey]]] = {}
        vertex_points: Dict[GridKey, Point] = {}

        for shape in shapes:
            if not isinstance(shape, LineShape):
                continue
            p1, p2 = shape.points
            k1, k2 = self._key(p1), self._key(p2)
            if k1 == k2:
                continue  # linha de comprimento nulo
            vertex_points.setdefault(k1, p1)
            vertex_points.setdefault(k2, p2)
            adjacency.setdefault(k1, []).append((shape.id, k2))
            adjacency.setdefault(k2, []).append((shape.id, k1))

        for start, edges in adjacency.items():
            if len(edges) < 2:
                continue
            found = self._walk(adjacency, start, [start], [])
            if found:
                nodes, line_ids = found
                return CycleResult(
                    points=tuple(vertex_points[k] for k in nodes),
                    line_ids=tuple(line_ids),
                )
        return None

    def _walk(self, adjacency: Dict[GridKey, List[Tuple[str, GridKey]]], start: GridKey,
              nodes: List[GridKey], line_ids: List[str]) -> Optional[Tuple[List[GridKey], List[str]]]:
        """Busca em profundidade com retrocesso a partir do último nó do caminho."""
        current = nodes[-1]
        for line_id, other in adjacency[current]:
            if line_id in line_ids:
                continue
            if other == start:
                if len(line_ids) >= 2:
                    return list(nodes), line_ids + [line_id]
                continue
            if other in nodes:
                continue

            nodes.append(other)
            line_ids.append(line_id)
            found = self._walk(adjacency, start, nodes, line_ids)
            if found:
                return found
            nodes.pop()
            line_ids.pop()
        return None
