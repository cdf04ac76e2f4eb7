import math
from typing import Sequence, Tuple
import numpy as np
from pylaje.models.entities import Point, ViewState, GeometryError

# --- TRANSFORMAÇÃO DE VISTA (tela <-> mundo) ---

def screen_to_world(p: Point, view: ViewState) -> Point:
    """(p - offset) / scale. A escala é validada pelo ViewState (> 0)."""
    return Point((p.x - view.offset.x) / view.scale, (p.y - view.offset.y) / view.scale)

def world_to_screen(p: Point, view: ViewState) -> Point:
    return Point(p.x * view.scale + view.offset.x, p.y * view.scale + view.offset.y)

# --- VETORES E ÂNGULOS ---

def distance(a: Point, b: Point) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)

def line_length(a: Point, b: Point) -> float:
    return distance(a, b)

def midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)

def angle_degrees(a: Point, b: Point) -> float:
    """Ângulo de a -> b em graus, faixa (-180, 180]."""
    angle = math.degrees(math.atan2(b.y - a.y, b.x - a.x))
    # atan2 devolve -180 para (-x, -0.0)
    return 180.0 if angle == -180.0 else angle

def point_from_length_angle(origin: Point, length: float, angle_deg: float) -> Point:
    """Inverso de angle_degrees: ponto final a partir de comprimento e ângulo."""
    if length < 0:
        raise GeometryError(f"Comprimento negativo ({length}).")
    rad = math.radians(angle_deg)
    return Point(origin.x + length * math.cos(rad), origin.y + length * math.sin(rad))

def orthogonal_point(start: Point, current: Point) -> Point:
    """Modo ortogonal: trava o cursor no eixo dominante."""
    if abs(current.x - start.x) >= abs(current.y - start.y):
        return Point(current.x, start.y)
    return Point(start.x, current.y)

def closest_point_on_segment(p: Point, v: Point, w: Point) -> Point:
    l2 = (w.x - v.x) ** 2 + (w.y - v.y) ** 2
    if l2 == 0:
        return v
    t = ((p.x - v.x) * (w.x - v.x) + (p.y - v.y) * (w.y - v.y)) / l2
    t = max(0.0, min(1.0, t))
    return Point(v.x + t * (w.x - v.x), v.y + t * (w.y - v.y))

# --- POLÍGONOS ---

def polygon_area(points: Sequence[Point]) -> float:
    """
    Fórmula do cadarço (shoelace), valor absoluto.
    Retorna 0 para menos de 3 pontos ou polígonos degenerados.
    """
    if len(points) < 3:
        return 0.0
    xs = np.array([p.x for p in points], dtype=float)
    ys = np.array([p.y for p in points], dtype=float)
    area = np.dot(xs, np.roll(ys, -1)) - np.dot(np.roll(xs, -1), ys)
    return float(abs(area) / 2.0)

def bounding_box(points: Sequence[Point]) -> Tuple[float, float]:
    """(largura, altura) do retângulo envolvente."""
    if not points:
        return (0.0, 0.0)
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return (max(xs) - min(xs), max(ys) - min(ys))

def point_in_polygon(p: Point, vertices: Sequence[Point]) -> bool:
    """Teste par-ímpar (ray casting)."""
    inside = False
    j = len(vertices) - 1
    for i in range(len(vertices)):
        xi, yi = vertices[i].x, vertices[i].y
        xj, yj = vertices[j].x, vertices[j].y
        if (yi > p.y) != (yj > p.y):
            x_cross = (xj - xi) * (p.y - yi) / (yj - yi) + xi
            if p.x < x_cross:
                inside = not inside
        j = i
    return inside
