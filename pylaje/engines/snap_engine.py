import math
from dataclasses import dataclass
from typing import AbstractSet, Iterable, Optional
from pylaje.models.entities import Point, Shape, ViewState

@dataclass(frozen=True)
class SnapResult:
    world_point: Point
    screen_point: Point
    pixel_distance: float

class SnapEngine:
    """
    Motor de snap para vértices.
    A comparação é feita em pixels, então o raio de snap não depende do zoom.
    """

    def __init__(self, threshold_px: float = 8.0):
        self.threshold_px = threshold_px

    def find_snap(self, cursor_screen: Point, shapes: Iterable[Shape], view: ViewState,
                  excluded: AbstractSet[Point] = frozenset()) -> Optional[SnapResult]:
        """
        Vértice mais próximo do cursor (em pixels), ou None se o mais próximo
        estiver além do limite. Em caso de empate vence o primeiro encontrado
        (ordem da lista de formas, depois ordem dos pontos).
        """
        best_point = None
        best_dist = math.inf
        scale = view.scale
        ox, oy = view.offset.x, view.offset.y
        cx, cy = cursor_screen.x, cursor_screen.y

        for shape in shapes:
            for p in shape.points:
                if p in excluded:
                    continue
                dist = math.hypot(p.x * scale + ox - cx, p.y * scale + oy - cy)
                if dist < best_dist:
                    best_dist = dist
                    best_point = p

        if best_point is None or best_dist > self.threshold_px:
            return None

        screen = Point(best_point.x * scale + ox, best_point.y * scale + oy)
        return SnapResult(world_point=best_point, screen_point=screen, pixel_distance=best_dist)

    def __repr__(self):
        return f"SnapEngine(threshold={self.threshold_px}px)"
