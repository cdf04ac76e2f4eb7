import re
import uuid
from dataclasses import dataclass, replace
from typing import AbstractSet, Callable, Iterable, List, Optional, Sequence, Tuple

from pylaje.models.entities import (
    ArrowShape, ConfigError, DimensionShape, GeometryError, JoistAxis, LineShape,
    Point, PolygonShape, ProjectLoadError, ProjectSnapshot, RectangleShape, RibShape,
    Shape, SlabConfig, SlabShape, TransverseRibConfig, VigotaShape,
)
from pylaje.engines.snap_engine import SnapEngine, SnapResult
from pylaje.engines.cycle_detector import CycleDetector
from pylaje.engines.beam_layout import BeamLayoutEngine, BeamLine, LayoutResult
from pylaje.engines.quantity_aggregator import ProjectSummary, QuantityAggregator, SlabReportItem
from pylaje.services.project_io import ProjectIO

LABEL_PATTERN = re.compile(r"^L(\d+)$")
MIN_JOIST_ARROW_LENGTH = 0.1  # m

@dataclass(frozen=True)
class CommandResult:
    snapshot: ProjectSnapshot
    success: bool = True
    message: str = ""
    shape_id: Optional[str] = None

def generate_id() -> str:
    return uuid.uuid4().hex[:12]

def next_label(shapes: Iterable[Shape]) -> str:
    """Próximo rótulo sequencial L{n} (maior número existente + 1)."""
    numbers = []
    for shape in shapes:
        match = LABEL_PATTERN.match(getattr(shape, "label", None) or "")
        numbers.append(int(match.group(1)) if match else 0)
    return f"L{max(numbers) + 1 if numbers else 1}"


class SlabController:
    """
    Controlador Principal do Módulo de Lajes (PyLaje).
    Expõe comandos sobre snapshots imutáveis do projeto:
    Desenho -> Ciclo/Polígono -> Lançamento das Vigotas -> Quantitativos.

    Nenhum comando altera o snapshot recebido. Em caso de falha o snapshot
    devolvido é o mesmo da entrada (success=False + mensagem).
    """

    def __init__(self, snap_threshold_px: float = 8.0, extra_vigota_policy: str = "additive",
                 cycle_precision: float = 1e-4, id_factory: Callable[[], str] = generate_id):
        self.snap_engine = SnapEngine(threshold_px=snap_threshold_px)
        self.cycle_detector = CycleDetector(precision=cycle_precision)
        self.layout_engine = BeamLayoutEngine()
        self.aggregator = QuantityAggregator(extra_vigota_policy=extra_vigota_policy,
                                             layout_engine=self.layout_engine)
        self.project_io = ProjectIO()
        self._new_id = id_factory

    # --- COMANDOS DE DESENHO ---

    def add_shape(self, snapshot: ProjectSnapshot, shape: Shape) -> CommandResult:
        if snapshot.get(shape.id) is not None:
            return CommandResult(snapshot, False, f"Já existe uma forma com id {shape.id}.")
        return CommandResult(snapshot.with_shapes(snapshot.shapes + (shape,)), True,
                             f"{shape.shape_type.value} adicionado.", shape.id)

    def add_line(self, snapshot: ProjectSnapshot, start: Point, end: Point) -> CommandResult:
        if start == end:
            return CommandResult(snapshot, False, "Linha de comprimento nulo.")
        return self.add_shape(snapshot, LineShape(id=self._new_id(), points=(start, end)))

    def add_dimension(self, snapshot: ProjectSnapshot, start: Point, end: Point) -> CommandResult:
        return self.add_shape(snapshot, DimensionShape(id=self._new_id(), points=(start, end)))

    def add_vigota(self, snapshot: ProjectSnapshot, start: Point, end: Point) -> CommandResult:
        """Vigota avulsa (desenhada à mão). Contabilizada à parte no relatório."""
        if start == end:
            return CommandResult(snapshot, False, "Vigota de comprimento nulo.")
        return self.add_shape(snapshot, VigotaShape(id=self._new_id(), points=(start, end)))

    def add_rib(self, snapshot: ProjectSnapshot, start: Point, end: Point,
                rib_config: TransverseRibConfig) -> CommandResult:
        if start == end:
            return CommandResult(snapshot, False, "Nervura de comprimento nulo.")
        return self.add_shape(snapshot, RibShape(id=self._new_id(), points=(start, end), rib_config=rib_config))

    def add_rectangle(self, snapshot: ProjectSnapshot, start: Point, end: Point) -> CommandResult:
        try:
            shape = RectangleShape.from_corners(self._new_id(), start, end, label=self.next_slab_label(snapshot))
        except GeometryError as e:
            return CommandResult(snapshot, False, str(e))
        return self.add_shape(snapshot, shape)

    def add_polygon(self, snapshot: ProjectSnapshot, points: Sequence[Point]) -> CommandResult:
        try:
            shape = PolygonShape(id=self._new_id(), points=tuple(points), label=self.next_slab_label(snapshot))
        except GeometryError as e:
            return CommandResult(snapshot, False, str(e))
        return self.add_shape(snapshot, shape)

    def add_joist_arrow(self, snapshot: ProjectSnapshot, start: Point, end: Point) -> CommandResult:
        """
        Seta de direção das vigotas no formato antigo (associada à laje por posição).
        Prefira layout_slab, que grava o eixo na própria laje.
        """
        arrow = ArrowShape(id=self._new_id(), points=(start, end), is_joist=True)
        if arrow.length <= MIN_JOIST_ARROW_LENGTH:
            return CommandResult(snapshot, False, "Seta de vigota muito curta.")
        arrows = [s for s in snapshot.shapes if isinstance(s, ArrowShape) and s.is_joist]
        return self.add_shape(snapshot, replace(arrow, label=next_label(arrows)))

    def replace_shape(self, snapshot: ProjectSnapshot, shape: Shape) -> CommandResult:
        """Substitui a forma inteira de mesmo id (nunca edição parcial)."""
        current = snapshot.get(shape.id)
        if current is None:
            return CommandResult(snapshot, False, f"Forma {shape.id} não encontrada.")
        if type(current) is not type(shape):
            return CommandResult(snapshot, False, "A substituição não pode mudar o tipo da forma.")
        shapes = tuple(shape if s.id == shape.id else s for s in snapshot.shapes)
        return CommandResult(snapshot.with_shapes(shapes), True, "Forma atualizada.", shape.id)

    def remove_shape(self, snapshot: ProjectSnapshot, shape_id: str) -> CommandResult:
        if snapshot.get(shape_id) is None:
            return CommandResult(snapshot, False, f"Forma {shape_id} não encontrada.")
        shapes = tuple(s for s in snapshot.shapes if s.id != shape_id)
        return CommandResult(snapshot.with_shapes(shapes), True, "Forma removida.", shape_id)

    def merge_cycle(self, snapshot: ProjectSnapshot) -> CommandResult:
        """
        Fecha linhas soltas num polígono de laje: o polígono entra com o próximo
        rótulo e as linhas consumidas saem, num único passo.
        Sem ciclo não é erro: success=False e o snapshot fica igual.
        """
        cycle = self.cycle_detector.find_cycle(snapshot.shapes)
        if cycle is None:
            return CommandResult(snapshot, False, "Nenhum contorno fechado encontrado.")

        polygon = PolygonShape(id=self._new_id(), points=cycle.points, label=self.next_slab_label(snapshot))
        consumed = set(cycle.line_ids)
        remaining = tuple(s for s in snapshot.shapes if s.id not in consumed)
        return CommandResult(snapshot.with_shapes(remaining + (polygon,)), True,
                             f"Laje {polygon.label} criada a partir de {len(consumed)} linhas.", polygon.id)

    # --- COMANDOS DE LAJE ---

    def configure_slab(self, snapshot: ProjectSnapshot, slab_id: str, slab_config: SlabConfig) -> CommandResult:
        slab = snapshot.get(slab_id)
        if not isinstance(slab, SlabShape):
            return CommandResult(snapshot, False, f"Laje {slab_id} não encontrada.")
        return self.replace_shape(snapshot, replace(slab, slab_config=slab_config))

    def layout_slab(self, snapshot: ProjectSnapshot, slab_id: str, origin: Point, target: Point,
                    slab_config: Optional[SlabConfig] = None) -> CommandResult:
        """
        Define a direção das vigotas (origin -> target) e, opcionalmente, a configuração.
        O lançamento em si é derivado sob demanda (layout / beam_lines).
        """
        slab = snapshot.get(slab_id)
        if not isinstance(slab, SlabShape):
            return CommandResult(snapshot, False, f"Laje {slab_id} não encontrada.")

        config = slab_config or slab.slab_config
        if config is None:
            return CommandResult(snapshot, False, f"Laje {slab.label} sem configuração de vigotas.")
        try:
            updated = replace(slab, slab_config=config, joist_axis=JoistAxis(origin, target))
        except (GeometryError, ConfigError) as e:
            return CommandResult(snapshot, False, str(e))

        result = self.replace_shape(snapshot, updated)
        layout = self.layout(result.snapshot, slab_id)
        count = layout.joist_count if layout else 0
        return replace(result, message=f"Laje {slab.label}: {count} vigota(s) lançada(s).")

    # --- CONSULTAS ---

    def layout(self, snapshot: ProjectSnapshot, slab_id: str) -> Optional[LayoutResult]:
        slab = snapshot.get(slab_id)
        if not isinstance(slab, SlabShape):
            return None
        axis = self.aggregator.resolve_joist_axis(slab, snapshot.shapes)
        if axis is None:
            return None
        return self.layout_engine.generate_for_slab(slab, axis)

    def beam_lines(self, snapshot: ProjectSnapshot, slab_id: str) -> Tuple[BeamLine, ...]:
        layout = self.layout(snapshot, slab_id)
        return layout.beam_lines if layout else ()

    def build_report(self, snapshot: ProjectSnapshot) -> List[SlabReportItem]:
        return self.aggregator.build_report(snapshot.shapes)

    def build_summary(self, snapshot: ProjectSnapshot,
                      items: Optional[Sequence[SlabReportItem]] = None) -> ProjectSummary:
        if items is None:
            items = self.build_report(snapshot)
        return self.aggregator.build_summary(items)

    def next_slab_label(self, snapshot: ProjectSnapshot) -> str:
        return next_label(snapshot.slabs)

    def find_snap(self, snapshot: ProjectSnapshot, cursor_screen: Point,
                  excluded: AbstractSet[Point] = frozenset()) -> Optional[SnapResult]:
        return self.snap_engine.find_snap(cursor_screen, snapshot.shapes, snapshot.view, excluded)

    # --- PERSISTÊNCIA ---

    def load_project(self, current: ProjectSnapshot, file_path: str) -> CommandResult:
        """Em caso de falha o estado atual é mantido intacto."""
        try:
            loaded = self.project_io.load_json(file_path)
        except ProjectLoadError as e:
            return CommandResult(current, False, f"Erro ao carregar projeto: {e}")
        return CommandResult(loaded, True, f"Importado(s) {len(loaded.slabs)} pano(s) de laje.")

    def save_project(self, snapshot: ProjectSnapshot, file_path: str) -> Tuple[bool, str]:
        return self.project_io.save_json(snapshot, file_path)

    def run_batch_report(self, file_path: str, current: Optional[ProjectSnapshot] = None
                         ) -> Tuple[CommandResult, List[SlabReportItem]]:
        """
        Fluxo completo para um arquivo: Importação -> Lançamento -> Quantitativos.
        Se a importação falhar, result.snapshot é o snapshot atual intacto.
        """
        print(f"--- Iniciando Processamento: {file_path} ---")
        result = self.load_project(current if current is not None else ProjectSnapshot(), file_path)
        if not result.success:
            print(f"[ERRO] {result.message}")
            return result, []

        print(result.message)
        items = self.build_report(result.snapshot)
        for item in items:
            if item.slab_type == "-":
                print(f"   AVISO: Laje {item.label} sem configuração de vigotas.")
            else:
                print(f"   [OK] Laje {item.label}: {item.vigota_count} vigota(s), {item.area:.2f} m²")
        return result, items
