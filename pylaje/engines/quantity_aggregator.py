import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
from pylaje.models.entities import (
    ArrowShape, ConfigError, JoistAxis, MATERIAL_LABELS, FillerMaterial, RibShape,
    Shape, SlabConfig, SlabShape, SlabType, VigotaShape, slabs_of,
)
from pylaje.engines.beam_layout import BeamLayoutEngine, BeamLine, LayoutResult
from pylaje.engines.geometry import distance, point_in_polygon

EXTRA_VIGOTA_POLICIES = ("additive", "skip_coincident")

# --- DTOs DO RELATÓRIO ---

@dataclass(frozen=True)
class VigotaGroup:
    length: float   # m, arredondado
    count: int
    reinforcement_text: Tuple[str, ...] = ()

@dataclass(frozen=True)
class SteelTotal:
    steel_type: str
    diameter: str
    total_length: float  # m

    @property
    def description(self) -> str:
        return f"{self.steel_type} {self.diameter}mm"

@dataclass(frozen=True)
class RibReportData:
    rib_type: str
    steel_diameter: str
    count: int
    total_length: float
    channel_count: int
    steel_total_length: float

@dataclass(frozen=True)
class SlabReportItem:
    id: str
    label: str
    shape_type: str
    slab_type: str
    material: str
    material_label: str
    area: float                 # líquida se houver direção de vigotas, senão bruta
    gross_area: float
    net_area: Optional[float]
    width: float
    height: float
    joist_count: int
    vigota_count: int           # geradas + avulsas contabilizadas
    vigota_groups: Tuple[VigotaGroup, ...] = ()
    has_extra_vigotas: bool = False
    extra_vigota_count: int = 0
    filler_count: int = 0
    filler_type: str = "-"
    ribs: Tuple[RibReportData, ...] = ()
    reinforcement_totals: Tuple[SteelTotal, ...] = ()
    reinforcement_lines: Tuple[str, ...] = ()   # lista de corte da laje, maior comprimento primeiro
    beam_lines: Tuple[BeamLine, ...] = field(default=(), repr=False)

    @property
    def vigota_summary(self) -> str:
        return ", ".join(f"{g.count}x {g.length:.2f}m" for g in self.vigota_groups)

    @property
    def reinforcement_summary(self) -> str:
        return ", ".join(f"{t.total_length:.2f}m {t.description}" for t in self.reinforcement_totals)

@dataclass(frozen=True)
class FillerDetail:
    description: str
    count: int

@dataclass(frozen=True)
class SlabTypeSummary:
    slab_type: str
    slab_count: int
    total_area: float
    joist_count: int
    filler_details: Tuple[FillerDetail, ...] = ()

@dataclass(frozen=True)
class ProjectSummary:
    by_slab_type: Tuple[SlabTypeSummary, ...] = ()
    by_filler_type: Tuple[FillerDetail, ...] = ()
    steel_totals: Tuple[SteelTotal, ...] = ()
    grand_total_area: float = 0.0
    slab_count: int = 0
    joist_count: int = 0


def _ceil(value: float) -> int:
    # Evita que ruído de ponto flutuante (140.00000000000003) vire uma peça a mais
    return int(math.ceil(round(value, 9)))

def _slab_type_order(slab_type: str) -> int:
    # H8 < H12 < ... < H30; lajes sem configuração ('-') por último
    order = [t.value for t in SlabType]
    return order.index(slab_type) if slab_type in order else len(order)

def _br(value: float) -> str:
    return f"{value:.2f}".replace(".", ",")


class QuantityAggregator:
    """
    Levantamento de quantitativos por laje e resumo geral do projeto.
    Recalcula tudo a partir da lista de formas (sem cache).
    """

    COINCIDENT_TOL = 0.01  # m

    def __init__(self, extra_vigota_policy: str = "additive", length_precision: int = 2,
                 layout_engine: Optional[BeamLayoutEngine] = None):
        """
        :param extra_vigota_policy: 'additive' conta toda vigota avulsa;
            'skip_coincident' ignora vigotas avulsas sobrepostas a uma vigota gerada.
        :param length_precision: casas decimais (m) no agrupamento das vigotas.
        """
        if extra_vigota_policy not in EXTRA_VIGOTA_POLICIES:
            raise ConfigError(f"Política de vigotas avulsas desconhecida: {extra_vigota_policy}")
        self.extra_vigota_policy = extra_vigota_policy
        self.length_precision = length_precision
        self.layout_engine = layout_engine or BeamLayoutEngine()

    # --- POR LAJE ---

    def build_report(self, shapes: Sequence[Shape]) -> List[SlabReportItem]:
        return [self.build_slab_item(slab, shapes, index)
                for index, slab in enumerate(slabs_of(shapes))]

    def build_slab_item(self, slab: SlabShape, shapes: Sequence[Shape], index: int = 0) -> SlabReportItem:
        config = slab.slab_config
        gross_area = slab.area

        axis = self.resolve_joist_axis(slab, shapes)
        layout = self.layout_engine.generate_for_slab(slab, axis) if axis else None
        beam_lines = layout.beam_lines if layout else ()

        net_area = None
        if layout is not None:
            net_area = BeamLayoutEngine.net_area(slab.points, beam_lines, config.beam_width_m)
        area = net_area if net_area is not None else gross_area

        groups = self._group_vigotas(layout, config)
        extras = self._extra_vigotas(slab, shapes, beam_lines)
        filler_count, filler_type = self._filler(config, area)

        return SlabReportItem(
            id=slab.id,
            label=slab.label or f"Laje {index + 1}",
            shape_type=slab.shape_type.value,
            slab_type=config.slab_type.value if config else "-",
            material=config.material.value if config else "-",
            material_label=MATERIAL_LABELS[config.material] if config else "-",
            area=area,
            gross_area=gross_area,
            net_area=net_area,
            width=slab.width,
            height=slab.height,
            joist_count=len(beam_lines),
            vigota_count=len(beam_lines) + len(extras),
            vigota_groups=groups,
            has_extra_vigotas=bool(extras),
            extra_vigota_count=len(extras),
            filler_count=filler_count,
            filler_type=filler_type,
            ribs=self._rib_data(slab, shapes),
            reinforcement_totals=self._steel_totals(groups, config),
            reinforcement_lines=self._reinforcement_lines(groups, config),
            beam_lines=beam_lines,
        )

    def resolve_joist_axis(self, slab: SlabShape, shapes: Sequence[Shape]) -> Optional[JoistAxis]:
        """
        Eixo próprio da laje; para arquivos antigos, a primeira seta de vigota
        cujo ponto médio esteja dentro do pano.
        """
        if slab.joist_axis is not None:
            return slab.joist_axis
        for shape in shapes:
            if isinstance(shape, ArrowShape) and shape.is_joist and \
                    point_in_polygon(shape.midpoint, slab.points):
                if shape.length > 0:
                    return JoistAxis(shape.start, shape.end)
        return None

    def _group_vigotas(self, layout: Optional[LayoutResult], config: Optional[SlabConfig]) -> Tuple[VigotaGroup, ...]:
        if not layout or not layout.beam_lines:
            return ()
        counts: Dict[float, int] = {}
        for length in layout.lengths:
            key = round(length, self.length_precision)
            counts[key] = counts.get(key, 0) + 1

        return tuple(
            VigotaGroup(length=length, count=counts[length],
                        reinforcement_text=self._reinforcement_text(length, config))
            for length in sorted(counts, reverse=True)
        )

    @staticmethod
    def _reinforcement_text(length: float, config: Optional[SlabConfig]) -> Tuple[str, ...]:
        """Texto de corte por armadura: comprimento da vigota + ancoragem nas duas pontas."""
        if not config:
            return ()
        lines = []
        for r in config.reinforcement:
            cut = length + 2 * r.anchorage / 100.0
            plural = "fios" if r.quantity > 1 else "fio"
            text = f"{r.quantity} {plural} {r.steel_type.value} Ø{r.diameter}mm c/{_br(cut)}m"
            if r.anchorage > 0:
                text += f" (ancoragem {r.anchorage:g} cm)"
            lines.append(text)
        return tuple(lines)

    @staticmethod
    def _steel_totals(groups: Sequence[VigotaGroup], config: Optional[SlabConfig]) -> Tuple[SteelTotal, ...]:
        if not config or not groups:
            return ()
        totals: Dict[Tuple[str, str], float] = {}
        for r in config.reinforcement:
            anchorage_m = 2 * r.anchorage / 100.0
            length = r.quantity * sum((g.length + anchorage_m) * g.count for g in groups)
            key = (r.steel_type.value, r.diameter)
            totals[key] = totals.get(key, 0.0) + length
        return tuple(SteelTotal(steel_type=k[0], diameter=k[1], total_length=v) for k, v in totals.items())

    @staticmethod
    def _reinforcement_lines(groups: Sequence[VigotaGroup], config: Optional[SlabConfig]) -> Tuple[str, ...]:
        """
        Lista de corte da laje inteira: fios agrupados por (aço, bitola, comprimento de corte).
        """
        if not config or not groups:
            return ()
        cuts: Dict[Tuple[str, str, float], int] = {}
        for g in groups:
            for r in config.reinforcement:
                cut = round(g.length + 2 * r.anchorage / 100.0, 2)
                key = (r.steel_type.value, r.diameter, cut)
                cuts[key] = cuts.get(key, 0) + r.quantity * g.count

        lines = []
        for (steel_type, diameter, cut), quantity in sorted(cuts.items(), key=lambda kv: -kv[0][2]):
            plural = "fios" if quantity > 1 else "fio"
            lines.append(f"{quantity} {plural} {steel_type} Ø{diameter}mm c/{_br(cut)}m")
        return tuple(lines)

    def _extra_vigotas(self, slab: SlabShape, shapes: Sequence[Shape],
                       beam_lines: Sequence[BeamLine]) -> List[VigotaShape]:
        extras = [s for s in shapes
                  if isinstance(s, VigotaShape) and point_in_polygon(s.midpoint, slab.points)]
        if self.extra_vigota_policy == "skip_coincident":
            extras = [v for v in extras if not self._coincides(v, beam_lines)]
        return extras

    def _coincides(self, vigota: VigotaShape, beam_lines: Sequence[BeamLine]) -> bool:
        tol = self.COINCIDENT_TOL
        for line in beam_lines:
            same = distance(vigota.start, line.start) <= tol and distance(vigota.end, line.end) <= tol
            swapped = distance(vigota.start, line.end) <= tol and distance(vigota.end, line.start) <= tol
            if same or swapped:
                return True
        return False

    @staticmethod
    def _filler(config: Optional[SlabConfig], area: float) -> Tuple[int, str]:
        if config is None or not config.uses_filler:
            return 0, "-"
        unit_area = config.filler_unit_area
        if unit_area <= 0:
            return 0, "-"
        prefix = "Lajota" if config.material == FillerMaterial.CERAMIC else "EPS"
        label = f"{prefix} {config.slab_type.value} ({config.unit_width:g}x{config.unit_length:g})"
        return _ceil(area / unit_area), label

    @staticmethod
    def _rib_data(slab: SlabShape, shapes: Sequence[Shape]) -> Tuple[RibReportData, ...]:
        groups: Dict[Tuple[str, str], Dict] = {}
        for rib in shapes:
            if not isinstance(rib, RibShape) or rib.rib_config is None:
                continue
            if not point_in_polygon(rib.midpoint, slab.points):
                continue
            conf = rib.rib_config
            key = (conf.rib_type.value, conf.steel_diameter)
            acc = groups.setdefault(key, {"count": 0, "length": 0.0, "channels": 0.0, "steel": 0.0})
            acc["count"] += 1
            acc["length"] += rib.length
            acc["channels"] += rib.length * conf.pieces_per_meter
            acc["steel"] += rib.length * conf.steel_quantity

        return tuple(
            RibReportData(
                rib_type=key[0],
                steel_diameter=key[1],
                count=acc["count"],
                total_length=acc["length"],
                channel_count=_ceil(acc["channels"]),
                steel_total_length=acc["steel"],
            )
            for key, acc in groups.items()
        )

    # --- PROJETO ---

    @staticmethod
    def build_summary(items: Sequence[SlabReportItem]) -> ProjectSummary:
        """Dobra pura sobre os itens: totais por tipo de laje, por enchimento e geral."""
        by_type: Dict[str, Dict] = {}
        by_filler: Dict[str, int] = {}
        steel: Dict[Tuple[str, str], float] = {}

        for item in items:
            acc = by_type.setdefault(item.slab_type, {"count": 0, "area": 0.0, "joists": 0, "fillers": {}})
            acc["count"] += 1
            acc["area"] += item.area
            acc["joists"] += item.joist_count
            if item.filler_count > 0:
                acc["fillers"][item.filler_type] = acc["fillers"].get(item.filler_type, 0) + item.filler_count
                by_filler[item.filler_type] = by_filler.get(item.filler_type, 0) + item.filler_count
            for total in item.reinforcement_totals:
                key = (total.steel_type, total.diameter)
                steel[key] = steel.get(key, 0.0) + total.total_length

        return ProjectSummary(
            by_slab_type=tuple(
                SlabTypeSummary(
                    slab_type=slab_type,
                    slab_count=acc["count"],
                    total_area=acc["area"],
                    joist_count=acc["joists"],
                    filler_details=tuple(FillerDetail(d, c) for d, c in acc["fillers"].items()),
                )
                for slab_type, acc in sorted(by_type.items(), key=lambda kv: _slab_type_order(kv[0]))
            ),
            by_filler_type=tuple(FillerDetail(d, c) for d, c in by_filler.items()),
            steel_totals=tuple(SteelTotal(k[0], k[1], v) for k, v in steel.items()),
            grand_total_area=sum(item.area for item in items),
            slab_count=len(items),
            joist_count=sum(item.joist_count for item in items),
        )
