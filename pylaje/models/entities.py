import math
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Optional, Tuple, Type
from enum import Enum

# --- ERROS ---

class PyLajeError(Exception):
    """Erro base do PyLaje."""

class GeometryError(PyLajeError, ValueError):
    """Geometria inválida na fronteira de construção (retângulo degenerado, polígono com < 3 pontos...)."""

class ConfigError(PyLajeError, ValueError):
    """Configuração de laje/armadura/nervura fora do domínio permitido."""

class ProjectLoadError(PyLajeError):
    """Arquivo de projeto malformado (schema incompatível)."""

# --- ENUMS E VALUE OBJECTS ---

class ShapeType(Enum):
    LINE = "line"
    RECTANGLE = "rectangle"
    POLYGON = "polygon"
    ARROW = "arrow"          # Referência direcional (sentido das vigotas)
    DIMENSION = "dimension"  # Cota
    VIGOTA = "vigota"        # Vigota lançada manualmente
    RIB = "rib"              # Nervura transversal

class SlabType(Enum):
    # Altura nominal da laje
    H8 = "H8"
    H12 = "H12"
    H16 = "H16"
    H20 = "H20"
    H25 = "H25"
    H30 = "H30"

class FillerMaterial(Enum):
    CERAMIC = "ceramic"    # Lajota cerâmica
    EPS = "eps"            # Isopor
    CONCRETE = "concrete"  # Maciça (sem enchimento)

class SteelType(Enum):
    CA50 = "CA50"
    CA60 = "CA60"

class RibType(Enum):
    PLASTIC = "plastic"
    CERAMIC = "ceramic"

# Bitolas comerciais (mm) por categoria de aço
STEEL_DIAMETERS: Dict[SteelType, Tuple[str, ...]] = {
    SteelType.CA50: ("6.3", "8", "10", "12.5", "16"),
    SteelType.CA60: ("4.2", "5", "6", "7", "8", "9.5"),
}

MATERIAL_LABELS = {
    FillerMaterial.CERAMIC: "Cerâmica",
    FillerMaterial.EPS: "EPS",
    FillerMaterial.CONCRETE: "Concreto Maciço",
}

MAX_REINFORCEMENT_ENTRIES = 2
MIN_RECTANGLE_SIZE = 0.01  # m


def _as_dict(value, field: str) -> Dict:
    """Garante que um campo aninhado do arquivo seja um objeto JSON."""
    if not isinstance(value, dict):
        raise ConfigError(f"Campo '{field}' deve ser um objeto (recebido {type(value).__name__}).")
    return value


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def to_dict(self) -> Dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict) -> "Point":
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass(frozen=True)
class ViewState:
    """
    Transformação afim da tela: screen = world * scale + offset.
    scale em px/m, offset em pixels.
    """
    scale: float = 50.0
    offset: Point = Point(0.0, 0.0)

    def __post_init__(self):
        if not self.scale > 0:
            raise GeometryError(f"Escala da vista deve ser positiva (recebido {self.scale}).")

    def to_dict(self) -> Dict:
        return {"scale": self.scale, "offset": self.offset.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict) -> "ViewState":
        return cls(scale=float(data["scale"]), offset=Point.from_dict(data["offset"]))

# --- CONFIGURAÇÕES ---

@dataclass(frozen=True)
class ReinforcementConfig:
    quantity: int = 1
    steel_type: SteelType = SteelType.CA60
    diameter: str = "4.2"   # mm
    anchorage: float = 0.0  # cm, em cada extremidade

    def __post_init__(self):
        if self.quantity < 1:
            raise ConfigError(f"Quantidade de fios deve ser >= 1 (recebido {self.quantity}).")
        if self.diameter not in STEEL_DIAMETERS[self.steel_type]:
            raise ConfigError(f"Bitola {self.diameter}mm não existe para {self.steel_type.value}.")
        if self.anchorage < 0:
            raise ConfigError("Ancoragem não pode ser negativa.")

    def to_dict(self) -> Dict:
        return {
            "quantity": self.quantity,
            "steelType": self.steel_type.value,
            "diameter": self.diameter,
            "anchorage": self.anchorage,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ReinforcementConfig":
        data = _as_dict(data, "reinforcement")
        return cls(
            quantity=int(data.get("quantity", 1)),
            steel_type=SteelType(data.get("steelType", "CA60")),
            diameter=str(data["diameter"]),
            anchorage=float(data.get("anchorage") or 0.0),
        )


@dataclass(frozen=True)
class SlabConfig:
    """
    Configuração da laje treliçada. Dimensões em centímetros.
    """
    slab_type: SlabType = SlabType.H8
    material: FillerMaterial = FillerMaterial.CERAMIC
    unit_height: float = 7.0
    unit_width: float = 30.0
    unit_length: float = 20.0
    beam_width: float = 12.0
    inter_eixo: float = 42.0
    initial_exclusion: float = 0.0
    final_exclusion: float = 0.0
    reinforcement: Tuple[ReinforcementConfig, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "reinforcement", tuple(self.reinforcement))

        if not self.inter_eixo > 0:
            raise ConfigError(f"Inter-eixo deve ser positivo (recebido {self.inter_eixo} cm).")
        if self.initial_exclusion < 0 or self.final_exclusion < 0:
            raise ConfigError("Zonas de exclusão não podem ser negativas.")
        if min(self.unit_height, self.unit_width, self.unit_length, self.beam_width) < 0:
            raise ConfigError("Dimensões do enchimento/vigota não podem ser negativas.")
        if len(self.reinforcement) > MAX_REINFORCEMENT_ENTRIES:
            raise ConfigError(f"Máximo de {MAX_REINFORCEMENT_ENTRIES} armaduras por vigota.")

    @classmethod
    def from_dimensions(cls, slab_type: SlabType = SlabType.H8,
                        material: FillerMaterial = FillerMaterial.CERAMIC,
                        unit_height: float = 7.0, unit_width: float = 30.0,
                        unit_length: float = 20.0, beam_width: float = 12.0,
                        initial_exclusion: float = 0.0, final_exclusion: float = 0.0,
                        reinforcement: Tuple[ReinforcementConfig, ...] = ()) -> "SlabConfig":
        """
        Cria a configuração calculando o inter-eixo = largura do enchimento + largura da vigota.
        """
        return cls(
            slab_type=slab_type,
            material=material,
            unit_height=unit_height,
            unit_width=unit_width,
            unit_length=unit_length,
            beam_width=beam_width,
            inter_eixo=unit_width + beam_width,
            initial_exclusion=initial_exclusion,
            final_exclusion=final_exclusion,
            reinforcement=reinforcement,
        )

    # Conversões cm -> m usadas pelos motores
    @property
    def inter_eixo_m(self) -> float:
        return self.inter_eixo / 100.0

    @property
    def initial_exclusion_m(self) -> float:
        return self.initial_exclusion / 100.0

    @property
    def final_exclusion_m(self) -> float:
        return self.final_exclusion / 100.0

    @property
    def beam_width_m(self) -> float:
        return self.beam_width / 100.0

    @property
    def filler_unit_area(self) -> float:
        """Área de face de um bloco de enchimento (m²)."""
        return (self.unit_width / 100.0) * (self.unit_length / 100.0)

    @property
    def uses_filler(self) -> bool:
        return self.material != FillerMaterial.CONCRETE

    def to_dict(self) -> Dict:
        return {
            "type": self.slab_type.value,
            "material": self.material.value,
            "unitHeight": self.unit_height,
            "unitWidth": self.unit_width,
            "unitLength": self.unit_length,
            "beamWidth": self.beam_width,
            "interEixo": self.inter_eixo,
            "initialExclusion": self.initial_exclusion,
            "finalExclusion": self.final_exclusion,
            "reinforcement": [r.to_dict() for r in self.reinforcement],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "SlabConfig":
        data = _as_dict(data, "slabConfig")
        reinforcement = data.get("reinforcement") or []
        if not isinstance(reinforcement, list):
            raise ConfigError("Campo 'reinforcement' deve ser uma lista.")
        unit_width = float(data.get("unitWidth", 30.0))
        beam_width = float(data.get("beamWidth", 12.0))
        # Arquivos antigos podem vir sem inter-eixo salvo
        inter_eixo = data.get("interEixo") or (unit_width + beam_width)
        return cls(
            slab_type=SlabType(data.get("type", "H8")),
            material=FillerMaterial(data.get("material", "ceramic")),
            unit_height=float(data.get("unitHeight", 7.0)),
            unit_width=unit_width,
            unit_length=float(data.get("unitLength", 20.0)),
            beam_width=beam_width,
            inter_eixo=float(inter_eixo),
            initial_exclusion=float(data.get("initialExclusion") or 0.0),
            final_exclusion=float(data.get("finalExclusion") or 0.0),
            reinforcement=tuple(ReinforcementConfig.from_dict(r) for r in reinforcement),
        )


@dataclass(frozen=True)
class TransverseRibConfig:
    """Nervura transversal: canaletas + fios de aço. Largura em metros."""
    rib_type: RibType = RibType.PLASTIC
    width: float = 0.10
    pieces_per_meter: float = 2.38
    steel_quantity: int = 2
    steel_diameter: str = "6.3"
    steel_type: SteelType = SteelType.CA50

    def __post_init__(self):
        if not self.width > 0:
            raise ConfigError("Largura da nervura deve ser positiva.")
        if not self.pieces_per_meter > 0:
            raise ConfigError("Peças por metro deve ser positivo.")
        if self.steel_quantity < 1:
            raise ConfigError("Quantidade de fios da nervura deve ser >= 1.")
        if self.steel_diameter not in STEEL_DIAMETERS[self.steel_type]:
            raise ConfigError(f"Bitola {self.steel_diameter}mm não existe para {self.steel_type.value}.")

    def to_dict(self) -> Dict:
        return {
            "ribType": self.rib_type.value,
            "width": self.width,
            "piecesPerMeter": self.pieces_per_meter,
            "steelQuantity": self.steel_quantity,
            "steelDiameter": self.steel_diameter,
            "steelType": self.steel_type.value,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "TransverseRibConfig":
        data = _as_dict(data, "ribConfig")
        return cls(
            rib_type=RibType(data.get("ribType", "plastic")),
            width=float(data.get("width", 0.10)),
            pieces_per_meter=float(data.get("piecesPerMeter", 2.38)),
            steel_quantity=int(data.get("steelQuantity", 2)),
            steel_diameter=str(data.get("steelDiameter", "6.3")),
            steel_type=SteelType(data.get("steelType", "CA50")),
        )


@dataclass(frozen=True)
class JoistAxis:
    """
    Descritor do lançamento das vigotas de uma laje.
    As vigotas correm paralelas a (origin -> target).
    """
    origin: Point
    target: Point

    def __post_init__(self):
        if math.hypot(self.target.x - self.origin.x, self.target.y - self.origin.y) == 0:
            raise GeometryError("Direção das vigotas com comprimento nulo.")

    @property
    def direction(self) -> Tuple[float, float]:
        dx = self.target.x - self.origin.x
        dy = self.target.y - self.origin.y
        norm = math.hypot(dx, dy)
        return (dx / norm, dy / norm)

    def to_dict(self) -> Dict:
        return {"origin": self.origin.to_dict(), "target": self.target.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict) -> "JoistAxis":
        data = _as_dict(data, "joistAxis")
        return cls(origin=Point.from_dict(data["origin"]), target=Point.from_dict(data["target"]))

# --- FORMAS (DESENHO) ---

@dataclass(frozen=True)
class Shape:
    """
    Base das formas do croqui. Subclasses definem o tipo e os campos específicos.
    Formas são imutáveis: qualquer edição substitui a forma inteira (mesmo id).
    """
    id: str
    points: Tuple[Point, ...]

    shape_type: ClassVar[ShapeType]
    min_points: ClassVar[int] = 2
    max_points: ClassVar[Optional[int]] = 2

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(self.points))
        n = len(self.points)
        if n < self.min_points or (self.max_points is not None and n > self.max_points):
            raise GeometryError(
                f"Forma '{self.shape_type.value}' com {n} pontos (esperado {self._expected_points()})."
            )

    def _expected_points(self) -> str:
        if self.max_points is None:
            return f">= {self.min_points}"
        if self.max_points == self.min_points:
            return str(self.min_points)
        return f"{self.min_points}..{self.max_points}"

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def end(self) -> Point:
        return self.points[-1]

    @property
    def length(self) -> float:
        """Comprimento da polilinha (m)."""
        return sum(math.hypot(b.x - a.x, b.y - a.y) for a, b in zip(self.points, self.points[1:]))

    @property
    def midpoint(self) -> Point:
        return Point((self.start.x + self.end.x) / 2, (self.start.y + self.end.y) / 2)

    def properties(self) -> Dict:
        return {}

    def to_dict(self) -> Dict:
        data = {
            "id": self.id,
            "type": self.shape_type.value,
            "points": [p.to_dict() for p in self.points],
        }
        props = {k: v for k, v in self.properties().items() if v is not None}
        if props:
            data["properties"] = props
        return data

    @classmethod
    def _kwargs_from_properties(cls, props: Dict) -> Dict:
        return {}

    @classmethod
    def from_dict(cls, data: Dict) -> "Shape":
        props = data.get("properties")
        props = {} if props is None else _as_dict(props, "properties")
        return cls(
            id=str(data["id"]),
            points=tuple(Point.from_dict(p) for p in data["points"]),
            **cls._kwargs_from_properties(props),
        )


@dataclass(frozen=True)
class LineShape(Shape):
    shape_type = ShapeType.LINE

    def properties(self) -> Dict:
        return {"length": self.length}


@dataclass(frozen=True)
class DimensionShape(Shape):
    shape_type = ShapeType.DIMENSION

    def properties(self) -> Dict:
        return {"length": self.length}


@dataclass(frozen=True)
class ArrowShape(Shape):
    is_joist: bool = False
    label: Optional[str] = None

    shape_type = ShapeType.ARROW

    def properties(self) -> Dict:
        return {"isJoist": self.is_joist or None, "label": self.label, "length": self.length}

    @classmethod
    def _kwargs_from_properties(cls, props: Dict) -> Dict:
        return {"is_joist": bool(props.get("isJoist", False)), "label": props.get("label")}


@dataclass(frozen=True)
class VigotaShape(Shape):
    shape_type = ShapeType.VIGOTA

    def properties(self) -> Dict:
        return {"length": self.length}


@dataclass(frozen=True)
class RibShape(Shape):
    rib_config: Optional[TransverseRibConfig] = None

    shape_type = ShapeType.RIB

    def properties(self) -> Dict:
        return {
            "length": self.length,
            "ribConfig": self.rib_config.to_dict() if self.rib_config else None,
        }

    @classmethod
    def _kwargs_from_properties(cls, props: Dict) -> Dict:
        rib = props.get("ribConfig")
        return {"rib_config": TransverseRibConfig.from_dict(rib) if rib else None}


@dataclass(frozen=True)
class SlabShape(Shape):
    """
    Pano de laje (retângulo ou polígono). Carrega a própria configuração e o
    descritor de lançamento das vigotas.
    """
    label: str = ""
    slab_config: Optional[SlabConfig] = None
    joist_axis: Optional[JoistAxis] = None

    min_points = 3
    max_points = None

    @property
    def area(self) -> float:
        from pylaje.engines.geometry import polygon_area
        return polygon_area(self.points)

    @property
    def bounding_size(self) -> Tuple[float, float]:
        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]
        return (max(xs) - min(xs), max(ys) - min(ys))

    @property
    def width(self) -> float:
        return self.bounding_size[0]

    @property
    def height(self) -> float:
        return self.bounding_size[1]

    @property
    def length(self) -> float:
        # Perímetro fechado
        pts = self.points + self.points[:1]
        return sum(math.hypot(b.x - a.x, b.y - a.y) for a, b in zip(pts, pts[1:]))

    def properties(self) -> Dict:
        return {
            "label": self.label or None,
            "area": self.area,
            "slabConfig": self.slab_config.to_dict() if self.slab_config else None,
            "joistAxis": self.joist_axis.to_dict() if self.joist_axis else None,
        }

    @classmethod
    def _kwargs_from_properties(cls, props: Dict) -> Dict:
        config = props.get("slabConfig")
        axis = props.get("joistAxis")
        return {
            "label": props.get("label") or "",
            "slab_config": SlabConfig.from_dict(config) if config else None,
            "joist_axis": JoistAxis.from_dict(axis) if axis else None,
        }


@dataclass(frozen=True)
class PolygonShape(SlabShape):
    shape_type = ShapeType.POLYGON


@dataclass(frozen=True)
class RectangleShape(SlabShape):
    shape_type = ShapeType.RECTANGLE
    min_points = 4
    max_points = 4

    @classmethod
    def from_corners(cls, shape_id: str, start: Point, end: Point, label: str = "") -> "RectangleShape":
        """
        Cria o retângulo a partir de dois cantos opostos.
        Lança GeometryError se algum lado for menor que MIN_RECTANGLE_SIZE.
        """
        width = abs(end.x - start.x)
        height = abs(end.y - start.y)
        if width < MIN_RECTANGLE_SIZE or height < MIN_RECTANGLE_SIZE:
            raise GeometryError(f"Retângulo degenerado ({width:.3f} x {height:.3f} m).")
        points = (start, Point(end.x, start.y), end, Point(start.x, end.y))
        return cls(id=shape_id, points=points, label=label)

    def properties(self) -> Dict:
        props = super().properties()
        props["width"] = self.width
        props["height"] = self.height
        return props


SHAPE_CLASSES: Dict[ShapeType, Type[Shape]] = {
    cls.shape_type: cls
    for cls in (LineShape, RectangleShape, PolygonShape, ArrowShape,
                DimensionShape, VigotaShape, RibShape)
}

def shape_from_dict(data: Dict) -> Shape:
    """Decodifica uma forma pelo campo 'type'."""
    data = _as_dict(data, "shape")
    shape_type = ShapeType(data["type"])
    return SHAPE_CLASSES[shape_type].from_dict(data)

def slabs_of(shapes) -> List[SlabShape]:
    return [s for s in shapes if isinstance(s, SlabShape)]

# --- PROJETO ---

@dataclass(frozen=True)
class ProjectSnapshot:
    """
    Estado imutável do croqui: lista plana de formas + vista.
    Cada comando do controlador recebe um snapshot e devolve outro.
    """
    shapes: Tuple[Shape, ...] = ()
    view: ViewState = ViewState()

    def __post_init__(self):
        object.__setattr__(self, "shapes", tuple(self.shapes))

    def get(self, shape_id: str) -> Optional[Shape]:
        for shape in self.shapes:
            if shape.id == shape_id:
                return shape
        return None

    def with_shapes(self, shapes) -> "ProjectSnapshot":
        return ProjectSnapshot(shapes=tuple(shapes), view=self.view)

    def with_view(self, view: ViewState) -> "ProjectSnapshot":
        return ProjectSnapshot(shapes=self.shapes, view=view)

    @property
    def slabs(self) -> List[SlabShape]:
        return slabs_of(self.shapes)
