import json
import os
from datetime import datetime, timezone
from typing import Dict, Tuple
from pylaje.models.entities import ProjectLoadError, ProjectSnapshot, ViewState, shape_from_dict

class ProjectIO:
    """
    Responsável por traduzir o arquivo de projeto (JSON versionado)
    para o Modelo de Domínio do PyLaje e vice-versa.

    Formato: {version, dateCreated, units: "meters", shapes: [...], view: {...}}
    """

    VERSION = "1.0"
    UNITS = "meters"

    def to_dict(self, snapshot: ProjectSnapshot) -> Dict:
        return {
            "version": self.VERSION,
            "dateCreated": datetime.now(timezone.utc).isoformat(),
            "units": self.UNITS,
            "shapes": [shape.to_dict() for shape in snapshot.shapes],
            "view": snapshot.view.to_dict(),
        }

    def from_dict(self, data: Dict) -> ProjectSnapshot:
        """
        Valida e decodifica o envelope. Qualquer divergência de schema vira
        ProjectLoadError; nada é aplicado parcialmente.
        """
        if not isinstance(data, dict):
            raise ProjectLoadError("Arquivo de projeto deve ser um objeto JSON.")

        units = data.get("units", self.UNITS)
        if units != self.UNITS:
            raise ProjectLoadError(f"Unidade não suportada: '{units}' (esperado '{self.UNITS}').")

        raw_shapes = data.get("shapes")
        if not isinstance(raw_shapes, list):
            raise ProjectLoadError("Campo 'shapes' ausente ou não é uma lista.")

        shapes = []
        seen_ids = set()
        for index, raw in enumerate(raw_shapes):
            try:
                shape = shape_from_dict(raw)
            except (KeyError, TypeError, ValueError) as e:
                # ValueError cobre GeometryError/ConfigError e enums inválidos
                raise ProjectLoadError(f"Forma #{index} inválida: {e}") from e
            if shape.id in seen_ids:
                raise ProjectLoadError(f"Id de forma duplicado: {shape.id}")
            seen_ids.add(shape.id)
            shapes.append(shape)

        view = ViewState()
        if data.get("view") is not None:
            try:
                view = ViewState.from_dict(data["view"])
            except (KeyError, TypeError, ValueError) as e:
                raise ProjectLoadError(f"Vista inválida: {e}") from e

        return ProjectSnapshot(shapes=tuple(shapes), view=view)

    def load_json(self, file_path: str) -> ProjectSnapshot:
        if not os.path.exists(file_path):
            raise ProjectLoadError(f"Arquivo de projeto não encontrado: {file_path}")

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ProjectLoadError(f"Falha ao ler {file_path}: {e}") from e

        return self.from_dict(data)

    def save_json(self, snapshot: ProjectSnapshot, file_path: str) -> Tuple[bool, str]:
        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(snapshot), f, indent=2, ensure_ascii=False)
            return True, f"Salvo em: {file_path}"
        except OSError as e:
            return False, str(e)
