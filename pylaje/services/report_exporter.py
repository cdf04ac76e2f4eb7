import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
from pylaje.engines.quantity_aggregator import ProjectSummary, SlabReportItem

class ReportExporter:
    """
    Exportador do levantamento de quantitativos (tabela, JSON e memorial).
    Apenas formata: os números vêm prontos do QuantityAggregator.
    """

    def __init__(self, output_path: str = "quantitativos.json", project_name: str = "Projeto de Lajes"):
        self.output_path = output_path
        self.project_name = project_name

    # --- TABELA ---

    def to_rows(self, items: Sequence[SlabReportItem]) -> List[Dict[str, Any]]:
        """Uma linha por laje, pronta para tabela (GUI) ou JSON."""
        rows = []
        for item in items:
            rows.append({
                "id": item.id,
                "laje": item.label,
                "tipo": item.slab_type,
                "material": item.material_label,
                "area_m2": round(item.area, 2),
                "area_bruta_m2": round(item.gross_area, 2),
                "dimensoes": f"{item.width:.2f} x {item.height:.2f}",
                "vigotas": item.vigota_count,
                "vigotas_avulsas": item.extra_vigota_count,
                "comprimentos": [
                    {"comprimento_m": g.length, "quantidade": g.count, "armadura": list(g.reinforcement_text)}
                    for g in item.vigota_groups
                ],
                "enchimento": {"tipo": item.filler_type, "quantidade": item.filler_count},
                "nervuras": [
                    {
                        "tipo": r.rib_type,
                        "bitola": r.steel_diameter,
                        "quantidade": r.count,
                        "comprimento_m": round(r.total_length, 2),
                        "canaletas": r.channel_count,
                        "aco_m": round(r.steel_total_length, 2),
                    }
                    for r in item.ribs
                ],
                "aco": [
                    {"descricao": t.description, "comprimento_m": round(t.total_length, 2)}
                    for t in item.reinforcement_totals
                ],
                "lista_corte": list(item.reinforcement_lines),
            })
        return rows

    def summary_to_dict(self, summary: ProjectSummary) -> Dict[str, Any]:
        return {
            "total_lajes": summary.slab_count,
            "area_total_m2": round(summary.grand_total_area, 2),
            "total_vigotas": summary.joist_count,
            "por_tipo": [
                {
                    "tipo": t.slab_type,
                    "lajes": t.slab_count,
                    "area_m2": round(t.total_area, 2),
                    "vigotas": t.joist_count,
                    "enchimento": {d.description: d.count for d in t.filler_details},
                }
                for t in summary.by_slab_type
            ],
            "enchimento": {d.description: d.count for d in summary.by_filler_type},
            "aco": {t.description: round(t.total_length, 2) for t in summary.steel_totals},
        }

    def save_json(self, items: Sequence[SlabReportItem], summary: ProjectSummary,
                  filepath: Optional[str] = None) -> Tuple[bool, str]:
        """Salva lajes + resumo no JSON."""
        path = filepath if filepath else self.output_path
        data = {"lajes": self.to_rows(items), "resumo": self.summary_to_dict(summary)}
        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=4, ensure_ascii=False)
            return True, f"Salvo em: {path}"
        except OSError as e:
            return False, str(e)

    # --- MEMORIAL ---

    def build_memorial(self, items: Sequence[SlabReportItem], summary: ProjectSummary,
                       date: Optional[datetime] = None) -> str:
        """
        Memorial de quantitativos em Markdown: uma seção por laje e o resumo geral.
        """
        date = date or datetime.now()
        out = [
            f"# Memorial de Quantitativos - {self.project_name}",
            "",
            f"Data: {date.strftime('%d/%m/%Y')}",
            "",
        ]

        for item in items:
            out.append(f"## {item.label}")
            out.append("")
            if item.slab_type == "-":
                out.append("Laje sem configuração de vigotas.")
                out.append(f"- Área: {item.area:.2f} m²")
                out.append("")
                continue

            out.append(f"- Tipo: {item.slab_type} ({item.material_label})")
            out.append(f"- Dimensões: {item.width:.2f} x {item.height:.2f} m")
            out.append(f"- Área: {item.area:.2f} m²")
            out.append(f"- Vigotas: {item.vigota_count}")
            if item.has_extra_vigotas:
                out.append(f"  - Avulsas: {item.extra_vigota_count}")
            for group in item.vigota_groups:
                out.append(f"  - {group.count}x {group.length:.2f} m")
                for text in group.reinforcement_text:
                    out.append(f"    - {text}")
            if item.filler_count:
                out.append(f"- Enchimento: {item.filler_count} un. {item.filler_type}")
            for rib in item.ribs:
                out.append(
                    f"- Nervura {rib.rib_type} Ø{rib.steel_diameter}mm: {rib.count} un., "
                    f"{rib.total_length:.2f} m, {rib.channel_count} canaletas, {rib.steel_total_length:.2f} m de aço"
                )
            if item.reinforcement_totals:
                out.append(f"- Aço: {item.reinforcement_summary}")
                for line in item.reinforcement_lines:
                    out.append(f"  - {line}")
            out.append("")

        out.append("## Resumo Geral")
        out.append("")
        out.append("| Tipo | Lajes | Área (m²) | Vigotas geradas |")
        out.append("|---|---|---|---|")
        for t in summary.by_slab_type:
            out.append(f"| {t.slab_type} | {t.slab_count} | {t.total_area:.2f} | {t.joist_count} |")
        out.append(f"| **Total** | {summary.slab_count} | {summary.grand_total_area:.2f} | {summary.joist_count} |")
        out.append("")

        if summary.by_filler_type:
            out.append("### Enchimento")
            out.append("")
            for d in summary.by_filler_type:
                out.append(f"- {d.description}: {d.count} un.")
            out.append("")

        if summary.steel_totals:
            out.append("### Aço")
            out.append("")
            for t in summary.steel_totals:
                out.append(f"- {t.description}: {t.total_length:.2f} m")
            out.append("")

        return "\n".join(out)

    def save_memorial(self, items: Sequence[SlabReportItem], summary: ProjectSummary,
                      filepath: str) -> Tuple[bool, str]:
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write(self.build_memorial(items, summary))
            return True, f"Memorial salvo em: {filepath}"
        except OSError as e:
            return False, str(e)
