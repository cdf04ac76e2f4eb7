import os
import sys

from pylaje.controllers.slab_controller import SlabController
from pylaje.models.entities import (
    Point, ProjectSnapshot, ReinforcementConfig, SlabConfig, SlabType, SteelType, TransverseRibConfig,
)
from pylaje.ui.plots import SlabPlotter
from pylaje.services.report_exporter import ReportExporter

class CommandLineInterface:
    def __init__(self):
        self.controller = SlabController()
        self.snapshot = ProjectSnapshot()
        self.current_items = []

    def run(self):
        while True:
            self._clear_screen()
            print("==================================================")
            print("    PyLaje - Lançamento e Quantitativos de Lajes  ")
            print("==================================================")
            print("1. Carregar Projeto (JSON)")
            print("2. Resumo Geral")
            print("3. Visualizar Planta")
            print("4. Exportar Quantitativos (JSON)")
            print("5. Gerar Memorial (.md)")
            print("6. Modo Demo")
            print("0. Sair")
            print("==================================================")

            if self.current_items:
                print(f"Status: {len(self.current_items)} laje(s) carregada(s).")
            else:
                print("Status: Nenhuma laje carregada.")
            print("==================================================")

            choice = input("Opção: ")

            if choice == "1":
                self._menu_load_file()
            elif choice == "2":
                if self.current_items: self._menu_summary()
            elif choice == "3":
                if self.snapshot.shapes: SlabPlotter.plot_project(self.snapshot)
            elif choice == "4":
                if self.current_items: self._menu_export()
            elif choice == "5":
                if self.current_items: self._menu_memorial()
            elif choice == "6":
                self._menu_demo()
            elif choice == "0":
                sys.exit()

    def _menu_load_file(self):
        path = input("\nArquivo JSON (ex: projeto.json): ")
        if not os.path.exists(path):
            print("Arquivo não encontrado!")
            input("Enter...")
            return

        print("\nProcessando...")
        result, items = self.controller.run_batch_report(path, self.snapshot)
        if result.success:
            self.snapshot, self.current_items = result.snapshot, items
            self._print_detailed_report(self.current_items)
        input("\nPressione Enter para voltar...")

    def _print_detailed_report(self, items):
        print("\n" + "="*80)
        print(f"{'RELATÓRIO DE QUANTITATIVOS POR LAJE':^80}")
        print("="*80)

        for item in items:
            print(f"\n>> LAJE: {item.label} ({item.slab_type} - {item.material_label})")
            print(f"   Dimensões: {item.width:.2f} x {item.height:.2f} m | Área: {item.area:.2f} m²")
            print(f"   {'-'*70}")

            if item.slab_type == "-":
                print("     [!] Laje sem configuração de vigotas.")
                continue

            print(f"   [VIGOTAS] {item.vigota_count} un.")
            for group in item.vigota_groups:
                print(f"     {group.count}x {group.length:.2f} m")
                for text in group.reinforcement_text:
                    print(f"        {text}")
            if item.has_extra_vigotas:
                print(f"     Avulsas: {item.extra_vigota_count}")

            if item.filler_count:
                print(f"   [ENCHIMENTO] {item.filler_count} un. {item.filler_type}")

            for rib in item.ribs:
                print(f"   [NERVURA] {rib.rib_type} Ø{rib.steel_diameter}mm: {rib.count} un., "
                      f"{rib.total_length:.2f} m, {rib.channel_count} canaletas")

            if item.reinforcement_totals:
                print(f"   [AÇO] {item.reinforcement_summary}")
                for line in item.reinforcement_lines:
                    print(f"     {line}")
            print(f"   {'-'*70}")

    def _menu_summary(self):
        summary = self.controller.build_summary(self.snapshot, self.current_items)
        print("\n" + "="*60)
        print(f"{'RESUMO GERAL':^60}")
        print("="*60)
        for t in summary.by_slab_type:
            print(f"{t.slab_type:<6} {t.slab_count:>3} laje(s)  {t.total_area:>8.2f} m²  {t.joist_count:>4} vigotas")
        print("-"*60)
        print(f"TOTAL  {summary.slab_count:>3} laje(s)  {summary.grand_total_area:>8.2f} m²  {summary.joist_count:>4} vigotas")

        for d in summary.by_filler_type:
            print(f"  {d.description}: {d.count} un.")
        for t in summary.steel_totals:
            print(f"  {t.description}: {t.total_length:.2f} m")
        input("\nPressione Enter para continuar...")

    def _menu_export(self):
        exporter = ReportExporter()
        summary = self.controller.build_summary(self.snapshot, self.current_items)
        success, msg = exporter.save_json(self.current_items, summary)
        print(msg if success else f"Erro: {msg}")
        input("Enter...")

    def _menu_memorial(self):
        exporter = ReportExporter()
        summary = self.controller.build_summary(self.snapshot, self.current_items)
        success, msg = exporter.save_memorial(self.current_items, summary, "memorial_lajes.md")
        print(msg if success else f"Erro: {msg}")
        input("Enter...")

    def _menu_demo(self):
        filename = "demo_lajes.json"
        snapshot = build_demo_project(self.controller)
        success, msg = self.controller.save_project(snapshot, filename)
        if success:
            print(f"Arquivo '{filename}' criado com sucesso!")
        else:
            print(f"[ERRO] {msg}")
        input("Pressione Enter para continuar...")

    def _clear_screen(self):
        os.system('cls' if os.name == 'nt' else 'clear')


def build_demo_project(controller: SlabController) -> ProjectSnapshot:
    """Projeto de exemplo: uma laje H8 4x3 m com nervura e uma laje em L desenhada por linhas."""
    config = SlabConfig.from_dimensions(
        slab_type=SlabType.H8,
        reinforcement=(ReinforcementConfig(quantity=2, steel_type=SteelType.CA60, diameter="4.2", anchorage=10),),
    )
    snapshot = ProjectSnapshot()

    result = controller.add_rectangle(snapshot, Point(0, 0), Point(4, 3))
    slab_id = result.shape_id
    snapshot = controller.layout_slab(result.snapshot, slab_id, Point(0, 0), Point(0, 1), config).snapshot
    snapshot = controller.add_rib(snapshot, Point(0, 1.5), Point(4, 1.5), TransverseRibConfig()).snapshot

    outline = [Point(5, 0), Point(9, 0), Point(9, 2), Point(7, 2), Point(7, 4), Point(5, 4)]
    for a, b in zip(outline, outline[1:] + outline[:1]):
        snapshot = controller.add_line(snapshot, a, b).snapshot
    result = controller.merge_cycle(snapshot)
    snapshot = controller.layout_slab(result.snapshot, result.shape_id, Point(5, 0), Point(5, 1), config).snapshot
    return snapshot


if __name__ == "__main__":
    cli = CommandLineInterface()
    cli.run()
