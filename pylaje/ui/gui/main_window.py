from PyQt6.QtWidgets import (QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
                             QTabWidget, QPushButton, QLabel, QFileDialog,
                             QTableWidget, QTableWidgetItem, QHeaderView, QMessageBox,
                             QListWidget, QGroupBox, QSpinBox, QSplitter, QComboBox, QTextEdit)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction

# Integração Matplotlib
from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure

from pylaje.controllers.slab_controller import SlabController
from pylaje.models.entities import FillerMaterial, ProjectSnapshot, SlabConfig, SlabType
from pylaje.services.report_exporter import ReportExporter
from pylaje.ui.plots import SlabPlotter

# --- CANVAS PARA PLANTA DE LAJES ---
class PlanViewCanvas(FigureCanvas):
    def __init__(self, parent=None, width=5, height=4, dpi=100):
        self.fig = Figure(figsize=(width, height), dpi=dpi)
        self.ax = self.fig.add_subplot(111)
        self.fig.tight_layout(pad=2.0)
        super(PlanViewCanvas, self).__init__(self.fig)

    def plot_project(self, snapshot, aggregator=None):
        self.ax.cla()
        SlabPlotter.draw_project(self.ax, snapshot, aggregator)
        self.draw()

# --- JANELA PRINCIPAL ---
class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()

        self.setWindowTitle("PyLaje - Lançamento de Vigotas e Quantitativos")
        self.setGeometry(50, 50, 1400, 900)

        self.controller = SlabController()
        self.exporter = ReportExporter()
        self.snapshot = ProjectSnapshot()
        self.current_items = []
        self.selected_slab_id = None

        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.main_layout = QVBoxLayout(self.central_widget)

        self._create_menu_bar()

        self.tabs = QTabWidget()
        self.main_layout.addWidget(self.tabs)

        # ABA 1: Visão Geral (Tabela + Planta 2D)
        self.tab_project = QWidget()
        self._setup_tab_project()
        self.tabs.addTab(self.tab_project, "📁 Visão Geral & Planta")

        # ABA 2: Configuração por laje
        self.tab_slab = QWidget()
        self._setup_tab_slab()
        self.tabs.addTab(self.tab_slab, "📐 Configuração da Laje")

        # ABA 3: Resumo e Exportação
        self.tab_reports = QWidget()
        self._setup_tab_reports()
        self.tabs.addTab(self.tab_reports, "📊 Resumo & Exportação")

        self.statusBar().showMessage("Pronto.")

    def _create_menu_bar(self):
        menu = self.menuBar()
        file_menu = menu.addMenu("Arquivo")
        action_import = QAction("Abrir Projeto...", self)
        action_import.triggered.connect(self._import_json)
        file_menu.addAction(action_import)

        action_save = QAction("Salvar Projeto...", self)
        action_save.triggered.connect(self._save_project)
        file_menu.addAction(action_save)

        action_exit = QAction("Sair", self)
        action_exit.triggered.connect(self.close)
        file_menu.addAction(action_exit)

    def _setup_tab_project(self):
        layout = QHBoxLayout(self.tab_project)
        splitter = QSplitter(Qt.Orientation.Horizontal)

        # Painel Esquerdo
        left_panel = QWidget()
        left_layout = QVBoxLayout(left_panel)

        self.btn_import = QPushButton("Abrir Projeto (JSON)")
        self.btn_import.setStyleSheet("background-color: #2196F3; color: white; padding: 10px; font-weight: bold;")
        self.btn_import.clicked.connect(self._import_json)
        left_layout.addWidget(self.btn_import)

        self.table_slabs = QTableWidget()
        self.table_slabs.setColumnCount(7)
        self.table_slabs.setHorizontalHeaderLabels(
            ["Laje", "Tipo", "Material", "Área (m²)", "Vigotas", "Enchimento", "Aço"])
        self.table_slabs.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        left_layout.addWidget(self.table_slabs)

        # Painel Direito
        right_panel = QWidget()
        right_layout = QVBoxLayout(right_panel)
        right_layout.addWidget(QLabel("<b>Planta de Lajes:</b>"))

        self.plan_canvas = PlanViewCanvas(self, width=5, height=5, dpi=100)
        right_layout.addWidget(self.plan_canvas)

        splitter.addWidget(left_panel)
        splitter.addWidget(right_panel)
        splitter.setSizes([600, 700])
        layout.addWidget(splitter)

    def _setup_tab_slab(self):
        layout = QHBoxLayout(self.tab_slab)
        splitter = QSplitter(Qt.Orientation.Horizontal)

        # Esquerda
        left_panel = QWidget()
        left_layout = QVBoxLayout(left_panel)
        left_layout.addWidget(QLabel("<b>Selecione a Laje:</b>"))
        self.list_slabs = QListWidget()
        self.list_slabs.currentRowChanged.connect(self._on_slab_selected)
        left_layout.addWidget(self.list_slabs)

        # Direita
        right_panel = QWidget()
        right_layout = QVBoxLayout(right_panel)

        self.group_edit = QGroupBox("Configuração da Laje")
        self.group_edit.setEnabled(False)
        edit_layout = QHBoxLayout()

        edit_layout.addWidget(QLabel("Tipo:"))
        self.combo_type = QComboBox()
        self.combo_type.addItems([t.value for t in SlabType])
        edit_layout.addWidget(self.combo_type)

        edit_layout.addWidget(QLabel("Material:"))
        self.combo_material = QComboBox()
        self.combo_material.addItems([m.value for m in FillerMaterial])
        edit_layout.addWidget(self.combo_material)

        edit_layout.addWidget(QLabel("Enchimento L x C (cm):"))
        self.spin_unit_width = QSpinBox()
        self.spin_unit_width.setRange(0, 100); self.spin_unit_width.setValue(30)
        edit_layout.addWidget(self.spin_unit_width)
        self.spin_unit_length = QSpinBox()
        self.spin_unit_length.setRange(0, 100); self.spin_unit_length.setValue(20)
        edit_layout.addWidget(self.spin_unit_length)

        edit_layout.addWidget(QLabel("Vigota (cm):"))
        self.spin_beam_width = QSpinBox()
        self.spin_beam_width.setRange(0, 50); self.spin_beam_width.setValue(12)
        edit_layout.addWidget(self.spin_beam_width)

        self.btn_apply = QPushButton("🔄 Atualizar")
        self.btn_apply.setStyleSheet("background-color: #FF9800; color: white; font-weight: bold;")
        self.btn_apply.clicked.connect(self._apply_slab_config)
        edit_layout.addWidget(self.btn_apply)

        self.group_edit.setLayout(edit_layout)
        right_layout.addWidget(self.group_edit)

        right_layout.addWidget(QLabel("<b>Vigotas por Comprimento:</b>"))
        self.table_detail = QTableWidget()
        self.table_detail.setColumnCount(3)
        self.table_detail.setHorizontalHeaderLabels(["Quantidade", "Comprimento (m)", "Armadura"])
        self.table_detail.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        right_layout.addWidget(self.table_detail, stretch=1)

        splitter.addWidget(left_panel)
        splitter.addWidget(right_panel)
        splitter.setSizes([200, 900])
        layout.addWidget(splitter)

    def _setup_tab_reports(self):
        layout = QVBoxLayout(self.tab_reports)
        layout.addWidget(QLabel("<b>Resumo Geral do Projeto</b>"))

        self.text_summary = QTextEdit()
        self.text_summary.setReadOnly(True)
        layout.addWidget(self.text_summary)

        # Botões Rodapé
        footer = QHBoxLayout()

        self.btn_save_json = QPushButton("💾 Exportar Quantitativos (JSON)")
        self.btn_save_json.setMinimumHeight(40)
        self.btn_save_json.setStyleSheet("background-color: #4CAF50; color: white; font-weight: bold;")
        self.btn_save_json.clicked.connect(self._export_report_json)
        footer.addWidget(self.btn_save_json)

        self.btn_gen_mem = QPushButton("📝 Gerar Memorial (.md)")
        self.btn_gen_mem.setMinimumHeight(40)
        self.btn_gen_mem.clicked.connect(self._save_memorial_file)
        footer.addWidget(self.btn_gen_mem)

        layout.addLayout(footer)

    # --- LÓGICA DO SISTEMA ---

    def _import_json(self):
        file_path, _ = QFileDialog.getOpenFileName(self, "Abrir Projeto", "", "JSON (*.json)")
        if not file_path:
            return
        result = self.controller.load_project(self.snapshot, file_path)
        if not result.success:
            QMessageBox.critical(self, "Erro", result.message)
            return
        self.snapshot = result.snapshot
        self._refresh()
        self.statusBar().showMessage(result.message)

    def _save_project(self):
        file_path, _ = QFileDialog.getSaveFileName(self, "Salvar Projeto", "projeto.json", "JSON (*.json)")
        if file_path:
            success, msg = self.controller.save_project(self.snapshot, file_path)
            if success:
                self.statusBar().showMessage(msg)
            else:
                QMessageBox.critical(self, "Erro", msg)

    def _refresh(self):
        """Recalcula quantitativos e atualiza todas as abas a partir do snapshot atual."""
        self.current_items = self.controller.build_report(self.snapshot)

        # Aba 1
        self.table_slabs.setRowCount(0)
        for row, item in enumerate(self.current_items):
            self.table_slabs.insertRow(row)
            self.table_slabs.setItem(row, 0, QTableWidgetItem(item.label))
            self.table_slabs.setItem(row, 1, QTableWidgetItem(item.slab_type))
            self.table_slabs.setItem(row, 2, QTableWidgetItem(item.material_label))
            self.table_slabs.setItem(row, 3, QTableWidgetItem(f"{item.area:.2f}"))
            self.table_slabs.setItem(row, 4, QTableWidgetItem(str(item.vigota_count)))
            filler = f"{item.filler_count} {item.filler_type}" if item.filler_count else "-"
            self.table_slabs.setItem(row, 5, QTableWidgetItem(filler))
            self.table_slabs.setItem(row, 6, QTableWidgetItem(item.reinforcement_summary or "-"))
        self.plan_canvas.plot_project(self.snapshot, self.controller.aggregator)

        # Aba 2
        selected = self.selected_slab_id
        self.list_slabs.blockSignals(True)
        self.list_slabs.clear()
        for item in self.current_items:
            self.list_slabs.addItem(item.label)
        self.list_slabs.blockSignals(False)
        ids = [item.id for item in self.current_items]
        if ids:
            self.list_slabs.setCurrentRow(ids.index(selected) if selected in ids else 0)
        else:
            self.selected_slab_id = None
            self.group_edit.setEnabled(False)

        # Aba 3
        summary = self.controller.build_summary(self.snapshot, self.current_items)
        self.text_summary.setMarkdown(self.exporter.build_memorial(self.current_items, summary))

    def _on_slab_selected(self, row):
        if row < 0 or row >= len(self.current_items):
            return
        item = self.current_items[row]
        self.selected_slab_id = item.id
        slab = self.snapshot.get(item.id)
        config = slab.slab_config or SlabConfig()

        self.combo_type.setCurrentText(config.slab_type.value)
        self.combo_material.setCurrentText(config.material.value)
        self.spin_unit_width.setValue(int(config.unit_width))
        self.spin_unit_length.setValue(int(config.unit_length))
        self.spin_beam_width.setValue(int(config.beam_width))
        self.group_edit.setEnabled(True)

        self.table_detail.setRowCount(0)
        for group in item.vigota_groups:
            r = self.table_detail.rowCount()
            self.table_detail.insertRow(r)
            self.table_detail.setItem(r, 0, QTableWidgetItem(str(group.count)))
            self.table_detail.setItem(r, 1, QTableWidgetItem(f"{group.length:.2f}"))
            self.table_detail.setItem(r, 2, QTableWidgetItem("; ".join(group.reinforcement_text) or "-"))

    def _apply_slab_config(self):
        if not self.selected_slab_id:
            return
        slab = self.snapshot.get(self.selected_slab_id)
        current = slab.slab_config or SlabConfig()
        try:
            config = SlabConfig.from_dimensions(
                slab_type=SlabType(self.combo_type.currentText()),
                material=FillerMaterial(self.combo_material.currentText()),
                unit_height=current.unit_height,
                unit_width=float(self.spin_unit_width.value()),
                unit_length=float(self.spin_unit_length.value()),
                beam_width=float(self.spin_beam_width.value()),
                initial_exclusion=current.initial_exclusion,
                final_exclusion=current.final_exclusion,
                reinforcement=current.reinforcement,
            )
        except ValueError as e:
            QMessageBox.critical(self, "Erro", str(e))
            return

        result = self.controller.configure_slab(self.snapshot, self.selected_slab_id, config)
        if not result.success:
            QMessageBox.critical(self, "Erro", result.message)
            return
        self.snapshot = result.snapshot
        self._refresh()
        self.statusBar().showMessage(f"Laje {slab.label} atualizada!", 3000)

    # --- EXPORTAÇÃO ---

    def _export_report_json(self):
        if not self.current_items:
            QMessageBox.warning(self, "Aviso", "Nenhum projeto carregado.")
            return
        file_path, _ = QFileDialog.getSaveFileName(self, "Salvar Quantitativos", "quantitativos.json", "JSON (*.json)")
        if file_path:
            summary = self.controller.build_summary(self.snapshot, self.current_items)
            success, msg = self.exporter.save_json(self.current_items, summary, file_path)
            if success:
                QMessageBox.information(self, "Sucesso", f"Exportado com sucesso para:\n{file_path}")
            else:
                QMessageBox.critical(self, "Erro", msg)

    def _save_memorial_file(self):
        if not self.current_items:
            QMessageBox.warning(self, "Aviso", "Nenhum projeto carregado.")
            return
        file_path, _ = QFileDialog.getSaveFileName(self, "Salvar Memorial", "memorial_lajes.md",
                                                   "Markdown (*.md);;Text (*.txt)")
        if not file_path:
            return
        summary = self.controller.build_summary(self.snapshot, self.current_items)
        success, msg = self.exporter.save_memorial(self.current_items, summary, file_path)
        if success:
            QMessageBox.information(self, "Sucesso", msg)
        else:
            QMessageBox.critical(self, "Erro ao salvar", msg)
