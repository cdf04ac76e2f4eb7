"""Tests for the demo project, report printing and file loading of pylaje/ui/cli.py."""
from pylaje.models.entities import Point, PolygonShape, RectangleShape
from pylaje.ui.cli import CommandLineInterface, build_demo_project


class TestDemoProject:
    def test_two_slabs_laid_out(self, controller):
        snapshot = build_demo_project(controller)
        slabs = snapshot.slabs
        assert [s.label for s in slabs] == ["L1", "L2"]
        assert isinstance(slabs[0], RectangleShape)
        assert isinstance(slabs[1], PolygonShape)

        items = controller.build_report(snapshot)
        assert [item.joist_count for item in items] == [10, 10]
        assert items[0].ribs[0].count == 1
        assert items[1].area < items[1].gross_area

    def test_print_detailed_report(self, controller, capsys):
        cli = CommandLineInterface()
        items = controller.build_report(build_demo_project(controller))
        cli._print_detailed_report(items)
        out = capsys.readouterr().out
        assert ">> LAJE: L1 (H8 - Cerâmica)" in out
        assert "[VIGOTAS] 10 un." in out
        assert "[NERVURA] plastic" in out
        assert "20 fios CA60 Ø4.2mm c/3,20m" in out


class TestLoadFile:
    def _cli_with_project(self):
        cli = CommandLineInterface()
        cli.snapshot = cli.controller.add_rectangle(cli.snapshot, Point(0, 0), Point(4, 3)).snapshot
        cli.current_items = cli.controller.build_report(cli.snapshot)
        return cli

    def test_bad_file_keeps_loaded_project(self, tmp_path, monkeypatch):
        cli = self._cli_with_project()
        before_snapshot, before_items = cli.snapshot, cli.current_items
        path = tmp_path / "ruim.json"
        path.write_text("{not json", encoding="utf-8")
        monkeypatch.setattr("builtins.input", lambda *args: str(path))

        cli._menu_load_file()
        assert cli.snapshot is before_snapshot
        assert cli.current_items is before_items

    def test_good_file_replaces_project(self, controller, tmp_path, monkeypatch):
        cli = self._cli_with_project()
        path = tmp_path / "demo.json"
        controller.save_project(build_demo_project(controller), str(path))
        monkeypatch.setattr("builtins.input", lambda *args: str(path))

        cli._menu_load_file()
        assert [s.label for s in cli.snapshot.slabs] == ["L1", "L2"]
        assert len(cli.current_items) == 2
