"""Tests for pylaje/engines/cycle_detector.py."""
import random

import pytest
from pylaje.models.entities import ArrowShape, LineShape, Point
from pylaje.engines.cycle_detector import CycleDetector
from pylaje.engines.geometry import polygon_area


def _lines(points, prefix="l"):
    pairs = zip(points, points[1:] + points[:1])
    return [LineShape(id=f"{prefix}{i}", points=(a, b)) for i, (a, b) in enumerate(pairs)]


SQUARE = [Point(0, 0), Point(1, 0), Point(1, 1), Point(0, 1)]


class TestFindCycle:
    def test_square(self):
        result = CycleDetector().find_cycle(_lines(SQUARE))
        assert result is not None
        assert len(result.points) == 4
        assert set(result.line_ids) == {"l0", "l1", "l2", "l3"}
        assert polygon_area(result.points) == pytest.approx(1.0)

    def test_triangle(self):
        tri = [Point(0, 0), Point(3, 0), Point(0, 4)]
        result = CycleDetector().find_cycle(_lines(tri))
        assert len(result.points) == 3
        assert polygon_area(result.points) == pytest.approx(6.0)

    def test_open_chain(self):
        lines = _lines(SQUARE)[:3]
        assert CycleDetector().find_cycle(lines) is None

    def test_two_parallel_lines_are_not_a_cycle(self):
        a, b = Point(0, 0), Point(1, 0)
        lines = [LineShape(id="x", points=(a, b)), LineShape(id="y", points=(b, a))]
        assert CycleDetector().find_cycle(lines) is None

    def test_dangling_line_not_consumed(self):
        lines = _lines(SQUARE) + [LineShape(id="tail", points=(Point(1, 1), Point(3, 3)))]
        result = CycleDetector().find_cycle(lines)
        assert "tail" not in result.line_ids
        assert len(result.line_ids) == 4

    def test_float_noise_tolerated(self):
        lines = [
            LineShape(id="a", points=(Point(0, 0), Point(1, 0))),
            LineShape(id="b", points=(Point(1.00001, 0.00002), Point(1, 1))),
            LineShape(id="c", points=(Point(1, 1), Point(0, 1))),
            LineShape(id="d", points=(Point(0, 1), Point(0.00003, -0.00001))),
        ]
        result = CycleDetector(precision=1e-4).find_cycle(lines)
        assert result is not None
        # Usa a coordenada original do primeiro ponto visto
        assert Point(1, 0) in result.points
        assert Point(0, 0) in result.points

    def test_non_line_shapes_ignored(self):
        arrows = [ArrowShape(id=f"a{i}", points=(a, b))
                  for i, (a, b) in enumerate(zip(SQUARE, SQUARE[1:] + SQUARE[:1]))]
        assert CycleDetector().find_cycle(arrows) is None

    def test_zero_length_lines_ignored(self):
        lines = _lines(SQUARE) + [LineShape(id="z", points=(Point(0, 0), Point(0, 0)))]
        result = CycleDetector().find_cycle(lines)
        assert "z" not in result.line_ids

    def test_input_not_mutated(self):
        lines = _lines(SQUARE)
        before = list(lines)
        CycleDetector().find_cycle(lines)
        assert lines == before

    def test_empty(self):
        assert CycleDetector().find_cycle([]) is None


QUAD = [Point(0, 0), Point(4, 0), Point(5, 3), Point(1, 2)]


class TestDrawingOrder:
    @pytest.mark.parametrize("seed", range(20))
    def test_shuffled_and_reversed_lines(self, seed):
        rng = random.Random(seed)
        lines = _lines(QUAD)
        lines = [LineShape(id=l.id, points=l.points[::-1]) if rng.random() < 0.5 else l for l in lines]
        rng.shuffle(lines)

        result = CycleDetector().find_cycle(lines)
        assert result is not None
        assert set(result.line_ids) == {"l0", "l1", "l2", "l3"}
        assert set(result.points) == set(QUAD)
        assert polygon_area(result.points) == pytest.approx(9.5)
