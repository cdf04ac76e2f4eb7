"""Tests for pylaje/engines/beam_layout.py joist layout generation."""
import math

import pytest
from pylaje.models.entities import Point, RectangleShape
from pylaje.engines.beam_layout import BeamLayoutEngine, BeamLine
from pylaje.engines.geometry import point_in_polygon

RECT = [Point(0, 0), Point(4, 0), Point(4, 3), Point(0, 3)]
L_SHAPE = [Point(0, 0), Point(4, 0), Point(4, 2), Point(2, 2), Point(2, 4), Point(0, 4)]
U_SHAPE = [Point(0, 0), Point(3, 0), Point(3, 3), Point(2, 3),
           Point(2, 1), Point(1, 1), Point(1, 3), Point(0, 3)]

UP = (Point(0, 0), Point(0, 1))
RIGHT = (Point(0, 0), Point(1, 0))


@pytest.fixture
def engine():
    return BeamLayoutEngine()


class TestRectangle:
    def test_ten_joists_of_three_meters(self, engine):
        result = engine.generate(RECT, *UP, inter_eixo=0.42)
        assert result.joist_count == 10
        for length in result.lengths:
            assert length == pytest.approx(3.0)
        assert result.total_length == pytest.approx(30.0)

    def test_offsets_follow_spacing(self, engine):
        result = engine.generate(RECT, *UP, inter_eixo=0.42)
        offsets = sorted(line.offset for line in result.beam_lines)
        for k, offset in enumerate(offsets):
            assert offset == pytest.approx(-4 + k * 0.42)

    def test_joists_parallel_to_direction(self, engine):
        result = engine.generate(RECT, *UP, inter_eixo=0.42)
        for line in result.beam_lines:
            assert line.start.x == pytest.approx(line.end.x)

    def test_boundary_joists_included(self, engine):
        result = engine.generate(RECT, *UP, inter_eixo=1.0)
        xs = sorted(line.start.x for line in result.beam_lines)
        assert xs == pytest.approx([0, 1, 2, 3, 4])

    def test_other_direction(self, engine):
        result = engine.generate(RECT, *RIGHT, inter_eixo=0.42)
        # 3 m / 0.42 -> 7 vãos + 1
        assert result.joist_count == math.floor(3 / 0.42) + 1
        for length in result.lengths:
            assert length == pytest.approx(4.0)

    def test_exclusions_measured_along_direction(self, engine):
        result = engine.generate(RECT, *UP, inter_eixo=0.42, initial_exclusion=0.10, final_exclusion=0.20)
        assert result.joist_count == 10
        for line in result.beam_lines:
            assert line.length == pytest.approx(2.7)
            assert min(line.start.y, line.end.y) == pytest.approx(0.10)
            assert max(line.start.y, line.end.y) == pytest.approx(2.80)

    def test_rotated_rectangle(self, engine):
        angle = math.radians(30)
        c, s = math.cos(angle), math.sin(angle)
        rotated = [Point(p.x * c - p.y * s, p.x * s + p.y * c) for p in RECT]
        origin, target = Point(0, 0), Point(-s, c)
        result = engine.generate(rotated, origin, target, inter_eixo=0.42)
        assert result.joist_count == 10
        for length in result.lengths:
            assert length == pytest.approx(3.0)


class TestNonConvex:
    def test_l_shape(self, engine):
        result = engine.generate(L_SHAPE, *UP, inter_eixo=1.0)
        assert result.joist_count == 5
        assert sorted(result.lengths) == pytest.approx([2, 2, 4, 4, 4])

    def test_u_shape_splits_line_in_two(self, engine):
        result = engine.generate(U_SHAPE, *RIGHT, inter_eixo=1.0)
        at_two = [line for line in result.beam_lines if line.offset == pytest.approx(2.0)]
        assert len(at_two) == 2
        spans = sorted((min(l.start.x, l.end.x), max(l.start.x, l.end.x)) for l in at_two)
        assert spans[0] == pytest.approx((0, 1))
        assert spans[1] == pytest.approx((2, 3))

    def test_segments_inside_polygon(self, engine):
        result = engine.generate(U_SHAPE, *RIGHT, inter_eixo=0.5)
        for line in result.beam_lines:
            mid = Point((line.start.x + line.end.x) / 2, (line.start.y + line.end.y) / 2)
            nudged = Point(mid.x, min(max(mid.y, 1e-6), 3 - 1e-6))
            assert point_in_polygon(nudged, U_SHAPE)


class TestInfeasible:
    def test_zero_spacing(self, engine):
        assert engine.generate(RECT, *UP, inter_eixo=0).joist_count == 0

    def test_negative_spacing(self, engine):
        assert engine.generate(RECT, *UP, inter_eixo=-0.42).joist_count == 0

    def test_zero_length_axis(self, engine):
        assert engine.generate(RECT, Point(1, 1), Point(1, 1), inter_eixo=0.42).joist_count == 0

    def test_exclusions_larger_than_extent(self, engine):
        result = engine.generate(RECT, *UP, inter_eixo=0.42, initial_exclusion=2.0, final_exclusion=1.5)
        assert result.joist_count == 0

    def test_too_few_points(self, engine):
        assert engine.generate(RECT[:2], *UP, inter_eixo=0.42).joist_count == 0


class TestSlabHelpers:
    def test_generate_for_slab(self, engine, rect_4x3):
        result = engine.generate_for_slab(rect_4x3)
        assert result.joist_count == 10

    def test_generate_for_slab_without_axis(self, engine):
        slab = RectangleShape.from_corners("s", Point(0, 0), Point(4, 3))
        assert engine.generate_for_slab(slab) is None

    def test_net_area(self, engine):
        result = engine.generate(RECT, *UP, inter_eixo=0.42)
        assert BeamLayoutEngine.net_area(RECT, result.beam_lines, 0.12) == pytest.approx(8.4)

    def test_net_area_floored_at_zero(self):
        lines = [BeamLine(Point(0, 0), Point(0, 3))]
        assert BeamLayoutEngine.net_area(RECT, lines, 10.0) == 0.0

    def test_beam_line_to_dict(self):
        data = BeamLine(Point(0, 0), Point(3, 4)).to_dict()
        assert data["length"] == pytest.approx(5.0)
        assert data["start"] == {"x": 0, "y": 0}


class TestExclusionMonotonic:
    @pytest.mark.parametrize("share", [0.0, 0.5, 1.0])
    def test_count_never_grows_with_exclusions(self, engine, share):
        counts = []
        for step in range(17):
            total = step * 0.25
            result = engine.generate(L_SHAPE, *UP, inter_eixo=0.5,
                                     initial_exclusion=total * share,
                                     final_exclusion=total * (1 - share))
            counts.append(result.joist_count)
        assert counts[0] > 0
        assert counts[-1] == 0
        assert all(b <= a for a, b in zip(counts, counts[1:]))
