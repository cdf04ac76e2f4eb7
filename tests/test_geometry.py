"""Tests for pylaje/engines/geometry.py primitives."""
import pytest
from pylaje.models.entities import GeometryError, Point, ViewState
from pylaje.engines.geometry import (
    angle_degrees, bounding_box, closest_point_on_segment, distance, line_length, midpoint,
    orthogonal_point, point_from_length_angle, point_in_polygon, polygon_area,
    screen_to_world, world_to_screen,
)


class TestViewTransform:
    @pytest.mark.parametrize("scale,ox,oy", [(50.0, 0, 0), (12.5, 100, -40), (0.3, -7.5, 22)])
    def test_round_trip(self, scale, ox, oy):
        view = ViewState(scale=scale, offset=Point(ox, oy))
        p = Point(3.21, -1.7)
        back = screen_to_world(world_to_screen(p, view), view)
        assert back.x == pytest.approx(p.x)
        assert back.y == pytest.approx(p.y)

    def test_world_to_screen(self):
        view = ViewState(scale=50, offset=Point(10, 20))
        assert world_to_screen(Point(1, 2), view) == Point(60, 120)


class TestDistances:
    def test_distance(self):
        assert distance(Point(0, 0), Point(3, 4)) == pytest.approx(5.0)
        assert line_length(Point(0, 0), Point(3, 4)) == pytest.approx(5.0)

    def test_midpoint(self):
        assert midpoint(Point(0, 0), Point(2, 4)) == Point(1, 2)


class TestAngles:
    def test_cardinal_angles(self):
        o = Point(0, 0)
        assert angle_degrees(o, Point(1, 0)) == pytest.approx(0)
        assert angle_degrees(o, Point(0, 1)) == pytest.approx(90)
        assert angle_degrees(o, Point(0, -1)) == pytest.approx(-90)

    def test_minus_180_maps_to_180(self):
        assert angle_degrees(Point(0, 0), Point(-1, -0.0)) == 180.0

    def test_point_from_length_angle_inverse(self):
        origin = Point(1, 1)
        end = point_from_length_angle(origin, 2.5, 30)
        assert distance(origin, end) == pytest.approx(2.5)
        assert angle_degrees(origin, end) == pytest.approx(30)

    def test_negative_length(self):
        with pytest.raises(GeometryError):
            point_from_length_angle(Point(0, 0), -1, 0)


class TestDrawingHelpers:
    def test_orthogonal_point_horizontal(self):
        assert orthogonal_point(Point(0, 0), Point(5, 1)) == Point(5, 0)

    def test_orthogonal_point_vertical(self):
        assert orthogonal_point(Point(0, 0), Point(1, 5)) == Point(0, 5)

    def test_closest_point_clamped(self):
        assert closest_point_on_segment(Point(5, 1), Point(0, 0), Point(2, 0)) == Point(2, 0)

    def test_closest_point_projection(self):
        p = closest_point_on_segment(Point(1, 3), Point(0, 0), Point(2, 0))
        assert p.x == pytest.approx(1)
        assert p.y == pytest.approx(0)


class TestPolygons:
    SQUARE = [Point(0, 0), Point(2, 0), Point(2, 2), Point(0, 2)]
    L_SHAPE = [Point(0, 0), Point(4, 0), Point(4, 2), Point(2, 2), Point(2, 4), Point(0, 4)]

    def test_area(self):
        assert polygon_area(self.SQUARE) == pytest.approx(4.0)
        assert polygon_area(self.L_SHAPE) == pytest.approx(12.0)

    def test_area_orientation_independent(self):
        assert polygon_area(list(reversed(self.L_SHAPE))) == pytest.approx(12.0)

    def test_area_rotation_independent(self):
        rotated = self.L_SHAPE[2:] + self.L_SHAPE[:2]
        assert polygon_area(rotated) == pytest.approx(12.0)

    def test_area_degenerate(self):
        assert polygon_area([Point(0, 0), Point(1, 1)]) == 0.0
        assert polygon_area([Point(0, 0), Point(1, 1), Point(2, 2)]) == pytest.approx(0.0)

    def test_bounding_box(self):
        assert bounding_box(self.L_SHAPE) == (4, 4)
        assert bounding_box([]) == (0.0, 0.0)

    def test_point_in_polygon(self):
        assert point_in_polygon(Point(1, 1), self.L_SHAPE)
        assert not point_in_polygon(Point(3, 3), self.L_SHAPE)
        assert not point_in_polygon(Point(-1, 1), self.L_SHAPE)
