"""Tests for planar geometry primitives."""

import pytest

from amrfleet.core.geometry import (
    Obstacle,
    Point,
    add_vectors,
    calculate_distance,
    multiply_vector,
    normalize_vector,
    subtract_vectors,
    segment_intersects_rect,
    segments_intersect,
)


def test_point_arithmetic():
    a = Point(3, 4)
    b = Point(1, 1)

    assert a + b == Point(4, 5)
    assert a - b == Point(2, 3)
    assert a * 2 == Point(6, 8)
    assert 2 * a == Point(6, 8)
    assert a.norm() == pytest.approx(5.0)
    assert b.distance_to(a) == pytest.approx(Point(2, 3).norm())


def test_normalized_zero_vector_stays_zero():
    assert Point(0, 0).normalized() == Point(0, 0)
    unit = Point(0, 7).normalized()
    assert unit.x == pytest.approx(0.0)
    assert unit.y == pytest.approx(1.0)


def test_point_coerces_to_float():
    p = Point.from_dict({"x": 1, "y": 2})
    assert isinstance(p.x, float)
    assert p.to_dict() == {"x": 1.0, "y": 2.0}


def test_crossing_segments_intersect():
    assert segments_intersect(Point(0, 0), Point(10, 10), Point(0, 10), Point(10, 0))


def test_parallel_segments_do_not_intersect():
    assert not segments_intersect(Point(0, 0), Point(10, 0), Point(0, 5), Point(10, 5))
    # Collinear overlap is treated as parallel too
    assert not segments_intersect(Point(0, 0), Point(10, 0), Point(5, 0), Point(15, 0))


def test_touching_endpoint_counts_as_intersection():
    assert segments_intersect(Point(0, 0), Point(10, 0), Point(10, -5), Point(10, 5))


def test_disjoint_segments():
    assert not segments_intersect(Point(0, 0), Point(1, 1), Point(5, 0), Point(6, -3))


def test_segment_through_rectangle():
    rect = Obstacle(100, 50, 100, 100)
    assert segment_intersects_rect(Point(0, 100), Point(300, 100), rect)


def test_segment_missing_rectangle():
    rect = Obstacle(100, 50, 100, 100)
    assert not segment_intersects_rect(Point(0, 0), Point(300, 0), rect)


def test_segment_fully_inside_rectangle_is_not_a_crossing():
    rect = Obstacle(100, 50, 100, 100)
    assert not segment_intersects_rect(Point(120, 80), Point(180, 120), rect)


def test_obstacle_corners_with_margin():
    rect = Obstacle(100, 50, 100, 100)
    assert rect.corners(30) == [
        Point(70, 20),
        Point(230, 20),
        Point(230, 180),
        Point(70, 180),
    ]


def test_obstacle_contains_point_with_margin():
    rect = Obstacle(100, 50, 100, 100)
    assert rect.contains_point(Point(150, 100))
    assert not rect.contains_point(Point(95, 100))
    assert rect.contains_point(Point(95, 100), margin=10)


def test_centered_obstacle():
    rect = Obstacle.centered(Point(200, 100), 40)
    assert rect == Obstacle(180, 80, 40, 40)
    assert rect.center() == Point(200, 100)
    assert rect.right == 220
    assert rect.bottom == 120


def test_vector_helpers():
    a = Point(3, 4)
    b = Point(1, 2)

    assert add_vectors(a, b) == Point(4, 6)
    assert subtract_vectors(a, b) == Point(2, 2)
    assert multiply_vector(a, 0.5) == Point(1.5, 2)
    assert calculate_distance(a, b) == pytest.approx(Point(2, 2).norm())

    unit = normalize_vector(a)
    assert unit.x == pytest.approx(0.6)
    assert unit.y == pytest.approx(0.8)


def test_normalize_zero_vector():
    assert normalize_vector(Point(0, 0)) == Point(0, 0)
