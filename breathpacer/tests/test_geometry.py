"""Tests for progress marker geometry."""

import math

import pytest

from breathpacer.geometry import MarkerPoint, Shape, generate_points, select_shape


@pytest.mark.parametrize(
    "count, shape",
    [(4, Shape.SQUARE), (3, Shape.TRIANGLE), (2, Shape.CIRCLE), (1, Shape.SQUARE_FALLBACK), (5, Shape.SQUARE_FALLBACK)],
)
def test_select_shape(count, shape):
    assert select_shape(count) is shape


def test_point_count_equals_total_for_builtins(registry):
    for technique in registry.get_all_techniques():
        assert len(generate_points(technique)) == technique.total_duration_sec


@pytest.mark.parametrize("durations", [[1], [3], [5], [2, 3, 4, 5, 6], [7, 1, 1, 1, 1, 1]])
def test_point_count_fallback(make_technique, durations):
    assert len(generate_points(make_technique(durations))) == sum(durations)


def test_box_first_marker(box4):
    points = generate_points(box4)
    assert points[0] == MarkerPoint(30 + 1.5 / 6 * 360, 30, "1")
    assert points[0].x == pytest.approx(120.0)


def test_box_edges_and_labels(box4):
    points = generate_points(box4)
    top, right, bottom, left = points[0:4], points[4:8], points[8:12], points[12:16]
    assert all(p.y == 30 for p in top)
    assert all(p.x == 390 for p in right)
    assert all(p.y == 390 for p in bottom)
    assert all(p.x == 30 for p in left)
    # top runs left to right, bottom right to left
    assert [p.x for p in top] == sorted(p.x for p in top)
    assert [p.x for p in bottom] == sorted((p.x for p in bottom), reverse=True)
    for edge in (top, right, bottom, left):
        assert [p.label for p in edge] == ["1", "2", "3", "4"]


def test_square_uses_each_phase_duration(make_technique):
    points = generate_points(make_technique([2, 3, 4, 5]))
    assert [p.label for p in points] == ["1", "2", "1", "2", "3", "1", "2", "3", "4", "1", "2", "3", "4", "5"]


def test_triangle_edges(four_seven_eight):
    points = generate_points(four_seven_eight)
    assert len(points) == 19
    first_edge, second_edge, third_edge = points[:4], points[4:11], points[11:]
    assert [p.label for p in first_edge] == ["1", "2", "3", "4"]
    assert second_edge[-1].label == "7"
    assert third_edge[-1].label == "8"
    # base edge sits on the bottom line
    assert all(p.y == pytest.approx(390) for p in second_edge)
    # first edge runs from apex (210, 30) towards bottom-right
    t = 1.5 / 6
    assert first_edge[0].x == pytest.approx(210 + (390 - 210) * t)
    assert first_edge[0].y == pytest.approx(30 + (390 - 30) * t)


def test_circle_starts_at_top(registry):
    coherent = registry.get_technique("coherent")
    points = generate_points(coherent)
    assert len(points) == 10
    assert points[0].x == pytest.approx(210)
    assert points[0].y == pytest.approx(30)
    assert [p.label for p in points] == [str(i) for i in range(1, 11)]
    for p in points:
        assert math.hypot(p.x - 210, p.y - 210) == pytest.approx(180)


def test_fallback_fills_sides_in_order(make_technique):
    points = generate_points(make_technique([5]))
    # ceil(5 / 4) == 2 per side: top 2, right 2, bottom 1
    assert [p.label for p in points] == ["1", "2", "1", "2", "1"]
    assert points[0].y == 30 and points[1].y == 30
    assert points[2].x == 390 and points[3].x == 390
    assert points[4].y == 390


def test_custom_canvas(box4):
    points = generate_points(box4, size=200, padding=10)
    assert points[0].y == 10
    assert all(10 <= p.x <= 190 and 10 <= p.y <= 190 for p in points)


def test_marker_to_dict():
    assert MarkerPoint(1.0, 2.0, "3").to_dict() == {"x": 1.0, "y": 2.0, "label": "3"}
