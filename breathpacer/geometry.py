"""
Progress marker geometry.

One marker per second of the breathing cycle, laid out on a square canvas
(``size`` x ``size``, inset by ``padding``) so the UI can highlight the
marker for ``current_time % total``:

- 4 phases: square, one edge per phase (top L->R, right T->B,
  bottom R->L, left B->T)
- 3 phases: triangle (top -> bottom-right -> bottom-left -> top)
- 2 phases: circle starting at 12 o'clock, clockwise
- anything else: square with ceil(total / 4) markers per side

Markers on an edge sit at ``(i + 1.5) / (steps + 2)`` along it so they never
touch the corners. Labels restart at "1" on every edge.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple

from .techniques.definition import TechniqueDefinition

DEFAULT_SIZE = 420
DEFAULT_PADDING = 30

Vertex = Tuple[float, float]


class Shape(Enum):
    SQUARE = "square"
    TRIANGLE = "triangle"
    CIRCLE = "circle"
    SQUARE_FALLBACK = "square_fallback"


@dataclass(frozen=True)
class MarkerPoint:
    x: float
    y: float
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "label": self.label}


def select_shape(phase_count: int) -> Shape:
    """Layout used for a technique with ``phase_count`` phases."""
    if phase_count == 4:
        return Shape.SQUARE
    if phase_count == 3:
        return Shape.TRIANGLE
    if phase_count == 2:
        return Shape.CIRCLE
    return Shape.SQUARE_FALLBACK


def _edge_offset(i: int, steps: int) -> float:
    return (i + 1.5) / (steps + 2)


def _lerp(a: Vertex, b: Vertex, t: float) -> Vertex:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def _walk_edges(edges: Sequence[Tuple[Vertex, Vertex]], steps_per_edge: Sequence[int], total: int) -> List[MarkerPoint]:
    points: List[MarkerPoint] = []
    for (start, end), steps in zip(edges, steps_per_edge):
        for i in range(steps):
            if len(points) >= total:
                return points
            x, y = _lerp(start, end, _edge_offset(i, steps))
            points.append(MarkerPoint(x, y, str(i + 1)))
    return points


def _square_edges(size: float, padding: float) -> List[Tuple[Vertex, Vertex]]:
    left, top = padding, padding
    right, bottom = size - padding, size - padding
    return [
        ((left, top), (right, top)),          # top, left to right
        ((right, top), (right, bottom)),      # right, top to bottom
        ((right, bottom), (left, bottom)),    # bottom, right to left
        ((left, bottom), (left, top)),        # left, bottom to top
    ]


def _triangle_edges(size: float, padding: float) -> List[Tuple[Vertex, Vertex]]:
    apex = (size / 2, padding)
    bottom_right = (size - padding, size - padding)
    bottom_left = (padding, size - padding)
    return [(apex, bottom_right), (bottom_right, bottom_left), (bottom_left, apex)]


def _circle(total: int, size: float, padding: float) -> List[MarkerPoint]:
    center = size / 2
    radius = size / 2 - padding
    points = []
    for i in range(total):
        angle = 2 * math.pi * i / total - math.pi / 2
        points.append(MarkerPoint(center + radius * math.cos(angle), center + radius * math.sin(angle), str(i + 1)))
    return points


def generate_points(
    definition: TechniqueDefinition,
    size: float = DEFAULT_SIZE,
    padding: float = DEFAULT_PADDING,
) -> List[MarkerPoint]:
    """
    Generate progress markers for a technique.

    Args:
        definition: Technique whose durations drive the layout
        size: Canvas edge length
        padding: Inset of the layout from the canvas edge

    Returns:
        Exactly ``definition.total_duration_sec`` markers in cycle order
    """
    total = definition.total_duration_sec
    durations = list(definition.durations_sec)
    shape = select_shape(len(durations))

    if shape is Shape.CIRCLE:
        return _circle(total, size, padding)
    if shape is Shape.SQUARE:
        return _walk_edges(_square_edges(size, padding), durations, total)
    if shape is Shape.TRIANGLE:
        return _walk_edges(_triangle_edges(size, padding), durations, total)

    per_side = math.ceil(total / 4)
    return _walk_edges(_square_edges(size, padding), [per_side] * 4, total)
