"""
Planar geometry primitives for the AMR floor.

This module defines:
- Point: 2D floor-plane coordinate (pixels in the rendered space)
- Obstacle: axis-aligned rectangle used for path clearance checks
- Segment/segment and segment/rectangle intersection tests
- Small vector helpers used by the movement model
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple
import numpy as np


# Parallel-line guard for the parametric intersection test
PARALLEL_EPSILON = 1e-4


@dataclass
class Point:
    """2D point on the floor plane."""
    x: float = 0.0
    y: float = 0.0

    def __post_init__(self):
        """Convert to float if needed."""
        self.x = float(self.x)
        self.y = float(self.y)

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> Point:
        return cls(x=data["x"], y=data["y"])

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    def copy(self) -> Point:
        return Point(self.x, self.y)

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Point:
        return Point(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> Point:
        return self.__mul__(scalar)

    def norm(self) -> float:
        """Euclidean length."""
        return float(np.hypot(self.x, self.y))

    def normalized(self) -> Point:
        """Unit vector in the same direction (zero vector stays zero)."""
        n = self.norm()
        if n == 0:
            return Point(0.0, 0.0)
        return Point(self.x / n, self.y / n)

    def distance_to(self, other: Point) -> float:
        return (other - self).norm()


@dataclass(frozen=True)
class Obstacle:
    """
    Axis-aligned rectangular obstacle.

    ``(x, y)`` is the top-left corner in floor coordinates; the rectangle
    extends ``width`` to the right and ``height`` downwards.
    """
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Obstacle:
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )

    @classmethod
    def centered(cls, center: Point, size: float) -> Obstacle:
        """Square obstacle of side ``size`` centred on ``center``."""
        half = size / 2.0
        return cls(center.x - half, center.y - half, size, size)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def edges(self) -> List[Tuple[Point, Point]]:
        """Edges in top, right, bottom, left order."""
        top_left = Point(self.x, self.y)
        top_right = Point(self.right, self.y)
        bottom_right = Point(self.right, self.bottom)
        bottom_left = Point(self.x, self.bottom)
        return [
            (top_left, top_right),
            (top_right, bottom_right),
            (bottom_right, bottom_left),
            (bottom_left, top_left),
        ]

    def corners(self, margin: float = 0.0) -> List[Point]:
        """Corners offset outward by ``margin``, clockwise from top-left."""
        return [
            Point(self.x - margin, self.y - margin),
            Point(self.right + margin, self.y - margin),
            Point(self.right + margin, self.bottom + margin),
            Point(self.x - margin, self.bottom + margin),
        ]

    def contains_point(self, point: Point, margin: float = 0.0) -> bool:
        """Check if point lies inside the rectangle grown by ``margin``."""
        return (self.x - margin <= point.x <= self.right + margin and
                self.y - margin <= point.y <= self.bottom + margin)

    def center(self) -> Point:
        return Point(self.x + self.width / 2.0, self.y + self.height / 2.0)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


def segments_intersect(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """
    Check whether segment ``p1→p2`` intersects segment ``p3→p4``.

    Uses the parametric form of both lines. Parallel (and collinear)
    segments are reported as not intersecting.
    """
    denom = (p1.x - p2.x) * (p3.y - p4.y) - (p1.y - p2.y) * (p3.x - p4.x)
    if abs(denom) < PARALLEL_EPSILON:
        return False

    t = ((p1.x - p3.x) * (p3.y - p4.y) - (p1.y - p3.y) * (p3.x - p4.x)) / denom
    u = -((p1.x - p2.x) * (p1.y - p3.y) - (p1.y - p2.y) * (p1.x - p3.x)) / denom

    return 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0


def segment_intersects_rect(start: Point, end: Point, rect: Obstacle) -> bool:
    """Check whether a segment crosses any of the rectangle's four edges."""
    for edge_start, edge_end in rect.edges():
        if segments_intersect(start, end, edge_start, edge_end):
            return True
    return False


def calculate_distance(point1: Point, point2: Point) -> float:
    """Distance between two points."""
    return point1.distance_to(point2)


def normalize_vector(point: Point) -> Point:
    """Convert to unit vector."""
    return point.normalized()


def multiply_vector(point: Point, scalar: float) -> Point:
    return point * scalar


def add_vectors(point1: Point, point2: Point) -> Point:
    return point1 + point2


def subtract_vectors(point1: Point, point2: Point) -> Point:
    return point1 - point2
