"""
Heuristic point-to-point pathfinding around rectangular obstacles.

The planner walks a fixed fallback chain of detour tiers and never searches:
- DIRECT: straight segment when nothing is in the way
- DETOUR: two waypoints beside the first blocking obstacle
- RING: corner waypoints of every obstacle, filtered by clearance
- CORNER: route around one side of the first blocking obstacle, tried only
  when the ring path still crosses an obstacle

The RING tier is an approximation. It may thread through corners with no
clearance guarantee for later obstacles and has no loop detection or cost
minimisation. The CORNER tier is appended after it and leaves the first
three tiers untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Sequence
from loguru import logger

from amrfleet.core.geometry import Obstacle, Point, segment_intersects_rect


class DetourTier(Enum):
    """Fallback level that produced a path."""
    DIRECT = auto()
    DETOUR = auto()
    RING = auto()
    CORNER = auto()


@dataclass
class PathfindingConfig:
    """Margins used by the detour tiers (floor units)."""

    # Offset of the two-waypoint detour from the blocking obstacle
    detour_margin: float = 20.0

    # Offset of ring waypoints from each obstacle corner
    ring_margin: float = 30.0

    # Ring waypoints closer than this to any obstacle are dropped
    ring_clearance: float = 10.0

    # Try the CORNER tier when the ring path is still blocked
    verify_fallback: bool = True


@dataclass
class PathResult:
    """A computed path and the tier it came from."""
    points: List[Point] = field(default_factory=list)
    tier: DetourTier = DetourTier.DIRECT

    @property
    def num_waypoints(self) -> int:
        return len(self.points)


def is_path_clear(start: Point, end: Point, obstacles: Sequence[Obstacle]) -> bool:
    """Check if a straight segment crosses no obstacle."""
    for obstacle in obstacles:
        if segment_intersects_rect(start, end, obstacle):
            return False
    return True


def is_polyline_clear(points: Sequence[Point], obstacles: Sequence[Obstacle]) -> bool:
    """Check every consecutive segment of a polyline."""
    for a, b in zip(points, points[1:]):
        if not is_path_clear(a, b, obstacles):
            return False
    return True


def first_blocking_obstacle(
    start: Point,
    end: Point,
    obstacles: Sequence[Obstacle]
) -> Optional[Obstacle]:
    """First obstacle in input order crossed by the segment."""
    for obstacle in obstacles:
        if segment_intersects_rect(start, end, obstacle):
            return obstacle
    return None


class PathPlanner:
    """
    Deterministic, side-effect free planner over a fixed tier chain.

    ``plan`` never raises for well-formed input and always returns at least
    ``[start, end]`` beginning at ``start`` and ending at ``end``.
    """

    def __init__(self, config: PathfindingConfig = None):
        self.config = config or PathfindingConfig()

    def plan(self, start: Point, end: Point, obstacles: Sequence[Obstacle]) -> PathResult:
        start = start.copy()
        end = end.copy()
        obstacles = list(obstacles)

        if is_path_clear(start, end, obstacles):
            return PathResult([start, end], DetourTier.DIRECT)

        blocking = first_blocking_obstacle(start, end, obstacles)
        detour = self._two_waypoint_detour(start, end, blocking, obstacles)
        if detour is not None:
            return PathResult(detour, DetourTier.DETOUR)

        ring = self._ring_path(start, end, obstacles)

        if self.config.verify_fallback and not is_polyline_clear(ring, obstacles):
            corner = self._corner_path(start, end, blocking, obstacles)
            if corner is not None:
                logger.debug(f"Ring path blocked, using corner route ({len(corner)} points)")
                return PathResult(corner, DetourTier.CORNER)

        return PathResult(ring, DetourTier.RING)

    def _two_waypoint_detour(
        self,
        start: Point,
        end: Point,
        blocking: Obstacle,
        obstacles: List[Obstacle]
    ) -> Optional[List[Point]]:
        """Side-step the blocking obstacle to the side start already leans to."""
        margin = self.config.detour_margin

        if start.x < blocking.x:
            side_x = blocking.right + margin
        else:
            side_x = blocking.x - margin

        wp1 = Point(side_x, start.y)
        wp2 = Point(side_x, end.y)

        if (is_path_clear(start, wp1, obstacles) and
                is_path_clear(wp1, wp2, obstacles) and
                is_path_clear(wp2, end, obstacles)):
            return [start, wp1, wp2, end]
        return None

    def _ring_path(self, start: Point, end: Point, obstacles: List[Obstacle]) -> List[Point]:
        """Non-adaptive ring of offset corners around every obstacle."""
        waypoints = [start]
        for obstacle in obstacles:
            waypoints.extend(obstacle.corners(self.config.ring_margin))
        waypoints.append(end)

        clearance = self.config.ring_clearance
        filtered = [
            wp for wp in waypoints
            if not any(ob.contains_point(wp, clearance) for ob in obstacles)
        ]

        # Endpoints survive filtering so the path always starts and ends correctly
        if not filtered or filtered[0] is not start:
            filtered.insert(0, start)
        if filtered[-1] is not end:
            filtered.append(end)

        return filtered

    def _corner_path(
        self,
        start: Point,
        end: Point,
        blocking: Obstacle,
        obstacles: List[Obstacle]
    ) -> Optional[List[Point]]:
        """Shortest clear route around one side of the blocking obstacle."""
        tl, tr, br, bl = blocking.corners(self.config.ring_margin)
        sides = [(tl, tr), (bl, br), (tl, bl), (tr, br)]

        best: Optional[List[Point]] = None
        best_length = float("inf")

        for a, b in sides:
            if start.distance_to(b) < start.distance_to(a):
                a, b = b, a
            candidate = [start, a, b, end]
            if not is_polyline_clear(candidate, obstacles):
                continue
            length = sum(p.distance_to(q) for p, q in zip(candidate, candidate[1:]))
            if length < best_length:
                best, best_length = candidate, length

        return best


_default_planner = PathPlanner()


def find_path(
    start: Point,
    end: Point,
    obstacles: Sequence[Obstacle],
    planner: PathPlanner = None
) -> List[Point]:
    """
    Compute a path from ``start`` to ``end`` around ``obstacles``.

    Args:
        start: Path origin
        end: Path destination
        obstacles: Rectangles to avoid, in priority order
        planner: Planner to use (defaults to the standard margins)

    Returns:
        Ordered waypoints beginning with ``start`` and ending with ``end``
    """
    result = (planner or _default_planner).plan(start, end, obstacles)
    logger.debug(f"Path {start.to_dict()} -> {end.to_dict()}: {result.tier.name}, "
                 f"{result.num_waypoints} points")
    return result.points
