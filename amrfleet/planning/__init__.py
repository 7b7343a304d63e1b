"""
Planning module for the AMR fleet.

- Heuristic detour pathfinding around rectangular obstacles
- FIFO mission queue
"""

from amrfleet.planning.pathfinding import (
    find_path,
    PathPlanner,
    PathfindingConfig,
    PathResult,
    DetourTier,
)
from amrfleet.planning.mission_queue import MissionQueue

__all__ = [
    "find_path",
    "PathPlanner",
    "PathfindingConfig",
    "PathResult",
    "DetourTier",
    "MissionQueue",
]
