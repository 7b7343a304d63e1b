"""
Floor environment for the AMR simulation.

Maps stations from grid to floor coordinates, derives the obstacle set from
station footprints plus static scenario obstacles, and buckets robot
positions into the congestion grid.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple
import numpy as np
from loguru import logger

from amrfleet.core.geometry import Obstacle, Point
from amrfleet.core.scenario import Scenario, station_floor_position


@dataclass
class EnvironmentConfig:
    """Configuration for the floor environment."""

    # Grid to floor mapping: floor = grid * pixels_per_meter + station_offset
    pixels_per_meter: float = 50.0
    station_offset: float = 100.0

    # Side of the square footprint drawn around each station (floor units)
    station_footprint: float = 40.0

    # Congestion grid cell size (floor units)
    grid_cell_size: float = 50.0

    # Start position when the scenario has no charger
    default_home: Tuple[float, float] = (100.0, 100.0)


class FloorEnvironment:
    """
    The simulated floor.

    Station positions and footprints are fixed for the scenario; static
    obstacles may be added between ticks.
    """

    def __init__(self, scenario: Scenario, config: EnvironmentConfig = None):
        """
        Initialize floor environment.

        Args:
            scenario: Scenario supplying stations and static obstacles
            config: Environment configuration
        """
        self.config = config or EnvironmentConfig()
        self.scenario = scenario

        self._station_positions: Dict[str, Point] = {
            s.id: station_floor_position(s, self.config.pixels_per_meter, self.config.station_offset)
            for s in scenario.stations
        }
        self._footprints: Dict[str, Obstacle] = {
            sid: Obstacle.centered(pos, self.config.station_footprint)
            for sid, pos in self._station_positions.items()
        }
        self._static_obstacles: List[Obstacle] = scenario.static_obstacles()

    def station_position(self, station_id: str) -> Optional[Point]:
        """Floor position of a station, or None if unknown."""
        pos = self._station_positions.get(station_id)
        return pos.copy() if pos is not None else None

    def home_position(self) -> Point:
        """Start position of new agents: the first charger, else the default."""
        charger = self.scenario.find_charger()
        if charger is not None:
            return self.station_position(charger.id)
        return Point(*self.config.default_home)

    @property
    def static_obstacles(self) -> List[Obstacle]:
        return list(self._static_obstacles)

    def add_obstacle(self, obstacle: Obstacle) -> None:
        """Add a static obstacle."""
        self._static_obstacles.append(obstacle)
        logger.info(f"Added obstacle {obstacle.to_dict()}")

    def get_all_obstacles(self) -> List[Obstacle]:
        """Station footprints followed by static obstacles."""
        return list(self._footprints.values()) + self._static_obstacles

    def obstacles_for_path(self, start: Point, destination_id: Optional[str] = None) -> List[Obstacle]:
        """
        Obstacles relevant to a path leaving ``start``.

        The destination station's own footprint and any footprint containing
        ``start`` (the station being left) are excluded, otherwise every path
        into or out of a station would be blocked by that station.
        """
        obstacles = []
        for sid, footprint in self._footprints.items():
            if sid == destination_id:
                continue
            if footprint.contains_point(start):
                continue
            obstacles.append(footprint)
        obstacles.extend(self._static_obstacles)
        return obstacles

    def compute_congestion(self, positions: Sequence[Point]) -> Dict[Tuple[int, int], int]:
        """
        Count occupants per grid cell.

        Args:
            positions: Current robot positions

        Returns:
            Mapping ``(cell_x, cell_y) -> count`` for occupied cells only
        """
        if not positions:
            return {}

        coords = np.array([[p.x, p.y] for p in positions], dtype=float)
        cells = np.floor(coords / self.config.grid_cell_size).astype(int)
        unique, counts = np.unique(cells, axis=0, return_counts=True)

        return {(int(cx), int(cy)): int(n) for (cx, cy), n in zip(unique, counts)}

    def get_statistics(self) -> Dict[str, Any]:
        """Get environment statistics."""
        return {
            "num_stations": len(self._station_positions),
            "num_static_obstacles": len(self._static_obstacles),
            "grid_cell_size": self.config.grid_cell_size,
        }
