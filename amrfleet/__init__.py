"""
AMRFleet: tick-driven simulation of autonomous mobile robot fleets.

This package provides:
- Scenario configuration (stations, robot types, missions)
- Heuristic detour pathfinding around rectangular obstacles
- Priority-by-identity collision avoidance
- A simulation engine with FIFO mission assignment, battery bookkeeping
  and congestion tracking

License: MIT
"""

__version__ = "1.0.0"

from amrfleet.core.geometry import Point, Obstacle
from amrfleet.core.scenario import Scenario, Station, RobotType, Mission, MissionStep
from amrfleet.core.state import AgentStatus, SimulationState
from amrfleet.planning.pathfinding import find_path
from amrfleet.simulation.engine import SimulationEngine, SimulationConfig

__all__ = [
    # Version info
    "__version__",
    # Core classes
    "Point",
    "Obstacle",
    "Scenario",
    "Station",
    "RobotType",
    "Mission",
    "MissionStep",
    "AgentStatus",
    "SimulationState",
    "find_path",
    "SimulationEngine",
    "SimulationConfig",
]
