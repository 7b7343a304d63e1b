"""
Core module for the AMR fleet simulation.

Contains geometry primitives, scenario configuration and simulation state.
"""

from amrfleet.core.geometry import (
    Point,
    Obstacle,
    segments_intersect,
    segment_intersects_rect,
    calculate_distance,
)
from amrfleet.core.scenario import (
    Scenario,
    ScenarioParameters,
    Station,
    StationType,
    RobotType,
    Footprint,
    Mission,
    MissionStep,
    StepAction,
    ChargingPolicy,
)
from amrfleet.core.state import (
    Agent,
    AgentStatus,
    AgentSnapshot,
    MissionQueueEntry,
    CompletedMission,
    SimulationState,
)

__all__ = [
    # Geometry
    "Point",
    "Obstacle",
    "segments_intersect",
    "segment_intersects_rect",
    "calculate_distance",
    # Scenario
    "Scenario",
    "ScenarioParameters",
    "Station",
    "StationType",
    "RobotType",
    "Footprint",
    "Mission",
    "MissionStep",
    "StepAction",
    "ChargingPolicy",
    # State
    "Agent",
    "AgentStatus",
    "AgentSnapshot",
    "MissionQueueEntry",
    "CompletedMission",
    "SimulationState",
]
