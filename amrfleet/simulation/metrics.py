"""
Aggregate metrics for a running simulation.

Derived from the agent set and the completed-missions log on demand; the
only state kept here is what the engine reports (collisions avoided).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence
import numpy as np

from amrfleet.core.state import Agent, AgentStatus, CompletedMission


@dataclass
class SimulationMetrics:
    """Aggregate metrics for the fleet."""

    # Missions
    completed_missions: int = 0
    avg_mission_time_s: float = 0.0
    throughput_per_hour: float = 0.0
    on_time_percentage: float = 0.0

    # Fleet
    total_agents: int = 0
    busy_agents: int = 0
    robot_utilization: float = 0.0
    avg_battery_level: float = 0.0
    min_battery_level: float = 0.0

    # Movement
    total_distance: float = 0.0
    collisions_avoided: int = 0

    @classmethod
    def compute(
        cls,
        agents: Sequence[Agent],
        completed: Sequence[CompletedMission],
        time_ms: float,
        collisions_avoided: int = 0
    ) -> SimulationMetrics:
        """Compute metrics from the current simulation contents."""
        metrics = cls(collisions_avoided=collisions_avoided)

        metrics.total_agents = len(agents)
        if agents:
            batteries = np.array([a.battery_level for a in agents])
            metrics.avg_battery_level = float(np.mean(batteries))
            metrics.min_battery_level = float(np.min(batteries))
            metrics.busy_agents = sum(1 for a in agents if a.status != AgentStatus.IDLE)
            metrics.robot_utilization = metrics.busy_agents / len(agents)
            metrics.total_distance = float(sum(a.distance_traveled for a in agents))

        metrics.completed_missions = len(completed)
        if completed:
            durations = np.array([c.duration for c in completed]) / 1000.0
            metrics.avg_mission_time_s = float(np.mean(durations))
            metrics.on_time_percentage = 100.0 * sum(1 for c in completed if c.on_time) / len(completed)

        hours = time_ms / 3_600_000.0
        if hours > 0:
            metrics.throughput_per_hour = len(completed) / hours

        return metrics

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completed_missions": self.completed_missions,
            "avg_mission_time_s": self.avg_mission_time_s,
            "throughput_per_hour": self.throughput_per_hour,
            "on_time_percentage": self.on_time_percentage,
            "total_agents": self.total_agents,
            "busy_agents": self.busy_agents,
            "robot_utilization": self.robot_utilization,
            "avg_battery_level": self.avg_battery_level,
            "min_battery_level": self.min_battery_level,
            "total_distance": self.total_distance,
            "collisions_avoided": self.collisions_avoided,
        }
