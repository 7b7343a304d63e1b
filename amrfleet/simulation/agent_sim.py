"""
Per-agent behaviour for the AMR simulation.

Implements path following, the simulated-time work countdown, the battery
model and the closed-form scrub preview. The engine decides when each of
these runs; nothing here touches the mission queue.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
import numpy as np

from amrfleet.core.geometry import Point
from amrfleet.core.state import Agent, AgentStatus


@dataclass
class AgentDynamics:
    """Kinematic and energy parameters shared by all agents."""

    # Floor units per meter (robot speeds are given in m/s)
    pixels_per_meter: float = 50.0

    # Battery change per simulated millisecond
    drain_rate_per_ms: float = 0.0001
    charge_rate_per_ms: float = 0.001

    # Simulated milliseconds of work per second of step duration
    work_time_scale: float = 1000.0

    # Scrub preview: circle centre, radius and period
    scrub_center: Tuple[float, float] = (300.0, 300.0)
    scrub_radius: float = 100.0
    scrub_period_s: float = 60.0


class AgentSimulator:
    """
    Applies the movement, work and battery models to agents.

    Movement is purely kinematic: constant speed along straight segments,
    snapping onto a waypoint once it is within one tick's travel.
    """

    def __init__(self, dynamics: AgentDynamics = None):
        self.dynamics = dynamics or AgentDynamics()

    def speed(self, agent: Agent) -> float:
        """Agent speed in floor units per second."""
        return agent.robot_type.speed * self.dynamics.pixels_per_meter

    def advance(self, agent: Agent, delta_ms: float) -> float:
        """
        Move an agent along its path for one tick.

        At most one waypoint is consumed per tick. The caller handles the
        arrival transition once ``agent.path_exhausted`` is true.

        Returns:
            Distance traveled this tick
        """
        if agent.path_exhausted:
            return 0.0

        step_distance = self.speed(agent) * delta_ms / 1000.0
        waypoint = agent.path[agent.path_cursor]
        offset = waypoint - agent.position
        remaining = offset.norm()

        if remaining <= step_distance:
            agent.position = waypoint.copy()
            agent.path_cursor += 1
            moved = remaining
        else:
            agent.position = agent.position + offset.normalized() * step_distance
            moved = step_distance

        agent.distance_traveled += moved
        return moved

    def begin_work(self, agent: Agent) -> None:
        """Start the countdown for the agent's current step."""
        step = agent.current_mission_step
        duration = step.duration if step is not None else 0.0
        agent.work_remaining_ms = duration * self.dynamics.work_time_scale
        agent.status = AgentStatus.WORKING

    def count_down(self, agent: Agent, delta_ms: float) -> bool:
        """
        Decrement the work countdown.

        Returns:
            True once the current step's work is finished
        """
        agent.work_remaining_ms = max(0.0, agent.work_remaining_ms - delta_ms)
        return agent.work_remaining_ms <= 0.0

    def update_battery(self, agent: Agent, delta_ms: float) -> None:
        """Drain (or, while charging, recharge) the battery."""
        if agent.status == AgentStatus.CHARGING:
            agent.set_battery(agent.battery_level + delta_ms * self.dynamics.charge_rate_per_ms)
        else:
            agent.set_battery(agent.battery_level - delta_ms * self.dynamics.drain_rate_per_ms)

    def scrub_position(self, agent: Agent, time_ms: float) -> Point:
        """
        Preview position for time scrubbing.

        A fixed circular motion keyed off the last character of the agent's
        identity. This is not a replay of the tick simulation.
        """
        period = self.dynamics.scrub_period_s
        progress = (time_ms / 1000.0) % period
        angle = progress / period * 2 * np.pi
        phase = ord(agent.agent_id[-1]) if agent.agent_id else 0

        cx, cy = self.dynamics.scrub_center
        r = self.dynamics.scrub_radius
        return Point(cx + np.cos(angle + phase) * r, cy + np.sin(angle + phase) * r)
