"""
State representations for the AMR fleet simulation.

This module defines:
- AgentStatus: lifecycle status of a simulated robot
- Agent: mutable per-robot simulation record owned by the engine
- MissionQueueEntry / CompletedMission: mission bookkeeping
- AgentSnapshot / SimulationState: immutable copies handed to observers
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from amrfleet.core.geometry import Point
from amrfleet.core.scenario import Mission, MissionStep, RobotType


class AgentStatus(Enum):
    """Lifecycle status of an agent."""
    IDLE = "idle"           # No mission bound
    MOVING = "moving"       # Following a path to a mission station
    WORKING = "working"     # Executing a mission step at a station
    CHARGING = "charging"   # Reserved; no transition leads here yet

    @property
    def has_mission(self) -> bool:
        """Whether a mission must be bound in this status."""
        return self in (AgentStatus.MOVING, AgentStatus.WORKING)


_ID_CHUNKS = re.compile(r"(\d+)")


def identity_key(agent_id: str) -> Tuple[Any, ...]:
    """
    Natural sort key for agent identities.

    Digit runs compare numerically, so ``robot-10`` orders after ``robot-2``;
    everything else compares lexically.
    """
    parts = _ID_CHUNKS.split(agent_id)
    return tuple((0, int(p)) if p.isdigit() else (1, p) for p in parts)


@dataclass
class Agent:
    """
    Simulated robot instance bound to a robot type.

    ``status`` determines which fields are meaningful: ``current_mission`` is
    set exactly while MOVING or WORKING, ``work_remaining_ms`` only while
    WORKING.
    """

    # Identity
    agent_id: str
    robot_type: RobotType

    # Kinematics
    position: Point = field(default_factory=Point)
    target_position: Point = field(default_factory=Point)
    path: List[Point] = field(default_factory=list)
    path_cursor: int = 0

    # Mission
    current_mission: Optional[Mission] = None
    current_step: int = 0
    work_remaining_ms: float = 0.0

    # Energy
    battery_level: float = 1.0  # 0-1

    # Status
    status: AgentStatus = AgentStatus.IDLE
    paused: bool = False
    paused_until: float = 0.0  # wall clock seconds

    # Statistics
    distance_traveled: float = 0.0
    completed_missions: int = 0
    mission_started_ms: float = 0.0

    @property
    def current_mission_step(self) -> Optional[MissionStep]:
        """Step currently being travelled to or worked on."""
        if self.current_mission is None:
            return None
        if 0 <= self.current_step < len(self.current_mission.steps):
            return self.current_mission.steps[self.current_step]
        return None

    @property
    def path_exhausted(self) -> bool:
        return self.path_cursor >= len(self.path)

    def set_path(self, path: List[Point]) -> None:
        """Replace the path and rewind the cursor."""
        self.path = path
        self.path_cursor = 0

    def set_battery(self, level: float) -> None:
        """Set battery level, clamped to [0, 1]."""
        self.battery_level = min(1.0, max(0.0, level))

    def clear_mission(self) -> None:
        """Drop to idle with no mission or path, lifting any pause."""
        self.current_mission = None
        self.current_step = 0
        self.work_remaining_ms = 0.0
        self.path = []
        self.path_cursor = 0
        self.paused = False
        self.paused_until = 0.0
        self.status = AgentStatus.IDLE

    def snapshot(self) -> AgentSnapshot:
        return AgentSnapshot(
            agent_id=self.agent_id,
            robot_type_id=self.robot_type.id,
            position=(self.position.x, self.position.y),
            target_position=(self.target_position.x, self.target_position.y),
            mission_id=self.current_mission.id if self.current_mission else None,
            current_step=self.current_step,
            battery_level=self.battery_level,
            status=self.status,
            path=tuple((p.x, p.y) for p in self.path),
            path_cursor=self.path_cursor,
            paused=self.paused,
            distance_traveled=self.distance_traveled,
            completed_missions=self.completed_missions,
            work_remaining_ms=self.work_remaining_ms,
        )


@dataclass
class MissionQueueEntry:
    """A queued mission instance and the robot it is bound to, if any."""
    mission: Mission
    assigned_robot: Optional[str] = None

    @property
    def is_assigned(self) -> bool:
        return self.assigned_robot is not None


@dataclass(frozen=True)
class CompletedMission:
    """Record appended to the completed-missions log."""
    mission: Mission
    completion_time: float  # simulated ms
    robot: str
    duration: float = 0.0  # simulated ms from assignment to completion

    @property
    def on_time(self) -> bool:
        """Completed within the mission SLA (no SLA counts as on time)."""
        if self.mission.sla <= 0:
            return True
        return self.duration <= self.mission.sla * 60_000.0


@dataclass(frozen=True)
class AgentSnapshot:
    """Immutable copy of an agent at emission time."""
    agent_id: str
    robot_type_id: str
    position: Tuple[float, float]
    target_position: Tuple[float, float]
    mission_id: Optional[str]
    current_step: int
    battery_level: float
    status: AgentStatus
    path: Tuple[Tuple[float, float], ...]
    path_cursor: int
    paused: bool
    distance_traveled: float
    completed_missions: int
    work_remaining_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.agent_id,
            "robot_type": self.robot_type_id,
            "position": {"x": self.position[0], "y": self.position[1]},
            "target_position": {"x": self.target_position[0], "y": self.target_position[1]},
            "mission": self.mission_id,
            "current_step": self.current_step,
            "battery_level": self.battery_level,
            "status": self.status.value,
            "paused": self.paused,
            "distance_traveled": self.distance_traveled,
            "completed_missions": self.completed_missions,
        }


@dataclass(frozen=True)
class QueueEntrySnapshot:
    mission_id: str
    assigned_robot: Optional[str]


@dataclass(frozen=True)
class SimulationState:
    """
    Snapshot of the whole simulation.

    Built fresh on every emission. ``version`` increases with every emission
    and ``epoch`` with every reset, so observers can discard stale copies.
    """

    agents: Tuple[AgentSnapshot, ...] = ()
    time: float = 0.0  # simulated ms
    running: bool = False
    congestion_map: Dict[Tuple[int, int], int] = field(default_factory=dict)
    mission_queue: Tuple[QueueEntrySnapshot, ...] = ()
    completed_missions: Tuple[CompletedMission, ...] = ()

    version: int = 0
    epoch: int = 0
    metrics: Dict[str, float] = field(default_factory=dict)
    error: Optional[str] = None

    def get_agent(self, agent_id: str) -> Optional[AgentSnapshot]:
        for agent in self.agents:
            if agent.agent_id == agent_id:
                return agent
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "running": self.running,
            "version": self.version,
            "epoch": self.epoch,
            "agents": [a.to_dict() for a in self.agents],
            "congestion_map": {f"{x},{y}": n for (x, y), n in self.congestion_map.items()},
            "mission_queue": [
                {"mission": e.mission_id, "assigned_robot": e.assigned_robot}
                for e in self.mission_queue
            ],
            "completed_missions": [
                {"mission": c.mission.id, "completion_time": c.completion_time, "robot": c.robot}
                for c in self.completed_missions
            ],
            "metrics": dict(self.metrics),
            "error": self.error,
        }
