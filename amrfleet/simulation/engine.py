"""
Simulation Engine for the AMR fleet.

Owns the tick loop and orchestrates, in fixed order on every tick:
- clock advance
- FIFO mission assignment to idle robots
- robot updates (collision policy, path following, station work)
- battery bookkeeping
- congestion map recomputation
- snapshot emission to observers

The engine is single-threaded and driven by an external tick driver. Work
durations are counted down in simulated time inside the tick, so pause,
reset and time scrubbing never leave deferred work behind.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
from loguru import logger

from amrfleet.core.geometry import Obstacle
from amrfleet.core.scenario import Scenario
from amrfleet.core.state import (
    Agent,
    AgentStatus,
    CompletedMission,
    QueueEntrySnapshot,
    SimulationState,
)
from amrfleet.planning.mission_queue import MissionQueue
from amrfleet.planning.pathfinding import PathfindingConfig, PathPlanner, find_path
from amrfleet.safety.collision import CollisionConfig, CollisionPolicy
from amrfleet.simulation.agent_sim import AgentDynamics, AgentSimulator
from amrfleet.simulation.environment import EnvironmentConfig, FloorEnvironment
from amrfleet.simulation.metrics import SimulationMetrics


class SimulationError(RuntimeError):
    """Base class for simulation errors."""


class ScenarioValidationError(SimulationError, ValueError):
    """Scenario cannot be simulated."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class SimulationFault(SimulationError):
    """A tick failed part-way and the simulation was stopped."""


@dataclass
class SimulationConfig:
    """Configuration for simulation."""

    # Mission instances enqueued at initialization
    queue_length: int = 50

    # Features
    enable_collision_avoidance: bool = True

    # Sub-configurations
    environment_config: EnvironmentConfig = field(default_factory=EnvironmentConfig)
    dynamics: AgentDynamics = field(default_factory=AgentDynamics)
    collision_config: CollisionConfig = field(default_factory=CollisionConfig)
    pathfinding_config: PathfindingConfig = field(default_factory=PathfindingConfig)


class SimulationEngine:
    """
    Main simulation engine for the AMR fleet.

    A scenario is read-only for the engine's lifetime; simulate a different
    scenario with a new engine.
    """

    def __init__(
        self,
        scenario: Scenario,
        on_update: Optional[Callable[[SimulationState], None]] = None,
        config: SimulationConfig = None,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize simulation engine.

        Args:
            scenario: Scenario to simulate
            on_update: Observer called with a snapshot after every tick,
                scrub and reset
            config: Simulation configuration
            clock: Wall clock in seconds for collision pauses
                (defaults to ``time.monotonic``)
        """
        self.scenario = scenario
        self.config = config or SimulationConfig()

        self.environment = FloorEnvironment(scenario, self.config.environment_config)
        self.agent_sim = AgentSimulator(self.config.dynamics)
        self.planner = PathPlanner(self.config.pathfinding_config)
        self.collision_policy = CollisionPolicy(self.config.collision_config, clock or time.monotonic)

        # Callbacks
        self._update_callbacks: List[Callable[[SimulationState], None]] = []
        self._event_callbacks: List[Callable[[str, Dict[str, Any]], None]] = []
        if on_update is not None:
            self._update_callbacks.append(on_update)

        # Snapshot bookkeeping
        self._version = 0
        self._epoch = 0
        self._error: Optional[str] = None
        self.last_validation_errors: List[str] = []

        self._initialize()

    def _initialize(self) -> None:
        """Build fleet, mission queue and clock from scenario defaults."""
        self._time = 0.0
        self._running = False
        self._congestion: Dict[Tuple[int, int], int] = {}
        self._completed: List[CompletedMission] = []
        self._queue = MissionQueue.from_templates(self.scenario.missions, self.config.queue_length)
        self.collision_policy.collisions_avoided = 0

        self._agents: List[Agent] = []
        robot_types = self.scenario.robots
        fleet_size = self.scenario.parameters.fleet_size

        if fleet_size and not robot_types:
            logger.warning(f"Fleet size {fleet_size} requested but scenario has no robot types")
            return

        home = self.environment.home_position()
        for i in range(fleet_size):
            self._agents.append(Agent(
                agent_id=f"robot-{i}",
                robot_type=robot_types[i % len(robot_types)],
                position=home.copy(),
                target_position=home.copy(),
            ))

        self._update_congestion()
        logger.debug(f"Initialized {len(self._agents)} agents and {len(self._queue)} queued missions")

    @property
    def running(self) -> bool:
        return self._running

    @property
    def time(self) -> float:
        """Current simulated time in milliseconds."""
        return self._time

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def agents(self) -> List[Agent]:
        return list(self._agents)

    @property
    def mission_queue(self) -> MissionQueue:
        return self._queue

    @property
    def completed_missions(self) -> List[CompletedMission]:
        return list(self._completed)

    def get_agent(self, agent_id: str) -> Optional[Agent]:
        """Get agent by ID."""
        for agent in self._agents:
            if agent.agent_id == agent_id:
                return agent
        return None

    def validate(self, raise_on_error: bool = False) -> List[str]:
        """
        Check that the scenario can be simulated.

        Args:
            raise_on_error: Raise ScenarioValidationError instead of returning

        Returns:
            Descriptive error messages (empty when valid)
        """
        errors = []
        scenario = self.scenario

        if not scenario.missions:
            errors.append("Scenario has no missions")

        station_ids = {s.id for s in scenario.stations}
        for mission in scenario.missions:
            if not mission.steps:
                errors.append(f"Mission {mission.id} has no steps")
                continue
            for i, step in enumerate(mission.steps):
                if not step.station_id:
                    errors.append(f"Mission {mission.id} step {i + 1} has no station")
                elif step.station_id not in station_ids:
                    errors.append(
                        f"Mission {mission.id} step {i + 1} references unknown station {step.station_id}"
                    )

        if scenario.parameters.fleet_size > 0 and not scenario.robots:
            errors.append(f"Scenario has no robot types for a fleet of {scenario.parameters.fleet_size}")

        if errors and raise_on_error:
            raise ScenarioValidationError(errors)
        return errors

    def start(self) -> bool:
        """
        Validate the scenario and start ticking.

        Returns:
            True if running; False if validation rejected the scenario, in
            which case ``last_validation_errors`` holds the reasons, or if a
            tick fault is pending (only ``reset`` clears it)
        """
        if self._running:
            return True

        if self._error is not None:
            logger.warning(f"Cannot start simulation after fault: {self._error}; reset first")
            self._emit_event("start_rejected", {"errors": [self._error]})
            return False

        errors = self.validate()
        self.last_validation_errors = errors
        if errors:
            for error in errors:
                logger.warning(f"Cannot start simulation: {error}")
            self._emit_event("start_rejected", {"errors": list(errors)})
            return False

        self._running = True

        logger.info(f"Simulation started with {len(self._agents)} agents")
        self._emit_event("simulation_started", {"time": self._time})
        return True

    def pause(self) -> None:
        """Stop ticking, keeping all state."""
        if self._running:
            self._running = False
            logger.info(f"Simulation paused at {self._time:.0f} ms")
            self._emit_event("simulation_paused", {"time": self._time})

    def reset(self) -> SimulationState:
        """Reinitialize fleet, queue and time to scenario defaults."""
        self._epoch += 1
        self._error = None
        self._initialize()

        logger.info(f"Simulation reset (epoch {self._epoch})")
        self._emit_event("simulation_reset", {"epoch": self._epoch})
        return self._emit()

    def step(self, delta_ms: float) -> Optional[SimulationState]:
        """
        Advance the simulation by one tick.

        Args:
            delta_ms: Elapsed simulated time in milliseconds

        Returns:
            Emitted snapshot, or None when the simulation is not running

        Raises:
            SimulationFault: the tick pipeline failed; the engine is stopped
        """
        if not self._running:
            return None

        try:
            self._time += delta_ms
            self._assign_missions()
            self._update_agents(delta_ms)
            self._update_battery(delta_ms)
            self._update_congestion()
        except Exception as e:
            self._running = False
            self._error = f"{type(e).__name__}: {e}"
            logger.exception(f"Tick at {self._time:.0f} ms failed; simulation stopped")
            self._emit_event("simulation_fault", {"error": self._error})
            self._emit()
            raise SimulationFault(self._error) from e

        return self._emit()

    def set_time(self, time_ms: float) -> SimulationState:
        """
        Scrub to an absolute time.

        Positions are previewed from a closed-form function of time instead
        of replaying ticks; mission and work state are left as they are.
        """
        self._time = time_ms
        for agent in self._agents:
            agent.position = self.agent_sim.scrub_position(agent, time_ms)
        self._update_congestion()
        return self._emit()

    def run(self, duration_ms: float, dt_ms: float = 50.0) -> SimulationState:
        """
        Start and tick headlessly for ``duration_ms`` of simulated time.

        Returns:
            The final snapshot
        """
        if not self.start():
            if self._error is not None:
                raise SimulationFault(self._error)
            raise ScenarioValidationError(self.last_validation_errors)

        end_time = self._time + duration_ms
        while self._running and self._time < end_time:
            self.step(dt_ms)

        return self.get_state()

    def add_obstacle(self, obstacle: Obstacle) -> None:
        """Add a static obstacle and replan every moving agent."""
        self.environment.add_obstacle(obstacle)

        for agent in self._agents:
            if agent.status != AgentStatus.MOVING:
                continue
            step = agent.current_mission_step
            destination = step.station_id if step else None
            obstacles = self.environment.obstacles_for_path(agent.position, destination)
            agent.set_path(find_path(agent.position, agent.target_position, obstacles, self.planner))

    def get_state(self) -> SimulationState:
        """Snapshot of the current state (does not notify observers)."""
        return self._build_state()

    def register_update_callback(self, callback: Callable[[SimulationState], None]) -> None:
        """Register observer for snapshots."""
        self._update_callbacks.append(callback)

    def register_event_callback(self, callback: Callable[[str, Dict[str, Any]], None]) -> None:
        """Register callback for simulation events."""
        self._event_callbacks.append(callback)

    def get_metrics(self) -> SimulationMetrics:
        return SimulationMetrics.compute(
            self._agents,
            self._completed,
            self._time,
            self.collision_policy.collisions_avoided,
        )

    def get_statistics(self) -> Dict[str, Any]:
        """Get simulation statistics."""
        return {
            "time": self._time,
            "running": self._running,
            "epoch": self._epoch,
            "metrics": self.get_metrics().to_dict(),
            "queue": self._queue.get_statistics(),
            "environment": self.environment.get_statistics(),
        }

    def _assign_missions(self) -> None:
        """Bind the first unassigned queue entry to each idle agent, FIFO."""
        for agent in self._agents:
            if agent.status != AgentStatus.IDLE:
                continue

            entry = self._queue.next_unassigned()
            if entry is None:
                break

            self._queue.assign(entry, agent.agent_id)
            agent.current_mission = entry.mission
            agent.current_step = 0
            agent.mission_started_ms = self._time

            if not self._route_to_current_step(agent):
                self._recover(agent, f"first station of mission {entry.mission.id} is unknown")

    def _update_agents(self, delta_ms: float) -> None:
        for agent in self._agents:
            try:
                self._update_agent(agent, delta_ms)
            except Exception:
                logger.exception(f"Fault while updating {agent.agent_id}; returning it to idle")
                agent.clear_mission()

    def _update_agent(self, agent: Agent, delta_ms: float) -> None:
        if agent.status.has_mission and agent.current_mission is None:
            self._recover(agent, f"{agent.status.value} without a mission")
            return

        if agent.status == AgentStatus.MOVING:
            self._update_moving(agent, delta_ms)
        elif agent.status == AgentStatus.WORKING:
            self._update_working(agent, delta_ms)

    def _update_moving(self, agent: Agent, delta_ms: float) -> None:
        if self.config.enable_collision_avoidance:
            event = self.collision_policy.check(agent, self._agents)
            if event is not None:
                self._emit_event("robot_yielded", {
                    "robot": event.agent_id,
                    "yielded_to": event.yielded_to,
                    "distance": event.distance,
                })

        if agent.paused:
            return

        self.agent_sim.advance(agent, delta_ms)

        if agent.path_exhausted:
            self._arrive(agent)

    def _arrive(self, agent: Agent) -> None:
        if agent.current_mission_step is None:
            self._recover(agent, "reached end of path without a mission step")
            return
        self.agent_sim.begin_work(agent)

    def _update_working(self, agent: Agent, delta_ms: float) -> None:
        if agent.current_mission_step is None:
            self._recover(agent, "working without a mission step")
            return

        if self.agent_sim.count_down(agent, delta_ms):
            self._finish_step(agent)

    def _finish_step(self, agent: Agent) -> None:
        agent.current_step += 1

        if agent.current_step >= len(agent.current_mission.steps):
            self._complete_mission(agent)
        elif not self._route_to_current_step(agent):
            self._recover(agent, f"step {agent.current_step + 1} station is unknown")

    def _complete_mission(self, agent: Agent) -> None:
        mission = agent.current_mission
        record = CompletedMission(
            mission=mission,
            completion_time=self._time,
            robot=agent.agent_id,
            duration=self._time - agent.mission_started_ms,
        )
        self._completed.append(record)
        self._queue.complete(agent.agent_id, mission.id)

        agent.completed_missions += 1
        agent.clear_mission()

        logger.info(f"{agent.agent_id} completed mission {mission.id} at {self._time:.0f} ms")
        self._emit_event("mission_completed", {
            "mission": mission.id,
            "robot": agent.agent_id,
            "time": self._time,
        })

    def _route_to_current_step(self, agent: Agent) -> bool:
        """Point the agent at its current step's station and plan a path."""
        step = agent.current_mission_step
        target = self.environment.station_position(step.station_id) if step else None
        if target is None:
            return False

        agent.target_position = target
        obstacles = self.environment.obstacles_for_path(agent.position, step.station_id)
        agent.set_path(find_path(agent.position, target, obstacles, self.planner))
        agent.status = AgentStatus.MOVING
        return True

    def _recover(self, agent: Agent, reason: str) -> None:
        """Force an inconsistent agent back to idle."""
        logger.warning(f"{agent.agent_id}: {reason}; returning to idle")
        agent.clear_mission()

    def _update_battery(self, delta_ms: float) -> None:
        for agent in self._agents:
            self.agent_sim.update_battery(agent, delta_ms)

    def _update_congestion(self) -> None:
        self._congestion = self.environment.compute_congestion([a.position for a in self._agents])

    def _build_state(self) -> SimulationState:
        return SimulationState(
            agents=tuple(agent.snapshot() for agent in self._agents),
            time=self._time,
            running=self._running,
            congestion_map=dict(self._congestion),
            mission_queue=tuple(
                QueueEntrySnapshot(e.mission.id, e.assigned_robot) for e in self._queue
            ),
            completed_missions=tuple(self._completed),
            version=self._version,
            epoch=self._epoch,
            metrics=self.get_metrics().to_dict(),
            error=self._error,
        )

    def _emit(self) -> SimulationState:
        """Build a new snapshot version and hand it to every observer."""
        self._version += 1
        state = self._build_state()
        for callback in self._update_callbacks:
            callback(state)
        return state

    def _emit_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """Emit simulation event."""
        for callback in self._event_callbacks:
            callback(event_type, data)
