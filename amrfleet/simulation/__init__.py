"""
Simulation module for the AMR fleet.

Provides the tick-driven engine together with the floor environment,
per-agent behaviour and aggregate metrics.
"""

from amrfleet.simulation.environment import FloorEnvironment, EnvironmentConfig
from amrfleet.simulation.agent_sim import AgentSimulator, AgentDynamics
from amrfleet.simulation.metrics import SimulationMetrics
from amrfleet.simulation.engine import (
    SimulationEngine,
    SimulationConfig,
    SimulationError,
    ScenarioValidationError,
    SimulationFault,
)

__all__ = [
    "FloorEnvironment",
    "EnvironmentConfig",
    "AgentSimulator",
    "AgentDynamics",
    "SimulationMetrics",
    "SimulationEngine",
    "SimulationConfig",
    "SimulationError",
    "ScenarioValidationError",
    "SimulationFault",
]
