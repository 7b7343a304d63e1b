"""Shared fixtures: scenario builders and a controllable wall clock."""

import pytest

from amrfleet.core.scenario import Scenario
from amrfleet.simulation.engine import SimulationConfig, SimulationEngine


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# Charger at floor (100, 100); A at (200, 100); B at (300, 100).
DEFAULT_STATIONS = [
    {"id": "charger", "type": "charger", "position": {"x": 0, "y": 0}},
    {"id": "A", "type": "pickup", "position": {"x": 2, "y": 0}},
    {"id": "B", "type": "dropoff", "position": {"x": 4, "y": 0}},
]

TWO_STEP_MISSION = {
    "id": "m1",
    "name": "A to B",
    "priority": 2,
    "steps": [
        {"stationId": "A", "action": "pickup", "duration": 1},
        {"stationId": "B", "action": "dropoff", "duration": 1},
    ],
}


def make_scenario(fleet_size=1, missions=None, stations=None, robots=None, obstacles=None):
    return Scenario.from_dict({
        "id": "test",
        "stations": DEFAULT_STATIONS if stations is None else stations,
        "robots": [{"id": "amr", "speed": 1.0}] if robots is None else robots,
        "missions": [TWO_STEP_MISSION] if missions is None else missions,
        "parameters": {"fleetSize": fleet_size},
        "obstacles": obstacles or [],
    })


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def snapshots():
    return []


@pytest.fixture
def make_engine(clock, snapshots):
    """Factory for engines wired to the fake clock and a snapshot recorder."""

    def _make(scenario=None, **config_kwargs):
        scenario = scenario or make_scenario()
        config = SimulationConfig(**config_kwargs)
        return SimulationEngine(scenario, on_update=snapshots.append, config=config, clock=clock)

    return _make
