"""Tests for scenario models and loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from amrfleet.core.geometry import Obstacle, Point
from amrfleet.core.scenario import (
    ChargingPolicy,
    Mission,
    RobotType,
    Scenario,
    StationType,
    station_floor_position,
)

from conftest import make_scenario


SCENARIOS_DIR = Path(__file__).parent.parent / "scenarios"


def test_camel_case_keys():
    scenario = make_scenario(fleet_size=3)

    assert scenario.parameters.fleet_size == 3
    assert scenario.missions[0].steps[0].station_id == "A"
    assert scenario.get_station("B").type == StationType.DROPOFF
    assert scenario.get_station("missing") is None


def test_snake_case_keys_are_accepted():
    robot = RobotType.model_validate({"id": "r", "battery_capacity": 400})
    assert robot.battery_capacity == 400


def test_find_charger():
    assert make_scenario().find_charger().id == "charger"

    no_charger = make_scenario(stations=[
        {"id": "A", "type": "pickup", "position": {"x": 1, "y": 1}},
    ])
    assert no_charger.find_charger() is None


def test_station_floor_position():
    scenario = make_scenario(stations=[
        {"id": "S", "type": "pickup", "position": {"x": 2, "y": 3}},
    ])
    assert station_floor_position(scenario.stations[0]) == Point(200, 250)


def test_static_obstacles():
    scenario = make_scenario(obstacles=[{"x": 10, "y": 20, "width": 30, "height": 40}])
    assert scenario.static_obstacles() == [Obstacle(10, 20, 30, 40)]


def test_mission_instance_suffix():
    mission = Mission(id="pick", steps=[])
    instance = mission.instance(7)

    assert instance.id == "pick-7"
    assert mission.id == "pick"


@pytest.mark.parametrize("robot", [
    {"id": "r", "speed": 0},
    {"id": "r", "footprint": {"width": -1, "height": 1}},
])
def test_invalid_robot_rejected(robot):
    with pytest.raises(ValidationError):
        RobotType.model_validate(robot)


def test_invalid_priority_rejected():
    with pytest.raises(ValidationError):
        Mission(id="m", priority=4)


def test_negative_duration_rejected():
    with pytest.raises(ValidationError):
        Mission.model_validate({"id": "m", "steps": [{"stationId": "A", "duration": -1}]})


def test_load_demo_yaml():
    scenario = Scenario.from_yaml(SCENARIOS_DIR / "warehouse_demo.yaml")

    assert scenario.id == "cross-dock"
    assert len(scenario.stations) == 5
    assert scenario.parameters.fleet_size == 3
    assert scenario.parameters.charging_policy == ChargingPolicy.THRESHOLD
    assert scenario.robots[0].battery_capacity == 900
    assert len(scenario.static_obstacles()) == 1


def test_yaml_round_trip(tmp_path):
    scenario = make_scenario(fleet_size=2, obstacles=[{"x": 1, "y": 2, "width": 3, "height": 4}])
    path = tmp_path / "scenario.yaml"

    scenario.to_yaml(path)

    assert Scenario.from_yaml(path) == scenario
