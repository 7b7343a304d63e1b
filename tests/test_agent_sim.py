"""Tests for per-agent movement, work and battery models."""

import math

import pytest

from amrfleet.core.geometry import Point
from amrfleet.core.scenario import Mission, MissionStep, RobotType
from amrfleet.core.state import Agent, AgentStatus
from amrfleet.simulation.agent_sim import AgentSimulator


@pytest.fixture
def sim():
    return AgentSimulator()


@pytest.fixture
def agent():
    return Agent(agent_id="robot-0", robot_type=RobotType(id="amr", speed=1.0))


def test_advance_snaps_one_waypoint_per_tick(sim, agent):
    agent.set_path([Point(0, 0), Point(100, 0)])

    # Speed is 50 units/s, so one second covers half the leg
    sim.advance(agent, 1000)
    assert agent.position == Point(0, 0)
    assert agent.path_cursor == 1

    sim.advance(agent, 1000)
    assert agent.position == Point(50, 0)
    assert agent.path_cursor == 1

    sim.advance(agent, 1000)
    assert agent.position == Point(100, 0)
    assert agent.path_exhausted
    assert agent.distance_traveled == pytest.approx(100.0)


def test_advance_on_exhausted_path_is_a_no_op(sim, agent):
    assert sim.advance(agent, 1000) == 0.0
    assert agent.position == Point(0, 0)


def test_work_countdown_uses_simulated_time(sim, agent):
    agent.current_mission = Mission(id="m", steps=[MissionStep(station_id="A", duration=2)])
    sim.begin_work(agent)

    assert agent.status == AgentStatus.WORKING
    assert agent.work_remaining_ms == pytest.approx(2000.0)
    assert not sim.count_down(agent, 1500)
    assert sim.count_down(agent, 500)
    assert agent.work_remaining_ms == 0.0


def test_battery_drains_and_clamps(sim, agent):
    sim.update_battery(agent, 1000)
    assert agent.battery_level == pytest.approx(0.9)

    sim.update_battery(agent, 60_000)
    assert agent.battery_level == 0.0


def test_battery_charges_and_clamps(sim, agent):
    agent.status = AgentStatus.CHARGING
    agent.set_battery(0.5)

    sim.update_battery(agent, 100)
    assert agent.battery_level == pytest.approx(0.6)

    sim.update_battery(agent, 10_000)
    assert agent.battery_level == 1.0


def test_scrub_position_is_closed_form(sim, agent):
    pos = sim.scrub_position(agent, 15_000)

    angle = math.pi / 2 + ord("0")
    assert pos.x == pytest.approx(300 + math.cos(angle) * 100)
    assert pos.y == pytest.approx(300 + math.sin(angle) * 100)

    # Period of sixty seconds
    later = sim.scrub_position(agent, 75_000)
    assert later.x == pytest.approx(pos.x)
    assert later.y == pytest.approx(pos.y)
