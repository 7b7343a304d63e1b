"""Tests for the floor environment."""

from amrfleet.core.geometry import Obstacle, Point
from amrfleet.simulation.environment import FloorEnvironment

from conftest import make_scenario


def test_station_positions_and_home():
    env = FloorEnvironment(make_scenario())

    assert env.station_position("A") == Point(200, 100)
    assert env.station_position("unknown") is None
    assert env.home_position() == Point(100, 100)


def test_default_home_without_charger():
    env = FloorEnvironment(make_scenario(stations=[
        {"id": "A", "type": "pickup", "position": {"x": 4, "y": 4}},
    ]))
    assert env.home_position() == Point(100, 100)


def test_station_position_is_a_copy():
    env = FloorEnvironment(make_scenario())
    pos = env.station_position("A")
    pos.x = -1
    assert env.station_position("A") == Point(200, 100)


def test_obstacles_for_path_excludes_origin_and_destination():
    env = FloorEnvironment(make_scenario(obstacles=[{"x": 0, "y": 300, "width": 10, "height": 10}]))

    # Leaving the charger for A: only B's footprint and the static obstacle remain
    obstacles = env.obstacles_for_path(Point(100, 100), "A")

    assert obstacles == [Obstacle(280, 80, 40, 40), Obstacle(0, 300, 10, 10)]
    assert len(env.get_all_obstacles()) == 4


def test_add_obstacle():
    env = FloorEnvironment(make_scenario())
    env.add_obstacle(Obstacle(500, 500, 10, 10))

    assert env.static_obstacles == [Obstacle(500, 500, 10, 10)]
    assert env.get_statistics()["num_static_obstacles"] == 1


def test_congestion_counts_occupied_cells():
    env = FloorEnvironment(make_scenario())
    congestion = env.compute_congestion([
        Point(100, 100),
        Point(120, 130),
        Point(260, 10),
        Point(-10, 5),
    ])

    assert congestion == {(2, 2): 2, (5, 0): 1, (-1, 0): 1}


def test_congestion_empty():
    assert FloorEnvironment(make_scenario()).compute_congestion([]) == {}
