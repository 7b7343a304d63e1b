#!/usr/bin/env python
"""
AMRFleet - Autonomous Mobile Robot Fleet Simulation

Main entry point for running demonstrations and scenario files headlessly.
"""

import sys
import argparse
from loguru import logger


DEMO_SCENARIO = {
    "id": "demo",
    "name": "Demo warehouse",
    "stations": [
        {"id": "charger-1", "name": "Charger", "type": "charger", "position": {"x": 0, "y": 0}},
        {"id": "pick-a", "name": "Pick A", "type": "pickup", "position": {"x": 4, "y": 1}},
        {"id": "pick-b", "name": "Pick B", "type": "pickup", "position": {"x": 8, "y": 1}},
        {"id": "pack", "name": "Pack-off", "type": "workstation", "position": {"x": 6, "y": 6}},
        {"id": "ship", "name": "Shipping", "type": "dropoff", "position": {"x": 1, "y": 7}},
    ],
    "robots": [
        {"id": "amr-s", "name": "Small AMR", "speed": 1.5, "payload": 100,
         "batteryCapacity": 500, "footprint": {"width": 0.6, "height": 0.4}},
        {"id": "amr-l", "name": "Large AMR", "speed": 1.0, "payload": 500,
         "batteryCapacity": 1200, "footprint": {"width": 1.0, "height": 0.8}},
    ],
    "missions": [
        {"id": "m-a", "name": "Pick A to pack", "priority": 1, "sla": 5,
         "steps": [
             {"stationId": "pick-a", "action": "pickup", "duration": 5},
             {"stationId": "pack", "action": "dropoff", "duration": 5},
         ]},
        {"id": "m-b", "name": "Pick B to shipping", "priority": 2, "sla": 8,
         "steps": [
             {"stationId": "pick-b", "action": "pickup", "duration": 5},
             {"stationId": "pack", "action": "dropoff", "duration": 3},
             {"stationId": "ship", "action": "dropoff", "duration": 4},
         ]},
    ],
    "parameters": {"fleetSize": 4, "shiftHours": 8, "chargingPolicy": "opportunity"},
    "obstacles": [
        {"x": 260, "y": 200, "width": 120, "height": 60},
    ],
}


def simulate(scenario, duration_s: float, dt_ms: float) -> bool:
    """Run a scenario headlessly and print a summary."""
    from amrfleet.simulation.engine import SimulationEngine, ScenarioValidationError, SimulationFault

    # Collision pauses follow simulated time when running faster than real time
    engine = SimulationEngine(scenario, clock=lambda: engine.time / 1000.0)

    print(f"Scenario: {scenario.name or scenario.id}")
    print(f"  Stations: {len(scenario.stations)}")
    print(f"  Robots: {len(engine.agents)}")
    print(f"  Queued missions: {len(engine.mission_queue)}")
    print()

    try:
        state = engine.run(duration_ms=duration_s * 1000.0, dt_ms=dt_ms)
    except ScenarioValidationError as e:
        print("Scenario rejected:")
        for error in e.errors:
            print(f"  - {error}")
        return False
    except SimulationFault as e:
        print(f"Simulation stopped at {engine.time / 1000.0:.1f}s: {e}")
        return False

    metrics = state.metrics
    print(f"Simulated {state.time / 1000.0:.1f}s:")
    print(f"  Completed missions: {metrics['completed_missions']}")
    print(f"  Throughput: {metrics['throughput_per_hour']:.1f} missions/h")
    print(f"  Avg mission time: {metrics['avg_mission_time_s']:.1f}s")
    print(f"  On time: {metrics['on_time_percentage']:.0f}%")
    print(f"  Collisions avoided: {metrics['collisions_avoided']}")
    print(f"  Distance traveled: {metrics['total_distance']:.0f}")
    print(f"  Avg battery: {metrics['avg_battery_level']:.1%}")

    print("\nRobots:")
    for agent in state.agents:
        print(f"  {agent.agent_id}: {agent.status.value:8s} "
              f"missions={agent.completed_missions} battery={agent.battery_level:.1%}")

    if state.congestion_map:
        cell, count = max(state.congestion_map.items(), key=lambda kv: kv[1])
        print(f"\nBusiest cell: {cell} with {count} robots")

    return True


def run_demo(duration_s: float, dt_ms: float) -> bool:
    """Run the built-in demonstration scenario."""
    from amrfleet.core.scenario import Scenario

    print("=" * 60)
    print("AMRFleet Demonstration")
    print("=" * 60)
    print()

    ok = simulate(Scenario.from_dict(DEMO_SCENARIO), duration_s, dt_ms)

    print("\n" + "=" * 60)
    print("Demonstration complete!")
    print("=" * 60)
    return ok


def run_file(path: str, duration_s: float, dt_ms: float) -> bool:
    """Run a scenario loaded from YAML."""
    from pydantic import ValidationError
    from amrfleet.core.scenario import Scenario

    try:
        scenario = Scenario.from_yaml(path)
    except OSError as e:
        print(f"Cannot read scenario: {e}")
        return False
    except ValidationError as e:
        print(f"Invalid scenario {path}:\n{e}")
        return False

    return simulate(scenario, duration_s, dt_ms)


def main():
    parser = argparse.ArgumentParser(description="AMRFleet Simulation")
    parser.add_argument("command", choices=["demo", "run"],
                       help="Command to run")
    parser.add_argument("scenario", nargs="?",
                       help="Scenario YAML file (for 'run')")
    parser.add_argument("--duration", type=float, default=300.0,
                       help="Simulated seconds to run")
    parser.add_argument("--dt", type=float, default=50.0,
                       help="Tick length in milliseconds")
    parser.add_argument("-v", "--verbose", action="store_true",
                       help="Enable verbose logging")

    args = parser.parse_args()

    if not args.verbose:
        logger.remove()
        logger.add(sys.stderr, level="WARNING")

    if args.command == "demo":
        success = run_demo(args.duration, args.dt)
    else:
        if not args.scenario:
            parser.error("'run' requires a scenario file")
        success = run_file(args.scenario, args.duration, args.dt)

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
