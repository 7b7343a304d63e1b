#!/usr/bin/env python
"""
Tutorial 1: Hello AMRFleet
==========================
Your first simulation with a single robot and one mission.

Run: python tutorials/tutorial_01_hello.py
"""

import sys
sys.path.insert(0, '.')

from amrfleet.core.scenario import Scenario
from amrfleet.simulation.engine import SimulationEngine, SimulationConfig

def main():
    print("="*60)
    print("Tutorial 1: Hello AMRFleet")
    print("="*60)
    print()
    
    # Step 1: Describe the floor
    print("Step 1: Creating scenario...")
    scenario = Scenario.from_dict({
        "id": "hello",
        "stations": [
            {"id": "home", "type": "charger", "position": {"x": 0, "y": 0}},
            {"id": "shelf", "type": "pickup", "position": {"x": 4, "y": 0}},
            {"id": "desk", "type": "dropoff", "position": {"x": 4, "y": 3}},
        ],
        "robots": [{"id": "amr", "speed": 1.0}],
        "missions": [{
            "id": "fetch",
            "steps": [
                {"stationId": "shelf", "action": "pickup", "duration": 2},
                {"stationId": "desk", "action": "dropoff", "duration": 2},
            ],
        }],
        "parameters": {"fleetSize": 1},
    })
    print(f"  Stations: {[s.id for s in scenario.stations]}")
    print()
    
    # Step 2: Create the simulation engine
    print("Step 2: Creating simulation engine...")
    config = SimulationConfig(queue_length=1)  # Run the mission once
    snapshots = []
    engine = SimulationEngine(scenario, on_update=snapshots.append, config=config)
    print("  Engine created!")
    print()
    
    # Step 3: See what we created
    print("Step 3: Initial state")
    for agent in engine.agents:
        print(f"  {agent.agent_id}:")
        print(f"    Position: ({agent.position.x:.0f}, {agent.position.y:.0f})")
        print(f"    Robot type: {agent.robot_type.id}")
        print(f"    Battery: {agent.battery_level:.0%}")
    print()
    
    # Step 4: Run the simulation
    print("Step 4: Running simulation for 20 seconds...")
    state = engine.run(duration_ms=20_000, dt_ms=50)
    print(f"  Done! {len(snapshots)} snapshots emitted")
    print()
    
    # Step 5: Check the results
    print("Step 5: Results")
    print("-"*40)
    for record in state.completed_missions:
        print(f"  {record.mission.id} done by {record.robot} at {record.completion_time / 1000:.1f}s")
    
    agent = state.agents[0]
    print(f"  Final status: {agent.status.value}")
    print(f"  Distance traveled: {agent.distance_traveled:.0f}")
    print(f"  Battery: {agent.battery_level:.1%}")
    print()
    print("Tutorial complete!")

if __name__ == "__main__":
    main()
