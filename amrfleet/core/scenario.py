"""
Scenario configuration for the AMR fleet simulation.

This module defines the read-only inputs of the simulation engine:
- Stations (pickup, dropoff, workstation, charger) placed on a grid
- Robot types with speed, payload, battery and footprint
- Missions made of ordered station steps
- Fleet, shift and charging parameters

Scenarios are pydantic models and can be loaded from dictionaries or YAML.
Both snake_case and the camelCase keys used by scenario editors are accepted.
"""

from __future__ import annotations

import yaml
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from loguru import logger

from amrfleet.core.geometry import Obstacle, Point


class StationType(Enum):
    """Role of a station on the floor."""
    PICKUP = "pickup"
    DROPOFF = "dropoff"
    WORKSTATION = "workstation"
    CHARGER = "charger"


class StepAction(Enum):
    """Action performed by a robot at a mission step."""
    PICKUP = "pickup"
    DROPOFF = "dropoff"
    CHARGE = "charge"


class ChargingPolicy(Enum):
    """Charging policy declared by the scenario (informational)."""
    OPPORTUNITY = "opportunity"
    THRESHOLD = "threshold"


class _ScenarioModel(BaseModel):
    """Shared pydantic configuration."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class GridPosition(_ScenarioModel):
    """Integer-ish grid coordinate of a station."""
    x: float = 0.0
    y: float = 0.0


class Footprint(_ScenarioModel):
    """Robot footprint in meters."""
    width: float = 0.5
    height: float = 0.5

    @field_validator("width", "height")
    @classmethod
    def _positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("footprint dimensions must be positive")
        return v


class Station(_ScenarioModel):
    """A fixed station on the floor."""

    id: str
    name: str = ""
    type: StationType = StationType.WORKSTATION
    position: GridPosition = Field(default_factory=GridPosition)
    capacity: Optional[int] = None


class RobotType(_ScenarioModel):
    """A robot model available to the fleet."""

    id: str
    name: str = ""
    type: str = "amr"

    # Kinematics
    speed: float = 1.0  # m/s

    # Capabilities
    payload: float = 0.0  # kg
    battery_capacity: float = Field(default=0.0, alias="batteryCapacity")  # Wh

    # Geometry
    footprint: Footprint = Field(default_factory=Footprint)

    @field_validator("speed")
    @classmethod
    def _speed_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("robot speed must be positive")
        return v


class MissionStep(_ScenarioModel):
    """One stop of a mission."""

    station_id: str = Field(alias="stationId")
    action: StepAction = StepAction.PICKUP
    duration: float = 0.0  # seconds

    @field_validator("duration")
    @classmethod
    def _duration_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("step duration must be non-negative")
        return v


class Mission(_ScenarioModel):
    """
    Ordered task template executed end-to-end by one robot.

    ``priority`` is carried through but the engine assigns missions FIFO.
    """

    id: str
    name: str = ""
    priority: int = 2  # 1=high .. 3=low
    sla: float = 0.0  # minutes
    steps: List[MissionStep] = Field(default_factory=list)

    @field_validator("priority")
    @classmethod
    def _priority_range(cls, v: int) -> int:
        if not 1 <= v <= 3:
            raise ValueError("mission priority must be between 1 and 3")
        return v

    def instance(self, index: int) -> Mission:
        """Copy of this template with a per-instance id suffix."""
        return self.model_copy(update={"id": f"{self.id}-{index}"})


class ScenarioParameters(_ScenarioModel):
    """Fleet and shift parameters."""

    fleet_size: int = Field(default=1, alias="fleetSize")
    shift_hours: float = Field(default=8.0, alias="shiftHours")
    charging_policy: ChargingPolicy = Field(default=ChargingPolicy.OPPORTUNITY, alias="chargingPolicy")
    speed_limit: float = Field(default=2.0, alias="speedLimit")
    right_of_way_rules: List[str] = Field(default_factory=list, alias="rightOfWayRules")

    @field_validator("fleet_size")
    @classmethod
    def _fleet_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("fleet size must be non-negative")
        return v


class ObstacleSpec(_ScenarioModel):
    """Static rectangular obstacle in floor coordinates."""
    x: float
    y: float
    width: float
    height: float

    def to_obstacle(self) -> Obstacle:
        return Obstacle(self.x, self.y, self.width, self.height)


class Scenario(_ScenarioModel):
    """
    Complete scenario: the read-only input of a simulation engine.

    A new scenario requires a new engine instance.
    """

    id: str = "scenario"
    name: str = ""
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    stations: List[Station] = Field(default_factory=list)
    robots: List[RobotType] = Field(default_factory=list)
    missions: List[Mission] = Field(default_factory=list)
    parameters: ScenarioParameters = Field(default_factory=ScenarioParameters)

    obstacles: List[ObstacleSpec] = Field(default_factory=list)

    def get_station(self, station_id: str) -> Optional[Station]:
        """Get station by ID."""
        for station in self.stations:
            if station.id == station_id:
                return station
        return None

    def find_charger(self) -> Optional[Station]:
        """First charger station, if any."""
        for station in self.stations:
            if station.type == StationType.CHARGER:
                return station
        return None

    def static_obstacles(self) -> List[Obstacle]:
        return [spec.to_obstacle() for spec in self.obstacles]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Scenario:
        """Build a scenario from a plain dictionary."""
        return cls.model_validate(data)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> Scenario:
        """Load scenario from YAML file."""
        with open(yaml_path, 'r') as f:
            data = yaml.safe_load(f) or {}

        scenario = cls.from_dict(data)
        logger.info(f"Loaded scenario {scenario.id} from {yaml_path}: "
                    f"{len(scenario.stations)} stations, {len(scenario.robots)} robot types, "
                    f"{len(scenario.missions)} missions")
        return scenario

    def to_yaml(self, yaml_path: Union[str, Path]) -> None:
        """Save scenario to YAML file."""
        data = self.model_dump(mode="json")

        with open(yaml_path, 'w') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def station_floor_position(station: Station, scale: float = 50.0, offset: float = 100.0) -> Point:
    """Map a station's grid position to floor coordinates."""
    return Point(station.position.x * scale + offset, station.position.y * scale + offset)
