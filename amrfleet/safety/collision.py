"""
Collision policy for the AMR fleet.

Pairwise proximity check with a priority-by-identity yield rule: when two
robots come within ``radius(a) + radius(b) + buffer`` of each other, the one
with the larger identity pauses for a fixed wall-clock delay. This is not a
right-of-way or reservation protocol; two robots hovering around the
threshold can still alternate between paused and moving.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence
from loguru import logger

from amrfleet.core.state import Agent, identity_key


@dataclass
class CollisionConfig:
    """Configuration for the collision policy."""

    # Extra clearance added to the two robot radii (floor units)
    buffer: float = 20.0

    # Wall-clock pause applied to the yielding robot (seconds)
    pause_duration: float = 1.0

    # Floor units per meter, used to size robot radii from footprints
    pixels_per_meter: float = 50.0

    # Lower bound on a robot's radius (floor units)
    min_radius: float = 8.0


@dataclass
class YieldEvent:
    """A robot yielding to another."""
    agent_id: str
    yielded_to: str
    distance: float
    resume_at: float


class CollisionPolicy:
    """
    Decides, per tick, whether a moving robot must pause.

    Pauses resume on a wall clock (``time.monotonic`` unless another clock is
    injected) independently of simulated time. Resumption is polled at the
    start of each check, so the policy needs no threads or timers.
    """

    def __init__(
        self,
        config: CollisionConfig = None,
        clock: Optional[Callable[[], float]] = None
    ):
        self.config = config or CollisionConfig()
        self.clock = clock or time.monotonic
        self.collisions_avoided = 0

    def radius(self, agent: Agent) -> float:
        """Collision radius of an agent in floor units."""
        footprint = agent.robot_type.footprint
        r = max(footprint.width, footprint.height) / 2.0 * self.config.pixels_per_meter
        return max(self.config.min_radius, r)

    def collision_distance(self, a: Agent, b: Agent) -> float:
        return self.radius(a) + self.radius(b) + self.config.buffer

    def release_expired(self, agent: Agent) -> bool:
        """Resume an agent whose pause has run out. Returns True if resumed."""
        if agent.paused and self.clock() >= agent.paused_until:
            agent.paused = False
            agent.paused_until = 0.0
            logger.debug(f"{agent.agent_id} resumed")
            return True
        return False

    def check(self, agent: Agent, agents: Sequence[Agent]) -> Optional[YieldEvent]:
        """
        Apply the yield rule to ``agent`` against every other agent.

        Only the agent with the larger identity yields, and an agent that is
        already paused keeps its original deadline.

        Returns:
            The yield event if ``agent`` was paused by this call
        """
        self.release_expired(agent)

        if agent.paused:
            return None

        my_key = identity_key(agent.agent_id)

        for other in agents:
            if other is agent or other.agent_id == agent.agent_id:
                continue

            distance = agent.position.distance_to(other.position)
            if distance >= self.collision_distance(agent, other):
                continue

            if my_key > identity_key(other.agent_id):
                resume_at = self.clock() + self.config.pause_duration
                agent.paused = True
                agent.paused_until = resume_at
                self.collisions_avoided += 1

                logger.debug(f"{agent.agent_id} yields to {other.agent_id} "
                             f"at distance {distance:.1f}")
                return YieldEvent(agent.agent_id, other.agent_id, distance, resume_at)

        return None

    def find_conflicts(self, agents: Sequence[Agent]) -> List[tuple]:
        """All pairs currently inside their collision distance."""
        conflicts = []
        for i, a in enumerate(agents):
            for b in agents[i + 1:]:
                if a.position.distance_to(b.position) < self.collision_distance(a, b):
                    conflicts.append((a.agent_id, b.agent_id))
        return conflicts
