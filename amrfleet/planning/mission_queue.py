"""
Mission queue for the AMR fleet.

Holds runtime mission instances in FIFO order and tracks which robot each
instance is bound to. A binding is cleared only when the mission completes
(the entry is removed) or the queue is rebuilt on reset.

Mission priority is carried on every instance but not used for ordering.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence
from loguru import logger

from amrfleet.core.scenario import Mission
from amrfleet.core.state import MissionQueueEntry


class MissionQueue:
    """
    FIFO queue of mission instances.

    Handles queue construction, assignment, completion and queries.
    """

    def __init__(self, entries: Optional[List[MissionQueueEntry]] = None):
        """Initialize mission queue."""
        self._entries: List[MissionQueueEntry] = list(entries or [])

        # Callbacks
        self._on_complete: List[Callable[[MissionQueueEntry], None]] = []

    @classmethod
    def from_templates(cls, missions: Sequence[Mission], length: int = 50) -> MissionQueue:
        """
        Fill a queue by cycling through mission templates.

        Args:
            missions: Mission templates from the scenario
            length: Number of instances to enqueue

        Returns:
            Queue with ``length`` instances (empty when there are no templates)
        """
        if not missions:
            return cls()

        entries = [
            MissionQueueEntry(mission=missions[i % len(missions)].instance(i))
            for i in range(length)
        ]
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def entries(self) -> List[MissionQueueEntry]:
        return list(self._entries)

    def get_unassigned(self) -> List[MissionQueueEntry]:
        """Entries not yet bound to a robot, in queue order."""
        return [e for e in self._entries if not e.is_assigned]

    def next_unassigned(self) -> Optional[MissionQueueEntry]:
        """First entry lacking an assigned robot."""
        for entry in self._entries:
            if not entry.is_assigned:
                return entry
        return None

    def assign(self, entry: MissionQueueEntry, agent_id: str) -> bool:
        """Bind an entry to a robot. Bound entries are never rebound."""
        if entry.is_assigned:
            logger.warning(f"Mission {entry.mission.id} already bound to {entry.assigned_robot}")
            return False

        entry.assigned_robot = agent_id
        logger.debug(f"Assigned mission {entry.mission.id} to {agent_id}")
        return True

    def find_by_robot(self, agent_id: str, mission_id: Optional[str] = None) -> Optional[MissionQueueEntry]:
        """Entry bound to ``agent_id`` (optionally matching ``mission_id``)."""
        for entry in self._entries:
            if entry.assigned_robot != agent_id:
                continue
            if mission_id is None or entry.mission.id == mission_id:
                return entry
        return None

    def complete(self, agent_id: str, mission_id: str) -> Optional[MissionQueueEntry]:
        """Remove the completed entry bound to ``agent_id``."""
        entry = self.find_by_robot(agent_id, mission_id)
        if entry is None:
            return None

        self._entries.remove(entry)
        for callback in self._on_complete:
            callback(entry)
        return entry

    def register_completion_callback(
        self,
        callback: Callable[[MissionQueueEntry], None]
    ) -> None:
        """Register callback for mission completion."""
        self._on_complete.append(callback)

    def get_statistics(self) -> Dict[str, Any]:
        """Get queue statistics."""
        unassigned = len(self.get_unassigned())
        priority_counts: Dict[int, int] = {}
        for entry in self._entries:
            p = entry.mission.priority
            priority_counts[p] = priority_counts.get(p, 0) + 1

        return {
            "queued": len(self._entries),
            "unassigned": unassigned,
            "in_progress": len(self._entries) - unassigned,
            "priority_counts": priority_counts,
        }
