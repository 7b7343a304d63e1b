"""Tests for the FIFO mission queue."""

from amrfleet.core.scenario import Mission
from amrfleet.planning.mission_queue import MissionQueue


LOW = Mission(id="low", priority=3)
HIGH = Mission(id="high", priority=1)


def test_queue_cycles_templates():
    queue = MissionQueue.from_templates([LOW, HIGH], length=5)

    assert [e.mission.id for e in queue] == ["low-0", "high-1", "low-2", "high-3", "low-4"]
    assert all(not e.is_assigned for e in queue)


def test_default_length_is_fifty():
    assert len(MissionQueue.from_templates([LOW])) == 50


def test_empty_templates_give_empty_queue():
    queue = MissionQueue.from_templates([], length=50)
    assert len(queue) == 0
    assert queue.next_unassigned() is None


def test_assignment_is_fifo_and_ignores_priority():
    queue = MissionQueue.from_templates([LOW, HIGH], length=4)

    entry = queue.next_unassigned()
    assert entry.mission.id == "low-0"
    assert queue.assign(entry, "robot-0")

    assert queue.next_unassigned().mission.id == "high-1"
    assert len(queue.get_unassigned()) == 3


def test_bound_entry_is_not_rebound():
    queue = MissionQueue.from_templates([LOW], length=1)
    entry = queue.next_unassigned()
    queue.assign(entry, "robot-0")

    assert not queue.assign(entry, "robot-1")
    assert entry.assigned_robot == "robot-0"


def test_complete_removes_entry_and_notifies():
    queue = MissionQueue.from_templates([LOW, HIGH], length=3)
    completed = []
    queue.register_completion_callback(completed.append)

    entry = queue.next_unassigned()
    queue.assign(entry, "robot-0")

    assert queue.complete("robot-0", "low-0") is entry
    assert len(queue) == 2
    assert completed == [entry]
    assert queue.find_by_robot("robot-0") is None


def test_complete_unknown_binding_is_a_no_op():
    queue = MissionQueue.from_templates([LOW], length=2)
    assert queue.complete("robot-9", "low-0") is None
    assert len(queue) == 2


def test_statistics():
    queue = MissionQueue.from_templates([LOW, HIGH], length=4)
    queue.assign(queue.next_unassigned(), "robot-0")

    stats = queue.get_statistics()
    assert stats["queued"] == 4
    assert stats["unassigned"] == 3
    assert stats["in_progress"] == 1
    assert stats["priority_counts"] == {3: 2, 1: 2}
