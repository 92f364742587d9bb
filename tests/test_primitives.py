import pytest

from schedsim.clock import Clock
from schedsim.control_blocks import ControlBlockTable
from schedsim.engine import SimulationEngine
from schedsim.errors import InternalInvariantViolation
from schedsim.models import IoRequest, Process, ProcessState
from schedsim.policies import FCFSPolicy, MLFQPolicy, RoundRobinPolicy, SJFPolicy, STCFPolicy
from schedsim.queues import NO_ALLOTMENT, NO_QUANTUM, ReadyQueueSet


def test_clock_advance_and_reset():
    clock = Clock()
    assert clock.value() == 0
    clock.advance()
    clock.advance()
    assert clock.value() == 2
    clock.reset()
    assert clock.value() == 0


def test_ready_queue_set_fifo_and_removal():
    queues = ReadyQueueSet(2, quantums=[2, 4], allotment=10)
    queues.enqueue(0, 3)
    queues.enqueue(0, 1)
    queues.enqueue(1, 2)

    assert queues.snapshot() == [[3, 1], [2]]
    assert queues.head(0) == 3
    assert queues.index_of(2) == 1
    assert queues.quantum(1) == 4
    assert queues.allotment == 10

    queues.dequeue_by_pid(3)
    queues.dequeue_by_pid(99)  # absent pid is ignored
    assert queues.snapshot() == [[1], [2]]


def test_ready_queue_set_defaults():
    queues = ReadyQueueSet(1)
    assert queues.quantum(0) == NO_QUANTUM
    assert queues.allotment == NO_ALLOTMENT
    assert queues.head(0) is None
    assert queues.snapshot() == [[]]


def test_ready_queue_set_rejects_bad_index():
    queues = ReadyQueueSet(2)
    with pytest.raises(InternalInvariantViolation):
        queues.enqueue(2, 1)
    with pytest.raises(InternalInvariantViolation):
        queues.quantum(-1)


def test_pid_lives_in_one_queue():
    queues = ReadyQueueSet(2)
    queues.enqueue(0, 1)
    with pytest.raises(InternalInvariantViolation):
        queues.enqueue(1, 1)


def test_boost_keeps_queue_order():
    queues = ReadyQueueSet(3, quantums=[1, 2, 4], allotment=5)
    queues.enqueue(0, 4)
    queues.enqueue(2, 1)
    queues.enqueue(1, 3)
    queues.enqueue(1, 2)

    assert queues.boost() == [3, 2, 1]
    assert queues.snapshot() == [[4, 3, 2, 1], [], []]


def test_control_block_pids_follow_arrival_order():
    table = ControlBlockTable(
        [
            Process(arrival_time=5, burst_time=1),
            Process(arrival_time=0, burst_time=2),
            Process(arrival_time=0, burst_time=3),
        ]
    )
    assert [(pcb.pid, pcb.arrival_time, pcb.burst_time) for pcb in table] == [(1, 0, 2), (2, 0, 3), (3, 5, 1)]
    pcb = table.get(3)
    assert pcb.state is ProcessState.NEW
    assert pcb.remaining_burst == 1
    assert pcb.scheduled_time == -1
    assert pcb.completion_time == -1


def test_control_block_copies_io_list():
    io = [IoRequest(start=0, duration=1)]
    table = ControlBlockTable([Process(arrival_time=0, burst_time=2, io=io)])
    table.get(1).io_list.pop()
    assert io == [IoRequest(start=0, duration=1)]


def test_control_block_unknown_pid():
    table = ControlBlockTable([Process(arrival_time=0, burst_time=1)])
    with pytest.raises(InternalInvariantViolation):
        table.get(2)


def test_two_running_processes_is_an_invariant_violation():
    table = ControlBlockTable([Process(arrival_time=0, burst_time=1), Process(arrival_time=0, burst_time=1)])
    for pcb in table:
        pcb.state = ProcessState.RUNNING
    with pytest.raises(InternalInvariantViolation):
        table.running()


def test_dispatch_while_running_fails_loudly():
    engine = SimulationEngine(
        [Process(arrival_time=0, burst_time=3), Process(arrival_time=0, burst_time=3)],
        FCFSPolicy(),
    )
    engine.step()
    assert engine.running_pid == 1
    with pytest.raises(InternalInvariantViolation):
        engine._start_running(2, tick=1)


def test_policy_queue_shapes():
    assert len(FCFSPolicy().initialize_queues()) == 1
    assert SJFPolicy().initialize_queues().quantum(0) == NO_QUANTUM
    assert RoundRobinPolicy(3).initialize_queues().quantum(0) == 3
    assert STCFPolicy().initialize_queues().quantum(0) == 1

    mlfq = MLFQPolicy(queues=3, quantums=[2, 4, 8], allotment=10).initialize_queues()
    assert len(mlfq) == 3
    assert [mlfq.quantum(i) for i in range(3)] == [2, 4, 8]
    assert mlfq.allotment == 10


def test_only_multi_queue_policy_resets_priority_after_io():
    table = ControlBlockTable([Process(arrival_time=0, burst_time=4)])
    pcb = table.get(1)
    pcb.priority = 2
    assert RoundRobinPolicy(2).priority_after_io(pcb) == 2
    assert MLFQPolicy(queues=3, quantums=[1, 2, 3], allotment=5).priority_after_io(pcb) == 0


def test_shortest_remaining_arrival_preempts_longer_runner():
    table = ControlBlockTable([Process(arrival_time=0, burst_time=5), Process(arrival_time=1, burst_time=3)])
    running, arrived = table.get(1), table.get(2)
    running.remaining_burst = 4
    policy = STCFPolicy()

    assert policy.should_preempt_on_arrival(running, [arrived])
    arrived.remaining_burst = 4
    assert not policy.should_preempt_on_arrival(running, [arrived])


def test_dispatch_refuses_when_a_block_is_already_running():
    engine = SimulationEngine(
        [Process(arrival_time=0, burst_time=3), Process(arrival_time=0, burst_time=3)],
        FCFSPolicy(),
    )
    engine._admit(0)
    engine.table.get(1).state = ProcessState.RUNNING
    assert engine.running_pid is None
    with pytest.raises(InternalInvariantViolation):
        engine._start_running(2, tick=0)
