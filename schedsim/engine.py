from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .clock import Clock
from .config import DEFAULT_MAX_TICKS, SchedulerConfig
from .control_blocks import ControlBlockTable
from .errors import InternalInvariantViolation, SimulationLimitExceeded
from .metrics import collect_process_metrics, compute_system_metrics
from .models import (
    NOT_SET,
    Process,
    ProcessControlBlock,
    ProcessState,
    ScheduledSlice,
    SimulationResult,
)
from .policies import DispatchPolicy
from .queues import ReadyQueueSet
from .trace import TraceRecorder
from .validation import validate_processes

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Deterministic tick-by-tick scheduler simulation.

    Every tick runs the same phases in order: admission, I/O completion,
    priority boost, dispatch, execution, post-execution checks, trace
    emission. Anything that differs between algorithms is delegated to the
    DispatchPolicy; the loop itself never looks at which algorithm it runs.
    """

    def __init__(
        self,
        processes: Sequence[Process],
        policy: DispatchPolicy,
        max_ticks: int = DEFAULT_MAX_TICKS,
        config: Optional[SchedulerConfig] = None,
    ) -> None:
        self.processes = validate_processes(processes)
        self.policy = policy
        self.max_ticks = max_ticks
        self.config = config
        self.clock = Clock()
        self._reset_state()

    def _reset_state(self) -> None:
        self.clock.reset()
        self.table = ControlBlockTable(self.processes)
        self.queues: ReadyQueueSet = self.policy.initialize_queues()
        self.trace = TraceRecorder()
        self.timeline: List[ScheduledSlice] = []
        self._cpu: Optional[int] = None
        self._slice_start = NOT_SET

    # CPU ownership

    @property
    def running_pid(self) -> Optional[int]:
        return self._cpu

    def _running(self) -> Optional[ProcessControlBlock]:
        return self.table.get(self._cpu) if self._cpu is not None else None

    def _start_running(self, pid: int, tick: int) -> None:
        current = self.table.running()
        if self._cpu is not None or current is not None:
            holder = self._cpu if self._cpu is not None else current.pid
            raise InternalInvariantViolation(
                f"Cannot dispatch process {pid} while process {holder} is running"
            )
        pcb = self.table.get(pid)
        if pcb.state is not ProcessState.READY:
            raise InternalInvariantViolation(f"Cannot dispatch process {pid} in state {pcb.state.value}")

        self.queues.dequeue_by_pid(pid)
        pcb.state = ProcessState.RUNNING
        pcb.ticks_in_quantum = 0
        if pcb.scheduled_time == NOT_SET:
            pcb.scheduled_time = tick
        self._cpu = pid
        self._slice_start = tick

    def _release_cpu(self, end_time: int) -> None:
        pid = self._cpu
        if pid is None:
            raise InternalInvariantViolation("Cannot release an idle CPU")

        if end_time > self._slice_start:
            last = self.timeline[-1] if self.timeline else None
            if last is not None and last.pid == pid and last.end_time == self._slice_start:
                last.end_time = end_time
            else:
                self.timeline.append(ScheduledSlice(pid=pid, start_time=self._slice_start, end_time=end_time))
        self._cpu = None
        self._slice_start = NOT_SET

    def _make_ready(self, pcb: ProcessControlBlock) -> None:
        pcb.state = ProcessState.READY
        self.queues.enqueue(pcb.priority, pcb.pid)

    # Tick phases

    def _preempt_for(self, became_ready: List[ProcessControlBlock], tick: int, reason: str) -> None:
        running = self._running()
        if running is None or not became_ready:
            return
        if not self.policy.should_preempt_on_arrival(running, became_ready):
            return

        self._release_cpu(end_time=tick)
        self._make_ready(running)
        self.trace.note(
            f"Process {running.pid} was preempted by {reason} and returned to Q{running.priority}."
        )

    def _admit(self, tick: int) -> None:
        arrived = self.table.arrivals(tick)
        for pcb in arrived:
            self.policy.init_new_process(pcb)
            self._make_ready(pcb)
            self.trace.note(f"Process {pcb.pid} arrived and joined Q{pcb.priority}.")
        self._preempt_for(arrived, tick, reason="a new arrival")

    def _complete_io(self, tick: int) -> None:
        returned = self.table.wakeups(tick)
        for pcb in returned:
            pcb.priority = self.policy.priority_after_io(pcb)
            pcb.wake_tick = NOT_SET
            self._make_ready(pcb)
            self.trace.note(f"Process {pcb.pid} finished I/O and joined Q{pcb.priority}.")
        self._preempt_for(returned, tick, reason="a process returning from I/O")

    def _boost(self, tick: int) -> None:
        allotment = self.queues.allotment
        if allotment <= 0 or tick == 0 or tick % allotment != 0:
            return

        moved = self.queues.boost()
        for pcb in self.table.in_state(ProcessState.READY):
            pcb.priority = 0
            pcb.ticks_in_quantum = 0
        running = self._running()
        if running is not None:
            running.priority = 0
            running.ticks_in_quantum = 0

        self.trace.note(f"Allotment expired at time {tick}: all processes boosted to Q0.")
        if moved:
            self.trace.note("Moved to Q0: " + ", ".join(f"P{pid}" for pid in moved) + ".")

    def _dispatch(self, tick: int) -> None:
        if self._cpu is not None:
            return
        pid = self.policy.get_scheduled_process(self.queues, self.table)
        if pid is None:
            return
        origin = self.queues.index_of(pid)
        self._start_running(pid, tick)
        self.trace.note(f"Process {pid} was scheduled from Q{origin}.")

    def _execute(self) -> Optional[int]:
        """Run the current process for one tick; return the offset it ran at."""
        pcb = self._running()
        if pcb is None:
            return None
        if pcb.remaining_burst <= 0:
            raise InternalInvariantViolation(f"Process {pcb.pid} is running with no burst left")

        offset = pcb.consumed_burst
        pcb.remaining_burst -= 1
        pcb.consumed_burst += 1
        pcb.ticks_in_quantum += 1
        return offset

    def _after_execution(self, tick: int, offset: int) -> None:
        pcb = self._running()
        if pcb is None:
            raise InternalInvariantViolation("Post-execution checks without a running process")

        if pcb.remaining_burst == 0:
            pcb.state = ProcessState.DONE
            pcb.completion_time = tick + 1
            pcb.io_list.clear()
            self._release_cpu(end_time=tick + 1)
            self.trace.note(f"Process {pcb.pid} finished at time {tick + 1}.")
            return

        io = pcb.next_io
        if io is not None and io.start == offset:
            pcb.io_list.pop(0)
            pcb.state = ProcessState.WAIT
            pcb.wake_tick = tick + 1 + io.duration
            pcb.io_ticks += io.duration
            self._release_cpu(end_time=tick + 1)
            self.trace.note(
                f"Process {pcb.pid} started I/O for {io.duration} "
                f"{'unit' if io.duration == 1 else 'units'}, back at time {pcb.wake_tick}."
            )
            return

        if self.policy.should_yield_on_quantum_expiry() and pcb.ticks_in_quantum >= self.queues.quantum(pcb.priority):
            previous = pcb.priority
            pcb.priority = self.policy.requeue_priority(pcb, self.queues)
            pcb.ticks_in_quantum = 0
            self._release_cpu(end_time=tick + 1)
            self._make_ready(pcb)
            if pcb.priority != previous:
                self.trace.note(f"Process {pcb.pid} used up its quantum and moved to Q{pcb.priority}.")
            else:
                self.trace.note(f"Process {pcb.pid} used up its quantum and rejoined Q{pcb.priority}.")

    def step(self) -> None:
        """Run one full tick and advance the clock."""
        tick = self.clock.value()

        self._admit(tick)
        self._complete_io(tick)
        self._boost(tick)
        self._dispatch(tick)

        running = self._cpu
        offset = self._execute()
        if offset is None:
            self.trace.note("CPU idle.")
        else:
            pcb = self.table.get(running)
            self.trace.note(f"Process {running} ran ({pcb.remaining_burst} left).")
            self._after_execution(tick, offset)

        step = self.trace.record(tick, self.table, self.queues, running)
        logger.debug("t=%d %s", tick, step.explanation.replace("\n", " | "))
        self.clock.advance()

    def run(self) -> SimulationResult:
        """
        Simulate until every process is done and return the full trace.

        Each call starts from a fresh clock and fresh control blocks, so the
        same engine reproduces the same result.
        """
        self._reset_state()
        logger.info("Simulating %s on %d processes", self.policy.describe(), len(self.table))

        while not self.table.all_done():
            if self.clock.value() >= self.max_ticks:
                raise SimulationLimitExceeded(self.max_ticks)
            self.step()

        result = SimulationResult(
            algorithm=self.policy.describe(),
            config=self.config,
            processes=collect_process_metrics(self.table),
            timeline=list(self.timeline),
            steps=list(self.trace.steps),
        )
        compute_system_metrics(result)
        logger.info(
            "%s finished at time %d (avg waiting %.2f)",
            self.policy.name,
            result.system.makespan,
            result.system.average_waiting_time,
        )
        return result
