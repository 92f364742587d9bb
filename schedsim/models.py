from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .config import SchedulerConfig


# Sentinel for scheduled/completion times that have not happened yet.
NOT_SET = -1


class ProcessState(str, Enum):
    NEW = "NEW"
    READY = "READY"
    RUNNING = "RUNNING"
    WAIT = "WAIT"
    DONE = "DONE"


@dataclass(frozen=True)
class IoRequest:
    """
    Block for ``duration`` ticks once ``start`` CPU ticks have been consumed.
    """

    start: int
    duration: int


@dataclass
class Process:
    arrival_time: int
    burst_time: int
    io: List[IoRequest] = field(default_factory=list)


@dataclass
class ProcessControlBlock:
    """
    Runtime record of one process. Only the engine mutates it.
    """

    pid: int
    arrival_time: int
    burst_time: int
    remaining_burst: int
    consumed_burst: int = 0
    priority: int = 0
    state: ProcessState = ProcessState.NEW
    scheduled_time: int = NOT_SET
    completion_time: int = NOT_SET
    io_list: List[IoRequest] = field(default_factory=list)
    wake_tick: int = NOT_SET
    ticks_in_quantum: int = 0
    io_ticks: int = 0

    @classmethod
    def from_process(cls, pid: int, process: Process) -> "ProcessControlBlock":
        return cls(
            pid=pid,
            arrival_time=process.arrival_time,
            burst_time=process.burst_time,
            remaining_burst=process.burst_time,
            io_list=list(process.io),
        )

    @property
    def next_io(self) -> Optional[IoRequest]:
        return self.io_list[0] if self.io_list else None

    @property
    def has_arrived(self) -> bool:
        return self.state is not ProcessState.NEW

    @property
    def is_done(self) -> bool:
        return self.state is ProcessState.DONE


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int


@dataclass
class GraphicRow:
    """
    Per-process row of the table shown alongside every step.

    ``None`` means the underlying event has not happened yet.
    """

    pid: int
    arrival: Optional[int] = None
    scheduled_time: Optional[int] = None
    end_time: Optional[int] = None
    waiting_time: Optional[int] = None
    turnaround_time: Optional[int] = None


@dataclass
class Step:
    tick: int
    explanation: str
    ready_queues: List[List[int]]
    wait_queue: List[int]
    new_processes: List[int]
    running: Optional[int]
    graphic_table: List[GraphicRow] = field(default_factory=list)


@dataclass
class ProcessMetrics:
    pid: int
    arrival_time: int
    burst_time: int
    start_time: int
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: int
    io_time: int = 0


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    average_waiting_time: float = 0.0
    average_turnaround_time: float = 0.0
    average_response_time: float = 0.0
    starvation_count: int = 0


@dataclass
class SimulationResult:
    algorithm: str
    config: Optional["SchedulerConfig"] = None
    processes: List[ProcessMetrics] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    steps: List[Step] = field(default_factory=list)
    system: Optional[SystemMetrics] = None
