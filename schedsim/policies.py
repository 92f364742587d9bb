from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

from .control_blocks import ControlBlockTable
from .errors import ConfigurationError
from .models import ProcessControlBlock
from .queues import ReadyQueueSet

DEFAULT_MLFQ_QUEUES = 3
DEFAULT_MLFQ_QUANTUMS = (2, 4, 8)
DEFAULT_MLFQ_ALLOTMENT = 20


def _first_minimum(
    queue: Sequence[int],
    table: ControlBlockTable,
    key: Callable[[ProcessControlBlock], int],
) -> Optional[int]:
    """
    Scan ``queue`` in order and return the pid with the strictly smallest key.
    The earliest-inserted pid wins ties.
    """
    best_pid: Optional[int] = None
    best_value = 0
    for pid in queue:
        value = key(table.get(pid))
        if best_pid is None or value < best_value:
            best_pid = pid
            best_value = value
    return best_pid


class DispatchPolicy(ABC):
    """
    The decisions that differ between scheduling algorithms.

    The engine runs the same tick loop for every algorithm and consults these
    hooks; defaults describe a single non-preemptive FIFO queue.
    """

    name: str = ""

    def initialize_queues(self) -> ReadyQueueSet:
        return ReadyQueueSet(1)

    def initial_priority(self) -> int:
        return 0

    def init_new_process(self, pcb: ProcessControlBlock) -> None:
        pcb.priority = self.initial_priority()

    def should_preempt_on_arrival(
        self,
        running: ProcessControlBlock,
        arrived: List[ProcessControlBlock],
    ) -> bool:
        return False

    @abstractmethod
    def get_scheduled_process(self, queues: ReadyQueueSet, table: ControlBlockTable) -> Optional[int]:
        """Return the pid to dispatch next, or None to leave the CPU idle."""

    def should_yield_on_quantum_expiry(self) -> bool:
        return False

    def requeue_priority(self, pcb: ProcessControlBlock, queues: ReadyQueueSet) -> int:
        return pcb.priority

    def priority_after_io(self, pcb: ProcessControlBlock) -> int:
        return pcb.priority

    def describe(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class FCFSPolicy(DispatchPolicy):
    name = "FCFS"

    def get_scheduled_process(self, queues: ReadyQueueSet, table: ControlBlockTable) -> Optional[int]:
        return queues.head(0)


class SJFPolicy(DispatchPolicy):
    """
    Shortest Job First (non-preemptive): smallest total burst among the ready.
    """

    name = "SJF"

    def get_scheduled_process(self, queues: ReadyQueueSet, table: ControlBlockTable) -> Optional[int]:
        return _first_minimum(queues.queue(0), table, key=lambda pcb: pcb.burst_time)


class RoundRobinPolicy(DispatchPolicy):
    name = "RR"

    def __init__(self, quantum: Optional[int]) -> None:
        if quantum is None or quantum <= 0:
            raise ConfigurationError("Round Robin algorithm requires a positive quantum value")
        self.quantum = quantum

    def initialize_queues(self) -> ReadyQueueSet:
        return ReadyQueueSet(1, quantums=[self.quantum])

    def get_scheduled_process(self, queues: ReadyQueueSet, table: ControlBlockTable) -> Optional[int]:
        return queues.head(0)

    def should_yield_on_quantum_expiry(self) -> bool:
        return True

    def describe(self) -> str:
        return f"{self.name} (quantum={self.quantum})"

    def __repr__(self) -> str:
        return f"RoundRobinPolicy(quantum={self.quantum})"


class STCFPolicy(DispatchPolicy):
    """
    Shortest Time-to-Completion First (preemptive SJF).

    The running process gives the CPU back after every tick, so the ready set
    is re-examined for the smallest remaining burst at each dispatch.
    """

    name = "STCF"

    def initialize_queues(self) -> ReadyQueueSet:
        return ReadyQueueSet(1, quantums=[1])

    def should_preempt_on_arrival(
        self,
        running: ProcessControlBlock,
        arrived: List[ProcessControlBlock],
    ) -> bool:
        """Only decides anything when the runner would otherwise keep the CPU past this tick."""
        return any(pcb.remaining_burst < running.remaining_burst for pcb in arrived)

    def get_scheduled_process(self, queues: ReadyQueueSet, table: ControlBlockTable) -> Optional[int]:
        return _first_minimum(queues.queue(0), table, key=lambda pcb: pcb.remaining_burst)

    def should_yield_on_quantum_expiry(self) -> bool:
        return True


class MLFQPolicy(DispatchPolicy):
    """
    Multi-Level Feedback Queue.

    - New arrivals and processes returning from I/O enter queue 0.
    - A process that uses up its queue's quantum drops one level, bottoming
      out at the last queue.
    - Every ``allotment`` ticks all ready processes are boosted back to
      queue 0.
    - An arrival in a higher queue preempts the running process, which goes
      back to the tail of its own queue.
    """

    name = "MLFQ"

    def __init__(
        self,
        queues: int = DEFAULT_MLFQ_QUEUES,
        quantums: Sequence[int] = DEFAULT_MLFQ_QUANTUMS,
        allotment: int = DEFAULT_MLFQ_ALLOTMENT,
    ) -> None:
        if queues is None or queues <= 0:
            raise ConfigurationError("MLFQ algorithm requires a positive number of queues")
        if quantums is None or len(quantums) != queues:
            raise ConfigurationError(
                "MLFQ algorithm requires quantums array with length equal to number of queues"
            )
        for idx, quantum in enumerate(quantums):
            if quantum is None or quantum <= 0:
                raise ConfigurationError(f"MLFQ quantum at index {idx} must be a positive number")
        if allotment is None or allotment <= 0:
            raise ConfigurationError("MLFQ algorithm requires a positive allotment value")

        self.queues = queues
        self.quantums = tuple(quantums)
        self.allotment = allotment

    def initialize_queues(self) -> ReadyQueueSet:
        return ReadyQueueSet(self.queues, quantums=self.quantums, allotment=self.allotment)

    def should_preempt_on_arrival(
        self,
        running: ProcessControlBlock,
        arrived: List[ProcessControlBlock],
    ) -> bool:
        return any(pcb.priority < running.priority for pcb in arrived)

    def get_scheduled_process(self, queues: ReadyQueueSet, table: ControlBlockTable) -> Optional[int]:
        for level in range(len(queues)):
            pid = queues.head(level)
            if pid is not None:
                return pid
        return None

    def should_yield_on_quantum_expiry(self) -> bool:
        return True

    def requeue_priority(self, pcb: ProcessControlBlock, queues: ReadyQueueSet) -> int:
        return min(pcb.priority + 1, len(queues) - 1)

    def priority_after_io(self, pcb: ProcessControlBlock) -> int:
        return 0

    def describe(self) -> str:
        quanta = ", ".join(str(q) for q in self.quantums)
        return f"{self.name} (queues={self.queues}, quantums=[{quanta}], allotment={self.allotment})"

    def __repr__(self) -> str:
        return f"MLFQPolicy(queues={self.queues}, quantums={list(self.quantums)}, allotment={self.allotment})"
