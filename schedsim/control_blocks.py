from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence

from .errors import InternalInvariantViolation
from .models import Process, ProcessControlBlock, ProcessState


class ControlBlockTable:
    """
    One ProcessControlBlock per process, keyed by pid.

    Pids are assigned 1..N after a stable sort on arrival time, so processes
    arriving together keep their input order.
    """

    def __init__(self, processes: Sequence[Process]) -> None:
        ordered = sorted(processes, key=lambda p: p.arrival_time)
        self._blocks: Dict[int, ProcessControlBlock] = {
            pid: ProcessControlBlock.from_process(pid, process)
            for pid, process in enumerate(ordered, start=1)
        }

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[ProcessControlBlock]:
        return iter(self._blocks.values())

    def get(self, pid: int) -> ProcessControlBlock:
        try:
            return self._blocks[pid]
        except KeyError:
            raise InternalInvariantViolation(f"Unknown process {pid}") from None

    def in_state(self, state: ProcessState) -> List[ProcessControlBlock]:
        return [pcb for pcb in self._blocks.values() if pcb.state is state]

    def arrivals(self, tick: int) -> List[ProcessControlBlock]:
        return [
            pcb
            for pcb in self._blocks.values()
            if pcb.state is ProcessState.NEW and pcb.arrival_time == tick
        ]

    def wakeups(self, tick: int) -> List[ProcessControlBlock]:
        return [
            pcb
            for pcb in self._blocks.values()
            if pcb.state is ProcessState.WAIT and pcb.wake_tick == tick
        ]

    def running(self) -> Optional[ProcessControlBlock]:
        running = self.in_state(ProcessState.RUNNING)
        if len(running) > 1:
            pids = ", ".join(str(pcb.pid) for pcb in running)
            raise InternalInvariantViolation(f"More than one running process: {pids}")
        return running[0] if running else None

    def all_done(self) -> bool:
        return all(pcb.is_done for pcb in self._blocks.values())
