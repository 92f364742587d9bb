from __future__ import annotations

from typing import List, Optional

from .control_blocks import ControlBlockTable
from .models import NOT_SET, GraphicRow, ProcessControlBlock, ProcessState, Step
from .queues import ReadyQueueSet


def graphic_row(pcb: ProcessControlBlock, tick: int) -> GraphicRow:
    """
    Table row for ``pcb`` as seen at the end of ``tick``.

    Waiting time is live for arrived processes: time since arrival minus the
    CPU ticks already consumed. Turnaround only exists once the process is done.
    """
    row = GraphicRow(pid=pcb.pid)
    if not pcb.has_arrived:
        return row

    row.arrival = pcb.arrival_time
    if pcb.scheduled_time != NOT_SET:
        row.scheduled_time = pcb.scheduled_time

    if pcb.is_done:
        row.end_time = pcb.completion_time
        row.turnaround_time = pcb.completion_time - pcb.arrival_time
        row.waiting_time = row.turnaround_time - pcb.burst_time
    else:
        row.waiting_time = (tick + 1 - pcb.arrival_time) - pcb.consumed_burst
    return row


class TraceRecorder:
    """Collects one Step per tick."""

    def __init__(self) -> None:
        self.steps: List[Step] = []
        self._notes: List[str] = []

    def note(self, text: str) -> None:
        self._notes.append(text)

    def record(
        self,
        tick: int,
        table: ControlBlockTable,
        queues: ReadyQueueSet,
        running: Optional[int],
    ) -> Step:
        step = Step(
            tick=tick,
            explanation="\n".join(self._notes),
            ready_queues=queues.snapshot(),
            wait_queue=[pcb.pid for pcb in table.in_state(ProcessState.WAIT)],
            new_processes=[pcb.pid for pcb in table.in_state(ProcessState.NEW)],
            running=running,
            graphic_table=[graphic_row(pcb, tick) for pcb in table],
        )
        self.steps.append(step)
        self._notes = []
        return step
