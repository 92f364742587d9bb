from __future__ import annotations

from typing import List, Sequence

from .errors import InputValidationError
from .models import IoRequest, Process


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_processes(processes: Sequence[Process]) -> List[Process]:
    """
    Check a workload before any tick runs and return normalized copies with
    I/O requests sorted by start offset.

    Processes are numbered from 1 in input order in error messages.
    """
    if not processes:
        raise InputValidationError("Processes array is required and must not be empty")

    normalized: List[Process] = []
    for i, process in enumerate(processes, start=1):
        if not _is_int(process.arrival_time) or process.arrival_time < 0:
            raise InputValidationError(f"Process {i}: arrivalTime must be a non-negative number")
        if not _is_int(process.burst_time) or process.burst_time <= 0:
            raise InputValidationError(f"Process {i}: burstTime must be a positive number")

        for j, io in enumerate(process.io, start=1):
            if not _is_int(io.start) or io.start < 0:
                raise InputValidationError(f"Process {i}, IO {j}: start must be a non-negative number")
            if not _is_int(io.duration) or io.duration <= 0:
                raise InputValidationError(f"Process {i}, IO {j}: duration must be a positive number")
            if io.start >= process.burst_time:
                raise InputValidationError(
                    f"Process {i}, IO {j}: start time ({io.start}) must be less than "
                    f"burst time ({process.burst_time})"
                )

        io_sorted = sorted(process.io, key=lambda io: io.start)
        for prev, nxt in zip(io_sorted, io_sorted[1:]):
            if prev.start == nxt.start:
                raise InputValidationError(
                    f"Process {i}: more than one IO request starts at offset {nxt.start}"
                )

        normalized.append(
            Process(
                arrival_time=process.arrival_time,
                burst_time=process.burst_time,
                io=[IoRequest(start=io.start, duration=io.duration) for io in io_sorted],
            )
        )

    return normalized
