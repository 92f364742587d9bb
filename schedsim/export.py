from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .models import GraphicRow, SimulationResult, Step


def _graphic_row_to_dict(row: GraphicRow) -> Dict[str, Any]:
    return {
        "pid": row.pid,
        "arrival": row.arrival,
        "scheduledTime": row.scheduled_time,
        "endTime": row.end_time,
        "waitingTime": row.waiting_time,
        "turnaroundTime": row.turnaround_time,
    }


def step_to_dict(step: Step) -> Dict[str, Any]:
    return {
        "tick": step.tick,
        "explanation": step.explanation,
        "readyQueues": [list(queue) for queue in step.ready_queues],
        "waitQueue": list(step.wait_queue),
        "newProcesses": list(step.new_processes),
        "running": step.running,
        "graphicTable": [_graphic_row_to_dict(row) for row in step.graphic_table],
    }


def result_to_dict(result: SimulationResult) -> Dict[str, Any]:
    """
    Plain-data view of a run, with the camelCase field names front ends expect.
    """
    system = result.system
    return {
        "algorithm": result.algorithm,
        "processes": [
            {
                "pid": p.pid,
                "arrivalTime": p.arrival_time,
                "burstTime": p.burst_time,
                "scheduledTime": p.start_time,
                "completionTime": p.completion_time,
                "waitingTime": p.waiting_time,
                "turnaroundTime": p.turnaround_time,
                "responseTime": p.response_time,
                "ioTime": p.io_time,
            }
            for p in result.processes
        ],
        "solution": [step_to_dict(step) for step in result.steps],
        "timeline": [
            {"pid": s.pid, "start": s.start_time, "end": s.end_time} for s in result.timeline
        ],
        "metrics": {
            "averageWaitingTime": system.average_waiting_time if system else 0.0,
            "averageTurnaroundTime": system.average_turnaround_time if system else 0.0,
            "averageResponseTime": system.average_response_time if system else 0.0,
            "cpuUtilization": system.cpu_utilization if system else 0.0,
            "throughput": system.throughput if system else 0.0,
        },
    }


def dump_result(result: SimulationResult, path: str | Path) -> Path:
    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(result_to_dict(result), f, indent=2)
        f.write("\n")
    return path
