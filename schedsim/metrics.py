from __future__ import annotations

from typing import Iterable, List

from .models import ProcessControlBlock, ProcessMetrics, SimulationResult, SystemMetrics


def process_metrics(pcb: ProcessControlBlock) -> ProcessMetrics:
    """
    Final metrics of a finished process. Waiting time is everything between
    arrival and completion that was not spent on the CPU.
    """
    turnaround_time = pcb.completion_time - pcb.arrival_time
    return ProcessMetrics(
        pid=pcb.pid,
        arrival_time=pcb.arrival_time,
        burst_time=pcb.burst_time,
        start_time=pcb.scheduled_time,
        completion_time=pcb.completion_time,
        waiting_time=turnaround_time - pcb.burst_time,
        turnaround_time=turnaround_time,
        response_time=pcb.scheduled_time - pcb.arrival_time,
        io_time=pcb.io_ticks,
    )


def collect_process_metrics(pcbs: Iterable[ProcessControlBlock]) -> List[ProcessMetrics]:
    return [process_metrics(pcb) for pcb in pcbs]


def compute_system_metrics(result: SimulationResult) -> SystemMetrics:
    """
    Compute throughput and CPU utilization given populated per-process metrics
    and timeline slices.
    """
    if not result.processes:
        system = SystemMetrics(cpu_busy_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)
        result.system = system
        return system

    makespan = max(p.completion_time for p in result.processes)
    cpu_busy_time = sum(slice_.end_time - slice_.start_time for slice_ in result.timeline)

    throughput = len(result.processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan * 100 if makespan > 0 else 0.0

    summary = summarize_process_metrics(result.processes)

    # Count processes whose waiting time is more than 2x the average waiting time.
    avg_wait = summary["avg_waiting"]
    starvation_count = sum(1 for p in result.processes if p.waiting_time > 2 * avg_wait)

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        average_waiting_time=summary["avg_waiting"],
        average_turnaround_time=summary["avg_turnaround"],
        average_response_time=summary["avg_response"],
        starvation_count=starvation_count,
    )
    result.system = system
    return system


def summarize_process_metrics(processes: List[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(p.response_time for p in processes) / n,
    }
