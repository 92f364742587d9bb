from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .algorithms import ALGORITHMS, QUANTUM_ALGORITHMS, simulate
from .config import SchedulerConfig
from .errors import SchedulerError
from .export import dump_result
from .gantt import build_rich_gantt
from .metrics import summarize_process_metrics
from .models import SimulationResult, Step
from .workload_io import load_workload_with_config

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="Tick-by-tick CPU scheduling simulator (FCFS, SJF, RR, STCF, MLFQ) with I/O.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Log progress (-v) or every simulated tick (-vv).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        default=None,
        help="Algorithm to use (fcfs, sjf, rr, stcf, mlfq). Defaults to the workload's, else fcfs.",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    _add_algorithm_options(run_parser)
    run_parser.add_argument(
        "--trace",
        action="store_true",
        help="Print the full per-tick trace table.",
    )
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Replay the trace tick by tick in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.3,
        help="Seconds to wait between steps when --step is used (default: 0.3).",
    )
    run_parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write the full result (trace included) as JSON to this path.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(ALGORITHMS),
        help="Algorithms to compare (default: fcfs sjf rr stcf mlfq).",
    )
    _add_algorithm_options(compare_parser, default_quantum=2)

    return parser


def _add_algorithm_options(parser: argparse.ArgumentParser, default_quantum: Optional[int] = None) -> None:
    parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=default_quantum,
        help="Time quantum for round-robin (ignored by the other algorithms).",
    )
    parser.add_argument(
        "--queues",
        type=int,
        default=None,
        help="Number of MLFQ queues (default: 3).",
    )
    parser.add_argument(
        "--quantums",
        type=int,
        nargs="+",
        default=None,
        help="Quantum of each MLFQ queue, highest priority first (default: 2 4 8).",
    )
    parser.add_argument(
        "--allotment",
        type=int,
        default=None,
        help="Ticks between MLFQ priority boosts (default: 20).",
    )
    parser.add_argument(
        "--max-ticks",
        type=int,
        default=None,
        help="Abort a run that has not finished after this many ticks (default: 10000).",
    )


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def _config_from_args(base: SchedulerConfig, args: argparse.Namespace, algorithm: Optional[str]) -> SchedulerConfig:
    return base.merged(
        algorithm=algorithm,
        quantum=args.quantum,
        queues=args.queues,
        quantums=tuple(args.quantums) if args.quantums else None,
        allotment=args.allotment,
        max_ticks=args.max_ticks,
    )


def _dash(value: Optional[int]) -> str:
    return "-" if value is None else str(value)


def _print_result(result: SimulationResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    console.print()

    panel, time_marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()

    headers = [
        "PID",
        "Arrive",
        "Burst",
        "Start",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
        "I/O",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h == "PID" else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        proc_table.add_row(
            f"P{p.pid}",
            str(p.arrival_time),
            str(p.burst_time),
            str(p.start_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
            str(p.io_time),
        )

    console.print(proc_table)
    console.print()

    if result.system:
        sys = result.system
        sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
        sys_table.add_column("Metric")
        sys_table.add_column("Value", justify="right")

        sys_table.add_row("Avg waiting", f"{sys.average_waiting_time:.2f}")
        sys_table.add_row("Avg turnaround", f"{sys.average_turnaround_time:.2f}")
        sys_table.add_row("Avg response", f"{sys.average_response_time:.2f}")
        sys_table.add_row("Total time", str(sys.makespan))
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization:.1f}%")
        sys_table.add_row("Starvation count", str(sys.starvation_count))

        console.print(sys_table)


def _format_queues(step: Step) -> str:
    return " ".join(
        f"Q{idx}[{','.join(str(pid) for pid in queue)}]" for idx, queue in enumerate(step.ready_queues)
    )


def _print_trace(result: SimulationResult, console: Console) -> None:
    trace_table = Table(title="Trace", box=box.SIMPLE_HEAVY)
    trace_table.add_column("Tick", justify="right")
    trace_table.add_column("CPU", justify="center")
    trace_table.add_column("Ready")
    trace_table.add_column("Wait")
    trace_table.add_column("New")
    trace_table.add_column("What happened")

    for step in result.steps:
        trace_table.add_row(
            str(step.tick),
            "-" if step.running is None else f"P{step.running}",
            _format_queues(step),
            ",".join(str(pid) for pid in step.wait_queue),
            ",".join(str(pid) for pid in step.new_processes),
            step.explanation,
        )

    console.print(trace_table)


def _animate_result(result: SimulationResult, delay: float, console: Console) -> None:
    """
    Replay the recorded trace one tick at a time.
    """
    if not result.steps:
        console.print("[red]No execution to animate.[/red]")
        return

    console.print(f"[bold]Simulating {result.algorithm}[/bold] (duration {len(result.steps)} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for step in result.steps:
        running = "[idle]" if step.running is None else f"[green]P{step.running}[/green]"
        console.print(f"t={step.tick:2d}: {running}  {_format_queues(step)}")
        for line in step.explanation.splitlines():
            console.print(f"       [dim]{line}[/dim]")
        rows = [row for row in step.graphic_table if row.end_time is not None]
        if rows:
            finished = ", ".join(f"P{row.pid}@{_dash(row.end_time)}" for row in rows)
            console.print(f"       [dim]finished: {finished}[/dim]")
        time.sleep(delay)


def _run(args: argparse.Namespace, console: Console) -> int:
    processes, file_config = load_workload_with_config(Path(args.workload))
    config = _config_from_args(file_config, args, args.algorithm)
    result = simulate(processes, config)

    if args.step:
        try:
            _animate_result(result, delay=args.step_delay, console=console)
        except KeyboardInterrupt:
            console.print("[yellow]Animation skipped.[/yellow]")
    if args.trace:
        _print_trace(result, console)
    _print_result(result, console)

    if args.output:
        path = dump_result(result, args.output)
        console.print(f"[dim]Result written to {path}[/dim]")
    return 0


def _compare(args: argparse.Namespace, console: Console) -> int:
    processes, file_config = load_workload_with_config(Path(args.workload))

    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("CPU util.", justify="right")

    for alg in args.algorithms:
        config = _config_from_args(file_config, args, alg)
        result = simulate(processes, config)
        summary = summarize_process_metrics(result.processes)
        quantum = config.quantum if config.algorithm in QUANTUM_ALGORITHMS else None
        summary_table.add_row(
            result.algorithm,
            "" if quantum is None else str(quantum),
            f"{summary['avg_waiting']:.2f}",
            f"{summary['avg_turnaround']:.2f}",
            f"{summary['avg_response']:.2f}",
            f"{result.system.cpu_utilization:.1f}%",
        )

    console.print(summary_table)
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    console = Console()

    try:
        if args.command == "run":
            return _run(args, console)
        if args.command == "compare":
            return _compare(args, console)
    except (SchedulerError, ValueError, OSError) as exc:
        logger.debug("Run failed", exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
