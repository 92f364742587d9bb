from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence

from .config import SchedulerConfig
from .engine import SimulationEngine
from .errors import ConfigurationError
from .models import Process, SimulationResult
from .policies import (
    DispatchPolicy,
    FCFSPolicy,
    MLFQPolicy,
    RoundRobinPolicy,
    SJFPolicy,
    STCFPolicy,
)

ALGORITHMS: Dict[str, Callable[[SchedulerConfig], DispatchPolicy]] = {
    "fcfs": lambda config: FCFSPolicy(),
    "sjf": lambda config: SJFPolicy(),
    "rr": lambda config: RoundRobinPolicy(config.quantum),
    "stcf": lambda config: STCFPolicy(),
    "mlfq": lambda config: MLFQPolicy(config.queues, config.quantums, config.allotment),
}

# Algorithms that read the ``quantum`` parameter.
QUANTUM_ALGORITHMS = {"rr"}


def build_policy(config: SchedulerConfig) -> DispatchPolicy:
    name = config.algorithm.lower()
    if name not in ALGORITHMS:
        supported = ", ".join(key.upper() for key in ALGORITHMS)
        raise ConfigurationError(
            f"Unsupported algorithm: {config.algorithm}. Supported algorithms: {supported}"
        )
    return ALGORITHMS[name](config)


def simulate(processes: Sequence[Process], config: SchedulerConfig) -> SimulationResult:
    """
    Validate, simulate and summarize one run. Configuration problems are
    reported before the workload is looked at.
    """
    policy = build_policy(config)
    engine = SimulationEngine(processes, policy, max_ticks=config.max_ticks, config=config)
    return engine.run()


def run_algorithm(
    name: str,
    processes: List[Process],
    quantum: Optional[int] = None,
    queues: Optional[int] = None,
    quantums: Optional[Sequence[int]] = None,
    allotment: Optional[int] = None,
    max_ticks: Optional[int] = None,
) -> SimulationResult:
    """
    Dispatch to the requested algorithm. Parameters an algorithm does not use
    are ignored; MLFQ falls back to its default queue layout.
    """
    config = SchedulerConfig(algorithm=name).merged(
        quantum=quantum,
        queues=queues,
        quantums=tuple(quantums) if quantums is not None else None,
        allotment=allotment,
        max_ticks=max_ticks,
    )
    return simulate(processes, config)
