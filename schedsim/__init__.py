"""
Scheduler simulation package.

Replays CPU scheduling algorithms tick by tick over processes that may block
on I/O, and records a step-by-step trace of every run.
"""

from .algorithms import ALGORITHMS, run_algorithm, simulate
from .config import SchedulerConfig
from .engine import SimulationEngine
from .errors import (
    ConfigurationError,
    InputValidationError,
    InternalInvariantViolation,
    SchedulerError,
    SimulationLimitExceeded,
)
from .models import IoRequest, Process, ProcessState, SimulationResult

__all__ = [
    "ALGORITHMS",
    "ConfigurationError",
    "InputValidationError",
    "InternalInvariantViolation",
    "IoRequest",
    "Process",
    "ProcessState",
    "SchedulerConfig",
    "SchedulerError",
    "SimulationEngine",
    "SimulationLimitExceeded",
    "SimulationResult",
    "run_algorithm",
    "simulate",
]
