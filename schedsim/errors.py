from __future__ import annotations


class SchedulerError(Exception):
    """Base class for every error raised by the simulator."""


class ConfigurationError(SchedulerError, ValueError):
    """Algorithm parameters are missing or inconsistent."""


class InputValidationError(SchedulerError, ValueError):
    """The process list cannot be simulated."""


class InternalInvariantViolation(SchedulerError, RuntimeError):
    """
    The engine reached a state that valid input can never produce.

    Seeing this means there is a bug in the engine, not in the workload.
    """


class SimulationLimitExceeded(SchedulerError, RuntimeError):
    def __init__(self, max_ticks: int) -> None:
        super().__init__(f"Simulation did not finish within {max_ticks} ticks")
        self.max_ticks = max_ticks
