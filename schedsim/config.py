from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Tuple

from .errors import ConfigurationError
from .policies import DEFAULT_MLFQ_ALLOTMENT, DEFAULT_MLFQ_QUANTUMS, DEFAULT_MLFQ_QUEUES

DEFAULT_ALGORITHM = "fcfs"
DEFAULT_MAX_TICKS = 10_000


def _as_int(name: str, value: Any) -> Optional[int]:
    """Coerce a numeric setting, e.g. ``"2"`` from a workload file, to int."""
    if value is None:
        return None
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc


@dataclass(frozen=True)
class SchedulerConfig:
    """
    Algorithm identifier plus the parameters only some algorithms read:
    ``quantum`` for RR; ``queues``, ``quantums`` and ``allotment`` for MLFQ.
    """

    algorithm: str = DEFAULT_ALGORITHM
    quantum: Optional[int] = None
    queues: int = DEFAULT_MLFQ_QUEUES
    quantums: Tuple[int, ...] = DEFAULT_MLFQ_QUANTUMS
    allotment: int = DEFAULT_MLFQ_ALLOTMENT
    max_ticks: int = DEFAULT_MAX_TICKS

    def __post_init__(self) -> None:
        object.__setattr__(self, "algorithm", str(self.algorithm).lower())
        for name in ("quantum", "queues", "allotment", "max_ticks"):
            object.__setattr__(self, name, _as_int(name, getattr(self, name)))

        if self.quantums is not None:
            if isinstance(self.quantums, (str, bytes)) or not hasattr(self.quantums, "__iter__"):
                raise ConfigurationError(f"quantums must be a list of integers, got {self.quantums!r}")
            quantums = tuple(_as_int(f"quantums[{idx}]", q) for idx, q in enumerate(self.quantums))
            object.__setattr__(self, "quantums", quantums)

        if self.max_ticks is None or self.max_ticks <= 0:
            raise ConfigurationError("max_ticks must be a positive number")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SchedulerConfig":
        """
        Build a config from a request-style mapping. Both ``maxTicks`` and
        ``max_ticks`` spellings are accepted; missing keys keep their defaults.
        """
        values = {}
        for key, attr in (
            ("algorithm", "algorithm"),
            ("quantum", "quantum"),
            ("queues", "queues"),
            ("quantums", "quantums"),
            ("allotment", "allotment"),
            ("max_ticks", "max_ticks"),
            ("maxTicks", "max_ticks"),
        ):
            if mapping.get(key) is not None:
                values[attr] = mapping[key]

        try:
            return cls(**values)
        except TypeError as exc:
            raise ConfigurationError(f"Invalid scheduler configuration: {dict(mapping)!r}") from exc

    def merged(self, **overrides: Any) -> "SchedulerConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self
