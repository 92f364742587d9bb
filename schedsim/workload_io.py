from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, List, Mapping, Tuple

from .config import SchedulerConfig
from .errors import InputValidationError
from .models import IoRequest, Process


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    processes, _ = load_workload_with_config(path)
    return processes


def load_workload_with_config(path: str | Path) -> Tuple[List[Process], SchedulerConfig]:
    """
    Like load_workload, but also return the scheduler settings a JSON object
    workload may carry next to its ``processes``. CSV files and bare JSON
    lists yield the default configuration.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path), SchedulerConfig()

    raise InputValidationError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> Tuple[List[Process], SchedulerConfig]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise InputValidationError(f"Invalid JSON in {path}: {exc}") from exc

    config = SchedulerConfig()
    if isinstance(raw, Mapping):
        config = SchedulerConfig.from_mapping(raw)
        raw = raw.get("processes")

    if not isinstance(raw, list):
        raise InputValidationError("JSON workload must be a list of process objects")

    processes = [_process_from_mapping(entry) for entry in raw]
    return processes, config


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _field(mapping: Mapping[str, Any], snake: str, camel: str) -> Any:
    if snake in mapping:
        return mapping[snake]
    return mapping[camel]


def _process_from_mapping(mapping) -> Process:
    try:
        arrival_time = int(_field(mapping, "arrival_time", "arrivalTime"))
        burst_time = int(_field(mapping, "burst_time", "burstTime"))
        io = _parse_io(mapping.get("io"))
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise InputValidationError(f"Invalid process entry: {mapping!r}") from exc

    return Process(arrival_time=arrival_time, burst_time=burst_time, io=io)


def _parse_io(raw) -> List[IoRequest]:
    """
    Accept a list of ``{"start", "duration"}`` objects (JSON) or a
    ``start:duration;start:duration`` string (CSV).
    """
    if raw in (None, ""):
        return []

    if isinstance(raw, str):
        requests = []
        for chunk in raw.split(";"):
            chunk = chunk.strip()
            if not chunk:
                continue
            start, duration = chunk.split(":")
            requests.append(IoRequest(start=int(start), duration=int(duration)))
        return requests

    if not isinstance(raw, list):
        raise TypeError("io must be an array")

    return [IoRequest(start=int(entry["start"]), duration=int(entry["duration"])) for entry in raw]
