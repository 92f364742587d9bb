import json
from pathlib import Path

from schedsim.cli import main

WORKLOAD = [
    {"arrival_time": 0, "burst_time": 4, "io": [{"start": 1, "duration": 2}]},
    {"arrival_time": 1, "burst_time": 3},
    {"arrival_time": 2, "burst_time": 1},
]


def _workload(tmp_path: Path) -> Path:
    p = tmp_path / "w.json"
    p.write_text(json.dumps(WORKLOAD))
    return p


def test_run_prints_report(tmp_path: Path, capsys):
    out = tmp_path / "result.json"
    code = main(["run", "-a", "rr", "-q", "2", "-w", str(_workload(tmp_path)), "--trace", "-o", str(out)])
    assert code == 0

    captured = capsys.readouterr().out
    assert "Gantt Chart" in captured
    assert "Per-process metrics" in captured
    assert "System metrics" in captured

    data = json.loads(out.read_text())
    assert data["algorithm"] == "RR (quantum=2)"
    assert len(data["processes"]) == 3


def test_run_uses_algorithm_from_workload(tmp_path: Path, capsys):
    p = tmp_path / "w.json"
    p.write_text(json.dumps({"algorithm": "sjf", "processes": WORKLOAD}))
    assert main(["run", "-w", str(p)]) == 0
    assert "SJF" in capsys.readouterr().out


def test_run_step_replay(tmp_path: Path, capsys):
    code = main(["run", "-a", "fcfs", "-w", str(_workload(tmp_path)), "--step", "--step-delay", "0"])
    assert code == 0
    assert "t= 0" in capsys.readouterr().out


def test_run_reports_configuration_error(tmp_path: Path, capsys):
    code = main(["run", "-a", "rr", "-w", str(_workload(tmp_path))])
    assert code == 1
    assert "positive quantum" in capsys.readouterr().out


def test_run_reports_invalid_workload(tmp_path: Path, capsys):
    p = tmp_path / "bad.json"
    p.write_text(json.dumps([{"arrival_time": 0, "burst_time": 0}]))
    assert main(["run", "-a", "fcfs", "-w", str(p)]) == 1
    assert "burstTime must be a positive number" in capsys.readouterr().out


def test_compare(tmp_path: Path, capsys):
    code = main(["compare", "-w", str(_workload(tmp_path)), "--queues", "2", "--quantums", "1", "3"])
    assert code == 0
    captured = capsys.readouterr().out
    assert "Algorithm comparison" in captured
    assert "STCF" in captured
    assert "MLFQ" in captured


def test_run_accepts_numeric_strings_in_workload(tmp_path: Path, capsys):
    p = tmp_path / "w.json"
    p.write_text(json.dumps({"algorithm": "rr", "quantum": "2", "processes": WORKLOAD}))
    assert main(["run", "-w", str(p)]) == 0
    assert "RR (quantum=2)" in capsys.readouterr().out


def test_run_reports_non_integer_setting(tmp_path: Path, capsys):
    p = tmp_path / "w.json"
    p.write_text(json.dumps({"algorithm": "mlfq", "queues": "x", "processes": WORKLOAD}))
    assert main(["run", "-w", str(p)]) == 1
    assert "queues must be an integer" in capsys.readouterr().out
