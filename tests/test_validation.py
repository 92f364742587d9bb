import pytest

from schedsim.algorithms import build_policy, run_algorithm
from schedsim.config import SchedulerConfig
from schedsim.errors import ConfigurationError, InputValidationError
from schedsim.models import IoRequest, Process
from schedsim.policies import MLFQPolicy, RoundRobinPolicy
from schedsim.validation import validate_processes


def test_io_requests_are_sorted():
    procs = validate_processes(
        [Process(arrival_time=0, burst_time=6, io=[IoRequest(start=4, duration=1), IoRequest(start=1, duration=2)])]
    )
    assert [io.start for io in procs[0].io] == [1, 4]


@pytest.mark.parametrize(
    "process, message",
    [
        (Process(arrival_time=-1, burst_time=2), "Process 1: arrivalTime must be a non-negative number"),
        (Process(arrival_time=0, burst_time=0), "Process 1: burstTime must be a positive number"),
        (
            Process(arrival_time=0, burst_time=3, io=[IoRequest(start=-1, duration=1)]),
            "Process 1, IO 1: start must be a non-negative number",
        ),
        (
            Process(arrival_time=0, burst_time=3, io=[IoRequest(start=0, duration=0)]),
            "Process 1, IO 1: duration must be a positive number",
        ),
        (
            Process(arrival_time=0, burst_time=3, io=[IoRequest(start=3, duration=1)]),
            r"Process 1, IO 1: start time \(3\) must be less than burst time \(3\)",
        ),
        (
            Process(arrival_time=0, burst_time=5, io=[IoRequest(start=2, duration=1), IoRequest(start=2, duration=4)]),
            "more than one IO request starts at offset 2",
        ),
    ],
)
def test_invalid_processes(process, message):
    with pytest.raises(InputValidationError, match=message):
        validate_processes([process])


def test_empty_workload_is_rejected():
    with pytest.raises(InputValidationError, match="must not be empty"):
        run_algorithm("fcfs", [])


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        run_algorithm("fcfs", [Process(arrival_time=0, burst_time=-3)])


def test_error_message_numbers_the_offending_process():
    with pytest.raises(InputValidationError, match="Process 2: burstTime"):
        validate_processes([Process(arrival_time=0, burst_time=1), Process(arrival_time=0, burst_time=0)])


@pytest.mark.parametrize("quantum", [None, 0, -2])
def test_rr_requires_positive_quantum(quantum):
    with pytest.raises(ConfigurationError, match="positive quantum"):
        RoundRobinPolicy(quantum)


def test_mlfq_quantums_must_match_queues():
    with pytest.raises(ConfigurationError, match="length equal to number of queues"):
        MLFQPolicy(queues=3, quantums=[2, 4], allotment=10)


def test_mlfq_rejects_bad_quantum():
    with pytest.raises(ConfigurationError, match="index 1"):
        MLFQPolicy(queues=3, quantums=[2, 0, 8], allotment=10)


def test_mlfq_rejects_bad_allotment():
    with pytest.raises(ConfigurationError, match="allotment"):
        MLFQPolicy(queues=2, quantums=[2, 4], allotment=0)


def test_configuration_checked_before_simulation():
    # Bad config is reported even though the workload is invalid too.
    with pytest.raises(ConfigurationError):
        run_algorithm("rr", [], quantum=None)


def test_unknown_algorithm():
    with pytest.raises(ConfigurationError, match="Unsupported algorithm: lottery"):
        build_policy(SchedulerConfig(algorithm="lottery"))


def test_algorithm_name_is_case_insensitive():
    assert build_policy(SchedulerConfig(algorithm="STCF")).name == "STCF"


def test_config_from_mapping():
    config = SchedulerConfig.from_mapping(
        {"algorithm": "MLFQ", "queues": 2, "quantums": [3, 6], "allotment": 12, "maxTicks": 50, "processes": []}
    )
    assert config.algorithm == "mlfq"
    assert config.quantums == (3, 6)
    assert config.max_ticks == 50
    assert config.quantum is None


def test_config_merged_ignores_none():
    config = SchedulerConfig(algorithm="rr", quantum=4)
    assert config.merged(quantum=None, allotment=None) is config
    assert config.merged(quantum=2).quantum == 2


def test_config_rejects_bad_max_ticks():
    with pytest.raises(ConfigurationError):
        SchedulerConfig(max_ticks=0)


def test_config_coerces_numeric_strings():
    config = SchedulerConfig.from_mapping(
        {"algorithm": "mlfq", "queues": "2", "quantums": ["3", 6], "allotment": "12", "quantum": "2"}
    )
    assert config.queues == 2
    assert config.quantums == (3, 6)
    assert config.allotment == 12
    assert config.quantum == 2
    assert isinstance(build_policy(config), MLFQPolicy)


@pytest.mark.parametrize(
    "mapping",
    [
        {"algorithm": "rr", "quantum": "two"},
        {"algorithm": "mlfq", "queues": "x"},
        {"algorithm": "mlfq", "quantums": "248"},
        {"algorithm": "mlfq", "quantums": 4},
        {"algorithm": "mlfq", "allotment": 2.5},
        {"maxTicks": "many"},
    ],
)
def test_config_rejects_non_integer_settings(mapping):
    with pytest.raises(ConfigurationError):
        SchedulerConfig.from_mapping(mapping)
