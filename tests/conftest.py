"""Shared fixtures: canned tool outputs and a runner that replays them."""

import json
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from host_bench.core.config import RunConfiguration
from host_bench.runner import ProbeOutcome, ProbeRunner, ProbeStatus

GIB = 1024 ** 3

FIO_ENGHELP = """Available IO engines:
\tcpuio
\tmmap
\tsync
\tpsync
\tvsync
\tlibaio
\tio_uring
\tnull
"""

SYSBENCH_CPU = """sysbench 1.0.20 (using system LuaJIT 2.1.0-beta3)

Running the test with following options:
Number of threads: 1
Initializing random number generator from current time


Prime numbers limit: 20000

Initializing worker threads...

Threads started!

CPU speed:
    events per second:   311.98

General statistics:
    total time:                          10.0021s
    total number of events:              3121
"""

SYSBENCH_MEMORY = """sysbench 1.0.20 (using system LuaJIT 2.1.0-beta3)

Running memory speed test with the following options:
  block size: 1024KiB
  total size: 1024MiB
  operation: write
  scope: global

Threads started!

Total operations: 1024 (11752.24 per second)

1024.00 MiB transferred (11752.24 MiB/sec)


General statistics:
    total time:                          0.0863s
"""


def fio_json(mode: str, bw_bytes) -> str:
    other = 'read' if mode == 'write' else 'write'
    return json.dumps({
        "fio version": "fio-3.36",
        "jobs": [{
            "jobname": "bench",
            mode: {"io_bytes": 1, "bw_bytes": bw_bytes, "bw": 1, "iops": 1.0},
            other: {"io_bytes": 0, "bw_bytes": 0, "bw": 0, "iops": 0.0},
        }]
    })


SPEEDTEST_JSON = json.dumps({
    "download": 613010000.0,
    "upload": 1007590000.0,
    "ping": 19.28,
    "server": {"name": "Example", "country": "Nowhere"},
    "bytes_sent": 126353408,
    "bytes_received": 767034836,
})

SPEEDTEST_SIMPLE = """Ping: 19.28 ms
Download: 613.01 Mbit/s
Upload: 1007.59 Mbit/s
"""

# bw_bytes chosen so that bw_bytes / 2**20 rounds to the sample report values
DISK_BANDWIDTH = {
    'seqwrite': ('write', 74008494),
    'seqread': ('read', 143769255),
    'randwrite': ('write', 1195377),
    'randread': ('read', 3219128),
}


def ok(stdout: str, program: str = 'tool') -> ProbeOutcome:
    return ProbeOutcome(program, ProbeStatus.OK, stdout=stdout, exit_code=0)


def failed(program: str = 'tool', stdout: str = '') -> ProbeOutcome:
    return ProbeOutcome(program, ProbeStatus.FAILED, stdout=stdout, exit_code=1, detail='boom')


def timed_out(program: str = 'tool') -> ProbeOutcome:
    return ProbeOutcome(program, ProbeStatus.TIMEOUT, exit_code=-9, detail='timed out after 120 seconds')


def unavailable(program: str = 'tool') -> ProbeOutcome:
    return ProbeOutcome(program, ProbeStatus.UNAVAILABLE, detail=f'executable not found in PATH: {program}')


def probe_key(program: str, args: Sequence[str]) -> str:
    """Stable lookup key: fio by job name, everything else by first argument."""
    if program == 'fio':
        for arg in args:
            if arg.startswith('--name='):
                return 'fio:' + arg.split('=', 1)[1]
        return 'fio:' + (args[0] if args else '')
    return f"{program}:{args[0] if args else ''}"


class FakeRunner(ProbeRunner):
    """Replays canned ProbeOutcomes and records every call."""

    def __init__(self, outcomes: Dict[str, ProbeOutcome]):
        self.outcomes = dict(outcomes)
        self.calls: List[Tuple[str, Tuple[str, ...], Optional[float]]] = []

    def run(self, program, args=(), timeout=None):
        self.calls.append((program, tuple(args), timeout))
        key = probe_key(program, args)
        if key not in self.outcomes:
            return unavailable(program)
        return self.outcomes[key]

    def keys_called(self) -> List[str]:
        return [probe_key(program, args) for program, args, _ in self.calls]


def healthy_outcomes() -> Dict[str, ProbeOutcome]:
    outcomes = {
        'fio:--enghelp': ok(FIO_ENGHELP, 'fio'),
        'sysbench:cpu': ok(SYSBENCH_CPU, 'sysbench'),
        'sysbench:memory': ok(SYSBENCH_MEMORY, 'sysbench'),
        'speedtest-cli:--json': ok(SPEEDTEST_JSON, 'speedtest-cli'),
        'speedtest-cli:--simple': ok(SPEEDTEST_SIMPLE, 'speedtest-cli'),
    }
    for name, (mode, bw) in DISK_BANDWIDTH.items():
        outcomes[f'fio:{name}'] = ok(fio_json(mode, bw), 'fio')
    return outcomes


@pytest.fixture
def outcomes() -> Dict[str, ProbeOutcome]:
    return healthy_outcomes()


@pytest.fixture
def fake_runner(outcomes) -> FakeRunner:
    return FakeRunner(outcomes)


@pytest.fixture
def config(tmp_path) -> RunConfiguration:
    return RunConfiguration(test_dir=str(tmp_path / 'bench'), require_root=False)


@pytest.fixture
def plenty_of_space(monkeypatch):
    monkeypatch.setattr('host_bench.capacity.free_space', lambda path: 500 * GIB)
