"""
host-bench Probe Runner - single external invocation with a hard timeout.
Never raises for non-zero exit or timeout; those are ordinary outcomes.
"""

import enum
import logging
import os
import shutil
import signal
import subprocess
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import psutil

from .errors import ProbeFailed, ProbeTimeout, ProbeUnavailable

logger = logging.getLogger(__name__)

ENGINE_PREFERENCE = ("io_uring", "libaio", "psync")
FALLBACK_ENGINE = "psync"
ENGINE_QUERY_TIMEOUT = 30


class OutputKind(enum.Enum):
    TEXT = "text"
    JSON = "json"


class ProbeStatus(enum.Enum):
    OK = "ok"
    FAILED = "failed"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ProbeSpec:
    """Immutable description of one external invocation."""
    program: str
    args: Tuple[str, ...] = ()
    timeout: Optional[float] = None  # seconds; None waits for completion
    output_kind: OutputKind = OutputKind.TEXT
    label: str = ""

    @property
    def command(self) -> List[str]:
        return [self.program, *self.args]

    @property
    def name(self) -> str:
        return self.label or self.program


@dataclass
class ProbeOutcome:
    """Tagged result of running a ProbeSpec."""
    program: str
    status: ProbeStatus
    stdout: str = ''
    stderr: str = ''
    exit_code: Optional[int] = None
    duration: float = 0.0
    detail: str = field(default='', compare=False)

    @property
    def ok(self) -> bool:
        return self.status is ProbeStatus.OK

    @property
    def timed_out(self) -> bool:
        return self.status is ProbeStatus.TIMEOUT

    def raise_for_status(self) -> None:
        if self.status is ProbeStatus.UNAVAILABLE:
            raise ProbeUnavailable(self.program, self.detail or "executable not found")
        if self.status is ProbeStatus.TIMEOUT:
            raise ProbeTimeout(self.program, self.detail or "timed out")
        if self.status is ProbeStatus.FAILED:
            raise ProbeFailed(self.program, self.detail or f"exit code {self.exit_code}")


def is_available(program: str) -> bool:
    """Check the executable exists, either as a path or on PATH."""
    if os.sep in program:
        return os.path.isfile(program) and os.access(program, os.X_OK)
    return shutil.which(program) is not None


def _kill_process_group(process: subprocess.Popen) -> None:
    """SIGKILL the probe's process group plus any children that escaped it."""
    try:
        escaped = psutil.Process(process.pid).children(recursive=True)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        escaped = []

    try:
        os.killpg(process.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        process.kill()

    for child in escaped:
        try:
            child.kill()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue


def run(program: str, args: Sequence[str] = (), timeout: Optional[float] = None) -> ProbeOutcome:
    """
    Run one external probe to completion or timeout. Main entry point.

    Args:
        program: Executable name or path ('sysbench', '/usr/bin/fio')
        args: Ordered argument list
        timeout: Seconds before the process group is killed, None to wait

    Returns:
        ProbeOutcome tagged ok / failed / timeout / unavailable
    """
    if timeout is not None:
        assert timeout > 0, f"Timeout must be positive, got: {timeout}"

    if not is_available(program):
        return ProbeOutcome(program, ProbeStatus.UNAVAILABLE,
                            detail=f"executable not found in PATH: {program}")

    command = [program, *args]
    logger.debug("exec: %s (timeout=%s)", ' '.join(command), timeout)
    start_time = time.perf_counter()

    try:
        process = subprocess.Popen(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            encoding='utf-8',
            errors='replace',  # tools may print raw bytes; keep the rest of the output parseable
            start_new_session=True  # own process group, so a timeout can take it all down
        )
    except FileNotFoundError:
        return ProbeOutcome(program, ProbeStatus.UNAVAILABLE,
                            detail=f"executable not found: {program}")
    except PermissionError as e:
        return ProbeOutcome(program, ProbeStatus.UNAVAILABLE, detail=str(e))

    try:
        stdout, stderr = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        _kill_process_group(process)
        stdout, stderr = process.communicate()
        return ProbeOutcome(
            program, ProbeStatus.TIMEOUT,
            stdout=stdout or '',
            stderr=stderr or '',
            exit_code=process.returncode,
            duration=time.perf_counter() - start_time,
            detail=f"timed out after {timeout} seconds"
        )
    except BaseException:
        # interrupted (Ctrl-C, SIGTERM -> SystemExit): don't leave the probe running
        _kill_process_group(process)
        process.wait()
        raise

    status = ProbeStatus.OK if process.returncode == 0 else ProbeStatus.FAILED
    return ProbeOutcome(
        program, status,
        stdout=stdout,
        stderr=stderr,
        exit_code=process.returncode,
        duration=time.perf_counter() - start_time,
        detail='' if status is ProbeStatus.OK else (stderr.strip().splitlines() or [f"exit code {process.returncode}"])[-1]
    )


class ProbeRunner:
    """Runs ProbeSpecs. The orchestrator takes one of these so tests can swap it."""

    def run(self, program: str, args: Sequence[str] = (), timeout: Optional[float] = None) -> ProbeOutcome:
        return run(program, args, timeout)

    def run_spec(self, spec: ProbeSpec) -> ProbeOutcome:
        return self.run(spec.program, spec.args, spec.timeout)


# fio engine selection

def parse_engine_list(help_text: str) -> List[str]:
    """Engine names from `fio --enghelp` output (one per line, after a header)."""
    engines = []
    for line in help_text.splitlines():
        name = line.strip()
        if not name or name.endswith(':') or ' ' in name:
            continue
        engines.append(name)
    return engines


def select_engine(available: Sequence[str], preference: Sequence[str] = ENGINE_PREFERENCE) -> str:
    """First preferred engine the tool reports, else the synchronous fallback."""
    supported = set(available)
    for engine in preference:
        if engine in supported:
            return engine
    return FALLBACK_ENGINE


def detect_engine(runner: ProbeRunner, program: str = "fio") -> str:
    """Ask fio once which engines it was built with and pick one."""
    outcome = runner.run(program, ["--enghelp"], ENGINE_QUERY_TIMEOUT)
    if not outcome.ok:
        logger.warning("Could not list %s engines (%s); falling back to %s",
                       program, outcome.detail or outcome.status.value, FALLBACK_ENGINE)
        return FALLBACK_ENGINE
    return select_engine(parse_engine_list(outcome.stdout))
