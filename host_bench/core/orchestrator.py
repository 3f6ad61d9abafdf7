import enum
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from ..capacity import CapacityDecision, fit_to_capacity
from ..errors import HostBenchError, ParseFailure, ProbeUnavailable
from ..parsers import require_value
from ..probes import CpuProbe, MemoryProbe, NetworkProbe, Probe, disk_probes
from ..runner import FALLBACK_ENGINE, ProbeRunner, detect_engine
from .config import RunConfiguration
from .result import BenchmarkResult

logger = logging.getLogger(__name__)


class RunState(enum.Enum):
    INIT = "init"
    ENGINE_DETECTED = "engine_detected"
    CPU_DONE = "cpu_done"
    MEMORY_DONE = "memory_done"
    DISK_DONE = "disk_done"
    NETWORK_DONE = "network_done"
    REPORTED = "reported"


@contextmanager
def scoped_test_file(path: str) -> Iterator[str]:
    """Yield the fio test file path and remove the file on every way out."""
    try:
        yield path
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove test file %s: %s", path, e)


class Orchestrator:
    """Runs CPU -> Memory -> Disk -> Network in order and fills one BenchmarkResult."""

    def __init__(self, config: RunConfiguration, runner: Optional[ProbeRunner] = None,
                 on_stage: Optional[Callable[[RunState, str], None]] = None):
        self.config = config
        self.runner = runner or ProbeRunner()
        self.on_stage = on_stage
        self.state = RunState.INIT
        self.engine: Optional[str] = None
        self.capacity: Optional[CapacityDecision] = None
        self.warnings: List[str] = []

    def run(self, result: Optional[BenchmarkResult] = None) -> BenchmarkResult:
        """
        Run every stage exactly once. Stage failures only leave fields unset.

        Args:
            result: Accumulator to fill, a fresh one if omitted

        Returns:
            The filled BenchmarkResult
        """
        result = result if result is not None else BenchmarkResult()

        self._notify("Detecting fio engine")
        try:
            self.engine = detect_engine(self.runner)
        except Exception as e:
            self._warn("fio engine detection crashed: %s; falling back to %s", e, FALLBACK_ENGINE, exc_info=True)
            self.engine = FALLBACK_ENGINE
        logger.info("Using fio engine: %s", self.engine)
        self._advance(RunState.ENGINE_DETECTED)

        self._run_stage(CpuProbe(self.config.cpu_prime), result)
        self._advance(RunState.CPU_DONE)

        self._run_stage(MemoryProbe(self.config.mem_total), result)
        self._advance(RunState.MEMORY_DONE)

        self._run_disk(result)
        self._advance(RunState.DISK_DONE)

        self._run_stage(NetworkProbe(self.config.net_timeout), result)
        self._advance(RunState.NETWORK_DONE)

        return result

    def mark_reported(self) -> None:
        self._advance(RunState.REPORTED)

    def _advance(self, state: RunState, detail: str = "") -> None:
        self.state = state
        if self.on_stage:
            self.on_stage(state, detail)

    def _notify(self, detail: str) -> None:
        if self.on_stage:
            self.on_stage(self.state, detail)

    def _warn(self, message: str, *args, exc_info: bool = False) -> None:
        text = message % args if args else message
        self.warnings.append(text)
        logger.warning(text, exc_info=exc_info)

    def _run_stage(self, probe: Probe, result: BenchmarkResult, title: str = "") -> None:
        """Run one probe and write what it produced. Never raises for probe trouble."""
        title = title or probe.DESCRIPTION
        logger.info("%s...", title)
        self._notify(title)

        try:
            values = probe.execute(self.runner)
        except ProbeUnavailable as e:
            self._warn("%s test skipped: %s (install package '%s')", probe.PROBE_ID, e, probe.PACKAGE)
            return
        except HostBenchError as e:
            self._warn("%s test failed: %s", probe.PROBE_ID, e)
            return
        except Exception as e:
            self._warn("%s test crashed: %s", probe.PROBE_ID, e, exc_info=True)
            return

        for name, value in values.items():
            try:
                result.record(name, require_value(name, value))
            except ParseFailure as e:
                self._warn("%s test: %s", probe.PROBE_ID, e)

    def _run_disk(self, result: BenchmarkResult) -> None:
        config = self.config
        try:
            Path(config.test_dir).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._warn("Cannot create test directory %s: %s; skipping disk tests", config.test_dir, e)
            return
        logger.info("Test directory: %s", config.test_dir)

        self.capacity = fit_to_capacity(config.file_size, config.test_dir)
        if self.capacity.shrunk:
            self.warnings.append(f"disk test size reduced from {self.capacity.requested} to {self.capacity.effective}")

        with scoped_test_file(config.test_file) as test_file:
            for probe in disk_probes(test_file, self.capacity.effective, self.engine,
                                     config.duration, config.fio_timeout):
                self._run_stage(probe, result, title=probe.title)
