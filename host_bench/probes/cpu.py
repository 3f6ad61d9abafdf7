from typing import Dict, Optional
from ..parsers import parse_cpu_events
from ..runner import OutputKind, ProbeSpec
from .base import Probe

class CpuProbe(Probe):
  PROBE_ID = "cpu"
  DESCRIPTION = "CPU single-core (sysbench primes)"
  PROGRAM = "sysbench"
  PACKAGE = "sysbench"
  FIELDS = ("cpu_single_events_per_sec",)

  def __init__(self, prime_limit: int = 20000):
    self.prime_limit = prime_limit

  def spec(self) -> ProbeSpec:
    return ProbeSpec(
      self.PROGRAM,
      ("cpu", f"--cpu-max-prime={self.prime_limit}", "--threads=1", "run"),
      timeout=None,
      output_kind=OutputKind.TEXT,
      label=self.PROBE_ID,
    )

  def parse(self, stdout: str) -> Dict[str, Optional[float]]:
    return {"cpu_single_events_per_sec": parse_cpu_events(stdout)}
