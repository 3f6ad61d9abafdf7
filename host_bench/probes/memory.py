from typing import Dict, Optional
from ..parsers import parse_memory_throughput
from ..runner import OutputKind, ProbeSpec
from .base import Probe

BLOCK_SIZE = "1M"

class MemoryProbe(Probe):
  PROBE_ID = "memory"
  DESCRIPTION = "Memory throughput (sysbench, 1M blocks)"
  PROGRAM = "sysbench"
  PACKAGE = "sysbench"
  FIELDS = ("memory_mib_per_sec",)

  def __init__(self, total_size: str = "1G"):
    self.total_size = total_size

  def spec(self) -> ProbeSpec:
    return ProbeSpec(
      self.PROGRAM,
      ("memory", f"--memory-block-size={BLOCK_SIZE}", f"--memory-total-size={self.total_size}",
       "--threads=1", "run"),
      timeout=None,
      output_kind=OutputKind.TEXT,
      label=self.PROBE_ID,
    )

  def parse(self, stdout: str) -> Dict[str, Optional[float]]:
    return {"memory_mib_per_sec": parse_memory_throughput(stdout)}
