from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from ..parsers import parse_fio_bandwidth
from ..runner import OutputKind, ProbeSpec
from .base import Probe

IO_DEPTH = 64

@dataclass(frozen=True)
class FioJob:
  name: str
  rw: str          # fio --rw
  block_size: str
  mode: str        # JSON section holding the bandwidth: read | write
  field: str
  time_based: bool = False
  title: str = ""

# run order matters: the sequential write lays the file down for the reads
DISK_JOBS: Tuple[FioJob, ...] = (
  FioJob("seqwrite", "write", "1M", "write", "disk_seq_write_mib_per_sec", title="Sequential write"),
  FioJob("seqread", "read", "1M", "read", "disk_seq_read_mib_per_sec", title="Sequential read"),
  FioJob("randwrite", "randwrite", "4k", "write", "disk_rand_write_mib_per_sec", time_based=True, title="Random write (4k)"),
  FioJob("randread", "randread", "4k", "read", "disk_rand_read_mib_per_sec", time_based=True, title="Random read (4k)"),
)

class DiskProbe(Probe):
  PROBE_ID = "disk"
  DESCRIPTION = "Disk throughput (fio)"
  PROGRAM = "fio"
  PACKAGE = "fio"

  def __init__(self, job: FioJob, filename: str, size: str, engine: str,
               duration: int = 30, timeout: Optional[int] = 900):
    self.job = job
    self.filename = filename
    self.size = size
    self.engine = engine
    self.duration = duration
    self.timeout = timeout
    self.FIELDS = (job.field,)

  @property
  def title(self) -> str:
    if self.job.time_based:
      return f"{self.job.title}, {self.duration}s"
    return f"{self.job.title} {self.size} ({self.job.block_size} blocks)"

  def args(self) -> List[str]:
    args = [
      f"--name={self.job.name}",
      f"--filename={self.filename}",
      f"--ioengine={self.engine}",
      "--direct=1",
      "--group_reporting=1",
      "--output-format=json",
      f"--size={self.size}",
      f"--bs={self.job.block_size}",
      f"--rw={self.job.rw}",
      f"--iodepth={IO_DEPTH}",
      "--numjobs=1",
    ]
    if self.job.time_based:
      args += ["--time_based=1", f"--runtime={self.duration}"]
    return args

  def spec(self) -> ProbeSpec:
    return ProbeSpec(self.PROGRAM, tuple(self.args()), timeout=self.timeout,
                     output_kind=OutputKind.JSON, label=self.job.name)

  def parse(self, stdout: str) -> Dict[str, Optional[float]]:
    return {self.job.field: parse_fio_bandwidth(stdout, self.job.mode)}

def disk_probes(filename: str, size: str, engine: str, duration: int, timeout: int) -> List[DiskProbe]:
  return [DiskProbe(job, filename, size, engine, duration, timeout) for job in DISK_JOBS]
