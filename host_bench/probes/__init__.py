from .base import Probe
from .cpu import CpuProbe
from .memory import MemoryProbe
from .disk import DISK_JOBS, DiskProbe, FioJob, disk_probes
from .network import NetworkProbe

# program -> distro package, for "not installed" hints
REQUIRED_TOOLS = {
  CpuProbe.PROGRAM: CpuProbe.PACKAGE,
  DiskProbe.PROGRAM: DiskProbe.PACKAGE,
  NetworkProbe.PROGRAM: NetworkProbe.PACKAGE,
}
