# host_bench/core/result.py

from dataclasses import dataclass, fields
from typing import Dict, Optional


@dataclass
class BenchmarkResult:
    """Accumulator for one run. Each field is written at most once; None means unavailable."""
    cpu_single_events_per_sec: Optional[float] = None
    memory_mib_per_sec: Optional[float] = None
    disk_seq_write_mib_per_sec: Optional[float] = None
    disk_seq_read_mib_per_sec: Optional[float] = None
    disk_rand_write_mib_per_sec: Optional[float] = None
    disk_rand_read_mib_per_sec: Optional[float] = None
    net_download_mbps: Optional[float] = None
    net_upload_mbps: Optional[float] = None
    net_ping_ms: Optional[float] = None

    def record(self, name: str, value: Optional[float]) -> None:
        """Set a metric. Recording None is a no-op; overwriting a set metric is a bug."""
        if name not in self.field_names():
            raise KeyError(f"Unknown metric: {name}")
        if value is None:
            return
        if getattr(self, name) is not None:
            raise ValueError(f"Metric {name} already recorded")
        setattr(self, name, value)

    def is_set(self, name: str) -> bool:
        return getattr(self, name) is not None

    @classmethod
    def field_names(cls):
        return [f.name for f in fields(cls)]

    def as_dict(self) -> Dict[str, Optional[float]]:
        return {name: getattr(self, name) for name in self.field_names()}

    def missing(self):
        return [name for name, value in self.as_dict().items() if value is None]
