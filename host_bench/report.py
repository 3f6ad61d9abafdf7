# host_bench/report.py

"""
Report Assembler. Two views of one finished BenchmarkResult: an aligned text
summary and a JSON document with a fixed schema. Both come from the same
formatted field map so they always agree on what is N/A.
"""

import json
from typing import Any, Dict

from .core.result import BenchmarkResult
from .units import format_metric

TITLE = " Benchmark Summary "
BANNER_WIDTH = 57
VALUE_COLUMN = 51

# (label, field) per line; None field = group heading
_SUMMARY_LINES = [
    ("CPU (single-core 'CPUMark', sysbench events/sec):", "cpu_single_events_per_sec"),
    ("Memory throughput (MiB/s):", "memory_mib_per_sec"),
    ("Disk throughput (MiB/s):", None),
    ("  - Sequential Write:", "disk_seq_write_mib_per_sec"),
    ("  - Sequential Read:", "disk_seq_read_mib_per_sec"),
    ("  - Random Write (4k):", "disk_rand_write_mib_per_sec"),
    ("  - Random Read  (4k):", "disk_rand_read_mib_per_sec"),
    ("Network:", None),
    ("  - Download (Mb/s):", "net_download_mbps"),
    ("  - Upload   (Mb/s):", "net_upload_mbps"),
    ("  - Ping (ms):", "net_ping_ms"),
]


def format_fields(result: BenchmarkResult) -> Dict[str, str]:
    """Every metric as its two-decimal string or N/A."""
    return {name: format_metric(value) for name, value in result.as_dict().items()}


def to_document(result: BenchmarkResult) -> Dict[str, Any]:
    values = format_fields(result)
    return {
        "cpu_single_events_per_sec": values["cpu_single_events_per_sec"],
        "memory_mib_per_sec": values["memory_mib_per_sec"],
        "disk": {
            "sequential_write_mib_per_sec": values["disk_seq_write_mib_per_sec"],
            "sequential_read_mib_per_sec": values["disk_seq_read_mib_per_sec"],
            "random_write_4k_mib_per_sec": values["disk_rand_write_mib_per_sec"],
            "random_read_4k_mib_per_sec": values["disk_rand_read_mib_per_sec"],
        },
        "network": {
            "download_Mbps": values["net_download_mbps"],
            "upload_Mbps": values["net_upload_mbps"],
            "ping_ms": values["net_ping_ms"],
        },
    }


def banner(title: str = "") -> str:
    if not title:
        return "=" * BANNER_WIDTH
    return title.center(BANNER_WIDTH, "=")


def render_text(result: BenchmarkResult) -> str:
    values = format_fields(result)
    lines = [banner(TITLE)]
    for label, field in _SUMMARY_LINES:
        if field is None:
            lines.append(label)
        else:
            lines.append(f"{label:<{VALUE_COLUMN}}{values[field]}")
    return "\n".join(lines)


def render_json(result: BenchmarkResult) -> str:
    return json.dumps(to_document(result), indent=2)


def render_report(result: BenchmarkResult) -> str:
    """Summary block, closing banner, blank line, JSON document."""
    return "\n".join([render_text(result), banner(), "", render_json(result)]) + "\n"
