# host_bench/parsers.py

"""
Per-probe extraction rules. Every rule takes raw tool output and returns a
number (or NetworkReading) with None for anything it cannot interpret.
None of these raise on bad input.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .errors import ParseFailure
from .units import bit_rate_to_mbit, bits_to_mbit, bytes_to_mib, to_number

_NUMBER_RE = re.compile(r'[-+]?\d+(?:\.\d+)?')
_MEMORY_RATE_RE = re.compile(r'\(\s*([-+]?\d+(?:\.\d+)?)\s*MiB/sec\s*\)')
_NET_LINE_RE = re.compile(r'^\s*(Download|Upload|Ping):\s*([-+]?\d+(?:\.\d+)?)\s*([A-Za-z/]*)')


@dataclass(frozen=True)
class NetworkReading:
    download_mbps: Optional[float] = None
    upload_mbps: Optional[float] = None
    ping_ms: Optional[float] = None

    @property
    def empty(self) -> bool:
        return self.download_mbps is None and self.upload_mbps is None and self.ping_ms is None


def _non_negative(value: Optional[float]) -> Optional[float]:
    if value is None or value < 0:
        return None
    return value


def load_json_payload(payload: Union[str, bytes, Dict[str, Any], None]) -> Optional[Dict[str, Any]]:
    """Decode a JSON object, skipping any warnings a tool printed before it."""
    if isinstance(payload, dict):
        return payload
    if not payload:
        return None
    if isinstance(payload, bytes):
        payload = payload.decode('utf-8', errors='replace')

    start = payload.find('{')
    if start < 0:
        return None
    try:
        # raw_decode stops at the end of the object, so trailing noise is ignored too
        document, _ = json.JSONDecoder().raw_decode(payload, start)
    except json.JSONDecodeError:
        return None
    return document if isinstance(document, dict) else None


# CPU

def parse_cpu_events(text: Optional[str]) -> Optional[float]:
    """sysbench cpu: '    events per second:   311.98'"""
    if not text:
        return None
    for line in text.splitlines():
        if 'events per second' not in line:
            continue
        _, _, tail = line.partition(':')
        match = _NUMBER_RE.search(tail)
        # first matching line only, like the awk rule it replaces
        return _non_negative(to_number(match.group())) if match else None
    return None


# Memory

def parse_memory_throughput(text: Optional[str]) -> Optional[float]:
    """sysbench memory: '1024.00 MiB transferred (11752.24 MiB/sec)'"""
    if not text:
        return None
    for line in text.splitlines():
        if 'MiB transferred' not in line:
            continue
        match = _MEMORY_RATE_RE.search(line)
        return _non_negative(to_number(match.group(1))) if match else None
    return None


# Disk

def parse_fio_bandwidth(payload: Union[str, Dict[str, Any], None], mode: str) -> Optional[float]:
    """fio --output-format=json: jobs[0][read|write].bw_bytes converted to MiB/s."""
    document = load_json_payload(payload)
    if document is None:
        return None

    try:
        section = document['jobs'][0][mode]
        bw_bytes = section['bw_bytes']
    except (KeyError, IndexError, TypeError):
        return None

    value = _non_negative(to_number(bw_bytes))
    return bytes_to_mib(value) if value is not None else None


# Network

def parse_speedtest_json(payload: Union[str, Dict[str, Any], None]) -> NetworkReading:
    """speedtest-cli --json: download/upload in bit/s, ping in ms."""
    document = load_json_payload(payload)
    if document is None:
        return NetworkReading()

    download = _non_negative(to_number(document.get('download')))
    upload = _non_negative(to_number(document.get('upload')))
    ping = _non_negative(to_number(document.get('ping')))

    return NetworkReading(
        download_mbps=bits_to_mbit(download) if download is not None else None,
        upload_mbps=bits_to_mbit(upload) if upload is not None else None,
        ping_ms=round(ping, 2) if ping is not None else None
    )


def parse_speedtest_text(text: Optional[str]) -> NetworkReading:
    """speedtest-cli text mode: 'Download: 613.01 Mbit/s', 'Upload: ...', 'Ping: 19.28 ms'."""
    if not text:
        return NetworkReading()

    found: Dict[str, Optional[float]] = {}
    for line in text.splitlines():
        match = _NET_LINE_RE.match(line)
        if not match:
            continue
        label, number, unit = match.groups()
        if label in found:
            continue

        value = _non_negative(to_number(number))
        if value is not None and label != 'Ping' and unit:
            value = bit_rate_to_mbit(value, unit)
        elif value is not None:
            value = round(value, 2)
        found[label] = value

    return NetworkReading(
        download_mbps=found.get('Download'),
        upload_mbps=found.get('Upload'),
        ping_ms=found.get('Ping')
    )


def require_value(metric: str, value):
    """Raise ParseFailure for a missing value so the stage can log which metric it was."""
    if value is None:
        raise ParseFailure(metric)
    return value
