# host_bench/units.py

"""
Unit conversion helpers. Pure functions, no I/O.
Sizes use IEC (binary) prefixes the way fio, sysbench and numfmt read them.
"""

import math
import re
from typing import Optional, Union

BYTES_PER_MIB = 1024 * 1024
BITS_PER_MBIT = 1_000_000

NOT_AVAILABLE = "N/A"

_IEC_PREFIXES = ["", "K", "M", "G", "T", "P", "E"]
_SIZE_RE = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*([KMGTPE]?)(?:I?B)?\s*$', re.IGNORECASE)

# speedtest-cli switches units on very fast/slow links
_BIT_RATE_FACTORS = {
    'bit/s': 1e-6,
    'kbit/s': 1e-3,
    'mbit/s': 1.0,
    'gbit/s': 1e3,
}


def parse_iec_size(size: Optional[str]) -> Optional[int]:
    """Convert '2G', '512M', '1.5GiB' or plain '4096' to a byte count. None if unparseable."""
    if size is None:
        return None

    match = _SIZE_RE.match(str(size))
    if not match:
        return None

    number, prefix = match.groups()
    exponent = _IEC_PREFIXES.index(prefix.upper())
    return int(float(number) * (1024 ** exponent))


def format_iec_size(num_bytes: int) -> str:
    """Render a byte count the way `numfmt --to=iec` does (e.g. 5.0G, 512M)."""
    value = float(num_bytes)
    for prefix in _IEC_PREFIXES:
        if abs(value) < 1024 or prefix == _IEC_PREFIXES[-1]:
            if not prefix:
                return f"{int(value)}"
            return f"{value:.1f}{prefix}" if value < 10 else f"{value:.0f}{prefix}"
        value /= 1024


def bytes_to_mib(bytes_per_sec: Union[int, float]) -> float:
    return round(bytes_per_sec / BYTES_PER_MIB, 2)


def bits_to_mbit(bits_per_sec: Union[int, float]) -> float:
    return round(bits_per_sec / BITS_PER_MBIT, 2)


def bit_rate_to_mbit(value: float, unit: str) -> Optional[float]:
    """Normalize a value with a textual bit-rate unit ('Gbit/s', 'Mbit/s'...) to Mb/s."""
    factor = _BIT_RATE_FACTORS.get(unit.strip().lower())
    if factor is None:
        return None
    return round(value * factor, 2)


def to_number(value) -> Optional[float]:
    """Coerce to float; None for bools, blanks, NaN/inf and anything non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def format_metric(value: Optional[float]) -> str:
    """Two-decimal string or the unavailable marker."""
    if value is None:
        return NOT_AVAILABLE
    return f"{value:.2f}"
