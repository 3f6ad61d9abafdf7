# host_bench/capacity.py

import logging
from dataclasses import dataclass
from typing import Optional

import psutil

from .units import format_iec_size, parse_iec_size

logger = logging.getLogger(__name__)

FALLBACK_SIZE = "1G"


@dataclass(frozen=True)
class CapacityDecision:
    requested: str
    effective: str
    free_bytes: Optional[int]
    shrunk: bool = False


def free_space(path: str) -> int:
    """Free bytes available to unprivileged writers on the filesystem holding path."""
    return psutil.disk_usage(path).free


def fit_to_capacity(requested: str, path: str, fallback: str = FALLBACK_SIZE,
                    free_bytes: Optional[int] = None) -> CapacityDecision:
    """
    Shrink a disk test size to the fallback when it will not fit on path's filesystem.

    A size that cannot be parsed counts as zero and is passed through untouched.
    """
    if free_bytes is None:
        try:
            free_bytes = free_space(path)
        except OSError as e:
            logger.warning("Could not measure free space in %s (%s); keeping %s", path, e, requested)
            return CapacityDecision(requested, requested, None)

    need = parse_iec_size(requested) or 0

    if need > 0 and need > free_bytes:
        logger.warning("Not enough free space for %s in %s (have %s). Using %s.",
                       requested, path, format_iec_size(free_bytes), fallback)
        return CapacityDecision(requested, fallback, free_bytes, shrunk=True)

    return CapacityDecision(requested, requested, free_bytes)
