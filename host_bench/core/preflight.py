# host_bench/core/preflight.py

import os
from typing import Dict, Optional

from ..errors import PrivilegeError
from ..probes import REQUIRED_TOOLS
from ..runner import is_available


def check_privileges(require_root: bool = True, euid: Optional[int] = None) -> None:
    """Raise PrivilegeError when root is required and we are not uid 0."""
    if not require_root:
        return
    if euid is None:
        euid = os.geteuid() if hasattr(os, 'geteuid') else -1
    if euid != 0:
        raise PrivilegeError("Please run as root (sudo), or set REQUIRE_ROOT=0.")


def missing_tools(tools: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Required tools that are not on PATH, mapped to the package that provides them."""
    tools = REQUIRED_TOOLS if tools is None else tools
    return {program: package for program, package in tools.items() if not is_available(program)}
