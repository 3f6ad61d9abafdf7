# host_bench/core/config.py

"""
Run configuration. Read once at startup from defaults, an optional YAML file
(BENCH_CONFIG) and environment overrides, in that order of precedence.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ..errors import ConfigError
from ..units import parse_iec_size

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV = "BENCH_CONFIG"
TEST_FILE_NAME = "fio_testfile.dat"

# field name -> environment variable
ENV_KEYS = {
    'test_dir': 'TESTDIR',
    'file_size': 'FILESIZE',
    'duration': 'DURATION',
    'cpu_prime': 'CPU_PRIME',
    'mem_total': 'MEM_TOTAL',
    'fio_timeout': 'FIO_TIMEOUT',
    'net_timeout': 'NET_TIMEOUT',
    'require_root': 'REQUIRE_ROOT',
}

_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off', ''}


def _default_test_dir() -> str:
    return str(Path(tempfile.gettempdir()) / "bench")


@dataclass(frozen=True)
class RunConfiguration:
    test_dir: str = _default_test_dir()
    file_size: str = "2G"
    duration: int = 30
    cpu_prime: int = 20000
    mem_total: str = "1G"
    fio_timeout: int = 900
    net_timeout: int = 120
    require_root: bool = True

    @property
    def test_file(self) -> str:
        return str(Path(self.test_dir) / TEST_FILE_NAME)

    def summary(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _to_int(key: str, value: Any, minimum: int = 1) -> int:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    if number < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {number}")
    return number


def _to_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def _to_size(key: str, value: Any, strict: bool) -> str:
    text = str(value).strip()
    if strict and parse_iec_size(text) is None:
        raise ConfigError(f"{key} must be an IEC size like 2G or 512M, got {value!r}")
    return text


def load_config_file(path: str) -> Dict[str, Any]:
    """Load the optional YAML overlay. Keys are the lower-case field names."""
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    unknown = set(data) - set(ENV_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {', '.join(sorted(unknown))}")
    return data


def _convert(name: str, value: Any) -> Any:
    key = ENV_KEYS[name]
    if name == 'test_dir':
        return str(value)
    if name == 'file_size':
        # an unparseable FILESIZE counts as zero in the capacity check, so keep it as given
        return _to_size(key, value, strict=False)
    if name == 'mem_total':
        return _to_size(key, value, strict=True)
    if name == 'require_root':
        return _to_bool(key, value)
    return _to_int(key, value)


def load_config(environ: Optional[Mapping[str, str]] = None) -> RunConfiguration:
    """
    Build the immutable RunConfiguration for this process.

    Never raises: an unreadable config file is ignored and a bad value falls
    back to its default, each with a warning, so the run still produces a report.
    """
    environ = os.environ if environ is None else environ

    raw: Dict[str, Any] = {}
    config_path = environ.get(CONFIG_FILE_ENV)
    if config_path:
        try:
            raw.update(load_config_file(config_path))
        except ConfigError as e:
            logger.warning("%s; ignoring config file", e)

    for name, env_key in ENV_KEYS.items():
        if environ.get(env_key) not in (None, ''):
            raw[name] = environ[env_key]

    values: Dict[str, Any] = {}
    for name, value in raw.items():
        try:
            values[name] = _convert(name, value)
        except ConfigError as e:
            logger.warning("%s; using default %s", e, getattr(RunConfiguration, name))

    return RunConfiguration(**values)
