# host_bench/errors.py

"""Exception hierarchy. Only PrivilegeError ends a run."""


class HostBenchError(Exception):
    """Base class for everything host-bench raises on purpose."""


class PrivilegeError(HostBenchError):
    """Insufficient rights to run the required tooling. Fatal."""


class ConfigError(HostBenchError):
    """A configuration value or file could not be interpreted. The loader falls back to defaults."""


class ProbeError(HostBenchError):
    """A probe could not deliver usable output. Degrades the stage to N/A."""

    def __init__(self, program: str, message: str):
        super().__init__(f"{program}: {message}")
        self.program = program


class ProbeUnavailable(ProbeError):
    """The external tool is not installed or not on PATH."""


class ProbeTimeout(ProbeError):
    """The external tool exceeded its time budget and was killed."""


class ProbeFailed(ProbeError):
    """The external tool exited non-zero."""


class ParseFailure(HostBenchError):
    """Output was produced but a metric could not be extracted from it."""

    def __init__(self, metric: str, detail: str = "value not found"):
        super().__init__(f"could not parse {metric}: {detail}")
        self.metric = metric
