"""host-bench: host capability benchmark orchestrator (sysbench, fio, speedtest-cli)."""

__version__ = "0.1.0"
