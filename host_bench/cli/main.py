# host_bench/cli/main.py

import logging
import signal

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from .. import __version__
from ..core.config import load_config
from ..core.orchestrator import Orchestrator, RunState
from ..core.preflight import check_privileges, missing_tools
from ..errors import PrivilegeError
from ..report import render_report
from .display import display_error, display_success, display_warning

# Shared Rich console with custom theme; stderr so stdout carries only the report
console_theme = Theme({
    "warning": "yellow",
    "error": "red bold",
    "success": "green bold",
    "progress": "bright_blue"
})

console = Console(theme=console_theme, stderr=True)

EXIT_PRIVILEGE = 1

_STAGE_LABELS = {
    RunState.INIT: "Detecting fio engine",
    RunState.ENGINE_DETECTED: "CPU",
    RunState.CPU_DONE: "Memory",
    RunState.MEMORY_DONE: "Disk",
    RunState.DISK_DONE: "Network",
    RunState.NETWORK_DONE: "Assembling report",
}


def setup_logging(level: int = logging.INFO) -> None:
    """Route library logging through rich on stderr."""
    handler = RichHandler(console=console, show_path=False, show_time=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("host_bench")
    logger.handlers[:] = [handler]
    logger.setLevel(level)


def _raise_on_sigterm(signum, frame):
    # unwinds through the orchestrator's finally blocks so the test file is removed
    raise SystemExit(128 + signum)


@click.command()
@click.version_option(version=__version__, prog_name="host-bench")
@click.pass_context
def cli(ctx):
    """
    host-bench: CPU, memory, disk and network benchmark for this machine.

    Tunables come from the environment: TESTDIR, FILESIZE, DURATION,
    CPU_PRIME, MEM_TOTAL, FIO_TIMEOUT, NET_TIMEOUT (and BENCH_CONFIG,
    REQUIRE_ROOT). The summary and JSON report go to stdout.
    """
    setup_logging()

    config = load_config()

    try:
        check_privileges(config.require_root)
    except PrivilegeError as e:
        display_error(console, e)
        ctx.exit(EXIT_PRIVILEGE)

    for program, package in missing_tools().items():
        display_warning(console, f"{program} not found; install package '{package}'. Its tests will report N/A.")

    previous_handler = signal.signal(signal.SIGTERM, _raise_on_sigterm)
    try:
        with console.status("[progress]Preparing benchmark...") as status:
            def on_stage(state, detail):
                label = detail or _STAGE_LABELS.get(state, state.value)
                status.update(f"[progress]{label}...")

            orchestrator = Orchestrator(config, on_stage=on_stage)
            result = orchestrator.run()
    finally:
        signal.signal(signal.SIGTERM, previous_handler)

    click.echo()
    click.echo(render_report(result), nl=False)
    orchestrator.mark_reported()

    if orchestrator.warnings:
        display_warning(console, f"Completed with {len(orchestrator.warnings)} warning(s); unavailable metrics read N/A.")
    else:
        display_success(console, "All benchmarks completed.")


if __name__ == '__main__':
    cli()
