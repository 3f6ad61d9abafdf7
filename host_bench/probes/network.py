import logging
from typing import Dict, Optional
from ..parsers import NetworkReading, parse_speedtest_json, parse_speedtest_text
from ..runner import OutputKind, ProbeRunner, ProbeSpec, ProbeStatus
from .base import Probe

logger = logging.getLogger(__name__)

class NetworkProbe(Probe):
  PROBE_ID = "network"
  DESCRIPTION = "Network speed test (speedtest-cli)"
  PROGRAM = "speedtest-cli"
  PACKAGE = "speedtest-cli"
  FIELDS = ("net_download_mbps", "net_upload_mbps", "net_ping_ms")

  def __init__(self, timeout: Optional[int] = 120):
    self.timeout = timeout

  def spec(self) -> ProbeSpec:
    return ProbeSpec(self.PROGRAM, ("--json",), timeout=self.timeout,
                     output_kind=OutputKind.JSON, label=self.PROBE_ID)

  def fallback_spec(self) -> ProbeSpec:
    return ProbeSpec(self.PROGRAM, ("--simple",), timeout=self.timeout,
                     output_kind=OutputKind.TEXT, label=f"{self.PROBE_ID}-text")

  def parse(self, stdout: str) -> Dict[str, Optional[float]]:
    return self._fields(parse_speedtest_json(stdout))

  def parse_text(self, stdout: str) -> Dict[str, Optional[float]]:
    return self._fields(parse_speedtest_text(stdout))

  def _fields(self, reading: NetworkReading) -> Dict[str, Optional[float]]:
    return {
      "net_download_mbps": reading.download_mbps,
      "net_upload_mbps": reading.upload_mbps,
      "net_ping_ms": reading.ping_ms,
    }

  def execute(self, runner: ProbeRunner) -> Dict[str, Optional[float]]:
    """JSON mode first; text mode only when that run failed or printed no JSON."""
    outcome = runner.run_spec(self.spec())
    if outcome.ok:
      reading = parse_speedtest_json(outcome.stdout)
      if not reading.empty:
        return self._fields(reading)

    if outcome.status is ProbeStatus.UNAVAILABLE:
      outcome.raise_for_status()

    logger.warning("speedtest-cli JSON %s; trying text mode.",
                   "timed out" if outcome.timed_out else "failed or was empty")
    fallback = runner.run_spec(self.fallback_spec())
    fallback.raise_for_status()
    return self.parse_text(fallback.stdout)
