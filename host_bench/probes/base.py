from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

from ..runner import ProbeRunner, ProbeSpec


class Probe(ABC):
  """One external benchmark invocation and the rule that reads its output."""
  PROBE_ID: str = ""
  DESCRIPTION: str = ""
  PROGRAM: str = ""
  PACKAGE: str = ""  # distro package providing PROGRAM
  FIELDS: Tuple[str, ...] = ()

  @abstractmethod
  def spec(self) -> ProbeSpec: pass

  @abstractmethod
  def parse(self, stdout: str) -> Dict[str, Optional[float]]: pass

  def execute(self, runner: ProbeRunner) -> Dict[str, Optional[float]]:
    """Run once, raise ProbeError on a non-ok outcome, else parse."""
    outcome = runner.run_spec(self.spec())
    outcome.raise_for_status()
    return self.parse(outcome.stdout)
