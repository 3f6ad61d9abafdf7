from .config import RunConfiguration, load_config
from .orchestrator import Orchestrator, RunState, scoped_test_file
from .result import BenchmarkResult

__all__ = ['BenchmarkResult', 'Orchestrator', 'RunConfiguration', 'RunState', 'load_config', 'scoped_test_file']
