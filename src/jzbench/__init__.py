"""
Benchmark harness for JSON deserialization performance.

Measures parse latency, throughput and memory overhead of a JSON parser over
a directory of fixture payloads, writes fixed-schema result tables, and keeps
a rebuildable index over historical runs.
"""

from jzbench.catalog import DatasetCatalog
from jzbench.catalog import Payload
from jzbench.config import IndexConfig
from jzbench.config import IterationPolicy
from jzbench.config import MemoryConfig
from jzbench.config import OutputConfig
from jzbench.config import RunConfig
from jzbench.config import TimingConfig
from jzbench.datasets import GENERATORS
from jzbench.datasets import generate_test_data
from jzbench.datasets import write_dataset
from jzbench.errors import BenchmarkError
from jzbench.errors import ConfigurationError
from jzbench.errors import ParseError
from jzbench.errors import PayloadError
from jzbench.history import HistoryEntry
from jzbench.history import HistoryIndexer
from jzbench.history import Index
from jzbench.memory import MemoryProbe
from jzbench.memory import MemoryProfiler
from jzbench.memory import MemoryResult
from jzbench.memory import MemorySnapshot
from jzbench.memory import ProcessMemoryProbe
from jzbench.parsers import Parser
from jzbench.parsers import available_parsers
from jzbench.parsers import get_parser
from jzbench.recorder import ResultRecorder
from jzbench.recorder import RunMetadata
from jzbench.recorder import capture_run_metadata
from jzbench.runner import BenchmarkRunner
from jzbench.runner import RunReport
from jzbench.timing import TimingHarness
from jzbench.timing import TimingResult

__version__ = "0.1.0"

__all__ = [
    "GENERATORS",
    "BenchmarkError",
    "BenchmarkRunner",
    "ConfigurationError",
    "DatasetCatalog",
    "HistoryEntry",
    "HistoryIndexer",
    "Index",
    "IndexConfig",
    "IterationPolicy",
    "MemoryConfig",
    "MemoryProbe",
    "MemoryProfiler",
    "MemoryResult",
    "MemorySnapshot",
    "OutputConfig",
    "ParseError",
    "Parser",
    "Payload",
    "PayloadError",
    "ProcessMemoryProbe",
    "ResultRecorder",
    "RunConfig",
    "RunMetadata",
    "RunReport",
    "TimingConfig",
    "TimingHarness",
    "TimingResult",
    "available_parsers",
    "capture_run_metadata",
    "generate_test_data",
    "get_parser",
    "write_dataset",
]
