"""
Immutable configuration for every harness component.

Each component receives its own frozen config rather than reading ambient
defaults, so tests can build exactly the setup they need. Values are
validated on construction and raise ConfigurationError.

Environment overrides (applied by ``from_env`` helpers, CLI flags win):

- JZBENCH_ITERATIONS: fixed iteration count for the timing pass
- JZBENCH_SETTLE_MS: settle delay before the "before" memory snapshot
- JZBENCH_PARSER: backend name, see jzbench.parsers
"""

import os
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from jzbench.errors import ConfigurationError
from jzbench.parsers import DEFAULT_PARSER

# Adaptive iteration thresholds, in payload bytes
LARGE_PAYLOAD_BYTES = 100_000
MEDIUM_PAYLOAD_BYTES = 10_000
_LARGE_ITERATIONS = 100
_MEDIUM_ITERATIONS = 500
_SMALL_ITERATIONS = 1000

DEFAULT_ITERATIONS = 100
DEFAULT_SETTLE_MS = 50

PERFORMANCE_FILENAME = "performance.csv"
MEMORY_FILENAME = "memory.csv"
TIMING_DETAIL_FILENAME = "timing_detail.csv"
MEMORY_DETAIL_FILENAME = "memory_detail.csv"
METADATA_FILENAME = "metadata.json"
INDEX_FILENAME = "index.json"
DEFAULT_RESULTS_ROOT = Path("benchmarks") / "results" / "history"


def _env_int(var: str, default: int) -> int:
    raw = os.environ.get(var)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            f"{var} must be an integer, got {raw!r}"
        ) from None


@dataclass(frozen=True)
class IterationPolicy:
    """
    Decides how many measured iterations a payload gets.

    A fixed policy always returns ``iterations``; an adaptive policy scales
    the count down for larger payloads so big fixtures do not dominate the
    run time.
    """

    iterations: int = DEFAULT_ITERATIONS
    adaptive: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.iterations, int) or self.iterations < 1:
            raise ConfigurationError(
                f"iterations must be an integer >= 1, got {self.iterations!r}"
            )

    @classmethod
    def fixed(cls, iterations: int) -> "IterationPolicy":
        return cls(iterations=iterations)

    @classmethod
    def by_size(cls) -> "IterationPolicy":
        return cls(adaptive=True)

    def iterations_for(self, size_bytes: int) -> int:
        if not self.adaptive:
            return self.iterations
        if size_bytes > LARGE_PAYLOAD_BYTES:
            return _LARGE_ITERATIONS
        if size_bytes > MEDIUM_PAYLOAD_BYTES:
            return _MEDIUM_ITERATIONS
        return _SMALL_ITERATIONS


@dataclass(frozen=True)
class TimingConfig:
    """Configures the timing pass."""

    policy: IterationPolicy = field(default_factory=IterationPolicy)

    @classmethod
    def from_env(cls) -> "TimingConfig":
        iterations = _env_int("JZBENCH_ITERATIONS", DEFAULT_ITERATIONS)
        return cls(policy=IterationPolicy.fixed(iterations))


@dataclass(frozen=True)
class MemoryConfig:
    """
    Configures the memory pass.

    ``settle_ms`` is a heuristic pause that lets pending reclamation finish
    before the baseline snapshot. It bounds collector noise but cannot remove
    it; memory numbers are approximate whatever the value.
    """

    settle_ms: int = DEFAULT_SETTLE_MS

    def __post_init__(self) -> None:
        if not isinstance(self.settle_ms, int) or self.settle_ms < 0:
            raise ConfigurationError(
                "settle_ms must be a non-negative integer, "
                f"got {self.settle_ms!r}"
            )

    @classmethod
    def from_env(cls) -> "MemoryConfig":
        return cls(settle_ms=_env_int("JZBENCH_SETTLE_MS", DEFAULT_SETTLE_MS))


@dataclass(frozen=True)
class OutputConfig:
    """
    Says where a run's tables and metadata go.

    ``performance_path`` and ``memory_path`` are the two summary tables.
    When ``snapshot_root`` is set the full result set is also stored in a
    per-run directory beneath it for the history index.
    """

    performance_path: Path = Path(PERFORMANCE_FILENAME)
    memory_path: Path = Path(MEMORY_FILENAME)
    snapshot_root: Path | None = None


@dataclass(frozen=True)
class RunConfig:
    """Bundles everything one ``jzbench run`` invocation needs."""

    data_dir: Path
    parser: str = DEFAULT_PARSER
    timing: TimingConfig = field(default_factory=TimingConfig)
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def parser_from_env() -> str:
        return os.environ.get("JZBENCH_PARSER") or DEFAULT_PARSER


@dataclass(frozen=True)
class IndexConfig:
    """Configures a history indexing pass."""

    results_root: Path = DEFAULT_RESULTS_ROOT
    index_filename: str = INDEX_FILENAME
    metadata_filename: str = METADATA_FILENAME

    @property
    def index_path(self) -> Path:
        return self.results_root / self.index_filename
