"""
Sequential benchmark orchestration.

One run is strictly single-threaded: the timing pass completes for every
payload before the memory pass starts, so repeated-parse garbage from timing
never leaks into a memory reading and no two parses ever overlap. Payload
failures are caught here, at the per-payload boundary, and never abort the
run. Output write errors propagate.
"""

import logging
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from jzbench.catalog import DatasetCatalog
from jzbench.catalog import Payload
from jzbench.config import RunConfig
from jzbench.errors import PayloadError
from jzbench.memory import MemoryProbe
from jzbench.memory import MemoryProfiler
from jzbench.memory import MemoryResult
from jzbench.memory import ProcessMemoryProbe
from jzbench.parsers import Parser
from jzbench.parsers import get_parser
from jzbench.recorder import ResultRecorder
from jzbench.recorder import RunMetadata
from jzbench.recorder import capture_run_metadata
from jzbench.timing import TimingHarness
from jzbench.timing import TimingResult

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """Everything one run measured, skipped and wrote."""

    metadata: RunMetadata
    timings: list[TimingResult] = field(default_factory=list)
    memories: list[MemoryResult] = field(default_factory=list)
    skipped: list[PayloadError] = field(default_factory=list)
    snapshot_dir: Path | None = None

    @property
    def controlled(self) -> bool:
        """False if any memory reading lacked a reclamation trigger."""
        return all(m.controlled for m in self.memories)


class BenchmarkRunner:
    """
    Runs the timing and memory passes over a dataset and records results.

    ``parser`` and ``probe`` default to the configured backend and the
    current-process probe; tests pass stubs.
    """

    def __init__(
        self,
        config: RunConfig,
        parser: Parser | None = None,
        probe: MemoryProbe | None = None,
        recorder: ResultRecorder | None = None,
    ):
        self.config = config
        self.parser = parser or get_parser(config.parser)
        self.probe = probe
        self.recorder = recorder or ResultRecorder()

    def timing_pass(
        self, payloads: list[Payload], report: RunReport
    ) -> list[Payload]:
        """Times every payload; returns the ones that parsed."""
        harness = TimingHarness(self.parser, self.config.timing)
        measured: list[Payload] = []
        for payload in payloads:
            try:
                result = harness.measure(payload)
            except PayloadError as e:
                logger.warning("Excluding payload %s", e)
                report.skipped.append(e)
                continue
            report.timings.append(result)
            measured.append(payload)
        return measured

    def memory_pass(
        self, payloads: list[Payload], probe: MemoryProbe, report: RunReport
    ) -> None:
        profiler = MemoryProfiler(self.parser, probe, self.config.memory)
        for payload in payloads:
            try:
                report.memories.append(profiler.profile(payload))
            except PayloadError as e:
                logger.warning("Excluding payload %s from memory table", e)
                report.skipped.append(e)

    def measure(self, metadata: RunMetadata | None = None) -> RunReport:
        """
        Runs both passes without writing anything.

        Raises:
            ConfigurationError: if the data directory is missing or unreadable
        """
        payloads, unreadable = DatasetCatalog(self.config.data_dir).load()
        report = RunReport(metadata=metadata or capture_run_metadata())
        report.skipped.extend(unreadable)

        measured = self.timing_pass(payloads, report)

        if self.probe is not None:
            self.memory_pass(measured, self.probe, report)
        else:
            with ProcessMemoryProbe() as probe:
                self.memory_pass(measured, probe, report)
        return report

    def record(self, report: RunReport) -> RunReport:
        """Writes the summary tables and, if configured, a run snapshot."""
        output = self.config.output
        self.recorder.write_performance(output.performance_path, report.timings)
        self.recorder.write_memory(output.memory_path, report.memories)
        if output.snapshot_root is not None:
            report.snapshot_dir = self.recorder.write_snapshot(
                output.snapshot_root,
                report.metadata,
                report.timings,
                report.memories,
            )
        return report

    def run(self, metadata: RunMetadata | None = None) -> RunReport:
        return self.record(self.measure(metadata))
