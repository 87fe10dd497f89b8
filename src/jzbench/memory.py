"""
Per-parse memory measurement.

Measures process memory around exactly one parse of each payload. The
baseline is taken after reclamation and the second reading right after the
parse. A third reading, after another reclamation while the parsed value is
still referenced, separates memory retained by the live value from scratch
allocations the collector can recover.

These numbers are approximate. The settle delay before the baseline bounds
collector noise but cannot remove it. tracemalloc only sees allocations made
through the Python allocator and RSS moves in page-sized steps. Report them
in KiB or as two-decimal ratios, never with byte-level confidence.
"""

import gc
import time
import tracemalloc
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from typing import Protocol

import psutil

from jzbench.catalog import Payload
from jzbench.config import MemoryConfig
from jzbench.errors import PayloadError
from jzbench.parsers import Parser

BYTES_PER_KIB = 1024


@dataclass(frozen=True)
class MemorySnapshot:
    """
    Point-in-time reading of process memory, all in bytes.

    heap_used is live traced heap, heap_total the heap high-water mark since
    the last reclamation, external everything resident outside the traced
    heap (interpreter, extension module buffers).
    """

    rss: int
    heap_used: int
    heap_total: int
    external: int


class MemoryProbe(Protocol):
    """Capability interface over the runtime's memory introspection."""

    def snapshot(self) -> MemorySnapshot:
        ...

    def reclaim(self) -> bool:
        """Requests reclamation; returns False if no trigger is available."""
        ...


class ProcessMemoryProbe:
    """
    Reads memory of the current process via psutil and tracemalloc.

    Use as a context manager: tracing is started on entry (if not already
    running) and stopped on exit only if this probe started it. Pass
    ``collect=False`` to simulate a runtime without a manual collector; the
    results are then flagged uncontrolled.
    """

    def __init__(self, collect: bool = True) -> None:
        self.collect = collect
        self._process = psutil.Process()
        self._started_tracing = False

    def __enter__(self) -> "ProcessMemoryProbe":
        if not tracemalloc.is_tracing():
            tracemalloc.start()
            self._started_tracing = True
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._started_tracing:
            tracemalloc.stop()
            self._started_tracing = False

    def snapshot(self) -> MemorySnapshot:
        current, peak = tracemalloc.get_traced_memory()
        rss = int(self._process.memory_info().rss)
        return MemorySnapshot(
            rss=rss,
            heap_used=current,
            heap_total=peak,
            external=rss - current,
        )

    def reclaim(self) -> bool:
        if tracemalloc.is_tracing():
            tracemalloc.reset_peak()
        if not self.collect:
            return False
        gc.collect()
        return True


@dataclass(frozen=True)
class MemoryResult:
    """
    Before/after/after-reclamation readings for one payload.

    All deltas are signed ``after - before``. A negative delta means
    reclamation happened mid-measurement; it is a valid signal and is never
    clamped.
    """

    name: str
    size_bytes: int
    before: MemorySnapshot
    after: MemorySnapshot
    after_reclaim: MemorySnapshot
    controlled: bool = True

    @property
    def heap_used_delta(self) -> int:
        return self.after.heap_used - self.before.heap_used

    @property
    def heap_total_delta(self) -> int:
        return self.after.heap_total - self.before.heap_total

    @property
    def external_delta(self) -> int:
        return self.after.external - self.before.external

    @property
    def rss_delta(self) -> int:
        return self.after.rss - self.before.rss

    @property
    def heap_retained(self) -> int:
        return self.after_reclaim.heap_used - self.before.heap_used

    @property
    def heap_used_delta_kib(self) -> float:
        return self.heap_used_delta / BYTES_PER_KIB

    @property
    def overhead_ratio(self) -> float:
        """Heap delta over payload size: the in-memory expansion factor."""
        if self.size_bytes == 0:
            return float("nan")
        return self.heap_used_delta / self.size_bytes


class MemoryProfiler:
    """
    Measures memory overhead of a single parse per payload.
    """

    def __init__(
        self,
        parser: Parser,
        probe: MemoryProbe,
        config: MemoryConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.parser = parser
        self.probe = probe
        self.config = config or MemoryConfig()
        self._sleep = sleep

    def profile(self, payload: Payload) -> MemoryResult:
        """
        Parses ``payload`` once and records memory around the parse.

        Raises:
            PayloadError: if the parser fails on the payload, whatever it
                raises
        """
        controlled = self.probe.reclaim()
        if self.config.settle_ms:
            self._sleep(self.config.settle_ms / 1000)

        before = self.probe.snapshot()
        try:
            parsed = self.parser.parse(payload.data)
        except Exception as e:
            raise PayloadError.from_failure(payload.name, e) from e
        after = self.probe.snapshot()

        # parsed must stay referenced until after_reclaim is taken
        controlled = self.probe.reclaim() and controlled
        after_reclaim = self.probe.snapshot()
        del parsed

        return MemoryResult(
            name=payload.name,
            size_bytes=payload.size_bytes,
            before=before,
            after=after,
            after_reclaim=after_reclaim,
            controlled=controlled,
        )
