"""
Latency and throughput measurement.

Each payload gets one untimed warm-up parse followed by N timed parses.
Every sample counts: min, max and mean are reported exactly as measured and
outlier analysis is left to whoever reads the tables.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

from jzbench.catalog import Payload
from jzbench.config import TimingConfig
from jzbench.errors import PayloadError
from jzbench.parsers import Parser

BYTES_PER_MIB = 1_048_576
_NS_PER_S = 1_000_000_000


@dataclass(frozen=True)
class TimingResult:
    """
    Aggregate over all measured samples of one payload.

    Durations are in seconds; throughput is MiB per second.
    """

    name: str
    size_bytes: int
    iterations: int
    total_s: float
    mean_s: float
    min_s: float
    max_s: float

    @property
    def throughput_mibps(self) -> float:
        if self.mean_s <= 0:
            return float("inf")
        return (self.size_bytes / BYTES_PER_MIB) / self.mean_s

    @property
    def mean_ms(self) -> float:
        return self.mean_s * 1000


class TimingHarness:
    """
    Runs controlled iteration loops over payloads.

    The parser is called N+1 times per payload: one discarded warm-up to
    absorb lazy initialization and page faults, then N measured calls timed
    with ``time.perf_counter_ns``.
    """

    def __init__(
        self,
        parser: Parser,
        config: TimingConfig | None = None,
        clock: Callable[[], int] = time.perf_counter_ns,
    ):
        self.parser = parser
        self.config = config or TimingConfig()
        self._clock = clock

    def measure(
        self, payload: Payload, iterations: int | None = None
    ) -> TimingResult:
        """
        Times ``iterations`` parses of ``payload``.

        Raises:
            PayloadError: if the parser fails on the payload, whatever it
                raises
            ValueError: if iterations is below 1
        """
        n = (
            iterations
            if iterations is not None
            else self.config.policy.iterations_for(payload.size_bytes)
        )
        if n < 1:
            raise ValueError(f"iterations must be >= 1, got {n}")

        parse = self.parser.parse
        clock = self._clock
        data = payload.data
        total_ns = 0
        min_ns = -1
        max_ns = 0

        try:
            parse(data)

            for _ in range(n):
                start = clock()
                parse(data)
                elapsed = clock() - start

                total_ns += elapsed
                if min_ns < 0 or elapsed < min_ns:
                    min_ns = elapsed
                if elapsed > max_ns:
                    max_ns = elapsed
        except Exception as e:
            raise PayloadError.from_failure(payload.name, e) from e

        total_s = total_ns / _NS_PER_S
        return TimingResult(
            name=payload.name,
            size_bytes=payload.size_bytes,
            iterations=n,
            total_s=total_s,
            mean_s=(total_ns / n) / _NS_PER_S,
            min_s=min_ns / _NS_PER_S,
            max_s=max_ns / _NS_PER_S,
        )
