"""
Memory usage benchmarks for JSON parsing.

Profiles heap growth and retention of each backend with the same
before/after/after-reclamation protocol ``jzbench run`` uses.
"""

from collections.abc import Iterator

import pytest

from jzbench import MemoryConfig
from jzbench import MemoryProfiler
from jzbench import MemoryResult
from jzbench import Payload
from jzbench import ProcessMemoryProbe
from jzbench import available_parsers
from jzbench import generate_test_data
from jzbench import get_parser

DATA_TYPES = [
    "simple.json",
    "large_array.json",
    "large_object.json",
    "deeply_nested.json",
    "edge_cases.json",
]


@pytest.fixture(scope="module")
def probe() -> Iterator[ProcessMemoryProbe]:
    with ProcessMemoryProbe() as probe:
        yield probe


def profile(
    probe: ProcessMemoryProbe, backend: str, data_type: str
) -> MemoryResult:
    payload = Payload(data_type, generate_test_data(data_type).encode())
    profiler = MemoryProfiler(
        get_parser(backend), probe, MemoryConfig(settle_ms=0)
    )
    return profiler.profile(payload)


class TestMemoryUsage:
    """Memory usage benchmarks for JSON parsing."""

    @pytest.mark.parametrize("backend", available_parsers())
    @pytest.mark.parametrize("data_type", DATA_TYPES)
    def test_backend_memory(
        self, probe: ProcessMemoryProbe, backend: str, data_type: str
    ) -> None:
        """Measures heap growth for one backend and fixture."""
        result = profile(probe, backend, data_type)

        print(
            f"\n{backend} {data_type}: {result.heap_used_delta:,} bytes"
            f" (overhead {result.overhead_ratio:.2f}x)"
        )
        assert result.controlled
        assert result.after.heap_total >= result.after.heap_used

    def test_memory_comparison_summary(
        self, probe: ProcessMemoryProbe
    ) -> None:
        """Generates a memory overhead comparison against stdlib."""
        backends = available_parsers()
        results = {
            data_type: {
                backend: profile(probe, backend, data_type)
                for backend in backends
            }
            for data_type in DATA_TYPES
        }

        print("\n" + "=" * 80)
        print("MEMORY USAGE COMPARISON (heap delta, bytes)")
        print("=" * 80)
        print(f"{'Data Type':<22}" + "".join(f"{b:<14}" for b in backends))
        print("-" * 80)
        for data_type, measurements in results.items():
            print(
                f"{data_type:<22}"
                + "".join(
                    f"{measurements[b].heap_used_delta:<14,}" for b in backends
                )
            )
        print("=" * 80)

        print("\nOVERHEAD RATIO (heap delta / payload size)")
        print("-" * 40)
        for data_type, measurements in results.items():
            ratios = " ".join(
                f"{b}={m.overhead_ratio:.2f}x" for b, m in measurements.items()
            )
            print(f"{data_type}: {ratios}")

        assert len(results) == len(DATA_TYPES)
