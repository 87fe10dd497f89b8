"""
Timing harness tests.

Validates iteration counting, warm-up handling, aggregate invariants and
throughput derivation using a stub parser driven by a fake clock.
"""

from typing import Any

import pytest
from conftest import StubParser

from jzbench import IterationPolicy
from jzbench import Payload
from jzbench import PayloadError
from jzbench import TimingConfig
from jzbench import TimingHarness
from jzbench.timing import BYTES_PER_MIB
from jzbench.timing import TimingResult


@pytest.mark.parametrize("iterations", [1, 2, 7, 100])
def test_exactly_n_measured_samples(iterations: int) -> None:
    """
    Validates N measured parses plus one discarded warm-up.
    """
    parser = StubParser(delays_ns=(1_000,))
    harness = TimingHarness(parser, clock=parser.clock)

    result = harness.measure(Payload("a.json", b"[]"), iterations)

    assert parser.calls == iterations + 1
    assert result.iterations == iterations
    # warm-up advanced the clock too but was not timed
    assert result.total_s == pytest.approx(iterations * 1_000 / 1e9)


def test_warmup_sample_is_discarded() -> None:
    """
    Validates that a slow first call does not leak into the statistics.
    """
    parser = StubParser(delays_ns=(9_999_999, 1_000, 1_000, 1_000))
    harness = TimingHarness(parser, clock=parser.clock)

    result = harness.measure(Payload("a.json", b"[]"), 3)

    assert result.max_s == pytest.approx(1_000 / 1e9)


@pytest.mark.parametrize(
    "delays_ns",
    [(1_000,), (5_000, 1_000, 3_000), (1, 2, 3, 4, 5, 6), (7, 7, 7)],
)
def test_min_mean_max_ordering(delays_ns: tuple[int, ...]) -> None:
    """
    Validates min <= mean <= max for uniform and spread samples.
    """
    parser = StubParser(delays_ns=delays_ns)
    harness = TimingHarness(parser, clock=parser.clock)

    result = harness.measure(Payload("a.json", b"[]"), 10)

    assert result.min_s <= result.mean_s <= result.max_s


def test_min_max_reported_raw() -> None:
    """
    Validates that extreme samples are kept, not trimmed as outliers.
    """
    # first delay is the warm-up
    parser = StubParser(delays_ns=(10, 100, 200, 1_000_000))
    harness = TimingHarness(parser, clock=parser.clock)

    result = harness.measure(Payload("a.json", b"[]"), 3)

    assert result.min_s == pytest.approx(100 / 1e9)
    assert result.max_s == pytest.approx(1_000_000 / 1e9)
    assert result.mean_s == pytest.approx((100 + 200 + 1_000_000) / 3 / 1e9)


def test_throughput_decreases_with_latency() -> None:
    """
    Validates throughput strictly decreasing as injected latency grows.
    """
    payload = Payload("a.json", b"x" * BYTES_PER_MIB)
    throughputs = []
    for delay in (1_000, 10_000, 100_000, 1_000_000):
        parser = StubParser(delays_ns=(delay,))
        harness = TimingHarness(parser, clock=parser.clock)
        throughputs.append(harness.measure(payload, 5).throughput_mibps)

    assert all(a > b for a, b in zip(throughputs, throughputs[1:]))


def test_throughput_uses_binary_megabytes() -> None:
    """
    Validates throughput = (size / 1 MiB) / mean seconds.
    """
    result = TimingResult(
        name="a.json",
        size_bytes=2 * BYTES_PER_MIB,
        iterations=1,
        total_s=0.5,
        mean_s=0.5,
        min_s=0.5,
        max_s=0.5,
    )
    assert result.throughput_mibps == pytest.approx(4.0)
    assert result.mean_ms == pytest.approx(500.0)


def test_zero_duration_gives_infinite_throughput() -> None:
    """
    Validates that a clock too coarse to see the parse does not divide by zero.
    """
    parser = StubParser(delays_ns=(0,))
    harness = TimingHarness(parser, clock=parser.clock)

    result = harness.measure(Payload("a.json", b"[]"), 3)

    assert result.throughput_mibps == float("inf")


def test_parse_failure_raises_payload_error() -> None:
    """
    Validates that parser errors surface per payload with its name.
    """
    parser = StubParser(fail_on=frozenset({b"{"}))
    harness = TimingHarness(parser)

    with pytest.raises(PayloadError) as excinfo:
        harness.measure(Payload("bad.json", b"{"), 5)

    assert excinfo.value.name == "bad.json"
    # failure on warm-up stops the payload immediately
    assert parser.calls == 1


def test_iterations_below_one_rejected(stub_parser: StubParser) -> None:
    """
    Validates that an explicit zero iteration count is refused.
    """
    harness = TimingHarness(stub_parser)
    with pytest.raises(ValueError):
        harness.measure(Payload("a.json", b"[]"), 0)


def test_policy_decides_iterations() -> None:
    """
    Validates the adaptive policy choosing counts from payload size.
    """
    parser = StubParser()
    config = TimingConfig(policy=IterationPolicy.by_size())
    harness = TimingHarness(parser, config, clock=parser.clock)

    small = harness.measure(Payload("s.json", b"[]"))
    large = harness.measure(Payload("l.json", b" " * 200_000))

    assert small.iterations == 1000
    assert large.iterations == 100


def test_warmup_cannot_be_disabled() -> None:
    """
    Validates every measurement parses N+1 times.
    """
    with pytest.raises(TypeError):
        TimingConfig(warmup=False)  # type: ignore[call-arg]


def test_unexpected_parser_exception_raises_payload_error() -> None:
    class ExplodingParser(StubParser):
        def parse(self, data: bytes) -> Any:
            super().parse(data)
            raise RecursionError("maximum recursion depth exceeded")

    harness = TimingHarness(ExplodingParser())

    with pytest.raises(PayloadError) as excinfo:
        harness.measure(Payload("deep.json", b"[[]]"), 3)

    assert excinfo.value.name == "deep.json"
    assert excinfo.value.msg.startswith("RecursionError: ")
