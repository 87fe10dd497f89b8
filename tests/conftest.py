"""
Pytest configuration and shared fixtures for jzbench tests.

Provides stub parsers with a fake clock, scripted memory probes, fixture
datasets on disk and a factory for historical run directories, so the
measurement engine can be tested deterministically.
"""

from collections.abc import Callable
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from jzbench import MemorySnapshot
from jzbench import ParseError
from jzbench import RunMetadata
from jzbench.recorder import dump_json


@dataclass(frozen=True)
class PayloadCase:
    """
    Immutable container for one on-disk payload fixture.

    Holds the file name, its raw content and whether parsing should fail.
    """

    name: str
    content: bytes
    should_fail: bool = False


class FakeClock:
    """Monotonic nanosecond clock that only moves when told to."""

    def __init__(self) -> None:
        self.now_ns = 0

    def __call__(self) -> int:
        return self.now_ns

    def advance(self, ns: int) -> None:
        self.now_ns += ns


class StubParser:
    """
    Counting parser with injectable latency and failure.

    Each call advances ``clock`` by the next delay from ``delays_ns``
    (cycling) and raises ParseError for inputs listed in ``fail_on``.
    """

    def __init__(
        self,
        clock: FakeClock | None = None,
        delays_ns: tuple[int, ...] = (1_000,),
        fail_on: frozenset[bytes] = frozenset(),
        name: str = "stub",
    ) -> None:
        self.name = name
        self.clock = clock or FakeClock()
        self.delays_ns = delays_ns
        self.fail_on = fail_on
        self.calls = 0

    def parse(self, data: bytes) -> Any:
        delay = self.delays_ns[self.calls % len(self.delays_ns)]
        self.calls += 1
        self.clock.advance(delay)
        if data in self.fail_on:
            raise ParseError("Expecting value", self.name)
        return {"size": len(data)}


class ScriptedProbe:
    """
    Memory probe that replays a fixed list of snapshots.

    Records the order of snapshot/reclaim calls in ``events`` so tests can
    check the profiling protocol.
    """

    def __init__(
        self, snapshots: list[MemorySnapshot], can_reclaim: bool = True
    ) -> None:
        self._snapshots: Iterator[MemorySnapshot] = iter(snapshots)
        self.can_reclaim = can_reclaim
        self.events: list[str] = []

    def snapshot(self) -> MemorySnapshot:
        self.events.append("snapshot")
        return next(self._snapshots)

    def reclaim(self) -> bool:
        self.events.append("reclaim")
        return self.can_reclaim


def snap(heap_used: int, rss: int = 0, external: int = 0) -> MemorySnapshot:
    return MemorySnapshot(
        rss=rss, heap_used=heap_used, heap_total=heap_used, external=external
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def stub_parser(fake_clock: FakeClock) -> StubParser:
    return StubParser(clock=fake_clock)


@pytest.fixture
def payload_cases() -> list[PayloadCase]:
    """
    Provides a small mixed batch: valid documents plus one malformed file.
    """
    return [
        PayloadCase("array.json", b"[1, 2, 3]"),
        PayloadCase("broken.json", b'{"unclosed": [1, 2', should_fail=True),
        PayloadCase("object.json", b'{"key": "value", "n": 1.5}'),
        PayloadCase("unicode.json", '["café", "日本"]'.encode()),
    ]


@pytest.fixture
def dataset_dir(tmp_path: Path, payload_cases: list[PayloadCase]) -> Path:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    for case in payload_cases:
        (data_dir / case.name).write_bytes(case.content)
    (data_dir / "notes.txt").write_text("not a payload")
    return data_dir


@pytest.fixture
def make_metadata() -> Callable[..., RunMetadata]:
    def factory(
        timestamp: str = "2026-01-01T00:00:00.000Z",
        commit: str = "0123456789abcdef0123456789abcdef01234567",
        git_status: str = "clean",
    ) -> RunMetadata:
        return RunMetadata(
            commit=commit,
            timestamp=timestamp,
            git_status=git_status,
            runtime_version="CPython 3.12.4",
            platform="linux-x86_64",
        )

    return factory


@pytest.fixture
def results_root(tmp_path: Path) -> Path:
    root = tmp_path / "history"
    root.mkdir()
    return root


@pytest.fixture
def add_run(
    results_root: Path, make_metadata: Callable[..., RunMetadata]
) -> Callable[..., Path]:
    """Creates a run directory holding a metadata record."""

    def factory(name: str, timestamp: str, **kwargs: Any) -> Path:
        run_dir = results_root / name
        run_dir.mkdir()
        metadata = make_metadata(timestamp=timestamp, **kwargs)
        (run_dir / "metadata.json").write_bytes(dump_json(metadata.to_json()))
        return run_dir

    return factory
