"""
Durable result tables and run metadata.

Every table has a fixed column order so rows from different runs stay
comparable, and numbers are written with fixed precision so historical diffs
only show real changes:

- milliseconds: 3 decimals (4 in the timing detail table)
- throughput (MiB/s) and ratios: 2 decimals
- memory: integer bytes

Files are rendered fully in memory and then moved into place atomically, so a
failed write never leaves a truncated table behind.
"""

import csv
import io
import os
import platform
import subprocess
import sys
import tempfile
from collections.abc import Iterable
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC
from datetime import datetime
from pathlib import Path
from typing import Any

import orjson

from jzbench.config import MEMORY_DETAIL_FILENAME
from jzbench.config import MEMORY_FILENAME
from jzbench.config import METADATA_FILENAME
from jzbench.config import PERFORMANCE_FILENAME
from jzbench.config import TIMING_DETAIL_FILENAME
from jzbench.memory import MemoryResult
from jzbench.timing import TimingResult

PERFORMANCE_COLUMNS = (
    "file",
    "size_bytes",
    "parse_time_ms",
    "throughput_mbps",
)
MEMORY_COLUMNS = (
    "file",
    "heap_used_delta",
    "external_delta",
    "heap_total",
    "rss",
)
TIMING_DETAIL_COLUMNS = (
    "file",
    "size_bytes",
    "iterations",
    "total_ms",
    "mean_ms",
    "min_ms",
    "max_ms",
    "throughput_mbps",
)
MEMORY_DETAIL_COLUMNS = (
    "file",
    "size_bytes",
    "heap_before",
    "heap_after",
    "heap_used_delta",
    "heap_after_reclaim",
    "heap_retained",
    "overhead_ratio",
    "rss_before",
    "rss_after",
    "rss_delta",
    "rss_after_reclaim",
    "controlled",
)

GIT_CLEAN = "clean"
GIT_DIRTY = "dirty"
GIT_UNKNOWN = "unknown"
_SHORT_COMMIT = 7
_METADATA_FIELDS = (
    "commit",
    "timestamp",
    "git_status",
    "runtime_version",
    "platform",
)


def _ms(seconds: float, places: int = 3) -> str:
    return f"{seconds * 1000:.{places}f}"


def format_timestamp(moment: datetime) -> str:
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def parse_timestamp(value: str) -> datetime:
    """Parses an ISO-8601 timestamp; naive values are taken as UTC."""
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment


@dataclass(frozen=True)
class RunMetadata:
    """
    Identifies one benchmark execution.

    ``timestamp`` is an ISO-8601 string in UTC; ``git_status`` is one of
    clean, dirty or unknown (no git available).
    """

    commit: str
    timestamp: str
    git_status: str
    runtime_version: str
    platform: str

    def to_json(self) -> dict[str, str]:
        return {
            "commit": self.commit,
            "timestamp": self.timestamp,
            "git_status": self.git_status,
            "runtime_version": self.runtime_version,
            "platform": self.platform,
        }

    @classmethod
    def from_json(cls, raw: Any) -> "RunMetadata":
        """
        Builds metadata from a decoded record.

        Raises:
            ValueError: if a field is missing, not a string, or the
                timestamp is not ISO-8601
        """
        if not isinstance(raw, dict):
            raise ValueError("metadata record must be an object")
        values = {}
        for key in _METADATA_FIELDS:
            value = raw.get(key)
            if not isinstance(value, str):
                raise ValueError(
                    f"metadata field {key!r} missing or not a string"
                )
            values[key] = value
        parse_timestamp(values["timestamp"])
        return cls(**values)

    @property
    def moment(self) -> datetime:
        return parse_timestamp(self.timestamp)

    @property
    def run_name(self) -> str:
        """Snapshot directory name, e.g. 20261018T120000Z_ab12cd3."""
        stamp = self.moment.astimezone(UTC).strftime("%Y%m%dT%H%M%SZ")
        return f"{stamp}_{self.commit[:_SHORT_COMMIT]}"


def _git(args: Sequence[str], cwd: Path | None) -> str | None:
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
            timeout=10,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    return completed.stdout


def capture_run_metadata(
    cwd: Path | None = None, now: datetime | None = None
) -> RunMetadata:
    """
    Collects commit, tree cleanliness, runtime and platform for a run.

    Falls back to "unknown" for the git fields when git or a repository is
    not available.
    """
    head = _git(["rev-parse", "HEAD"], cwd)
    status = _git(["status", "--porcelain"], cwd) if head is not None else None

    if head is None or status is None:
        commit, git_status = GIT_UNKNOWN, GIT_UNKNOWN
    else:
        commit = head.strip()
        git_status = GIT_DIRTY if status.strip() else GIT_CLEAN

    return RunMetadata(
        commit=commit,
        timestamp=format_timestamp(now or datetime.now(UTC)),
        git_status=git_status,
        runtime_version=(
            f"{platform.python_implementation()} {platform.python_version()}"
        ),
        platform=f"{sys.platform}-{platform.machine()}",
    )


def atomic_write(path: Path, content: bytes) -> None:
    """
    Writes ``content`` to ``path`` all-or-nothing.

    Data goes to a temporary file in the destination directory, is flushed
    to disk, then renamed over ``path``. On any failure the temporary file is
    removed and the error propagates.
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def render_table(
    columns: Sequence[str], rows: Iterable[Sequence[Any]]
) -> bytes:
    """Renders a CSV table with a header row, even when there are no rows."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(columns)
    writer.writerows(rows)
    return buf.getvalue().encode("utf-8")


def performance_rows(results: Iterable[TimingResult]) -> list[list[str]]:
    return [
        [
            r.name,
            str(r.size_bytes),
            _ms(r.mean_s),
            f"{r.throughput_mibps:.2f}",
        ]
        for r in results
    ]


def memory_rows(results: Iterable[MemoryResult]) -> list[list[str]]:
    return [
        [
            r.name,
            str(r.heap_used_delta),
            str(r.external_delta),
            str(r.after.heap_total),
            str(r.after.rss),
        ]
        for r in results
    ]


def timing_detail_rows(results: Iterable[TimingResult]) -> list[list[str]]:
    return [
        [
            r.name,
            str(r.size_bytes),
            str(r.iterations),
            _ms(r.total_s, 4),
            _ms(r.mean_s, 4),
            _ms(r.min_s, 4),
            _ms(r.max_s, 4),
            f"{r.throughput_mibps:.2f}",
        ]
        for r in results
    ]


def memory_detail_rows(results: Iterable[MemoryResult]) -> list[list[str]]:
    return [
        [
            r.name,
            str(r.size_bytes),
            str(r.before.heap_used),
            str(r.after.heap_used),
            str(r.heap_used_delta),
            str(r.after_reclaim.heap_used),
            str(r.heap_retained),
            f"{r.overhead_ratio:.2f}",
            str(r.before.rss),
            str(r.after.rss),
            str(r.rss_delta),
            str(r.after_reclaim.rss),
            "true" if r.controlled else "false",
        ]
        for r in results
    ]


def dump_json(record: Any) -> bytes:
    """Serializes a record as 2-space indented JSON with a trailing newline."""
    return orjson.dumps(
        record, option=orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE
    )


class ResultRecorder:
    """
    Writes one run's results as fixed-schema CSV tables plus metadata.
    """

    def write_performance(
        self, path: Path, results: Sequence[TimingResult]
    ) -> None:
        atomic_write(
            path, render_table(PERFORMANCE_COLUMNS, performance_rows(results))
        )

    def write_memory(
        self, path: Path, results: Sequence[MemoryResult]
    ) -> None:
        atomic_write(path, render_table(MEMORY_COLUMNS, memory_rows(results)))

    def write_timing_detail(
        self, path: Path, results: Sequence[TimingResult]
    ) -> None:
        table = render_table(TIMING_DETAIL_COLUMNS, timing_detail_rows(results))
        atomic_write(path, table)

    def write_memory_detail(
        self, path: Path, results: Sequence[MemoryResult]
    ) -> None:
        table = render_table(MEMORY_DETAIL_COLUMNS, memory_detail_rows(results))
        atomic_write(path, table)

    def write_metadata(self, path: Path, metadata: RunMetadata) -> None:
        atomic_write(path, dump_json(metadata.to_json()))

    def write_snapshot(
        self,
        snapshot_root: Path,
        metadata: RunMetadata,
        timings: Sequence[TimingResult],
        memories: Sequence[MemoryResult],
    ) -> Path:
        """
        Stores the full result set under ``snapshot_root/<run name>``.

        The metadata record is written last so the history indexer only ever
        sees run directories whose tables are complete.

        Returns:
            The run directory
        """
        run_dir = Path(snapshot_root) / metadata.run_name
        run_dir.mkdir(parents=True, exist_ok=True)

        self.write_performance(run_dir / PERFORMANCE_FILENAME, timings)
        self.write_memory(run_dir / MEMORY_FILENAME, memories)
        self.write_timing_detail(run_dir / TIMING_DETAIL_FILENAME, timings)
        self.write_memory_detail(run_dir / MEMORY_DETAIL_FILENAME, memories)
        self.write_metadata(run_dir / METADATA_FILENAME, metadata)
        return run_dir
