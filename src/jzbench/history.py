"""
History index over per-run result snapshots.

The per-run directories are the source of truth. The index is a derived
projection, rebuilt from scratch on every pass with no incremental merge. An
interrupted or repeated pass never leaves it half updated.
"""

import logging
from dataclasses import dataclass
from datetime import UTC
from datetime import datetime
from pathlib import Path
from typing import Any

import orjson

from jzbench.config import IndexConfig
from jzbench.errors import ConfigurationError
from jzbench.recorder import RunMetadata
from jzbench.recorder import atomic_write
from jzbench.recorder import dump_json
from jzbench.recorder import format_timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """A run's metadata plus the name of the directory holding its results."""

    name: str
    metadata: RunMetadata

    def to_json(self) -> dict[str, str]:
        return {"name": self.name, **self.metadata.to_json()}


@dataclass(frozen=True)
class Index:
    """
    All indexed runs, newest first.

    Ties on timestamp are broken by directory name so the order is
    deterministic.
    """

    generated: str
    entries: tuple[HistoryEntry, ...]

    @property
    def count(self) -> int:
        return len(self.entries)

    def to_json(self) -> dict[str, Any]:
        return {
            "generated": self.generated,
            "count": self.count,
            "entries": [entry.to_json() for entry in self.entries],
        }


def sort_entries(entries: list[HistoryEntry]) -> tuple[HistoryEntry, ...]:
    """Orders entries by timestamp descending, then by name ascending."""
    by_name = sorted(entries, key=lambda e: e.name)
    return tuple(sorted(by_name, key=lambda e: e.metadata.moment, reverse=True))


class HistoryIndexer:
    """
    Scans a results root and rebuilds its index file.

    Every immediate subdirectory of the root is one run. A run whose metadata
    record is missing or corrupt is skipped with a warning; a missing root is
    a configuration error.
    """

    def __init__(self, config: IndexConfig | None = None):
        self.config = config or IndexConfig()
        self.skipped: list[str] = []

    def read_entry(self, run_dir: Path) -> HistoryEntry | None:
        """Reads one run directory, returning None if it cannot be indexed."""
        metadata_path = run_dir / self.config.metadata_filename
        if not metadata_path.is_file():
            logger.info("Skipping %s: no %s", run_dir.name, metadata_path.name)
            return None
        try:
            raw = orjson.loads(metadata_path.read_bytes())
            metadata = RunMetadata.from_json(raw)
        except (OSError, ValueError) as e:
            logger.warning(
                "Skipping %s: corrupt metadata (%s)", run_dir.name, e
            )
            return None
        return HistoryEntry(run_dir.name, metadata)

    def run_dirs(self) -> list[Path]:
        root = self.config.results_root
        if not root.is_dir():
            raise ConfigurationError("Results root does not exist", root)
        try:
            dirs = [p for p in root.iterdir() if p.is_dir()]
        except OSError as e:
            raise ConfigurationError(
                f"Results root is unreadable ({e.strerror})", root
            ) from e
        return sorted(dirs, key=lambda p: p.name)

    def build(self, now: datetime | None = None) -> Index:
        """
        Builds the index from the run directories without writing it.

        Raises:
            ConfigurationError: if the results root is missing or unreadable
        """
        entries: list[HistoryEntry] = []
        self.skipped = []
        for run_dir in self.run_dirs():
            entry = self.read_entry(run_dir)
            if entry is None:
                self.skipped.append(run_dir.name)
            else:
                entries.append(entry)

        return Index(
            generated=format_timestamp(now or datetime.now(UTC)),
            entries=sort_entries(entries),
        )

    def write(self, index: Index) -> Path:
        """Replaces the index file atomically and returns its path."""
        path = self.config.index_path
        atomic_write(path, dump_json(index.to_json()))
        return path

    def rebuild(self, now: datetime | None = None) -> Index:
        index = self.build(now)
        self.write(index)
        return index
