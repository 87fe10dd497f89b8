"""
Benchmark input discovery.

A dataset is a directory of ``*.json`` files. Each file becomes an immutable
Payload holding its raw bytes; the harness never looks inside beyond handing
the bytes to the parser under test.
"""

import logging
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from jzbench.errors import ConfigurationError
from jzbench.errors import PayloadError

logger = logging.getLogger(__name__)

PAYLOAD_SUFFIX = ".json"


@dataclass(frozen=True)
class Payload:
    """
    One fixed JSON input, identified by its file name.

    Read once per benchmark pass and never mutated.
    """

    name: str
    data: bytes = field(repr=False)

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class DatasetCatalog:
    """
    Enumerates the payloads of a data directory in file-name order.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def paths(self) -> list[Path]:
        """
        Lists payload files sorted by name.

        Raises:
            ConfigurationError: if the data directory is missing or unreadable
        """
        if not self.data_dir.is_dir():
            raise ConfigurationError(
                "Data directory does not exist", self.data_dir
            )
        try:
            entries = list(self.data_dir.iterdir())
        except OSError as e:
            raise ConfigurationError(
                f"Data directory is unreadable ({e.strerror})", self.data_dir
            ) from e

        return sorted(
            (p for p in entries if p.suffix == PAYLOAD_SUFFIX and p.is_file()),
            key=lambda p: p.name,
        )

    @staticmethod
    def read(path: Path) -> Payload:
        """Reads one payload, raising PayloadError if the file is unreadable."""
        try:
            return Payload(path.name, path.read_bytes())
        except OSError as e:
            raise PayloadError(path.name, f"unreadable ({e})") from e

    def load(self) -> tuple[list[Payload], list[PayloadError]]:
        """
        Reads every payload in the directory.

        Returns:
            Tuple of (payloads in name order, errors for unreadable files)
        """
        payloads: list[Payload] = []
        errors: list[PayloadError] = []
        for path in self.paths():
            try:
                payloads.append(self.read(path))
            except PayloadError as e:
                logger.warning("Skipping payload %s", e)
                errors.append(e)
        return payloads, errors
