"""
Exception hierarchy for the benchmark harness.

Configuration errors abort a run; payload errors are caught per payload by
the runner and reported as skipped items.
"""

from pathlib import Path


class BenchmarkError(Exception):
    """Base class for every error raised by jzbench."""


class ConfigurationError(BenchmarkError):
    """
    Signals an unusable configuration such as a missing input directory.

    Fatal: the CLI reports the message and exits non-zero.
    """

    def __init__(self, msg: str, path: Path | None = None) -> None:
        self.msg = msg
        self.path = path
        super().__init__(f"{msg}: {path}" if path is not None else msg)


class PayloadError(BenchmarkError):
    """
    Signals that a single payload could not be read or measured.

    Carries the payload name so the failure can be reported next to the
    payloads that did make it into the result tables.
    """

    def __init__(self, name: str, msg: str) -> None:
        self.name = name
        self.msg = msg
        super().__init__(f"{name}: {msg}")

    @classmethod
    def from_failure(cls, name: str, exc: Exception) -> "PayloadError":
        """Wraps whatever a parser raised for payload ``name``."""
        if isinstance(exc, ParseError):
            return cls(name, str(exc))
        return cls(name, f"{type(exc).__name__}: {exc}")


class ParseError(BenchmarkError, ValueError):
    """
    Raised by a parser backend when its input is not valid JSON.

    The harness converts it into a PayloadError naming the payload.
    """

    def __init__(self, msg: str, backend: str = "") -> None:
        self.msg = msg
        self.backend = backend
        super().__init__(f"{backend}: {msg}" if backend else msg)
