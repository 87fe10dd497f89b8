"""
Parser backends measured by the harness.

The harness treats parsing as an opaque primitive: anything with a ``name``
and a ``parse(data: bytes)`` method that raises ParseError on malformed input
can be benchmarked. Three backends are registered out of the box:

- stdlib: the standard library json module
- orjson: C-optimized (Rust) parser
- ujson: ultra-fast JSON
"""

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from typing import Protocol

import orjson
import ujson  # type: ignore[import-untyped]

from jzbench.errors import ConfigurationError
from jzbench.errors import ParseError


class Parser(Protocol):
    """Capability interface for the routine under test."""

    name: str

    def parse(self, data: bytes) -> Any:
        """Parses bytes into a value, raising ParseError on malformed input."""
        ...


@dataclass(frozen=True)
class LibraryParser:
    """
    Adapts a library ``loads`` function to the Parser interface.

    Any ValueError the library raises (decode errors, invalid UTF-8) is
    re-raised as ParseError, and so is RecursionError from documents nested
    deeper than the library can follow.
    """

    name: str
    loads: Callable[[bytes], Any]

    def parse(self, data: bytes) -> Any:
        try:
            return self.loads(data)
        except (ValueError, RecursionError) as e:
            raise ParseError(str(e), self.name) from e


_BACKENDS: dict[str, Callable[[bytes], Any]] = {
    "stdlib": json.loads,
    "orjson": orjson.loads,
    "ujson": ujson.loads,
}

DEFAULT_PARSER = "stdlib"


def available_parsers() -> list[str]:
    """Returns the registered backend names in sorted order."""
    return sorted(_BACKENDS)


def get_parser(name: str) -> Parser:
    """
    Looks up a registered backend by name.

    Raises:
        ConfigurationError: if no backend is registered under ``name``
    """
    try:
        loads = _BACKENDS[name]
    except KeyError:
        choices = ", ".join(available_parsers())
        raise ConfigurationError(
            f"Unknown parser {name!r} (choose from {choices})"
        ) from None
    return LibraryParser(name, loads)
