"""
Synthetic JSON fixtures for the benchmark.

Covers the input shapes the harness is meant to compare:
- small hand-sized documents (simple, array, nested, complex)
- unicode and escape-sequence edge cases
- flat arrays, wide objects and deep nesting at larger sizes
- a real-world-shaped API response

Every generator draws from a seeded ``random.Random`` and a fixed base time,
so a given seed always produces byte-identical files.
"""

import json
import random
import string
from collections.abc import Callable
from datetime import UTC
from datetime import datetime
from datetime import timedelta
from pathlib import Path
from typing import Any

DEFAULT_SEED = 1729
_BASE_TIME = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
_ESCAPE_PROBABILITY = 0.3
_ESCAPABLE = ['"', "\\", "/", "\b", "\f", "\n", "\r", "\t"]

Generator = Callable[[random.Random], Any]


def _random_string(rng: random.Random, length: int) -> str:
    return "".join(rng.choices(string.ascii_letters, k=length))


def _timestamp(rng: random.Random, max_seconds: int) -> str:
    moment = _BASE_TIME - timedelta(seconds=rng.randint(0, max_seconds))
    return moment.isoformat().replace("+00:00", "Z")


def _uuid(rng: random.Random) -> str:
    return f"{_random_string(rng, 9).lower()}-{rng.randint(10**12, 10**13)}"


def _simple(rng: random.Random) -> Any:
    return {
        "id": 12345,
        "name": "Alice Johnson",
        "email": "alice@example.com",
        "active": True,
        "balance": 1234.56,
        "metadata": {"created": "2024-01-15T10:30:00Z", "source": "api"},
    }


def _array(rng: random.Random) -> Any:
    return [rng.randint(-1000, 1000) for _ in range(50)]


def _nested(rng: random.Random) -> Any:
    def level(depth: int) -> dict[str, Any]:
        if depth <= 0:
            return {"value": _random_string(rng, 10)}
        return {
            "level": depth,
            "data": _random_string(rng, 15),
            "nested": level(depth - 1),
        }

    return level(5)


def _complex(rng: random.Random) -> Any:
    return [
        {
            "string": "Hello World",
            "integer": 42,
            "float": 3.14159,
            "boolean": True,
            "null": None,
            "array": [1, 2, 3, 4, 5],
            "object": {"nested": "value"},
        }
        for _ in range(5)
    ]


def _escaped_string(rng: random.Random) -> str:
    chars = []
    for _ in range(50):
        if rng.random() < _ESCAPE_PROBABILITY:
            chars.append(rng.choice(_ESCAPABLE))
        else:
            chars.append(rng.choice(string.ascii_letters + string.digits + " "))
    return "".join(chars)


def _edge_cases(rng: random.Random) -> Any:
    return {
        "escapes": [_escaped_string(rng) for _ in range(5)],
        "unicode": [
            "caf\u00e9",
            "\u65e5\u672c\u8a9e",
            "\u0645\u0631\u062d\u0628\u0627",
            "\U0001f600",
        ],
        "control": "\u0001\u001f",
        "empty_string": "",
        "empty_array": [],
        "empty_object": {},
        "numbers": [0, -0.0, 1e308, -1e-308, 2**53 + 1, -123456789012],
        "literals": [True, False, None],
        "path": "C:\\Users\\bench\\file.txt",
    }


def _user(i: int, rng: random.Random) -> dict[str, Any]:
    return {
        "id": i,
        "name": f"User {i}",
        "email": f"user{i}@example.com",
        "active": i % 2 == 0,
        "score": round(rng.uniform(0, 100), 6),
        "tags": ["tag1", "tag2", "tag3"],
    }


def _large_array(rng: random.Random, size: int = 1000) -> Any:
    return [_user(i, rng) for i in range(size)]


def _large_object(rng: random.Random, size: int = 500) -> Any:
    return {
        "metadata": {
            "version": "1.0",
            "timestamp": 1705314600000,
            "count": size,
        },
        "data": {
            f"key_{i}": {
                "value": i,
                "label": f"Label {i}",
                "nested": {"a": i * 2, "b": i * 3, "c": f"String {i}"},
            }
            for i in range(size)
        },
    }


def _deeply_nested(rng: random.Random, depth: int = 50) -> Any:
    root: dict[str, Any] = {"value": "deep", "data": [1, 2, 3]}
    current = root
    for i in range(depth):
        current["nested"] = {
            "level": i,
            "name": f"Level {i}",
            "items": [i, i + 1, i + 2],
            "metadata": {"id": i},
        }
        current = current["nested"]
    return root


def _xl_array(rng: random.Random, size: int = 10000) -> Any:
    return [
        {
            "id": i,
            "uuid": _uuid(rng),
            "name": f"Item {i}",
            "description": (
                f"This is a longer description for item {i}"
                " with more text to increase file size"
            ),
            "created_at": _timestamp(rng, 10_000_000),
            "active": i % 3 != 0,
            "priority": rng.randint(1, 5),
            "metadata": {
                "views": rng.randint(0, 999),
                "likes": rng.randint(0, 99),
                "tags": [f"tag{i % 10}", f"category{i % 5}", f"type{i % 3}"],
            },
            "scores": [round(rng.uniform(0, 100), 6) for _ in range(3)],
        }
        for i in range(size)
    ]


def _real_world_api(rng: random.Random) -> Any:
    posts = [
        {
            "id": i,
            "title": f"Post {i}",
            "content": f"This is the content of post {i}. " * 5,
            "author_id": rng.randint(0, 199),
            "created_at": _timestamp(rng, 10_000_000),
            "likes": rng.randint(0, 499),
            "comments": [
                {
                    "id": j,
                    "user_id": rng.randint(0, 199),
                    "text": f"Comment {j} on post {i}",
                    "timestamp": _timestamp(rng, 1_000_000),
                }
                for j in range(rng.randint(0, 19))
            ],
        }
        for i in range(100)
    ]
    return {
        "status": "success",
        "timestamp": _BASE_TIME.isoformat().replace("+00:00", "Z"),
        "api_version": "2.1.0",
        "request_id": _random_string(rng, 16).lower(),
        "data": {
            "users": _large_array(rng, 200),
            "posts": posts,
            "statistics": {
                "total_users": 200,
                "total_posts": 100,
                "active_today": rng.randint(0, 199),
                "engagement_rate": round(rng.uniform(0, 100), 4),
            },
        },
        "meta": {
            "page": 1,
            "per_page": 100,
            "total_pages": 10,
            "has_more": True,
        },
    }


GENERATORS: dict[str, Generator] = {
    "simple.json": _simple,
    "array.json": _array,
    "nested.json": _nested,
    "complex.json": _complex,
    "edge_cases.json": _edge_cases,
    "large_array.json": _large_array,
    "large_object.json": _large_object,
    "deeply_nested.json": _deeply_nested,
    "xl_array.json": _xl_array,
    "real_world_api.json": _real_world_api,
}


def generate_test_data(name: str, seed: int = DEFAULT_SEED) -> str:
    """
    Renders one named fixture as indented JSON text.

    Raises:
        ValueError: if ``name`` is not a known fixture
    """
    if name not in GENERATORS:
        raise ValueError(f"Unknown data type: {name}")
    rng = random.Random(f"{seed}:{name}")
    return json.dumps(GENERATORS[name](rng), indent=2, ensure_ascii=False)


def write_dataset(out_dir: Path, seed: int = DEFAULT_SEED) -> list[Path]:
    """
    Writes every fixture into ``out_dir``, creating it if needed.

    Returns:
        Paths written, in name order
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for name in sorted(GENERATORS):
        path = out_dir / name
        path.write_text(generate_test_data(name, seed), encoding="utf-8")
        written.append(path)
    return written
