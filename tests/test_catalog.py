"""
Dataset catalog tests.
"""

from pathlib import Path

import pytest

from jzbench import ConfigurationError
from jzbench import DatasetCatalog
from jzbench import Payload
from jzbench import PayloadError


def test_lists_json_files_in_name_order(dataset_dir: Path) -> None:
    """
    Validates non-JSON files are ignored and order is by file name.
    """
    (dataset_dir / "subdir.json").mkdir()

    names = [p.name for p in DatasetCatalog(dataset_dir).paths()]

    assert names == ["array.json", "broken.json", "object.json", "unicode.json"]


def test_load_keeps_raw_bytes(dataset_dir: Path) -> None:
    payloads, errors = DatasetCatalog(dataset_dir).load()

    assert errors == []
    unicode = payloads[-1]
    assert unicode.name == "unicode.json"
    assert unicode.data == '["café", "日本"]'.encode()
    assert unicode.size_bytes == len(unicode.data)


def test_missing_directory_is_fatal(tmp_path: Path) -> None:
    missing = tmp_path / "nope"
    with pytest.raises(ConfigurationError) as excinfo:
        DatasetCatalog(missing).paths()
    assert excinfo.value.path == missing
    assert "does not exist" in str(excinfo.value)


def test_file_instead_of_directory_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    path.write_text("[]")
    with pytest.raises(ConfigurationError):
        DatasetCatalog(path).load()


def test_unreadable_payload_is_reported_not_fatal(
    dataset_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """
    Validates a file that cannot be read is skipped with a PayloadError.
    """
    real_read = DatasetCatalog.read

    def read(path: Path) -> Payload:
        if path.name == "object.json":
            raise PayloadError(path.name, "unreadable (permission denied)")
        return real_read(path)

    monkeypatch.setattr(DatasetCatalog, "read", staticmethod(read))

    payloads, errors = DatasetCatalog(dataset_dir).load()

    assert [p.name for p in payloads] == [
        "array.json",
        "broken.json",
        "unicode.json",
    ]
    assert [e.name for e in errors] == ["object.json"]


def test_read_missing_file_raises_payload_error(tmp_path: Path) -> None:
    with pytest.raises(PayloadError) as excinfo:
        DatasetCatalog.read(tmp_path / "gone.json")
    assert excinfo.value.name == "gone.json"


def test_empty_directory_yields_nothing(tmp_path: Path) -> None:
    assert DatasetCatalog(tmp_path).load() == ([], [])
