from __future__ import annotations

from pathlib import Path

import pytest

from utils.file_utils import FileMissingError, FileUtils, UnsupportedFileFormatError


def test_resolve_path_expands_environment_and_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("RESOLVER_DATA", str(tmp_path))
    monkeypatch.setenv("HOME", str(tmp_path))

    assert FileUtils.resolve_path("$RESOLVER_DATA/memory.db") == tmp_path.resolve() / "memory.db"
    assert FileUtils.resolve_path("~/memory.db") == tmp_path.resolve() / "memory.db"


def test_resolve_path_makes_relative_paths_absolute(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)

    assert FileUtils.resolve_path("data/memory.db") == tmp_path.resolve() / "data" / "memory.db"


def test_validate_file_path(tmp_path: Path) -> None:
    json_file: Path = tmp_path / "tables.JSON"
    json_file.write_text("{}", encoding="utf-8")

    FileUtils.validate_file_path(json_file, [".json", ".jsonl"])

    with pytest.raises(UnsupportedFileFormatError, match="Supported formats"):
        FileUtils.validate_file_path(json_file, ".ini")
    with pytest.raises(FileMissingError):
        FileUtils.validate_file_path(tmp_path / "missing.json", ".json")


def test_ensure_parent_creates_missing_directories(tmp_path: Path) -> None:
    db_path: Path = tmp_path / "nested" / "state" / "memory.db"

    assert FileUtils.ensure_parent(db_path) == db_path
    assert db_path.parent.is_dir()
    assert not db_path.exists()


def test_ensure_parent_leaves_bare_names_alone(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)

    assert FileUtils.ensure_parent(Path(":memory:")) == Path(":memory:")
    assert list(tmp_path.iterdir()) == []
