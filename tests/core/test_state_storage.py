from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING

import pytest

from core.state_storage import StateStorage

if TYPE_CHECKING:
    from pathlib import Path


def test_empty_path_is_rejected() -> None:
    with pytest.raises(RuntimeError, match="empty"):
        StateStorage("  ")


def test_save_and_load_round_trip_json_values(tmp_path: Path) -> None:
    with StateStorage(tmp_path / "state.db") as storage:
        assert storage.save("offline_mode", True) is True
        assert storage.save("meta", {"providers": ["deepl", "libre"]}) is True

        assert storage.load("offline_mode") is True
        assert storage.load("meta") == {"providers": ["deepl", "libre"]}
        assert storage.load("missing", default="fallback") == "fallback"


def test_values_persist_across_connections(tmp_path: Path) -> None:
    db_path: Path = tmp_path / "nested" / "state.db"
    first = StateStorage(db_path)
    first.save("offline_mode", True)
    first.close()

    second = StateStorage(db_path)

    assert second.load("offline_mode", default=False) is True
    second.close()


def test_delete_removes_value(tmp_path: Path) -> None:
    with StateStorage(tmp_path / "state.db") as storage:
        storage.save("key", 1)

        assert storage.delete("key") is True
        assert storage.load("key") is None


def test_unserialisable_value_is_refused(tmp_path: Path) -> None:
    with StateStorage(tmp_path / "state.db") as storage:
        assert storage.save("key", object()) is False


def test_corrupt_value_returns_default(tmp_path: Path) -> None:
    with StateStorage(tmp_path / "state.db") as storage:
        storage.connection.execute("INSERT INTO engine_state (key, value) VALUES (?, ?)", ("key", "{not json"))

        assert storage.load("key", default=False) is False


def test_database_errors_are_reported(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    storage = StateStorage(tmp_path / "state.db")
    storage.connection.execute("DROP TABLE engine_state")

    assert storage.load("key", default="x") == "x"
    assert storage.save("key", 1) is False
    assert storage.delete("key") is False
    assert "no such table" in caplog.text
    storage.close()


def test_close_is_idempotent(tmp_path: Path) -> None:
    storage = StateStorage(tmp_path / "state.db")
    connection: sqlite3.Connection = storage.connection

    storage.close()
    storage.close()

    with pytest.raises(sqlite3.ProgrammingError):
        connection.execute("SELECT 1")
