"""Engine state storage using SQLite3.

This module provides a small persistent key/value store for engine-wide state such as the offline
flag. Values are stored as JSON text.
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

from utils.file_utils import FileUtils
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging


__all__: list[str] = ["StateStorage"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class StateStorage:
    """SQLite3-based key/value storage for engine state.

    The connection is opened lazily in autocommit mode; every operation is a single statement.
    Database errors are logged and reported through the return value.

    Attributes:
        db_path (Path): Path to the SQLite database file.
    """

    def __init__(self, db_path: str | Path) -> None:
        """Initialize the StateStorage with the path to the database file.

        Args:
            db_path (str | Path): Path to the SQLite database file.

        Raises:
            RuntimeError: If the database path is empty.
        """
        if str(db_path).strip() == "":
            msg: str = "The database path is empty."
            raise RuntimeError(msg)

        self.db_path: Path = Path(db_path)
        self._connection: sqlite3.Connection | None = None
        logger.debug("State database path set to: %s", self.db_path)

    def __enter__(self) -> Self:
        self._initialize_database()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        self.close()

    def _initialize_database(self) -> None:
        self._connection = sqlite3.connect(
            str(FileUtils.ensure_parent(self.db_path)),
            check_same_thread=False,
            isolation_level=None,
        )
        self._connection.execute(
            """
            CREATE TABLE IF NOT EXISTS engine_state (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
        logger.debug("State database initialized successfully")

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the active database connection, opening it on first use."""
        if self._connection is None:
            self._initialize_database()
        if self._connection is None:
            msg: str = "State database connection could not be opened."
            raise RuntimeError(msg)
        return self._connection

    def load(self, key: str, default: Any = None) -> Any:
        """Load the value stored under ``key``.

        Args:
            key (str): State key.
            default (Any): Value returned when the key is missing or unreadable.

        Returns:
            Any: The decoded JSON value, or ``default``.
        """
        try:
            row = self.connection.execute("SELECT value FROM engine_state WHERE key = ?", (key,)).fetchone()
        except (sqlite3.Error, OSError) as err:
            logger.error("Failed to load state '%s': %s", key, err)
            return default

        if row is None:
            logger.debug("No state found for key: %s", key)
            return default

        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            logger.warning("Failed to parse stored state '%s'; using default", key)
            return default

    def save(self, key: str, value: Any) -> bool:
        """Store ``value`` (JSON-serialisable) under ``key``.

        Returns:
            bool: True if the value was written.
        """
        try:
            encoded: str = json.dumps(value)
        except (TypeError, ValueError) as err:
            logger.error("State '%s' is not JSON serialisable: %s", key, err)
            return False

        try:
            self.connection.execute(
                "INSERT OR REPLACE INTO engine_state (key, value) VALUES (?, ?)",
                (key, encoded),
            )
        except (sqlite3.Error, OSError) as err:
            logger.error("Failed to save state '%s': %s", key, err)
            return False

        logger.debug("Saved state for key: %s", key)
        return True

    def delete(self, key: str) -> bool:
        try:
            self.connection.execute("DELETE FROM engine_state WHERE key = ?", (key,))
        except (sqlite3.Error, OSError) as err:
            logger.error("Failed to delete state '%s': %s", key, err)
            return False
        logger.debug("Deleted state for key: %s", key)
        return True

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.debug("State database connection closed")
