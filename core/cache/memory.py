# ruff: noqa: BLE001
"""Translation memory.

Persists approved, high-confidence translations in a SQLite database (WAL mode) so they survive
restarts. Entries are keyed by the same ``source:target:text`` key as the LRU cache and are only
removed by an explicit delete or clear.
"""

from __future__ import annotations

import asyncio
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Final

from models.cache_models import MemoryEntry, MemoryStatistics
from models.translation_models import ConfidenceLevel
from utils.file_utils import FileUtils
from utils.logger_utils import LoggerUtils
from utils.string_utils import KEY_SEPARATOR, StringUtils

if TYPE_CHECKING:
    import logging

__all__: list[str] = ["TranslationMemory"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

TRANSLATION_MEMORY_DB_PATH: Final[Path] = Path("translation_memory.db")


class TranslationMemory:
    """SQLite-backed store of promoted translations.

    Every database call runs under an ``asyncio.Lock``. Database errors are logged and reported as a
    miss or a False return; nothing is raised into the resolution path.

    Attributes:
        DB_SCHEMA_VERSION (ClassVar[int]): Memory database schema version.
    """

    DB_SCHEMA_VERSION: ClassVar[int] = 1

    def __init__(self, db_path: str | Path = TRANSLATION_MEMORY_DB_PATH) -> None:
        """Initialize the translation memory.

        Args:
            db_path (str | Path): SQLite database file.
        """
        self._db_path: Path = Path(db_path)
        self._db_conn: sqlite3.Connection | None = None
        self._is_initialized: bool = False
        self._lock: asyncio.Lock = asyncio.Lock()
        logger.debug("TranslationMemory instance created (%s)", self._db_path)

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    @property
    def db_path(self) -> Path:
        return self._db_path

    async def component_load(self) -> None:
        """Open the database connection and create the schema."""
        logger.info("TranslationMemory initialization started")
        try:
            async with self._lock:
                self._initialize_database()
            self._is_initialized = True
            logger.info("TranslationMemory initialized successfully")
        except Exception as err:
            logger.critical("Failed to initialize TranslationMemory: %s", err)
            self._is_initialized = False

    async def component_teardown(self) -> None:
        """Close the database connection."""
        logger.info("TranslationMemory shutdown started")
        async with self._lock:
            if self._db_conn is not None:
                try:
                    self._db_conn.close()
                    logger.info("Database connection closed")
                except sqlite3.Error as err:
                    logger.error("Error closing database connection: %s", err)
                self._db_conn = None
        self._is_initialized = False
        logger.info("TranslationMemory shutdown completed")

    def _initialize_database(self) -> None:
        try:
            self._db_conn = sqlite3.connect(str(FileUtils.ensure_parent(self._db_path)), check_same_thread=False)
            self._db_conn.execute("PRAGMA journal_mode=WAL")

            self._db_conn.execute(
                """
                CREATE TABLE IF NOT EXISTS translation_memory (
                    cache_key TEXT PRIMARY KEY,
                    source_text TEXT NOT NULL,
                    source_lang TEXT NOT NULL,
                    target_lang TEXT NOT NULL,
                    translation_text TEXT NOT NULL,
                    confidence TEXT NOT NULL,
                    updated_at INTEGER NOT NULL
                )
                """
            )
            self._db_conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_memory_pair ON translation_memory(source_lang, target_lang)"
            )

            self._db_conn.execute(
                """
                CREATE TABLE IF NOT EXISTS memory_metadata (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            self._db_conn.execute(
                "INSERT OR IGNORE INTO memory_metadata (key, value) VALUES (?, ?)",
                ("schema_version", str(self.DB_SCHEMA_VERSION)),
            )
            row = self._db_conn.execute(
                "SELECT value FROM memory_metadata WHERE key = ?", ("schema_version",)
            ).fetchone()
            if row is not None and row[0] != str(self.DB_SCHEMA_VERSION):
                logger.warning(
                    "Memory DB schema version mismatch (db: %s, expected: %s)", row[0], self.DB_SCHEMA_VERSION
                )

            self._db_conn.commit()
            logger.info("Memory database initialized with WAL mode")
        except (sqlite3.Error, OSError) as err:
            msg: str = f"Memory database initialization failed: {err}"
            logger.critical(msg)
            raise RuntimeError(msg) from err

    @staticmethod
    def _now_epoch() -> int:
        return int(datetime.now().astimezone().timestamp())

    @staticmethod
    def _epoch_to_datetime(value: int | str) -> datetime:
        return datetime.fromtimestamp(int(value), tz=UTC).astimezone()

    def _row_to_entry(self, row: tuple) -> MemoryEntry:
        return MemoryEntry(
            cache_key=row[0],
            source_text=row[1],
            source_language=row[2],
            target_language=row[3],
            translation=row[4],
            confidence=ConfidenceLevel.parse(row[5]),
            timestamp=self._epoch_to_datetime(row[6]),
        )

    async def lookup(self, key: str) -> MemoryEntry | None:
        """Return the memory entry for ``key``, or None on a miss or a database error."""
        if not self._is_initialized or self._db_conn is None:
            return None

        try:
            async with self._lock:
                row = self._db_conn.execute(
                    """
                    SELECT cache_key, source_text, source_lang, target_lang,
                           translation_text, confidence, updated_at
                    FROM translation_memory
                    WHERE cache_key = ?
                    """,
                    (key,),
                ).fetchone()
        except sqlite3.Error as err:
            logger.error("Error searching translation memory: %s", err)
            return None

        if row is None:
            logger.debug("Memory miss for key: %s", key[:32])
            return None
        logger.debug("Memory hit for key: %s", key[:32])
        return self._row_to_entry(row)

    async def promote(self, key: str, translation: str, confidence: ConfidenceLevel) -> bool:
        """Insert or overwrite the entry for ``key``.

        Repeating the call with the same arguments leaves one entry whose timestamp is refreshed.

        Args:
            key (str): ``source:target:text`` key.
            translation (str): Approved translation.
            confidence (ConfidenceLevel): Confidence to record.

        Returns:
            bool: True if the entry was written.
        """
        if not self._is_initialized or self._db_conn is None:
            return False

        try:
            source_lang, target_lang, source_text = StringUtils.split_cache_key(key)
        except ValueError as err:
            logger.error("Cannot promote to memory: %s", err)
            return False

        try:
            async with self._lock:
                self._db_conn.execute(
                    """
                    INSERT OR REPLACE INTO translation_memory
                    (cache_key, source_text, source_lang, target_lang,
                     translation_text, confidence, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        key,
                        source_text,
                        source_lang,
                        target_lang,
                        translation,
                        ConfidenceLevel.parse(confidence).value,
                        self._now_epoch(),
                    ),
                )
                self._db_conn.commit()
        except sqlite3.Error as err:
            logger.error("Error promoting translation to memory: %s", err)
            return False

        logger.debug("Promoted to memory: %s", key[:32])
        return True

    async def delete(self, key: str) -> bool:
        """Remove one entry. Returns True if a row was deleted."""
        if not self._is_initialized or self._db_conn is None:
            return False

        try:
            async with self._lock:
                cursor: sqlite3.Cursor = self._db_conn.execute(
                    "DELETE FROM translation_memory WHERE cache_key = ?", (key,)
                )
                self._db_conn.commit()
        except sqlite3.Error as err:
            logger.error("Error deleting memory entry: %s", err)
            return False
        return cursor.rowcount > 0

    async def clear(self) -> bool:
        """Remove every entry."""
        if not self._is_initialized or self._db_conn is None:
            return False

        try:
            async with self._lock:
                cursor: sqlite3.Cursor = self._db_conn.execute("DELETE FROM translation_memory")
                self._db_conn.commit()
        except sqlite3.Error as err:
            logger.error("Error clearing translation memory: %s", err)
            return False
        logger.info("Deleted %d translation memory entries", cursor.rowcount)
        return True

    async def get_statistics(self) -> MemoryStatistics:
        """Get memory statistics.

        Returns:
            MemoryStatistics: Entry counts per language pair and confidence, plus the age range.
        """
        if not self._is_initialized or self._db_conn is None:
            return MemoryStatistics()

        try:
            async with self._lock:
                total_entries: int = self._db_conn.execute("SELECT COUNT(*) FROM translation_memory").fetchone()[0]
                pair_rows = self._db_conn.execute(
                    "SELECT source_lang, target_lang, COUNT(*) FROM translation_memory "
                    "GROUP BY source_lang, target_lang"
                ).fetchall()
                confidence_rows = self._db_conn.execute(
                    "SELECT confidence, COUNT(*) FROM translation_memory GROUP BY confidence"
                ).fetchall()
                age_row = self._db_conn.execute(
                    "SELECT MIN(updated_at), MAX(updated_at) FROM translation_memory"
                ).fetchone()
        except sqlite3.Error as err:
            logger.error("Error getting memory statistics: %s", err)
            return MemoryStatistics()

        return MemoryStatistics(
            total_entries=total_entries or 0,
            language_pair_distribution={f"{src}{KEY_SEPARATOR}{tgt}": count for src, tgt, count in pair_rows},
            confidence_distribution={row[0]: row[1] for row in confidence_rows},
            oldest_entry=self._epoch_to_datetime(age_row[0]) if age_row[0] is not None else None,
            newest_entry=self._epoch_to_datetime(age_row[1]) if age_row[1] is not None else None,
        )

    async def export_entries(self, output_path: Path) -> int:
        """Write every entry to ``output_path`` as JSON lines.

        Args:
            output_path (Path): Destination file; overwritten.

        Returns:
            int: Number of exported entries, or -1 on failure.
        """
        if not self._is_initialized or self._db_conn is None:
            logger.error("Memory not initialized, cannot export")
            return -1

        try:
            async with self._lock:
                rows = self._db_conn.execute(
                    """
                    SELECT cache_key, source_text, source_lang, target_lang,
                           translation_text, confidence, updated_at
                    FROM translation_memory
                    ORDER BY updated_at DESC
                    """
                ).fetchall()

            with FileUtils.ensure_parent(output_path).open("w", encoding="utf-8") as f:
                for row in rows:
                    f.write(self._row_to_entry(row).to_json(ensure_ascii=False))
                    f.write("\n")
        except (sqlite3.Error, OSError) as err:
            logger.error("Error exporting translation memory: %s", err)
            return -1

        logger.info("Exported %d memory entries to: %s", len(rows), output_path)
        return len(rows)

    async def import_entries(self, input_path: Path) -> int:
        """Load JSON-lines entries written by ``export_entries``.

        Existing keys are overwritten; malformed lines are skipped with a warning.

        Returns:
            int: Number of imported entries, or -1 on failure.
        """
        if not self._is_initialized or self._db_conn is None:
            logger.error("Memory not initialized, cannot import")
            return -1

        entries: list[MemoryEntry] = []
        try:
            with input_path.open(encoding="utf-8") as f:
                for line_no, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    try:
                        entries.append(MemoryEntry.from_json(line))
                    except (ValueError, KeyError, TypeError) as err:
                        logger.warning("Skipping malformed memory line %d: %s", line_no, err)
        except OSError as err:
            logger.error("Error reading memory import file: %s", err)
            return -1

        try:
            async with self._lock:
                self._db_conn.executemany(
                    """
                    INSERT OR REPLACE INTO translation_memory
                    (cache_key, source_text, source_lang, target_lang,
                     translation_text, confidence, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            entry.cache_key,
                            entry.source_text,
                            entry.source_language,
                            entry.target_language,
                            entry.translation,
                            ConfidenceLevel.parse(entry.confidence).value,
                            int(entry.timestamp.timestamp()),
                        )
                        for entry in entries
                    ],
                )
                self._db_conn.commit()
        except sqlite3.Error as err:
            logger.error("Error importing translation memory: %s", err)
            return -1

        logger.info("Imported %d memory entries from: %s", len(entries), input_path)
        return len(entries)
