"""SQLite database service."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Generator

logger = structlog.get_logger(__name__)


class Database:
    """SQLite database service with schema management.

    Constructed by the host application and injected into repositories; the
    host owns the connection lifecycle.
    """

    def __init__(self, db_path: str = "data/logos.db") -> None:
        self.db_path = db_path
        self._ensure_directory()
        self._connection: sqlite3.Connection | None = None

    def _ensure_directory(self) -> None:
        """Ensure the parent directory of the database file exists."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(self.db_path)
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA journal_mode=WAL")
            self._connection.execute("PRAGMA foreign_keys=ON")
        return self._connection

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Cursor, None, None]:
        """Context manager for database transactions."""
        conn = self.connection
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def execute(self, sql: str, params: tuple[Any, ...] | dict[str, Any] = ()) -> sqlite3.Cursor:
        """Execute a single SQL statement."""
        return self.connection.execute(sql, params)

    def fetchone(
        self, sql: str, params: tuple[Any, ...] | dict[str, Any] = ()
    ) -> sqlite3.Row | None:
        """Execute and fetch one row."""
        cursor = self.execute(sql, params)
        return cursor.fetchone()

    def fetchall(
        self, sql: str, params: tuple[Any, ...] | dict[str, Any] = ()
    ) -> list[sqlite3.Row]:
        """Execute and fetch all rows."""
        cursor = self.execute(sql, params)
        return cursor.fetchall()

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def init_db(self) -> None:
        """Initialize database schema. Creates all tables and indexes."""
        logger.info("initializing_database", path=self.db_path)

        with self.transaction() as cursor:
            # UNIQUE(content_hash, owner_id) rejects the loser of two
            # concurrent identical uploads by the same owner.
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS logos (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT,
                    tags TEXT,
                    file_name TEXT NOT NULL,
                    content_type TEXT NOT NULL,
                    file_size INTEGER NOT NULL,
                    width INTEGER NOT NULL,
                    height INTEGER NOT NULL,
                    content_hash TEXT NOT NULL,
                    image_features TEXT NOT NULL,
                    file_data BLOB NOT NULL,
                    created_at TEXT NOT NULL,
                    UNIQUE(content_hash, owner_id)
                )
            """)
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_logos_owner_id ON logos(owner_id)"
            )
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_logos_content_hash ON logos(content_hash)"
            )

        logger.info("database_initialized", path=self.db_path)
