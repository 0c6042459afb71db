"""SQLite connection management with WAL mode."""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from divtrack.config.logging import get_logger
from divtrack.db.schema import ALL_CREATE_STATEMENTS, SCHEMA_VERSION

logger = get_logger()


class Database:
    """SQLite database connection manager with thread safety."""

    def __init__(self, db_path: Path) -> None:
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._connection: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def connect(self) -> None:
        """Open database connection and initialize schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._connection = sqlite3.connect(
            str(self.db_path),
            check_same_thread=False,
            isolation_level=None,  # Autocommit mode for WAL
        )
        self._connection.row_factory = sqlite3.Row

        self._connection.execute("PRAGMA journal_mode=WAL")
        self._connection.execute("PRAGMA synchronous=NORMAL")
        self._connection.execute("PRAGMA foreign_keys=ON")
        # Wait for locks held by other processes instead of failing immediately
        self._connection.execute("PRAGMA busy_timeout=30000")

        self._init_schema()

    def _init_schema(self) -> None:
        """Create tables if they don't exist."""
        cursor = self._connection.cursor()
        for statement in ALL_CREATE_STATEMENTS:
            cursor.execute(statement)

        self._run_migrations(cursor)

        cursor.execute(
            "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
            ("schema_version", str(SCHEMA_VERSION)),
        )

    def _run_migrations(self, cursor: sqlite3.Cursor) -> None:
        """
        Add columns that databases created by older versions lack.

        - snapshots.stacked_deck_chaos_cost (deck price at snapshot time)
        - snapshot_card_prices.confidence
        - session_summaries net profit and deck cost columns (nullable:
          old summaries never had them, so they fall back to live values)
        """
        additions = {
            "snapshots": [("stacked_deck_chaos_cost", "REAL NOT NULL DEFAULT 0")],
            "snapshot_card_prices": [("confidence", "INTEGER NOT NULL DEFAULT 1")],
            "session_summaries": [
                ("stacked_deck_chaos_cost", "REAL"),
                ("total_exchange_net_profit", "REAL"),
                ("total_stash_net_profit", "REAL"),
            ],
        }

        for table, columns in additions.items():
            cursor.execute(f"PRAGMA table_info({table})")
            existing = {row[1] for row in cursor.fetchall()}
            for col_name, col_def in columns:
                if col_name not in existing:
                    cursor.execute(f"ALTER TABLE {table} ADD COLUMN {col_name} {col_def}")
                    logger.info(f"Migration: Added {col_name} column to {table} table")

    def close(self) -> None:
        """Close database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the database connection."""
        if self._connection is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._connection

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Cursor, None, None]:
        """
        Context manager for database transactions.

        Usage:
            with db.transaction() as cursor:
                cursor.execute(...)

        Automatically commits on success, rolls back on exception.
        """
        with self._lock:
            cursor = self.connection.cursor()
            cursor.execute("BEGIN")
            try:
                yield cursor
                cursor.execute("COMMIT")
            except Exception:
                cursor.execute("ROLLBACK")
                raise

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute a single SQL statement."""
        with self._lock:
            return self.connection.execute(sql, params)

    def fetchone(self, sql: str, params: tuple = ()) -> sqlite3.Row | None:
        """Execute SQL and fetch one row."""
        with self._lock:
            cursor = self.connection.execute(sql, params)
            return cursor.fetchone()

    def fetchall(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        """Execute SQL and fetch all rows."""
        with self._lock:
            cursor = self.connection.execute(sql, params)
            return cursor.fetchall()
