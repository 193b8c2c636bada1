"""SQLite connection with transaction support."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator

from gl_members.errors import StoreError
from gl_members.store.schema import SCHEMA_DDL

logger = logging.getLogger("gl-members")


class Database:
    """
    SQLite database wrapper.

    Every mutation goes through ``transaction()``, which commits on success
    and rolls back on failure, so multi-row writes are never half applied.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._conn: sqlite3.Connection | None = None

    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            try:
                self._conn = sqlite3.connect(str(self.path), check_same_thread=False)
            except sqlite3.Error as e:
                raise StoreError(f"cannot open database {self.path}: {e}") from e
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
        return self._conn

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def init(self) -> None:
        """Create all tables (idempotent)."""
        logger.debug(f"Initializing database at {self.path}")
        conn = self.connection()
        try:
            conn.executescript(SCHEMA_DDL)
            conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"cannot initialize database {self.path}: {e}") from e

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        conn = self.connection()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(str(e)) from e
        except Exception:
            conn.rollback()
            raise

    def fetchone(self, sql: str, params: tuple = ()) -> dict[str, Any] | None:
        try:
            row = self.connection().execute(sql, params).fetchone()
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        return dict(row) if row else None

    def fetchall(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        try:
            rows = self.connection().execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        return [dict(r) for r in rows]
