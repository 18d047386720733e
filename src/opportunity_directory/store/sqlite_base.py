"""Shared SQLite plumbing: connections, schema, and the data-layer admin check."""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from opportunity_directory.errors import Forbidden, Transient, Unauthenticated

logger = logging.getLogger(__name__)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SqliteDatabase:
    """
    Base for the table stores. Every call opens its own connection with
    foreign keys enabled, commits on success and rolls back on error.
    Lock/open failures surface as Transient.
    """

    def __init__(self, db_path: str | Path = "opportunity_directory.db", *, timeout: float = 5.0):
        self._db_path = Path(db_path)
        self._timeout = timeout
        self._ensure_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self._db_path, timeout=self._timeout)
        except sqlite3.OperationalError as e:
            logger.warning("Cannot open database %s: %s", self._db_path, e)
            raise Transient() from e
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            with conn:
                yield conn
        except sqlite3.OperationalError as e:
            logger.warning("Database error on %s: %s", self._db_path, e)
            raise Transient() from e
        except (sqlite3.IntegrityError, sqlite3.ProgrammingError):
            # Constraint violations and misuse propagate unchanged.
            raise
        except sqlite3.DatabaseError as e:
            logger.warning("Unusable database %s: %s", self._db_path, e)
            raise Transient() from e
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        schema_path = Path(__file__).parent / "schema.sql"
        with self._connection() as conn:
            conn.executescript(schema_path.read_text())

    @staticmethod
    def _is_admin(conn: sqlite3.Connection, actor_id: Optional[str]) -> bool:
        """Row-level equivalent of the hosted ``is_admin()`` policy function."""
        if not actor_id:
            return False
        row = conn.execute("SELECT role FROM profiles WHERE user_id = ?", (actor_id,)).fetchone()
        return bool(row) and row["role"] == "admin"

    def _require_admin(self, conn: sqlite3.Connection, actor_id: Optional[str]) -> None:
        if not actor_id:
            raise Unauthenticated()
        if not self._is_admin(conn, actor_id):
            logger.warning("Data layer denied admin mutation for %s", actor_id)
            raise Forbidden()
