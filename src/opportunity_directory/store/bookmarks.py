"""SQLite-backed bookmark rows, unique per (user_id, opportunity_id)."""

import sqlite3

from opportunity_directory.errors import NotFound
from opportunity_directory.models.bookmark import Bookmark

from .sqlite_base import SqliteDatabase, utc_now


class BookmarkRepository(SqliteDatabase):
    """Bookmarks are inserted or deleted, never updated."""

    def add(self, user_id: str, opportunity_id: str) -> bool:
        """
        Insert the pair; returns False if it already existed.
        The primary key makes concurrent double-adds collapse to one row.
        """
        try:
            with self._connection() as conn:
                cursor = conn.execute(
                    "INSERT OR IGNORE INTO bookmarks (user_id, opportunity_id, created_at) VALUES (?, ?, ?)",
                    (user_id, opportunity_id, utc_now()),
                )
                created = cursor.rowcount > 0
        except sqlite3.IntegrityError as e:
            # Foreign key: unknown user or opportunity.
            raise NotFound() from e
        return created

    def remove(self, user_id: str, opportunity_id: str) -> bool:
        """Delete the pair; returns False if there was nothing to delete."""
        with self._connection() as conn:
            cursor = conn.execute(
                "DELETE FROM bookmarks WHERE user_id = ? AND opportunity_id = ?",
                (user_id, opportunity_id),
            )
            removed = cursor.rowcount > 0
        return removed

    def exists(self, user_id: str, opportunity_id: str) -> bool:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT 1 FROM bookmarks WHERE user_id = ? AND opportunity_id = ?",
                (user_id, opportunity_id),
            ).fetchone()
        return row is not None

    def get_for_user(self, user_id: str) -> list[Bookmark]:
        """The user's bookmarks, most recent first."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM bookmarks WHERE user_id = ? ORDER BY created_at DESC, opportunity_id ASC",
                (user_id,),
            ).fetchall()
        return [Bookmark.model_validate(dict(r)) for r in rows]

    def list_ids(self, user_id: str) -> set[str]:
        """Opportunity ids bookmarked by the user."""
        return {b.opportunity_id for b in self.get_for_user(user_id)}

    def count(self) -> int:
        with self._connection() as conn:
            row = conn.execute("SELECT COUNT(*) AS n FROM bookmarks").fetchone()
        return int(row["n"])
