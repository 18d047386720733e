"""SQLite-backed profile rows."""

import logging
import sqlite3
from typing import Optional

from opportunity_directory.errors import ProfileNotFound
from opportunity_directory.models.profile import Profile, Role

from .sqlite_base import SqliteDatabase, utc_now

logger = logging.getLogger(__name__)


class ProfileRepository(SqliteDatabase):
    """One profile per identity, created at first sign-in."""

    def _deserialize(self, row: sqlite3.Row) -> Profile:
        return Profile.model_validate(dict(row))

    def get(self, user_id: str) -> Optional[Profile]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM profiles WHERE user_id = ?", (user_id,)).fetchone()
        return self._deserialize(row) if row else None

    def ensure(
        self,
        user_id: str,
        *,
        full_name: str = "",
        email: str = "",
        school: Optional[str] = None,
        grade: Optional[str] = None,
    ) -> Profile:
        """
        Create the profile if missing and return it. An existing profile is
        left untouched, role included.
        """
        now = utc_now()
        with self._connection() as conn:
            cursor = conn.execute(
                """
                INSERT OR IGNORE INTO profiles
                (user_id, full_name, email, role, school, grade, created_at, updated_at)
                VALUES (?, ?, ?, 'student', ?, ?, ?, ?)
                """,
                (user_id, full_name, email, school, grade, now, now),
            )
            if cursor.rowcount:
                logger.info("Created profile for %s", user_id)
            row = conn.execute("SELECT * FROM profiles WHERE user_id = ?", (user_id,)).fetchone()
        return self._deserialize(row)

    def set_role(self, user_id: str, role: Role) -> Profile:
        """Out-of-band role change (operator action, not part of the moderation surface)."""
        with self._connection() as conn:
            cursor = conn.execute(
                "UPDATE profiles SET role = ?, updated_at = ? WHERE user_id = ?",
                (role.value, utc_now(), user_id),
            )
            if cursor.rowcount == 0:
                raise ProfileNotFound()
            row = conn.execute("SELECT * FROM profiles WHERE user_id = ?", (user_id,)).fetchone()
        logger.info("Set role of %s to %s", user_id, role.value)
        return self._deserialize(row)

    def is_admin(self, user_id: Optional[str]) -> bool:
        with self._connection() as conn:
            return self._is_admin(conn, user_id)
