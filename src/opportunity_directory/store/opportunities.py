"""SQLite-backed opportunity rows with data-layer role enforcement."""

import logging
import sqlite3
from typing import Any, Optional

from opportunity_directory.errors import Forbidden, Unauthenticated
from opportunity_directory.models.opportunity import (
    Opportunity,
    OpportunityFields,
    OpportunityStatus,
)

from .sqlite_base import SqliteDatabase, utc_now

logger = logging.getLogger(__name__)

_EDITABLE_COLUMNS = frozenset(OpportunityFields.model_fields)
_INSERT_COLUMNS = tuple(Opportunity.model_fields)


class OpportunityRepository(SqliteDatabase):
    """
    Row storage for opportunities.

    Mirrors the hosted row-level policies: anyone authenticated may insert their
    own pending row; every other write requires an admin actor. Services check
    roles too, but this layer never trusts them to.
    """

    def _serialize(self, opp: Opportunity) -> dict[str, Any]:
        return opp.model_dump(mode="json")

    def _deserialize(self, row: sqlite3.Row) -> Opportunity:
        return Opportunity.model_validate(dict(row))

    def insert(self, actor_id: Optional[str], opp: Opportunity) -> Opportunity:
        """Insert a new row; created_at/updated_at are assigned here."""
        now = utc_now()
        data = self._serialize(opp)
        data["created_at"] = now
        data["updated_at"] = now

        with self._connection() as conn:
            if opp.status == OpportunityStatus.PENDING:
                if not actor_id:
                    raise Unauthenticated()
                if opp.submitted_by != actor_id:
                    raise Forbidden()
            else:
                self._require_admin(conn, actor_id)

            placeholders = ", ".join("?" for _ in _INSERT_COLUMNS)
            conn.execute(
                f"INSERT INTO opportunities ({', '.join(_INSERT_COLUMNS)}) VALUES ({placeholders})",
                tuple(data[c] for c in _INSERT_COLUMNS),
            )
            row = conn.execute("SELECT * FROM opportunities WHERE id = ?", (opp.id,)).fetchone()
        return self._deserialize(row)

    def get(self, opp_id: str) -> Optional[Opportunity]:
        """Get single opportunity by id, regardless of status."""
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM opportunities WHERE id = ?", (opp_id,)).fetchone()
        return self._deserialize(row) if row else None

    def get_all(self) -> list[Opportunity]:
        """Return all opportunities, most recent first."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM opportunities ORDER BY created_at DESC, id ASC"
            ).fetchall()
        return [self._deserialize(r) for r in rows]

    def get_by_status(self, status: OpportunityStatus) -> list[Opportunity]:
        """Return opportunities with given status, most recent first."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM opportunities WHERE status = ? ORDER BY created_at DESC, id ASC",
                (OpportunityStatus(status).value,),
            ).fetchall()
        return [self._deserialize(r) for r in rows]

    def update_fields(
        self, actor_id: Optional[str], opp_id: str, changes: dict[str, Any]
    ) -> Optional[Opportunity]:
        """
        Apply editable-field changes. Returns the updated row, or None if absent.
        Status and ownership columns are not writable through this call.
        """
        unknown = set(changes) - _EDITABLE_COLUMNS
        if unknown:
            raise ValueError(f"Not editable: {sorted(unknown)}")

        with self._connection() as conn:
            self._require_admin(conn, actor_id)
            assignments = [f"{column} = ?" for column in changes]
            assignments.append("updated_at = ?")
            params = [*changes.values(), utc_now(), opp_id]
            cursor = conn.execute(
                f"UPDATE opportunities SET {', '.join(assignments)} WHERE id = ?",
                params,
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM opportunities WHERE id = ?", (opp_id,)).fetchone()
        return self._deserialize(row)

    def set_status(
        self, actor_id: Optional[str], opp_id: str, status: OpportunityStatus
    ) -> Optional[Opportunity]:
        """Write a moderation status. Returns the updated row, or None if absent."""
        with self._connection() as conn:
            self._require_admin(conn, actor_id)
            cursor = conn.execute(
                "UPDATE opportunities SET status = ?, updated_at = ? WHERE id = ?",
                (status.value, utc_now(), opp_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM opportunities WHERE id = ?", (opp_id,)).fetchone()
        return self._deserialize(row)

    def delete(self, actor_id: Optional[str], opp_id: str) -> bool:
        """Delete permanently; bookmarks go with it via ON DELETE CASCADE."""
        with self._connection() as conn:
            self._require_admin(conn, actor_id)
            cursor = conn.execute("DELETE FROM opportunities WHERE id = ?", (opp_id,))
            deleted = cursor.rowcount > 0
        return deleted

    def count(self) -> int:
        with self._connection() as conn:
            row = conn.execute("SELECT COUNT(*) AS n FROM opportunities").fetchone()
        return int(row["n"])

    def count_by_status(self) -> dict[str, int]:
        """Per-status totals; statuses with no rows report 0."""
        counts = {s.value: 0 for s in OpportunityStatus}
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT status, COUNT(*) AS n FROM opportunities GROUP BY status"
            ).fetchall()
        for r in rows:
            counts[r["status"]] = int(r["n"])
        return counts
