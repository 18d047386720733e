"""Unit tests for the SQLite repositories."""

import sqlite3
from pathlib import Path

import pytest

from opportunity_directory.errors import Forbidden, NotFound, Transient, Unauthenticated
from opportunity_directory.models.opportunity import Opportunity, OpportunityStatus
from opportunity_directory.models.profile import Role
from opportunity_directory.store import BookmarkRepository, OpportunityRepository, ProfileRepository


def _make_opp(
    opp_id: str = "o-1",
    status: str = "pending",
    submitted_by: str | None = "student-1",
    **kwargs,
) -> Opportunity:
    data = {
        "title": "Volunteer at the Food Bank",
        "short_summary": "Weekend shifts",
        "description": "Sort and pack donations.",
        "type": "volunteering",
        "subject": "Community",
        "format": "offline",
    }
    data.update(kwargs)
    return Opportunity(id=opp_id, status=status, submitted_by=submitted_by, **data)


@pytest.fixture
def profiles(temp_db: Path) -> ProfileRepository:
    repo = ProfileRepository(temp_db)
    repo.ensure("student-1")
    repo.ensure("admin-1")
    repo.set_role("admin-1", Role.ADMIN)
    return repo


@pytest.fixture
def store(temp_db: Path, profiles: ProfileRepository) -> OpportunityRepository:
    """OpportunityRepository with temporary database and seeded profiles."""
    return OpportunityRepository(temp_db)


@pytest.fixture
def bookmarks(temp_db: Path, profiles: ProfileRepository) -> BookmarkRepository:
    return BookmarkRepository(temp_db)


class TestOpportunityRepositoryInsert:
    """Tests for insert and its row-level policy."""

    def test_owner_inserts_pending(self, store: OpportunityRepository) -> None:
        created = store.insert("student-1", _make_opp())
        assert created.status == OpportunityStatus.PENDING
        assert created.submitted_by == "student-1"
        assert created.created_at == created.updated_at

    def test_pending_for_someone_else_forbidden(self, store: OpportunityRepository) -> None:
        with pytest.raises(Forbidden):
            store.insert("student-1", _make_opp(submitted_by="student-2"))
        assert store.count() == 0

    def test_anonymous_insert_unauthenticated(self, store: OpportunityRepository) -> None:
        with pytest.raises(Unauthenticated):
            store.insert(None, _make_opp(submitted_by=None))

    def test_approved_insert_requires_admin(self, store: OpportunityRepository) -> None:
        """Student actor cannot insert an approved row even when bypassing services."""
        with pytest.raises(Forbidden):
            store.insert("student-1", _make_opp(status="approved"))
        created = store.insert("admin-1", _make_opp(status="approved", submitted_by=None))
        assert created.status == OpportunityStatus.APPROVED

    def test_round_trips_optional_fields(self, store: OpportunityRepository) -> None:
        store.insert(
            "student-1",
            _make_opp(deadline="2030-03-01", min_age=12, max_age=16, image_url="https://cdn.example.com/a.png"),
        )
        found = store.get("o-1")
        assert found is not None
        assert str(found.deadline) == "2030-03-01"
        assert (found.min_age, found.max_age) == (12, 16)
        assert found.image_url == "https://cdn.example.com/a.png"


class TestOpportunityRepositoryQueries:
    """Tests for get, get_all, get_by_status, counts."""

    def test_get_nonexistent_returns_none(self, store: OpportunityRepository) -> None:
        assert store.get("missing") is None

    def test_get_by_status_filters(self, store: OpportunityRepository) -> None:
        store.insert("student-1", _make_opp("p-1"))
        store.insert("admin-1", _make_opp("a-1", status="approved", submitted_by=None))
        store.insert("admin-1", _make_opp("a-2", status="approved", submitted_by=None))
        assert {o.id for o in store.get_by_status(OpportunityStatus.APPROVED)} == {"a-1", "a-2"}
        assert [o.id for o in store.get_by_status("pending")] == ["p-1"]
        assert len(store.get_all()) == 3

    def test_get_all_most_recent_first(self, store: OpportunityRepository) -> None:
        for i in range(3):
            store.insert("student-1", _make_opp(f"o-{i}"))
        opps = store.get_all()
        created = [o.created_at for o in opps]
        assert created == sorted(created, reverse=True)

    def test_count_by_status_reports_zeroes(self, store: OpportunityRepository) -> None:
        store.insert("student-1", _make_opp())
        assert store.count_by_status() == {"pending": 1, "approved": 0, "rejected": 0}


class TestOpportunityRepositoryWrites:
    """Tests for update_fields, set_status and delete."""

    def test_update_fields_requires_admin(self, store: OpportunityRepository) -> None:
        store.insert("student-1", _make_opp())
        with pytest.raises(Forbidden):
            store.update_fields("student-1", "o-1", {"title": "Hijacked"})
        assert store.get("o-1").title == "Volunteer at the Food Bank"

    def test_update_fields_bumps_updated_at(self, store: OpportunityRepository) -> None:
        created = store.insert("student-1", _make_opp())
        updated = store.update_fields("admin-1", "o-1", {"title": "Renamed", "price": "paid"})
        assert updated.title == "Renamed"
        assert updated.price.value == "paid"
        assert updated.status == OpportunityStatus.PENDING
        assert updated.updated_at >= created.updated_at

    def test_update_fields_rejects_status_column(self, store: OpportunityRepository) -> None:
        store.insert("student-1", _make_opp())
        with pytest.raises(ValueError):
            store.update_fields("admin-1", "o-1", {"status": "approved"})

    def test_update_missing_returns_none(self, store: OpportunityRepository) -> None:
        assert store.update_fields("admin-1", "missing", {"title": "x"}) is None
        assert store.set_status("admin-1", "missing", OpportunityStatus.APPROVED) is None

    def test_set_status_requires_admin(self, store: OpportunityRepository) -> None:
        store.insert("student-1", _make_opp())
        with pytest.raises(Forbidden):
            store.set_status("student-1", "o-1", OpportunityStatus.APPROVED)
        updated = store.set_status("admin-1", "o-1", OpportunityStatus.APPROVED)
        assert updated.status == OpportunityStatus.APPROVED

    def test_delete_requires_admin(self, store: OpportunityRepository) -> None:
        store.insert("student-1", _make_opp())
        with pytest.raises(Forbidden):
            store.delete("student-1", "o-1")
        assert store.count() == 1
        assert store.delete("admin-1", "o-1") is True
        assert store.delete("admin-1", "o-1") is False

    def test_check_constraint_guards_age_range(self, store: OpportunityRepository) -> None:
        store.insert("student-1", _make_opp(min_age=10, max_age=12))
        with pytest.raises(sqlite3.IntegrityError):
            store.update_fields("admin-1", "o-1", {"min_age": 20})


class TestBookmarkRepository:
    """Tests for bookmark rows."""

    def test_add_is_idempotent(self, store: OpportunityRepository, bookmarks: BookmarkRepository) -> None:
        store.insert("student-1", _make_opp())
        assert bookmarks.add("student-1", "o-1") is True
        assert bookmarks.add("student-1", "o-1") is False
        assert bookmarks.count() == 1
        assert bookmarks.list_ids("student-1") == {"o-1"}

    def test_get_for_user_returns_records(
        self, store: OpportunityRepository, bookmarks: BookmarkRepository
    ) -> None:
        store.insert("student-1", _make_opp())
        bookmarks.add("student-1", "o-1")
        [bm] = bookmarks.get_for_user("student-1")
        assert (bm.user_id, bm.opportunity_id) == ("student-1", "o-1")
        assert bm.created_at.tzinfo is not None
        assert bookmarks.get_for_user("admin-1") == []

    def test_remove_missing_is_false(self, bookmarks: BookmarkRepository) -> None:
        assert bookmarks.remove("student-1", "nothing") is False

    def test_unknown_opportunity_not_found(self, bookmarks: BookmarkRepository) -> None:
        with pytest.raises(NotFound):
            bookmarks.add("student-1", "missing")

    def test_deleting_opportunity_cascades(
        self, store: OpportunityRepository, bookmarks: BookmarkRepository
    ) -> None:
        store.insert("student-1", _make_opp())
        bookmarks.add("student-1", "o-1")
        store.delete("admin-1", "o-1")
        assert bookmarks.exists("student-1", "o-1") is False
        assert bookmarks.count() == 0


class TestProfileRepository:
    """Tests for profiles."""

    def test_ensure_creates_student_once(self, temp_db: Path) -> None:
        repo = ProfileRepository(temp_db)
        first = repo.ensure("u-1", full_name="Layla", email="layla@example.com")
        assert first.role == Role.STUDENT
        repo.set_role("u-1", Role.ADMIN)
        again = repo.ensure("u-1", full_name="Other Name")
        assert again.role == Role.ADMIN
        assert again.full_name == "Layla"

    def test_set_role_unknown_user(self, temp_db: Path) -> None:
        with pytest.raises(NotFound):
            ProfileRepository(temp_db).set_role("ghost", Role.ADMIN)

    def test_is_admin(self, profiles: ProfileRepository) -> None:
        assert profiles.is_admin("admin-1") is True
        assert profiles.is_admin("student-1") is False
        assert profiles.is_admin(None) is False


class TestTransientErrors:
    """Lock and open failures surface as Transient."""

    def test_locked_database_is_transient(self, temp_db: Path) -> None:
        repo = OpportunityRepository(temp_db, timeout=0.05)
        locker = sqlite3.connect(temp_db, isolation_level=None)
        try:
            locker.execute("BEGIN EXCLUSIVE")
            with pytest.raises(Transient) as exc_info:
                repo.get("o-1")
            assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)
        finally:
            locker.execute("ROLLBACK")
            locker.close()

    def test_unopenable_path_is_transient(self, tmp_path: Path) -> None:
        with pytest.raises(Transient):
            OpportunityRepository(tmp_path / "no" / "such" / "dir" / "db.sqlite")

    def test_non_sqlite_file_is_transient(self, tmp_path: Path) -> None:
        junk = tmp_path / "junk.db"
        junk.write_bytes(b"this is not a database file at all, just bytes " * 64)
        with pytest.raises(Transient) as exc_info:
            OpportunityRepository(junk)
        assert isinstance(exc_info.value.__cause__, sqlite3.DatabaseError)
        assert "not a database" not in str(exc_info.value)

    def test_integrity_errors_still_propagate(self, store: OpportunityRepository) -> None:
        """Constraint violations are not turned into Transient."""
        store.insert("student-1", _make_opp())
        with pytest.raises(sqlite3.IntegrityError):
            store.insert("student-1", _make_opp())
