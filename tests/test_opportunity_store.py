"""Unit tests for OpportunityStore: visibility and validation."""

from unittest.mock import patch

import pytest

from opportunity_directory.api import Directory
from opportunity_directory.auth import AuthorizationContext
from opportunity_directory.errors import Forbidden, NotFound, Unauthenticated, ValidationError
from opportunity_directory.filtering import OpportunityFilter
from opportunity_directory.models.opportunity import OpportunityStatus
from opportunity_directory.services import OpportunityStore


def _draft(**kwargs) -> dict:
    data = {
        "title": "Summer Internship at a Bank",
        "short_summary": "Six weeks in finance",
        "description": "Rotate through retail and investment banking teams.",
        "type": "internship",
        "subject": "Finance",
        "format": "offline",
        "audience": "emiratis",
    }
    data.update(kwargs)
    return data


@pytest.fixture
def opportunities(directory: Directory) -> OpportunityStore:
    return directory.opportunities


@pytest.fixture
def seeded(
    opportunities: OpportunityStore, student: AuthorizationContext, admin: AuthorizationContext
) -> dict[str, str]:
    """One record in each status."""
    pending = opportunities.create(_draft(title="Pending one"), student)
    approved = opportunities.create_approved(_draft(title="Approved one", subject="Fintech"), admin)
    rejected = opportunities.create(_draft(title="Rejected one"), student)
    opportunities._moderation.reject(rejected.id, admin)
    return {"pending": pending.id, "approved": approved.id, "rejected": rejected.id}


class TestVisibility:
    """The visibility rule on list and get."""

    def test_student_lists_only_approved(
        self, opportunities: OpportunityStore, seeded: dict, student: AuthorizationContext
    ) -> None:
        assert [o.id for o in opportunities.list(None, student)] == [seeded["approved"]]

    def test_anonymous_lists_only_approved(
        self, opportunities: OpportunityStore, seeded: dict, anonymous: AuthorizationContext
    ) -> None:
        assert {o.status for o in opportunities.list(OpportunityFilter(), anonymous)} == {
            OpportunityStatus.APPROVED
        }

    def test_student_cannot_request_pending(
        self, opportunities: OpportunityStore, seeded: dict, student: AuthorizationContext
    ) -> None:
        with pytest.raises(Forbidden):
            opportunities.list(None, student, OpportunityStatus.PENDING)
        with pytest.raises(Forbidden):
            opportunities.list(None, student, None)

    def test_admin_can_request_pending_and_all(
        self, opportunities: OpportunityStore, seeded: dict, admin: AuthorizationContext
    ) -> None:
        assert [o.id for o in opportunities.list(None, admin, OpportunityStatus.PENDING)] == [seeded["pending"]]
        assert len(opportunities.list(None, admin, None)) == 3

    def test_filter_applied_after_visibility(
        self, opportunities: OpportunityStore, seeded: dict, student: AuthorizationContext
    ) -> None:
        assert [o.id for o in opportunities.list(OpportunityFilter(subject="tech"), student)] == [seeded["approved"]]
        assert opportunities.list(OpportunityFilter(subject="finance"), student) == []

    def test_get_hidden_record_is_not_found(
        self, opportunities: OpportunityStore, seeded: dict, student: AuthorizationContext
    ) -> None:
        """Pending and rejected look exactly like missing ids to non-admins, owner included."""
        for key in ("pending", "rejected"):
            with pytest.raises(NotFound):
                opportunities.get(seeded[key], student)
        with pytest.raises(NotFound):
            opportunities.get("no-such-id", student)

    def test_admin_gets_any_record(
        self, opportunities: OpportunityStore, seeded: dict, admin: AuthorizationContext
    ) -> None:
        assert opportunities.get(seeded["pending"], admin).status == OpportunityStatus.PENDING


class TestValidation:
    """Field validation happens before the backend is touched."""

    def test_age_range_rejected_without_persisting(
        self, directory: Directory, opportunities: OpportunityStore, student: AuthorizationContext
    ) -> None:
        with patch.object(directory.opportunity_rows, "insert") as insert:
            with pytest.raises(ValidationError) as exc_info:
                opportunities.create(_draft(min_age=20, max_age=14), student)
        insert.assert_not_called()
        assert set(exc_info.value.fields) == {"min_age", "max_age"}
        assert "age range" in exc_info.value.details[0]
        assert directory.opportunity_rows.count() == 0

    @pytest.mark.parametrize(
        "field, value",
        [
            ("title", ""),
            ("short_summary", "   "),
            ("description", None),
            ("subject", ""),
            ("type", "bootcamp"),
            ("format", "hybrid"),
            ("price", "cheap"),
            ("deadline", "2030-02-30"),
            ("registration_link", "ftp://example.com"),
            ("min_age", -1),
            ("min_age", 10**20),
            ("max_age", 151),
        ],
    )
    def test_bad_field_cited(
        self, opportunities: OpportunityStore, student: AuthorizationContext, field: str, value
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            opportunities.create(_draft(**{field: value}), student)
        assert field in exc_info.value.fields

    def test_missing_required_field(self, opportunities: OpportunityStore, student: AuthorizationContext) -> None:
        data = _draft()
        del data["format"]
        with pytest.raises(ValidationError) as exc_info:
            opportunities.create(data, student)
        assert exc_info.value.fields == ["format"]

    def test_submitted_status_is_ignored(
        self, opportunities: OpportunityStore, student: AuthorizationContext
    ) -> None:
        opp = opportunities.create(_draft(status="approved", submitted_by="someone-else"), student)
        assert opp.status == OpportunityStatus.PENDING
        assert opp.submitted_by == "student-1"

    def test_patch_cannot_change_status(
        self, opportunities: OpportunityStore, seeded: dict, admin: AuthorizationContext
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            opportunities.update(seeded["rejected"], {"status": "approved"}, admin)
        assert exc_info.value.fields == ["status"]
        assert opportunities.get(seeded["rejected"], admin).status == OpportunityStatus.REJECTED

    def test_patch_oversized_age_rejected(
        self, opportunities: OpportunityStore, seeded: dict, admin: AuthorizationContext
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            opportunities.update(seeded["approved"], {"max_age": 10**20}, admin)
        assert exc_info.value.fields == ["max_age"]

    def test_patch_age_range_checked_alone(
        self, opportunities: OpportunityStore, seeded: dict, admin: AuthorizationContext
    ) -> None:
        with pytest.raises(ValidationError):
            opportunities.update(seeded["approved"], {"min_age": 18, "max_age": 10}, admin)


class TestWrites:
    """Role gates on write paths."""

    def test_anonymous_create(self, opportunities: OpportunityStore, anonymous: AuthorizationContext) -> None:
        with pytest.raises(Unauthenticated):
            opportunities.create(_draft(), anonymous)

    def test_student_update_forbidden_before_validation(
        self, opportunities: OpportunityStore, seeded: dict, student: AuthorizationContext
    ) -> None:
        with pytest.raises(Forbidden):
            opportunities.update(seeded["approved"], {"title": ""}, student)

    def test_admin_update(self, opportunities: OpportunityStore, seeded: dict, admin: AuthorizationContext) -> None:
        updated = opportunities.update(seeded["approved"], {"price": "paid", "deadline": ""}, admin)
        assert updated.price.value == "paid"
        assert updated.deadline is None
        assert updated.status == OpportunityStatus.APPROVED

    def test_update_missing(self, opportunities: OpportunityStore, admin: AuthorizationContext) -> None:
        with pytest.raises(NotFound):
            opportunities.update("missing", {"title": "x"}, admin)

    def test_counts(self, opportunities: OpportunityStore, seeded: dict, admin: AuthorizationContext) -> None:
        assert opportunities.counts(admin) == {"pending": 1, "approved": 1, "rejected": 1}

    def test_counts_forbidden_for_student(
        self, opportunities: OpportunityStore, student: AuthorizationContext
    ) -> None:
        with pytest.raises(Forbidden):
            opportunities.counts(student)
