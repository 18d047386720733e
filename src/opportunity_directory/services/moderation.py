"""Moderation workflow: the pending -> approved | rejected state machine."""

import logging
from uuid import uuid4

from opportunity_directory.auth.context import AuthorizationContext
from opportunity_directory.errors import InvalidTransition, NotFound
from opportunity_directory.models.opportunity import (
    Opportunity,
    OpportunityDraft,
    OpportunityPatch,
    OpportunityStatus,
)
from opportunity_directory.store.opportunities import OpportunityRepository

from .validation import check_age_range

logger = logging.getLogger(__name__)

# target -> statuses it may be reached from (besides itself, which is a no-op)
_ALLOWED_FROM: dict[OpportunityStatus, frozenset[OpportunityStatus]] = {
    OpportunityStatus.APPROVED: frozenset({OpportunityStatus.PENDING}),
    OpportunityStatus.REJECTED: frozenset({OpportunityStatus.PENDING}),
}


class ModerationService:
    """
    Owns status transitions and their role gates.
    Role checks run before existence checks so non-admins cannot probe ids.
    Edits never touch status; there is no path back to pending.
    """

    def __init__(self, opportunities: OpportunityRepository):
        self._opportunities = opportunities

    def submit(self, draft: OpportunityDraft, ctx: AuthorizationContext) -> Opportunity:
        """Community submission: always starts pending, owned by the caller."""
        user_id = ctx.require_authenticated()
        opp = Opportunity(
            id=str(uuid4()),
            **draft.model_dump(),
            status=OpportunityStatus.PENDING,
            submitted_by=user_id,
        )
        created = self._opportunities.insert(user_id, opp)
        logger.info("Opportunity %s submitted by %s (pending)", created.id, user_id)
        return created

    def create_direct(self, draft: OpportunityDraft, ctx: AuthorizationContext) -> Opportunity:
        """Admin creation that skips review and starts approved."""
        admin_id = ctx.require_admin()
        opp = Opportunity(
            id=str(uuid4()),
            **draft.model_dump(),
            status=OpportunityStatus.APPROVED,
            submitted_by=None,
        )
        created = self._opportunities.insert(admin_id, opp)
        logger.info("Opportunity %s created by admin %s (approved)", created.id, admin_id)
        return created

    def approve(self, opp_id: str, ctx: AuthorizationContext) -> Opportunity:
        return self._transition(opp_id, OpportunityStatus.APPROVED, ctx)

    def reject(self, opp_id: str, ctx: AuthorizationContext) -> Opportunity:
        return self._transition(opp_id, OpportunityStatus.REJECTED, ctx)

    def _transition(
        self, opp_id: str, target: OpportunityStatus, ctx: AuthorizationContext
    ) -> Opportunity:
        admin_id = ctx.require_admin()
        current = self._opportunities.get(opp_id)
        if current is None:
            raise NotFound()

        if current.status == target:
            logger.info("Opportunity %s already %s; nothing to do", opp_id, target.value)
            return current
        if current.status not in _ALLOWED_FROM[target]:
            raise InvalidTransition(current.status.value, target.value)

        updated = self._opportunities.set_status(admin_id, opp_id, target)
        if updated is None:
            raise NotFound()
        logger.info("Opportunity %s %s by %s", opp_id, target.value, admin_id)
        return updated

    def edit(self, opp_id: str, patch: OpportunityPatch, ctx: AuthorizationContext) -> Opportunity:
        """Admin edit of content fields; status stays where it is."""
        admin_id = ctx.require_admin()
        current = self._opportunities.get(opp_id)
        if current is None:
            raise NotFound()

        changes = patch.changes()
        check_age_range(
            changes.get("min_age", current.min_age),
            changes.get("max_age", current.max_age),
        )
        if not changes:
            return current

        updated = self._opportunities.update_fields(admin_id, opp_id, changes)
        if updated is None:
            raise NotFound()
        logger.info("Opportunity %s edited by %s: %s", opp_id, admin_id, sorted(changes))
        return updated

    def delete(self, opp_id: str, ctx: AuthorizationContext) -> None:
        """Permanent removal; bookmarks cascade."""
        admin_id = ctx.require_admin()
        if not self._opportunities.delete(admin_id, opp_id):
            raise NotFound()
        logger.info("Opportunity %s deleted by %s", opp_id, admin_id)
