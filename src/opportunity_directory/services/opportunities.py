"""Opportunity store: visibility-aware reads, validated writes."""

import logging
from typing import Optional

from opportunity_directory.auth.context import AuthorizationContext
from opportunity_directory.errors import Forbidden, NotFound
from opportunity_directory.filtering import OpportunityFilter, apply_filter
from opportunity_directory.models.opportunity import Opportunity, OpportunityStatus
from opportunity_directory.store.opportunities import OpportunityRepository

from .moderation import ModerationService
from .validation import InputData, parse_draft, parse_patch

logger = logging.getLogger(__name__)


def is_visible(opp: Opportunity, ctx: AuthorizationContext) -> bool:
    """Non-admins see approved records only; admins see everything."""
    return ctx.is_admin() or opp.status == OpportunityStatus.APPROVED


class OpportunityStore:
    """
    Read paths enforce the visibility rule; write paths validate input locally
    and then hand off to the moderation workflow.
    """

    def __init__(self, opportunities: OpportunityRepository, moderation: ModerationService):
        self._opportunities = opportunities
        self._moderation = moderation

    def list(
        self,
        flt: Optional[OpportunityFilter],
        ctx: AuthorizationContext,
        status: Optional[OpportunityStatus] = OpportunityStatus.APPROVED,
    ) -> list[Opportunity]:
        """
        Visible records matching ``flt``, most recent first.
        Only admins may ask for a status other than approved; None means all statuses.
        """
        if status != OpportunityStatus.APPROVED and not ctx.is_admin():
            logger.warning(
                "Denied listing of status=%s for %s",
                status.value if status else "all",
                ctx.current_user_id(),
            )
            raise Forbidden()

        if status is None:
            rows = self._opportunities.get_all()
        else:
            rows = self._opportunities.get_by_status(status)
        visible = [o for o in rows if is_visible(o, ctx)]
        return apply_filter(visible, flt)

    def get(self, opp_id: str, ctx: AuthorizationContext) -> Opportunity:
        """Single record; hidden and absent records both raise NotFound."""
        opp = self._opportunities.get(opp_id)
        if opp is None or not is_visible(opp, ctx):
            raise NotFound()
        return opp

    def create(self, data: InputData, ctx: AuthorizationContext) -> Opportunity:
        """Community submission; lands in pending."""
        ctx.require_authenticated()
        draft = parse_draft(data)
        return self._moderation.submit(draft, ctx)

    def create_approved(self, data: InputData, ctx: AuthorizationContext) -> Opportunity:
        ctx.require_admin()
        draft = parse_draft(data)
        return self._moderation.create_direct(draft, ctx)

    def update(self, opp_id: str, data: InputData, ctx: AuthorizationContext) -> Opportunity:
        ctx.require_admin()
        patch = parse_patch(data)
        return self._moderation.edit(opp_id, patch, ctx)

    def delete(self, opp_id: str, ctx: AuthorizationContext) -> None:
        self._moderation.delete(opp_id, ctx)

    def counts(self, ctx: AuthorizationContext) -> dict[str, int]:
        """Per-status totals for the admin summary."""
        ctx.require_admin()
        return self._opportunities.count_by_status()
