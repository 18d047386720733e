"""Bookmarks: a user's saved-for-later opportunities."""

import logging

from opportunity_directory.auth.context import AuthorizationContext
from opportunity_directory.models.opportunity import Opportunity
from opportunity_directory.store.bookmarks import BookmarkRepository

from .opportunities import OpportunityStore

logger = logging.getLogger(__name__)


class BookmarkService:
    """Idempotent add/remove keyed on (user, opportunity)."""

    def __init__(self, bookmarks: BookmarkRepository, opportunities: OpportunityStore):
        self._bookmarks = bookmarks
        self._opportunities = opportunities

    def add(self, ctx: AuthorizationContext, opportunity_id: str) -> bool:
        """
        Bookmark an opportunity the caller can see. Returns False when the
        bookmark already existed (still a success).
        """
        user_id = ctx.require_authenticated()
        self._opportunities.get(opportunity_id, ctx)
        created = self._bookmarks.add(user_id, opportunity_id)
        if created:
            logger.info("User %s bookmarked %s", user_id, opportunity_id)
        return created

    def remove(self, ctx: AuthorizationContext, opportunity_id: str) -> bool:
        """Returns False when there was nothing to remove (still a success)."""
        user_id = ctx.require_authenticated()
        removed = self._bookmarks.remove(user_id, opportunity_id)
        if removed:
            logger.info("User %s removed bookmark %s", user_id, opportunity_id)
        return removed

    def list_opportunities(self, ctx: AuthorizationContext) -> list[Opportunity]:
        """Bookmarked records that are still publicly listed, in listing order."""
        ids = self.list(ctx)
        if not ids:
            return []
        return [o for o in self._opportunities.list(None, ctx) if o.id in ids]

    def is_bookmarked(self, ctx: AuthorizationContext, opportunity_id: str) -> bool:
        user_id = ctx.require_authenticated()
        return self._bookmarks.exists(user_id, opportunity_id)

    # Defined last: the name shadows the builtin inside the class body.
    def list(self, ctx: AuthorizationContext) -> set[str]:
        user_id = ctx.require_authenticated()
        return self._bookmarks.list_ids(user_id)
