"""Directory facade: the operation surface consumed by a UI or the CLI."""

from pathlib import Path
from typing import Any, Mapping, Optional, Union

from opportunity_directory.auth import (
    AuthorizationContext,
    HttpSessionProvider,
    LocalSessionProvider,
    SessionProvider,
)
from opportunity_directory.config import Settings
from opportunity_directory.errors import ValidationError
from opportunity_directory.filtering import OpportunityFilter
from opportunity_directory.models.opportunity import Opportunity, OpportunityStatus
from opportunity_directory.services import BookmarkService, ModerationService, OpportunityStore
from opportunity_directory.services.validation import InputData, parse_filter
from opportunity_directory.store import BookmarkRepository, OpportunityRepository, ProfileRepository

FilterInput = Optional[Union[Mapping[str, Any], OpportunityFilter]]
StatusInput = Optional[Union[OpportunityStatus, str]]


def _coerce_status(status: StatusInput) -> Optional[OpportunityStatus]:
    if status is None or isinstance(status, OpportunityStatus):
        return status
    if status == "all":
        return None
    try:
        return OpportunityStatus(status)
    except ValueError as e:
        raise ValidationError(["status"], [f"status: unknown value '{status}'"]) from e


def _viewer(ctx: Optional[AuthorizationContext]) -> AuthorizationContext:
    return ctx if ctx is not None else AuthorizationContext.anonymous()


class Directory:
    """
    Wires the SQLite backend, the session provider and the services.
    Every call takes the caller's context explicitly; mutations return the
    resulting record and nothing is cached between calls.
    """

    def __init__(
        self,
        db_path: str | Path,
        *,
        session_provider: Optional[SessionProvider] = None,
        db_timeout: float = 5.0,
    ):
        self.opportunity_rows = OpportunityRepository(db_path, timeout=db_timeout)
        self.profiles = ProfileRepository(db_path, timeout=db_timeout)
        self.bookmark_rows = BookmarkRepository(db_path, timeout=db_timeout)

        self.moderation = ModerationService(self.opportunity_rows)
        self.opportunities = OpportunityStore(self.opportunity_rows, self.moderation)
        self.bookmarks = BookmarkService(self.bookmark_rows, self.opportunities)
        self.session_provider = session_provider or LocalSessionProvider(self.profiles)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Directory":
        provider: Optional[SessionProvider] = None
        if settings.auth_url:
            provider = HttpSessionProvider(
                settings.auth_url,
                api_key=settings.auth_api_key,
                timeout=settings.auth_timeout,
            )
        return cls(settings.db_path, session_provider=provider, db_timeout=settings.db_timeout)

    def sign_in(self, token: Optional[str]) -> AuthorizationContext:
        """Resolve a session token; creates the profile on first sign-in."""
        return AuthorizationContext.resolve(token, self.session_provider, self.profiles)

    # Reads

    def list_opportunities(
        self,
        flt: FilterInput = None,
        viewer: Optional[AuthorizationContext] = None,
        status: StatusInput = OpportunityStatus.APPROVED,
    ) -> list[Opportunity]:
        return self.opportunities.list(parse_filter(flt), _viewer(viewer), _coerce_status(status))

    def get_opportunity(self, opp_id: str, viewer: Optional[AuthorizationContext] = None) -> Opportunity:
        return self.opportunities.get(opp_id, _viewer(viewer))

    def pending_opportunities(self, admin: AuthorizationContext) -> list[Opportunity]:
        """Moderation queue, newest first."""
        return self.opportunities.list(None, admin, OpportunityStatus.PENDING)

    def all_opportunities(self, admin: AuthorizationContext) -> list[Opportunity]:
        return self.opportunities.list(None, admin, None)

    def status_counts(self, admin: AuthorizationContext) -> dict[str, int]:
        return self.opportunities.counts(admin)

    # Writes

    def submit_opportunity(self, draft: InputData, user: AuthorizationContext) -> Opportunity:
        return self.opportunities.create(draft, user)

    def create_approved_opportunity(self, record: InputData, admin: AuthorizationContext) -> Opportunity:
        return self.opportunities.create_approved(record, admin)

    def edit_opportunity(self, opp_id: str, patch: InputData, admin: AuthorizationContext) -> Opportunity:
        return self.opportunities.update(opp_id, patch, admin)

    def approve_opportunity(self, opp_id: str, admin: AuthorizationContext) -> Opportunity:
        return self.moderation.approve(opp_id, admin)

    def reject_opportunity(self, opp_id: str, admin: AuthorizationContext) -> Opportunity:
        return self.moderation.reject(opp_id, admin)

    def delete_opportunity(self, opp_id: str, admin: AuthorizationContext) -> None:
        self.opportunities.delete(opp_id, admin)

    # Bookmarks

    def add_bookmark(self, user: AuthorizationContext, opp_id: str) -> bool:
        return self.bookmarks.add(user, opp_id)

    def remove_bookmark(self, user: AuthorizationContext, opp_id: str) -> bool:
        return self.bookmarks.remove(user, opp_id)

    def list_bookmarks(self, user: AuthorizationContext) -> set[str]:
        return self.bookmarks.list(user)

    def is_bookmarked(self, user: AuthorizationContext, opp_id: str) -> bool:
        return self.bookmarks.is_bookmarked(user, opp_id)

    def bookmarked_opportunities(self, user: AuthorizationContext) -> list[Opportunity]:
        return self.bookmarks.list_opportunities(user)
