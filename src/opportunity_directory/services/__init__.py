"""Domain services: moderation, opportunity store, bookmarks."""

from .bookmarks import BookmarkService
from .moderation import ModerationService
from .opportunities import OpportunityStore, is_visible

__all__ = ["BookmarkService", "ModerationService", "OpportunityStore", "is_visible"]
