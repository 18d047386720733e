"""Data models for opportunities, profiles and bookmarks."""

from opportunity_directory.models.bookmark import Bookmark
from opportunity_directory.models.opportunity import (
    Opportunity,
    OpportunityAudience,
    OpportunityDraft,
    OpportunityFormat,
    OpportunityPatch,
    OpportunityPrice,
    OpportunityStatus,
    OpportunityType,
)
from opportunity_directory.models.profile import Profile, Role

__all__ = [
    "Bookmark",
    "Opportunity",
    "OpportunityAudience",
    "OpportunityDraft",
    "OpportunityFormat",
    "OpportunityPatch",
    "OpportunityPrice",
    "OpportunityStatus",
    "OpportunityType",
    "Profile",
    "Role",
]
