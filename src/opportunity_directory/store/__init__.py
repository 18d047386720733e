"""Local SQLite storage for opportunities, profiles and bookmarks."""

from opportunity_directory.store.bookmarks import BookmarkRepository
from opportunity_directory.store.opportunities import OpportunityRepository
from opportunity_directory.store.profiles import ProfileRepository
from opportunity_directory.store.sqlite_base import SqliteDatabase

__all__ = [
    "BookmarkRepository",
    "OpportunityRepository",
    "ProfileRepository",
    "SqliteDatabase",
]
