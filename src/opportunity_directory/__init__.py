"""Student opportunity directory: listings, moderation and bookmarks."""

__version__ = "0.1.0"
