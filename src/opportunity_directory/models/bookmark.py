"""Bookmark: a saved-for-later link between a user and an opportunity."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class Bookmark(BaseModel):
    user_id: str
    opportunity_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
