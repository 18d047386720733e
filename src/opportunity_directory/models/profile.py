"""User profile model: one row per authenticated identity."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Role(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"


class Profile(BaseModel):
    """Profile created at first sign-in. Role changes only out of band."""

    user_id: str = Field(..., description="Identity id from the session provider")
    full_name: str = ""
    email: str = ""
    role: Role = Role.STUDENT
    school: Optional[str] = None
    grade: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
