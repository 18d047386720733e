"""Opportunity records, drafts and patches."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OpportunityType(str, Enum):
    MUN = "mun"
    INTERNSHIP = "internship"
    VOLUNTEERING = "volunteering"
    SUMMER_CAMP = "summer_camp"
    COMPETITION = "competition"
    HACKATHON = "hackathon"


class OpportunityPrice(str, Enum):
    FREE = "free"
    PAID = "paid"


class OpportunityAudience(str, Enum):
    ALL = "all"
    EMIRATIS = "emiratis"


class OpportunityFormat(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class OpportunityStatus(str, Enum):
    """Moderation state. ``pending`` is initial; ``rejected`` is terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Fields a caller may never write directly; the backend owns them.
PROTECTED_FIELDS = ("id", "status", "submitted_by", "created_at", "updated_at")

MAX_AGE = 150
_OPTIONAL_BLANK_AS_NONE = ("deadline", "registration_link", "image_url", "min_age", "max_age")


def _blank_to_none(value):
    """Form inputs send '' for untouched optional fields."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_url(value: Optional[str]) -> Optional[str]:
    """Well-formedness only: http(s) scheme and a host."""
    if value is None:
        return None
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be an http(s) URL")
    return value


class OpportunityFields(BaseModel):
    """Editable fields shared by drafts and stored records."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1)
    short_summary: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    type: OpportunityType
    subject: str = Field(..., min_length=1)
    price: OpportunityPrice = OpportunityPrice.FREE
    audience: OpportunityAudience = OpportunityAudience.ALL
    format: OpportunityFormat

    deadline: Optional[date] = None
    min_age: Optional[int] = Field(default=None, ge=0, le=MAX_AGE)
    max_age: Optional[int] = Field(default=None, ge=0, le=MAX_AGE)
    registration_link: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator(*_OPTIONAL_BLANK_AS_NONE, mode="before")
    @classmethod
    def _optional_blank(cls, value):
        return _blank_to_none(value)

    @field_validator("registration_link", "image_url")
    @classmethod
    def _well_formed_url(cls, value: Optional[str]) -> Optional[str]:
        return _check_url(value)


class OpportunityDraft(OpportunityFields):
    """
    Input for submissions and direct admin creation.
    Unknown keys (including any ``status``) are dropped; status is decided by the workflow.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class OpportunityPatch(BaseModel):
    """Partial update; only explicitly set fields are applied."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1)
    short_summary: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    type: Optional[OpportunityType] = None
    subject: Optional[str] = Field(default=None, min_length=1)
    price: Optional[OpportunityPrice] = None
    audience: Optional[OpportunityAudience] = None
    format: Optional[OpportunityFormat] = None

    deadline: Optional[date] = None
    min_age: Optional[int] = Field(default=None, ge=0, le=MAX_AGE)
    max_age: Optional[int] = Field(default=None, ge=0, le=MAX_AGE)
    registration_link: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator(*_OPTIONAL_BLANK_AS_NONE, mode="before")
    @classmethod
    def _optional_blank(cls, value):
        return _blank_to_none(value)

    @field_validator(
        "title", "short_summary", "description", "type", "subject", "price", "audience", "format"
    )
    @classmethod
    def _not_null(cls, value):
        # Runs only for explicitly supplied values; required columns cannot be cleared.
        if value is None:
            raise ValueError("must not be empty")
        return value

    @field_validator("registration_link", "image_url")
    @classmethod
    def _well_formed_url(cls, value: Optional[str]) -> Optional[str]:
        return _check_url(value)

    def changes(self) -> dict:
        """Explicitly set fields, ready to merge onto a stored record."""
        return self.model_dump(mode="json", include=self.model_fields_set)


class Opportunity(OpportunityFields):
    """Stored opportunity record."""

    id: str
    status: OpportunityStatus = OpportunityStatus.PENDING
    submitted_by: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_visible_to_public(self) -> bool:
        return self.status == OpportunityStatus.APPROVED
