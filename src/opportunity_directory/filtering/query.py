"""Filter options recognised by the opportunity listing."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from opportunity_directory.models.opportunity import (
    OpportunityAudience,
    OpportunityFormat,
    OpportunityPrice,
    OpportunityType,
)


class OpportunityFilter(BaseModel):
    """
    Optional constraints; absent fields impose nothing.
    Blank strings count as absent (the UI's "all" option sends '').
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Optional[OpportunityType] = None
    price: Optional[OpportunityPrice] = None
    audience: Optional[OpportunityAudience] = None
    format: Optional[OpportunityFormat] = None
    subject: Optional[str] = None

    @field_validator("type", "price", "audience", "format", "subject", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)
