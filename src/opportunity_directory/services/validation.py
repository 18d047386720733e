"""Field-level validation, run before anything reaches the backend."""

from typing import Any, Mapping, Optional, Union

import pydantic
from pydantic import BaseModel

from opportunity_directory.errors import ValidationError
from opportunity_directory.filtering.query import OpportunityFilter
from opportunity_directory.models.opportunity import (
    PROTECTED_FIELDS,
    OpportunityDraft,
    OpportunityPatch,
)

InputData = Union[Mapping[str, Any], BaseModel]


def _as_dict(data: InputData) -> dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_unset=isinstance(data, OpportunityPatch))
    return dict(data or {})


def _from_pydantic(e: pydantic.ValidationError) -> ValidationError:
    """Convert pydantic errors into our ValidationError, one entry per offending field."""
    fields: list[str] = []
    details: list[str] = []
    for err in e.errors():
        loc = err.get("loc") or ()
        field = str(loc[0]) if loc else "record"
        fields.append(field)
        details.append(f"{field}: {err.get('msg', 'invalid value')}")
    return ValidationError(fields, details)


def check_age_range(min_age: Optional[int], max_age: Optional[int]) -> None:
    if min_age is not None and max_age is not None and min_age > max_age:
        raise ValidationError(
            ["min_age", "max_age"],
            [f"age range: min_age ({min_age}) must not exceed max_age ({max_age})"],
        )


def parse_draft(data: InputData) -> OpportunityDraft:
    """Validate a full record for submission or direct creation."""
    if isinstance(data, OpportunityDraft):
        draft = data
    else:
        try:
            draft = OpportunityDraft.model_validate(_as_dict(data))
        except pydantic.ValidationError as e:
            raise _from_pydantic(e) from e
    check_age_range(draft.min_age, draft.max_age)
    return draft


def parse_patch(data: InputData) -> OpportunityPatch:
    """
    Validate a partial update on its own. Range checks that need the stored
    record are repeated after merging.
    """
    if isinstance(data, OpportunityPatch):
        patch = data
    else:
        raw = _as_dict(data)
        protected = [k for k in raw if k in PROTECTED_FIELDS]
        if protected:
            raise ValidationError(protected, [f"{k}: cannot be changed by an edit" for k in protected])
        try:
            patch = OpportunityPatch.model_validate(raw)
        except pydantic.ValidationError as e:
            raise _from_pydantic(e) from e
    changes = patch.changes()
    check_age_range(changes.get("min_age"), changes.get("max_age"))
    return patch


def parse_filter(data: Optional[Union[Mapping[str, Any], OpportunityFilter]]) -> OpportunityFilter:
    if data is None:
        return OpportunityFilter()
    if isinstance(data, OpportunityFilter):
        return data
    try:
        return OpportunityFilter.model_validate(dict(data))
    except pydantic.ValidationError as e:
        raise _from_pydantic(e) from e
