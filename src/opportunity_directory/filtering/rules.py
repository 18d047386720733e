"""Filter rules: each returns (passed, explanation, rule_id)."""

from enum import Enum
from typing import Optional

from opportunity_directory.models.opportunity import Opportunity

from .query import OpportunityFilter


def _normalize_for_match(text: Optional[str]) -> str:
    """Lowercase for matching; empty string if None. Surrounding spaces are part of the term."""
    return (text or "").lower()


def _value(v) -> str:
    return v.value if isinstance(v, Enum) else str(v)


def _apply_equality_rule(opp: Opportunity, flt: OpportunityFilter, field: str) -> tuple[bool, str, str]:
    wanted = getattr(flt, field)
    if wanted is None:
        return True, f"{field.capitalize()} filter not set", field

    actual = getattr(opp, field)
    if _value(actual) == _value(wanted):
        return True, f"Matches {field}: {_value(wanted)}", field
    return False, f"Excluded: {field} {_value(actual)} is not {_value(wanted)}", field


def apply_type_rule(opp: Opportunity, flt: OpportunityFilter) -> tuple[bool, str, str]:
    return _apply_equality_rule(opp, flt, "type")


def apply_price_rule(opp: Opportunity, flt: OpportunityFilter) -> tuple[bool, str, str]:
    return _apply_equality_rule(opp, flt, "price")


def apply_audience_rule(opp: Opportunity, flt: OpportunityFilter) -> tuple[bool, str, str]:
    return _apply_equality_rule(opp, flt, "audience")


def apply_format_rule(opp: Opportunity, flt: OpportunityFilter) -> tuple[bool, str, str]:
    return _apply_equality_rule(opp, flt, "format")


def apply_subject_rule(opp: Opportunity, flt: OpportunityFilter) -> tuple[bool, str, str]:
    """
    Subject: case-insensitive substring, like an ILIKE '%term%' query.
    """
    term = _normalize_for_match(flt.subject)
    if not term:
        return True, "Subject filter not set", "subject"

    if term in _normalize_for_match(opp.subject):
        return True, f"Matches subject: {flt.subject}", "subject"
    return False, f"Excluded: subject '{opp.subject}' does not contain '{flt.subject}'", "subject"
