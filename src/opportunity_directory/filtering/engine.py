"""Filter engine: conjunction of per-field rules with an explanation trail."""

from datetime import datetime
from typing import Callable, Iterable, Optional

from pydantic import BaseModel, Field

from opportunity_directory.models.opportunity import Opportunity

from .query import OpportunityFilter
from .rules import (
    apply_audience_rule,
    apply_format_rule,
    apply_price_rule,
    apply_subject_rule,
    apply_type_rule,
)

RuleFn = Callable[[Opportunity, OpportunityFilter], tuple[bool, str, str]]

_RULES: list[RuleFn] = [
    apply_type_rule,
    apply_price_rule,
    apply_audience_rule,
    apply_format_rule,
    apply_subject_rule,
]


class FilterResult(BaseModel):
    """Result of matching an opportunity against a filter."""

    passed: bool = Field(..., description="Every present constraint matched")
    explanations: list[str] = Field(default_factory=list)
    excluded_by_rule: Optional[str] = Field(
        default=None,
        description="First rule that excluded (type|price|audience|format|subject)",
    )


def explain(opp: Opportunity, flt: OpportunityFilter) -> FilterResult:
    """Apply every rule and keep the explanation for each."""
    explanations: list[str] = []
    all_passed = True
    excluded_by: Optional[str] = None

    for rule_fn in _RULES:
        passed, explanation, rule_id = rule_fn(opp, flt)
        explanations.append(explanation)
        if not passed:
            all_passed = False
            if excluded_by is None:
                excluded_by = rule_id

    return FilterResult(passed=all_passed, explanations=explanations, excluded_by_rule=excluded_by)


def matches(opp: Opportunity, flt: Optional[OpportunityFilter] = None) -> bool:
    """True when every present filter field matches; the empty filter accepts all."""
    if flt is None or flt.is_empty():
        return True
    return explain(opp, flt).passed


def sort_key(opp: Opportunity) -> tuple[float, str]:
    """Most recent first; ties broken by id ascending."""
    created: datetime = opp.created_at
    return (-created.timestamp(), opp.id)


def apply_filter(
    opportunities: Iterable[Opportunity],
    flt: Optional[OpportunityFilter] = None,
) -> list[Opportunity]:
    """Keep matching records, in listing order."""
    return sorted((o for o in opportunities if matches(o, flt)), key=sort_key)
