"""Filtering of opportunity listings."""

from .engine import FilterResult, apply_filter, explain, matches, sort_key
from .query import OpportunityFilter

__all__ = ["FilterResult", "OpportunityFilter", "apply_filter", "explain", "matches", "sort_key"]
