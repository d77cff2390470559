"""Budgeted selection package."""

from .models import (
    BINARY,
    OVER_BUDGET,
    OVERSIZED,
    ContextBudget,
    ExcludedCandidate,
    SelectionResult,
)
from .selector import entry_point_sort_key, select_candidates

__all__ = [
    "BINARY",
    "ContextBudget",
    "ExcludedCandidate",
    "OVERSIZED",
    "OVER_BUDGET",
    "SelectionResult",
    "entry_point_sort_key",
    "select_candidates",
]
