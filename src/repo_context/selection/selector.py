"""Greedy budgeted selection with an entry-point floor."""

from __future__ import annotations

from collections.abc import Iterable

from repo_context.collection.models import FileCandidate
from repo_context.errors import TOKEN_BUDGET_TOO_SMALL, DiscoveryWarning
from repo_context.scoring.models import ScoredCandidate, score_sort_key
from repo_context.selection.models import (
    BINARY,
    OVER_BUDGET,
    OVERSIZED,
    ContextBudget,
    ExcludedCandidate,
    SelectionResult,
)


def entry_point_sort_key(item: ScoredCandidate) -> tuple[int, int, str]:
    """Profile pattern order, then shorter path, then lexical."""
    rank = item.score.entry_rank if item.score.entry_rank is not None else 1 << 30
    return (rank, len(item.path), item.path)


def select_candidates(
    scored: Iterable[ScoredCandidate],
    budget: ContextBudget,
    *,
    unusable: Iterable[FileCandidate] = (),
    include_oversized_entry_point: bool = False,
) -> SelectionResult:
    """Fill the budget: entry points first, then the rest in score order.

    The result never exceeds ``budget.max_tokens`` except when
    ``include_oversized_entry_point`` lets exactly one entry point that is
    larger than the whole budget through; that path is reported in
    ``oversized_path``.
    """
    excluded: list[ExcludedCandidate] = [
        ExcludedCandidate(
            candidate=candidate,
            reason=BINARY if candidate.binary else candidate.error or BINARY,
        )
        for candidate in sorted(unusable, key=lambda item: item.path)
    ]
    ordered = sorted(scored, key=score_sort_key)
    entries = sorted(
        (item for item in ordered if item.score.is_entry_point), key=entry_point_sort_key
    )
    rest = [item for item in ordered if not item.score.is_entry_point]

    state = budget
    included: list[ScoredCandidate] = []
    oversized_path: str | None = None
    oversized_entries: list[str] = []
    squeezed_entries: list[str] = []

    for item in entries:
        if state.exceeds_total(item.tokens):
            if include_oversized_entry_point and oversized_path is None:
                included.append(item)
                state = state.consume(item.tokens)
                oversized_path = item.path
            else:
                excluded.append(_exclude(item, OVERSIZED, state))
            oversized_entries.append(item.path)
            continue
        if state.fits(item.tokens):
            included.append(item)
            state = state.consume(item.tokens)
            continue
        excluded.append(_exclude(item, OVER_BUDGET, state))
        squeezed_entries.append(item.path)

    for item in rest:
        if state.exceeds_total(item.tokens):
            excluded.append(_exclude(item, OVERSIZED, state))
        elif state.fits(item.tokens):
            included.append(item)
            state = state.consume(item.tokens)
        else:
            excluded.append(_exclude(item, OVER_BUDGET, state))

    warnings: list[DiscoveryWarning] = []
    if oversized_entries:
        forced = f" '{oversized_path}' was included anyway." if oversized_path else ""
        warnings.append(
            DiscoveryWarning(
                code=TOKEN_BUDGET_TOO_SMALL,
                message=(
                    f"{len(oversized_entries)} entry point(s) exceed the whole budget of "
                    f"{budget.max_tokens} tokens.{forced}"
                ),
                paths=tuple(oversized_entries),
                count=len(oversized_entries),
            )
        )
    if squeezed_entries:
        warnings.append(
            DiscoveryWarning(
                code=TOKEN_BUDGET_TOO_SMALL,
                message=(
                    f"{len(squeezed_entries)} entry point(s) did not fit in the budget "
                    "left after earlier entry points."
                ),
                paths=tuple(squeezed_entries),
                count=len(squeezed_entries),
            )
        )

    return SelectionResult(
        included=tuple(included),
        excluded=tuple(excluded),
        budget=state,
        total_tokens=sum(item.tokens for item in included),
        oversized_path=oversized_path,
        warnings=tuple(warnings),
    )


def _exclude(item: ScoredCandidate, reason: str, state: ContextBudget) -> ExcludedCandidate:
    detail = f"needs {item.tokens} tokens, {state.remaining} of {state.max_tokens} remaining"
    return ExcludedCandidate(
        candidate=item.candidate, reason=reason, detail=detail, score=item.score
    )
