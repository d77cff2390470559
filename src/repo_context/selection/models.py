"""Typed models for budgeted selection."""

from __future__ import annotations

from dataclasses import dataclass

from repo_context.collection.models import FileCandidate
from repo_context.errors import DiscoveryWarning
from repo_context.scoring.models import RelevanceScore, ScoredCandidate

BINARY = "binary"
OVERSIZED = "oversized"
OVER_BUDGET = "over_budget"


@dataclass(slots=True, frozen=True)
class ContextBudget:
    """Token ceiling plus the amount consumed so far."""

    max_tokens: int
    consumed: int = 0

    def __post_init__(self) -> None:
        if self.max_tokens < 1:
            raise ValueError("budget.max_tokens must be >= 1")
        if self.consumed < 0:
            raise ValueError("budget.consumed must be >= 0")

    @property
    def remaining(self) -> int:
        return max(0, self.max_tokens - self.consumed)

    def fits(self, tokens: int) -> bool:
        return tokens <= self.remaining

    def exceeds_total(self, tokens: int) -> bool:
        """True when ``tokens`` alone exceed the whole budget."""
        return tokens > self.max_tokens

    def consume(self, tokens: int) -> ContextBudget:
        return ContextBudget(max_tokens=self.max_tokens, consumed=self.consumed + tokens)


@dataclass(slots=True, frozen=True)
class ExcludedCandidate:
    """Candidate left out of a selection, with the reason."""

    candidate: FileCandidate
    reason: str
    detail: str = ""
    score: RelevanceScore | None = None

    @property
    def path(self) -> str:
        return self.candidate.path

    def to_dict(self) -> dict[str, object]:
        return {
            "path": self.candidate.path,
            "tokens": self.candidate.tokens,
            "reason": self.reason,
            "detail": self.detail,
            "score": self.score.value if self.score is not None else None,
        }


@dataclass(slots=True, frozen=True)
class SelectionResult:
    """Ordered selection: entry points first in pattern order, then greedy picks."""

    included: tuple[ScoredCandidate, ...]
    excluded: tuple[ExcludedCandidate, ...]
    budget: ContextBudget
    total_tokens: int
    oversized_path: str | None = None
    warnings: tuple[DiscoveryWarning, ...] = ()

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(item.path for item in self.included)

    @property
    def within_budget(self) -> bool:
        return self.total_tokens <= self.budget.max_tokens

    def to_dict(self) -> dict[str, object]:
        return {
            "included": [
                {
                    "path": item.path,
                    "tokens": item.tokens,
                    "score": item.score.value,
                    "entry_point": item.score.is_entry_point,
                    "factors": list(item.score.factors),
                }
                for item in self.included
            ],
            "excluded": [item.to_dict() for item in self.excluded],
            "budget": {
                "max_tokens": self.budget.max_tokens,
                "consumed": self.budget.consumed,
            },
            "total_tokens": self.total_tokens,
            "oversized_path": self.oversized_path,
            "warnings": [warning.to_dict() for warning in self.warnings],
        }
