"""Data models for relevance scoring."""

from __future__ import annotations

from dataclasses import dataclass

from repo_context.collection.models import FileCandidate


@dataclass(slots=True, frozen=True)
class ScoreBreakdown:
    """Normalised factor values in [0, 1] and the weights that combined them."""

    entry_point: float
    recency: float
    centrality: float
    query: float
    file_type: float
    weights: tuple[float, float, float, float, float]

    def to_dict(self) -> dict[str, object]:
        entry_w, recency_w, centrality_w, query_w, type_w = self.weights
        return {
            "entry_point": self.entry_point,
            "recency": self.recency,
            "centrality": self.centrality,
            "query": self.query,
            "file_type": self.file_type,
            "weights": {
                "entry_point": entry_w,
                "recency": recency_w,
                "centrality": centrality_w,
                "query": query_w,
                "file_type": type_w,
            },
        }


@dataclass(slots=True, frozen=True)
class RelevanceScore:
    """Composite relevance value with its explanation."""

    value: float
    breakdown: ScoreBreakdown
    factors: tuple[str, ...] = ()
    entry_rank: int | None = None

    @property
    def is_entry_point(self) -> bool:
        return self.entry_rank is not None

    def to_dict(self) -> dict[str, object]:
        return {
            "value": self.value,
            "breakdown": self.breakdown.to_dict(),
            "factors": list(self.factors),
            "entry_rank": self.entry_rank,
        }


@dataclass(slots=True, frozen=True)
class ScoredCandidate:
    """Candidate paired with its score."""

    candidate: FileCandidate
    score: RelevanceScore

    @property
    def path(self) -> str:
        return self.candidate.path

    @property
    def tokens(self) -> int:
        return self.candidate.tokens


def score_sort_key(item: ScoredCandidate) -> tuple[float, bool, int, str]:
    """Total order: higher score, then entry points, then shorter path, then lexical."""
    return (-item.score.value, not item.score.is_entry_point, len(item.path), item.path)
