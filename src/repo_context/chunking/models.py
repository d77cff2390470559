"""Typed models for chunked coverage."""

from __future__ import annotations

from dataclasses import dataclass

from repo_context.scoring.models import ScoredCandidate
from repo_context.selection.models import SelectionResult


@dataclass(slots=True, frozen=True)
class Chunk:
    """One budget-respecting slice of a selection."""

    index: int
    total: int
    label: str
    entries: tuple[ScoredCandidate, ...]
    estimated_tokens: int
    oversized: bool
    priority: float
    strategy: str

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(item.path for item in self.entries)

    def to_dict(self) -> dict[str, object]:
        return {
            "index": self.index,
            "total": self.total,
            "label": self.label,
            "paths": list(self.paths),
            "estimated_tokens": self.estimated_tokens,
            "oversized": self.oversized,
            "priority": self.priority,
            "strategy": self.strategy,
        }


@dataclass(slots=True, frozen=True)
class ChunkPlan:
    """Ordered chunks that exactly partition ``selection.included``."""

    chunks: tuple[Chunk, ...]
    selection: SelectionResult
    strategy: str
    max_tokens_per_chunk: int

    @property
    def total_tokens(self) -> int:
        return sum(chunk.estimated_tokens for chunk in self.chunks)

    def to_dict(self) -> dict[str, object]:
        return {
            "strategy": self.strategy,
            "max_tokens_per_chunk": self.max_tokens_per_chunk,
            "total_tokens": self.total_tokens,
            "chunks": [chunk.to_dict() for chunk in self.chunks],
        }
