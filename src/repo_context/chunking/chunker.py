"""Partition a selection into budget-sized, topically grouped chunks."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from repo_context.chunking.models import Chunk, ChunkPlan
from repo_context.config import CHUNK_STRATEGIES
from repo_context.errors import DiscoveryConfigError
from repo_context.graph.models import ReferenceGraph
from repo_context.scoring.models import ScoredCandidate, score_sort_key
from repo_context.selection.models import SelectionResult

ROOT_MODULE = ""
_CONTAINER_DIRS = frozenset({"src", "lib", "app", "pkg", "internal", "source", "packages"})


@dataclass(slots=True)
class _Bin:
    items: list[ScoredCandidate] = field(default_factory=list)
    tokens: int = 0
    open: bool = True

    def add(self, item: ScoredCandidate) -> None:
        self.items.append(item)
        self.tokens += item.tokens


def chunk_selection(
    selection: SelectionResult,
    max_tokens: int,
    strategy: str,
    *,
    graph: ReferenceGraph | None = None,
) -> ChunkPlan:
    """Split ``selection.included`` into ordered chunks of at most ``max_tokens``.

    Every included file lands in exactly one chunk. A file larger than
    ``max_tokens`` gets a chunk of its own flagged ``oversized``.
    """
    if strategy not in CHUNK_STRATEGIES:
        raise DiscoveryConfigError(
            field="chunk_strategy",
            value=strategy,
            reason=f"Unknown chunk strategy '{strategy}'.",
            hint=f"Use one of {', '.join(CHUNK_STRATEGIES)}.",
        )
    if max_tokens < 1:
        raise DiscoveryConfigError(
            field="max_tokens", value=max_tokens, reason="Chunk budget must be >= 1."
        )

    ranked = sorted(selection.included, key=score_sort_key)
    rank = {item.path: position for position, item in enumerate(ranked)}
    packers: dict[str, Callable[[], list[_Bin]]] = {
        "token": lambda: _pack_sequential(ranked, max_tokens),
        "module": lambda: _pack_groups(_module_groups(ranked), max_tokens),
        "functional": lambda: _pack_groups(
            _functional_groups(ranked, rank, graph), max_tokens
        ),
        "hierarchical": lambda: _pack_sequential(
            sorted(ranked, key=lambda item: _hierarchy_key(item, rank)), max_tokens
        ),
    }
    bins = [packed for packed in packers[strategy]() if packed.items]

    chunks = tuple(
        Chunk(
            index=position,
            total=len(bins),
            label=chunk_label(packed.items),
            entries=tuple(packed.items),
            estimated_tokens=packed.tokens,
            oversized=len(packed.items) == 1 and packed.tokens > max_tokens,
            priority=sum(item.score.value for item in packed.items) / len(packed.items),
            strategy=strategy,
        )
        for position, packed in enumerate(bins, start=1)
    )
    return ChunkPlan(
        chunks=chunks,
        selection=selection,
        strategy=strategy,
        max_tokens_per_chunk=max_tokens,
    )


def _pack_sequential(items: Sequence[ScoredCandidate], limit: int) -> list[_Bin]:
    """Greedy in-order packing; a new bin opens when the current one would overflow."""
    bins: list[_Bin] = []
    current = _Bin()
    for item in items:
        if item.tokens > limit:
            if current.items:
                bins.append(current)
                current = _Bin()
            bins.append(_Bin(items=[item], tokens=item.tokens, open=False))
            continue
        if current.items and current.tokens + item.tokens > limit:
            bins.append(current)
            current = _Bin()
        current.add(item)
    if current.items:
        bins.append(current)
    return bins


def _pack_groups(groups: list[list[ScoredCandidate]], limit: int) -> list[_Bin]:
    """First-fit whole groups into open bins; groups larger than a bin are split alone."""
    bins: list[_Bin] = []
    for group in groups:
        group_tokens = sum(item.tokens for item in group)
        if group_tokens > limit:
            for packed in _pack_sequential(group, limit):
                packed.open = False
                bins.append(packed)
            continue
        target = next(
            (packed for packed in bins if packed.open and packed.tokens + group_tokens <= limit),
            None,
        )
        if target is None:
            target = _Bin()
            bins.append(target)
        for item in group:
            target.add(item)
    return bins


def _module_groups(ranked: list[ScoredCandidate]) -> list[list[ScoredCandidate]]:
    """Group by top-level directory, ordered by each module's best-ranked member."""
    groups: dict[str, list[ScoredCandidate]] = defaultdict(list)
    for item in ranked:
        groups[top_level_module(item.path)].append(item)
    return list(groups.values())


def _functional_groups(
    ranked: list[ScoredCandidate],
    rank: dict[str, int],
    graph: ReferenceGraph | None,
) -> list[list[ScoredCandidate]]:
    """Connected components of the reference graph restricted to the selection."""
    by_path = {item.path: item for item in ranked}
    if graph is None:
        return [[item] for item in ranked]
    components = graph.components(by_path)
    groups = [
        sorted((by_path[path] for path in component), key=lambda item: rank[item.path])
        for component in components
    ]
    groups.sort(key=lambda group: rank[group[0].path])
    return groups


def _hierarchy_key(item: ScoredCandidate, rank: dict[str, int]) -> tuple[bool, int, int]:
    return (not item.score.is_entry_point, item.path.count("/"), rank[item.path])


def top_level_module(path: str) -> str:
    if "/" not in path:
        return ROOT_MODULE
    return path.split("/", 1)[0]


def _label_module(path: str) -> str:
    parts = path.split("/")
    if len(parts) == 1:
        return ROOT_MODULE
    if parts[0] in _CONTAINER_DIRS and len(parts) > 2:
        return parts[1]
    return parts[0]


def chunk_label(items: Sequence[ScoredCandidate]) -> str:
    """Describe a chunk by its dominant module and runner-up, weighted by tokens."""
    weights: dict[str, tuple[int, int]] = {}
    for item in items:
        module = _label_module(item.path)
        tokens, count = weights.get(module, (0, 0))
        weights[module] = (tokens + item.tokens, count + 1)
    ordered = sorted(weights.items(), key=lambda pair: (-pair[1][0], -pair[1][1], pair[0]))
    names = [name or "root" for name, _ in ordered[:2]]
    if not names:
        return "empty"
    if len(ordered) == 1 and ordered[0][0] == ROOT_MODULE:
        return "project root files"
    if len(names) == 1:
        return f"{names[0]} modules"
    return f"{names[0]} & {names[1]} modules"
