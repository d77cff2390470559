"""Composite relevance scoring over five independent factors."""

from __future__ import annotations

import posixpath
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor

from repo_context.collection.git import MODIFIED, STAGED, UNTRACKED
from repo_context.collection.globs import compile_globs
from repo_context.collection.models import FileCandidate
from repo_context.config import ScoringWeights
from repo_context.detection.profiles import ProjectProfile
from repo_context.graph.models import ReferenceGraph
from repo_context.scoring.keywords import (
    count_occurrences,
    extract_keywords,
    path_keyword_matches,
)
from repo_context.scoring.models import (
    RelevanceScore,
    ScoreBreakdown,
    ScoredCandidate,
    score_sort_key,
)

SECONDS_PER_DAY = 86_400.0
PATH_MATCH_SHARE = 0.6
CONTENT_MATCH_SHARE = 0.4
CONTENT_OCCURRENCES_PER_KEYWORD = 3
RECENT_DAYS = 7.0
HIGHLY_REFERENCED_MIN_DEPENDENTS = 3
SMALL_FILE_TOKENS = 500
MAIN_MODULE_STEMS = frozenset({"main", "lib", "mod", "index", "__init__", "__main__", "app"})

# Recency bands per git status; staged sits above every other band.
RECENCY_BANDS = {
    STAGED: (0.9, 1.0),
    MODIFIED: (0.7, 0.8),
    UNTRACKED: (0.6, 0.7),
}
CLEAN_BAND = (0.0, 0.6)

ContentReader = Callable[[FileCandidate, int], str | None]


class EntryPointMatcher:
    """Match root-anchored entry-point patterns and report the first matching position."""

    def __init__(self, patterns: tuple[str, ...]) -> None:
        unique = tuple(dict.fromkeys(pattern for pattern in patterns if pattern.strip()))
        self._globs = compile_globs(unique, field="entry_points", match_basename=False)

    @property
    def patterns(self) -> tuple[str, ...]:
        return self._globs.patterns

    def rank(self, path: str) -> int | None:
        return self._globs.first_match_index(path)


def recency_factor(
    mtime_ns: int, git_status: str, *, now: float, half_life_days: float
) -> float:
    """Map file age and git status into the status band for that file.

    Within a band the value decays hyperbolically with age, so it is
    monotonic in both recency and status.
    """
    age_days = max(0.0, (now - mtime_ns / 1_000_000_000) / SECONDS_PER_DAY)
    freshness = 1.0 / (1.0 + age_days / half_life_days)
    low, high = RECENCY_BANDS.get(git_status, CLEAN_BAND)
    return low + (high - low) * freshness


def query_factor(path_matches: int, occurrences: int, keyword_count: int) -> float:
    if keyword_count == 0:
        return 0.0
    path_fraction = path_matches / keyword_count
    content_fraction = min(
        1.0, occurrences / (CONTENT_OCCURRENCES_PER_KEYWORD * keyword_count)
    )
    return PATH_MATCH_SHARE * path_fraction + CONTENT_MATCH_SHARE * content_fraction


def select_content_scan_paths(candidates: Iterable[FileCandidate], limit: int) -> list[str]:
    """Pick the ``limit`` largest usable candidates (size desc, then path)."""
    ordered = sorted(
        (candidate for candidate in candidates if candidate.usable),
        key=lambda item: (-item.size, item.path),
    )
    return [candidate.path for candidate in ordered[:limit]]


def score_candidates(
    candidates: Iterable[FileCandidate],
    graph: ReferenceGraph,
    profile: ProjectProfile,
    query: str,
    *,
    weights: ScoringWeights,
    now: float,
    read_content: ContentReader,
    query_scan_limit: int = 50,
    query_scan_bytes: int = 64 * 1024,
    priority_patterns: tuple[str, ...] = (),
    max_workers: int = 8,
) -> dict[str, RelevanceScore]:
    """Score every usable candidate; binary and unreadable files are not scored."""
    usable = [candidate for candidate in candidates if candidate.usable]
    matcher = EntryPointMatcher((*profile.entry_points, *priority_patterns))
    keywords = extract_keywords(query)
    occurrences = _content_occurrences(
        usable,
        keywords,
        read_content=read_content,
        limit=query_scan_limit,
        scan_bytes=query_scan_bytes,
        max_workers=max_workers,
    )
    max_degree = graph.max_degree()
    weight_vector = (
        weights.entry_point,
        weights.recency,
        weights.centrality,
        weights.query,
        weights.file_type,
    )
    total_weight = sum(weight_vector)

    scores: dict[str, RelevanceScore] = {}
    for candidate in usable:
        entry_rank = matcher.rank(candidate.path)
        path_matches = path_keyword_matches(candidate.path, keywords)
        breakdown = ScoreBreakdown(
            entry_point=1.0 if entry_rank is not None else 0.0,
            recency=recency_factor(
                candidate.mtime_ns,
                candidate.git_status,
                now=now,
                half_life_days=weights.recency_half_life_days,
            ),
            centrality=graph.degree(candidate.path) / max_degree if max_degree else 0.0,
            query=query_factor(
                path_matches, occurrences.get(candidate.path, 0), len(keywords)
            ),
            file_type=weights.type_prior(candidate.category),
            weights=weight_vector,
        )
        factors = (
            breakdown.entry_point,
            breakdown.recency,
            breakdown.centrality,
            breakdown.query,
            breakdown.file_type,
        )
        value = sum(w * f for w, f in zip(weight_vector, factors, strict=True)) / total_weight
        scores[candidate.path] = RelevanceScore(
            value=min(1.0, max(0.0, value)),
            breakdown=breakdown,
            factors=_factor_tags(candidate, graph, breakdown, entry_rank, now=now),
            entry_rank=entry_rank,
        )
    return scores


def rank_candidates(
    candidates: Iterable[FileCandidate], scores: dict[str, RelevanceScore]
) -> list[ScoredCandidate]:
    """Pair scored candidates in the total score order."""
    paired = [
        ScoredCandidate(candidate=candidate, score=scores[candidate.path])
        for candidate in candidates
        if candidate.path in scores
    ]
    return sorted(paired, key=score_sort_key)


def _content_occurrences(
    candidates: list[FileCandidate],
    keywords: tuple[str, ...],
    *,
    read_content: ContentReader,
    limit: int,
    scan_bytes: int,
    max_workers: int,
) -> dict[str, int]:
    if not keywords or limit < 1:
        return {}
    scan_paths = set(select_content_scan_paths(candidates, limit))
    targets = [candidate for candidate in candidates if candidate.path in scan_paths]

    def count(candidate: FileCandidate) -> tuple[str, int]:
        text = read_content(candidate, scan_bytes)
        return candidate.path, count_occurrences(text, keywords) if text else 0

    if len(targets) > 1 and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return dict(pool.map(count, targets))
    return dict(count(candidate) for candidate in targets)


def _factor_tags(
    candidate: FileCandidate,
    graph: ReferenceGraph,
    breakdown: ScoreBreakdown,
    entry_rank: int | None,
    *,
    now: float,
) -> tuple[str, ...]:
    tags: list[str] = []
    if entry_rank is not None:
        tags.append("entry_point")
    stem = posixpath.splitext(posixpath.basename(candidate.path))[0]
    if stem in MAIN_MODULE_STEMS:
        tags.append("main_module")
    if candidate.git_status in RECENCY_BANDS:
        tags.append(candidate.git_status)
    age_days = (now - candidate.mtime_ns / 1_000_000_000) / SECONDS_PER_DAY
    if age_days <= RECENT_DAYS:
        tags.append("recently_modified")
    dependents = graph.in_degree(candidate.path)
    if dependents >= HIGHLY_REFERENCED_MIN_DEPENDENTS:
        tags.append("highly_referenced")
    if dependents >= 2 and graph.out_degree(candidate.path) <= 1:
        tags.append("dependency_root")
    if breakdown.query > 0:
        tags.append("query_match")
    if candidate.category == "test":
        tags.append("test_file")
    elif candidate.category == "config":
        tags.append("config_file")
    elif candidate.category == "docs":
        tags.append("documentation")
    if candidate.tokens <= SMALL_FILE_TOKENS:
        tags.append("small_size")
    return tuple(tags)
