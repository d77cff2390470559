from __future__ import annotations

from pathlib import Path

from repo_context.collection import FileCandidate
from repo_context.config import ScoringWeights
from repo_context.detection import ProjectProfile
from repo_context.graph import ReferenceGraph
from repo_context.scoring import (
    EntryPointMatcher,
    query_factor,
    rank_candidates,
    recency_factor,
    score_candidates,
    select_content_scan_paths,
)

NOW = 1_700_000_000.0
FRESH_NS = int(NOW * 1_000_000_000)
DAY_NS = 86_400 * 1_000_000_000


def _candidate(
    path: str,
    *,
    size: int = 400,
    mtime_ns: int = FRESH_NS,
    git_status: str = "clean",
    category: str = "source",
    binary: bool = False,
) -> FileCandidate:
    return FileCandidate(
        path=path,
        full_path=Path("/virtual") / path,
        size=size,
        tokens=size // 4,
        language="text",
        mtime_ns=mtime_ns,
        git_status=git_status,
        binary=binary,
        category=category,
    )


def _profile(*entry_points: str) -> ProjectProfile:
    return ProjectProfile(
        kind="generic", entry_points=entry_points, include_globs=("**/*",), exclude_globs=()
    )


def _score(candidates, query="", *, graph=None, contents=None, **kwargs):
    texts = contents or {}
    return score_candidates(
        candidates,
        graph or ReferenceGraph.from_edges([item.path for item in candidates], []),
        kwargs.pop("profile", _profile()),
        query,
        weights=kwargs.pop("weights", ScoringWeights()),
        now=NOW,
        read_content=lambda candidate, limit: texts.get(candidate.path, "")[:limit],
        **kwargs,
    )


def test_recency_is_monotonic_in_age_and_git_status() -> None:
    fresh = recency_factor(FRESH_NS, "clean", now=NOW, half_life_days=30)
    old = recency_factor(FRESH_NS - 90 * DAY_NS, "clean", now=NOW, half_life_days=30)
    old_staged = recency_factor(FRESH_NS - 90 * DAY_NS, "staged", now=NOW, half_life_days=30)
    fresh_modified = recency_factor(FRESH_NS, "modified", now=NOW, half_life_days=30)
    fresh_untracked = recency_factor(FRESH_NS, "untracked", now=NOW, half_life_days=30)

    assert old < fresh
    assert old_staged >= fresh_modified
    assert fresh_modified >= fresh_untracked >= fresh
    assert 0.0 <= old <= fresh <= 1.0


def test_query_factor_combines_path_and_content_evidence() -> None:
    assert query_factor(0, 0, 0) == 0.0
    assert query_factor(1, 3, 1) == 1.0
    assert query_factor(1, 0, 2) == 0.3
    assert query_factor(0, 100, 1) == 0.4


def test_content_scan_prefers_largest_usable_files() -> None:
    candidates = [
        _candidate("b.py", size=100),
        _candidate("a.py", size=100),
        _candidate("big.py", size=900),
        _candidate("blob.bin", size=5000, binary=True),
    ]

    assert select_content_scan_paths(candidates, 2) == ["big.py", "a.py"]


def test_query_keyword_in_path_outranks_unrelated_file() -> None:
    candidates = [_candidate("auth/login.x"), _candidate("unrelated/report.x")]

    scores = _score(candidates, "authentication")

    assert scores["auth/login.x"].value > scores["unrelated/report.x"].value
    assert "query_match" in scores["auth/login.x"].factors


def test_staging_a_file_never_lowers_its_score() -> None:
    clean = _candidate("src/app.py")
    staged = _candidate("src/app.py", git_status="staged")

    clean_score = _score([clean])["src/app.py"]
    staged_score = _score([staged])["src/app.py"]

    assert staged_score.breakdown.recency >= clean_score.breakdown.recency
    assert staged_score.value >= clean_score.value
    assert "staged" in staged_score.factors


def test_entry_points_are_root_anchored_and_ranked_by_pattern_order() -> None:
    matcher = EntryPointMatcher(("main.py", "src/*/__main__.py"))
    candidates = [_candidate("main.py"), _candidate("pkg/main.py")]

    scores = _score(candidates, profile=_profile("main.py"))

    assert matcher.rank("src/tool/__main__.py") == 1
    assert matcher.rank("pkg/main.py") is None
    assert scores["main.py"].is_entry_point
    assert scores["main.py"].breakdown.entry_point == 1.0
    assert not scores["pkg/main.py"].is_entry_point
    assert "entry_point" in scores["main.py"].factors


def test_priority_patterns_mark_extra_entry_points() -> None:
    candidates = [_candidate("docs/architecture.md", category="docs")]

    scores = _score(candidates, priority_patterns=("docs/architecture.md",))

    assert scores["docs/architecture.md"].is_entry_point


def test_centrality_is_normalised_by_max_degree() -> None:
    candidates = [_candidate(name) for name in ("core.py", "a.py", "b.py", "c.py")]
    graph = ReferenceGraph.from_edges(
        [item.path for item in candidates],
        [("a.py", "core.py"), ("b.py", "core.py"), ("c.py", "core.py")],
    )

    scores = _score(candidates, graph=graph)

    assert scores["core.py"].breakdown.centrality == 1.0
    assert abs(scores["a.py"].breakdown.centrality - 1 / 3) < 1e-9
    assert "highly_referenced" in scores["core.py"].factors
    assert "dependency_root" in scores["core.py"].factors


def test_content_matches_only_count_for_scanned_files() -> None:
    candidates = [_candidate("big.txt", size=800), _candidate("small.txt", size=40)]
    contents = {"big.txt": "ledger ledger ledger", "small.txt": "ledger ledger ledger"}

    scores = _score(candidates, "ledger", contents=contents, query_scan_limit=1)

    assert scores["big.txt"].breakdown.query == 0.4
    assert scores["small.txt"].breakdown.query == 0.0


def test_type_priors_prefer_source_over_docs() -> None:
    candidates = [
        _candidate("src/app.py", category="source"),
        _candidate("docs/app.md", category="docs"),
    ]

    scores = _score(candidates)

    assert scores["src/app.py"].value > scores["docs/app.md"].value
    assert "documentation" in scores["docs/app.md"].factors


def test_binary_candidates_are_not_scored() -> None:
    candidates = [_candidate("app.py"), _candidate("logo.png", binary=True)]

    assert set(_score(candidates)) == {"app.py"}


def test_scores_stay_in_unit_interval() -> None:
    candidates = [
        _candidate("main.py", git_status="staged", category="source"),
        _candidate("old/notes.x", mtime_ns=0, category="unknown"),
    ]

    scores = _score(candidates, "main notes", profile=_profile("main.py"))

    assert all(0.0 <= score.value <= 1.0 for score in scores.values())


def test_rank_order_breaks_ties_by_entry_point_then_path_length() -> None:
    candidates = [_candidate("zz.py"), _candidate("bb.py"), _candidate("a.py")]
    weights = ScoringWeights(entry_point=0.0)

    scores = _score(candidates, profile=_profile("zz.py"), weights=weights)
    ranked = rank_candidates(candidates, scores)

    assert len({score.value for score in scores.values()}) == 1
    assert [item.path for item in ranked] == ["zz.py", "a.py", "bb.py"]
