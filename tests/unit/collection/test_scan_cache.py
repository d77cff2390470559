from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from repo_context.collection import (
    CollectionOptions,
    GitStatusSnapshot,
    ScanCache,
    collect_files,
    scan_fingerprint,
)
from repo_context.collection.models import PERMISSION_DENIED
from repo_context.detection import ProjectProfile
from repo_context.tokens import TokenEstimator, heuristic_token_estimator

_PROFILE = ProjectProfile(
    kind="generic", entry_points=(), include_globs=("**/*",), exclude_globs=()
)


def _collect(
    root: Path,
    cache: ScanCache,
    git_status: GitStatusSnapshot | None = None,
    token_estimator: TokenEstimator = heuristic_token_estimator,
):
    return collect_files(
        root,
        _PROFILE,
        CollectionOptions(),
        token_estimator=token_estimator,
        git_status=git_status or GitStatusSnapshot(),
        cache=cache,
    )


def test_unchanged_tree_is_served_from_cache(tmp_path: Path) -> None:
    (tmp_path / "a.py").write_text("x = 1\n", encoding="utf-8")
    (tmp_path / "b.py").write_text("y = 2\n", encoding="utf-8")
    cache = ScanCache()

    first = _collect(tmp_path, cache)
    second = _collect(tmp_path, cache)

    assert first.cache_hit is False
    assert second.cache_hit is True
    assert second.candidates == first.candidates
    assert cache.stats() == {"entries": 1, "hits": 1, "misses": 1}


def test_cache_hit_refreshes_git_status(tmp_path: Path) -> None:
    (tmp_path / "a.py").write_text("x = 1\n", encoding="utf-8")
    cache = ScanCache()
    _collect(tmp_path, cache)

    result = _collect(tmp_path, cache, GitStatusSnapshot(statuses={"a.py": "modified"}))

    assert result.cache_hit is True
    assert result.candidates[0].git_status == "modified"


def test_changed_file_is_reinspected_and_others_reused(tmp_path: Path) -> None:
    (tmp_path / "a.py").write_text("x = 1\n", encoding="utf-8")
    (tmp_path / "b.py").write_text("y = 2\n", encoding="utf-8")
    cache = ScanCache()
    _collect(tmp_path, cache)

    (tmp_path / "b.py").write_text("y = 2\n" * 40, encoding="utf-8")
    result = _collect(tmp_path, cache)

    assert result.cache_hit is False
    assert result.profile["reused_files"] == 1
    assert result.by_path()["b.py"].tokens == 60


def test_invalidate_and_clear_drop_entries(tmp_path: Path) -> None:
    (tmp_path / "a.py").write_text("x = 1\n", encoding="utf-8")
    cache = ScanCache()
    _collect(tmp_path, cache)

    assert cache.invalidate(tmp_path.resolve()) == 1
    assert cache.invalidate(tmp_path.resolve()) == 0
    cache.clear()
    assert cache.stats() == {"entries": 0, "hits": 0, "misses": 0}


def test_persisted_cache_survives_reload(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    (project / "a.py").write_text("x = 1\n", encoding="utf-8")
    cache = ScanCache()
    first = _collect(project, cache)
    cache_file = tmp_path / "state" / "scan_cache.json"

    cache.save(cache_file)
    reloaded = ScanCache.load(cache_file)
    second = _collect(project, reloaded)

    assert second.cache_hit is True
    assert second.candidates == first.candidates


def test_corrupt_cache_file_loads_empty(tmp_path: Path) -> None:
    cache_file = tmp_path / "scan_cache.json"
    cache_file.write_text("{not json", encoding="utf-8")

    assert ScanCache.load(cache_file).stats()["entries"] == 0
    assert ScanCache.load(tmp_path / "absent.json").stats()["entries"] == 0


def test_token_counts_are_not_shared_between_estimators(tmp_path: Path) -> None:
    (tmp_path / "notes.txt").write_text("x" * 400, encoding="utf-8")
    cache = ScanCache()

    heuristic = _collect(tmp_path, cache)
    exact = _collect(tmp_path, cache, token_estimator=lambda text: len(text))
    repeated = _collect(tmp_path, cache)

    assert heuristic.candidates[0].tokens == 100
    assert exact.cache_hit is False
    assert exact.candidates[0].tokens == 400
    assert repeated.cache_hit is True
    assert repeated.candidates[0].tokens == 100
    assert cache.stats()["entries"] == 2


def test_prior_file_error_is_not_reused(tmp_path: Path) -> None:
    (tmp_path / "a.py").write_text("x = 1\n", encoding="utf-8")
    cache = ScanCache()
    first = _collect(tmp_path, cache)
    failed = tuple(replace(item, error=PERMISSION_DENIED, tokens=0) for item in first.candidates)
    fingerprint = scan_fingerprint(CollectionOptions(), heuristic_token_estimator)
    cache.store(tmp_path.resolve(), fingerprint, "stale-digest", failed)

    result = _collect(tmp_path, cache)

    assert result.cache_hit is False
    assert result.profile["reused_files"] == 0
    assert result.candidates[0].error is None
    assert result.candidates[0].tokens == 2
