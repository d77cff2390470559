from __future__ import annotations

import json
from pathlib import Path

import pytest

from repo_context.adapters import AdapterRegistry, ImportReference, LexicalFallbackAdapter
from repo_context.cancellation import CancellationToken
from repo_context.collection import GitStatusSnapshot, ScanCache
from repo_context.config import DiscoveryOverrides
from repo_context.engine import DiscoveryEngine
from repo_context.errors import (
    TOKEN_BUDGET_TOO_SMALL,
    DiscoveryCancelledError,
    DiscoveryConfigError,
)
from repo_context.logging import JsonlRunLogger
from repo_context.tokens import heuristic_token_estimator

FIXED_NOW = 1_900_000_000.0


def _write(root: Path, relative: str, text: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _python_project(root: Path) -> None:
    _write(root, "pyproject.toml", '[project]\nname = "demo"\n')
    _write(root, "main.py", "from app import service\n\nservice.run()\n")
    _write(root, "app/__init__.py", "")
    _write(root, "app/service.py", "from app import models\n\n" + "# pad\n" * 300)
    _write(root, "app/models.py", "class Invoice:\n    total = 0\n" + "# pad\n" * 200)
    _write(root, "app/billing.py", "from app.models import Invoice\n" + "# pad\n" * 200)
    _write(root, "tests/test_service.py", "from app import service\n" + "# pad\n" * 100)
    _write(root, "README.md", "# Demo\n\nInvoice tooling.\n")
    (root / "app" / "compiled.py").write_bytes(b"\x00\x01\x02 not text")


def _engine(root: Path, **kwargs: object) -> DiscoveryEngine:
    return DiscoveryEngine(
        root,
        git_status=kwargs.pop("git_status", GitStatusSnapshot()),
        clock=lambda: FIXED_NOW,
        **kwargs,
    )


def test_entry_point_is_selected_first_in_python_project(tmp_path: Path) -> None:
    _python_project(tmp_path)

    result = _engine(tmp_path).select("invoice billing")

    assert result.project.kind == "python"
    assert result.selection.paths[0] == "main.py"
    assert "app/billing.py" in result.selection.paths
    excluded = {item.path: item.reason for item in result.selection.excluded}
    assert excluded["app/compiled.py"] == "binary"


def test_repeated_runs_produce_identical_results(tmp_path: Path) -> None:
    _python_project(tmp_path)
    overrides = DiscoveryOverrides(max_tokens=600)

    first = _engine(tmp_path, overrides=overrides).select("invoice", chunked=True)
    second = _engine(tmp_path, overrides=overrides).select("invoice", chunked=True)

    assert first.to_dict() == second.to_dict()
    assert json.dumps(first.to_dict(), sort_keys=True)


def test_budget_is_respected_without_chunking(tmp_path: Path) -> None:
    _python_project(tmp_path)

    result = _engine(tmp_path, overrides=DiscoveryOverrides(max_tokens=300)).select("")

    assert result.chunked is False
    assert result.selection.total_tokens <= 300
    assert result.selection.within_budget


def test_chunked_selection_uses_configured_strategy(tmp_path: Path) -> None:
    _python_project(tmp_path)
    engine = _engine(
        tmp_path, overrides=DiscoveryOverrides(max_tokens=600, chunk_strategy="module")
    )

    result = engine.select("", chunked=True)

    assert result.chunk_plan is not None
    assert result.chunk_plan.strategy == "module"
    chunked_paths = sorted(path for chunk in result.chunk_plan.chunks for path in chunk.paths)
    assert chunked_paths == sorted(result.selection.paths)
    assert "app/compiled.py" not in chunked_paths
    assert all(
        chunk.estimated_tokens <= 600 or chunk.oversized for chunk in result.chunk_plan.chunks
    )


def test_oversized_entry_point_warns_when_budget_is_tiny(tmp_path: Path) -> None:
    _write(tmp_path, "main.py", "x = 1\n" * 200)
    _write(tmp_path, "util.py", "y = 2\n")
    _write(tmp_path, "setup.py", "")

    result = _engine(tmp_path, overrides=DiscoveryOverrides(max_tokens=50)).select("")

    assert "main.py" not in result.selection.paths
    assert TOKEN_BUDGET_TOO_SMALL in [warning.code for warning in result.warnings]


def test_preview_lists_every_candidate_with_decision(tmp_path: Path) -> None:
    _python_project(tmp_path)

    preview = _engine(tmp_path, overrides=DiscoveryOverrides(max_tokens=300)).preview("invoice")

    payload = preview.to_dict()
    paths = [entry["path"] for entry in payload["entries"]]
    assert sorted(paths) == sorted(set(paths))
    assert "app/compiled.py" in paths
    decisions = {entry.path: entry for entry in preview.entries}
    assert decisions["app/compiled.py"].score is None
    assert decisions["app/compiled.py"].reason == "binary"
    assert decisions["app/service.py"].included is False
    assert decisions["app/service.py"].reason == "oversized"
    assert decisions["main.py"].included is True
    assert payload["graph"]["edges"] >= 3
    assert payload["max_tokens"] == 300


def test_cancellation_stops_run_and_is_logged(tmp_path: Path) -> None:
    _python_project(tmp_path)
    logger = JsonlRunLogger(tmp_path / "state" / "runs.jsonl")
    engine = _engine(tmp_path, run_logger=logger)
    token = CancellationToken()
    token.cancel()

    with pytest.raises(DiscoveryCancelledError):
        engine.select("invoice", cancel=token)

    events = logger.read()
    assert len(events) == 1
    assert events[0]["cancelled"] is True
    assert events[0]["error_code"] == "cancelled"


def test_successful_runs_are_logged_without_query_text(tmp_path: Path) -> None:
    _python_project(tmp_path)
    (tmp_path / "repo_context.toml").write_text(
        '[context]\ndata_dir = ".context_runs"\n', encoding="utf-8"
    )
    engine = _engine(tmp_path)

    engine.preview("confidential invoice question")
    engine.select("confidential invoice question")

    log_file = tmp_path / ".context_runs" / "discovery_runs.jsonl"
    events = JsonlRunLogger(log_file).read()
    assert [event["operation"] for event in events] == ["preview", "select"]
    assert all(event["ok"] for event in events)
    assert "confidential" not in log_file.read_text(encoding="utf-8")
    assert events[1]["metadata"]["project_kind"] == "python"


def test_engine_cache_is_reused_between_runs(tmp_path: Path) -> None:
    _python_project(tmp_path)
    cache = ScanCache()
    engine = _engine(tmp_path, cache=cache)

    engine.select("")
    second = engine.select("")

    assert engine.cache is cache
    assert cache.stats()["hits"] == 1
    assert second.profile["cache"] == cache.stats()


def test_invalid_project_root_is_a_config_error(tmp_path: Path) -> None:
    file_root = tmp_path / "file.txt"
    file_root.write_text("x", encoding="utf-8")

    with pytest.raises(DiscoveryConfigError, match="does not exist") as missing:
        DiscoveryEngine(tmp_path / "missing")
    with pytest.raises(DiscoveryConfigError, match="not a directory"):
        DiscoveryEngine(file_root)

    assert missing.value.field == "project_root"


def test_invalid_repo_config_fails_before_any_work(tmp_path: Path) -> None:
    (tmp_path / "repo_context.toml").write_text(
        '[context]\nchunk_strategy = "by_vibes"\n', encoding="utf-8"
    )

    with pytest.raises(DiscoveryConfigError, match="chunk_strategy"):
        _engine(tmp_path)


class _IndexingAdapter:
    name = "indexing"

    def supports_path(self, path: str) -> bool:
        return path.endswith(".boom")

    def extract_references(self, path: str, text: str) -> list[ImportReference]:
        return [][0]


def test_failing_adapter_does_not_abort_discovery(tmp_path: Path) -> None:
    _write(tmp_path, "bad.boom", "payload\n")
    _write(tmp_path, "notes.txt", "release notes\n")
    registry = AdapterRegistry()
    registry.register(_IndexingAdapter())
    registry.register(LexicalFallbackAdapter(), fallback=True)

    result = _engine(tmp_path, registry=registry).select("anything")

    assert sorted(result.selection.paths) == ["bad.boom", "notes.txt"]
    assert result.selection.within_budget


def test_shared_cache_recounts_tokens_for_a_different_estimator(tmp_path: Path) -> None:
    _write(tmp_path, "notes.txt", "x" * 400)
    cache = ScanCache()

    heuristic = _engine(tmp_path, cache=cache, token_estimator=heuristic_token_estimator)
    exact = _engine(tmp_path, cache=cache, token_estimator=lambda text: len(text))

    assert heuristic.select("").selection.total_tokens == 100
    assert exact.select("").selection.total_tokens == 400
