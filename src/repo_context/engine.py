"""Discovery orchestration: detect, collect, graph, score, select and chunk."""

from __future__ import annotations

import os
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from repo_context.adapters.registry import AdapterRegistry
from repo_context.adapters.runtime import build_adapter_registry
from repo_context.cancellation import CancellationToken, check_cancelled
from repo_context.chunking.chunker import chunk_selection
from repo_context.chunking.models import ChunkPlan
from repo_context.collection.cache import ScanCache
from repo_context.collection.collector import collect_files, read_candidate_text
from repo_context.collection.git import GitStatusLookup, load_git_status
from repo_context.collection.models import CollectionOptions, CollectionResult, FileCandidate
from repo_context.config import DiscoveryConfig, DiscoveryOverrides, load_effective_config
from repo_context.detection.detector import detect_project
from repo_context.detection.profiles import ProjectProfile
from repo_context.errors import DiscoveryCancelledError, DiscoveryConfigError, DiscoveryWarning
from repo_context.graph.builder import build_reference_graph
from repo_context.graph.models import ReferenceGraph
from repo_context.logging.run_log import (
    JsonlRunLogger,
    RunEvent,
    sanitize_metadata,
    utc_timestamp,
)
from repo_context.scoring.models import RelevanceScore, ScoredCandidate
from repo_context.scoring.scorer import rank_candidates, score_candidates
from repo_context.selection.models import ContextBudget, SelectionResult
from repo_context.selection.selector import select_candidates
from repo_context.tokens import TokenEstimator, heuristic_token_estimator

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class PreviewEntry:
    """One ranked file with its inclusion decision."""

    path: str
    tokens: int
    included: bool
    reason: str | None
    score: RelevanceScore | None

    def to_dict(self) -> dict[str, object]:
        return {
            "path": self.path,
            "tokens": self.tokens,
            "included": self.included,
            "reason": self.reason,
            "score": self.score.to_dict() if self.score is not None else None,
        }


@dataclass(slots=True, frozen=True)
class Preview:
    """Ranked candidates with score breakdowns; nothing is sent anywhere."""

    project: ProjectProfile
    entries: tuple[PreviewEntry, ...]
    selection: SelectionResult
    graph: dict[str, object]
    warnings: tuple[DiscoveryWarning, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "project": self.project.to_public_dict(),
            "entries": [entry.to_dict() for entry in self.entries],
            "total_tokens": self.selection.total_tokens,
            "max_tokens": self.selection.budget.max_tokens,
            "graph": dict(self.graph),
            "warnings": [warning.to_dict() for warning in self.warnings],
        }


@dataclass(slots=True, frozen=True)
class DiscoveryResult:
    """Either one selection that fits the budget or a chunk plan covering the project."""

    project: ProjectProfile
    selection: SelectionResult
    chunk_plan: ChunkPlan | None
    warnings: tuple[DiscoveryWarning, ...]
    profile: dict[str, object] = field(default_factory=dict)

    @property
    def chunked(self) -> bool:
        return self.chunk_plan is not None

    def to_dict(self) -> dict[str, object]:
        return {
            "mode": "chunked" if self.chunk_plan is not None else "selection",
            "project": self.project.to_public_dict(),
            "selection": self.selection.to_dict(),
            "chunks": self.chunk_plan.to_dict() if self.chunk_plan is not None else None,
            "warnings": [warning.to_dict() for warning in self.warnings],
        }


@dataclass(slots=True, frozen=True)
class _Analysis:
    profile: ProjectProfile
    collection: CollectionResult
    graph: ReferenceGraph
    ranked: tuple[ScoredCandidate, ...]
    unusable: tuple[FileCandidate, ...]
    timings: dict[str, float]

    @property
    def total_tokens(self) -> int:
        return sum(item.tokens for item in self.ranked)


def validate_project_root(root: Path) -> Path:
    """Resolve the project root or raise DiscoveryConfigError naming the problem."""
    resolved = root.expanduser().resolve()
    if not resolved.exists():
        raise DiscoveryConfigError(
            field="project_root",
            value=str(root),
            reason="Project root does not exist.",
            hint="Pass an existing directory.",
        )
    if not resolved.is_dir():
        raise DiscoveryConfigError(
            field="project_root",
            value=str(root),
            reason="Project root is not a directory.",
            hint="Pass the directory that contains the project, not a file inside it.",
        )
    try:
        with os.scandir(resolved):
            pass
    except OSError as error:
        raise DiscoveryConfigError(
            field="project_root",
            value=str(root),
            reason=f"Project root is not readable: {error.strerror or error}",
            hint="Check directory permissions.",
        ) from error
    return resolved


class DiscoveryEngine:
    """Run context discovery for one project root."""

    def __init__(
        self,
        root: Path,
        *,
        config: DiscoveryConfig | None = None,
        overrides: DiscoveryOverrides | None = None,
        token_estimator: TokenEstimator = heuristic_token_estimator,
        git_status: GitStatusLookup | None = None,
        registry: AdapterRegistry | None = None,
        cache: ScanCache | None = None,
        run_logger: JsonlRunLogger | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._root = validate_project_root(root)
        self._config = config or load_effective_config(self._root, overrides)
        self._token_estimator = token_estimator
        self._git_status = git_status
        self._registry = registry or build_adapter_registry()
        if cache is None and self._config.enable_cache:
            cache = ScanCache()
        self._cache = cache
        if run_logger is None and self._config.data_dir is not None:
            run_logger = JsonlRunLogger.in_data_dir(self._config.data_dir)
        self._run_logger = run_logger
        self._clock = clock

    @property
    def root(self) -> Path:
        return self._root

    @property
    def config(self) -> DiscoveryConfig:
        return self._config

    @property
    def cache(self) -> ScanCache | None:
        return self._cache

    def preview(self, query: str, *, cancel: CancellationToken | None = None) -> Preview:
        """Rank every candidate and show what a selection would keep and why."""
        return self._logged("preview", query, lambda: self._preview(query, cancel))

    def select(
        self,
        query: str,
        *,
        chunked: bool = False,
        cancel: CancellationToken | None = None,
    ) -> DiscoveryResult:
        """Select files for ``query``.

        When everything fits the budget, or chunking is not requested, the
        result holds one SelectionResult. Otherwise every usable file is
        selected and partitioned into chunks with the configured strategy.
        """
        return self._logged("select", query, lambda: self._select(query, chunked, cancel))

    def _preview(self, query: str, cancel: CancellationToken | None) -> Preview:
        analysis = self._analyze(query, cancel)
        selection = self._budgeted_selection(analysis, self._config.max_tokens)
        included = {item.path for item in selection.included}
        excluded = {item.path: item.reason for item in selection.excluded}
        entries = [
            PreviewEntry(
                path=item.path,
                tokens=item.tokens,
                included=item.path in included,
                reason=excluded.get(item.path),
                score=item.score,
            )
            for item in analysis.ranked
        ]
        entries.extend(
            PreviewEntry(
                path=candidate.path,
                tokens=candidate.tokens,
                included=False,
                reason=excluded.get(candidate.path),
                score=None,
            )
            for candidate in analysis.unusable
        )
        return Preview(
            project=analysis.profile,
            entries=tuple(entries),
            selection=selection,
            graph=analysis.graph.to_public_dict(),
            warnings=(*analysis.collection.warnings, *selection.warnings),
        )

    def _select(
        self, query: str, chunked: bool, cancel: CancellationToken | None
    ) -> DiscoveryResult:
        analysis = self._analyze(query, cancel)
        max_tokens = self._config.max_tokens
        chunk_plan: ChunkPlan | None = None
        started = time.perf_counter()
        if chunked and analysis.total_tokens > max_tokens:
            full = self._budgeted_selection(analysis, analysis.total_tokens)
            chunk_plan = chunk_selection(
                full, max_tokens, self._config.chunk_strategy, graph=analysis.graph
            )
            selection = full
        else:
            selection = self._budgeted_selection(analysis, max_tokens)
        timings = {**analysis.timings, "select_seconds": time.perf_counter() - started}
        return DiscoveryResult(
            project=analysis.profile,
            selection=selection,
            chunk_plan=chunk_plan,
            warnings=(*analysis.collection.warnings, *selection.warnings),
            profile={
                "timings": timings,
                "collection": dict(analysis.collection.profile),
                "graph": analysis.graph.to_public_dict(),
                "cache": self._cache.stats() if self._cache is not None else None,
            },
        )

    def _budgeted_selection(self, analysis: _Analysis, max_tokens: int) -> SelectionResult:
        return select_candidates(
            analysis.ranked,
            ContextBudget(max_tokens=max(1, max_tokens)),
            unusable=analysis.unusable,
            include_oversized_entry_point=self._config.include_oversized_entry_point,
        )

    def _analyze(self, query: str, cancel: CancellationToken | None) -> _Analysis:
        timings: dict[str, float] = {}
        now = self._clock()

        started = time.perf_counter()
        profile = detect_project(self._root, self._config.project)
        git_status = self._git_status or load_git_status(self._root)
        collection = collect_files(
            self._root,
            profile,
            CollectionOptions.from_config(self._config),
            token_estimator=self._token_estimator,
            git_status=git_status,
            cache=self._cache,
            cancel=cancel,
        )
        timings["collect_seconds"] = time.perf_counter() - started
        check_cancelled(cancel, "collection")

        started = time.perf_counter()
        graph = build_reference_graph(
            collection.candidates,
            self._registry,
            read_text=read_candidate_text,
            max_workers=self._config.max_workers,
        )
        timings["graph_seconds"] = time.perf_counter() - started
        check_cancelled(cancel, "graph")

        started = time.perf_counter()
        scores = score_candidates(
            collection.candidates,
            graph,
            profile,
            query,
            weights=self._config.weights,
            now=now,
            read_content=read_candidate_text,
            query_scan_limit=self._config.query_scan_limit,
            query_scan_bytes=self._config.query_scan_bytes,
            priority_patterns=self._config.priority_patterns,
            max_workers=self._config.max_workers,
        )
        ranked = rank_candidates(collection.candidates, scores)
        timings["score_seconds"] = time.perf_counter() - started
        check_cancelled(cancel, "scoring")

        return _Analysis(
            profile=profile,
            collection=collection,
            graph=graph,
            ranked=tuple(ranked),
            unusable=tuple(
                candidate for candidate in collection.candidates if not candidate.usable
            ),
            timings=timings,
        )

    def _logged(self, operation: str, query: str, action: Callable[[], T]) -> T:
        run_id = uuid.uuid4().hex
        try:
            result = action()
        except DiscoveryCancelledError:
            self._log(run_id, operation, query, ok=False, cancelled=True, error_code="cancelled")
            raise
        except DiscoveryConfigError as error:
            self._log(
                run_id,
                operation,
                query,
                ok=False,
                cancelled=False,
                error_code="config_error",
                extra={"field": error.field},
            )
            raise
        self._log(
            run_id,
            operation,
            query,
            ok=True,
            cancelled=False,
            error_code=None,
            extra=_result_metadata(result),
        )
        return result

    def _log(
        self,
        run_id: str,
        operation: str,
        query: str,
        *,
        ok: bool,
        cancelled: bool,
        error_code: str | None,
        extra: dict[str, object] | None = None,
    ) -> None:
        if self._run_logger is None:
            return
        metadata: dict[str, object] = {
            "query": query,
            "max_tokens": self._config.max_tokens,
            "chunk_strategy": self._config.chunk_strategy,
            **(extra or {}),
        }
        self._run_logger.append(
            RunEvent(
                timestamp=utc_timestamp(),
                run_id=run_id,
                operation=operation,
                ok=ok,
                cancelled=cancelled,
                error_code=error_code,
                metadata=sanitize_metadata(metadata),
            )
        )


def _result_metadata(result: object) -> dict[str, object]:
    if isinstance(result, DiscoveryResult):
        return {
            "project_kind": result.project.kind,
            "included_files": len(result.selection.included),
            "excluded_files": len(result.selection.excluded),
            "total_tokens": result.selection.total_tokens,
            "chunks": len(result.chunk_plan.chunks) if result.chunk_plan is not None else 0,
            "warnings": len(result.warnings),
        }
    if isinstance(result, Preview):
        return {
            "project_kind": result.project.kind,
            "ranked_files": len(result.entries),
            "total_tokens": result.selection.total_tokens,
            "warnings": len(result.warnings),
        }
    return {}


def discover(
    root: Path,
    query: str,
    *,
    chunked: bool = False,
    overrides: DiscoveryOverrides | None = None,
    token_estimator: TokenEstimator = heuristic_token_estimator,
    git_status: GitStatusLookup | None = None,
    cache: ScanCache | None = None,
    cancel: CancellationToken | None = None,
) -> DiscoveryResult:
    """One-shot discovery with repo config and optional overrides."""
    engine = DiscoveryEngine(
        root,
        overrides=overrides,
        token_estimator=token_estimator,
        git_status=git_status,
        cache=cache,
    )
    return engine.select(query, chunked=chunked, cancel=cancel)
