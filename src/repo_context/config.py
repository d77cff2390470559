"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from repo_context.errors import DiscoveryConfigError

CONFIG_FILE_NAME = "repo_context.toml"

MAX_TOKENS_CAP = 2_000_000
MAX_FILES_CAP = 200_000
MAX_FILE_BYTES_CAP = 16 * 1024 * 1024
MAX_DEPTH_CAP = 64
MAX_WORKERS_CAP = 64

CHUNK_STRATEGIES = ("module", "functional", "token", "hierarchical")
FILE_CATEGORIES = (
    "source",
    "test",
    "config",
    "docs",
    "data",
    "unknown",
    "build_artifact",
)

DEFAULT_EXCLUDE_GLOBS = (
    "**/.git/**",
    "**/node_modules/**",
    "**/__pycache__/**",
    "**/.venv/**",
    "**/*.log",
)
DEFAULT_PRIORITY_PATTERNS: tuple[str, ...] = ()
DEFAULT_TYPE_PRIORS: tuple[tuple[str, float], ...] = (
    ("source", 1.0),
    ("test", 0.8),
    ("config", 0.6),
    ("docs", 0.4),
    ("data", 0.3),
    ("unknown", 0.2),
    ("build_artifact", 0.1),
)


@dataclass(slots=True, frozen=True)
class ScoringWeights:
    """Tunable weights for the five relevance factors."""

    entry_point: float = 0.30
    recency: float = 0.15
    centrality: float = 0.20
    query: float = 0.25
    file_type: float = 0.10
    recency_half_life_days: float = 30.0
    type_priors: tuple[tuple[str, float], ...] = DEFAULT_TYPE_PRIORS

    @property
    def total(self) -> float:
        return self.entry_point + self.recency + self.centrality + self.query + self.file_type

    def type_prior(self, category: str) -> float:
        """Return the configured prior for a coarse file category."""
        for name, value in self.type_priors:
            if name == category:
                return value
        return 0.0


@dataclass(slots=True, frozen=True)
class ProjectOverride:
    """Explicit project type and entry points from configuration."""

    project_type: str | None = None
    entry_points: tuple[str, ...] | None = None


@dataclass(slots=True, frozen=True)
class DiscoveryConfig:
    """Fully merged discovery configuration."""

    project_root: Path
    max_tokens: int = 4000
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    priority_patterns: tuple[str, ...] = DEFAULT_PRIORITY_PATTERNS
    chunk_strategy: str = "hierarchical"
    query_scan_limit: int = 50
    query_scan_bytes: int = 64 * 1024
    max_files: int = 5000
    max_file_bytes: int = 1024 * 1024
    max_depth: int = 10
    respect_gitignore: bool = True
    enable_cache: bool = True
    max_workers: int = 8
    include_oversized_entry_point: bool = False
    data_dir: Path | None = None
    project: ProjectOverride = field(default_factory=ProjectOverride)
    weights: ScoringWeights = field(default_factory=ScoringWeights)

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for previews and run logs."""
        return {
            "project_root": str(self.project_root),
            "context": {
                "max_tokens": self.max_tokens,
                "include": list(self.include),
                "exclude": list(self.exclude),
                "priority_patterns": list(self.priority_patterns),
                "chunk_strategy": self.chunk_strategy,
                "query_scan_limit": self.query_scan_limit,
                "query_scan_bytes": self.query_scan_bytes,
                "max_files": self.max_files,
                "max_file_bytes": self.max_file_bytes,
                "max_depth": self.max_depth,
                "respect_gitignore": self.respect_gitignore,
                "enable_cache": self.enable_cache,
                "max_workers": self.max_workers,
                "include_oversized_entry_point": self.include_oversized_entry_point,
                "data_dir": str(self.data_dir) if self.data_dir is not None else None,
            },
            "project": {
                "project_type": self.project.project_type,
                "entry_points": (
                    list(self.project.entry_points)
                    if self.project.entry_points is not None
                    else None
                ),
            },
            "scoring": {
                "entry_point_weight": self.weights.entry_point,
                "recency_weight": self.weights.recency,
                "centrality_weight": self.weights.centrality,
                "query_weight": self.weights.query,
                "file_type_weight": self.weights.file_type,
                "recency_half_life_days": self.weights.recency_half_life_days,
                "type_priors": dict(self.weights.type_priors),
            },
        }


@dataclass(slots=True, frozen=True)
class DiscoveryOverrides:
    """Optional caller overrides applied at highest precedence."""

    max_tokens: int | None = None
    include: tuple[str, ...] | None = None
    exclude: tuple[str, ...] | None = None
    chunk_strategy: str | None = None
    max_files: int | None = None
    query_scan_limit: int | None = None
    max_workers: int | None = None
    enable_cache: bool | None = None
    data_dir: Path | None = None
    project_type: str | None = None
    entry_points: tuple[str, ...] | None = None


def default_config(project_root: Path) -> DiscoveryConfig:
    """Build default config for a given project root."""
    return DiscoveryConfig(project_root=project_root.resolve())


def load_repo_config_file(project_root: Path) -> dict[str, object]:
    """Load optional repo_context.toml from the project root."""
    config_path = project_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    try:
        with config_path.open("rb") as handle:
            payload = tomllib.load(handle)
    except tomllib.TOMLDecodeError as error:
        raise DiscoveryConfigError(
            field=CONFIG_FILE_NAME,
            value=str(config_path),
            reason=f"{CONFIG_FILE_NAME} is not valid TOML: {error}",
            hint="Fix the TOML syntax or remove the file.",
        ) from error
    if not isinstance(payload, dict):
        raise DiscoveryConfigError(
            field=CONFIG_FILE_NAME,
            value=str(config_path),
            reason=f"{CONFIG_FILE_NAME} must contain a top-level table.",
        )
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise DiscoveryConfigError(
            field=key, value=value, reason=f"Config section '{key}' must be a table."
        )
    return value


def _tuple_of_strings(value: object, name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise DiscoveryConfigError(
            field=name, value=value, reason=f"Config field '{name}' must be a list of strings."
        )
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise DiscoveryConfigError(
                field=name,
                value=item,
                reason=f"Config field '{name}' must contain only strings.",
            )
        output.append(item)
    return tuple(output)


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise DiscoveryConfigError(
            field=name, value=value, reason=f"Config field '{name}' must be a boolean."
        )
    return value


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise DiscoveryConfigError(
            field=name, value=value, reason=f"Config field '{name}' must be a positive integer."
        )
    if cap is not None and value > cap:
        raise DiscoveryConfigError(
            field=name, value=value, reason=f"Config field '{name}' must be <= {cap}."
        )
    return value


def _optional_non_negative_float(value: object, name: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise DiscoveryConfigError(
            field=name,
            value=value,
            reason=f"Config field '{name}' must be a non-negative number.",
        )
    return float(value)


def _chunk_strategy(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or value not in CHUNK_STRATEGIES:
        raise DiscoveryConfigError(
            field=name,
            value=value,
            reason=f"Config field '{name}' must be one of {', '.join(CHUNK_STRATEGIES)}.",
        )
    return value


def _merge_weights(base: ScoringWeights, payload: dict[str, object]) -> ScoringWeights:
    priors = dict(base.type_priors)
    priors_payload = _get_table(payload, "type_priors")
    for key, value in priors_payload.items():
        if key not in FILE_CATEGORIES:
            raise DiscoveryConfigError(
                field=f"scoring.type_priors.{key}",
                value=value,
                reason=f"Unknown file category '{key}'.",
                hint=f"Use one of {', '.join(FILE_CATEGORIES)}.",
            )
        priors[key] = _optional_non_negative_float(value, f"scoring.type_priors.{key}", 0.0)

    weights = ScoringWeights(
        entry_point=_optional_non_negative_float(
            payload.get("entry_point_weight"), "scoring.entry_point_weight", base.entry_point
        ),
        recency=_optional_non_negative_float(
            payload.get("recency_weight"), "scoring.recency_weight", base.recency
        ),
        centrality=_optional_non_negative_float(
            payload.get("centrality_weight"), "scoring.centrality_weight", base.centrality
        ),
        query=_optional_non_negative_float(
            payload.get("query_weight"), "scoring.query_weight", base.query
        ),
        file_type=_optional_non_negative_float(
            payload.get("file_type_weight"), "scoring.file_type_weight", base.file_type
        ),
        recency_half_life_days=_optional_non_negative_float(
            payload.get("recency_half_life_days"),
            "scoring.recency_half_life_days",
            base.recency_half_life_days,
        ),
        type_priors=tuple((name, priors[name]) for name in FILE_CATEGORIES if name in priors),
    )
    if weights.total <= 0:
        raise DiscoveryConfigError(
            field="scoring",
            value=weights.total,
            reason="At least one scoring weight must be greater than zero.",
        )
    if weights.recency_half_life_days <= 0:
        raise DiscoveryConfigError(
            field="scoring.recency_half_life_days",
            value=weights.recency_half_life_days,
            reason="Config field 'scoring.recency_half_life_days' must be greater than zero.",
        )
    return weights


def merge_config(
    base: DiscoveryConfig, repo_payload: dict[str, object], overrides: DiscoveryOverrides
) -> DiscoveryConfig:
    """Merge defaults, repo config, then caller overrides."""
    context_payload = _get_table(repo_payload, "context")
    project_payload = _get_table(repo_payload, "project")
    scoring_payload = _get_table(repo_payload, "scoring")

    include = base.include
    if "include" in context_payload:
        include = _tuple_of_strings(context_payload["include"], "context.include")
    exclude = base.exclude
    if "exclude" in context_payload:
        exclude = _tuple_of_strings(context_payload["exclude"], "context.exclude")
    priority_patterns = base.priority_patterns
    if "priority_patterns" in context_payload:
        priority_patterns = _tuple_of_strings(
            context_payload["priority_patterns"], "context.priority_patterns"
        )

    data_dir = base.data_dir
    raw_data_dir = context_payload.get("data_dir")
    if raw_data_dir is not None:
        if not isinstance(raw_data_dir, str) or not raw_data_dir.strip():
            raise DiscoveryConfigError(
                field="context.data_dir",
                value=raw_data_dir,
                reason="Config field 'context.data_dir' must be a non-empty string.",
            )
        data_dir = (base.project_root / raw_data_dir).resolve()

    project_type = base.project.project_type
    raw_project_type = project_payload.get("project_type")
    if raw_project_type is not None:
        if not isinstance(raw_project_type, str):
            raise DiscoveryConfigError(
                field="project.project_type",
                value=raw_project_type,
                reason="Config field 'project.project_type' must be a string.",
            )
        project_type = raw_project_type
    entry_points = base.project.entry_points
    if "entry_points" in project_payload:
        entry_points = _tuple_of_strings(project_payload["entry_points"], "project.entry_points")

    merged = replace(
        base,
        max_tokens=_optional_positive_int_with_cap(
            context_payload.get("max_tokens"), "context.max_tokens", base.max_tokens, MAX_TOKENS_CAP
        ),
        include=include,
        exclude=exclude,
        priority_patterns=priority_patterns,
        chunk_strategy=_chunk_strategy(
            context_payload.get("chunk_strategy"), "context.chunk_strategy", base.chunk_strategy
        ),
        query_scan_limit=_optional_positive_int_with_cap(
            context_payload.get("query_scan_limit"),
            "context.query_scan_limit",
            base.query_scan_limit,
            MAX_FILES_CAP,
        ),
        query_scan_bytes=_optional_positive_int_with_cap(
            context_payload.get("query_scan_bytes"),
            "context.query_scan_bytes",
            base.query_scan_bytes,
            MAX_FILE_BYTES_CAP,
        ),
        max_files=_optional_positive_int_with_cap(
            context_payload.get("max_files"), "context.max_files", base.max_files, MAX_FILES_CAP
        ),
        max_file_bytes=_optional_positive_int_with_cap(
            context_payload.get("max_file_bytes"),
            "context.max_file_bytes",
            base.max_file_bytes,
            MAX_FILE_BYTES_CAP,
        ),
        max_depth=_optional_positive_int_with_cap(
            context_payload.get("max_depth"), "context.max_depth", base.max_depth, MAX_DEPTH_CAP
        ),
        respect_gitignore=_optional_bool(
            context_payload.get("respect_gitignore"),
            "context.respect_gitignore",
            base.respect_gitignore,
        ),
        enable_cache=_optional_bool(
            context_payload.get("enable_cache"), "context.enable_cache", base.enable_cache
        ),
        max_workers=_optional_positive_int_with_cap(
            context_payload.get("max_workers"),
            "context.max_workers",
            base.max_workers,
            MAX_WORKERS_CAP,
        ),
        include_oversized_entry_point=_optional_bool(
            context_payload.get("include_oversized_entry_point"),
            "context.include_oversized_entry_point",
            base.include_oversized_entry_point,
        ),
        data_dir=data_dir,
        project=ProjectOverride(project_type=project_type, entry_points=entry_points),
        weights=_merge_weights(base.weights, scoring_payload),
    )
    return apply_overrides(merged, overrides)


def apply_overrides(config: DiscoveryConfig, overrides: DiscoveryOverrides) -> DiscoveryConfig:
    """Apply caller overrides at highest precedence."""
    project = config.project
    if overrides.project_type is not None or overrides.entry_points is not None:
        project = ProjectOverride(
            project_type=(
                overrides.project_type
                if overrides.project_type is not None
                else project.project_type
            ),
            entry_points=(
                overrides.entry_points
                if overrides.entry_points is not None
                else project.entry_points
            ),
        )
    data_dir = overrides.data_dir.resolve() if overrides.data_dir is not None else config.data_dir
    return replace(
        config,
        max_tokens=_optional_positive_int_with_cap(
            overrides.max_tokens, "overrides.max_tokens", config.max_tokens, MAX_TOKENS_CAP
        ),
        include=overrides.include if overrides.include is not None else config.include,
        exclude=overrides.exclude if overrides.exclude is not None else config.exclude,
        chunk_strategy=_chunk_strategy(
            overrides.chunk_strategy, "overrides.chunk_strategy", config.chunk_strategy
        ),
        max_files=_optional_positive_int_with_cap(
            overrides.max_files, "overrides.max_files", config.max_files, MAX_FILES_CAP
        ),
        query_scan_limit=_optional_positive_int_with_cap(
            overrides.query_scan_limit,
            "overrides.query_scan_limit",
            config.query_scan_limit,
            MAX_FILES_CAP,
        ),
        max_workers=_optional_positive_int_with_cap(
            overrides.max_workers, "overrides.max_workers", config.max_workers, MAX_WORKERS_CAP
        ),
        enable_cache=_optional_bool(
            overrides.enable_cache, "overrides.enable_cache", config.enable_cache
        ),
        data_dir=data_dir,
        project=project,
    )


def load_effective_config(
    project_root: Path, overrides: DiscoveryOverrides | None = None
) -> DiscoveryConfig:
    """Load effective config using merge order defaults -> repo config -> overrides."""
    resolved_root = project_root.resolve()
    base = default_config(resolved_root)
    payload = load_repo_config_file(resolved_root)
    return merge_config(base, payload, overrides or DiscoveryOverrides())
