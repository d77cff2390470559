from __future__ import annotations

from pathlib import Path

from repo_context.config import DiscoveryOverrides, default_config, load_effective_config


def test_defaults_match_documented_values(tmp_path: Path) -> None:
    config = default_config(tmp_path)

    assert config.max_tokens == 4000
    assert config.chunk_strategy == "hierarchical"
    assert config.query_scan_limit == 50
    assert config.max_files == 5000
    assert config.max_file_bytes == 1024 * 1024
    assert config.max_depth == 10
    assert config.respect_gitignore is True
    assert config.enable_cache is True
    assert config.weights.entry_point == 0.30
    assert config.weights.type_prior("source") > config.weights.type_prior("test")
    assert config.weights.type_prior("docs") > config.weights.type_prior("build_artifact")


def test_merge_order_defaults_then_repo_then_overrides(tmp_path: Path) -> None:
    (tmp_path / "repo_context.toml").write_text(
        "\n".join(
            [
                "[context]",
                "max_tokens = 8000",
                "max_files = 300",
                'chunk_strategy = "module"',
                "",
                "[project]",
                'project_type = "go"',
            ]
        ),
        encoding="utf-8",
    )
    overrides = DiscoveryOverrides(max_tokens=1200, entry_points=("cmd/tool/main.go",))

    config = load_effective_config(tmp_path, overrides)

    assert config.max_tokens == 1200
    assert config.max_files == 300
    assert config.chunk_strategy == "module"
    assert config.project.project_type == "go"
    assert config.project.entry_points == ("cmd/tool/main.go",)


def test_scoring_table_overrides_weights_and_priors(tmp_path: Path) -> None:
    (tmp_path / "repo_context.toml").write_text(
        "\n".join(
            [
                "[scoring]",
                "query_weight = 0.5",
                "recency_half_life_days = 7",
                "",
                "[scoring.type_priors]",
                "docs = 0.9",
            ]
        ),
        encoding="utf-8",
    )

    config = load_effective_config(tmp_path)

    assert config.weights.query == 0.5
    assert config.weights.recency_half_life_days == 7.0
    assert config.weights.type_prior("docs") == 0.9
    assert config.weights.type_prior("source") == 1.0


def test_data_dir_is_resolved_against_project_root(tmp_path: Path) -> None:
    (tmp_path / "repo_context.toml").write_text(
        '[context]\ndata_dir = ".context_runs"\n', encoding="utf-8"
    )

    config = load_effective_config(tmp_path)

    assert config.data_dir == (tmp_path / ".context_runs").resolve()


def test_public_snapshot_is_plain_data(tmp_path: Path) -> None:
    snapshot = load_effective_config(tmp_path).to_public_dict()

    assert snapshot["project_root"] == str(tmp_path.resolve())
    context = snapshot["context"]
    assert isinstance(context, dict)
    assert context["max_tokens"] == 4000
    scoring = snapshot["scoring"]
    assert isinstance(scoring, dict)
    assert scoring["type_priors"]["source"] == 1.0
