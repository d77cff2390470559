from __future__ import annotations

from pathlib import Path

import pytest

from repo_context.config import DiscoveryOverrides, load_effective_config
from repo_context.errors import DiscoveryConfigError


def _write_config(root: Path, *lines: str) -> None:
    (root / "repo_context.toml").write_text("\n".join(lines), encoding="utf-8")


def test_invalid_max_tokens_type_names_the_field(tmp_path: Path) -> None:
    _write_config(tmp_path, "[context]", 'max_tokens = "lots"')

    with pytest.raises(DiscoveryConfigError, match="context.max_tokens") as info:
        load_effective_config(tmp_path)

    assert info.value.field == "context.max_tokens"
    assert info.value.value == "lots"


def test_invalid_section_type_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, 'context = "not-a-table"')

    with pytest.raises(ValueError, match="section 'context'"):
        load_effective_config(tmp_path)


def test_unknown_chunk_strategy_is_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "[context]", 'chunk_strategy = "random"')

    with pytest.raises(DiscoveryConfigError, match="chunk_strategy"):
        load_effective_config(tmp_path)


def test_max_tokens_above_cap_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(DiscoveryConfigError, match="overrides.max_tokens"):
        load_effective_config(tmp_path, DiscoveryOverrides(max_tokens=3_000_000))


def test_negative_weight_is_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "[scoring]", "centrality_weight = -1")

    with pytest.raises(DiscoveryConfigError, match="scoring.centrality_weight"):
        load_effective_config(tmp_path)


def test_all_zero_weights_are_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        "[scoring]",
        "entry_point_weight = 0",
        "recency_weight = 0",
        "centrality_weight = 0",
        "query_weight = 0",
        "file_type_weight = 0",
    )

    with pytest.raises(DiscoveryConfigError, match="weight"):
        load_effective_config(tmp_path)


def test_unknown_type_prior_category_is_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "[scoring.type_priors]", "binary_blob = 0.5")

    with pytest.raises(DiscoveryConfigError, match="binary_blob") as info:
        load_effective_config(tmp_path)

    assert info.value.hint is not None


def test_malformed_toml_is_reported(tmp_path: Path) -> None:
    _write_config(tmp_path, "[context", "max_tokens = 1")

    with pytest.raises(DiscoveryConfigError, match="not valid TOML"):
        load_effective_config(tmp_path)


def test_include_must_be_list_of_strings(tmp_path: Path) -> None:
    _write_config(tmp_path, "[context]", "include = [1, 2]")

    with pytest.raises(DiscoveryConfigError, match="context.include"):
        load_effective_config(tmp_path)
