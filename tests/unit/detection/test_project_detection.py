from __future__ import annotations

from pathlib import Path

import pytest

from repo_context.config import ProjectOverride
from repo_context.detection import detect_project


@pytest.mark.parametrize(
    ("marker", "kind"),
    [
        ("Cargo.toml", "rust"),
        ("package.json", "javascript"),
        ("pyproject.toml", "python"),
        ("requirements.txt", "python"),
        ("go.mod", "go"),
        ("pom.xml", "java"),
        ("build.gradle", "java"),
    ],
)
def test_marker_files_select_project_kind(tmp_path: Path, marker: str, kind: str) -> None:
    (tmp_path / marker).write_text("", encoding="utf-8")

    profile = detect_project(tmp_path)

    assert profile.kind == kind
    assert profile.source == "detected"
    assert marker in profile.marker_files


def test_first_rule_in_fixed_order_wins(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("", encoding="utf-8")
    (tmp_path / "Cargo.toml").write_text("", encoding="utf-8")
    (tmp_path / "package.json").write_text("{}", encoding="utf-8")

    assert detect_project(tmp_path).kind == "rust"


def test_kotlin_requires_kotlin_sources_under_src(tmp_path: Path) -> None:
    (tmp_path / "build.gradle.kts").write_text("", encoding="utf-8")
    without_sources = detect_project(tmp_path)

    source_dir = tmp_path / "src" / "main" / "kotlin"
    source_dir.mkdir(parents=True)
    (source_dir / "Main.kt").write_text("fun main() {}\n", encoding="utf-8")
    with_sources = detect_project(tmp_path)

    assert without_sources.kind != "kotlin"
    assert with_sources.kind == "kotlin"
    assert "**/Main.kt" in with_sources.entry_points


def test_git_directory_is_recognised_as_generic_repository(tmp_path: Path) -> None:
    (tmp_path / ".git").mkdir()

    profile = detect_project(tmp_path)

    assert profile.kind == "git"
    assert profile.include_globs == ("**/*",)


def test_empty_directory_falls_back_to_generic(tmp_path: Path) -> None:
    profile = detect_project(tmp_path)

    assert profile.kind == "generic"
    assert profile.source == "fallback"
    assert profile.entry_points == ()


def test_missing_root_degrades_without_raising(tmp_path: Path) -> None:
    profile = detect_project(tmp_path / "missing")

    assert profile.kind == "generic"


def test_override_replaces_kind_and_entry_points(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text("{}", encoding="utf-8")

    by_kind = detect_project(tmp_path, ProjectOverride(project_type="python"))
    by_entry = detect_project(tmp_path, ProjectOverride(entry_points=("bin/cli.js",)))

    assert by_kind.kind == "python"
    assert by_kind.source == "override"
    assert "main.py" in by_kind.entry_points
    assert by_entry.kind == "javascript"
    assert by_entry.entry_points == ("bin/cli.js",)


def test_public_dict_lists_globs(tmp_path: Path) -> None:
    (tmp_path / "go.mod").write_text("module example.com/app\n", encoding="utf-8")

    payload = detect_project(tmp_path).to_public_dict()

    assert payload["kind"] == "go"
    assert "**/*.go" in payload["include_globs"]
    assert "**/vendor/**" in payload["exclude_globs"]
