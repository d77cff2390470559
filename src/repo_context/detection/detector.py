"""Marker-based project type detection."""

from __future__ import annotations

import os
from pathlib import Path

from repo_context.config import ProjectOverride
from repo_context.detection.profiles import (
    ECOSYSTEM_RULES,
    GENERIC_RULE,
    EcosystemRule,
    ProjectProfile,
    rule_for_kind,
)


def detect_project(root: Path, override: ProjectOverride | None = None) -> ProjectProfile:
    """Detect the project kind from root marker files.

    Rules are tried in fixed ecosystem order and the first match wins, so the
    result never depends on directory listing order. Never raises: unreadable or
    unrecognised roots degrade to the generic profile.
    """
    rule, markers = _first_matching_rule(root)
    source = "detected" if rule is not GENERIC_RULE else "fallback"
    entry_points = rule.entry_points

    if override is not None and override.project_type is not None:
        rule = rule_for_kind(override.project_type)
        entry_points = rule.entry_points
        source = "override"
    if override is not None and override.entry_points is not None:
        entry_points = override.entry_points
        source = "override"

    return ProjectProfile(
        kind=rule.kind,
        entry_points=entry_points,
        include_globs=rule.include_globs,
        exclude_globs=rule.exclude_globs,
        marker_files=markers,
        source=source,
    )


def _first_matching_rule(root: Path) -> tuple[EcosystemRule, tuple[str, ...]]:
    try:
        with os.scandir(root) as entries:
            names = {entry.name for entry in entries}
    except OSError:
        return GENERIC_RULE, ()
    for rule in ECOSYSTEM_RULES:
        found = tuple(marker for marker in rule.markers if marker in names)
        if not found:
            continue
        if rule.kind == "kotlin" and not _has_kotlin_sources(root / "src"):
            continue
        return rule, found
    return GENERIC_RULE, ()


def _has_kotlin_sources(src_dir: Path) -> bool:
    stack = [src_dir]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    if entry.is_dir(follow_symlinks=False):
                        stack.append(Path(entry.path))
                    elif entry.name.endswith(".kt"):
                        return True
        except OSError:
            continue
    return False
