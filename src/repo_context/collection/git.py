"""Git working-tree status lookup."""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

STAGED = "staged"
MODIFIED = "modified"
UNTRACKED = "untracked"
CLEAN = "clean"

GIT_STATUSES = (STAGED, MODIFIED, UNTRACKED, CLEAN)

GitStatusLookup = Callable[[str], str]


@dataclass(slots=True, frozen=True)
class GitStatusSnapshot:
    """Status per project-relative path captured once per run; absent paths are clean."""

    statuses: dict[str, str] = field(default_factory=dict)

    def __call__(self, relative_path: str) -> str:
        return self.statuses.get(relative_path, CLEAN)


def load_git_status(root: Path) -> GitStatusSnapshot:
    """Run ``git status`` once and map entries to staged/modified/untracked.

    A missing git binary or a root outside any repository yields an empty
    snapshot, which reports every path as clean.
    """
    prefix = _run_git(root, "rev-parse", "--show-prefix")
    if prefix is None:
        return GitStatusSnapshot()
    output = _run_git(root, "status", "--porcelain=v1", "-z", "--untracked-files=all", ".")
    if output is None:
        return GitStatusSnapshot()
    return GitStatusSnapshot(statuses=parse_porcelain_z(output, prefix=prefix.strip()))


def parse_porcelain_z(output: str, *, prefix: str = "") -> dict[str, str]:
    """Parse ``git status --porcelain=v1 -z`` output relative to ``prefix``."""
    statuses: dict[str, str] = {}
    records = output.split("\0")
    index = 0
    while index < len(records):
        record = records[index]
        index += 1
        if len(record) < 4:
            continue
        index_state, worktree_state, path = record[0], record[1], record[3:]
        if index_state in "RC":
            # Renames and copies carry the source path as the next record.
            index += 1
        status = _classify(index_state, worktree_state)
        if status is None:
            continue
        if prefix:
            if not path.startswith(prefix):
                continue
            path = path[len(prefix) :]
        statuses[path] = status
    return statuses


def _classify(index_state: str, worktree_state: str) -> str | None:
    if index_state == "?" and worktree_state == "?":
        return UNTRACKED
    if index_state == "!":
        return None
    if index_state not in " ?":
        return STAGED
    if worktree_state != " ":
        return MODIFIED
    return None


def _run_git(root: Path, *args: str) -> str | None:
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=root,
            check=False,
            capture_output=True,
            text=True,
        )
    except OSError:
        return None
    if completed.returncode != 0:
        return None
    return completed.stdout
