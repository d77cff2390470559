"""Data models for file collection."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path

from repo_context.config import DiscoveryConfig
from repo_context.errors import DiscoveryWarning

PATH_NOT_FOUND = "path_not_found"
PERMISSION_DENIED = "permission_denied"
UNREADABLE = "unreadable"
TOO_LARGE = "too_large"


@dataclass(slots=True, frozen=True)
class FileCandidate:
    """One collected file with the metadata later stages need."""

    path: str
    full_path: Path
    size: int
    tokens: int
    language: str
    mtime_ns: int
    git_status: str
    binary: bool = False
    category: str = "unknown"
    error: str | None = None

    @property
    def usable(self) -> bool:
        """True when the file can be scored for selection."""
        return not self.binary and self.error is None

    def to_public_dict(self) -> dict[str, object]:
        return {
            "path": self.path,
            "size": self.size,
            "tokens": self.tokens,
            "language": self.language,
            "mtime_ns": self.mtime_ns,
            "git_status": self.git_status,
            "binary": self.binary,
            "category": self.category,
            "error": self.error,
        }


@dataclass(slots=True, frozen=True)
class CollectionOptions:
    """Effective walk options after merging profile, config and caller globs."""

    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    max_files: int = 5000
    max_file_bytes: int = 1024 * 1024
    max_depth: int = 10
    respect_gitignore: bool = True
    max_workers: int = 8

    @classmethod
    def from_config(cls, config: DiscoveryConfig) -> CollectionOptions:
        return cls(
            include=config.include,
            exclude=config.exclude,
            max_files=config.max_files,
            max_file_bytes=config.max_file_bytes,
            max_depth=config.max_depth,
            respect_gitignore=config.respect_gitignore,
            max_workers=config.max_workers,
        )

    def fingerprint(self) -> str:
        """Stable digest of every option that changes the collected set."""
        payload = json.dumps(
            {
                "include": list(self.include),
                "exclude": list(self.exclude),
                "max_files": self.max_files,
                "max_file_bytes": self.max_file_bytes,
                "max_depth": self.max_depth,
                "respect_gitignore": self.respect_gitignore,
            },
            sort_keys=True,
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass(slots=True, frozen=True)
class CollectionResult:
    """Candidates in lexical path order plus structured warnings."""

    candidates: tuple[FileCandidate, ...]
    warnings: tuple[DiscoveryWarning, ...] = ()
    dropped: int = 0
    cache_hit: bool = False
    profile: dict[str, object] = field(default_factory=dict)

    def by_path(self) -> dict[str, FileCandidate]:
        return {candidate.path: candidate for candidate in self.candidates}
