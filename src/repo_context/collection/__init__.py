"""File collection package."""

from .cache import ScanCache, snapshot_digest
from .classify import category_for_path, is_test_path, language_for_path
from .collector import collect_files, is_binary_sample, read_candidate_text, scan_fingerprint
from .git import (
    CLEAN,
    GIT_STATUSES,
    MODIFIED,
    STAGED,
    UNTRACKED,
    GitStatusLookup,
    GitStatusSnapshot,
    load_git_status,
    parse_porcelain_z,
)
from .globs import GlobSet, IgnoreRules, compile_glob, compile_globs, parse_gitignore
from .models import CollectionOptions, CollectionResult, FileCandidate

__all__ = [
    "CLEAN",
    "CollectionOptions",
    "CollectionResult",
    "FileCandidate",
    "GIT_STATUSES",
    "GitStatusLookup",
    "GitStatusSnapshot",
    "GlobSet",
    "IgnoreRules",
    "MODIFIED",
    "STAGED",
    "ScanCache",
    "UNTRACKED",
    "category_for_path",
    "collect_files",
    "compile_glob",
    "compile_globs",
    "is_binary_sample",
    "is_test_path",
    "language_for_path",
    "load_git_status",
    "parse_gitignore",
    "parse_porcelain_z",
    "read_candidate_text",
    "scan_fingerprint",
    "snapshot_digest",
]
