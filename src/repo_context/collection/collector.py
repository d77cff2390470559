"""Deterministic file collection with glob, ignore and safety-cap handling."""

from __future__ import annotations

import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path

from repo_context.cancellation import CancellationToken, check_cancelled
from repo_context.collection.cache import ScanCache, snapshot_digest
from repo_context.collection.classify import (
    category_for_path,
    has_binary_extension,
    language_for_path,
)
from repo_context.collection.git import GitStatusLookup
from repo_context.collection.globs import GlobSet, IgnoreRules, compile_globs, load_root_gitignore
from repo_context.collection.models import (
    PATH_NOT_FOUND,
    PERMISSION_DENIED,
    TOO_LARGE,
    UNREADABLE,
    CollectionOptions,
    CollectionResult,
    FileCandidate,
)
from repo_context.config import DEFAULT_EXCLUDE_GLOBS
from repo_context.detection.profiles import ProjectProfile
from repo_context.errors import NO_FILES_MATCHED, SCAN_LIMIT_EXCEEDED, DiscoveryWarning
from repo_context.tokens import CHARS_PER_TOKEN, TokenEstimator, estimator_key

_BINARY_SNIFF_BYTES = 4096


@dataclass(slots=True, frozen=True)
class _WalkEntry:
    """File found during traversal, before content inspection."""

    relative_path: str
    full_path: Path
    size: int
    mtime_ns: int
    error: str | None = None


@dataclass(slots=True, frozen=True)
class _WalkFilters:
    include: GlobSet
    exclude: GlobSet
    ignore: IgnoreRules
    allow_hidden: bool
    max_depth: int


def collect_files(
    root: Path,
    profile: ProjectProfile,
    options: CollectionOptions,
    *,
    token_estimator: TokenEstimator,
    git_status: GitStatusLookup,
    cache: ScanCache | None = None,
    cancel: CancellationToken | None = None,
) -> CollectionResult:
    """Collect candidate files in lexical path order.

    Per-file problems are recorded on the candidate and never abort the walk.
    Invalid globs raise DiscoveryConfigError before anything is read.
    """
    started = time.perf_counter()
    resolved_root = root.resolve()
    filters = build_walk_filters(resolved_root, profile, options)

    walk_started = time.perf_counter()
    found, depth_pruned = _walk(resolved_root, filters)
    entries = sorted(found, key=lambda item: item.relative_path)
    walk_seconds = time.perf_counter() - walk_started

    warnings: list[DiscoveryWarning] = []
    if depth_pruned:
        warnings.append(
            DiscoveryWarning(
                code=SCAN_LIMIT_EXCEEDED,
                message=(
                    f"Depth cap of {options.max_depth} reached; "
                    f"{len(depth_pruned)} directories were not walked."
                ),
                paths=tuple(sorted(depth_pruned)),
                count=len(depth_pruned),
            )
        )
    dropped = 0
    if len(entries) > options.max_files:
        dropped = len(entries) - options.max_files
        entries = entries[: options.max_files]
        warnings.append(
            DiscoveryWarning(
                code=SCAN_LIMIT_EXCEEDED,
                message=(
                    f"File cap of {options.max_files} reached; "
                    f"{dropped} files were not collected."
                ),
                count=dropped,
            )
        )
    check_cancelled(cancel, "walk")

    fingerprint = scan_fingerprint(options, token_estimator)
    digest = snapshot_digest(
        (entry.relative_path, entry.size, entry.mtime_ns) for entry in entries
    )
    cached = cache.lookup(resolved_root, fingerprint, digest) if cache is not None else None

    inspect_started = time.perf_counter()
    reused = 0
    if cached is not None:
        candidates = [
            replace(candidate, git_status=git_status(candidate.path)) for candidate in cached
        ]
        reused = len(candidates)
    else:
        previous = cache.previous(resolved_root, fingerprint) if cache is not None else {}
        pending: list[_WalkEntry] = []
        candidates = []
        for entry in entries:
            prior = previous.get(entry.relative_path)
            if (
                prior is not None
                and entry.error is None
                and prior.error is None
                and prior.size == entry.size
                and prior.mtime_ns == entry.mtime_ns
            ):
                candidates.append(replace(prior, git_status=git_status(prior.path)))
                reused += 1
                continue
            pending.append(entry)

        def inspect(entry: _WalkEntry) -> FileCandidate:
            return _inspect(
                entry,
                max_file_bytes=options.max_file_bytes,
                token_estimator=token_estimator,
                git_status=git_status,
            )

        if len(pending) > 1 and options.max_workers > 1:
            with ThreadPoolExecutor(max_workers=options.max_workers) as pool:
                candidates.extend(pool.map(inspect, pending))
        else:
            candidates.extend(inspect(entry) for entry in pending)
        candidates.sort(key=lambda item: item.path)
        if cache is not None:
            cache.store(
                resolved_root, fingerprint, digest, tuple(candidates), token_estimator
            )
    inspect_seconds = time.perf_counter() - inspect_started

    if not any(candidate.usable for candidate in candidates):
        warnings.append(
            DiscoveryWarning(
                code=NO_FILES_MATCHED,
                message="No readable text files matched the include and exclude globs.",
                count=len(candidates),
            )
        )

    return CollectionResult(
        candidates=tuple(candidates),
        warnings=tuple(warnings),
        dropped=dropped,
        cache_hit=cached is not None,
        profile={
            "walked_files": len(entries) + dropped,
            "collected_files": len(candidates),
            "reused_files": reused,
            "binary_files": sum(1 for candidate in candidates if candidate.binary),
            "error_files": sum(1 for candidate in candidates if candidate.error is not None),
            "walk_seconds": walk_seconds,
            "inspect_seconds": inspect_seconds,
            "total_seconds": time.perf_counter() - started,
        },
    )


def scan_fingerprint(options: CollectionOptions, token_estimator: TokenEstimator) -> str:
    """Cache key part covering the walk options and the estimator that counted tokens."""
    return f"{options.fingerprint()}:{estimator_key(token_estimator)}"


def build_walk_filters(
    root: Path, profile: ProjectProfile, options: CollectionOptions
) -> _WalkFilters:
    """Compile effective globs: user includes replace profile includes, excludes accumulate."""
    include_patterns = options.include or profile.include_globs or ("**/*",)
    exclude_patterns = (*DEFAULT_EXCLUDE_GLOBS, *profile.exclude_globs, *options.exclude)
    return _WalkFilters(
        include=compile_globs(include_patterns, field="include"),
        exclude=compile_globs(tuple(dict.fromkeys(exclude_patterns)), field="exclude"),
        ignore=load_root_gitignore(root) if options.respect_gitignore else IgnoreRules(),
        allow_hidden=any(
            pattern.startswith(".") or "/." in pattern for pattern in include_patterns
        ),
        max_depth=options.max_depth,
    )


def _walk(root: Path, filters: _WalkFilters) -> tuple[list[_WalkEntry], list[str]]:
    """Walk depth-first with directory pruning; symlinked directories are entered once.

    Returns the files found and the directories skipped by the depth cap.
    """
    found: list[_WalkEntry] = []
    depth_pruned: list[str] = []
    visited: set[tuple[int, int]] = set()
    try:
        root_stat = root.stat()
    except OSError:
        return found, depth_pruned
    visited.add((root_stat.st_dev, root_stat.st_ino))
    stack: list[tuple[Path, int]] = [(root, 1)]
    while stack:
        current, depth = stack.pop()
        try:
            with os.scandir(current) as iterator:
                ordered_entries = sorted(iterator, key=lambda item: item.name)
        except OSError:
            continue
        for entry in reversed(ordered_entries):
            if entry.name.startswith(".") and not filters.allow_hidden:
                continue
            full_path = Path(entry.path)
            relative = full_path.relative_to(root).as_posix()
            if _is_dir(entry):
                if filters.exclude.matches(relative) or filters.ignore.is_ignored(
                    relative, is_dir=True
                ):
                    continue
                if depth >= filters.max_depth:
                    depth_pruned.append(relative)
                    continue
                try:
                    dir_stat = entry.stat(follow_symlinks=True)
                except OSError:
                    continue
                identity = (dir_stat.st_dev, dir_stat.st_ino)
                if identity in visited:
                    continue
                visited.add(identity)
                stack.append((full_path, depth + 1))
                continue
            if filters.exclude.matches(relative) or filters.ignore.is_ignored(relative):
                continue
            if not filters.include.matches(relative):
                continue
            if not _is_file_or_dangling_link(entry):
                continue
            found.append(_stat_entry(entry, relative, full_path))
    return found, depth_pruned


def _is_dir(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir(follow_symlinks=True)
    except OSError:
        return False


def _is_file_or_dangling_link(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_file(follow_symlinks=True) or entry.is_symlink()
    except OSError:
        return False


def _stat_entry(entry: os.DirEntry[str], relative: str, full_path: Path) -> _WalkEntry:
    try:
        stat = entry.stat(follow_symlinks=True)
    except OSError as error:
        return _WalkEntry(
            relative_path=relative,
            full_path=full_path,
            size=0,
            mtime_ns=0,
            error=_error_reason(error),
        )
    return _WalkEntry(
        relative_path=relative,
        full_path=full_path,
        size=stat.st_size,
        mtime_ns=stat.st_mtime_ns,
    )


def _inspect(
    entry: _WalkEntry,
    *,
    max_file_bytes: int,
    token_estimator: TokenEstimator,
    git_status: GitStatusLookup,
) -> FileCandidate:
    candidate = FileCandidate(
        path=entry.relative_path,
        full_path=entry.full_path,
        size=entry.size,
        tokens=0,
        language=language_for_path(entry.relative_path),
        mtime_ns=entry.mtime_ns,
        git_status=git_status(entry.relative_path),
        category=category_for_path(entry.relative_path),
        error=entry.error,
    )
    if entry.error is not None:
        return candidate
    if entry.size > max_file_bytes:
        estimate = (entry.size + CHARS_PER_TOKEN - 1) // CHARS_PER_TOKEN
        return replace(candidate, tokens=estimate, error=TOO_LARGE)
    if has_binary_extension(entry.relative_path):
        return replace(candidate, binary=True)
    try:
        data = entry.full_path.read_bytes()
    except OSError as error:
        return replace(candidate, error=_error_reason(error))
    if is_binary_sample(data[:_BINARY_SNIFF_BYTES]):
        return replace(candidate, binary=True)
    text = data.decode("utf-8", errors="replace")
    return replace(candidate, tokens=token_estimator(text))


def is_binary_sample(sample: bytes) -> bool:
    """Use deterministic content sniffing to detect binary files."""
    if b"\x00" in sample:
        return True
    try:
        sample.decode("utf-8")
    except UnicodeDecodeError as error:
        # A multi-byte character cut by the sample boundary is still text.
        return not (error.reason == "unexpected end of data" and len(sample) - error.start < 4)
    return False


def _error_reason(error: OSError) -> str:
    if isinstance(error, FileNotFoundError):
        return PATH_NOT_FOUND
    if isinstance(error, PermissionError):
        return PERMISSION_DENIED
    return UNREADABLE


def read_candidate_text(candidate: FileCandidate, limit: int | None = None) -> str | None:
    """Read candidate text, optionally only the first ``limit`` bytes; None when unreadable."""
    try:
        with candidate.full_path.open("rb") as handle:
            data = handle.read() if limit is None else handle.read(limit)
    except OSError:
        return None
    return data.decode("utf-8", errors="replace")
