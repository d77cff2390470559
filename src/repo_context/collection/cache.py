"""Caller-owned scan cache keyed by root and options, validated by mtime snapshot."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from repo_context.collection.models import FileCandidate
from repo_context.tokens import TokenEstimator

CACHE_SCHEMA_VERSION = 1


@dataclass(slots=True, frozen=True)
class _CacheEntry:
    digest: str
    candidates: tuple[FileCandidate, ...]
    # Held so an identity-keyed estimator cannot be collected and its id reused.
    estimator: TokenEstimator | None = None


def snapshot_digest(entries: Iterable[tuple[str, int, int]]) -> str:
    """Digest ``(path, size, mtime_ns)`` triples in path order."""
    digest = hashlib.sha256()
    for path, size, mtime_ns in sorted(entries):
        digest.update(f"{path}\0{size}\0{mtime_ns}\n".encode())
    return digest.hexdigest()


@dataclass(slots=True)
class ScanCache:
    """Explicit cache of collected candidates; never shared implicitly between callers."""

    _entries: dict[tuple[str, str], _CacheEntry] = field(default_factory=dict)
    hits: int = 0
    misses: int = 0

    def lookup(
        self, root: Path, fingerprint: str, digest: str
    ) -> tuple[FileCandidate, ...] | None:
        """Return cached candidates when the snapshot digest still matches."""
        entry = self._entries.get((str(root), fingerprint))
        if entry is None or entry.digest != digest:
            self.misses += 1
            return None
        self.hits += 1
        return entry.candidates

    def previous(self, root: Path, fingerprint: str) -> dict[str, FileCandidate]:
        """Return the last stored candidates by path for per-file reuse."""
        entry = self._entries.get((str(root), fingerprint))
        if entry is None:
            return {}
        return {candidate.path: candidate for candidate in entry.candidates}

    def store(
        self,
        root: Path,
        fingerprint: str,
        digest: str,
        candidates: tuple[FileCandidate, ...],
        estimator: TokenEstimator | None = None,
    ) -> None:
        self._entries[(str(root), fingerprint)] = _CacheEntry(
            digest=digest, candidates=candidates, estimator=estimator
        )

    def invalidate(self, root: Path) -> int:
        """Drop every entry for ``root``; returns the number removed."""
        key_root = str(root)
        stale = [key for key in self._entries if key[0] == key_root]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> dict[str, int]:
        return {"entries": len(self._entries), "hits": self.hits, "misses": self.misses}

    def save(self, path: Path) -> None:
        """Persist entries as JSON."""
        payload = {
            "schema_version": CACHE_SCHEMA_VERSION,
            "entries": [
                {
                    "root": root,
                    "fingerprint": fingerprint,
                    "digest": entry.digest,
                    "candidates": [_candidate_to_json(item) for item in entry.candidates],
                }
                for (root, fingerprint), entry in sorted(self._entries.items())
            ],
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, sort_keys=True), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> ScanCache:
        """Load a persisted cache; missing, corrupt or foreign-schema files yield an empty cache."""
        cache = cls()
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return cache
        if not isinstance(payload, dict) or payload.get("schema_version") != CACHE_SCHEMA_VERSION:
            return cache
        for raw in payload.get("entries", []):
            try:
                candidates = tuple(_candidate_from_json(item) for item in raw["candidates"])
                cache.store(Path(raw["root"]), raw["fingerprint"], raw["digest"], candidates)
            except (KeyError, TypeError, ValueError):
                continue
        return cache


def _candidate_to_json(candidate: FileCandidate) -> dict[str, object]:
    payload = candidate.to_public_dict()
    payload["full_path"] = str(candidate.full_path)
    return payload


def _candidate_from_json(payload: dict[str, object]) -> FileCandidate:
    error = payload.get("error")
    return FileCandidate(
        path=str(payload["path"]),
        full_path=Path(str(payload["full_path"])),
        size=int(payload["size"]),
        tokens=int(payload["tokens"]),
        language=str(payload["language"]),
        mtime_ns=int(payload["mtime_ns"]),
        git_status=str(payload["git_status"]),
        binary=bool(payload["binary"]),
        category=str(payload["category"]),
        error=str(error) if error is not None else None,
    )
