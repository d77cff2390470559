"""Two-phase reference graph construction."""

from __future__ import annotations

import posixpath
from collections import defaultdict
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from repo_context.adapters.base import ImportReference
from repo_context.adapters.registry import AdapterRegistry
from repo_context.collection.models import FileCandidate
from repo_context.graph.models import ReferenceGraph

TextReader = Callable[[FileCandidate], str | None]


@dataclass(slots=True, frozen=True)
class _FileReferences:
    """Phase-1 output for one file."""

    path: str
    references: tuple[ImportReference, ...]


class PathResolver:
    """Resolve adapter candidate patterns against the collected path set."""

    def __init__(self, paths: Iterable[str]) -> None:
        self._paths = frozenset(paths)
        self._by_dir: dict[str, list[str]] = defaultdict(list)
        self._by_name: dict[str, list[str]] = defaultdict(list)
        self._dirs_by_leaf: dict[str, set[str]] = defaultdict(set)
        for path in sorted(self._paths):
            directory, name = posixpath.split(path)
            self._by_dir[directory].append(path)
            self._by_name[name].append(path)
            self._dirs_by_leaf[posixpath.basename(directory)].add(directory)

    def resolve(self, candidates: tuple[str, ...]) -> tuple[str, ...]:
        """Return targets of the first candidate that matches any collected path."""
        for candidate in candidates:
            matched = self._match(candidate)
            if matched:
                return matched
        return ()

    def _match(self, candidate: str) -> tuple[str, ...]:
        suffix_mode = candidate.startswith("**/")
        pattern = candidate[3:] if suffix_mode else candidate
        directory, name = posixpath.split(pattern)
        if "*" in name:
            extension = name[name.rindex("*") + 1 :]
            if suffix_mode:
                directories = sorted(
                    item
                    for item in self._dirs_by_leaf.get(posixpath.basename(directory), ())
                    if item == directory or item.endswith(f"/{directory}")
                )
            else:
                directories = [directory]
            return tuple(
                path
                for item in directories
                for path in self._by_dir.get(item, ())
                if path.endswith(extension)
            )
        if not suffix_mode:
            return (pattern,) if pattern in self._paths else ()
        return tuple(
            path
            for path in self._by_name.get(name, ())
            if path == pattern or path.endswith(f"/{pattern}")
        )


def build_reference_graph(
    candidates: Iterable[FileCandidate],
    registry: AdapterRegistry,
    *,
    read_text: TextReader,
    max_workers: int = 8,
) -> ReferenceGraph:
    """Build the graph over usable candidates.

    Phase 1 extracts references per file on a thread pool with no shared
    mutable state. Phase 2 resolves and merges them on the calling thread.
    A file whose text cannot be read or parsed contributes no edges.
    """
    candidates = tuple(candidates)
    nodes = sorted(candidate.path for candidate in candidates if candidate.usable)
    parseable = [
        candidate
        for candidate in candidates
        if candidate.usable and registry.handles(candidate.path)
    ]

    def extract(candidate: FileCandidate) -> _FileReferences:
        text = read_text(candidate)
        if text is None:
            return _FileReferences(path=candidate.path, references=())
        try:
            references = registry.extract_references(candidate.path, text)
        except Exception:
            return _FileReferences(path=candidate.path, references=())
        return _FileReferences(path=candidate.path, references=tuple(references))

    if len(parseable) > 1 and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            extracted = list(pool.map(extract, parseable))
    else:
        extracted = [extract(candidate) for candidate in parseable]

    resolver = PathResolver(nodes)
    edges: list[tuple[str, str]] = []
    for item in sorted(extracted, key=lambda entry: entry.path):
        for reference in item.references:
            for target in resolver.resolve(reference.candidates):
                edges.append((item.path, target))
    return ReferenceGraph.from_edges(nodes, edges)
