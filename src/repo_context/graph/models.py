"""Arena-backed reference graph."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class ReferenceGraph:
    """Directed file-to-file references stored as index edge lists.

    Nodes are candidate paths in sorted order. Edges point from the importing
    file to the imported file; cycles are allowed and only degree counts are
    ever computed, so no traversal can loop.
    """

    paths: tuple[str, ...]
    outgoing: tuple[tuple[int, ...], ...]
    incoming: tuple[tuple[int, ...], ...]
    _index: dict[str, int] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self._index:
            self._index.update({path: position for position, path in enumerate(self.paths)})

    @classmethod
    def from_edges(cls, paths: Iterable[str], edges: Iterable[tuple[str, str]]) -> ReferenceGraph:
        """Build a graph from path pairs; self edges, duplicates and unknown nodes are dropped."""
        ordered = tuple(sorted(set(paths)))
        index = {path: position for position, path in enumerate(ordered)}
        outgoing: list[set[int]] = [set() for _ in ordered]
        incoming: list[set[int]] = [set() for _ in ordered]
        for source, target in edges:
            source_index = index.get(source)
            target_index = index.get(target)
            if source_index is None or target_index is None or source_index == target_index:
                continue
            outgoing[source_index].add(target_index)
            incoming[target_index].add(source_index)
        return cls(
            paths=ordered,
            outgoing=tuple(tuple(sorted(items)) for items in outgoing),
            incoming=tuple(tuple(sorted(items)) for items in incoming),
            _index=index,
        )

    @property
    def node_count(self) -> int:
        return len(self.paths)

    @property
    def edge_count(self) -> int:
        return sum(len(items) for items in self.outgoing)

    def index_of(self, path: str) -> int | None:
        return self._index.get(path)

    def in_degree(self, path: str) -> int:
        position = self._index.get(path)
        return 0 if position is None else len(self.incoming[position])

    def out_degree(self, path: str) -> int:
        position = self._index.get(path)
        return 0 if position is None else len(self.outgoing[position])

    def degree(self, path: str) -> int:
        return self.in_degree(path) + self.out_degree(path)

    def max_degree(self) -> int:
        if not self.paths:
            return 0
        return max(
            len(self.incoming[position]) + len(self.outgoing[position])
            for position in range(len(self.paths))
        )

    def dependencies(self, path: str) -> tuple[str, ...]:
        """Paths this file references."""
        position = self._index.get(path)
        if position is None:
            return ()
        return tuple(self.paths[item] for item in self.outgoing[position])

    def dependents(self, path: str) -> tuple[str, ...]:
        """Paths that reference this file."""
        position = self._index.get(path)
        if position is None:
            return ()
        return tuple(self.paths[item] for item in self.incoming[position])

    def neighbors(self, path: str) -> tuple[str, ...]:
        """Undirected neighbours in path order."""
        return tuple(sorted(set(self.dependencies(path)) | set(self.dependents(path))))

    def components(self, subset: Iterable[str]) -> list[tuple[str, ...]]:
        """Connected components of the undirected graph restricted to ``subset``.

        Paths not in the graph form singleton components. Components and their
        members are returned in path order.
        """
        members = set(subset)
        seen: set[str] = set()
        output: list[tuple[str, ...]] = []
        for start in sorted(members):
            if start in seen:
                continue
            seen.add(start)
            component = [start]
            frontier = [start]
            while frontier:
                current = frontier.pop()
                for neighbor in self.neighbors(current):
                    if neighbor in members and neighbor not in seen:
                        seen.add(neighbor)
                        component.append(neighbor)
                        frontier.append(neighbor)
            output.append(tuple(sorted(component)))
        return output

    def to_public_dict(self) -> dict[str, object]:
        return {
            "nodes": self.node_count,
            "edges": self.edge_count,
            "max_degree": self.max_degree(),
        }
