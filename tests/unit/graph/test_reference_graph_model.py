from __future__ import annotations

from repo_context.graph import ReferenceGraph


def _graph() -> ReferenceGraph:
    return ReferenceGraph.from_edges(
        ["c.py", "a.py", "b.py", "d.py", "lonely.py"],
        [
            ("a.py", "b.py"),
            ("a.py", "b.py"),
            ("a.py", "a.py"),
            ("b.py", "c.py"),
            ("c.py", "b.py"),
            ("d.py", "c.py"),
            ("a.py", "outside.py"),
        ],
    )


def test_nodes_are_sorted_and_invalid_edges_dropped() -> None:
    graph = _graph()

    assert graph.paths == ("a.py", "b.py", "c.py", "d.py", "lonely.py")
    assert graph.edge_count == 4
    assert graph.index_of("c.py") == 2
    assert graph.index_of("outside.py") is None


def test_degrees_and_neighbours() -> None:
    graph = _graph()

    assert graph.in_degree("c.py") == 2
    assert graph.out_degree("a.py") == 1
    assert graph.degree("b.py") == 3
    assert graph.max_degree() == 3
    assert graph.dependencies("b.py") == ("c.py",)
    assert graph.dependents("c.py") == ("b.py", "d.py")
    assert graph.neighbors("c.py") == ("b.py", "d.py")
    assert graph.in_degree("missing.py") == 0


def test_components_respect_subset_and_include_singletons() -> None:
    graph = _graph()

    components = graph.components(["d.py", "lonely.py", "a.py", "b.py", "extra.md"])

    assert components == [("a.py", "b.py"), ("d.py",), ("extra.md",), ("lonely.py",)]


def test_cycles_do_not_break_component_search() -> None:
    graph = ReferenceGraph.from_edges(
        ["x.rs", "y.rs", "z.rs"], [("x.rs", "y.rs"), ("y.rs", "z.rs"), ("z.rs", "x.rs")]
    )

    assert graph.components(graph.paths) == [("x.rs", "y.rs", "z.rs")]
    assert graph.to_public_dict() == {"nodes": 3, "edges": 3, "max_degree": 2}
