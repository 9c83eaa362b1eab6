from __future__ import annotations

import pytest

from bridgedl.graph import DirectedGraph, GraphError, marshal


def _graph(vertices: str, edges: list[str]) -> DirectedGraph[str]:
    graph: DirectedGraph[str] = DirectedGraph()
    for vertex in vertices:
        graph.add(vertex)
    for edge in edges:
        graph.connect(edge[0], edge[1])
    return graph


def _key(vertex: str) -> tuple[int, str]:
    return 0, vertex


def test_connect_keeps_edges_unique() -> None:
    graph = _graph("ab", [])

    assert graph.connect("a", "b") is True
    assert graph.connect("a", "b") is False
    assert graph.edges() == [("a", "b")]


def test_connect_rejects_unknown_vertex() -> None:
    graph = _graph("a", [])

    with pytest.raises(GraphError):
        graph.connect("a", "z")


def test_edges_keep_insertion_order() -> None:
    graph = _graph("abc", ["cb", "ab", "ca"])

    assert graph.edges() == [("c", "b"), ("a", "b"), ("c", "a")]
    assert graph.vertices() == ["a", "b", "c"]


def test_graph_queries() -> None:
    graph = _graph("abcd", ["ab", "bc", "dc"])

    assert graph.roots() == ["a", "d"]
    assert graph.successors("a") == ["b"]
    assert graph.predecessors("c") == ["b", "d"]
    assert graph.descendants("a") == {"b", "c"}
    assert graph.ancestors("c") == {"a", "b", "d"}
    assert "a" in graph and "z" not in graph
    assert len(graph) == 4


def test_strongly_connected_components_and_cycles() -> None:
    graph = _graph("abcd", ["ab", "bc", "cb", "dd"])

    components = sorted(sorted(component) for component in graph.strongly_connected_components())

    assert components == [["a"], ["b", "c"], ["d"]]
    assert graph.is_cyclic({"b", "c"})
    assert graph.is_cyclic({"d"})
    assert not graph.is_cyclic({"a"})


def test_topological_components_break_ties_by_key() -> None:
    graph = _graph("abcd", ["ab", "bc", "cb", "dc"])

    assert graph.topological_components(_key) == [["a"], ["d"], ["b", "c"]]


def test_topological_components_ignore_insertion_order() -> None:
    first = _graph("abcde", ["ae", "be", "cd"])
    second = _graph("edcba", ["cd", "be", "ae"])

    assert first.topological_components(_key) == second.topological_components(_key)
    assert first.topological_components(_key) == [["a"], ["b"], ["c"], ["d"], ["e"]]


def test_marshal_dot() -> None:
    graph = _graph("ba", ["ab"])

    assert marshal(graph, label=str, key=_key) == 'digraph "bridge" {\n  "a";\n  "b";\n  "a" -> "b";\n}\n'


def test_marshal_escapes_quotes() -> None:
    graph = _graph('x"', [])

    assert marshal(graph, label=str, key=_key, name="my bridge") == 'digraph "my bridge" {\n  "\\"";\n  "x";\n}\n'
