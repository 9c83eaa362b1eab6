from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Generic, TypeVar

import networkx as nx

V = TypeVar("V", bound=Hashable)


class GraphError(ValueError):
    # Raised when an edge references a vertex that is not part of the graph.
    pass


class DirectedGraph(Generic[V]):
    # Unweighted directed graph without parallel edges; vertex and edge
    # insertion order is preserved by every query.
    def __init__(self) -> None:
        self._graph: nx.DiGraph = nx.DiGraph()
        self._edges: list[tuple[V, V]] = []

    def add(self, vertex: V) -> None:
        self._graph.add_node(vertex)

    def connect(self, tail: V, head: V) -> bool:
        # Returns False when the edge already exists.
        for vertex in (tail, head):
            if vertex not in self._graph:
                raise GraphError(f"Vertex {vertex!r} is not part of the graph")
        if self._graph.has_edge(tail, head):
            return False
        self._graph.add_edge(tail, head)
        self._edges.append((tail, head))
        return True

    def has_edge(self, tail: V, head: V) -> bool:
        return self._graph.has_edge(tail, head)

    def __contains__(self, vertex: object) -> bool:
        return vertex in self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def vertices(self) -> list[V]:
        return list(self._graph.nodes)

    def edges(self) -> list[tuple[V, V]]:
        return list(self._edges)

    def successors(self, vertex: V) -> list[V]:
        return list(self._graph.successors(vertex))

    def predecessors(self, vertex: V) -> list[V]:
        return list(self._graph.predecessors(vertex))

    def roots(self) -> list[V]:
        # Vertices without incoming edges.
        return [vertex for vertex, degree in self._graph.in_degree() if degree == 0]

    def descendants(self, vertex: V) -> set[V]:
        return set(nx.descendants(self._graph, vertex))

    def ancestors(self, vertex: V) -> set[V]:
        return set(nx.ancestors(self._graph, vertex))

    def strongly_connected_components(self) -> list[set[V]]:
        return [set(component) for component in nx.strongly_connected_components(self._graph)]

    def is_cyclic(self, component: set[V]) -> bool:
        # A component is cyclic when it has several members or a self-loop.
        if len(component) > 1:
            return True
        (vertex,) = component
        return self._graph.has_edge(vertex, vertex)

    def topological_components(self, key: Callable[[V], tuple]) -> list[list[V]]:
        # Strongly connected components in topological order of the condensed
        # graph, ties broken by the smallest key among members; members sorted by key.
        components = self.strongly_connected_components()
        condensed = nx.condensation(self._graph, scc=components)
        members: dict[int, list[V]] = {
            node: sorted(condensed.nodes[node]["members"], key=key) for node in condensed.nodes
        }
        order = nx.lexicographical_topological_sort(condensed, key=lambda node: key(members[node][0]))
        return [members[node] for node in order]
