from __future__ import annotations

from collections.abc import Callable, Hashable

from bridgedl.graph.directed import DirectedGraph


def marshal(
    graph: DirectedGraph,
    label: Callable[[Hashable], str],
    key: Callable[[Hashable], tuple] | None = None,
    name: str = "bridge",
) -> str:
    # DOT text: one node statement per vertex (sorted by key when given), then
    # one edge statement per edge in insertion order.
    vertices = graph.vertices()
    if key is not None:
        vertices = sorted(vertices, key=key)

    lines = [f"digraph {_quote(name)} {{"]
    for vertex in vertices:
        lines.append(f"  {_quote(label(vertex))};")
    for tail, head in graph.edges():
        lines.append(f"  {_quote(label(tail))} -> {_quote(label(head))};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
