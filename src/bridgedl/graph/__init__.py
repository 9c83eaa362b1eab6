from .directed import DirectedGraph, GraphError
from .dot import marshal

__all__ = ["DirectedGraph", "GraphError", "marshal"]
