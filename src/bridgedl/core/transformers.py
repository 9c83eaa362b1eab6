from __future__ import annotations

import logging
from collections.abc import Collection, Iterable
from typing import Protocol

from bridgedl.config.addr import Category, as_category
from bridgedl.config.bridge import Bridge
from bridgedl.config.globals import globals_spec
from bridgedl.core.vertex import ComponentVertex
from bridgedl.diagnostics import Diagnostic, Diagnostics, Severity
from bridgedl.graph.directed import DirectedGraph
from bridgedl.lang.decode import filter_block_refs
from bridgedl.lang.syntax.nodes import AttrStep, Traversal
from bridgedl.translation import ComponentRegistry

logger = logging.getLogger(__name__)

Graph = DirectedGraph[ComponentVertex]


class GraphTransformer(Protocol):
    # One step of graph construction; reports problems instead of raising.
    def transform(self, graph: Graph) -> Diagnostics: ...


def apply_transformers(graph: Graph, transformers: Iterable[GraphTransformer]) -> Diagnostics:
    diags = Diagnostics()
    for transformer in transformers:
        diags.extend(transformer.transform(graph))
    return diags


class AddComponents:
    # One vertex per component of the Bridge, not connected yet.
    def __init__(self, bridge: Bridge, registry: ComponentRegistry) -> None:
        self._bridge = bridge
        self._registry = registry

    def transform(self, graph: Graph) -> Diagnostics:
        diags = Diagnostics()
        for cmp in self._bridge.components():
            impl = self._registry.get(cmp.category, cmp.type)
            meta = self._registry.get_meta(cmp.category, cmp.type)
            if impl is None:
                diags.append(
                    Diagnostic(
                        Severity.ERROR,
                        "Unsupported component type",
                        f'The {cmp.category.value} type "{cmp.type}" is not supported.',
                        cmp.range,
                    )
                )
            graph.add(ComponentVertex(cmp, impl, meta))
        logger.debug("Added %d vertices", len(graph))
        return diags


class ReferenceEdges:
    # Edges from each component to the components referenced in its configuration.
    def __init__(self, referenceable: Collection[str]) -> None:
        self._referenceable = referenceable

    def transform(self, graph: Graph) -> Diagnostics:
        diags = Diagnostics()
        index = vertex_index(graph)
        for vertex in graph.vertices():
            for ref in filter_block_refs(vertex.references(), self._referenceable):
                referent, ref_diags = resolve_reference(ref, index)
                diags.extend(ref_diags)
                if referent is not None:
                    graph.connect(vertex, referent)
        return diags


class EventRouting:
    # Edge from each component to the destination of its `to`/`reply_to` attribute.
    def __init__(self, referenceable: Collection[str]) -> None:
        self._referenceable = referenceable

    def transform(self, graph: Graph) -> Diagnostics:
        diags = Diagnostics()
        index = vertex_index(graph)
        for vertex in graph.vertices():
            to = vertex.component.to
            if to is None:
                continue
            if to.root_name not in self._referenceable:
                diags.append(
                    Diagnostic(
                        Severity.ERROR,
                        "Invalid reference",
                        f'"{to}" is not a reference to a component which can receive events.',
                        to.range,
                    )
                )
                continue
            referent, ref_diags = resolve_reference(to, index)
            diags.extend(ref_diags)
            if referent is not None:
                graph.connect(vertex, referent)
        return diags


class DeliveryEdges:
    # Edges from components consuming the Bridge-wide delivery settings to the
    # dead letter sink those settings reference.
    def __init__(self, bridge: Bridge, referenceable: Collection[str]) -> None:
        self._bridge = bridge
        self._referenceable = referenceable

    def transform(self, graph: Graph) -> Diagnostics:
        diags = Diagnostics()
        body = self._bridge.globals
        if body is None:
            return diags
        index = vertex_index(graph)
        refs = filter_block_refs(globals_spec().variables(body), self._referenceable)
        for ref in refs:
            referent, ref_diags = resolve_reference(ref, index)
            diags.extend(ref_diags)
            if referent is None:
                continue
            for vertex in graph.vertices():
                if vertex.accepts_globals() and vertex is not referent:
                    graph.connect(vertex, referent)
        return diags


def vertex_index(graph: Graph) -> dict[tuple[Category, str], ComponentVertex]:
    return {(vertex.addr.category, vertex.addr.identifier): vertex for vertex in graph.vertices()}


def resolve_reference(
    ref: Traversal,
    index: dict[tuple[Category, str], ComponentVertex],
) -> tuple[ComponentVertex | None, Diagnostics]:
    # Resolve `category.identifier` to a vertex which can receive events.
    diags = Diagnostics()
    category = as_category(ref.root_name)
    if category is None or not ref.steps or not isinstance(ref.steps[0], AttrStep):
        diags.append(
            Diagnostic(
                Severity.ERROR,
                "Invalid reference",
                f'"{ref}" is not a valid component reference; references have the form category.identifier.',
                ref.range,
            )
        )
        return None, diags

    identifier = ref.steps[0].name
    referent = index.get((category, identifier))
    if referent is None:
        diags.append(
            Diagnostic(
                Severity.ERROR,
                "Reference to undeclared component",
                f"reference to undeclared component {category.value}.{identifier}",
                ref.range,
            )
        )
        return None, diags

    # Components of an unsupported type were already reported; keep their edges.
    if referent.impl is not None and not referent.is_addressable():
        diags.append(
            Diagnostic(
                Severity.ERROR,
                "Invalid reference target",
                f"The {category.value} {identifier!r} cannot receive events and can not be referenced.",
                ref.range,
            )
        )
        return None, diags
    return referent, diags
