from __future__ import annotations

import logging
from collections.abc import Collection
from typing import Any

from bridgedl.config.bridge import Bridge
from bridgedl.config.globals import decode_globals
from bridgedl.core.transformers import Graph
from bridgedl.core.vertex import ComponentVertex
from bridgedl.diagnostics import Diagnostic, Diagnostics, Severity
from bridgedl.k8s.values import DESTINATION_TYPE
from bridgedl.lang.decode import decode_safe, traverse_abs_safe
from bridgedl.lang.eval import EvalContext
from bridgedl.lang.funcs import SecretRefs, functions
from bridgedl.lang.types import Unknown
from bridgedl.translation import Addressable, Decodable, translate

logger = logging.getLogger(__name__)

_SECRET_ROOT = "secret"


class Evaluator:
    # Walks the graph referents first, binding each component's address in the
    # evaluation context before decoding the components that reference it.
    # Strongly connected components with a cycle are visited twice: the first
    # sweep only determines addresses, the second one translates.

    def __init__(self, graph: Graph, bridge: Bridge, referenceable: Collection[str]) -> None:
        self._graph = graph
        self._bridge = bridge
        self._referenceable = referenceable
        self._functions = functions(bridge.base_dir())
        self._addresses: dict[str, dict[str, object]] = {}
        self._manifests: dict[ComponentVertex, list[dict[str, Any]]] = {}
        self._incomplete: list[ComponentVertex] = []

    def evaluate(self, diags: Diagnostics | None = None) -> tuple[list[dict[str, Any]], Diagnostics]:
        # Appends to the given diagnostics, so that problems reported while
        # building the graph suppress the incomplete configuration errors.
        diags = diags if diags is not None else Diagnostics()
        order = self._graph.topological_components(key=ComponentVertex.sort_key)

        for members in reversed(order):
            if self._graph.is_cyclic(set(members)):
                logger.debug("Evaluating cycle %s", [vertex.label() for vertex in members])
                for vertex in members:
                    self._visit(vertex, translate_vertex=False)
            for vertex in members:
                diags.extend(self._visit(vertex, translate_vertex=True))

        _, _, glb_diags = decode_globals(self._bridge.globals, self._context(), self._referenceable)
        diags.extend(glb_diags)

        if not diags.has_errors():
            for vertex in self._incomplete:
                diags.append(
                    Diagnostic(
                        Severity.ERROR,
                        "Incomplete configuration",
                        f"The configuration of {vertex.label()} depends on values which could not be determined.",
                        vertex.component.range,
                    )
                )
        if diags.has_errors():
            return [], diags

        manifests = [
            manifest for members in order for vertex in members for manifest in self._manifests.get(vertex, [])
        ]
        logger.debug("Generated %d manifest(s)", len(manifests))
        return manifests, diags

    def _context(self) -> EvalContext:
        variables: dict[str, object] = {_SECRET_ROOT: SecretRefs()}
        variables.update({category: dict(addresses) for category, addresses in self._addresses.items()})
        return EvalContext(variables=variables, functions=self._functions)

    def _bind(self, vertex: ComponentVertex, address: object) -> None:
        addr = vertex.addr
        self._addresses.setdefault(addr.category.value, {})[addr.identifier] = address

    def _visit(self, vertex: ComponentVertex, *, translate_vertex: bool) -> Diagnostics:
        diags = Diagnostics()
        impl = vertex.impl
        cmp = vertex.component
        if impl is None:
            # Unsupported type, already reported: referrers see an unknown address.
            self._bind(vertex, Unknown(DESTINATION_TYPE))
            return diags

        ctx = self._context()
        config: object = {}
        complete = True
        if isinstance(impl, Decodable):
            config, complete, decode_diags = decode_safe(
                cmp.config, impl.spec(), ctx, self._referenceable, DESTINATION_TYPE
            )
            diags.extend(decode_diags)

        event_dst: object = None
        dst_complete = True
        if cmp.to is not None:
            event_dst, dst_complete, dst_diags = traverse_abs_safe(cmp.to, ctx, self._referenceable, DESTINATION_TYPE)
            diags.extend(dst_diags)

        if isinstance(impl, Addressable):
            self._bind(vertex, self._address(vertex, impl, config, event_dst, diags))

        if not translate_vertex or diags.has_errors():
            return diags
        if not (complete and dst_complete):
            self._incomplete.append(vertex)
            return diags

        glb = None
        if vertex.accepts_globals():
            # Fresh context: the dead letter sink may be this very component.
            glb, glb_complete, glb_diags = decode_globals(self._bridge.globals, self._context(), self._referenceable)
            if glb is None:
                # Errors in the settings are reported once the walk is over.
                if not glb_complete and not glb_diags.has_errors():
                    self._incomplete.append(vertex)
                return diags

        try:
            self._manifests[vertex] = translate(impl, vertex.meta, cmp.identifier, config, event_dst, glb)
        except Exception as exc:
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    "Translation failed",
                    f"Generating the manifests of {vertex.label()} failed: {type(exc).__name__}: {exc}",
                    cmp.range,
                )
            )
        return diags

    def _address(
        self,
        vertex: ComponentVertex,
        impl: Addressable,
        config: object,
        event_dst: object,
        diags: Diagnostics,
    ) -> object:
        if diags.has_errors():
            return Unknown(DESTINATION_TYPE)
        try:
            return impl.address(vertex.component.identifier, config, event_dst)
        except Exception as exc:
            diags.append(
                Diagnostic(
                    Severity.ERROR,
                    "Addressing failed",
                    f"Computing the address of {vertex.label()} failed: {type(exc).__name__}: {exc}",
                    vertex.component.range,
                )
            )
            return Unknown(DESTINATION_TYPE)


def evaluate(
    graph: Graph,
    bridge: Bridge,
    referenceable: Collection[str],
    diags: Diagnostics | None = None,
) -> tuple[list[dict[str, Any]], Diagnostics]:
    return Evaluator(graph, bridge, referenceable).evaluate(diags)
