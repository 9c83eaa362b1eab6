from __future__ import annotations

import logging
from typing import Any

from bridgedl.config.bridge import Bridge
from bridgedl.core.evaluator import evaluate
from bridgedl.core.transformers import (
    AddComponents,
    DeliveryEdges,
    EventRouting,
    Graph,
    ReferenceEdges,
    apply_transformers,
)
from bridgedl.diagnostics import Diagnostics
from bridgedl.graph.directed import DirectedGraph
from bridgedl.translation import ComponentRegistry

logger = logging.getLogger(__name__)


class Context:
    # Entry point of the core: builds the graph of a Bridge and generates its manifests.
    def __init__(self, bridge: Bridge, registry: ComponentRegistry) -> None:
        self.bridge = bridge
        self.registry = registry

    def graph(self) -> tuple[Graph, Diagnostics]:
        graph: Graph = DirectedGraph()
        referenceable = self.registry.referenceable_categories()
        diags = apply_transformers(
            graph,
            [
                AddComponents(self.bridge, self.registry),
                ReferenceEdges(referenceable),
                EventRouting(referenceable),
                DeliveryEdges(self.bridge, referenceable),
            ],
        )
        logger.debug("Built graph: %d vertices, %d edges", len(graph), len(graph.edges()))
        return graph, diags

    def generate(self) -> tuple[list[dict[str, Any]], Diagnostics]:
        graph, diags = self.graph()
        return evaluate(graph, self.bridge, self.registry.referenceable_categories(), diags)
