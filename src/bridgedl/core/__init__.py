from .context import Context
from .evaluator import Evaluator, evaluate
from .transformers import AddComponents, DeliveryEdges, EventRouting, GraphTransformer, ReferenceEdges
from .vertex import ComponentVertex

__all__ = [
    "AddComponents",
    "ComponentVertex",
    "Context",
    "DeliveryEdges",
    "EventRouting",
    "Evaluator",
    "GraphTransformer",
    "ReferenceEdges",
    "evaluate",
]
