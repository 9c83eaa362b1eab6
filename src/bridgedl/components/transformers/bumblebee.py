from __future__ import annotations

from typing import Any

from bridgedl.config.addr import Category
from bridgedl.k8s.naming import rfc1123_name
from bridgedl.k8s.objects import API_FLOW, new_object, set_nested
from bridgedl.k8s.values import destination_ref, new_destination
from bridgedl.lang.spec import AttrSpec, BlockLabelSpec, BlockListSpec, BlockSpec, ObjectSpec, Spec
from bridgedl.lang.types import STRING
from bridgedl.translation import component


@component(category=Category.TRANSFORMER, type="bumblebee")
class BumblebeeTransformer:
    # Declarative event transformation: "context" and "data" blocks each hold
    # "operation" blocks (store, add, delete, shift...) made of "path" blocks.
    def spec(self) -> Spec:
        operations = BlockListSpec(
            "operation",
            ObjectSpec(
                {
                    "operation": BlockLabelSpec(0, "operation"),
                    "path": BlockListSpec(
                        "path",
                        ObjectSpec(
                            {
                                "key": AttrSpec("key", STRING),
                                "value": AttrSpec("value", STRING),
                            }
                        ),
                        min_items=1,
                    ),
                }
            ),
        )
        return ObjectSpec(
            {
                "context": BlockSpec("context", operations),
                "data": BlockSpec("data", operations),
            }
        )

    def manifests(self, identifier: str, config: dict[str, Any], event_dst: dict[str, Any]) -> list[dict[str, Any]]:
        transformation = new_object(API_FLOW, "Transformation", rfc1123_name(identifier))
        set_nested(transformation, _operations(config.get("context")), "spec", "context")
        set_nested(transformation, _operations(config.get("data")), "spec", "data")
        set_nested(transformation, destination_ref(event_dst), "spec", "sink", "ref")
        return [transformation]

    def address(self, identifier: str, config: Any, event_dst: Any) -> dict[str, Any]:
        return new_destination(API_FLOW, "Transformation", rfc1123_name(identifier))


def _operations(decoded: list[dict[str, Any]] | None) -> list[dict[str, Any]]:
    operations: list[dict[str, Any]] = []
    for operation in decoded or []:
        paths = []
        for path in operation["path"]:
            entry = {}
            if path.get("key") is not None:
                entry["key"] = path["key"]
            if path.get("value") is not None:
                entry["value"] = path["value"]
            paths.append(entry)
        operations.append({"operation": operation["operation"], "paths": paths})
    return operations
