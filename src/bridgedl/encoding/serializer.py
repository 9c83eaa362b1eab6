from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any, Literal

import yaml

from bridgedl.k8s.objects import API_FLOW

OutputFormat = Literal["json", "yaml"]


class Serializer:
    # Renders generated manifests either as a List manifest or wrapped into a
    # Bridge object named after the Bridge identifier.
    def __init__(self, bridge_id: str) -> None:
        self.bridge_id = bridge_id

    def manifests_list(self, manifests: Sequence[dict[str, Any]]) -> dict[str, Any]:
        return {"apiVersion": "v1", "kind": "List", "items": list(manifests)}

    def bridge_object(self, manifests: Sequence[dict[str, Any]]) -> dict[str, Any]:
        return {
            "apiVersion": API_FLOW,
            "kind": "Bridge",
            "metadata": {"name": self.bridge_id},
            "spec": {"components": list(manifests)},
        }

    def render(self, manifests: Sequence[dict[str, Any]], *, bridge: bool = False, fmt: OutputFormat = "json") -> str:
        obj = self.bridge_object(manifests) if bridge else self.manifests_list(manifests)
        if fmt == "yaml":
            return to_yaml(obj)
        return to_json(obj)


def to_json(obj: object) -> str:
    return json.dumps(obj, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def to_yaml(obj: object) -> str:
    return yaml.safe_dump(obj, sort_keys=True, default_flow_style=False, allow_unicode=True)
