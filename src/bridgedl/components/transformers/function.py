from __future__ import annotations

from typing import Any

from bridgedl.config.addr import Category
from bridgedl.k8s.naming import rfc1123_name
from bridgedl.k8s.objects import (
    API_FLOW,
    API_MESSAGING,
    API_TARGETS,
    new_channel,
    new_object,
    new_subscription,
    set_nested,
)
from bridgedl.k8s.values import destination_ref, new_destination
from bridgedl.lang.spec import AttrSpec, ObjectSpec, Spec
from bridgedl.lang.types import BOOL, STRING
from bridgedl.translation import component

# Runtime served by an InfraTarget instead of a Function object.
_JS_RUNTIME = "js"
_DEFAULT_ENTRYPOINT = "main"


@component(category=Category.TRANSFORMER, type="function")
class FunctionTransformer:
    def spec(self) -> Spec:
        return ObjectSpec(
            {
                "runtime": AttrSpec("runtime", STRING, required=True),
                "code": AttrSpec("code", STRING, required=True),
                "entrypoint": AttrSpec("entrypoint", STRING),
                "public": AttrSpec("public", BOOL),
            }
        )

    def manifests(self, identifier: str, config: dict[str, Any], event_dst: dict[str, Any]) -> list[dict[str, Any]]:
        name = rfc1123_name(identifier)
        runtime = config["runtime"]

        if runtime == _JS_RUNTIME:
            target = new_object(API_TARGETS, "InfraTarget", name)
            set_nested(target, config["code"], "spec", "script", "code")
            # Responses are routed through a channel subscription.
            subscriber = new_destination(API_TARGETS, "InfraTarget", name)
            return [target, new_channel(name), new_subscription(name, name, subscriber, reply=event_dst)]

        function = new_object(API_FLOW, "Function", name)
        set_nested(function, runtime, "spec", "runtime")
        set_nested(function, config["code"], "spec", "code")
        set_nested(function, config.get("entrypoint") or _DEFAULT_ENTRYPOINT, "spec", "entrypoint")
        set_nested(function, destination_ref(event_dst), "spec", "sink", "ref")
        set_nested(function, config.get("public") is True, "spec", "public")
        return [function]

    def address(self, identifier: str, config: dict[str, Any], event_dst: Any) -> dict[str, Any]:
        name = rfc1123_name(identifier)
        if config.get("runtime") == _JS_RUNTIME:
            return new_destination(API_MESSAGING, "Channel", name)
        return new_destination(API_FLOW, "Function", name)
