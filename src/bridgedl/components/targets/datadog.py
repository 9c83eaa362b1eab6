from __future__ import annotations

from typing import Any

from bridgedl.config.addr import Category
from bridgedl.config.globals import Globals
from bridgedl.k8s.naming import rfc1123_name
from bridgedl.k8s.objects import API_TARGETS, new_object, reply_manifests, set_nested, two_hop_address
from bridgedl.k8s.secrets import secret_key_refs_datadog
from bridgedl.k8s.values import OBJECT_REFERENCE_TYPE, new_destination
from bridgedl.lang.spec import AttrSpec, ObjectSpec, Spec
from bridgedl.lang.types import STRING
from bridgedl.translation import component


@component(category=Category.TARGET, type="datadog", accepts_globals=True)
class DatadogTarget:
    def spec(self) -> Spec:
        return ObjectSpec(
            {
                "metric_prefix": AttrSpec("metric_prefix", STRING),
                "auth": AttrSpec("auth", OBJECT_REFERENCE_TYPE, required=True),
            }
        )

    def manifests(
        self,
        identifier: str,
        config: dict[str, Any],
        event_dst: dict[str, Any] | None,
        glb: Globals,
    ) -> list[dict[str, Any]]:
        name = rfc1123_name(identifier)
        target = new_object(API_TARGETS, "DatadogTarget", name)
        if config.get("metric_prefix") is not None:
            set_nested(target, config["metric_prefix"], "spec", "metricPrefix")
        set_nested(target, secret_key_refs_datadog(config["auth"]["name"]), "spec", "apiKey", "secretKeyRef")

        manifests = [target]
        if event_dst is not None:
            subscriber = new_destination(API_TARGETS, "DatadogTarget", name)
            manifests.extend(reply_manifests(name, subscriber, event_dst, glb.delivery))
        return manifests

    def address(self, identifier: str, config: Any, event_dst: Any) -> dict[str, Any]:
        name = rfc1123_name(identifier)
        return two_hop_address(new_destination(API_TARGETS, "DatadogTarget", name), name, event_dst)
