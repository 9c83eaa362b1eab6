from __future__ import annotations

from typing import Any

from bridgedl.config.addr import Category
from bridgedl.config.globals import Globals
from bridgedl.k8s.naming import rfc1123_name
from bridgedl.k8s.objects import API_EVENTING_V1ALPHA1, new_object, reply_manifests, set_nested, two_hop_address
from bridgedl.k8s.values import OBJECT_REFERENCE_TYPE, new_destination
from bridgedl.lang.spec import AttrSpec, ObjectSpec, Spec
from bridgedl.lang.types import STRING, ListType
from bridgedl.translation import component


@component(category=Category.TARGET, type="kafka", accepts_globals=True)
class KafkaTarget:
    # Knative KafkaSink; replies, when routed, go through a channel.
    def spec(self) -> Spec:
        return ObjectSpec(
            {
                "topic": AttrSpec("topic", STRING, required=True),
                "bootstrap_servers": AttrSpec("bootstrap_servers", ListType(STRING), required=True),
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
        sink = new_object(API_EVENTING_V1ALPHA1, "KafkaSink", name)
        set_nested(sink, config["topic"], "spec", "topic")
        set_nested(sink, list(config["bootstrap_servers"]), "spec", "bootstrapServers")
        set_nested(sink, config["auth"]["name"], "spec", "auth", "secret", "ref", "name")

        manifests = [sink]
        if event_dst is not None:
            subscriber = new_destination(API_EVENTING_V1ALPHA1, "KafkaSink", name)
            manifests.extend(reply_manifests(name, subscriber, event_dst, glb.delivery))
        return manifests

    def address(self, identifier: str, config: Any, event_dst: Any) -> dict[str, Any]:
        name = rfc1123_name(identifier)
        return two_hop_address(new_destination(API_EVENTING_V1ALPHA1, "KafkaSink", name), name, event_dst)
