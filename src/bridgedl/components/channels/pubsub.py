from __future__ import annotations

from typing import Any

from bridgedl.config.addr import Category
from bridgedl.config.globals import Globals
from bridgedl.k8s.naming import rfc1123_name
from bridgedl.k8s.objects import API_MESSAGING, new_channel, new_subscription
from bridgedl.k8s.values import DESTINATION_TYPE, new_destination
from bridgedl.lang.spec import AttrSpec, ObjectSpec, Spec
from bridgedl.lang.types import ListType
from bridgedl.translation import component


@component(category=Category.CHANNEL, type="pubsub", accepts_globals=True)
class PubSubChannel:
    # Fan-out channel: every event is delivered to each subscriber.
    def spec(self) -> Spec:
        return ObjectSpec(
            {
                "subscribers": AttrSpec("subscribers", ListType(DESTINATION_TYPE), required=True),
            }
        )

    def manifests(
        self,
        identifier: str,
        config: dict[str, Any],
        event_dst: Any,
        glb: Globals,
    ) -> list[dict[str, Any]]:
        name = rfc1123_name(identifier)
        manifests = [new_channel(name)]
        for subscriber in config["subscribers"]:
            ref = subscriber["ref"]
            subs_name = rfc1123_name(f"{identifier}-{ref['kind']}-{ref['name']}")
            manifests.append(new_subscription(subs_name, name, subscriber, delivery=glb.delivery))
        return manifests

    def address(self, identifier: str, config: Any, event_dst: Any) -> dict[str, Any]:
        return new_destination(API_MESSAGING, "Channel", rfc1123_name(identifier))
