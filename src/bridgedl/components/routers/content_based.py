from __future__ import annotations

from typing import Any

from bridgedl.config.addr import Category
from bridgedl.config.globals import Globals
from bridgedl.k8s.naming import rfc1123_name
from bridgedl.k8s.objects import API_EVENTING, new_broker, new_trigger
from bridgedl.k8s.values import DESTINATION_TYPE, new_destination
from bridgedl.lang.spec import AttrSpec, BlockListSpec, ObjectSpec, Spec
from bridgedl.lang.types import STRING, MapType
from bridgedl.translation import component


@component(category=Category.ROUTER, type="content_based", accepts_globals=True)
class ContentBasedRouter:
    # Broker with one Trigger per route; a route matches on exact context attributes.
    def spec(self) -> Spec:
        return ObjectSpec(
            {
                "route": BlockListSpec(
                    "route",
                    ObjectSpec(
                        {
                            "attributes": AttrSpec("attributes", MapType(STRING)),
                            "to": AttrSpec("to", DESTINATION_TYPE, required=True),
                        }
                    ),
                    min_items=1,
                ),
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
        manifests = [new_broker(name)]
        for index, route in enumerate(config["route"]):
            trigger_name = rfc1123_name(f"{identifier}-r{index}")
            manifests.append(
                new_trigger(trigger_name, name, route["to"], route.get("attributes"), delivery=glb.delivery)
            )
        return manifests

    def address(self, identifier: str, config: Any, event_dst: Any) -> dict[str, Any]:
        return new_destination(API_EVENTING, "Broker", rfc1123_name(identifier))
