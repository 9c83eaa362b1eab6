from __future__ import annotations

from typing import Any

from bridgedl.config.addr import Category
from bridgedl.k8s.naming import rfc1123_name
from bridgedl.k8s.objects import API_SOURCES, new_object, set_nested
from bridgedl.k8s.secrets import secret_key_refs_azure_sp
from bridgedl.k8s.values import OBJECT_REFERENCE_TYPE, destination_ref
from bridgedl.lang.spec import AttrSpec, ObjectSpec, Spec
from bridgedl.lang.types import STRING, ListType
from bridgedl.translation import component


@component(category=Category.SOURCE, type="azure_activity_logs")
class AzureActivityLogsSource:
    def spec(self) -> Spec:
        return ObjectSpec(
            {
                "event_hub_id": AttrSpec("event_hub_id", STRING, required=True),
                "event_hubs_sas_policy": AttrSpec("event_hubs_sas_policy", STRING),
                "categories": AttrSpec("categories", ListType(STRING)),
                "auth": AttrSpec("auth", OBJECT_REFERENCE_TYPE, required=True),
            }
        )

    def manifests(self, identifier: str, config: dict[str, Any], event_dst: dict[str, Any]) -> list[dict[str, Any]]:
        src = new_object(API_SOURCES, "AzureActivityLogsSource", rfc1123_name(identifier))

        set_nested(src, config["event_hub_id"], "spec", "eventHubID")
        if config.get("event_hubs_sas_policy") is not None:
            set_nested(src, config["event_hubs_sas_policy"], "spec", "eventHubsSASPolicy")
        if config.get("categories") is not None:
            set_nested(src, list(config["categories"]), "spec", "categories")

        tenant_id, client_id, client_secret = secret_key_refs_azure_sp(config["auth"]["name"])
        set_nested(src, tenant_id, "spec", "auth", "servicePrincipal", "tenantID", "valueFromSecret")
        set_nested(src, client_id, "spec", "auth", "servicePrincipal", "clientID", "valueFromSecret")
        set_nested(src, client_secret, "spec", "auth", "servicePrincipal", "clientSecret", "valueFromSecret")

        set_nested(src, destination_ref(event_dst), "spec", "sink", "ref")
        return [src]
