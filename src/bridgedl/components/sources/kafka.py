from __future__ import annotations

from typing import Any

from bridgedl.config.addr import Category
from bridgedl.diagnostics import Diagnostics
from bridgedl.k8s.naming import rfc1123_name
from bridgedl.k8s.objects import API_KNATIVE_SOURCES, new_object, set_nested
from bridgedl.k8s.secrets import secret_key_refs_kafka
from bridgedl.k8s.values import OBJECT_REFERENCE_TYPE, destination_ref, is_object_reference
from bridgedl.lang.spec import AttrSpec, ObjectSpec, Spec, ValidateSpec
from bridgedl.lang.types import DYNAMIC, STRING, ListType
from bridgedl.translation import component


@component(category=Category.SOURCE, type="kafka")
class KafkaSource:
    def spec(self) -> Spec:
        return ObjectSpec(
            {
                "consumer_group": AttrSpec("consumer_group", STRING),
                "bootstrap_servers": AttrSpec("bootstrap_servers", ListType(STRING), required=True),
                "topics": AttrSpec("topics", ListType(STRING), required=True),
                "sasl_auth": AttrSpec("sasl_auth", OBJECT_REFERENCE_TYPE),
                "tls": ValidateSpec(AttrSpec("tls", DYNAMIC), validate_tls),
            }
        )

    def manifests(self, identifier: str, config: dict[str, Any], event_dst: dict[str, Any]) -> list[dict[str, Any]]:
        src = new_object(API_KNATIVE_SOURCES, "KafkaSource", rfc1123_name(identifier))

        if config.get("consumer_group") is not None:
            set_nested(src, config["consumer_group"], "spec", "consumerGroup")
        set_nested(src, list(config["bootstrap_servers"]), "spec", "bootstrapServers")
        set_nested(src, list(config["topics"]), "spec", "topics")

        sasl_auth = config.get("sasl_auth")
        if sasl_auth is not None:
            sasl_type, user, password, _, _, _ = secret_key_refs_kafka(sasl_auth["name"])
            set_nested(src, True, "spec", "net", "sasl", "enable")
            set_nested(src, sasl_type, "spec", "net", "sasl", "type", "secretKeyRef")
            set_nested(src, user, "spec", "net", "sasl", "user", "secretKeyRef")
            set_nested(src, password, "spec", "net", "sasl", "password", "secretKeyRef")

        tls = config.get("tls")
        if is_object_reference(tls):
            _, _, _, ca_cert, cert, key = secret_key_refs_kafka(tls["name"])
            set_nested(src, True, "spec", "net", "tls", "enable")
            # Keys are optional: the protocol is selected from what the Secret contains.
            for field_name, ref in (("caCert", ca_cert), ("cert", cert), ("key", key)):
                set_nested(src, {**ref, "optional": True}, "spec", "net", "tls", field_name, "secretKeyRef")
        elif tls is True:
            set_nested(src, True, "spec", "net", "tls", "enable")

        set_nested(src, destination_ref(event_dst), "spec", "sink", "ref")
        return [src]


def validate_tls(value: object) -> Diagnostics:
    diags = Diagnostics()
    if not (is_object_reference(value) or isinstance(value, bool)):
        diags.add_error(
            "Invalid attributes type",
            'The "tls" attribute accepts either a secret reference or a boolean.',
        )
    return diags
