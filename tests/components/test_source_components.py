from __future__ import annotations

from typing import Any

from bridgedl.components.sources.azure_activity_logs import AzureActivityLogsSource
from bridgedl.components.sources.kafka import KafkaSource, validate_tls
from bridgedl.k8s.values import new_destination
from bridgedl.lang.eval import EvalContext
from bridgedl.lang.funcs import SecretRefs
from bridgedl.lang.syntax import parse_config

_SINK = new_destination("targets.triggermesh.io/v1alpha1", "AWSSNSTarget", "sns")
_SECRET = {"apiVersion": "v1", "kind": "Secret", "name": "kafka-creds"}


def _decode(impl: Any, src: str) -> tuple[object, list[str]]:
    body, diags = parse_config(src, "main.bdl")
    assert not diags, str(diags)
    val, decode_diags = impl.spec().decode(body, EvalContext(variables={"secret": SecretRefs()}))
    return val, [diag.summary for diag in decode_diags]


def _kafka_config(**overrides: object) -> dict[str, Any]:
    config: dict[str, Any] = {
        "consumer_group": None,
        "bootstrap_servers": ["k:9092"],
        "topics": ["t"],
        "sasl_auth": None,
        "tls": None,
    }
    config.update(overrides)
    return config


def test_kafka_source_minimal_manifest() -> None:
    (src,) = KafkaSource().manifests("My_Source", _kafka_config(), _SINK)

    assert src == {
        "apiVersion": "sources.knative.dev/v1beta1",
        "kind": "KafkaSource",
        "metadata": {"name": "my-source"},
        "spec": {
            "bootstrapServers": ["k:9092"],
            "topics": ["t"],
            "sink": {"ref": _SINK["ref"]},
        },
    }


def test_kafka_source_sasl_and_tls_secret() -> None:
    config = _kafka_config(consumer_group="group", sasl_auth=_SECRET, tls=_SECRET)

    (src,) = KafkaSource().manifests("s", config, _SINK)

    spec = src["spec"]
    assert spec["consumerGroup"] == "group"
    sasl = spec["net"]["sasl"]
    assert sasl["enable"] is True
    assert sasl["type"]["secretKeyRef"] == {"name": "kafka-creds", "key": "saslType"}
    assert sasl["user"]["secretKeyRef"] == {"name": "kafka-creds", "key": "user"}
    assert sasl["password"]["secretKeyRef"] == {"name": "kafka-creds", "key": "password"}
    tls = spec["net"]["tls"]
    assert tls["enable"] is True
    assert tls["caCert"]["secretKeyRef"] == {"name": "kafka-creds", "key": "ca.crt", "optional": True}
    assert tls["key"]["secretKeyRef"]["key"] == "user.key"


def test_kafka_source_tls_flag() -> None:
    (enabled,) = KafkaSource().manifests("s", _kafka_config(tls=True), _SINK)
    (disabled,) = KafkaSource().manifests("s", _kafka_config(tls=False), _SINK)

    assert enabled["spec"]["net"] == {"tls": {"enable": True}}
    assert "net" not in disabled["spec"]


def test_kafka_source_decodes_secret_references() -> None:
    val, diags = _decode(
        KafkaSource(),
        'bootstrap_servers = ["k:9092"]\ntopics = ["t"]\nsasl_auth = secret.kafka-creds\ntls = true\n',
    )

    assert diags == []
    assert isinstance(val, dict)
    assert val["sasl_auth"] == _SECRET
    assert val["tls"] is True


def test_kafka_source_tls_validator() -> None:
    _, diags = _decode(KafkaSource(), 'bootstrap_servers = ["k:9092"]\ntopics = ["t"]\ntls = 42\n')

    assert diags == ["Invalid attributes type"]
    assert not validate_tls(True)
    assert not validate_tls(_SECRET)
    assert validate_tls("yes").has_errors()


def test_azure_activity_logs_source() -> None:
    config = {
        "event_hub_id": "/subscriptions/s/resourceGroups/g/providers/Microsoft.EventHub/namespaces/n",
        "event_hubs_sas_policy": None,
        "categories": ["Administrative", "Policy"],
        "auth": {"apiVersion": "v1", "kind": "Secret", "name": "azure"},
    }

    (src,) = AzureActivityLogsSource().manifests("activity", config, _SINK)

    assert src["kind"] == "AzureActivityLogsSource"
    assert src["apiVersion"] == "sources.triggermesh.io/v1alpha1"
    spec = src["spec"]
    assert spec["eventHubID"] == config["event_hub_id"]
    assert "eventHubsSASPolicy" not in spec
    assert spec["categories"] == ["Administrative", "Policy"]
    principal = spec["auth"]["servicePrincipal"]
    assert principal["tenantID"]["valueFromSecret"] == {"name": "azure", "key": "tenantID"}
    assert principal["clientSecret"]["valueFromSecret"] == {"name": "azure", "key": "clientSecret"}
    assert spec["sink"]["ref"] == _SINK["ref"]


def test_azure_activity_logs_requires_auth() -> None:
    _, diags = _decode(AzureActivityLogsSource(), 'event_hub_id = "id"\n')

    assert diags == ["Missing required argument"]
