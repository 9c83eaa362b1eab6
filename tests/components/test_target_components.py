from __future__ import annotations

from bridgedl.components.targets.aws_sns import AWSSNSTarget
from bridgedl.components.targets.datadog import DatadogTarget
from bridgedl.components.targets.kafka import KafkaTarget
from bridgedl.config.globals import DeliverySettings, Globals
from bridgedl.k8s.values import new_destination

_REPLY = new_destination("flow.triggermesh.io/v1alpha1", "Function", "fn")
_SECRET = {"apiVersion": "v1", "kind": "Secret", "name": "creds"}
_CHANNEL = new_destination("messaging.knative.dev/v1", "Channel", "my-target")


def test_aws_sns_target_without_replies() -> None:
    config = {"arn": "arn:aws:sns:us-east-1:1:topic", "credentials": _SECRET}

    manifests = AWSSNSTarget().manifests("my_target", config, None, Globals())

    assert manifests == [
        {
            "apiVersion": "targets.triggermesh.io/v1alpha1",
            "kind": "AWSSNSTarget",
            "metadata": {"name": "my-target"},
            "spec": {
                "arn": "arn:aws:sns:us-east-1:1:topic",
                "awsApiKey": {"secretKeyRef": {"name": "creds", "key": "aws_access_key_id"}},
                "awsApiSecret": {"secretKeyRef": {"name": "creds", "key": "aws_secret_access_key"}},
            },
        }
    ]
    assert AWSSNSTarget().address("my_target", config, None) == new_destination(
        "targets.triggermesh.io/v1alpha1", "AWSSNSTarget", "my-target"
    )


def test_aws_sns_target_routes_replies_through_channel() -> None:
    config = {"arn": "arn", "credentials": _SECRET}
    glb = Globals(delivery=DeliverySettings(retries=3))

    target, channel, subscription = AWSSNSTarget().manifests("my_target", config, _REPLY, glb)

    assert target["kind"] == "AWSSNSTarget"
    assert channel["kind"] == "Channel"
    assert channel["metadata"]["name"] == "my-target"
    assert subscription["spec"]["subscriber"]["ref"]["kind"] == "AWSSNSTarget"
    assert subscription["spec"]["reply"] == {"ref": _REPLY["ref"]}
    assert subscription["spec"]["delivery"] == {"retry": 3}
    assert AWSSNSTarget().address("my_target", config, _REPLY) == _CHANNEL


def test_datadog_target() -> None:
    config = {"metric_prefix": "bridge", "auth": {"kind": "Secret", "name": "dd"}}

    (target,) = DatadogTarget().manifests("dd", config, None, Globals())

    assert target["kind"] == "DatadogTarget"
    assert target["spec"] == {
        "metricPrefix": "bridge",
        "apiKey": {"secretKeyRef": {"name": "dd", "key": "apiKey"}},
    }
    assert DatadogTarget().address("dd", config, _REPLY)["ref"]["kind"] == "Channel"


def test_datadog_target_reply_pair_without_delivery() -> None:
    config = {"metric_prefix": None, "auth": {"kind": "Secret", "name": "dd"}}

    target, _, subscription = DatadogTarget().manifests("dd", config, _REPLY, Globals())

    assert "metricPrefix" not in target["spec"]
    assert "delivery" not in subscription["spec"]


def test_kafka_target_is_a_kafka_sink() -> None:
    config = {"topic": "out", "bootstrap_servers": ["k:9092"], "auth": _SECRET}

    (sink,) = KafkaTarget().manifests("out", config, None, Globals())

    assert sink["apiVersion"] == "eventing.knative.dev/v1alpha1"
    assert sink["kind"] == "KafkaSink"
    assert sink["spec"] == {
        "topic": "out",
        "bootstrapServers": ["k:9092"],
        "auth": {"secret": {"ref": {"name": "creds"}}},
    }
    assert KafkaTarget().address("out", config, None)["ref"]["kind"] == "KafkaSink"
