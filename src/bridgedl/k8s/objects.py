from __future__ import annotations

from collections.abc import Mapping

from bridgedl.config.globals import DeliverySettings
from bridgedl.k8s.values import destination_ref, new_destination

# Builders of the untyped Kubernetes objects emitted as manifests.

API_TARGETS = "targets.triggermesh.io/v1alpha1"
API_SOURCES = "sources.triggermesh.io/v1alpha1"
API_FLOW = "flow.triggermesh.io/v1alpha1"
API_MESSAGING = "messaging.knative.dev/v1"
API_EVENTING = "eventing.knative.dev/v1"
API_EVENTING_V1ALPHA1 = "eventing.knative.dev/v1alpha1"
API_KNATIVE_SOURCES = "sources.knative.dev/v1beta1"

Manifest = dict[str, object]


def new_object(api_version: str, kind: str, name: str) -> Manifest:
    return {"apiVersion": api_version, "kind": kind, "metadata": {"name": name}}


def set_nested(obj: dict[str, object], value: object, *path: str) -> None:
    # Create intermediate mappings along path, then assign the leaf.
    current = obj
    for key in path[:-1]:
        child = current.get(key)
        if not isinstance(child, dict):
            child = {}
            current[key] = child
        current = child
    current[path[-1]] = value


def new_channel(name: str) -> Manifest:
    return new_object(API_MESSAGING, "Channel", name)


def new_subscription(
    name: str,
    channel: str,
    subscriber: Mapping[str, object],
    reply: Mapping[str, object] | None = None,
    delivery: DeliverySettings | None = None,
) -> Manifest:
    subs = new_object(API_MESSAGING, "Subscription", name)
    set_nested(subs, {"apiVersion": API_MESSAGING, "kind": "Channel", "name": channel}, "spec", "channel")
    set_nested(subs, {"ref": destination_ref(subscriber)}, "spec", "subscriber")
    if reply is not None:
        set_nested(subs, {"ref": destination_ref(reply)}, "spec", "reply")
    delivery_opts = delivery_spec(delivery)
    if delivery_opts:
        set_nested(subs, delivery_opts, "spec", "delivery")
    return subs


def delivery_spec(delivery: DeliverySettings | None) -> dict[str, object]:
    if delivery is None:
        return {}
    spec: dict[str, object] = {}
    if delivery.retries is not None:
        spec["retry"] = delivery.retries
    if delivery.dead_letter_sink is not None:
        spec["deadLetterSink"] = {"ref": destination_ref(delivery.dead_letter_sink)}
    if delivery.backoff_policy is not None:
        spec["backoffPolicy"] = delivery.backoff_policy
    if delivery.backoff_delay is not None:
        spec["backoffDelay"] = delivery.backoff_delay
    return spec


def new_broker(name: str) -> Manifest:
    return new_object(API_EVENTING, "Broker", name)


def new_trigger(
    name: str,
    broker: str,
    subscriber: Mapping[str, object],
    filter_attributes: Mapping[str, object] | None = None,
    delivery: DeliverySettings | None = None,
) -> Manifest:
    trigger = new_object(API_EVENTING, "Trigger", name)
    set_nested(trigger, broker, "spec", "broker")
    if filter_attributes:
        set_nested(trigger, dict(filter_attributes), "spec", "filter", "attributes")
    set_nested(trigger, {"ref": destination_ref(subscriber)}, "spec", "subscriber")
    delivery_opts = delivery_spec(delivery)
    if delivery_opts:
        set_nested(trigger, delivery_opts, "spec", "delivery")
    return trigger


def reply_manifests(
    name: str,
    subscriber: Mapping[str, object],
    event_dst: Mapping[str, object],
    delivery: DeliverySettings | None = None,
) -> list[Manifest]:
    # Channel named after the component plus a Subscription routing its replies.
    return [new_channel(name), new_subscription(name, name, subscriber, reply=event_dst, delivery=delivery)]


def two_hop_address(subscriber: dict[str, object], name: str, event_dst: object) -> dict[str, object]:
    # Terminal components are their own address; replying ones sit behind a channel.
    if event_dst is None:
        return subscriber
    return new_destination(API_MESSAGING, "Channel", name)
