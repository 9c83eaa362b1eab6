from __future__ import annotations

from collections.abc import Mapping

from bridgedl.lang.types import STRING, ObjectType

# Value shapes exchanged between components through the evaluation context.

_REF_ATTRIBUTES = (("apiVersion", STRING), ("kind", STRING), ("name", STRING))

# {"ref": {"apiVersion", "kind", "name"}}: where a component receives events.
DESTINATION_TYPE = ObjectType((("ref", ObjectType(_REF_ATTRIBUTES)),))

# {"apiVersion"?, "kind", "name"}: reference to an arbitrary object (e.g. a Secret).
OBJECT_REFERENCE_TYPE = ObjectType(_REF_ATTRIBUTES, optional=frozenset({"apiVersion"}))


def new_destination(api_version: str, kind: str, name: str) -> dict[str, object]:
    return {"ref": {"apiVersion": api_version, "kind": kind, "name": name}}


def object_reference(kind: str, name: str, api_version: str | None = None) -> dict[str, object]:
    ref: dict[str, object] = {"kind": kind, "name": name}
    if api_version is not None:
        ref["apiVersion"] = api_version
    return ref


def is_destination(value: object) -> bool:
    ref = value.get("ref") if isinstance(value, Mapping) else None
    return isinstance(ref, Mapping) and all(isinstance(ref.get(key), str) for key in ("apiVersion", "kind", "name"))


def is_object_reference(value: object) -> bool:
    return isinstance(value, Mapping) and isinstance(value.get("kind"), str) and isinstance(value.get("name"), str)


def destination_ref(event_dst: Mapping[str, object]) -> dict[str, object]:
    # Plain copy of the "ref" part of a destination, for embedding into manifests.
    ref = event_dst["ref"]
    if not isinstance(ref, Mapping):
        raise ValueError(f"Invalid event destination: {event_dst!r}")
    return {"apiVersion": ref["apiVersion"], "kind": ref["kind"], "name": ref["name"]}
