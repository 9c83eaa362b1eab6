from __future__ import annotations

import pytest

from bridgedl.k8s.values import DESTINATION_TYPE, OBJECT_REFERENCE_TYPE
from bridgedl.lang.types import (
    BOOL,
    DYNAMIC,
    NUMBER,
    STRING,
    ConversionError,
    ListType,
    MapType,
    Unknown,
    attribute_of,
    convert,
    index_of,
    is_known,
    value_type_name,
)


def test_convert_primitives_leniently() -> None:
    assert convert("5", NUMBER) == 5
    assert convert("1.5", NUMBER) == 1.5
    assert convert(True, STRING) == "true"
    assert convert(3, STRING) == "3"
    assert convert("false", BOOL) is False
    assert convert(None, STRING) is None


def test_convert_rejects_incompatible_values() -> None:
    with pytest.raises(ConversionError):
        convert(1, BOOL)
    with pytest.raises(ConversionError):
        convert("abc", NUMBER)
    with pytest.raises(ConversionError):
        convert({"a": 1}, STRING)


def test_convert_collections() -> None:
    assert convert([1, "a"], ListType(STRING)) == ["1", "a"]
    assert convert({"k": 2}, MapType(STRING)) == {"k": "2"}

    with pytest.raises(ConversionError, match="element 1"):
        convert(["a", ["b"]], ListType(STRING))


def test_convert_object_keeps_declared_attributes_only() -> None:
    value = {"ref": {"apiVersion": "v1", "kind": "K", "name": "n", "extra": True}}

    assert convert(value, DESTINATION_TYPE) == {"ref": {"apiVersion": "v1", "kind": "K", "name": "n"}}


def test_convert_object_optional_and_required_attributes() -> None:
    assert convert({"kind": "Secret", "name": "s"}, OBJECT_REFERENCE_TYPE) == {
        "apiVersion": None,
        "kind": "Secret",
        "name": "s",
    }
    with pytest.raises(ConversionError, match='attribute "ref" is required'):
        convert({}, DESTINATION_TYPE)


def test_unknown_propagates_through_conversion_and_traversal() -> None:
    dst = Unknown(DESTINATION_TYPE)

    assert convert(dst, DYNAMIC) == Unknown(DYNAMIC)
    assert convert(Unknown(), STRING) == Unknown(STRING)
    ref = attribute_of(dst, "ref")
    assert isinstance(ref, Unknown)
    assert attribute_of(ref, "name") == Unknown(STRING)
    assert index_of(Unknown(ListType(NUMBER)), 3) == Unknown(NUMBER)

    with pytest.raises(ConversionError):
        attribute_of(dst, "nope")


def test_is_known_is_deep() -> None:
    assert is_known({"a": [1, "b"]})
    assert not is_known([1, Unknown()])
    assert not is_known({"a": {"b": Unknown(STRING)}})


def test_index_of_validates_keys() -> None:
    assert index_of([10, 20], 1) == 20
    assert index_of({"k": "v"}, "k") == "v"

    with pytest.raises(ConversionError):
        index_of([10, 20], 5)
    with pytest.raises(ConversionError):
        index_of([10, 20], "a")
    with pytest.raises(ConversionError):
        index_of("text", 0)


def test_value_type_names() -> None:
    assert value_type_name(None) == "null"
    assert value_type_name(True) == "bool"
    assert value_type_name(1.5) == "number"
    assert value_type_name([1]) == "tuple"
    assert value_type_name({}) == "object"
    assert value_type_name(Unknown(STRING)) == "string"
