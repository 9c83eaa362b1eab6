from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

# Dynamic value model: configuration values are plain Python values
# (str, int, float, bool, list, dict, None) plus Unknown placeholders.


class ConversionError(ValueError):
    # Raised when a value cannot be converted to the declared type.
    pass


class Type:
    # Base class of the schema value types.
    def friendly_name(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class PrimitiveType(Type):
    name: str

    def friendly_name(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class ListType(Type):
    element: Type

    def friendly_name(self) -> str:
        return f"list of {self.element.friendly_name()}"


@dataclass(frozen=True, slots=True)
class MapType(Type):
    element: Type

    def friendly_name(self) -> str:
        return f"map of {self.element.friendly_name()}"


@dataclass(frozen=True, slots=True)
class ObjectType(Type):
    attributes: tuple[tuple[str, Type], ...]
    optional: frozenset[str] = frozenset()

    def attribute_type(self, name: str) -> Type | None:
        for attr_name, attr_type in self.attributes:
            if attr_name == name:
                return attr_type
        return None

    def friendly_name(self) -> str:
        return "object"


STRING = PrimitiveType("string")
NUMBER = PrimitiveType("number")
BOOL = PrimitiveType("bool")
# Accepts any value as-is; validators narrow it down when needed.
DYNAMIC = PrimitiveType("any")


@dataclass(frozen=True, slots=True)
class Unknown:
    # Placeholder for a value that is not determined yet (typed like cty unknowns).
    type: Type = DYNAMIC

    def __repr__(self) -> str:
        return f"Unknown({self.type.friendly_name()})"


def is_known(value: object) -> bool:
    # Deep check: a collection holding an unknown element is not wholly known.
    if isinstance(value, Unknown):
        return False
    if isinstance(value, list):
        return all(is_known(item) for item in value)
    if isinstance(value, dict):
        return all(is_known(item) for item in value.values())
    return True


def value_type_name(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, Unknown):
        return value.type.friendly_name()
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "tuple"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def attribute_of(value: object, name: str) -> object:
    # Attribute traversal step; unknown objects yield unknown attributes.
    if isinstance(value, Unknown):
        if isinstance(value.type, ObjectType):
            attr_type = value.type.attribute_type(name)
            if attr_type is None:
                raise ConversionError(f'This object does not have an attribute named "{name}".')
            return Unknown(attr_type)
        return Unknown(DYNAMIC)
    if isinstance(value, Mapping):
        if name not in value:
            raise ConversionError(f'This object does not have an attribute named "{name}".')
        return value[name]
    if value is None:
        raise ConversionError("Attempt to get an attribute from a null value.")
    raise ConversionError(f"Cannot access attribute \"{name}\" on a value of type {value_type_name(value)}.")


def index_of(value: object, key: object) -> object:
    if isinstance(value, Unknown):
        if isinstance(value.type, (ListType, MapType)):
            return Unknown(value.type.element)
        return Unknown(DYNAMIC)
    if isinstance(value, list):
        if isinstance(key, bool) or not isinstance(key, (int, float)) or int(key) != key:
            raise ConversionError("A tuple can only be indexed by a whole number.")
        idx = int(key)
        if idx < 0 or idx >= len(value):
            raise ConversionError("The given index is greater than or equal to the length of the collection.")
        return value[idx]
    if isinstance(value, Mapping):
        str_key = key if isinstance(key, str) else _to_string(key)
        if str_key not in value:
            raise ConversionError(f'The given key "{str_key}" does not identify an element in this collection.')
        return value[str_key]
    raise ConversionError(f"This value of type {value_type_name(value)} does not have any indices.")


def convert(value: object, target: Type) -> object:
    # Convert a value to the declared type, cty style (lenient primitives, strict shapes).
    if value is None:
        return None
    if isinstance(value, Unknown):
        return Unknown(target)
    if target == DYNAMIC:
        return value
    if target == STRING:
        return _to_string(value)
    if target == NUMBER:
        return _to_number(value)
    if target == BOOL:
        return _to_bool(value)
    if isinstance(target, ListType):
        if not isinstance(value, list):
            raise ConversionError(f"{target.friendly_name()} required")
        return [_convert_element(item, target.element, idx) for idx, item in enumerate(value)]
    if isinstance(target, MapType):
        if not isinstance(value, Mapping):
            raise ConversionError(f"{target.friendly_name()} required")
        return {key: _convert_element(item, target.element, key) for key, item in value.items()}
    if isinstance(target, ObjectType):
        if not isinstance(value, Mapping):
            raise ConversionError("object required")
        converted: dict[str, object] = {}
        for attr_name, attr_type in target.attributes:
            if attr_name not in value:
                if attr_name in target.optional:
                    converted[attr_name] = None
                    continue
                raise ConversionError(f'attribute "{attr_name}" is required')
            converted[attr_name] = _convert_element(value[attr_name], attr_type, attr_name)
        return converted
    raise ConversionError(f"unsupported type {target!r}")


def _convert_element(value: object, target: Type, key: object) -> object:
    try:
        return convert(value, target)
    except ConversionError as exc:
        label = f"element {key}" if isinstance(key, int) else f'attribute "{key}"'
        raise ConversionError(f"{label}: {exc}") from exc


def _to_string(value: object) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    raise ConversionError("string required")


def _to_number(value: object) -> int | float:
    if isinstance(value, bool):
        raise ConversionError("number required")
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            raise ConversionError(f'a number is required, but "{value}" is not a valid number') from None
        return int(number) if number.is_integer() and "." not in value else number
    raise ConversionError("number required")


def _to_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    raise ConversionError("bool required")
