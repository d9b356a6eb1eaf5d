"""Translate lightweight type definitions into type descriptor trees.

Accepted definitions:

- a primitive name: ``"string"``, ``"integer"``, ``"float"``, ``"boolean"``,
  ``"date"``, ``"datetime"``, ``"uuid"``, ``"email"``
- a Python builtin: ``str``, ``int``, ``float``, ``bool``, ``date``,
  ``datetime``, ``uuid.UUID``
- ``{"type": "<primitive name>"}``
- a mapping of field names to definitions, producing an Object
- a one-element list, producing an Array of that element
- a type descriptor instance (returned unchanged) or class (instantiated)
"""

import enum
import uuid
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Callable

from endpoint_dsl.errors import DefinitionError, SchemaValidationError
from endpoint_dsl.types.base import TypeDescriptor
from endpoint_dsl.types.composite import Array, Object
from endpoint_dsl.types.primitives import (
    UUID,
    Boolean,
    Date,
    DateTime,
    Email,
    Float,
    Integer,
    String,
)

PRIMITIVE_TYPES: dict[str, Callable[[], TypeDescriptor]] = {
    "string": String,
    "integer": Integer,
    "float": Float,
    "boolean": Boolean,
    "date": Date,
    "datetime": DateTime,
    "uuid": UUID,
    "email": Email,
}

# Lookups use the exact class, so datetime never falls back to date.
PYTHON_TYPES: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "float",
    bool: "boolean",
    date: "date",
    datetime: "datetime",
    uuid.UUID: "uuid",
}


class DefinitionKind(enum.Enum):
    PRIMITIVE_NAME = "primitive_name"
    PRIMITIVE_CLASS = "primitive_class"
    TYPE_MAPPING = "type_mapping"
    FIELD_MAPPING = "field_mapping"
    ARRAY = "array"
    DESCRIPTOR = "descriptor"
    DESCRIPTOR_CLASS = "descriptor_class"


def classify(definition: Any) -> DefinitionKind:
    """Decide which shorthand form *definition* uses."""
    if isinstance(definition, TypeDescriptor):
        return DefinitionKind.DESCRIPTOR
    if isinstance(definition, type):
        if issubclass(definition, TypeDescriptor):
            return DefinitionKind.DESCRIPTOR_CLASS
        if definition in PYTHON_TYPES:
            return DefinitionKind.PRIMITIVE_CLASS
        raise DefinitionError(f"unsupported type class: {definition.__name__}")
    if isinstance(definition, str):
        return DefinitionKind.PRIMITIVE_NAME
    if isinstance(definition, Mapping):
        if list(definition.keys()) == ["type"] and isinstance(definition["type"], str):
            return DefinitionKind.TYPE_MAPPING
        return DefinitionKind.FIELD_MAPPING
    if isinstance(definition, (list, tuple)):
        return DefinitionKind.ARRAY
    raise DefinitionError(f"unknown definition type: {type(definition).__name__} ({definition!r})")


def from_definition(definition: Any) -> TypeDescriptor:
    """Resolve *definition* into a type descriptor, failing fast on bad input."""
    kind = classify(definition)

    if kind is DefinitionKind.DESCRIPTOR:
        return definition
    if kind is DefinitionKind.PRIMITIVE_NAME:
        return primitive(definition)
    if kind is DefinitionKind.PRIMITIVE_CLASS:
        return primitive(PYTHON_TYPES[definition])
    if kind is DefinitionKind.TYPE_MAPPING:
        return primitive(definition["type"])
    if kind is DefinitionKind.FIELD_MAPPING:
        return _object_from_mapping(definition)
    if kind is DefinitionKind.ARRAY:
        if len(definition) != 1:
            raise DefinitionError("array definition must have exactly one element type")
        return Array(from_definition(definition[0]))
    if kind is DefinitionKind.DESCRIPTOR_CLASS:
        return _instantiate(definition)
    raise DefinitionError(f"unhandled definition kind: {kind}")


# The builder resolves types through the same rules.
resolve_type = from_definition


def primitive(name: str) -> TypeDescriptor:
    factory = PRIMITIVE_TYPES.get(name.lower())
    if factory is None:
        raise DefinitionError(f"unknown primitive type: {name!r}")
    return factory()


def _object_from_mapping(definition: Mapping) -> Object:
    result = Object()
    for field_name, field_definition in definition.items():
        if not isinstance(field_name, str) or not field_name:
            raise DefinitionError(f"field names must be non-empty strings, got {field_name!r}")
        result = result.field(field_name, from_definition(field_definition))
    return result


def _instantiate(descriptor_class: type) -> TypeDescriptor:
    try:
        return descriptor_class()
    except TypeError as exc:
        raise DefinitionError(
            f"{descriptor_class.__name__} needs arguments; pass an instance instead"
        ) from exc


def ensure_valid(value: Any, type_def: Any) -> Any:
    """Return *value* unchanged if it conforms, else raise SchemaValidationError."""
    result = from_definition(type_def).validate(value)
    if not result.valid:
        raise SchemaValidationError(result.errors)
    return value
