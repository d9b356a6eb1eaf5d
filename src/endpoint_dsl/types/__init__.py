"""Type descriptors for validation, coercion and JSON Schema generation."""

from typing import Any

from endpoint_dsl.types.auto_derivation import from_json_schema, from_object, from_sample
from endpoint_dsl.types.base import TypeDescriptor, ValidationResult
from endpoint_dsl.types.composite import Array, Hash, Object, ObjectField, Optional
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

__all__ = [
    "TypeDescriptor",
    "ValidationResult",
    "String",
    "Integer",
    "Float",
    "Boolean",
    "Date",
    "DateTime",
    "UUID",
    "Email",
    "Array",
    "Hash",
    "Object",
    "ObjectField",
    "Optional",
    "string",
    "integer",
    "float_",
    "boolean",
    "date",
    "datetime",
    "uuid",
    "email",
    "array",
    "hash_of",
    "object_of",
    "optional",
    "from_sample",
    "from_object",
    "from_json_schema",
]


def string(**constraints: Any) -> String:
    return String(**constraints)


def integer(**constraints: Any) -> Integer:
    return Integer(**constraints)


def float_(**constraints: Any) -> Float:
    return Float(**constraints)


def boolean(**meta: Any) -> Boolean:
    return Boolean(**meta)


def date(**constraints: Any) -> Date:
    return Date(**constraints)


def datetime(**constraints: Any) -> DateTime:
    return DateTime(**constraints)


def uuid(**meta: Any) -> UUID:
    return UUID(**meta)


def email(**meta: Any) -> Email:
    return Email(**meta)


def array(item_type: Any, **constraints: Any) -> Array:
    """Build an Array; *item_type* may be any definition ``resolve_type`` accepts."""
    from endpoint_dsl.schema import resolve_type

    return Array(resolve_type(item_type), **constraints)


def hash_of(field_types: dict[str, Any] | None = None, **meta: Any) -> Hash:
    """Build a Hash; field definitions may use the schema shorthand."""
    from endpoint_dsl.schema import resolve_type

    resolved = {name: resolve_type(definition) for name, definition in (field_types or {}).items()}
    return Hash(resolved, **meta)


def object_of(fields: dict[str, Any] | None = None, **meta: Any) -> Object:
    """Build an Object whose fields are required unless they resolve to Optional."""
    result = Object(**meta)
    for name, definition in (fields or {}).items():
        result = result.field(name, definition)
    return result


def optional(inner: Any) -> Optional:
    from endpoint_dsl.schema import resolve_type

    return Optional(resolve_type(inner))
