"""Derive Hash types from sample data, plain objects or JSON Schema documents.

All derivations accept ``only`` / ``except_`` field filters.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from endpoint_dsl.errors import DefinitionError
from endpoint_dsl.types.base import TypeDescriptor
from endpoint_dsl.types.composite import Array, Hash, Optional
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

JSON_SCHEMA_STRING_FORMATS = {
    "email": Email,
    "uuid": UUID,
    "date": Date,
    "date-time": DateTime,
}


def _keep(name: str, only: Iterable[str] | None, except_: Iterable[str] | None) -> bool:
    if only is not None and name not in {str(n) for n in only}:
        return False
    if except_ is not None and name in {str(n) for n in except_}:
        return False
    return True


def infer_type(value: Any) -> TypeDescriptor:
    """Guess a type descriptor from one sample value.

    Unknown values, including None, become String.
    """
    if isinstance(value, bool):
        return Boolean()
    if isinstance(value, int):
        return Integer()
    if isinstance(value, float):
        return Float()
    if isinstance(value, datetime):
        return DateTime()
    if isinstance(value, date):
        return Date()
    if isinstance(value, (list, tuple)):
        return Array(infer_type(value[0]) if value else String())
    if isinstance(value, Mapping):
        return Hash()
    return String()


def from_sample(
    sample: Mapping[str, Any],
    only: Iterable[str] | None = None,
    except_: Iterable[str] | None = None,
) -> Hash:
    """Build a Hash whose field types are inferred from *sample*'s values."""
    if not isinstance(sample, Mapping):
        raise DefinitionError(f"expected a mapping, got {type(sample).__name__}")
    fields = {
        str(name): infer_type(value)
        for name, value in sample.items()
        if _keep(str(name), only, except_)
    }
    return Hash(fields)


def from_object(
    obj: Any,
    only: Iterable[str] | None = None,
    except_: Iterable[str] | None = None,
) -> Hash:
    """Build a Hash from the public attributes of a plain object.

    Works with ``types.SimpleNamespace``, dataclass instances and anything
    else that keeps its attributes in ``__dict__``.
    """
    attributes = getattr(obj, "__dict__", None)
    if attributes is None:
        raise DefinitionError(f"cannot read attributes of {type(obj).__name__}")
    public = {name: value for name, value in attributes.items() if not name.startswith("_")}
    return from_sample(public, only=only, except_=except_)


def _from_property(schema: Mapping[str, Any], required: bool = True) -> TypeDescriptor:
    kind = schema.get("type")
    if kind == "string":
        result: TypeDescriptor = JSON_SCHEMA_STRING_FORMATS.get(schema.get("format"), String)()
    elif kind == "integer":
        result = Integer()
    elif kind == "number":
        result = Float()
    elif kind == "boolean":
        result = Boolean()
    elif kind == "array":
        items = schema.get("items")
        result = Array(_from_property(items) if isinstance(items, Mapping) else String())
    elif kind == "object":
        result = from_json_schema(schema) if schema.get("properties") else Hash()
    else:
        result = String()

    if schema.get("description"):
        result = result.describe(schema["description"])
    return result if required else Optional(result)


def from_json_schema(
    document: Mapping[str, Any],
    only: Iterable[str] | None = None,
    except_: Iterable[str] | None = None,
) -> Hash:
    """Build a Hash from a JSON Schema ``object`` document.

    Properties missing from ``required`` become Optional; nested objects
    with properties are derived recursively.
    """
    if not isinstance(document, Mapping) or document.get("type") != "object":
        raise DefinitionError("JSON Schema must be an object type")

    required = set(document.get("required") or ())
    fields = {}
    for name, schema in (document.get("properties") or {}).items():
        if not _keep(name, only, except_):
            continue
        if not isinstance(schema, Mapping):
            raise DefinitionError(f"property {name!r} must be a schema object")
        fields[name] = _from_property(schema, required=name in required)

    extra = document.get("additionalProperties", True)
    return Hash(fields, additional_properties=extra is not False)
