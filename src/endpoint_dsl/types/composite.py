"""Composite and modifier type descriptors: Array, Hash, Object and Optional."""

import json
from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict

from endpoint_dsl.errors import CoercionError
from endpoint_dsl.types.base import (
    TypeDescriptor,
    child_path,
    item_path,
    located,
)


def _load_json(value: str, target: str, expected: type) -> Any:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as exc:
        raise CoercionError(value, target, f"invalid JSON: {exc.msg}") from exc
    if not isinstance(parsed, expected):
        raise CoercionError(value, target, f"JSON string did not parse to {expected.__name__}")
    return parsed


class Optional(TypeDescriptor):
    """Wraps another type so that ``None`` and absent values are accepted."""

    type_name: ClassVar[str] = "Optional"

    inner: TypeDescriptor

    def __init__(self, inner: TypeDescriptor, **data: Any):
        super().__init__(inner=inner, **data)

    @property
    def is_optional(self) -> bool:
        return True

    def collect_errors(self, value: Any, path: str = "") -> list[str]:
        if value is None:
            return []
        return self.inner.collect_errors(value, path)

    def coerce(self, value: Any) -> Any:
        if value is None:
            return None
        return self.inner.coerce(value)

    def to_json_schema(self) -> dict[str, Any]:
        # Optionality is expressed by the parent's "required" list.
        return self.inner.to_json_schema()

    def with_metadata(self, **meta: Any) -> "Optional":
        return Optional(self.inner.with_metadata(**meta))

    def __str__(self) -> str:
        return f"Optional[{self.inner}]"


class Array(TypeDescriptor):
    """Homogeneous list whose elements all conform to ``item_type``."""

    type_name: ClassVar[str] = "Array"
    json_type: ClassVar[str] = "array"

    item_type: TypeDescriptor
    min_items: int | None = None
    max_items: int | None = None
    unique_items: bool = False

    def __init__(self, item_type: TypeDescriptor, **data: Any):
        super().__init__(item_type=item_type, **data)

    def _type_error(self, value: Any) -> str | None:
        if not isinstance(value, (list, tuple)):
            return f"expected array, got {type(value).__name__}"
        return None

    def _constraint_errors(self, value: Any) -> list[str]:
        errors = []
        if self.min_items is not None and len(value) < self.min_items:
            errors.append(f"must contain at least {self.min_items} items")
        if self.max_items is not None and len(value) > self.max_items:
            errors.append(f"must contain at most {self.max_items} items")
        if self.unique_items and any(item in value[:index] for index, item in enumerate(value)):
            errors.append("items must be unique")
        return errors

    def _nested_errors(self, value: Any, path: str) -> list[str]:
        errors = []
        for index, item in enumerate(value):
            errors.extend(self.item_type.collect_errors(item, item_path(path, index)))
        return errors

    def _coerce_value(self, value: Any) -> Any:
        if isinstance(value, str):
            value = _load_json(value, "Array", list)
        elif not isinstance(value, (list, tuple)):
            # a lone query-string value becomes a one-element list
            value = [value]

        coerced = []
        for index, item in enumerate(value):
            try:
                coerced.append(self.item_type.coerce(item))
            except CoercionError as exc:
                raise exc.at(f"[{index}]") from exc
        return coerced

    def _apply_schema(self, schema: dict[str, Any]) -> None:
        schema["items"] = self.item_type.to_json_schema()
        if self.min_items is not None:
            schema["minItems"] = self.min_items
        if self.max_items is not None:
            schema["maxItems"] = self.max_items
        if self.unique_items:
            schema["uniqueItems"] = True

    def __str__(self) -> str:
        return f"Array[{self.item_type}]"


class _FieldMapping(TypeDescriptor):
    """Shared validation for mapping types with named fields."""

    json_type: ClassVar[str] = "object"
    keeps_unknown_keys: ClassVar[bool] = True

    def field_items(self) -> list[tuple[str, TypeDescriptor]]:
        raise NotImplementedError

    def _keeps_unknown_keys(self) -> bool:
        return self.keeps_unknown_keys

    def _type_error(self, value: Any) -> str | None:
        if not isinstance(value, Mapping):
            return f"expected object, got {type(value).__name__}"
        return None

    def _nested_errors(self, value: Any, path: str) -> list[str]:
        errors = []
        for name, field_type in self.field_items():
            if name not in value:
                if not field_type.is_optional:
                    errors.append(located(child_path(path, name), "is required"))
                continue
            errors.extend(field_type.collect_errors(value[name], child_path(path, name)))
        return errors

    def _coerce_value(self, value: Any) -> Any:
        if isinstance(value, str):
            value = _load_json(value, self.type_name, dict)
        elif not isinstance(value, Mapping):
            raise CoercionError(value, self.type_name, f"cannot convert {type(value).__name__} to object")

        coerced: dict[str, Any] = {}
        for name, field_type in self.field_items():
            if name not in value:
                if field_type.is_optional:
                    continue
                raise CoercionError(None, str(field_type), "is required", path=name)
            try:
                coerced[name] = field_type.coerce(value[name])
            except CoercionError as exc:
                raise exc.at(name) from exc

        if self._keeps_unknown_keys():
            known = {name for name, _ in self.field_items()}
            coerced.update({key: item for key, item in value.items() if key not in known})
        return coerced

    def _apply_schema(self, schema: dict[str, Any]) -> None:
        items = self.field_items()
        if not items:
            return
        schema["properties"] = {name: field_type.to_json_schema() for name, field_type in items}
        required = [name for name, field_type in items if not field_type.is_optional]
        if required:
            schema["required"] = required


class Hash(_FieldMapping):
    """Mapping with a fixed set of typed keys.

    Every declared key must be present unless its type is Optional. Unknown
    keys are tolerated and kept on coercion; with
    ``additional_properties=False`` they fail validation and are dropped.
    """

    type_name: ClassVar[str] = "Hash"

    field_types: dict[str, TypeDescriptor] = {}
    additional_properties: bool = True

    def __init__(self, field_types: dict[str, TypeDescriptor] | None = None, **data: Any):
        super().__init__(field_types=field_types or {}, **data)

    def field_items(self) -> list[tuple[str, TypeDescriptor]]:
        return list(self.field_types.items())

    def _keeps_unknown_keys(self) -> bool:
        return self.additional_properties

    def _constraint_errors(self, value: Any) -> list[str]:
        if self.additional_properties:
            return []
        unexpected = [str(key) for key in value if key not in self.field_types]
        if unexpected:
            return [f"unexpected fields: {', '.join(unexpected)}"]
        return []

    def _apply_schema(self, schema: dict[str, Any]) -> None:
        super()._apply_schema(schema)
        if not self.additional_properties:
            schema["additionalProperties"] = False

    def __str__(self) -> str:
        if not self.field_types:
            return "Hash"
        fields = ", ".join(f"{name}: {field_type}" for name, field_type in self.field_types.items())
        return f"Hash{{{fields}}}"


class ObjectField(BaseModel):
    """One named, ordered field of an Object type."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: TypeDescriptor

    @property
    def required(self) -> bool:
        return not self.type.is_optional


class Object(_FieldMapping):
    """Ordered field list with a per-field required flag.

    Objects are built up with ``field``/``required_field``/``optional_field``,
    each of which returns a new Object. Coercion drops undeclared keys.
    """

    type_name: ClassVar[str] = "Object"
    keeps_unknown_keys: ClassVar[bool] = False

    fields: tuple[ObjectField, ...] = ()

    def field_items(self) -> list[tuple[str, TypeDescriptor]]:
        return [(f.name, f.type) for f in self.fields]

    def field(
        self,
        name: str,
        type_def: Any,
        required: bool = True,
        description: str | None = None,
        example: Any = None,
    ) -> "Object":
        """Return a copy of this Object with *name* added or replaced."""
        from endpoint_dsl.schema import resolve_type

        field_type = resolve_type(type_def)
        if description is not None or example is not None:
            meta = {"description": description, "example": example}
            field_type = field_type.with_metadata(**{k: v for k, v in meta.items() if v is not None})
        if not required and not field_type.is_optional:
            field_type = Optional(field_type)

        new_field = ObjectField(name=str(name), type=field_type)
        fields = list(self.fields)
        for index, existing in enumerate(fields):
            if existing.name == new_field.name:
                fields[index] = new_field
                break
        else:
            fields.append(new_field)
        return self.model_copy(update={"fields": tuple(fields)})

    def required_field(self, name: str, type_def: Any, **options: Any) -> "Object":
        return self.field(name, type_def, required=True, **options)

    def optional_field(self, name: str, type_def: Any, **options: Any) -> "Object":
        return self.field(name, type_def, required=False, **options)

    def get_field(self, name: str) -> ObjectField | None:
        return next((f for f in self.fields if f.name == name), None)

    def __str__(self) -> str:
        if not self.fields:
            return "Object"
        fields = ", ".join(f"{f.name}: {f.type}" for f in self.fields)
        return f"Object{{{fields}}}"
