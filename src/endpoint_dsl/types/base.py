"""Base type descriptor and validation result models.

Every type descriptor is a frozen pydantic model. Validation never raises:
it returns a ValidationResult whose errors are prefixed with the path of the
offending value (field name or array index). Coercion raises CoercionError.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict

from endpoint_dsl.errors import CoercionError, DefinitionError

METADATA_KEYS = ("description", "example", "title")


def located(path: str, message: str) -> str:
    """Prefix *message* with *path* when there is one."""
    return f"{path}: {message}" if path else message


def child_path(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def item_path(path: str, index: int) -> str:
    return f"{path}[{index}]" if path else f"item[{index}]"


class ValidationResult(BaseModel):
    """Outcome of validating one value against a type."""

    valid: bool
    errors: list[str] = []

    @classmethod
    def from_errors(cls, errors: list[str]) -> "ValidationResult":
        return cls(valid=not errors, errors=errors)


class TypeDescriptor(BaseModel):
    """Validation, coercion and JSON Schema rules for one value domain."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type_name: ClassVar[str] = "Any"
    json_type: ClassVar[str] = "object"

    description: str | None = None
    example: Any = None
    title: str | None = None

    @property
    def is_optional(self) -> bool:
        return False

    def validate(self, value: Any, path: str = "") -> ValidationResult:
        """Check *value* against this type without raising."""
        return ValidationResult.from_errors(self.collect_errors(value, path))

    def collect_errors(self, value: Any, path: str = "") -> list[str]:
        """Return every located error for *value*; empty when valid."""
        if value is None:
            return [located(path, "is required")]

        problem = self._type_error(value)
        if problem:
            return [located(path, problem)]

        errors = [located(path, message) for message in self._constraint_errors(value)]
        errors.extend(self._nested_errors(value, path))
        return errors

    def coerce(self, value: Any) -> Any:
        """Convert *value* into this type's native representation."""
        if value is None:
            raise CoercionError(value, str(self), "required value cannot be None")
        return self._coerce_value(value)

    def to_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.json_type}
        self._apply_schema(schema)
        if self.title:
            schema["title"] = self.title
        if self.description:
            schema["description"] = self.description
        if self.example is not None:
            schema["example"] = self.example
        return schema

    def with_metadata(self, **meta: Any) -> "TypeDescriptor":
        """Return a copy carrying documentation metadata."""
        unknown = sorted(set(meta) - set(METADATA_KEYS))
        if unknown:
            raise DefinitionError(f"unknown type metadata: {', '.join(unknown)}")
        return self.model_copy(update=meta)

    def describe(self, text: str) -> "TypeDescriptor":
        return self.with_metadata(description=text)

    def with_example(self, value: Any) -> "TypeDescriptor":
        return self.with_metadata(example=value)

    def named(self, title: str) -> "TypeDescriptor":
        """Give this type a schema name so documents can reference it."""
        return self.with_metadata(title=title)

    def __str__(self) -> str:
        constraints = [
            f"{name}={getattr(self, name)!r}"
            for name in self.constraint_names()
            if getattr(self, name) is not None and getattr(self, name) is not False
        ]
        return f"{self.type_name}({', '.join(constraints)})" if constraints else self.type_name

    @classmethod
    def constraint_names(cls) -> list[str]:
        return [name for name in cls.model_fields if name not in METADATA_KEYS]

    # Hooks for subclasses.

    def _type_error(self, value: Any) -> str | None:
        return None

    def _constraint_errors(self, value: Any) -> list[str]:
        return []

    def _nested_errors(self, value: Any, path: str) -> list[str]:
        return []

    def _coerce_value(self, value: Any) -> Any:
        return value

    def _apply_schema(self, schema: dict[str, Any]) -> None:
        pass
