"""Exception hierarchy for endpoint definitions.

Definition errors surface while chaining DSL calls, build errors when an
endpoint is materialized, coercion and validation errors when raw request
values meet a type.
"""

from typing import Any


class EndpointDslError(Exception):
    """Base class for every error raised by endpoint_dsl."""


class DefinitionError(EndpointDslError, ValueError):
    """A type definition or DSL argument is malformed."""


class EndpointBuildError(EndpointDslError):
    """An endpoint definition is structurally inconsistent."""

    def __init__(self, subject: str, problems: list[str]):
        self.subject = subject
        self.problems = list(problems)
        details = "; ".join(self.problems)
        super().__init__(f"invalid endpoint {subject}: {details}")


class CoercionError(EndpointDslError, ValueError):
    """A raw value cannot be converted into the target type."""

    def __init__(self, value: Any, target: str, reason: str | None = None, path: str = ""):
        self.value = value
        self.target = target
        self.reason = reason
        self.path = path
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        base = f"Cannot coerce {self.value!r} to {self.target}"
        if self.path:
            base = f"{self.path}: {base}"
        return f"{base}: {self.reason}" if self.reason else base

    def at(self, segment: str) -> "CoercionError":
        """Return a copy of this error located one level deeper under *segment*."""
        if not self.path:
            path = segment
        elif self.path.startswith("["):
            path = f"{segment}{self.path}"
        else:
            path = f"{segment}.{self.path}"
        return CoercionError(self.value, self.target, self.reason, path=path)


class SchemaValidationError(EndpointDslError, ValueError):
    """A value failed validation and the caller asked for an exception."""

    def __init__(self, errors: list[str], header: str = "Schema validation failed"):
        self.errors = list(errors)
        lines = "\n".join(f"  - {error}" for error in self.errors)
        super().__init__(f"{header}:\n{lines}" if lines else header)


class RequestValidationError(SchemaValidationError):
    """One or more endpoint inputs failed validation or coercion."""

    def __init__(self, errors: list[str]):
        super().__init__(errors, header="Request validation failed")


class ConfigError(EndpointDslError):
    """A document configuration file is missing or malformed."""
