"""Input, output and error descriptors.

Each descriptor binds a type descriptor to an HTTP-facing role and knows
how to render itself as an OpenAPI fragment.
"""

import copy
import json
from http import HTTPStatus
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from endpoint_dsl.errors import CoercionError, DefinitionError
from endpoint_dsl.types.base import TypeDescriptor, ValidationResult, located

InputKind = Literal["query", "path", "header", "body"]

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def is_valid_status(code: Any) -> bool:
    return isinstance(code, int) and not isinstance(code, bool) and 100 <= code <= 599


def check_status_code(code: Any) -> int:
    """Return *code* if it is an HTTP status, else raise DefinitionError."""
    if not is_valid_status(code):
        raise DefinitionError(f"invalid status code: {code!r}; must be an integer between 100 and 599")
    return code


def status_phrase(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return f"HTTP {code}"


class Input(BaseModel):
    """A single endpoint input: query, path, header or body."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: InputKind
    name: str
    type: TypeDescriptor
    required: bool | None = None  # None means "infer from the type"
    description: str | None = None
    example: Any = None
    format: Literal["json", "form"] | None = None
    content_type: str | None = None

    @property
    def is_required(self) -> bool:
        """Path inputs are always required; otherwise an explicit flag wins."""
        if self.kind == "path":
            return True
        if self.required is not None:
            return self.required
        return not self.type.is_optional

    @property
    def media_type(self) -> str:
        if self.content_type:
            return self.content_type
        return FORM_CONTENT_TYPE if self.format == "form" else JSON_CONTENT_TYPE

    def validate(self, value: Any) -> ValidationResult:
        if value is None:
            errors = [located(self.name, "is required")] if self.is_required else []
            return ValidationResult.from_errors(errors)
        return self.type.validate(value, path=self.name)

    def coerce(self, value: Any) -> Any:
        if value is None:
            if self.is_required:
                raise CoercionError(value, str(self.type), "is required", path=self.name)
            return None
        try:
            return self.type.coerce(value)
        except CoercionError as exc:
            raise exc.at(self.name) from exc

    def to_openapi_parameter(self) -> dict[str, Any]:
        if self.kind == "body":
            raise DefinitionError("body inputs render as a requestBody, not a parameter")
        spec: dict[str, Any] = {
            "name": self.name,
            "in": self.kind,
            "required": self.is_required,
            "schema": self.type.to_json_schema(),
        }
        if self.description:
            spec["description"] = self.description
        if self.example is not None:
            spec["example"] = self.example
        return spec

    def to_openapi_request_body(self) -> dict[str, Any]:
        media: dict[str, Any] = {"schema": self.type.to_json_schema()}
        if self.example is not None:
            media["example"] = self.example
        spec: dict[str, Any] = {
            "required": self.is_required,
            "content": {self.media_type: media},
        }
        if self.description:
            spec["description"] = self.description
        return spec


class Output(BaseModel):
    """A response the endpoint may produce, keyed by status code."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int
    type: TypeDescriptor | None = None
    content_type: str = JSON_CONTENT_TYPE
    description: str | None = None
    example: Any = None
    headers: dict[str, Any] = {}

    @property
    def has_body(self) -> bool:
        return self.type is not None

    def default_description(self) -> str:
        return status_phrase(self.status_code)

    def validate(self, value: Any) -> ValidationResult:
        if self.type is None:
            return ValidationResult(valid=True)
        return self.type.validate(value)

    def serialize(self, value: Any) -> Any:
        """Render *value* for the wire according to the content type."""
        if self.type is None:
            return None
        if self.content_type == JSON_CONTENT_TYPE:
            return value if isinstance(value, str) else json.dumps(value, default=str)
        if self.content_type.startswith("text/"):
            return str(value)
        return value

    def to_openapi_response(self) -> dict[str, Any]:
        spec: dict[str, Any] = {"description": self.description or self.default_description()}
        if self.type is not None:
            media: dict[str, Any] = {"schema": self.type.to_json_schema()}
            if self.example is not None:
                media["example"] = self.example
            spec["content"] = {self.content_type: media}
        if self.headers:
            spec["headers"] = {name: _header_spec(header) for name, header in self.headers.items()}
        return spec


class ErrorResponse(Output):
    """A documented error status, optionally with a typed body."""

    def default_description(self) -> str:
        return ERROR_DESCRIPTIONS.get(self.status_code, status_phrase(self.status_code))


ERROR_DESCRIPTIONS = {
    400: "Bad Request - Invalid input parameters",
    401: "Unauthorized - Authentication required",
    403: "Forbidden - Insufficient permissions",
    404: "Not Found - Resource not found",
    409: "Conflict - Resource state conflict",
    422: "Unprocessable Entity - Validation failed",
    500: "Internal Server Error - Server encountered an error",
}


def _header_spec(header: Any) -> dict[str, Any]:
    if isinstance(header, TypeDescriptor):
        return {"schema": header.to_json_schema()}
    if isinstance(header, dict):
        return copy.deepcopy(header)
    return {"description": str(header), "schema": {"type": "string"}}
