"""The immutable endpoint value object produced by the builder."""

import re
from collections.abc import Callable, Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from endpoint_dsl.core.descriptors import ErrorResponse, Input, Output, is_valid_status
from endpoint_dsl.core.security import AUTH_TYPES, Security
from endpoint_dsl.errors import CoercionError, EndpointBuildError, RequestValidationError

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

_PLACEHOLDER = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)|\{([A-Za-z_][A-Za-z0-9_]*)\}")
_COLON_PLACEHOLDER = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


class ObservabilityConfig(BaseModel):
    """Per-endpoint hints for metrics, tracing and logging collaborators."""

    model_config = ConfigDict(frozen=True)

    metrics_enabled: bool = False
    metric_name: str | None = None
    metric_labels: dict[str, str] = {}
    tracing_enabled: bool = False
    span_name: str | None = None
    trace_attributes: dict[str, Any] = {}
    logging_enabled: bool = False
    log_config: dict[str, Any] = {}


class EndpointMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: str | None = None
    description: str | None = None
    tags: tuple[str, ...] = ()
    deprecated: bool = False
    scopes: tuple[str, ...] = ()
    optional_auth: bool = False
    operation_id: str | None = None
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


class Endpoint(BaseModel):
    """One HTTP operation: method, path, inputs, outputs, errors and security."""

    model_config = ConfigDict(frozen=True)

    method: HttpMethod
    path: str
    inputs: tuple[Input, ...] = ()
    outputs: tuple[Output, ...] = ()
    errors: tuple[ErrorResponse, ...] = ()
    security_schemes: tuple[Security, ...] = ()
    metadata: EndpointMetadata = Field(default_factory=EndpointMetadata)

    @property
    def path_parameters(self) -> list[str]:
        """Placeholder names in the path, in order (``:id`` and ``{id}`` styles)."""
        return [colon or brace for colon, brace in _PLACEHOLDER.findall(self.path)]

    @property
    def openapi_path(self) -> str:
        return _COLON_PLACEHOLDER.sub(r"{\1}", self.path)

    @property
    def operation_id(self) -> str:
        if self.metadata.operation_id:
            return self.metadata.operation_id
        # GET /users/{id} -> get_users_by_id
        tokens = []
        for segment in self.openapi_path.strip("/").split("/"):
            if not segment:
                continue
            if segment.startswith("{") and segment.endswith("}"):
                tokens.append(f"by_{segment[1:-1]}")
            else:
                tokens.append(re.sub(r"[^A-Za-z0-9_]", "_", segment))
        base = "_".join(tokens) if tokens else "root"
        return f"{self.method.lower()}_{base}"

    @property
    def body_input(self) -> Input | None:
        return next((i for i in self.inputs if i.kind == "body"), None)

    def inputs_of(self, kind: str) -> list[Input]:
        return [i for i in self.inputs if i.kind == kind]

    def response_for(self, status_code: int) -> Output | None:
        """Find the declared output or error for *status_code*."""
        for response in (*self.outputs, *self.errors):
            if response.status_code == status_code:
                return response
        return None

    def structure_problems(self) -> list[str]:
        """List every structural inconsistency in this definition."""
        problems = []

        if not self.path.startswith("/"):
            problems.append(f"path must start with '/': {self.path!r}")

        bodies = self.inputs_of("body")
        if len(bodies) > 1:
            problems.append(f"at most one body input is allowed, got {len(bodies)}")

        seen: set[tuple[str, str]] = set()
        for item in self.inputs:
            # header names are case-insensitive on the wire
            key = (item.kind, item.name.lower() if item.kind == "header" else item.name)
            if key in seen:
                problems.append(f"duplicate {item.kind} input '{item.name}'")
            seen.add(key)
            if not callable(getattr(item.type, "validate", None)):
                problems.append(f"input '{item.name}' type does not support validation")

        for response in (*self.outputs, *self.errors):
            if not is_valid_status(response.status_code):
                problems.append(f"invalid status code: {response.status_code!r}")
            if response.type is not None and not callable(getattr(response.type, "validate", None)):
                problems.append(f"response {response.status_code} type does not support validation")

        for scheme in self.security_schemes:
            if scheme.auth_type not in AUTH_TYPES:
                problems.append(f"unknown authentication type: {scheme.auth_type!r}")

        placeholders = self.path_parameters
        declared = [i.name for i in self.inputs_of("path")]
        for name in placeholders:
            if name not in declared:
                problems.append(f"path placeholder '{name}' has no path_param input")
        for name in declared:
            if name not in placeholders:
                problems.append(f"path_param '{name}' does not appear in path {self.path!r}")

        return problems

    def check_structure(self) -> None:
        """Raise EndpointBuildError if the definition is inconsistent."""
        problems = self.structure_problems()
        if problems:
            raise EndpointBuildError(f"{self.method} {self.path}", problems)

    def process_inputs(self, raw: Mapping[str, Any]) -> dict[str, Any]:
        """Coerce and validate raw input values keyed by input name.

        Every failing input is reported at once in a RequestValidationError.
        """
        values: dict[str, Any] = {}
        errors: list[str] = []
        for item in self.inputs:
            try:
                value = item.coerce(raw.get(item.name))
            except CoercionError as exc:
                errors.append(str(exc))
                continue
            result = item.validate(value)
            if not result.valid:
                errors.extend(result.errors)
                continue
            values[item.name] = value
        if errors:
            raise RequestValidationError(errors)
        return values

    def to_openapi_operation(
        self, scheme_name: Callable[[Security], str] | None = None
    ) -> dict[str, Any]:
        """Render this endpoint as an OpenAPI operation object."""
        name_for = scheme_name or (lambda scheme: scheme.base_name)
        meta = self.metadata

        operation: dict[str, Any] = {"operationId": self.operation_id}
        if meta.summary:
            operation["summary"] = meta.summary
        if meta.description:
            operation["description"] = meta.description
        if meta.tags:
            operation["tags"] = list(meta.tags)
        if meta.deprecated:
            operation["deprecated"] = True

        parameters = [i.to_openapi_parameter() for i in self.inputs if i.kind != "body"]
        if parameters:
            operation["parameters"] = parameters

        body = self.body_input
        if body is not None:
            operation["requestBody"] = body.to_openapi_request_body()

        responses: dict[str, Any] = {}
        for response in (*self.outputs, *self.errors):
            responses[str(response.status_code)] = response.to_openapi_response()
        operation["responses"] = responses or {"default": {"description": "Default response"}}

        if self.security_schemes:
            requirements = [
                {name_for(scheme): scheme.requirement_scopes(meta.scopes)}
                for scheme in self.security_schemes
            ]
            if meta.optional_auth:
                requirements.append({})
            operation["security"] = requirements

        return operation
