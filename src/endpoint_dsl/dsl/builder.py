"""Fluent, copy-on-write endpoint builder.

Every chained call returns a new builder; the receiver is never modified::

    endpoint = (
        get("/users/:id")
        .path_param("id", "integer")
        .ok({"id": "integer", "name": "string"})
        .not_found()
        .summary("Fetch a user")
        .build()
    )
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from endpoint_dsl.core.descriptors import (
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    ErrorResponse,
    Input,
    Output,
    check_status_code,
)
from endpoint_dsl.core.endpoint import (
    HTTP_METHODS,
    Endpoint,
    EndpointMetadata,
)
from endpoint_dsl.core.registry import EndpointRegistry, default_registry
from endpoint_dsl.core.security import (
    ApiKeyAuth,
    BasicAuth,
    BearerAuth,
    OAuth2Auth,
    Security,
)
from endpoint_dsl.errors import DefinitionError, EndpointBuildError
from endpoint_dsl.schema import resolve_type


def _check_name(name: Any, role: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise DefinitionError(f"{role} name must be a non-empty string, got {name!r}")
    return name


class EndpointBuilder(BaseModel):
    """Accumulates the pieces of one endpoint until ``build()`` is called."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: str
    path: str
    inputs: tuple[Input, ...] = ()
    outputs: tuple[Output, ...] = ()
    errors: tuple[ErrorResponse, ...] = ()
    security_schemes: tuple[Security, ...] = ()
    metadata: EndpointMetadata = Field(default_factory=EndpointMetadata)
    registry: EndpointRegistry | None = Field(default=None, exclude=True)

    def __init__(self, method: str, path: str, **data: Any):
        normalized = str(method).upper()
        if normalized not in HTTP_METHODS:
            raise DefinitionError(
                f"unsupported HTTP method: {method!r}; expected one of {', '.join(HTTP_METHODS)}"
            )
        if not isinstance(path, str) or not path:
            raise DefinitionError(f"path must be a non-empty string, got {path!r}")
        super().__init__(method=normalized, path=path, **data)

    def _with(self, **changes: Any) -> "EndpointBuilder":
        return self.model_copy(update=changes)

    def _with_meta(self, **changes: Any) -> "EndpointBuilder":
        return self._with(metadata=self.metadata.model_copy(update=changes))

    def _with_observability(self, **changes: Any) -> "EndpointBuilder":
        observability = self.metadata.observability.model_copy(update=changes)
        return self._with_meta(observability=observability)

    # Inputs

    def _add_input(self, kind: str, name: str, type_def: Any, **options: Any) -> "EndpointBuilder":
        try:
            item = Input(kind=kind, name=name, type=resolve_type(type_def), **options)
        except ValidationError as exc:
            raise DefinitionError(f"invalid {kind} input {name!r}: {exc}") from exc
        return self._with(inputs=(*self.inputs, item))

    def query(
        self,
        name: str,
        type_def: Any,
        *,
        required: bool | None = None,
        description: str | None = None,
        example: Any = None,
    ) -> "EndpointBuilder":
        _check_name(name, "query parameter")
        return self._add_input(
            "query", name, type_def, required=required, description=description, example=example
        )

    def path_param(
        self,
        name: str,
        type_def: Any,
        *,
        required: bool | None = None,
        description: str | None = None,
        example: Any = None,
    ) -> "EndpointBuilder":
        _check_name(name, "path parameter")
        if required is False:
            raise DefinitionError(f"path parameter {name!r} cannot be optional")
        return self._add_input(
            "path", name, type_def, required=True, description=description, example=example
        )

    def header(
        self,
        name: str,
        type_def: Any,
        *,
        required: bool | None = None,
        description: str | None = None,
        example: Any = None,
    ) -> "EndpointBuilder":
        _check_name(name, "header")
        return self._add_input(
            "header", name, type_def, required=required, description=description, example=example
        )

    def body(
        self,
        type_def: Any,
        *,
        content_type: str = JSON_CONTENT_TYPE,
        required: bool | None = None,
        description: str | None = None,
        example: Any = None,
        name: str = "body",
    ) -> "EndpointBuilder":
        """Declare a request body; an endpoint takes at most one."""
        _check_name(name, "body")
        body_format = "form" if content_type == FORM_CONTENT_TYPE else "json"
        return self._add_input(
            "body",
            name,
            type_def,
            required=required,
            description=description,
            example=example,
            format=body_format,
            content_type=content_type,
        )

    def json_body(self, type_def: Any, **options: Any) -> "EndpointBuilder":
        return self.body(type_def, content_type=JSON_CONTENT_TYPE, **options)

    def form_body(self, type_def: Any, **options: Any) -> "EndpointBuilder":
        return self.body(type_def, content_type=FORM_CONTENT_TYPE, **options)

    # Outputs

    def _add_output(
        self,
        status_code: int,
        type_def: Any = None,
        *,
        content_type: str = JSON_CONTENT_TYPE,
        description: str | None = None,
        example: Any = None,
        headers: dict[str, Any] | None = None,
    ) -> "EndpointBuilder":
        output = Output(
            status_code=check_status_code(status_code),
            type=None if type_def is None else resolve_type(type_def),
            content_type=content_type,
            description=description,
            example=example,
            headers=headers or {},
        )
        return self._with(outputs=(*self.outputs, output))

    def json_response(self, status_code: int, type_def: Any, **options: Any) -> "EndpointBuilder":
        return self._add_output(status_code, type_def, content_type=JSON_CONTENT_TYPE, **options)

    def text_response(
        self, status_code: int, type_def: Any = "string", **options: Any
    ) -> "EndpointBuilder":
        return self._add_output(status_code, type_def, content_type="text/plain", **options)

    def status_response(self, status_code: int, **options: Any) -> "EndpointBuilder":
        return self._add_output(status_code, None, **options)

    def ok(self, type_def: Any = None, **options: Any) -> "EndpointBuilder":
        return self._add_output(200, type_def, **options)

    def created(self, type_def: Any = None, **options: Any) -> "EndpointBuilder":
        return self._add_output(201, type_def, **options)

    def accepted(self, type_def: Any = None, **options: Any) -> "EndpointBuilder":
        return self._add_output(202, type_def, **options)

    def no_content(self, **options: Any) -> "EndpointBuilder":
        return self._add_output(204, None, **options)

    # Errors

    def error_response(
        self,
        status_code: int,
        type_def: Any = None,
        *,
        content_type: str = JSON_CONTENT_TYPE,
        description: str | None = None,
        example: Any = None,
    ) -> "EndpointBuilder":
        error = ErrorResponse(
            status_code=check_status_code(status_code),
            type=None if type_def is None else resolve_type(type_def),
            content_type=content_type,
            description=description,
            example=example,
        )
        return self._with(errors=(*self.errors, error))

    def bad_request(self, type_def: Any = None, **options: Any) -> "EndpointBuilder":
        return self.error_response(400, type_def, **options)

    def unauthorized(self, type_def: Any = None, **options: Any) -> "EndpointBuilder":
        return self.error_response(401, type_def, **options)

    def forbidden(self, type_def: Any = None, **options: Any) -> "EndpointBuilder":
        return self.error_response(403, type_def, **options)

    def not_found(self, type_def: Any = None, **options: Any) -> "EndpointBuilder":
        return self.error_response(404, type_def, **options)

    def conflict(self, type_def: Any = None, **options: Any) -> "EndpointBuilder":
        return self.error_response(409, type_def, **options)

    def unprocessable_entity(self, type_def: Any = None, **options: Any) -> "EndpointBuilder":
        return self.error_response(422, type_def, **options)

    def internal_server_error(self, type_def: Any = None, **options: Any) -> "EndpointBuilder":
        return self.error_response(500, type_def, **options)

    # Security

    def security(self, scheme: Security) -> "EndpointBuilder":
        if not isinstance(scheme, Security):
            raise DefinitionError(f"expected a Security scheme, got {type(scheme).__name__}")
        return self._with(security_schemes=(*self.security_schemes, scheme))

    def bearer_auth(
        self, description: str | None = None, bearer_format: str | None = None
    ) -> "EndpointBuilder":
        return self.security(BearerAuth(description=description, bearer_format=bearer_format))

    def api_key_auth(
        self, name: str = "X-API-Key", location: str = "header", description: str | None = None
    ) -> "EndpointBuilder":
        _check_name(name, "API key")
        try:
            scheme = ApiKeyAuth(name=name, location=location, description=description)
        except ValidationError as exc:
            raise DefinitionError(f"invalid API key location: {location!r}") from exc
        return self.security(scheme)

    def basic_auth(self, description: str | None = None) -> "EndpointBuilder":
        return self.security(BasicAuth(description=description))

    def oauth2_auth(
        self, scopes: tuple[str, ...] | list[str] = (), **options: Any
    ) -> "EndpointBuilder":
        try:
            scheme = OAuth2Auth(scopes=tuple(scopes), **options)
        except ValidationError as exc:
            raise DefinitionError(f"invalid oauth2 options: {exc}") from exc
        return self.security(scheme)

    def requires_scope(self, *scopes: str) -> "EndpointBuilder":
        merged = tuple(dict.fromkeys([*self.metadata.scopes, *scopes]))
        return self._with_meta(scopes=merged)

    def optional_auth(self) -> "EndpointBuilder":
        """Document that unauthenticated requests are also accepted."""
        return self._with_meta(optional_auth=True)

    # Metadata

    def summary(self, text: str) -> "EndpointBuilder":
        return self._with_meta(summary=text)

    def description(self, text: str) -> "EndpointBuilder":
        return self._with_meta(description=text)

    def tags(self, *tags: str) -> "EndpointBuilder":
        return self._with_meta(tags=tuple(dict.fromkeys([*self.metadata.tags, *tags])))

    def deprecated(self, flag: bool = True) -> "EndpointBuilder":
        return self._with_meta(deprecated=flag)

    def operation_id(self, value: str) -> "EndpointBuilder":
        return self._with_meta(operation_id=_check_name(value, "operation id"))

    def with_metrics(
        self, name: str | None = None, labels: dict[str, str] | None = None
    ) -> "EndpointBuilder":
        metric = name or f"{self.method.lower()}_{self.path.strip('/').replace('/', '_')}"
        return self._with_observability(
            metrics_enabled=True, metric_name=metric, metric_labels=dict(labels or {})
        )

    def with_tracing(
        self, span_name: str | None = None, attributes: dict[str, Any] | None = None
    ) -> "EndpointBuilder":
        return self._with_observability(
            tracing_enabled=True,
            span_name=span_name or f"HTTP {self.method} {self.path}",
            trace_attributes=dict(attributes or {}),
        )

    def with_logging(self, **log_config: Any) -> "EndpointBuilder":
        return self._with_observability(logging_enabled=True, log_config=log_config)

    def build(self) -> Endpoint:
        """Freeze the definition, check it and add it to the registry."""
        try:
            endpoint = Endpoint(
                method=self.method,
                path=self.path,
                inputs=self.inputs,
                outputs=self.outputs,
                errors=self.errors,
                security_schemes=self.security_schemes,
                metadata=self.metadata,
            )
        except ValidationError as exc:
            raise EndpointBuildError(f"{self.method} {self.path}", [str(exc)]) from exc

        endpoint.check_structure()
        registry = self.registry if self.registry is not None else default_registry
        return registry.register(endpoint)

