"""Assemble an OpenAPI 3.0 document from built endpoints."""

import copy
import json
import logging
from collections.abc import Iterable
from typing import Any

import yaml

from endpoint_dsl.config import DocumentConfig
from endpoint_dsl.core.endpoint import Endpoint
from endpoint_dsl.core.security import Security

logger = logging.getLogger(__name__)

SCHEMA_REF_PREFIX = "#/components/schemas/"


def derive_tag(path: str) -> str | None:
    """First static path segment, capitalized: ``/users/:id`` -> ``Users``."""
    for segment in path.strip("/").split("/"):
        if not segment or segment.startswith((":", "{")):
            continue
        return segment.replace("-", " ").replace("_", " ").title().replace(" ", "")
    return None


class OpenApiGenerator:
    """Builds one OpenAPI document from a collection of endpoints.

    Endpoints sharing a path are merged under one path item. Security
    schemes are de-duplicated by their rendered form; titled object
    schemas are moved to ``components.schemas`` and referenced.
    """

    def __init__(
        self,
        endpoints: Iterable[Endpoint],
        config: DocumentConfig | None = None,
        path_prefix: str | None = None,
    ):
        self.endpoints = list(endpoints)
        self.config = config or DocumentConfig()
        self.path_prefix = path_prefix if path_prefix is not None else self.config.path_prefix

    def selected_endpoints(self) -> list[Endpoint]:
        if not self.path_prefix:
            return list(self.endpoints)
        return [e for e in self.endpoints if e.path.startswith(self.path_prefix)]

    def generate(self) -> dict[str, Any]:
        schemes: dict[str, dict[str, Any]] = {}
        scheme_names: dict[str, str] = {}
        components_schemas: dict[str, dict[str, Any]] = {}

        def scheme_name(scheme: Security) -> str:
            rendered = scheme.to_openapi_scheme()
            key = json.dumps(rendered, sort_keys=True, default=str)
            if key in scheme_names:
                return scheme_names[key]
            name = scheme.base_name
            suffix = 2
            while name in schemes:
                name = f"{scheme.base_name}{suffix}"
                suffix += 1
            schemes[name] = rendered
            scheme_names[key] = name
            return name

        paths: dict[str, dict[str, Any]] = {}
        selected = self.selected_endpoints()
        for endpoint in selected:
            operation = endpoint.to_openapi_operation(scheme_name=scheme_name)
            if "tags" not in operation:
                tag = derive_tag(endpoint.path)
                if tag:
                    operation["tags"] = [tag]
            _hoist_operation_schemas(operation, components_schemas)

            path_item = paths.setdefault(endpoint.openapi_path, {})
            method = endpoint.method.lower()
            if method in path_item:
                logger.warning(
                    f"Duplicate operation {endpoint.method} {endpoint.openapi_path}; "
                    "the later definition replaces the earlier one",
                    extra={"endpoint": f"{endpoint.method} {endpoint.openapi_path}"},
                )
            path_item[method] = operation

        document: dict[str, Any] = {
            "openapi": self.config.openapi_version,
            "info": self.config.info(),
            "servers": [server.to_openapi() for server in self.config.servers],
            "paths": paths,
        }
        components: dict[str, Any] = {}
        if components_schemas:
            components["schemas"] = components_schemas
        if schemes:
            components["securitySchemes"] = schemes
        if components:
            document["components"] = components

        logger.debug(
            f"Generated OpenAPI document with {len(paths)} paths from {len(selected)} endpoints"
        )
        return document

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.generate(), indent=indent, default=str)

    def to_yaml(self) -> str:
        # Round-trip through JSON so tuples and dates render as plain YAML.
        document = json.loads(self.to_json())
        return yaml.safe_dump(document, default_flow_style=False, sort_keys=False, allow_unicode=True)


def _hoist_operation_schemas(node: Any, components: dict[str, dict[str, Any]]) -> None:
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "schema" and isinstance(value, dict):
                node[key] = _hoist_schema(value, components)
            elif key != "example":
                _hoist_operation_schemas(value, components)
    elif isinstance(node, list):
        for item in node:
            _hoist_operation_schemas(item, components)


def _hoist_schema(schema: dict[str, Any], components: dict[str, dict[str, Any]]) -> dict[str, Any]:
    schema = copy.copy(schema)
    if "properties" in schema:
        schema["properties"] = {
            name: _hoist_schema(prop, components) for name, prop in schema["properties"].items()
        }
    if isinstance(schema.get("items"), dict):
        schema["items"] = _hoist_schema(schema["items"], components)

    title = schema.get("title")
    if schema.get("type") != "object" or not title:
        return schema

    name = title
    suffix = 2
    while name in components and components[name] != schema:
        name = f"{title}{suffix}"
        suffix += 1
    if name != title:
        logger.warning(
            f"Schema title {title!r} reused for a different shape; registered as {name!r}",
            extra={"schema": name},
        )
    components[name] = schema
    return {"$ref": f"{SCHEMA_REF_PREFIX}{name}"}
