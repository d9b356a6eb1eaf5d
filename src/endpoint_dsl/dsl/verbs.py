"""HTTP verb entry points for the endpoint builder."""

from endpoint_dsl.core.registry import EndpointRegistry
from endpoint_dsl.dsl.builder import EndpointBuilder


def endpoint(method: str, path: str, registry: EndpointRegistry | None = None) -> EndpointBuilder:
    """Start a builder; ``build()`` registers into *registry* or the default one."""
    return EndpointBuilder(method, path, registry=registry)


def get(path: str, registry: EndpointRegistry | None = None) -> EndpointBuilder:
    return endpoint("GET", path, registry)


def post(path: str, registry: EndpointRegistry | None = None) -> EndpointBuilder:
    return endpoint("POST", path, registry)


def put(path: str, registry: EndpointRegistry | None = None) -> EndpointBuilder:
    return endpoint("PUT", path, registry)


def patch(path: str, registry: EndpointRegistry | None = None) -> EndpointBuilder:
    return endpoint("PATCH", path, registry)


def delete(path: str, registry: EndpointRegistry | None = None) -> EndpointBuilder:
    return endpoint("DELETE", path, registry)


def head(path: str, registry: EndpointRegistry | None = None) -> EndpointBuilder:
    return endpoint("HEAD", path, registry)


def options(path: str, registry: EndpointRegistry | None = None) -> EndpointBuilder:
    return endpoint("OPTIONS", path, registry)


GET = get
POST = post
PUT = put
PATCH = patch
DELETE = delete
HEAD = head
OPTIONS = options
