from endpoint_dsl.dsl.builder import EndpointBuilder
from endpoint_dsl.dsl.verbs import (
    DELETE,
    GET,
    HEAD,
    OPTIONS,
    PATCH,
    POST,
    PUT,
    delete,
    endpoint,
    get,
    head,
    options,
    patch,
    post,
    put,
)

__all__ = [
    "EndpointBuilder",
    "endpoint",
    "get",
    "post",
    "put",
    "patch",
    "delete",
    "head",
    "options",
    "GET",
    "POST",
    "PUT",
    "PATCH",
    "DELETE",
    "HEAD",
    "OPTIONS",
]
