from endpoint_dsl.openapi.generator import OpenApiGenerator, derive_tag

__all__ = ["OpenApiGenerator", "derive_tag"]
