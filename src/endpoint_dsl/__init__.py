"""Declarative HTTP endpoint definitions with typed validation and OpenAPI export."""

__version__ = "0.1.0"
