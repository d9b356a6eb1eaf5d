"""
Document-level settings for generated OpenAPI documents.

All models use extra="ignore" so unrelated keys in a shared YAML file do
not break loading.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from endpoint_dsl.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://localhost:4567"


class ServerConfig(BaseModel):
    """One entry of the document's ``servers`` list."""

    model_config = ConfigDict(extra="ignore")

    url: str = Field(default=DEFAULT_SERVER_URL, description="Server base URL")
    description: str | None = Field(default=None, description="Human-readable server label")

    def to_openapi(self) -> dict[str, Any]:
        spec: dict[str, Any] = {"url": self.url}
        if self.description:
            spec["description"] = self.description
        return spec


class DocumentConfig(BaseModel):
    """API info, servers and path filtering for OpenAPI generation."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(default="API Documentation", description="info.title")
    version: str = Field(default="1.0.0", description="info.version")
    description: str = Field(
        default="Auto-generated API documentation", description="info.description"
    )
    openapi_version: str = Field(default="3.0.3", description="OpenAPI document version")
    servers: list[ServerConfig] = Field(
        default_factory=lambda: [ServerConfig(description="Development server")],
        description="Servers listed in the document",
    )
    path_prefix: str | None = Field(
        default=None, description="Only document endpoints whose path starts with this prefix"
    )

    def info(self) -> dict[str, Any]:
        return {"title": self.title, "version": self.version, "description": self.description}


def load_config(path: str | Path | None) -> DocumentConfig:
    """
    Load document settings from a YAML file.

    A missing path or file yields the defaults. An unreadable or invalid
    file raises ConfigError.
    """
    if path is None:
        return DocumentConfig()

    config_path = Path(path)
    if not config_path.exists():
        logger.info(f"No config at {config_path}, using defaults")
        return DocumentConfig()

    try:
        with config_path.open("r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot read config {config_path}: {exc}") from exc

    if not isinstance(config_data, dict):
        raise ConfigError(f"config {config_path} must contain a mapping at the top level")

    try:
        config = DocumentConfig(**config_data)
    except ValidationError as exc:
        raise ConfigError(f"invalid config {config_path}: {exc}") from exc

    logger.info(f"Loaded config from {config_path}")
    return config
