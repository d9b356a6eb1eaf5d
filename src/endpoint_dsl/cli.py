"""CLI entry point for endpoint-dsl."""

import importlib
import importlib.util
import logging
from pathlib import Path

import click

from endpoint_dsl.config import load_config
from endpoint_dsl.core.endpoint import Endpoint
from endpoint_dsl.core.registry import EndpointRegistry, default_registry
from endpoint_dsl.errors import EndpointDslError
from endpoint_dsl.logging_config import configure_logging
from endpoint_dsl.openapi.generator import OpenApiGenerator
from endpoint_dsl.validator import validate_endpoints

logger = logging.getLogger(__name__)


def _import_source(source: str):
    """Import a ``.py`` file or a dotted module path."""
    if source.endswith(".py"):
        path = Path(source)
        if not path.is_file():
            raise click.ClickException(f"Source file not found: {source}")
        spec = importlib.util.spec_from_file_location(f"endpoint_dsl_source_{path.stem}", path)
        if spec is None or spec.loader is None:
            raise click.ClickException(f"Cannot load {source}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module
    try:
        return importlib.import_module(source)
    except ImportError as exc:
        raise click.ClickException(f"Cannot import {source}: {exc}") from exc


def _load_source(source: str) -> list[Endpoint]:
    """Import *source* and collect the endpoints its import built.

    A module-level ``registry`` attribute holding an EndpointRegistry takes
    precedence over the default registry.
    """
    try:
        module = _import_source(source)
    except EndpointDslError as exc:
        raise click.ClickException(f"Invalid endpoint definition in {source}: {exc}") from exc

    registry = getattr(module, "registry", None)
    if not isinstance(registry, EndpointRegistry):
        registry = default_registry
    endpoints = list(registry.all())
    logger.info(f"Loaded {len(endpoints)} endpoints from {source}", extra={"source": source})
    return endpoints


def _output_format(fmt: str, output: Path | None) -> str:
    if fmt != "auto":
        return fmt
    if output is not None and output.suffix.lower() in (".yaml", ".yml"):
        return "yaml"
    return "json"


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log progress to stderr.")
def main(verbose: bool):
    """endpoint-dsl: export and lint endpoint definitions."""
    configure_logging(verbose)


@main.command()
@click.argument("source")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write the document to this file instead of stdout.")
@click.option("--format", "fmt", default="auto", type=click.Choice(["auto", "json", "yaml"]), help="Document format.")
@click.option("--config", "config_path", default=None, type=click.Path(path_type=Path), help="YAML file with API info and servers.")
@click.option("--prefix", default=None, help="Only document paths starting with this prefix.")
def export(source: str, output: Path | None, fmt: str, config_path: Path | None, prefix: str | None):
    """Generate an OpenAPI document from the endpoints defined in SOURCE."""
    try:
        config = load_config(config_path)
    except EndpointDslError as exc:
        raise click.ClickException(str(exc)) from exc

    endpoints = _load_source(source)
    generator = OpenApiGenerator(endpoints, config=config, path_prefix=prefix)
    fmt = _output_format(fmt, output)
    document = generator.to_yaml() if fmt == "yaml" else generator.to_json()

    if output is None:
        click.echo(document)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(document, encoding="utf-8")
    click.echo(f"OpenAPI document ({len(endpoints)} endpoints) saved to {output}", err=True)


@main.command()
@click.argument("source")
@click.pass_context
def validate(ctx: click.Context, source: str):
    """Lint the endpoints defined in SOURCE."""
    endpoints = _load_source(source)
    errors = validate_endpoints(endpoints)
    if not errors:
        click.echo(f"All {len(endpoints)} endpoints are valid.")
        return

    for label, problems in errors.items():
        for problem in problems:
            click.echo(f"{label}: {problem}")
    click.echo(f"Found problems in {len(errors)} of {len(endpoints)} endpoints.")
    ctx.exit(1)


@main.command("list")
@click.argument("source")
def list_endpoints(source: str):
    """List the endpoints defined in SOURCE."""
    endpoints = _load_source(source)
    for endpoint in endpoints:
        summary = endpoint.metadata.summary or ""
        click.echo(f"{endpoint.method:<7} {endpoint.path}  {summary}".rstrip())
    click.echo(f"{len(endpoints)} endpoints.")
