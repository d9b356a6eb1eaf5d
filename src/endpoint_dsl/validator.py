"""Lint checks for built endpoints: documentation gaps and path hygiene."""

import re
from collections.abc import Iterable

from endpoint_dsl.core.endpoint import Endpoint

_INVALID_PATH_CHARS = re.compile(r"[^A-Za-z0-9/_:{}.\-]")
_PARAM_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
_RAW_PLACEHOLDER = re.compile(r":(\w+)|\{([^}]*)\}")


def endpoint_label(endpoint: Endpoint) -> str:
    return f"{endpoint.method} {endpoint.path}"


def check_documentation(endpoint: Endpoint) -> list[str]:
    """Flag endpoints that would render an unhelpful OpenAPI operation."""
    problems = []
    if not (endpoint.metadata.summary or "").strip():
        problems.append("missing summary")
    if not endpoint.outputs:
        problems.append("missing output definition")
    return problems


def check_path(path: str) -> list[str]:
    """Check path syntax: leading slash, characters and parameter names."""
    if not path:
        return ["path must be a non-empty string"]

    problems = []
    if not path.startswith("/"):
        problems.append("path must start with '/'")
    if _INVALID_PATH_CHARS.search(path):
        problems.append("path contains invalid characters")
    for colon, brace in _RAW_PLACEHOLDER.findall(path):
        name = colon or brace
        if not _PARAM_NAME.match(name):
            problems.append(f"invalid path parameter name '{name}'")
    return problems


def check_structure(endpoint: Endpoint) -> list[str]:
    """Structural problems, for endpoints constructed without ``build()``."""
    return endpoint.structure_problems()


def validate_endpoints(endpoints: Iterable[Endpoint]) -> dict[str, list[str]]:
    """Run all checks on *endpoints*.

    Returns dict of {"METHOD path": [problem, ...]} for endpoints with
    problems; an empty dict means everything passed.
    """
    endpoints = list(endpoints)
    if not endpoints:
        return {"_endpoints": ["no endpoints defined"]}

    errors: dict[str, list[str]] = {}
    for endpoint in endpoints:
        problems = []
        problems.extend(check_documentation(endpoint))
        problems.extend(check_path(endpoint.path))
        for problem in check_structure(endpoint):
            if problem not in problems:
                problems.append(problem)
        if problems:
            errors.setdefault(endpoint_label(endpoint), []).extend(problems)
    return errors
