"""Process-wide collection of built endpoints."""

import threading
from collections.abc import Iterator

from endpoint_dsl.core.endpoint import Endpoint


class EndpointRegistry:
    """Thread-safe, insertion-ordered endpoint store.

    Registering the same Endpoint object twice keeps a single entry.
    Distinct endpoints with equal method and path are all kept.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._endpoints: list[Endpoint] = []

    def register(self, endpoint: Endpoint) -> Endpoint:
        with self._lock:
            if not any(existing is endpoint for existing in self._endpoints):
                self._endpoints.append(endpoint)
        return endpoint

    def all(self) -> tuple[Endpoint, ...]:
        """Snapshot of the registered endpoints in registration order."""
        with self._lock:
            return tuple(self._endpoints)

    def find_by(self, method: str, path: str) -> list[Endpoint]:
        method = method.upper()
        return [e for e in self.all() if e.method == method and e.path == path]

    def reset(self) -> None:
        with self._lock:
            self._endpoints = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._endpoints)

    def __iter__(self) -> Iterator[Endpoint]:
        return iter(self.all())


default_registry = EndpointRegistry()


def all_endpoints() -> tuple[Endpoint, ...]:
    return default_registry.all()
