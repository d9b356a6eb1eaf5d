import logging

import pytest

from endpoint_dsl.core.registry import EndpointRegistry, default_registry


@pytest.fixture
def registry():
    return EndpointRegistry()


@pytest.fixture(autouse=True)
def _isolate_process_state():
    default_registry.reset()
    yield
    default_registry.reset()
    # The CLI attaches its own handler; give later tests a clean package logger.
    package_logger = logging.getLogger("endpoint_dsl")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
