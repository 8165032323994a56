"""Fixtures and configuration for pytest."""

import pytest
from loguru import logger


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "cli: mark test as a command-line test")


@pytest.fixture
def caplog(caplog: pytest.LogCaptureFixture):
    """Route loguru records into pytest's log capture."""
    handler_id = logger.add(caplog.handler, format="{message}", level="DEBUG")
    yield caplog
    logger.remove(handler_id)
