"""Shared fixtures for unit tests."""

import logging
from pathlib import Path

import pytest

from rawhttp.bootstrap.config import ServerConfig
from rawhttp.lifecycle.state import CancellationToken, ServerLifecycle


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Ensure logs propagate to root so caplog can catch them."""
    logger = logging.getLogger("rawhttp")
    old_propagate = logger.propagate
    logger.propagate = True
    yield
    logger.propagate = old_propagate


@pytest.fixture(name="config")
def fixture_config(tmp_path: Path) -> ServerConfig:
    """Server configuration serving a temporary directory."""
    return ServerConfig(directory=tmp_path, host="127.0.0.1", poll_interval=0.05)


@pytest.fixture(name="token")
def fixture_token() -> CancellationToken:
    return CancellationToken()


@pytest.fixture(name="lifecycle")
def fixture_lifecycle() -> ServerLifecycle:
    return ServerLifecycle()
